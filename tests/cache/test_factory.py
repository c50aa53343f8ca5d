"""Test suite for the cache backend registry and factories."""

import pytest

from tiercache.cache import (
    FileCache,
    MemoryCache,
    TierConfig,
    TieredCache,
    create_default_cache,
    create_tiered_cache,
    get_cache_backend,
    is_supported_backend,
    list_cache_backends,
    register_cache_backend,
    unregister_cache_backend,
)
from tiercache.exceptions import ConfigurationError


class CustomCache(MemoryCache):
    """Memory cache registered under its own name."""

    backend_name = "custom"


@pytest.fixture
def custom_backend():
    register_cache_backend("custom", CustomCache)
    yield CustomCache
    unregister_cache_backend("custom")


class TestBackendRegistry:
    """Test backend registration."""

    def test_builtin_backends_registered(self):
        backends = list_cache_backends()
        assert backends["memory"] is MemoryCache
        assert backends["file"] is FileCache
        assert backends["tiered"] is TieredCache

    def test_register_custom_backend(self, custom_backend):
        assert "custom" in list_cache_backends()
        assert isinstance(get_cache_backend("custom"), CustomCache)

    def test_register_duplicate_name(self, custom_backend):
        with pytest.raises(ConfigurationError):
            register_cache_backend("custom", CustomCache)

    def test_register_non_backend_class(self):
        with pytest.raises(ConfigurationError):
            register_cache_backend("bogus", dict)

    def test_unregister_nonexistent(self):
        unregister_cache_backend("nonexistent")
        assert "nonexistent" not in list_cache_backends()

    def test_is_supported_backend(self, custom_backend):
        assert is_supported_backend(MemoryCache())
        assert is_supported_backend(CustomCache())

    def test_unregistered_kind_not_supported(self):
        assert not is_supported_backend(CustomCache())

    def test_handle_rejected_after_unregister(self, custom_backend):
        handle = CustomCache()
        TieredCache(handle)
        unregister_cache_backend("custom")
        with pytest.raises(ConfigurationError):
            TieredCache(handle)
        register_cache_backend("custom", CustomCache)


class TestGetCacheBackend:
    """Test backend construction from configuration."""

    def test_default_is_memory(self, monkeypatch):
        monkeypatch.delenv("TIERCACHE_CACHE_BACKEND", raising=False)
        assert isinstance(get_cache_backend(), MemoryCache)

    def test_backend_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("TIERCACHE_CACHE_BACKEND", "file")
        monkeypatch.setenv("TIERCACHE_FILE_ROOT", str(tmp_path))
        assert isinstance(get_cache_backend(), FileCache)

    def test_cache_size(self):
        cache = get_cache_backend("memory", cache_size=5)
        assert cache.max_size == 5

    def test_cache_size_ignored_by_other_backends(self, tmp_path):
        cache = get_cache_backend("file", cache_size=10, root_dir=str(tmp_path))
        assert isinstance(cache, FileCache)

    def test_cache_size_with_file_backend_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("TIERCACHE_CACHE_BACKEND", "file")
        monkeypatch.setenv("TIERCACHE_FILE_ROOT", str(tmp_path))
        assert isinstance(get_cache_backend(cache_size=10), FileCache)

    def test_unknown_backend(self):
        with pytest.raises(ConfigurationError, match="Unknown cache backend"):
            get_cache_backend("nonexistent")

    def test_configurator_failure_is_wrapped(self):
        with pytest.raises(ConfigurationError) as exc_info:
            get_cache_backend("memory", max_size=-1)
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_nested_tiered_requires_tiers(self):
        with pytest.raises(ConfigurationError):
            get_cache_backend("tiered")


class TestTierConfig:
    """Test descriptor normalization."""

    def test_from_string(self):
        assert TierConfig.from_descriptor("memory") == TierConfig(backend="memory")

    def test_top_level_keys_become_options(self):
        config = TierConfig.from_descriptor({"backend": "memory", "max_size": 3})
        assert config.options == {"max_size": 3}

    def test_options_key_merged(self):
        config = TierConfig.from_descriptor(
            {"backend": "file", "options": {"root_dir": "/tmp/a"}, "ttl": 5}
        )
        assert config.options == {"root_dir": "/tmp/a", "ttl": 5}

    def test_empty_backend_rejected(self):
        with pytest.raises(ConfigurationError):
            TieredCache(TierConfig.model_construct(backend="", options={}))


class TestTieredFactories:
    """Test tiered cache factory helpers."""

    def test_create_tiered_cache(self):
        handle = MemoryCache()
        cache = create_tiered_cache([handle, "memory"])
        assert cache.tiers[0] is handle
        assert len(cache) == 2

    def test_create_tiered_cache_empty(self):
        with pytest.raises(ConfigurationError):
            create_tiered_cache([])

    def test_create_default_cache(self, monkeypatch):
        monkeypatch.delenv("TIERCACHE_TIERS", raising=False)
        cache = create_default_cache()
        assert [tier.backend_name for tier in cache.tiers] == ["memory"]

    def test_create_default_cache_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("TIERCACHE_TIERS", "memory, file")
        monkeypatch.setenv("TIERCACHE_FILE_ROOT", str(tmp_path))
        cache = create_default_cache()
        assert [tier.backend_name for tier in cache.tiers] == ["memory", "file"]
