"""Setup script for the tiercache package."""

from setuptools import find_packages, setup

with open("README.md", "r") as f:
    long_description = f.read()

setup(
    name="tiercache",
    version="0.1.0",
    description="An asynchronous multi-tier cache coordinator with read-through promotion and write-through fan-out.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["tiercache", "tiercache.*"]),
    include_package_data=True,
    install_requires=[
        "pydantic>=2.0",  # Tier configuration descriptors
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21.0",
            "pre-commit>=3.0.0",
            "black",  # Code formatter
            "isort",  # Import sorting
            "flake8",  # Linting
            "mypy",  # Type checking
            "pytest-cov",  # Coverage reporting
        ],
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov",  # Coverage reporting
        ],
        "redis": [
            "redis[hiredis]>=5.0.1",  # Redis client with C parser for performance
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.9",
)
