#!/usr/bin/env python3
"""
KV-Cache Client Setup Script
============================
Allows installation of the kv-cache-client package.

Usage:
    pip install -e .           # Development install
    pip install -e .[test]     # Development install with test tools
    pip install .              # Regular install
"""

from setuptools import setup, find_packages

setup(
    name="kv-cache-client",
    version="1.0.0",
    packages=find_packages(include=["kvclient", "kvclient.*"]),
    python_requires=">=3.10",
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
        ],
    },
    entry_points={
        "console_scripts": [
            "kv-client=kvclient.cli:main",
        ],
    },
)
