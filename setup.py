#!/usr/bin/env python3
"""
kv-config Setup Script
======================
Allows installation of the kv-config package.

Usage:
    pip install -e .           # Development install
    pip install -e .[test]     # Development install with test tools
    pip install .              # Regular install
"""

from setuptools import setup, find_packages

setup(
    name="kv-config",
    version="1.0.0",
    packages=find_packages(include=["kvconfig", "kvconfig.*"]),
    python_requires=">=3.10",
    install_requires=[
        "PyYAML>=6.0",
        "requests>=2.28",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
        ],
    },
    entry_points={
        "console_scripts": [
            "kv-config=kvconfig.cli:main",
        ],
    },
)
