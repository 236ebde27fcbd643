#!/usr/bin/env python3
"""Packaging for the dynamic configuration providers"""
from pathlib import Path
from setuptools import setup, find_packages

readme = Path(__file__).parent / "README.md"

setup(
    name="dynamic-config-providers",
    version="0.1.0",
    description="Background-refreshed configuration providers for secret overrides and feature flags",
    long_description=readme.read_text() if readme.exists() else "",
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.8",
    install_requires=[
        "PyYAML>=6.0",
        "schedule>=1.2",
        "boto3>=1.26",
        "launchdarkly-server-sdk>=9.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "dynamic-config=dynamic_config.cli:main",
        ],
    },
)
