#!/usr/bin/env python3
"""
Setup script for verledger
"""

from setuptools import setup, find_packages
import os

# Read requirements from requirements.txt
def read_requirements():
    with open('requirements.txt', 'r') as f:
        return [line.strip() for line in f if line.strip() and not line.startswith('#')]

# Read long description from README
def read_long_description():
    if os.path.exists('README.md'):
        with open('README.md', 'r', encoding='utf-8') as f:
            return f.read()
    return "A semantic version ledger that keeps version references in sync across project files"

setup(
    name="verledger",
    version="1.0.0",
    description="A semantic version ledger that keeps version references in sync across project files",
    long_description=read_long_description(),
    long_description_content_type="text/markdown",
    packages=find_packages(include=["system_tools", "system_tools.*"]),
    py_modules=["cli", "utils"],
    package_dir={"": "src", "system_tools": "system_tools"},
    install_requires=read_requirements(),
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
        ],
    },
    python_requires=">=3.9",
    entry_points={
        "console_scripts": [
            "verledger=cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Build Tools",
        "Topic :: Utilities",
    ],
    keywords="semver versioning release cli changelog",
)
