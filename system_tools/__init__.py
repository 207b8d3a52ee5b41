#!/usr/bin/env python3
"""
System Tools Package
===================

Reusable system utilities for Python projects.

Available subpackages:
- versioning: Semantic version ledger and version reference synchronization
"""

# Import main classes for convenience
from .versioning import VersionLedger, create_version_ledger, get_version_string, bump_version

__all__ = [
    'VersionLedger',
    'create_version_ledger',
    'get_version_string',
    'bump_version'
]

__version__ = "1.0.0"
