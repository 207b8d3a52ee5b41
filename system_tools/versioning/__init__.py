#!/usr/bin/env python3
"""
Versioning System Tools
======================

Semantic version ledger with cross-file reference synchronization.

Features:
- Append-only JSON version history that never moves backwards
- Detection of manifest versions changed by hand
- Major/minor/patch bump recommendations
- Concurrent rewrite of version references (JSON, YAML, free text)

Usage:
    from system_tools.versioning import create_version_ledger

    ledger = create_version_ledger('.')
    await ledger.ensure_current_version_valid()
    new_version = await ledger.increment_version('minor', notes='Release')
"""

from .exceptions import (
    VersioningError,
    InvalidSemanticVersion,
    VersionRegression,
    InvalidLogStructure,
    HistoryOrderError,
    DuplicateVersion,
    NoReferencesUpdated,
    InvalidManifest,
    ReferenceUpdateError
)
from .semantic_version import SemanticVersion, BumpLevel, compare_versions
from .storage import Storage, FileSystemStorage
from .reference_sync import (
    ReferenceSynchronizer,
    UpdateStrategy,
    FileUpdate,
    DEFAULT_REFERENCE_FILES
)
from .version_manager import (
    VersionLedger,
    VersionEntry,
    create_version_ledger,
    get_version_string,
    bump_version
)

__all__ = [
    'VersioningError',
    'InvalidSemanticVersion',
    'VersionRegression',
    'InvalidLogStructure',
    'HistoryOrderError',
    'DuplicateVersion',
    'NoReferencesUpdated',
    'InvalidManifest',
    'ReferenceUpdateError',
    'SemanticVersion',
    'BumpLevel',
    'compare_versions',
    'Storage',
    'FileSystemStorage',
    'ReferenceSynchronizer',
    'UpdateStrategy',
    'FileUpdate',
    'DEFAULT_REFERENCE_FILES',
    'VersionLedger',
    'VersionEntry',
    'create_version_ledger',
    'get_version_string',
    'bump_version'
]
