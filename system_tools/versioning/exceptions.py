#!/usr/bin/env python3
"""
Versioning Exception Classes
"""

from typing import List, Optional


class VersioningError(Exception):
    """Base exception for version ledger errors"""
    pass

class InvalidSemanticVersion(VersioningError, ValueError):
    """Raised when a version string is not numeric X.Y.Z"""
    pass

class VersionRegression(VersioningError):
    """Raised when a candidate version is lower than the latest known version"""
    pass

class InvalidLogStructure(VersioningError):
    """Raised when the version log cannot be read as {"history": [...]}"""
    pass

class HistoryOrderError(InvalidLogStructure, VersionRegression):
    """Raised when a logged entry is lower than the entry before it"""

    def __init__(self, message: str, position: Optional[int] = None):
        super().__init__(message)
        self.position = position

class DuplicateVersion(VersioningError):
    """Raised when the current version is already the latest logged version"""
    pass

class NoReferencesUpdated(VersioningError):
    """Raised when a bump found no out-of-date version references"""
    pass

class InvalidManifest(VersioningError):
    """Raised when the canonical manifest has no usable version field"""
    pass

class ReferenceUpdateError(VersioningError):
    """Raised when one or more reference files failed to update.

    Updates applied before the failure are kept on disk and listed in
    ``updates``.
    """

    def __init__(self, message: str, updates: List = None, errors: List[BaseException] = None):
        super().__init__(message)
        self.updates = updates or []
        self.errors = errors or []
