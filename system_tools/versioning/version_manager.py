#!/usr/bin/env python3
"""
Version Ledger
==============

Keeps an append-only JSON history of the project's version next to the
canonical manifest and refuses any version that would move backwards.

Log file format:
    {"history": [{"version": "1.0.0", "timestamp": "...", "notes": "..."}]}

Every read path loads, normalizes and validates the whole log, so a log that
was edited by hand is checked on the next access, not only on write.
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import yaml

from .exceptions import (
    DuplicateVersion,
    HistoryOrderError,
    InvalidLogStructure,
    InvalidManifest,
    NoReferencesUpdated,
    VersionRegression,
)
from .reference_sync import ReferenceSynchronizer, UpdateStrategy
from .semantic_version import ZERO_VERSION, BumpLevel, SemanticVersion, compare_versions
from .storage import FileSystemStorage, Storage

logger = logging.getLogger(__name__)

INITIAL_VERSION_NOTES = "initial recorded version"
EXTERNAL_CHANGE_NOTES = "detected external version change"


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with millisecond precision and a Z suffix."""
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


@dataclass
class VersionEntry:
    version: SemanticVersion
    timestamp: str
    notes: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Any, position: int) -> 'VersionEntry':
        """Build an entry from its JSON form, normalizing the version text."""
        if not isinstance(raw, dict):
            raise InvalidLogStructure(
                f"Invalid version log entry at position {position}: expected an object.")
        if not isinstance(raw.get('version'), str):
            raise InvalidLogStructure(
                f'Invalid version log entry at position {position}: "version" must be a string.')
        if not isinstance(raw.get('timestamp'), str):
            raise InvalidLogStructure(
                f'Invalid version log entry at position {position}: "timestamp" must be a string.')
        notes = raw.get('notes')
        if notes is not None and not isinstance(notes, str):
            raise InvalidLogStructure(
                f'Invalid version log entry at position {position}: "notes" must be a string.')
        return cls(SemanticVersion.parse(raw['version']), raw['timestamp'], notes)

    def to_dict(self) -> Dict[str, str]:
        data = {'version': str(self.version), 'timestamp': self.timestamp}
        if self.notes is not None:
            data['notes'] = self.notes
        return data


class VersionLedger:
    """
    Owns the version log for one project.

    The ledger is an explicit handle (paths plus the last loaded history);
    several independent ledgers can exist in one process. It is not safe to
    use two ledgers on the same project at the same time.
    """

    def __init__(self, storage: Storage, manifest_path: Union[str, Path],
                 version_log_path: Union[str, Path], project_root: Union[str, Path],
                 synchronizer: ReferenceSynchronizer = None):
        self.storage = storage
        self.manifest_path = Path(manifest_path)
        self.version_log_path = Path(version_log_path)
        self.project_root = Path(project_root)
        self.synchronizer = synchronizer or ReferenceSynchronizer(self.project_root, storage)
        self.cached_history: List[VersionEntry] = []

    async def get_current_version(self) -> SemanticVersion:
        """Read and validate the version field of the canonical manifest."""
        content = await self.storage.read_file(self.manifest_path)
        try:
            if self.manifest_path.suffix.lower() in ('.yaml', '.yml'):
                data = yaml.safe_load(content)
            else:
                data = json.loads(content)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise InvalidManifest(f"Could not parse manifest {self.manifest_path}: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get('version'), str):
            raise InvalidManifest(f'Manifest {self.manifest_path} has no top-level "version" string.')
        return SemanticVersion.parse(data['version'])

    async def ensure_current_version_valid(self) -> Optional[VersionEntry]:
        """
        Reconcile the manifest version with the latest logged version.

        - no history: record the current version as the first entry
        - current < latest: raise VersionRegression
        - current > latest: record the externally changed version
        - current == latest: nothing to do

        Returns:
            The appended entry, or None when nothing was written
        """
        current = await self.get_current_version()
        history = await self._load_history()
        latest = self._latest(history)

        if latest is None:
            return await self._append(history, current, INITIAL_VERSION_NOTES)

        if current < latest:
            raise VersionRegression(
                f"Version regression detected. Current version ({current}) is less than "
                f"last known version ({latest}).")

        if current > latest:
            return await self._append(history, current, EXTERNAL_CHANGE_NOTES)

        return None

    async def add_current_version(self, notes: Optional[str] = None) -> VersionEntry:
        """Record the manifest version as a new history entry."""
        current = await self.get_current_version()
        history = await self._load_history()
        latest = self._latest(history)

        if latest is not None and current < latest:
            raise VersionRegression(
                f"Version regression detected. Current version ({current}) is not greater "
                f"or equal to the last known version ({latest}).")
        if latest == current:
            raise DuplicateVersion(f"Version {current} already logged. No change detected.")

        return await self._append(history, current, notes)

    async def list_history(self) -> List[VersionEntry]:
        return list(await self._load_history())

    async def validate_history(self) -> None:
        await self._load_history()

    async def recommend_next_version(self, level: Union[BumpLevel, str]) -> SemanticVersion:
        """Latest logged version (or 0.0.0) bumped by ``level``. Writes nothing."""
        level = BumpLevel.parse(level)
        latest = self._latest(await self._load_history()) or ZERO_VERSION
        return latest.bump(level)

    def compare_versions(self, a: Union[SemanticVersion, str], b: Union[SemanticVersion, str]) -> int:
        return compare_versions(a, b)

    async def increment_version(self, level: Union[BumpLevel, str],
                                notes: Optional[str] = None) -> SemanticVersion:
        """
        Bump the project version by ``level``.

        Rewrites every out-of-date reference file, then records the new
        manifest version in the log. Files rewritten before a later failure
        are left as they are.

        Raises:
            NoReferencesUpdated: if no reference file was behind the new version
        """
        new_version = await self.recommend_next_version(level)
        updates = await self.synchronizer.detect_and_update_version(new_version)
        if not updates:
            raise NoReferencesUpdated(
                "No version references updated. Ensure project files contain a valid "
                "version to update.")

        entry = await self.add_current_version(notes)
        return entry.version

    # ---- Internal helpers ----

    async def _load_history(self) -> List[VersionEntry]:
        if not await self.storage.file_exists(self.version_log_path):
            self.cached_history = []
            return []

        content = await self.storage.read_file(self.version_log_path)
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise InvalidLogStructure(f"Invalid JSON in version log at {self.version_log_path}") from e

        if not isinstance(data, dict) or not isinstance(data.get('history'), list):
            raise InvalidLogStructure('Invalid version log structure: "history" must be an array.')

        history = [VersionEntry.from_dict(raw, i) for i, raw in enumerate(data['history'])]
        self._validate_order(history)
        self.cached_history = history
        return history

    @staticmethod
    def _validate_order(history: List[VersionEntry]) -> None:
        for i in range(1, len(history)):
            previous = history[i - 1].version
            version = history[i].version
            if version < previous:
                raise HistoryOrderError(
                    f"Historical regression detected at position {i} in the history. "
                    f"Version {version} is not >= {previous}.",
                    position=i
                )

    @staticmethod
    def _latest(history: List[VersionEntry]) -> Optional[SemanticVersion]:
        return history[-1].version if history else None

    async def _append(self, history: List[VersionEntry], version: SemanticVersion,
                      notes: Optional[str]) -> VersionEntry:
        entry = VersionEntry(version=version, timestamp=utc_timestamp(), notes=notes)
        updated = history + [entry]
        payload = {'history': [item.to_dict() for item in updated]}
        await self.storage.write_file(
            self.version_log_path, json.dumps(payload, indent=2, ensure_ascii=False) + '\n')
        self.cached_history = updated
        logger.info(f"Recorded version {version} in {self.version_log_path}")
        return entry


def create_version_ledger(project_root: Union[str, Path] = '.',
                          manifest: str = 'package.json',
                          log_file: str = '.version-log.json',
                          reference_files: Mapping[str, Union[UpdateStrategy, str]] = None,
                          storage: Storage = None) -> VersionLedger:
    """
    Factory function to create a VersionLedger for a project directory.

    Args:
        project_root: Directory containing the manifest and reference files
        manifest: Canonical manifest, relative to project_root
        log_file: Version log, relative to project_root
        reference_files: Mapping of relative file name to update strategy
        storage: Storage backend (defaults to the local file system)
    """
    root = Path(project_root)
    storage = storage or FileSystemStorage()
    synchronizer = ReferenceSynchronizer(root, storage, reference_files)
    return VersionLedger(storage, root / manifest, root / log_file, root, synchronizer)


def get_version_string(project_root: Union[str, Path] = '.', **kwargs) -> str:
    """Return the project's manifest version, e.g. "1.4.2"."""
    ledger = create_version_ledger(project_root, **kwargs)
    return str(asyncio.run(ledger.get_current_version()))


def bump_version(level: Union[BumpLevel, str], notes: Optional[str] = None,
                 project_root: Union[str, Path] = '.', **kwargs) -> str:
    """Bump the project version and return the new version string."""
    ledger = create_version_ledger(project_root, **kwargs)
    return str(asyncio.run(ledger.increment_version(level, notes)))
