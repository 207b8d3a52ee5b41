#!/usr/bin/env python3
"""
Reference Synchronizer
======================

Finds the known files that embed a copy of the project version and rewrites
them to a new version. Each file is bound to one update strategy:

- json_manifest: structured JSON document with a top-level ``version`` field
- yaml_manifest: structured YAML document with a top-level ``version`` field
- free_text: first ``version: X.Y.Z`` / ``version=X.Y.Z`` / ``vX.Y.Z`` match

Files are processed concurrently. A failure in one file does not stop the
others; updates already written are reported and never rolled back.
"""

import asyncio
import json
import logging
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Mapping, NamedTuple, Optional, Union

import yaml

from .exceptions import InvalidManifest, ReferenceUpdateError
from .semantic_version import SemanticVersion
from .storage import FileSystemStorage, Storage

logger = logging.getLogger(__name__)

FREE_TEXT_VERSION_PATTERN = re.compile(r'(?:version\s*[:=]\s*|v)(\d+\.\d+\.\d+)', re.IGNORECASE)


class UpdateStrategy(Enum):
    JSON_MANIFEST = "json_manifest"
    YAML_MANIFEST = "yaml_manifest"
    FREE_TEXT = "free_text"


@dataclass(frozen=True)
class FileUpdate:
    """One file whose embedded version text was rewritten"""
    file_path: Path
    old_version_text: str
    new_version: SemanticVersion


def _manifest_version(data) -> Optional[str]:
    if isinstance(data, dict) and isinstance(data.get('version'), str):
        return data['version']
    return None


def _detect_json(content: str) -> Optional[str]:
    return _manifest_version(json.loads(content))


def _replace_json(content: str, new_version: str) -> str:
    data = json.loads(content)
    data['version'] = new_version
    updated = json.dumps(data, indent=2, ensure_ascii=False)
    if content.endswith('\n'):
        updated += '\n'
    return updated


def _detect_yaml(content: str) -> Optional[str]:
    return _manifest_version(yaml.safe_load(content))


def _replace_yaml(content: str, new_version: str) -> str:
    data = yaml.safe_load(content)
    data['version'] = new_version
    return yaml.safe_dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)


def _detect_free_text(content: str) -> Optional[str]:
    match = FREE_TEXT_VERSION_PATTERN.search(content)
    return match.group(1) if match else None


def _replace_free_text(content: str, new_version: str) -> str:
    match = FREE_TEXT_VERSION_PATTERN.search(content)
    if not match:
        return content
    # Only the captured version span changes; the marker text is kept.
    return content[:match.start(1)] + new_version + content[match.end(1):]


class StrategyFunctions(NamedTuple):
    detect: Callable[[str], Optional[str]]
    replace: Callable[[str, str], str]


STRATEGIES: Dict[UpdateStrategy, StrategyFunctions] = {
    UpdateStrategy.JSON_MANIFEST: StrategyFunctions(_detect_json, _replace_json),
    UpdateStrategy.YAML_MANIFEST: StrategyFunctions(_detect_yaml, _replace_yaml),
    UpdateStrategy.FREE_TEXT: StrategyFunctions(_detect_free_text, _replace_free_text),
}

DEFAULT_REFERENCE_FILES: Dict[str, UpdateStrategy] = {
    'package.json': UpdateStrategy.JSON_MANIFEST,
    'README.md': UpdateStrategy.FREE_TEXT,
}


class ReferenceSynchronizer:
    """Rewrites out-of-date version references under a project root."""

    def __init__(self, project_root: Union[str, Path], storage: Storage = None,
                 reference_files: Mapping[str, Union[UpdateStrategy, str]] = None):
        self.project_root = Path(project_root)
        self.storage = storage or FileSystemStorage()
        if reference_files is None:
            reference_files = DEFAULT_REFERENCE_FILES
        self.reference_files = {
            name: UpdateStrategy(strategy) for name, strategy in reference_files.items()
        }

    async def detect_and_update_version(self, new_version: Union[SemanticVersion, str]) -> List[FileUpdate]:
        """
        Rewrite every known file whose embedded version is older than ``new_version``.

        Args:
            new_version: Target version

        Returns:
            FileUpdate records for the files actually rewritten, in registry order

        Raises:
            InvalidSemanticVersion: if ``new_version`` is malformed (before any I/O)
            ReferenceUpdateError: if any file failed; applied updates are attached
        """
        target = SemanticVersion.parse(new_version)

        results = await asyncio.gather(
            *(self._update_file(name, strategy, target)
              for name, strategy in self.reference_files.items()),
            return_exceptions=True
        )

        updates = []
        errors = []
        for result in results:
            if isinstance(result, Exception):
                errors.append(result)
            elif isinstance(result, BaseException):
                raise result
            elif result is not None:
                updates.append(result)

        if errors:
            raise ReferenceUpdateError(
                f"{len(errors)} reference file(s) failed to update to {target}; "
                f"{len(updates)} update(s) were applied: {errors[0]}",
                updates=updates,
                errors=errors
            ) from errors[0]

        return updates

    async def _update_file(self, name: str, strategy: UpdateStrategy,
                           target: SemanticVersion) -> Optional[FileUpdate]:
        file_path = self.project_root / name
        if not await self.storage.file_exists(file_path):
            logger.warning(f"File not found: {file_path}. Skipping.")
            return None

        content = await self.storage.read_file(file_path)
        functions = STRATEGIES[strategy]

        try:
            old_version = functions.detect(content)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise InvalidManifest(f"Could not parse {file_path}: {e}") from e

        if old_version is None or not SemanticVersion.is_valid(old_version):
            logger.debug(f"No usable version found in {file_path}")
            return None

        if SemanticVersion.parse(old_version) >= target:
            logger.debug(f"{file_path} is already at {old_version}")
            return None

        await self.storage.write_file(file_path, functions.replace(content, str(target)))
        logger.info(f"Updated {name} from version {old_version} to {target}")
        return FileUpdate(file_path=file_path, old_version_text=old_version, new_version=target)
