#!/usr/bin/env python3
"""
Semantic Version Model
======================

Three-component numeric versions with a canonical text form and a total
order. Pre-release and build metadata are not supported.
"""

import re
from enum import Enum
from typing import NamedTuple, Union

from .exceptions import InvalidSemanticVersion

SEMVER_PATTERN = re.compile(r'([0-9]+)\.([0-9]+)\.([0-9]+)')


class BumpLevel(Enum):
    PATCH = "patch"
    MINOR = "minor"
    MAJOR = "major"

    @classmethod
    def parse(cls, level: Union['BumpLevel', str]) -> 'BumpLevel':
        if isinstance(level, cls):
            return level
        try:
            return cls(str(level).lower())
        except ValueError:
            choices = ', '.join(member.value for member in cls)
            raise ValueError(f"Invalid bump level: {level!r}. Expected one of: {choices}") from None


class SemanticVersion(NamedTuple):
    """A validated (major, minor, patch) triple.

    Tuple comparison gives the required ordering: major first, then minor,
    then patch.
    """
    major: int
    minor: int
    patch: int

    @classmethod
    def parse(cls, text: Union['SemanticVersion', str]) -> 'SemanticVersion':
        """Parse ``X.Y.Z`` text, normalizing leading zeros.

        Raises:
            InvalidSemanticVersion: if the text is not exactly three
                dot-separated non-negative integers
        """
        if isinstance(text, SemanticVersion):
            return text
        if not isinstance(text, str):
            raise InvalidSemanticVersion(
                f'Invalid semantic version: {text!r}. Must be x.y.z with numeric values.')
        match = SEMVER_PATTERN.fullmatch(text)
        if not match:
            raise InvalidSemanticVersion(
                f'Invalid semantic version: "{text}". Must be x.y.z with numeric values.')
        return cls(*(int(part) for part in match.groups()))

    @classmethod
    def is_valid(cls, text: str) -> bool:
        return isinstance(text, str) and SEMVER_PATTERN.fullmatch(text) is not None

    def bump(self, level: Union[BumpLevel, str]) -> 'SemanticVersion':
        level = BumpLevel.parse(level)
        if level is BumpLevel.MAJOR:
            return SemanticVersion(self.major + 1, 0, 0)
        if level is BumpLevel.MINOR:
            return SemanticVersion(self.major, self.minor + 1, 0)
        return SemanticVersion(self.major, self.minor, self.patch + 1)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


ZERO_VERSION = SemanticVersion(0, 0, 0)


def compare_versions(a: Union[SemanticVersion, str], b: Union[SemanticVersion, str]) -> int:
    """Return -1, 0 or 1 as ``a`` is lower than, equal to or higher than ``b``."""
    first = SemanticVersion.parse(a)
    second = SemanticVersion.parse(b)
    return (first > second) - (first < second)
