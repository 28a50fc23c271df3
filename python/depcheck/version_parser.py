"""Version parsing utilities for ordering lockfile versions."""

import re
from dataclasses import dataclass, field
from typing import Tuple


@dataclass(frozen=True)
class VersionInfo:
    """
    Parsed version information.

    Attributes:
        release: Numeric release components (e.g. (1, 2, 3))
        pre_release: Dot-separated pre-release identifiers (e.g. ('alpha', '1'))
        original_string: The original version string as-is
        is_semver: Whether the string matched the semantic versioning grammar
    """
    release: Tuple[int, ...]
    pre_release: Tuple[str, ...] = field(default_factory=tuple)
    original_string: str = ""
    is_semver: bool = True

    @property
    def is_pre_release(self) -> bool:
        return bool(self.pre_release)


class VersionParser:
    """Parser for semantic versions as written by Cargo and most registries."""

    # <major>.<minor>.<patch>[-<pre>][+<build>], minor and patch optional
    SEMVER_PATTERN = re.compile(
        r'^v?(0|[1-9][0-9]*)'                      # Major
        r'(?:\.(0|[1-9][0-9]*))?'                  # Minor
        r'(?:\.(0|[1-9][0-9]*))?'                  # Patch
        r'(?:-([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?'  # Pre-release identifiers
        r'(?:\+([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$'  # Build metadata, ignored
    )

    @classmethod
    def parse(cls, version: str) -> VersionInfo:
        """
        Parse a version string.

        Strings that are not semantic versions are still accepted; they are
        split on '.' and '-' and compared component by component.

        Args:
            version: The version string to parse

        Returns:
            VersionInfo describing the version
        """
        match = cls.SEMVER_PATTERN.match(version)
        if match:
            major, minor, patch, pre, _build = match.groups()
            release = tuple(int(part) for part in (major, minor, patch) if part is not None)
            return VersionInfo(
                release=release,
                pre_release=tuple(pre.split('.')) if pre else (),
                original_string=version,
            )

        return VersionInfo(
            release=(),
            pre_release=tuple(part for part in re.split(r'[.\-]', version) if part),
            original_string=version,
            is_semver=False,
        )

    @classmethod
    def sort_key(cls, version: str) -> tuple:
        """
        Build a key that orders versions by semantic version precedence.

        Releases sort after their pre-releases, numeric identifiers compare
        numerically and sort before alphanumeric ones. The raw string is the
        final component so two different strings never compare equal.
        """
        info = cls.parse(version)
        # Pad so 1.2 and 1.2.0 share precedence
        release = info.release + (0,) * (3 - len(info.release))
        identifiers = tuple(cls._identifier_key(part) for part in info.pre_release)
        return (
            info.is_semver,
            release,
            not info.is_pre_release,
            identifiers,
            version,
        )

    @staticmethod
    def _identifier_key(identifier: str) -> Tuple[int, int, str]:
        if identifier.isdigit():
            return (0, int(identifier), '')
        return (1, 0, identifier)

