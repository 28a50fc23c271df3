"""Core data models for depcheck."""

from dataclasses import dataclass, field
from enum import Enum
from functools import total_ordering
from typing import Dict, Iterable, List, Optional, Set, Tuple

from .version_parser import VersionParser


@total_ordering
@dataclass(frozen=True)
class Package:
    """A single resolved package: one name at one version."""

    name: str
    version: str

    @property
    def sort_key(self) -> tuple:
        return (self.name, VersionParser.sort_key(self.version))

    @property
    def full_name(self) -> str:
        """Return the package in 'name version' format, as lockfiles write it."""
        return f"{self.name} {self.version}"

    def __str__(self) -> str:
        return self.full_name

    def __lt__(self, other) -> bool:
        if not isinstance(other, Package):
            return NotImplemented
        return self.sort_key < other.sort_key


@dataclass(frozen=True)
class PackageRecord:
    """One package entry as decoded from a resolved manifest."""

    name: str
    version: str
    has_external_source: bool = True
    dependencies: Tuple[Tuple[str, str], ...] = ()

    @property
    def package(self) -> Package:
        return Package(self.name, self.version)


@dataclass(frozen=True)
class Manifest:
    """Decoded manifest: schema information plus the flat package records."""

    format: str  # cargo, json
    schema_version: Optional[int]
    records: Tuple[PackageRecord, ...]
    source: Optional[str] = None  # Path or URL the manifest was read from


@dataclass
class VersionNode:
    """Represents one package version in the dependency graph, with edges in both directions."""

    package: Package
    origin: bool = False  # True for workspace members (no external source)
    dependencies: Set[Package] = field(default_factory=set)
    dependents: Set[Package] = field(default_factory=set)

    @property
    def is_top_level(self) -> bool:
        """Workspace members and packages nothing depends on are entry points."""
        return self.origin or not self.dependents


class Classification(Enum):
    """Neutral blame classification, mapped to styling by the renderer."""

    NO_DUPLICATION = "none"
    INDIRECT_ONLY = "indirect"
    DIRECT_PRESENT = "direct"


@dataclass
class BlameEntry:
    """
    Duplicated names a package is responsible for.

    direct: names whose versions diverge across this package's own dependencies
    indirect: names whose full duplication already exists below one dependency
    sources: for each direct name, version -> the package's own dependencies
        that bring that version in
    """

    direct: Set[str] = field(default_factory=set)
    indirect: Set[str] = field(default_factory=set)
    sources: Dict[str, Dict[str, Set[Package]]] = field(default_factory=dict)

    def add_direct(self, name: str, sources: Optional[Dict[str, Iterable[Package]]] = None) -> None:
        self.direct.add(name)
        by_version = self.sources.setdefault(name, {})
        for version, deps in (sources or {}).items():
            by_version.setdefault(version, set()).update(deps)

    def add_indirect(self, name: str) -> None:
        self.indirect.add(name)

    @property
    def has_direct_blame(self) -> bool:
        return bool(self.direct)

    @property
    def has_indirect_blame(self) -> bool:
        return bool(self.indirect)

    @property
    def has_blame(self) -> bool:
        return self.has_direct_blame or self.has_indirect_blame

    @property
    def classification(self) -> Classification:
        if self.has_direct_blame:
            return Classification.DIRECT_PRESENT
        if self.has_indirect_blame:
            return Classification.INDIRECT_ONLY
        return Classification.NO_DUPLICATION

    def sorted_direct(self) -> List[str]:
        return sorted(self.direct)

    def sorted_indirect(self) -> List[str]:
        return sorted(self.indirect)

    def sorted_sources(self, name: str) -> List[Tuple[str, List[Package]]]:
        """(version, dependencies) pairs for a direct name, by version precedence."""
        by_version = self.sources.get(name, {})
        return [
            (version, sorted(by_version[version]))
            for version in sorted(by_version, key=VersionParser.sort_key)
        ]


@total_ordering
@dataclass(frozen=True)
class PathSummary:
    """
    Compressed upward path from a duplicated package to a top-level package.

    direct: the package that directly depends on the duplicate
    mid: the package immediately below the top-level package, only for paths of 3+ hops
    top: the top-level package reached
    """

    direct: Package
    mid: Optional[Package]
    top: Package

    @property
    def sort_key(self) -> tuple:
        mid_key = self.mid.sort_key if self.mid is not None else ()
        return (self.direct.sort_key, self.top.sort_key, mid_key)

    def __lt__(self, other) -> bool:
        if not isinstance(other, PathSummary):
            return NotImplemented
        return self.sort_key < other.sort_key

    def __str__(self) -> str:
        hops = [self.direct]
        if self.mid is not None:
            hops.append(self.mid)
        if self.top != self.direct:
            hops.append(self.top)
        return " <- ".join(str(pkg) for pkg in hops)
