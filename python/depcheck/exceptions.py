"""Errors raised while loading and analyzing a dependency graph."""

from typing import Collection, Optional, Sequence


class DepcheckError(Exception):
    """Base exception for depcheck errors."""


class ManifestError(DepcheckError):
    """The manifest could not be decoded into package records."""


class UnsupportedInputVersion(DepcheckError):
    """The manifest schema version is not one depcheck understands."""

    def __init__(self, format: str, version: Optional[int], supported: Collection[int]):
        self.format = format
        self.version = version
        self.supported = sorted(supported)
        found = "missing" if version is None else f"v{version}"
        allowed = ", ".join(f"v{v}" for v in self.supported)
        super().__init__(
            f"Unsupported {format} manifest version ({found}); supported: {allowed}"
        )


class CorruptedGraph(DepcheckError):
    """A dependency edge references a package that was never declared."""

    def __init__(self, name: str, version: str):
        self.name = name
        self.version = version
        super().__init__(
            f"Corrupted lock file: Version '{version}' of '{name}' not found"
        )


class CyclicGraph(DepcheckError):
    """The dependency graph contains a cycle."""

    def __init__(self, cycle: Sequence):
        self.cycle = list(cycle)
        path = " -> ".join(str(pkg) for pkg in self.cycle)
        super().__init__(f"Dependency cycle detected: {path}")
