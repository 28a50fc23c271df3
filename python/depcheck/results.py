"""Aggregated analysis results and the end-to-end analysis pipeline."""

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from .blame import BlameAttributor
from .graph_builder import PackageGraph
from .models import BlameEntry, Classification, Manifest, Package, PackageRecord, PathSummary
from .multi_version import MultiVersionIndex
from .parents import ParentClosureIndex

logger = logging.getLogger(__name__)


class BlamePartition:
    """Sorted, read-only mapping of package -> blame entry with aggregate counts."""

    def __init__(self, entries: Dict[Package, BlameEntry]):
        self._entries: Dict[Package, BlameEntry] = dict(sorted(entries.items()))

    def items(self) -> List[Tuple[Package, BlameEntry]]:
        return list(self._entries.items())

    def get(self, pkg: Package) -> Optional[BlameEntry]:
        return self._entries.get(pkg)

    def has_blame(self) -> bool:
        return any(entry.has_blame for entry in self._entries.values())

    def has_direct_blame(self) -> bool:
        return any(entry.has_direct_blame for entry in self._entries.values())

    def direct_count(self) -> int:
        """Packages with direct blame only."""
        return sum(
            1 for e in self._entries.values() if e.has_direct_blame and not e.has_indirect_blame
        )

    def indirect_count(self) -> int:
        """Packages with indirect blame only."""
        return sum(
            1 for e in self._entries.values() if e.has_indirect_blame and not e.has_direct_blame
        )

    def both_count(self) -> int:
        return sum(
            1 for e in self._entries.values() if e.has_direct_blame and e.has_indirect_blame
        )

    def none_count(self) -> int:
        return sum(1 for e in self._entries.values() if not e.has_blame)

    def count(self) -> int:
        """Packages with any blame."""
        return sum(1 for e in self._entries.values() if e.has_blame)

    def total(self) -> int:
        return len(self._entries)

    def __contains__(self, pkg) -> bool:
        return pkg in self._entries

    def __iter__(self):
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


class Results:
    """
    Outcome of one analysis run.

    top_level: blame for workspace members and packages nothing depends on
    interior: blame for every other package
    A package appears in at most one partition.
    """

    def __init__(
        self,
        multi_version: MultiVersionIndex,
        top_level: BlamePartition,
        interior: BlamePartition,
        paths: Dict[Package, List[PathSummary]],
        dependents: Dict[Package, List[Package]],
    ):
        self.multi_version = multi_version
        self.top_level = top_level
        self.interior = interior
        self._paths = paths
        self._dependents = dependents

    @classmethod
    def build(
        cls,
        graph: PackageGraph,
        index: MultiVersionIndex,
        parents: ParentClosureIndex,
        roots: Optional[Iterable[Package]] = None,
    ) -> 'Results':
        attributor = BlameAttributor(graph, parents)
        attributor.attribute(index, roots)

        occurrences = index.packages()
        paths = {pkg: attributor.path_summaries(pkg) for pkg in occurrences}
        dependents = {pkg: sorted(graph.get_node(pkg).dependents) for pkg in occurrences}

        return cls(
            multi_version=index,
            top_level=BlamePartition(attributor.top_level),
            interior=BlamePartition(attributor.interior),
            paths=paths,
            dependents=dependents,
        )

    def contains(self, pkg: Package) -> bool:
        return pkg in self.top_level or pkg in self.interior

    def entry(self, pkg: Package) -> Optional[BlameEntry]:
        entry = self.top_level.get(pkg)
        return entry if entry is not None else self.interior.get(pkg)

    def is_top_level(self, pkg: Package) -> Optional[bool]:
        """Partition of a classified package; None when it was never classified."""
        if pkg in self.top_level:
            return True
        if pkg in self.interior:
            return False
        return None

    def classification(self, pkg: Package) -> Classification:
        entry = self.entry(pkg)
        return entry.classification if entry is not None else Classification.NO_DUPLICATION

    def has_multi_version_deps(self) -> bool:
        return not self.multi_version.is_empty()

    def has_direct_blame(self) -> bool:
        return self.top_level.has_direct_blame() or self.interior.has_direct_blame()

    def direct_count(self) -> int:
        return self.top_level.direct_count() + self.interior.direct_count()

    def indirect_count(self) -> int:
        return self.top_level.indirect_count() + self.interior.indirect_count()

    def both_count(self) -> int:
        return self.top_level.both_count() + self.interior.both_count()

    def none_count(self) -> int:
        return self.top_level.none_count() + self.interior.none_count()

    def count(self) -> int:
        return self.top_level.count() + self.interior.count()

    def total(self) -> int:
        return self.top_level.total() + self.interior.total()

    def top_level_items(self) -> List[Tuple[Package, BlameEntry]]:
        return self.top_level.items()

    def interior_items(self) -> List[Tuple[Package, BlameEntry]]:
        return self.interior.items()

    def multi_version_items(self) -> List[Tuple[str, Tuple[str, ...]]]:
        return list(self.multi_version.items())

    def path_summaries(self, pkg: Package) -> List[PathSummary]:
        return list(self._paths.get(pkg, ()))

    def direct_dependents(self, pkg: Package) -> List[Package]:
        return list(self._dependents.get(pkg, ()))


def analyze(
    source: Union[Manifest, Sequence[PackageRecord]],
    roots: Optional[Iterable[Package]] = None,
) -> Results:
    """
    Run the full analysis on a manifest or a plain list of package records.

    Raises:
        UnsupportedInputVersion: the manifest schema version is not supported
        CorruptedGraph: an edge references an undeclared package
        CyclicGraph: the dependency graph has a cycle
    """
    if isinstance(source, Manifest):
        graph = PackageGraph.from_manifest(source)
    else:
        graph = PackageGraph.build(source)

    if roots is not None:
        roots = list(roots)

    index = MultiVersionIndex.from_graph(graph)
    parents = ParentClosureIndex.build(graph, index, roots)
    results = Results.build(graph, index, parents, roots)

    logger.info(
        f"Analysis complete: {len(index)} multi-version packages, "
        f"{results.direct_count()} direct, {results.indirect_count()} indirect, "
        f"{results.both_count()} both"
    )
    return results
