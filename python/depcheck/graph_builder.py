"""Builds the package dependency graph from flat manifest records."""

import logging
from collections import defaultdict
from typing import Dict, Iterable, Iterator, List, Set

from .exceptions import CorruptedGraph, CyclicGraph, UnsupportedInputVersion
from .models import Manifest, Package, PackageRecord, VersionNode

logger = logging.getLogger(__name__)

# Manifest format -> schema versions the graph can be built from
SUPPORTED_SCHEMA_VERSIONS: Dict[str, Set[int]] = {
    'cargo': {3, 4},
    'json': {1},
}


class PackageGraph:
    """
    Dependency graph keyed by package identity.

    Each distinct (name, version) gets one VersionNode holding its direct
    dependencies and its direct dependents. Both edge directions are filled
    from the same record list, so they are always symmetric:

        A in dependents(B)  <=>  B in dependencies(A)
    """

    def __init__(self):
        self.nodes: Dict[Package, VersionNode] = {}

    @classmethod
    def from_manifest(cls, manifest: Manifest) -> 'PackageGraph':
        """Check the manifest schema version, then build the graph from its records."""
        supported = SUPPORTED_SCHEMA_VERSIONS.get(manifest.format, set())
        if manifest.schema_version not in supported:
            raise UnsupportedInputVersion(manifest.format, manifest.schema_version, supported)

        logger.info(
            f"Building graph from {manifest.format} manifest v{manifest.schema_version}"
            + (f" ({manifest.source})" if manifest.source else "")
        )
        return cls.build(manifest.records)

    @classmethod
    def build(cls, records: Iterable[PackageRecord]) -> 'PackageGraph':
        """
        Build the graph from package records.

        Raises:
            CorruptedGraph: a dependency references a package no record declares
            CyclicGraph: the dependencies form a cycle
        """
        graph = cls()
        declared: Dict[Package, List[Package]] = {}

        # Pass 1: one node per declared package, forward edges
        for record in records:
            pkg = record.package
            node = graph._get_or_create(pkg)
            deps = [Package(name, version) for name, version in record.dependencies]

            if pkg in declared:
                logger.warning(f"Package {pkg} declared more than once, merging its dependencies")
                declared[pkg].extend(deps)
                node.origin = node.origin or not record.has_external_source
            else:
                declared[pkg] = deps
                node.origin = not record.has_external_source

            node.dependencies.update(deps)

        # Pass 2: reverse edges; every dependency must itself be declared
        for pkg, deps in declared.items():
            for dep in deps:
                graph.get_node(dep).dependents.add(pkg)

        graph._check_acyclic()

        logger.info(
            f"Dependency graph built: {len(graph.nodes)} package versions, "
            f"{len(graph.top_level_packages())} top level"
        )
        return graph

    def _get_or_create(self, pkg: Package) -> VersionNode:
        node = self.nodes.get(pkg)
        if node is None:
            node = VersionNode(package=pkg)
            self.nodes[pkg] = node
        return node

    def _check_acyclic(self) -> None:
        """Iterative three-color DFS over dependency edges."""
        white, grey, black = 0, 1, 2
        color: Dict[Package, int] = defaultdict(int)

        for start in sorted(self.nodes):
            if color[start] != white:
                continue

            color[start] = grey
            trail: List[Package] = [start]
            stack = [(start, iter(sorted(self.nodes[start].dependencies)))]

            while stack:
                pkg, children = stack[-1]
                child = next(children, None)

                if child is None:
                    color[pkg] = black
                    stack.pop()
                    trail.pop()
                    continue

                if color[child] == grey:
                    cycle = trail[trail.index(child):] + [child]
                    raise CyclicGraph(cycle)

                if color[child] == white:
                    color[child] = grey
                    trail.append(child)
                    stack.append((child, iter(sorted(self.nodes[child].dependencies))))

    def get_node(self, pkg: Package) -> VersionNode:
        """Look up a node, failing hard when the package is not in the graph."""
        node = self.nodes.get(pkg)
        if node is None:
            raise CorruptedGraph(pkg.name, pkg.version)
        return node

    def is_top_level(self, pkg: Package) -> bool:
        return self.get_node(pkg).is_top_level

    def packages(self) -> List[Package]:
        """All packages in the graph, sorted."""
        return sorted(self.nodes)

    def top_level_packages(self) -> List[Package]:
        return [pkg for pkg in self.packages() if self.nodes[pkg].is_top_level]

    def versions_by_name(self) -> Dict[str, List[str]]:
        """Map each package name to its versions, sorted by version precedence."""
        by_name: Dict[str, List[Package]] = defaultdict(list)
        for pkg in self.packages():
            by_name[pkg.name].append(pkg)
        return {name: [pkg.version for pkg in pkgs] for name, pkgs in by_name.items()}

    def __iter__(self) -> Iterator[VersionNode]:
        return iter(self.nodes.values())

    def __contains__(self, pkg) -> bool:
        return pkg in self.nodes

    def __len__(self) -> int:
        return len(self.nodes)
