"""
Blame attribution for multi-version dependencies.

Every package above a duplicated package is classified once, per duplicated
name it can see at two or more versions:

    indirect  one of its direct dependencies already reaches all of those
              versions; the package only passes the duplication along
    direct    no single dependency covers them all; the versions diverge
              across this package's own dependencies

Partial coverage by a dependency still counts as direct.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Set

from .graph_builder import PackageGraph
from .models import BlameEntry, Package, PathSummary, VersionNode
from .multi_version import MultiVersionIndex
from .parents import ParentClosureIndex
from .paths import PathState, summarize

logger = logging.getLogger(__name__)


class BlameAttributor:
    """Walks up from each duplicated package, classifying ancestors and summarizing paths."""

    def __init__(self, graph: PackageGraph, parents: ParentClosureIndex):
        self.graph = graph
        self.parents = parents

        self.top_level: Dict[Package, BlameEntry] = {}
        self.interior: Dict[Package, BlameEntry] = {}
        self.paths: Dict[Package, Set[PathSummary]] = defaultdict(set)

    def attribute(self, index: MultiVersionIndex, roots: Optional[Iterable[Package]] = None) -> None:
        """
        Classify every ancestor of every duplicated occurrence.

        Args:
            index: Names with multiple versions
            roots: Walk order over the duplicated occurrences (default: sorted)
        """
        for root in (index.packages() if roots is None else roots):
            self._walk(root)

        logger.info(
            f"Blame attributed: {len(self.top_level)} top level, "
            f"{len(self.interior)} interior packages"
        )

    def contains(self, pkg: Package) -> bool:
        return pkg in self.top_level or pkg in self.interior

    def _walk(self, root: Package) -> None:
        stack = [(root, PathState())]

        while stack:
            pkg, state = stack.pop()
            node = self.graph.get_node(pkg)
            top_level = node.is_top_level

            if not self.contains(pkg):
                entry = self.classify(pkg, node)
                if entry is not None:
                    partition = self.top_level if top_level else self.interior
                    partition[pkg] = entry

            state, summary = summarize(state, pkg, top_level)
            if summary is not None:
                self.paths[root].add(summary)

            for dependent in node.dependents:
                stack.append((dependent, state.climb(pkg, dependent)))

    def classify(self, pkg: Package, node: VersionNode) -> Optional[BlameEntry]:
        """Blame entry for one package, or None when nothing duplicated sits below it."""
        if pkg not in self.parents:
            return None

        entry = BlameEntry()
        for name, versions in self.parents.multi_version_items(pkg):
            covered = any(
                self.parents.has_all(dep, name, versions) for dep in node.dependencies
            )
            if covered:
                entry.add_indirect(name)
            else:
                entry.add_direct(name, self._sources(node, name, versions))

        logger.debug(
            f"Classified {pkg}: direct={entry.sorted_direct()} indirect={entry.sorted_indirect()}"
        )
        return entry

    def _sources(self, node: VersionNode, name: str, versions: Set[str]) -> Dict[str, Set[Package]]:
        """
        Which of the node's own dependencies bring in each version of name.

        A dependency that is itself an occurrence of name brings in its own
        version. Dependencies reaching exactly the node's versions are left out.
        """
        sources: Dict[str, Set[Package]] = defaultdict(set)
        for dep in node.dependencies:
            reached = self.parents.versions(dep, name)
            if dep.name == name:
                reached.add(dep.version)
            if not reached or reached == versions:
                continue
            for version in reached:
                sources[version].add(dep)
        return dict(sources)

    def path_summaries(self, root: Package) -> List[PathSummary]:
        return sorted(self.paths.get(root, ()))
