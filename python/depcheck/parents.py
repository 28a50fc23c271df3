"""Upward closure: which duplicated versions each ancestor can reach."""

import logging
from collections import defaultdict
from typing import Collection, Dict, Iterable, Iterator, List, Optional, Set, Tuple

from .graph_builder import PackageGraph
from .models import Package
from .multi_version import MultiVersionIndex

logger = logging.getLogger(__name__)

# name -> versions of that name reachable below an ancestor
DuplicateView = Dict[str, Set[str]]


class ParentClosureIndex:
    """
    For every ancestor of a duplicated package, the duplicated names and
    versions found in that ancestor's dependency subtree.

    Built by walking up the dependents edges from each duplicated occurrence.
    There is no global visited set: an ancestor reachable through several
    paths is visited once per path. Accumulation is a set union, so indexes
    built from disjoint roots can be merged in any order.
    """

    def __init__(self):
        self._views: Dict[Package, DuplicateView] = defaultdict(lambda: defaultdict(set))

    @classmethod
    def build(
        cls,
        graph: PackageGraph,
        index: MultiVersionIndex,
        roots: Optional[Iterable[Package]] = None,
    ) -> 'ParentClosureIndex':
        """
        Build the closure for every duplicated occurrence.

        Args:
            graph: The dependency graph
            index: Names with multiple versions
            roots: Walk order over the duplicated occurrences (default: sorted)
        """
        parents = cls()
        for root in (index.packages() if roots is None else roots):
            parents._walk(graph, root)

        logger.info(f"Parent closure built for {len(parents._views)} ancestor packages")
        return parents

    @classmethod
    def build_for_root(cls, graph: PackageGraph, root: Package) -> 'ParentClosureIndex':
        """Closure of a single duplicated occurrence, for fork-join construction."""
        parents = cls()
        parents._walk(graph, root)
        return parents

    @classmethod
    def merge(cls, *indexes: 'ParentClosureIndex') -> 'ParentClosureIndex':
        merged = cls()
        for other in indexes:
            for ancestor, view in other._views.items():
                for name, versions in view.items():
                    merged._views[ancestor][name].update(versions)
        return merged

    def _walk(self, graph: PackageGraph, root: Package) -> None:
        stack = [root]
        while stack:
            pkg = stack.pop()
            node = graph.get_node(pkg)

            if pkg != root:
                self._add(pkg, root)

            stack.extend(node.dependents)

    def _add(self, ancestor: Package, duplicate: Package) -> None:
        self._views[ancestor][duplicate.name].add(duplicate.version)

    def view(self, pkg: Package) -> Optional[DuplicateView]:
        """The ancestor's view, or None when no duplicate sits below it."""
        return self._views.get(pkg)

    def versions(self, pkg: Package, name: str) -> Set[str]:
        view = self.view(pkg)
        if view is None:
            return set()
        return set(view.get(name, ()))

    def has_all(self, pkg: Package, name: str, versions: Collection[str]) -> bool:
        """True when pkg's subtree reaches every one of the given versions of name."""
        view = self.view(pkg)
        if view is None or name not in view:
            return False
        return view[name].issuperset(versions)

    def multi_version_items(self, pkg: Package) -> List[Tuple[str, Set[str]]]:
        """Names seen at two or more versions below pkg, sorted by name."""
        view = self.view(pkg)
        if view is None:
            return []
        return [(name, versions) for name, versions in sorted(view.items()) if len(versions) > 1]

    def ancestors(self) -> Iterator[Package]:
        return iter(sorted(self._views))

    def __contains__(self, pkg) -> bool:
        return pkg in self._views

    def __len__(self) -> int:
        return len(self._views)
