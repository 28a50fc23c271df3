"""Index of package names resolved at more than one version."""

import logging
from typing import Dict, Iterator, List, Tuple

from .graph_builder import PackageGraph
from .models import Package

logger = logging.getLogger(__name__)


class MultiVersionIndex:
    """Read-only view: name -> versions, for names with two or more versions."""

    def __init__(self, versions: Dict[str, List[str]]):
        self._versions: Dict[str, Tuple[str, ...]] = {
            name: tuple(vers) for name, vers in sorted(versions.items()) if len(vers) > 1
        }

    @classmethod
    def from_graph(cls, graph: PackageGraph) -> 'MultiVersionIndex':
        index = cls(graph.versions_by_name())
        logger.info(f"Found {len(index)} packages with multiple versions")
        for name in index.names():
            logger.debug(f"  {name}: {', '.join(index.versions(name))}")
        return index

    def names(self) -> List[str]:
        return list(self._versions)

    def versions(self, name: str) -> Tuple[str, ...]:
        return self._versions.get(name, ())

    def items(self) -> Iterator[Tuple[str, Tuple[str, ...]]]:
        return iter(self._versions.items())

    def packages(self) -> List[Package]:
        """Every duplicated occurrence, by name then version."""
        return [Package(name, version) for name, versions in self.items() for version in versions]

    def is_empty(self) -> bool:
        return not self._versions

    def __contains__(self, name) -> bool:
        return name in self._versions

    def __len__(self) -> int:
        return len(self._versions)
