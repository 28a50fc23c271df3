"""depcheck - find multi-version dependencies and the packages to blame for them."""

__version__ = "0.3.0"

from .exceptions import CorruptedGraph, CyclicGraph, DepcheckError, ManifestError, UnsupportedInputVersion
from .graph_builder import PackageGraph
from .models import BlameEntry, Classification, Manifest, Package, PackageRecord, PathSummary
from .multi_version import MultiVersionIndex
from .parents import ParentClosureIndex
from .results import Results, analyze

__all__ = [
    "__version__",
    "analyze",
    "BlameEntry",
    "Classification",
    "CorruptedGraph",
    "CyclicGraph",
    "DepcheckError",
    "Manifest",
    "ManifestError",
    "MultiVersionIndex",
    "Package",
    "PackageGraph",
    "PackageRecord",
    "ParentClosureIndex",
    "PathSummary",
    "Results",
    "UnsupportedInputVersion",
]
