"""
routecov - Route coverage for message-routing pipelines

routecov reconstructs the tree of routing steps defined in Python
route-builder classes and XML route documents, then correlates each
tree against the runtime dumps written during test runs to report which
steps were exercised.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("routecov")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"  # Not installed
__license__ = "MIT"

from routecov.catalog import StepCatalog
from routecov.coverage.dump import (
    CoverageEntry,
    RouteCoverage,
    StructuralMismatchError,
    parse_dump_coverage,
)
from routecov.coverage.metrics import RouteReport, compare_route
from routecov.tree import NodeFactory, RouteNode, SourceLocation

__all__ = [
    "__version__",
    "CoverageEntry",
    "NodeFactory",
    "RouteCoverage",
    "RouteNode",
    "RouteReport",
    "SourceLocation",
    "StepCatalog",
    "StructuralMismatchError",
    "compare_route",
    "parse_dump_coverage",
]
