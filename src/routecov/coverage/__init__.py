"""
routecov.coverage - Runtime dump correlation and coverage metrics.

- parse_dump_coverage: Aggregate dumps for one route id
- compare_route: Zip a route tree with aggregated counts
"""

from routecov.coverage.dump import (
    CoverageEntry,
    RouteCoverage,
    StructuralMismatchError,
    find_dump_route_ids,
    merge_route_steps,
    parse_dump_coverage,
)
from routecov.coverage.metrics import NodeCoverage, RouteReport, compare_route, iter_step_nodes

__all__ = [
    "CoverageEntry",
    "NodeCoverage",
    "RouteCoverage",
    "RouteReport",
    "StructuralMismatchError",
    "compare_route",
    "find_dump_route_ids",
    "iter_step_nodes",
    "merge_route_steps",
    "parse_dump_coverage",
]
