"""Route coverage metrics.

This module zips a route tree against the aggregated dump counts for its
route id:
- NodeCoverage: Count attributed to one step node
- RouteReport: Per-route result with uncovered nodes and percentage
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator

from routecov.catalog import StepCatalog
from routecov.coverage.dump import RouteCoverage
from routecov.tree.RouteNode import RouteNode


@dataclass
class NodeCoverage:
    """Execution count attributed to one step node.

    Attributes:
        node: The step node in the route tree.
        count: Cumulative exchanges at the node's position (0 if no dump
            reached that position).
        dump_name: Step name the dumps recorded at that position, if any.
    """

    node: RouteNode
    count: int
    dump_name: str | None = None

    @property
    def covered(self) -> bool:
        return self.count > 0


@dataclass
class RouteReport:
    """Coverage of one route tree.

    Attributes:
        root: Route tree root.
        coverage: Aggregated dump data for the route id.
        nodes: Step nodes with their counts, in position order.
        name_mismatches: Positions where the dumps recorded a different
            step name than the tree.
    """

    root: RouteNode
    coverage: RouteCoverage
    nodes: list[NodeCoverage] = field(default_factory=list)
    name_mismatches: list[str] = field(default_factory=list)

    @property
    def route_id(self) -> str | None:
        return self.root.route_id

    @property
    def total(self) -> int:
        return len(self.nodes)

    @property
    def covered(self) -> int:
        return sum(1 for n in self.nodes if n.covered)

    @property
    def coverage_pct(self) -> float:
        """Percentage of step nodes with a non-zero count (100 if none)."""
        if not self.nodes:
            return 100.0
        return (self.covered / self.total) * 100

    @property
    def uncovered(self) -> list[RouteNode]:
        return [n.node for n in self.nodes if not n.covered]

    @property
    def fully_covered(self) -> bool:
        return self.covered == self.total

    @property
    def reliable(self) -> bool:
        """False when dumps disagreed with each other or with the tree."""
        return self.coverage.reliable and not self.name_mismatches

    def count_by_order(self) -> dict[int, int]:
        """Map node order -> count, for rendering the tree."""
        return {n.node.order: n.count for n in self.nodes}

    def dump(self, indent_unit: str = "  ") -> str:
        """Render the tree with each step's count, ``-`` for non-steps."""
        counts = self.count_by_order()
        lines = []
        for node in self.root.walk():
            level = node.depth()
            count = counts.get(node.order)
            marker = "-" if count is None else str(count)
            lines.append(f"{node.order}\t{marker}\t{indent_unit * level}{node.name}")
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        return {
            "route_id": self.route_id,
            "file": self.root.file_path,
            "total": self.total,
            "covered": self.covered,
            "coverage_pct": round(self.coverage_pct, 1),
            "reliable": self.reliable,
            "nodes": [
                {
                    "order": n.node.order,
                    "name": n.node.name,
                    "line": n.node.source.line,
                    "count": n.count,
                }
                for n in self.nodes
            ],
            "name_mismatches": list(self.name_mismatches),
            "dump": self.coverage.to_dict(),
        }


def iter_step_nodes(root: RouteNode, catalog: StepCatalog) -> Iterator[RouteNode]:
    """Yield a tree's step nodes in dump-position order.

    Mirrors the dump walk: pre-order, root excluded, and a node whose
    name the catalog does not know is pruned with its subtree.
    """
    for child in root.iter_children():
        yield from _iter_steps(child, catalog)


def _iter_steps(node: RouteNode, catalog: StepCatalog) -> Iterator[RouteNode]:
    if not catalog.is_step(node.name):
        return
    yield node
    for child in node.iter_children():
        yield from _iter_steps(child, catalog)


def compare_route(
    root: RouteNode,
    coverage: RouteCoverage,
    catalog: StepCatalog | None = None,
) -> RouteReport:
    """Zip a route tree's step nodes with the accumulated dump counts.

    Args:
        root: Route tree root.
        coverage: Aggregated dump data for the same route id.
        catalog: Step catalog; defaults to the bundled one.

    Returns:
        RouteReport with one NodeCoverage per step node.
    """
    catalog = catalog or StepCatalog()
    report = RouteReport(root=root, coverage=coverage)

    for position, node in enumerate(iter_step_nodes(root, catalog)):
        if position < len(coverage.entries):
            entry = coverage.entries[position]
            if entry.name != node.name:
                report.name_mismatches.append(
                    f"step {position}: tree has '{node.name}' (line {node.source.line}), "
                    f"dumps recorded '{entry.name}'"
                )
            report.nodes.append(NodeCoverage(node, entry.count, entry.name))
        else:
            report.nodes.append(NodeCoverage(node, 0))

    return report
