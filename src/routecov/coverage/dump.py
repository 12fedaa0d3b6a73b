"""Route coverage dump correlator.

Aggregates the runtime dumps written during test runs into one sequence
of step counts per route id. Dumps are XML documents, conventionally one
per test class::

    <routeCoverage>
      <route id="orders" exchangesTotal="3">
        <from uri="direct:orders"/>
        <to uri="mock:audit" exchangesTotal="3"/>
        <choice exchangesTotal="3">
          <when exchangesTotal="2">...</when>
        </choice>
      </route>
    </routeCoverage>

Neither the dumps nor the route trees carry stable step identifiers, so
steps are addressed purely by position in a depth-first walk.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator

from routecov.catalog import StepCatalog, local_name

ROUTE_TAG = "route"
COUNT_ATTRIBUTE = "exchangesTotal"


class StructuralMismatchError(ValueError):
    """A dump disagrees with earlier dumps about a route's step sequence.

    Attributes:
        route_id: Route whose accumulation was being extended.
        position: Zero-based step position of the disagreement.
        expected: Step name already accumulated at that position.
        actual: Step name found in the new dump.
        source: Dump file the new steps came from, if known.
    """

    def __init__(
        self,
        route_id: str,
        position: int,
        expected: str,
        actual: str,
        source: str | None = None,
    ) -> None:
        self.route_id = route_id
        self.position = position
        self.expected = expected
        self.actual = actual
        self.source = source
        where = f" in {source}" if source else ""
        super().__init__(
            f"Route {route_id}: step {position} is '{actual}'{where} "
            f"but earlier dumps recorded '{expected}'"
        )


@dataclass(frozen=True)
class CoverageEntry:
    """Accumulated execution count of one step position.

    Attributes:
        name: Step keyword as it appeared in the dump.
        count: Cumulative number of exchanges across dumps.
    """

    name: str
    count: int


@dataclass
class RouteCoverage:
    """Aggregated dump data for one route id.

    Attributes:
        route_id: The route id.
        entries: Step counts in traversal-position order.
        sources: Dump files that contributed at least one route element.
        mismatches: Structural mismatches found while aggregating.
        errors: Dump files that could not be read, with the cause.
    """

    route_id: str
    entries: list[CoverageEntry] = field(default_factory=list)
    sources: list[str] = field(default_factory=list)
    mismatches: list[StructuralMismatchError] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def reliable(self) -> bool:
        """False when any dump disagreed structurally with the others."""
        return not self.mismatches

    @property
    def counts(self) -> list[int]:
        """Counts in position order."""
        return [entry.count for entry in self.entries]

    def to_dict(self) -> dict[str, Any]:
        return {
            "route_id": self.route_id,
            "entries": [{"name": e.name, "count": e.count} for e in self.entries],
            "sources": list(self.sources),
            "reliable": self.reliable,
            "mismatches": [str(m) for m in self.mismatches],
            "errors": list(self.errors),
        }


def iter_route_steps(route: ET.Element, catalog: StepCatalog) -> Iterator[tuple[str, int]]:
    """Walk a dump's route element and yield (step name, count) pairs.

    The walk is depth-first over element children, skips the route
    wrapper itself, and prunes any element the catalog does not know
    together with its subtree. The same rule selects step nodes from a
    route tree, which is what makes the two sequences comparable.

    Args:
        route: A ``<route>`` element of a dump.
        catalog: Recognized step names.

    Yields:
        ``(name, exchangesTotal)``; a missing attribute counts as 0.
    """
    for child in route:
        if isinstance(child.tag, str):
            yield from _iter_element_steps(child, catalog)


def _iter_element_steps(element: ET.Element, catalog: StepCatalog) -> Iterator[tuple[str, int]]:
    name = local_name(element.tag)
    if not catalog.is_step(name):
        return
    yield name, _parse_count(element.get(COUNT_ATTRIBUTE))
    for child in element:
        if isinstance(child.tag, str):
            yield from _iter_element_steps(child, catalog)


def _parse_count(value: str | None) -> int:
    if value is None:
        return 0
    try:
        return max(int(value.strip()), 0)
    except ValueError:
        return 0


def merge_route_steps(
    entries: list[CoverageEntry],
    steps: list[tuple[str, int]],
    route_id: str,
    source: str | None = None,
) -> None:
    """Fold one route element's steps into an accumulation, in place.

    Positions the accumulation has not seen yet are appended; positions
    whose stored name matches are summed. Every overlapping position is
    checked before anything is modified, so a mismatching route element
    leaves the accumulation untouched.

    Args:
        entries: Accumulated entries, updated in place.
        steps: ``(name, count)`` pairs of one route element, position order.
        route_id: Route id, for error reporting.
        source: Dump file the steps came from, for error reporting.

    Raises:
        StructuralMismatchError: If a name differs at an existing position.
    """
    for position, (name, _count) in enumerate(steps[: len(entries)]):
        if entries[position].name != name:
            raise StructuralMismatchError(route_id, position, entries[position].name, name, source)

    for position, (name, count) in enumerate(steps):
        if position < len(entries):
            entries[position] = CoverageEntry(name, entries[position].count + count)
        else:
            entries.append(CoverageEntry(name, count))


def list_dump_files(directory: Path) -> list[Path]:
    """Return the ``*.xml`` files of a dump directory, sorted by name."""
    if not directory.is_dir():
        return []
    return sorted(p for p in directory.iterdir() if p.is_file() and p.suffix.lower() == ".xml")


def read_dump(file_path: Path) -> ET.Element:
    """Parse one dump document.

    Raises:
        xml.etree.ElementTree.ParseError: If the document is malformed.
        OSError: If the file cannot be read.
    """
    with open(file_path, "rb") as fh:
        return ET.parse(fh).getroot()


def find_routes(root: ET.Element, route_id: str | None = None) -> list[ET.Element]:
    """Return route elements of a dump, optionally only those with ``route_id``."""
    routes = [el for el in root.iter() if isinstance(el.tag, str) and local_name(el.tag) == ROUTE_TAG]
    if route_id is None:
        return routes
    return [el for el in routes if el.get("id") == route_id]


def correlate_document(
    coverage: RouteCoverage,
    root: ET.Element,
    catalog: StepCatalog,
    source: str | None = None,
) -> None:
    """Fold every matching route element of one dump into ``coverage``.

    The position counter restarts at 0 for each matching route element;
    the accumulation itself is shared across all of them. A route element
    that disagrees structurally is recorded in ``coverage.mismatches`` and
    contributes nothing; later route elements of the document still merge.
    """
    for route in find_routes(root, coverage.route_id):
        steps = list(iter_route_steps(route, catalog))
        try:
            merge_route_steps(coverage.entries, steps, coverage.route_id, source)
        except StructuralMismatchError as e:
            coverage.mismatches.append(e)
            continue
        if source is not None and source not in coverage.sources:
            coverage.sources.append(source)


def parse_dump_coverage(
    directory: Path,
    route_id: str,
    catalog: StepCatalog | None = None,
) -> RouteCoverage:
    """Aggregate every dump in ``directory`` for one route id.

    Unreadable documents are recorded in ``errors`` and skipped. A
    route element that disagrees structurally with earlier ones is
    recorded in ``mismatches`` and contributes nothing; the route is then
    no longer ``reliable``.

    Args:
        directory: Directory holding the dump files.
        route_id: Target route id.
        catalog: Step catalog; defaults to the bundled one.

    Returns:
        RouteCoverage for the route id (empty if no dump mentions it).
    """
    catalog = catalog or StepCatalog()
    coverage = RouteCoverage(route_id=route_id)

    for file_path in list_dump_files(directory):
        try:
            root = read_dump(file_path)
        except (ET.ParseError, OSError) as e:
            coverage.errors.append(f"{file_path}: {e}")
            continue
        correlate_document(coverage, root, catalog, str(file_path))

    return coverage


def find_dump_route_ids(directory: Path) -> list[str]:
    """List the route ids mentioned by any readable dump, first-seen order."""
    seen: list[str] = []
    for file_path in list_dump_files(directory):
        try:
            root = read_dump(file_path)
        except (ET.ParseError, OSError):
            continue
        for route in find_routes(root):
            route_id = route.get("id")
            if route_id and route_id not in seen:
                seen.append(route_id)
    return seen
