"""Markup Route Tree Builder.

Turns ``<route>`` elements of an XML route document into RouteNode trees.
The route element itself is never materialized: the root supplied by
the caller stands in for it and receives the route's element children.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path

from routecov.catalog import local_name
from routecov.parsers.xml_lines import parse_xml_with_lines
from routecov.tree.RouteNode import NodeFactory, RouteNode, SourceLocation

ROUTE_TAG = "route"
ROOT_NAME = "from"


def parse_route_tree(
    route: ET.Element,
    route_id: str | None,
    root: RouteNode,
    base_dir: str,
    file_path: str,
    lines: dict[ET.Element, tuple[int, int]] | None = None,
    factory: NodeFactory | None = None,
) -> list[RouteNode]:
    """Build the tree for one route element under ``root``.

    Args:
        route: The ``<route>`` element.
        route_id: Route id to set on the root (None for anonymous routes).
        root: Caller-supplied root that plays the role of the route.
        base_dir: Base directory the file path is relative to.
        file_path: Source file recorded on the root.
        lines: Optional element -> (start, end) line mapping.
        factory: Order counter for this build; defaults to one starting
            after the root's order.

    Returns:
        ``[root]``, populated.
    """
    if factory is None:
        factory = NodeFactory(start=root.order + 1)
    root.route_id = route_id
    if root.source.path is None:
        root.source.path = _attributed_path(base_dir, file_path)

    _walk(route, root, factory, lines or {})
    return [root]


def _walk(
    element: ET.Element,
    parent: RouteNode,
    factory: NodeFactory,
    lines: dict[ET.Element, tuple[int, int]],
) -> None:
    name = local_name(element.tag)
    current = parent
    # skip the route wrapper, the root already stands for it
    if name != ROUTE_TAG:
        line, end_line = lines.get(element, (None, None))
        current = factory.new_node(
            parent,
            name,
            argument=element.get("uri"),
            line=line,
            end_line=end_line,
        )
        parent.add_child(current)

    # iterating an Element yields element children only
    for child in element:
        if isinstance(child.tag, str):
            _walk(child, current, factory, lines)


def _attributed_path(base_dir: str, file_path: str) -> str:
    """Express ``file_path`` relative to ``base_dir`` when it lies below it."""
    try:
        return Path(file_path).relative_to(base_dir).as_posix()
    except ValueError:
        return file_path


def find_route_elements(root: ET.Element) -> list[ET.Element]:
    """Return every route element of a document, in document order."""
    return [el for el in root.iter() if isinstance(el.tag, str) and local_name(el.tag) == ROUTE_TAG]


def build_xml_route_trees(file_path: Path, base_dir: Path) -> list[RouteNode]:
    """Read an XML route file and build one tree per route element.

    Each route gets its own NodeFactory, so orders restart at 0 for
    every route in the file.

    Args:
        file_path: XML file to read.
        base_dir: Project base directory for path attribution.

    Returns:
        One root per ``<route>`` element, in document order.

    Raises:
        xml.etree.ElementTree.ParseError: If the document is malformed.
        OSError: If the file cannot be read.
    """
    document = parse_xml_with_lines(file_path)

    trees: list[RouteNode] = []
    for route in find_route_elements(document.root):
        factory = NodeFactory()
        line, end_line = document.span(route)
        root = factory.new_node(None, ROOT_NAME, line=line, end_line=end_line)
        root.source = SourceLocation(
            path=_attributed_path(str(base_dir), str(file_path)),
            line=line,
            end_line=end_line,
        )
        trees.extend(
            parse_route_tree(
                route,
                route.get("id"),
                root,
                str(base_dir),
                str(file_path),
                lines=document.lines,
                factory=factory,
            )
        )
    return trees
