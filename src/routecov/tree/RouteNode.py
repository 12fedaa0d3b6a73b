"""RouteNode - Uniform node representation for route trees.

This module provides the core data structures shared by both route
builders:
- SourceLocation: File location reference for a routing step
- RouteNode: One routing step with its ordered children
- NodeFactory: Builder-scoped order counter that creates nodes
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator


@dataclass
class SourceLocation:
    """Reference to where a routing step is defined.

    Line numbers are 1-based and may be missing when the parser that
    produced the node did not preserve them.
    """

    path: str | None = None
    line: int | None = None
    end_line: int | None = None

    def __str__(self) -> str:
        """Return string representation for display."""
        if self.line is None:
            return self.path or ""
        return f"{self.path}:{self.line}"


@dataclass(eq=False)
class RouteNode:
    """A routing step in a route tree.

    Identity is positional: two trees built from the same route produce
    nodes with the same ``order`` values in the same places, but nodes
    are never compared across trees.

    Attributes:
        name: Routing-step keyword (e.g. "to", "choice", "filter").
        order: Creation order within the owning tree.
        argument: First literal argument of the step, for display only.
        source: Where this step is defined.
    """

    name: str
    order: int
    argument: str | None = None
    source: SourceLocation = field(default_factory=SourceLocation)

    # Internal storage (prefixed)
    _route_id: str | None = None
    _parent: RouteNode | None = field(default=None, repr=False)
    _children: list[RouteNode] = field(default_factory=list, repr=False)

    @property
    def parent(self) -> RouteNode | None:
        """The enclosing step, or None for the route's entry point."""
        return self._parent

    @property
    def route_id(self) -> str | None:
        """Route id, inherited from the nearest ancestor that has one."""
        node: RouteNode | None = self
        while node is not None:
            if node._route_id is not None:
                return node._route_id
            node = node._parent
        return None

    @route_id.setter
    def route_id(self, value: str | None) -> None:
        self._route_id = value

    @property
    def file_path(self) -> str | None:
        """Source file, inherited from the nearest ancestor that has one."""
        node: RouteNode | None = self
        while node is not None:
            if node.source.path is not None:
                return node.source.path
            node = node._parent
        return None

    @property
    def children(self) -> list[RouteNode]:
        """Child steps in traversal order (a copy)."""
        return list(self._children)

    @property
    def is_root(self) -> bool:
        """True if this node is the route's entry point."""
        return self._parent is None

    @property
    def is_leaf(self) -> bool:
        """True if this node has no children."""
        return len(self._children) == 0

    def iter_children(self) -> Iterator[RouteNode]:
        """Iterate over child nodes."""
        yield from self._children

    def child_count(self) -> int:
        """Return number of children."""
        return len(self._children)

    def add_child(self, child: RouteNode) -> None:
        """Append a child at the end of this node's children.

        Args:
            child: The child node to add.
        """
        child._parent = self
        self._children.append(child)

    def prepend_child(self, child: RouteNode) -> None:
        """Insert a child in front of this node's existing children.

        Used while assembling a fluent chain that is discovered from its
        last call backwards, so the children end up in program order.

        Args:
            child: The child node to insert.
        """
        child._parent = self
        self._children.insert(0, child)

    def walk(self) -> Iterator[RouteNode]:
        """Pre-order traversal: this node, then each child subtree in order."""
        yield self
        for child in self._children:
            yield from child.walk()

    def depth(self) -> int:
        """Number of ancestors above this node."""
        count = 0
        node = self._parent
        while node is not None:
            count += 1
            node = node._parent
        return count

    def dump(self, indent_unit: str = "  ", level: int = 0) -> str:
        """Render this subtree, one ``<order>\\t<indent><name>`` line per node.

        Args:
            indent_unit: Indentation repeated once per level of depth.
            level: Depth of this node in the rendering.

        Returns:
            Newline-joined lines in pre-order.
        """
        lines = [f"{self.order}\t{indent_unit * level}{self.name}"]
        for child in self._children:
            lines.append(child.dump(indent_unit, level + 1))
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """Serialize this subtree for JSON output."""
        data: dict[str, Any] = {
            "name": self.name,
            "order": self.order,
        }
        if self._route_id is not None:
            data["route_id"] = self._route_id
        if self.argument is not None:
            data["argument"] = self.argument
        if self.source.line is not None:
            data["line"] = self.source.line
            data["end_line"] = self.source.end_line
        if self._children:
            data["children"] = [child.to_dict() for child in self._children]
        return data

    def __str__(self) -> str:
        return self.name


class NodeFactory:
    """Creates RouteNodes with monotonically increasing order values.

    Each build pass owns its factory; two builds never share a counter,
    so repeated or interleaved builds stay deterministic.
    """

    def __init__(self, start: int = 0) -> None:
        self._next = start

    @property
    def next_order(self) -> int:
        """The order value the next node will receive."""
        return self._next

    def new_node(
        self,
        parent: RouteNode | None,
        name: str,
        argument: str | None = None,
        line: int | None = None,
        end_line: int | None = None,
    ) -> RouteNode:
        """Create a node with the next order value.

        The node is not attached; callers decide whether it is appended
        or prepended to ``parent``. The parent link is recorded so that
        route id and file lookups work before attachment.

        Args:
            parent: The node this step will belong to (None for a root).
            name: Routing-step keyword.
            argument: Optional literal argument for display.
            line: Optional 1-based start line.
            end_line: Optional 1-based end line.

        Returns:
            A new RouteNode with no children.
        """
        node = RouteNode(
            name=name,
            order=self._next,
            argument=argument,
            source=SourceLocation(line=line, end_line=end_line),
        )
        node._parent = parent
        self._next += 1
        return node
