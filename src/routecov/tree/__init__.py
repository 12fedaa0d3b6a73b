"""Route tree model and builders.

Exports the uniform tree model (RouteNode, SourceLocation, NodeFactory).
The builders live in ``routecov.tree.xml_builder`` and
``routecov.tree.source_builder``.
"""

from routecov.tree.RouteNode import NodeFactory, RouteNode, SourceLocation

__all__ = [
    "NodeFactory",
    "RouteNode",
    "SourceLocation",
]
