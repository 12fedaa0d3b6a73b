"""Source Route Tree Builder.

Builds RouteNode trees from route-builder classes reduced to the
source-parser boundary types (see ``routecov.parsers``).

A fluent chain such as::

    self.from_("direct:a").route_id("a").to("mock:x") \\
        .choice().when(p).to("mock:y").otherwise().to("mock:z").end()

is flat in the source but nested in meaning. Assembly is two-phase:

1. Discovery walks each chain from its outermost (last) call back to its
   head and prepends a preliminary node per call, so the preliminary
   sequence ends up in program order.
2. Rebuild walks that sequence forwards with a fresh order counter and
   nests steps under the block and branch steps that scope them.
"""

from __future__ import annotations

from routecov.catalog import StepCatalog, to_step_name
from routecov.parsers import CallNode, RouteClass, RouteMethod
from routecov.tree.RouteNode import NodeFactory, RouteNode

ENTRY_METHOD = "configure"
FROM_STEP = "from"
ROUTE_ID_CALL = "routeId"
END_CALL = "end"
END_CHOICE_CALL = "endChoice"
END_DO_TRY_CALL = "endDoTry"


def find_configure_method(route_class: RouteClass) -> RouteMethod | None:
    """Return the class's own routing entry method, or None."""
    return route_class.find_method(ENTRY_METHOD)


def find_nested_configure_methods(route_class: RouteClass) -> list[RouteMethod]:
    """Return entry methods of route classes declared inside ``route_class``."""
    methods: list[RouteMethod] = []
    for nested in route_class.nested:
        method = nested.find_method(ENTRY_METHOD)
        if method is not None:
            methods.append(method)
    return methods


def build_route_trees(
    route_class: RouteClass,
    include_nested: bool = False,
    catalog: StepCatalog | None = None,
) -> list[RouteNode]:
    """Build every route tree defined by a class.

    A class without an entry method is simply not a route builder and
    yields an empty list.

    Args:
        route_class: Class from the source parser.
        include_nested: Also build routes from nested route classes.
        catalog: Step catalog; defaults to the bundled one.

    Returns:
        One tree per route chain, primary entry method first.
    """
    methods: list[RouteMethod] = []
    primary = find_configure_method(route_class)
    if primary is not None:
        methods.append(primary)
    if include_nested:
        methods.extend(find_nested_configure_methods(route_class))

    assembler = SourceRouteAssembler(catalog or StepCatalog(), route_class.file_path)
    trees: list[RouteNode] = []
    for method in methods:
        trees.extend(assembler.build_method(method))
    return trees


def build_route_tree(
    route_class: RouteClass,
    include_nested: bool = False,
    catalog: StepCatalog | None = None,
) -> RouteNode | None:
    """Build the first route tree defined by a class, or None."""
    trees = build_route_trees(route_class, include_nested, catalog)
    return trees[0] if trees else None


class SourceRouteAssembler:
    """Assembles route trees from the statements of entry methods.

    Attributes:
        catalog: Recognized step names and scope structure.
        file_path: Source file recorded on every tree root.
    """

    def __init__(self, catalog: StepCatalog, file_path: str) -> None:
        self.catalog = catalog
        self.file_path = file_path

    def build_method(self, method: RouteMethod) -> list[RouteNode]:
        """Build one tree per route chain in an entry method.

        Statements whose chain does not start with ``from_`` (error
        handler setup, helper calls) are skipped.

        Args:
            method: Entry method from the source parser.

        Returns:
            Trees in statement order.
        """
        trees: list[RouteNode] = []
        for statement in method.statements:
            chain = self.discover(statement)
            steps = chain.children
            if not steps or steps[0].name != FROM_STEP:
                continue
            trees.append(self.rebuild(steps))
        return trees

    # -------------------------------------------------------------------
    # Phase 1: discovery
    # -------------------------------------------------------------------

    def discover(self, tail: CallNode) -> RouteNode:
        """Flatten a chain into preliminary nodes in program order.

        Args:
            tail: Outermost (last) call of the chain.

        Returns:
            A scratch holder whose children are the chain's calls; a
            call's nested block becomes that preliminary node's children.
        """
        factory = NodeFactory()
        holder = factory.new_node(None, "chain")
        self._discover_into(holder, tail, factory)
        return holder

    def _discover_into(self, holder: RouteNode, tail: CallNode, factory: NodeFactory) -> None:
        # visited last call first, so each call goes in front of the ones after it
        for call in tail.iter_backwards():
            node = factory.new_node(
                holder,
                to_step_name(call.name),
                argument=call.argument,
                line=call.line,
                end_line=call.end_line,
            )
            if call.block is not None:
                self._discover_into(node, call.block, factory)
            holder.prepend_child(node)

    # -------------------------------------------------------------------
    # Phase 2: rebuild
    # -------------------------------------------------------------------

    def rebuild(self, steps: list[RouteNode]) -> RouteNode:
        """Rebuild a preliminary sequence into a scoped tree.

        Args:
            steps: Preliminary nodes in program order, ``from`` first.

        Returns:
            Root node (the ``from`` step, order 0).
        """
        factory = NodeFactory()
        head = steps[0]
        root = factory.new_node(
            None,
            head.name,
            argument=head.argument,
            line=head.source.line,
            end_line=head.source.end_line,
        )
        root.source.path = self.file_path
        self._assemble(steps[1:], root, root, factory)
        return root

    def _assemble(
        self,
        steps: list[RouteNode],
        limit: RouteNode,
        root: RouteNode,
        factory: NodeFactory,
    ) -> None:
        """Attach ``steps`` below ``limit``, never climbing above it."""
        scope = limit
        for step in steps:
            name = step.name

            if name == ROUTE_ID_CALL:
                root.route_id = step.argument
                continue
            if name == END_CALL:
                scope = self._close(scope, limit)
                continue
            if name == END_CHOICE_CALL:
                scope = self._enclosing(scope, "choice", limit) or scope
                continue
            if name == END_DO_TRY_CALL:
                owner = self._enclosing(scope, "doTry", limit)
                if owner is not None and owner is not limit and owner.parent is not None:
                    scope = owner.parent
                continue
            if not self.catalog.is_step(name):
                continue

            attach_to = scope
            owner_name = self.catalog.branch_owner(name)
            if owner_name is not None:
                owner = self._enclosing(scope, owner_name, limit)
                if owner is not None:
                    attach_to = owner

            node = factory.new_node(
                attach_to,
                name,
                argument=step.argument,
                line=step.source.line,
                end_line=step.source.end_line,
            )
            attach_to.add_child(node)

            if self._has_nested_steps(step):
                self._assemble(step.children, node, root, factory)
                if owner_name is not None:
                    scope = attach_to
            elif owner_name is not None or self.catalog.is_block(name):
                scope = node

    def _has_nested_steps(self, step: RouteNode) -> bool:
        """True if a lambda argument of ``step`` holds routing steps.

        Predicate lambdas such as ``when(lambda ex: ex.get_in().has_header("x"))``
        also reach here as nested chains, but contain no step.
        """
        return any(
            self.catalog.is_step(node.name)
            for child in step.iter_children()
            for node in child.walk()
        )

    def _enclosing(self, scope: RouteNode, name: str, limit: RouteNode) -> RouteNode | None:
        """Nearest node named ``name`` from ``scope`` up to ``limit``."""
        node: RouteNode | None = scope
        while node is not None:
            if node.name == name:
                return node
            if node is limit:
                return None
            node = node.parent
        return None

    def _close(self, scope: RouteNode, limit: RouteNode) -> RouteNode:
        """Scope after end(): a branch closes together with its owner."""
        if scope is limit:
            return scope
        parent = scope.parent
        if parent is None or parent is limit:
            return limit
        owner_name = self.catalog.branch_owner(scope.name)
        if owner_name is not None and parent.name == owner_name and parent.parent is not None:
            return parent.parent
        return parent
