"""Source-parser boundary.

The route builders never look at program text. A source parser turns a
file into the structures below, and the Source Route Tree Builder only
consumes those.

Exports:
- CallNode: One call of a fluent chain
- RouteMethod: A method whose statements may define routes
- RouteClass: A class declaration with its methods and nested classes
- SourceParser: Protocol for parser implementations
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Protocol, runtime_checkable


@dataclass
class CallNode:
    """One call of a fluent chain, as the source parser found it.

    Chains are exposed the way a syntax tree nests them: a statement
    yields its outermost (last) call, and ``receiver`` links back to the
    call it was invoked on, ending at the head of the chain.

    Attributes:
        name: Method name as written (e.g. "from_", "do_try").
        line: 1-based line of the method name, if known.
        end_line: 1-based line where the call ends, if known.
        argument: Display form of the first argument, if any.
        block: Outermost call of a nested chain passed as an argument.
        receiver: The call this one was invoked on.
    """

    name: str
    line: int | None = None
    end_line: int | None = None
    argument: str | None = None
    block: CallNode | None = None
    receiver: CallNode | None = None

    def iter_backwards(self) -> Iterator[CallNode]:
        """Yield this call, then each receiver back to the chain head."""
        node: CallNode | None = self
        while node is not None:
            yield node
            node = node.receiver

    @property
    def head(self) -> CallNode:
        """The first call of the chain."""
        node = self
        while node.receiver is not None:
            node = node.receiver
        return node


@dataclass
class RouteMethod:
    """A method body reduced to its fluent-chain statements.

    Attributes:
        name: Method name.
        owner: Name of the class declaring the method.
        line: 1-based line of the definition.
        end_line: 1-based last line of the definition.
        statements: Outermost call of each chain statement, in program order.
    """

    name: str
    owner: str
    line: int | None = None
    end_line: int | None = None
    statements: list[CallNode] = field(default_factory=list)


@dataclass
class RouteClass:
    """A class declaration as seen by the route builders.

    Attributes:
        name: Class name.
        file_path: File the class was parsed from.
        methods: Methods declared directly on the class.
        nested: Classes declared anywhere inside this one (in method
            bodies or the class body), flattened in source order.
    """

    name: str
    file_path: str
    methods: list[RouteMethod] = field(default_factory=list)
    nested: list[RouteClass] = field(default_factory=list)

    def find_method(self, name: str) -> RouteMethod | None:
        """Return the first method with the given name, or None."""
        for method in self.methods:
            if method.name == name:
                return method
        return None


@runtime_checkable
class SourceParser(Protocol):
    """Protocol for source parsers feeding the Source Route Tree Builder."""

    def can_parse(self, file_path: Path) -> bool:
        """Check if this parser handles the given file."""
        ...

    def parse_file(self, file_path: Path) -> list[RouteClass]:
        """Parse a file into its top-level class declarations.

        Raises:
            SyntaxError: If the file is not valid source.
            OSError: If the file cannot be read.
        """
        ...
