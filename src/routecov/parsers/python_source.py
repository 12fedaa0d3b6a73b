"""Python route-builder source parser.

Reduces Python modules to the source-parser boundary types using the
standard library ``ast`` module. Only expression statements whose value
is a call chain are kept; everything else in a method body (assignments,
control flow, docstrings) is ignored.
"""

from __future__ import annotations

import ast
from pathlib import Path

from routecov.parsers import CallNode, RouteClass, RouteMethod

MODULE_CLASS_NAME = "<module>"


class PythonRouteParser:
    """Parser for Python files declaring route-builder classes.

    A route-builder class is any class with a ``configure`` method; the
    parser itself does not decide that and reports every class, leaving
    entry-method lookup to the builder.
    """

    def can_parse(self, file_path: Path) -> bool:
        """Check if this parser can handle the given file.

        Args:
            file_path: Path to the file.

        Returns:
            True for ``.py`` files.
        """
        return file_path.suffix.lower() == ".py"

    def parse_file(self, file_path: Path) -> list[RouteClass]:
        """Read and parse a Python file.

        Args:
            file_path: Path to the source file.

        Returns:
            Top-level classes of the module, in source order.

        Raises:
            SyntaxError: If the file is not valid Python.
            OSError: If the file cannot be read.
        """
        with open(file_path, encoding="utf-8") as fh:
            content = fh.read()
        return self.parse(content, str(file_path))

    def parse(self, content: str, source_path: str) -> list[RouteClass]:
        """Parse Python source text.

        Classes declared inside top-level functions are collected under
        a synthetic ``<module>`` class so they can still be found as
        nested route definitions.

        Args:
            content: Python source text.
            source_path: Path recorded on the resulting classes.

        Returns:
            Top-level classes of the module, in source order.
        """
        tree = ast.parse(content, filename=source_path)

        classes: list[RouteClass] = []
        loose: list[RouteClass] = []
        for stmt in tree.body:
            if isinstance(stmt, ast.ClassDef):
                classes.append(self._build_class(stmt, source_path, with_nested=True))
            elif isinstance(stmt, (ast.FunctionDef, ast.AsyncFunctionDef)):
                loose.extend(self._collect_nested(stmt, source_path))

        if loose:
            classes.append(RouteClass(name=MODULE_CLASS_NAME, file_path=source_path, nested=loose))
        return classes

    def _build_class(self, node: ast.ClassDef, source_path: str, with_nested: bool) -> RouteClass:
        methods = [
            self._build_method(stmt, node.name)
            for stmt in node.body
            if isinstance(stmt, (ast.FunctionDef, ast.AsyncFunctionDef))
        ]
        nested = self._collect_nested(node, source_path) if with_nested else []
        return RouteClass(name=node.name, file_path=source_path, methods=methods, nested=nested)

    def _collect_nested(self, node: ast.AST, source_path: str) -> list[RouteClass]:
        """Flatten every class declared inside ``node``, in source order."""
        found = [
            child
            for child in ast.walk(node)
            if isinstance(child, ast.ClassDef) and child is not node
        ]
        found.sort(key=lambda c: (c.lineno, c.col_offset))
        return [self._build_class(c, source_path, with_nested=False) for c in found]

    def _build_method(self, node: ast.FunctionDef | ast.AsyncFunctionDef, owner: str) -> RouteMethod:
        statements: list[CallNode] = []
        for stmt in node.body:
            if isinstance(stmt, ast.Expr) and isinstance(stmt.value, ast.Call):
                call = self._build_chain(stmt.value)
                if call is not None:
                    statements.append(call)
        return RouteMethod(
            name=node.name,
            owner=owner,
            line=node.lineno,
            end_line=node.end_lineno,
            statements=statements,
        )

    def _build_chain(self, call: ast.Call) -> CallNode | None:
        """Convert a call expression into a CallNode linked to its receivers."""
        func = call.func
        receiver: CallNode | None = None
        if isinstance(func, ast.Attribute):
            name = func.attr
            line = func.end_lineno
            if isinstance(func.value, ast.Call):
                receiver = self._build_chain(func.value)
        elif isinstance(func, ast.Name):
            name = func.id
            line = call.lineno
        else:
            return None

        return CallNode(
            name=name,
            line=line,
            end_line=call.end_lineno,
            argument=_display_argument(call),
            block=self._block_argument(call),
            receiver=receiver,
        )

    def _block_argument(self, call: ast.Call) -> CallNode | None:
        """Return the chain inside the first ``lambda x: x.a().b()`` argument."""
        args = list(call.args) + [kw.value for kw in call.keywords]
        for arg in args:
            if isinstance(arg, ast.Lambda) and isinstance(arg.body, ast.Call):
                return self._build_chain(arg.body)
        return None


def _display_argument(call: ast.Call) -> str | None:
    if not call.args:
        return None
    first = call.args[0]
    if isinstance(first, ast.Lambda):
        return None
    if isinstance(first, ast.Constant):
        return str(first.value)
    return ast.unparse(first)
