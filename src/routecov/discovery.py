"""
routecov.discovery - Find route definitions in a project.

Walks the configured source and resource roots, filters files through
the include/exclude patterns, and builds route trees from Python
route-builder classes and XML route documents. Per-file parse failures
are collected as warnings; they never stop the scan.
"""

from __future__ import annotations

import fnmatch
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path

from routecov.catalog import StepCatalog
from routecov.config.project import CoverageConfig, ProjectConfig
from routecov.parsers import SourceParser
from routecov.parsers.python_source import PythonRouteParser
from routecov.tree.RouteNode import RouteNode
from routecov.tree.source_builder import build_route_trees
from routecov.tree.xml_builder import build_xml_route_trees

IGNORED_DIRS = {"__pycache__", ".git", ".venv", "node_modules"}


@dataclass
class RouteScanResult:
    """
    Result of scanning a project for route definitions.

    Attributes:
        routes: Every route tree found, anonymous ones included
        files_scanned: Number of files that passed the filters
        warnings: Per-file parse failures
    """

    routes: list[RouteNode] = field(default_factory=list)
    files_scanned: int = 0
    warnings: list[str] = field(default_factory=list)

    @property
    def anonymous(self) -> list[RouteNode]:
        """Routes without a route id."""
        return [r for r in self.routes if r.route_id is None]

    @property
    def identified(self) -> list[RouteNode]:
        """Routes with a route id, the only ones coverage can use."""
        return [r for r in self.routes if r.route_id is not None]


def find_files(directory: Path, suffix: str) -> list[Path]:
    """Recursively collect files with ``suffix`` under ``directory``, sorted."""
    if not directory.is_dir():
        return []
    found = []
    for path in directory.rglob(f"*{suffix}"):
        if any(part in IGNORED_DIRS for part in path.parts):
            continue
        if path.is_file():
            found.append(path)
    return sorted(found)


def match_pattern(name: str, pattern: str) -> bool:
    """Match a name against a wildcard or regular-expression pattern.

    The pattern matches if it equals the name, matches as a glob, or
    fully matches as a regular expression. An invalid regular expression
    simply does not match.
    """
    if name == pattern:
        return True
    if fnmatch.fnmatchcase(name, pattern):
        return True
    try:
        return re.fullmatch(pattern, name) is not None
    except re.error:
        return False


def relative_name(file_path: Path, base_dir: Path, roots: list[Path]) -> str:
    """Path of a file relative to the deepest known root containing it.

    Falls back to the path relative to ``base_dir``, then to the path
    as given. Always uses forward slashes.
    """
    for root in sorted(roots, key=lambda r: len(r.parts), reverse=True):
        try:
            return file_path.relative_to(root).as_posix()
        except ValueError:
            continue
    try:
        return file_path.relative_to(base_dir).as_posix()
    except ValueError:
        return file_path.as_posix()


def match_file(
    file_path: Path,
    includes: list[str],
    excludes: list[str],
    base_dir: Path,
    roots: list[Path] | None = None,
) -> bool:
    """Decide whether a file takes part in the scan.

    Exclusion takes precedence. A pattern matches if either the file's
    path relative to a known root or its bare name matches. With
    includes configured, a file must match at least one of them.

    Args:
        file_path: Candidate file.
        includes: Include patterns.
        excludes: Exclude patterns.
        base_dir: Project base directory.
        roots: Known source/resource roots.

    Returns:
        True if the file should be scanned.
    """
    if not includes and not excludes:
        return True

    rel_name = relative_name(file_path, base_dir, roots or [])
    candidates = (rel_name, file_path.name)

    for pattern in excludes:
        if any(match_pattern(c, pattern) for c in candidates):
            return False

    if includes:
        return any(match_pattern(c, pattern) for pattern in includes for c in candidates)

    return True


def _display_path(file_path: Path, base_dir: Path) -> str:
    try:
        return file_path.relative_to(base_dir).as_posix()
    except ValueError:
        return str(file_path)


def scan_routes(
    project: ProjectConfig,
    options: CoverageConfig,
    catalog: StepCatalog | None = None,
    source_parser: SourceParser | None = None,
) -> RouteScanResult:
    """Build route trees for every matching file of a project.

    Args:
        project: Where sources and resources live.
        options: Filters and scope switches.
        catalog: Step catalog; defaults to the bundled one.
        source_parser: Parser for route-builder sources; defaults to
            the Python parser.

    Returns:
        RouteScanResult with trees and warnings.
    """
    catalog = catalog or StepCatalog()
    parser = source_parser or PythonRouteParser()
    roots = project.known_roots()
    result = RouteScanResult()

    source_files: list[Path] = []
    for root in project.source_roots(options.include_test):
        for path in find_files(root, ".py"):
            if path not in source_files:
                source_files.append(path)

    xml_files: list[Path] = []
    for root in project.resource_roots(options.include_test):
        for path in find_files(root, ".xml"):
            if path not in xml_files:
                xml_files.append(path)

    for path in source_files:
        if not parser.can_parse(path):
            continue
        if not match_file(path, options.includes, options.excludes, project.base_dir, roots):
            continue
        result.files_scanned += 1
        try:
            for route_class in parser.parse_file(path):
                trees = build_route_trees(route_class, options.include_nested, catalog)
                for tree in trees:
                    tree.source.path = _display_path(path, project.base_dir)
                result.routes.extend(trees)
        except (SyntaxError, UnicodeDecodeError, OSError) as e:
            result.warnings.append(f"Error parsing source file {path}: {e}")

    for path in xml_files:
        if not match_file(path, options.includes, options.excludes, project.base_dir, roots):
            continue
        result.files_scanned += 1
        try:
            result.routes.extend(build_xml_route_trees(path, project.base_dir))
        except (ET.ParseError, OSError) as e:
            result.warnings.append(f"Error parsing xml file {path}: {e}")

    return result
