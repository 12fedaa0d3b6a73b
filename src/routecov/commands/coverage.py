"""
routecov.commands.coverage - Route coverage report command.

Discovers every route in the project, correlates each route id with the
runtime dumps, and reports per-step execution counts. With
``--fail-on-error`` any route that is not fully covered fails the run.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from routecov.catalog import StepCatalog
from routecov.config import (
    CoverageConfig,
    ProjectConfig,
    find_config_file,
    get_config,
    validate_config,
)
from routecov.coverage.dump import (
    RouteCoverage,
    find_dump_route_ids,
    list_dump_files,
    parse_dump_coverage,
)
from routecov.coverage.metrics import RouteReport, compare_route
from routecov.discovery import RouteScanResult, scan_routes


def load_configuration(args: argparse.Namespace) -> tuple[dict[str, Any], Path] | None:
    """Load configuration and resolve the project base directory.

    The base directory is ``--base-dir`` when given, otherwise the
    directory holding the configuration file, otherwise the working
    directory.

    Returns:
        (config, base_dir), or None if the configuration is unreadable or invalid.
    """
    base_dir_arg = getattr(args, "base_dir", None)
    config_path = getattr(args, "config", None)
    start = Path(base_dir_arg) if base_dir_arg else Path.cwd()

    if config_path is None:
        config_path = find_config_file(start)

    try:
        config = get_config(config_path, start_path=start)
    except Exception as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return None

    errors = validate_config(config)
    if errors:
        for error in errors:
            print(f"Error loading config: {error}", file=sys.stderr)
        return None

    if base_dir_arg:
        base_dir = Path(base_dir_arg)
    elif config_path is not None:
        base_dir = Path(config_path).parent
    else:
        base_dir = Path.cwd()
    return config, base_dir.resolve()


def resolve_options(args: argparse.Namespace, config: dict[str, Any]) -> CoverageConfig:
    """Overlay command line flags on the [coverage] config section."""
    options = CoverageConfig.from_dict(config.get("coverage", {}))

    includes = getattr(args, "includes", None)
    if includes is not None:
        options.includes = CoverageConfig.from_dict({"includes": includes}).includes
    excludes = getattr(args, "excludes", None)
    if excludes is not None:
        options.excludes = CoverageConfig.from_dict({"excludes": excludes}).excludes
    if getattr(args, "fail_on_error", False):
        options.fail_on_error = True
    if getattr(args, "include_test", False):
        options.include_test = True
    if getattr(args, "no_nested", False):
        options.include_nested = False
    dump_dir = getattr(args, "dump_dir", None)
    if dump_dir:
        options.dump_dir = str(dump_dir)
    return options


def run(args: argparse.Namespace) -> int:
    """
    Run the coverage command.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 for success, 1 when a route is not fully covered and
        fail-on-error is enabled, or on configuration errors)
    """
    loaded = load_configuration(args)
    if loaded is None:
        return 1
    config, base_dir = loaded

    quiet = getattr(args, "quiet", False)
    as_json = getattr(args, "json", False)

    project = ProjectConfig.from_dict(config.get("project", {}), base_dir)
    options = resolve_options(args, config)
    catalog = StepCatalog.from_dict(config.get("catalog", {}))
    dump_dir = base_dir / options.dump_dir

    scan = scan_routes(project, options, catalog)
    for warning in scan.warnings:
        print(f"Warning: {warning}", file=sys.stderr)

    reports = correlate_routes(scan, dump_dir, catalog)
    unmatched = unmatched_dump_routes(scan, dump_dir)
    not_covered = sum(1 for r in reports if not r.fully_covered)

    if as_json:
        print(json.dumps(_to_json(scan, reports, dump_dir, unmatched), indent=2))
    elif not quiet:
        _print_report(scan, reports, dump_dir, unmatched)

    if options.fail_on_error and not_covered > 0:
        print(
            f"Error: Some routes are not fully covered ({not_covered} of {len(reports)})",
            file=sys.stderr,
        )
        return 1
    return 0


def correlate_routes(
    scan: RouteScanResult,
    dump_dir: Path,
    catalog: StepCatalog,
) -> list[RouteReport]:
    """Build a RouteReport for every route that has a route id.

    Dumps are aggregated once per route id even when several trees
    share it.
    """
    by_route_id: dict[str, RouteCoverage] = {}
    reports: list[RouteReport] = []
    for root in scan.identified:
        route_id = root.route_id
        if route_id not in by_route_id:
            by_route_id[route_id] = parse_dump_coverage(dump_dir, route_id, catalog)
        reports.append(compare_route(root, by_route_id[route_id], catalog))
    return reports


def unmatched_dump_routes(scan: RouteScanResult, dump_dir: Path) -> list[str]:
    """Route ids present in the dumps that no discovered route declares."""
    known = {r.route_id for r in scan.identified}
    return [route_id for route_id in find_dump_route_ids(dump_dir) if route_id not in known]


def _print_report(
    scan: RouteScanResult,
    reports: list[RouteReport],
    dump_dir: Path,
    unmatched: list[str],
) -> None:
    print(f"Discovered {len(scan.routes)} routes in {scan.files_scanned} files")

    anonymous = len(scan.anonymous)
    if anonymous > 0:
        print(
            f"Warning: Discovered {anonymous} anonymous routes. "
            "Add route ids to these routes for route coverage support",
            file=sys.stderr,
        )

    if reports and not list_dump_files(dump_dir):
        print(f"Warning: No route coverage dumps found in {dump_dir}", file=sys.stderr)

    for route_id in unmatched:
        print(
            f"Warning: Dumps contain route {route_id} but no route with that id was discovered",
            file=sys.stderr,
        )

    # trees sharing a route id share one RouteCoverage
    reported: set[str] = set()
    for report in reports:
        print()
        print(f"Route {report.route_id} discovered in file {report.root.file_path}")
        print(report.dump())
        status = "✓" if report.fully_covered else "✗"
        print(
            f"{status} {report.covered}/{report.total} steps covered "
            f"({report.coverage_pct:.1f}%)"
        )
        if not report.fully_covered:
            names = ", ".join(f"{n.name}#{n.order}" for n in report.uncovered)
            print(f"  Not covered: {names}")
        for mismatch in report.coverage.mismatches:
            message = f"Warning: {mismatch}"
            if message not in reported:
                reported.add(message)
                print(message, file=sys.stderr)
        for mismatch in report.name_mismatches:
            print(f"Warning: Route {report.route_id} {mismatch}", file=sys.stderr)
        if not report.reliable:
            print("  Coverage numbers for this route are unreliable")
        for error in report.coverage.errors:
            message = f"Warning: Error reading dump {error}"
            if message not in reported:
                reported.add(message)
                print(message, file=sys.stderr)

    if reports:
        print("─" * 60)
        covered = sum(1 for r in reports if r.fully_covered)
        print(f"{covered}/{len(reports)} routes fully covered")


def _to_json(
    scan: RouteScanResult,
    reports: list[RouteReport],
    dump_dir: Path,
    unmatched: list[str],
) -> dict[str, Any]:
    return {
        "dump_dir": str(dump_dir),
        "files_scanned": scan.files_scanned,
        "routes_discovered": len(scan.routes),
        "anonymous_routes": len(scan.anonymous),
        "warnings": list(scan.warnings),
        "unmatched_dump_routes": unmatched,
        "fully_covered": sum(1 for r in reports if r.fully_covered),
        "routes": [r.to_dict() for r in reports],
    }
