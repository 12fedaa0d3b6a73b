"""
routecov.commands.tree - Show the route trees defined in files.

Prints the numbered step tree of every route found in the given Python
or XML files, the same rendering the coverage report uses.
"""

from __future__ import annotations

import argparse
import json
import sys
import xml.etree.ElementTree as ET
from pathlib import Path

from routecov.parsers.python_source import PythonRouteParser
from routecov.tree.RouteNode import RouteNode
from routecov.tree.source_builder import build_route_trees
from routecov.tree.xml_builder import build_xml_route_trees


def run(args: argparse.Namespace) -> int:
    """Run the tree command."""
    include_nested = not getattr(args, "no_nested", False)
    indent = " " * getattr(args, "indent", 2)
    base_dir = Path.cwd()
    parser = PythonRouteParser()

    failed = False
    routes: list[RouteNode] = []
    for file_arg in args.files:
        path = Path(file_arg)
        try:
            if path.suffix.lower() == ".xml":
                routes.extend(build_xml_route_trees(path, base_dir))
            else:
                for route_class in parser.parse_file(path):
                    routes.extend(build_route_trees(route_class, include_nested))
        except (SyntaxError, UnicodeDecodeError, ET.ParseError, OSError) as e:
            print(f"Warning: Error parsing file {path}: {e}", file=sys.stderr)
            failed = True

    if getattr(args, "json", False):
        print(json.dumps([r.to_dict() for r in routes], indent=2))
    else:
        for route in routes:
            route_id = route.route_id or "<anonymous>"
            print(f"Route {route_id} discovered in file {route.file_path}")
            print(route.dump(indent))
            print()
        if not routes and not failed:
            print("No routes found.")

    return 1 if failed else 0
