"""Shared pytest fixtures for routecov tests."""

import shutil
from pathlib import Path

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def fixtures_dir():
    """Path to the static fixture files."""
    return FIXTURES_DIR


@pytest.fixture
def catalog():
    """The bundled step catalog."""
    from routecov.catalog import StepCatalog

    return StepCatalog()


@pytest.fixture
def python_parser():
    """A Python route-builder parser."""
    from routecov.parsers.python_source import PythonRouteParser

    return PythonRouteParser()


@pytest.fixture
def parse_classes(python_parser):
    """Parse Python source text into RouteClasses."""

    def _parse(content: str, path: str = "routes.py"):
        return python_parser.parse(content, path)

    return _parse


@pytest.fixture
def sample_project(tmp_path):
    """A project laid out with the default configuration.

    - src/order_routes.py: one Python route ("orders")
    - resources/billing.xml: one identified ("billing") and one anonymous route
    - target/route-coverage/: two dump documents
    """
    (tmp_path / "src").mkdir()
    (tmp_path / "resources").mkdir()
    dump_dir = tmp_path / "target" / "route-coverage"
    dump_dir.mkdir(parents=True)

    shutil.copy(FIXTURES_DIR / "routes" / "order_routes.py", tmp_path / "src" / "order_routes.py")
    shutil.copy(FIXTURES_DIR / "routes" / "billing.xml", tmp_path / "resources" / "billing.xml")
    for dump in (FIXTURES_DIR / "dumps").glob("*.xml"):
        shutil.copy(dump, dump_dir / dump.name)

    return tmp_path


@pytest.fixture
def write_dump(tmp_path):
    """Write a dump document into tmp_path/dumps and return its path."""
    dump_dir = tmp_path / "dumps"
    dump_dir.mkdir(exist_ok=True)

    def _write(name: str, content: str) -> Path:
        path = dump_dir / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write
