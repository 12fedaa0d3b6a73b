"""
routecov.config.project - Typed views over the configuration sections.

Provides ProjectConfig (where sources and resources live) and
CoverageConfig (how a coverage run behaves).
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List


def _split_patterns(value: Any) -> List[str]:
    """Accept a comma-separated string or a list of patterns."""
    if not value:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return [p.strip() for p in value if p and p.strip()]


@dataclass
class ProjectConfig:
    """
    Project descriptor: source and resource roots relative to the base dir.

    Attributes:
        base_dir: Project base directory
        source_dirs: Directories holding route-builder sources
        resource_dirs: Directories holding XML route documents
        test_source_dirs: Test-scoped source directories
        test_resource_dirs: Test-scoped resource directories
    """

    base_dir: Path = field(default_factory=Path.cwd)
    source_dirs: List[str] = field(default_factory=list)
    resource_dirs: List[str] = field(default_factory=list)
    test_source_dirs: List[str] = field(default_factory=list)
    test_resource_dirs: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict, base_dir: Path) -> "ProjectConfig":
        """
        Create ProjectConfig from the [project] config section.

        Args:
            data: Dictionary from [project] config section
            base_dir: Directory the configured paths are relative to

        Returns:
            ProjectConfig instance
        """
        return cls(
            base_dir=base_dir,
            source_dirs=list(data.get("source_dirs", [])),
            resource_dirs=list(data.get("resource_dirs", [])),
            test_source_dirs=list(data.get("test_source_dirs", [])),
            test_resource_dirs=list(data.get("test_resource_dirs", [])),
        )

    def source_roots(self, include_test: bool) -> List[Path]:
        """Absolute source roots, test roots last when included."""
        dirs = self.source_dirs + (self.test_source_dirs if include_test else [])
        return [self.base_dir / d for d in dirs]

    def resource_roots(self, include_test: bool) -> List[Path]:
        """Absolute resource roots, test roots last when included."""
        dirs = self.resource_dirs + (self.test_resource_dirs if include_test else [])
        return [self.base_dir / d for d in dirs]

    def known_roots(self) -> List[Path]:
        """Every configured root, used to strip prefixes when matching."""
        dirs = self.source_dirs + self.test_source_dirs + self.resource_dirs + self.test_resource_dirs
        return [self.base_dir / d for d in dirs]


@dataclass
class CoverageConfig:
    """
    Options of a coverage run.

    Attributes:
        dump_dir: Directory with runtime dump documents (relative to base dir)
        includes: File name patterns to include (glob or regex)
        excludes: File name patterns to exclude; exclusion wins
        fail_on_error: Fail when a route is not fully covered
        include_test: Also scan test-scoped sources and resources
        include_nested: Also parse route classes nested in other classes
    """

    dump_dir: str = "target/route-coverage"
    includes: List[str] = field(default_factory=list)
    excludes: List[str] = field(default_factory=list)
    fail_on_error: bool = False
    include_test: bool = False
    include_nested: bool = True

    @classmethod
    def from_dict(cls, data: dict) -> "CoverageConfig":
        """
        Create CoverageConfig from the [coverage] config section.

        Args:
            data: Dictionary from [coverage] config section

        Returns:
            CoverageConfig instance with values from data or defaults
        """
        return cls(
            dump_dir=data.get("dump_dir", "target/route-coverage"),
            includes=_split_patterns(data.get("includes")),
            excludes=_split_patterns(data.get("excludes")),
            fail_on_error=bool(data.get("fail_on_error", False)),
            include_test=bool(data.get("include_test", False)),
            include_nested=bool(data.get("include_nested", True)),
        )
