"""
cscbuild.ini project descriptor parser.

This module parses a project's cscbuild.ini and turns it into the objects
the build invoker consumes: a Project, its LibraryExport and a
ProjectBuilder.

Example cscbuild.ini:
    [project]
    name = App
    sources =
        src/*.cs
        generated/*.cs

    [references]
    files = lib/Newtonsoft.Json.dll
    projects = ../Core

    [embedded]
    Contracts = blobs/contracts.bin

    [compiler]
    path = /usr/bin/csc
    timeout = 600
"""

import configparser
import logging
from pathlib import Path
from typing import Dict, List, Optional

from ..build.compilation_executor import CompilationExecutor
from ..build.project import Project
from ..build.project_builder import ProjectBuilder
from ..build.references import (
    EmbeddedReference,
    FileReference,
    LibraryExport,
    NestedBuildReference,
)
from .toolchain import CompilerConfig, CompilerLocator


CONFIG_FILE_NAME = "cscbuild.ini"
DEFAULT_SOURCE_PATTERNS = ["**/*.cs"]


class ProjectConfigError(Exception):
    """Exception raised for cscbuild.ini configuration errors."""

    pass


def split_values(value: Optional[str]) -> List[str]:
    """Split a multi-line or whitespace separated ini value."""
    if not value:
        return []
    return value.split()


class ProjectConfig:
    """
    Parser for cscbuild.ini files.

    Usage:
        config = ProjectConfig(Path("App/cscbuild.ini"))
        print(config.name, config.get_source_files())
    """

    def __init__(self, ini_path: Path):
        """
        Initialize the parser with a cscbuild.ini file.

        Args:
            ini_path: Path to the cscbuild.ini file

        Raises:
            ProjectConfigError: If the file doesn't exist or cannot be parsed
        """
        self.ini_path = Path(ini_path)
        self.project_dir = self.ini_path.parent

        if not self.ini_path.exists():
            raise ProjectConfigError(f"Configuration file not found: {self.ini_path}")

        self.config = configparser.ConfigParser(
            allow_no_value=True, interpolation=configparser.ExtendedInterpolation()
        )
        # Keep embedded reference names as written.
        self.config.optionxform = str

        try:
            self.config.read(self.ini_path, encoding="utf-8")
        except configparser.Error as e:
            raise ProjectConfigError(f"Failed to parse {self.ini_path}: {e}") from e

    def _get(self, section: str, key: str) -> Optional[str]:
        if not self.config.has_section(section):
            return None
        try:
            return self.config.get(section, key, fallback=None)
        except configparser.Error as e:
            raise ProjectConfigError(f"Invalid value for [{section}] {key}: {e}") from e

    def _resolve(self, value: str) -> Path:
        return (self.project_dir / value).resolve()

    @property
    def name(self) -> str:
        """Project name, defaulting to the project directory name."""
        return (self._get("project", "name") or "").strip() or self.project_dir.resolve().name

    def get_source_files(self) -> List[Path]:
        """
        Expand the source patterns into an ordered list of files.

        Patterns are expanded in declaration order, matches sorted within a
        pattern, and duplicates dropped.

        Raises:
            ProjectConfigError: If no source file matches
        """
        patterns = split_values(self._get("project", "sources")) or DEFAULT_SOURCE_PATTERNS

        sources: List[Path] = []
        seen = set()
        for pattern in patterns:
            matches = sorted(p.resolve() for p in self.project_dir.glob(pattern) if p.is_file())
            if not matches and not any(ch in pattern for ch in "*?["):
                raise ProjectConfigError(f"Source file not found: {self.project_dir / pattern}")
            for match in matches:
                if match not in seen:
                    seen.add(match)
                    sources.append(match)

        if not sources:
            raise ProjectConfigError(
                f"No source files in {self.project_dir} match: {', '.join(patterns)}"
            )
        return sources

    def get_file_references(self) -> List[FileReference]:
        references = []
        for value in split_values(self._get("references", "files")):
            path = self._resolve(value)
            if not path.exists():
                raise ProjectConfigError(f"Referenced assembly not found: {path}")
            references.append(FileReference(path.stem, path))
        return references

    def get_embedded_references(self) -> List[EmbeddedReference]:
        if not self.config.has_section("embedded"):
            return []

        references = []
        for name, value in self.config.items("embedded"):
            if not value:
                raise ProjectConfigError(f"Embedded reference '{name}' has no file")
            path = self._resolve(value.strip())
            try:
                contents = path.read_bytes()
            except OSError as e:
                raise ProjectConfigError(f"Failed to read embedded reference '{name}': {e}") from e
            references.append(EmbeddedReference(name, contents))
        return references

    def get_project_dirs(self) -> List[Path]:
        return [self._resolve(value) for value in split_values(self._get("references", "projects"))]

    def get_compiler_path(self) -> Optional[Path]:
        value = self._get("compiler", "path")
        return self._resolve(value.strip()) if value else None

    def get_compiler_timeout(self) -> Optional[float]:
        value = self._get("compiler", "timeout")
        if not value:
            return None
        try:
            timeout = float(value)
        except ValueError as e:
            raise ProjectConfigError(f"Invalid compiler timeout: {value}") from e
        if timeout <= 0:
            raise ProjectConfigError(f"Compiler timeout must be positive: {value}")
        return timeout


class ProjectLoader:
    """
    Loads a project directory and its referenced projects into builders.

    Each directory is loaded once; a project referenced from several places
    shares one builder. Loading a cyclic project graph terminates, and the
    cycle is reported when building.

    Usage:
        loader = ProjectLoader(compiler_path=Path("/usr/bin/csc"))
        builder = loader.load(Path("App"))
        builder.emit_assembly(Path("App/bin"))
    """

    def __init__(
        self,
        compiler_path: Optional[Path] = None,
        locator: Optional[CompilerLocator] = None,
        temp_root: Optional[Path] = None
    ):
        """
        Args:
            compiler_path: Explicit compiler path (overrides discovery)
            locator: Compiler locator (defaults to CompilerLocator())
            temp_root: Parent of scratch build directories
        """
        self.compiler_path = compiler_path
        self.locator = locator or CompilerLocator()
        self.temp_root = temp_root
        self._builders: Dict[Path, ProjectBuilder] = {}

    def compiler_config(self, config: ProjectConfig) -> CompilerConfig:
        csc_path = self.locator.locate(
            explicit=self.compiler_path,
            configured=config.get_compiler_path(),
        )
        return CompilerConfig(csc_path=csc_path, timeout=config.get_compiler_timeout())

    def load(self, project_dir: Path) -> ProjectBuilder:
        """
        Load the project in `project_dir` and everything it references.

        Raises:
            ProjectConfigError: If a cscbuild.ini is missing or invalid
            CompilerNotFoundError: If no compiler can be located
        """
        project_dir = Path(project_dir).resolve()
        if project_dir in self._builders:
            return self._builders[project_dir]

        config = ProjectConfig(project_dir / CONFIG_FILE_NAME)
        project = Project(
            name=config.name,
            root=project_dir,
            source_files=config.get_source_files(),
            project_file_path=config.ini_path,
        )
        compiler = self.compiler_config(config)
        export = LibraryExport()
        builder = ProjectBuilder(
            project,
            export,
            compiler_path=compiler.csc_path,
            executor=CompilationExecutor(timeout=compiler.timeout),
            temp_root=self.temp_root,
        )
        # Register before following references so cycles end here.
        self._builders[project_dir] = builder
        logging.debug(f"Loaded project {project.name} from {project_dir}")

        for reference in config.get_file_references():
            export.add(reference)
        for reference in config.get_embedded_references():
            export.add(reference)
        for nested_dir in config.get_project_dirs():
            nested = self.load(nested_dir)
            export.add(NestedBuildReference(nested.name, nested))

        return builder
