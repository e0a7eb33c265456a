"""
Project model consumed by the build invoker.

A project is a named directory with an ordered list of C# source files.
The builder only reads it; loading happens in cscbuild.config.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional


@dataclass(frozen=True)
class SourceFileReference:
    """Opaque handle for one source file of a project."""

    path: Path


@dataclass
class Project:
    """A compilable unit: identity, root directory and ordered sources."""

    name: str
    root: Path
    source_files: List[Path] = field(default_factory=list)
    project_file_path: Optional[Path] = None

    def __post_init__(self):
        self.root = Path(self.root)
        self.source_files = [Path(p) for p in self.source_files]
        if self.project_file_path is not None:
            self.project_file_path = Path(self.project_file_path)
