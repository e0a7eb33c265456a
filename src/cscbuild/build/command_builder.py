"""Compiler Command Builder.

This module builds the csc command line for a library build.

Design:
    - Arguments are kept as an argv list for subprocess (no shell involved)
    - The same arguments render to the classic quoted csc command line
      for logging
    - Flag order: /out, /target, /noconfig, /nostdlib, [/debug /pdb],
      [/doc], sources, references
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List

from .reference_resolver import ResolvedReference


BARE_FLAGS = frozenset({"/target:library", "/noconfig", "/nostdlib", "/debug"})
QUOTED_PREFIXES = ("/out:", "/pdb:", "/doc:", "/r:")


def quote(value: str) -> str:
    return f'"{value}"'


@dataclass
class CompilerCommand:
    """A compiler invocation: executable plus ordered arguments."""

    compiler_path: Path
    arguments: List[str] = field(default_factory=list)

    @property
    def argv(self) -> List[str]:
        return [str(self.compiler_path)] + self.arguments

    def render_arguments(self) -> str:
        """Render arguments as a csc command line with quoted paths.

        Example:
            /out:"bin/A.dll" /target:library /noconfig /nostdlib "src/A.cs"
        """
        rendered = []
        for arg in self.arguments:
            if arg in BARE_FLAGS:
                rendered.append(arg)
                continue
            prefix = next((p for p in QUOTED_PREFIXES if arg.startswith(p)), None)
            if prefix is not None:
                rendered.append(prefix + quote(arg[len(prefix):]))
            else:
                rendered.append(quote(arg))
        return " ".join(rendered)

    def __str__(self) -> str:
        return f"{self.compiler_path} {self.render_arguments()}"


class CscCommandBuilder:
    """Builds csc arguments for a single project build."""

    def __init__(self, compiler_path: Path, project_name: str, output_path: Path):
        """
        Args:
            compiler_path: Path to the csc executable
            project_name: Assembly name; artifacts are named after it
            output_path: Directory receiving the .dll/.pdb/.xml
        """
        self.compiler_path = Path(compiler_path)
        self.project_name = project_name
        self.output_path = Path(output_path)

    @property
    def assembly_path(self) -> Path:
        return self.output_path / f"{self.project_name}.dll"

    @property
    def pdb_path(self) -> Path:
        return self.output_path / f"{self.project_name}.pdb"

    @property
    def doc_path(self) -> Path:
        return self.output_path / f"{self.project_name}.xml"

    def build(
        self,
        source_files: Iterable[Path],
        references: Iterable[ResolvedReference],
        emit_pdb: bool = False,
        emit_doc_file: bool = False
    ) -> CompilerCommand:
        """Build the full command.

        Args:
            source_files: Project source files, in project order
            references: Resolved references, in resolution order
            emit_pdb: Generate debug symbols next to the assembly
            emit_doc_file: Generate the XML documentation file

        Returns:
            CompilerCommand ready to execute
        """
        args = [
            f"/out:{self.assembly_path}",
            "/target:library",
            "/noconfig",
            "/nostdlib",
        ]

        if emit_pdb:
            args.append("/debug")
            args.append(f"/pdb:{self.pdb_path}")

        if emit_doc_file:
            args.append(f"/doc:{self.doc_path}")

        args.extend(str(source) for source in source_files)
        args.extend(ref.argument for ref in references)

        return CompilerCommand(self.compiler_path, args)
