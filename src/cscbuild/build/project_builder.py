"""
Project build invocation.

ProjectBuilder compiles one project into a library assembly with csc. It
exposes four operations that all funnel into `emit`:

- emit_assembly: build into a directory, keeping .dll, .pdb and .xml
- emit_assembly_to_streams: build in temp space, copy .dll/.pdb to streams
- emit_reference_stub: debug-free build copied to a stream, used when
  another project references this one
- get_diagnostics: build and throw the artifacts away

Example usage:
    builder = ProjectBuilder(project, export, compiler_path=Path("/usr/bin/csc"))
    result = builder.emit_assembly(Path("bin"))
    if not result.success:
        print(result.errors)
"""

import logging
import tempfile
import threading
from pathlib import Path
from typing import BinaryIO, List, Optional

from .command_builder import CscCommandBuilder
from .compilation_executor import CompilationExecutor
from .project import Project, SourceFileReference
from .reference_resolver import CyclicReferenceError, NestedBuildError, ReferenceResolver
from .references import IBuildUnit, LibraryExport
from .result import COMPILATION_FAILED, BuildResult
from .transport import ArtifactError, copy_artifact
from .workspace import ScratchWorkspace, unique_scratch_dir


DYNAMIC_ASSEMBLIES_DIR = "dynamic-assemblies"

# emit_assembly_to_streams shares one fixed output directory per process.
_dynamic_assemblies_lock = threading.RLock()


class ProjectBuilder(IBuildUnit):
    """Builds a project's sources and references into an assembly."""

    def __init__(
        self,
        project: Project,
        export: LibraryExport,
        compiler_path: Path,
        executor: Optional[CompilationExecutor] = None,
        temp_root: Optional[Path] = None
    ):
        """
        Args:
            project: Project to build
            export: References the project compiles against
            compiler_path: Path to the csc executable
            executor: Runs the compiler (defaults to no timeout)
            temp_root: Parent of scratch build directories (defaults to the
                system temp directory)
        """
        self.project = project
        self.export = export
        self.compiler_path = Path(compiler_path)
        self.executor = executor or CompilationExecutor()
        self.temp_root = Path(temp_root) if temp_root is not None else Path(tempfile.gettempdir())

    @property
    def name(self) -> str:
        return self.project.name

    @property
    def project_path(self) -> Optional[Path]:
        return self.project.project_file_path

    def emit_assembly(self, output_path: Path) -> BuildResult:
        """Build into `output_path` with debug symbols and documentation."""
        return self.emit(output_path, emit_pdb=True, emit_doc_file=True)

    def emit_assembly_to_streams(
        self,
        assembly_stream: BinaryIO,
        pdb_stream: BinaryIO
    ) -> BuildResult:
        """Build in temp space and copy the assembly and pdb to streams.

        The streams are left untouched when the build fails.
        """
        output_dir = self.temp_root / DYNAMIC_ASSEMBLIES_DIR

        with _dynamic_assemblies_lock:
            result = self.emit(output_dir, emit_pdb=True, emit_doc_file=False)

            if not result.success:
                return result

            builder = CscCommandBuilder(self.compiler_path, self.name, output_dir)
            missing = [p for p in (builder.assembly_path, builder.pdb_path) if not p.is_file()]
            if missing:
                raise ArtifactError(f"Compiler did not produce: {', '.join(map(str, missing))}")

            copy_artifact(builder.assembly_path, assembly_stream)
            copy_artifact(builder.pdb_path, pdb_stream)

        return result

    def emit_reference_stub(
        self,
        stream: BinaryIO,
        in_progress: tuple = ()
    ) -> BuildResult:
        """Build a minimal assembly for other projects to reference."""
        output_dir = unique_scratch_dir("reference-assembly", self.temp_root)

        with ScratchWorkspace(output_dir):
            result = self.emit(output_dir, emit_pdb=False, emit_doc_file=False, in_progress=in_progress)

            if result.success:
                copy_artifact(output_dir / f"{self.name}.dll", stream)

        return result

    def get_diagnostics(self) -> BuildResult:
        """Compile to a throwaway location and report the outcome only."""
        output_dir = unique_scratch_dir("diagnostics", self.temp_root)

        with ScratchWorkspace(output_dir):
            return self.emit(output_dir, emit_pdb=False, emit_doc_file=False)

    def get_sources(self) -> List[SourceFileReference]:
        return [SourceFileReference(path) for path in self.project.source_files]

    def emit(
        self,
        output_path: Path,
        emit_pdb: bool,
        emit_doc_file: bool,
        in_progress: tuple = ()
    ) -> BuildResult:
        """Compile the project into `<output_path>/<name>.dll`.

        Args:
            output_path: Directory receiving the artifacts
            emit_pdb: Also write `<name>.pdb`
            emit_doc_file: Also write `<name>.xml`
            in_progress: Names of build units that are building this one

        Returns:
            BuildResult; compile failures are reported here, not raised

        Raises:
            CyclicReferenceError: If this project is already in `in_progress`
            ReferenceMaterializationError: If a reference cannot be written
            WorkspaceError: If scratch space cannot be created or removed
            CompilerError: If the compiler cannot be launched
        """
        output_path = Path(output_path)
        chain = tuple(in_progress) + (self.name,)
        if self.name in in_progress:
            raise CyclicReferenceError(chain)

        command_builder = CscCommandBuilder(self.compiler_path, self.name, output_path)
        workspace = ScratchWorkspace(output_path / self.name / "obj", prune_up_to=output_path)

        with workspace:
            resolver = ReferenceResolver(workspace, self.name, chain)
            try:
                references = resolver.resolve(self.export.metadata_references)
            except NestedBuildError as e:
                logging.error(f"{self.name}: {e}")
                return BuildResult.failed(str(e), *e.result.errors)

            command = command_builder.build(
                self.project.source_files,
                references,
                emit_pdb=emit_pdb,
                emit_doc_file=emit_doc_file,
            )
            outcome = self.executor.execute(command)

            if outcome.timed_out:
                return BuildResult.failed(f"Compilation timed out after {self.executor.timeout}s")
            if not outcome.success:
                # TODO: parse csc diagnostics from stdout into warnings/errors
                return BuildResult.failed(COMPILATION_FAILED)

            workspace.discard_temp_files()

        logging.info(f"Built {command_builder.assembly_path}")
        return BuildResult.succeeded()
