"""
Build system components for cscbuild.

This module provides the build system implementation including:
- Reference resolution (file, embedded and nested project references)
- Compiler command construction and execution (csc)
- Scratch workspace management
- Build orchestration (ProjectBuilder)
"""

from .command_builder import CompilerCommand, CscCommandBuilder
from .compilation_executor import CompilationExecutor, CompileOutcome, CompilerError
from .project import Project, SourceFileReference
from .project_builder import ProjectBuilder
from .reference_resolver import (
    CyclicReferenceError,
    NestedBuildError,
    ReferenceMaterializationError,
    ReferenceResolver,
    ResolvedReference,
)
from .references import (
    EmbeddedReference,
    FileReference,
    IBuildUnit,
    LibraryExport,
    NestedBuildReference,
    Reference,
)
from .result import BuildResult
from .transport import ArtifactError, copy_artifact
from .workspace import ScratchWorkspace, WorkspaceError

__all__ = [
    'ArtifactError',
    'BuildResult',
    'CompilationExecutor',
    'CompileOutcome',
    'CompilerCommand',
    'CompilerError',
    'CscCommandBuilder',
    'CyclicReferenceError',
    'EmbeddedReference',
    'FileReference',
    'IBuildUnit',
    'LibraryExport',
    'NestedBuildError',
    'NestedBuildReference',
    'Project',
    'ProjectBuilder',
    'Reference',
    'ReferenceMaterializationError',
    'ReferenceResolver',
    'ResolvedReference',
    'ScratchWorkspace',
    'SourceFileReference',
    'WorkspaceError',
    'copy_artifact',
]
