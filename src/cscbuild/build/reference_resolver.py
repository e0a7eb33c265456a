"""
Reference resolution.

Turns a project's exported references into file paths the compiler can
consume. Embedded and nested references have no file yet, so they are
written into the build's scratch workspace and registered there for
cleanup.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Tuple

from .references import (
    EmbeddedReference,
    FileReference,
    NestedBuildReference,
    Reference,
)
from .result import BuildResult
from .workspace import ScratchWorkspace


class ReferenceMaterializationError(Exception):
    """Raised when a reference cannot be turned into a file for the compiler."""
    pass


class CyclicReferenceError(ReferenceMaterializationError):
    """Raised when a nested build reference leads back to a unit being built."""

    def __init__(self, chain: Tuple[str, ...]):
        self.chain = chain
        super().__init__(f"Cyclic project reference: {' -> '.join(chain)}")


class NestedBuildError(ReferenceMaterializationError):
    """Raised when a nested build unit fails to compile its reference stub."""

    def __init__(self, name: str, result: BuildResult):
        self.name = name
        self.result = result
        super().__init__(f"Reference '{name}' failed to build")


@dataclass(frozen=True)
class ResolvedReference:
    """A reference that now exists on disk."""

    name: str
    path: Path
    temporary: bool = False

    @property
    def argument(self) -> str:
        return f"/r:{self.path}"


class ReferenceResolver:
    """Resolves references in iteration order.

    Args:
        workspace: Scratch workspace that receives materialized assemblies
        self_name: Assembly identity of the project being built; a reference
            with this name is skipped
        in_progress: Names of the build units currently being built, ending
            with the project being built
    """

    def __init__(
        self,
        workspace: ScratchWorkspace,
        self_name: str,
        in_progress: Tuple[str, ...] = ()
    ):
        self.workspace = workspace
        self.self_name = self_name
        self.in_progress = tuple(in_progress) or (self_name,)

    def resolve(self, references: Iterable[Reference]) -> List[ResolvedReference]:
        """Resolve all references.

        Returns:
            Resolved references, one per input reference except self references

        Raises:
            ReferenceMaterializationError: If writing a reference fails
            NestedBuildError: If a nested unit fails to compile
            CyclicReferenceError: If a nested unit is already being built
        """
        resolved = []
        for reference in references:
            if reference.name == self.self_name:
                logging.debug(f"Skipping self reference {reference.name}")
                continue
            resolved.append(self.resolve_one(reference))
        return resolved

    def resolve_one(self, reference: Reference) -> ResolvedReference:
        match reference:
            case FileReference(name=name, path=path):
                return ResolvedReference(name, path)
            case EmbeddedReference(name=name, contents=contents):
                return self._write_embedded(name, contents)
            case NestedBuildReference():
                return self._build_nested(reference)
            case _:
                raise TypeError(f"Unsupported reference type: {type(reference).__name__}")

    def _temp_path(self, name: str) -> Path:
        """Path of `<obj>/<name>.dll`; the name must be a plain file name."""
        if not name or name in (".", "..") or any(sep in name for sep in ("/", "\\")):
            raise ReferenceMaterializationError(f"Invalid reference name: {name!r}")
        return self.workspace.path / f"{name}.dll"

    def _write_embedded(self, name: str, contents: bytes) -> ResolvedReference:
        temp_path = self._temp_path(name)
        try:
            temp_path.write_bytes(contents)
        except OSError as e:
            raise ReferenceMaterializationError(
                f"Failed to write embedded reference '{name}' to {temp_path}: {e}"
            ) from e

        self.workspace.register(temp_path)
        logging.debug(f"Materialized embedded reference {name} ({len(contents)} bytes)")
        return ResolvedReference(name, temp_path, temporary=True)

    def _build_nested(self, reference: NestedBuildReference) -> ResolvedReference:
        if reference.name in self.in_progress:
            raise CyclicReferenceError(self.in_progress + (reference.name,))

        temp_path = self._temp_path(reference.name)
        logging.debug(f"Building reference stub for {reference.name}")
        try:
            with open(temp_path, "wb") as stream:
                self.workspace.register(temp_path)
                result = reference.unit.emit_reference_stub(stream, self.in_progress)
        except OSError as e:
            raise ReferenceMaterializationError(
                f"Failed to write reference stub for '{reference.name}' to {temp_path}: {e}"
            ) from e

        if not result.success:
            raise NestedBuildError(reference.name, result)

        return ResolvedReference(reference.name, temp_path, temporary=True)
