"""
Upstream reference kinds a project can depend on.

Every dependency a project declares is normalized into one of three
variants before it reaches the compiler:

- FileReference: an assembly already on disk (package assemblies, prebuilt dlls)
- EmbeddedReference: assembly bytes with no file yet (written to scratch space)
- NestedBuildReference: another project that builds its own reference stub

The set is closed: `Reference` is the union of the three dataclasses and the
resolver dispatches over it with a match statement.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO, FrozenSet, List, Set, Union

if TYPE_CHECKING:
    from .result import BuildResult


class IBuildUnit(ABC):
    """Interface for anything that can emit a reference-only assembly.

    Implemented by ProjectBuilder. `in_progress` holds the names of the
    build units currently being built further up the reference chain, in
    the order they were entered.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Identity of the unit; matches the produced assembly name."""
        pass

    @abstractmethod
    def emit_reference_stub(
        self,
        stream: BinaryIO,
        in_progress: tuple = ()
    ) -> "BuildResult":
        """Build a debug-free assembly and write its bytes to `stream`.

        Args:
            stream: Writable binary stream receiving the assembly bytes
            in_progress: Names of units already being built by callers

        Returns:
            BuildResult; the stream is untouched when it failed
        """
        pass


@dataclass(frozen=True)
class FileReference:
    """Reference to an assembly that already exists on disk."""

    name: str
    path: Path

    def __post_init__(self):
        object.__setattr__(self, "path", Path(self.path))


@dataclass(frozen=True)
class EmbeddedReference:
    """Reference carried as raw assembly bytes."""

    name: str
    contents: bytes = field(repr=False)


@dataclass(frozen=True)
class NestedBuildReference:
    """Reference to another build unit compiled on demand."""

    name: str
    unit: IBuildUnit = field(compare=False)


Reference = Union[FileReference, EmbeddedReference, NestedBuildReference]


@dataclass
class LibraryExport:
    """Ordered set of references exported for a project's build.

    Order is preserved and references sharing a name after the first are
    ignored.
    """

    references: List[Reference] = field(default_factory=list)
    _names: Set[str] = field(default_factory=set, init=False, repr=False, compare=False)

    def __post_init__(self):
        declared, self.references = self.references, []
        for reference in declared:
            self.add(reference)

    def add(self, reference: Reference) -> None:
        if reference.name in self._names:
            return
        self._names.add(reference.name)
        self.references.append(reference)

    @property
    def names(self) -> FrozenSet[str]:
        return frozenset(self._names)

    @property
    def metadata_references(self) -> List[Reference]:
        """References in declaration order, first occurrence per name."""
        return list(self.references)
