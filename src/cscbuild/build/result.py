"""Build result value returned by every build operation."""

from dataclasses import dataclass
from typing import Tuple


COMPILATION_FAILED = "Compilation failed"


@dataclass(frozen=True)
class BuildResult:
    """Result of a build attempt.

    Compiler diagnostics are not parsed, so a failed compile carries a
    single opaque error message.
    """

    success: bool
    warnings: Tuple[str, ...] = ()
    errors: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "warnings", tuple(self.warnings))
        object.__setattr__(self, "errors", tuple(self.errors))

    @classmethod
    def succeeded(cls) -> "BuildResult":
        return cls(success=True)

    @classmethod
    def failed(cls, *errors: str) -> "BuildResult":
        return cls(success=False, errors=errors or (COMPILATION_FAILED,))
