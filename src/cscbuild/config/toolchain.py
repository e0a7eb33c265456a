"""
C# compiler discovery.

Locates the csc executable a build should use. Nothing is hardcoded; the
first match in this order wins:

1. An explicit path (CLI --csc or constructor argument)
2. The CSCBUILD_CSC environment variable
3. `path` in the [compiler] section of cscbuild.ini
4. csc, csc.exe or mcs on PATH
5. .NET Framework install directories under %WINDIR%
"""

import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import List, Mapping, Optional

from ..build.compilation_executor import CompilerError


CSC_ENV_VAR = "CSCBUILD_CSC"
PATH_CANDIDATES = ("csc", "csc.exe", "mcs")
FRAMEWORK_VERSION = "v4.0.30319"


class CompilerNotFoundError(CompilerError):
    """Raised when no usable compiler can be located."""
    pass


@dataclass
class CompilerConfig:
    """Compiler settings injected into builders."""

    csc_path: Path
    timeout: Optional[float] = None


class CompilerLocator:
    """Finds the compiler executable.

    Args:
        environ: Environment mapping to read (defaults to os.environ)
    """

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self.environ = environ if environ is not None else os.environ

    def framework_candidates(self) -> List[Path]:
        """Well-known csc locations of the .NET Framework on Windows."""
        windir = self.environ.get("WINDIR") or self.environ.get("SystemRoot")
        if not windir:
            return []
        base = Path(windir) / "Microsoft.NET"
        return [
            base / "Framework64" / FRAMEWORK_VERSION / "csc.exe",
            base / "Framework" / FRAMEWORK_VERSION / "csc.exe",
        ]

    def locate(
        self,
        explicit: Optional[Path] = None,
        configured: Optional[Path] = None
    ) -> Path:
        """Return the compiler path.

        Args:
            explicit: Path given by the caller; must exist
            configured: Path from the project configuration; must exist

        Returns:
            Path to the compiler executable

        Raises:
            CompilerNotFoundError: If a given path is missing or nothing is found
        """
        env_path = self.environ.get(CSC_ENV_VAR)

        for origin, candidate in (
            ("explicit path", explicit),
            (CSC_ENV_VAR, Path(env_path) if env_path else None),
            ("cscbuild.ini", configured),
        ):
            if candidate is None:
                continue
            candidate = Path(candidate)
            if not candidate.exists():
                raise CompilerNotFoundError(f"Compiler from {origin} not found: {candidate}")
            return candidate

        search_path = self.environ.get("PATH")
        for name in PATH_CANDIDATES:
            found = shutil.which(name, path=search_path)
            if found:
                return Path(found)

        for candidate in self.framework_candidates():
            if candidate.exists():
                return candidate

        raise CompilerNotFoundError(
            "C# compiler not found. Install csc (Mono or .NET) or set "
            f"{CSC_ENV_VAR} to its path."
        )
