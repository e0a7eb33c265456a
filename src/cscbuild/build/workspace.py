"""
Scratch workspace management.

Every build attempt owns a scratch directory for the reference assemblies it
materializes. The directory is created on entry and removed exactly once on
exit, whether the build succeeded, failed, or raised.

Design:
    - ScratchWorkspace is a context manager; callers never delete by hand
    - Temporary files are registered so a successful build can drop them
      as soon as the compiler has exited
    - Unique directories (uuid4 token) for stub and diagnostics builds,
      deterministic `<output>/<project>/obj` for builds to a path
"""

import logging
import shutil
import tempfile
import uuid
from pathlib import Path
from typing import List, Optional


class WorkspaceError(Exception):
    """Raised when a scratch directory or file cannot be created or removed."""
    pass


def unique_scratch_dir(prefix: str, base: Optional[Path] = None) -> Path:
    """Return a collision-resistant directory path under the temp root.

    Args:
        prefix: Leading part of the directory name (e.g., "diagnostics")
        base: Parent directory (defaults to the system temp directory)

    Returns:
        Path of the form `<base>/<prefix>-<uuid>`; nothing is created
    """
    base = Path(base) if base is not None else Path(tempfile.gettempdir())
    return base / f"{prefix}-{uuid.uuid4()}"


def remove_tree(path: Path) -> None:
    """Remove a directory tree if it exists.

    Raises:
        WorkspaceError: If the tree exists but cannot be removed
    """
    if not path.exists():
        return
    try:
        shutil.rmtree(path)
    except OSError as e:
        raise WorkspaceError(f"Failed to remove scratch directory {path}: {e}") from e


class ScratchWorkspace:
    """Scoped scratch directory.

    Example usage:
        with ScratchWorkspace(output / "A" / "obj", prune_up_to=output) as ws:
            dll = ws.path / "Core.dll"
            dll.write_bytes(data)
            ws.register(dll)
            ...
    """

    def __init__(self, path: Path, prune_up_to: Optional[Path] = None):
        """
        Args:
            path: Directory to create and own
            prune_up_to: When set, empty parents of `path` below this
                directory are removed together with it
        """
        self.path = Path(path)
        self.prune_up_to = Path(prune_up_to) if prune_up_to is not None else None
        self.temp_files: List[Path] = []
        self.preexisting = False
        self._created_parents: List[Path] = []
        self._removed = False

    def __enter__(self) -> "ScratchWorkspace":
        self.create()
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        try:
            self.remove()
        except WorkspaceError as e:
            if exc_type is None:
                raise
            # Keep the original failure; the leak is only reported.
            logging.warning(str(e))

    def create(self) -> None:
        """Create the directory, remembering which parts already existed."""
        self.preexisting = self.path.is_dir()
        self._created_parents = []
        parent = self.path.parent
        while not parent.exists():
            self._created_parents.append(parent)
            parent = parent.parent
        try:
            self.path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise WorkspaceError(f"Failed to create scratch directory {self.path}: {e}") from e
        logging.debug(f"Created scratch directory {self.path}")

    def register(self, temp_file: Path) -> None:
        """Track a file written into the workspace."""
        self.temp_files.append(Path(temp_file))

    def discard_temp_files(self) -> None:
        """Delete every registered temporary file.

        Raises:
            WorkspaceError: If a file cannot be deleted
        """
        for temp_file in self.temp_files:
            try:
                temp_file.unlink(missing_ok=True)
            except OSError as e:
                raise WorkspaceError(f"Failed to delete temporary file {temp_file}: {e}") from e
        self.temp_files = []

    def remove(self) -> None:
        """Remove the workspace directory. Later calls do nothing.

        A directory that existed before `create` keeps its other content:
        only registered files are deleted, and the directory itself only
        when left empty.
        """
        if self._removed:
            return
        self._removed = True

        if self.preexisting:
            self.discard_temp_files()
            try:
                self.path.rmdir()
            except OSError:
                logging.debug(f"Kept existing directory {self.path}")
                return
        else:
            remove_tree(self.path)
        logging.debug(f"Removed scratch directory {self.path}")

        if self.prune_up_to is None:
            return
        for parent in self._created_parents:
            if parent == self.prune_up_to or self.prune_up_to not in parent.parents:
                break
            try:
                parent.rmdir()
            except OSError:
                # Not empty or already gone.
                break

    @property
    def removed(self) -> bool:
        return self._removed
