"""
Delivery of built artifacts to caller-supplied streams.

Copies block until every byte is written, so the source file can be closed
and its scratch directory removed right after.
"""

import shutil
from pathlib import Path
from typing import BinaryIO


class ArtifactError(Exception):
    """Raised when a built artifact cannot be read or delivered."""
    pass


def copy_artifact(artifact_path: Path, stream: BinaryIO) -> int:
    """Copy an artifact's bytes into a writable binary stream.

    Args:
        artifact_path: File produced by the compiler
        stream: Destination stream (left open)

    Returns:
        Number of bytes copied

    Raises:
        ArtifactError: If the artifact is missing or unreadable
    """
    try:
        with open(artifact_path, "rb") as source:
            shutil.copyfileobj(source, stream)
            copied = source.tell()
    except OSError as e:
        raise ArtifactError(f"Failed to deliver artifact {artifact_path}: {e}") from e

    flush = getattr(stream, "flush", None)
    if flush is not None:
        flush()
    return copied
