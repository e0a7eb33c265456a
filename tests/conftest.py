"""Shared fixtures: a fake csc compiler written as a POSIX shell script."""

import stat
import sys
from pathlib import Path
from typing import List

import pytest


FAKE_CSC = r"""#!/bin/sh
capture="@CAPTURE@"
mkdir -p "$capture"
: > "$capture/args.txt"
out=""
pdb=""
doc=""
for arg in "$@"; do
  printf '%s\n' "$arg" >> "$capture/args.txt"
  case "$arg" in
    /out:*) out="${arg#/out:}" ;;
    /pdb:*) pdb="${arg#/pdb:}" ;;
    /doc:*) doc="${arg#/doc:}" ;;
    /r:*) ref="${arg#/r:}"; cp "$ref" "$capture/ref-$(basename "$ref")" ;;
  esac
done
name="$(basename "$out")"
printf '%s\n' "$name" >> "$capture/invocations.txt"
case "$name" in
  @FAIL_FOR@)
    echo "$name(1,1): error CS1002: ; expected"
    exit 1
    ;;
esac
printf 'MZ-%s' "$name" > "$out"
if [ -n "$pdb" ]; then printf 'PDB' > "$pdb"; fi
if [ -n "$doc" ]; then printf '<doc/>' > "$doc"; fi
exit 0
"""


class FakeCompiler:
    """Handle on a fake csc script and what it recorded."""

    def __init__(self, path: Path, capture: Path):
        self.path = path
        self.capture = capture

    def args(self) -> List[str]:
        """Arguments of the most recent invocation."""
        return (self.capture / "args.txt").read_text().splitlines()

    def invocations(self) -> List[str]:
        """Assembly names built so far, in order."""
        log = self.capture / "invocations.txt"
        if not log.exists():
            return []
        return log.read_text().splitlines()

    def captured_reference(self, file_name: str) -> bytes:
        """Contents of a referenced file as seen while the compiler ran."""
        return (self.capture / f"ref-{file_name}").read_bytes()


@pytest.fixture
def make_fake_csc(tmp_path):
    """Factory for fake compilers; `fail_for` lists project names that fail."""
    if sys.platform == "win32":
        pytest.skip("fake compiler is a POSIX shell script")

    counter = [0]

    def _make(fail_for=()):
        counter[0] += 1
        root = tmp_path / f"fake-csc-{counter[0]}"
        root.mkdir()
        capture = root / "capture"
        script = root / "csc"
        pattern = "|".join(f"{name}.dll" for name in fail_for) or "__never__"
        script.write_text(
            FAKE_CSC.replace("@CAPTURE@", str(capture)).replace("@FAIL_FOR@", pattern)
        )
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return FakeCompiler(script, capture)

    return _make


@pytest.fixture
def fake_csc(make_fake_csc):
    """A fake compiler that always succeeds."""
    return make_fake_csc()
