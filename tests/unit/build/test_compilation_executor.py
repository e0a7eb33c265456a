"""
Unit tests for CompilationExecutor.
"""

import stat
import sys
import time
import psutil
import pytest
from pathlib import Path
from unittest.mock import Mock, patch

from cscbuild.build.command_builder import CompilerCommand
from cscbuild.build.compilation_executor import (
    CompilationExecutor,
    CompilerError,
    kill_process_tree,
)

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="uses shell scripts")


def write_script(path: Path, body: str) -> Path:
    path.write_text("#!/bin/sh\n" + body)
    path.chmod(path.stat().st_mode | stat.S_IXUSR)
    return path


@posix_only
class TestCompilationExecutor:
    """Test suite for compiler execution."""

    def test_success_captures_output(self, tmp_path):
        csc = write_script(tmp_path / "csc", 'echo "compiled $1"\nexit 0\n')

        outcome = CompilationExecutor().execute(CompilerCommand(csc, ["/noconfig"]))

        assert outcome.success
        assert outcome.returncode == 0
        assert outcome.stdout.strip() == "compiled /noconfig"
        assert not outcome.timed_out

    def test_nonzero_exit_is_failure(self, tmp_path):
        csc = write_script(tmp_path / "csc", 'echo "error CS0246" >&2\nexit 3\n')

        outcome = CompilationExecutor().execute(CompilerCommand(csc, []))

        assert not outcome.success
        assert outcome.returncode == 3
        assert "CS0246" in outcome.stderr

    def test_arguments_not_shell_expanded(self, tmp_path):
        """Paths with spaces and quotes reach the compiler as single arguments."""
        csc = write_script(tmp_path / "csc", 'for a in "$@"; do echo "[$a]"; done\n')

        outcome = CompilationExecutor().execute(
            CompilerCommand(csc, ["/r:/lib/My Lib.dll", "$HOME"])
        )

        assert outcome.stdout.splitlines() == ["[/r:/lib/My Lib.dll]", "[$HOME]"]

    def test_timeout_kills_compiler(self, tmp_path):
        csc = write_script(tmp_path / "csc", "sleep 30\n")

        start = time.time()
        outcome = CompilationExecutor(timeout=0.5).execute(CompilerCommand(csc, []))

        assert outcome.timed_out
        assert not outcome.success
        assert time.time() - start < 20


class TestCompilationExecutorErrors:
    """Launch failures and interruption."""

    def test_missing_compiler(self, tmp_path):
        with pytest.raises(CompilerError, match="Failed to launch compiler"):
            CompilationExecutor().execute(CompilerCommand(tmp_path / "missing-csc", []))

    def test_keyboard_interrupt_kills_tree(self):
        process = Mock()
        process.pid = 4242
        process.communicate = Mock(side_effect=KeyboardInterrupt)

        with patch("cscbuild.build.compilation_executor.subprocess.Popen", return_value=process), \
                patch("cscbuild.build.compilation_executor.kill_process_tree") as mock_kill:
            with pytest.raises(KeyboardInterrupt):
                CompilationExecutor().execute(CompilerCommand(Path("csc"), []))

        mock_kill.assert_called_once_with(4242)
        process.wait.assert_called_once()


def test_kill_process_tree_missing_pid():
    with patch("cscbuild.build.compilation_executor.psutil.Process") as mock_process:
        mock_process.side_effect = psutil.NoSuchProcess(999999)
        assert kill_process_tree(999999) == 0
