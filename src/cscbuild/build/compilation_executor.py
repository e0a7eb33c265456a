"""Compilation Executor.

This module runs the compiler subprocess and reports how it exited.

Design:
    - Launches the compiler without a shell, capturing stdout and stderr
    - Blocks until the compiler exits (optional timeout, none by default)
    - Exit code 0 is success, anything else is failure; output is not parsed
    - Kills the compiler's whole process tree when the wait is interrupted
      or times out, so no compiler keeps scratch files open
"""

import logging
import subprocess
from dataclasses import dataclass
from typing import Optional

import psutil

from .command_builder import CompilerCommand


class CompilerError(Exception):
    """Raised when the compiler cannot be launched."""
    pass


@dataclass
class CompileOutcome:
    """How a compiler invocation ended."""

    returncode: int
    stdout: str
    stderr: str
    timed_out: bool = False

    @property
    def success(self) -> bool:
        return self.returncode == 0 and not self.timed_out


class CompilationExecutor:
    """Executes compiler commands.

    Args:
        timeout: Seconds to wait for the compiler, or None to wait forever
    """

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout

    def execute(self, command: CompilerCommand) -> CompileOutcome:
        """Run the command and wait for it to exit.

        Args:
            command: Compiler command to run

        Returns:
            CompileOutcome with exit code and captured output

        Raises:
            CompilerError: If the compiler executable cannot be started
        """
        logging.info(str(command))

        try:
            process = subprocess.Popen(
                command.argv,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                stdin=subprocess.DEVNULL,
                text=True,
                errors="replace",
            )
        except OSError as e:
            raise CompilerError(f"Failed to launch compiler {command.compiler_path}: {e}") from e

        try:
            stdout, stderr = process.communicate(timeout=self.timeout)
        except subprocess.TimeoutExpired:
            logging.warning(f"Compiler timed out after {self.timeout}s, killing pid {process.pid}")
            kill_process_tree(process.pid)
            stdout, stderr = process.communicate()
            return CompileOutcome(process.returncode, stdout, stderr, timed_out=True)
        except KeyboardInterrupt:
            kill_process_tree(process.pid)
            process.wait()
            raise

        outcome = CompileOutcome(process.returncode, stdout, stderr)
        if outcome.success:
            logging.debug(f"Compiler output:\n{stdout}{stderr}")
        else:
            logging.warning(f"Compiler exited with code {outcome.returncode}:\n{stdout}{stderr}")
        return outcome


def kill_process_tree(root_pid: int) -> int:
    """Terminate a process and all of its descendants.

    Children are terminated before their parents; stragglers are force
    killed after a short grace period.

    Args:
        root_pid: PID of the root process

    Returns:
        Number of processes terminated
    """
    try:
        root = psutil.Process(root_pid)
        processes = root.children(recursive=True) + [root]
    except psutil.NoSuchProcess:
        return 0

    killed_count = 0
    for proc in processes:
        try:
            proc.terminate()
            killed_count += 1
        except psutil.NoSuchProcess:
            pass  # Already dead

    _gone, alive = psutil.wait_procs(processes, timeout=3)

    for proc in alive:
        try:
            proc.kill()
            logging.warning(f"Force killed stubborn process {proc.pid}")
        except psutil.NoSuchProcess:
            pass

    return killed_count
