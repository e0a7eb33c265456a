"""CLI utility functions for cscbuild.

This module provides common utilities used across CLI commands including:
- Project directory validation
- Error handling and formatting
- Build result reporting
"""

import sys
from pathlib import Path
from typing import Iterable

from cscbuild.build import BuildResult
from cscbuild.config import CONFIG_FILE_NAME


class ErrorFormatter:
    """Formats and displays error messages with ANSI color codes."""

    # ANSI color codes
    RED = "\033[1;31m"
    GREEN = "\033[1;32m"
    YELLOW = "\033[1;33m"
    RESET = "\033[0m"

    @staticmethod
    def print_error(title: str, message: str) -> None:
        """Print formatted error message.

        Args:
            title: Error title (e.g., "Build failed")
            message: Error message details
        """
        print()
        print(f"{ErrorFormatter.RED}✗ {title}{ErrorFormatter.RESET}")
        print()
        print(message)
        print()

    @staticmethod
    def print_success(message: str) -> None:
        print()
        print(f"{ErrorFormatter.GREEN}✓ {message}{ErrorFormatter.RESET}")

    @staticmethod
    def print_warning(message: str) -> None:
        print()
        print(f"{ErrorFormatter.YELLOW}✗ {message}{ErrorFormatter.RESET}")

    @staticmethod
    def format_messages(messages: Iterable[str]) -> str:
        return "\n".join(f"  {message}" for message in messages)

    @staticmethod
    def report_result(result: BuildResult, success_message: str, failure_title: str) -> int:
        """Print a build result and return the process exit code.

        Args:
            result: Result of a build operation
            success_message: Message shown when the build succeeded
            failure_title: Title shown when the build failed

        Returns:
            0 on success, 1 on failure
        """
        if result.warnings:
            ErrorFormatter.print_warning("Warnings:\n" + ErrorFormatter.format_messages(result.warnings))

        if result.success:
            ErrorFormatter.print_success(success_message)
            return 0

        ErrorFormatter.print_error(failure_title, ErrorFormatter.format_messages(result.errors))
        return 1

    @staticmethod
    def handle_file_not_found(error: FileNotFoundError) -> None:
        ErrorFormatter.print_error("Error: File not found", str(error))
        print(f"Make sure you're in a cscbuild project directory with a {CONFIG_FILE_NAME} file.")
        sys.exit(1)

    @staticmethod
    def handle_permission_error(error: PermissionError) -> None:
        ErrorFormatter.print_error("Error: Permission denied", str(error))
        sys.exit(1)

    @staticmethod
    def handle_keyboard_interrupt() -> None:
        """Handle KeyboardInterrupt with standard formatting."""
        ErrorFormatter.print_warning("Build interrupted")
        sys.exit(130)  # Standard exit code for SIGINT

    @staticmethod
    def handle_error(title: str, error: Exception) -> None:
        """Handle an expected cscbuild error (configuration, compiler, workspace)."""
        ErrorFormatter.print_error(title, str(error))
        sys.exit(1)

    @staticmethod
    def handle_unexpected_error(error: Exception, verbose: bool = False) -> None:
        """Handle unexpected errors with standard formatting.

        Args:
            error: The exception to handle
            verbose: Whether to print traceback
        """
        message = f"{type(error).__name__}: {error}"
        ErrorFormatter.print_error("Unexpected error", message)

        if verbose:
            import traceback

            print("Traceback:")
            print(traceback.format_exc())

        sys.exit(1)


class PathValidator:
    """Validates project paths and directories."""

    @staticmethod
    def validate_project_dir(project_dir: Path) -> None:
        """Validate that project directory exists and is a directory.

        Args:
            project_dir: Path to validate

        Raises:
            SystemExit: If path doesn't exist or isn't a directory
        """
        if not project_dir.exists():
            print(
                f"{ErrorFormatter.RED}✗ Error: Path does not exist: {project_dir}{ErrorFormatter.RESET}"
            )
            sys.exit(2)
        if not project_dir.is_dir():
            print(
                f"{ErrorFormatter.RED}✗ Error: Path is not a directory: {project_dir}{ErrorFormatter.RESET}"
            )
            sys.exit(2)
