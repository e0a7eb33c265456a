"""
Command-line interface for cscbuild.

This module provides the `cscbuild` CLI tool for building C# library
projects described by a cscbuild.ini file.
"""

import argparse
import logging
import sys
import time
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Callable, Optional

from cscbuild import __version__
from cscbuild.build import (
    ArtifactError,
    CompilerError,
    ProjectBuilder,
    ReferenceMaterializationError,
    WorkspaceError,
)
from cscbuild.cli_utils import ErrorFormatter, PathValidator
from cscbuild.config import ProjectConfigError, ProjectLoader

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class CommonArgs:
    """Arguments shared by every command."""

    project_dir: Path
    csc: Optional[Path] = None
    verbose: bool = False
    log_file: Optional[Path] = None


@dataclass
class BuildArgs(CommonArgs):
    """Arguments for the build command."""

    output: Optional[Path] = None


@dataclass
class StubArgs(CommonArgs):
    """Arguments for the stub command."""

    output: Optional[Path] = None


def setup_logging(verbose: bool = False, log_file: Optional[Path] = None) -> None:
    """Setup logging for the CLI.

    Args:
        verbose: Log at DEBUG instead of WARNING on the console
        log_file: Also log at DEBUG to this rotating file
    """
    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            str(log_file),
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=3,
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(file_handler)


def load_builder(args: CommonArgs) -> ProjectBuilder:
    PathValidator.validate_project_dir(args.project_dir)
    loader = ProjectLoader(compiler_path=args.csc)
    return loader.load(args.project_dir)


def run_command(args: CommonArgs, command: Callable[[], int]) -> None:
    """Run a command, translating errors to formatted output and exit codes."""
    try:
        sys.exit(command())
    except ProjectConfigError as e:
        ErrorFormatter.handle_error("Error: Invalid project", e)
    except CompilerError as e:
        ErrorFormatter.handle_error("Error: Compiler unavailable", e)
    except (ReferenceMaterializationError, WorkspaceError, ArtifactError) as e:
        ErrorFormatter.handle_error("Build aborted", e)
    except FileNotFoundError as e:
        ErrorFormatter.handle_file_not_found(e)
    except PermissionError as e:
        ErrorFormatter.handle_permission_error(e)
    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, args.verbose)


def build_command(args: BuildArgs) -> None:
    """Build the project assembly with symbols and documentation.

    Examples:
        cscbuild build                 # Build project in current directory
        cscbuild build src/App         # Build specific project
        cscbuild build -o out          # Write App.dll/.pdb/.xml to out/
        cscbuild build --csc /usr/bin/csc
    """
    print(f"cscbuild v{__version__}")
    print()

    def command() -> int:
        builder = load_builder(args)
        output = args.output or builder.project.root / "bin"

        print(f"Building project: {builder.name}...")
        if args.verbose:
            print(f"Compiler: {builder.compiler_path}")
            print(f"Output: {output}")

        start_time = time.time()
        result = builder.emit_assembly(output)
        build_time = time.time() - start_time

        exit_code = ErrorFormatter.report_result(result, "Build successful!", "Build failed!")
        if exit_code == 0:
            print()
            print(f"Assembly: {output / (builder.name + '.dll')}")
            print(f"Build time: {build_time:.2f}s")
        return exit_code

    run_command(args, command)


def check_command(args: CommonArgs) -> None:
    """Compile without keeping any output and report the outcome."""

    def command() -> int:
        builder = load_builder(args)
        print(f"Checking project: {builder.name}...")
        result = builder.get_diagnostics()
        return ErrorFormatter.report_result(result, "No errors", "Check failed!")

    run_command(args, command)


def stub_command(args: StubArgs) -> None:
    """Write a reference-only assembly for the project to a file."""

    def command() -> int:
        builder = load_builder(args)
        output = args.output or builder.project.root / "bin" / f"{builder.name}.ref.dll"
        output.parent.mkdir(parents=True, exist_ok=True)

        print(f"Building reference assembly: {builder.name}...")
        # Written to a sibling file first so a failed build leaves no output.
        partial = output.with_name(output.name + ".partial")
        try:
            with open(partial, "wb") as stream:
                result = builder.emit_reference_stub(stream)
            if result.success:
                partial.replace(output)
        finally:
            partial.unlink(missing_ok=True)

        exit_code = ErrorFormatter.report_result(result, "Reference assembly written", "Build failed!")
        if exit_code == 0:
            print(f"Reference assembly: {output}")
        return exit_code

    run_command(args, command)


def sources_command(args: CommonArgs) -> None:
    """List the project's source files in compile order."""

    def command() -> int:
        builder = load_builder(args)
        for source in builder.get_sources():
            print(source.path)
        return 0

    run_command(args, command)


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "project_dir",
        nargs="?",
        type=Path,
        default=Path.cwd(),
        help="Project directory (default: current directory)",
    )
    parser.add_argument(
        "--csc",
        type=Path,
        default=None,
        help="Path to the C# compiler (default: auto-detect)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show verbose output",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Write a debug log to this file",
    )


def main() -> None:
    """cscbuild - Build C# library projects with csc."""
    parser = argparse.ArgumentParser(
        prog="cscbuild",
        description="cscbuild - Build C# library projects with csc",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"cscbuild {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    build_parser = subparsers.add_parser("build", help="Build the project assembly")
    add_common_arguments(build_parser)
    build_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Output directory (default: <project_dir>/bin)",
    )

    check_parser = subparsers.add_parser("check", help="Compile and report errors only")
    add_common_arguments(check_parser)

    stub_parser = subparsers.add_parser("stub", help="Write a reference-only assembly")
    add_common_arguments(stub_parser)
    stub_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Output file (default: <project_dir>/bin/<name>.ref.dll)",
    )

    sources_parser = subparsers.add_parser("sources", help="List source files")
    add_common_arguments(sources_parser)

    parsed_args = parser.parse_args()

    if not parsed_args.command:
        parser.print_help()
        sys.exit(1)

    setup_logging(parsed_args.verbose, parsed_args.log_file)

    common = dict(
        project_dir=parsed_args.project_dir,
        csc=parsed_args.csc,
        verbose=parsed_args.verbose,
        log_file=parsed_args.log_file,
    )

    if parsed_args.command == "build":
        build_command(BuildArgs(output=parsed_args.output, **common))
    elif parsed_args.command == "check":
        check_command(CommonArgs(**common))
    elif parsed_args.command == "stub":
        stub_command(StubArgs(output=parsed_args.output, **common))
    elif parsed_args.command == "sources":
        sources_command(CommonArgs(**common))


if __name__ == "__main__":
    main()
