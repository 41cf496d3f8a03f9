"""CLI utility functions for v5build.

This module provides common utilities used across CLI commands including:
- Logging setup
- Error handling and formatting
- Passthrough argument splitting
"""

import logging
import sys
from pathlib import Path
from typing import List, NoReturn, Optional, Sequence, Tuple

from .build.process_utils import DOCS_URL, ToolNotFoundError

LOG_FORMAT = "%(levelname)s - %(name)s - %(message)s"


def setup_logging(verbose: bool = False) -> None:
    """Configure the root logger for CLI use.

    Args:
        verbose: Show debug messages instead of warnings and errors only
    """
    level = logging.DEBUG if verbose else logging.WARNING

    logger = logging.getLogger()
    logger.setLevel(level)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)


def split_passthrough(argv: Sequence[str]) -> Tuple[List[str], List[str]]:
    """Split argv at the first `--` into own arguments and cargo arguments.

    Returns:
        Tuple of (arguments for v5build, arguments passed through to cargo)
    """
    argv = list(argv)
    if "--" in argv:
        index = argv.index("--")
        return argv[:index], argv[index + 1 :]
    return argv, []


class ErrorFormatter:
    """Formats and displays error messages with ANSI color codes."""

    # ANSI color codes
    RED = "\033[1;31m"
    GREEN = "\033[1;32m"
    YELLOW = "\033[1;33m"
    RESET = "\033[0m"

    @staticmethod
    def print_error(title: str, message: str) -> None:
        """Print formatted error message to stderr.

        Args:
            title: Error title (e.g., "Build failed")
            message: Error message details
        """
        print(file=sys.stderr)
        print(f"{ErrorFormatter.RED}✗ {title}{ErrorFormatter.RESET}", file=sys.stderr)
        print(file=sys.stderr)
        print(message, file=sys.stderr)
        print(file=sys.stderr)

    @staticmethod
    def print_success(message: str) -> None:
        """Print formatted success message.

        Args:
            message: Success message
        """
        print()
        print(f"{ErrorFormatter.GREEN}✓ {message}{ErrorFormatter.RESET}")

    @staticmethod
    def print_warning(message: str) -> None:
        """Print formatted warning message.

        Args:
            message: Warning message
        """
        print(file=sys.stderr)
        print(f"{ErrorFormatter.YELLOW}✗ {message}{ErrorFormatter.RESET}", file=sys.stderr)

    @staticmethod
    def fatal(message: str, hint: Optional[str] = None) -> NoReturn:
        """Print a fatal diagnostic with an optional remediation hint and exit 1.

        Args:
            message: What is wrong
            hint: How to fix it
        """
        print(f"{ErrorFormatter.YELLOW}warn:{ErrorFormatter.RESET} {message}", file=sys.stderr)
        if hint:
            print(f"hint: {hint}", file=sys.stderr)
        sys.exit(1)

    @staticmethod
    def handle_tool_not_found(error: ToolNotFoundError) -> NoReturn:
        """Report a missing external command and exit 1.

        Args:
            error: The ToolNotFoundError to handle
        """
        print(f"{ErrorFormatter.RED}error:{ErrorFormatter.RESET} command `{error.command}` not found", file=sys.stderr)
        print("Please refer to the documentation for installing v5build on your platform.", file=sys.stderr)
        print(f"> {DOCS_URL}", file=sys.stderr)
        sys.exit(1)

    @staticmethod
    def handle_permission_error(error: PermissionError) -> NoReturn:
        """Handle PermissionError with standard formatting.

        Args:
            error: The PermissionError to handle
        """
        ErrorFormatter.print_error("Error: Permission denied", str(error))
        sys.exit(1)

    @staticmethod
    def handle_keyboard_interrupt() -> NoReturn:
        """Handle KeyboardInterrupt with standard formatting."""
        ErrorFormatter.print_warning("Interrupted")
        sys.exit(130)  # Standard exit code for SIGINT

    @staticmethod
    def handle_unexpected_error(error: Exception, verbose: bool = False) -> NoReturn:
        """Handle unexpected errors with standard formatting.

        Args:
            error: The exception to handle
            verbose: Whether to print traceback
        """
        message = f"{type(error).__name__}: {error}"
        ErrorFormatter.print_error("Unexpected error", message)

        if verbose:
            import traceback

            print("Traceback:", file=sys.stderr)
            print(traceback.format_exc(), file=sys.stderr)

        sys.exit(1)


class PathValidator:
    """Validates project paths and directories."""

    @staticmethod
    def validate_project_dir(project_dir: Path) -> None:
        """Validate that a project directory exists and has a Cargo.toml.

        Args:
            project_dir: Path to validate

        Raises:
            SystemExit: If path doesn't exist, isn't a directory or has no manifest
        """
        if not project_dir.exists():
            print(f"{ErrorFormatter.RED}✗ Error: Path does not exist: {project_dir}{ErrorFormatter.RESET}", file=sys.stderr)
            sys.exit(2)
        if not project_dir.is_dir():
            print(f"{ErrorFormatter.RED}✗ Error: Path is not a directory: {project_dir}{ErrorFormatter.RESET}", file=sys.stderr)
            sys.exit(2)
        if not (project_dir / "Cargo.toml").exists():
            print(f"{ErrorFormatter.RED}✗ Error: Cargo.toml not found in {project_dir}{ErrorFormatter.RESET}", file=sys.stderr)
            sys.exit(2)
