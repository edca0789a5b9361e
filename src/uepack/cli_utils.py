"""CLI utility functions for uepack.

This module provides common utilities used by the CLI including:
- Logging setup
- Error handling and formatting
- Banner output for run summaries
"""

import logging
import sys
from typing import Optional

from uepack.errors import UEPackError

LOG_FORMAT = "%(levelname)s: %(message)s"

_console_handler: Optional[logging.Handler] = None


def setup_logging(verbose: bool = False) -> None:
    """Setup console logging for the CLI.

    Args:
        verbose: Log debug messages too
    """
    global _console_handler

    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    if _console_handler is not None:
        logger.removeHandler(_console_handler)

    _console_handler = logging.StreamHandler(sys.stdout)
    _console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    _console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(_console_handler)


class ErrorFormatter:
    """Formats and displays error messages with ANSI color codes."""

    # ANSI color codes
    RED = "\033[1;31m"
    YELLOW = "\033[1;33m"
    RESET = "\033[0m"

    # Titles per error class name
    TITLES = {
        "ValidationError": "Invalid input",
        "ResolutionError": "Engine version not found",
        "FileSystemError": "File system error",
        "ExternalToolError": "Build failed!",
        "ArchiveError": "Archive failed",
    }

    @staticmethod
    def print_error(title: str, message: str) -> None:
        """Print formatted error message.

        Args:
            title: Error title (e.g., "Build failed!")
            message: Error message details
        """
        print()
        print(f"{ErrorFormatter.RED}✗ {title}{ErrorFormatter.RESET}")
        print()
        print(message)
        print()

    @staticmethod
    def print_warning(message: str) -> None:
        """Print formatted warning message."""
        print()
        print(f"{ErrorFormatter.YELLOW}✗ {message}{ErrorFormatter.RESET}")

    @staticmethod
    def handle_uepack_error(error: UEPackError) -> None:
        """Report a fatal uepack error and exit with status 1.

        Args:
            error: The error to report
        """
        title = ErrorFormatter.TITLES.get(type(error).__name__, "Error")
        ErrorFormatter.print_error(title, str(error))
        sys.exit(1)

    @staticmethod
    def handle_keyboard_interrupt() -> None:
        """Handle KeyboardInterrupt with standard formatting."""
        ErrorFormatter.print_warning("Packaging interrupted")
        sys.exit(130)  # Standard exit code for SIGINT

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


class BannerFormatter:
    """Formats and displays banner messages with borders."""

    DEFAULT_WIDTH = 60
    DEFAULT_BORDER_CHAR = "="

    @staticmethod
    def format_banner(
        message: str,
        width: int = DEFAULT_WIDTH,
        border_char: str = DEFAULT_BORDER_CHAR,
    ) -> str:
        """Format a left-aligned banner with top and bottom borders.

        Args:
            message: The message to display (can be multi-line)
            width: Width of the borders in characters
            border_char: Character to use for borders

        Returns:
            Formatted banner string
        """
        border = border_char * width
        lines = [border]
        lines.extend("  " + line for line in message.split("\n"))
        lines.append(border)
        return "\n".join(lines)

    @staticmethod
    def print_banner(message: str, width: int = DEFAULT_WIDTH) -> None:
        """Print a banner preceded by a blank line."""
        print()
        print(BannerFormatter.format_banner(message, width=width))
