"""Error formatting for CLI output."""

import sys
from typing import NoReturn

import click

from perbranch.errors import PerbranchError

from .debug import is_debug


def format_error(error: PerbranchError, debug: bool = False) -> str:
    """Format a PerbranchError as the message followed by its suggestion.

    Example output:
        Authentication failed
        Suggestion: Please ensure your SSH key is configured or use HTTPS with credentials
    """
    lines = [error.message]
    if error.suggestion:
        lines.append(f"Suggestion: {error.suggestion}")
    if debug and error.original_error is not None:
        lines.append(f"Original error: {error.original_error}")
    return "\n".join(lines)


def fail(error: PerbranchError) -> NoReturn:
    """Print *error* to stderr and exit with status 1."""
    ctx = click.get_current_context(silent=True)
    debug = is_debug(ctx) if ctx is not None else False
    click.echo(format_error(error, debug), err=True)
    sys.exit(1)
