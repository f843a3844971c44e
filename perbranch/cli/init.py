"""CLI command initializing a perbranch root"""

from pathlib import Path

import click

from perbranch.cli.error_formatting import fail
from perbranch.cli.utils.logging import logger
from perbranch.config import initialize_root
from perbranch.errors import ConfigError


@click.command("init")
@click.argument(
    "directory",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
)
def init(directory: Path):
    """Make DIRECTORY (default: current directory) a perbranch root."""
    try:
        root = initialize_root(directory.resolve())
    except ConfigError as e:
        fail(e)

    logger.info(f"Initialized perbranch root at {root}")
