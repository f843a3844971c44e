"""CLI command listing cloned repositories"""

import click
from rich.console import Console
from rich.table import Table

from perbranch.cli.error_formatting import fail
from perbranch.cli.utils.logging import logger
from perbranch.cli.utils.root import resolve_root
from perbranch.errors import PerbranchError
from perbranch.git import scan_repositories


@click.command("ls")
def ls():
    """List repositories and their branch directories."""
    try:
        repositories = scan_repositories(resolve_root())
    except PerbranchError as e:
        fail(e)

    if not repositories:
        logger.info("No repositories found")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Owner")
    table.add_column("Repository")
    table.add_column("Branches")

    for info in repositories:
        table.add_row(info.owner, info.repo, ", ".join(info.branches))

    Console().print(table)
