"""CLI commands for mirror cache management"""

import click
from rich.console import Console
from rich.table import Table

from perbranch.cli.error_formatting import fail
from perbranch.cli.utils.logging import logger
from perbranch.cli.utils.root import resolve_root
from perbranch.errors import PerbranchError
from perbranch.git import get_cache_path, remove_cache, scan_cached_repositories


@click.group(name="cache")
def cache():
    """Manage the per-repository mirror caches."""
    pass


@cache.command("ls")
def list_caches():
    """List valid caches."""
    try:
        repositories = scan_cached_repositories(resolve_root())
    except PerbranchError as e:
        fail(e)

    if not repositories:
        logger.info("No cached repositories")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Repository")
    table.add_column("URL")
    table.add_column("Path")

    for cached in repositories:
        table.add_row(
            f"{cached.owner}/{cached.repo}", cached.url, str(cached.cache_path)
        )

    Console().print(table)


@cache.command("rm")
@click.argument("name")
def remove(name: str):
    """Delete the cache of OWNER/REPO. Existing checkouts are not affected."""
    parts = name.strip("/").split("/")
    if len(parts) != 2 or not all(parts):
        fail(
            PerbranchError(f'Invalid repository "{name}"', "Expected format: owner/repo")
        )

    try:
        cache_path = get_cache_path(resolve_root(), *parts)
        if not cache_path.exists():
            logger.info(f"No cache for {name}")
            return
        remove_cache(cache_path)
    except PerbranchError as e:
        fail(e)
    except OSError as e:
        fail(PerbranchError(f"Failed to remove cache of {name}", str(e), e))

    logger.info(f"Removed cache of {name}")
