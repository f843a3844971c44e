"""CLI command removing a branch directory"""

import click

from perbranch.cli.error_formatting import fail
from perbranch.cli.utils.logging import logger
from perbranch.cli.utils.root import resolve_root
from perbranch.errors import PerbranchError
from perbranch.workspace import remove_branch_checkout


@click.command("rm")
@click.argument("path")
@click.option("--force", "-f", is_flag=True, help="Do not ask for confirmation")
def rm(path: str, force: bool):
    """Remove the branch directory OWNER/REPO/BRANCH.

    BRANCH is the directory name, e.g. feature-login for feature/login.
    """
    parts = path.strip("/").split("/")
    if len(parts) != 3 or not all(parts):
        fail(
            PerbranchError(
                f'Incomplete path provided: "{path}"',
                "Expected format: owner/repo/branch",
            )
        )
    owner, repo, branch = parts

    if not force:
        click.confirm(f"Remove {owner}/{repo}/{branch}?", abort=True)

    try:
        removed = remove_branch_checkout(resolve_root(), owner, repo, branch)
    except PerbranchError as e:
        fail(e)

    logger.info(f"Removed {removed}")
