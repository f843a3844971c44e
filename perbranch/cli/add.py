"""CLI command cloning a branch into its own directory"""

from pathlib import Path
from typing import Optional

import click

from perbranch.cli.error_formatting import fail
from perbranch.cli.utils.logging import logger
from perbranch.cli.utils.root import resolve_root
from perbranch.config import load_settings
from perbranch.errors import MalformedUrlError, PerbranchError
from perbranch.git import (
    clone_repository,
    detect_default_branch,
    get_cache_path,
    get_cache_url,
    parse_git_url,
    resolve_remote_url,
    validate_cache,
)
from perbranch.model import CloneOptions
from perbranch.validators import check_git_installed, validate_git_url


def resolve_clone_url(root: Path, source: str) -> str:
    """
    Turn the SOURCE argument into a clone URL.

    SOURCE is either a remote URL or ``owner/repo`` of a repository that is
    already cloned or cached under the root.

    Raises:
        MalformedUrlError: If SOURCE is neither
    """
    if validate_git_url(source).valid:
        return source

    parts = source.strip("/").split("/")
    if len(parts) != 2 or not all(parts):
        raise MalformedUrlError(source)
    owner, repo = parts

    remote = resolve_remote_url(root, owner, repo)
    if remote.found:
        logger.debug(f"Using origin of {owner}/{repo}/{remote.source}: {remote.url}")
        return remote.url

    cache_path = get_cache_path(root, owner, repo)
    if validate_cache(cache_path):
        try:
            return get_cache_url(cache_path)
        except KeyError:
            pass

    raise PerbranchError(
        f"No clone URL known for {owner}/{repo}",
        "Please provide the full repository URL",
    )


@click.command("add")
@click.argument("source")
@click.argument("target_branch")
@click.option(
    "--base",
    "-b",
    "base_branch",
    default=None,
    help="Branch to start from (defaults to the repository's default branch)",
)
@click.option("--no-cache", is_flag=True, help="Clone without the mirror cache")
def add(source: str, target_branch: str, base_branch: Optional[str], no_cache: bool):
    """Clone TARGET_BRANCH of SOURCE into its own directory.

    SOURCE is a repository URL or the OWNER/REPO of a repository already
    present under the root.

    Example:

      perbranch add https://github.com/user/repo.git feature/login --base main
    """
    try:
        git_check = check_git_installed()
        if not git_check.valid:
            raise PerbranchError(git_check.error)

        root = resolve_root()
        settings = load_settings(root)
        url = resolve_clone_url(root, source)

        if base_branch is None:
            parsed = parse_git_url(url)
            base_branch = detect_default_branch(url, root, parsed.owner, parsed.repo)
            logger.info(f"Using default branch '{base_branch}' as base")
    except PerbranchError as e:
        fail(e)

    try:
        options = CloneOptions(
            clone_url=url,
            base_branch=base_branch,
            target_branch=target_branch,
            root_dir=root,
        )
    except ValueError as e:
        fail(PerbranchError("Invalid clone arguments", str(e), e))

    result = clone_repository(
        options,
        use_cache=settings.cache_enabled and not no_cache,
        lock_timeout=settings.lock_timeout,
    )

    if not result.success:
        fail(result.error)

    logger.info(f"Ready: {result.target_path}")
