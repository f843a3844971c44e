"""
Detection of a repository's default branch.

Sources are tried cheapest first:
    1. ``origin/HEAD`` recorded by an existing checkout of the same repository
    2. the ``HEAD`` symref advertised by the remote (``git ls-remote --symref``)
    3. the literal fallback ``"main"``

Detection never fails the caller; a wrong guess only costs a confirmation
further down the line.
"""

import logging
import re
from pathlib import Path
from typing import Optional, Union

from git import Git, Repo
from git.exc import CommandError, InvalidGitRepositoryError, NoSuchPathError

from perbranch.config import Layout, as_layout
from perbranch.constants import FALLBACK_DEFAULT_BRANCH, NON_INTERACTIVE_GIT_ENV
from perbranch.git.scanner import iter_branch_checkouts

logger = logging.getLogger(__name__)

_SYMREF_RE = re.compile(r"^ref:\s*refs/heads/(\S+)\s+HEAD", re.MULTILINE)


def read_origin_head(repo: Repo) -> Optional[str]:
    """Return the branch ``origin/HEAD`` points to in *repo*, if recorded."""
    try:
        result = repo.git.rev_parse("--abbrev-ref", "origin/HEAD").strip()
    except CommandError:
        return None

    if not result.startswith("origin/") or result == "origin/HEAD":
        return None
    return result[len("origin/") :]


def get_default_branch_from_checkout(checkout_path: Path) -> Optional[str]:
    try:
        with Repo(str(checkout_path)) as repo:
            return read_origin_head(repo)
    except (InvalidGitRepositoryError, NoSuchPathError, OSError) as e:
        logger.debug(f"Cannot open {checkout_path}: {e}")
        return None


def get_default_branch_from_existing(
    root_dir: Union[str, Path, Layout], owner: str, repo: str
) -> Optional[str]:
    layout = as_layout(root_dir)
    for branch, checkout_path in iter_branch_checkouts(layout.repo_path(owner, repo)):
        default_branch = get_default_branch_from_checkout(checkout_path)
        if default_branch:
            logger.debug(
                f"Default branch of {owner}/{repo} is {default_branch} (from {branch})"
            )
            return default_branch
    return None


def get_remote_default_branch(url: str) -> Optional[str]:
    """
    Ask the remote which branch its ``HEAD`` points to.

    The response line looks like ``ref: refs/heads/main\\tHEAD``.

    Returns:
        The branch name, or None on network errors or unexpected output
    """
    try:
        output = Git().ls_remote("--symref", url, "HEAD", env=NON_INTERACTIVE_GIT_ENV)
    except CommandError as e:
        logger.debug(f"ls-remote failed for {url}: {e}")
        return None

    match = _SYMREF_RE.search(output)
    return match.group(1) if match else None


def detect_default_branch(
    url: str,
    root_dir: Union[str, Path, Layout],
    owner: Optional[str] = None,
    repo: Optional[str] = None,
) -> str:
    """
    Detect the default branch for a repository.

    Args:
        url: Remote URL of the repository
        root_dir: Root directory or its ``Layout``
        owner: Optional owner, enables the local lookup
        repo: Optional repository name, enables the local lookup

    Returns:
        The default branch name (e.g. 'main', 'develop', 'master')
    """
    if owner and repo:
        from_existing = get_default_branch_from_existing(root_dir, owner, repo)
        if from_existing:
            return from_existing

    from_remote = get_remote_default_branch(url)
    if from_remote:
        return from_remote

    logger.debug(
        f"Could not detect default branch of {url}, assuming {FALLBACK_DEFAULT_BRANCH}"
    )
    return FALLBACK_DEFAULT_BRANCH
