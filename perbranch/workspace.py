"""Removal of branch checkouts and the owner/repo directories left behind."""

import logging
import shutil
from pathlib import Path
from typing import Union

from perbranch.config import Layout, as_layout
from perbranch.errors import PerbranchError
from perbranch.git.scanner import scan_repositories

logger = logging.getLogger(__name__)


def remove_branch_checkout(
    root_dir: Union[str, Path, Layout], owner: str, repo: str, branch: str
) -> Path:
    """
    Delete the working directory of ``owner/repo/branch``.

    *branch* is the directory name as reported by the scanner, i.e. the
    sanitized branch name.

    Returns:
        The removed path

    Raises:
        PerbranchError: If the repository or branch is not a known checkout
    """
    layout = as_layout(root_dir)
    repositories = scan_repositories(layout)

    target = next(
        (r for r in repositories if r.owner == owner and r.repo == repo), None
    )
    if target is None:
        raise PerbranchError(
            f"Repository {owner}/{repo} not found",
            'Run "perbranch ls" to list cloned repositories',
        )
    if branch not in target.branches:
        raise PerbranchError(
            f"Branch '{branch}' not found in {owner}/{repo}",
            f"Available branches: {', '.join(target.branches)}",
        )

    branch_path = layout.branch_path(owner, repo, branch)
    logger.info(f"Removing {branch_path}")
    shutil.rmtree(branch_path)

    cleanup_empty_directories(layout)
    return branch_path


def cleanup_empty_directories(root_dir: Union[str, Path, Layout]) -> None:
    """
    Remove empty repo directories, then owner directories left empty.

    Failures are logged, never raised.
    """
    layout = as_layout(root_dir)

    try:
        for owner_path in sorted(layout.root.iterdir()):
            if owner_path.name == layout.config_dir_name or not owner_path.is_dir():
                continue

            for repo_path in sorted(owner_path.iterdir()):
                if repo_path.is_dir() and not any(repo_path.iterdir()):
                    logger.debug(f"Removing empty directory {repo_path}")
                    repo_path.rmdir()

            if not any(owner_path.iterdir()):
                logger.debug(f"Removing empty directory {owner_path}")
                owner_path.rmdir()
    except OSError as e:
        logger.warning(f"Failed to clean up empty directories: {e}")
