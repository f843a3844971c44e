"""
Discovery of branch checkouts under a perbranch root.

The root follows a fixed two-level layout, ``<root>/<owner>/<repo>/<branch>``.
A branch directory counts as a checkout when it holds a ``.git`` entry, which
may be a directory or, for linked worktrees, a file.
"""

import logging
from pathlib import Path
from typing import Iterator, List, Tuple, Union

from perbranch.config import Layout, as_layout
from perbranch.errors import ScanFailureError
from perbranch.model import RepositoryInfo

logger = logging.getLogger(__name__)


def is_git_repository(path: Path) -> bool:
    """
    Check whether *path* contains a git repository marker.

    Permission problems count as "not a repository".

    Raises:
        OSError: For unexpected I/O errors
    """
    git_path = Path(path) / ".git"
    try:
        return git_path.is_dir() or git_path.is_file()
    except PermissionError:
        return False


def _is_dir(path: Path) -> bool:
    try:
        return path.is_dir()
    except PermissionError:
        logger.debug(f"Skipping {path}: permission denied")
        return False


def _list_dir(path: Path) -> List[Path]:
    try:
        return sorted(path.iterdir())
    except PermissionError:
        logger.debug(f"Skipping {path}: permission denied")
        return []


def iter_branch_checkouts(repo_path: Path) -> Iterator[Tuple[str, Path]]:
    """
    Yield ``(branch_dir, path)`` for every valid checkout under *repo_path*.

    Never raises: an absent or unreadable directory simply yields nothing.
    """
    try:
        entries = sorted(Path(repo_path).iterdir())
    except OSError:
        return

    for entry in entries:
        try:
            if entry.is_dir() and is_git_repository(entry):
                yield entry.name, entry
        except OSError as e:
            logger.debug(f"Skipping {entry}: {e}")


def scan_repositories(root_dir: Union[str, Path, Layout]) -> List[RepositoryInfo]:
    """
    Scan the root directory for cloned repositories.

    Args:
        root_dir: Root directory or its ``Layout``

    Returns:
        One RepositoryInfo per ``owner/repo`` holding at least one checkout,
        in sorted order

    Raises:
        ScanFailureError: If the root cannot be listed or an unexpected I/O
            error occurs while walking it
    """
    layout = as_layout(root_dir)
    repositories = []

    try:
        owners = sorted(layout.root.iterdir())
        for owner_path in owners:
            if owner_path.name == layout.config_dir_name or not _is_dir(owner_path):
                continue

            for repo_path in _list_dir(owner_path):
                if not _is_dir(repo_path):
                    continue

                branches = [
                    branch_path.name
                    for branch_path in _list_dir(repo_path)
                    if _is_dir(branch_path) and is_git_repository(branch_path)
                ]

                if branches:
                    repositories.append(
                        RepositoryInfo(
                            owner=owner_path.name,
                            repo=repo_path.name,
                            branches=branches,
                            full_path=repo_path,
                        )
                    )
    except OSError as e:
        raise ScanFailureError(layout.root, e)

    logger.debug(f"Found {len(repositories)} repositories under {layout.root}")
    return repositories
