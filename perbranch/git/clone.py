"""
Cloning a branch into its own working directory.

``clone_repository`` turns ``(url, base branch, target branch)`` into a
checkout at ``<root>/<owner>/<repo>/<sanitized target branch>``:

    1. parse the URL and validate branch names (no side effects yet)
    2. refuse to touch an existing target directory
    3. prepare the mirror cache (best-effort)
    4. clone, borrowing objects from the cache when there is one
    5. check out or create the target branch

Once the pre-existence check has passed, any failure removes the target
directory again. Errors are returned inside ``CloneResult``, never raised.
"""

import errno
import logging
import os
import shutil
from pathlib import Path
from typing import Optional

from git import Repo
from git.exc import CommandError, GitCommandError

from perbranch.config import Layout
from perbranch.constants import DEFAULT_LOCK_TIMEOUT
from perbranch.errors import (
    BranchNameCollisionError,
    CloneFailedError,
    GitErrorCategory,
    InvalidBranchNameError,
    PerbranchError,
    TargetExistsError,
    categorize_git_error,
    error_from_git_failure,
)
from perbranch.git.cache import prepare_cache
from perbranch.git.default_branch import detect_default_branch, read_origin_head
from perbranch.git.url import parse_git_url
from perbranch.model import CloneOptions, CloneResult, ParsedGitUrl
from perbranch.validators import validate_branch_name

logger = logging.getLogger(__name__)


def sanitize_branch_name(branch_name: str) -> str:
    """
    Turn a branch name into a single directory name.

    Examples:
        feat/xxx -> feat-xxx
        feature/login/auth -> feature-login-auth
        main -> main
    """
    return branch_name.replace("/", "-")


def normalize_base_branch(branch_name: str) -> str:
    """Strip an ``origin/`` prefix the caller may have supplied."""
    if branch_name.startswith("origin/"):
        return branch_name[len("origin/") :]
    return branch_name


def remote_branch_exists(repo: Repo, branch_name: str) -> bool:
    output = repo.git.branch("--remotes", "--list", f"origin/{branch_name}")
    return bool(output.strip())


def _remove_target(target_path: Path) -> None:
    """Best-effort removal of a directory this invocation created."""
    try:
        if target_path.is_symlink() or target_path.is_file():
            target_path.unlink()
        elif target_path.exists():
            shutil.rmtree(target_path)
    except OSError as e:
        logger.warning(f"Failed to clean up {target_path}: {e}")


def _classify_error(
    error: Exception, base_branch: str, target_path: Path
) -> PerbranchError:
    if isinstance(error, PerbranchError):
        return error
    if isinstance(error, CommandError):
        return error_from_git_failure(error, base_branch, target_path)
    if isinstance(error, PermissionError):
        return CloneFailedError(
            "Permission denied",
            "Please check you have write permissions to the root directory",
            error,
        )
    if isinstance(error, OSError) and error.errno == errno.ENOSPC:
        return CloneFailedError(
            "Insufficient disk space", "Please free up space and try again", error
        )
    return CloneFailedError(original_error=error)


def _checkout(repo: Repo, base_branch: str, target_branch: str, default_branch: str):
    if base_branch == target_branch:
        if base_branch == default_branch:
            # the clone already checked out the default branch
            logger.debug(f"{base_branch} is the default branch, nothing to check out")
            return
        repo.git.fetch("origin", base_branch)
        repo.git.checkout(base_branch)
        return

    if base_branch == default_branch:
        repo.git.checkout("-b", target_branch, base_branch)
    else:
        repo.git.fetch("origin", base_branch)
        repo.git.checkout("-b", target_branch, f"origin/{base_branch}")


def _clone_into(
    options: CloneOptions,
    parsed: ParsedGitUrl,
    layout: Layout,
    target_path: Path,
    base_branch: str,
    use_cache: bool,
    lock_timeout: float,
) -> None:
    target_path.parent.mkdir(parents=True, exist_ok=True)

    cache_path = None
    if use_cache:
        cache_path = prepare_cache(
            options.clone_url, parsed.owner, parsed.repo, layout, lock_timeout
        )

    if cache_path is not None:
        logger.info(f"Cloning {options.clone_url} into {target_path} (using cache)")
        repo = Repo.clone_from(
            options.clone_url,
            str(target_path),
            reference=str(cache_path),
            dissociate=True,
        )
    else:
        logger.info(f"Cloning {options.clone_url} into {target_path}")
        repo = Repo.clone_from(options.clone_url, str(target_path))

    try:
        target_branch = options.target_branch
        if target_branch != base_branch and remote_branch_exists(repo, target_branch):
            raise BranchNameCollisionError(target_branch)

        default_branch = read_origin_head(repo) or detect_default_branch(
            options.clone_url, layout, parsed.owner, parsed.repo
        )
        logger.debug(f"Default branch of {parsed.owner}/{parsed.repo}: {default_branch}")

        _checkout(repo, base_branch, target_branch, default_branch)
    finally:
        repo.close()


def clone_repository(
    options: CloneOptions,
    use_cache: bool = True,
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
    layout: Optional[Layout] = None,
) -> CloneResult:
    """
    Clone a repository branch into its own working directory.

    Args:
        options: URL, base branch, target branch and root directory
        use_cache: Borrow objects from the per-repository mirror cache
        lock_timeout: Seconds to wait for the cache lock
        layout: Directory layout, defaults to the standard one under
            ``options.root_dir``

    Returns:
        CloneResult with the checkout path on success, or the classified
        error on failure
    """
    if layout is None:
        layout = Layout(Path(options.root_dir))

    try:
        parsed = parse_git_url(options.clone_url)
        for branch in (options.base_branch, options.target_branch):
            validation = validate_branch_name(branch)
            if not validation.valid:
                raise InvalidBranchNameError(branch, validation.error)
    except PerbranchError as e:
        return CloneResult(success=False, error=e)

    # git refs keep the original name, only the directory is sanitized
    target_path = layout.branch_path(
        parsed.owner, parsed.repo, sanitize_branch_name(options.target_branch)
    )

    # Deletion authority is only acquired after this check
    if os.path.lexists(target_path):
        return CloneResult(success=False, error=TargetExistsError(target_path))

    base_branch = normalize_base_branch(options.base_branch)

    try:
        _clone_into(
            options, parsed, layout, target_path, base_branch, use_cache, lock_timeout
        )
    except Exception as e:
        race_lost = (
            isinstance(e, GitCommandError)
            and categorize_git_error(e) is GitErrorCategory.TARGET_EXISTS
        )
        if not race_lost:
            _remove_target(target_path)
        error = _classify_error(e, options.base_branch, target_path)
        logger.debug(f"Clone of {options.clone_url} failed: {error.message}")
        return CloneResult(success=False, error=error)

    logger.info(
        f"Cloned {parsed.owner}/{parsed.repo} ({options.target_branch}) to {target_path}"
    )
    return CloneResult(success=True, target_path=target_path)
