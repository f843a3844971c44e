"""
Per-repository mirror caches.

Every repository cloned under a root gets one bare mirror clone inside the
reserved config directory. Branch checkouts borrow objects from it during the
clone (``--reference``) and detach right after (``--dissociate``), so a cache
can be deleted at any time without breaking a checkout.

Cache Structure Example:
    <root>/.perbranch/.cache/
    ├── octocat/
    │   ├── hello-world/          # bare mirror (git clone --mirror)
    │   │   ├── HEAD
    │   │   ├── objects/
    │   │   └── packed-refs
    │   └── hello-world.lock      # advisory lock guarding create/update
    └── torvalds/
        └── linux/

State Machine (per owner/repo):
    ABSENT  --create-->  VALID  --corruption-->  INVALID  --remove+create-->  VALID
    ABSENT  --create fails-->  ABSENT

Caching is an optimization only. ``prepare_cache`` swallows every failure,
logs it, and returns None so the caller falls back to a direct clone.

Usage:
    cache_path = prepare_cache(url, "octocat", "hello-world", root)
    if cache_path is not None:
        Repo.clone_from(url, target, reference=str(cache_path), dissociate=True)
"""

import logging
import shutil
from pathlib import Path
from typing import List, Optional, Union

from dulwich import porcelain
from filelock import FileLock, Timeout
from git import Repo

from perbranch.config import Layout, as_layout
from perbranch.constants import DEFAULT_LOCK_TIMEOUT, NON_INTERACTIVE_GIT_ENV
from perbranch.model import CachedRepository, CacheInfo, CacheState

logger = logging.getLogger(__name__)


def get_cache_path(root_dir: Union[str, Path, Layout], owner: str, repo: str) -> Path:
    """Return ``<root>/<config-dir>/<cache-dir>/<owner>/<repo>``."""
    return as_layout(root_dir).cache_path(owner, repo)


def get_lock_path(cache_path: Path) -> Path:
    # suffix appended, not replaced: repository names may contain dots
    return cache_path.parent / f"{cache_path.name}.lock"


def validate_cache(cache_path: Path) -> bool:
    """
    Check that *cache_path* holds a usable mirror.

    A cache is valid when it exists, is a bare repository and has at least
    one ref. Never raises: any error means the cache is invalid.
    """
    try:
        if not Path(cache_path).exists():
            return False

        repo = porcelain.open_repo(str(cache_path))
        try:
            if not repo.bare:
                return False
            return len(repo.get_refs()) > 0
        finally:
            repo.close()
    except Exception as e:
        logger.debug(f"Cache at {cache_path} failed validation: {e}")
        return False


def get_cache_info(
    owner: str, repo: str, root_dir: Union[str, Path, Layout]
) -> CacheInfo:
    cache_path = get_cache_path(root_dir, owner, repo)

    # a dangling symlink still occupies the path
    if not (cache_path.exists() or cache_path.is_symlink()):
        return CacheInfo(cache_path=cache_path, exists=False, is_valid=False)

    return CacheInfo(
        cache_path=cache_path, exists=True, is_valid=validate_cache(cache_path)
    )


def create_cache(
    url: str, owner: str, repo: str, root_dir: Union[str, Path, Layout]
) -> Path:
    """
    Create a mirror clone of *url* in the cache.

    A partially written mirror is removed when the clone fails, leaving the
    cache ABSENT.

    Returns:
        Path to the new cache

    Raises:
        git.exc.GitCommandError: If the mirror clone fails
    """
    cache_path = get_cache_path(root_dir, owner, repo)
    cache_path.parent.mkdir(parents=True, exist_ok=True)

    logger.info(f"Creating cache for {owner}/{repo} at {cache_path}")
    try:
        Repo.clone_from(url, str(cache_path), env=NON_INTERACTIVE_GIT_ENV, mirror=True)
    except Exception:
        if cache_path.exists():
            shutil.rmtree(cache_path, ignore_errors=True)
        raise

    return cache_path


def update_cache(cache_path: Path) -> None:
    """
    Fetch all refs into an existing cache.

    Pruning removes both remote-deleted branches and remote-deleted tags so a
    long-lived cache stays in sync with the upstream.
    """
    logger.info(f"Updating cache at {cache_path}")
    with Repo(str(cache_path)) as repo:
        repo.git.fetch("--prune", "--prune-tags", "origin", env=NON_INTERACTIVE_GIT_ENV)


def remove_cache(cache_path: Path) -> None:
    """Delete a cache, whatever now occupies its path. No-op when absent."""
    cache_path = Path(cache_path)
    if cache_path.is_symlink() or cache_path.is_file():
        logger.debug(f"Removing stray file at cache path {cache_path}")
        cache_path.unlink()
    elif cache_path.exists():
        logger.debug(f"Removing cache at {cache_path}")
        shutil.rmtree(cache_path)


def prepare_cache(
    url: str,
    owner: str,
    repo: str,
    root_dir: Union[str, Path, Layout],
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
) -> Optional[Path]:
    """
    Bring the cache of ``owner/repo`` to the VALID state.

    ABSENT caches are created, VALID ones updated, INVALID ones removed and
    recreated. Mutations happen under an advisory file lock so concurrent
    invocations against the same repository do not race.

    Args:
        url: Remote URL of the repository
        owner: Repository owner
        repo: Repository name
        root_dir: Root directory or its ``Layout``
        lock_timeout: Seconds to wait for the lock

    Returns:
        Path to a valid cache, or None when the clone should run without one
    """
    cache_path = get_cache_path(root_dir, owner, repo)

    try:
        cache_path.parent.mkdir(parents=True, exist_ok=True)

        with FileLock(str(get_lock_path(cache_path)), timeout=lock_timeout):
            info = get_cache_info(owner, repo, root_dir)

            if info.state is CacheState.ABSENT:
                create_cache(url, owner, repo, root_dir)
            elif info.state is CacheState.VALID:
                update_cache(cache_path)
            else:
                logger.warning(f"Cache at {cache_path} is corrupted, recreating it")
                remove_cache(cache_path)
                create_cache(url, owner, repo, root_dir)

            if validate_cache(cache_path):
                return cache_path

        logger.warning(
            f"Cache at {cache_path} is not usable, cloning {owner}/{repo} without cache"
        )
    except Timeout:
        logger.warning(
            f"Timed out waiting for the cache lock of {owner}/{repo}, "
            "cloning without cache"
        )
    except Exception as e:
        logger.warning(
            f"Cache preparation failed for {owner}/{repo}: {e}. Cloning without cache."
        )

    return None


def get_cache_url(cache_path: Path) -> str:
    """
    Return the origin URL recorded in a cache.

    Raises:
        KeyError: If the cache has no origin remote
    """
    repo = porcelain.open_repo(str(cache_path))
    try:
        url = repo.get_config().get((b"remote", b"origin"), b"url")
    finally:
        repo.close()

    if not url:
        raise KeyError(f"No origin remote found in cache {cache_path}")
    return url.decode("utf-8")


def _list_dirs(path: Path) -> List[Path]:
    try:
        return sorted(entry for entry in path.iterdir() if entry.is_dir())
    except OSError as e:
        logger.debug(f"Cannot list {path}: {e}")
        return []


def get_cached_repos(root_dir: Union[str, Path, Layout], owner: str) -> List[str]:
    """Names of the repositories of *owner* that have a valid cache."""
    owner_path = as_layout(root_dir).cache_root / owner
    return [
        cache_path.name
        for cache_path in _list_dirs(owner_path)
        if validate_cache(cache_path)
    ]


def get_cached_owners(root_dir: Union[str, Path, Layout]) -> List[str]:
    layout = as_layout(root_dir)
    return [
        owner_path.name
        for owner_path in _list_dirs(layout.cache_root)
        if get_cached_repos(layout, owner_path.name)
    ]


def scan_cached_repositories(
    root_dir: Union[str, Path, Layout],
) -> List[CachedRepository]:
    """
    Describe every valid cache under a root.

    Invalid caches and caches without an origin URL are skipped.
    """
    layout = as_layout(root_dir)
    repositories = []

    for owner_path in _list_dirs(layout.cache_root):
        for cache_path in _list_dirs(owner_path):
            if not validate_cache(cache_path):
                continue
            try:
                url = get_cache_url(cache_path)
            except Exception as e:
                logger.debug(f"Skipping cache {cache_path}: {e}")
                continue
            repositories.append(
                CachedRepository(
                    owner=owner_path.name,
                    repo=cache_path.name,
                    cache_path=cache_path,
                    url=url,
                )
            )

    return repositories
