import configparser
import logging
from typing import Optional, Union
from pathlib import Path

from git import Repo
from git.exc import InvalidGitRepositoryError, NoSuchPathError

from perbranch.config import Layout, as_layout
from perbranch.git.scanner import iter_branch_checkouts
from perbranch.model import RemoteUrlResult

logger = logging.getLogger(__name__)


def get_origin_url(checkout_path: Path) -> Optional[str]:
    """
    Read the fetch URL of the ``origin`` remote of a checkout.

    Returns:
        The URL, or None when the path is not a repository or has no origin
    """
    try:
        with Repo(str(checkout_path)) as repo:
            url = repo.config_reader().get_value('remote "origin"', "url", default="")
    except (InvalidGitRepositoryError, NoSuchPathError, OSError, configparser.Error) as e:
        logger.debug(f"Cannot read origin of {checkout_path}: {e}")
        return None
    return str(url) or None


def resolve_remote_url(
    root_dir: Union[str, Path, Layout], owner: str, repo: str
) -> RemoteUrlResult:
    """
    Recover the origin URL of ``owner/repo`` from its existing checkouts.

    Checkouts are tried in listing order; the first one with a configured
    origin wins. Absence is a normal outcome, not an error.

    Args:
        root_dir: Root directory or its ``Layout``
        owner: Repository owner directory
        repo: Repository directory

    Returns:
        RemoteUrlResult, with ``source`` set to the branch directory the URL
        was read from
    """
    layout = as_layout(root_dir)

    for branch, checkout_path in iter_branch_checkouts(layout.repo_path(owner, repo)):
        url = get_origin_url(checkout_path)
        if url:
            logger.debug(f"Resolved origin of {owner}/{repo} from {branch}: {url}")
            return RemoteUrlResult(found=True, url=url, source=branch)

    return RemoteUrlResult(found=False)
