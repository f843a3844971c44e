"""
Git operations for perbranch.

Layout:
    <root>/<owner>/<repo>/<branch>/             one working tree per branch
    <root>/.perbranch/.cache/<owner>/<repo>/     bare mirror used as clone reference

Components:
    - url: remote URL parsing
    - scanner: discovery of existing branch checkouts
    - remote: origin URL recovery from existing checkouts
    - default_branch: default branch detection
    - cache: mirror cache lifecycle
    - clone: the clone orchestration built on all of the above
"""

from .cache import (
    create_cache,
    get_cache_info,
    get_cache_path,
    get_cache_url,
    get_cached_owners,
    get_cached_repos,
    prepare_cache,
    remove_cache,
    scan_cached_repositories,
    update_cache,
    validate_cache,
)
from .clone import clone_repository, sanitize_branch_name
from .default_branch import detect_default_branch
from .remote import resolve_remote_url
from .scanner import is_git_repository, scan_repositories
from .url import parse_git_url

__all__ = [
    "clone_repository",
    "sanitize_branch_name",
    "create_cache",
    "get_cache_info",
    "get_cache_path",
    "get_cache_url",
    "get_cached_owners",
    "get_cached_repos",
    "prepare_cache",
    "remove_cache",
    "scan_cached_repositories",
    "update_cache",
    "validate_cache",
    "detect_default_branch",
    "resolve_remote_url",
    "is_git_repository",
    "scan_repositories",
    "parse_git_url",
]
