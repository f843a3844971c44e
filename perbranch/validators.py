"""Input validation for URLs, branch names and target paths."""

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from git import Git
from git.exc import GitCommandError, GitCommandNotFound


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    error: Optional[str] = None


_URL_PATTERNS = (
    re.compile(r"^https?://.+/.+/.+"),
    re.compile(r"^git@.+:.+/.+"),
    re.compile(r"^git://.+/.+/.+"),
)

_INVALID_BRANCH_PATTERNS = (
    re.compile(r"\.\."),  # consecutive dots
    re.compile(r"^[/.]"),  # leading slash or dot
    re.compile(r"/$"),
    re.compile(r"\.lock$"),
    re.compile(r"@\{"),
    re.compile(r"[\x00-\x1f\x7f]"),
    re.compile(r"[ ~^:?*\[\\]"),
)


def validate_git_url(url: str) -> ValidationResult:
    """Check that *url* has one of the supported remote URL shapes."""
    if not any(pattern.match(url) for pattern in _URL_PATTERNS):
        return ValidationResult(
            False,
            "Invalid Git URL format. Expected format: "
            "https://github.com/user/repo.git or git@github.com:user/repo.git",
        )
    return ValidationResult(True)


def validate_branch_name(branch: str) -> ValidationResult:
    """
    Check *branch* against the git ref name restrictions.

    Args:
        branch: Branch name as the user typed it, e.g. ``feature/login``

    Returns:
        ValidationResult with an error message when the name is rejected
    """
    if not branch or not branch.strip():
        return ValidationResult(False, "Branch name cannot be empty")

    for pattern in _INVALID_BRANCH_PATTERNS:
        if pattern.search(branch):
            return ValidationResult(
                False,
                f'Invalid branch name "{branch}". Branch names cannot contain '
                'special characters or patterns like "..", "@{", etc.',
            )

    return ValidationResult(True)


def validate_target_path(path: Path) -> ValidationResult:
    try:
        if os.path.lexists(path):
            return ValidationResult(
                False,
                f"Directory already exists at {path}. Please use a different "
                "branch name or remove the existing directory.",
            )
    except OSError as e:
        return ValidationResult(False, f"Failed to check target path: {e}")
    return ValidationResult(True)


def check_git_installed() -> ValidationResult:
    try:
        Git().version()
    except (GitCommandNotFound, GitCommandError):
        return ValidationResult(
            False,
            "Git is not installed or not in PATH. "
            "Please install Git from https://git-scm.com/downloads",
        )
    return ValidationResult(True)
