"""
Exception classes for perbranch.

Every error that reaches a caller is a ``PerbranchError`` carrying a
human-actionable ``suggestion``. Failures coming out of git itself are
classified from the structured ``GitCommandError`` (exit status, command verb
and stderr) by ``categorize_git_error``.
"""

from enum import Enum
from typing import Optional, Sequence, Union

from git.exc import CommandError, GitCommandError, GitCommandNotFound


class PerbranchError(Exception):
    """Base exception for all perbranch errors."""

    def __init__(
        self,
        message: str,
        suggestion: Optional[str] = None,
        original_error: Optional[BaseException] = None,
    ):
        self.message = message
        self.suggestion = suggestion
        self.original_error = original_error
        super().__init__(message)


class MalformedUrlError(PerbranchError):
    """Raised when a git remote URL cannot be parsed into owner and repo."""

    def __init__(self, url: str, original_error: Optional[BaseException] = None):
        self.url = url
        super().__init__(
            f"Invalid Git URL format: '{url}'",
            "Please provide a valid Git URL in the format: "
            "https://github.com/user/repo.git or git@github.com:user/repo.git",
            original_error,
        )


class InvalidBranchNameError(PerbranchError):
    def __init__(self, branch: str, reason: str):
        self.branch = branch
        super().__init__(
            reason,
            'Branch names cannot contain spaces, "..", "@{" or any of ~^:?*[\\',
        )


class TargetExistsError(PerbranchError):
    """Raised when the branch working directory is already present."""

    def __init__(self, target_path, original_error: Optional[BaseException] = None):
        self.target_path = target_path
        super().__init__(
            f"Directory already exists at {target_path}",
            "Please use a different branch name or remove the existing directory",
            original_error,
        )


class BranchNameCollisionError(PerbranchError):
    """Raised when a new local branch would shadow an existing remote branch."""

    def __init__(self, branch: str):
        self.branch = branch
        super().__init__(
            f'Remote branch "{branch}" already exists. '
            "Cannot create a new local branch with the same name.",
            f'Use "{branch}" as the base branch to work on it, '
            "or choose a different name for the new branch",
        )


class AuthenticationFailedError(PerbranchError):
    def __init__(self, original_error: Optional[BaseException] = None, ssh: bool = False):
        if ssh:
            suggestion = (
                "Please ensure your SSH key is configured: "
                "https://docs.github.com/en/authentication"
            )
        else:
            suggestion = (
                "Please ensure your SSH key is configured or use HTTPS with credentials"
            )
        super().__init__("Authentication failed", suggestion, original_error)


class RepositoryNotFoundError(PerbranchError):
    def __init__(self, original_error: Optional[BaseException] = None):
        super().__init__(
            "Repository not found",
            "Please check the repository URL and your access permissions",
            original_error,
        )


class BaseBranchNotFoundError(PerbranchError):
    def __init__(self, branch: str, original_error: Optional[BaseException] = None):
        self.branch = branch
        super().__init__(
            f'Base branch "{branch}" not found',
            "Please check the branch name. Common branches: main, master, develop",
            original_error,
        )


class CloneFailedError(PerbranchError):
    def __init__(
        self,
        message: str = "Failed to clone repository",
        suggestion: str = "Please check the repository URL and your network connection",
        original_error: Optional[BaseException] = None,
    ):
        super().__init__(message, suggestion, original_error)


class ScanFailureError(PerbranchError):
    """Raised when the root directory cannot be walked."""

    def __init__(self, root_dir, original_error: Optional[BaseException] = None):
        self.root_dir = root_dir
        super().__init__(
            f"Failed to scan repositories in {root_dir}",
            "Please check file system permissions",
            original_error,
        )


class ConfigError(PerbranchError):
    pass


class RootNotFoundError(ConfigError):
    def __init__(self, start_dir):
        self.start_dir = start_dir
        super().__init__(
            f"No perbranch root found from {start_dir}",
            'Run "perbranch init" in the directory that should hold your clones',
        )


class GitErrorCategory(Enum):
    TARGET_EXISTS = "target_exists"
    AUTHENTICATION = "authentication"
    REPOSITORY_NOT_FOUND = "repository_not_found"
    BRANCH_NOT_FOUND = "branch_not_found"
    OTHER = "other"


_AUTH_MARKERS = (
    "authentication failed",
    "permission denied",
    "could not read username",
    "could not read password",
    "terminal prompts disabled",
    "host key verification failed",
)
_REPOSITORY_MARKERS = (
    "repository not found",
    "does not appear to be a git repository",
    "does not exist",
    "not found",
)
_BRANCH_MARKERS = (
    "couldn't find remote ref",
    "not a valid object name",
    "invalid reference",
    "did not match any file(s) known to git",
    "is not a commit",
    "unknown revision",
)


def _git_verb(command: Union[str, Sequence[str], None]) -> Optional[str]:
    """Return the git subcommand (``clone``, ``fetch``...) of a failed call."""
    if not command:
        return None
    parts = command.split() if isinstance(command, str) else list(command)
    for part in parts[1:]:
        part = str(part)
        if not part.startswith("-"):
            return part
    return None


def categorize_git_error(error: GitCommandError) -> GitErrorCategory:
    """
    Classify a failed git invocation.

    The decision uses the exit status, the subcommand that failed and its
    stderr, in that order of specificity. Branch lookups are only considered
    for the commands that can fail on a missing ref.

    Args:
        error: The exception raised by GitPython

    Returns:
        The matching category, ``GitErrorCategory.OTHER`` when nothing matches
    """
    stderr = str(error.stderr or "").lower()
    verb = _git_verb(error.command)

    if isinstance(error.status, Exception):
        # git never ran to completion, the status holds the underlying exception
        return GitErrorCategory.OTHER

    if verb == "clone" and "already exists" in stderr:
        return GitErrorCategory.TARGET_EXISTS

    if any(marker in stderr for marker in _AUTH_MARKERS):
        return GitErrorCategory.AUTHENTICATION

    if verb in ("fetch", "checkout") and (
        any(marker in stderr for marker in _BRANCH_MARKERS)
        or ("branch" in stderr and "not found" in stderr)
    ):
        return GitErrorCategory.BRANCH_NOT_FOUND

    if any(marker in stderr for marker in _REPOSITORY_MARKERS):
        return GitErrorCategory.REPOSITORY_NOT_FOUND

    return GitErrorCategory.OTHER


def error_from_git_failure(
    error: CommandError, base_branch: str, target_path=None
) -> PerbranchError:
    """
    Build the ``PerbranchError`` matching a failed git command.

    Args:
        error: The exception raised by GitPython
        base_branch: Branch the caller asked to start from, used in messages
        target_path: Working directory of the clone, used in messages

    Returns:
        A ``PerbranchError`` subclass instance wrapping *error*
    """
    if isinstance(error, GitCommandNotFound):
        return CloneFailedError(
            "Git is not installed or not in PATH",
            "Please install Git from https://git-scm.com/downloads",
            error,
        )
    if not isinstance(error, GitCommandError):
        return CloneFailedError(original_error=error)

    category = categorize_git_error(error)
    if category is GitErrorCategory.TARGET_EXISTS:
        return TargetExistsError(target_path, error)
    if category is GitErrorCategory.AUTHENTICATION:
        return AuthenticationFailedError(
            error, ssh="ssh" in str(error.stderr or "").lower()
        )
    if category is GitErrorCategory.BRANCH_NOT_FOUND:
        return BaseBranchNotFoundError(base_branch, error)
    if category is GitErrorCategory.REPOSITORY_NOT_FOUND:
        return RepositoryNotFoundError(error)
    return CloneFailedError(original_error=error)
