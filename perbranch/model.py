"""
Value objects shared by the perbranch components.

Results are immutable dataclasses, built once per call and never mutated
after being returned. ``CloneOptions`` is the only caller-supplied input and
is a pydantic model so that obviously broken values are rejected on
construction.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from perbranch.errors import PerbranchError


@dataclass(frozen=True)
class ParsedGitUrl:
    """
    Components of a git remote URL.

    Attributes:
        owner: User or organization owning the repository
        repo: Repository name, never with a ``.git`` suffix
        protocol: ``"https"`` or ``"ssh"``
        full_url: The URL exactly as given
    """

    owner: str
    repo: str
    protocol: str
    full_url: str


@dataclass(frozen=True)
class RepositoryInfo:
    """An ``owner/repo`` directory and its valid branch checkouts."""

    owner: str
    repo: str
    branches: List[str]
    full_path: Path


class CacheState(Enum):
    ABSENT = "absent"
    INVALID = "invalid"
    VALID = "valid"


@dataclass(frozen=True)
class CacheInfo:
    """
    On-disk state of a repository mirror cache.

    ``exists`` is a pure filesystem check; ``is_valid`` additionally requires
    a bare repository with at least one ref.
    """

    cache_path: Path
    exists: bool
    is_valid: bool

    @property
    def state(self) -> CacheState:
        if not self.exists:
            return CacheState.ABSENT
        if not self.is_valid:
            return CacheState.INVALID
        return CacheState.VALID


@dataclass(frozen=True)
class CachedRepository:
    owner: str
    repo: str
    cache_path: Path
    url: str


@dataclass(frozen=True)
class RemoteUrlResult:
    """Outcome of looking up an origin URL among existing checkouts."""

    found: bool
    url: Optional[str] = None
    source: Optional[str] = None


class CloneOptions(BaseModel):
    """Inputs of a single clone request."""

    model_config = ConfigDict(frozen=True)

    clone_url: str
    base_branch: str
    target_branch: str
    root_dir: Path

    @field_validator("clone_url", "base_branch", "target_branch")
    @classmethod
    def validate_non_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must be a non-empty string")
        return v.strip()


@dataclass(frozen=True)
class CloneResult:
    success: bool
    target_path: Optional[Path] = None
    error: Optional[PerbranchError] = field(default=None, compare=False)
