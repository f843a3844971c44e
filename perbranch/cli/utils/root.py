import os
from pathlib import Path

from perbranch.config import find_root
from perbranch.constants import ROOT_ENV_VAR
from perbranch.errors import RootNotFoundError


def resolve_root() -> Path:
    """
    Locate the perbranch root for the current invocation.

    ``PERBRANCH_ROOT`` wins over searching upward from the current directory.

    Raises:
        RootNotFoundError: If no root can be found
    """
    from_env = os.environ.get(ROOT_ENV_VAR)
    if from_env:
        return Path(from_env).expanduser().resolve()

    root = find_root()
    if root is None:
        raise RootNotFoundError(Path.cwd())
    return root
