"""Root discovery, directory layout and per-root settings."""

import configparser
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import BaseModel, ValidationError

from perbranch.constants import (
    CACHE_DIR,
    CONFIG_DIR,
    DEFAULT_LOCK_TIMEOUT,
    SETTINGS_FILE,
    SETTINGS_VERSION,
)
from perbranch.errors import ConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Layout:
    """
    Directory layout of a perbranch root.

    Layout:
        <root>/<owner>/<repo>/<sanitized-branch>/
        <root>/<config_dir_name>/<cache_dir_name>/<owner>/<repo>/
        <root>/<config_dir_name>/perbranch.cfg
    """

    root: Path
    config_dir_name: str = CONFIG_DIR
    cache_dir_name: str = CACHE_DIR

    @property
    def config_dir(self) -> Path:
        return self.root / self.config_dir_name

    @property
    def cache_root(self) -> Path:
        return self.config_dir / self.cache_dir_name

    @property
    def settings_file(self) -> Path:
        return self.config_dir / SETTINGS_FILE

    def cache_path(self, owner: str, repo: str) -> Path:
        return self.cache_root / owner / repo

    def repo_path(self, owner: str, repo: str) -> Path:
        return self.root / owner / repo

    def branch_path(self, owner: str, repo: str, branch_dir: str) -> Path:
        return self.root / owner / repo / branch_dir


def as_layout(root: Union[str, Path, Layout]) -> Layout:
    """Accept either a root directory or an explicit ``Layout``."""
    if isinstance(root, Layout):
        return root
    return Layout(Path(root))


class ConfigAccessor:
    """
    A dict-like accessor for a root's settings file.

    Usage:
        config = ConfigAccessor(layout.settings_file)
        value = config.get('cache', 'enabled', default='true')
    """

    def __init__(self, config_path: Path):
        self.config_path = Path(config_path)
        self.config = configparser.ConfigParser()
        if self.config_path.exists():
            self.config.read(self.config_path)

    def exists(self) -> bool:
        return self.config_path.exists()

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """
        Get a configuration value from the specified section and key.

        Args:
            section: The configuration section
            key: The configuration key
            default: Value to return if the section or key doesn't exist

        Returns:
            The configuration value if it exists, otherwise the default value
        """
        try:
            return self.config[section][key]
        except (KeyError, configparser.NoSectionError, configparser.NoOptionError):
            return default

    def set(self, section: str, key: str, value: str) -> None:
        if not self.config.has_section(section):
            self.config.add_section(section)

        self.config[section][key] = value

    def save(self) -> None:
        """
        Save the current configuration to the settings file.

        Raises:
            ConfigError: If the file cannot be written
        """
        try:
            with open(self.config_path, "w") as configfile:
                self.config.write(configfile)
        except OSError as e:
            raise ConfigError(
                "Failed to save configuration",
                f"Please check write permissions for {self.config_path.parent}",
                e,
            )

    def sections(self) -> list:
        return self.config.sections()


class Settings(BaseModel):
    """Validated contents of ``perbranch.cfg``."""

    version: str
    created_at: Optional[str] = None
    cache_enabled: bool = True
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT


def find_root(
    start_dir: Optional[Union[str, Path]] = None, config_dir_name: str = CONFIG_DIR
) -> Optional[Path]:
    """
    Search upward from *start_dir* for a directory holding the config directory.

    Symlinks are resolved first. Directories that cannot be inspected because
    of missing permissions are skipped.

    Args:
        start_dir: Where to start searching (defaults to the current directory)
        config_dir_name: Name of the reserved config directory

    Returns:
        The root directory, or None when the filesystem root is reached
    """
    current = Path(start_dir or os.getcwd()).resolve()

    while True:
        candidate = current / config_dir_name
        try:
            if candidate.is_dir():
                return current
        except PermissionError:
            logger.debug(f"Permission denied while inspecting {candidate}")

        if current.parent == current:
            return None
        current = current.parent


def initialize_root(target_dir: Optional[Union[str, Path]] = None) -> Path:
    """
    Turn *target_dir* into a perbranch root.

    Args:
        target_dir: Directory to initialize (defaults to the current directory)

    Returns:
        The initialized root directory

    Raises:
        ConfigError: If the directory is already a root or cannot be written
    """
    layout = Layout(Path(target_dir or os.getcwd()))

    if layout.config_dir.exists():
        raise ConfigError(
            f"{layout.config_dir_name} directory already exists",
            f"Remove {layout.config_dir} if you want to reinitialize",
        )

    try:
        layout.config_dir.mkdir(parents=True)
    except OSError as e:
        raise ConfigError(
            "Failed to initialize configuration",
            "Please check write permissions for the current directory",
            e,
        )

    config = ConfigAccessor(layout.settings_file)
    config.set("core", "version", SETTINGS_VERSION)
    config.set("core", "created_at", datetime.now(timezone.utc).isoformat())
    config.set("cache", "enabled", "true")
    config.set("cache", "lock_timeout", str(int(DEFAULT_LOCK_TIMEOUT)))
    config.save()

    logger.debug(f"Initialized perbranch root at {layout.root}")
    return layout.root


def load_settings(root: Union[str, Path, Layout]) -> Settings:
    """
    Load and validate the settings of a root.

    Raises:
        ConfigError: If the settings file is missing or invalid
    """
    layout = as_layout(root)
    config = ConfigAccessor(layout.settings_file)

    if not config.exists():
        raise ConfigError(
            "Failed to load configuration",
            'Run "perbranch init" to initialize configuration',
        )

    values = {
        "version": config.get("core", "version"),
        "created_at": config.get("core", "created_at"),
        "cache_enabled": config.get("cache", "enabled"),
        "lock_timeout": config.get("cache", "lock_timeout"),
    }
    values = {
        key: value
        for key, value in values.items()
        if value is not None or key == "version"
    }

    try:
        return Settings.model_validate(values)
    except ValidationError as e:
        raise ConfigError(
            "Invalid configuration file",
            f"Please fix or recreate {layout.settings_file}",
            e,
        )
