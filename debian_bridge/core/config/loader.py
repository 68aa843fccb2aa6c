"""
Configuration loader — reads config.yml into the Settings model.

Locations follow the XDG base directory spec:

    $XDG_CONFIG_HOME/debian_bridge/config.yml     settings
    $XDG_CONFIG_HOME/debian_bridge/registry.json  installed programs
    $XDG_CACHE_HOME/debian_bridge/                scratch build contexts

A missing settings file is not an error: defaults are used, with the
uid/gid of the current user.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from debian_bridge.core.errors import ConfigError
from debian_bridge.core.models.settings import Settings

logger = logging.getLogger(__name__)

APP_NAME = "debian_bridge"
CONFIG_FILE = "config.yml"
REGISTRY_FILE = "registry.json"

CONFIG_ENV_VAR = "DEBIAN_BRIDGE_CONFIG"

_USER_DIRS_DESKTOP = re.compile(r'^XDG_DESKTOP_DIR="?([^"\n]+)"?\s*$', re.MULTILINE)


def config_home() -> Path:
    """Per-user config directory for debian-bridge."""
    base = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / APP_NAME


def cache_home() -> Path:
    """Per-user cache directory for debian-bridge."""
    base = os.environ.get("XDG_CACHE_HOME") or str(Path.home() / ".cache")
    return Path(base) / APP_NAME


def desktop_dir() -> Path:
    """The user's desktop directory.

    Honors XDG_DESKTOP_DIR from the environment or user-dirs.dirs,
    falling back to ~/Desktop.
    """
    home = Path.home()
    value = os.environ.get("XDG_DESKTOP_DIR")
    if not value:
        base = os.environ.get("XDG_CONFIG_HOME") or str(home / ".config")
        user_dirs = Path(base) / "user-dirs.dirs"
        try:
            match = _USER_DIRS_DESKTOP.search(user_dirs.read_text(encoding="utf-8"))
        except OSError:
            match = None
        if match:
            value = match.group(1)
    if not value:
        return home / "Desktop"
    return Path(value.replace("$HOME", str(home))).expanduser()


def default_config_path() -> Path:
    """Settings file path, honoring DEBIAN_BRIDGE_CONFIG."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return config_home() / CONFIG_FILE


def load_settings(path: Path | None = None) -> Settings:
    """Load and validate settings.

    Args:
        path: Explicit settings file. If None, uses default_config_path().

    Returns:
        Settings with every path field resolved.

    Raises:
        ConfigError: If the file exists but is unreadable or invalid.
    """
    if path is None:
        path = default_config_path()

    data: dict = {}
    if path.is_file():
        logger.debug("Loading settings from %s", path)
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Cannot read {path}: {e}") from e

        try:
            loaded = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigError(f"Expected a YAML mapping in {path}, got {type(loaded).__name__}")
        data = loaded
    else:
        logger.debug("No settings file at %s — using defaults", path)

    data.setdefault("uid", os.getuid())
    data.setdefault("gid", os.getgid())

    try:
        settings = Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    return resolve_paths(settings)


def resolve_paths(settings: Settings) -> Settings:
    """Fill empty path fields from the XDG locations."""
    updates: dict[str, str] = {}
    if not settings.registry_path:
        updates["registry_path"] = str(config_home() / REGISTRY_FILE)
    if not settings.cache_path:
        updates["cache_path"] = str(cache_home())
    if not settings.desktop_dir:
        updates["desktop_dir"] = str(desktop_dir())
    if not settings.runtime_dir:
        runtime = os.environ.get("XDG_RUNTIME_DIR")
        if runtime:
            updates["runtime_dir"] = runtime
    return settings.model_copy(update=updates) if updates else settings
