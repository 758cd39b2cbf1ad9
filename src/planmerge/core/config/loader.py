"""
Configuration loading with multi-layer merging.

Implements the configuration precedence chain:
    defaults < user config < project config < env vars
"""

import json
import os
from pathlib import Path
from typing import Any

from .models import PlanmergeConfig

# Global cache to avoid reloading config multiple times per invocation
_config_cache: PlanmergeConfig | None = None


def get_xdg_config_home() -> Path:
    """
    Get XDG config home directory.

    Returns:
        Path to config directory (defaults to ~/.config)
    """
    if xdg_home := os.environ.get("XDG_CONFIG_HOME"):
        return Path(xdg_home)
    return Path.home() / ".config"


def get_user_config_path() -> Path:
    """
    Get path to user configuration file.

    Returns:
        Path to ~/.config/planmerge/config.json (or XDG equivalent)
    """
    return get_xdg_config_home() / "planmerge" / "config.json"


def get_project_config_path(cwd: Path | None = None) -> Path:
    """
    Get path to project configuration file.

    Args:
        cwd: Working directory to search from (defaults to current directory)

    Returns:
        Path to .planmerge.json in the project root
    """
    if cwd is None:
        cwd = Path.cwd()
    return cwd / ".planmerge.json"


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge two dictionaries.

    Values in `override` take precedence over values in `base`.
    Nested dicts are merged, not replaced.

    Example:
        >>> base = {"a": 1, "b": {"x": 10, "y": 20}}
        >>> override = {"b": {"y": 30, "z": 40}, "c": 3}
        >>> deep_merge(base, override)
        {"a": 1, "b": {"x": 10, "y": 30, "z": 40}, "c": 3}
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def load_json_file(path: Path) -> dict[str, Any] | None:
    """
    Load a JSON file, returning None if it doesn't exist or is invalid.

    Args:
        path: Path to JSON file

    Returns:
        Parsed JSON as dict, or None if file doesn't exist or can't be parsed
    """
    if not path.exists():
        return None

    try:
        with path.open() as f:
            data = json.load(f)
            if isinstance(data, dict):
                return data
            return None
    except (json.JSONDecodeError, OSError) as e:
        # A broken config file should not stop a merge
        print(f"Warning: Failed to parse config at {path}: {e}")
        return None


def _section(result: dict[str, Any], name: str) -> dict[str, Any]:
    section = result.get(name)
    if not isinstance(section, dict):
        section = {}
    else:
        section = section.copy()
    result[name] = section
    return section


def apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    Supported env vars:
        PLANMERGE_HOURS_PER_DAY - overrides reader.hours_per_day
        PLANMERGE_PROJECT_TITLE - overrides export.project_title
        PLANMERGE_WORKSPACE - overrides workspace.path
        PLANMERGE_EVENT_LOG - overrides logging.events

    Args:
        config_dict: Configuration dictionary to override

    Returns:
        Configuration dictionary with env var overrides applied
    """
    result = config_dict.copy()

    if hours_str := os.environ.get("PLANMERGE_HOURS_PER_DAY"):
        try:
            hours = int(hours_str)
            if hours < 1:
                print(f"Warning: PLANMERGE_HOURS_PER_DAY must be >= 1, got {hours}, ignoring")
            else:
                _section(result, "reader")["hours_per_day"] = hours
        except ValueError:
            print(f"Warning: Invalid PLANMERGE_HOURS_PER_DAY value '{hours_str}', ignoring")

    if title := os.environ.get("PLANMERGE_PROJECT_TITLE"):
        _section(result, "export")["project_title"] = title

    if workspace_path := os.environ.get("PLANMERGE_WORKSPACE"):
        _section(result, "workspace")["path"] = workspace_path

    if (events_str := os.environ.get("PLANMERGE_EVENT_LOG")) is not None:
        _section(result, "logging")["events"] = events_str.lower() not in ("false", "0", "")

    return result


def get_default_config() -> dict[str, Any]:
    """
    Get hardcoded default configuration.

    Returns:
        Dictionary with default configuration values
    """
    return {
        "reader": {"hours_per_day": 8},
        "export": {
            "project_title": "Merged Project",
            "start_time": "08:00:00",
            "finish_time": "17:00:00",
            "default_suffix": ".xml",
        },
        "workspace": {"path": ".planmerge/workspace.json"},
        "logging": {"events": True},
    }


def load_config(project_dir: Path | None = None, use_cache: bool = True) -> PlanmergeConfig:
    """
    Load configuration with multi-layer merging.

    Configuration precedence (highest to lowest):
        1. Environment variables (PLANMERGE_*)
        2. Project config (.planmerge.json)
        3. User config (~/.config/planmerge/config.json)
        4. Hardcoded defaults

    Args:
        project_dir: Project directory to load .planmerge.json from (defaults to cwd)
        use_cache: If True, return cached config from previous load

    Returns:
        Validated PlanmergeConfig instance

    Raises:
        ValidationError: If the merged config fails Pydantic validation
    """
    global _config_cache

    if use_cache and _config_cache is not None:
        return _config_cache

    merged = get_default_config()

    if user_config := load_json_file(get_user_config_path()):
        merged = deep_merge(merged, user_config)

    if project_config := load_json_file(get_project_config_path(project_dir)):
        merged = deep_merge(merged, project_config)

    merged = apply_env_overrides(merged)

    config = PlanmergeConfig(**merged)
    _config_cache = config
    return config


def clear_cache() -> None:
    """
    Clear the cached configuration.

    Useful for testing or when config files change during execution.
    """
    global _config_cache
    _config_cache = None
