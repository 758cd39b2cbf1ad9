"""Seed PLANMERGE_* settings from .env files.

Sources, highest precedence first:
- variables already exported in the shell
- project files: .env, then .env.local
- the user file: ~/.config/planmerge/.env

A .env file never replaces a variable the shell exported.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable

from dotenv import dotenv_values

from .loader import get_xdg_config_home


def get_user_env_path() -> Path:
    """Path to the per-user .env file."""
    return get_xdg_config_home() / "planmerge" / ".env"


def read_env_file(path: Path) -> dict[str, str]:
    """Parse one .env file. Missing files and valueless keys yield nothing."""
    if not path.exists():
        return {}
    return {
        str(key): str(value)
        for key, value in dotenv_values(path).items()
        if key is not None and value is not None
    }


def load_layered_env(
    *,
    project_dir: Path | None = None,
    user_env_paths: Iterable[Path] | None = None,
    project_env_paths: Iterable[Path] | None = None,
) -> dict[str, str]:
    """Copy values from user and project .env files into os.environ.

    Args:
        project_dir: base directory for project env paths (defaults to cwd)
        user_env_paths: explicit user env file paths
        project_env_paths: explicit project env file paths

    Returns:
        The variables this call set, by name
    """
    project_dir = project_dir or Path.cwd()
    if user_env_paths is None:
        user_env_paths = [get_user_env_path()]
    if project_env_paths is None:
        project_env_paths = [project_dir / ".env", project_dir / ".env.local"]

    applied: dict[str, str] = {}

    for path in user_env_paths:
        for key, value in read_env_file(Path(path)).items():
            if key not in os.environ:
                os.environ[key] = applied[key] = value

    # Project files may replace user-file values but not shell exports
    user_keys = set(applied)
    for path in project_env_paths:
        for key, value in read_env_file(Path(path)).items():
            if key not in os.environ or key in user_keys:
                os.environ[key] = applied[key] = value

    return applied
