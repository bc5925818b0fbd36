from __future__ import annotations

from pathlib import Path
from typing import Iterable

UNKNOWN_PROJECT = "Unknown project"
DEFAULT_PROJECT_FOLDERS = ("code", "projects", "repos")


def derive_project_label(
    working_directory: str,
    container_names: Iterable[str] = DEFAULT_PROJECT_FOLDERS,
) -> str:
    """Guess the project name from a working directory.

    ``~/code/my-project/src`` gives ``my-project``: the component right after the
    last container folder wins, otherwise the final component is used.
    """
    cleaned = working_directory[:-1] if working_directory.endswith("/") else working_directory
    components = [part for part in cleaned.split("/") if part]
    if not components:
        return UNKNOWN_PROJECT
    containers = set(container_names)
    matches = [idx for idx, part in enumerate(components) if part in containers]
    if matches and matches[-1] + 1 < len(components):
        return components[matches[-1] + 1]
    return components[-1]


def abbreviate_home(path: str, home: str | None = None) -> str:
    """Replace a leading home directory with ``~``."""
    home_dir = home if home is not None else str(Path.home())
    if home_dir and path.startswith(home_dir):
        return "~" + path[len(home_dir) :]
    return path
