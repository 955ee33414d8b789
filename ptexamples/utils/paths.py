# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Path utilities for ptexamples.

Config values name directories relative to the project root. These helpers
find that root and turn config strings into absolute paths.
"""

from pathlib import Path
from typing import Optional


def resolve_project_root(start: Optional[Path] = None) -> Path:
    """
    Walk up from `start` (default: the working directory) to the project root.

    The project root is the first ancestor holding a pyproject.toml. When
    there is none, as with an installed package run from an arbitrary
    folder, the starting directory itself is the root.
    """
    origin = (start or Path.cwd()).resolve()
    current = origin
    while current != current.parent:
        if (current / "pyproject.toml").exists():
            return current
        current = current.parent
    return origin


def resolve_path(value: str, project_root: Path) -> Path:
    """Absolute paths pass through; relative ones are anchored at the project root."""
    path = Path(value).expanduser()
    if path.is_absolute():
        return path
    return project_root / path


def ensure_directory(path: Path) -> Path:
    """Create a directory (and parents) if it doesn't exist. Returns the path for chaining."""
    path.mkdir(parents=True, exist_ok=True)
    return path
