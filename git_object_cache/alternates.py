"""Read and edit a working copy's ``objects/info/alternates`` file."""

from __future__ import annotations

import logging
import shutil
from datetime import datetime
from pathlib import Path

from . import git

logger = logging.getLogger(__name__)


def alternates_path(repo: Path) -> Path:
    return git.common_dir(repo) / "objects" / "info" / "alternates"


def active_lines(repo: Path) -> list[str]:
    path = alternates_path(repo)
    if not path.exists():
        return []
    return [line.strip() for line in path.read_text().splitlines() if line.strip()]


def _same_directory(line: str, objects: Path) -> bool:
    return Path(line).expanduser().resolve() == objects.resolve()


def has_reference(repo: Path, objects: Path) -> bool:
    return any(_same_directory(line, objects) for line in active_lines(repo))


def add_reference(repo: Path, objects: Path) -> bool:
    """Append ``objects`` to the alternates file unless a live line already points at it."""

    if has_reference(repo, objects):
        logger.debug("Alternates of %s already reference %s", repo, objects)
        return False
    path = alternates_path(repo)
    path.parent.mkdir(parents=True, exist_ok=True)
    existing = path.read_text() if path.exists() else ""
    prefix = "" if not existing or existing.endswith("\n") else "\n"
    with path.open("a") as handle:
        handle.write(f"{prefix}{objects}\n")
    return True


def blank_reference(repo: Path, objects: Path, *, now: datetime | None = None) -> Path | None:
    """Blank every line pointing at ``objects`` and return the backup path.

    Lines are emptied in place rather than removed. Returns ``None`` when the
    file does not exist.
    """

    path = alternates_path(repo)
    if not path.exists():
        return None
    stamp = (now or datetime.now()).strftime("%Y%m%d%H%M%S")
    backup = path.with_name(f"{path.name}.{stamp}.bak")
    shutil.copy2(path, backup)
    lines = path.read_text().splitlines()
    edited = ["" if line.strip() and _same_directory(line.strip(), objects) else line for line in lines]
    path.write_text("".join(f"{line}\n" for line in edited))
    return backup


__all__ = [
    "alternates_path",
    "active_lines",
    "has_reference",
    "add_reference",
    "blank_reference",
]
