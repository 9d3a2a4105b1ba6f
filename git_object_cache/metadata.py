"""Cache metadata recorded in a working copy's local git config."""

from __future__ import annotations

import logging
from pathlib import Path

from . import git
from .models import CacheEntry, CacheMetadata

logger = logging.getLogger(__name__)

PROJECT_KEY = "cache.project"
REPOSITORY_KEY = "cache.repository"
DIRECTORY_KEY = "cache.directory"

METADATA_KEYS = (PROJECT_KEY, REPOSITORY_KEY, DIRECTORY_KEY)


def get_cache_directory(repo: Path) -> str:
    return git.config_get(repo, DIRECTORY_KEY)


def get_project(repo: Path) -> str:
    return git.config_get(repo, PROJECT_KEY)


def get_repository(repo: Path) -> str:
    return git.config_get(repo, REPOSITORY_KEY)


def read_metadata(repo: Path) -> CacheMetadata:
    return CacheMetadata(
        project=get_project(repo),
        repository=get_repository(repo),
        directory=get_cache_directory(repo),
    )


def is_cached(repo: Path) -> bool:
    return bool(get_cache_directory(repo))


def write_metadata(repo: Path, entry: CacheEntry) -> None:
    """Record ``entry`` in ``repo``, replacing earlier values."""

    logger.debug("Recording cache metadata for %s in %s", entry.project, repo)
    git.config_set(repo, PROJECT_KEY, entry.project)
    git.config_set(repo, REPOSITORY_KEY, entry.key)
    git.config_set(repo, DIRECTORY_KEY, str(entry.directory))


def clear_metadata(repo: Path) -> None:
    for key in METADATA_KEYS:
        git.config_unset(repo, key)


__all__ = [
    "PROJECT_KEY",
    "REPOSITORY_KEY",
    "DIRECTORY_KEY",
    "METADATA_KEYS",
    "get_cache_directory",
    "get_project",
    "get_repository",
    "read_metadata",
    "is_cached",
    "write_metadata",
    "clear_metadata",
]
