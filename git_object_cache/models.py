"""Shared dataclasses used throughout the CLI."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from rich.console import Console


@dataclass(frozen=True, slots=True)
class EnvConfig:
    cache_root: Path
    verbose: bool = False


@dataclass(frozen=True, slots=True)
class RepoUrl:
    """Structural fields of a remote repository URL."""

    address: str
    domain: str
    project: str
    protocol: str = ""
    user: str = ""
    port: str = ""
    path: str = ""

    @property
    def cache_key(self) -> str:
        return f"@{self.domain}"


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """A project registered inside the shared cache of its domain."""

    url: RepoUrl
    directory: Path

    @property
    def key(self) -> str:
        return self.url.cache_key

    @property
    def project(self) -> str:
        return self.url.project

    @property
    def objects(self) -> Path:
        return self.directory / "objects"


@dataclass(frozen=True, slots=True)
class CacheMetadata:
    """Cache facts recorded in a working copy's local config.

    Unset keys read back as empty strings.
    """

    project: str = ""
    repository: str = ""
    directory: str = ""

    @property
    def is_cached(self) -> bool:
        return bool(self.directory)

    @property
    def can_refresh(self) -> bool:
        return bool(self.directory and self.project)


@dataclass(slots=True)
class CacheSummary:
    key: str
    directory: Path
    projects: list[str] = field(default_factory=list)


@dataclass(slots=True)
class AppState:
    """Per-invocation context handed to every command handler."""

    env: EnvConfig
    console: Console
    cwd: Path


__all__ = [
    "EnvConfig",
    "RepoUrl",
    "CacheEntry",
    "CacheMetadata",
    "CacheSummary",
    "AppState",
]
