"""Environment configuration helpers."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from .models import EnvConfig

CACHE_ROOT_VAR = "GIT_CACHE_ROOT"
VERBOSE_VAR = "GIT_CACHE_VERBOSE"

DEFAULT_CACHE_DIRNAME = ".git-cache"

_TRUTHY = {"1", "true", "yes", "on"}


def load_env_config(environ: dict[str, str] | None = None) -> EnvConfig:
    environ = os.environ if environ is None else environ
    return EnvConfig(
        cache_root=resolve_cache_root(environ.get(CACHE_ROOT_VAR)),
        verbose=environ.get(VERBOSE_VAR, "").strip().lower() in _TRUTHY,
    )


def resolve_cache_root(raw: str | None) -> Path:
    if not raw:
        return Path.home() / DEFAULT_CACHE_DIRNAME
    return Path(raw).expanduser().absolute()


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


__all__ = [
    "CACHE_ROOT_VAR",
    "VERBOSE_VAR",
    "load_env_config",
    "resolve_cache_root",
    "configure_logging",
]
