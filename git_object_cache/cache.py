"""Shared cache addressing and lifecycle.

Every hosting domain gets one bare repository under the cache root, named by
its cache key (``@<domain>``). Each project cloned from that domain is a
remote inside it, named after the project and fetched without tags.
"""

from __future__ import annotations

import logging
import shutil
import signal
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Sequence

from rich.console import Console

from . import git
from .exceptions import CacheBootstrapError, GitCommandError
from .metadata import write_metadata
from .models import CacheEntry, CacheSummary, EnvConfig, RepoUrl
from .urls import find_url

logger = logging.getLogger(__name__)

_TRAPPED_SIGNALS = tuple(
    getattr(signal, name) for name in ("SIGHUP", "SIGINT", "SIGQUIT", "SIGTERM") if hasattr(signal, name)
)


def cache_directory(env: EnvConfig, domain: str) -> Path:
    return env.cache_root / f"@{domain}"


def named_cache_directory(env: EnvConfig, name: str) -> Path:
    return env.cache_root / name


def initialize(
    env: EnvConfig,
    args: Sequence[str],
    console: Console,
    *,
    working_copy: Path | None = None,
) -> CacheEntry:
    """Make sure the project named by ``args`` is cached and optionally record it.

    ``args`` may be a whole command line; the last token that parses as a
    remote URL is used.
    """

    url = find_url(args)
    entry = ensure_cache(env, url, console)
    if working_copy is not None:
        write_metadata(working_copy, entry)
    return entry


def ensure_cache(env: EnvConfig, url: RepoUrl, console: Console) -> CacheEntry:
    entry = CacheEntry(url=url, directory=cache_directory(env, url.domain))
    if not entry.directory.exists():
        _create_cache(entry, console)
    elif url.project in git.remote_names(entry.directory):
        logger.debug("Project %s already cached in %s", url.project, entry.directory)
    else:
        _add_project(entry, console)
    return entry


def refresh_project(directory: Path, project: str, console: Console) -> None:
    """Fetch ``project`` into the shared cache and let git compact it if needed."""

    with console.status(f"Refreshing {project} in shared cache…"):
        git.run_git(["fetch", "--append", project], cwd=directory)
    result = git.run_git(["gc", "--auto"], cwd=directory, check=False)
    if result.returncode != 0:
        logger.warning("git gc --auto failed in %s: %s", directory, result.stderr.strip())


def list_caches(env: EnvConfig) -> list[CacheSummary]:
    root = env.cache_root
    if not root.is_dir():
        return []
    summaries: list[CacheSummary] = []
    for child in sorted(root.iterdir()):
        if not child.is_dir():
            continue
        try:
            projects = sorted(git.remote_names(child))
        except GitCommandError as exc:
            logger.warning("Skipping %s: %s", child, exc)
            continue
        summaries.append(CacheSummary(key=child.name, directory=child, projects=projects))
    return summaries


def _create_cache(entry: CacheEntry, console: Console) -> None:
    console.print(f"Creating shared cache {entry.directory}")
    try:
        with _creation_scope(entry.directory):
            entry.directory.mkdir(parents=True)
            git.run_git(["init", "--bare", "--quiet"], cwd=entry.directory)
            _bootstrap_remote(entry, console)
    except GitCommandError as exc:
        raise CacheBootstrapError(
            f"Unable to create shared cache {entry.directory} for {entry.url.address}\n{exc}"
        ) from exc


def _add_project(entry: CacheEntry, console: Console) -> None:
    try:
        _bootstrap_remote(entry, console)
    except BaseException as exc:
        _discard_remote(entry)
        if isinstance(exc, GitCommandError):
            raise CacheBootstrapError(
                f"Unable to add {entry.project} to shared cache {entry.directory}\n{exc}"
            ) from exc
        raise


def _bootstrap_remote(entry: CacheEntry, console: Console) -> None:
    """Register ``entry.project`` as a no-tags remote of the shared cache.

    The upstream is first cloned into a scratch bare repository and fetched
    from there; the remote is then pointed at the real address and fetched
    again so its bookkeeping matches the upstream.
    """

    directory = entry.directory
    project = entry.project
    address = entry.url.address
    with tempfile.TemporaryDirectory(prefix=f"git-cache-{project}-") as scratch:
        mirror = Path(scratch) / f"{project}.git"
        with console.status(f"Cloning {address} into {entry.key}…"):
            git.run_git(["clone", "--bare", "--quiet", address, str(mirror)])
        git.run_git(["remote", "add", "--no-tags", project, str(mirror)], cwd=directory)
        git.run_git(["fetch", "--quiet", project], cwd=directory)
        git.run_git(["remote", "set-url", project, address], cwd=directory)
        with console.status(f"Fetching {address}…"):
            git.run_git(["fetch", "--quiet", "--prune", project], cwd=directory)


def _discard_remote(entry: CacheEntry) -> None:
    listed = git.run_git(["remote"], cwd=entry.directory, check=False)
    if listed.returncode != 0 or entry.project not in listed.stdout.split():
        return
    result = git.run_git(["remote", "remove", entry.project], cwd=entry.directory, check=False)
    if result.returncode != 0:
        logger.warning(
            "Could not remove partial remote %s from %s: %s",
            entry.project,
            entry.directory,
            result.stderr.strip(),
        )


@contextmanager
def _creation_scope(directory: Path) -> Iterator[None]:
    """Remove ``directory`` if the block raises or a termination signal arrives."""

    previous = _trap_signals()
    try:
        yield
    except BaseException:
        logger.debug("Removing partially created cache %s", directory)
        shutil.rmtree(directory, ignore_errors=True)
        raise
    finally:
        _restore_signals(previous)


def _raise_exit(signum: int, _: Any) -> None:
    raise SystemExit(128 + signum)


def _trap_signals() -> dict[int, Any]:
    if threading.current_thread() is not threading.main_thread():
        return {}
    previous: dict[int, Any] = {}
    for signum in _TRAPPED_SIGNALS:
        previous[signum] = signal.signal(signum, _raise_exit)
    return previous


def _restore_signals(previous: dict[int, Any]) -> None:
    for signum, handler in previous.items():
        signal.signal(signum, signal.SIG_DFL if handler is None else handler)


__all__ = [
    "cache_directory",
    "named_cache_directory",
    "initialize",
    "ensure_cache",
    "refresh_project",
    "list_caches",
]
