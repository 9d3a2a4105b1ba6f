"""Handlers for the subcommands the cache layer intercepts.

Every handler takes the invocation state plus the arguments that followed
the subcommand name and returns an exit status.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from rich.table import Table

from . import git
from .alternates import active_lines, add_reference, blank_reference
from .cache import ensure_cache, initialize, list_caches, named_cache_directory, refresh_project
from .exceptions import GitCommandError, ValidationError
from .metadata import clear_metadata, read_metadata, write_metadata
from .models import AppState, CacheEntry
from .urls import parse_url

logger = logging.getLogger(__name__)

DEFAULT_REMOTE = "origin"

# clone options whose value is the following argument
_CLONE_VALUE_OPTIONS = frozenset(
    {
        "-b",
        "--branch",
        "-o",
        "--origin",
        "-u",
        "--upload-pack",
        "-c",
        "--config",
        "-j",
        "--jobs",
        "--reference",
        "--reference-if-able",
        "--separate-git-dir",
        "--template",
        "--depth",
        "--shallow-since",
        "--shallow-exclude",
        "--filter",
        "--server-option",
        "--bundle-uri",
        "--ref-format",
    }
)


def clone(state: AppState, args: Sequence[str]) -> int:
    positionals = clone_positionals(args)
    if not positionals:
        raise ValidationError("Usage: clone [options] <repository> [<directory>]")
    entry = ensure_cache(state.env, parse_url(positionals[0]), state.console)
    status = git.run_git_passthrough(
        ["clone", "--reference", str(entry.directory), *args],
        cwd=state.cwd,
    )
    if status != 0:
        return status
    destination = clone_destination(args, entry, cwd=state.cwd)
    write_metadata(destination, entry)
    return 0


def fetch(state: AppState, args: Sequence[str]) -> int:
    return _refresh_then_delegate(state, "fetch", args)


def pull(state: AppState, args: Sequence[str]) -> int:
    return _refresh_then_delegate(state, "pull", args)


def cache_attach(state: AppState, args: Sequence[str]) -> int:
    repo = _require_working_copy(state)
    metadata = read_metadata(repo)
    if metadata.is_cached:
        state.console.print(f"Already attached to {metadata.directory}")
        return 0
    remote = args[0] if args else DEFAULT_REMOTE
    try:
        upstream = git.remote_url(repo, remote)
    except GitCommandError as exc:
        raise ValidationError(f"Working copy has no '{remote}' remote to derive a cache from.") from exc
    entry = initialize(state.env, [upstream], state.console, working_copy=repo)
    add_reference(repo, entry.objects)
    with state.console.status("Pruning objects now provided by the shared cache…"):
        git.run_git(["gc", "--quiet"], cwd=repo)
    state.console.print(f"Attached to {entry.directory}")
    return 0


def cache_detach(state: AppState, args: Sequence[str]) -> int:
    repo = _require_working_copy(state)
    metadata = read_metadata(repo)
    if not metadata.is_cached:
        state.console.print("Not attached to a shared cache; nothing to detach.")
        return 0
    # Objects borrowed from the cache must be copied in before the link goes away.
    with state.console.status("Repacking objects locally…"):
        git.run_git(["repack", "-a", "-d", "-f", "--quiet"], cwd=repo)
    backup = blank_reference(repo, Path(metadata.directory) / "objects")
    if backup is not None:
        logger.debug("Saved alternates backup to %s", backup)
    clear_metadata(repo)
    state.console.print(f"Detached from {metadata.directory}")
    return 0


def cache_repair(state: AppState, args: Sequence[str]) -> int:
    status = cache_detach(state, [])
    if status != 0:
        return status
    return cache_attach(state, args)


def cache(state: AppState, args: Sequence[str]) -> int:
    """Run a git command inside the cache directory called ``args[0]``."""

    if not args:
        raise ValidationError("Usage: cache <cache-name> <git-command> [args...]")
    name, rest = args[0], list(args[1:])
    directory = named_cache_directory(state.env, name)
    if not directory.is_dir():
        state.console.print(f"No cache named {name} in {state.env.cache_root}")
        return 0
    return git.run_git_passthrough(rest, cwd=directory)


def cache_status(state: AppState, args: Sequence[str]) -> int:
    repo = _require_working_copy(state)
    metadata = read_metadata(repo)
    if not metadata.is_cached:
        state.console.print("Not attached to a shared cache.")
        return 0
    table = Table(title="Cache", show_header=False)
    table.add_column("Field", no_wrap=True)
    table.add_column("Value")
    table.add_row("Project", metadata.project or "?")
    table.add_row("Cache key", metadata.repository or "?")
    table.add_row("Directory", metadata.directory)
    for line in active_lines(repo):
        table.add_row("Alternate", line)
    state.console.print(table)
    return 0


def cache_list(state: AppState, args: Sequence[str]) -> int:
    summaries = list_caches(state.env)
    if not summaries:
        state.console.print(f"No shared caches under {state.env.cache_root}")
        return 0
    table = Table(title="Shared caches")
    table.add_column("Key", no_wrap=True)
    table.add_column("Projects")
    table.add_column("Path")
    for summary in summaries:
        table.add_row(summary.key, ", ".join(summary.projects) or "-", str(summary.directory))
    state.console.print(table)
    return 0


def clone_positionals(args: Sequence[str]) -> list[str]:
    """Return the non-option arguments of ``git clone args``: repository, then directory."""

    positionals: list[str] = []
    tokens = iter(args)
    for token in tokens:
        if token == "--":
            positionals.extend(tokens)
            break
        if token in _CLONE_VALUE_OPTIONS:
            next(tokens, None)
        elif not token.startswith("-") or token == "-":
            positionals.append(token)
    return positionals


def clone_destination(args: Sequence[str], entry: CacheEntry, *, cwd: Path) -> Path:
    """Return the directory ``git clone args`` creates."""

    positionals = clone_positionals(args)
    if len(positionals) > 1:
        return cwd / positionals[1]
    if "--bare" in args or "--mirror" in args:
        return cwd / f"{entry.project}.git"
    return cwd / entry.project


def _refresh_then_delegate(state: AppState, command: str, args: Sequence[str]) -> int:
    if git.is_repository(state.cwd):
        metadata = read_metadata(state.cwd)
        if metadata.can_refresh:
            directory = Path(metadata.directory)
            if directory.is_dir():
                refresh_project(directory, metadata.project, state.console)
            else:
                logger.warning("Shared cache %s is missing; run cache-repair", directory)
    return git.run_git_passthrough([command, *args], cwd=state.cwd)


def _require_working_copy(state: AppState) -> Path:
    if not git.is_repository(state.cwd):
        raise ValidationError(f"Not inside a git working copy: {state.cwd}")
    return state.cwd


__all__ = [
    "clone",
    "fetch",
    "pull",
    "cache_attach",
    "cache_detach",
    "cache_repair",
    "cache",
    "cache_status",
    "cache_list",
    "clone_positionals",
    "clone_destination",
]
