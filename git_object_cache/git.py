"""Minimal utilities for invoking git commands."""

from __future__ import annotations

import logging
import shlex
import shutil
import subprocess
from pathlib import Path
from typing import Sequence

from .exceptions import GitCommandError, GitNotFoundError

logger = logging.getLogger(__name__)


def require_git() -> str:
    path = shutil.which("git")
    if path is None:
        raise GitNotFoundError("Required binary not found in PATH: git")
    return path


def run_git(
    args: Sequence[str],
    *,
    cwd: Path | None = None,
    env: dict[str, str] | None = None,
    check: bool = True,
) -> subprocess.CompletedProcess[str]:
    """Execute a git command with captured output and optionally raise on failure."""

    command = ["git", *args]
    logger.debug("Running %s (cwd=%s)", shlex.join(command), cwd or ".")
    result = subprocess.run(
        command,
        cwd=str(cwd) if cwd else None,
        env=env,
        text=True,
        capture_output=True,
    )
    if check and result.returncode != 0:
        raise GitCommandError(
            command, result.returncode, stdout=result.stdout, stderr=result.stderr, cwd=cwd
        )
    return result


def run_git_passthrough(args: Sequence[str], *, cwd: Path | None = None) -> int:
    """Run git attached to the caller's terminal and return its exit status."""

    command = ["git", *args]
    logger.debug("Delegating %s (cwd=%s)", shlex.join(command), cwd or ".")
    return subprocess.run(command, cwd=str(cwd) if cwd else None).returncode


def is_repository(path: Path) -> bool:
    return run_git(["rev-parse", "--git-dir"], cwd=path, check=False).returncode == 0


def common_dir(repo: Path) -> Path:
    raw = run_git(["rev-parse", "--git-common-dir"], cwd=repo).stdout.strip()
    path = Path(raw)
    return path if path.is_absolute() else (repo / path).resolve()


def config_get(repo: Path, key: str) -> str:
    """Return a local config value, or an empty string when unset."""

    result = run_git(["config", "--local", "--get", key], cwd=repo, check=False)
    if result.returncode == 1:
        return ""
    if result.returncode != 0:
        raise GitCommandError(
            ["git", "config", "--local", "--get", key],
            result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
            cwd=repo,
        )
    return result.stdout.strip()


def config_set(repo: Path, key: str, value: str) -> None:
    run_git(["config", "--local", key, value], cwd=repo)


def config_unset(repo: Path, key: str) -> None:
    # exit 5 means the key was not set
    result = run_git(["config", "--local", "--unset-all", key], cwd=repo, check=False)
    if result.returncode not in (0, 5):
        raise GitCommandError(
            ["git", "config", "--local", "--unset-all", key],
            result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
            cwd=repo,
        )


def remote_names(repo: Path) -> list[str]:
    output = run_git(["remote"], cwd=repo).stdout
    return [line.strip() for line in output.splitlines() if line.strip()]


def remote_url(repo: Path, remote: str = "origin") -> str:
    # read the configured value; `remote get-url` would apply insteadOf rewrites
    return run_git(["config", "--get", f"remote.{remote}.url"], cwd=repo).stdout.strip()


__all__ = [
    "require_git",
    "run_git",
    "run_git_passthrough",
    "is_repository",
    "common_dir",
    "config_get",
    "config_set",
    "config_unset",
    "remote_names",
    "remote_url",
]
