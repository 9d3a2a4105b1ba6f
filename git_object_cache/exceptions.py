"""Custom error hierarchy for git-object-cache."""

from __future__ import annotations

from pathlib import Path


class GitCacheError(RuntimeError):
    """Base error for the CLI."""


class GitNotFoundError(GitCacheError):
    """Raised when the git binary cannot be located."""


class GitCommandError(GitCacheError):
    """Raised when an underlying git command fails."""

    def __init__(
        self,
        command: list[str],
        returncode: int,
        *,
        stdout: str | None = None,
        stderr: str | None = None,
        cwd: Path | str | None = None,
    ):
        self.command = command
        self.returncode = returncode
        self.cwd = cwd
        self.stdout = stdout or ""
        self.stderr = stderr or ""
        where = f" in {cwd}" if cwd else ""
        message = f"`{' '.join(command)}`{where} exited with status {returncode}"
        details = "\n".join(filter(None, (self.stdout.strip(), self.stderr.strip())))
        if details:
            message = f"{message}\n{details}"
        super().__init__(message)


class UnparseableUrlError(GitCacheError):
    """Raised when no domain or project can be read from a repository URL."""


class CacheBootstrapError(GitCacheError):
    """Raised when a shared cache or one of its project remotes cannot be created."""


class ValidationError(GitCacheError):
    """Raised when the invocation cannot be acted on."""


__all__ = [
    "GitCacheError",
    "GitNotFoundError",
    "GitCommandError",
    "UnparseableUrlError",
    "CacheBootstrapError",
    "ValidationError",
]
