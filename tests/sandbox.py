"""Offline git fixtures shared by the integration tests.

A sandbox global git config rewrites ``https://example.org/`` and
``git@example.org:`` to local upstream repositories, so cache bootstrap runs
against real git without touching the network.
"""

from __future__ import annotations

import io
import os
import tempfile
from pathlib import Path
from unittest import mock

from rich.console import Console

from git_object_cache.git import run_git
from git_object_cache.models import AppState, EnvConfig

DOMAIN = "example.org"


class GitSandbox:
    def __init__(self) -> None:
        self._tmp = tempfile.TemporaryDirectory(prefix="git-object-cache-test-")
        self.root = Path(self._tmp.name).resolve()
        self.upstreams = self.root / "upstreams"
        self.cache_root = self.root / "cache"
        self.work = self.root / "work"
        self.upstreams.mkdir()
        self.work.mkdir()
        gitconfig = self.root / "gitconfig"
        base = self.upstreams.as_uri() + "/"
        gitconfig.write_text(
            "[user]\n"
            "\tname = Cache Tests\n"
            "\temail = tests@example.org\n"
            "[init]\n"
            "\tdefaultBranch = main\n"
            f'[url "{base}"]\n'
            f"\tinsteadOf = https://{DOMAIN}/\n"
            f"\tinsteadOf = git@{DOMAIN}:\n"
            '[protocol "file"]\n'
            "\tallow = always\n"
        )
        self._env = mock.patch.dict(
            os.environ,
            {
                "GIT_CONFIG_GLOBAL": str(gitconfig),
                "GIT_CONFIG_NOSYSTEM": "1",
                "GIT_TERMINAL_PROMPT": "0",
            },
        )

    def __enter__(self) -> "GitSandbox":
        self._env.start()
        return self

    def __exit__(self, *exc: object) -> None:
        self._env.stop()
        self._tmp.cleanup()

    @property
    def env(self) -> EnvConfig:
        return EnvConfig(cache_root=self.cache_root)

    @property
    def cache_dir(self) -> Path:
        return self.cache_root / f"@{DOMAIN}"

    def state(self, cwd: Path | None = None) -> AppState:
        console = Console(file=io.StringIO(), width=200)
        return AppState(env=self.env, console=console, cwd=cwd or self.work)

    def url(self, name: str) -> str:
        return f"https://{DOMAIN}/{name}.git"

    def make_upstream(self, name: str, *, tag: str | None = None) -> Path:
        path = self.upstreams / f"{name}.git"
        path.mkdir(parents=True)
        run_git(["init", "--quiet"], cwd=path)
        self.commit(path, "README")
        if tag:
            run_git(["tag", tag], cwd=path)
        return path

    def commit(self, repo: Path, filename: str, content: str = "hello\n") -> str:
        (repo / filename).write_text(content)
        run_git(["add", filename], cwd=repo)
        run_git(["commit", "--quiet", "-m", f"Add {filename}"], cwd=repo)
        return run_git(["rev-parse", "HEAD"], cwd=repo).stdout.strip()

    def plain_clone(self, name: str, dest: str) -> Path:
        target = self.work / dest
        run_git(["clone", "--quiet", self.url(name), str(target)])
        return target


def output_of(state: AppState) -> str:
    return state.console.file.getvalue()
