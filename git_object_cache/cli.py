"""Typer entrypoint for git-object-cache.

The command line is a git command line: recognised subcommands are handled
by the cache layer, everything else is handed to git untouched.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from . import git
from .config import configure_logging, load_env_config
from .dispatch import dispatch
from .exceptions import GitCacheError
from .models import AppState

app = typer.Typer(add_completion=False)

# Arguments must reach git verbatim, including --help and anything after "--".
_PASSTHROUGH_SETTINGS = {
    "allow_extra_args": True,
    "ignore_unknown_options": True,
    "allow_interspersed_args": False,
    "help_option_names": [],
}


@app.command(context_settings=_PASSTHROUGH_SETTINGS)
def main(ctx: typer.Context) -> None:
    env = load_env_config()
    configure_logging(env.verbose)
    console = Console(stderr=True)
    try:
        git.require_git()
        state = AppState(env=env, console=console, cwd=Path.cwd())
        status = dispatch(state, ctx.args)
    except GitCacheError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(1) from exc
    raise typer.Exit(status)


__all__ = ["app"]
