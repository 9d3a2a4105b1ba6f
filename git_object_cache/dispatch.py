"""Route a git command line to a cache handler or straight to git."""

from __future__ import annotations

import logging
from typing import Callable, Sequence

from . import commands, git
from .models import AppState

logger = logging.getLogger(__name__)

Handler = Callable[[AppState, Sequence[str]], int]

HANDLERS: dict[str, Handler] = {
    "clone": commands.clone,
    "fetch": commands.fetch,
    "pull": commands.pull,
    "cache_attach": commands.cache_attach,
    "cache_detach": commands.cache_detach,
    "cache_repair": commands.cache_repair,
    "cache_status": commands.cache_status,
    "cache_list": commands.cache_list,
    "cache": commands.cache,
}


def lookup(name: str) -> Handler | None:
    return HANDLERS.get(name.replace("-", "_"))


def dispatch(state: AppState, argv: Sequence[str]) -> int:
    argv = list(argv)
    handler = lookup(argv[0]) if argv else None
    if handler is None:
        return git.run_git_passthrough(argv, cwd=state.cwd)
    logger.debug("Handling %s with %s", argv[0], handler.__name__)
    return handler(state, argv[1:])


__all__ = ["HANDLERS", "lookup", "dispatch"]
