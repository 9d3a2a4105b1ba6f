"""Parse remote repository URLs into their structural fields.

Two shapes are accepted::

    scheme://[user@]host[:port]/path/project[.git]
    [user@]host:path/project[.git]

Anything else (local paths, ``file://`` URLs, options) has no domain and is
rejected with :class:`UnparseableUrlError`.
"""

from __future__ import annotations

import re
import shlex
from typing import Sequence

from .exceptions import UnparseableUrlError
from .models import RepoUrl

_SCHEME_RE = re.compile(r"^(?P<protocol>[A-Za-z][A-Za-z0-9+.-]*)://(?P<rest>.*)$")
_HOST_RE = re.compile(r"^[A-Za-z0-9._-]+$")
_USER_RE = re.compile(r"^[^\s/@:]+$")
_PORT_RE = re.compile(r"^[0-9]+$")

GIT_SUFFIX = ".git"


def parse_url(text: str) -> RepoUrl:
    """Parse a single URL token."""

    token = text.strip()
    scheme = _SCHEME_RE.match(token)
    if scheme:
        protocol = scheme.group("protocol")
        authority, _, location = scheme.group("rest").partition("/")
        user, host, port = _split_authority(authority, token)
    elif _looks_like_scp(token):
        protocol = ""
        port = ""
        user_host, _, location = token.partition(":")
        user, host = _split_user(user_host, token)
    else:
        raise UnparseableUrlError(f"Unable to find a domain in repository URL: {text!r}")

    if not host or not _HOST_RE.match(host):
        raise UnparseableUrlError(f"Unable to find a domain in repository URL: {text!r}")
    path, project = _split_location(location)
    if not project:
        raise UnparseableUrlError(f"Unable to find a project name in repository URL: {text!r}")
    return RepoUrl(
        address=token,
        domain=host,
        project=project,
        protocol=protocol,
        user=user,
        port=port,
        path=path,
    )


def find_url(args: Sequence[str]) -> RepoUrl:
    """Return the last argument that parses as a remote URL."""

    for candidate in reversed(list(args)):
        if not candidate or candidate.startswith("-"):
            continue
        try:
            return parse_url(candidate)
        except UnparseableUrlError:
            continue
    raise UnparseableUrlError(
        f"No repository URL with a domain found in: {shlex.join(args) or '(no arguments)'}"
    )


def _looks_like_scp(token: str) -> bool:
    head, sep, _ = token.partition(":")
    return bool(sep) and "/" not in head


def _split_user(user_host: str, original: str) -> tuple[str, str]:
    user, sep, host = user_host.rpartition("@")
    if sep and not _USER_RE.match(user):
        raise UnparseableUrlError(f"Invalid user in repository URL: {original!r}")
    return user, host


def _split_authority(authority: str, original: str) -> tuple[str, str, str]:
    userinfo, at, host_port = authority.rpartition("@")
    # userinfo may carry a password or token after the first colon
    user = userinfo.partition(":")[0]
    if at and not _USER_RE.match(user):
        raise UnparseableUrlError(f"Invalid user in repository URL: {original!r}")
    host, sep, port = host_port.partition(":")
    if sep and not _PORT_RE.match(port):
        raise UnparseableUrlError(f"Invalid port in repository URL: {original!r}")
    return user, host, port


def _split_location(location: str) -> tuple[str, str]:
    segments = [segment for segment in location.split("/") if segment]
    if not segments:
        return "", ""
    project = segments[-1]
    if project.endswith(GIT_SUFFIX):
        project = project[: -len(GIT_SUFFIX)]
    return "/".join(segments[:-1]), project


__all__ = ["parse_url", "find_url"]
