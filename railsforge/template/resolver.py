"""Template source resolution.

A template source identifier is either a local path (a template file or
the directory holding the assets) or an ``http(s)`` URL of a git
repository. Remote sources are cloned into a temporary directory that is
removed when the resolving context exits, whichever way it exits.
"""

from __future__ import annotations

import atexit
import functools
import shutil
import tempfile
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from urllib.parse import urlparse

from railsforge.utils import run_command

_RAW_HOSTS: dict[str, str] = {"raw.githubusercontent.com": "github.com"}
_REF_MARKERS = ("tree", "blob")


class SourceError(Exception):
    """Raised when the template assets cannot be made available."""


class SourceKind(str, Enum):
    LOCAL = "local"
    REMOTE = "remote"


@dataclass(frozen=True)
class TemplateSource:
    """A readable directory of template assets."""

    kind: SourceKind
    root_path: Path
    url: str | None = None
    branch: str | None = None


def is_remote(identifier: str) -> bool:
    return identifier.startswith(("http://", "https://"))


def parse_remote(identifier: str) -> tuple[str, str | None]:
    """Split a repository URL into ``(clone_url, branch)``.

    Examples::

        parse_remote("https://github.com/acme/tpl")
            -> ("https://github.com/acme/tpl.git", None)
        parse_remote("https://github.com/acme/tpl/tree/next")
            -> ("https://github.com/acme/tpl.git", "next")
        parse_remote("https://raw.githubusercontent.com/acme/tpl/next/template.rb")
            -> ("https://github.com/acme/tpl.git", "next")
    """
    parsed = urlparse(identifier)
    parts = [p for p in parsed.path.split("/") if p]
    if len(parts) < 2:
        raise SourceError(f"Not a repository URL: {identifier}")

    owner, repo = parts[0], parts[1]
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]

    rest = parts[2:]
    if rest and rest[0] in _REF_MARKERS:
        rest = rest[1:]
    if rest and rest[-1].startswith("template."):
        rest = rest[:-1]

    host = _RAW_HOSTS.get(parsed.netloc, parsed.netloc)
    clone_url = f"{parsed.scheme}://{host}/{owner}/{repo}.git"
    return clone_url, "/".join(rest) or None


def resolve_local(identifier: str) -> TemplateSource:
    """Use a local template file's directory, or a directory itself."""
    path = Path(identifier).expanduser().resolve()
    if path.is_file():
        path = path.parent
    if not path.is_dir():
        raise SourceError(f"Template source not found: {identifier}")
    return TemplateSource(kind=SourceKind.LOCAL, root_path=path)


async def clone_repository(clone_url: str, branch: str | None, dest: Path, timeout: int = 300) -> None:
    """Clone *clone_url* into *dest* and check out *branch* when given."""
    returncode, _, stderr = await run_command(
        ["git", "clone", "--quiet", clone_url, str(dest)], timeout=timeout
    )
    if returncode != 0:
        raise SourceError(f"git clone {clone_url} failed (exit {returncode}): {stderr}")

    if branch:
        returncode, _, stderr = await run_command(
            ["git", "checkout", "--quiet", branch], cwd=dest, timeout=timeout
        )
        if returncode != 0:
            raise SourceError(f"git checkout {branch} failed (exit {returncode}): {stderr}")


def _remove_tree(path: Path) -> None:
    shutil.rmtree(path, ignore_errors=True)


@asynccontextmanager
async def resolve_source(identifier: str, timeout: int = 300) -> AsyncIterator[TemplateSource]:
    """Yield a :class:`TemplateSource` for *identifier*.

    For remote identifiers the clone directory is removed when the context
    exits normally, on an exception, on cancellation or interrupt. An
    ``atexit`` hook covers a process that terminates without unwinding.
    """
    if not is_remote(identifier):
        yield resolve_local(identifier)
        return

    clone_url, branch = parse_remote(identifier)
    tempdir = Path(tempfile.mkdtemp(prefix="railsforge-"))
    cleanup = functools.partial(_remove_tree, tempdir)
    atexit.register(cleanup)
    try:
        await clone_repository(clone_url, branch, tempdir, timeout=timeout)
        yield TemplateSource(
            kind=SourceKind.REMOTE, root_path=tempdir, url=clone_url, branch=branch
        )
    finally:
        cleanup()
        atexit.unregister(cleanup)
