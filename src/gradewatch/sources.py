# Copyright (c) Syntropy Systems
"""Loading transcript pages from files and URLs."""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from gradewatch.dom import Page

logger = logging.getLogger(__name__)


class SourceError(Exception):
    """The page could not be read."""


def is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def fetch_url(url: str, timeout: float = 30.0) -> str:
    try:
        response = httpx.get(url, timeout=timeout, follow_redirects=True)
        _ = response.raise_for_status()
    except httpx.HTTPStatusError as e:
        msg = f"{url} returned HTTP {e.response.status_code}"
        raise SourceError(msg) from e
    except httpx.RequestError as e:
        msg = f"Could not fetch {url}: {e}"
        raise SourceError(msg) from e
    return response.text


def read_file(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        msg = f"No such file: {path}"
        raise SourceError(msg) from e
    except (OSError, UnicodeDecodeError) as e:
        msg = f"Could not read {path}: {e}"
        raise SourceError(msg) from e


def load_html(source: str, timeout: float = 30.0) -> str:
    """Read markup from a local path or an http(s) URL."""
    if is_url(source):
        return fetch_url(source, timeout=timeout)
    return read_file(Path(source))


class FileWatcher:
    """Detects changes to a file between polls."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._signature: tuple[int, int] | None = None

    def _stat(self) -> tuple[int, int] | None:
        try:
            stat = self.path.stat()
        except FileNotFoundError:
            return None
        return (stat.st_mtime_ns, stat.st_size)

    def read(self) -> str:
        """Read the file and remember its current state."""
        self._signature = self._stat()
        return read_file(self.path)

    def poll(self) -> str | None:
        """Return the new markup if the file changed since the last read."""
        signature = self._stat()
        if signature is None or signature == self._signature:
            return None
        return self.read()


async def follow_file(page: Page, watcher: FileWatcher, interval: float) -> None:
    """Apply every change of the watched file to `page` as a body swap."""
    while True:
        await asyncio.sleep(interval)
        try:
            markup = watcher.poll()
        except SourceError:
            logger.exception("Failed to re-read %s", watcher.path)
            continue
        if markup is not None:
            logger.info("%s changed, updating page", watcher.path)
            page.replace_html(markup)
