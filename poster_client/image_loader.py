"""Resolve image sources to local paths, downloading remote ones concurrently."""
from __future__ import annotations

import asyncio
import hashlib
import logging
import os
import re
import tempfile
import urllib.request
from pathlib import Path
from typing import Awaitable, Callable, List, Optional, Sequence
from urllib.parse import urlparse

from poster_client.results import Failure, Result, Success

LOGGER = logging.getLogger("ModernPoster.Images")

_REMOTE_SOURCE = re.compile(r"^https?:", re.IGNORECASE)
_CACHE_SUBDIR = "modern-poster-images"

FetchFn = Callable[[str], Awaitable[str]]


def is_remote(source: str) -> bool:
    return bool(_REMOTE_SOURCE.match(str(source)))


def resolve_cache_dir(cache_dir: Optional[str] = None) -> Path:
    if cache_dir:
        return Path(cache_dir).expanduser()
    return Path(tempfile.gettempdir()) / _CACHE_SUBDIR


def cache_path_for(url: str, cache_dir: Path) -> Path:
    digest = hashlib.sha256(url.encode("utf-8")).hexdigest()
    suffix = Path(urlparse(url).path).suffix.lower()
    if not re.fullmatch(r"\.[a-z0-9]{1,5}", suffix):
        suffix = ""
    return cache_dir / f"{digest}{suffix}"


def download_file(url: str, destination: Path, timeout: float = 30.0) -> None:
    partial = destination.with_name(destination.name + ".part")
    with urllib.request.urlopen(url, timeout=timeout) as response, partial.open("wb") as fh:
        while True:
            chunk = response.read(1024 * 1024)
            if not chunk:
                break
            fh.write(chunk)
    os.replace(partial, destination)


class ImageFetcher:
    """Default fetch strategy: download remote URLs into a cache, verify local paths."""

    def __init__(self, cache_dir: Optional[str] = None, timeout: float = 30.0) -> None:
        self._cache_dir = resolve_cache_dir(cache_dir)
        self._timeout = timeout

    async def __call__(self, source: str) -> str:
        if not is_remote(source):
            if not Path(source).exists():
                raise FileNotFoundError(f"image source not found: {source}")
            return source
        destination = cache_path_for(source, self._cache_dir)
        if destination.exists():
            LOGGER.debug("Image cache hit for %s -> %s", source, destination)
            return str(destination)
        self._cache_dir.mkdir(parents=True, exist_ok=True)
        LOGGER.debug("Downloading image %s -> %s", source, destination)
        await asyncio.to_thread(download_file, source, destination, self._timeout)
        return str(destination)


async def load_images(
    sources: Sequence[str] = (),
    *,
    fetch: Optional[FetchFn] = None,
    cache_dir: Optional[str] = None,
    timeout: float = 30.0,
) -> Result[List[str]]:
    """Resolve every source concurrently; output order matches input order.

    Remote sources are replaced by their local path, local sources are
    returned unchanged and empty sources stay empty. Any single failure makes
    the whole batch a Failure, which is returned rather than raised.
    """
    fetcher = fetch or ImageFetcher(cache_dir=cache_dir, timeout=timeout)

    async def _resolve(source: str) -> str:
        if not source:
            return ""
        fetched = await fetcher(source)
        return fetched if is_remote(source) else source

    try:
        resolved = await asyncio.gather(*(_resolve(source) for source in sources))
    except Exception as exc:
        LOGGER.warning("Image preload failed: %s", exc)
        return Failure(exc)
    LOGGER.debug("Resolved %d image source(s)", len(resolved))
    return Success(list(resolved))
