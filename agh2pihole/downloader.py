#!/usr/bin/env python3
"""
downloader.py - Async Filter List Retrieval

Fetches the text of each FilterSource. HTTP(S) locators are downloaded with
aiohttp (retries with exponential backoff), anything else is treated as a
local path (or file:// URL) and read with aiofiles.

A failed source never raises: the failure is reported in FetchResult.error
and the remaining sources keep going.

Usage:
    python -m agh2pihole.downloader <url_or_path>
"""
from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import NamedTuple
from urllib.parse import unquote, urlparse

import aiofiles
import aiohttp

from agh2pihole.config import DEFAULT_RETRIES, DEFAULT_TIMEOUT, USER_AGENT
from agh2pihole.sources import FilterSource


class FetchResult(NamedTuple):
    """Result of a single fetch operation."""
    source: FilterSource
    success: bool
    content: str = ""
    error: str | None = None


def decode_body(data: bytes) -> str:
    """Decode list bytes, dropping a BOM and replacing undecodable bytes."""
    return data.decode("utf-8-sig", errors="replace")


def is_remote(locator: str) -> bool:
    """True for http:// and https:// locators."""
    return urlparse(locator).scheme in {"http", "https"}


def local_path(locator: str) -> Path:
    """Filesystem path for a local locator (plain path or file:// URL)."""
    parsed = urlparse(locator)
    if parsed.scheme == "file":
        return Path(unquote(parsed.path))
    return Path(locator)


async def read_local(source: FilterSource) -> FetchResult:
    """Read a source from the local filesystem."""
    path = local_path(source.locator)
    if not path.is_file():
        return FetchResult(source, success=False, error=f"File not found: {path}")
    try:
        async with aiofiles.open(path, "rb") as f:
            data = await f.read()
    except OSError as e:
        return FetchResult(source, success=False, error=str(e))
    return FetchResult(source, success=True, content=decode_body(data))


async def fetch_url(
    session: aiohttp.ClientSession,
    source: FilterSource,
    timeout: int,
    retries: int,
) -> FetchResult:
    """
    Download a single source over HTTP(S).

    Returns:
        FetchResult with the decoded body, or the last error seen
    """
    error = "Max retries exceeded"

    for attempt in range(retries):
        try:
            async with session.get(
                source.locator,
                headers={"User-Agent": USER_AGENT},
                timeout=aiohttp.ClientTimeout(total=timeout),
                allow_redirects=True,
            ) as response:
                if response.status >= 400:
                    error = f"HTTP {response.status}"
                else:
                    data = await response.read()
                    return FetchResult(source, success=True, content=decode_body(data))

        except asyncio.TimeoutError:
            error = "Timeout"
        except aiohttp.ClientError as e:
            error = str(e) or type(e).__name__

        if attempt < retries - 1:
            await asyncio.sleep(2 ** attempt)  # Exponential backoff

    return FetchResult(source, success=False, error=error)


async def fetch_source(
    session: aiohttp.ClientSession,
    source: FilterSource,
    timeout: int = DEFAULT_TIMEOUT,
    retries: int = DEFAULT_RETRIES,
) -> FetchResult:
    """Fetch one source, dispatching on its locator."""
    if is_remote(source.locator):
        return await fetch_url(session, source, timeout, retries)
    return await read_local(source)


def new_session(concurrency: int) -> aiohttp.ClientSession:
    """Create a session with connection pooling bounded by concurrency."""
    connector = aiohttp.TCPConnector(limit=concurrency, limit_per_host=2)
    return aiohttp.ClientSession(connector=connector)


async def _fetch_one(locator: str) -> FetchResult:
    source = FilterSource(locator, "cli")
    async with new_session(1) as session:
        return await fetch_source(session, source)


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python -m agh2pihole.downloader <url_or_path>")
        sys.exit(2)

    result = asyncio.run(_fetch_one(sys.argv[1]))
    if not result.success:
        print(f"❌ {result.source.locator}: {result.error}", file=sys.stderr)
        sys.exit(1)

    lines = result.content.splitlines()
    print(f"✅ Fetched {len(lines):,} lines from {result.source.locator}")
