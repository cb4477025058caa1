"""Async source access (local report folder or published site).

Locations in the manifest/descriptor are relative to one data root, which is
either a directory on disk (``docs/``) or an ``http(s)://`` base URL (GitHub
Pages). Every failure surfaces as :class:`FetchFailure` so callers can
collect it as a diagnostic instead of aborting sibling loads.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Optional
from urllib.parse import urljoin

import aiohttp

from tradeboard.data.schema.contract import parse_json
from tradeboard.errors import FetchFailure

logger = logging.getLogger(__name__)


def is_url(location: str) -> bool:
    return str(location).lower().startswith(("http://", "https://"))


class SourceFetcher:
    """Fetch text/JSON relative to a data root, with bounded concurrency.

    Use as ``async with SourceFetcher(root) as fetcher: ...`` so the HTTP
    session (only created when a URL is actually fetched) gets closed.
    """

    def __init__(self, data_root: str | Path, *, timeout: float = 15.0, max_concurrency: int = 8):
        self.data_root = str(data_root)
        self.timeout = float(timeout)
        self._semaphore = asyncio.Semaphore(max(1, int(max_concurrency)))
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "SourceFetcher":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    def resolve(self, location: str) -> str:
        loc = str(location).strip()
        if is_url(loc):
            return loc
        if is_url(self.data_root):
            base = self.data_root if self.data_root.endswith("/") else self.data_root + "/"
            return urljoin(base, loc.lstrip("/"))
        p = Path(loc)
        return str(p if p.is_absolute() else Path(self.data_root) / p)

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout))
        return self._session

    async def _fetch_url(self, url: str) -> str:
        session = self._get_session()
        try:
            async with session.get(url, headers={"Cache-Control": "no-store"}) as response:
                if response.status != 200:
                    raise FetchFailure(url, f"HTTP {response.status}")
                return await response.text(encoding="utf-8")
        except asyncio.TimeoutError as e:
            raise FetchFailure(url, f"timeout after {self.timeout:.0f}s") from e
        except aiohttp.ClientError as e:
            raise FetchFailure(url, f"{type(e).__name__}: {e}") from e

    @staticmethod
    def _read_file(path: str) -> str:
        try:
            return Path(path).read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise FetchFailure(path, "file not found") from e
        except (OSError, UnicodeDecodeError) as e:
            raise FetchFailure(path, f"{type(e).__name__}: {e}") from e

    async def fetch_text(self, location: str) -> str:
        target = self.resolve(location)
        async with self._semaphore:
            logger.debug(f"fetch {target}")
            if is_url(target):
                return await self._fetch_url(target)
            return await asyncio.to_thread(self._read_file, target)

    async def fetch_json(self, location: str) -> Any:
        text = await self.fetch_text(location)
        return parse_json(text, self.resolve(location))
