"""Data sources: fetch raw resources from a directory or an HTTP base URL.

Every loader in the package reads through a ``DataSource`` so that the same
code serves a local ``public/data`` tree and a deployed site. Failures of any
kind surface as ``SourceUnavailable``; callers decide how to degrade.
"""
from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Optional

import requests

from tube_strata import config

logger = logging.getLogger(__name__)


class TubeStrataError(Exception):
    """Base class for errors raised by tube_strata."""


class SourceUnavailable(TubeStrataError):
    """A resource could not be fetched or decoded."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class DataSource:
    """Base class for async resource access by relative path."""

    def _read(self, path: str) -> bytes:
        raise NotImplementedError

    async def get_bytes(self, path: str) -> bytes:
        """Fetch a resource; blocking I/O runs in a worker thread."""
        return await asyncio.to_thread(self._read, path)

    async def get_text(self, path: str, encoding: str = "utf-8") -> str:
        data = await self.get_bytes(path)
        try:
            return data.decode(encoding)
        except UnicodeDecodeError as e:
            raise SourceUnavailable(path, f"not {encoding} text ({e})") from e

    async def get_json(self, path: str) -> Any:
        text = await self.get_text(path)
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise SourceUnavailable(path, f"invalid JSON ({e})") from e


class LocalDataSource(DataSource):
    """Resources under a directory on disk."""

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def __repr__(self) -> str:
        return f"LocalDataSource({str(self.root)!r})"

    def _read(self, path: str) -> bytes:
        target = self.root / path.lstrip("/")
        try:
            return target.read_bytes()
        except OSError as e:
            raise SourceUnavailable(path, str(e)) from e


class HttpDataSource(DataSource):
    """Resources served under an HTTP(S) base URL."""

    def __init__(
        self,
        base_url: str,
        timeout: float = config.HTTP_TIMEOUT_S,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def __repr__(self) -> str:
        return f"HttpDataSource({self.base_url!r})"

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _read(self, path: str) -> bytes:
        url = self.url_for(path)
        logger.debug(f"GET {url}")
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            body = e.response.text[:160] if e.response is not None else ""
            raise SourceUnavailable(path, f"HTTP error ({e}) {body}".rstrip()) from e
        except requests.exceptions.RequestException as e:
            raise SourceUnavailable(path, f"request failed ({e})") from e
        return response.content


def open_source(location: str | Path) -> DataSource:
    """Pick a data source for a directory path or an http(s) URL."""
    text = str(location)
    if text.startswith(("http://", "https://")):
        return HttpDataSource(text)
    return LocalDataSource(text)
