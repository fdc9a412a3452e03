# -*- coding: utf-8 -*-
"""
ABOUTME: Data file loader feeding markdown content to the marked directive through callbacks
ABOUTME: Fetches remote files with httpx or reads local ones, and fans editor changes out to readers
"""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional
from urllib.parse import urlparse

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


@dataclass
class FileCallbacks:
    """Callbacks invoked when a read completes or the file is edited."""
    on_success: Callable[[str], None]
    on_404: Callable[[str], None]
    on_error: Callable[[], None]
    on_change: Optional[Callable[[str], None]] = None


class DataFileNotFound(Exception):
    """Raised internally when the requested file does not exist."""


class DataFile:
    """Loads markdown files for directives.

    Relative names are prefixed with ``data_path`` and, when ``base_url`` is set,
    resolved against it. Anything that ends up as an http(s) URL is fetched with
    httpx; everything else is read from the local filesystem.
    """

    def __init__(
        self,
        base_url: str = "",
        data_path: str = "",
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url or ""
        self.data_path = data_path or ""
        self.timeout = timeout
        self._transport = transport
        self._readers: Dict[str, List[FileCallbacks]] = {}

    def resolve(self, filename: str) -> str:
        """
        Build the location a filename is loaded from.

        Args:
            filename: Absolute URL, or a name relative to the data path.

        Returns:
            An http(s) URL or a local filesystem path.
        """
        if urlparse(filename).scheme in ("http", "https"):
            return filename
        location = f"{self.data_path}{filename}"
        if self.base_url and urlparse(location).scheme not in ("http", "https"):
            location = f"{self.base_url.rstrip('/')}/{location.lstrip('/')}"
        return location

    def read(self, filename: str, callbacks: FileCallbacks) -> Optional[asyncio.Task]:
        """
        Load a file and report the outcome through the callbacks.

        Inside a running event loop the fetch is scheduled and the task returned;
        otherwise the fetch runs to completion before returning.

        Args:
            filename: File to load.
            callbacks: Outcome callbacks; also registered for editor changes to this file.
        """
        self._register(filename, callbacks)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(self.fetch(filename, callbacks))
            return None
        return loop.create_task(self.fetch(filename, callbacks))

    async def fetch(self, filename: str, callbacks: FileCallbacks):
        location = self.resolve(filename)
        try:
            content = await self._load(location)
        except DataFileNotFound:
            logger.info(f"{location} not found, starting from empty content")
            callbacks.on_404("")
        except (httpx.HTTPError, OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to load {location}: {e}")
            callbacks.on_error()
        else:
            logger.debug(f"Loaded {len(content)} characters from {location}")
            callbacks.on_success(content)

    async def _load(self, location: str) -> str:
        if urlparse(location).scheme in ("http", "https"):
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(location)
                if response.status_code == 404:
                    raise DataFileNotFound(location)
                response.raise_for_status()
                return response.text

        path = Path(location)
        if not path.exists():
            raise DataFileNotFound(location)
        return await asyncio.to_thread(path.read_text, encoding="utf-8")

    def _register(self, filename: str, callbacks: FileCallbacks):
        readers = self._readers.setdefault(filename, [])
        if callbacks not in readers:
            readers.append(callbacks)

    def release(self, callbacks: FileCallbacks):
        """Stop delivering editor changes to these callbacks."""
        for filename in list(self._readers):
            readers = self._readers[filename]
            if callbacks in readers:
                readers.remove(callbacks)
            if not readers:
                del self._readers[filename]

    def notify_change(self, filename: str, markdown: str) -> int:
        """
        Push edited content to every reader of a file.

        Returns:
            The number of readers notified.
        """
        notified = 0
        for callbacks in list(self._readers.get(filename, [])):
            if callbacks.on_change is not None:
                callbacks.on_change(markdown)
                notified += 1
        logger.debug(f"Delivered change of {filename} to {notified} reader(s)")
        return notified
