"""
Async HTTP client for fcmprovision

This module fetches configuration files from the legacy API using aiohttp,
with session management, a total request timeout and atomic file placement.

`AsyncConfigClient.download_file` never raises: every failure is reported as
a `Fallback` outcome and leaves no file at the destination.
"""

import asyncio
import os
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Optional

import aiofiles  # type: ignore[import-untyped]
import aiohttp
from aiohttp import ClientSession, ClientTimeout, TCPConnector

from fcmprovision.constants import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_MAX_CONCURRENT_DOWNLOADS,
    DEFAULT_REQUEST_TIMEOUT,
    FALLBACK_EMPTY_RESPONSE,
    FALLBACK_FILESYSTEM_ERROR,
    FALLBACK_HTTP_ERROR,
    FALLBACK_NETWORK_ERROR,
    FALLBACK_UNEXPECTED_ERROR,
    FIREBASE_EXTENSION_NAME,
    HTTP_STATUS_ERROR_THRESHOLD,
)
from fcmprovision.exceptions import DownloadError
from fcmprovision.log_utils import logger

from .interfaces import Downloaded, DownloadOutcome, Fallback, Pathish, Platform


class AsyncConfigClient:
    """
    Asynchronous client for the legacy API configuration endpoints.

    Example:
        async with AsyncConfigClient(timeout=10) as client:
            outcome = await client.download_file(
                url, "google-services.json", Platform.ANDROID
            )
    """

    def __init__(
        self,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        max_concurrent: int = DEFAULT_MAX_CONCURRENT_DOWNLOADS,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        """
        Initialize the client.

        Parameters:
            timeout (float): Total time bound for one request, in seconds.
            max_concurrent (int): Connection limit for the underlying pool.
            chunk_size (int): Number of bytes to read per chunk.
        """
        self.timeout = ClientTimeout(total=timeout)
        self.max_concurrent = max(1, int(max_concurrent))
        self.chunk_size = chunk_size
        self._session: Optional[ClientSession] = None

    async def __aenter__(self) -> "AsyncConfigClient":
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def _ensure_session(self) -> ClientSession:
        """
        Ensure a session exists, creating one if needed.

        Returns:
            ClientSession: The active aiohttp session.
        """
        if self._session is None or self._session.closed:
            connector = TCPConnector(limit=self.max_concurrent)
            self._session = ClientSession(connector=connector, timeout=self.timeout)
        return self._session

    async def close(self) -> None:
        """Close the client session and release resources."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def _fetch_to(self, url: str, temp_path: Path) -> int:
        """
        Stream `url` into `temp_path`.

        Returns:
            int: Number of bytes written.

        Raises:
            DownloadError: On an HTTP error status or a transport failure.
        """
        session = await self._ensure_session()
        downloaded = 0
        try:
            async with session.get(url) as response:
                if response.status >= HTTP_STATUS_ERROR_THRESHOLD:
                    raise DownloadError(
                        f"HTTP error {response.status}",
                        url=url,
                        status_code=response.status,
                    )

                async with aiofiles.open(temp_path, "wb") as f:
                    async for chunk in response.content.iter_chunked(self.chunk_size):
                        await f.write(chunk)
                        downloaded += len(chunk)
        except aiohttp.ClientResponseError as e:
            raise DownloadError(
                f"HTTP error {e.status}: {e.message}",
                url=url,
                status_code=e.status,
            ) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise DownloadError(
                f"Network error: {str(e) or type(e).__name__}",
                url=url,
            ) from e
        return downloaded

    async def download_file(
        self, url: str, target_path: Pathish, platform: Platform
    ) -> DownloadOutcome:
        """
        Download `url` to `target_path` and report the outcome.

        The body is streamed to a temporary sibling file that replaces the target
        only when at least one byte was received. On an empty body, an HTTP error
        status, a transport error, a filesystem error or anything unexpected, the
        temporary file and any existing target are removed and a `Fallback` is
        returned.

        Parameters:
            url (str): Source URL to download.
            target_path (Pathish): Destination file path; parent directories are created.
            platform (Platform): Platform the file belongs to, recorded in the outcome.

        Returns:
            DownloadOutcome: `Downloaded` with the saved path and size, or `Fallback` with the reason.
        """
        target = Path(target_path)
        temp_path = target.with_name(
            f"{target.name}.tmp.{os.getpid()}.{int(time.time() * 1000)}"
        )
        logger.debug(f"Requesting {url}")

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            start_time = time.time()
            downloaded = await self._fetch_to(url, temp_path)

            if downloaded == 0:
                logger.warning(
                    f"Received empty response from\n{url}\n"
                    f">>> Please check your {FIREBASE_EXTENSION_NAME} settings! <<<"
                )
                self._discard(temp_path, target)
                return Fallback(platform, FALLBACK_EMPTY_RESPONSE, url=url)

            temp_path.replace(target)
            elapsed = time.time() - start_time
            logger.debug(f"Downloaded {url} in {elapsed:.2f}s")
            logger.info(f"Downloaded {target.name} from {url} ({downloaded} bytes)")
            return Downloaded(platform, target, downloaded)

        except DownloadError as e:
            reason = (
                FALLBACK_HTTP_ERROR if e.status_code is not None else FALLBACK_NETWORK_ERROR
            )
            logger.warning(f"Download failed for {url}: {e}")
            self._discard(temp_path, target)
            return Fallback(
                platform, reason, url=url, status_code=e.status_code, details=str(e)
            )
        except OSError as e:
            logger.warning(f"Filesystem error saving {target}: {e}")
            self._discard(temp_path, target)
            return Fallback(platform, FALLBACK_FILESYSTEM_ERROR, url=url, details=str(e))
        except Exception as e:
            logger.exception(f"Unexpected error downloading {url}: {e}")
            self._discard(temp_path, target)
            return Fallback(platform, FALLBACK_UNEXPECTED_ERROR, url=url, details=str(e))

    @staticmethod
    def _discard(*paths: Path) -> None:
        """Remove partial or stale files so nothing is left at the destination."""
        for path in paths:
            try:
                if path.exists():
                    path.unlink()
            except OSError as e:
                logger.debug(f"Error removing {path}: {e}")


@asynccontextmanager
async def create_async_client(
    timeout: float = DEFAULT_REQUEST_TIMEOUT,
    max_concurrent: int = DEFAULT_MAX_CONCURRENT_DOWNLOADS,
) -> AsyncIterator[AsyncConfigClient]:
    """
    Provide a configured AsyncConfigClient and ensure it is closed after use.
    """
    client = AsyncConfigClient(timeout=timeout, max_concurrent=max_concurrent)
    try:
        yield client
    finally:
        await client.close()
