"""
Concurrent download of the per-platform configuration files.
"""

import asyncio
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from fcmprovision.constants import (
    DEFAULT_MAX_CONCURRENT_DOWNLOADS,
    DEFAULT_REQUEST_TIMEOUT,
    FALLBACK_UNEXPECTED_ERROR,
)
from fcmprovision.log_utils import logger

from .async_client import AsyncConfigClient, create_async_client
from .interfaces import ConfigFileDescriptor, DownloadOutcome, Fallback, Pathish, Platform


async def _download_all(
    client: AsyncConfigClient,
    descriptors: Mapping[Platform, ConfigFileDescriptor],
    download_dir: Path,
) -> Dict[Platform, DownloadOutcome]:
    platforms: List[Platform] = list(descriptors)
    tasks = [
        client.download_file(
            descriptors[platform].endpoint,
            download_dir / descriptors[platform].filename,
            platform,
        )
        for platform in platforms
    ]
    gathered = await asyncio.gather(*tasks, return_exceptions=True)

    outcomes: Dict[Platform, DownloadOutcome] = {}
    for platform, result in zip(platforms, gathered):
        if isinstance(result, BaseException):
            # download_file converts its own failures; this guards the join itself
            logger.error(
                f"Download task for {platform.value} raised {type(result).__name__}: {result}"
            )
            outcomes[platform] = Fallback(
                platform,
                FALLBACK_UNEXPECTED_ERROR,
                url=descriptors[platform].endpoint,
                details=str(result),
            )
        else:
            outcomes[platform] = result
    return outcomes


async def download_config_files(
    descriptors: Mapping[Platform, ConfigFileDescriptor],
    download_dir: Pathish,
    timeout: float = DEFAULT_REQUEST_TIMEOUT,
    max_concurrent: int = DEFAULT_MAX_CONCURRENT_DOWNLOADS,
    client: Optional[AsyncConfigClient] = None,
) -> Dict[Platform, DownloadOutcome]:
    """
    Download every descriptor concurrently and wait for all of them to settle.

    A failure in one download does not cancel or affect the others. There is no
    retry; a failed platform falls back to its template for the rest of the run.

    Parameters:
        descriptors (Mapping[Platform, ConfigFileDescriptor]): What to fetch, keyed by platform.
        download_dir (Pathish): Directory the files are saved into under their descriptor filename.
        timeout (float): Total time bound for each request, in seconds.
        max_concurrent (int): Connection limit for the client created here.
        client (Optional[AsyncConfigClient]): Existing client to use; it is not closed here.

    Returns:
        Dict[Platform, DownloadOutcome]: One outcome per descriptor, with the same keys in the same order.
    """
    target_dir = Path(download_dir)
    if client is not None:
        return await _download_all(client, descriptors, target_dir)

    async with create_async_client(
        timeout=timeout, max_concurrent=max_concurrent
    ) as owned_client:
        return await _download_all(owned_client, descriptors, target_dir)
