"""
fcmprovision download subsystem

Resolves the legacy API endpoints for each platform's configuration file and
downloads them concurrently.

Core Components:
- interfaces: data model shared by the pipeline
- endpoints: download descriptor construction
- async_client: fault-tolerant single-file download
- provisioner: concurrent fan-out / fan-in of all platforms
- files: atomic file writes and tolerant JSON reads
"""

from .async_client import AsyncConfigClient, create_async_client
from .endpoints import normalize_base_url, resolve_config_files
from .interfaces import (
    BuildConfiguration,
    ConfigFileDescriptor,
    Downloaded,
    DownloadOutcome,
    Fallback,
    Platform,
    ProjectLayout,
    resolve_config_path,
)
from .provisioner import download_config_files

__all__ = [
    # Interfaces
    "BuildConfiguration",
    "ConfigFileDescriptor",
    "Downloaded",
    "DownloadOutcome",
    "Fallback",
    "Platform",
    "ProjectLayout",
    "resolve_config_path",
    # Endpoints
    "normalize_base_url",
    "resolve_config_files",
    # Downloading
    "AsyncConfigClient",
    "create_async_client",
    "download_config_files",
]
