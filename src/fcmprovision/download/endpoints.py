"""
Endpoint resolution for the legacy API configuration resources.
"""

import ipaddress
import re
from typing import Dict
from urllib.parse import quote, urlsplit, urlunsplit

from fcmprovision.constants import (
    ANDROID_REMOTE_RESOURCE,
    IOS_REMOTE_RESOURCE,
    LEGACY_API_SCHEME,
    RESOURCE_PATH_TEMPLATE,
)
from fcmprovision.exceptions import InvalidEndpointError

from .interfaces import ConfigFileDescriptor, Platform

REMOTE_RESOURCES: Dict[Platform, str] = {
    Platform.ANDROID: ANDROID_REMOTE_RESOURCE,
    Platform.IOS: IOS_REMOTE_RESOURCE,
}

# One DNS label after IDNA encoding
_HOST_LABEL_RE = re.compile(r"^(?!-)[A-Za-z0-9_-]{1,63}(?<!-)$")


def _is_valid_host(hostname: str) -> bool:
    try:
        ipaddress.ip_address(hostname)
        return True
    except ValueError:
        pass
    try:
        ascii_host = hostname.encode("idna").decode("ascii")
    except UnicodeError:
        return False
    labels = ascii_host[:-1].split(".") if ascii_host.endswith(".") else ascii_host.split(".")
    return all(_HOST_LABEL_RE.match(label) for label in labels)


def normalize_base_url(base_url: str) -> str:
    """
    Force the legacy API base URL onto plain http and give it a trailing slash.

    A value without a scheme (e.g. `api.example.com/v1`) is treated as a host
    followed by an optional path. Query strings and fragments are dropped.

    Parameters:
        base_url (str): Base URL as found in the application settings.

    Returns:
        str: Normalized base URL, e.g. `http://api.example.com/v1/`.

    Raises:
        InvalidEndpointError: If the value is empty, contains whitespace, or its
            host is neither an IP address nor a valid (IDNA) host name.
    """
    if not isinstance(base_url, str) or not base_url.strip():
        raise InvalidEndpointError("Legacy API endpoint is empty", base_url)

    candidate = base_url.strip()
    if any(ch.isspace() for ch in candidate):
        raise InvalidEndpointError("Legacy API endpoint contains whitespace", base_url)
    if "://" not in candidate:
        candidate = f"{LEGACY_API_SCHEME}://{candidate.lstrip('/')}"

    try:
        parts = urlsplit(candidate)
        # Accessing port validates it
        _ = parts.port
    except ValueError as e:
        raise InvalidEndpointError(f"Malformed legacy API endpoint: {e}", base_url) from e

    if not parts.hostname:
        raise InvalidEndpointError("Legacy API endpoint has no host", base_url)
    if not _is_valid_host(parts.hostname):
        raise InvalidEndpointError("Legacy API endpoint has an invalid host", base_url)

    path = parts.path if parts.path.endswith("/") else f"{parts.path}/"
    return urlunsplit((LEGACY_API_SCHEME, parts.netloc, path, "", ""))


def endpoint_for_resource(base_url: str, app_id: str, resource: str) -> str:
    """Build the URL of one remote resource below an already normalized base URL."""
    return base_url + RESOURCE_PATH_TEMPLATE.format(
        app_id=quote(app_id, safe=""), resource=resource
    )


def resolve_config_files(
    base_url: str, app_id: str
) -> Dict[Platform, ConfigFileDescriptor]:
    """
    Build the download descriptors for every platform.

    Parameters:
        base_url (str): Legacy API base URL; any scheme is rewritten to http.
        app_id (str): Application identifier.

    Returns:
        Dict[Platform, ConfigFileDescriptor]: Exactly one descriptor per platform,
            Android first.

    Raises:
        InvalidEndpointError: If the base URL is malformed or the application id is empty.
    """
    app_id = str(app_id).strip() if app_id is not None else ""
    if not app_id:
        raise InvalidEndpointError("Application id is empty", app_id)

    normalized = normalize_base_url(base_url)
    return {
        platform: ConfigFileDescriptor(
            platform=platform,
            filename=platform.config_filename,
            endpoint=endpoint_for_resource(normalized, app_id, resource),
        )
        for platform, resource in REMOTE_RESOURCES.items()
    }
