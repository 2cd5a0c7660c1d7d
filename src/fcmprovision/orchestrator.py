"""
Pre-build orchestration.

Reads the legacy API endpoint from the application configuration, downloads
the per-platform configuration files, injects them into the native projects
and finally hands over to the post-injection hooks.
"""

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from fcmprovision.constants import (
    API_ENDPOINT_SETTING,
    CORE_EXTENSIONS_TYPE,
    DEFAULT_DEV_PACKAGE_NAME,
    DEFAULT_MAX_CONCURRENT_DOWNLOADS,
    DEFAULT_REQUEST_TIMEOUT,
    FALLBACK_NOT_RELEASE_BUILD,
    SHOUTEM_APPLICATION,
)
from fcmprovision.download.async_client import AsyncConfigClient
from fcmprovision.download.endpoints import resolve_config_files
from fcmprovision.download.interfaces import (
    BuildConfiguration,
    DownloadOutcome,
    Fallback,
    Platform,
    ProjectLayout,
)
from fcmprovision.download.provisioner import download_config_files
from fcmprovision.exceptions import MissingSettingError
from fcmprovision.inject.android import inject_android_config
from fcmprovision.inject.ios import inject_ios_config
from fcmprovision.log_utils import logger

PostInjectionHook = Callable[[ProjectLayout], Any]


@dataclass
class PreBuildResult:
    """What a pre-build run did, per platform."""

    outcomes: Dict[Platform, DownloadOutcome]
    use_downloaded: Dict[Platform, bool]
    android_config: Path
    xcode_projects: List[Path] = field(default_factory=list)


def is_application_extension(record: Any) -> bool:
    return (
        isinstance(record, Mapping)
        and record.get("type") == CORE_EXTENSIONS_TYPE
        and record.get("id") == SHOUTEM_APPLICATION
    )


def find_application_extension(app_config: Mapping[str, Any]) -> Optional[Mapping[str, Any]]:
    """Return the core application extension record from `included`, if present."""
    included = app_config.get("included") if isinstance(app_config, Mapping) else None
    for record in included or []:
        if is_application_extension(record):
            return record
    return None


def get_legacy_api_endpoint(app_config: Mapping[str, Any]) -> str:
    """
    Extract `attributes.settings.legacyApiEndpoint` from the application extension.

    Raises:
        MissingSettingError: If the extension or the setting is missing or empty.
    """
    extension = find_application_extension(app_config) or {}
    attributes = extension.get("attributes")
    settings = attributes.get("settings") if isinstance(attributes, Mapping) else None
    legacy_api = (
        settings.get(API_ENDPOINT_SETTING) if isinstance(settings, Mapping) else None
    )

    if not legacy_api:
        raise MissingSettingError(API_ENDPOINT_SETTING, SHOUTEM_APPLICATION)
    return str(legacy_api)


def should_use_downloaded(build: BuildConfiguration, outcome: DownloadOutcome) -> bool:
    """
    Decide whether a platform uses its downloaded file or the bundled template.

    Policy: only release-grade builds trust downloaded files. A development build
    uses the template even when the download succeeded, so production
    configuration does not end up in development builds.
    """
    return build.is_release_grade and outcome.succeeded


def _log_selection(
    platform: Platform, use_downloaded: bool, outcome: DownloadOutcome
) -> None:
    if use_downloaded:
        logger.info(f"{platform.value}: using downloaded {platform.config_filename}")
        return
    # A successful download is only ignored in development builds
    reason = (
        outcome.reason if isinstance(outcome, Fallback) else FALLBACK_NOT_RELEASE_BUILD
    )
    logger.info(f"{platform.value}: using template {platform.config_filename} ({reason})")


async def pre_build(
    app_config: Mapping[str, Any],
    build: BuildConfiguration,
    layout: ProjectLayout,
    hooks: Sequence[PostInjectionHook] = (),
    timeout: float = DEFAULT_REQUEST_TIMEOUT,
    max_concurrent: int = DEFAULT_MAX_CONCURRENT_DOWNLOADS,
    package_name: str = DEFAULT_DEV_PACKAGE_NAME,
    client: Optional[AsyncConfigClient] = None,
) -> PreBuildResult:
    """
    Run the pre-build pipeline once.

    Steps, in order:
    1. Read the legacy API endpoint; fail before any network or file work if missing.
    2. Resolve one download descriptor per platform.
    3. Download all of them concurrently.
    4. Decide per platform between downloaded file and template.
    5. Inject Android, then iOS.
    6. Call each post-injection hook with the layout.

    Parameters:
        app_config (Mapping[str, Any]): Full application configuration document.
        build (BuildConfiguration): Build flags for this invocation.
        layout (ProjectLayout): Project directories.
        hooks (Sequence[PostInjectionHook]): Called after both injectors finished.
        timeout (float): Total time bound for each download.
        max_concurrent (int): Connection limit for the download client.
        package_name (str): Package name written into development builds.
        client (Optional[AsyncConfigClient]): Download client to use instead of a new one.

    Returns:
        PreBuildResult: Outcomes, selections and the files that were changed.

    Raises:
        MissingSettingError: If `legacyApiEndpoint` is not configured.
        InvalidEndpointError: If the endpoint or application id is malformed.
        InjectionError: If a native project cannot be found or updated.
    """
    legacy_api = get_legacy_api_endpoint(app_config)
    descriptors = resolve_config_files(legacy_api, build.app_id)

    outcomes = await download_config_files(
        descriptors,
        layout.download_dir,
        timeout=timeout,
        max_concurrent=max_concurrent,
        client=client,
    )

    use_downloaded = {
        platform: should_use_downloaded(build, outcome)
        for platform, outcome in outcomes.items()
    }
    for platform, outcome in outcomes.items():
        _log_selection(platform, use_downloaded[platform], outcome)

    android_config = inject_android_config(
        use_downloaded[Platform.ANDROID], build, layout, package_name=package_name
    )
    xcode_projects = inject_ios_config(use_downloaded[Platform.IOS], layout, build)

    for hook in hooks:
        logger.debug(f"Running post-injection hook {getattr(hook, '__name__', hook)!r}")
        hook(layout)

    return PreBuildResult(
        outcomes=outcomes,
        use_downloaded=use_downloaded,
        android_config=android_config,
        xcode_projects=xcode_projects,
    )


def run_pre_build(
    app_config: Mapping[str, Any],
    build: BuildConfiguration,
    layout: ProjectLayout,
    **kwargs: Any,
) -> PreBuildResult:
    """Synchronous entry point around `pre_build` for build harnesses without an event loop."""
    return asyncio.run(pre_build(app_config, build, layout, **kwargs))
