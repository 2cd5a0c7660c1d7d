"""
Android injection: copy google-services.json into the app module and, for
development builds, point it at the development package name.
"""

import time
from pathlib import Path
from typing import Any

from fcmprovision.constants import DEFAULT_DEV_PACKAGE_NAME, FIREBASE_EXTENSION_NAME
from fcmprovision.download.files import atomic_copy, atomic_write_json, read_json_file
from fcmprovision.download.interfaces import (
    BuildConfiguration,
    Platform,
    ProjectLayout,
    resolve_config_path,
)
from fcmprovision.exceptions import TemplateNotFoundError
from fcmprovision.log_utils import logger


def copy_android_config(use_downloaded: bool, layout: ProjectLayout) -> Path:
    """
    Copy the resolved google-services.json into `android/app`, overwriting any existing copy.

    Parameters:
        use_downloaded (bool): Use the downloaded file instead of the bundled template.
        layout (ProjectLayout): Project directories.

    Returns:
        Path: The destination file.

    Raises:
        TemplateNotFoundError: If the resolved source file does not exist.
    """
    source = resolve_config_path(use_downloaded, Platform.ANDROID, layout)
    destination = layout.android_config_path

    if not source.is_file():
        raise TemplateNotFoundError(
            f"Android configuration source not found: {source}", path=str(source)
        )

    atomic_copy(source, destination)
    logger.info(f"Android: copied {source} to {destination}")
    return destination


def _set_package_name(data: Any, package_name: str) -> bool:
    try:
        android_client_info = data["client"][0]["client_info"]["android_client_info"]
    except (KeyError, IndexError, TypeError):
        return False
    if not isinstance(android_client_info, dict):
        return False
    android_client_info["package_name"] = package_name
    return True


def update_package_name(
    file_path: Path, package_name: str = DEFAULT_DEV_PACKAGE_NAME
) -> bool:
    """
    Rewrite the Android package name of the first client in google-services.json.

    Never raises. A missing file, invalid JSON or an unexpected document shape
    is logged and leaves the file untouched.

    Returns:
        bool: `True` if the file was rewritten, `False` otherwise.
    """
    file_path = Path(file_path)
    if not file_path.exists():
        logger.info(f"{file_path} does not exist, moving on...")
        return False

    data = read_json_file(file_path)
    if data is None:
        logger.warning(
            f"{file_path} is invalid or empty - please check your {FIREBASE_EXTENSION_NAME} configuration!"
        )
        return False

    if not _set_package_name(data, package_name):
        logger.warning(
            f"{file_path} has no client[0].client_info.android_client_info entry - "
            f"please check your {FIREBASE_EXTENSION_NAME} configuration!"
        )
        return False

    start = time.perf_counter()
    if not atomic_write_json(file_path, data):
        return False
    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info(f"Updated {file_path.name} package_name to {package_name} ({elapsed_ms:.1f}ms)")
    return True


def inject_android_config(
    use_downloaded: bool,
    build: BuildConfiguration,
    layout: ProjectLayout,
    package_name: str = DEFAULT_DEV_PACKAGE_NAME,
) -> Path:
    """
    Install google-services.json into the Android project.

    The file is copied first. Development builds (neither production nor release)
    then get the package name rewritten to `package_name`.

    Returns:
        Path: The installed configuration file.
    """
    destination = copy_android_config(use_downloaded, layout)

    if build.is_release_grade:
        logger.debug("Release build, keeping google-services.json package_name")
    else:
        update_package_name(destination, package_name)

    return destination
