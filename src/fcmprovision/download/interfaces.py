"""
Core data structures for the fcmprovision pipeline.

Everything here is created fresh for one pre-build invocation and discarded
afterwards.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from fcmprovision.constants import (
    ANDROID_APP_DIR,
    ANDROID_CONFIG_FILE,
    FIREBASE_EXTENSION_NAME,
    IOS_CONFIG_FILE,
    IOS_DIR_NAME,
    NODE_MODULES_DIR_NAME,
    TEMPLATES_RELATIVE_DIR,
)

Pathish = Union[str, Path]


class Platform(str, Enum):
    """Native platforms that receive a push-notification configuration file."""

    ANDROID = "android"
    IOS = "ios"

    @property
    def config_filename(self) -> str:
        """Local file name of this platform's configuration file."""
        return ANDROID_CONFIG_FILE if self is Platform.ANDROID else IOS_CONFIG_FILE


@dataclass(frozen=True)
class ConfigFileDescriptor:
    """One remote configuration file to fetch."""

    platform: Platform
    """Platform the file belongs to"""

    filename: str
    """Local file name the download is saved under"""

    endpoint: str
    """Absolute http URL of the remote resource"""


@dataclass(frozen=True)
class Downloaded:
    """The remote file was fetched and saved with a non-empty body."""

    platform: Platform
    path: Path
    size: int

    @property
    def succeeded(self) -> bool:
        return True


@dataclass(frozen=True)
class Fallback:
    """
    The remote file could not be used and the bundled template applies.

    `reason` is one of the FALLBACK_* constants. The destination file is
    guaranteed not to exist when the downloader returns this outcome.
    """

    platform: Platform
    reason: str
    url: Optional[str] = None
    status_code: Optional[int] = None
    details: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return False


DownloadOutcome = Union[Downloaded, Fallback]


@dataclass(frozen=True)
class BuildConfiguration:
    """Build flags supplied by the invoking build harness."""

    app_id: str
    production: bool = False
    release: bool = False

    @property
    def is_release_grade(self) -> bool:
        """A build flagged production or release."""
        return bool(self.production or self.release)


@dataclass(frozen=True)
class ProjectLayout:
    """
    Filesystem locations the injectors read from and write to.

    Only `project_root` is required; the other directories default to the
    conventional React Native / extension layout under it.
    """

    project_root: Path
    extension_dir: Optional[Path] = None
    templates_dir: Optional[Path] = None
    download_dir: Optional[Path] = None

    def __post_init__(self) -> None:
        root = Path(self.project_root)
        extension = (
            Path(self.extension_dir)
            if self.extension_dir
            else root / NODE_MODULES_DIR_NAME / FIREBASE_EXTENSION_NAME
        )
        templates = (
            Path(self.templates_dir)
            if self.templates_dir
            else extension / TEMPLATES_RELATIVE_DIR
        )
        downloads = Path(self.download_dir) if self.download_dir else Path.cwd()
        object.__setattr__(self, "project_root", root)
        object.__setattr__(self, "extension_dir", extension)
        object.__setattr__(self, "templates_dir", templates)
        object.__setattr__(self, "download_dir", downloads)

    @property
    def android_config_path(self) -> Path:
        """Destination of google-services.json inside the Android app module."""
        return self.project_root / ANDROID_APP_DIR / ANDROID_CONFIG_FILE

    @property
    def ios_dir(self) -> Path:
        return self.project_root / IOS_DIR_NAME


def resolve_config_path(
    use_downloaded: bool, platform: Platform, layout: ProjectLayout
) -> Path:
    """
    Choose between the freshly downloaded file and the bundled template.

    Parameters:
        use_downloaded (bool): True to use the file in the download directory.
        platform (Platform): Platform whose configuration file is resolved.
        layout (ProjectLayout): Directories to resolve against.

    Returns:
        Path: The source file the injector should use.
    """
    base_dir = layout.download_dir if use_downloaded else layout.templates_dir
    return Path(base_dir) / platform.config_filename
