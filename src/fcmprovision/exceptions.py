"""
Custom exceptions for fcmprovision.

Fatal conditions (missing application settings, missing native projects,
project files that cannot be rewritten) are raised as subclasses of
FcmProvisionError. Recoverable download problems never leave the downloader as
exceptions; they are converted into Fallback outcomes.
"""

from typing import List, Optional, Sequence


class FcmProvisionError(Exception):
    """
    Base exception for all fcmprovision errors.

    The CLI catches this class to turn any fatal pipeline error into a non-zero exit.
    """

    def __init__(self, message: str, details: Optional[str] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: The primary error message.
            details: Optional additional context about the error.
        """
        self.message = message
        self.details = details
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(FcmProvisionError):
    """
    Exception raised when configuration is invalid or missing.

    This includes:
    - Missing required application settings
    - Malformed endpoint values
    - Tool configuration file parsing errors
    """

    pass


class MissingSettingError(ConfigurationError):
    """Raised when a required setting is absent from an extension's settings."""

    def __init__(self, setting: str, extension: str) -> None:
        super().__init__(f"{setting} not set in {extension} settings")
        self.setting = setting
        self.extension = extension


class InvalidEndpointError(ConfigurationError):
    """Raised when the legacy API base URL or application id cannot form a valid URL."""

    def __init__(self, message: str, value: Optional[str] = None) -> None:
        super().__init__(message, details=repr(value) if value is not None else None)
        self.value = value


class ConfigFileError(ConfigurationError):
    """Exception raised when the tool configuration file cannot be read."""

    pass


# =============================================================================
# Download Errors
# =============================================================================


class DownloadError(FcmProvisionError):
    """
    Exception raised inside the downloader for a failed transfer.

    Attributes:
        url: The URL that was being downloaded when the error occurred.
        status_code: HTTP status code, when the server answered with an error.
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[str] = None,
    ) -> None:
        super().__init__(message, details)
        self.url = url
        self.status_code = status_code


# =============================================================================
# Injection Errors
# =============================================================================


class InjectionError(FcmProvisionError):
    """
    Base exception for failures while writing into the native projects.

    Attributes:
        path: The file path that caused the error.
    """

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        details: Optional[str] = None,
    ) -> None:
        super().__init__(message, details)
        self.path = path


class TemplateNotFoundError(InjectionError):
    """Raised when the resolved source configuration file does not exist."""

    pass


class XcodeProjectNotFoundError(InjectionError):
    """Raised when no Xcode project file exists under the iOS directory."""

    pass


class ProjectUpdateError(InjectionError):
    """
    Raised after the iOS injector has visited every discovered project when at
    least one of them could not be parsed or written.
    """

    def __init__(self, failed_paths: Sequence[str]) -> None:
        self.failed_paths: List[str] = list(failed_paths)
        super().__init__(
            f"Failed to update {len(self.failed_paths)} Xcode project(s)",
            details=", ".join(self.failed_paths),
        )
