"""
Constants and configuration values for fcmprovision.

This module contains the hardcoded names, paths, URL templates, timeouts and
other constants used throughout the pre-build pipeline.
"""

# Application configuration lookup
CORE_EXTENSIONS_TYPE = "shoutem.core.extensions"
SHOUTEM_APPLICATION = "shoutem.application"
API_ENDPOINT_SETTING = "legacyApiEndpoint"

# Extension that ships the templates and receives downloaded files
FIREBASE_EXTENSION_NAME = "shoutem.firebase"
NODE_MODULES_DIR_NAME = "node_modules"
TEMPLATES_RELATIVE_DIR = "build/templates"

# Remote legacy API
LEGACY_API_SCHEME = "http"
RESOURCE_PATH_TEMPLATE = "{app_id}/firebase/objects/FirebaseProject/{resource}"
ANDROID_REMOTE_RESOURCE = "googleservices.json"
IOS_REMOTE_RESOURCE = "googleservices.plist"

# Local configuration file names
ANDROID_CONFIG_FILE = "google-services.json"
IOS_CONFIG_FILE = "GoogleService-Info.plist"

# Native project layout
ANDROID_APP_DIR = "android/app"
IOS_DIR_NAME = "ios"
XCODE_PROJECT_GLOB = "*.xcodeproj/project.pbxproj"

# Package name written into google-services.json for development builds
DEFAULT_DEV_PACKAGE_NAME = "com.shoutemapp"

# Download configuration defaults
DEFAULT_REQUEST_TIMEOUT = 30
DEFAULT_MAX_CONCURRENT_DOWNLOADS = 2
DEFAULT_CHUNK_SIZE = 8192
HTTP_STATUS_ERROR_THRESHOLD = 400

# Fallback reasons
FALLBACK_EMPTY_RESPONSE = "empty response"
FALLBACK_HTTP_ERROR = "http error"
FALLBACK_NETWORK_ERROR = "network error"
FALLBACK_FILESYSTEM_ERROR = "filesystem error"
FALLBACK_UNEXPECTED_ERROR = "unexpected error"
FALLBACK_NOT_RELEASE_BUILD = "not a release build"

# Post-injection hooks
POST_INJECTION_ENTRY_POINT_GROUP = "fcmprovision.post_injection"

# Logging configuration
LOGGER_NAME = "fcmprovision"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
INFO_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
DEBUG_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s: %(message)s"
LOG_FILE_NAME = "fcmprovision.log"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
LOG_FILE_BACKUP_COUNT = 5

# Configuration file names
APP_NAME = "fcmprovision"
CONFIG_FILE_NAME = "fcmprovision.yaml"

# Environment variable names
LOG_LEVEL_ENV_VAR = "FCMPROVISION_LOG_LEVEL"
