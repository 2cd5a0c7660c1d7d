"""
Native project injection for the resolved configuration files.
"""

from .android import copy_android_config, inject_android_config, update_package_name
from .ios import add_resource_to_project, find_xcode_projects, inject_ios_config

__all__ = [
    "add_resource_to_project",
    "copy_android_config",
    "find_xcode_projects",
    "inject_android_config",
    "inject_ios_config",
    "update_package_name",
]
