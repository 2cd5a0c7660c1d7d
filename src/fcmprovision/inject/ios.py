"""
iOS injection: register GoogleService-Info.plist as a resource of the first
target in every Xcode project under `ios/`.
"""

import os
from pathlib import Path
from typing import List, Optional

from pbxproj import XcodeProject

from fcmprovision.constants import XCODE_PROJECT_GLOB
from fcmprovision.download.files import atomic_replace
from fcmprovision.download.interfaces import (
    BuildConfiguration,
    Platform,
    ProjectLayout,
    resolve_config_path,
)
from fcmprovision.exceptions import (
    InjectionError,
    ProjectUpdateError,
    TemplateNotFoundError,
    XcodeProjectNotFoundError,
)
from fcmprovision.log_utils import logger


def find_xcode_projects(ios_dir: Path) -> List[Path]:
    """Return every `*.xcodeproj/project.pbxproj` directly under `ios_dir`, sorted."""
    ios_dir = Path(ios_dir)
    if not ios_dir.is_dir():
        return []
    return sorted(ios_dir.glob(XCODE_PROJECT_GLOB))


def _project_relative_path(pbxproj_path: Path, config_path: Path) -> str:
    # SOURCE_ROOT is the directory holding the .xcodeproj bundle
    source_root = pbxproj_path.parent.parent
    try:
        return os.path.relpath(config_path, source_root)
    except ValueError:
        return str(config_path)


def _first_target(project):
    # objects.get_targets() is ordered by object id, not by the project's target list
    root = project.objects[project["rootObject"]]
    target_ids = root["targets"] if root is not None else None
    if not target_ids:
        return None
    if isinstance(target_ids, str):
        # pbxproj stores a single-element list as the bare key
        target_ids = [target_ids]
    return project.objects[target_ids[0]]


def add_resource_to_project(pbxproj_path: Path, config_path: Path) -> bool:
    """
    Add `config_path` to the resources of the project's first build target.

    The first target is the first entry of the PBXProject `targets` list, the
    application target in a React Native project. The project file is rewritten
    atomically and only when a reference was added; a file the project already
    references leaves the project file as it is.

    Parameters:
        pbxproj_path (Path): Path to a `project.pbxproj` file.
        config_path (Path): Configuration file to register.

    Returns:
        bool: `True` if a new reference was added, `False` if it was already present.

    Raises:
        InjectionError: If the project has no build target.
        Exception: Whatever the parser or the filesystem raises for this project.
    """
    pbxproj_path = Path(pbxproj_path)
    project = XcodeProject.load(str(pbxproj_path))

    first_target = _first_target(project)
    if first_target is None:
        raise InjectionError("Xcode project has no build targets", path=str(pbxproj_path))

    resource_path = _project_relative_path(pbxproj_path, Path(config_path))
    # target names are unique within an Xcode project
    added = project.add_file(resource_path, target_name=first_target.name, force=False)
    if not added:
        return False

    with atomic_replace(pbxproj_path, suffix=".pbxproj") as temp_path:
        project.save(str(temp_path))

    return True


def inject_ios_config(
    use_downloaded: bool,
    layout: ProjectLayout,
    build: Optional[BuildConfiguration] = None,
) -> List[Path]:
    """
    Register the resolved GoogleService-Info.plist in every Xcode project.

    `build` is accepted for symmetry with the Android injector; the decision it
    influences is already folded into `use_downloaded`.

    Each project is processed independently. Failures are logged as they happen
    and reported together once all projects have been visited.

    Returns:
        List[Path]: The project files that were updated.

    Raises:
        XcodeProjectNotFoundError: If there is no Xcode project under `ios/`.
        TemplateNotFoundError: If the resolved source file does not exist.
        ProjectUpdateError: If any project could not be parsed or written.
    """
    del build
    config_path = resolve_config_path(use_downloaded, Platform.IOS, layout)

    xcode_projects = find_xcode_projects(layout.ios_dir)
    if not xcode_projects:
        logger.error(
            "Are you sure you are in a React Native project directory? "
            f"Xcode project file could not be found in {layout.ios_dir}."
        )
        raise XcodeProjectNotFoundError(
            "Xcode project file could not be found", path=str(layout.ios_dir)
        )
    if len(xcode_projects) > 1:
        logger.warning(
            f"WARNING! More than one Xcode project found. "
            f"The {config_path} file will be added to each project"
        )

    if not config_path.is_file():
        raise TemplateNotFoundError(
            f"iOS configuration source not found: {config_path}", path=str(config_path)
        )

    updated: List[Path] = []
    failed: List[str] = []
    for pbxproj_path in xcode_projects:
        try:
            added = add_resource_to_project(pbxproj_path, config_path)
        except Exception as e:
            logger.error(f"iOS: Failed to update {pbxproj_path}: {e}")
            failed.append(str(pbxproj_path))
            continue

        updated.append(pbxproj_path)
        if added:
            logger.info(f"iOS: Added {config_path} to {pbxproj_path} resources")
        else:
            logger.info(f"iOS: {config_path} already in {pbxproj_path} resources")

    if failed:
        raise ProjectUpdateError(failed)
    return updated
