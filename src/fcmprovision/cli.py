# src/fcmprovision/cli.py

import argparse
import json
import sys
from importlib.metadata import PackageNotFoundError, entry_points, version
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from fcmprovision import log_utils, settings
from fcmprovision.constants import APP_NAME, POST_INJECTION_ENTRY_POINT_GROUP
from fcmprovision.download.endpoints import resolve_config_files
from fcmprovision.download.interfaces import BuildConfiguration
from fcmprovision.exceptions import ConfigFileError, FcmProvisionError
from fcmprovision.orchestrator import (
    PostInjectionHook,
    get_legacy_api_endpoint,
    run_pre_build,
)


def get_fcmprovision_version() -> str:
    """
    Retrieve the installed fcmprovision package version.

    Returns:
        version (str): The installed version string, or "unknown" if it cannot be determined.
    """
    try:
        return version(APP_NAME)
    except PackageNotFoundError:
        return "unknown"


def load_app_config(path: str) -> Dict[str, Any]:
    """
    Read the application configuration JSON document.

    Raises:
        ConfigFileError: If the file cannot be read, is not valid JSON or is not an object.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigFileError(f"Could not read application configuration {path}", str(e)) from e
    if not isinstance(data, dict):
        raise ConfigFileError(f"Application configuration {path} must be a JSON object")
    return data


def load_post_injection_hooks() -> List[PostInjectionHook]:
    """Load post-injection hooks registered under the fcmprovision entry-point group."""
    hooks: List[PostInjectionHook] = []
    for entry_point in entry_points(group=POST_INJECTION_ENTRY_POINT_GROUP):
        log_utils.logger.debug(f"Loading post-injection hook {entry_point.name}")
        hooks.append(entry_point.load())
    return hooks


def _configure_logging(config: Dict[str, Any]) -> None:
    level = config.get("LOG_LEVEL")
    if level:
        log_utils.set_log_level(str(level))
    log_dir = config.get("LOG_DIR")
    if log_dir:
        log_utils.add_file_logging(Path(str(log_dir)).expanduser(), str(level or "INFO"))


def run_prebuild(args: argparse.Namespace) -> int:
    """
    Execute the `prebuild` subcommand.

    Returns:
        int: Process exit status.
    """
    config = settings.load_config(args.config)
    _configure_logging(config)

    app_config = load_app_config(args.app_config)
    build = BuildConfiguration(
        app_id=args.app_id, production=args.production, release=args.release
    )
    layout = settings.build_project_layout(config, args.project_root)
    hooks = [] if args.no_hooks else load_post_injection_hooks()

    result = run_pre_build(
        app_config,
        build,
        layout,
        hooks=hooks,
        timeout=settings.get_request_timeout(config),
        max_concurrent=settings.get_max_concurrent(config),
        package_name=settings.get_dev_package_name(config),
    )
    log_utils.logger.info(
        f"Pre-build complete: {result.android_config} and "
        f"{len(result.xcode_projects)} Xcode project(s) updated"
    )
    return 0


def run_endpoints(args: argparse.Namespace) -> int:
    """Print the resolved download URLs without touching the network."""
    app_config = load_app_config(args.app_config)
    legacy_api = get_legacy_api_endpoint(app_config)
    for platform, descriptor in resolve_config_files(legacy_api, args.app_id).items():
        print(f"{platform.value}: {descriptor.filename} <- {descriptor.endpoint}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="fcmprovision - push notification configuration pre-build hook",
    )
    subparsers = parser.add_subparsers(dest="command")

    def add_app_arguments(subparser: argparse.ArgumentParser) -> None:
        subparser.add_argument(
            "--app-config",
            required=True,
            help="Path to the application configuration JSON document",
        )
        subparser.add_argument("--app-id", required=True, help="Application identifier")

    prebuild_parser = subparsers.add_parser(
        "prebuild", help="Download and inject the native push configuration files"
    )
    add_app_arguments(prebuild_parser)
    prebuild_parser.add_argument(
        "--production", action="store_true", help="Mark the build as a production build"
    )
    prebuild_parser.add_argument(
        "--release", action="store_true", help="Mark the build as a release build"
    )
    prebuild_parser.add_argument(
        "--project-root",
        default=".",
        help="Root of the React Native project (default: current directory)",
    )
    prebuild_parser.add_argument(
        "--config", default=None, help=f"Path to {APP_NAME} settings YAML"
    )
    prebuild_parser.add_argument(
        "--no-hooks",
        action="store_true",
        help="Skip post-injection hooks registered by other packages",
    )

    endpoints_parser = subparsers.add_parser(
        "endpoints", help="Show the download URLs for an application"
    )
    add_app_arguments(endpoints_parser)

    subparsers.add_parser("version", help=f"Display {APP_NAME} version")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    """
    Entry point for the fcmprovision command-line interface.

    Fatal pipeline errors are logged and turned into exit status 1.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "version":
        print(f"{APP_NAME} v{get_fcmprovision_version()}")
        return
    if args.command is None:
        parser.print_help()
        return

    handlers = {"prebuild": run_prebuild, "endpoints": run_endpoints}
    try:
        exit_code = handlers[args.command](args)
    except FcmProvisionError as e:
        log_utils.logger.error(f"{APP_NAME} {args.command} failed: {e}")
        sys.exit(1)
    if exit_code:
        sys.exit(exit_code)


if __name__ == "__main__":
    main()
