import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, Mock

import platformdirs
import pytest

from fcmprovision.download.interfaces import ProjectLayout

_ASYNC_NETWORK_BLOCK_MSG = (
    "Async network access is blocked during tests. Mock aiohttp.ClientSession."
)

TEMPLATE_GOOGLE_SERVICES = {
    "project_info": {"project_id": "template-project"},
    "client": [
        {
            "client_info": {
                "mobilesdk_app_id": "1:000:android:000",
                "android_client_info": {"package_name": "com.template.app"},
            }
        }
    ],
}

TEMPLATE_PLIST = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    "<plist version=\"1.0\"><dict><key>PROJECT_ID</key>"
    "<string>template-project</string></dict></plist>\n"
)


async def _async_block_network(*_args, **_kwargs):
    """
    Prevent async network calls during tests by raising a RuntimeError.

    Raises:
        RuntimeError: `_ASYNC_NETWORK_BLOCK_MSG` suggesting to mock `aiohttp.ClientSession`.
    """
    raise RuntimeError(_ASYNC_NETWORK_BLOCK_MSG)


def pytest_configure(config):
    """Register the markers used across the suite."""
    for marker in (
        "asyncio: mark test as an asyncio test (auto-detected)",
        "unit: fast isolated tests",
        "core_downloads: endpoint resolution and download tests",
        "injection: native project injection tests",
        "integration: end-to-end pre-build scenarios",
        "configuration: settings and CLI configuration tests",
    ):
        config.addinivalue_line("markers", marker)


@pytest.fixture(autouse=True)
def _isolate_test_environment(tmp_path_factory, monkeypatch):
    """
    Point the user config directory at a temporary location so no real
    settings file is ever read.
    """
    base = tmp_path_factory.mktemp("fcmprovision")
    config_dir = base / "config"
    config_dir.mkdir(parents=True, exist_ok=True)

    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_dir))
    monkeypatch.setattr(
        platformdirs, "user_config_dir", lambda *_args, **_kwargs: str(config_dir)
    )

    import fcmprovision.settings as settings

    monkeypatch.setattr(settings, "CONFIG_DIR", str(config_dir))
    monkeypatch.setattr(
        settings, "CONFIG_FILE", str(Path(config_dir) / "fcmprovision.yaml")
    )


def pytest_runtest_setup():
    """Replace aiohttp's request entry points with a blocker."""
    try:
        import aiohttp  # type: ignore[import-not-found]

        aiohttp.request = _async_block_network
        aiohttp.ClientSession.request = _async_block_network  # type: ignore[assignment]
        aiohttp.ClientSession.get = _async_block_network  # type: ignore[assignment]
    except ImportError:
        pass


# =============================================================================
# Project fixtures
# =============================================================================


@pytest.fixture
def project_layout(tmp_path) -> ProjectLayout:
    """
    Build a minimal React Native project tree.

    Contains `android/app`, one `ios/App.xcodeproj/project.pbxproj` placeholder,
    bundled templates for both platforms and an empty download directory.
    """
    root = tmp_path / "project"
    (root / "android" / "app").mkdir(parents=True)
    xcodeproj = root / "ios" / "App.xcodeproj"
    xcodeproj.mkdir(parents=True)
    (xcodeproj / "project.pbxproj").write_text("// !$*UTF8*$!\n{}\n", encoding="utf-8")

    templates = root / "node_modules" / "shoutem.firebase" / "build" / "templates"
    templates.mkdir(parents=True)
    (templates / "google-services.json").write_text(
        json.dumps(TEMPLATE_GOOGLE_SERVICES), encoding="utf-8"
    )
    (templates / "GoogleService-Info.plist").write_text(TEMPLATE_PLIST, encoding="utf-8")

    downloads = tmp_path / "downloads"
    downloads.mkdir()
    return ProjectLayout(project_root=root, download_dir=downloads)


# Object ids as in the React Native app template: the AppTests target id sorts
# before the App target id although App is listed first in `targets`.
REACT_NATIVE_PBXPROJ = """// !$*UTF8*$!
{
	archiveVersion = 1;
	classes = {
	};
	objectVersion = 54;
	objects = {

/* Begin PBXFileReference section */
		00E356EE1AD99517003FC87E /* AppTests.xctest */ = {isa = PBXFileReference; explicitFileType = wrapper.cfbundle; includeInIndex = 0; path = AppTests.xctest; sourceTree = BUILT_PRODUCTS_DIR; };
		13B07F961A680F5B00A75B9A /* App.app */ = {isa = PBXFileReference; explicitFileType = wrapper.application; includeInIndex = 0; path = App.app; sourceTree = BUILT_PRODUCTS_DIR; };
/* End PBXFileReference section */

/* Begin PBXGroup section */
		83CBB9F61A601CBA00E9B192 = {
			isa = PBXGroup;
			children = (
				83CBBA001A601CBA00E9B192 /* Products */,
			);
			indentWidth = 2;
			sourceTree = "<group>";
			tabWidth = 2;
			usesTabs = 0;
		};
		83CBBA001A601CBA00E9B192 /* Products */ = {
			isa = PBXGroup;
			children = (
				13B07F961A680F5B00A75B9A /* App.app */,
				00E356EE1AD99517003FC87E /* AppTests.xctest */,
			);
			name = Products;
			sourceTree = "<group>";
		};
/* End PBXGroup section */

/* Begin PBXNativeTarget section */
		00E356ED1AD99517003FC87E /* AppTests */ = {
			isa = PBXNativeTarget;
			buildPhases = (
				00E356EC1AD99517003FC87E /* Resources */,
			);
			buildRules = (
			);
			dependencies = (
			);
			name = AppTests;
			productName = AppTests;
			productReference = 00E356EE1AD99517003FC87E /* AppTests.xctest */;
			productType = "com.apple.product-type.bundle.unit-test";
		};
		13B07F861A680F5B00A75B9A /* App */ = {
			isa = PBXNativeTarget;
			buildPhases = (
				13B07F8E1A680F5B00A75B9A /* Resources */,
			);
			buildRules = (
			);
			dependencies = (
			);
			name = App;
			productName = App;
			productReference = 13B07F961A680F5B00A75B9A /* App.app */;
			productType = "com.apple.product-type.application";
		};
/* End PBXNativeTarget section */

/* Begin PBXProject section */
		83CBB9F71A601CBA00E9B192 /* Project object */ = {
			isa = PBXProject;
			attributes = {
				LastUpgradeCheck = 1210;
			};
			compatibilityVersion = "Xcode 12.0";
			developmentRegion = en;
			hasScannedForEncodings = 0;
			knownRegions = (
				en,
				Base,
			);
			mainGroup = 83CBB9F61A601CBA00E9B192;
			productRefGroup = 83CBBA001A601CBA00E9B192 /* Products */;
			projectDirPath = "";
			projectRoot = "";
			targets = (
				13B07F861A680F5B00A75B9A /* App */,
				00E356ED1AD99517003FC87E /* AppTests */,
			);
		};
/* End PBXProject section */

/* Begin PBXResourcesBuildPhase section */
		00E356EC1AD99517003FC87E /* Resources */ = {
			isa = PBXResourcesBuildPhase;
			buildActionMask = 2147483647;
			files = (
			);
			runOnlyForDeploymentPostprocessing = 0;
		};
		13B07F8E1A680F5B00A75B9A /* Resources */ = {
			isa = PBXResourcesBuildPhase;
			buildActionMask = 2147483647;
			files = (
			);
			runOnlyForDeploymentPostprocessing = 0;
		};
/* End PBXResourcesBuildPhase section */
	};
	rootObject = 83CBB9F71A601CBA00E9B192 /* Project object */;
}
"""


@pytest.fixture
def react_native_pbxproj(project_layout) -> Path:
    """Replace the placeholder project file with a parseable React Native project."""
    pbxproj = project_layout.ios_dir / "App.xcodeproj" / "project.pbxproj"
    pbxproj.write_text(REACT_NATIVE_PBXPROJ, encoding="utf-8")
    return pbxproj


@pytest.fixture
def xcode_project_factory():
    """
    Return a factory building a mocked `XcodeProject`.

    The mock resolves `rootObject` and the PBXProject `targets` list the way the
    parser does, so target order follows `target_names`.
    """

    def factory(
        target_names=("App", "AppTests"),
        added=True,
        save_error=None,
        saved_text="// saved by pbxproj\n",
    ):
        objects = {}
        target_ids = []
        for index, name in enumerate(target_names):
            target = Mock()
            target.name = name
            target_id = f"TARGET{index}"
            objects[target_id] = target
            target_ids.append(target_id)

        root = MagicMock()
        root.__getitem__.side_effect = {"targets": target_ids}.get
        objects["ROOT"] = root

        project = MagicMock()
        project.__getitem__.side_effect = {"rootObject": "ROOT"}.get
        project.objects.__getitem__.side_effect = objects.get
        project.add_file.return_value = [Mock()] if added else []

        def save(path):
            if save_error is not None:
                raise save_error
            Path(path).write_text(saved_text, encoding="utf-8")

        project.save.side_effect = save
        return project

    return factory


# =============================================================================
# Async HTTP fixtures
# =============================================================================


async def make_async_iter(items):
    """Yield each item of a synchronous iterable asynchronously."""
    for item in items:
        yield item


def make_response(status=200, chunks=()):
    """
    Build a mocked aiohttp response usable as `async with session.get(url)`.

    Parameters:
        status (int): HTTP status code.
        chunks (Iterable[bytes]): Body chunks yielded by `content.iter_chunked`.
    """
    mock_response = AsyncMock()
    mock_response.status = status
    mock_response.headers = {}
    mock_content = MagicMock()
    mock_content.iter_chunked = Mock(return_value=make_async_iter(list(chunks)))
    mock_response.content = mock_content
    mock_response.__aenter__ = AsyncMock(return_value=mock_response)
    mock_response.__aexit__ = AsyncMock(return_value=None)
    return mock_response


@pytest.fixture
def mock_session_factory(mocker):
    """
    Return a factory building a mocked ClientSession whose `get` answers by URL.

    `responses` maps URL suffixes to either a response mock or an exception
    instance raised when the URL is requested.
    """

    def factory(responses):
        def get(url, *_args, **_kwargs):
            for suffix, response in responses.items():
                if url.endswith(suffix):
                    if isinstance(response, BaseException):
                        raise response
                    return response
            raise AssertionError(f"Unexpected URL requested: {url}")

        session = mocker.MagicMock()
        session.closed = False
        session.get = mocker.MagicMock(side_effect=get)
        session.close = AsyncMock()
        return session

    return factory


@pytest.fixture
def response_factory():
    """Expose `make_response` to tests."""
    return make_response


@pytest.fixture
def template_google_services():
    """A fresh copy of the bundled google-services.json template document."""
    return json.loads(json.dumps(TEMPLATE_GOOGLE_SERVICES))
