import json
import os
import stat

import pytest

from fcmprovision.download.files import (
    atomic_copy,
    atomic_replace,
    atomic_write,
    atomic_write_json,
    read_json_file,
)

pytestmark = [pytest.mark.unit]


class TestAtomicReplace:
    def test_replaces_target_on_success(self, tmp_path):
        target = tmp_path / "project.pbxproj"
        target.write_text("old")

        with atomic_replace(target) as temp_path:
            temp_path.write_text("new")

        assert target.read_text() == "new"
        assert sorted(p.name for p in tmp_path.iterdir()) == ["project.pbxproj"]

    def test_leaves_target_untouched_on_error(self, tmp_path):
        target = tmp_path / "project.pbxproj"
        target.write_text("original")

        with pytest.raises(RuntimeError):
            with atomic_replace(target) as temp_path:
                temp_path.write_text("half written")
                raise RuntimeError("crash while writing")

        assert target.read_text() == "original"
        assert sorted(p.name for p in tmp_path.iterdir()) == ["project.pbxproj"]

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits")
    def test_preserves_permission_bits(self, tmp_path):
        target = tmp_path / "google-services.json"
        target.write_text("{}")
        target.chmod(0o644)

        with atomic_replace(target) as temp_path:
            temp_path.write_text('{"a": 1}')

        assert stat.S_IMODE(target.stat().st_mode) == 0o644

    def test_creates_missing_parent(self, tmp_path):
        target = tmp_path / "android" / "app" / "google-services.json"

        with atomic_replace(target) as temp_path:
            temp_path.write_text("{}")

        assert target.read_text() == "{}"


class TestAtomicWrite:
    def test_atomic_write_success(self, tmp_path):
        target = tmp_path / "out.txt"

        assert atomic_write(target, lambda f: f.write("hello")) is True
        assert target.read_text(encoding="utf-8") == "hello"

    def test_atomic_write_failure_returns_false(self, tmp_path):
        target = tmp_path / "out.txt"
        target.write_text("keep")

        def writer(_f):
            raise OSError("disk full")

        assert atomic_write(target, writer) is False
        assert target.read_text() == "keep"

    def test_atomic_write_json_is_stable(self, tmp_path):
        target = tmp_path / "data.json"
        data = {"client": [{"client_info": {"package_name": "com.example"}}]}

        assert atomic_write_json(target, data)
        first = target.read_bytes()
        assert atomic_write_json(target, json.loads(first))
        assert target.read_bytes() == first

    def test_atomic_write_json_unserializable_returns_false(self, tmp_path):
        assert atomic_write_json(tmp_path / "x.json", {"bad": object()}) is False
        assert not (tmp_path / "x.json").exists()


class TestReadJsonFile:
    def test_reads_valid_json(self, tmp_path):
        path = tmp_path / "a.json"
        path.write_text('{"a": [1, 2]}')

        assert read_json_file(path) == {"a": [1, 2]}

    @pytest.mark.parametrize("content", ["", "{not json", "\x00\x01"])
    def test_invalid_content_returns_none(self, tmp_path, content):
        path = tmp_path / "a.json"
        path.write_text(content)

        assert read_json_file(path) is None

    def test_missing_file_returns_none(self, tmp_path):
        assert read_json_file(tmp_path / "missing.json") is None


class TestAtomicCopy:
    def test_copies_over_existing_file(self, tmp_path):
        source = tmp_path / "source.json"
        source.write_text('{"new": true}')
        destination = tmp_path / "dest" / "google-services.json"
        destination.parent.mkdir()
        destination.write_text('{"old": true}')

        assert atomic_copy(source, destination) == destination
        assert destination.read_text() == '{"new": true}'

    def test_missing_source_raises_and_keeps_destination(self, tmp_path):
        destination = tmp_path / "google-services.json"
        destination.write_text("existing")

        with pytest.raises(OSError):
            atomic_copy(tmp_path / "missing.json", destination)

        assert destination.read_text() == "existing"
        assert sorted(p.name for p in tmp_path.iterdir()) == ["google-services.json"]
