"""Tests for directory inspection, version format detection and digests."""

from __future__ import annotations

from pathlib import Path

import pytest

from ocflkit.core.errors import (
    NonCompliantValue,
    RequestedDirectoryNotFound,
    UnsupportedDigestAlgorithm,
    ValidationError,
)
from ocflkit.core.files import (
    detect_version_format,
    filter_by_prefix,
    get_dir_files,
    get_latest_inventory,
    get_version_directories,
    get_version_format,
    get_versions_dir_files,
    invert_and_expand,
    version_string_to_int,
)
from ocflkit.core.hasher import bytes_digest, create_digests, file_digest
from ocflkit.models.findings import Code


class TestVersionFormat:
    @pytest.mark.parametrize(
        ("names", "expected"),
        [
            (["v1", "v2"], "v%d"),
            (["v0001", "v0002"], "v%04d"),
            (["v02", "v01"], "v%02d"),
        ],
    )
    def test_detect(self, names: list[str], expected: str):
        assert detect_version_format(names) == expected

    def test_first_version_must_be_one(self):
        with pytest.raises(ValidationError) as excinfo:
            detect_version_format(["v0002", "v0003"])
        assert excinfo.value.code is Code.E015

    def test_no_versions(self):
        with pytest.raises(ValidationError) as excinfo:
            detect_version_format(["logs", "extensions"])
        assert Code.E008 in excinfo.value.details

    def test_from_disk(self, tmp_path: Path):
        (tmp_path / "v1").mkdir()
        (tmp_path / "logs").mkdir()
        assert get_version_format(tmp_path) == "v%d"

    def test_missing_root(self, tmp_path: Path):
        with pytest.raises(RequestedDirectoryNotFound):
            get_version_format(tmp_path / "nope")

    def test_version_string_to_int(self):
        assert version_string_to_int("v0010") == 10
        with pytest.raises(NonCompliantValue):
            version_string_to_int("version1")


class TestDirectories:
    def test_version_directories_sorted_numerically(self, tmp_path: Path):
        for name in ("v10", "v2", "v1", "content", "logs"):
            (tmp_path / name).mkdir()
        assert get_version_directories(tmp_path) == ["v1", "v2", "v10"]

    def test_no_version_directories(self, tmp_path: Path):
        with pytest.raises(ValidationError) as excinfo:
            get_version_directories(tmp_path)
        assert excinfo.value.code is Code.E008

    def test_dir_files_recursive_and_relative(self, tmp_path: Path):
        (tmp_path / "sub").mkdir()
        (tmp_path / "a.txt").write_text("a")
        (tmp_path / "sub" / "b.txt").write_text("b")
        assert get_dir_files(tmp_path) == ["a.txt", "sub/b.txt"]
        assert get_dir_files(tmp_path / "missing") == []

    def test_versions_dir_files(self, object_root: Path):
        files = get_versions_dir_files(object_root, "v%04d", 1, 2, "content")
        assert files == [
            "v0001/content/a.txt",
            "v0001/content/b.txt",
            "v0002/content/c.txt",
        ]

    def test_latest_inventory_prefers_highest_version(self, object_root: Path):
        assert get_latest_inventory(object_root) == object_root / "v0002" / "inventory.json"

    def test_latest_inventory_falls_back_to_root(self, object_root: Path):
        (object_root / "v0002" / "inventory.json").unlink()
        assert get_latest_inventory(object_root) == object_root / "inventory.json"


class TestPathAlgebra:
    def test_invert_and_expand(self):
        assert invert_and_expand({"d1": ["a", "b"], "d2": ["c"]}) == {"a": "d1", "b": "d1", "c": "d2"}

    def test_filter_by_prefix(self):
        paths = {"v1/content/a": "d1", "v10/content/b": "d2"}
        assert filter_by_prefix(paths, "v1/content") == {"v1/content/a": "d1"}


class TestHasher:
    def test_known_digest(self):
        assert bytes_digest(b"", "sha256") == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"

    def test_file_digest_matches_bytes_digest(self, tmp_path: Path):
        target = tmp_path / "f.bin"
        target.write_bytes(b"x" * 3_000_000)
        assert file_digest(target, "md5") == bytes_digest(b"x" * 3_000_000, "md5")

    def test_blake2b(self):
        assert len(bytes_digest(b"abc", "blake2b-512")) == 128

    def test_unsupported(self):
        with pytest.raises(UnsupportedDigestAlgorithm):
            bytes_digest(b"abc", "crc32")

    def test_create_digests_keys_are_relative(self, tmp_path: Path):
        (tmp_path / "a.txt").write_bytes(b"a")
        digests = create_digests(["a.txt"], tmp_path, "sha1")
        assert digests == {"a.txt": bytes_digest(b"a", "sha1")}
