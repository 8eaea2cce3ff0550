"""Tests for the inventory codec: serialization, sidecar, parsing failures."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import pytest

from ocflkit.config import OcflConfig
from ocflkit.core.errors import (
    RequestedFileNotFound,
    RequestedKeyNotFound,
    RequiredKeyEmpty,
    RequiredKeyNotFound,
    UnableToLoadInventoryFile,
)
from ocflkit.core.hasher import file_digest
from ocflkit.core.inventory import (
    OcflInventory,
    get_content_directory,
    get_digest_algorithm,
    get_fixity,
    get_value,
    read_json,
)
from ocflkit.models.findings import Code


@pytest.fixture
def inventory(make_inventory: Callable[..., OcflInventory], two_version_files) -> OcflInventory:
    return make_inventory(two_version_files)


class TestSerialize:
    def test_key_order(self, inventory: OcflInventory):
        data = json.loads(inventory.serialize())
        assert list(data) == [
            "id", "type", "digestAlgorithm", "head", "contentDirectory", "manifest", "versions",
        ]

    def test_head_recomputed(self, inventory: OcflInventory):
        inventory.head = "v0001"
        assert json.loads(inventory.serialize())["head"] == "v0002"

    def test_type_defaults_from_config(self, inventory: OcflInventory, config: OcflConfig):
        inventory.type = None
        assert json.loads(inventory.serialize())["type"] == config.content_type

    def test_fixity_only_when_present(self, inventory: OcflInventory):
        assert "fixity" not in json.loads(inventory.serialize())
        digest = next(iter(inventory.manifest))
        inventory.update_fixity(digest, "md5", "abc")
        assert json.loads(inventory.serialize())["fixity"] == {
            "md5": {"abc": inventory.manifest[digest]}
        }

    def test_missing_id(self, config: OcflConfig):
        inventory = OcflInventory(config=config)
        inventory.add_file("a.txt", "d1", 1)
        with pytest.raises(RequiredKeyNotFound):
            inventory.serialize()


class TestRoundTrip:
    def test_parse_of_serialize_is_identity(self, inventory: OcflInventory, config: OcflConfig):
        digest = next(iter(inventory.manifest))
        inventory.update_fixity(digest, "sha1", "f00")
        parsed = OcflInventory.from_text(inventory.serialize(), config=config)
        assert parsed.to_document() == inventory.to_document()
        assert parsed.version_format == "v%04d"
        assert parsed.get_state(2) == inventory.get_state(2)

    def test_unpadded_versions(self, make_inventory, two_version_files, config: OcflConfig):
        original = make_inventory(two_version_files, version_format="v%d")
        parsed = OcflInventory.from_text(original.serialize(), config=config)
        assert parsed.version_format == "v%d"
        assert parsed.head == "v2"
        assert parsed.version_id_list() == [1, 2]


class TestStorage:
    def test_to_storage_writes_sidecar(self, inventory: OcflInventory, tmp_path: Path):
        path = inventory.to_storage(tmp_path)
        assert path == tmp_path / "inventory.json"
        sidecar = (tmp_path / "inventory.json.sha512").read_text()
        digest, name = sidecar.split()
        assert name == "inventory.json"
        assert digest == file_digest(path, "sha512")
        assert sidecar.startswith(f"{digest}  inventory.json")

    def test_from_file(self, inventory: OcflInventory, tmp_path: Path, config: OcflConfig):
        inventory.to_storage(tmp_path)
        loaded = OcflInventory.from_file(tmp_path / "inventory.json", config=config)
        assert loaded.id == inventory.id
        assert loaded.manifest == inventory.manifest

    def test_from_missing_file(self, tmp_path: Path):
        with pytest.raises(RequestedFileNotFound):
            OcflInventory.from_file(tmp_path / "inventory.json")


class TestParseFailures:
    def _data(self, inventory: OcflInventory) -> dict:
        return json.loads(inventory.serialize())

    def test_malformed_json(self):
        with pytest.raises(UnableToLoadInventoryFile) as excinfo:
            OcflInventory.from_text("{not json")
        assert isinstance(excinfo.value.__cause__, json.JSONDecodeError)
        assert excinfo.value.code is Code.E211

    def test_not_an_object(self):
        with pytest.raises(UnableToLoadInventoryFile):
            OcflInventory.from_text("[1, 2, 3]")

    @pytest.mark.parametrize("key", ["id", "head", "type", "digestAlgorithm", "manifest", "versions"])
    def test_missing_required_key(self, inventory: OcflInventory, key: str):
        data = self._data(inventory)
        del data[key]
        with pytest.raises(RequiredKeyNotFound) as excinfo:
            OcflInventory.from_text(json.dumps(data))
        assert excinfo.value.code is Code.E216

    def test_empty_required_key(self, inventory: OcflInventory):
        data = self._data(inventory)
        data["manifest"] = {}
        with pytest.raises(RequiredKeyEmpty) as excinfo:
            OcflInventory.from_text(json.dumps(data))
        assert excinfo.value.code is Code.E217

    def test_wrong_shape(self, inventory: OcflInventory):
        data = self._data(inventory)
        data["manifest"] = {"d1": "not-a-list"}
        with pytest.raises(UnableToLoadInventoryFile):
            OcflInventory.from_text(json.dumps(data))

    def test_optional_keys_default(self, inventory: OcflInventory):
        data = self._data(inventory)
        del data["contentDirectory"]
        parsed = OcflInventory.from_text(json.dumps(data))
        assert parsed.content_directory == "content"
        assert parsed.fixity == {}

    def test_semantics_not_judged(self, inventory: OcflInventory):
        data = self._data(inventory)
        data["head"] = "v0009"
        data["digestAlgorithm"] = "crc32"
        parsed = OcflInventory.from_text(json.dumps(data))
        assert parsed.head == "v0009"
        assert parsed.digest_algorithm == "crc32"

    def test_state_digest_missing_from_manifest(self, inventory: OcflInventory):
        data = self._data(inventory)
        data["versions"]["v0001"]["state"]["d2"] = ["ghost.txt"]
        parsed = OcflInventory.from_text(json.dumps(data))
        with pytest.raises(RequestedKeyNotFound, match="d2"):
            parsed.get_files(1)


class TestLookups:
    def test_header_values(self, inventory: OcflInventory, tmp_path: Path):
        path = inventory.to_storage(tmp_path)
        assert get_value(path, "id") == inventory.id
        assert get_value(path, "head") == "v0002"
        assert get_content_directory(path) == "content"
        assert get_digest_algorithm(path) == "sha512"
        assert get_fixity(path) is None
        assert read_json(path)["id"] == inventory.id

    def test_unknown_header_key(self, inventory: OcflInventory, tmp_path: Path):
        path = inventory.to_storage(tmp_path)
        with pytest.raises(RequestedKeyNotFound):
            get_value(path, "manifest")
