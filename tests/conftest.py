"""Shared test fixtures for ocflkit."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from ocflkit.config import OcflConfig
from ocflkit.core.hasher import bytes_digest
from ocflkit.core.inventory import OcflInventory

OBJECT_ID = "info:ocflkit/test-object"
CREATED = "2026-01-01T00:00:00Z"
USER = {"name": "Test User", "address": "mailto:test@example.org"}

VersionFiles = dict[str, bytes]


@pytest.fixture
def config() -> OcflConfig:
    """Provide default settings regardless of the caller's environment."""
    return OcflConfig(_env_file=None)


@pytest.fixture
def make_inventory(config: OcflConfig) -> Callable[..., OcflInventory]:
    """Factory fixture: build an in-memory inventory from full per-version file maps.

    Each entry of ``versions`` is the complete logical state of that version
    (path -> bytes).  Paths missing from a later version are deleted, paths
    with new bytes are updated.
    """

    def _factory(
        versions: list[VersionFiles],
        object_id: str = OBJECT_ID,
        digest_algorithm: str = "sha512",
        version_format: str = "v%04d",
        content_directory: str = "content",
    ) -> OcflInventory:
        inventory = OcflInventory(config=config)
        inventory.id = object_id
        inventory.digest_algorithm = digest_algorithm
        inventory.version_format = version_format
        inventory.content_directory = content_directory

        previous: VersionFiles = {}
        for number, files in enumerate(versions, start=1):
            for path, data in files.items():
                digest = bytes_digest(data, digest_algorithm)
                if path not in previous:
                    inventory.add_file(path, digest, number)
                elif previous[path] != data:
                    inventory.update_file(path, digest, number)
            for path in previous:
                if path not in files:
                    inventory.delete_file(path, number)
            if number not in inventory.version_id_list():
                block = OcflInventory.create_version_block()
                block["state"] = inventory.get_state(number - 1)
                inventory.set_version(number, block)
            inventory.set_version_created(number, CREATED)
            inventory.set_version_message(number, f"Version {number}")
            inventory.set_version_user(number, USER)
            previous = files
        inventory.set_head_version()
        return inventory

    return _factory


@pytest.fixture
def make_object_root(
    tmp_path: Path, make_inventory: Callable[..., OcflInventory]
) -> Callable[..., Path]:
    """Factory fixture: write a complete, valid object root to disk.

    Content bytes are written only where the manifest says they are stored;
    every version directory gets the inventory as of that version.
    """

    def _factory(
        versions: list[VersionFiles],
        name: str = "object",
        **kwargs,
    ) -> Path:
        root = tmp_path / name
        root.mkdir()
        blobs = {
            bytes_digest(data, kwargs.get("digest_algorithm", "sha512")): data
            for files in versions
            for data in files.values()
        }

        for count in range(1, len(versions) + 1):
            inventory = make_inventory(versions[:count], **kwargs)
            version_name = inventory.version_name(count)
            prefix = f"{version_name}/{inventory.content_directory}/"
            for digest, paths in inventory.manifest.items():
                for physical in paths:
                    if physical.startswith(prefix):
                        target = root / physical
                        target.parent.mkdir(parents=True, exist_ok=True)
                        target.write_bytes(blobs[digest])
            (root / version_name).mkdir(exist_ok=True)
            inventory.to_storage(root / version_name)

        inventory.to_storage(root)
        (root / "0=ocfl_object_1.0").write_text("ocfl_object_1.0\n")
        return root

    return _factory


@pytest.fixture
def two_version_files() -> list[VersionFiles]:
    """Version 1 holds a.txt and b.txt; version 2 adds c.txt."""
    return [
        {"a.txt": b"alpha", "b.txt": b"bravo"},
        {"a.txt": b"alpha", "b.txt": b"bravo", "c.txt": b"charlie"},
    ]


@pytest.fixture
def object_root(
    make_object_root: Callable[..., Path], two_version_files: list[VersionFiles]
) -> Path:
    """A valid two-version object root."""
    return make_object_root(two_version_files)
