"""Inventory codec: ``OcflObject`` to and from ``inventory.json``.

The codec checks shape only (required keys present and non-empty, valid
JSON).  Whether the content obeys OCFL is judged by ``OcflVerify``.
"""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any

import pydantic

from ocflkit.config import OcflConfig
from ocflkit.core.errors import (
    RequestedFileNotFound,
    RequestedKeyNotFound,
    RequiredKeyEmpty,
    RequiredKeyNotFound,
    UnableToLoadInventoryFile,
    ValidationError,
)
from ocflkit.core.files import (
    INVENTORY_FILE,
    VERSION_DIR,
    detect_version_format,
    format_for_name,
    version_string_to_int,
)
from ocflkit.core.hasher import file_digest
from ocflkit.core.ocfl_object import OcflObject
from ocflkit.models.inventory import InventoryDocument

logger = logging.getLogger(__name__)

REQUIRED_KEYS = ("id", "head", "type", "digestAlgorithm", "manifest", "versions")

# Header keys that get_value() will look up.
HEADER_KEYS = {
    "id": "id",
    "type": "type",
    "head": "head",
    "digestAlgorithm": "digest_algorithm",
    "contentDirectory": "content_directory",
}


class OcflInventory(OcflObject):
    """An ``OcflObject`` that can be written to and read from disk."""

    # ------------------------------------------------------------------
    # Encode
    # ------------------------------------------------------------------

    def to_document(self) -> InventoryDocument:
        """Snapshot the object as an ``InventoryDocument``.

        ``head`` is recomputed from the versions present and ``type`` falls
        back to the configured content type.
        """
        self.set_head_version()
        if self.type is None:
            self.type = self.config.content_type
        if self.id is None:
            raise RequiredKeyNotFound("Required key id not set on object")
        if self.digest_algorithm is None:
            raise RequiredKeyNotFound("Required key digestAlgorithm not set on object")
        return InventoryDocument(
            id=self.id,
            type=self.type,
            digest_algorithm=self.digest_algorithm,
            head=self.head,
            content_directory=self.content_directory,
            manifest=self.manifest,
            versions=self.versions,
            fixity=self.fixity,
        )

    def serialize(self) -> str:
        """Canonical, pretty-printed inventory text."""
        return json.dumps(self.to_document().to_json_dict(), indent=2, ensure_ascii=False)

    def to_storage(self, directory: Path | str) -> Path:
        """Write ``inventory.json`` and its digest sidecar into ``directory``.

        Returns the path of the inventory file.
        """
        target = Path(directory)
        target.mkdir(parents=True, exist_ok=True)
        inventory_path = target / INVENTORY_FILE
        inventory_path.write_text(self.serialize(), encoding="utf-8")

        checksum = file_digest(inventory_path, self.digest_algorithm)
        sidecar = target / f"{INVENTORY_FILE}.{self.digest_algorithm}"
        sidecar.write_text(f"{checksum}  {INVENTORY_FILE}\n", encoding="utf-8")
        logger.info("Wrote %s (%s %s)", inventory_path, self.digest_algorithm, checksum)
        return inventory_path

    # ------------------------------------------------------------------
    # Decode
    # ------------------------------------------------------------------

    @classmethod
    def from_text(cls, text: str, config: OcflConfig | None = None) -> OcflInventory:
        """Parse inventory text.

        Raises ``UnableToLoadInventoryFile`` for malformed JSON or a wrongly
        shaped document, ``RequiredKeyNotFound`` for a missing required key
        and ``RequiredKeyEmpty`` for an empty one.
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise UnableToLoadInventoryFile(f"Inventory is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise UnableToLoadInventoryFile("Inventory must be a JSON object")
        return cls.from_dict(data, config=config)

    @classmethod
    def from_dict(cls, data: dict[str, Any], config: OcflConfig | None = None) -> OcflInventory:
        for key in REQUIRED_KEYS:
            if key not in data:
                raise RequiredKeyNotFound(f"Required key {key} not found")
            if data[key] in (None, "", {}, []):
                raise RequiredKeyEmpty(f"Required key {key} must contain a value")

        try:
            document = InventoryDocument.model_validate(data)
        except pydantic.ValidationError as exc:
            raise UnableToLoadInventoryFile(f"Inventory has an unexpected shape: {exc}") from exc

        inventory = cls(config=config)
        inventory.id = document.id
        inventory.type = document.type
        inventory.head = document.head
        inventory.digest_algorithm = document.digest_algorithm
        inventory.content_directory = document.content_directory
        inventory.manifest = {k: list(v) for k, v in document.manifest.items()}
        inventory.versions = copy.deepcopy(document.versions)
        inventory.fixity = {
            algo: {k: list(v) for k, v in block.items()}
            for algo, block in document.fixity.items()
        }
        inventory.version_format = inventory._format_from_keys()
        return inventory

    def _format_from_keys(self) -> str:
        try:
            return detect_version_format(self.versions)
        except ValidationError as exc:
            names = [key for key in self.versions if VERSION_DIR.match(key)]
            if not names:
                logger.warning(
                    "No usable version keys in %s; using default format %s",
                    self.id, self.config.version_format,
                )
                return self.config.version_format
            lowest = min(names, key=version_string_to_int)
            logger.warning("Inventory %s: %s", self.id, exc)
            return format_for_name(lowest)

    @classmethod
    def from_file(cls, path: Path | str, config: OcflConfig | None = None) -> OcflInventory:
        """Load an inventory file from disk."""
        return cls.from_dict(read_json(path), config=config)


def read_json(path: Path | str) -> dict[str, Any]:
    """Read an inventory file into a plain dict."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise RequestedFileNotFound(f"{path} does not exist") from exc
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise UnableToLoadInventoryFile(f"{path} is not valid JSON.") from exc
    if not isinstance(data, dict):
        raise UnableToLoadInventoryFile(f"{path} does not hold a JSON object.")
    return data


# ---------------------------------------------------------------------------
# Single-value lookups
# ---------------------------------------------------------------------------


def get_value(path: Path | str, key: str) -> str | None:
    """Return one header value (``id``, ``type``, ``head``, ...) of an inventory file."""
    if key not in HEADER_KEYS:
        raise RequestedKeyNotFound(f"{key} is not a valid OCFL inventory header key")
    inventory = OcflInventory.from_file(path)
    return getattr(inventory, HEADER_KEYS[key])


def get_content_directory(path: Path | str) -> str:
    return get_value(path, "contentDirectory") or "content"


def get_digest_algorithm(path: Path | str) -> str:
    algorithm = get_value(path, "digestAlgorithm")
    if not algorithm:
        raise RequiredKeyEmpty(f"Unable to find value for digestAlgorithm in {path}")
    return algorithm


def get_fixity(path: Path | str) -> dict[str, dict[str, list[str]]] | None:
    """The fixity block of an inventory file, or None when it has none."""
    fixity = OcflInventory.from_file(path).fixity
    return fixity or None
