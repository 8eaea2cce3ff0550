"""Inventory document models (the on-disk ``inventory.json`` shape)."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class VersionUser(BaseModel):
    """The ``user`` block of a version: who made the version."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    address: str = ""


class InventoryDocument(BaseModel):
    """Wire form of an OCFL inventory.

    Field declaration order is the canonical key order of a serialized
    inventory.  Version blocks are kept as plain mappings: the codec does not
    judge their content, that is left to ``OcflVerify``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    type: str
    digest_algorithm: str = Field(alias="digestAlgorithm")
    head: str
    content_directory: str = Field(default="content", alias="contentDirectory")
    manifest: dict[str, list[str]]
    versions: dict[str, dict[str, Any]]
    fixity: dict[str, dict[str, list[str]]] = {}

    def to_json_dict(self) -> dict[str, Any]:
        """Dump with OCFL key names, omitting an empty fixity block."""
        data = self.model_dump(by_alias=True)
        if not data["fixity"]:
            del data["fixity"]
        return data
