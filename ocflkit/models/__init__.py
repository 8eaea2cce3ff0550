"""ocflkit data models: Pydantic v2 wire and result shapes, plus enums."""

from ocflkit.models.actions import PATH_ACTIONS, ActionKind
from ocflkit.models.findings import CODE_DESCRIPTIONS, Code, Finding, Severity
from ocflkit.models.inventory import InventoryDocument, VersionUser

__all__ = [
    # findings
    "Severity",
    "Code",
    "CODE_DESCRIPTIONS",
    "Finding",
    # inventory
    "InventoryDocument",
    "VersionUser",
    # actions
    "ActionKind",
    "PATH_ACTIONS",
]
