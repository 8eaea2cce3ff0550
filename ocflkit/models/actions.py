"""Delta action model."""

from __future__ import annotations

from enum import Enum


class ActionKind(str, Enum):
    """Logical file operations that explain a version transition.

    Declaration order is the order categories appear in an emitted delta
    record.
    """

    UPDATE_MANIFEST = "update_manifest"
    ADD = "add"
    UPDATE = "update"
    COPY = "copy"
    MOVE = "move"
    DELETE = "delete"
    FIXITY = "fixity"


# Actions that name logical paths; ``update_manifest`` names content paths
# and ``fixity`` maps digests to fixity digests.
PATH_ACTIONS: frozenset[ActionKind] = frozenset({
    ActionKind.ADD,
    ActionKind.UPDATE,
    ActionKind.COPY,
    ActionKind.MOVE,
    ActionKind.DELETE,
})
