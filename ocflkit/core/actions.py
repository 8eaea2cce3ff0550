"""Accumulator for the file operations of one version transition."""

from __future__ import annotations

import copy
from typing import Any

from ocflkit.models.actions import ActionKind


class OcflActions:
    """Collects ``action -> digest -> [paths]`` entries without duplicates.

    Empty categories are dropped from :meth:`all`, so a record only names
    the actions that actually happened.
    """

    def __init__(self) -> None:
        self._actions: dict[ActionKind, dict[str, Any]] = {kind: {} for kind in ActionKind}

    def _append(self, kind: ActionKind, digest: str, path: str) -> list[str]:
        paths = self._actions[kind].setdefault(digest, [])
        if path not in paths:
            paths.append(path)
        return list(paths)

    def update_manifest(self, digest: str, path: str) -> list[str]:
        return self._append(ActionKind.UPDATE_MANIFEST, digest, path)

    def add(self, digest: str, path: str) -> list[str]:
        return self._append(ActionKind.ADD, digest, path)

    def update(self, digest: str, path: str) -> list[str]:
        return self._append(ActionKind.UPDATE, digest, path)

    def copy(self, digest: str, path: str) -> list[str]:
        return self._append(ActionKind.COPY, digest, path)

    def move(self, digest: str, path: str) -> list[str]:
        return self._append(ActionKind.MOVE, digest, path)

    def delete(self, digest: str, path: str) -> list[str]:
        return self._append(ActionKind.DELETE, digest, path)

    def fixity(self, digest: str, algorithm: str, fixity_digest: str) -> str:
        """Record ``fixity_digest`` for ``digest``; the first value recorded wins."""
        block = self._actions[ActionKind.FIXITY].setdefault(algorithm, {})
        return block.setdefault(digest, fixity_digest)

    def all(self) -> dict[str, dict[str, Any]]:
        """Non-empty categories, keyed by action name, as a detached copy."""
        return {
            kind.value: copy.deepcopy(entries)
            for kind, entries in self._actions.items()
            if entries
        }
