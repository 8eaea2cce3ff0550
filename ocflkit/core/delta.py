"""Delta engine: explain a version transition as file operations.

Compares the state block of version ``v`` with that of ``v - 1`` and sorts
every changed logical path into add, update, copy, move or delete.  Version
1 has nothing to compare against, so everything in it is an add.

The engine only reads the object through the ``VersionedObject`` contract.
"""

from __future__ import annotations

import copy
import logging
from typing import Any

from ocflkit.core.actions import OcflActions
from ocflkit.core.errors import VersionNotFound
from ocflkit.core.files import invert_and_expand
from ocflkit.core.ocfl_object import VersionedObject

logger = logging.getLogger(__name__)

DeltaRecord = dict[str, dict[str, Any]]


class OcflDelta:
    """Per-version delta records for one object.

    Parameters
    ----------
    ocfl_object:
        Anything satisfying ``VersionedObject``.
    include_manifest:
        Also emit ``update_manifest`` entries: the new content paths of a
        version, relative to ``<version>/<contentDirectory>/``.
    """

    def __init__(self, ocfl_object: VersionedObject, include_manifest: bool = False) -> None:
        self._object = ocfl_object
        self._include_manifest = include_manifest
        self._delta: dict[str, DeltaRecord] = {}

    @property
    def delta(self) -> dict[str, DeltaRecord]:
        """Every record computed so far, keyed by version name."""
        return copy.deepcopy(self._delta)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def previous(self, version: int) -> DeltaRecord:
        """The operations that turned version ``version - 1`` into ``version``.

        Raises ``VersionNotFound`` for version <= 0 or a version the object
        does not have.
        """
        if version <= 0 or version not in self._object.version_id_list():
            raise VersionNotFound(f"Version {version} not found in object {self._object.id}!")
        if version == 1:
            record = self._first_version_delta()
        else:
            record = self._version_delta(version)
        self._delta[self._object.version_name(version)] = record
        return copy.deepcopy(record)

    def all(self) -> dict[str, DeltaRecord]:
        """Compute a record for every version of the object."""
        for version in self._object.version_id_list():
            self.previous(version)
        return self.delta

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _record_manifest(self, actions: OcflActions, digest: str, version: int) -> None:
        if not self._include_manifest:
            return
        prefix = f"{self._object.version_name(version)}/{self._object.content_directory}/"
        for content_path in self._object.manifest.get(digest, []):
            if content_path.startswith(prefix):
                actions.update_manifest(digest, content_path[len(prefix):])

    def _first_version_delta(self) -> DeltaRecord:
        actions = OcflActions()
        for digest, paths in self._object.get_state(1).items():
            for path in paths:
                actions.add(digest, path)
            self._record_manifest(actions, digest, 1)
        return actions.all()

    def _version_delta(self, version: int) -> DeltaRecord:
        current_digests = self._object.get_state(version)
        previous_digests = self._object.get_state(version - 1)
        current_files = invert_and_expand(current_digests)
        previous_files = invert_and_expand(previous_digests)

        missing_digests = [d for d in previous_digests if d not in current_digests]
        new_digests = [d for d in current_digests if d not in previous_digests]
        unchanged_digests = [d for d in current_digests if d in previous_digests]

        missing_files = previous_files.keys() - current_files.keys()
        new_files = current_files.keys() - previous_files.keys()

        actions = OcflActions()

        for digest in new_digests:
            for path in current_digests[digest]:
                if path in new_files:
                    actions.add(digest, path)
                else:
                    actions.update(digest, path)
            self._record_manifest(actions, digest, version)

        for digest in unchanged_digests:
            now = current_digests[digest]
            before = previous_digests[digest]

            # Paths that held other content in the prior version.
            for path in now:
                if path not in before and path in previous_files:
                    actions.update(digest, path)

            # Paths that now hold other content are recorded by their new digest.
            vacated = sorted(p for p in before if p not in now and p in missing_files)
            occupied = sorted(p for p in now if p not in before and p in new_files)

            if len(now) == len(before):
                for old_path, new_path in zip(vacated, occupied):
                    actions.move(digest, old_path)
                    actions.move(digest, new_path)
                paired = min(len(vacated), len(occupied))
                vacated, occupied = vacated[paired:], occupied[paired:]

            for path in occupied:
                actions.copy(digest, path)
            for path in vacated:
                actions.delete(digest, path)

        for digest in missing_digests:
            for path in previous_digests[digest]:
                if path not in current_files:
                    actions.delete(digest, path)

        record = actions.all()
        logger.debug(
            "Delta for %s: %s",
            self._object.version_name(version), sorted(record),
        )
        return record
