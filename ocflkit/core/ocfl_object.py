"""In-memory model of one OCFL object: manifest, versions and fixity.

Enforces:
- Version blocks are append-only; only the newest version (or the next one)
  can be mutated.
- Each version block is a complete snapshot: staging a new version copies
  the entire prior state forward before any change is applied.
- Every digest referenced by a state block is present in the manifest.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Protocol, runtime_checkable

from ocflkit.config import OcflConfig
from ocflkit.core.errors import (
    CannotEditPreviousVersion,
    FileAlreadyExists,
    FileDigestMismatch,
    NonCompliantValue,
    RequestedFileNotFound,
    RequestedKeyNotFound,
    ValidationError,
    VersionNotFound,
)
from ocflkit.core.files import invert_and_expand, version_string_to_int
from ocflkit.models.findings import Code
from ocflkit.models.inventory import VersionUser

logger = logging.getLogger(__name__)

State = dict[str, list[str]]

REQUIRED_VERSION_KEYS = ("created", "message", "user", "state")


@runtime_checkable
class VersionedObject(Protocol):
    """Read contract consumed by the delta engine and the inventory verifier."""

    id: str | None
    type: str | None
    head: str | None
    digest_algorithm: str | None
    content_directory: str
    manifest: dict[str, list[str]]
    versions: dict[str, dict[str, Any]]
    fixity: dict[str, dict[str, list[str]]]

    def version_name(self, version: int) -> str: ...

    def version_id_list(self) -> list[int]: ...

    def get_state(self, version: int) -> State: ...

    def get_digest(self, file: str, version: int) -> str: ...


class OcflObject:
    """A versioned OCFL object held in memory.

    Parameters
    ----------
    config:
        Site defaults for the digest algorithm, content directory and
        version naming.  A default ``OcflConfig`` is built when omitted.
    """

    def __init__(self, config: OcflConfig | None = None) -> None:
        self.config = config or OcflConfig()
        self.id: str | None = None
        self.type: str | None = None
        self.head: str | None = None
        self.digest_algorithm: str | None = self.config.digest_algorithm
        self.content_directory: str = self.config.content_directory
        self.version_format: str = self.config.version_format
        self.manifest: dict[str, list[str]] = {}
        self.versions: dict[str, dict[str, Any]] = {}
        self.fixity: dict[str, dict[str, list[str]]] = {}

    # ------------------------------------------------------------------
    # Versions
    # ------------------------------------------------------------------

    def version_name(self, version: int) -> str:
        """Canonical directory / key name for ``version`` (e.g. ``v0003``)."""
        return self.version_format % version

    def version_id_list(self) -> list[int]:
        """Version numbers present in the object, ascending."""
        return sorted(version_string_to_int(key) for key in self.versions)

    def get_version(self, version: int) -> dict[str, Any]:
        """Return the live version block for ``version``.

        Raises ``NonCompliantValue`` for version <= 0 and ``VersionNotFound``
        when the block does not exist.
        """
        if version <= 0:
            raise NonCompliantValue(
                f"Requested value '{version}' for object version does not comply with OCFL."
            )
        name = self.version_name(version)
        if name not in self.versions:
            raise VersionNotFound(f"Version {name} does not exist in object {self.id}")
        return self.versions[name]

    @staticmethod
    def create_version_block() -> dict[str, Any]:
        """An empty version block with every required key present."""
        return {
            "created": "",
            "message": "",
            "user": VersionUser().model_dump(),
            "state": {},
        }

    def set_version(self, version: int, block: dict[str, Any]) -> None:
        """Replace the block for ``version`` wholesale.

        Raises ``ValidationError`` (E016) naming each missing key.
        """
        missing = [
            f"version {version} block is missing required {key} key."
            for key in REQUIRED_VERSION_KEYS
            if key not in block
        ]
        if missing:
            raise ValidationError({Code.E016: missing})
        self.versions[self.version_name(version)] = copy.deepcopy(block)

    def _check_mutable(self, version: int) -> int:
        """Raise unless ``version`` is the newest or the next one; returns the newest."""
        highest = max(self.version_id_list(), default=0)
        if version <= 0:
            raise NonCompliantValue(
                f"Requested value '{version}' for object version does not comply with OCFL."
            )
        if version < highest:
            raise CannotEditPreviousVersion(
                f"Can't edit prior versions! Only version {highest} can be modified now."
            )
        if version > highest + 1:
            raise NonCompliantValue(
                f"Version {version} would leave a gap; the next version is {highest + 1}."
            )
        return highest

    def _working_state(self, version: int) -> State:
        """The state a mutation of ``version`` starts from, without staging anything."""
        highest = self._check_mutable(version)
        if version == highest + 1:
            return self.get_state(highest) if highest else {}
        return self.get_state(version)

    def _working_digest(self, file: str, version: int) -> str:
        by_path = invert_and_expand(self._working_state(version))
        if file not in by_path:
            raise RequestedFileNotFound(
                f"Can't find requested file {file} in version {self.version_name(version)}."
            )
        return by_path[file]

    def _stage_version(self, version: int) -> State:
        """Return the mutable state of the version being built.

        Creates ``version`` when it is the next one, copying the prior
        state forward.  Callers check their preconditions first so that a
        rejected mutation never leaves a new version behind.
        """
        highest = self._check_mutable(version)
        if version == highest + 1:
            block = self.create_version_block()
            if highest:
                block["state"] = copy.deepcopy(self.get_state(highest))
            self.versions[self.version_name(version)] = block
            logger.debug("Staged new version %s of %s", self.version_name(version), self.id)
        return self.versions[self.version_name(version)]["state"]

    # ------------------------------------------------------------------
    # Version metadata
    # ------------------------------------------------------------------

    def _existing(self, version: int) -> dict[str, Any]:
        try:
            return self.get_version(version)
        except VersionNotFound as exc:
            raise RequestedKeyNotFound(f"Version {version} does not yet exist!") from exc

    def set_version_message(self, version: int, message: str) -> None:
        self._existing(version)["message"] = message

    def get_version_message(self, version: int) -> str:
        return self._existing(version)["message"]

    def set_version_created(self, version: int, created: str) -> None:
        self._existing(version)["created"] = created

    def get_version_created(self, version: int) -> str:
        return self._existing(version)["created"]

    def set_version_user(self, version: int, user: VersionUser | dict[str, str]) -> None:
        if isinstance(user, dict):
            user = VersionUser(**user)
        self._existing(version)["user"] = user.model_dump()

    def get_version_user(self, version: int) -> VersionUser:
        return VersionUser(**self._existing(version)["user"])

    # ------------------------------------------------------------------
    # Head
    # ------------------------------------------------------------------

    def set_head_from_version(self, version: int) -> str:
        self.head = self.version_name(version)
        return self.head

    def set_head_version(self) -> str:
        """Point ``head`` at the highest version present."""
        versions = self.version_id_list()
        if not versions:
            raise VersionNotFound(f"Object {self.id} has no versions to set head from")
        return self.set_head_from_version(versions[-1])

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_state(self, version: int) -> State:
        return self.get_version(version)["state"]

    def get_files(self, version: int) -> dict[str, str]:
        """Map each logical path of ``version`` to a physical path.

        A digest may have several physical paths; all hold the same bytes,
        so the first is used.
        """
        files: dict[str, str] = {}
        for digest, logical_paths in self.get_state(version).items():
            if not self.manifest.get(digest):
                raise RequestedKeyNotFound(
                    f"Digest {digest} of version {self.version_name(version)} not found in manifest!"
                )
            physical = self.manifest[digest][0]
            for logical in logical_paths:
                files[logical] = physical
        return files

    def get_current_files(self) -> dict[str, str]:
        """Logical to physical paths as of ``head`` (or the highest version)."""
        if self.head:
            return self.get_files(version_string_to_int(self.head))
        versions = self.version_id_list()
        if not versions:
            raise VersionNotFound(f"Object {self.id} has no versions")
        return self.get_files(versions[-1])

    def get_digest(self, file: str, version: int) -> str:
        """Digest of logical path ``file`` in ``version``."""
        by_path = invert_and_expand(self.get_state(version))
        if file not in by_path:
            raise RequestedFileNotFound(
                f"Can't find requested file {file} in version {self.version_name(version)}."
            )
        return by_path[file]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def update_manifest(self, file: str, digest: str, version: int) -> list[str]:
        """Record ``file`` as stored under ``version``'s content directory."""
        physical = f"{self.version_name(version)}/{self.content_directory}/{file}"
        paths = self.manifest.setdefault(digest, [])
        if physical not in paths:
            paths.append(physical)
        return list(paths)

    def update_fixity(self, digest: str, algorithm: str, fixity_digest: str) -> dict[str, dict[str, list[str]]]:
        """File every manifest path of ``digest`` under ``fixity_digest``."""
        if digest not in self.manifest:
            raise RequestedKeyNotFound(f"Unable to find digest {digest} in manifest!")
        paths = self.fixity.setdefault(algorithm, {}).setdefault(fixity_digest, [])
        for physical in self.manifest[digest]:
            if physical not in paths:
                paths.append(physical)
        return self.fixity

    def add_file(self, file: str, digest: str, version: int) -> State:
        """Add new logical path ``file`` with ``digest`` to ``version``.

        Raises ``FileDigestMismatch`` when the path already holds another
        digest and ``FileAlreadyExists`` when it holds this one.
        """
        current = invert_and_expand(self._working_state(version))
        if file in current:
            if current[file] != digest:
                raise FileDigestMismatch(
                    f"{file} already exists with different digest in version {version}. "
                    "Consider update instead."
                )
            raise FileAlreadyExists(f"{file} already exists in version {version}.")

        state = self._stage_version(version)
        if digest not in self.manifest:
            self.update_manifest(file, digest, version)
        state.setdefault(digest, []).append(file)
        return copy.deepcopy(state)

    def update_file(self, file: str, digest: str, version: int) -> State:
        """Give existing logical path ``file`` new content."""
        self._working_digest(file, version)
        self.delete_file(file, version)
        return self.add_file(file, digest, version)

    def delete_file(self, file: str, version: int) -> State:
        """Remove one logical path; drops its digest once no path remains."""
        digest = self._working_digest(file, version)
        state = self._stage_version(version)
        paths = state[digest]
        paths.remove(file)
        if not paths:
            del state[digest]
        return copy.deepcopy(state)

    def copy_file(self, source: str, destination: str, version: int) -> State:
        """Point ``destination`` at the content of ``source``.

        An existing ``destination`` is overwritten.  The manifest is not
        touched: no new bytes are stored.
        """
        digest = self._working_digest(source, version)
        state = self._stage_version(version)
        if destination in invert_and_expand(state):
            self.delete_file(destination, version)
        paths = state.setdefault(digest, [])
        if destination not in paths:
            paths.append(destination)
        return copy.deepcopy(state)

    def move_file(self, source: str, destination: str, version: int) -> State:
        """Rename ``source`` to ``destination`` (a copy followed by a delete)."""
        self.copy_file(source, destination, version)
        return self.delete_file(source, version)
