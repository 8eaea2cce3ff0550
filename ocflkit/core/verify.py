"""Inventory semantic checks.

``OcflVerify`` judges a parsed inventory against the OCFL inventory rules
without touching the disk.  Every check records into the verifier's
``OcflResults``; none of them raise for a rule violation.
"""

from __future__ import annotations

import logging
import re

from ocflkit.config import OcflConfig
from ocflkit.core.files import VERSION_DIR
from ocflkit.core.ocfl_object import REQUIRED_VERSION_KEYS, VersionedObject
from ocflkit.core.results import OcflResults
from ocflkit.models.findings import Code

logger = logging.getLogger(__name__)

MAX_ID_LENGTH = 128
_URI_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:")


class OcflVerify:
    """Runs the inventory checks against one object.

    Parameters
    ----------
    ocfl_object:
        The object to check.  Only the ``VersionedObject`` attributes are
        read; no method that could raise is called.
    config:
        Supplies the expected inventory type and the site's fixity
        algorithms.
    """

    def __init__(self, ocfl_object: VersionedObject, config: OcflConfig | None = None) -> None:
        self._object = ocfl_object
        self._config = config or OcflConfig()
        self._results = OcflResults()

    @property
    def results(self) -> OcflResults:
        return self._results

    def check_all(self) -> OcflResults:
        self.check_id()
        self.check_type()
        self.check_head()
        self.check_fixity()
        self.check_manifest()
        self.check_versions()
        self.check_version_blocks()
        self.check_digest_algorithm()
        logger.debug("Inventory checks for %s: %r", self._object.id, self._results)
        return self._results

    def _version_numbers(self) -> list[int]:
        numbers = []
        for key in self._object.versions:
            match = VERSION_DIR.match(key)
            if match:
                numbers.append(int(match.group(1)))
        return sorted(numbers)

    # ------------------------------------------------------------------
    # Header
    # ------------------------------------------------------------------

    def check_id(self) -> OcflResults:
        object_id = self._object.id
        if object_id is None:
            self._results.error(Code.E202, "check_id", "OCFL 3.5.1 Object ID cannot be nil")
        elif len(object_id) == 0:
            self._results.error(Code.E201, "check_id", "OCFL 3.5.1 Object ID cannot be 0 length")
        elif len(object_id) > MAX_ID_LENGTH:
            self._results.error(
                Code.E203, "check_id",
                f"OCFL 3.5.1 Object ID is {len(object_id)} characters, longer than {MAX_ID_LENGTH}",
            )
        else:
            if not _URI_SCHEME.match(object_id):
                self._results.warn(
                    Code.W201, "check_id", f"OCFL 3.5.1 Object ID {object_id} SHOULD be a URI."
                )
            self._results.ok(Code.O200, "check_id", "OCFL 3.5.1 Inventory ID is OK.")
        return self._results

    def check_type(self) -> OcflResults:
        if self._object.type is None:
            self._results.error(Code.E230, "check_type", "OCFL 3.5.1 Required OCFL key type not found.")
        elif self._object.type == self._config.content_type:
            self._results.ok(Code.O200, "check_type", "OCFL 3.5.1 Inventory Type is OK.")
        else:
            self._results.error(
                Code.E231, "check_type",
                "OCFL 3.5.1 Required OCFL key type does not match expected value.",
            )
        return self._results

    def check_head(self) -> OcflResults:
        head = self._object.head
        if head is None:
            self._results.error(Code.E212, "check_head", "OCFL 3.5.1 @head cannot be nil")
            return self._results

        target = max(self._version_numbers(), default=0)
        match = VERSION_DIR.match(head)
        if match and int(match.group(1)) == target:
            self._results.ok(Code.O200, "check_head", "OCFL 3.5.1 Inventory Head is OK.")
            self._results.info(
                Code.I200, "check_head",
                f"OCFL 3.5.1 Inventory Head version {target} matches highest version in versions.",
            )
        else:
            self._results.error(
                Code.E214, "check_head",
                f"OCFL 3.5.1 Inventory Head {head} does not match expected version {target}",
            )
        return self._results

    def check_digest_algorithm(self) -> OcflResults:
        algorithm = self._object.digest_algorithm
        if algorithm is None:
            self._results.error(Code.E222, "check_digestAlgorithm", "Algorithm cannot be nil")
            return self._results

        algorithm = algorithm.lower()
        if algorithm in ("sha256", "sha512"):
            self._results.ok(Code.O200, "check_digestAlgorithm", "OCFL 3.5.1 Inventory Algorithm is OK.")
            self._results.info(
                Code.I220, "check_digestAlgorithm",
                f"OCFL 3.5.1 {algorithm} is a supported digest algorithm.",
            )
            if algorithm == "sha256":
                self._results.warn(
                    Code.W220, "check_digestAlgorithm", f"OCFL 3.5.1 {algorithm} SHOULD be sha512."
                )
        else:
            self._results.error(
                Code.E223, "check_digestAlgorithm",
                f"OCFL 3.5.1 Algorithm {self._object.digest_algorithm} is not valid for OCFL use.",
            )
        return self._results

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    def check_manifest(self) -> OcflResults:
        """Manifest syntax plus the cross-reference with every version state."""
        manifest = self._object.manifest
        if manifest is None:
            self._results.error(Code.E250, "check_manifest", "OCFL 3.5.2 there MUST be a manifest block.")
            return self._results
        if not manifest:
            self._results.error(Code.E251, "check_manifest", "OCFL 3.5.2 manifest block cannot be empty.")
            return self._results

        referenced: list[str] = []
        for block in self._object.versions.values():
            for digest in block.get("state") or {}:
                if digest not in referenced:
                    referenced.append(digest)

        errors = False
        for digest in referenced:
            if digest not in manifest:
                self._results.error(
                    Code.E051, "check_manifest",
                    f"OCFL 3.5.3.1 Digest {digest} not found in manifest!",
                )
                errors = True

        unreferenced = [digest for digest in manifest if digest not in referenced]
        if unreferenced:
            self._results.error(
                Code.E050, "check_manifest",
                f"OCFL 3.5.3.1 {len(unreferenced)} manifest digests are not used by any version: "
                f"{', '.join(unreferenced)}",
            )
            errors = True

        if not errors:
            self._results.ok(Code.O200, "check_manifest", "OCFL 3.5.2 Inventory Manifest syntax is OK.")
        return self._results

    def check_versions(self) -> OcflResults:
        """Version keys run 1..N with no gaps and each block has its keys."""
        errors = False
        for key in self._object.versions:
            if not VERSION_DIR.match(key):
                self._results.error(
                    Code.E015, "check_versions", f"OCFL 3.5.3 {key} is not a valid version name."
                )
                errors = True

        numbers = self._version_numbers()
        count = len(numbers)
        highest = max(numbers, default=0)
        if count != highest:
            self._results.error(
                Code.E014, "check_versions",
                f"OCFL 3.5.3 Found {count} versions, but highest version is {highest}",
            )
            errors = True
        else:
            self._results.info(
                Code.I200, "check_versions",
                f"OCFL 3.5.3 Found {count} versions, highest version is {highest}",
            )

        for expected, found in enumerate(numbers, start=1):
            if expected != found:
                self._results.error(
                    Code.E015, "check_versions",
                    f"OCFL 3.5.3 Expected version sequence not found. "
                    f"Expected version {expected}, found version {found}.",
                )
                errors = True
                break

        for name, block in self._object.versions.items():
            for key in REQUIRED_VERSION_KEYS:
                if key not in block:
                    self._results.error(
                        Code.E016, "check_versions",
                        f"OCFL 3.5.3.1 version {name} is missing {key} block.",
                    )
                    errors = True

        if not errors:
            self._results.ok(Code.O200, "check_versions", "OCFL 3.5.3.1 version syntax is OK.")
        return self._results

    def check_version_blocks(self) -> OcflResults:
        """Content of each version's created and user fields."""
        for name, block in self._object.versions.items():
            if "created" in block and not block["created"]:
                self._results.error(
                    Code.E111, "check_version", f"OCFL 3.5.3.1 version {name} created value cannot be empty."
                )
            user = block.get("user")
            if not isinstance(user, dict):
                continue
            if not user.get("name"):
                self._results.error(
                    Code.E111, "check_version", f"OCFL 3.5.3.1 version {name} user name cannot be empty."
                )
            if not user.get("address"):
                self._results.warn(
                    Code.W111, "check_version", f"OCFL 3.5.3.1 version {name} user address SHOULD be set."
                )
        return self._results

    def check_fixity(self) -> OcflResults:
        fixity = self._object.fixity
        if not fixity:
            return self._results

        self._results.info(Code.I111, "check_fixity", "Fixity block is present.")
        errors = False
        for algorithm, block in fixity.items():
            if algorithm not in self._config.fixity_algorithms:
                self._results.error(
                    Code.E252, "check_fixity", f"Fixity block contains unsupported algorithm {algorithm}"
                )
                errors = True
            if not block:
                self._results.error(
                    Code.E252, "check_fixity", f"Fixity block for {algorithm} cannot be empty."
                )
                errors = True

        if not errors:
            self._results.ok(
                Code.O111, "check_fixity", "Fixity block is present and contains valid algorithms."
            )
        return self._results
