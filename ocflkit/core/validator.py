"""Object root validator.

Three phases, each callable on its own:

- ``verify_structure``: the object root and version directories hold only
  what OCFL allows.
- ``verify_checksums``: every content file on disk is in the manifest with
  the digest computed from its bytes, and vice versa.
- ``verify_inventory``: the root inventory obeys the inventory rules
  (delegated to ``OcflVerify``).

``validate_object_root`` runs all of them.  A phase that raises is recorded
as a finding and the next phase still runs.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from ocflkit.config import OcflConfig
from ocflkit.core.errors import (
    OcflError,
    RequestedDirectoryNotFound,
    ValidationError,
)
from ocflkit.core.files import (
    INVENTORY_FILE,
    VERSION_DIR,
    filter_by_prefix,
    get_version_dir_files,
    get_version_format,
    get_versions_dir_files,
    invert_and_expand,
    version_string_to_int,
)
from ocflkit.core.hasher import create_digests, file_digest
from ocflkit.core.inventory import OcflInventory
from ocflkit.core.results import OcflResults
from ocflkit.core.verify import OcflVerify
from ocflkit.models.findings import Code

logger = logging.getLogger(__name__)

NAMASTE_PREFIX = "0=ocfl_object_"
OPTIONAL_ROOT_DIRS = ("logs", "extensions")


def compare_checksums(
    disk_checksums: dict[str, str],
    inventory_checksums: dict[str, str],
    results: OcflResults,
    context: str = "verify_checksums",
) -> OcflResults:
    """Compare ``path -> digest`` maps computed from disk and read from an inventory.

    Each path gets at most one finding.  A fully clean comparison records a
    single ok finding instead of one per file.
    """
    disk = {path: digest.lower() for path, digest in disk_checksums.items()}
    inventory = {path: digest.lower() for path, digest in inventory_checksums.items()}

    if disk == inventory:
        results.ok(Code.O200, context, "All digests successfully verified.")
        return results

    for path in sorted(disk.keys() - inventory.keys()):
        results.error(Code.E111, context, f"{path} found on disk but missing from inventory.json.")
    for path in sorted(inventory.keys() - disk.keys()):
        results.error(Code.E111, context, f"{path} in inventory but not found on disk.")
    for path in sorted(disk.keys() & inventory.keys()):
        if disk[path] != inventory[path]:
            results.error(
                Code.E111, context,
                f"{path} digest in inventory does not match digest computed from disk",
            )
        else:
            results.ok(Code.O200, context, f"{path} digest verified.")
    return results


class OcflValidator:
    """Validates one OCFL object root on the local filesystem.

    Parameters
    ----------
    object_root:
        Directory holding the object.  Raises ``RequestedDirectoryNotFound``
        when it is not a directory.
    config:
        Fallback version format, content directory and digest algorithm,
        plus the expected OCFL version and inventory type.
    """

    def __init__(self, object_root: Path | str, config: OcflConfig | None = None) -> None:
        self.object_root = Path(object_root)
        if not self.object_root.is_dir():
            raise RequestedDirectoryNotFound(f"{self.object_root} is not a directory!")
        self.config = config or OcflConfig()
        self.version_format: str | None = None
        self.inventory: OcflInventory | None = None
        self.verify: OcflVerify | None = None
        self._results = OcflResults()

    @property
    def results(self) -> OcflResults:
        """Findings of every phase run so far, inventory checks included."""
        merged = OcflResults().add_results(self._results)
        if self.verify is not None:
            merged.add_results(self.verify.results)
        return merged

    def _inventory_path(self, inventory_file: Path | str | None) -> Path:
        if inventory_file is None:
            return self.object_root / INVENTORY_FILE
        return Path(inventory_file)

    def _load(self, path: Path) -> OcflInventory:
        self.inventory = OcflInventory.from_file(path, config=self.config)
        return self.inventory

    def _record_exception(self, context: str, exc: OcflError) -> None:
        if isinstance(exc, ValidationError):
            for code, descriptions in exc.details.items():
                for description in descriptions:
                    self._results.error(code, context, description)
        else:
            self._results.error(exc.code, context, str(exc))

    # ------------------------------------------------------------------
    # Orchestration
    # ------------------------------------------------------------------

    def validate_object_root(self, fixity_algorithm: str | None = None) -> OcflResults:
        """Run structure, inventory, sidecar and checksum (or fixity) checks."""
        phases: list[tuple[str, Callable[[], OcflResults]]] = [
            ("verify_structure", self.verify_structure),
            ("verify_inventory", self.verify_inventory),
            ("verify_sidecar", self.verify_sidecar),
        ]
        if fixity_algorithm is None:
            phases.append(("verify_checksums", self.verify_checksums))
        else:
            phases.append(
                (f"verify_fixity {fixity_algorithm}", lambda: self.verify_fixity(fixity_algorithm))
            )

        for name, phase in phases:
            logger.info("Running %s on %s", name, self.object_root)
            try:
                phase()
            except OcflError as exc:
                logger.warning("%s on %s failed: %s", name, self.object_root, exc)
                self._record_exception(name, exc)

        results = self.results
        logger.info("Validated %s: %r", self.object_root, results)
        return results

    # ------------------------------------------------------------------
    # Phase A: structure
    # ------------------------------------------------------------------

    def verify_structure(self) -> OcflResults:
        """Check the object root and version directory layout."""
        error = False
        results = self._results

        try:
            self.version_format = get_version_format(self.object_root)
            results.ok(Code.O111, "version_format", "OCFL conforming first version directory found.")
        except ValidationError as exc:
            self._record_exception("version_format", exc)
            results.error(
                Code.E111, "version_format",
                "OCFL unable to determine version format by inspection of directories.",
            )
            self.version_format = self.config.version_format
            results.warn(
                Code.W111, "version_format",
                f"Attempting to process using default value: {self.config.version_format}",
            )
            logger.warning(
                "Falling back to version format %s for %s", self.version_format, self.object_root
            )
            error = True

        entries = sorted(self.object_root.iterdir())
        root_dirs = [p.name for p in entries if p.is_dir()]
        root_files = [p.name for p in entries if p.is_file()]
        if not root_dirs and not root_files:
            results.error(Code.E100, "verify_structure", f"Object root directory {self.object_root} is empty.")
            return results

        digest_algorithm = self.config.digest_algorithm
        content_directory = self.config.content_directory
        expect_head: str | None = None
        root_inventory = self.object_root / INVENTORY_FILE
        if root_inventory.is_file():
            try:
                inventory = OcflInventory.from_file(root_inventory, config=self.config)
            except OcflError as exc:
                self._record_exception("verify_structure", exc)
                error = True
            else:
                digest_algorithm = inventory.digest_algorithm
                content_directory = inventory.content_directory
                expect_head = inventory.head

        for required in (INVENTORY_FILE, f"{INVENTORY_FILE}.{digest_algorithm}"):
            if required in root_files:
                root_files.remove(required)
            else:
                results.error(
                    Code.E102, "verify_structure", f"Object root does not include required file {required}"
                )
                error = True

        error = self._check_namaste(root_files) or error

        if root_files:
            results.error(
                Code.E101, "verify_structure", f"Object root contains noncompliant files: {root_files}"
            )
            error = True

        for optional in OPTIONAL_ROOT_DIRS:
            if optional in root_dirs:
                results.warn(
                    Code.W111, "verify_structure",
                    f"OCFL 3.1 optional {optional} directory found in object root.",
                )
                root_dirs.remove(optional)

        version_dirs = sorted(
            (name for name in root_dirs if VERSION_DIR.match(name)), key=version_string_to_int
        )
        remaining = [name for name in root_dirs if name not in version_dirs]
        if remaining:
            results.error(
                Code.E100, "verify_structure", f"Object root contains noncompliant directories: {remaining}"
            )
            error = True

        for count in range(1, len(version_dirs) + 1):
            expected = self.version_format % count
            if expected not in version_dirs:
                results.error(
                    Code.E013, "verify_structure",
                    f"Expected version directory {expected} missing from directory list {version_dirs}",
                )
                error = True

        if expect_head is not None and version_dirs and version_dirs[-1] != expect_head:
            results.error(
                Code.E111, "verify_structure",
                f"Inventory file expects a highest version of {expect_head} "
                f"but directory list contains {version_dirs}",
            )
            error = True

        for version_dir in version_dirs:
            error = self._check_version_dir(version_dir, digest_algorithm, content_directory) or error

        if not error:
            results.ok(Code.O111, "verify_structure", "OCFL 3.1 Object root passed file structure test.")
        return results

    def _check_namaste(self, root_files: list[str]) -> bool:
        """Check the ``0=ocfl_object_*`` declaration; consumes it from ``root_files``."""
        results = self._results
        error = False
        namaste = [name for name in root_files if name.startswith(NAMASTE_PREFIX)]

        if not namaste:
            results.error(Code.E103, "verify_structure", "Object root does not include required NamAsTe file.")
            return True
        if len(namaste) > 1:
            results.error(
                Code.E104, "verify_structure", f"Object root contains multiple NamAsTe files: {namaste}"
            )
            error = True

        expected_name = f"{NAMASTE_PREFIX}{self.config.ocfl_version}"
        for name in namaste:
            root_files.remove(name)
            if name != expected_name:
                results.error(
                    Code.E107, "verify_structure",
                    f"Required NamAsTe file in object root is for unexpected OCFL version: {name}",
                )
                error = True
            try:
                content = (self.object_root / name).read_text(encoding="utf-8").strip()
            except (OSError, UnicodeDecodeError) as exc:
                results.error(
                    Code.E105, "verify_structure", f"Unable to read NamAsTe file {name}: {exc}"
                )
                error = True
                continue
            # An empty declaration file is accepted; content, when present, must match.
            if content and content != name[2:]:
                results.error(
                    Code.E106, "verify_structure",
                    "Required NamAsTe file in object root directory does not contain expected string.",
                )
                error = True
        return error

    def _check_version_dir(self, version_dir: str, digest_algorithm: str, content_directory: str) -> bool:
        results = self._results
        error = False
        base = self.object_root / version_dir
        entries = sorted(base.iterdir())
        files = [p.name for p in entries if p.is_file()]
        dirs = [p.name for p in entries if p.is_dir()]

        sidecar_algorithm = digest_algorithm
        version_inventory = base / INVENTORY_FILE
        if version_inventory.is_file():
            try:
                inventory = OcflInventory.from_file(version_inventory, config=self.config)
            except OcflError as exc:
                logger.warning("Unreadable inventory in %s: %s", base, exc)
                self._record_exception("verify_structure", exc)
                error = True
            else:
                sidecar_algorithm = inventory.digest_algorithm
                if inventory.content_directory != content_directory:
                    results.error(
                        Code.E111, "verify_structure",
                        f"contentDirectory value {inventory.content_directory} in version {version_dir} "
                        f"does not match expected contentDirectory value {content_directory}.",
                    )
                    error = True

        for optional in (INVENTORY_FILE, f"{INVENTORY_FILE}.{sidecar_algorithm}"):
            if optional in files:
                files.remove(optional)
            else:
                results.warn(
                    Code.W111, "verify_structure",
                    f"OCFL 3.1 optional {optional} missing from {version_dir} directory",
                )

        if files:
            results.error(
                Code.E011, "verify_structure", f"non-compliant files {files} in {version_dir} directory"
            )
            error = True

        if content_directory in dirs:
            dirs.remove(content_directory)
            if not any((base / content_directory).iterdir()):
                results.warn(
                    Code.W102, "verify_structure",
                    f"OCFL 3.3.1 version {version_dir} contentDirectory should not be empty.",
                )
        else:
            results.info(
                Code.I101, "verify_structure",
                f"OCFL 3.3.1 version {version_dir} does not contain a contentDirectory.",
            )

        if dirs:
            results.warn(
                Code.W101, "verify_structure",
                "OCFL 3.3 version directory should not contain any directories other than the "
                f"designated content sub-directory. Additional directories found: {dirs}",
            )
            error = True
        return error

    # ------------------------------------------------------------------
    # Phase B: checksums
    # ------------------------------------------------------------------

    def verify_checksums(self, inventory_file: Path | str | None = None) -> OcflResults:
        """Digest every content file of every version and compare with the manifest."""
        path = self._inventory_path(inventory_file)
        if not path.is_file():
            self._results.error(Code.E215, "verify_checksums", f"Expected inventory file {path} not found.")
            return self._results

        inventory = self._load(path)
        versions = inventory.version_id_list()
        files_on_disk = get_versions_dir_files(
            self.object_root, inventory.version_format,
            versions[0], versions[-1], inventory.content_directory,
        )
        disk_checksums = create_digests(files_on_disk, self.object_root, inventory.digest_algorithm)
        manifest_checksums = invert_and_expand(inventory.manifest)
        return compare_checksums(disk_checksums, manifest_checksums, self._results)

    def verify_manifest(self, inventory_file: Path | str | None = None) -> OcflResults:
        """Cheap check: manifest paths and content files match, digests unchecked."""
        path = self._inventory_path(inventory_file)
        if not path.is_file():
            self._results.error(Code.E215, "verify_manifest", f"Expected inventory file {path} not found.")
            return self._results

        inventory = self._load(path)
        versions = inventory.version_id_list()
        on_disk = set(get_versions_dir_files(
            self.object_root, inventory.version_format,
            versions[0], versions[-1], inventory.content_directory,
        ))
        in_manifest = set(invert_and_expand(inventory.manifest))

        if on_disk == in_manifest:
            self._results.ok(
                Code.O111, "verify_manifest", "All discovered files on disk are referenced in inventory."
            )
            return self._results
        for missing in sorted(on_disk - in_manifest):
            self._results.error(
                Code.E111, "verify_manifest", f"{missing} found on disk but missing from inventory.json."
            )
        for missing in sorted(in_manifest - on_disk):
            self._results.error(
                Code.E111, "verify_manifest", f"{missing} in inventory but not found on disk."
            )
        return self._results

    def verify_sidecar(self, inventory_file: Path | str | None = None) -> OcflResults:
        """The inventory's digest must match the one in its sidecar file."""
        path = self._inventory_path(inventory_file)
        if not path.is_file():
            self._results.error(Code.E215, "verify_sidecar", f"Expected inventory file {path} not found.")
            return self._results

        algorithm = self._load(path).digest_algorithm
        sidecar = path.with_name(f"{path.name}.{algorithm}")
        if not sidecar.is_file():
            self._results.error(
                Code.E060, "verify_sidecar", f"Sidecar {sidecar.name} not found; cannot check {path.name}."
            )
            return self._results

        tokens = sidecar.read_text(encoding="utf-8").split()
        recorded = tokens[0].lower() if tokens else ""
        computed = file_digest(path, algorithm)
        if recorded != computed:
            self._results.error(
                Code.E060, "verify_sidecar",
                f"{path.name} {algorithm} digest {computed} does not match {recorded} in {sidecar.name}.",
            )
        else:
            self._results.ok(Code.O200, "verify_sidecar", f"{path.name} matches digest in {sidecar.name}.")
        return self._results

    def verify_fixity(self, algorithm: str = "md5", inventory_file: Path | str | None = None) -> OcflResults:
        """Check content files against the inventory's fixity block for ``algorithm``."""
        context = f"verify_fixity {algorithm}"
        path = self._inventory_path(inventory_file)
        if not path.is_file():
            self._results.error(Code.E215, context, f"Expected inventory file {path} not found.")
            return self._results

        inventory = self._load(path)
        if not inventory.fixity:
            self._results.error(Code.E111, context, f"No fixity block in {path}!")
            return self._results
        if algorithm not in inventory.fixity:
            self._results.error(Code.E111, context, f"Requested algorithm {algorithm} not found in fixity block.")
            return self._results

        fixity_checksums = invert_and_expand(inventory.fixity[algorithm])
        not_covered = [p for p in invert_and_expand(inventory.manifest) if p not in fixity_checksums]
        if not_covered:
            self._results.warn(
                Code.W111, context, f"{len(not_covered)} files in manifest are missing from fixity block."
            )

        present = []
        for file in fixity_checksums:
            if (self.object_root / file).is_file():
                present.append(file)
            else:
                self._results.error(Code.E111, context, f"File {file} in fixity block not found on disk.")

        disk_checksums = create_digests(present, self.object_root, algorithm)
        expected = {file: fixity_checksums[file] for file in present}
        return compare_checksums(disk_checksums, expected, self._results, context)

    def verify_directory(self, version: int) -> OcflResults:
        """Checksum check restricted to one version's content directory."""
        if self.version_format is None:
            self.version_format = get_version_format(self.object_root)
        version_name = self.version_format % version
        version_dir = self.object_root / version_name
        if not version_dir.is_dir():
            raise RequestedDirectoryNotFound(f"Requested version directory {version_dir} doesn't exist!")

        context = f"verify_directory {version_name}"
        path = version_dir / INVENTORY_FILE
        if not path.is_file():
            path = self.object_root / INVENTORY_FILE
        if not path.is_file():
            self._results.error(Code.E215, context, f"Expected inventory file {path} not found.")
            return self._results

        inventory = self._load(path)
        content_directory = inventory.content_directory
        files_on_disk = get_version_dir_files(self.object_root, version_name, content_directory)
        disk_checksums = create_digests(files_on_disk, self.object_root, inventory.digest_algorithm)
        manifest_checksums = filter_by_prefix(
            invert_and_expand(inventory.manifest), f"{version_name}/{content_directory}"
        )
        return compare_checksums(disk_checksums, manifest_checksums, self._results, context)

    def verify_version(self, version: int) -> OcflResults:
        """``verify_directory`` for versions 1 through ``version``."""
        for number in range(1, version + 1):
            self.verify_directory(number)
        return self._results

    # ------------------------------------------------------------------
    # Phase C: inventory
    # ------------------------------------------------------------------

    def verify_inventory(self, inventory_file: Path | str | None = None) -> OcflResults:
        """Run every ``OcflVerify`` check on the inventory."""
        path = self._inventory_path(inventory_file)
        if not path.is_file():
            self._results.error(Code.E215, "verify_inventory", f"Expected inventory file {path} not found.")
            return self._results

        self.verify = OcflVerify(self._load(path), config=self.config)
        return self.verify.check_all()
