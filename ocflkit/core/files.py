"""Directory inspection and path algebra for object roots.

Paths handed out by this module are relative to the object root and use
forward slashes (``v0001/content/a.txt``), the same form the manifest uses.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from pathlib import Path

from ocflkit.core.errors import (
    NonCompliantValue,
    RequestedDirectoryNotFound,
    ValidationError,
)
from ocflkit.models.findings import Code

logger = logging.getLogger(__name__)

VERSION_DIR = re.compile(r"^v(\d+)$")
INVENTORY_FILE = "inventory.json"


def version_string_to_int(version_name: str) -> int:
    """Convert ``v0003`` (or ``v3``) to ``3``."""
    match = VERSION_DIR.match(version_name)
    if not match:
        raise NonCompliantValue(f"{version_name!r} is not a valid version name")
    return int(match.group(1))


def detect_version_format(version_names: Iterable[str]) -> str:
    """Deduce the version naming format from the name of version 1.

    ``v1`` yields ``v%d``; ``v0001`` yields ``v%04d``.  Raises
    ``ValidationError`` (E008) when no names are given and (E015) when the
    lowest version does not decode to 1.
    """
    candidates = [name for name in version_names if VERSION_DIR.match(name)]
    if not candidates:
        raise ValidationError({Code.E008: ["No version directories or keys found."]})

    first = min(candidates, key=version_string_to_int)
    if version_string_to_int(first) != 1:
        raise ValidationError(
            {Code.E015: [f"Expected version 1 not found. Found {first} instead."]}
        )
    return format_for_name(first)


def format_for_name(version_name: str) -> str:
    """The printf-style format that renders ``version_name``'s padding."""
    digits = version_name[1:]
    if len(digits) == 1:
        return "v%d"
    return f"v%0{len(digits)}d"


def _require_directory(directory: Path) -> None:
    if not directory.is_dir():
        raise RequestedDirectoryNotFound(f"{directory} does not exist!")


def get_version_format(object_root: Path | str) -> str:
    """Deduce the version format by inspecting version directories on disk."""
    root = Path(object_root)
    _require_directory(root)
    names = [p.name for p in root.iterdir() if p.is_dir()]
    return detect_version_format(names)


def get_version_directories(object_root: Path | str) -> list[str]:
    """Return version directory names in ascending version order.

    Raises ``ValidationError`` (E008) when the root has none.
    """
    root = Path(object_root)
    _require_directory(root)
    version_dirs = [
        p.name for p in root.iterdir() if p.is_dir() and VERSION_DIR.match(p.name)
    ]
    if not version_dirs:
        raise ValidationError(
            {Code.E008: [f"{root} must contain at least one identifiable version directory."]}
        )
    return sorted(version_dirs, key=version_string_to_int)


def get_dir_files(directory: Path | str) -> list[str]:
    """All regular files beneath ``directory``, relative to it, sorted.

    A missing directory has no files.
    """
    base = Path(directory)
    if not base.is_dir():
        return []
    return sorted(p.relative_to(base).as_posix() for p in base.rglob("*") if p.is_file())


def get_version_dir_files(
    object_root: Path | str, version_name: str, content_directory: str
) -> list[str]:
    """Object-relative paths of every file in one version's content directory."""
    prefix = f"{version_name}/{content_directory}"
    files = get_dir_files(Path(object_root) / version_name / content_directory)
    return [f"{prefix}/{f}" for f in files]


def get_versions_dir_files(
    object_root: Path | str,
    version_format: str,
    first: int,
    last: int,
    content_directory: str,
) -> list[str]:
    """Files on disk in the content directories of versions ``first..last``."""
    low, high = sorted((first, last))
    all_files: list[str] = []
    for version in range(low, high + 1):
        all_files.extend(
            get_version_dir_files(object_root, version_format % version, content_directory)
        )
    logger.debug(
        "Found %d content files in versions %d..%d of %s",
        len(all_files), low, high, object_root,
    )
    return all_files


def invert_and_expand(digest_map: Mapping[str, Iterable[str]]) -> dict[str, str]:
    """Flip ``digest -> [paths]`` into ``path -> digest``."""
    return {path: digest for digest, paths in digest_map.items() for path in paths}


def filter_by_prefix(path_map: Mapping[str, str], prefix: str) -> dict[str, str]:
    """Keep entries whose path lies under the directory ``prefix``."""
    prefix = prefix.rstrip("/") + "/"
    return {path: value for path, value in path_map.items() if path.startswith(prefix)}


def get_latest_inventory(object_root: Path | str) -> Path:
    """Locate the most recent inventory file of an object.

    Prefers the highest version directory, then the object root, then any
    lower version directory.  Raises ``ValidationError`` (E215) when none
    exists.
    """
    root = Path(object_root)
    versions = list(reversed(get_version_directories(root)))

    candidates = [root / versions[0] / INVENTORY_FILE, root / INVENTORY_FILE]
    candidates.extend(root / v / INVENTORY_FILE for v in versions[1:])
    for candidate in candidates:
        if candidate.is_file():
            return candidate

    raise ValidationError(
        {Code.E215: [f"Expected inventory file not found in {root} or discovered version directories."]}
    )
