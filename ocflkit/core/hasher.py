"""Digest helpers for content files and inventory text.

Files are read in fixed-size chunks so that large payloads do not have to
fit in memory.  All digests are lowercase hex.
"""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Iterable
from pathlib import Path

from ocflkit.core.errors import UnsupportedDigestAlgorithm

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024

# Algorithms permitted for content and fixity digests.
SUPPORTED_ALGORITHMS: frozenset[str] = frozenset(
    {"md5", "sha1", "sha256", "sha512", "blake2b-512"}
)


def _new_hash(algorithm: str) -> "hashlib._Hash":
    name = algorithm.lower()
    if name not in SUPPORTED_ALGORITHMS:
        raise UnsupportedDigestAlgorithm(f"Unknown digest algorithm {algorithm!r}")
    if name == "blake2b-512":
        return hashlib.blake2b(digest_size=64)
    return hashlib.new(name)


def bytes_digest(data: bytes, algorithm: str) -> str:
    """Return the hex digest of raw bytes."""
    h = _new_hash(algorithm)
    h.update(data)
    return h.hexdigest()


def file_digest(path: Path | str, algorithm: str) -> str:
    """Digest one file with ``algorithm``, reading it in chunks."""
    h = _new_hash(algorithm)
    with open(path, "rb") as stream:
        for chunk in iter(lambda: stream.read(CHUNK_SIZE), b""):
            h.update(chunk)
    digest = h.hexdigest()
    logger.debug("Digested %s with %s: %s", path, algorithm, digest)
    return digest


def create_digests(files: Iterable[str], root: Path | str, algorithm: str) -> dict[str, str]:
    """Digest each object-relative path in ``files``.

    Returns a mapping of the relative path to its digest.
    """
    base = Path(root)
    return {rel: file_digest(base / rel, algorithm) for rel in files}
