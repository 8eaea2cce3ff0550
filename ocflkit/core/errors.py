"""Exception taxonomy for ocflkit.

Client errors (bad arguments) and fatal structural problems raise.  Rule
violations found while validating are recorded as findings instead.  Every
exception carries the code it is recorded under when a validator catches it.
"""

from __future__ import annotations

from ocflkit.models.findings import Code


class OcflError(RuntimeError):
    """Base class for all ocflkit errors."""

    code: Code = Code.E111


class RequestedKeyNotFound(OcflError):
    """Raised when a requested key (version, digest) is not in the object."""


class VersionNotFound(RequestedKeyNotFound):
    """Raised when a requested version does not exist in the object."""


class RequestedFileNotFound(OcflError):
    """Raised when a logical file is not in the state of a version."""


class RequestedDirectoryNotFound(OcflError):
    """Raised when a directory the caller named does not exist."""


class CannotEditPreviousVersion(OcflError):
    """Raised when a mutation targets a version that is already closed."""


class NonCompliantValue(OcflError):
    """Raised when a value does not comply with OCFL (e.g. version <= 0)."""


class FileDigestMismatch(OcflError):
    """Raised when adding a path that already exists under another digest."""


class FileAlreadyExists(OcflError):
    """Raised when adding a path that the version already holds."""


class UnsupportedDigestAlgorithm(OcflError):
    """Raised when asked to digest with an unknown algorithm."""

    code = Code.E223


class UnableToLoadInventoryFile(OcflError):
    """Raised when inventory text is not valid JSON or has the wrong shape."""

    code = Code.E211


class RequiredKeyNotFound(OcflError):
    """Raised when an inventory lacks a required key."""

    code = Code.E216


class RequiredKeyEmpty(OcflError):
    """Raised when a required inventory key holds an empty value."""

    code = Code.E217


class ValidationError(OcflError):
    """Raised for structural problems that stop inspection of a directory.

    Parameters
    ----------
    details:
        Mapping of code to descriptions, recorded as findings by callers
        that catch this error.
    """

    def __init__(self, details: dict[Code, list[str]]) -> None:
        self.details = details
        summary = "; ".join(
            f"{code.value}: {', '.join(messages)}" for code, messages in details.items()
        )
        super().__init__(summary)

    @property
    def code(self) -> Code:  # type: ignore[override]
        return next(iter(self.details), Code.E111)
