"""Finding models: severity levels, the OCFL code namespace, and flat findings.

Codes are stable identifiers shared with other OCFL tooling. Descriptions
attached to individual findings are free text and may change; callers that
match on results should match on the code.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class Severity(str, Enum):
    """The four result buckets of an ``OcflResults`` collector."""

    OK = "ok"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class Code(str, Enum):
    """OCFL validation codes.

    ``E`` codes are errors, ``W`` warnings, ``I`` informational and ``O``
    confirmations.  Member names equal their values so that a code reads the
    same in Python and in serialized output.
    """

    E008 = "E008"
    E011 = "E011"
    E013 = "E013"
    E014 = "E014"
    E015 = "E015"
    E016 = "E016"
    E050 = "E050"
    E051 = "E051"
    E060 = "E060"
    E100 = "E100"
    E101 = "E101"
    E102 = "E102"
    E103 = "E103"
    E104 = "E104"
    E105 = "E105"
    E106 = "E106"
    E107 = "E107"
    E111 = "E111"
    E201 = "E201"
    E202 = "E202"
    E203 = "E203"
    E211 = "E211"
    E212 = "E212"
    E214 = "E214"
    E215 = "E215"
    E216 = "E216"
    E217 = "E217"
    E222 = "E222"
    E223 = "E223"
    E230 = "E230"
    E231 = "E231"
    E250 = "E250"
    E251 = "E251"
    E252 = "E252"
    W101 = "W101"
    W102 = "W102"
    W111 = "W111"
    W201 = "W201"
    W220 = "W220"
    I101 = "I101"
    I111 = "I111"
    I200 = "I200"
    I220 = "I220"
    O111 = "O111"
    O200 = "O200"

    @property
    def severity(self) -> Severity:
        """The severity implied by the code prefix."""
        return _PREFIX_SEVERITY[self.value[0]]


_PREFIX_SEVERITY: dict[str, Severity] = {
    "E": Severity.ERROR,
    "W": Severity.WARN,
    "I": Severity.INFO,
    "O": Severity.OK,
}


# Rule registry. One line per code; several structural rules share the
# general-purpose E111/W111/O111 codes.
CODE_DESCRIPTIONS: dict[Code, str] = {
    Code.E008: "Object root contains no version directories.",
    Code.E011: "Version directory contains files other than an inventory and its sidecar.",
    Code.E013: "Version directories do not form a contiguous sequence.",
    Code.E014: "Number of versions does not match the highest version.",
    Code.E015: "Expected version sequence starting at 1 not found.",
    Code.E016: "Version block is missing a required key.",
    Code.E050: "Manifest contains digests not referenced by any version state.",
    Code.E051: "Version state references a digest missing from the manifest.",
    Code.E060: "Inventory digest does not match its sidecar file.",
    Code.E100: "Object root is empty or contains noncompliant directories.",
    Code.E101: "Object root contains noncompliant files.",
    Code.E102: "Object root is missing a required inventory file or sidecar.",
    Code.E103: "Object root is missing the NamAsTe declaration file.",
    Code.E104: "Object root contains multiple NamAsTe declaration files.",
    Code.E105: "NamAsTe declaration file cannot be read.",
    Code.E106: "NamAsTe declaration file content does not match its name.",
    Code.E107: "NamAsTe declaration file is for an unexpected OCFL version.",
    Code.E111: "General object structure or content error.",
    Code.E201: "Object id cannot be zero length.",
    Code.E202: "Object id cannot be null.",
    Code.E203: "Object id is longer than 128 characters.",
    Code.E211: "Inventory is not valid JSON.",
    Code.E212: "Inventory head cannot be null.",
    Code.E214: "Inventory head does not match the highest version.",
    Code.E215: "Expected inventory file not found.",
    Code.E216: "Required inventory key not found.",
    Code.E217: "Required inventory key cannot be empty.",
    Code.E222: "Inventory digestAlgorithm cannot be null.",
    Code.E223: "Inventory digestAlgorithm is not valid for OCFL use.",
    Code.E230: "Inventory type not found.",
    Code.E231: "Inventory type does not match the expected value.",
    Code.E250: "Inventory manifest block not found.",
    Code.E251: "Inventory manifest block cannot be empty.",
    Code.E252: "Fixity block contains an unsupported or empty algorithm block.",
    Code.W101: "Version directory contains directories other than the content directory.",
    Code.W102: "Version content directory should not be empty.",
    Code.W111: "General object structure warning.",
    Code.W201: "Object id does not appear to be a URI.",
    Code.W220: "Digest algorithm SHOULD be sha512.",
    Code.I101: "Version directory does not contain a content directory.",
    Code.I111: "General informational message.",
    Code.I200: "Inventory check detail.",
    Code.I220: "Digest algorithm is supported.",
    Code.O111: "Structural check passed.",
    Code.O200: "Inventory or checksum check passed.",
}


class Finding(BaseModel):
    """One recorded result, flattened out of the nested collector structure."""

    model_config = ConfigDict(frozen=True)

    severity: Severity
    code: Code
    context: str
    description: str
