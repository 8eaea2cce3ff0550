"""Categorised, de-duplicated validation findings.

Every check in ocflkit reports into an ``OcflResults`` collector instead of
raising.  The collector holds four buckets (ok, info, warn, error), each a
mapping of code -> context -> list of unique descriptions.

Design:
- Codes and severities are enums internally; ``all()`` and friends convert
  them to plain strings for serialization.
- A description is recorded at most once per (severity, code, context).
- Insertion order is preserved within a context's description list.
"""

from __future__ import annotations

import copy
from typing import Union

from ocflkit.models.findings import CODE_DESCRIPTIONS, Code, Finding, Severity

CodeLike = Union[Code, str]
SeverityLike = Union[Severity, str]

_Bucket = dict[Code, dict[str, list[str]]]


class OcflResults:
    """Diagnostics collector shared by the validator, verifier and delta engine."""

    def __init__(self) -> None:
        self._buckets: dict[Severity, _Bucket] = {severity: {} for severity in Severity}

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def record(
        self,
        severity: SeverityLike,
        code: CodeLike,
        context: str,
        description: str,
    ) -> None:
        """Record one finding unless the same description is already present.

        Raises ``ValueError`` for an unknown severity or code.
        """
        bucket = self._buckets[Severity(severity)]
        descriptions = bucket.setdefault(Code(code), {}).setdefault(context, [])
        if description not in descriptions:
            descriptions.append(description)

    def ok(self, code: CodeLike, context: str, description: str) -> None:
        self.record(Severity.OK, code, context, description)

    def info(self, code: CodeLike, context: str, description: str) -> None:
        self.record(Severity.INFO, code, context, description)

    def warn(self, code: CodeLike, context: str, description: str) -> None:
        self.record(Severity.WARN, code, context, description)

    def error(self, code: CodeLike, context: str, description: str) -> None:
        self.record(Severity.ERROR, code, context, description)

    def add_results(self, other: OcflResults) -> OcflResults:
        """Merge every finding of ``other`` into this collector."""
        for finding in other.findings():
            self.record(finding.severity, finding.code, finding.context, finding.description)
        return self

    # ------------------------------------------------------------------
    # Counting
    # ------------------------------------------------------------------

    def count(self, severity: SeverityLike) -> int:
        """Total number of descriptions held in one bucket."""
        bucket = self._buckets[Severity(severity)]
        return sum(len(descs) for contexts in bucket.values() for descs in contexts.values())

    @property
    def error_count(self) -> int:
        return self.count(Severity.ERROR)

    @property
    def warn_count(self) -> int:
        return self.count(Severity.WARN)

    @property
    def info_count(self) -> int:
        return self.count(Severity.INFO)

    @property
    def ok_count(self) -> int:
        return self.count(Severity.OK)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def _export(self, severity: Severity) -> dict[str, dict[str, list[str]]]:
        return {
            code.value: {context: list(descs) for context, descs in contexts.items()}
            for code, contexts in self._buckets[severity].items()
        }

    def all(self) -> dict[str, dict[str, dict[str, list[str]]]]:
        """Return all four buckets as nested plain dicts with string keys."""
        return {severity.value: self._export(severity) for severity in Severity}

    def results(self) -> dict[str, dict[str, dict[str, list[str]]]]:
        """Alias for :meth:`all`."""
        return self.all()

    def get_errors(self) -> dict[str, dict[str, list[str]]]:
        return self._export(Severity.ERROR)

    def get_warnings(self) -> dict[str, dict[str, list[str]]]:
        return self._export(Severity.WARN)

    def get_info(self) -> dict[str, dict[str, list[str]]]:
        return self._export(Severity.INFO)

    def get_ok(self) -> dict[str, dict[str, list[str]]]:
        return self._export(Severity.OK)

    def get_contexts(self) -> dict[str, dict[str, dict[str, list[str]]]]:
        """Regroup findings as context -> severity -> code -> descriptions."""
        grouped: dict[str, dict[str, dict[str, list[str]]]] = {}
        for severity, bucket in self._buckets.items():
            for code, contexts in bucket.items():
                for context, descs in contexts.items():
                    by_severity = grouped.setdefault(context, {})
                    by_severity.setdefault(severity.value, {})[code.value] = list(descs)
        return grouped

    def get_context(self, context: str) -> dict[str, dict[str, list[str]]]:
        """Findings recorded under one context, keyed by severity then code."""
        return copy.deepcopy(self.get_contexts().get(context, {}))

    def findings(self) -> list[Finding]:
        """Flatten every recorded description into a list of ``Finding``."""
        flat: list[Finding] = []
        for severity, bucket in self._buckets.items():
            for code, contexts in bucket.items():
                for context, descs in contexts.items():
                    flat.extend(
                        Finding(severity=severity, code=code, context=context, description=d)
                        for d in descs
                    )
        return flat

    @staticmethod
    def describe_code(code: CodeLike) -> str:
        """Return the rule a code stands for."""
        return CODE_DESCRIPTIONS[Code(code)]

    def __repr__(self) -> str:
        return (
            f"OcflResults(ok={self.ok_count}, info={self.info_count}, "
            f"warn={self.warn_count}, error={self.error_count})"
        )
