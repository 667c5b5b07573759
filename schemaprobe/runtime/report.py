"""
schemaprobe Oracle Reports

Oracles record every expectation that did not hold instead of stopping at
the first one; the report raises once at the end with the full list.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

VALUE_PREVIEW_CHARS = 40


def preview(value: Any) -> str:
    """repr() of value, shortened for long boundary strings."""
    text = repr(value)
    if len(text) <= VALUE_PREVIEW_CHARS:
        return text
    length = f" (len={len(value)})" if isinstance(value, str) else ""
    return f"{text[:VALUE_PREVIEW_CHARS]}...{length}"


class OracleAssertionError(AssertionError):
    """Raised when an oracle observed at least one unexpected validator outcome."""

    def __init__(self, message: str, report: Optional["OracleReport"] = None):
        super().__init__(message)
        self.report = report


@dataclass
class Mismatch:
    key: str
    value: Any
    expected: str  # "valid", or the diagnostic fragment expected in the error
    actual: str    # "valid", or the error text observed

    def describe(self) -> str:
        return f"key <{self.key}> value <{preview(self.value)}>: expected {self.expected}, got {self.actual}"


@dataclass
class OracleReport:
    oracle: str
    checks: int = 0
    mismatches: List[Mismatch] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    policy: Dict[str, Any] = field(default_factory=dict)

    @property
    def passed(self) -> bool:
        return not self.mismatches

    def record(self, mismatch: Optional[Mismatch]):
        self.checks += 1
        if mismatch is not None:
            self.mismatches.append(mismatch)

    def raise_for_mismatches(self):
        if self.passed:
            return
        lines = [f"{self.oracle}: {len(self.mismatches)} of {self.checks} checks failed"]
        lines.extend(f"  - {m.describe()}" for m in self.mismatches)
        raise OracleAssertionError("\n".join(lines), self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "oracle": self.oracle,
            "checks": self.checks,
            "passed": self.passed,
            "mismatches": [m.describe() for m in self.mismatches],
            "skipped": list(self.skipped),
            "policy": dict(self.policy),
        }
