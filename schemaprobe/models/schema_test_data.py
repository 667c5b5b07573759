"""
Schema Test Data Models

Data types used to author oracle inputs: per-field preconditions and
valid/invalid value matrices.
"""

from typing import Any, Dict, List
from dataclasses import dataclass, field


@dataclass
class Condition:
    """
    Preconditions applied to a payload before the field under test changes.

    absence: keys removed, for requirements that apply when another key is absent.
    existence: keys forced to a value, for requirements that apply when another
        key holds a specific value.
    """
    absence: List[str] = field(default_factory=list)
    existence: Dict[str, Any] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not self.absence and not self.existence


@dataclass
class Invalid:
    """Values that must be rejected with a diagnostic containing msg."""
    msg: str
    values: List[Any]


@dataclass
class SchemaTestData:
    """Full test matrix for one field."""
    key: str
    valid: List[Any] = field(default_factory=list)
    invalid: List[Invalid] = field(default_factory=list)
    condition: Condition = field(default_factory=Condition)
