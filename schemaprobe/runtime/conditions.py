"""
schemaprobe Condition Engine

Prepares a payload variant that satisfies a field's preconditions before the
field itself is mutated.
"""

import logging
from typing import Any, Optional

from ..models.schema_test_data import Condition
from .tree import Operation, mutate

logger = logging.getLogger(__name__)


class ConditionError(Exception):
    """Raised when a condition produces a payload the processor rejects."""
    pass


def apply_condition(payload: Any, condition: Optional[Condition], processor=None) -> Any:
    """
    Apply a Condition to a copy of payload.

    Existence keys are upserted first. The intermediate payload is then
    validated when a processor is given: a rejection at this point means the
    condition itself is wrong, so ConditionError is raised. Absence keys are
    deleted last.
    """
    if condition is None:
        condition = Condition()

    for key, value in condition.existence.items():
        payload = mutate(payload, key, value, Operation.UPSERT)

    if processor is not None:
        try:
            processor.validate(payload)
        except Exception as e:
            if condition.existence:
                what = f"after applying existence keys {sorted(condition.existence)}"
            else:
                what = "before any change (canonical payload)"
            raise ConditionError(f"Payload rejected {what}: {e}") from e

    for key in condition.absence:
        payload = mutate(payload, key, None, Operation.DELETE)

    if not condition.is_empty():
        logger.debug(
            "applied condition existence=%s absence=%s",
            sorted(condition.existence), condition.absence,
        )
    return payload
