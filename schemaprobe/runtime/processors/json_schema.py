"""
jsonschema-backed processor.

Validates payloads against a JSON Schema document and reports every error,
including the sub-errors of anyOf/oneOf branches, in one message so that
substring expectations can match any of them.
"""

import copy
import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from jsonschema import FormatChecker, ValidationError
from jsonschema.validators import validator_for

logger = logging.getLogger(__name__)


class PayloadValidationError(Exception):
    """Raised when a payload does not validate against the schema."""

    def __init__(self, message: str, errors: Optional[List[ValidationError]] = None):
        super().__init__(message)
        self.errors = errors or []


def _describe(error: ValidationError) -> List[str]:
    lines = [f"{error.validator} at {error.json_path}: {error.message}"]
    for sub in sorted(error.context or [], key=lambda e: e.json_path):
        lines.extend(_describe(sub))
    return lines


class JSONSchemaProcessor:
    def __init__(self, schema: Dict[str, Any], decoder: Optional[Callable[[Dict[str, Any]], Any]] = None):
        self.schema = schema
        self.decoder = decoder

        validator_cls = validator_for(schema)
        validator_cls.check_schema(schema)
        self._validator = validator_cls(schema, format_checker=FormatChecker())

    @classmethod
    def from_file(cls, path: Union[str, Path], **kwargs) -> "JSONSchemaProcessor":
        with open(path, "r", encoding="utf-8") as f:
            schema = json.load(f)
        return cls(schema, **kwargs)

    def validate(self, payload: Dict[str, Any]) -> None:
        errors = sorted(self._validator.iter_errors(payload), key=lambda e: e.json_path)
        if not errors:
            return

        lines: List[str] = []
        for error in errors:
            lines.extend(_describe(error))
        logger.debug("payload rejected with %d error(s)", len(errors))
        raise PayloadValidationError("; ".join(lines), errors)

    def decode(self, payload: Dict[str, Any]) -> Any:
        if self.decoder is None:
            return copy.deepcopy(payload)
        return self.decoder(payload)
