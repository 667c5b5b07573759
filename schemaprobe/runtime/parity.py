"""
schemaprobe Payload/Schema Parity

Catches drift between documentation and validation: every field of the
canonical example payload must be declared by the schema, and every declared
property must appear in the example.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Set, Union

from .report import OracleAssertionError
from .schema_names import add_all_prop_names, flatten_schema_names, parse_schema
from .schemas import Schema
from .tree import flatten_json_keys

logger = logging.getLogger(__name__)


@dataclass
class ParityReport:
    missing_in_schema: Set[str] = field(default_factory=set)
    missing_in_payload: Set[str] = field(default_factory=set)

    @property
    def passed(self) -> bool:
        return not self.missing_in_schema and not self.missing_in_payload

    def messages(self):
        msgs = []
        if self.missing_in_schema:
            msgs.append(f"Json payload fields missing in Schema {sorted(self.missing_in_schema)}")
        if self.missing_in_payload:
            msgs.append(f"Json schema fields missing in Payload {sorted(self.missing_in_payload)}")
        return msgs

    def raise_for_mismatches(self):
        if self.passed:
            return
        raise OracleAssertionError("\n".join(self.messages()))


def compare_payload_to_schema(payload: Any, undocumented_attrs: Iterable[str],
                              schema: Union[str, Dict[str, Any], Schema]) -> ParityReport:
    """
    Compare payload field names with schema property names in both directions.

    Undocumented attributes are only excused in the payload-to-schema
    direction; the schema-to-payload direction uses every payload name.
    """
    json_names = flatten_json_keys(payload)
    json_names_doc = json_names - set(undocumented_attrs)
    schema_names = flatten_schema_names(parse_schema(schema), "", add_all_prop_names)

    report = ParityReport(
        missing_in_schema=json_names_doc - schema_names,
        missing_in_payload=schema_names - json_names,
    )
    for msg in report.messages():
        logger.info(msg)
    return report


def check_payload_attributes_in_schema(loader, name: str, undocumented_attrs: Iterable[str],
                                       schema: Union[str, Dict[str, Any], Schema]) -> ParityReport:
    """Load the canonical payload called name and assert parity with schema."""
    payload = loader.load_valid_data(name)
    report = compare_payload_to_schema(payload, undocumented_attrs, schema)
    report.raise_for_mismatches()
    return report
