"""
schemaprobe Oracles

Reusable conformance procedures for a payload validator/decoder:

- attrs_presence: required and conditionally required keys must not be
  missing or null, everything else may be
- keyword_limitation: fields stored as keywords are length-limited on intake
- data_validation: per-field lists of values that must be rejected (with a
  given diagnostic) or accepted and decodable

Each procedure starts every check from a freshly loaded canonical payload,
applies the field's condition, mutates the field, runs the processor, and
records a Mismatch when the outcome differs from the expectation. After the
last check the report raises OracleAssertionError if anything mismatched.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from ..models.schema_test_data import Condition, SchemaTestData
from ..policy import PolicyLoader, get_policy_loader
from .conditions import apply_condition
from .report import Mismatch, OracleReport
from .schema_names import fetch_flattened_field_names, is_keyword_field
from .tree import Operation, flatten_json_keys, mutate, split_key

logger = logging.getLogger(__name__)

VALID = "valid"


def create_str(n: int, alphabet: str = "a") -> str:
    """Build a string of exactly n characters by repeating alphabet."""
    if not alphabet:
        raise ValueError("alphabet must not be empty")
    repeats = n // len(alphabet) + 1
    return (alphabet * repeats)[:n]


# Fixed boundary values for authoring SchemaTestData. They match the bundled
# harness_policy.yaml; keyword_limitation() always builds its strings from the
# loaded policy, so a custom policy changes what the oracle sends but not these.
ALPHABET_64 = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_-"

STR_1024 = create_str(1024, ALPHABET_64)
STR_1024_SPECIAL = create_str(1024, "⌘ ")
STR_1025 = create_str(1025)


def translate_key(key: str, template_to_schema: Mapping[str, str]) -> str:
    """Rename a storage field to its intake name using the first matching prefix."""
    for src, dst in template_to_schema.items():
        if key.startswith(src):
            return key.replace(src, dst, 1)
    return key


class ProcessorSetup:
    def __init__(self, processor, loader, full_payload_path: str,
                 template_paths: Optional[Sequence[str]] = None,
                 policy: Optional[PolicyLoader] = None):
        self.processor = processor
        self.loader = loader
        # path to a payload that is a full and valid example
        self.full_payload_path = full_payload_path
        # paths to storage template definitions
        self.template_paths: List[str] = list(template_paths or [])
        self.policy = policy or get_policy_loader()

    def attrs_presence(self, required_keys: Iterable[str],
                       cond_required_keys: Optional[Mapping[str, Condition]] = None) -> OracleReport:
        """
        Payloads missing required attributes must fail validation.

        required: the key must be neither missing nor null.
        conditionally required: the payload is prepared according to the
            key's condition, then the key must not be missing.
        Every other key may be null or missing.
        """
        required = set(required_keys) | set(self.policy.required_baseline())
        cond_required_keys = dict(cond_required_keys or {})
        null_msg = self.policy.diagnostic("null_value")

        payload = self.loader.load_data(self.full_payload_path)
        report = self._new_report("attrs_presence")

        for key in sorted(flatten_json_keys(payload)):
            self._change_payload(
                report, key, None, None, Operation.UPSERT,
                expect_valid=key not in required, msg=null_msg,
            )

            _, leaf = split_key(key)
            must_exist = key in required or key in cond_required_keys
            self._change_payload(
                report, key, None, cond_required_keys.get(key), Operation.DELETE,
                expect_valid=not must_exist,
                msg=self.policy.diagnostic("missing_property", key=leaf),
            )

        return self._finish(report)

    def keyword_limitation(self, keyword_exception_keys: Iterable[str],
                           template_to_schema: Optional[Mapping[str, str]] = None) -> OracleReport:
        """
        Fields indexed as keywords in storage must have the same length
        limitation on intake.

        keyword_exception_keys: template fields stored as keywords that need no
            length restriction on intake, e.g. because a pattern restricts
            them further
        template_to_schema: prefix renames for fields that are nested or named
            differently in storage than on intake
        """
        exceptions = set(keyword_exception_keys)
        template_to_schema = dict(template_to_schema or {})

        max_length = self.policy.keyword_max_length()
        too_long = create_str(max_length + 1)
        at_limit = create_str(max_length, self.policy.keyword_alphabet())
        at_limit_wide = create_str(max_length, self.policy.keyword_wide_alphabet())
        length_msg = self.policy.diagnostic("max_length")

        keyword_fields = fetch_flattened_field_names(self.template_paths, is_keyword_field, self.loader)
        report = self._new_report("keyword_limitation")

        for field_name in sorted(keyword_fields):
            if field_name in exceptions:
                report.skipped.append(field_name)
                continue

            key = translate_key(field_name, template_to_schema)
            if key != field_name:
                logger.debug("keyword field %s checked as %s", field_name, key)

            self._change_payload(report, key, too_long, None, Operation.UPSERT,
                                 expect_valid=False, msg=length_msg)
            self._change_payload(report, key, at_limit, None, Operation.UPSERT,
                                 expect_valid=True)
            self._change_payload(report, key, at_limit_wide, None, Operation.UPSERT,
                                 expect_valid=True)

        if report.skipped:
            logger.warning("keyword length checks skipped for %s", report.skipped)
        return self._finish(report)

    def data_validation(self, test_data: Iterable[SchemaTestData]) -> OracleReport:
        """
        Specified values must fail or pass validation accordingly.

        Valid values are listed to prove the setup itself is right and to
        avoid false negatives; they must also decode.
        """
        report = self._new_report("data_validation")

        for d in test_data:
            for invalid in d.invalid:
                for value in invalid.values:
                    self._change_payload(report, d.key, value, d.condition, Operation.UPSERT,
                                         expect_valid=False, msg=invalid.msg)
            for value in d.valid:
                self._change_payload(report, d.key, value, d.condition, Operation.UPSERT,
                                     expect_valid=True)

        return self._finish(report)

    def _new_report(self, oracle: str) -> OracleReport:
        return OracleReport(oracle=oracle, policy=self.policy.to_dict())

    def _finish(self, report: OracleReport) -> OracleReport:
        logger.info(
            "%s: %d checks, %d mismatches, %d skipped",
            report.oracle, report.checks, len(report.mismatches), len(report.skipped),
        )
        report.raise_for_mismatches()
        return report

    def _validate(self, payload: Any) -> Optional[Exception]:
        """Run the processor; the rejection, if any, is the outcome under test."""
        try:
            self.processor.validate(payload)
        except Exception as e:
            return e
        return None

    def _change_payload(self, report: OracleReport, key: str, value: Any,
                        condition: Optional[Condition], operation: Operation,
                        expect_valid: bool, msg: str = ""):
        payload = self.loader.load_data(self.full_payload_path)

        # prepare payload according to conditions
        payload = apply_condition(payload, condition, self.processor)

        # change payload for key to test
        payload = mutate(payload, key, value, operation)

        err = self._validate(payload)
        report.record(self._compare(key, value, err, payload, expect_valid, msg))

    def _compare(self, key: str, value: Any, err: Optional[Exception], payload: Dict[str, Any],
                 expect_valid: bool, msg: str) -> Optional[Mismatch]:
        if expect_valid:
            if err is not None:
                return Mismatch(key=key, value=value, expected=VALID, actual=str(err))
            try:
                self.processor.decode(payload)
            except Exception as e:
                return Mismatch(key=key, value=value, expected="decodable", actual=f"decode error: {e}")
            return None

        if err is None:
            return Mismatch(key=key, value=value, expected=f"error containing {msg!r}", actual=VALID)
        if msg.lower() not in str(err).lower():
            return Mismatch(key=key, value=value, expected=f"error containing {msg!r}", actual=str(err))
        return None
