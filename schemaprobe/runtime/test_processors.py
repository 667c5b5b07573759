"""
schemaprobe Processor and Report Tests

Run with: python3 -m schemaprobe.runtime.test_processors
"""

import sys
from pathlib import Path

import pytest
from jsonschema.exceptions import SchemaError

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from schemaprobe.runtime.processors import (  # noqa: E402
    CallableProcessor,
    JSONSchemaProcessor,
    PayloadValidationError,
    get_processor,
)
from schemaprobe.runtime.report import (  # noqa: E402
    VALUE_PREVIEW_CHARS,
    Mismatch,
    OracleAssertionError,
    OracleReport,
    preview,
)

FIXTURES_DIR = PROJECT_ROOT / "schemaprobe" / "fixtures"

SMALL_SCHEMA = {
    "type": "object",
    "required": ["a"],
    "properties": {"a": {"type": "string", "maxLength": 3}},
}


def test_jsonschema_processor_messages():
    print("\n[TEST] JSONSchemaProcessor diagnostics")

    processor = JSONSchemaProcessor(SMALL_SCHEMA)
    processor.validate({"a": "abc"})

    with pytest.raises(PayloadValidationError) as exc_info:
        processor.validate({"a": "abcd"})
    assert str(exc_info.value) == "maxLength at $.a: 'abcd' is too long"
    assert len(exc_info.value.errors) == 1

    with pytest.raises(PayloadValidationError) as exc_info:
        processor.validate({})
    assert str(exc_info.value) == "required at $: 'a' is a required property"

    with pytest.raises(PayloadValidationError, match="None is not of type 'string'"):
        processor.validate({"a": None})
    print("  ✓ keyword, path and message rendered")


def test_jsonschema_processor_includes_sub_errors():
    processor = JSONSchemaProcessor({"anyOf": [{"required": ["x"]}, {"required": ["y"]}]})

    with pytest.raises(PayloadValidationError) as exc_info:
        processor.validate({})

    message = str(exc_info.value)
    assert message.startswith("anyOf at $:")
    assert "'x' is a required property" in message
    assert "'y' is a required property" in message


def test_jsonschema_processor_rejects_invalid_schema():
    with pytest.raises(SchemaError):
        JSONSchemaProcessor({"type": "nonsense"})


def test_jsonschema_processor_decode():
    plain = JSONSchemaProcessor(SMALL_SCHEMA)
    payload = {"a": "x"}
    decoded = plain.decode(payload)
    assert decoded == payload
    assert decoded is not payload

    with_decoder = JSONSchemaProcessor(SMALL_SCHEMA, decoder=lambda p: p["a"].upper())
    assert with_decoder.decode(payload) == "X"


def test_jsonschema_processor_from_file():
    processor = JSONSchemaProcessor.from_file(FIXTURES_DIR / "schemas" / "events.json")

    with pytest.raises(PayloadValidationError, match="'service' is a required property"):
        processor.validate({"transactions": []})


def test_get_processor():
    assert isinstance(get_processor("jsonschema", schema=SMALL_SCHEMA), JSONSchemaProcessor)
    assert isinstance(get_processor(schema=SMALL_SCHEMA), JSONSchemaProcessor)
    assert isinstance(get_processor("callable", validate_fn=lambda p: None), CallableProcessor)

    with pytest.raises(ValueError, match="Unknown processor"):
        get_processor("xml")


def test_callable_processor():
    def validate(payload):
        if "a" not in payload:
            raise ValueError("'a' is a required property")

    processor = CallableProcessor(validate)
    processor.validate({"a": 1})
    with pytest.raises(ValueError):
        processor.validate({})
    assert processor.decode({"a": 1}) == {"a": 1}

    decoding = CallableProcessor(validate, decode_fn=lambda p: p["a"] * 2)
    assert decoding.decode({"a": 2}) == 4


def test_preview_shortens_long_values():
    assert preview("abc") == "'abc'"
    assert preview(None) == "None"

    long_value = "a" * 1025
    shortened = preview(long_value)
    assert shortened.startswith("'" + "a" * (VALUE_PREVIEW_CHARS - 1))
    assert shortened.endswith("... (len=1025)")


def test_oracle_report():
    report = OracleReport(oracle="demo", policy={"version": "1.0.0"})
    report.record(None)
    assert report.passed
    report.raise_for_mismatches()

    report.record(Mismatch(key="a.b", value=None, expected="valid", actual="boom"))
    assert not report.passed
    assert report.checks == 2

    with pytest.raises(OracleAssertionError) as exc_info:
        report.raise_for_mismatches()
    assert exc_info.value.report is report
    assert "demo: 1 of 2 checks failed" in str(exc_info.value)
    assert "key <a.b> value <None>: expected valid, got boom" in str(exc_info.value)
    # usable wherever a plain assertion failure is expected
    assert isinstance(exc_info.value, AssertionError)

    data = report.to_dict()
    assert data["oracle"] == "demo"
    assert data["passed"] is False
    assert data["policy"] == {"version": "1.0.0"}
    assert len(data["mismatches"]) == 1


def run_all_tests():
    """Run all processor and report tests."""
    print("\n" + "=" * 60)
    print(" schemaprobe Processor Tests")
    print("=" * 60)

    tests = [
        test_jsonschema_processor_messages,
        test_jsonschema_processor_includes_sub_errors,
        test_jsonschema_processor_rejects_invalid_schema,
        test_jsonschema_processor_decode,
        test_jsonschema_processor_from_file,
        test_get_processor,
        test_callable_processor,
        test_preview_shortens_long_values,
        test_oracle_report,
    ]

    results = {}
    for test in tests:
        try:
            test()
            results[test.__name__] = True
        except AssertionError as e:
            print(f"  ✗ {test.__name__}: {e}")
            results[test.__name__] = False

    passed = sum(1 for v in results.values() if v)
    print(f"\n  Total: {passed}/{len(results)} tests passed")
    print("=" * 60 + "\n")

    return all(results.values())


if __name__ == "__main__":
    success = run_all_tests()
    sys.exit(0 if success else 1)
