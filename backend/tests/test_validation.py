"""
Response Showcase — Validation Engine Unit Tests
==================================================

What:  Tests for validate_field, validate_object, shape and flatten_violations.
Why:   The engine decides every 400 response and every success body shape.

Test Strategy:
    ✅ Rule order per field (presence → kind → bounds), first failure wins
    ✅ Every violation across fields is reported, none dropped
    ✅ Integer boundary behaviour at [0, 150]
    ✅ Response shaping: declared fields only, optional omitted
"""

import math

import pytest
from pydantic import BaseModel

from showcase.exceptions import ContractViolationError
from showcase.schemas import fields as f
from showcase.schemas.fields import ObjectSchema
from showcase.schemas.models import compile_object
from showcase.schemas.validation import (
    ABSENT,
    Invalid,
    Valid,
    Violation,
    ViolationCode,
    flatten_violations,
    shape,
    validate_field,
    validate_object,
)
from showcase.services.binder import UploadedFile

USER = ObjectSchema({
    "name": f.string().min_length(1).max_length(100),
    "email": f.string().email(),
    "age": f.integer().min(0).max(150),
})


def codes(result):
    return {v.path: v.code for v in result.violations}


class TestIntegerBoundaries:
    """Numeric field with inclusive bounds [0, 150]."""

    def setup_method(self):
        self.age = f.integer().min(0).max(150).build()

    @pytest.mark.parametrize("value", [0, 150, 25])
    def test_values_inside_bounds_pass(self, value):
        assert validate_field("age", self.age, value) == Valid(value)

    @pytest.mark.parametrize("value", [-1, 151])
    def test_values_outside_bounds_are_out_of_range(self, value):
        outcome = validate_field("age", self.age, value)
        assert isinstance(outcome, Violation)
        assert outcome.code is ViolationCode.OUT_OF_RANGE

    def test_fractional_value_is_type_mismatch(self):
        outcome = validate_field("age", self.age, 25.5)
        assert outcome.code is ViolationCode.TYPE_MISMATCH
        assert "integer" in outcome.reason

    def test_integral_float_is_coerced(self):
        outcome = validate_field("age", self.age, 25.0)
        assert outcome == Valid(25)
        assert isinstance(outcome.value, int)

    def test_out_of_range_reason_names_bound(self):
        assert validate_field("age", self.age, -1).reason == "Input should be greater than or equal to 0"
        assert validate_field("age", self.age, 151).reason == "Input should be less than or equal to 150"


class TestFieldRules:
    def test_missing_required_field(self):
        outcome = validate_field("name", f.string().build())
        assert outcome.code is ViolationCode.MISSING_FIELD

    def test_missing_optional_field_succeeds_without_value(self):
        outcome = validate_field("note", f.string().optional().build())
        assert outcome.ok
        assert outcome.value is ABSENT
        assert not outcome.present

    def test_null_is_present_with_wrong_kind(self):
        outcome = validate_field("note", f.string().optional().build(), None)
        assert outcome.code is ViolationCode.TYPE_MISMATCH
        assert outcome.reason == "Input should be a valid string"

    def test_missing_binary_is_no_file_provided(self):
        outcome = validate_field("file", f.binary().build())
        assert outcome.code is ViolationCode.NO_FILE_PROVIDED

    def test_boolean_is_not_a_number(self):
        outcome = validate_field("n", f.number().build(), True)
        assert outcome.code is ViolationCode.TYPE_MISMATCH

    def test_number_is_not_a_string(self):
        outcome = validate_field("name", f.string().build(), 42)
        assert outcome.code is ViolationCode.TYPE_MISMATCH

    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
    def test_non_finite_numbers_rejected(self, value):
        outcome = validate_field("n", f.number().build(), value)
        assert outcome.code is ViolationCode.TYPE_MISMATCH

    def test_plain_number_keeps_fraction(self):
        assert validate_field("n", f.number().max(1).build(), 0.5) == Valid(0.5)

    def test_kind_checked_before_bounds(self):
        outcome = validate_field("name", f.string().min_length(1).build(), 0)
        assert outcome.code is ViolationCode.TYPE_MISMATCH

    def test_first_failing_bound_wins(self):
        # Too short AND not an email: only the length violation is reported
        outcome = validate_field("email", f.string().min_length(5).email().build(), "a@b")
        assert outcome.code is ViolationCode.TOO_SHORT

    def test_too_long(self):
        outcome = validate_field("name", f.string().max_length(3).build(), "abcd")
        assert outcome.code is ViolationCode.TOO_LONG
        assert outcome.reason == "String should have at most 3 characters"

    def test_length_counts_characters_not_bytes(self):
        assert validate_field("name", f.string().max_length(2).build(), "太郎").ok

    @pytest.mark.parametrize("value", ["taro@example.com", "first.last+tag@sub.example.co.jp"])
    def test_valid_emails(self, value):
        assert validate_field("email", f.string().email().build(), value).ok

    @pytest.mark.parametrize("value", ["not-an-email", "a@b", ".a@example.com", "a..b@example.com", "a@example"])
    def test_invalid_emails(self, value):
        outcome = validate_field("email", f.string().email().build(), value)
        assert outcome.code is ViolationCode.BAD_FORMAT

    def test_pattern(self):
        zip_code = f.string().pattern(r"^\d{3}-\d{4}$").build()
        assert validate_field("zip", zip_code, "100-0001").ok
        assert validate_field("zip", zip_code, "1000001").code is ViolationCode.BAD_FORMAT

    def test_binary_accepts_uploaded_file(self):
        upload = UploadedFile(name="a.txt", size=3, media_type="text/plain", payload=b"abc")
        assert validate_field("file", f.binary().build(), upload) == Valid(upload)

    def test_binary_rejects_text(self):
        outcome = validate_field("file", f.binary().build(), "a.txt")
        assert outcome.code is ViolationCode.TYPE_MISMATCH
        assert "UploadedFile" in outcome.reason

    def test_binary_size_limit(self):
        upload = UploadedFile(name="big.bin", size=11, media_type="application/octet-stream", payload=b"x" * 11)
        outcome = validate_field("file", f.binary().max_size(10).build(), upload)
        assert outcome.code is ViolationCode.TOO_LONG


class TestObjectValidation:
    def test_valid_user(self):
        result = validate_object(USER, {"name": "太郎", "email": "taro@example.com", "age": 25})
        assert result == Valid({"name": "太郎", "email": "taro@example.com", "age": 25})

    def test_all_violations_reported(self):
        """Every bad field shows up in one result, in declaration order."""
        result = validate_object(USER, {"name": "", "email": "not-an-email", "age": 200})
        assert isinstance(result, Invalid)
        assert [v.path for v in result.violations] == ["name", "email", "age"]
        assert codes(result) == {
            "name": ViolationCode.TOO_SHORT,
            "email": ViolationCode.BAD_FORMAT,
            "age": ViolationCode.OUT_OF_RANGE,
        }

    def test_empty_body_reports_every_required_field(self):
        result = validate_object(USER, {})
        assert codes(result) == {
            "name": ViolationCode.MISSING_FIELD,
            "email": ViolationCode.MISSING_FIELD,
            "age": ViolationCode.MISSING_FIELD,
        }

    def test_partial_failure_reports_only_bad_fields(self):
        result = validate_object(USER, {"name": "太郎", "email": "taro@example.com", "age": "25"})
        assert codes(result) == {"age": ViolationCode.TYPE_MISMATCH}

    def test_undeclared_keys_dropped(self):
        result = validate_object(USER, {"name": "a", "email": "a@example.com", "age": 1, "admin": True})
        assert "admin" not in result.value

    def test_absent_optional_is_omitted(self):
        schema = ObjectSchema({"title": f.string(), "note": f.string().optional()})
        assert validate_object(schema, {"title": "x"}).value == {"title": "x"}

    def test_non_mapping_is_type_mismatch(self):
        result = validate_object(USER, ["not", "an", "object"])
        assert result.violations[0].code is ViolationCode.TYPE_MISMATCH
        assert result.violations[0].path == ""

    def test_nested_violations_use_dotted_paths(self):
        schema = ObjectSchema({"data": f.obj({"age": f.integer().min(0), "name": f.string()})})
        result = validate_object(schema, {"data": {"age": -5}})
        assert codes(result) == {
            "data.age": ViolationCode.OUT_OF_RANGE,
            "data.name": ViolationCode.MISSING_FIELD,
        }

    def test_free_form_object_passes_through(self):
        schema = ObjectSchema({"details": f.obj().optional()})
        assert validate_object(schema, {"details": {"anything": [1, 2]}}).value == {
            "details": {"anything": [1, 2]}
        }


class TestShape:
    RESPONSE = ObjectSchema({
        "success": f.boolean(),
        "message": f.string(),
        "data": f.obj({"name": f.string(), "age": f.number(), "note": f.string().optional()}),
    })

    def test_shape_keeps_exactly_declared_fields(self):
        payload = {
            "success": True,
            "message": "ok",
            "data": {"name": "太郎", "age": 25, "internal": "x"},
            "debug": 1,
        }
        assert shape(self.RESPONSE, payload) == {
            "success": True,
            "message": "ok",
            "data": {"name": "太郎", "age": 25},
        }

    def test_shape_rejects_missing_required_field(self):
        with pytest.raises(ContractViolationError) as exc_info:
            shape(self.RESPONSE, {"success": True, "data": {"name": "a", "age": 1}})
        assert exc_info.value.context["violations"][0]["path"] == "message"

    def test_shape_rejects_wrong_kind(self):
        with pytest.raises(ContractViolationError):
            shape(self.RESPONSE, {"success": "yes", "message": "ok", "data": {"name": "a", "age": 1}})

    def test_validated_request_round_trips_into_response(self):
        """A value accepted by the request schema fits the response schema unchanged."""
        accepted = validate_object(USER, {"name": "太郎", "email": "taro@example.com", "age": 25.0})
        body = shape(
            ObjectSchema({"data": f.obj({"name": f.string(), "email": f.string(), "age": f.integer()})}),
            {"data": accepted.value},
        )
        assert body == {"data": {"name": "太郎", "email": "taro@example.com", "age": 25}}
        assert isinstance(body["data"]["age"], int)


class TestCompiledModels:
    """ObjectSchema → pydantic model compilation behind the engine."""

    def test_schema_compiles_to_pydantic_model(self):
        model = compile_object(USER, "UserRequest")
        assert issubclass(model, BaseModel)
        assert model.__name__ == "UserRequest"
        assert [info.alias for info in model.model_fields.values()] == ["name", "email", "age"]

    def test_compiled_model_is_cached(self):
        assert compile_object(USER, "UserRequest") is compile_object(USER, "UserRequest")

    def test_nested_object_becomes_named_model(self):
        schema = ObjectSchema({"fileInfo": f.obj({"size": f.integer()})})
        model = compile_object(schema, "UploadResponse")
        nested = next(iter(model.model_fields.values())).annotation
        assert nested.__name__ == "UploadResponseFileInfo"

    def test_keys_that_are_not_identifiers(self):
        schema = ObjectSchema({"first-name": f.string(), "model_dump": f.integer()})
        assert validate_object(schema, {"first-name": "太郎", "model_dump": 1}).value == {
            "first-name": "太郎",
            "model_dump": 1,
        }

    def test_email_reason_comes_from_email_validator(self):
        outcome = validate_field("email", f.string().email().build(), "not-an-email")
        assert outcome.code is ViolationCode.BAD_FORMAT
        assert outcome.reason.startswith("value is not a valid email address")

    def test_email_display_name_rejected(self):
        outcome = validate_field("email", f.string().email().build(), "Taro <taro@example.com>")
        assert outcome.code is ViolationCode.BAD_FORMAT

    def test_email_echoed_unchanged(self):
        assert validate_field("email", f.string().email().build(), "Taro@Example.COM") == Valid(
            "Taro@Example.COM"
        )

    def test_binary_too_small(self):
        upload = UploadedFile(name="a.txt", size=0, media_type="text/plain", payload=b"")
        outcome = validate_field("file", f.binary().min_size(1).build(), upload)
        assert outcome.code is ViolationCode.TOO_SHORT
        assert outcome.reason == "File should be at least 1 bytes"


class TestFlattenViolations:
    def test_groups_by_path(self):
        violations = [
            Violation("age", ViolationCode.OUT_OF_RANGE, "must be ≤ 150"),
            Violation("", ViolationCode.BODY_UNPARSEABLE, "malformed JSON"),
        ]
        details = flatten_violations(violations)
        assert details["fieldErrors"] == {"age": ["must be ≤ 150"]}
        assert details["formErrors"] == ["malformed JSON"]
        assert details["issues"][0] == {"path": "age", "code": "OutOfRange", "message": "must be ≤ 150"}
