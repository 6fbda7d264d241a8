"""
Response Showcase — Validation Engine
=======================================

What:  Runs a FieldSchema / ObjectSchema against raw decoded values.
Why:   One engine produces both the 400 error envelope for bad requests and
       the shaped success body for good responses.
How:   The schema is compiled to a pydantic model (models.py) and validated
       with model_validate(). pydantic collects ALL errors in one pass, so a
       client sees every problem with its request at once; each error is
       translated to a Violation with a stable code:

           missing                         → MissingField / NoFileProvided
           *_type, int_from_float, ...     → TypeMismatch
           greater_than(_equal), less_...  → OutOfRange
           string_too_short / _long        → TooShort / TooLong
           string_pattern_mismatch, email  → BadFormat

Result types:
    Valid(value)          value is the coerced value (ABSENT for a missing
                          optional field; omitted from object results)
    Invalid(violations)   one or more Violation(path, code, reason)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Dict, List, Mapping, Sequence, Tuple, Union

from pydantic import ValidationError as PydanticValidationError

from showcase.exceptions import ContractViolationError
from showcase.schemas.fields import FieldKind, FieldSchema, ObjectSchema
from showcase.schemas.models import (
    FIELD_WRAPPER_KEY,
    FILE_TOO_LARGE,
    FILE_TOO_SMALL,
    compile_field,
    compile_object,
    dump_model,
)


class ViolationCode(str, Enum):
    MISSING_FIELD = "MissingField"
    TYPE_MISMATCH = "TypeMismatch"
    OUT_OF_RANGE = "OutOfRange"
    TOO_SHORT = "TooShort"
    TOO_LONG = "TooLong"
    BAD_FORMAT = "BadFormat"
    BODY_UNPARSEABLE = "BodyUnparseable"
    NO_FILE_PROVIDED = "NoFileProvided"


@dataclass(frozen=True)
class Violation:
    """One reason a value failed validation. An empty path means the whole body."""

    path: str
    code: ViolationCode
    reason: str
    ok: ClassVar[bool] = False

    def as_dict(self) -> Dict[str, str]:
        return {"path": self.path, "code": self.code.value, "message": self.reason}


class _Absent:
    def __repr__(self) -> str:
        return "<absent>"

    def __bool__(self) -> bool:
        return False


ABSENT: Any = _Absent()


@dataclass(frozen=True)
class Valid:
    value: Any
    ok: ClassVar[bool] = True

    @property
    def present(self) -> bool:
        return self.value is not ABSENT


@dataclass(frozen=True)
class Invalid:
    violations: Tuple[Violation, ...]
    ok: ClassVar[bool] = False


ValidationResult = Union[Valid, Invalid]


# ══════════════════════════════════════════════════════════════════════════
# pydantic error → Violation
# ══════════════════════════════════════════════════════════════════════════

# Anything not listed here (string_type, int_type, model_type, is_instance_of,
# finite_number, ...) is a TypeMismatch
ERROR_CODES: Dict[str, ViolationCode] = {
    "greater_than": ViolationCode.OUT_OF_RANGE,
    "greater_than_equal": ViolationCode.OUT_OF_RANGE,
    "less_than": ViolationCode.OUT_OF_RANGE,
    "less_than_equal": ViolationCode.OUT_OF_RANGE,
    "string_too_short": ViolationCode.TOO_SHORT,
    "string_too_long": ViolationCode.TOO_LONG,
    FILE_TOO_SMALL: ViolationCode.TOO_SHORT,
    FILE_TOO_LARGE: ViolationCode.TOO_LONG,
    "string_pattern_mismatch": ViolationCode.BAD_FORMAT,
    "value_error": ViolationCode.BAD_FORMAT,
}


def _field_at(schema: ObjectSchema, loc: Sequence[Any]) -> Union[FieldSchema, None]:
    """Walk nested object declarations along an error location."""
    current: Union[ObjectSchema, None] = schema
    field = None
    for part in loc:
        if current is None or part not in current:
            return None
        field = current[part]
        current = field.fields if field.kind is FieldKind.OBJECT else None
    return field


def _violation(schema: ObjectSchema, error: Mapping[str, Any], prefix: str, skip: int = 0) -> Violation:
    loc = tuple(error["loc"])
    path = ".".join(str(part) for part in (prefix,) + loc[skip:] if part != "")
    kind = error["type"]

    if kind == "missing":
        field = _field_at(schema, loc)
        if field is not None and field.kind is FieldKind.BINARY:
            return Violation(path, ViolationCode.NO_FILE_PROVIDED, "file is required")
        return Violation(path, ViolationCode.MISSING_FIELD, error["msg"])

    return Violation(path, ERROR_CODES.get(kind, ViolationCode.TYPE_MISMATCH), error["msg"])


# ══════════════════════════════════════════════════════════════════════════
# Single field
# ══════════════════════════════════════════════════════════════════════════

def validate_field(path: str, schema: FieldSchema, raw: Any = ABSENT) -> Union[Valid, Violation]:
    """
    Validate one raw value against one FieldSchema.

    Args:
        path:   Field path used in the violation (e.g. "age", "data.age")
        schema: The declaration to check against
        raw:    The decoded value, or ABSENT when the key was not sent

    Returns:
        Valid(coerced value) or the first Violation found.
    """
    model, wrapper = compile_field(schema)
    values = {} if raw is ABSENT else {FIELD_WRAPPER_KEY: raw}
    try:
        instance = model.model_validate(values)
    except PydanticValidationError as exc:
        return _violation(wrapper, exc.errors()[0], path, skip=1)
    return Valid(dump_model(instance).get(FIELD_WRAPPER_KEY, ABSENT))


# ══════════════════════════════════════════════════════════════════════════
# Objects
# ══════════════════════════════════════════════════════════════════════════

def validate_object(schema: ObjectSchema, values: Any, prefix: str = "", name: str = "Body") -> ValidationResult:
    """
    Validate a mapping against an ObjectSchema, collecting every violation.

    Undeclared keys are dropped from the Valid result; absent optional fields
    are omitted (never set to None). Nested object fields report dotted paths.

    Args:
        name: Model name to compile under (shows up in error messages and in
            the OpenAPI components, see RouteContract.request_model_name)
    """
    model = compile_object(schema, name)
    if isinstance(values, Mapping):
        values = dict(values)
    try:
        instance = model.model_validate(values)
    except PydanticValidationError as exc:
        return Invalid(tuple(_violation(schema, error, prefix) for error in exc.errors()))
    return Valid(dump_model(instance))


def shape(schema: ObjectSchema, payload: Any, name: str = "Response") -> Dict[str, Any]:
    """
    Project a handler payload onto a response schema.

    Returns exactly the declared fields (extra keys dropped, absent optional
    fields omitted). A payload that does not satisfy the schema is a bug in
    the handler, reported as ContractViolationError.
    """
    result = validate_object(schema, payload, name=name)
    if not result.ok:
        raise ContractViolationError(
            message="Response does not match the route contract",
            context={"violations": [v.as_dict() for v in result.violations]},
        )
    return result.value


# ══════════════════════════════════════════════════════════════════════════
# Error details
# ══════════════════════════════════════════════════════════════════════════

def flatten_violations(violations: Sequence[Violation]) -> Dict[str, Any]:
    """
    Group violations for the error envelope's `details` object.

        formErrors   reasons that apply to the body as a whole
        fieldErrors  field path → list of reasons
        issues       every violation with its machine-readable code
    """
    form_errors: List[str] = []
    field_errors: Dict[str, List[str]] = {}
    for violation in violations:
        if violation.path:
            field_errors.setdefault(violation.path, []).append(violation.reason)
        else:
            form_errors.append(violation.reason)
    return {
        "formErrors": form_errors,
        "fieldErrors": field_errors,
        "issues": [v.as_dict() for v in violations],
    }
