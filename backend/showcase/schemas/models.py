"""
Response Showcase — Pydantic Model Compiler
=============================================

What:  Turns FieldSchema / ObjectSchema declarations into pydantic models.
Why:   Route contracts are written with the small builder in fields.py, but
       the actual validation, serialization and JSON-Schema generation is
       pydantic's job. One compiled model serves both the request check and
       the OpenAPI document, so the two cannot disagree.
How:   Each declared field becomes an Annotated type plus a FieldInfo:

           STRING   str + StringConstraints(strict=True, ...) [+ email check]
           NUMBER   int/float + Strict() + Interval(ge, le)
           BOOLEAN  StrictBool
           BINARY   InstanceOf[UploadedFile] + size check, documented as
                    {"type": "string", "format": "binary"}
           OBJECT   nested compiled model, or Dict[str, Any] when free-form

       Field names are carried as aliases (python names are field_0, field_1,
       ...) so any declared key works, including ones that are not valid
       identifiers or that collide with BaseModel attributes.
Who:   The validation engine (validation.py) and the docs exporter.
When:  Compiled lazily on first use, then cached per schema instance.

Numeric semantics:
    - bool is never a number (strict mode)
    - integer fields accept 25 and 25.0 (coerced to 25) and reject 25.5
    - NaN / Infinity are rejected for number fields
    - range bounds are inclusive
"""

import re
import threading
from typing import Annotated, Any, Callable, Dict, Optional, Tuple, Type

from annotated_types import Interval
from pydantic import (
    AfterValidator,
    AllowInfNan,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    InstanceOf,
    Strict,
    StrictBool,
    StringConstraints,
    WithJsonSchema,
    create_model,
)
from pydantic.fields import FieldInfo
from pydantic.networks import validate_email
from pydantic_core import PydanticCustomError

from showcase.schemas.fields import UNSET, FieldKind, FieldSchema, ObjectSchema, StringFormat
from showcase.services.binder import UploadedFile

# Patterns are checked with Python's re when declared (FieldBuilder.pattern),
# so validate with the same engine
MODEL_CONFIG = ConfigDict(extra="ignore", regex_engine="python-re")

BINARY_JSON_SCHEMA = {"type": "string", "format": "binary"}

# Error types raised by the binary size check (mapped to TooShort / TooLong)
FILE_TOO_SMALL = "file_too_small"
FILE_TOO_LARGE = "file_too_large"


# ══════════════════════════════════════════════════════════════════════════
# Validators pydantic has no constraint for
# ══════════════════════════════════════════════════════════════════════════

def _integral_float(value: Any) -> Any:
    # JSON has one number type: 25.0 is a valid integer, 25.5 is not
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _check_email(value: str) -> str:
    """Email shape check via email-validator; the value is echoed unchanged."""
    if "<" in value:
        raise PydanticCustomError(
            "value_error", "value is not a valid email address: display names are not accepted"
        )
    validate_email(value)
    return value


def _file_size_check(min_size: Optional[int], max_size: Optional[int]) -> Callable[[UploadedFile], UploadedFile]:
    def check(upload: UploadedFile) -> UploadedFile:
        if min_size is not None and upload.size < min_size:
            raise PydanticCustomError(
                FILE_TOO_SMALL, "File should be at least {min_size} bytes", {"min_size": min_size}
            )
        if max_size is not None and upload.size > max_size:
            raise PydanticCustomError(
                FILE_TOO_LARGE, "File should be at most {max_size} bytes", {"max_size": max_size}
            )
        return upload

    return check


def _unset() -> None:
    # default_factory (not default=None) keeps "default" out of the JSON Schema
    return None


# ══════════════════════════════════════════════════════════════════════════
# Field → annotation
# ══════════════════════════════════════════════════════════════════════════

def camel_case(name: str) -> str:
    """'validate_user' → 'ValidateUser', 'fileInfo' → 'FileInfo'."""
    return "".join(part[:1].upper() + part[1:] for part in re.split(r"[^0-9A-Za-z]+", name) if part)


def field_annotation(field: FieldSchema, model_name: str) -> Any:
    """
    The pydantic type for one declared field.

    Args:
        model_name: Name for the nested model when the field is an object
            with a schema (becomes the component name in the docs).
    """
    kind = field.kind
    if kind is FieldKind.STRING:
        metadata: Tuple[Any, ...] = (
            StringConstraints(
                strict=True,
                min_length=field.min_length,
                max_length=field.max_length,
                pattern=field.pattern,
            ),
        )
        if field.format is StringFormat.EMAIL:
            metadata += (AfterValidator(_check_email),)
        return Annotated[(str, *metadata)]
    if kind is FieldKind.NUMBER:
        bounds = Interval(ge=field.minimum, le=field.maximum)
        if field.integer:
            return Annotated[int, Strict(), bounds, BeforeValidator(_integral_float)]
        return Annotated[float, Strict(), AllowInfNan(False), bounds]
    if kind is FieldKind.BOOLEAN:
        return StrictBool
    if kind is FieldKind.BINARY:
        return Annotated[
            InstanceOf[UploadedFile],
            AfterValidator(_file_size_check(field.min_length, field.max_length)),
            WithJsonSchema(BINARY_JSON_SCHEMA),
        ]
    if kind is FieldKind.OBJECT:
        if field.fields is None:
            return Dict[str, Any]
        return compile_object(field.fields, model_name)
    raise ValueError(f"Unknown field kind: {kind!r}")


def field_info(name: str, field: FieldSchema) -> FieldInfo:
    """Alias, presence and documentation metadata for one declared field."""
    extra: Dict[str, Any] = {}
    if field.format is StringFormat.EMAIL:
        extra["format"] = "email"
    if field.example is not UNSET:
        extra["example"] = field.example

    options: Dict[str, Any] = {
        "alias": name,
        "description": field.description,
        "json_schema_extra": extra or None,
    }
    if field.optional:
        options["default_factory"] = _unset
    return Field(**options)


# ══════════════════════════════════════════════════════════════════════════
# Compilation + cache
# ══════════════════════════════════════════════════════════════════════════

# (id(owner), name) → (owner, compiled). Holding the owner keeps its id from
# being reused by another object while the entry exists.
_compiled: Dict[Tuple[int, str], Tuple[Any, Any]] = {}
# Reentrant: compiling an object compiles its nested objects
_compile_lock = threading.RLock()


def _memo(owner: Any, name: str, build: Callable[[], Any]) -> Any:
    key = (id(owner), name)
    hit = _compiled.get(key)
    if hit is not None and hit[0] is owner:
        return hit[1]
    with _compile_lock:
        hit = _compiled.get(key)
        if hit is None or hit[0] is not owner:
            hit = (owner, build())
            _compiled[key] = hit
    return hit[1]


def _build_model(schema: ObjectSchema, name: str) -> Type[BaseModel]:
    definitions: Dict[str, Any] = {}
    for index, (field_name, field) in enumerate(schema.items()):
        annotation = field_annotation(field, f"{name}{camel_case(field_name)}")
        definitions[f"field_{index}"] = (annotation, field_info(field_name, field))
    return create_model(name, __config__=MODEL_CONFIG, **definitions)


def compile_object(schema: ObjectSchema, name: str = "Body") -> Type[BaseModel]:
    """
    The pydantic model for an ObjectSchema, named `name`.

    Nested object fields become models named `name` + CamelCasedFieldName.
    """
    return _memo(schema, name, lambda: _build_model(schema, name))


FIELD_WRAPPER_KEY = "value"


def compile_field(field: FieldSchema) -> Tuple[Type[BaseModel], ObjectSchema]:
    """
    A one-field model wrapping `field` under FIELD_WRAPPER_KEY.

    Returns the model and the wrapper schema (for resolving error paths).
    """
    def build() -> Tuple[Type[BaseModel], ObjectSchema]:
        wrapper = ObjectSchema({FIELD_WRAPPER_KEY: field})
        return _build_model(wrapper, "FieldValue"), wrapper

    return _memo(field, "FieldValue", build)


def dump_model(instance: BaseModel) -> Dict[str, Any]:
    """
    Plain dict of the fields that were actually provided, keyed by declared
    name, in declaration order. Absent optional fields are left out.

    model_dump() is not used: it would turn UploadedFile values into dicts.
    """
    out: Dict[str, Any] = {}
    for python_name, info in type(instance).model_fields.items():
        if python_name not in instance.model_fields_set:
            continue
        value = getattr(instance, python_name)
        out[info.alias or python_name] = dump_model(value) if isinstance(value, BaseModel) else value
    return out
