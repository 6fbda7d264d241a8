"""
Response Showcase — Field & Object Schema Declarations
=======================================================

What:  The declarative half of the validation engine: what a field may hold.
Why:   Request bodies, response bodies and the OpenAPI document are all derived
       from the same declarations, so a route's contract is written once.
How:   A closed FieldKind enum plus an immutable FieldSchema value. Schemas are
       authored through a chained builder where every call returns a new
       builder; build() checks the constraint set and yields the frozen value.
Who:   Route modules (declaring contracts), the validation engine, the
       documentation exporter.
When:  At import / registration time only. Nothing here changes per request.

Example:
    user = ObjectSchema({
        "name": string().min_length(1).max_length(100).describe("ユーザー名", example="太郎"),
        "age": integer().min(0).max(150),
    })

Supported constraints per kind:
    STRING   min_length, max_length, email(), pattern()
    NUMBER   integer flag, min(), max()        (bounds are inclusive)
    BOOLEAN  —
    BINARY   max_size() / min_size()           (uploaded file byte size)
    OBJECT   nested ObjectSchema, or free-form when no schema is given
"""

import re
from dataclasses import dataclass, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Optional, Tuple, Union

from showcase.exceptions import ContractConfigurationError


class FieldKind(str, Enum):
    """Closed set of value kinds a field can declare."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    BINARY = "binary"
    OBJECT = "object"


class StringFormat(str, Enum):
    """Named format predicates for string fields."""

    EMAIL = "email"


class _Unset:
    """Marker for 'no example given' (None is a legitimate example value)."""

    def __repr__(self) -> str:
        return "<unset>"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


@dataclass(frozen=True)
class FieldSchema:
    """
    Immutable constraint set over one value.

    Never construct directly in route code; use the builder functions at the
    bottom of this module so build() can reject inconsistent constraints.
    """

    kind: FieldKind
    optional: bool = False
    integer: bool = False
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    minimum: Optional[Union[int, float]] = None
    maximum: Optional[Union[int, float]] = None
    format: Optional[StringFormat] = None
    pattern: Optional[str] = None
    fields: Optional["ObjectSchema"] = None
    description: Optional[str] = None
    example: Any = UNSET


# Which constraints make sense for which kind; anything else is a declaration bug
_ALLOWED_CONSTRAINTS = {
    FieldKind.STRING: {"min_length", "max_length", "format", "pattern"},
    FieldKind.NUMBER: {"integer", "minimum", "maximum"},
    FieldKind.BOOLEAN: set(),
    FieldKind.BINARY: {"min_length", "max_length"},
    FieldKind.OBJECT: {"fields"},
}


class FieldBuilder:
    """
    Chained, immutable builder for FieldSchema.

    Each method returns a NEW builder, so a partially configured builder can
    be shared as a base without later calls leaking into earlier users:

        base = string().max_length(100)
        name = base.min_length(1).build()
        note = base.optional().build()     # base itself is unchanged
    """

    __slots__ = ("_schema",)

    def __init__(self, schema: FieldSchema):
        self._schema = schema

    def _with(self, **changes: Any) -> "FieldBuilder":
        return FieldBuilder(replace(self._schema, **changes))

    # ── Presence ──────────────────────────────────────────────────────────

    def optional(self) -> "FieldBuilder":
        return self._with(optional=True)

    # ── Strings ───────────────────────────────────────────────────────────

    def min_length(self, length: int) -> "FieldBuilder":
        return self._with(min_length=length)

    def max_length(self, length: int) -> "FieldBuilder":
        return self._with(max_length=length)

    def email(self) -> "FieldBuilder":
        return self._with(format=StringFormat.EMAIL)

    def pattern(self, regex: str) -> "FieldBuilder":
        try:
            re.compile(regex)
        except re.error as e:
            raise ContractConfigurationError(
                message=f"Invalid pattern {regex!r}: {e}",
                context={"pattern": regex},
            ) from e
        return self._with(pattern=regex)

    # ── Numbers ───────────────────────────────────────────────────────────

    def integer(self) -> "FieldBuilder":
        return self._with(integer=True)

    def min(self, value: Union[int, float]) -> "FieldBuilder":
        return self._with(minimum=value)

    def max(self, value: Union[int, float]) -> "FieldBuilder":
        return self._with(maximum=value)

    # ── Binaries ──────────────────────────────────────────────────────────

    def min_size(self, size: int) -> "FieldBuilder":
        return self._with(min_length=size)

    def max_size(self, size: int) -> "FieldBuilder":
        return self._with(max_length=size)

    # ── Documentation ─────────────────────────────────────────────────────

    def describe(self, description: str, example: Any = UNSET) -> "FieldBuilder":
        return self._with(description=description, example=example)

    def build(self) -> FieldSchema:
        """
        Freeze the declaration after checking it is internally consistent.

        Raises:
            ContractConfigurationError: constraint not applicable to the kind,
                negative lengths, or lower bound above upper bound.
        """
        schema = self._schema
        allowed = _ALLOWED_CONSTRAINTS[schema.kind]
        used = {
            name
            for name in ("integer", "min_length", "max_length", "minimum", "maximum",
                         "format", "pattern", "fields")
            if getattr(schema, name) is not None and getattr(schema, name) is not False
        }
        misplaced = used - allowed
        if misplaced:
            raise ContractConfigurationError(
                message=(
                    f"Constraint(s) {', '.join(sorted(misplaced))} "
                    f"do not apply to {schema.kind.value} fields"
                ),
                context={"kind": schema.kind.value, "constraints": sorted(misplaced)},
            )
        for name in ("min_length", "max_length"):
            value = getattr(schema, name)
            if value is not None and value < 0:
                raise ContractConfigurationError(message=f"{name} must be >= 0, got {value}")
        _check_order(schema.min_length, schema.max_length, "length")
        _check_order(schema.minimum, schema.maximum, "range")
        return schema


def _check_order(low: Optional[float], high: Optional[float], label: str) -> None:
    if low is not None and high is not None and low > high:
        raise ContractConfigurationError(
            message=f"Empty {label}: lower bound {low} exceeds upper bound {high}",
            context={"low": low, "high": high},
        )


class ObjectSchema(Mapping[str, FieldSchema]):
    """
    Ordered, read-only mapping of field name → FieldSchema.

    Accepts builders as values and builds them, so contracts can be written
    without a trailing .build() on every line. Field order is preserved and
    drives both validation order and the order of properties in the docs.
    """

    def __init__(self, fields: Optional[Mapping[str, Union[FieldSchema, FieldBuilder]]] = None):
        built = {}
        for name, field in (fields or {}).items():
            if not isinstance(name, str) or not name:
                raise ContractConfigurationError(message=f"Invalid field name {name!r}")
            built[name] = field.build() if isinstance(field, FieldBuilder) else field
        self._fields = MappingProxyType(built)

    def __getitem__(self, name: str) -> FieldSchema:
        return self._fields[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __hash__(self) -> int:
        return hash(tuple(self._fields.items()))

    def __repr__(self) -> str:
        return f"ObjectSchema({dict(self._fields)!r})"

    @property
    def required(self) -> Tuple[str, ...]:
        """Names of the fields that must be present, in declaration order."""
        return tuple(name for name, field in self._fields.items() if not field.optional)


# ══════════════════════════════════════════════════════════════════════════
# Builder entry points
# ══════════════════════════════════════════════════════════════════════════

def string() -> FieldBuilder:
    return FieldBuilder(FieldSchema(kind=FieldKind.STRING))


def number() -> FieldBuilder:
    return FieldBuilder(FieldSchema(kind=FieldKind.NUMBER))


def integer() -> FieldBuilder:
    return FieldBuilder(FieldSchema(kind=FieldKind.NUMBER, integer=True))


def boolean() -> FieldBuilder:
    return FieldBuilder(FieldSchema(kind=FieldKind.BOOLEAN))


def binary() -> FieldBuilder:
    return FieldBuilder(FieldSchema(kind=FieldKind.BINARY))


def obj(schema: Optional[Union[ObjectSchema, Mapping[str, Any]]] = None) -> FieldBuilder:
    """Nested object field; without a schema the object is free-form."""
    if schema is not None and not isinstance(schema, ObjectSchema):
        schema = ObjectSchema(schema)
    return FieldBuilder(FieldSchema(kind=FieldKind.OBJECT, fields=schema))
