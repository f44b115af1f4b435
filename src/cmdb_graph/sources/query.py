"""Filter expressions understood by every record source.

Queries are built as small immutable objects and rendered into the
ServiceNow encoded-query syntax only by the REST adapter; the in-memory
and Kuzu sources evaluate or translate the same objects directly.

Public API:
    DisplayValue: Mirrors ``sysparm_display_value``.
    Condition: A single ``field OP value`` clause.
    EncodedQuery: Conditions joined by AND or OR.
    raw_value / display_value: Read either a plain value or a value pair.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Mapping


class DisplayValue(Enum):
    """How reference and choice fields are returned."""

    RAW = "false"
    DISPLAY = "true"
    ALL = "all"


EQUALS = "="
IN = "IN"


def _escape(value: str) -> str:
    # A literal caret must be doubled inside an encoded query.
    return value.replace("^", "^^")


def raw_value(field: Any) -> str:
    """Return the stored value of a field returned in any display mode."""
    if isinstance(field, Mapping):
        return str(field.get("value") or "")
    return "" if field is None else str(field)


def display_value(field: Any) -> str:
    """Return the human-readable value, falling back to the stored one."""
    if isinstance(field, Mapping):
        return str(field.get("display_value") or field.get("value") or "")
    return "" if field is None else str(field)


def project_record(
    record: Mapping[str, Any],
    fields: list[str] | None,
    mode: DisplayValue,
) -> dict[str, Any]:
    """Select *fields* from a stored record and convert them to *mode*.

    Stored records keep reference fields as value/display pairs; this is
    what the Table API does server-side for ``sysparm_fields`` and
    ``sysparm_display_value``.
    """
    names = fields if fields is not None else list(record)
    projected: dict[str, Any] = {}
    for name in names:
        if name not in record:
            continue
        value = record[name]
        if mode is DisplayValue.RAW:
            projected[name] = raw_value(value)
        elif mode is DisplayValue.DISPLAY:
            projected[name] = display_value(value)
        else:
            projected[name] = {
                "value": raw_value(value),
                "display_value": display_value(value),
            }
    return projected


@dataclass(frozen=True)
class Condition:
    """A single clause: ``field = value`` or ``field IN (v1, v2, ...)``."""

    field: str
    value: str | tuple[str, ...]
    operator: str = EQUALS

    def __post_init__(self) -> None:
        if self.operator not in (EQUALS, IN):
            raise ValueError(f"Unsupported operator: {self.operator!r}")
        if self.operator == IN and isinstance(self.value, str):
            object.__setattr__(self, "value", (self.value,))

    @property
    def values(self) -> tuple[str, ...]:
        if isinstance(self.value, tuple):
            return self.value
        return (self.value,)

    def encode(self) -> str:
        if self.operator == IN:
            joined = ",".join(_escape(v) for v in self.values)
            return f"{self.field}IN{joined}"
        return f"{self.field}={_escape(str(self.value))}"

    def matches(self, record: Mapping[str, Any]) -> bool:
        return raw_value(record.get(self.field)) in self.values


@dataclass(frozen=True)
class EncodedQuery:
    """Conditions joined by AND (default) or OR.

    Attributes:
        conditions: The clauses, in order.
        any_of: Join with OR instead of AND.
    """

    conditions: tuple[Condition, ...]
    any_of: bool = False

    @classmethod
    def equals(cls, field: str, value: str) -> EncodedQuery:
        return cls((Condition(field, value),))

    @classmethod
    def either(cls, field_a: str, field_b: str, value: str) -> EncodedQuery:
        """``field_a = value OR field_b = value``."""
        return cls((Condition(field_a, value), Condition(field_b, value)), any_of=True)

    @classmethod
    def one_of(cls, field: str, values: Iterable[str]) -> EncodedQuery:
        return cls((Condition(field, tuple(values), IN),))

    def encode(self) -> str:
        """Render as a ServiceNow encoded query, e.g. ``parent=x^ORchild=x``."""
        separator = "^OR" if self.any_of else "^"
        return separator.join(c.encode() for c in self.conditions)

    def matches(self, record: Mapping[str, Any]) -> bool:
        if not self.conditions:
            return True
        results = (c.matches(record) for c in self.conditions)
        return any(results) if self.any_of else all(results)

    def __str__(self) -> str:
        return self.encode()


__all__ = [
    "DisplayValue",
    "Condition",
    "EncodedQuery",
    "EQUALS",
    "IN",
    "raw_value",
    "display_value",
    "project_record",
]
