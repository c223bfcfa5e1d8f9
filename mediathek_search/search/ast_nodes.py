"""AST data classes for compiled search queries."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import date
from typing import Any, Union

from mediathek_search.exceptions import ValidationError

RangeValue = Union[int, float, date]


class Field(enum.Enum):
    """Searchable attributes of an indexed entry."""

    CHANNEL = "channel"
    TOPIC = "topic"
    TITLE = "title"
    DESCRIPTION = "description"
    DURATION = "duration"
    TIMESTAMP = "timestamp"


class Operator(enum.Enum):
    """How the words of a text match are joined."""

    AND = "and"
    OR = "or"


@dataclass(frozen=True)
class TextMatch:
    """Full-text match of ``text`` against one or more fields.

    With ``Operator.AND`` every word of ``text`` must occur, with
    ``Operator.OR`` any word is enough.
    """

    fields: tuple[Field, ...]
    text: str
    operator: Operator = Operator.AND

    def __post_init__(self) -> None:
        if not self.fields:
            raise ValidationError("fields", self.fields, "at least one field is required")
        if len(set(self.fields)) != len(self.fields):
            raise ValidationError("fields", self.fields, "fields must not repeat")
        if not self.text.strip():
            raise ValidationError("text", self.text, "text must not be empty")


@dataclass(frozen=True)
class Range:
    """Inclusive range over a numeric, date or duration field.

    A missing bound leaves that side open. An exact match is a range
    with ``min == max``.
    """

    field: Field
    min: RangeValue | None = None
    max: RangeValue | None = None

    def __post_init__(self) -> None:
        if self.min is None and self.max is None:
            raise ValidationError("range", self, "at least one bound is required")
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValidationError(
                "range", self, f"lower bound {self.min} exceeds upper bound {self.max}"
            )


@dataclass(frozen=True)
class Bool:
    """Boolean combination of sub-queries.

    All ``must`` clauses have to match, no ``must_not`` clause may match,
    and ``should`` clauses are optional alternatives.
    """

    must: tuple[QueryBody, ...] = ()
    must_not: tuple[QueryBody, ...] = ()
    should: tuple[QueryBody, ...] = ()

    def __post_init__(self) -> None:
        if not (self.must or self.must_not or self.should):
            raise ValidationError("bool", self, "at least one clause is required")


QueryBody = Union[TextMatch, Range, Bool]


def _dump_value(value: RangeValue | None) -> Any:
    if isinstance(value, date):
        return value.isoformat()
    return value


def to_dict(node: QueryBody) -> dict[str, Any]:
    """Render a query tree as plain nested dicts (JSON-serializable)."""
    if isinstance(node, TextMatch):
        return {
            "text": {
                "fields": [f.value for f in node.fields],
                "text": node.text,
                "operator": node.operator.value,
            }
        }
    if isinstance(node, Range):
        body: dict[str, Any] = {"field": node.field.value}
        if node.min is not None:
            body["min"] = _dump_value(node.min)
        if node.max is not None:
            body["max"] = _dump_value(node.max)
        return {"range": body}
    if isinstance(node, Bool):
        body = {}
        for name in ("must", "must_not", "should"):
            clauses = getattr(node, name)
            if clauses:
                body[name] = [to_dict(clause) for clause in clauses]
        return {"bool": body}
    raise TypeError(f"Not a query node: {node!r}")
