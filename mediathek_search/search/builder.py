"""Fluent builders for query nodes.

Each builder collects parts through chained calls and validates that
every required part is present when :meth:`build` is called::

    query = TextQueryBuilder().fields(Field.CHANNEL).text("arte").build()
"""

from __future__ import annotations

from mediathek_search.exceptions import ValidationError
from mediathek_search.search.ast_nodes import (
    Bool,
    Field,
    Operator,
    QueryBody,
    Range,
    RangeValue,
    TextMatch,
)


class TextQueryBuilder:
    """Build a :class:`TextMatch` node."""

    def __init__(self) -> None:
        self._fields: list[Field] = []
        self._text: str | None = None
        self._operator = Operator.AND

    def fields(self, *fields: Field) -> TextQueryBuilder:
        for f in fields:
            if f not in self._fields:
                self._fields.append(f)
        return self

    def text(self, text: str) -> TextQueryBuilder:
        self._text = text
        return self

    def operator(self, operator: Operator) -> TextQueryBuilder:
        self._operator = operator
        return self

    def build(self) -> TextMatch:
        if not self._fields:
            raise ValidationError("fields", None, "no fields specified")
        if self._text is None:
            raise ValidationError("text", None, "no text specified")
        return TextMatch(fields=tuple(self._fields), text=self._text, operator=self._operator)


class RangeQueryBuilder:
    """Build a :class:`Range` node."""

    def __init__(self) -> None:
        self._field: Field | None = None
        self._min: RangeValue | None = None
        self._max: RangeValue | None = None

    def field(self, field: Field) -> RangeQueryBuilder:
        self._field = field
        return self

    def min(self, value: RangeValue | None) -> RangeQueryBuilder:
        self._min = value
        return self

    def max(self, value: RangeValue | None) -> RangeQueryBuilder:
        self._max = value
        return self

    def exact(self, value: RangeValue) -> RangeQueryBuilder:
        self._min = value
        self._max = value
        return self

    def build(self) -> Range:
        if self._field is None:
            raise ValidationError("field", None, "no field specified")
        return Range(field=self._field, min=self._min, max=self._max)


class BoolQueryBuilder:
    """Build a :class:`Bool` node."""

    def __init__(self) -> None:
        self._must: list[QueryBody] = []
        self._must_not: list[QueryBody] = []
        self._should: list[QueryBody] = []

    def must(self, *queries: QueryBody) -> BoolQueryBuilder:
        self._must.extend(queries)
        return self

    def must_not(self, *queries: QueryBody) -> BoolQueryBuilder:
        self._must_not.extend(queries)
        return self

    def should(self, *queries: QueryBody) -> BoolQueryBuilder:
        self._should.extend(queries)
        return self

    def build(self) -> Bool:
        return Bool(
            must=tuple(self._must),
            must_not=tuple(self._must_not),
            should=tuple(self._should),
        )
