"""Per-field segment converters and the registration table.

A converter is data: the field it serves, the selector rule that decides
which segments it claims, and a pure function turning the segment value
into a query node. Value functions signal bad input with ``ValueError``;
:meth:`SegmentConverter.convert` reports it as a :class:`ConversionError`
tagged with the segment text.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, replace
from datetime import date

from mediathek_search.exceptions import (
    ConversionError,
    SelectorConflictError,
    ValidationError,
)
from mediathek_search.search.ast_nodes import Field, Operator, QueryBody, RangeValue
from mediathek_search.search.builder import RangeQueryBuilder, TextQueryBuilder
from mediathek_search.search.selector import SelectorRule
from mediathek_search.search.tokenizer import Segment

logger = logging.getLogger(__name__)

RANGE_SEPARATOR = "-"
DATE_RANGE_SEPARATOR = ".."

_EXPONENT_MARKERS = "eE"

_DURATION_RE = re.compile(r"^(?:(?P<hours>\d+)h)?(?:(?P<minutes>\d+)m?)?$", re.IGNORECASE)


@dataclass(frozen=True)
class SegmentConverter:
    """Claims segments by selector and converts their values for one field.

    Attributes:
        field: The field this converter produces queries for.
        rule: Selector rule deciding which segments are claimed.
        convert_value: Pure function from segment value to query node.
        kind: Short description of the value type, for help output.
    """

    field: Field
    rule: SelectorRule
    convert_value: Callable[[str], QueryBody]
    kind: str = "text"

    def claims(self, segment: Segment) -> bool:
        return segment.selector is not None and self.rule.matches(segment.selector)

    def convert(self, segment: Segment) -> QueryBody:
        try:
            return self.convert_value(segment.value)
        except ValidationError as e:
            raise ConversionError(self.field, segment.raw_text, e.reason) from e
        except ValueError as e:
            raise ConversionError(self.field, segment.raw_text, str(e)) from e


# ---------------------------------------------------------------------------
# Value conversion
# ---------------------------------------------------------------------------


def text_query(fields: Iterable[Field], text: str, operator: Operator = Operator.AND) -> QueryBody:
    """Build a text match, rejecting blank text."""
    if not text.strip():
        raise ValueError("a search text is required")
    return TextQueryBuilder().fields(*fields).text(text).operator(operator).build()


def _range_split_index(text: str, separator: str) -> int | None:
    """Find the separator between the two bounds of a range.

    A separator right after an exponent marker or after another separator
    is the sign of the following number, so ``1e-3`` stays whole and
    ``-5--1`` splits into ``-5`` and ``-1``. A leading separator only
    splits the value when no later one does, which makes ``-20`` an open
    lower bound and ``--5`` everything up to ``-5``.
    """
    candidates = [
        index
        for index in range(len(text))
        if text.startswith(separator, index)
        and (index == 0 or text[index - 1] not in _EXPONENT_MARKERS + separator[-1])
    ]
    for index in candidates:
        if index > 0:
            return index
    return candidates[0] if candidates else None


def range_query(
    field: Field,
    text: str,
    parse: Callable[[str], RangeValue],
    separator: str = RANGE_SEPARATOR,
) -> QueryBody:
    """Build a range from ``a``, ``a<sep>b``, ``a<sep>`` or ``<sep>b``."""
    text = text.strip()
    if not text:
        raise ValueError("a value is required")

    builder = RangeQueryBuilder().field(field)
    index = _range_split_index(text, separator)
    if index is None:
        return builder.exact(parse(text)).build()

    low = text[:index].strip()
    high = text[index + len(separator) :].strip()
    if not low and not high:
        raise ValueError("a range needs at least one bound")
    if low:
        builder.min(parse(low))
    if high:
        builder.max(parse(high))
    return builder.build()


def parse_number(text: str) -> int | float:
    """Parse an integer, falling back to a float."""
    try:
        return int(text)
    except ValueError:
        pass
    try:
        value = float(text)
    except ValueError:
        raise ValueError(f"'{text}' is not a number") from None
    if not math.isfinite(value):
        raise ValueError(f"'{text}' is not a finite number")
    return value


def parse_duration(text: str) -> int:
    """Parse a duration into minutes: ``90``, ``90m``, ``2h``, ``1h30``, ``1h30m``."""
    match = _DURATION_RE.match(text)
    if match is None or not (match.group("hours") or match.group("minutes")):
        raise ValueError(f"'{text}' is not a duration")
    hours = int(match.group("hours") or 0)
    minutes = int(match.group("minutes") or 0)
    return hours * 60 + minutes


def parse_date(text: str) -> date:
    """Parse an ISO date (``YYYY-MM-DD``)."""
    try:
        return date.fromisoformat(text)
    except ValueError:
        raise ValueError(f"'{text}' is not a date (expected YYYY-MM-DD)") from None


# ---------------------------------------------------------------------------
# Converter factories
# ---------------------------------------------------------------------------


def text_converter(
    field: Field, rule: SelectorRule, operator: Operator = Operator.AND
) -> SegmentConverter:
    """Converter matching the value as text against ``field`` only."""
    return SegmentConverter(
        field=field,
        rule=rule,
        convert_value=lambda value: text_query((field,), value, operator),
        kind="text",
    )


def numeric_converter(
    field: Field,
    rule: SelectorRule,
    parse: Callable[[str], RangeValue] = parse_number,
) -> SegmentConverter:
    """Converter for exact numbers and ``min-max`` ranges."""
    return SegmentConverter(
        field=field,
        rule=rule,
        convert_value=lambda value: range_query(field, value, parse),
        kind="number",
    )


def duration_converter(field: Field, rule: SelectorRule) -> SegmentConverter:
    """Converter for durations in minutes, exact or as ``min-max`` ranges."""
    return SegmentConverter(
        field=field,
        rule=rule,
        convert_value=lambda value: range_query(field, value, parse_duration),
        kind="duration",
    )


def date_converter(field: Field, rule: SelectorRule) -> SegmentConverter:
    """Converter for ISO dates; ranges use ``..`` since dates contain ``-``."""
    return SegmentConverter(
        field=field,
        rule=rule,
        convert_value=lambda value: range_query(
            field, value, parse_date, separator=DATE_RANGE_SEPARATOR
        ),
        kind="date",
    )


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


class ConverterTable:
    """Immutable, validated, ordered collection of segment converters.

    The table refuses two converters for the same field and any pair of
    selector rules that could both claim one token, so dispatch never
    depends on registration order.
    """

    def __init__(self, converters: Iterable[SegmentConverter] = ()) -> None:
        self._converters: tuple[SegmentConverter, ...] = tuple(converters)
        self._validate()
        logger.debug(
            "Registered converters: %s",
            ", ".join(c.field.value for c in self._converters),
        )

    def _validate(self) -> None:
        for index, converter in enumerate(self._converters):
            for other in self._converters[index + 1 :]:
                if converter.field is other.field:
                    raise SelectorConflictError(
                        converter.field, other.field, converter.rule.canonical_name
                    )
                token = converter.rule.conflicting_token(other.rule)
                if token is not None:
                    raise SelectorConflictError(converter.field, other.field, token)

    def __iter__(self) -> Iterator[SegmentConverter]:
        return iter(self._converters)

    def __len__(self) -> int:
        return len(self._converters)

    def __getitem__(self, field: Field) -> SegmentConverter:
        for converter in self._converters:
            if converter.field is field:
                return converter
        raise KeyError(field)

    def extend(self, *converters: SegmentConverter) -> ConverterTable:
        """Return a new table with ``converters`` appended."""
        return ConverterTable((*self._converters, *converters))

    def find(self, segment: Segment) -> SegmentConverter | None:
        """Return the converter claiming ``segment``, if any."""
        for converter in self._converters:
            if converter.claims(segment):
                return converter
        return None


DEFAULT_RULES: dict[Field, SelectorRule] = {
    Field.CHANNEL: SelectorRule("channel", aliases=("sender",), symbols=("!",)),
    Field.TOPIC: SelectorRule("programme", aliases=("program",), symbols=("#",)),
    Field.TITLE: SelectorRule("title", aliases=("titel",), symbols=("+",)),
    Field.DESCRIPTION: SelectorRule("info", aliases=("beschreibung",), symbols=("*",)),
    Field.DURATION: SelectorRule("duration", aliases=("dauer",)),
    Field.TIMESTAMP: SelectorRule("aired", aliases=("ausgestrahlt",), symbols=("@",)),
}

_FACTORIES: dict[Field, Callable[[Field, SelectorRule], SegmentConverter]] = {
    Field.CHANNEL: text_converter,
    Field.TOPIC: text_converter,
    Field.TITLE: text_converter,
    Field.DESCRIPTION: text_converter,
    Field.DURATION: duration_converter,
    Field.TIMESTAMP: date_converter,
}


@dataclass(frozen=True)
class SelectorOverride:
    """Replacement aliases and/or symbols for a field's default rule."""

    aliases: tuple[str, ...] | None = None
    symbols: tuple[str, ...] | None = None


def build_converter_table(
    overrides: Mapping[Field, SelectorOverride] | None = None,
) -> ConverterTable:
    """Build the default table, applying selector overrides per field.

    Raises:
        SelectorConflictError: If the overrides make two fields overlap.
    """
    overrides = overrides or {}
    converters = []
    for field, rule in DEFAULT_RULES.items():
        override = overrides.get(field)
        if override is not None:
            if override.aliases is not None:
                rule = replace(rule, aliases=override.aliases)
            if override.symbols is not None:
                rule = replace(rule, symbols=override.symbols)
        converters.append(_FACTORIES[field](field, rule))
    return ConverterTable(converters)


def default_converter_table() -> ConverterTable:
    """The built-in table of converters for every field."""
    return build_converter_table()
