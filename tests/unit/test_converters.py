"""Unit tests for segment converters and the converter table."""

from __future__ import annotations

from datetime import date

import pytest

from mediathek_search.exceptions import ConversionError, SelectorConflictError
from mediathek_search.search.ast_nodes import Field, Operator, Range, TextMatch
from mediathek_search.search.converters import (
    ConverterTable,
    SelectorOverride,
    build_converter_table,
    date_converter,
    duration_converter,
    numeric_converter,
    parse_duration,
    parse_number,
    text_converter,
)
from mediathek_search.search.selector import SelectorRule
from mediathek_search.search.tokenizer import Segment


def _segment(selector: str | None, value: str) -> Segment:
    raw = f"{selector}:{value}" if selector is not None else value
    return Segment(raw_text=raw, selector=selector, value=value)


# ---------------------------------------------------------------------------
# Claiming
# ---------------------------------------------------------------------------


class TestClaims:
    def test_claims_matching_selector(self) -> None:
        converter = text_converter(Field.CHANNEL, SelectorRule("channel", symbols=("!",)))
        assert converter.claims(_segment("c", "arte"))
        assert converter.claims(_segment("!", "arte"))

    def test_ignores_unscoped_segment(self) -> None:
        converter = text_converter(Field.CHANNEL, SelectorRule("channel"))
        assert not converter.claims(_segment(None, "channel"))

    def test_ignores_other_selector(self) -> None:
        converter = text_converter(Field.CHANNEL, SelectorRule("channel"))
        assert not converter.claims(_segment("title", "arte"))


# ---------------------------------------------------------------------------
# Text fields
# ---------------------------------------------------------------------------


class TestTextConverter:
    def test_converts_to_single_field_match(self) -> None:
        converter = text_converter(Field.CHANNEL, SelectorRule("channel"))
        node = converter.convert(_segment("c", "arte"))
        assert node == TextMatch(fields=(Field.CHANNEL,), text="arte", operator=Operator.AND)

    def test_custom_operator(self) -> None:
        converter = text_converter(Field.TITLE, SelectorRule("title"), Operator.OR)
        node = converter.convert(_segment("t", "heute show"))
        assert node.operator is Operator.OR

    def test_empty_value(self) -> None:
        converter = text_converter(Field.CHANNEL, SelectorRule("channel"))
        with pytest.raises(ConversionError) as exc_info:
            converter.convert(_segment("c", ""))
        assert exc_info.value.field is Field.CHANNEL
        assert exc_info.value.raw_text == "c:"


# ---------------------------------------------------------------------------
# Numeric fields
# ---------------------------------------------------------------------------


class TestNumericConverter:
    @pytest.fixture
    def converter(self):
        return numeric_converter(Field.DURATION, SelectorRule("duration"))

    def test_exact(self, converter) -> None:
        assert converter.convert(_segment("d", "7")) == Range(Field.DURATION, min=7, max=7)

    def test_closed_range(self, converter) -> None:
        assert converter.convert(_segment("d", "5-10")) == Range(Field.DURATION, min=5, max=10)

    def test_open_upper(self, converter) -> None:
        assert converter.convert(_segment("d", "10-")) == Range(Field.DURATION, min=10)

    def test_open_lower(self, converter) -> None:
        assert converter.convert(_segment("d", "-20")) == Range(Field.DURATION, max=20)

    def test_float(self, converter) -> None:
        assert converter.convert(_segment("d", "1.5-2.5")) == Range(
            Field.DURATION, min=1.5, max=2.5
        )

    def test_equal_bounds(self, converter) -> None:
        assert converter.convert(_segment("d", "5-5")) == Range(Field.DURATION, min=5, max=5)

    def test_inverted_range(self, converter) -> None:
        with pytest.raises(ConversionError) as exc_info:
            converter.convert(_segment("d", "20-10"))
        assert exc_info.value.raw_text == "d:20-10"
        assert exc_info.value.field is Field.DURATION

    def test_exponent_is_not_a_range(self, converter) -> None:
        assert converter.convert(_segment("d", "1e-3")) == Range(
            Field.DURATION, min=0.001, max=0.001
        )

    def test_range_with_exponent_bound(self, converter) -> None:
        assert converter.convert(_segment("d", "1e-3-2")) == Range(
            Field.DURATION, min=0.001, max=2
        )

    def test_negative_bounds(self, converter) -> None:
        assert converter.convert(_segment("d", "-5--1")) == Range(Field.DURATION, min=-5, max=-1)

    def test_negative_open_upper(self, converter) -> None:
        assert converter.convert(_segment("d", "-5-")) == Range(Field.DURATION, min=-5)

    def test_negative_open_lower(self, converter) -> None:
        assert converter.convert(_segment("d", "--5")) == Range(Field.DURATION, max=-5)

    def test_leading_separator_is_open_lower(self, converter) -> None:
        assert converter.convert(_segment("d", "-5")) == Range(Field.DURATION, max=5)

    def test_negative_to_positive(self, converter) -> None:
        assert converter.convert(_segment("d", "-5-5")) == Range(Field.DURATION, min=-5, max=5)

    @pytest.mark.parametrize("value", ["abc", "", "-", "1-x", "nan"])
    def test_invalid(self, converter, value: str) -> None:
        with pytest.raises(ConversionError):
            converter.convert(_segment("d", value))


def test_parse_number() -> None:
    assert parse_number("42") == 42
    assert isinstance(parse_number("42"), int)
    assert parse_number("4.5") == 4.5
    with pytest.raises(ValueError):
        parse_number("inf")


# ---------------------------------------------------------------------------
# Durations
# ---------------------------------------------------------------------------


class TestDuration:
    @pytest.mark.parametrize(
        ("text", "minutes"),
        [("90", 90), ("90m", 90), ("2h", 120), ("1h30", 90), ("1h30m", 90), ("1H", 60)],
    )
    def test_parse(self, text: str, minutes: int) -> None:
        assert parse_duration(text) == minutes

    @pytest.mark.parametrize("text", ["", "h", "m", "1x", "1.5", "h30"])
    def test_parse_invalid(self, text: str) -> None:
        with pytest.raises(ValueError):
            parse_duration(text)

    def test_range_with_units(self) -> None:
        converter = duration_converter(Field.DURATION, SelectorRule("duration"))
        node = converter.convert(_segment("duration", "1h-1h30"))
        assert node == Range(Field.DURATION, min=60, max=90)


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------


class TestDate:
    @pytest.fixture
    def converter(self):
        return date_converter(Field.TIMESTAMP, SelectorRule("aired"))

    def test_exact_day(self, converter) -> None:
        node = converter.convert(_segment("a", "2024-03-01"))
        assert node == Range(Field.TIMESTAMP, min=date(2024, 3, 1), max=date(2024, 3, 1))

    def test_range(self, converter) -> None:
        node = converter.convert(_segment("a", "2024-01-01..2024-02-01"))
        assert node == Range(Field.TIMESTAMP, min=date(2024, 1, 1), max=date(2024, 2, 1))

    def test_open_ranges(self, converter) -> None:
        assert converter.convert(_segment("a", "2024-01-01..")).max is None
        assert converter.convert(_segment("a", "..2024-01-01")).min is None

    def test_invalid_date(self, converter) -> None:
        with pytest.raises(ConversionError) as exc_info:
            converter.convert(_segment("a", "2024-13-01"))
        assert "YYYY-MM-DD" in str(exc_info.value)

    def test_inverted_range(self, converter) -> None:
        with pytest.raises(ConversionError):
            converter.convert(_segment("a", "2024-02-01..2024-01-01"))


# ---------------------------------------------------------------------------
# Converter table
# ---------------------------------------------------------------------------


class TestConverterTable:
    def test_default_table_has_every_field(self, table: ConverterTable) -> None:
        assert {c.field for c in table} == set(Field)
        assert len(table) == len(Field)

    def test_lookup_by_field(self, table: ConverterTable) -> None:
        assert table[Field.DURATION].kind == "duration"
        assert table[Field.TIMESTAMP].kind == "date"

    def test_lookup_missing_field(self) -> None:
        with pytest.raises(KeyError):
            ConverterTable()[Field.TITLE]

    def test_find(self, table: ConverterTable) -> None:
        assert table.find(_segment("sen", "arte")).field is Field.CHANNEL
        assert table.find(_segment("#", "tatort")).field is Field.TOPIC
        assert table.find(_segment("xyz", "value")) is None
        assert table.find(_segment(None, "arte")) is None

    def test_overlapping_rules_rejected(self) -> None:
        with pytest.raises(SelectorConflictError) as exc_info:
            ConverterTable(
                [
                    text_converter(Field.TITLE, SelectorRule("title")),
                    text_converter(Field.TOPIC, SelectorRule("topic")),
                ]
            )
        assert exc_info.value.token == "t"
        assert exc_info.value.field is Field.TITLE
        assert exc_info.value.other is Field.TOPIC

    def test_duplicate_field_rejected(self) -> None:
        with pytest.raises(SelectorConflictError):
            ConverterTable(
                [
                    text_converter(Field.TITLE, SelectorRule("title")),
                    text_converter(Field.TITLE, SelectorRule("name")),
                ]
            )

    def test_extend_returns_new_table(self) -> None:
        base = ConverterTable([text_converter(Field.CHANNEL, SelectorRule("channel"))])
        extended = base.extend(numeric_converter(Field.DURATION, SelectorRule("length")))
        assert len(base) == 1
        assert len(extended) == 2
        assert extended.find(_segment("len", "5")).field is Field.DURATION

    def test_extend_validates(self, table: ConverterTable) -> None:
        with pytest.raises(SelectorConflictError):
            table.extend(text_converter(Field.TITLE, SelectorRule("headline")))

    def test_order_is_kept(self, table: ConverterTable) -> None:
        assert [c.field for c in table][:2] == [Field.CHANNEL, Field.TOPIC]


class TestBuildConverterTable:
    def test_alias_override(self) -> None:
        table = build_converter_table(
            {Field.CHANNEL: SelectorOverride(aliases=("station",))}
        )
        assert table[Field.CHANNEL].rule.aliases == ("station",)
        assert table[Field.CHANNEL].rule.symbols == ("!",)
        assert table.find(_segment("st", "arte")).field is Field.CHANNEL
        assert table.find(_segment("se", "arte")) is None

    def test_symbol_override(self) -> None:
        table = build_converter_table({Field.DURATION: SelectorOverride(symbols=("~",))})
        assert table.find(_segment("~", "10")).field is Field.DURATION

    def test_conflicting_override(self) -> None:
        with pytest.raises(SelectorConflictError):
            build_converter_table({Field.DURATION: SelectorOverride(aliases=("title",))})
