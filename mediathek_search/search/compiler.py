"""Compile a raw search string into a query tree."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from mediathek_search.exceptions import (
    ConversionError,
    EmptyQueryError,
    UnknownSelectorError,
    ValidationError,
)
from mediathek_search.search.ast_nodes import Field, Operator, QueryBody
from mediathek_search.search.builder import BoolQueryBuilder
from mediathek_search.search.converters import ConverterTable, text_query
from mediathek_search.search.tokenizer import Segment, tokenize

logger = logging.getLogger(__name__)

DEFAULT_FIELDS: tuple[Field, ...] = (Field.TITLE, Field.DESCRIPTION)


class QueryCompiler:
    """Turns search strings into query trees using a fixed converter table.

    A compiler holds no per-call state, so one instance can serve any
    number of (concurrent) :meth:`compile` calls.

    Args:
        converters: Validated converter table.
        default_fields: Fields matched by segments without a selector.
    """

    def __init__(
        self,
        converters: ConverterTable,
        default_fields: Iterable[Field] = DEFAULT_FIELDS,
    ) -> None:
        self.converters = converters
        self.default_fields = tuple(dict.fromkeys(default_fields))
        if not self.default_fields:
            raise ValidationError("default_fields", self.default_fields, "at least one is required")

    def _convert(self, segment: Segment) -> QueryBody:
        converter = self.converters.find(segment)
        if converter is not None:
            logger.debug("Segment %r claimed by %s", segment.raw_text, converter.field.value)
            return converter.convert(segment)

        if segment.selector is not None:
            raise UnknownSelectorError(segment.selector, segment.raw_text)

        try:
            return text_query(self.default_fields, segment.value, Operator.AND)
        except ValueError as e:
            raise ConversionError(None, segment.raw_text, str(e)) from e

    def compile(self, query_string: str) -> QueryBody:
        """Compile a search string.

        Args:
            query_string: Raw user input.

        Returns:
            The query tree. A single non-negated segment is returned as
            its own node; anything else is folded into a Bool node.

        Raises:
            TokenizeError: If the string is malformed or empty.
            UnknownSelectorError: If a selector matches no field.
            ConversionError: If a field rejects a segment's value.
        """
        segments = tokenize(query_string)
        if not segments:
            raise EmptyQueryError(query_string)
        logger.debug("Tokenized %r into %d segment(s)", query_string, len(segments))

        builder = BoolQueryBuilder()
        must: list[QueryBody] = []
        negated = 0
        for segment in segments:
            node = self._convert(segment)
            if segment.negated:
                builder.must_not(node)
                negated += 1
            else:
                builder.must(node)
                must.append(node)

        if len(must) == 1 and not negated:
            return must[0]
        return builder.build()


def compile_query(
    query_string: str,
    converters: ConverterTable,
    default_fields: Iterable[Field] = DEFAULT_FIELDS,
) -> QueryBody:
    """Compile ``query_string`` with a one-off :class:`QueryCompiler`."""
    return QueryCompiler(converters, default_fields).compile(query_string)
