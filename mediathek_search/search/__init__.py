"""Search string compilation: tokenizer, selectors, converters, compiler."""

from mediathek_search.search.ast_nodes import (
    Bool,
    Field,
    Operator,
    QueryBody,
    Range,
    TextMatch,
    to_dict,
)
from mediathek_search.search.compiler import DEFAULT_FIELDS, QueryCompiler, compile_query
from mediathek_search.search.converters import (
    ConverterTable,
    SegmentConverter,
    SelectorOverride,
    build_converter_table,
    date_converter,
    default_converter_table,
    duration_converter,
    numeric_converter,
    text_converter,
)
from mediathek_search.search.selector import SelectorRule
from mediathek_search.search.tokenizer import Segment, tokenize

__all__ = [
    "DEFAULT_FIELDS",
    "Bool",
    "ConverterTable",
    "Field",
    "Operator",
    "QueryBody",
    "QueryCompiler",
    "Range",
    "Segment",
    "SegmentConverter",
    "SelectorOverride",
    "SelectorRule",
    "TextMatch",
    "build_converter_table",
    "compile_query",
    "date_converter",
    "default_converter_table",
    "duration_converter",
    "numeric_converter",
    "text_converter",
    "to_dict",
    "tokenize",
]
