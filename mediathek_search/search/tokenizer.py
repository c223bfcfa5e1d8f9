"""Split a raw search string into segments.

Segments are separated by whitespace. Within a segment, the first ``:``
outside of quotes separates the selector from the value::

    -c:arte "heute show" title:"tagesschau: 20 uhr"

yields a negated ``c`` segment, an unscoped phrase, and a ``title``
segment whose value contains a literal colon.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from lark import Lark, Token, Transformer, UnexpectedCharacters, UnexpectedInput

from mediathek_search.exceptions import TokenizeError

QUOTE = '"'
ESCAPE = "\\"
SEPARATOR = ":"
NEGATION = "-"

_GRAMMAR = r"""
start: segment (_WS segment)*

segment: _piece+

_piece: QUOTED | SEP | BARE

QUOTED: /"(?:[^"\\]|\\.)*"/s
SEP: ":"
BARE: /(?:[^\s":\\]|\\.)+/s
_WS: /\s+/
"""

_UNESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)


@dataclass(frozen=True)
class Segment:
    """One whitespace-delimited unit of a search string.

    Attributes:
        raw_text: The segment exactly as typed, negation marker included.
        selector: Text before the first separator, or None if there is none.
        value: Unquoted, unescaped text after the separator.
        negated: Whether the segment was prefixed with ``-``.
    """

    raw_text: str
    selector: str | None
    value: str
    negated: bool = False


def _unescape(text: str) -> str:
    return _UNESCAPE_RE.sub(r"\1", text)


def _piece_text(piece: Token) -> str:
    if piece.type == "QUOTED":
        return _unescape(piece[1:-1])
    if piece.type == "BARE":
        return _unescape(piece)
    return str(piece)


class _SegmentTransformer(Transformer):
    """Transform the Lark parse tree into Segment records."""

    def start(self, items: list[Any]) -> list[Segment]:
        return list(items)

    def segment(self, pieces: list[Token]) -> Segment:
        raw_text = "".join(pieces)
        negated = False

        first = pieces[0]
        if first.type == "BARE" and first.startswith(NEGATION) and raw_text != NEGATION:
            negated = True
            rest = first[len(NEGATION) :]
            pieces = ([first.update(value=rest)] if rest else []) + pieces[1:]

        texts = [(piece.type, _piece_text(piece)) for piece in pieces]
        for index, (kind, _) in enumerate(texts):
            if kind == "SEP":
                selector = "".join(text for _, text in texts[:index])
                value = "".join(text for _, text in texts[index + 1 :])
                return Segment(
                    raw_text=raw_text,
                    selector=selector or None,
                    value=value,
                    negated=negated,
                )

        return Segment(
            raw_text=raw_text,
            selector=None,
            value="".join(text for _, text in texts),
            negated=negated,
        )


_parser = Lark(_GRAMMAR, parser="lalr")
_transformer = _SegmentTransformer()


def tokenize(query_string: str) -> list[Segment]:
    """Split a search string into segments.

    Args:
        query_string: The raw search string.

    Returns:
        Segments in input order; empty for a blank string.

    Raises:
        TokenizeError: On an unterminated quote or a dangling escape.
    """
    stripped = query_string.strip()
    if not stripped:
        return []
    offset = len(query_string) - len(query_string.lstrip())

    try:
        tree = _parser.parse(stripped)
    except UnexpectedCharacters as e:
        if e.char == QUOTE:
            reason = "unterminated quote"
        elif e.char == ESCAPE:
            reason = "dangling escape character"
        else:
            reason = f"unexpected character {e.char!r}"
        raise TokenizeError(query_string, reason, column=e.column + offset) from e
    except UnexpectedInput as e:
        raise TokenizeError(query_string, str(e)) from e

    return _transformer.transform(tree)
