"""Selector rules: which tokens designate a field.

A token designates a field when it is a non-empty prefix of the field's
canonical name or of one of its aliases (``c``, ``cha`` and ``channel``
all designate the channel), or when it is exactly one of the field's bare
symbols (``!``). Matching ignores case.
"""

from __future__ import annotations

from dataclasses import dataclass

from mediathek_search.search.tokenizer import ESCAPE, NEGATION, QUOTE, SEPARATOR

# Characters with a meaning to the tokenizer, never part of a selector name.
RESERVED_CHARACTERS = frozenset((SEPARATOR, QUOTE, ESCAPE))


def check_name(name: str) -> str:
    """Validate a selector name and return it casefolded.

    Raises:
        ValueError: If the name is empty, starts with the negation marker,
            or contains whitespace or a reserved character.
    """
    if not name:
        raise ValueError("selector names must not be empty")
    if name.startswith(NEGATION):
        raise ValueError(f"selector name {name!r} must not start with {NEGATION!r}")
    if any(ch.isspace() or ch in RESERVED_CHARACTERS for ch in name):
        raise ValueError(f"selector name {name!r} contains a reserved character")
    return name.casefold()


def check_symbol(symbol: str) -> str:
    """Validate a selector symbol.

    Raises:
        ValueError: If the symbol is not one character, or is whitespace,
            the negation marker, or a reserved character.
    """
    if len(symbol) != 1:
        raise ValueError(f"selector symbol {symbol!r} must be a single character")
    if symbol.isspace() or symbol == NEGATION or symbol in RESERVED_CHARACTERS:
        raise ValueError(f"selector symbol {symbol!r} is reserved")
    return symbol


@dataclass(frozen=True)
class SelectorRule:
    """Selector spellings for a single field.

    Attributes:
        canonical_name: Full selector name; every prefix of it matches.
        aliases: Alternate names, prefix-matched like the canonical name.
        symbols: Single-character shortcuts, matched exactly.
    """

    canonical_name: str
    aliases: tuple[str, ...] = ()
    symbols: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        # Normalize once so matching only has to casefold the token.
        object.__setattr__(self, "canonical_name", check_name(self.canonical_name))
        object.__setattr__(self, "aliases", tuple(check_name(a) for a in self.aliases))
        object.__setattr__(self, "symbols", tuple(check_symbol(s) for s in self.symbols))

    @property
    def names(self) -> tuple[str, ...]:
        """Canonical name followed by the aliases."""
        return (self.canonical_name, *self.aliases)

    def matches(self, token: str) -> bool:
        """Return whether ``token`` designates this rule's field."""
        if not token:
            return False
        if token in self.symbols:
            return True
        token = token.casefold()
        return any(name.startswith(token) for name in self.names)

    def conflicting_token(self, other: SelectorRule) -> str | None:
        """Return a token matched by both rules, or None if they are disjoint.

        Two prefix-matched names share a token exactly when they start
        with the same character, so comparing first characters covers
        every abbreviation.
        """
        for name in self.names:
            for other_name in other.names:
                if name[0] == other_name[0]:
                    return name[0]
        for symbol in self.symbols:
            if other.matches(symbol):
                return symbol
        for symbol in other.symbols:
            if self.matches(symbol):
                return symbol
        return None

    def overlaps(self, other: SelectorRule) -> bool:
        return self.conflicting_token(other) is not None

    def selectors(self) -> tuple[str, ...]:
        """All spellings, for help output."""
        return (*self.names, *self.symbols)
