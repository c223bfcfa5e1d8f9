"""Exception hierarchy for mediathek-search."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mediathek_search.search.ast_nodes import Field


class MediathekSearchError(Exception):
    """Base exception for all mediathek-search errors.

    All exceptions in this package inherit from this class,
    allowing callers to catch all mediathek-search errors with
    a single except clause.
    """

    pass


# Configuration Errors
class ConfigError(MediathekSearchError):
    """Configuration-related errors."""

    pass


class ConfigParseError(ConfigError):
    """Configuration file has invalid syntax."""

    def __init__(self, path: Path, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"Invalid config at {path}: {detail}")


class ConfigValidationError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: object, reason: str) -> None:
        self.key = key
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid config value for '{key}': {reason}")


# Validation Errors
class ValidationError(MediathekSearchError):
    """A query node or builder was given an invalid value."""

    def __init__(self, field: str, value: object, reason: str) -> None:
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field}: {reason}")


# Registration Errors
class SelectorConflictError(MediathekSearchError):
    """Two registered fields claim the same selector token."""

    def __init__(self, field: Field, other: Field, token: str) -> None:
        self.field = field
        self.other = other
        self.token = token
        super().__init__(
            f"Selector '{token}' of field '{field.value}' "
            f"overlaps with field '{other.value}'"
        )


# Query Errors
class SearchSyntaxError(MediathekSearchError):
    """Base class for errors caused by the user's search string."""

    def __init__(self, query: str, message: str) -> None:
        self.query = query
        super().__init__(message)


class TokenizeError(SearchSyntaxError):
    """The search string is malformed (unterminated quote, dangling escape)."""

    def __init__(self, query: str, message: str, column: int | None = None) -> None:
        self.column = column
        if column is not None:
            message = f"{message} at column {column}"
        super().__init__(query, f"Invalid search syntax in '{query}': {message}")


class EmptyQueryError(TokenizeError):
    """The search string contains no segments."""

    def __init__(self, query: str) -> None:
        super().__init__(query, "query is empty")


class UnknownSelectorError(SearchSyntaxError):
    """A selector was given that no registered field recognizes."""

    def __init__(self, selector: str, raw_text: str) -> None:
        self.selector = selector
        self.raw_text = raw_text
        super().__init__(raw_text, f"Unknown selector '{selector}' in '{raw_text}'")


class ConversionError(SearchSyntaxError):
    """A field rejected the value of a segment it claimed."""

    def __init__(self, field: Field | None, raw_text: str, reason: str) -> None:
        self.field = field
        self.raw_text = raw_text
        self.reason = reason
        name = field.value if field is not None else "text"
        super().__init__(raw_text, f"Invalid {name} value in '{raw_text}': {reason}")
