"""Configuration management for mediathek-search."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomli_w

from mediathek_search.exceptions import (
    ConfigParseError,
    ConfigValidationError,
)
from mediathek_search.search.ast_nodes import Field
from mediathek_search.search.compiler import DEFAULT_FIELDS, QueryCompiler
from mediathek_search.search.converters import (
    ConverterTable,
    SelectorOverride,
    build_converter_table,
)
from mediathek_search.search.selector import check_name, check_symbol


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    return Path.home() / ".config" / "mediathek-search" / "config.toml"


@dataclass
class Config:
    """Application configuration.

    Attributes:
        default_fields: Fields searched by text without a selector.
        selector_overrides: Per-field replacement aliases/symbols.
        colored_output: Whether to use colored terminal output.
        config_path: Path where config was loaded from (None if defaults).
    """

    default_fields: tuple[Field, ...] = DEFAULT_FIELDS
    selector_overrides: dict[Field, SelectorOverride] = field(default_factory=dict)
    colored_output: bool = True
    config_path: Path | None = None

    def validate(self) -> list[str]:
        """Validate configuration values.

        Returns:
            List of warning messages for non-fatal issues.

        Raises:
            ConfigValidationError: If a critical validation fails.
        """
        warnings: list[str] = []

        if not self.default_fields:
            raise ConfigValidationError(
                "search.default_fields", list(self.default_fields), "must not be empty"
            )

        # Duration and timestamp take ranges, not text
        for f in self.default_fields:
            if f in (Field.DURATION, Field.TIMESTAMP):
                warnings.append(
                    f"search.default_fields contains '{f.value}', "
                    f"free text will never match it"
                )

        return warnings

    def converter_table(self) -> ConverterTable:
        """Build the converter table with this config's selector overrides.

        Raises:
            SelectorConflictError: If the overrides make two fields overlap.
        """
        return build_converter_table(self.selector_overrides)

    def compiler(self) -> QueryCompiler:
        """Build a query compiler from this configuration."""
        return QueryCompiler(self.converter_table(), self.default_fields)


def load_config(config_path: Path | None = None) -> tuple[Config, list[str]]:
    """Load configuration from file or use defaults.

    Args:
        config_path: Explicit config file path. If None, uses default location.

    Returns:
        Tuple of (Config object, list of warning messages).

    Raises:
        ConfigParseError: If config file exists but has invalid syntax.
        ConfigValidationError: If config values are invalid.
    """
    warnings: list[str] = []

    if config_path is None:
        config_path = get_default_config_path()

    config_path = config_path.expanduser().resolve()

    if not config_path.exists():
        # Use defaults
        config = Config()
        warnings.append(
            f"No config file found at {config_path}. Using defaults. "
            f"Create config with: mediathek-search init-config"
        )
        config_warnings = config.validate()
        return config, warnings + config_warnings

    # Load from file
    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(config_path, str(e)) from e

    config = _parse_config_dict(data, config_path)
    config_warnings = config.validate()

    return config, warnings + config_warnings


def _parse_field(key: str, value: object) -> Field:
    """Parse a field name like ``"title"``."""
    if not isinstance(value, str):
        raise ConfigValidationError(key, value, "must be a field name string")
    try:
        return Field(value.lower())
    except ValueError:
        valid = ", ".join(f.value for f in Field)
        raise ConfigValidationError(key, value, f"unknown field (valid: {valid})") from None


def _parse_string_list(key: str, value: object) -> tuple[str, ...]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigValidationError(key, value, "must be a list of strings")
    return tuple(value)


def _parse_selector_override(key: str, section: object) -> SelectorOverride:
    if not isinstance(section, dict):
        raise ConfigValidationError(key, section, "must be a table")

    aliases = None
    symbols = None
    if "aliases" in section:
        aliases = _parse_string_list(f"{key}.aliases", section["aliases"])
    if "symbols" in section:
        symbols = _parse_string_list(f"{key}.symbols", section["symbols"])
        for symbol in symbols:
            try:
                check_symbol(symbol)
            except ValueError as e:
                raise ConfigValidationError(f"{key}.symbols", symbol, str(e)) from None
    for alias in aliases or ():
        try:
            check_name(alias)
        except ValueError as e:
            raise ConfigValidationError(f"{key}.aliases", alias, str(e)) from None
    return SelectorOverride(aliases=aliases, symbols=symbols)


def _parse_config_dict(data: dict[str, Any], config_path: Path) -> Config:
    """Parse configuration dictionary into Config object."""
    config = Config(config_path=config_path)

    # Parse [search] section
    search = data.get("search", {})
    if "default_fields" in search:
        value = search["default_fields"]
        if not isinstance(value, list):
            raise ConfigValidationError("search.default_fields", value, "must be a list")
        config.default_fields = tuple(
            _parse_field("search.default_fields", v) for v in value
        )

    # Parse [display] section
    display = data.get("display", {})
    if "colored_output" in display:
        value = display["colored_output"]
        if not isinstance(value, bool):
            raise ConfigValidationError("display.colored_output", value, "must be a boolean")
        config.colored_output = value

    # Parse [selectors.<field>] sections
    selectors = data.get("selectors", {})
    if not isinstance(selectors, dict):
        raise ConfigValidationError("selectors", selectors, "must be a table")
    for name, section in selectors.items():
        key = f"selectors.{name}"
        config.selector_overrides[_parse_field(key, name)] = _parse_selector_override(
            key, section
        )

    return config


def save_config(config: Config, config_path: Path | None = None) -> None:
    """Save configuration to file.

    Args:
        config: Configuration to save.
        config_path: Path to save to. If None, uses config.config_path or default.
    """
    if config_path is None:
        config_path = config.config_path or get_default_config_path()

    config_path = config_path.expanduser().resolve()

    # Ensure directory exists
    config_path.parent.mkdir(parents=True, exist_ok=True)

    # Build TOML structure
    data: dict[str, Any] = {
        "search": {
            "default_fields": [f.value for f in config.default_fields],
        },
        "display": {
            "colored_output": config.colored_output,
        },
    }

    # Build [selectors.<field>] sections (only overridden parts)
    selectors: dict[str, Any] = {}
    for selector_field, override in config.selector_overrides.items():
        section: dict[str, Any] = {}
        if override.aliases is not None:
            section["aliases"] = list(override.aliases)
        if override.symbols is not None:
            section["symbols"] = list(override.symbols)
        if section:
            selectors[selector_field.value] = section
    if selectors:
        data["selectors"] = selectors

    with open(config_path, "wb") as f:
        tomli_w.dump(data, f)
