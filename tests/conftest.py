"""Shared pytest fixtures."""

from __future__ import annotations

import shutil
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from mediathek_search.search.compiler import QueryCompiler
from mediathek_search.search.converters import ConverterTable, default_converter_table

if TYPE_CHECKING:
    from collections.abc import Generator


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    path = Path(tempfile.mkdtemp())
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def sample_config(temp_dir: Path) -> Path:
    """Create a sample config file."""
    config_path = temp_dir / "config.toml"
    config_path.write_text("""[search]
default_fields = ["title", "topic"]

[display]
colored_output = false

[selectors.channel]
aliases = ["sender", "station"]

[selectors.duration]
symbols = ["~"]
""")
    return config_path


@pytest.fixture
def table() -> ConverterTable:
    """The built-in converter table."""
    return default_converter_table()


@pytest.fixture
def compiler(table: ConverterTable) -> QueryCompiler:
    """A compiler over the built-in table with title/description defaults."""
    return QueryCompiler(table)
