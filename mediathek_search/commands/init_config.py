"""Initialize configuration file for mediathek-search."""

from __future__ import annotations

from importlib import resources
from pathlib import Path

import click

from mediathek_search.cli import Context, pass_context
from mediathek_search.config import get_default_config_path
from mediathek_search.utils.output import error, info, success


def _load_example_config() -> str:
    """Load the example configuration from package data."""
    return resources.files("mediathek_search").joinpath("config.example.toml").read_text()


@click.command("init-config")
@click.option(
    "--force",
    "-f",
    is_flag=True,
    default=False,
    help="Overwrite existing config file",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Output path for config file (default: ~/.config/mediathek-search/config.toml)",
)
@pass_context
def cli(ctx: Context, force: bool, output: Path | None) -> None:
    """Create a new configuration file with default settings.

    The file documents the default fields and every built-in selector,
    with commented-out examples for overriding aliases and symbols.

    Examples:

    \b
      # Create config at default location
      mediathek-search init-config

    \b
      # Create config at custom location
      mediathek-search init-config --output ./search.toml
    """
    config_path = output if output is not None else get_default_config_path()
    config_path = config_path.expanduser().resolve()

    if config_path.exists() and not force:
        error(
            f"Config file already exists: {config_path}",
            hint="Use --force to overwrite",
        )
        raise SystemExit(1)

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(_load_example_config())
    except OSError as e:
        error(f"Failed to write config file: {e}")
        raise SystemExit(1) from e

    success(f"Created config file: {config_path}")
    info("Edit this file to change default fields or selectors.")
