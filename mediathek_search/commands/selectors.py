"""List the selectors that designate each searchable field."""

from __future__ import annotations

import click

from mediathek_search.cli import Context, pass_context
from mediathek_search.exceptions import SelectorConflictError
from mediathek_search.utils.output import console, create_table, error

EXIT_CONFIG_ERROR = 4


@click.command("selectors")
@pass_context
def cli(ctx: Context) -> None:
    """Show the selectors of every field.

    Any prefix of a name or alias selects its field (c, ch and channel
    all select the channel); symbols must be typed exactly.
    """
    config = ctx.config
    try:
        table_data = config.converter_table()
    except SelectorConflictError as e:
        error(str(e), hint="Check the [selectors] sections of your config file")
        raise SystemExit(EXIT_CONFIG_ERROR) from e

    table = create_table(title="Selectors")
    table.add_column("Field", style="query.field")
    table.add_column("Name")
    table.add_column("Aliases")
    table.add_column("Symbols")
    table.add_column("Value")

    for converter in table_data:
        rule = converter.rule
        table.add_row(
            converter.field.value,
            rule.canonical_name,
            ", ".join(rule.aliases),
            " ".join(rule.symbols),
            converter.kind,
        )

    console.print(table)
    defaults = ", ".join(f.value for f in config.default_fields)
    console.print(f"Text without a selector searches: [query.field]{defaults}[/query.field]")
