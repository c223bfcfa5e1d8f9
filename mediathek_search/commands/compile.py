"""Compile a search string and show the resulting query tree."""

from __future__ import annotations

import json

import click
from rich.markup import escape
from rich.tree import Tree

from mediathek_search.cli import Context, pass_context
from mediathek_search.exceptions import (
    ConversionError,
    SelectorConflictError,
    TokenizeError,
    UnknownSelectorError,
)
from mediathek_search.search.ast_nodes import Bool, QueryBody, Range, TextMatch, to_dict
from mediathek_search.utils.output import console, debug, error, verbose

EXIT_SUCCESS = 0
EXIT_SYNTAX_ERROR = 1
EXIT_UNKNOWN_SELECTOR = 2
EXIT_CONVERSION_ERROR = 3
EXIT_CONFIG_ERROR = 4


def _node_label(node: QueryBody) -> str:
    """Single-line rich markup for a leaf node."""
    if isinstance(node, TextMatch):
        fields = ", ".join(f.value for f in node.fields)
        return (
            f"[query.field]{fields}[/query.field] ~ "
            f"[query.value]{escape(repr(node.text))}[/query.value] ({node.operator.value})"
        )
    if isinstance(node, Range):
        low = "" if node.min is None else str(node.min)
        high = "" if node.max is None else str(node.max)
        bounds = escape(f"[{low} .. {high}]")
        return f"[query.field]{node.field.value}[/query.field] in {bounds}"
    return "[query.bool]bool[/query.bool]"


def build_tree(node: QueryBody, tree: Tree | None = None) -> Tree:
    """Build a rich Tree mirroring the query tree."""
    label = _node_label(node)
    branch = Tree(label) if tree is None else tree.add(label)
    if isinstance(node, Bool):
        for name in ("must", "must_not", "should"):
            clauses = getattr(node, name)
            if not clauses:
                continue
            style = "query.negated" if name == "must_not" else "query.bool"
            group = branch.add(f"[{style}]{name}[/{style}]")
            for clause in clauses:
                build_tree(clause, group)
    return branch


@click.command("compile")
@click.argument("query", nargs=-1, required=True)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["tree", "json"]),
    default="tree",
    help="Output format (default: tree)",
)
@pass_context
def cli(ctx: Context, query: tuple[str, ...], output_format: str) -> None:
    """Compile a search string into a query tree.

    QUERY words are joined with spaces. Put -- before the query when it
    starts with a negated clause.

    Examples:

    \b
      # Free text against the default fields
      mediathek-search compile tatort

    \b
      # Channel abbreviation, exclusion and a duration range
      mediathek-search compile -- '-c:ard krimi duration:80-100'

    \b
      # Machine-readable output
      mediathek-search compile --format json 'aired:2024-01-01..'
    """
    config = ctx.config
    query_string = " ".join(query)

    try:
        compiler = config.compiler()
    except SelectorConflictError as e:
        error(str(e), hint="Check the [selectors] sections of your config file")
        raise SystemExit(EXIT_CONFIG_ERROR) from e

    verbose(f"Compiling: {escape(query_string)}")
    try:
        node = compiler.compile(query_string)
    except TokenizeError as e:
        error(str(e), hint='Close quotes with " and escape literal quotes with \\"')
        raise SystemExit(EXIT_SYNTAX_ERROR) from e
    except UnknownSelectorError as e:
        valid = ", ".join(
            f"{c.rule.canonical_name} ({c.field.value})" for c in compiler.converters
        )
        error(str(e), hint=f"Known selectors: {valid}")
        raise SystemExit(EXIT_UNKNOWN_SELECTOR) from e
    except ConversionError as e:
        error(str(e))
        raise SystemExit(EXIT_CONVERSION_ERROR) from e

    debug(f"Query tree: {escape(repr(node))}")

    if output_format == "json":
        click.echo(json.dumps(to_dict(node), indent=2, ensure_ascii=False))
    else:
        console.print(build_tree(node))
