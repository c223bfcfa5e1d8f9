"""Command discovery and registration."""

from __future__ import annotations

import importlib
import pkgutil
from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from collections.abc import Iterator


def discover_commands() -> Iterator[click.Command]:
    """Yield the Click command of every public module in this package.

    A module contributes a command by defining a module-level ``cli``
    object that is a :class:`click.Command`. Modules whose name starts
    with an underscore are skipped.
    """
    import mediathek_search.commands as commands_pkg

    for module_info in sorted(pkgutil.iter_modules(commands_pkg.__path__), key=lambda m: m.name):
        if module_info.name.startswith("_"):
            continue

        module = importlib.import_module(f"{commands_pkg.__name__}.{module_info.name}")
        cmd = getattr(module, "cli", None)
        if isinstance(cmd, click.Command):
            yield cmd
