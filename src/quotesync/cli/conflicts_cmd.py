"""Conflict commands: list, resolve."""

from __future__ import annotations

import sys

import click
from rich.markup import escape
from rich.table import Table

from ._common import QUOTESYNC_HOME, console, get_engine
from ..models import ConflictAction


def register_conflict_commands(main: click.Group) -> None:
    """Register the conflicts command group."""

    @main.group()
    def conflicts():
        """Review quotes where local and server content diverged."""

    @conflicts.command("list")
    @click.option("--home", default=QUOTESYNC_HOME, type=click.Path())
    @click.option("--all", "show_all", is_flag=True, help="Include resolved conflicts.")
    def conflicts_list(home: str, show_all: bool):
        """Show open conflicts."""
        engine = get_engine(home)
        rows = engine.store.conflicts if show_all else engine.store.unresolved_conflicts()
        if not rows:
            console.print("[green]No open conflicts.[/]")
            return

        table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
        table.add_column("Quote ID", style="cyan")
        table.add_column("Server")
        table.add_column("Local")
        table.add_column("State", style="dim")
        for c in rows:
            table.add_row(
                c.id,
                f'"{escape(c.server.text)}" — {escape(c.server.category)}',
                f'"{escape(c.local.text)}" — {escape(c.local.category)}',
                "resolved" if c.resolved else "open",
            )
        console.print()
        console.print(table)
        console.print(
            "\n  [dim]quotesync conflicts resolve <id> --keep server|local|dismiss[/]\n"
        )

    @conflicts.command("resolve")
    @click.argument("quote_id")
    @click.option(
        "--keep",
        type=click.Choice([a.value for a in ConflictAction]),
        default=ConflictAction.KEEP_SERVER.value,
        show_default=True,
        help="Which side wins, or dismiss.",
    )
    @click.option("--home", default=QUOTESYNC_HOME, type=click.Path())
    def conflicts_resolve(quote_id: str, keep: str, home: str):
        """Resolve the open conflict for QUOTE_ID."""
        engine = get_engine(home)
        action = ConflictAction(keep)
        if not engine.resolver.resolve(quote_id, action):
            console.print(f"[bold red]No open conflict for quote {escape(quote_id)}.[/]")
            sys.exit(1)

        label = {
            ConflictAction.KEEP_SERVER: "kept server",
            ConflictAction.KEEP_LOCAL: "kept local",
            ConflictAction.DISMISS: "dismissed",
        }[action]
        console.print(f"[green]Conflict resolved: {label}.[/]")
