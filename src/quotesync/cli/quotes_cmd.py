"""Quote commands: add, list, categories, random."""

from __future__ import annotations

import sys

import click

from ._common import QUOTESYNC_HOME, console, get_engine, quote_line, report_markup
from ..quotes import QuoteValidationError, add_quote, effective_category, filter_quotes, random_quote


def register_quote_commands(main: click.Group) -> None:
    """Register the quote commands on the main CLI group."""

    @main.command("add")
    @click.argument("text")
    @click.option("--category", "-c", required=True, help="Category for the quote.")
    @click.option("--home", default=QUOTESYNC_HOME, type=click.Path())
    @click.option("--offline", is_flag=True, help="Store locally without syncing.")
    def add_cmd(text: str, category: str, home: str, offline: bool):
        """Add a quote. It is created on the remote at the next sync."""
        engine = get_engine(home)
        try:
            quote = add_quote(engine.store, text, category)
        except QuoteValidationError as exc:
            console.print(f"[bold red]{exc}[/]")
            sys.exit(1)

        console.print(f"\n  Added {quote_line(quote)}")
        if offline:
            console.print("  [dim]Quote added locally. Will sync to server.[/]\n")
            return

        report = engine.sync_now()
        console.print(f"  {report_markup(report)}\n")

    @main.command("list")
    @click.option("--category", "-c", default=None, help="Category to show, or 'all'.")
    @click.option("--home", default=QUOTESYNC_HOME, type=click.Path())
    def list_cmd(category, home: str):
        """List quotes, filtered by category.

        Without --category the last selected filter is reused.
        """
        engine = get_engine(home)
        selected = effective_category(engine.store, category)
        rows = filter_quotes(engine.store, selected)

        console.print(f"\n  [bold]Category:[/] [cyan]{selected}[/]")
        if not rows:
            console.print("  [dim]No quotes available for this category.[/]\n")
            return
        for quote in rows:
            console.print(f"  {quote_line(quote)}")
        console.print()

    @main.command("categories")
    @click.option("--home", default=QUOTESYNC_HOME, type=click.Path())
    def categories_cmd(home: str):
        """Show every category in the collection."""
        engine = get_engine(home)
        selected = effective_category(engine.store)
        console.print()
        for name in ["all"] + engine.store.categories():
            mark = "[green]*[/]" if name == selected else " "
            console.print(f"  {mark} {name}")
        console.print()

    @main.command("random")
    @click.option("--home", default=QUOTESYNC_HOME, type=click.Path())
    def random_cmd(home: str):
        """Show one quote at random, ignoring the filter."""
        engine = get_engine(home)
        quote = random_quote(engine.store)
        if quote is None:
            console.print("[yellow]No quotes available. Please add one![/]")
            return
        console.print(f"\n  {quote_line(quote)}\n")
