"""Shared helpers for the CLI command modules.

Provides the Rich console, engine construction, and the small
formatting helpers every command group uses.
"""

from __future__ import annotations

from pathlib import Path

from rich.console import Console
from rich.markup import escape

from .. import QUOTESYNC_HOME
from ..models import Quote, SyncReport, SyncStatus
from ..sync.engine import SyncEngine

console = Console()


def get_engine(home: str) -> SyncEngine:
    """Open the sync engine for a home directory."""
    return SyncEngine(Path(home).expanduser())


def quote_line(quote: Quote) -> str:
    """Rich markup for one quote."""
    marker = " [yellow](pending)[/]" if quote.pending_create else ""
    return f'"{escape(quote.text)}" [dim]— {escape(quote.category)}[/]{marker}'


def report_markup(report: SyncReport) -> str:
    """Map a sync report to a colored status line."""
    style = {
        SyncStatus.OK: "green",
        SyncStatus.FAILED: "bold red",
        SyncStatus.SKIPPED: "yellow",
    }.get(report.status, "dim")
    return f"[{style}]{escape(report.message)}[/]"


__all__ = ["QUOTESYNC_HOME", "console", "get_engine", "quote_line", "report_markup"]
