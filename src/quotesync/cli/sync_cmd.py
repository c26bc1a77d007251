"""Sync commands: now, status, simulate-conflict, watch."""

from __future__ import annotations

import sys
from pathlib import Path

import click
from rich.panel import Panel

from ._common import QUOTESYNC_HOME, console, get_engine, report_markup
from ..models import SyncStatus


def register_sync_commands(main: click.Group) -> None:
    """Register the sync command group."""

    @main.group()
    def sync():
        """Reconcile local quotes with the remote feed.

        Server values win by default. Diverging quotes leave a
        conflict behind; see `quotesync conflicts`.
        """

    @sync.command("now")
    @click.option("--home", default=QUOTESYNC_HOME, type=click.Path())
    def sync_now(home: str):
        """Run one sync cycle."""
        engine = get_engine(home)
        console.print("\n  Syncing…", end=" ")
        report = engine.sync_now()
        console.print(report_markup(report))

        if report.created:
            console.print(f"  [dim]Created on server: {', '.join(report.created)}[/]")
        if report.added:
            console.print(f"  [dim]New from server: {len(report.added)}[/]")
        if report.conflicts:
            console.print(
                f"  [yellow]{len(report.conflicts)} new conflict(s).[/] "
                "Run [bold]quotesync conflicts list[/]."
            )
        console.print()

        if report.status == SyncStatus.FAILED:
            sys.exit(1)

    @sync.command("status")
    @click.option("--home", default=QUOTESYNC_HOME, type=click.Path())
    def sync_status(home: str):
        """Show sync state and what is waiting."""
        engine = get_engine(home)
        info = engine.status()
        state = info["state"]

        console.print()
        console.print(
            Panel(
                f"Remote: [cyan]{info['remote']}[/]\n"
                f"Quotes: [bold]{info['quotes']}[/]\n"
                f"Pending creates: {info['pending_creates']}\n"
                f"Open conflicts: {info['unresolved_conflicts']}\n"
                f"Last sync: {state['last_sync'] or '[dim]never[/]'}\n"
                f"Last error: {state['last_error'] or '[dim]none[/]'}\n"
                f"Syncs: {state['sync_count']}",
                title="quotesync",
                border_style="magenta",
            )
        )
        console.print()

    @sync.command("simulate-conflict")
    @click.option("--home", default=QUOTESYNC_HOME, type=click.Path())
    def sync_simulate(home: str):
        """Edit the first quote locally, then sync to provoke a conflict."""
        engine = get_engine(home)
        report = engine.simulate_conflict()
        if report is None:
            console.print("[yellow]No quotes to edit.[/]")
            return
        console.print(f"\n  Simulated a local edit. {report_markup(report)}")
        if report.conflicts:
            console.print(f"  [yellow]Conflicts: {', '.join(report.conflicts)}[/]")
        console.print()

    @sync.command("watch")
    @click.option("--home", default=QUOTESYNC_HOME, type=click.Path())
    @click.option("--interval", type=int, default=None, help="Seconds between syncs.")
    def sync_watch(home: str, interval):
        """Sync on a timer until interrupted."""
        from ..daemon import DaemonConfig, SyncDaemon, is_running

        config = DaemonConfig(home=Path(home).expanduser(), sync_interval=interval)
        if is_running(config.home):
            console.print("[yellow]A sync daemon is already running for this home.[/]")
            sys.exit(0)

        svc = SyncDaemon(config)
        console.print(f"\n  [green]Automatic sync enabled[/] every [cyan]{svc.interval}s[/]")
        console.print(f"  Log: {config.log_file}")
        console.print("  [dim]Ctrl+C to stop[/]\n")
        svc.start()
        svc.run_forever()
