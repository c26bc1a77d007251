"""
quotesync CLI — manage quotes and sync them with the remote feed.

Command groups live in their own modules and are registered on
the main Click group here.

Entry point: quotesync.cli:main
"""

from __future__ import annotations

import logging

import click

from .. import __version__


@click.group()
@click.version_option(version=__version__, prog_name="quotesync")
@click.option("--verbose", "-v", is_flag=True, help="Log sync activity.")
def main(verbose: bool):
    """quotesync — quotes on disk, reconciled with a remote feed."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(name)s: %(message)s",
    )


# ---------------------------------------------------------------------------
# Register all command groups/commands from modular files
# ---------------------------------------------------------------------------

from .quotes_cmd import register_quote_commands
from .sync_cmd import register_sync_commands
from .conflicts_cmd import register_conflict_commands

register_quote_commands(main)
register_sync_commands(main)
register_conflict_commands(main)
