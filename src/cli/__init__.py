"""CLI entry point for the Competitor Site Watch system."""

from __future__ import annotations

import click

from src.cli.commands import (
    check_sites,
    diff_pages,
    list_competitors,
    reset_snapshot,
    show_snapshot,
)


@click.group()
def cli() -> None:
    """Competitor Site Watch."""


cli.add_command(check_sites)
cli.add_command(list_competitors)
cli.add_command(show_snapshot)
cli.add_command(reset_snapshot)
cli.add_command(diff_pages)
