"""
Settings Commands.

Show and change client preferences. Settings always live on this client.
"""

import click
from rich.table import Table

from webnotes.cli.context import console, run_with_coordinator
from webnotes.storage.schemas import SettingsUpdate, UserSettings


@click.group()
def settings() -> None:
    """Show or change user settings."""


def _print_settings(current: UserSettings) -> None:
    table = Table(title="Settings", show_header=True)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("theme", current.theme)
    table.add_row("font_size", current.font_size)
    table.add_row("show_line_numbers", str(current.show_line_numbers).lower())
    table.add_row("sync_status", current.sync_status.value)
    console.print(table)


@settings.command()
@click.pass_context
def show(ctx: click.Context) -> None:
    """Show current settings."""

    async def body(coordinator):
        return await coordinator.get_settings()

    _print_settings(run_with_coordinator(ctx, body))


@settings.command("set")
@click.option("--theme", type=click.Choice(["dark", "light", "system"]), default=None)
@click.option("--font-size", type=click.Choice(["small", "medium", "large"]), default=None)
@click.option("--line-numbers/--no-line-numbers", "show_line_numbers", default=None)
@click.pass_context
def set_settings(
    ctx: click.Context,
    theme: str | None,
    font_size: str | None,
    show_line_numbers: bool | None,
) -> None:
    """
    Change one or more settings.

    \b
    Examples:
        webnotes settings set --theme light
        webnotes settings set --font-size large --line-numbers
    """
    data = SettingsUpdate(theme=theme, font_size=font_size, show_line_numbers=show_line_numbers)
    if not data.changes():
        raise click.UsageError("Nothing to change")

    async def body(coordinator):
        return await coordinator.update_settings(data)

    _print_settings(run_with_coordinator(ctx, body))
