"""
Folder Commands.

List, create, rename and delete folders.
"""

import click
from rich.markup import escape
from rich.table import Table

from webnotes.cli.context import console, run_with_coordinator, short_time


@click.group()
def folders() -> None:
    """Manage folders."""


@folders.command("list")
@click.pass_context
def list_folders(ctx: click.Context) -> None:
    """List folders."""

    async def body(coordinator):
        return await coordinator.list_folders()

    items = run_with_coordinator(ctx, body)
    if not items:
        console.print("[dim]No folders.[/dim]")
        return

    table = Table(title=f"Folders ({len(items)})", show_header=True)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Created", no_wrap=True)
    for folder in items:
        table.add_row(folder.id, escape(folder.name), short_time(folder.created_at))
    console.print(table)


@folders.command()
@click.argument("name")
@click.pass_context
def create(ctx: click.Context, name: str) -> None:
    """Create a folder."""

    async def body(coordinator):
        return await coordinator.create_folder(name)

    folder = run_with_coordinator(ctx, body)
    console.print(f"[green]Created folder[/green] {folder.id}", highlight=False)


@folders.command()
@click.argument("folder_id")
@click.argument("name")
@click.pass_context
def rename(ctx: click.Context, folder_id: str, name: str) -> None:
    """Rename a folder."""

    async def body(coordinator):
        return await coordinator.rename_folder(folder_id, name)

    folder = run_with_coordinator(ctx, body)
    console.print(f"[green]Renamed folder[/green] {folder.id} → {escape(folder.name)}", highlight=False)


@folders.command()
@click.argument("folder_id")
@click.pass_context
def delete(ctx: click.Context, folder_id: str) -> None:
    """Delete a folder. Its notes become unfiled."""

    async def body(coordinator):
        await coordinator.delete_folder(folder_id)

    run_with_coordinator(ctx, body)
    console.print(f"[green]Deleted folder[/green] {folder_id}", highlight=False)
