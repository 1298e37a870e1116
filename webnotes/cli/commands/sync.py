"""
Sync Commands.

Inspect the coordinator state and drive the local-to-remote migration.
"""

import click
from rich.panel import Panel

from webnotes.cli.context import console, run_with_coordinator


@click.group()
def sync() -> None:
    """Inspect sync state and run migration."""


@sync.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show where notes are currently stored."""

    async def body(coordinator):
        return {
            "state": coordinator.state.value,
            "sync_status": coordinator.sync_status.value,
            "online": coordinator.is_online,
            "authenticated": coordinator.is_authenticated,
            "migrated": coordinator.migration_completed,
        }

    info = run_with_coordinator(ctx, body)
    color = "green" if info["sync_status"] == "synced" else "yellow"
    console.print(Panel(
        f"[{color}]{info['sync_status'].upper()}[/{color}]\n"
        f"State: {info['state']}\n"
        f"Online: {'yes' if info['online'] else 'no'}\n"
        f"Signed in: {'yes' if info['authenticated'] else 'no'}\n"
        f"Local data migrated: {'yes' if info['migrated'] else 'no'}",
        title="Sync Status",
    ))


@sync.command()
@click.pass_context
def migrate(ctx: click.Context) -> None:
    """Copy local notes and folders to your account."""

    async def body(coordinator):
        return await coordinator.migrate()

    result = run_with_coordinator(ctx, body)

    if not result.attempted:
        if result.completed:
            console.print("[dim]Local data was already migrated.[/dim]")
        else:
            console.print("[yellow]Sign in and go online to migrate local data.[/yellow]")
        return

    if not result.completed:
        console.print(f"[red]Migration failed: {result.error}[/red]", highlight=False)
        console.print("[dim]It will be retried on the next signed-in run.[/dim]")
        ctx.exit(1)

    console.print(
        f"[green]Migrated {result.notes_migrated} notes and "
        f"{result.folders_migrated} folders[/green]"
    )
    failed = len(result.failed_note_ids) + len(result.failed_folder_ids)
    if failed:
        console.print(f"[yellow]{failed} items could not be migrated and remain local.[/yellow]")


@sync.command()
@click.option("--yes", is_flag=True, help="Do not ask for confirmation.")
@click.pass_context
def reset(ctx: click.Context, yes: bool) -> None:
    """Forget that local data was migrated."""
    if not yes:
        click.confirm("Local data will be migrated again on next sign-in. Continue?", abort=True)

    async def body(coordinator):
        coordinator.reset_migration()

    run_with_coordinator(ctx, body)
    console.print("[green]Migration flag reset[/green]")
