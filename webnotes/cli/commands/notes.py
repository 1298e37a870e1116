"""
Note Commands.

List, show, create, edit, delete, move and pin notes.
"""

import click
from rich.markup import escape
from rich.table import Table

from webnotes.cli.context import console, run_with_coordinator, short_time
from webnotes.core.exceptions import NotFoundError
from webnotes.storage.schemas import ALL_FOLDERS, Note, NoteCreate, NoteUpdate


@click.group()
def notes() -> None:
    """Manage notes."""


def _title(note: Note) -> str:
    return escape(note.title or "")


def _print_note_table(items: list[Note], title: str) -> None:
    table = Table(title=title, show_header=True)
    table.add_column("", width=1)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Title")
    table.add_column("Folder", style="dim", no_wrap=True)
    table.add_column("Updated", no_wrap=True)

    for note in items:
        table.add_row(
            "[yellow]*[/yellow]" if note.is_pinned else "",
            note.id,
            _title(note),
            note.folder_id or "-",
            short_time(note.updated_at),
        )
    console.print(table)


@notes.command("list")
@click.option("--folder", "folder_id", default=None, help="Only notes in this folder.")
@click.option("--unfiled", is_flag=True, help="Only notes outside any folder.")
@click.pass_context
def list_notes(ctx: click.Context, folder_id: str | None, unfiled: bool) -> None:
    """
    List notes, pinned first.

    \b
    Examples:
        webnotes notes list
        webnotes notes list --unfiled
        webnotes notes list --folder 3f2a...
    """
    if folder_id and unfiled:
        raise click.UsageError("--folder and --unfiled are mutually exclusive")
    selector = None if unfiled else (folder_id or ALL_FOLDERS)

    async def body(coordinator):
        return await coordinator.list_notes(selector)

    items = run_with_coordinator(ctx, body)
    if not items:
        console.print("[dim]No notes.[/dim]")
        return
    _print_note_table(items, f"Notes ({len(items)})")


@notes.command()
@click.argument("note_id")
@click.pass_context
def show(ctx: click.Context, note_id: str) -> None:
    """Show one note with its content."""

    async def body(coordinator):
        note = await coordinator.get_note(note_id)
        if note is None:
            raise NotFoundError("Note not found")
        return note

    note = run_with_coordinator(ctx, body)
    pin = " [yellow](pinned)[/yellow]" if note.is_pinned else ""
    console.print(f"[bold]{_title(note)}[/bold]{pin}")
    console.print(f"[dim]{note.id} · folder {note.folder_id or '-'} · updated {short_time(note.updated_at)}[/dim]")
    console.print()
    console.print(escape(note.content or ""), highlight=False)


@notes.command()
@click.option("--title", default=None, help="Note title.")
@click.option("--content", default=None, help="Note content.")
@click.option("--folder", "folder_id", default=None, help="Folder to file the note in.")
@click.pass_context
def create(ctx: click.Context, title: str | None, content: str | None, folder_id: str | None) -> None:
    """Create a note."""
    data = NoteCreate(title=title, content=content, folder_id=folder_id)

    async def body(coordinator):
        return await coordinator.create_note(data)

    note = run_with_coordinator(ctx, body)
    console.print(f"[green]Created note[/green] {note.id}", highlight=False)


@notes.command()
@click.argument("note_id")
@click.option("--title", default=None, help="New title.")
@click.option("--content", default=None, help="New content.")
@click.pass_context
def edit(ctx: click.Context, note_id: str, title: str | None, content: str | None) -> None:
    """Change the title or content of a note."""
    given = {k: v for k, v in {"title": title, "content": content}.items() if v is not None}
    if not given:
        raise click.UsageError("Nothing to change, pass --title or --content")
    data = NoteUpdate(**given)

    async def body(coordinator):
        return await coordinator.update_note(note_id, data)

    note = run_with_coordinator(ctx, body)
    console.print(f"[green]Updated note[/green] {note.id}", highlight=False)


@notes.command()
@click.argument("note_id")
@click.pass_context
def delete(ctx: click.Context, note_id: str) -> None:
    """Delete a note."""

    async def body(coordinator):
        await coordinator.delete_note(note_id)

    run_with_coordinator(ctx, body)
    console.print(f"[green]Deleted note[/green] {note_id}", highlight=False)


@notes.command()
@click.argument("note_id")
@click.option("--folder", "folder_id", default=None, help="Target folder.")
@click.option("--unfiled", is_flag=True, help="Take the note out of its folder.")
@click.pass_context
def move(ctx: click.Context, note_id: str, folder_id: str | None, unfiled: bool) -> None:
    """Move a note into a folder, or out of it with --unfiled."""
    if bool(folder_id) == unfiled:
        raise click.UsageError("Pass exactly one of --folder or --unfiled")

    async def body(coordinator):
        return await coordinator.move_note(note_id, None if unfiled else folder_id)

    note = run_with_coordinator(ctx, body)
    console.print(f"[green]Moved note[/green] {note.id} → {note.folder_id or 'unfiled'}", highlight=False)


@notes.command()
@click.argument("note_id")
@click.pass_context
def pin(ctx: click.Context, note_id: str) -> None:
    """Toggle the pinned state of a note."""

    async def body(coordinator):
        return await coordinator.pin_note(note_id)

    note = run_with_coordinator(ctx, body)
    state = "Pinned" if note.is_pinned else "Unpinned"
    console.print(f"[green]{state} note[/green] {note.id}", highlight=False)
