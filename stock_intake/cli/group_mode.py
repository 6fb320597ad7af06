"""Group commands: edit, delete or print every record of a mixed box at once."""

import asyncio
from typing import Optional

import typer

from stock_intake.errors import StorageError
from stock_intake.grouping import GroupCascadeOperations
from stock_intake.models.records import RecordPatch
from stock_intake.utils.logger import intake_context

from .shared import close_storage, console, get_printer, logger, open_storage, print_cascade_result


def _cascade(command: str, group_key: str, run):
    with intake_context(command=command, group_key=group_key):
        return asyncio.run(_with_cascade(run))


async def _with_cascade(run):
    storage = open_storage()
    try:
        return await run(GroupCascadeOperations(storage, get_printer()))
    finally:
        await close_storage(storage)


def edit_group(
    group_key: str = typer.Argument(..., help="Mixed-box group key"),
    country: Optional[str] = typer.Option(None, "--country", "-c"),
    packer: Optional[str] = typer.Option(None, "--packer", "-p"),
    marketplace: Optional[str] = typer.Option(None, "--marketplace"),
    note: str = typer.Option("manual edit", "--note", help="Change note appended to each remark"),
) -> None:
    """Apply the same change to every record in a mixed box."""
    log = logger.bind(command="edit-group", group_key=group_key)
    patch = RecordPatch(country=country, packer=packer, marketplace=marketplace, change_note=note)
    if not patch.changes():
        console.print("[red]Nothing to change: pass --country, --packer or --marketplace.[/red]")
        raise typer.Exit(1)
    try:
        result = _cascade("edit-group", group_key, lambda ops: ops.edit_group(group_key, patch))
    except StorageError as e:
        console.print(f"[red]{e}[/red]")
        log.error("edit_group.fail", error=str(e))
        raise typer.Exit(1)
    print_cascade_result(result)
    if not result.ok:
        raise typer.Exit(1)


def delete_group(
    group_key: str = typer.Argument(..., help="Mixed-box group key"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete every record in a mixed box."""
    log = logger.bind(command="delete-group", group_key=group_key)
    if not yes and not typer.confirm(f"Delete all records of {group_key}?"):
        log.info("delete_group.aborted")
        return
    try:
        result = _cascade("delete-group", group_key, lambda ops: ops.delete_group(group_key))
    except StorageError as e:
        console.print(f"[red]{e}[/red]")
        log.error("delete_group.fail", error=str(e))
        raise typer.Exit(1)
    print_cascade_result(result)
    if not result.ok:
        raise typer.Exit(1)


def print_group(group_key: str = typer.Argument(..., help="Mixed-box group key")) -> None:
    """Print one aggregate label for a mixed box."""
    try:
        payload = _cascade("print-group", group_key, lambda ops: ops.print_group(group_key))
    except StorageError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Label sent: {payload.sku}, {payload.quantity} pcs[/green]")
