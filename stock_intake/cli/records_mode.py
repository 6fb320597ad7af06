"""Read-side commands: record list (grouped), pending summary, mixed-box detail."""

import asyncio
from typing import Optional

import typer
from rich.table import Table

from stock_intake.errors import NonContiguousGroupError, StorageError
from stock_intake.grouping import project_rows
from stock_intake.models.records import RecordFilter

from .shared import BoxTypeOption, StatusOption, close_storage, console, logger, open_storage, records_table


def records(
    sku: Optional[str] = typer.Option(None, "--sku", help="SKU contains"),
    country: Optional[str] = typer.Option(None, "--country", "-c"),
    box_type: Optional[BoxTypeOption] = typer.Option(None, "--box-type", help="Only whole or mixed boxes"),
    status: Optional[StatusOption] = typer.Option(None, "--status", help="Record status; shipped records are hidden without it"),
    group: Optional[str] = typer.Option(None, "--group", "-g", help="Mixed-box group key"),
    page: int = typer.Option(1, "--page", min=1),
    limit: int = typer.Option(50, "--limit", min=1, max=1000),
) -> None:
    """List inventory records with mixed boxes merged into one visual unit."""
    log = logger.bind(command="records")
    record_filter = RecordFilter(
        sku=sku,
        country=country,
        box_type=box_type.value if box_type else None,
        status=status.value if status else None,
        mix_box_group_key=group,
        page=page,
        limit=limit,
    )

    async def _run():
        storage = open_storage()
        try:
            return await storage.list_records(record_filter)
        finally:
            await close_storage(storage)

    try:
        rows = project_rows(asyncio.run(_run()))
    except (StorageError, NonContiguousGroupError) as e:
        console.print(f"[red]{e}[/red]")
        log.error("records.fail", error=str(e))
        raise typer.Exit(1)
    if not rows:
        console.print("[dim]No records.[/dim]")
        return
    console.print(records_table(rows))
    anchors = sum(1 for r in rows if r.is_group_anchor)
    console.print(f"[dim]{len(rows)} records in {anchors} boxes/entries[/dim]")
    log.info("records.listed", records=len(rows), anchors=anchors)


def pending(
    sku: Optional[str] = typer.Option(None, "--sku", help="SKU contains"),
    country: Optional[str] = typer.Option(None, "--country", "-c"),
) -> None:
    """Pending stock per SKU and country, split into whole and mixed boxes."""
    log = logger.bind(command="pending")

    async def _run():
        storage = open_storage()
        try:
            return await storage.pending_summary(RecordFilter(sku=sku, country=country))
        finally:
            await close_storage(storage)

    try:
        summary = asyncio.run(_run())
    except StorageError as e:
        console.print(f"[red]{e}[/red]")
        log.error("pending.fail", error=str(e))
        raise typer.Exit(1)

    table = Table(title="Pending stock")
    table.add_column("SKU", style="green")
    table.add_column("Country")
    table.add_column("Whole boxes", justify="right")
    table.add_column("Mixed boxes", justify="right")
    table.add_column("Total qty", justify="right", style="bold")
    table.add_column("Earliest intake", style="dim")
    for row in summary:
        table.add_row(
            row.sku,
            row.country,
            f"{row.whole_box_quantity} pcs / {row.whole_box_count} boxes",
            f"{row.mixed_box_quantity} pcs / {row.mixed_box_count} boxes",
            str(row.total_quantity),
            row.earliest_inbound.strftime("%m-%d %H:%M") if row.earliest_inbound else "",
        )
    console.print(table)
    log.info("pending.listed", rows=len(summary))


def group(group_key: str = typer.Argument(..., help="Mixed-box group key")) -> None:
    """Show the SKUs packed in one mixed box."""

    async def _run():
        storage = open_storage()
        try:
            return await storage.get_group(group_key)
        finally:
            await close_storage(storage)

    try:
        detail = asyncio.run(_run())
    except StorageError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    if detail is None:
        console.print(f"[red]Mixed box {group_key} not found or already shipped.[/red]")
        raise typer.Exit(1)
    console.print(f"[bold]{detail.group_key}[/bold] ({detail.country}): {detail.sku_count} SKUs, {detail.total_quantity} pcs")
    console.print(records_table(project_rows(detail.records), title="Box contents"))
