"""Shared CLI helpers: console, logger, storage/printer factories, text input, record tables."""

from enum import Enum
from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console
from rich.table import Table

from stock_intake.config import LABELS_PATH
from stock_intake.labels import FileLabelPrinter
from stock_intake.models.outputs import CascadeResult, DisplayRow, IntakeResult
from stock_intake.storage import RecordStorage, get_storage
from stock_intake.utils.logger import get_logger

console = Console()
logger = get_logger("stock_intake.cli")


class PreTypeOption(str, Enum):
    regular = "regular"
    peak = "peak"


class BoxTypeOption(str, Enum):
    whole = "whole"
    mixed = "mixed"


class StatusOption(str, Enum):
    pending = "pending"
    shipped = "shipped"
    cancelled = "cancelled"


def open_storage(backend: Optional[str] = None) -> RecordStorage:
    return get_storage(backend)


async def close_storage(storage: RecordStorage) -> None:
    aclose = getattr(storage, "aclose", None)
    if aclose is not None:
        await aclose()


def get_printer(labels_path: Optional[Path] = None) -> FileLabelPrinter:
    """Return the file-backed label printer (printed_labels.json)."""
    return FileLabelPrinter(labels_path or LABELS_PATH)


def read_block(prompt: str) -> str:
    """Read lines from the console until an empty line; returns them joined with newlines."""
    console.print(prompt)
    lines = []
    while True:
        line = console.input("")
        if not line.strip():
            break
        lines.append(line)
    return "\n".join(lines)


def read_input_file(path: Path) -> str:
    with path.open("r", encoding="utf-8") as f:
        return f.read()


def split_boxes(text: str) -> list[str]:
    """Split a multi-box input file on lines containing only '---'."""
    blocks, current = [], []
    for line in text.splitlines():
        if line.strip() == "---":
            blocks.append("\n".join(current))
            current = []
        else:
            current.append(line)
    blocks.append("\n".join(current))
    return [b for b in blocks if b.strip()]


def records_table(rows: Sequence[DisplayRow], title: str = "Inventory records") -> Table:
    """Render a row-span projection. Group columns appear on the anchor row only."""
    table = Table(title=title)
    table.add_column("Box", style="cyan")
    table.add_column("Type", style="magenta")
    table.add_column("Record", style="dim")
    table.add_column("SKU", style="green")
    table.add_column("Qty", justify="right")
    table.add_column("Boxes", justify="right")
    table.add_column("Country")
    table.add_column("Packer")
    table.add_column("Status", style="yellow")

    for i, row in enumerate(rows):
        r = row.record
        last_in_group = i + 1 == len(rows) or rows[i + 1].is_group_anchor
        if row.is_group_anchor:
            box = r.mix_box_group_key or r.record_id
            if row.row_span > 1:
                box = f"{box} ({row.row_span} SKUs)"
            box_type, country, packer = r.box_type, r.country, r.packer or ""
        else:
            box = box_type = country = packer = ""
        table.add_row(
            box,
            box_type,
            r.record_id,
            r.sku,
            str(r.total_quantity),
            str(r.total_boxes),
            country,
            packer,
            r.status,
            end_section=last_in_group,
        )
    return table


def print_intake_result(result: IntakeResult) -> None:
    console.print(f"\n[bold]Intake complete[/bold] ({result.box_type} box)")
    console.print(f"  Records created: {result.created_count}")
    if result.group_keys:
        console.print(f"  Mixed boxes: {', '.join(result.group_keys)}")
    if result.printed:
        console.print(f"  [green]Labels sent: {len(result.labels)}[/green]")
    elif result.print_error:
        console.print(f"  [yellow]Printing failed, intake kept: {result.print_error}[/yellow]")


def print_cascade_result(result: CascadeResult) -> None:
    if result.ok:
        console.print(f"[green]{result.action} {result.group_key}: all {result.total} records done[/green]")
        return
    console.print(
        f"[red]{result.action} {result.group_key}: {len(result.failed)} of {result.total} records failed[/red]"
    )
    for failure in result.failed:
        console.print(f"  [red]{failure.record_id}[/red]: {failure.reason}")
