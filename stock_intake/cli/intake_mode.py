"""Intake commands: whole-box and mixed-box stock entry."""

import asyncio
from pathlib import Path
from typing import Callable, List, Optional

import pydantic
import typer

from stock_intake.errors import EmptyBoxError, IntakeValidationError, NonContiguousGroupError, StorageError
from stock_intake.intake import cancel_session, commit_current_box, normalize_sku_input, start_session
from stock_intake.models.intake import IntakeMetadata, IntakeSession
from stock_intake.models.outputs import IntakeResult
from stock_intake.utils.logger import intake_context
from stock_intake.workflow import IntakeWorkflow

from .shared import (
    PreTypeOption,
    close_storage,
    console,
    get_printer,
    logger,
    open_storage,
    print_intake_result,
    read_block,
    read_input_file,
    split_boxes,
)


async def _submit(run) -> IntakeResult:
    storage = open_storage()
    try:
        return await run(IntakeWorkflow(storage, get_printer()))
    finally:
        await close_storage(storage)


def _run_intake(command: str, log, run: Callable) -> IntakeResult:
    """Submit through the workflow; validation and storage failures end the command with exit 1."""
    event = command.replace("-", "_")
    try:
        with intake_context(command=command):
            return asyncio.run(_submit(run))
    except IntakeValidationError as e:
        console.print(f"[red]{e}[/red]")
        log.warning(f"{event}.validation_error", error=str(e))
        raise typer.Exit(1)
    except (StorageError, NonContiguousGroupError) as e:
        console.print(f"[red]Intake failed, nothing to print: {e}[/red]")
        log.error(f"{event}.failed", error=str(e))
        raise typer.Exit(1)


def _metadata(**fields) -> IntakeMetadata:
    try:
        return IntakeMetadata(**fields)
    except pydantic.ValidationError as e:
        raise typer.BadParameter(str(e)) from e


def parse_units_per_box(values: Optional[List[str]]) -> dict[str, int]:
    """Turn repeated 'SKU=N' options into an upper-cased SKU -> units mapping."""
    units: dict[str, int] = {}
    for value in values or []:
        sku, sep, count = value.partition("=")
        if not sep or not sku.strip() or not count.strip().isdigit() or int(count) < 1:
            raise typer.BadParameter(f"Expected SKU=N with N >= 1, got {value!r}", param_hint="--units")
        units[sku.strip().upper()] = int(count)
    return units


def whole_box(
    country: str = typer.Option(..., "--country", "-c", prompt="Destination country", help="Destination country"),
    packer: Optional[str] = typer.Option(None, "--packer", "-p", help="Packer name"),
    remark: Optional[str] = typer.Option(None, "--remark", help="Intake remark"),
    marketplace: Optional[str] = typer.Option(None, "--marketplace", help="Marketplace"),
    pre_type: PreTypeOption = typer.Option(PreTypeOption.regular, "--pre-type", help="Stocking type"),
    units: Optional[List[str]] = typer.Option(
        None, "--units", "-u", help="Units per box as SKU=N; repeat per SKU. Default is 1 unit per box"
    ),
    operator: Optional[str] = typer.Option(None, "--operator", "-o", help="Operator name"),
    input_file: Optional[Path] = typer.Option(None, "--input", "-i", help="File with 'SKU boxes' lines"),
) -> None:
    """Whole-box intake: one 'SKU boxes' entry per line."""
    log = logger.bind(command="whole-box", country=country)
    units_per_box = parse_units_per_box(units)
    metadata = _metadata(
        country=country, packer=packer, remark=remark, marketplace=marketplace, pre_type=pre_type.value
    )
    log.info("whole_box.start")
    text = read_input_file(input_file) if input_file else read_block(
        "Enter 'SKU boxes' lines, empty line to finish:"
    )
    text = normalize_sku_input(text)
    result = _run_intake(
        "whole-box",
        log,
        lambda wf: wf.submit_whole_box(text, metadata, operator=operator, units_per_box=units_per_box),
    )
    print_intake_result(result)
    log.info("whole_box.complete", records=result.created_count)


def _collect_boxes_interactively(session: IntakeSession) -> Optional[IntakeSession]:
    """Prompt box by box. An empty first line cancels; an invalid box is asked for again."""
    while session.is_awaiting_input:
        index = session.current_box_index
        text = read_block(
            f"\n[bold]Box {index + 1} of {session.total_boxes_planned}[/bold]: "
            "enter 'SKU quantity' lines, empty line to finish (empty box cancels):"
        )
        if not text.strip():
            session = cancel_session(session)
            logger.info("mixed_box.cancelled_at_box", box_index=index)
            return None
        try:
            session = commit_current_box(session, normalize_sku_input(text))
        except EmptyBoxError as e:
            console.print(f"[red]{e}. Please re-enter box {e.box_index + 1}.[/red]")
            continue
        if session.is_awaiting_input:
            console.print(f"[green]Box {index + 1} recorded, continue with box {index + 2}[/green]")
    return session


def _collect_boxes_from_file(session: IntakeSession, path: Path) -> IntakeSession:
    blocks = split_boxes(read_input_file(path))
    if len(blocks) != session.total_boxes_planned:
        raise typer.BadParameter(
            f"{path} holds {len(blocks)} boxes but --boxes is {session.total_boxes_planned}"
        )
    for block in blocks:
        session = commit_current_box(session, normalize_sku_input(block))
    return session


def mixed_box(
    country: str = typer.Option(..., "--country", "-c", prompt="Destination country", help="Destination country"),
    boxes: int = typer.Option(..., "--boxes", "-n", min=1, prompt="Number of mixed boxes", help="Number of mixed boxes to enter"),
    packer: Optional[str] = typer.Option(None, "--packer", "-p", help="Packer name"),
    remark: Optional[str] = typer.Option(None, "--remark", help="Intake remark"),
    marketplace: Optional[str] = typer.Option(None, "--marketplace", help="Marketplace"),
    pre_type: PreTypeOption = typer.Option(PreTypeOption.regular, "--pre-type", help="Stocking type"),
    operator: Optional[str] = typer.Option(None, "--operator", "-o", help="Operator name"),
    input_file: Optional[Path] = typer.Option(
        None, "--input", "-i", help="File with one block of 'SKU quantity' lines per box, separated by '---'"
    ),
) -> None:
    """Mixed-box intake: enter the SKUs of each shared box in turn."""
    log = logger.bind(command="mixed-box", country=country, boxes=boxes)
    log.info("mixed_box.start")
    metadata = _metadata(
        country=country, packer=packer, remark=remark, marketplace=marketplace, pre_type=pre_type.value
    )
    session = start_session(boxes, metadata, operator=operator)
    try:
        if input_file:
            session = _collect_boxes_from_file(session, input_file)
        else:
            session = _collect_boxes_interactively(session)
    except EmptyBoxError as e:
        console.print(f"[red]{e}[/red]")
        log.warning("mixed_box.empty_box", box_index=e.box_index)
        raise typer.Exit(1)
    if session is None:
        console.print("[yellow]Mixed-box intake cancelled, nothing was saved.[/yellow]")
        log.info("mixed_box.cancelled")
        return

    result = _run_intake("mixed-box", log, lambda wf: wf.submit_mixed_boxes(session))
    print_intake_result(result)
    log.info("mixed_box.complete", records=result.created_count, group_keys=result.group_keys)
