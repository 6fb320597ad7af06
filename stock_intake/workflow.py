"""Orchestrate an intake end to end: parse -> materialize -> create -> print labels."""

from time import perf_counter
from typing import Mapping, Optional

from stock_intake.intake.materializer import materialize_mixed_boxes, materialize_whole_box
from stock_intake.intake.parser import parse_line_items
from stock_intake.labels.builder import group_label, whole_box_labels
from stock_intake.labels.protocol import LabelPrinter
from stock_intake.grouping.projector import build_groups
from stock_intake.models.intake import IntakeMetadata, IntakeSession
from stock_intake.models.outputs import IntakeResult, PrintPayload
from stock_intake.models.records import InventoryRecord, NewInventoryRecord
from stock_intake.storage.protocol import RecordStorage
from stock_intake.utils.logger import get_logger

logger = get_logger("stock_intake.workflow")


class IntakeWorkflow:
    """Runs one intake submission against a storage and an optional label printer.

    Validation errors are raised before storage is called. Storage errors
    propagate unchanged. A print failure after records were created is
    logged and reported on the result; the intake itself stands.
    """

    def __init__(self, storage: RecordStorage, printer: Optional[LabelPrinter] = None):
        self._storage = storage
        self._printer = printer

    async def submit_whole_box(
        self,
        text: str,
        metadata: IntakeMetadata,
        operator: Optional[str] = None,
        units_per_box: Optional[Mapping[str, int]] = None,
    ) -> IntakeResult:
        start = perf_counter()
        lines = parse_line_items(text)
        new_records = materialize_whole_box(lines, metadata, operator=operator, units_per_box=units_per_box)
        created = await self._create(new_records)

        labels: list[PrintPayload] = []
        for record in created:
            labels.extend(whole_box_labels(record))
        result = IntakeResult(box_type="whole", records=created, labels=labels)
        await self._print(result)
        logger.info(
            "workflow.whole_box.complete",
            records=len(created),
            labels=len(labels),
            printed=result.printed,
            duration_ms=round((perf_counter() - start) * 1000, 2),
        )
        return result

    async def submit_mixed_boxes(self, session: IntakeSession) -> IntakeResult:
        start = perf_counter()
        new_records = materialize_mixed_boxes(session)
        created = await self._create(new_records)

        groups = build_groups(created)
        labels = [group_label(g.group_key, g.member_records) for g in groups]
        result = IntakeResult(
            box_type="mixed",
            records=created,
            group_keys=[g.group_key for g in groups],
            labels=labels,
        )
        await self._print(result)
        logger.info(
            "workflow.mixed_boxes.complete",
            boxes=len(groups),
            records=len(created),
            printed=result.printed,
            duration_ms=round((perf_counter() - start) * 1000, 2),
        )
        return result

    async def _create(self, new_records: list[NewInventoryRecord]) -> list[InventoryRecord]:
        created = await self._storage.create_records(new_records)
        if created.created_count != len(new_records):
            logger.warning(
                "workflow.create_count_mismatch",
                expected=len(new_records),
                created=created.created_count,
            )
        return created.records

    async def _print(self, result: IntakeResult) -> None:
        if self._printer is None or not result.labels:
            return
        try:
            await self._printer.print_labels(result.labels)
            result.printed = True
        except Exception as e:
            result.print_error = str(e)
            logger.exception("workflow.print_failed", labels=len(result.labels))
