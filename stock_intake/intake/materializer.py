"""Turn a completed intake into the flat list of records sent to storage."""

import time
import uuid
from typing import Mapping, Optional, Sequence

from stock_intake.config import DEFAULT_OPERATOR, MIX_BOX_KEY_PREFIX
from stock_intake.errors import EmptySessionError, NoLineItemsError, SessionStateError
from stock_intake.models.intake import IntakeMetadata, IntakeSession, LineItem
from stock_intake.models.records import NewInventoryRecord
from stock_intake.utils.logger import get_logger

logger = get_logger("stock_intake.intake.materializer")


def materialize_whole_box(
    parsed_lines: Sequence[LineItem],
    metadata: IntakeMetadata,
    operator: Optional[str] = None,
    units_per_box: Optional[Mapping[str, int]] = None,
) -> list[NewInventoryRecord]:
    """One whole-box record per line; the parsed number is the box count.

    total_quantity equals the box count unless units_per_box has an entry for
    the SKU, in which case it is boxes * units.
    """
    if not parsed_lines:
        raise NoLineItemsError()

    records = []
    for line in parsed_lines:
        units = (units_per_box or {}).get(line.sku, 1)
        if units < 1:
            raise ValueError(f"Units per box for {line.sku} must be at least 1, got {units}")
        records.append(
            NewInventoryRecord(
                sku=line.sku,
                total_quantity=line.quantity * units,
                total_boxes=line.quantity,
                box_type="whole",
                mix_box_group_key=None,
                operator=operator or DEFAULT_OPERATOR,
                **_metadata_fields(metadata),
            )
        )
    logger.info("materializer.whole_box", record_count=len(records), country=metadata.country)
    return records


def materialize_mixed_boxes(session: IntakeSession) -> list[NewInventoryRecord]:
    """One mixed-box record per line, one fresh group key per collected box.

    Output is grouped by box in collection order, and within a box in parse
    order, so that every group is contiguous.
    """
    if not session.is_completed:
        raise SessionStateError(f"Cannot materialize a session that is {session.state.value}")
    if not session.collected_boxes:
        raise EmptySessionError()

    stamp_ms = time.time_ns() // 1_000_000
    run_id = _new_run_id()
    records = []
    group_keys = []
    for box in session.collected_boxes:
        group_key = generate_group_key(box.box_index, stamp_ms, run_id)
        group_keys.append(group_key)
        for line in box.lines:
            records.append(
                NewInventoryRecord(
                    sku=line.sku,
                    total_quantity=line.quantity,
                    total_boxes=1,
                    box_type="mixed",
                    mix_box_group_key=group_key,
                    operator=session.operator,
                    **_metadata_fields(session.shared_metadata),
                )
            )
    logger.info(
        "materializer.mixed_boxes",
        box_count=len(group_keys),
        record_count=len(records),
        group_keys=group_keys,
    )
    return records


def generate_group_key(box_index: int, stamp_ms: Optional[int] = None, run_id: Optional[str] = None) -> str:
    """Group key for one physical box: <prefix><epoch ms>_<run id>_<1-based box number>.

    The run id is random per materialization, so two intakes in the same
    millisecond still get distinct keys.
    """
    if stamp_ms is None:
        stamp_ms = time.time_ns() // 1_000_000
    if run_id is None:
        run_id = _new_run_id()
    return f"{MIX_BOX_KEY_PREFIX}{stamp_ms}_{run_id}_{box_index + 1}"


def _new_run_id() -> str:
    return uuid.uuid4().hex[:8]


def _metadata_fields(metadata: IntakeMetadata) -> dict:
    return {
        "country": metadata.country,
        "packer": metadata.packer,
        "remark": metadata.remark,
        "marketplace": metadata.marketplace,
        "pre_type": metadata.pre_type,
    }
