"""Inventory record repository: create, list (group-contiguous), edit, delete, summarize."""

from datetime import datetime, timezone
from typing import Optional, Sequence

from sqlalchemy import Integer, case, cast, func, select

from stock_intake.db import get_session
from stock_intake.db.models.local_box import LocalBox
from stock_intake.errors import GroupKeyConflictError, RecordLockedError, RecordNotFoundError
from stock_intake.models.records import (
    InventoryRecord,
    NewInventoryRecord,
    PendingSummaryRow,
    RecordFilter,
    RecordPatch,
)

STATUS_PENDING = "pending"
STATUS_SHIPPED = "shipped"


def _to_record(row: LocalBox) -> InventoryRecord:
    return InventoryRecord.model_validate(row, from_attributes=True)


def _next_sequence(session, minute_prefix: str) -> int:
    """Next per-minute sequence number for record ids starting with minute_prefix.

    The suffix is compared as a number, so it keeps counting past 999.
    """
    suffix = cast(func.substr(LocalBox.record_id, len(minute_prefix) + 1), Integer)
    last = session.scalar(select(func.max(suffix)).where(LocalBox.record_id.like(f"{minute_prefix}%")))
    return (last or 0) + 1


def _check_group_keys_free(session, records: Sequence[NewInventoryRecord]) -> None:
    keys = {r.mix_box_group_key for r in records if r.mix_box_group_key}
    if not keys:
        return
    taken = session.scalars(
        select(LocalBox.mix_box_group_key)
        .where(LocalBox.mix_box_group_key.in_(keys))
        .where(LocalBox.status == STATUS_PENDING)
        .limit(1)
    ).first()
    if taken is not None:
        raise GroupKeyConflictError(taken)


def insert_records(records: Sequence[NewInventoryRecord]) -> list[InventoryRecord]:
    """Insert all records in one transaction as pending. Ids are YYYYMMDDHHMM + a zero-padded per-minute sequence."""
    now = datetime.now(timezone.utc)
    minute_prefix = now.strftime("%Y%m%d%H%M")
    with get_session() as session:
        _check_group_keys_free(session, records)
        sequence = _next_sequence(session, minute_prefix)
        rows = []
        for offset, record in enumerate(records):
            row = LocalBox(
                record_id=f"{minute_prefix}{sequence + offset:03d}",
                status=STATUS_PENDING,
                created_at=now,
                updated_at=now,
                **record.model_dump(),
            )
            if not row.remark:
                row.remark = f"{now.isoformat()} intake created"
            session.add(row)
            rows.append(row)
        session.flush()
        return [_to_record(r) for r in rows]


def _apply_filter(q, record_filter: RecordFilter):
    if record_filter.sku:
        q = q.where(LocalBox.sku.like(f"%{record_filter.sku.strip()}%"))
    if record_filter.country:
        q = q.where(LocalBox.country == record_filter.country)
    if record_filter.mix_box_group_key:
        q = q.where(LocalBox.mix_box_group_key == record_filter.mix_box_group_key.strip())
    elif record_filter.box_type == "whole":
        q = q.where(LocalBox.mix_box_group_key.is_(None))
    elif record_filter.box_type == "mixed":
        q = q.where(LocalBox.mix_box_group_key.is_not(None))
    if record_filter.status:
        q = q.where(LocalBox.status == record_filter.status)
    else:
        q = q.where(LocalBox.status != STATUS_SHIPPED)
    return q


def list_records(record_filter: Optional[RecordFilter] = None) -> list[InventoryRecord]:
    """List records newest group first, members of a group adjacent and in id order.

    Whole-box records form their own single-row group keyed by record id.
    """
    record_filter = record_filter or RecordFilter()
    group_col = func.coalesce(LocalBox.mix_box_group_key, LocalBox.record_id)
    anchors = (
        select(group_col.label("group_key"), func.min(LocalBox.record_id).label("first_id"))
        .group_by(group_col)
        .subquery()
    )
    q = select(LocalBox).join(anchors, anchors.c.group_key == group_col)
    q = _apply_filter(q, record_filter)
    q = (
        q.order_by(anchors.c.first_id.desc(), LocalBox.record_id.asc())
        .limit(record_filter.limit)
        .offset((record_filter.page - 1) * record_filter.limit)
    )
    with get_session() as session:
        return [_to_record(r) for r in session.scalars(q).all()]


def get_group_records(group_key: str) -> list[InventoryRecord]:
    """Pending members of one mixed box, in id order."""
    with get_session() as session:
        rows = session.scalars(
            select(LocalBox)
            .where(LocalBox.mix_box_group_key == group_key)
            .where(LocalBox.status == STATUS_PENDING)
            .order_by(LocalBox.record_id.asc())
        ).all()
        return [_to_record(r) for r in rows]


def _get_pending_row(session, record_id: str) -> LocalBox:
    row = session.get(LocalBox, record_id)
    if row is None:
        raise RecordNotFoundError(record_id)
    if row.status != STATUS_PENDING:
        raise RecordLockedError(record_id, row.status)
    return row


def update_record(record_id: str, patch: RecordPatch) -> InventoryRecord:
    """Apply patch to a pending record and append the change note to its remark."""
    now = datetime.now(timezone.utc)
    with get_session() as session:
        row = _get_pending_row(session, record_id)
        for field, value in patch.changes().items():
            setattr(row, field, value)
        if patch.change_note:
            row.remark = f"{row.remark or ''};\n{now.isoformat()} edit: {patch.change_note}"
        row.updated_at = now
        session.flush()
        return _to_record(row)


def delete_record(record_id: str) -> None:
    """Hard-delete a pending record."""
    with get_session() as session:
        row = _get_pending_row(session, record_id)
        session.delete(row)


def pending_summary(record_filter: Optional[RecordFilter] = None) -> list[PendingSummaryRow]:
    """Pending stock per (sku, country): whole-box quantity/boxes, mixed quantity and distinct boxes."""
    record_filter = (record_filter or RecordFilter()).model_copy(update={"status": STATUS_PENDING})
    is_whole = LocalBox.box_type == "whole"
    is_mixed = LocalBox.box_type == "mixed"
    q = select(
        LocalBox.sku,
        LocalBox.country,
        func.sum(case((is_whole, LocalBox.total_quantity), else_=0)),
        func.sum(case((is_whole, LocalBox.total_boxes), else_=0)),
        func.sum(case((is_mixed, LocalBox.total_quantity), else_=0)),
        func.count(func.distinct(case((is_mixed, LocalBox.mix_box_group_key)))),
        func.min(LocalBox.created_at),
        func.max(LocalBox.updated_at),
    )
    q = _apply_filter(q, record_filter)
    q = q.group_by(LocalBox.sku, LocalBox.country).order_by(LocalBox.sku.asc(), LocalBox.country.asc())
    with get_session() as session:
        rows = session.execute(q).all()
    return [
        PendingSummaryRow(
            sku=sku,
            country=country,
            whole_box_quantity=whole_qty or 0,
            whole_box_count=whole_boxes or 0,
            mixed_box_quantity=mixed_qty or 0,
            mixed_box_count=mixed_boxes or 0,
            earliest_inbound=earliest,
            latest_update=latest,
        )
        for sku, country, whole_qty, whole_boxes, mixed_qty, mixed_boxes, earliest, latest in rows
    ]
