"""Map between record models and the inventory REST API's wire fields."""

from typing import Any, Iterable, Optional

from stock_intake.models.records import (
    InventoryRecord,
    NewInventoryRecord,
    PendingSummaryRow,
    RecordFilter,
    RecordPatch,
)

BOX_TYPE_TO_WIRE = {"whole": "整箱", "mixed": "混合箱"}
BOX_TYPE_FROM_WIRE = {v: k for k, v in BOX_TYPE_TO_WIRE.items()}
STATUS_TO_WIRE = {"pending": "待出库", "shipped": "已出库", "cancelled": "已取消"}
STATUS_FROM_WIRE = {v: k for k, v in STATUS_TO_WIRE.items()}
PRE_TYPE_TO_WIRE = {"regular": "平时备货", "peak": "旺季备货"}
PRE_TYPE_FROM_WIRE = {v: k for k, v in PRE_TYPE_TO_WIRE.items()}

# Wire names of the patchable fields that differ from ours
_PATCH_FIELD_TO_WIRE = {"packer": "打包员", "marketplace": "marketPlace"}


def new_record_to_wire(record: NewInventoryRecord) -> dict[str, Any]:
    return {
        "sku": record.sku,
        "total_quantity": record.total_quantity,
        "total_boxes": record.total_boxes,
        "country": record.country,
        "operator": record.operator,
        "packer": record.packer,
        "pre_type": PRE_TYPE_TO_WIRE[record.pre_type],
        "box_type": BOX_TYPE_TO_WIRE[record.box_type],
        "mix_box_num": record.mix_box_group_key,
        "marketplace": record.marketplace,
        "remark": record.remark,
    }


def record_from_wire(data: dict[str, Any]) -> InventoryRecord:
    """Parse one stored row. box_type follows mix_box_num when the two disagree."""
    group_key = data.get("mix_box_num") or None
    box_type = "mixed" if group_key else "whole"
    pre_type = data.get("pre_type")
    return InventoryRecord(
        record_id=str(data.get("记录号") or data.get("record_id") or ""),
        sku=data.get("sku") or "",
        total_quantity=int(data.get("total_quantity") or 0),
        total_boxes=int(data.get("total_boxes") or 0),
        box_type=box_type,
        mix_box_group_key=group_key,
        country=data.get("country") or "",
        operator=data.get("操作员") or data.get("operator") or "",
        packer=data.get("打包员") or data.get("packer"),
        remark=data.get("remark"),
        marketplace=data.get("marketPlace") or data.get("marketplace"),
        pre_type=PRE_TYPE_FROM_WIRE.get(pre_type, pre_type or "regular"),
        status=STATUS_FROM_WIRE.get(data.get("status"), data.get("status") or "pending"),
        created_at=data.get("time") or data.get("created_at"),
        updated_at=data.get("last_updated_at") or data.get("time") or data.get("updated_at"),
        shipped_at=data.get("shipped_at"),
        shipment_id=data.get("shipment_id"),
    )


def patch_to_wire(patch: RecordPatch) -> dict[str, Any]:
    return {
        "updateData": {_PATCH_FIELD_TO_WIRE.get(k, k): v for k, v in patch.changes().items()},
        "changeNote": patch.change_note,
    }


def filter_to_params(record_filter: Optional[RecordFilter]) -> dict[str, str]:
    record_filter = record_filter or RecordFilter()
    params: dict[str, str] = {"page": str(record_filter.page), "limit": str(record_filter.limit)}
    if record_filter.sku:
        params["sku"] = record_filter.sku
    if record_filter.country:
        params["country"] = record_filter.country
    if record_filter.mix_box_group_key:
        params["mix_box_num"] = record_filter.mix_box_group_key
    if record_filter.box_type:
        params["box_type"] = BOX_TYPE_TO_WIRE[record_filter.box_type]
    if record_filter.status:
        params["status"] = STATUS_TO_WIRE[record_filter.status]
    return params


def summary_from_wire(data: dict[str, Any]) -> PendingSummaryRow:
    return PendingSummaryRow(
        sku=data.get("sku") or "",
        country=data.get("country") or "",
        whole_box_quantity=int(data.get("whole_box_quantity") or 0),
        whole_box_count=int(data.get("whole_box_count") or 0),
        mixed_box_quantity=int(data.get("mixed_box_quantity") or 0),
        mixed_box_count=int(data.get("mixed_box_count") or 0),
        earliest_inbound=data.get("earliest_inbound"),
        latest_update=data.get("latest_update"),
    )


def regroup_contiguous(records: Iterable[InventoryRecord]) -> list[InventoryRecord]:
    """Stable reorder so each group's members follow its first occurrence."""
    order: list[str] = []
    buckets: dict[str, list[InventoryRecord]] = {}
    for r in records:
        key = r.mix_box_group_key or f"record:{r.record_id}"
        if key not in buckets:
            buckets[key] = []
            order.append(key)
        buckets[key].append(r)
    return [r for key in order for r in buckets[key]]
