"""Build print payloads for single records, whole-box expansions and mixed-box groups."""

import json
from typing import Sequence

from stock_intake.models.outputs import PrintPayload
from stock_intake.models.records import InventoryRecord


def record_label(record: InventoryRecord) -> PrintPayload:
    """Label for one stored record as-is."""
    return PrintPayload(
        record_id=record.record_id,
        sku=record.sku,
        quantity=record.total_quantity,
        boxes=record.total_boxes,
        country=record.country,
        operator=record.operator,
        packer=record.packer,
        box_type=record.box_type,
        group_key=record.mix_box_group_key,
        barcode=record.record_id,
        created_at=record.created_at,
        qr_data=json.dumps(
            {"id": record.record_id, "sku": record.sku, "qty": record.total_quantity, "country": record.country},
            ensure_ascii=False,
        ),
    )


def whole_box_labels(record: InventoryRecord) -> list[PrintPayload]:
    """One label per physical box of a whole-box record, barcoded <record_id>_<n>."""
    per_box = record.total_quantity // record.total_boxes
    labels = []
    for n in range(1, record.total_boxes + 1):
        box_id = f"{record.record_id}_{n}"
        labels.append(
            PrintPayload(
                record_id=box_id,
                sku=record.sku,
                quantity=per_box,
                boxes=1,
                country=record.country,
                operator=record.operator,
                packer=record.packer,
                box_type="whole",
                barcode=box_id,
                created_at=record.created_at,
            )
        )
    return labels


def group_label(group_key: str, records: Sequence[InventoryRecord]) -> PrintPayload:
    """Single aggregate label for a group: composite SKU, summed quantity, one box.

    Group metadata (country, operator, packer) is taken from the first member.
    """
    if not records:
        raise ValueError(f"Cannot print mixed box {group_key!r}: it has no records")
    first = records[0]
    return PrintPayload(
        record_id=group_key,
        sku=f"mixed-box: {group_key}",
        quantity=sum(r.total_quantity for r in records),
        boxes=1,
        country=first.country,
        operator=first.operator,
        packer=first.packer,
        box_type="mixed",
        group_key=group_key,
        barcode=group_key,
        created_at=first.created_at,
        qr_data=json.dumps(
            {
                "mixBoxNum": group_key,
                "skus": [{"sku": r.sku, "quantity": r.total_quantity} for r in records],
                "country": first.country,
            },
            ensure_ascii=False,
        ),
    )
