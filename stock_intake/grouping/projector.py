"""Rebuild mixed-box groups from the flat record list and project row spans for display."""

from collections import Counter
from typing import Optional, Sequence

from stock_intake.errors import NonContiguousGroupError
from stock_intake.models.outputs import DisplayRow, MixedBoxGroup
from stock_intake.models.records import InventoryRecord


def project_rows(records: Sequence[InventoryRecord]) -> list[DisplayRow]:
    """Single forward pass: the first record of each group anchors it with row_span = group size.

    Whole-box records are their own one-row anchors. Later members of a group
    get row_span 0 and are not anchors. Input must keep each group contiguous;
    a key that reappears after its run ended raises NonContiguousGroupError.
    """
    frequency = Counter(r.mix_box_group_key for r in records if r.mix_box_group_key is not None)
    closed: set[str] = set()
    current_key: Optional[str] = None
    rows: list[DisplayRow] = []

    for position, record in enumerate(records):
        key = record.mix_box_group_key
        if key != current_key and current_key is not None:
            closed.add(current_key)
        if key is None:
            current_key = None
            rows.append(DisplayRow(record=record, row_span=1, is_group_anchor=True))
        elif key != current_key:
            if key in closed:
                raise NonContiguousGroupError(key, position)
            current_key = key
            rows.append(DisplayRow(record=record, row_span=frequency[key], is_group_anchor=True))
        else:
            rows.append(DisplayRow(record=record, row_span=0, is_group_anchor=False))
    return rows


def build_groups(records: Sequence[InventoryRecord]) -> list[MixedBoxGroup]:
    """Contiguous mixed-box groups in input order. Whole-box records are skipped."""
    groups: list[MixedBoxGroup] = []
    for row in project_rows(records):
        key = row.record.mix_box_group_key
        if key is None:
            continue
        if row.is_group_anchor:
            groups.append(MixedBoxGroup(group_key=key, member_records=[row.record]))
        else:
            groups[-1].member_records.append(row.record)
    return groups


def find_group(records: Sequence[InventoryRecord], group_key: str) -> MixedBoxGroup:
    """Members of one group, in input order. Empty when no record carries the key."""
    members = [r for r in records if r.mix_box_group_key == group_key]
    return MixedBoxGroup(group_key=group_key, member_records=members)
