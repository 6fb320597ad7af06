"""DB repositories: sync functions over the local_boxes table."""

from stock_intake.db.repositories.local_box_repo import (
    delete_record,
    get_group_records,
    insert_records,
    list_records,
    pending_summary,
    update_record,
)

__all__ = [
    "insert_records",
    "list_records",
    "get_group_records",
    "update_record",
    "delete_record",
    "pending_summary",
]
