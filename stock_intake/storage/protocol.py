"""Record storage protocol (the persistence/query service behind intake and the record views)."""

from typing import Optional, Protocol, Sequence

from stock_intake.models.outputs import GroupDetail
from stock_intake.models.records import (
    CreateResult,
    InventoryRecord,
    NewInventoryRecord,
    PendingSummaryRow,
    RecordFilter,
    RecordPatch,
)


class RecordStorage(Protocol):
    """Async interface to the inventory record store."""

    async def create_records(self, records: Sequence[NewInventoryRecord]) -> CreateResult:
        """Persist records as pending, assigning ids. The batch succeeds or fails as a whole."""
        ...

    async def list_records(self, record_filter: Optional[RecordFilter] = None) -> list[InventoryRecord]:
        """List records with every mixed-box group contiguous."""
        ...

    async def get_group(self, group_key: str) -> Optional[GroupDetail]:
        """Pending members of one mixed box, or None when the box has none."""
        ...

    async def update_record(self, record_id: str, patch: RecordPatch) -> InventoryRecord:
        """Apply patch to a pending record and return the updated record."""
        ...

    async def delete_record(self, record_id: str) -> None:
        """Delete a pending record."""
        ...

    async def pending_summary(self, record_filter: Optional[RecordFilter] = None) -> list[PendingSummaryRow]:
        """Pending stock per (sku, country)."""
        ...
