"""Record storage backed by the local SQLAlchemy database."""

import asyncio
from typing import Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from stock_intake.db import init_db
from stock_intake.db.repositories import local_box_repo
from stock_intake.errors import StorageError
from stock_intake.models.outputs import GroupDetail
from stock_intake.models.records import (
    CreateResult,
    InventoryRecord,
    NewInventoryRecord,
    PendingSummaryRow,
    RecordFilter,
    RecordPatch,
)
from stock_intake.utils.logger import get_logger

logger = get_logger("stock_intake.storage.db")


class DbRecordStorage:
    """Runs the sync repository functions in worker threads, one at a time (SQLite has a single writer)."""

    def __init__(self, database_url: Optional[str] = None):
        init_db(database_url)
        self._lock = asyncio.Lock()

    async def _run(self, fn, *args):
        """Run fn in a worker thread. Database driver errors come back as StorageError."""
        async with self._lock:
            try:
                return await asyncio.to_thread(fn, *args)
            except SQLAlchemyError as e:
                logger.error("storage.db.error", operation=fn.__name__, error=str(e))
                raise StorageError(f"{fn.__name__} failed: {e}") from e

    async def create_records(self, records: Sequence[NewInventoryRecord]) -> CreateResult:
        created = await self._run(local_box_repo.insert_records, list(records))
        logger.info("storage.db.created", count=len(created))
        return CreateResult(
            created_count=len(created),
            created_ids=[r.record_id for r in created],
            records=created,
        )

    async def list_records(self, record_filter: Optional[RecordFilter] = None) -> list[InventoryRecord]:
        records = await self._run(local_box_repo.list_records, record_filter)
        logger.debug("storage.db.listed", count=len(records))
        return records

    async def get_group(self, group_key: str) -> Optional[GroupDetail]:
        records = await self._run(local_box_repo.get_group_records, group_key)
        if not records:
            return None
        return GroupDetail(
            group_key=group_key,
            sku_count=len(records),
            total_quantity=sum(r.total_quantity for r in records),
            country=records[0].country,
            created_at=records[0].created_at,
            last_update=max(r.updated_at for r in records),
            records=records,
        )

    async def update_record(self, record_id: str, patch: RecordPatch) -> InventoryRecord:
        record = await self._run(local_box_repo.update_record, record_id, patch)
        logger.info("storage.db.updated", record_id=record_id, fields=sorted(patch.changes()))
        return record

    async def delete_record(self, record_id: str) -> None:
        await self._run(local_box_repo.delete_record, record_id)
        logger.info("storage.db.deleted", record_id=record_id)

    async def pending_summary(self, record_filter: Optional[RecordFilter] = None) -> list[PendingSummaryRow]:
        return await self._run(local_box_repo.pending_summary, record_filter)
