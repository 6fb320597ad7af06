"""Fan group-level edit/delete/print out over every record that shares a group key."""

import asyncio
from typing import Awaitable, Callable, Optional, Sequence

from stock_intake.errors import GroupNotFoundError
from stock_intake.labels.builder import group_label, record_label
from stock_intake.labels.protocol import LabelPrinter
from stock_intake.models.outputs import CascadeResult, FailedMember, MixedBoxGroup, PrintPayload
from stock_intake.models.records import InventoryRecord, RecordFilter, RecordPatch
from stock_intake.storage.protocol import RecordStorage
from stock_intake.utils.logger import get_logger

logger = get_logger("stock_intake.grouping.cascade")

# Upper bound on members fetched for one mixed box
_GROUP_FETCH_LIMIT = 1000


class GroupCascadeOperations:
    """Group operations over a record storage.

    Member operations are dispatched concurrently and the result is returned
    only after every one has settled. Per-member failures are reported in the
    CascadeResult; they never abort the other members.
    """

    def __init__(self, storage: RecordStorage, printer: Optional[LabelPrinter] = None):
        self._storage = storage
        self._printer = printer

    async def load_group(self, group_key: str) -> MixedBoxGroup:
        """Fetch the current members of a group. Raises GroupNotFoundError when there are none."""
        records = await self._storage.list_records(
            RecordFilter(mix_box_group_key=group_key, limit=_GROUP_FETCH_LIMIT)
        )
        members = [r for r in records if r.mix_box_group_key == group_key]
        if not members:
            raise GroupNotFoundError(group_key)
        return MixedBoxGroup(group_key=group_key, member_records=members)

    async def edit_group(
        self,
        group_key: str,
        patch: RecordPatch,
        records: Optional[Sequence[InventoryRecord]] = None,
    ) -> CascadeResult:
        """Apply the same patch to every member of the group."""
        record_ids = await self._member_ids(group_key, records)

        async def _edit(record_id: str) -> None:
            await self._storage.update_record(record_id, patch)

        return await self._fan_out(group_key, "edit", record_ids, _edit)

    async def delete_group(
        self,
        group_key: str,
        records: Optional[Sequence[InventoryRecord]] = None,
    ) -> CascadeResult:
        """Delete every member of the group, reporting exactly which deletions failed."""
        record_ids = await self._member_ids(group_key, records)
        return await self._fan_out(group_key, "delete", record_ids, self._storage.delete_record)

    async def print_group(
        self,
        group_key: str,
        records: Optional[Sequence[InventoryRecord]] = None,
    ) -> PrintPayload:
        """Build (and send, when a printer is configured) one aggregate label for the group."""
        members = list(records) if records is not None else (await self.load_group(group_key)).member_records
        payload = group_label(group_key, members)
        await self._send([payload])
        logger.info("cascade.print_group", group_key=group_key, quantity=payload.quantity, members=len(members))
        return payload

    async def edit_record(self, record_id: str, patch: RecordPatch) -> CascadeResult:
        """Edit a single record as a one-member group keyed by its record id."""
        async def _edit(rid: str) -> None:
            await self._storage.update_record(rid, patch)

        return await self._fan_out(record_id, "edit", [record_id], _edit)

    async def delete_record(self, record_id: str) -> CascadeResult:
        """Delete a single record as a one-member group keyed by its record id."""
        return await self._fan_out(record_id, "delete", [record_id], self._storage.delete_record)

    async def print_record(self, record: InventoryRecord) -> PrintPayload:
        """Print one record's own label."""
        payload = record_label(record)
        await self._send([payload])
        logger.info("cascade.print_record", record_id=record.record_id)
        return payload

    async def _member_ids(self, group_key: str, records: Optional[Sequence[InventoryRecord]]) -> list[str]:
        if records is None:
            return (await self.load_group(group_key)).record_ids
        ids = [r.record_id for r in records if r.mix_box_group_key == group_key]
        if not ids:
            raise GroupNotFoundError(group_key)
        return ids

    async def _fan_out(
        self,
        group_key: str,
        action: str,
        record_ids: list[str],
        operation: Callable[[str], Awaitable[object]],
    ) -> CascadeResult:
        log = logger.bind(group_key=group_key, action=action, members=len(record_ids))
        log.info("cascade.start")
        outcomes = await asyncio.gather(*(operation(rid) for rid in record_ids), return_exceptions=True)

        result = CascadeResult(group_key=group_key, action=action)
        for record_id, outcome in zip(record_ids, outcomes):
            if isinstance(outcome, Exception):
                result.failed.append(FailedMember(record_id=record_id, reason=str(outcome)))
                log.warning("cascade.member_failed", record_id=record_id, error=str(outcome))
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                result.succeeded.append(record_id)

        if result.ok:
            log.info("cascade.complete", succeeded=len(result.succeeded))
        else:
            log.warning(
                "cascade.partial_failure",
                succeeded=len(result.succeeded),
                failed=result.failed_ids,
            )
        return result

    async def _send(self, payloads: list[PrintPayload]) -> None:
        if self._printer is not None:
            await self._printer.print_labels(payloads)
