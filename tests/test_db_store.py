"""Tests for the SQLAlchemy-backed record storage and its repository."""

import asyncio
import os
import sys
import unittest
from datetime import datetime, timezone
from pathlib import Path
from unittest import mock

# Set in-memory DB before any db import
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
sys.path.insert(0, str(Path(__file__).resolve().parent))
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy.exc import OperationalError

from _helpers import ship_records

from stock_intake.db import get_session, reset_db
from stock_intake.db.models import LocalBox
from stock_intake.db.repositories import local_box_repo
from stock_intake.errors import GroupKeyConflictError, RecordLockedError, RecordNotFoundError, StorageError
from stock_intake.grouping import GroupCascadeOperations, project_rows
from stock_intake.intake import commit_current_box, materialize_mixed_boxes, materialize_whole_box, parse_line_items, start_session
from stock_intake.models.intake import IntakeMetadata
from stock_intake.models.records import RecordFilter, RecordPatch
from stock_intake.storage import DbRecordStorage


def _whole(text: str, country: str = "US"):
    return materialize_whole_box(parse_line_items(text), IntakeMetadata(country=country), operator="op")


def _mixed(*boxes: str, country: str = "US"):
    session = start_session(len(boxes), IntakeMetadata(country=country, packer="Li"), operator="op")
    for text in boxes:
        session = commit_current_box(session, text)
    return materialize_mixed_boxes(session)


class TestDbRecordStorage(unittest.TestCase):
    def setUp(self):
        reset_db()
        self.storage = DbRecordStorage("sqlite:///:memory:")

    def tearDown(self):
        reset_db()

    def test_create_assigns_pending_ids(self):
        async def run():
            return await self.storage.create_records(_whole("A 5\nB 2"))

        result = asyncio.run(run())
        self.assertEqual(result.created_count, 2)
        self.assertEqual(len(set(result.created_ids)), 2)
        for record in result.records:
            self.assertRegex(record.record_id, r"^\d{15}$")
            self.assertEqual(record.status, "pending")
            self.assertIn("intake created", record.remark)
        self.assertLess(result.created_ids[0], result.created_ids[1])

    def test_list_keeps_groups_contiguous_newest_first(self):
        async def run():
            await self.storage.create_records(_whole("A 1"))
            await self.storage.create_records(_mixed("M1 3\nM2 4"))
            await self.storage.create_records(_whole("B 1"))
            return await self.storage.list_records()

        records = asyncio.run(run())
        self.assertEqual([r.sku for r in records], ["B", "M1", "M2", "A"])
        rows = project_rows(records)
        self.assertEqual([r.row_span for r in rows], [1, 2, 0, 1])

    def test_filters(self):
        async def run():
            await self.storage.create_records(_whole("ABC-1 1\nXYZ 2", country="US"))
            mixed = await self.storage.create_records(_mixed("ABC-2 3", country="UK"))
            key = mixed.records[0].mix_box_group_key
            return (
                await self.storage.list_records(RecordFilter(box_type="mixed")),
                await self.storage.list_records(RecordFilter(box_type="whole")),
                await self.storage.list_records(RecordFilter(sku="ABC")),
                await self.storage.list_records(RecordFilter(country="UK")),
                await self.storage.list_records(RecordFilter(mix_box_group_key=key)),
            )

        mixed, whole, abc, uk, by_key = asyncio.run(run())
        self.assertEqual([r.sku for r in mixed], ["ABC-2"])
        self.assertEqual(sorted(r.sku for r in whole), ["ABC-1", "XYZ"])
        self.assertEqual(sorted(r.sku for r in abc), ["ABC-1", "ABC-2"])
        self.assertEqual([r.sku for r in uk], ["ABC-2"])
        self.assertEqual([r.sku for r in by_key], ["ABC-2"])

    def test_update_appends_change_note(self):
        async def run():
            created = await self.storage.create_records(_whole("A 1"))
            rid = created.created_ids[0]
            return await self.storage.update_record(rid, RecordPatch(country="DE", change_note="wrong country"))

        updated = asyncio.run(run())
        self.assertEqual(updated.country, "DE")
        self.assertIn("edit: wrong country", updated.remark)
        self.assertIn("intake created", updated.remark)

    def test_shipped_records_locked_and_hidden(self):
        async def run():
            created = await self.storage.create_records(_whole("A 1\nB 1"))
            shipped_id, pending_id = created.created_ids
            self.assertEqual(ship_records([shipped_id], shipment_id=7), 1)
            with self.assertRaises(RecordLockedError):
                await self.storage.update_record(shipped_id, RecordPatch(country="DE"))
            with self.assertRaises(RecordLockedError):
                await self.storage.delete_record(shipped_id)
            with self.assertRaises(RecordNotFoundError):
                await self.storage.delete_record("000000000000999")
            visible = await self.storage.list_records()
            shipped = await self.storage.list_records(RecordFilter(status="shipped"))
            return pending_id, visible, shipped

        pending_id, visible, shipped = asyncio.run(run())
        self.assertEqual([r.record_id for r in visible], [pending_id])
        self.assertEqual(len(shipped), 1)
        self.assertEqual(shipped[0].shipment_id, 7)
        self.assertIsNotNone(shipped[0].shipped_at)

    def test_get_group(self):
        async def run():
            created = await self.storage.create_records(_mixed("A 10\nB 5"))
            key = created.records[0].mix_box_group_key
            return key, await self.storage.get_group(key), await self.storage.get_group("MIX0_1")

        key, detail, missing = asyncio.run(run())
        self.assertEqual(detail.group_key, key)
        self.assertEqual(detail.sku_count, 2)
        self.assertEqual(detail.total_quantity, 15)
        self.assertIsNone(missing)

    def test_pending_summary_splits_box_types(self):
        async def run():
            await self.storage.create_records(_whole("A 5"))
            await self.storage.create_records(_mixed("A 3\nB 2", "A 1"))
            return await self.storage.pending_summary()

        summary = {row.sku: row for row in asyncio.run(run())}
        self.assertEqual(sorted(summary), ["A", "B"])
        a = summary["A"]
        self.assertEqual((a.whole_box_quantity, a.whole_box_count), (5, 5))
        self.assertEqual((a.mixed_box_quantity, a.mixed_box_count), (4, 2))
        self.assertEqual(a.total_quantity, 9)
        self.assertEqual(summary["B"].mixed_box_count, 1)

    def test_delete_group_with_locked_member(self):
        async def run():
            created = await self.storage.create_records(_mixed("A 1\nB 1\nC 1"))
            key = created.records[0].mix_box_group_key
            ship_records([created.created_ids[1]], shipment_id=1)
            records = await self.storage.list_records(RecordFilter(mix_box_group_key=key, status="pending"))
            result = await GroupCascadeOperations(self.storage).delete_group(key, records=records)
            remaining = await self.storage.list_records(RecordFilter(mix_box_group_key=key, status="shipped"))
            return created, result, remaining

        created, result, remaining = asyncio.run(run())
        self.assertTrue(result.ok)
        self.assertEqual(sorted(result.succeeded), sorted([created.created_ids[0], created.created_ids[2]]))
        self.assertEqual([r.record_id for r in remaining], [created.created_ids[1]])

    def test_back_to_back_mixed_intakes_stay_separate(self):
        async def run():
            first = await self.storage.create_records(_mixed("A 1"))
            second = await self.storage.create_records(_mixed("B 1"))
            key = first.records[0].mix_box_group_key
            result = await GroupCascadeOperations(self.storage).delete_group(key)
            return second, result, await self.storage.list_records()

        second, result, remaining = asyncio.run(run())
        self.assertEqual(result.total, 1)
        self.assertEqual([r.record_id for r in remaining], second.created_ids)

    def test_existing_group_key_rejected(self):
        new_records = _mixed("A 1\nB 2")

        async def run():
            await self.storage.create_records(new_records)
            with self.assertRaises(GroupKeyConflictError) as ctx:
                await self.storage.create_records(new_records)
            self.assertEqual(ctx.exception.status_code, 409)
            return await self.storage.list_records()

        self.assertEqual(len(asyncio.run(run())), 2)

    def test_sequence_continues_past_999_in_one_minute(self):
        fixed = datetime(2026, 10, 18, 19, 0, tzinfo=timezone.utc)

        class FixedClock(datetime):
            @classmethod
            def now(cls, tz=None):
                return fixed

        prefix = "202610181900"
        with get_session() as session:
            for suffix in ("998", "999", "1000"):
                session.add(
                    LocalBox(
                        record_id=f"{prefix}{suffix}",
                        sku="SEED",
                        total_quantity=1,
                        total_boxes=1,
                        box_type="whole",
                        country="US",
                        operator="op",
                        status="pending",
                    )
                )

        with get_session() as session:
            self.assertEqual(local_box_repo._next_sequence(session, prefix), 1001)

        with mock.patch.object(local_box_repo, "datetime", FixedClock):
            created = asyncio.run(self.storage.create_records(_whole("A 1\nB 1")))
        self.assertEqual(created.created_ids, [f"{prefix}1001", f"{prefix}1002"])

    def test_driver_errors_become_storage_error(self):
        def locked_list(record_filter=None):
            raise OperationalError("SELECT 1", {}, Exception("database is locked"))

        with mock.patch.object(local_box_repo, "list_records", locked_list):
            with self.assertRaises(StorageError) as ctx:
                asyncio.run(self.storage.list_records())
        self.assertIn("database is locked", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
