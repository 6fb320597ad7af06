"""Tests for group-level edit, delete and print fan-out."""

import asyncio
import sys
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from _helpers import make_record

from stock_intake.errors import GroupNotFoundError, RecordLockedError, StorageError
from stock_intake.grouping import GroupCascadeOperations
from stock_intake.models.records import RecordFilter, RecordPatch


class FakeStorage:
    """In-memory storage. Ids in fail_ids raise on update/delete."""

    def __init__(self, records, fail_ids=()):
        self.records = {r.record_id: r for r in records}
        self.fail_ids = set(fail_ids)
        self.updated: list[tuple[str, RecordPatch]] = []
        self.deleted: list[str] = []
        self.filters: list[RecordFilter] = []

    async def list_records(self, record_filter=None):
        self.filters.append(record_filter)
        key = record_filter.mix_box_group_key if record_filter else None
        return [r for r in self.records.values() if key is None or r.mix_box_group_key == key]

    async def update_record(self, record_id, patch):
        await asyncio.sleep(0)
        if record_id in self.fail_ids:
            raise RecordLockedError(record_id, "shipped")
        self.updated.append((record_id, patch))
        return self.records[record_id].model_copy(update=patch.changes())

    async def delete_record(self, record_id):
        await asyncio.sleep(0)
        if record_id in self.fail_ids:
            raise StorageError("backend unavailable", status_code=500)
        self.deleted.append(record_id)
        self.records.pop(record_id)


class RecordingPrinter:
    def __init__(self):
        self.payloads = []

    async def print_labels(self, payloads):
        self.payloads.extend(payloads)
        return len(payloads)


def _box():
    return [
        make_record("1", "A", 10, group_key="G1"),
        make_record("2", "B", 5, group_key="G1"),
        make_record("3", "C", 7, group_key="G1"),
        make_record("4", "D", 3, group_key="G2"),
        make_record("5", "E", 2),
    ]


class TestGroupCascade(unittest.TestCase):
    def test_edit_group_touches_every_member(self):
        storage = FakeStorage(_box())
        ops = GroupCascadeOperations(storage)
        result = asyncio.run(ops.edit_group("G1", RecordPatch(country="DE")))
        self.assertTrue(result.ok)
        self.assertEqual(sorted(result.succeeded), ["1", "2", "3"])
        self.assertEqual(sorted(rid for rid, _ in storage.updated), ["1", "2", "3"])
        self.assertEqual(storage.filters[0].mix_box_group_key, "G1")

    def test_delete_group_reports_partial_failure(self):
        storage = FakeStorage(_box(), fail_ids={"2"})
        result = asyncio.run(GroupCascadeOperations(storage).delete_group("G1"))
        self.assertFalse(result.ok)
        self.assertEqual(result.action, "delete")
        self.assertEqual(sorted(result.succeeded), ["1", "3"])
        self.assertEqual(result.failed_ids, ["2"])
        self.assertIn("backend unavailable", result.failed[0].reason)
        self.assertEqual(result.total, 3)
        # Other groups and whole boxes untouched
        self.assertIn("4", storage.records)
        self.assertIn("5", storage.records)

    def test_edit_with_preloaded_records_skips_lookup(self):
        storage = FakeStorage(_box(), fail_ids={"1"})
        records = [r for r in _box() if r.mix_box_group_key == "G1"]
        result = asyncio.run(GroupCascadeOperations(storage).edit_group("G1", RecordPatch(packer="x"), records))
        self.assertEqual(storage.filters, [])
        self.assertEqual(result.failed_ids, ["1"])
        self.assertIn("shipped", result.failed[0].reason)

    def test_unknown_group(self):
        ops = GroupCascadeOperations(FakeStorage(_box()))
        with self.assertRaises(GroupNotFoundError):
            asyncio.run(ops.delete_group("NOPE"))
        with self.assertRaises(GroupNotFoundError):
            asyncio.run(ops.edit_group("NOPE", RecordPatch(country="FR"), records=[]))

    def test_print_group_sends_one_aggregate_label(self):
        printer = RecordingPrinter()
        ops = GroupCascadeOperations(FakeStorage(_box()), printer)
        payload = asyncio.run(ops.print_group("G1"))
        self.assertEqual(payload.quantity, 22)
        self.assertEqual(payload.sku, "mixed-box: G1")
        self.assertEqual(printer.payloads, [payload])

    def test_single_record_operations(self):
        storage = FakeStorage(_box())
        printer = RecordingPrinter()
        ops = GroupCascadeOperations(storage, printer)
        result = asyncio.run(ops.delete_record("5"))
        self.assertEqual(result.succeeded, ["5"])
        payload = asyncio.run(ops.print_record(make_record("4", "D", 3, group_key="G2")))
        self.assertEqual(payload.quantity, 3)
        self.assertEqual(len(printer.payloads), 1)


if __name__ == "__main__":
    unittest.main()
