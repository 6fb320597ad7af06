"""Tests for the REST-API record storage using an httpx mock transport."""

import asyncio
import json
import sys
import unittest
from pathlib import Path

import httpx

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from stock_intake.errors import RecordNotFoundError, StorageError
from stock_intake.intake import materialize_whole_box, parse_line_items
from stock_intake.models.intake import IntakeMetadata
from stock_intake.models.records import RecordFilter, RecordPatch
from stock_intake.storage import HttpRecordStorage


def _wire(record_id, sku, qty, group=None, status="待出库"):
    return {
        "记录号": record_id,
        "sku": sku,
        "total_quantity": qty,
        "total_boxes": 1,
        "country": "US",
        "操作员": "op",
        "打包员": "Li",
        "box_type": "混合箱" if group else "整箱",
        "mix_box_num": group,
        "marketPlace": "amazon",
        "pre_type": "旺季备货",
        "status": status,
        "time": "2024-05-01T09:30:00",
        "last_updated_at": "2024-05-01T10:00:00",
    }


def _storage(handler) -> HttpRecordStorage:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://inventory.test")
    return HttpRecordStorage(base_url="http://inventory.test", client=client)


def _ok(data):
    return httpx.Response(200, json={"code": 0, "message": "ok", "data": data})


class TestHttpRecordStorage(unittest.TestCase):
    def test_list_maps_wire_fields_and_regroups(self):
        seen = {}

        def handler(request: httpx.Request):
            seen["path"] = request.url.path
            seen["params"] = dict(request.url.params)
            return _ok({"records": [
                _wire("3", "A", 1, group="G1"),
                _wire("2", "W", 4),
                _wire("1", "B", 2, group="G1"),
            ]})

        records = asyncio.run(_storage(handler).list_records(RecordFilter(box_type="mixed", status="pending")))
        self.assertEqual(seen["path"], "/api/inventory/records")
        self.assertEqual(seen["params"]["box_type"], "混合箱")
        self.assertEqual(seen["params"]["status"], "待出库")
        self.assertEqual([r.record_id for r in records], ["3", "1", "2"])
        first = records[0]
        self.assertEqual((first.operator, first.packer, first.marketplace), ("op", "Li", "amazon"))
        self.assertEqual((first.box_type, first.pre_type, first.status), ("mixed", "peak", "pending"))
        self.assertEqual(records[2].box_type, "whole")

    def test_create_posts_wire_records(self):
        bodies = []

        def handler(request: httpx.Request):
            bodies.append(json.loads(request.content))
            return _ok({"records": [_wire("10", "A", 5)]})

        new_records = materialize_whole_box(parse_line_items("A 5"), IntakeMetadata(country="US"))
        result = asyncio.run(_storage(handler).create_records(new_records))
        sent = bodies[0]["records"][0]
        self.assertEqual(sent["box_type"], "整箱")
        self.assertEqual(sent["pre_type"], "平时备货")
        self.assertIsNone(sent["mix_box_num"])
        self.assertEqual(result.created_ids, ["10"])

    def test_edit_sends_update_data_and_note(self):
        bodies = []

        def handler(request: httpx.Request):
            bodies.append((request.method, request.url.path, json.loads(request.content)))
            return _ok(_wire("7", "A", 5))

        asyncio.run(_storage(handler).update_record("7", RecordPatch(packer="Zhao", change_note="fix packer")))
        method, path, body = bodies[0]
        self.assertEqual((method, path), ("PUT", "/api/inventory/edit/7"))
        self.assertEqual(body, {"updateData": {"打包员": "Zhao"}, "changeNote": "fix packer"})

    def test_error_envelope_raises(self):
        def handler(request: httpx.Request):
            return httpx.Response(200, json={"code": 1, "message": "SKU missing"})

        with self.assertRaises(StorageError) as ctx:
            asyncio.run(_storage(handler).list_records())
        self.assertIn("SKU missing", str(ctx.exception))

    def test_server_error_raises_with_status(self):
        def handler(request: httpx.Request):
            return httpx.Response(500, json={"code": 1, "message": "boom", "error": "db down"})

        with self.assertRaises(StorageError) as ctx:
            asyncio.run(_storage(handler).pending_summary())
        self.assertEqual(ctx.exception.status_code, 500)
        self.assertEqual(ctx.exception.message, "db down")

    def test_transport_error_raises(self):
        def handler(request: httpx.Request):
            raise httpx.ConnectError("refused", request=request)

        with self.assertRaises(StorageError):
            asyncio.run(_storage(handler).list_records())

    def test_missing_group_and_record(self):
        def handler(request: httpx.Request):
            return httpx.Response(404, json={"code": 1, "message": "not found"})

        storage = _storage(handler)

        async def run():
            self.assertIsNone(await storage.get_group("G1"))
            with self.assertRaises(RecordNotFoundError):
                await storage.delete_record("9")

        asyncio.run(run())

    def test_group_detail_and_pending(self):
        def handler(request: httpx.Request):
            if request.url.path.startswith("/api/inventory/mixed-box/"):
                return _ok({
                    "records": [_wire("1", "A", 3, group="G1"), _wire("2", "B", 4, group="G1")],
                    "summary": {"skuCount": 2, "totalQuantity": 7, "country": "US"},
                })
            return _ok({"inventory": [{
                "sku": "A", "country": "US", "whole_box_quantity": 5, "whole_box_count": 5,
                "mixed_box_quantity": 3, "mixed_box_count": 1,
            }]})

        storage = _storage(handler)

        async def run():
            return await storage.get_group("G1"), await storage.pending_summary()

        detail, (row,) = asyncio.run(run())
        self.assertEqual((detail.sku_count, detail.total_quantity), (2, 7))
        self.assertEqual(row.total_quantity, 8)


if __name__ == "__main__":
    unittest.main()
