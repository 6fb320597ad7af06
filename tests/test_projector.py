"""Tests for group reconstruction and row-span projection."""

import sys
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from _helpers import make_record

from stock_intake.errors import NonContiguousGroupError
from stock_intake.grouping import build_groups, find_group, project_rows


class TestProjectRows(unittest.TestCase):
    def test_mixed_and_whole_projection(self):
        records = [
            make_record("1", "SKU1"),
            make_record("2", "A", group_key="G1"),
            make_record("3", "B", group_key="G1"),
            make_record("4", "C", group_key="G2"),
        ]
        rows = project_rows(records)
        self.assertEqual(
            [(r.row_span, r.is_group_anchor) for r in rows],
            [(1, True), (2, True), (0, False), (1, True)],
        )
        self.assertEqual([r.record.record_id for r in rows], ["1", "2", "3", "4"])

    def test_row_spans_conserve_record_count(self):
        records = [
            make_record("1", group_key="G1"),
            make_record("2", group_key="G1"),
            make_record("3", group_key="G1"),
            make_record("4"),
            make_record("5"),
            make_record("6", group_key="G2"),
            make_record("7", group_key="G2"),
        ]
        rows = project_rows(records)
        self.assertEqual(sum(r.row_span for r in rows), len(records))
        for row in rows:
            self.assertEqual(row.is_group_anchor, row.row_span > 0)
        whole = sum(1 for r in records if r.mix_box_group_key is None)
        distinct_groups = len({r.mix_box_group_key for r in records if r.mix_box_group_key is not None})
        self.assertEqual(sum(1 for r in rows if r.is_group_anchor), whole + distinct_groups)
        self.assertEqual(whole + distinct_groups, 4)

    def test_empty_input(self):
        self.assertEqual(project_rows([]), [])

    def test_non_contiguous_group_rejected(self):
        records = [
            make_record("1", group_key="G1"),
            make_record("2"),
            make_record("3", group_key="G1"),
        ]
        with self.assertRaises(NonContiguousGroupError) as ctx:
            project_rows(records)
        self.assertEqual(ctx.exception.group_key, "G1")
        self.assertEqual(ctx.exception.position, 2)

    def test_adjacent_groups_not_merged(self):
        rows = project_rows([make_record("1", group_key="G1"), make_record("2", group_key="G2")])
        self.assertEqual([r.row_span for r in rows], [1, 1])


class TestGroups(unittest.TestCase):
    def test_build_groups_skips_whole_boxes(self):
        records = [
            make_record("1", "A", 3, group_key="G1"),
            make_record("2", "B", 4, group_key="G1"),
            make_record("3", "C", 9),
            make_record("4", "D", 2, group_key="G2"),
        ]
        groups = build_groups(records)
        self.assertEqual([g.group_key for g in groups], ["G1", "G2"])
        self.assertEqual(groups[0].record_ids, ["1", "2"])
        self.assertEqual(groups[0].aggregate_quantity, 7)
        self.assertEqual(groups[1].aggregate_quantity, 2)

    def test_find_group(self):
        records = [make_record("1", group_key="G1"), make_record("2", group_key="G2")]
        self.assertEqual(find_group(records, "G2").record_ids, ["2"])
        self.assertEqual(find_group(records, "missing").member_records, [])


if __name__ == "__main__":
    unittest.main()
