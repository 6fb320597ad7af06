"""Intake pipeline: line parsing, mixed-box session, record materialization."""

from stock_intake.intake.materializer import (
    generate_group_key,
    materialize_mixed_boxes,
    materialize_whole_box,
)
from stock_intake.intake.parser import normalize_sku_input, parse_line_items, serialize_line_items
from stock_intake.intake.session import cancel_session, commit_current_box, start_session

__all__ = [
    "parse_line_items",
    "normalize_sku_input",
    "serialize_line_items",
    "start_session",
    "commit_current_box",
    "cancel_session",
    "materialize_whole_box",
    "materialize_mixed_boxes",
    "generate_group_key",
]
