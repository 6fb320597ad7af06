"""Mixed-box grouping: row-span projection and group-level cascade operations."""

from stock_intake.grouping.cascade import GroupCascadeOperations
from stock_intake.grouping.projector import build_groups, find_group, project_rows

__all__ = [
    "project_rows",
    "build_groups",
    "find_group",
    "GroupCascadeOperations",
]
