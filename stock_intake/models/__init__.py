"""Pydantic models for stock intake."""

from stock_intake.models.intake import (
    CollectedBox,
    IntakeMetadata,
    IntakeSession,
    LineItem,
    SessionState,
)
from stock_intake.models.records import (
    BoxType,
    CreateResult,
    InventoryRecord,
    NewInventoryRecord,
    PendingSummaryRow,
    RecordFilter,
    RecordPatch,
    RecordStatus,
)
from stock_intake.models.outputs import (
    CascadeResult,
    DisplayRow,
    FailedMember,
    GroupDetail,
    IntakeResult,
    MixedBoxGroup,
    PrintPayload,
)

__all__ = [
    "LineItem",
    "IntakeMetadata",
    "IntakeSession",
    "CollectedBox",
    "SessionState",
    "BoxType",
    "RecordStatus",
    "NewInventoryRecord",
    "InventoryRecord",
    "RecordPatch",
    "RecordFilter",
    "CreateResult",
    "PendingSummaryRow",
    "DisplayRow",
    "MixedBoxGroup",
    "GroupDetail",
    "CascadeResult",
    "FailedMember",
    "PrintPayload",
    "IntakeResult",
]
