"""Intake models: parsed line items, shared metadata and the mixed-box session value."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from stock_intake.models.records import PreType


class LineItem(BaseModel):
    """One parsed 'SKU quantity' line."""

    model_config = ConfigDict(frozen=True)

    sku: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)


class IntakeMetadata(BaseModel):
    """Metadata captured once per intake and copied onto every record produced."""

    model_config = ConfigDict(frozen=True)

    country: str = Field(..., min_length=1)
    packer: Optional[str] = None
    remark: Optional[str] = None
    marketplace: Optional[str] = None
    pre_type: PreType = "regular"


class SessionState(str, Enum):
    AWAITING_BOX_INPUT = "awaiting_box_input"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class CollectedBox(BaseModel):
    """Lines confirmed for one physical mixed box."""

    model_config = ConfigDict(frozen=True)

    box_index: int = Field(..., ge=0)
    lines: tuple[LineItem, ...]


class IntakeSession(BaseModel):
    """In-memory state of one mixed-box intake run. Transitions return a new session."""

    model_config = ConfigDict(frozen=True)

    total_boxes_planned: int = Field(..., ge=1)
    shared_metadata: IntakeMetadata
    operator: str
    current_box_index: int = Field(0, ge=0)
    collected_boxes: tuple[CollectedBox, ...] = ()
    state: SessionState = SessionState.AWAITING_BOX_INPUT

    @property
    def is_completed(self) -> bool:
        return self.state == SessionState.COMPLETED

    @property
    def is_awaiting_input(self) -> bool:
        return self.state == SessionState.AWAITING_BOX_INPUT

    @property
    def collected_line_count(self) -> int:
        return sum(len(box.lines) for box in self.collected_boxes)
