"""Derived read-side models: display rows, groups, cascade results, print payloads."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, computed_field

from stock_intake.models.records import BoxType, InventoryRecord


class DisplayRow(BaseModel):
    """A record plus its row-span projection. Only anchors carry row_span > 0."""

    record: InventoryRecord
    row_span: int = Field(..., ge=0)
    is_group_anchor: bool


class MixedBoxGroup(BaseModel):
    """Records sharing one mix_box_group_key (one physical box). Never persisted."""

    group_key: str
    member_records: list[InventoryRecord]

    @computed_field
    @property
    def aggregate_quantity(self) -> int:
        return sum(r.total_quantity for r in self.member_records)

    @property
    def record_ids(self) -> list[str]:
        return [r.record_id for r in self.member_records]


class GroupDetail(BaseModel):
    """Summary of one mixed box as returned by storage."""

    group_key: str
    sku_count: int
    total_quantity: int
    country: str
    created_at: Optional[datetime] = None
    last_update: Optional[datetime] = None
    records: list[InventoryRecord] = Field(default_factory=list)


class FailedMember(BaseModel):
    record_id: str
    reason: str


class CascadeResult(BaseModel):
    """Per-member outcome of a group edit or delete."""

    group_key: str
    action: Literal["edit", "delete"]
    succeeded: list[str] = Field(default_factory=list)
    failed: list[FailedMember] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed)

    @property
    def failed_ids(self) -> list[str]:
        return [f.record_id for f in self.failed]


class PrintPayload(BaseModel):
    """Label data handed to the print renderer."""

    record_id: str
    sku: str
    quantity: int
    boxes: int
    country: str
    operator: str
    packer: Optional[str] = None
    box_type: BoxType
    group_key: Optional[str] = None
    barcode: str
    created_at: Optional[datetime] = None
    qr_data: Optional[str] = None


class IntakeResult(BaseModel):
    """End-to-end result of one intake submission."""

    box_type: BoxType
    records: list[InventoryRecord] = Field(default_factory=list)
    group_keys: list[str] = Field(default_factory=list)
    labels: list[PrintPayload] = Field(default_factory=list)
    printed: bool = False
    print_error: Optional[str] = None

    @property
    def created_count(self) -> int:
        return len(self.records)
