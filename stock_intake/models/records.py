"""Inventory record models: the flat persisted shape and the storage request/response shapes."""

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, model_validator

BoxType = Literal["whole", "mixed"]
RecordStatus = Literal["pending", "shipped", "cancelled"]
PreType = Literal["regular", "peak"]


class NewInventoryRecord(BaseModel):
    """Inventory record as produced by intake, before storage assigns an id."""

    sku: str = Field(..., min_length=1)
    total_quantity: int = Field(..., gt=0)
    total_boxes: int = Field(..., gt=0)
    box_type: BoxType
    mix_box_group_key: Optional[str] = None
    country: str
    operator: str
    packer: Optional[str] = None
    remark: Optional[str] = None
    marketplace: Optional[str] = None
    pre_type: PreType = "regular"

    @model_validator(mode="after")
    def _group_key_matches_box_type(self):
        if self.box_type == "mixed" and not self.mix_box_group_key:
            raise ValueError("mixed-box records require mix_box_group_key")
        if self.box_type == "whole" and self.mix_box_group_key is not None:
            raise ValueError("whole-box records must not carry mix_box_group_key")
        return self


class InventoryRecord(NewInventoryRecord):
    """Persisted inventory record (one SKU line; mixed boxes span several records)."""

    record_id: str
    status: RecordStatus = "pending"
    created_at: datetime
    updated_at: datetime
    shipped_at: Optional[datetime] = None
    shipment_id: Optional[int] = None


class RecordPatch(BaseModel):
    """Field changes applied to a record. change_note is appended to the remark by storage."""

    sku: Optional[str] = Field(None, min_length=1)
    total_quantity: Optional[int] = Field(None, gt=0)
    total_boxes: Optional[int] = Field(None, gt=0)
    country: Optional[str] = None
    packer: Optional[str] = None
    marketplace: Optional[str] = None
    remark: Optional[str] = None
    change_note: str = "manual edit"

    def changes(self) -> dict[str, Any]:
        """Return only the fields that were set, without the change note."""
        return self.model_dump(exclude_none=True, exclude={"change_note"})


class RecordFilter(BaseModel):
    """Query filter for listing records. Shipped records are hidden unless status is given."""

    sku: Optional[str] = None
    country: Optional[str] = None
    box_type: Optional[BoxType] = None
    status: Optional[RecordStatus] = None
    mix_box_group_key: Optional[str] = None
    page: int = Field(1, ge=1)
    limit: int = Field(50, ge=1, le=1000)


class CreateResult(BaseModel):
    """Result of a batch create."""

    created_count: int
    created_ids: list[str] = Field(default_factory=list)
    records: list[InventoryRecord] = Field(default_factory=list)


class PendingSummaryRow(BaseModel):
    """Pending stock per (sku, country), split by box type."""

    sku: str
    country: str
    whole_box_quantity: int = 0
    whole_box_count: int = 0
    mixed_box_quantity: int = 0
    mixed_box_count: int = 0
    earliest_inbound: Optional[datetime] = None
    latest_update: Optional[datetime] = None

    @property
    def total_quantity(self) -> int:
        return self.whole_box_quantity + self.mixed_box_quantity
