"""ORM model for stored inventory records (one row per SKU line)."""

from datetime import datetime
from typing import Optional

from sqlalchemy import Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from stock_intake.db.base import Base, TimestampMixin


class LocalBox(Base, TimestampMixin):
    """Inventory record row. Mixed-box rows of one physical box share mix_box_group_key."""

    __tablename__ = "local_boxes"
    __table_args__ = (
        Index("idx_status_time", "status", "updated_at"),
        Index("idx_sku_country_status", "sku", "country", "status"),
        Index("idx_box_type_status", "box_type", "status"),
    )

    record_id: Mapped[str] = mapped_column(String(20), primary_key=True)
    sku: Mapped[str] = mapped_column(String(128), nullable=False)
    total_quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    total_boxes: Mapped[int] = mapped_column(Integer, nullable=False)
    box_type: Mapped[str] = mapped_column(String(16), nullable=False, default="whole")
    mix_box_group_key: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    country: Mapped[str] = mapped_column(String(64), nullable=False)
    operator: Mapped[str] = mapped_column(String(128), nullable=False)
    packer: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    marketplace: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    pre_type: Mapped[str] = mapped_column(String(16), nullable=False, default="regular")
    remark: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")
    shipped_at: Mapped[Optional[datetime]] = mapped_column(nullable=True)
    shipment_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
