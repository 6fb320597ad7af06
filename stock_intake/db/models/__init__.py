"""Re-export all ORM models so Base.metadata has all tables."""

from stock_intake.db.models.local_box import LocalBox

__all__ = [
    "LocalBox",
]
