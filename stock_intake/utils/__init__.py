"""Utility modules."""

from stock_intake.utils.logger import get_logger, intake_context

__all__ = [
    "get_logger",
    "intake_context",
]
