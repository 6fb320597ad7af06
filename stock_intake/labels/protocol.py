"""Label printer protocol (the print-rendering service)."""

from typing import Protocol, Sequence

from stock_intake.models.outputs import PrintPayload


class LabelPrinter(Protocol):
    """Accepts print payloads; rendering is the printer's concern."""

    async def print_labels(self, payloads: Sequence[PrintPayload]) -> int:
        """Queue payloads for printing and return how many were accepted."""
        ...
