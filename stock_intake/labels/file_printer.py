"""Mock label printer: appends payloads to a JSON file instead of rendering them."""

import asyncio
import json
from pathlib import Path
from typing import Any, Sequence

from stock_intake.models.outputs import PrintPayload
from stock_intake.utils.logger import get_logger

logger = get_logger("stock_intake.labels.file_printer")


class FileLabelPrinter:
    """Print queue stored as a JSON list on disk."""

    def __init__(self, labels_path: Path):
        self._labels_path = labels_path
        self._lock = asyncio.Lock()
        logger.info("label_printer.init", labels_path=str(self._labels_path))

    def _load(self) -> list[dict[str, Any]]:
        if not self._labels_path.exists():
            return []
        with self._labels_path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        return data if isinstance(data, list) else []

    def _save(self, items: list[dict[str, Any]]) -> None:
        self._labels_path.parent.mkdir(parents=True, exist_ok=True)
        with self._labels_path.open("w", encoding="utf-8") as f:
            json.dump(items, f, indent=2, ensure_ascii=False, default=str)

    async def print_labels(self, payloads: Sequence[PrintPayload]) -> int:
        if not payloads:
            return 0
        async with self._lock:
            items = self._load()
            items.extend(p.model_dump(mode="json") for p in payloads)
            self._save(items)
        logger.info("label_printer.printed", count=len(payloads), labels_path=str(self._labels_path))
        return len(payloads)

    def printed(self) -> list[PrintPayload]:
        """All payloads printed so far."""
        return [PrintPayload.model_validate(item) for item in self._load()]
