"""Record storage: protocol, local DB implementation, REST API implementation."""

from stock_intake.config import (
    STORAGE_API_BASE_URL,
    STORAGE_API_TIMEOUT_SECONDS,
    STORAGE_API_TOKEN,
    STORAGE_BACKEND,
)
from stock_intake.storage.db_store import DbRecordStorage
from stock_intake.storage.http_store import HttpRecordStorage
from stock_intake.storage.protocol import RecordStorage


def get_storage(backend: str | None = None) -> RecordStorage:
    """Return the configured record storage ("db" or "http")."""
    backend = (backend or STORAGE_BACKEND).lower()
    if backend == "db":
        return DbRecordStorage()
    if backend == "http":
        return HttpRecordStorage(
            base_url=STORAGE_API_BASE_URL,
            token=STORAGE_API_TOKEN,
            timeout=STORAGE_API_TIMEOUT_SECONDS,
        )
    raise ValueError(f"Unknown storage backend: {backend!r}. Expected 'db' or 'http'")


__all__ = [
    "RecordStorage",
    "DbRecordStorage",
    "HttpRecordStorage",
    "get_storage",
]
