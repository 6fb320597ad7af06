"""Record storage backed by the inventory REST API (async httpx client)."""

from typing import Any, Optional, Sequence

import httpx

from stock_intake.errors import RecordNotFoundError, StorageError
from stock_intake.models.outputs import GroupDetail
from stock_intake.models.records import (
    CreateResult,
    InventoryRecord,
    NewInventoryRecord,
    PendingSummaryRow,
    RecordFilter,
    RecordPatch,
)
from stock_intake.storage.mapping import (
    filter_to_params,
    new_record_to_wire,
    patch_to_wire,
    record_from_wire,
    regroup_contiguous,
    summary_from_wire,
)
from stock_intake.utils.logger import get_logger

logger = get_logger("stock_intake.storage.http")


class HttpRecordStorage:
    """Talks to /api/inventory/* using the {code, message, data} envelope.

    Transport errors, non-2xx responses and code != 0 all raise StorageError.
    Nothing is retried here.
    """

    def __init__(
        self,
        base_url: str,
        token: str = "",
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ):
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=httpx.Timeout(timeout),
            limits=httpx.Limits(max_keepalive_connections=10, max_connections=20),
        )
        logger.info("storage.http.init", base_url=base_url)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("storage.http.transport_error", method=method, path=path, error=str(e))
            raise StorageError(f"{method} {path} failed: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = {}
        message = body.get("message") if isinstance(body, dict) else None
        if response.status_code == 404:
            raise StorageError(message or f"{method} {path} not found", status_code=404)
        if response.status_code >= 400:
            detail = (body.get("error") if isinstance(body, dict) else None) or message or response.reason_phrase
            logger.warning("storage.http.error_status", method=method, path=path, status=response.status_code)
            raise StorageError(detail, status_code=response.status_code)
        if not isinstance(body, dict) or body.get("code") != 0:
            raise StorageError(message or f"{method} {path} returned an unexpected body", status_code=response.status_code)
        return body.get("data")

    async def create_records(self, records: Sequence[NewInventoryRecord]) -> CreateResult:
        data = await self._request(
            "POST",
            "/api/inventory/create",
            json={"records": [new_record_to_wire(r) for r in records]},
        )
        created = [record_from_wire(r) for r in (data or {}).get("records", [])]
        logger.info("storage.http.created", count=len(created))
        return CreateResult(
            created_count=len(created),
            created_ids=[r.record_id for r in created],
            records=created,
        )

    async def list_records(self, record_filter: Optional[RecordFilter] = None) -> list[InventoryRecord]:
        data = await self._request("GET", "/api/inventory/records", params=filter_to_params(record_filter))
        records = [record_from_wire(r) for r in (data or {}).get("records", [])]
        return regroup_contiguous(records)

    async def get_group(self, group_key: str) -> Optional[GroupDetail]:
        try:
            data = await self._request("GET", f"/api/inventory/mixed-box/{group_key}")
        except StorageError as e:
            if e.status_code == 404:
                return None
            raise
        records = [record_from_wire(r) for r in data.get("records", [])]
        summary = data.get("summary") or {}
        return GroupDetail(
            group_key=group_key,
            sku_count=summary.get("skuCount", len(records)),
            total_quantity=summary.get("totalQuantity", sum(r.total_quantity for r in records)),
            country=summary.get("country") or (records[0].country if records else ""),
            created_at=summary.get("createdTime"),
            records=records,
        )

    async def update_record(self, record_id: str, patch: RecordPatch) -> InventoryRecord:
        data = await self._request("PUT", f"/api/inventory/edit/{record_id}", json=patch_to_wire(patch))
        return record_from_wire(data)

    async def delete_record(self, record_id: str) -> None:
        try:
            await self._request("DELETE", f"/api/inventory/delete/{record_id}", json={"reason": "user delete"})
        except StorageError as e:
            if e.status_code == 404:
                raise RecordNotFoundError(record_id) from e
            raise

    async def pending_summary(self, record_filter: Optional[RecordFilter] = None) -> list[PendingSummaryRow]:
        params = filter_to_params(record_filter)
        data = await self._request("GET", "/api/inventory/pending", params=params)
        return [summary_from_wire(r) for r in (data or {}).get("inventory", [])]
