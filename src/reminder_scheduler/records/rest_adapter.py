"""
REST record store adapter for MockAPI-style collections.

GET {base}/{collection} returns the whole list; PUT (or PATCH)
{base}/{collection}/{id} with a partial body updates one record.
"""

from __future__ import annotations

import logging

import httpx

from reminder_scheduler.config import Settings
from reminder_scheduler.records.interface import RecordStore, StoreFetchError, StoreUpdateError
from reminder_scheduler.records.mapping import RecordMapper
from reminder_scheduler.records.models import Record, RecordPatch, UpdateResult

logger = logging.getLogger(__name__)


class RestRecordStore(RecordStore):
    """Record store backed by a REST collection.

    Uses a synchronous httpx client with a bounded timeout; the scheduler
    runs reconciliation in a worker thread.
    """

    def __init__(
        self,
        collection_url: str,
        mapper: RecordMapper | None = None,
        timeout_seconds: float = 10.0,
        update_method: str = "PUT",
        http_client: httpx.Client | None = None,
    ) -> None:
        self._collection_url = collection_url.rstrip("/")
        self._mapper = mapper or RecordMapper()
        self._timeout_seconds = timeout_seconds
        self._update_method = update_method.upper()
        self._http_client = http_client
        self._owns_client = http_client is None

    @classmethod
    def from_settings(cls, settings: Settings) -> "RestRecordStore":
        return cls(
            collection_url=settings.collection_url,
            mapper=RecordMapper.from_settings(settings),
            timeout_seconds=settings.store_timeout_seconds,
            update_method=settings.store_update_method,
        )

    def _get_client(self) -> httpx.Client:
        if self._http_client is None:
            self._http_client = httpx.Client(timeout=httpx.Timeout(self._timeout_seconds))
        return self._http_client

    def close(self) -> None:
        if self._owns_client and self._http_client is not None:
            self._http_client.close()
            self._http_client = None

    def fetch_all(self) -> list[Record]:
        client = self._get_client()
        try:
            response = client.get(self._collection_url)
        except httpx.HTTPError as e:
            logger.error(
                "Record store fetch failed",
                extra={"url": self._collection_url, "error": str(e)},
            )
            raise StoreFetchError(
                message=f"HTTP error: {e!s}",
                error_code="HTTP_ERROR",
            ) from e

        if response.status_code >= 400:
            raise StoreFetchError(
                message=f"Record store returned {response.status_code}",
                error_code=str(response.status_code),
                response=_error_body(response),
            )

        try:
            items = response.json()
        except ValueError as e:
            raise StoreFetchError(
                message="Record store returned a non-JSON body",
                error_code="MALFORMED_COLLECTION",
            ) from e

        if not isinstance(items, list):
            raise StoreFetchError(
                message="Record store collection is not a list",
                error_code="MALFORMED_COLLECTION",
                response=items if isinstance(items, dict) else {"body": items},
            )

        records: list[Record] = []
        for position, item in enumerate(items):
            record = self._mapper.to_record(item)
            if record is None:
                logger.warning(
                    "Dropping collection item without an id",
                    extra={"position": position},
                )
                continue
            records.append(record)
        return records

    def update(self, record_id: str, patch: RecordPatch) -> UpdateResult:
        client = self._get_client()
        url = f"{self._collection_url}/{record_id}"
        body = self._mapper.to_wire(patch)

        try:
            response = client.request(self._update_method, url, json=body)
        except httpx.HTTPError as e:
            logger.error(
                "Record store update failed",
                extra={"record_id": record_id, "error": str(e)},
            )
            raise StoreUpdateError(
                message=f"HTTP error: {e!s}",
                error_code="HTTP_ERROR",
            ) from e

        if response.status_code >= 400:
            return UpdateResult(record_id=record_id, ok=False, error=_error_body(response))

        try:
            data = response.json()
        except ValueError:
            data = None
        return UpdateResult(
            record_id=record_id,
            ok=True,
            record=data if isinstance(data, dict) else None,
        )


def _error_body(response: httpx.Response) -> dict:
    try:
        data = response.json() if response.content else {}
    except ValueError:
        return {"status_code": response.status_code, "body": response.text}
    if isinstance(data, dict):
        return {"status_code": response.status_code, **data}
    return {"status_code": response.status_code, "body": data}
