from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

import requests

from ..core.exceptions import TransportError
from .repository import BatchRecordSource, RawRecord

logger = logging.getLogger(__name__)


def unwrap_records(payload: Any) -> list:
    """Accept a bare list or the API's {"success": ..., "data": [...]} envelope."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        if payload.get("success") is False:
            raise TransportError(payload.get("message") or "Attendance API reported failure")
        data = payload.get("data")
        if isinstance(data, list):
            return data
        if isinstance(data, dict) and isinstance(data.get("records"), list):
            return data["records"]
        return []
    raise TransportError(f"Unexpected attendance payload type {type(payload).__name__}")


class HttpApiClient:
    """Small requests wrapper shared by the REST-backed adapters."""

    def __init__(
        self,
        base_url: str,
        *,
        token: Optional[str] = None,
        timeout: float = 15.0,
        session: Optional[requests.Session] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = float(timeout)
        self._session = session or requests.Session()
        self._headers = {"Accept": "application/json"}
        if token:
            self._headers["Authorization"] = f"Bearer {token}"

    def get_json(self, path: str, params: Optional[dict] = None) -> Any:
        url = f"{self._base_url}{path}"
        try:
            resp = self._session.get(url, params=params, headers=self._headers, timeout=self._timeout)
            resp.raise_for_status()
            return resp.json()
        except requests.RequestException as exc:
            raise TransportError(f"GET {path} failed: {exc}") from exc
        except ValueError as exc:
            raise TransportError(f"GET {path} returned invalid JSON") from exc


class HttpBatchRecordSource(BatchRecordSource):
    def __init__(self, client: HttpApiClient):
        self._client = client

    def fetch_recent(self, limit: int) -> Sequence[RawRecord]:
        payload = self._client.get_json("/api/attendance", params={"limit": int(limit)})
        records = unwrap_records(payload)
        logger.debug("Fetched %d recent attendance records", len(records))
        return records

    def fetch_range(self, organization_id: str, start_iso: str, end_iso: str) -> Sequence[RawRecord]:
        payload = self._client.get_json(
            "/api/attendance/report",
            params={"startDate": start_iso, "endDate": end_iso, "organizationId": str(organization_id)},
        )
        return unwrap_records(payload)
