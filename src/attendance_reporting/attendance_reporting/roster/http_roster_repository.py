from __future__ import annotations

import logging

from ..attendance.http_source import HttpApiClient, unwrap_records
from ..core.exceptions import TransportError
from .model import Roster
from .repository import RosterRepository

logger = logging.getLogger(__name__)


class HttpRosterRepository(RosterRepository):
    def __init__(self, client: HttpApiClient):
        self._client = client

    def load_roster(self, organization_id: str) -> Roster:
        payload = self._client.get_json("/api/employees", params={"organizationId": str(organization_id)})
        return Roster.from_employees(unwrap_records(payload))

    def organization_name(self, organization_id: str) -> str:
        try:
            payload = self._client.get_json(f"/api/organizations/{organization_id}")
        except TransportError as exc:
            # a missing name only affects labels and filenames
            logger.warning("Could not load organization %s: %s", organization_id, exc)
            return str(organization_id)
        data = payload.get("data") if isinstance(payload, dict) else None
        if isinstance(data, dict) and data.get("name"):
            return str(data["name"])
        return str(organization_id)
