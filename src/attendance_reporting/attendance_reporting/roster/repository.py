from __future__ import annotations

from typing import Protocol

from .model import Roster


class RosterRepository(Protocol):
    def load_roster(self, organization_id: str) -> Roster:
        raise NotImplementedError

    def organization_name(self, organization_id: str) -> str:
        raise NotImplementedError
