"""Point-in-time and range reads of entity history."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from .models import EntityState

if TYPE_CHECKING:
    from .http import HassHttpClient


class HistoryAccessor:
    """Stateless history reads layered on the REST client."""

    def __init__(self, http: HassHttpClient) -> None:
        self._http = http

    async def history_between(
        self,
        entity_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[EntityState]:
        """Return the recorded states of one entity between two times."""
        response = await self._http.fetch_history(
            entity_id, start_time=start, end_time=end
        )
        if not response:
            return []
        # Minimal records after the first one omit entity_id.
        return [
            EntityState.from_dict({"entity_id": entity_id, **record})
            for record in response[0]
        ]

    async def state_at(self, entity_id: str, when: datetime) -> str | None:
        """Return the state string an entity had at ``when``."""
        response = await self._http.fetch_history(
            entity_id,
            start_time=when,
            end_time=when,
            minimal_response=True,
            no_attributes=True,
        )
        if not response or not response[0]:
            return None
        state = response[0][0].get("state")
        return state if isinstance(state, str) else None
