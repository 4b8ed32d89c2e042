"""Boundary protocols for the activity store and the ephemeris cache."""

from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional, Protocol

from cosmicpatterns.models.events import ActivityClass, CosmicContext, RawEvent


class ActivitySource(Protocol):
    """Protocol for the activity store."""

    async def fetch_recent_activity(
        self,
        user_id: str,
        activity: ActivityClass,
        since: datetime,
    ) -> List[RawEvent]:
        """Return the user's events of one class created at or after ``since``."""
        ...


class CosmicContextProvider(Protocol):
    """Protocol for the per-day cosmic context cache.

    A missing day is an expected outcome, not an error.
    """

    async def get_context_for_date(self, day: date) -> Optional[CosmicContext]:
        ...


__all__ = ["ActivitySource", "CosmicContextProvider"]
