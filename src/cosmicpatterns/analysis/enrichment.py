"""Event enrichment: pair raw activity with the sky on its date.

Events whose date has no published cosmic context are dropped here, so an
EnrichedEvent never carries a null context.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional

from cosmicpatterns.models.events import (
    ActivityClass,
    CosmicContext,
    EnrichedEvent,
    RawEvent,
)
from cosmicpatterns.sources.base import ActivitySource, CosmicContextProvider

logger = logging.getLogger(__name__)


class EventEnricher:
    """Join a user's activity with per-day cosmic context.

    Context lookups are memoised per enricher instance, so events sharing a
    calendar day cost one provider call.

    Example:
        >>> enricher = EventEnricher(activity_source, context_provider)
        >>> tarot = await enricher.fetch_enriched("user-1", ActivityClass.TAROT, since)
        >>> {e.moon_phase for e in tarot}
        {'Full Moon', 'New Moon'}
    """

    def __init__(
        self,
        activity_source: ActivitySource,
        context_provider: CosmicContextProvider,
    ) -> None:
        self._source = activity_source
        self._contexts = context_provider
        self._context_cache: Dict[date, Optional[CosmicContext]] = {}

    async def fetch_enriched(
        self,
        user_id: str,
        activity: ActivityClass,
        since: datetime,
        timeout: Optional[float] = None,
    ) -> List[EnrichedEvent]:
        """Fetch one activity class and enrich it.

        Errors from the activity source propagate; a timeout raises
        ``asyncio.TimeoutError``.
        """
        fetch = self._source.fetch_recent_activity(user_id, activity, since)
        if timeout is not None:
            raw_events = await asyncio.wait_for(fetch, timeout=timeout)
        else:
            raw_events = await fetch

        enriched = await self.enrich(raw_events)
        logger.debug(
            f"Enriched {len(enriched)}/{len(raw_events)} {activity.value} events "
            f"for user {user_id}"
        )
        return enriched

    async def enrich(self, events: Iterable[RawEvent]) -> List[EnrichedEvent]:
        """Pair each event with its day's context, dropping events without one."""
        events = list(events)
        days = sorted({event.day for event in events} - set(self._context_cache))
        if days:
            contexts = await asyncio.gather(
                *(self._contexts.get_context_for_date(day) for day in days)
            )
            self._context_cache.update(zip(days, contexts))

        enriched: List[EnrichedEvent] = []
        missing = 0
        for event in events:
            context = self._context_cache.get(event.day)
            if context is None or context.is_empty():
                missing += 1
                continue
            enriched.append(EnrichedEvent(event=event, context=context))

        if missing:
            logger.debug(f"Excluded {missing} events without cosmic context")

        return enriched


__all__ = ["EventEnricher"]
