"""File-backed sources for exported activity and ephemeris data.

Activity file: a JSON list of records, each with ``user_id``, ``event_id``,
``activity`` (tarot|journal), ``created_at`` and the optional RawEvent
fields. Context file: a JSON list of per-day contexts keyed by ``day``.
"""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from cosmicpatterns.errors import SourceError
from cosmicpatterns.models.events import ActivityClass, CosmicContext, RawEvent

logger = logging.getLogger(__name__)


def _read_json_list(path: Path) -> List[Dict[str, Any]]:
    try:
        payload = json.loads(path.read_text())
    except (OSError, ValueError) as exc:
        raise SourceError(f"Failed to read {path}: {exc}", details={"path": str(path)}) from exc
    if not isinstance(payload, list):
        raise SourceError(f"Expected a JSON list in {path}", details={"path": str(path)})
    return payload


class JsonActivitySource:
    """ActivitySource over an exported activity file."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._events: Optional[Dict[str, List[RawEvent]]] = None
        self._load_lock = asyncio.Lock()

    async def fetch_recent_activity(
        self, user_id: str, activity: ActivityClass, since: datetime
    ) -> List[RawEvent]:
        events = await self._load()
        return [
            event
            for event in events.get(user_id, [])
            if event.activity is activity and event.created_at >= since
        ]

    async def _load(self) -> Dict[str, List[RawEvent]]:
        # concurrent fetches share one read of the file
        async with self._load_lock:
            if self._events is None:
                self._events = await asyncio.to_thread(self._parse)
        return self._events

    def _parse(self) -> Dict[str, List[RawEvent]]:
        by_user: Dict[str, List[RawEvent]] = {}
        skipped = 0
        for record in _read_json_list(self._path):
            if not isinstance(record, dict):
                skipped += 1
                continue
            try:
                event = RawEvent.from_dict(record)
            except (KeyError, ValueError, TypeError) as exc:
                skipped += 1
                logger.debug(f"Skipping malformed activity record: {exc}")
                continue
            by_user.setdefault(str(record.get("user_id", "")), []).append(event)
        if skipped:
            logger.warning(f"Skipped {skipped} malformed activity records in {self._path}")
        return by_user


class JsonCosmicContextProvider:
    """CosmicContextProvider over an exported ephemeris file."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._contexts: Optional[Dict[date, CosmicContext]] = None
        self._load_lock = asyncio.Lock()

    async def get_context_for_date(self, day: date) -> Optional[CosmicContext]:
        async with self._load_lock:
            if self._contexts is None:
                self._contexts = await asyncio.to_thread(self._parse)
        return self._contexts.get(day)

    def _parse(self) -> Dict[date, CosmicContext]:
        contexts: Dict[date, CosmicContext] = {}
        for record in _read_json_list(self._path):
            try:
                context = CosmicContext.from_dict(record)
            except (KeyError, ValueError, TypeError, AttributeError) as exc:
                logger.debug(f"Skipping malformed context record: {exc}")
                continue
            contexts[context.day] = context
        return contexts


__all__ = ["JsonActivitySource", "JsonCosmicContextProvider"]
