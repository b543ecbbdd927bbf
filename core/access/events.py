"""
Module 04 - Access Policy
File: events.py

Purpose: Append-only event log of publishes, coverage checks and role
changes. The log is an explicit object passed by reference to whatever
records events; there is no module-level instance.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from core.ledger.store import read_json_file, write_json_file, StoreIOError


logger = logging.getLogger(__name__)


class EventType(str, Enum):
    INSURANCE_PUBLISHED = "InsurancePublished"
    COVERAGE_VERIFIED = "CoverageVerified"
    ROLE_GRANTED = "RoleGranted"
    ROLE_REVOKED = "RoleRevoked"


class Event(BaseModel):
    """One entry in the event log."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    event_type: EventType
    timestamp: datetime
    block_number: int | None = None
    data: dict[str, Any] = Field(default_factory=dict)


class EventLog:
    """
    Append-only list of events, optionally persisted to a JSON file.

    Usage:
        events = EventLog(Path("data/events.json"))
        events.emit(EventType.ROLE_GRANTED, role="INSURER_ROLE", account="0x...")
        latest = events.recent(10)
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = path
        self._events: list[Event] = []
        self._lock = threading.Lock()
        if path is not None and path.exists():
            self._load()

    def _load(self) -> None:
        data = read_json_file(self.path)
        if not isinstance(data, list):
            raise StoreIOError(f"Expected a list of events in {self.path}")
        self._events = [Event.model_validate(item) for item in data]
        logger.info("Loaded %d events from %s", len(self._events), self.path)

    def _save(self) -> None:
        if self.path is None:
            return
        write_json_file(self.path, [e.model_dump(mode="json") for e in self._events])

    def emit(
        self,
        event_type: EventType,
        block_number: int | None = None,
        **data: Any,
    ) -> Event:
        """Append an event and persist the log."""
        event = Event(
            event_type=event_type,
            timestamp=datetime.now(timezone.utc),
            block_number=block_number,
            data=data,
        )
        with self._lock:
            self._events.append(event)
            self._save()
        logger.debug("Event %s recorded", event_type.value)
        return event

    def recent(self, limit: int | None = None) -> list[Event]:
        """Most recent events first."""
        events = list(reversed(self._events))
        return events if limit is None else events[:limit]

    def of_type(self, event_type: EventType) -> list[Event]:
        return [e for e in self._events if e.event_type == event_type]

    def export(self, path: Path) -> Path:
        write_json_file(path, [e.model_dump(mode="json") for e in self._events])
        return path

    def clear(self) -> int:
        """Drop every recorded event. Returns how many were removed."""
        with self._lock:
            count = len(self._events)
            self._events = []
            self._save()
        logger.info("Cleared %d events", count)
        return count

    def __len__(self) -> int:
        return len(self._events)
