"""
Analytics component port definitions.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Protocol

from src.domain.entities import TrackingEvent


class EventSourcePort(Protocol):
    """Where reports pull their events from."""

    def get_events_by_project(
        self,
        project_id: str,
        from_date: datetime | None = None,
        to_date: datetime | None = None,
    ) -> list[TrackingEvent]:
        ...


class TimePort(Protocol):
    """Time provider interface."""

    def today_utc(self) -> date:
        """Current UTC calendar day."""
        ...
