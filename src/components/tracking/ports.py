"""
Tracking component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from src.domain.entities import Project, TrackingEvent


class EventRepoPort(Protocol):
    """Key-value event store with a (project, timestamp) secondary index."""

    def save(self, event: TrackingEvent) -> TrackingEvent:
        """Put an event under its id."""
        ...

    def get_by_id(self, event_id: str) -> TrackingEvent | None:
        """Keyed get. None when absent."""
        ...

    def delete(self, event_id: str) -> bool:
        """Keyed delete. Returns whether a record existed."""
        ...

    def query_by_project(
        self,
        project_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[TrackingEvent]:
        """Index query on project with an inclusive timestamp range."""
        ...

    def scan(
        self,
        project_id: str,
        ad_id: str | None = None,
        survey_id: str | None = None,
    ) -> list[TrackingEvent]:
        """Filtered scan, exact match on every given field."""
        ...


class ProjectLookupPort(Protocol):
    """Read-only project lookup used when unknown projects are rejected."""

    def get_project(self, project_id: str) -> Project | None:
        ...


class TimePort(Protocol):
    """Time provider interface."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
