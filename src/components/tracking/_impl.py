"""
TrackingIngestionService / TrackingQueryService - event ingestion and lookup.

Key behaviors:
- Required fields checked in order: event type, event id, project id
- Event type must be in the configured allowed set
- Store key and timestamp are assigned here, never by the caller
- Same caller event id may be stored more than once (no dedupe)
- Query results are returned newest first
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import uuid4

from src.adapters.clock import SystemClock
from src.domain.entities import DEFAULT_INGEST_EVENT_TYPES, TrackingEvent

from .models import (
    StorageError,
    TrackEventInput,
    TrackEventOutput,
    TrackingValidationError,
)
from .ports import EventRepoPort, ProjectLookupPort, TimePort

logger = logging.getLogger(__name__)

STORAGE_ERROR_MESSAGE = "An error occurred while tracking the event"


# --- Configuration ---


@dataclass(frozen=True)
class IngestionConfig:
    """Tracking ingestion configuration."""

    allowed_event_types: tuple[str, ...] = DEFAULT_INGEST_EVENT_TYPES
    require_known_project: bool = False


DEFAULT_CONFIG = IngestionConfig()


# --- Validation Functions ---


def _is_blank(value: str | None) -> bool:
    return value is None or value.strip() == ""


def validate_track_input(
    inp: TrackEventInput,
    config: IngestionConfig = DEFAULT_CONFIG,
) -> TrackingValidationError | None:
    """Return the first validation failure, or None if the request is acceptable."""
    if _is_blank(inp.event_type):
        return TrackingValidationError(
            code="event_type_required",
            message="EventType is required",
            field_name="event_type",
        )

    if _is_blank(inp.event_id):
        return TrackingValidationError(
            code="event_id_required",
            message="EventId is required",
            field_name="event_id",
        )

    if _is_blank(inp.project_id):
        return TrackingValidationError(
            code="project_id_required",
            message="ProjectId is required",
            field_name="project_id",
        )

    if inp.event_type not in config.allowed_event_types:
        allowed = ", ".join(config.allowed_event_types)
        return TrackingValidationError(
            code="invalid_event_type",
            message=f"Invalid EventType. Must be one of: {allowed}",
            field_name="event_type",
        )

    return None


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC; convert aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def newest_first(events: Iterable[TrackingEvent]) -> list[TrackingEvent]:
    return sorted(events, key=lambda e: as_utc(e.timestamp), reverse=True)


# --- Default Implementations ---


class InMemoryEventRepo:
    """In-memory event store for tests and the memory backend."""

    def __init__(self) -> None:
        self._events: dict[str, TrackingEvent] = {}

    def save(self, event: TrackingEvent) -> TrackingEvent:
        self._events[event.id] = event
        return event

    def get_by_id(self, event_id: str) -> TrackingEvent | None:
        return self._events.get(event_id)

    def delete(self, event_id: str) -> bool:
        return self._events.pop(event_id, None) is not None

    def query_by_project(
        self,
        project_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[TrackingEvent]:
        results = []
        for event in self._events.values():
            if event.project_id != project_id:
                continue
            ts = as_utc(event.timestamp)
            if start is not None and ts < as_utc(start):
                continue
            if end is not None and ts > as_utc(end):
                continue
            results.append(event)
        return results

    def scan(
        self,
        project_id: str,
        ad_id: str | None = None,
        survey_id: str | None = None,
    ) -> list[TrackingEvent]:
        return [
            e
            for e in self._events.values()
            if e.project_id == project_id
            and (ad_id is None or e.ad_id == ad_id)
            and (survey_id is None or e.survey_id == survey_id)
        ]

    def get_all(self) -> list[TrackingEvent]:
        """Get all stored events (for testing)."""
        return list(self._events.values())


# --- Ingestion Service ---


class TrackingIngestionService:
    """
    Validates and persists single tracking events.

    Validation failures and store failures are both reported in the
    returned output; nothing is raised to the caller.
    """

    def __init__(
        self,
        event_repo: EventRepoPort,
        time_port: TimePort | None = None,
        config: IngestionConfig | None = None,
        projects: ProjectLookupPort | None = None,
    ) -> None:
        self._repo = event_repo
        self._time = time_port or SystemClock()
        self._config = config or DEFAULT_CONFIG
        self._projects = projects

    def _check_project(self, project_id: str) -> TrackingValidationError | None:
        if not self._config.require_known_project or self._projects is None:
            return None
        if self._projects.get_project(project_id) is None:
            return TrackingValidationError(
                code="project_not_found",
                message="Project not found",
                field_name="project_id",
            )
        return None

    def track(self, inp: TrackEventInput) -> TrackEventOutput:
        error = validate_track_input(inp, self._config)
        try:
            if error is None:
                error = self._check_project(inp.project_id)
        except StorageError:
            logger.exception("Project lookup failed for %s", inp.project_id)
            return TrackEventOutput(
                success=False, error=STORAGE_ERROR_MESSAGE, storage_failed=True
            )

        if error is not None:
            return TrackEventOutput(success=False, error=error.message, errors=[error])

        event = TrackingEvent(
            id=str(uuid4()),
            event_type=inp.event_type,
            event_id=inp.event_id,
            project_id=inp.project_id,
            ad_id=inp.ad_id,
            survey_id=inp.survey_id,
            session_id=inp.session_id,
            timestamp=self._time.now_utc(),
        )

        try:
            self._repo.save(event)
        except StorageError:
            logger.exception(
                "Failed to store %s event for project %s", event.event_type, event.project_id
            )
            return TrackEventOutput(
                success=False, error=STORAGE_ERROR_MESSAGE, storage_failed=True
            )

        logger.info(
            "Tracked event %s for project %s at %s",
            event.event_type,
            event.project_id,
            event.timestamp.isoformat(),
        )
        return TrackEventOutput(success=True, event_id=event.id, event=event)

    def track_batch(self, inputs: Iterable[TrackEventInput]) -> list[TrackEventOutput]:
        """Track each request independently. A failure does not stop the rest."""
        return [self.track(inp) for inp in inputs]


# --- Query Service ---


class TrackingQueryService:
    """Reads and deletes stored events. Store failures propagate as StorageError."""

    def __init__(self, event_repo: EventRepoPort) -> None:
        self._repo = event_repo

    def get_events_by_project(
        self,
        project_id: str,
        from_date: datetime | None = None,
        to_date: datetime | None = None,
    ) -> list[TrackingEvent]:
        start = as_utc(from_date) if from_date is not None else None
        end = as_utc(to_date) if to_date is not None else None
        return newest_first(self._repo.query_by_project(project_id, start=start, end=end))

    def get_events_by_ad(self, ad_id: str, project_id: str) -> list[TrackingEvent]:
        return newest_first(self._repo.scan(project_id, ad_id=ad_id))

    def get_events_by_survey(self, survey_id: str, project_id: str) -> list[TrackingEvent]:
        return newest_first(self._repo.scan(project_id, survey_id=survey_id))

    def get_event_by_id(self, event_id: str) -> TrackingEvent | None:
        return self._repo.get_by_id(event_id)

    def delete_event(self, event_id: str) -> bool:
        deleted = self._repo.delete(event_id)
        if deleted:
            logger.info("Deleted tracking event %s", event_id)
        return deleted


# --- Factory ---


def create_tracking_services(
    event_repo: EventRepoPort,
    time_port: TimePort | None = None,
    config: IngestionConfig | None = None,
    projects: ProjectLookupPort | None = None,
) -> tuple[TrackingIngestionService, TrackingQueryService]:
    """Create the ingestion and query services over one store."""
    return (
        TrackingIngestionService(
            event_repo=event_repo,
            time_port=time_port,
            config=config,
            projects=projects,
        ),
        TrackingQueryService(event_repo=event_repo),
    )
