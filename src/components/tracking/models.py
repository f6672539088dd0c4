"""
Tracking component input/output models and errors.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from src.domain.entities import TrackingEvent

# --- Errors ---


@dataclass(frozen=True)
class TrackingValidationError:
    """Caller input problem. Reported in outputs, never raised."""

    code: str
    message: str
    field_name: str | None = None


class TrackingError(Exception):
    """Base exception for the tracking component."""


class StorageError(TrackingError):
    """The event store could not complete a read or write."""

    def __init__(self, operation: str, message: str = "Event store operation failed") -> None:
        self.operation = operation
        super().__init__(f"{message} ({operation})")


# --- Input Models ---


@dataclass(frozen=True)
class TrackEventInput:
    """Raw ingestion request. Required fields are checked by the service."""

    event_type: str = ""
    event_id: str = ""
    project_id: str = ""
    ad_id: str | None = None
    survey_id: str | None = None
    session_id: str | None = None


@dataclass(frozen=True)
class QueryProjectEventsInput:
    project_id: str
    from_date: datetime | None = None
    to_date: datetime | None = None


@dataclass(frozen=True)
class QueryAdEventsInput:
    ad_id: str
    project_id: str


@dataclass(frozen=True)
class QuerySurveyEventsInput:
    survey_id: str
    project_id: str


@dataclass(frozen=True)
class GetEventInput:
    event_id: str


@dataclass(frozen=True)
class DeleteEventInput:
    event_id: str


# --- Output Models ---


@dataclass(frozen=True)
class TrackEventOutput:
    """Ingestion result. `event_id` is the store key assigned to the new record."""

    success: bool
    event_id: str = ""
    error: str | None = None
    event: TrackingEvent | None = None
    errors: list[TrackingValidationError] = field(default_factory=list)
    storage_failed: bool = False


@dataclass(frozen=True)
class EventListOutput:
    """Events ordered newest first."""

    events: tuple[TrackingEvent, ...]
    errors: list[TrackingValidationError] = field(default_factory=list)
    success: bool = True
    storage_failed: bool = False


@dataclass(frozen=True)
class GetEventOutput:
    event: TrackingEvent | None
    errors: list[TrackingValidationError] = field(default_factory=list)
    success: bool = True
    storage_failed: bool = False

    @property
    def found(self) -> bool:
        return self.event is not None


@dataclass(frozen=True)
class DeleteEventOutput:
    deleted: bool
    errors: list[TrackingValidationError] = field(default_factory=list)
    success: bool = True
    storage_failed: bool = False
