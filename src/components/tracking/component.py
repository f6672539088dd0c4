"""
Tracking component - Event ingestion and retrieval.

Shell layer: checks required identifiers, calls the services and converts
store failures into outputs.

Invariants:
- Every stored event keeps the project id it was created with
- Stored events are never updated, only deleted by id
- List results are ordered newest first
- No operation raises to the caller
"""

from __future__ import annotations

import logging

from ._impl import TrackingIngestionService, TrackingQueryService
from .models import (
    DeleteEventInput,
    DeleteEventOutput,
    EventListOutput,
    GetEventInput,
    GetEventOutput,
    QueryAdEventsInput,
    QueryProjectEventsInput,
    QuerySurveyEventsInput,
    StorageError,
    TrackEventInput,
    TrackEventOutput,
    TrackingValidationError,
)

logger = logging.getLogger(__name__)


def _required(value: str | None, field_name: str, label: str) -> TrackingValidationError | None:
    if value is None or value.strip() == "":
        return TrackingValidationError(
            code=f"{field_name}_required",
            message=f"{label} is required",
            field_name=field_name,
        )
    return None


def _missing(*checks: TrackingValidationError | None) -> list[TrackingValidationError]:
    return [c for c in checks if c is not None]


# --- Component Entry Points ---


def run_track(inp: TrackEventInput, *, service: TrackingIngestionService) -> TrackEventOutput:
    """Validate and store one event."""
    return service.track(inp)


def run_track_batch(
    inputs: list[TrackEventInput],
    *,
    service: TrackingIngestionService,
) -> list[TrackEventOutput]:
    """Store several events. Results keep the order of the inputs."""
    return service.track_batch(inputs)


def run_query_project(
    inp: QueryProjectEventsInput,
    *,
    service: TrackingQueryService,
) -> EventListOutput:
    """
    All events for a project, optionally limited to [from_date, to_date].

    Both bounds are inclusive. Omitted bounds leave that side open.
    """
    errors = _missing(_required(inp.project_id, "project_id", "ProjectId"))
    if errors:
        return EventListOutput(events=(), errors=errors, success=False)

    try:
        events = service.get_events_by_project(inp.project_id, inp.from_date, inp.to_date)
    except StorageError:
        logger.exception("Failed to query events for project %s", inp.project_id)
        return EventListOutput(events=(), success=False, storage_failed=True)

    return EventListOutput(events=tuple(events))


def run_query_ad(inp: QueryAdEventsInput, *, service: TrackingQueryService) -> EventListOutput:
    """Events for one ad within one project."""
    errors = _missing(
        _required(inp.ad_id, "ad_id", "AdId"),
        _required(inp.project_id, "project_id", "ProjectId"),
    )
    if errors:
        return EventListOutput(events=(), errors=errors, success=False)

    try:
        events = service.get_events_by_ad(inp.ad_id, inp.project_id)
    except StorageError:
        logger.exception("Failed to query events for ad %s", inp.ad_id)
        return EventListOutput(events=(), success=False, storage_failed=True)

    return EventListOutput(events=tuple(events))


def run_query_survey(
    inp: QuerySurveyEventsInput,
    *,
    service: TrackingQueryService,
) -> EventListOutput:
    """Events for one survey within one project."""
    errors = _missing(
        _required(inp.survey_id, "survey_id", "SurveyId"),
        _required(inp.project_id, "project_id", "ProjectId"),
    )
    if errors:
        return EventListOutput(events=(), errors=errors, success=False)

    try:
        events = service.get_events_by_survey(inp.survey_id, inp.project_id)
    except StorageError:
        logger.exception("Failed to query events for survey %s", inp.survey_id)
        return EventListOutput(events=(), success=False, storage_failed=True)

    return EventListOutput(events=tuple(events))


def run_get(inp: GetEventInput, *, service: TrackingQueryService) -> GetEventOutput:
    """Single lookup. A missing event is a normal result with event=None."""
    errors = _missing(_required(inp.event_id, "id", "Id"))
    if errors:
        return GetEventOutput(event=None, errors=errors, success=False)

    try:
        event = service.get_event_by_id(inp.event_id)
    except StorageError:
        logger.exception("Failed to load event %s", inp.event_id)
        return GetEventOutput(event=None, success=False, storage_failed=True)

    return GetEventOutput(event=event)


def run_delete(inp: DeleteEventInput, *, service: TrackingQueryService) -> DeleteEventOutput:
    """Delete by id. deleted=False when nothing was stored under the id."""
    errors = _missing(_required(inp.event_id, "id", "Id"))
    if errors:
        return DeleteEventOutput(deleted=False, errors=errors, success=False)

    try:
        deleted = service.delete_event(inp.event_id)
    except StorageError:
        logger.exception("Failed to delete event %s", inp.event_id)
        return DeleteEventOutput(deleted=False, success=False, storage_failed=True)

    return DeleteEventOutput(deleted=deleted)
