"""
Tracking API Routes.

Ingestion, lookup and deletion of tracking events.

Every failure is returned as a JSON body; validation problems are 400,
missing events 404, store failures 500 with a generic message.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.responses import JSONResponse

from src.api.deps import get_ingestion_service, get_query_service
from src.api.schemas import (
    BatchItemResult,
    BatchTrackResponse,
    ErrorResponse,
    TrackEventRequest,
    TrackEventResponse,
)
from src.components.tracking import (
    STORAGE_ERROR_MESSAGE,
    DeleteEventInput,
    EventListOutput,
    GetEventInput,
    QueryAdEventsInput,
    QueryProjectEventsInput,
    QuerySurveyEventsInput,
    TrackEventInput,
    TrackingIngestionService,
    TrackingQueryService,
    run_delete,
    run_get,
    run_query_ad,
    run_query_project,
    run_query_survey,
    run_track,
    run_track_batch,
)
from src.domain.entities import TrackingEvent

logger = logging.getLogger(__name__)

router = APIRouter()

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


# --- Helper Functions ---


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def parse_datetime(value: str | None, field_label: str) -> datetime | None:
    """Parse an ISO 8601 query value. Naive values are taken as UTC."""
    if value is None or value == "":
        return None
    text = value[:-1] + "+00:00" if value.endswith("Z") else value
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise ValueError(f"Invalid {field_label} format: {value}") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _to_input(body: TrackEventRequest) -> TrackEventInput:
    return TrackEventInput(
        event_type=body.event_type or "",
        event_id=body.event_id or "",
        project_id=body.project_id or "",
        ad_id=body.ad_id,
        survey_id=body.survey_id,
        session_id=body.session_id,
    )


def _list_response(output: EventListOutput, failure_message: str) -> Any:
    if output.storage_failed:
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, failure_message)
    if output.errors:
        return error_response(status.HTTP_400_BAD_REQUEST, output.errors[0].message)
    return list(output.events)


# --- Routes ---


@router.post(
    "/events",
    response_model=TrackEventResponse,
    response_model_exclude_none=True,
    responses={400: {"model": TrackEventResponse}, 500: {"model": ErrorResponse}},
)
def track_event(
    body: TrackEventRequest | None = None,
    service: TrackingIngestionService = Depends(get_ingestion_service),
) -> Any:
    """
    Record one tracking event.

    Validation failures come back as 400 with success=false and the
    reason in `error`; they are not retried.
    """
    if body is None:
        return error_response(status.HTTP_400_BAD_REQUEST, "Event data is required")

    try:
        output = run_track(_to_input(body), service=service)
    except Exception:
        logger.exception("Unexpected failure while tracking event")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, STORAGE_ERROR_MESSAGE)

    response = TrackEventResponse(
        success=output.success,
        event_id=output.event_id or None,
        error=output.error,
    )
    if output.success:
        return response

    status_code = (
        status.HTTP_500_INTERNAL_SERVER_ERROR
        if output.storage_failed
        else status.HTTP_400_BAD_REQUEST
    )
    return JSONResponse(
        status_code=status_code,
        content=response.model_dump(by_alias=True, exclude_none=True),
    )


@router.post(
    "/events/batch",
    response_model=BatchTrackResponse,
    response_model_exclude_none=True,
    responses={500: {"model": ErrorResponse}},
)
def track_batch(
    events: list[TrackEventRequest],
    service: TrackingIngestionService = Depends(get_ingestion_service),
) -> Any:
    """Record several events. Each is validated and stored on its own."""
    try:
        outputs = run_track_batch([_to_input(e) for e in events], service=service)
    except Exception:
        logger.exception("Unexpected failure while tracking event batch")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, STORAGE_ERROR_MESSAGE)

    results = [
        BatchItemResult(
            index=i,
            success=o.success,
            event_id=o.event_id or None,
            error=o.error,
        )
        for i, o in enumerate(outputs)
    ]
    return BatchTrackResponse(success=all(r.success for r in results), results=results)


@router.get(
    "/events/project/{project_id}",
    response_model=list[TrackingEvent],
    responses=_ERROR_RESPONSES,
)
def get_events_by_project(
    project_id: str,
    from_date: str | None = Query(None, alias="fromDate"),
    to_date: str | None = Query(None, alias="toDate"),
    service: TrackingQueryService = Depends(get_query_service),
) -> Any:
    """Events of a project, newest first, optionally within [fromDate, toDate]."""
    try:
        start = parse_datetime(from_date, "fromDate")
        end = parse_datetime(to_date, "toDate")
    except ValueError as e:
        return error_response(status.HTTP_400_BAD_REQUEST, str(e))

    output = run_query_project(
        QueryProjectEventsInput(project_id=project_id, from_date=start, to_date=end),
        service=service,
    )
    return _list_response(output, "An error occurred while retrieving events")


@router.get(
    "/events/ad/{ad_id}",
    response_model=list[TrackingEvent],
    responses=_ERROR_RESPONSES,
)
def get_events_by_ad(
    ad_id: str,
    project_id: str | None = Query(None, alias="projectId"),
    service: TrackingQueryService = Depends(get_query_service),
) -> Any:
    output = run_query_ad(
        QueryAdEventsInput(ad_id=ad_id, project_id=project_id or ""),
        service=service,
    )
    return _list_response(output, "An error occurred while retrieving ad events")


@router.get(
    "/events/survey/{survey_id}",
    response_model=list[TrackingEvent],
    responses=_ERROR_RESPONSES,
)
def get_events_by_survey(
    survey_id: str,
    project_id: str | None = Query(None, alias="projectId"),
    service: TrackingQueryService = Depends(get_query_service),
) -> Any:
    output = run_query_survey(
        QuerySurveyEventsInput(survey_id=survey_id, project_id=project_id or ""),
        service=service,
    )
    return _list_response(output, "An error occurred while retrieving survey events")


@router.get(
    "/events/{event_id}",
    response_model=TrackingEvent,
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def get_event(
    event_id: str,
    service: TrackingQueryService = Depends(get_query_service),
) -> Any:
    output = run_get(GetEventInput(event_id=event_id), service=service)
    if output.storage_failed:
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "An error occurred while retrieving the event"
        )
    if output.event is None:
        return error_response(status.HTTP_404_NOT_FOUND, "Event not found")
    return output.event


@router.delete(
    "/events/{event_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_model=None,
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def delete_event(
    event_id: str,
    service: TrackingQueryService = Depends(get_query_service),
) -> Response:
    output = run_delete(DeleteEventInput(event_id=event_id), service=service)
    if output.storage_failed:
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "An error occurred while deleting the event"
        )
    if not output.deleted:
        return error_response(status.HTTP_404_NOT_FOUND, "Event not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
