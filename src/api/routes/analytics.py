"""
Analytics API Routes.

Dashboard reports for one project, recomputed from stored events on
every request.
"""

from __future__ import annotations

import dataclasses
from typing import Any

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from src.api.deps import get_aggregate_config, get_catalog, get_clock, get_query_service
from src.api.schemas import (
    AdReportResponse,
    ErrorResponse,
    OverviewResponse,
    SurveyReportResponse,
)
from src.components.analytics import (
    AdReportInput,
    AggregateConfig,
    OverviewInput,
    SurveyReportInput,
    run_ad_report,
    run_overview,
    run_survey_report,
)
from src.components.catalog import CatalogPort
from src.components.tracking import TrackingQueryService
from src.ports.clock import ClockPort

router = APIRouter()

REPORT_ERROR_MESSAGE = "An error occurred while computing analytics"

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def _failure(output: Any) -> JSONResponse | None:
    if output.storage_failed:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": REPORT_ERROR_MESSAGE},
        )
    if output.errors:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": output.errors[0].message},
        )
    return None


@router.get(
    "/projects/{project_id}/overview",
    response_model=OverviewResponse,
    responses=_ERROR_RESPONSES,
)
def get_overview(
    project_id: str,
    events: TrackingQueryService = Depends(get_query_service),
    catalog: CatalogPort = Depends(get_catalog),
    clock: ClockPort = Depends(get_clock),
    config: AggregateConfig = Depends(get_aggregate_config),
) -> Any:
    """Totals, rates, charts and recent activity for a project."""
    output = run_overview(
        OverviewInput(project_id=project_id),
        events=events,
        catalog=catalog,
        time_port=clock,
        config=config,
    )
    failure = _failure(output)
    if failure is not None:
        return failure
    return OverviewResponse.model_validate(
        {**dataclasses.asdict(output.summary), "project_id": project_id}
    )


@router.get(
    "/projects/{project_id}/ads",
    response_model=AdReportResponse,
    responses=_ERROR_RESPONSES,
)
def get_ad_report(
    project_id: str,
    events: TrackingQueryService = Depends(get_query_service),
    catalog: CatalogPort = Depends(get_catalog),
    clock: ClockPort = Depends(get_clock),
    config: AggregateConfig = Depends(get_aggregate_config),
) -> Any:
    """Per-ad performance plus a daily clicks/impressions timeline."""
    output = run_ad_report(
        AdReportInput(project_id=project_id),
        events=events,
        catalog=catalog,
        time_port=clock,
        config=config,
    )
    failure = _failure(output)
    if failure is not None:
        return failure
    return AdReportResponse.model_validate(
        {**dataclasses.asdict(output.report), "project_id": project_id}
    )


@router.get(
    "/projects/{project_id}/surveys",
    response_model=SurveyReportResponse,
    responses=_ERROR_RESPONSES,
)
def get_survey_report(
    project_id: str,
    events: TrackingQueryService = Depends(get_query_service),
    catalog: CatalogPort = Depends(get_catalog),
    clock: ClockPort = Depends(get_clock),
    config: AggregateConfig = Depends(get_aggregate_config),
) -> Any:
    output = run_survey_report(
        SurveyReportInput(project_id=project_id),
        events=events,
        catalog=catalog,
        time_port=clock,
        config=config,
    )
    failure = _failure(output)
    if failure is not None:
        return failure
    return SurveyReportResponse.model_validate(
        {**dataclasses.asdict(output.report), "project_id": project_id}
    )
