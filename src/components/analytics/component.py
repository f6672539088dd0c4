"""
Analytics component - Dashboard reports over tracking events.

Pulls a project's events and its ad/survey catalog, then hands them to the
pure reductions in _aggregate. Nothing is cached; each call recomputes.

Invariants:
- Reports never divide by zero (rates fall back to 0.0)
- Day windows always contain every day, empty days as zero
- A project unknown to the catalog still reports its events
"""

from __future__ import annotations

import logging

from src.components.catalog import CatalogPort
from src.components.tracking import StorageError

from ._aggregate import (
    DEFAULT_CONFIG,
    AggregateConfig,
    summarize_ads,
    summarize_overview,
    summarize_surveys,
)
from .models import (
    AdReportInput,
    AdReportOutput,
    AnalyticsValidationError,
    OverviewInput,
    OverviewOutput,
    SurveyReportInput,
    SurveyReportOutput,
)
from .ports import EventSourcePort, TimePort

logger = logging.getLogger(__name__)


def _check_project_id(project_id: str) -> list[AnalyticsValidationError]:
    if not project_id or not project_id.strip():
        return [
            AnalyticsValidationError(
                code="project_id_required",
                message="ProjectId is required",
                field_name="project_id",
            )
        ]
    return []


# --- Component Entry Points ---


def run_overview(
    inp: OverviewInput,
    *,
    events: EventSourcePort,
    catalog: CatalogPort,
    time_port: TimePort,
    config: AggregateConfig | None = None,
) -> OverviewOutput:
    """
    Overview report for one project.

    Args:
        inp: Input naming the project.
        events: Source of the project's tracking events.
        catalog: Ad/survey lookups used to resolve titles.
        time_port: Supplies the UTC day the trailing windows end on.
        config: Window sizes and list lengths.

    Returns:
        OverviewOutput with the summary, or errors.
    """
    errors = _check_project_id(inp.project_id)
    if errors:
        return OverviewOutput(summary=None, errors=errors, success=False)

    try:
        project_events = events.get_events_by_project(inp.project_id)
        ads = catalog.list_ads(inp.project_id)
        surveys = catalog.list_surveys(inp.project_id)
    except StorageError:
        logger.exception("Failed to load data for overview of project %s", inp.project_id)
        return OverviewOutput(summary=None, success=False, storage_failed=True)

    summary = summarize_overview(
        project_events,
        ads,
        surveys,
        today=time_port.today_utc(),
        config=config or DEFAULT_CONFIG,
    )
    return OverviewOutput(summary=summary)


def run_ad_report(
    inp: AdReportInput,
    *,
    events: EventSourcePort,
    catalog: CatalogPort,
    time_port: TimePort,
    config: AggregateConfig | None = None,
) -> AdReportOutput:
    """Per-ad clicks, impressions and click rates for one project."""
    errors = _check_project_id(inp.project_id)
    if errors:
        return AdReportOutput(report=None, errors=errors, success=False)

    try:
        project_events = events.get_events_by_project(inp.project_id)
        ads = catalog.list_ads(inp.project_id)
    except StorageError:
        logger.exception("Failed to load data for ad report of project %s", inp.project_id)
        return AdReportOutput(report=None, success=False, storage_failed=True)

    report = summarize_ads(
        project_events,
        ads,
        today=time_port.today_utc(),
        config=config or DEFAULT_CONFIG,
    )
    return AdReportOutput(report=report)


def run_survey_report(
    inp: SurveyReportInput,
    *,
    events: EventSourcePort,
    catalog: CatalogPort,
    time_port: TimePort,
    config: AggregateConfig | None = None,
) -> SurveyReportOutput:
    """Per-survey impressions, starts, submissions and completion rates."""
    errors = _check_project_id(inp.project_id)
    if errors:
        return SurveyReportOutput(report=None, errors=errors, success=False)

    try:
        project_events = events.get_events_by_project(inp.project_id)
        surveys = catalog.list_surveys(inp.project_id)
    except StorageError:
        logger.exception("Failed to load data for survey report of project %s", inp.project_id)
        return SurveyReportOutput(report=None, success=False, storage_failed=True)

    report = summarize_surveys(
        project_events,
        surveys,
        today=time_port.today_utc(),
        config=config or DEFAULT_CONFIG,
    )
    return SurveyReportOutput(report=report)
