"""
Analytics component input/output models.

Rates are percentages in [0, 100]; a zero denominator gives 0.0.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime

# --- Validation Error ---


@dataclass(frozen=True)
class AnalyticsValidationError:
    """Analytics validation error."""

    code: str
    message: str
    field_name: str | None = None


# --- Aggregates ---


@dataclass(frozen=True)
class EventTypeCounts:
    ad_impressions: int = 0
    ad_clicks: int = 0
    survey_impressions: int = 0
    survey_starts: int = 0
    survey_submissions: int = 0


@dataclass(frozen=True)
class LabeledCount:
    """Named value for distribution and funnel charts."""

    name: str
    value: int


@dataclass(frozen=True)
class TimelinePoint:
    date: date
    ad_events: int
    survey_events: int
    total_events: int


@dataclass(frozen=True)
class HeatmapCell:
    date: date
    count: int
    weekday: str


@dataclass(frozen=True)
class AdPerformance:
    ad_id: str
    name: str
    clicks: int
    impressions: int
    click_rate: float


@dataclass(frozen=True)
class SurveyPerformance:
    survey_id: str
    name: str
    impressions: int
    starts: int
    submissions: int
    completion_rate: float


@dataclass(frozen=True)
class ActivityItem:
    kind: str  # "Ad" or "Survey"
    content: str
    event_type: str
    timestamp: datetime


@dataclass(frozen=True)
class OverviewSummary:
    """Everything the overview dashboard shows for one project."""

    total_events: int
    unique_sessions: int
    counts: EventTypeCounts
    click_rate: float
    completion_rate: float
    event_type_distribution: tuple[LabeledCount, ...]
    timeline: tuple[TimelinePoint, ...]
    top_ads: tuple[AdPerformance, ...]
    top_surveys: tuple[SurveyPerformance, ...]
    recent_activity: tuple[ActivityItem, ...]
    engagement_funnel: tuple[LabeledCount, ...]
    heatmap: tuple[HeatmapCell, ...]


@dataclass(frozen=True)
class AdTrackingSummary:
    ad_id: str
    title: str
    click_count: int
    impression_count: int
    click_rate: float
    event_count: int
    last_activity: datetime | None


@dataclass(frozen=True)
class AdTimelinePoint:
    date: date
    clicks: int
    impressions: int


@dataclass(frozen=True)
class AdReport:
    ads: tuple[AdTrackingSummary, ...]
    total_clicks: int
    total_impressions: int
    click_rate: float
    active_ads: int
    timeline: tuple[AdTimelinePoint, ...]


@dataclass(frozen=True)
class SurveyTrackingSummary:
    survey_id: str
    title: str
    impression_count: int
    start_count: int
    submission_count: int
    completion_rate: float
    event_count: int
    last_activity: datetime | None


@dataclass(frozen=True)
class SurveyTimelinePoint:
    date: date
    impressions: int
    starts: int
    submissions: int


@dataclass(frozen=True)
class SurveyReport:
    surveys: tuple[SurveyTrackingSummary, ...]
    total_impressions: int
    total_starts: int
    total_submissions: int
    completion_rate: float
    active_surveys: int
    timeline: tuple[SurveyTimelinePoint, ...]


# --- Input Models ---


@dataclass(frozen=True)
class OverviewInput:
    project_id: str


@dataclass(frozen=True)
class AdReportInput:
    project_id: str


@dataclass(frozen=True)
class SurveyReportInput:
    project_id: str


# --- Output Models ---


@dataclass(frozen=True)
class OverviewOutput:
    summary: OverviewSummary | None
    errors: list[AnalyticsValidationError] = field(default_factory=list)
    success: bool = True
    storage_failed: bool = False


@dataclass(frozen=True)
class AdReportOutput:
    report: AdReport | None
    errors: list[AnalyticsValidationError] = field(default_factory=list)
    success: bool = True
    storage_failed: bool = False


@dataclass(frozen=True)
class SurveyReportOutput:
    report: SurveyReport | None
    errors: list[AnalyticsValidationError] = field(default_factory=list)
    success: bool = True
    storage_failed: bool = False
