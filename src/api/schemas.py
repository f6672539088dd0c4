import datetime as dt

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts camelCase or snake_case keys, serializes camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Errors ---
class ErrorResponse(BaseModel):
    error: str


# --- Tracking ---
class TrackEventRequest(CamelModel):
    # Required fields are optional here so the service can report which one is missing.
    event_type: str | None = None
    event_id: str | None = None
    project_id: str | None = None
    ad_id: str | None = None
    survey_id: str | None = None
    session_id: str | None = None


class TrackEventResponse(CamelModel):
    success: bool
    event_id: str | None = None
    error: str | None = None


class BatchItemResult(CamelModel):
    index: int
    success: bool
    event_id: str | None = None
    error: str | None = None


class BatchTrackResponse(CamelModel):
    success: bool
    results: list[BatchItemResult]


# --- Analytics ---
class EventTypeCountsModel(CamelModel):
    ad_impressions: int
    ad_clicks: int
    survey_impressions: int
    survey_starts: int
    survey_submissions: int


class LabeledCountModel(CamelModel):
    name: str
    value: int


class TimelinePointModel(CamelModel):
    date: dt.date
    ad_events: int
    survey_events: int
    total_events: int


class HeatmapCellModel(CamelModel):
    date: dt.date
    count: int
    weekday: str


class AdPerformanceModel(CamelModel):
    ad_id: str
    name: str
    clicks: int
    impressions: int
    click_rate: float


class SurveyPerformanceModel(CamelModel):
    survey_id: str
    name: str
    impressions: int
    starts: int
    submissions: int
    completion_rate: float


class ActivityItemModel(CamelModel):
    kind: str
    content: str
    event_type: str
    timestamp: dt.datetime


class OverviewResponse(CamelModel):
    project_id: str
    total_events: int
    unique_sessions: int
    counts: EventTypeCountsModel
    click_rate: float
    completion_rate: float
    event_type_distribution: list[LabeledCountModel]
    timeline: list[TimelinePointModel]
    top_ads: list[AdPerformanceModel]
    top_surveys: list[SurveyPerformanceModel]
    recent_activity: list[ActivityItemModel]
    engagement_funnel: list[LabeledCountModel]
    heatmap: list[HeatmapCellModel]


class AdTrackingSummaryModel(CamelModel):
    ad_id: str
    title: str
    click_count: int
    impression_count: int
    click_rate: float
    event_count: int
    last_activity: dt.datetime | None = None


class AdTimelinePointModel(CamelModel):
    date: dt.date
    clicks: int
    impressions: int


class AdReportResponse(CamelModel):
    project_id: str
    ads: list[AdTrackingSummaryModel]
    total_clicks: int
    total_impressions: int
    click_rate: float
    active_ads: int
    timeline: list[AdTimelinePointModel]


class SurveyTrackingSummaryModel(CamelModel):
    survey_id: str
    title: str
    impression_count: int
    start_count: int
    submission_count: int
    completion_rate: float
    event_count: int
    last_activity: dt.datetime | None = None


class SurveyTimelinePointModel(CamelModel):
    date: dt.date
    impressions: int
    starts: int
    submissions: int


class SurveyReportResponse(CamelModel):
    project_id: str
    surveys: list[SurveyTrackingSummaryModel]
    total_impressions: int
    total_starts: int
    total_submissions: int
    completion_rate: float
    active_surveys: int
    timeline: list[SurveyTimelinePointModel]
