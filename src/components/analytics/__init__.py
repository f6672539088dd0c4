"""
Analytics component - Aggregation of tracking events into dashboard reports.
"""

from ._aggregate import (
    DEFAULT_CONFIG,
    AggregateConfig,
    build_ad_timeline,
    build_heatmap,
    build_survey_timeline,
    build_timeline,
    click_rate,
    completion_rate,
    count_event_types,
    count_unique_sessions,
    engagement_funnel,
    event_type_distribution,
    rank_ads,
    rank_surveys,
    recent_activity,
    summarize_ads,
    summarize_overview,
    summarize_surveys,
    trailing_days,
    truncate_title,
)
from .component import (
    run_ad_report,
    run_overview,
    run_survey_report,
)
from .models import (
    ActivityItem,
    AdPerformance,
    AdReport,
    AdReportInput,
    AdReportOutput,
    AdTimelinePoint,
    AdTrackingSummary,
    AnalyticsValidationError,
    EventTypeCounts,
    HeatmapCell,
    LabeledCount,
    OverviewInput,
    OverviewOutput,
    OverviewSummary,
    SurveyPerformance,
    SurveyReport,
    SurveyReportInput,
    SurveyReportOutput,
    SurveyTimelinePoint,
    SurveyTrackingSummary,
    TimelinePoint,
)
from .ports import EventSourcePort, TimePort

__all__ = [
    # Entry points
    "run_overview",
    "run_ad_report",
    "run_survey_report",
    # Input models
    "OverviewInput",
    "AdReportInput",
    "SurveyReportInput",
    # Output models
    "AnalyticsValidationError",
    "OverviewOutput",
    "AdReportOutput",
    "SurveyReportOutput",
    "OverviewSummary",
    "AdReport",
    "SurveyReport",
    "ActivityItem",
    "AdPerformance",
    "AdTimelinePoint",
    "AdTrackingSummary",
    "EventTypeCounts",
    "HeatmapCell",
    "LabeledCount",
    "SurveyPerformance",
    "SurveyTimelinePoint",
    "SurveyTrackingSummary",
    "TimelinePoint",
    # Ports
    "EventSourcePort",
    "TimePort",
    # Aggregation
    "DEFAULT_CONFIG",
    "AggregateConfig",
    "build_ad_timeline",
    "build_heatmap",
    "build_survey_timeline",
    "build_timeline",
    "click_rate",
    "completion_rate",
    "count_event_types",
    "count_unique_sessions",
    "engagement_funnel",
    "event_type_distribution",
    "rank_ads",
    "rank_surveys",
    "recent_activity",
    "summarize_ads",
    "summarize_overview",
    "summarize_surveys",
    "trailing_days",
    "truncate_title",
]
