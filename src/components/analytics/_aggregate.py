"""
Tracking analytics aggregation.

Pure reductions of (events, ads, surveys, today) into dashboard summaries.
No I/O and no caching; every report is recomputed from the events given.

Key behaviors:
- Counts per canonical event type
- Distinct sessions ignore events without a session id
- Click and completion rates are percentages, 0.0 when the denominator is 0
- Day buckets use the UTC calendar day of the event timestamp
- Trailing windows end on `today` and report empty days as zero
- Rankings sort by clicks / submissions descending, ties keep catalog order
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from src.components.tracking import as_utc, newest_first
from src.domain.entities import Ad, EventType, Survey, TrackingEvent

from .models import (
    ActivityItem,
    AdPerformance,
    AdReport,
    AdTimelinePoint,
    AdTrackingSummary,
    EventTypeCounts,
    HeatmapCell,
    LabeledCount,
    OverviewSummary,
    SurveyPerformance,
    SurveyReport,
    SurveyTimelinePoint,
    SurveyTrackingSummary,
    TimelinePoint,
)

# --- Configuration ---


@dataclass(frozen=True)
class AggregateConfig:
    """Window sizes and list lengths for the dashboard reports."""

    top_n: int = 5
    timeline_days: int = 7
    heatmap_days: int = 30
    recent_activity_limit: int = 10
    title_max_chars: int = 20


DEFAULT_CONFIG = AggregateConfig()

_WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


# --- Small helpers ---


def _ratio_percent(numerator: int, denominator: int) -> float:
    if denominator <= 0:
        return 0.0
    return numerator / denominator * 100


def click_rate(clicks: int, impressions: int) -> float:
    """Clicks per impression as a percentage."""
    return _ratio_percent(clicks, impressions)


def completion_rate(submissions: int, starts: int) -> float:
    """Submissions per start as a percentage."""
    return _ratio_percent(submissions, starts)


def truncate_title(title: str, max_chars: int = DEFAULT_CONFIG.title_max_chars) -> str:
    if len(title) > max_chars:
        return title[:max_chars] + "..."
    return title


def event_day(event: TrackingEvent) -> date:
    return as_utc(event.timestamp).date()


def is_ad_event(event: TrackingEvent) -> bool:
    return event.event_type.startswith("ad_")


def is_survey_event(event: TrackingEvent) -> bool:
    return event.event_type.startswith("survey_")


def trailing_days(today: date, days: int) -> list[date]:
    """`days` calendar days ending on `today`, oldest first."""
    return [today - timedelta(days=days - 1 - i) for i in range(days)]


def _last_activity(events: Sequence[TrackingEvent]) -> datetime | None:
    if not events:
        return None
    return max(as_utc(e.timestamp) for e in events)


# --- Counts ---


def count_event_types(events: Iterable[TrackingEvent]) -> EventTypeCounts:
    by_type = Counter(e.event_type for e in events)
    return EventTypeCounts(
        ad_impressions=by_type[EventType.AD_IMPRESSION.value],
        ad_clicks=by_type[EventType.AD_CLICK.value],
        survey_impressions=by_type[EventType.SURVEY_IMPRESSION.value],
        survey_starts=by_type[EventType.SURVEY_START.value],
        survey_submissions=by_type[EventType.SURVEY_SUBMIT.value],
    )


def count_unique_sessions(events: Iterable[TrackingEvent]) -> int:
    return len({e.session_id for e in events if e.session_id})


def event_type_distribution(counts: EventTypeCounts) -> tuple[LabeledCount, ...]:
    """Labelled per-type counts, zero entries dropped."""
    items = (
        LabeledCount("Ad Clicks", counts.ad_clicks),
        LabeledCount("Ad Impressions", counts.ad_impressions),
        LabeledCount("Survey Impressions", counts.survey_impressions),
        LabeledCount("Survey Starts", counts.survey_starts),
        LabeledCount("Survey Submissions", counts.survey_submissions),
    )
    return tuple(item for item in items if item.value > 0)


def engagement_funnel(counts: EventTypeCounts) -> tuple[LabeledCount, ...]:
    """Impressions -> interactions -> conversions, zero stages dropped."""
    stages = (
        LabeledCount("Impressions", counts.ad_impressions + counts.survey_impressions),
        LabeledCount("Interactions", counts.ad_clicks + counts.survey_starts),
        LabeledCount("Conversions", counts.survey_submissions),
    )
    return tuple(stage for stage in stages if stage.value > 0)


# --- Time series ---


def build_timeline(
    events: Iterable[TrackingEvent],
    today: date,
    days: int = DEFAULT_CONFIG.timeline_days,
) -> tuple[TimelinePoint, ...]:
    ad_counts: Counter[date] = Counter()
    survey_counts: Counter[date] = Counter()
    totals: Counter[date] = Counter()

    for event in events:
        day = event_day(event)
        totals[day] += 1
        if is_ad_event(event):
            ad_counts[day] += 1
        elif is_survey_event(event):
            survey_counts[day] += 1

    return tuple(
        TimelinePoint(
            date=day,
            ad_events=ad_counts[day],
            survey_events=survey_counts[day],
            total_events=totals[day],
        )
        for day in trailing_days(today, days)
    )


def build_heatmap(
    events: Iterable[TrackingEvent],
    today: date,
    days: int = DEFAULT_CONFIG.heatmap_days,
) -> tuple[HeatmapCell, ...]:
    per_day = Counter(event_day(e) for e in events)
    return tuple(
        HeatmapCell(date=day, count=per_day[day], weekday=_WEEKDAYS[day.weekday()])
        for day in trailing_days(today, days)
    )


def build_ad_timeline(
    events: Iterable[TrackingEvent],
    today: date,
    days: int = DEFAULT_CONFIG.timeline_days,
) -> tuple[AdTimelinePoint, ...]:
    clicks: Counter[date] = Counter()
    impressions: Counter[date] = Counter()
    for event in events:
        if event.event_type == EventType.AD_CLICK.value:
            clicks[event_day(event)] += 1
        elif event.event_type == EventType.AD_IMPRESSION.value:
            impressions[event_day(event)] += 1

    return tuple(
        AdTimelinePoint(date=day, clicks=clicks[day], impressions=impressions[day])
        for day in trailing_days(today, days)
    )


def build_survey_timeline(
    events: Iterable[TrackingEvent],
    today: date,
    days: int = DEFAULT_CONFIG.timeline_days,
) -> tuple[SurveyTimelinePoint, ...]:
    per_type: dict[str, Counter[date]] = {
        EventType.SURVEY_IMPRESSION.value: Counter(),
        EventType.SURVEY_START.value: Counter(),
        EventType.SURVEY_SUBMIT.value: Counter(),
    }
    for event in events:
        if event.event_type in per_type:
            per_type[event.event_type][event_day(event)] += 1

    impressions = per_type[EventType.SURVEY_IMPRESSION.value]
    starts = per_type[EventType.SURVEY_START.value]
    submissions = per_type[EventType.SURVEY_SUBMIT.value]
    return tuple(
        SurveyTimelinePoint(
            date=day,
            impressions=impressions[day],
            starts=starts[day],
            submissions=submissions[day],
        )
        for day in trailing_days(today, days)
    )


# --- Rankings ---


def _events_by(events: Iterable[TrackingEvent], attr: str) -> dict[str, list[TrackingEvent]]:
    grouped: dict[str, list[TrackingEvent]] = {}
    for event in events:
        key = getattr(event, attr)
        if key:
            grouped.setdefault(key, []).append(event)
    return grouped


def rank_ads(
    events: Iterable[TrackingEvent],
    ads: Sequence[Ad],
    limit: int = DEFAULT_CONFIG.top_n,
    title_max_chars: int = DEFAULT_CONFIG.title_max_chars,
) -> tuple[AdPerformance, ...]:
    """Catalog ads ordered by click count, highest first, cut to `limit`."""
    by_ad = _events_by(events, "ad_id")
    rows = []
    for ad in ads:
        counts = count_event_types(by_ad.get(ad.id, []))
        rows.append(
            AdPerformance(
                ad_id=ad.id,
                name=truncate_title(ad.title, title_max_chars),
                clicks=counts.ad_clicks,
                impressions=counts.ad_impressions,
                click_rate=click_rate(counts.ad_clicks, counts.ad_impressions),
            )
        )
    rows.sort(key=lambda r: r.clicks, reverse=True)
    return tuple(rows[:limit])


def rank_surveys(
    events: Iterable[TrackingEvent],
    surveys: Sequence[Survey],
    limit: int = DEFAULT_CONFIG.top_n,
    title_max_chars: int = DEFAULT_CONFIG.title_max_chars,
) -> tuple[SurveyPerformance, ...]:
    """Catalog surveys ordered by submission count, highest first, cut to `limit`."""
    by_survey = _events_by(events, "survey_id")
    rows = []
    for survey in surveys:
        counts = count_event_types(by_survey.get(survey.id, []))
        rows.append(
            SurveyPerformance(
                survey_id=survey.id,
                name=truncate_title(survey.title, title_max_chars),
                impressions=counts.survey_impressions,
                starts=counts.survey_starts,
                submissions=counts.survey_submissions,
                completion_rate=completion_rate(counts.survey_submissions, counts.survey_starts),
            )
        )
    rows.sort(key=lambda r: r.submissions, reverse=True)
    return tuple(rows[:limit])


def recent_activity(
    events: Iterable[TrackingEvent],
    ads: Sequence[Ad],
    surveys: Sequence[Survey],
    limit: int = DEFAULT_CONFIG.recent_activity_limit,
) -> tuple[ActivityItem, ...]:
    """Newest events with the ad or survey title they refer to."""
    ad_titles = {a.id: a.title for a in ads}
    survey_titles = {s.id: s.title for s in surveys}

    items = []
    for event in newest_first(events)[:limit]:
        if event.ad_id:
            content = ad_titles.get(event.ad_id, f"Ad {event.ad_id[:8]}...")
        elif event.survey_id:
            content = survey_titles.get(event.survey_id, f"Survey {event.survey_id[:8]}...")
        else:
            content = "Unknown"
        items.append(
            ActivityItem(
                kind="Ad" if is_ad_event(event) else "Survey",
                content=content,
                event_type=event.event_type,
                timestamp=as_utc(event.timestamp),
            )
        )
    return tuple(items)


# --- Reports ---


def summarize_overview(
    events: Sequence[TrackingEvent],
    ads: Sequence[Ad],
    surveys: Sequence[Survey],
    today: date,
    config: AggregateConfig = DEFAULT_CONFIG,
) -> OverviewSummary:
    counts = count_event_types(events)
    return OverviewSummary(
        total_events=len(events),
        unique_sessions=count_unique_sessions(events),
        counts=counts,
        click_rate=click_rate(counts.ad_clicks, counts.ad_impressions),
        completion_rate=completion_rate(counts.survey_submissions, counts.survey_starts),
        event_type_distribution=event_type_distribution(counts),
        timeline=build_timeline(events, today, config.timeline_days),
        top_ads=rank_ads(events, ads, config.top_n, config.title_max_chars),
        top_surveys=rank_surveys(events, surveys, config.top_n, config.title_max_chars),
        recent_activity=recent_activity(events, ads, surveys, config.recent_activity_limit),
        engagement_funnel=engagement_funnel(counts),
        heatmap=build_heatmap(events, today, config.heatmap_days),
    )


def summarize_ads(
    events: Sequence[TrackingEvent],
    ads: Sequence[Ad],
    today: date,
    config: AggregateConfig = DEFAULT_CONFIG,
) -> AdReport:
    """Per-ad tracking figures plus totals over the catalog's ads."""
    by_ad = _events_by(events, "ad_id")
    summaries = []
    ad_events: list[TrackingEvent] = []
    for ad in ads:
        own = by_ad.get(ad.id, [])
        ad_events.extend(own)
        counts = count_event_types(own)
        summaries.append(
            AdTrackingSummary(
                ad_id=ad.id,
                title=ad.title,
                click_count=counts.ad_clicks,
                impression_count=counts.ad_impressions,
                click_rate=click_rate(counts.ad_clicks, counts.ad_impressions),
                event_count=len(own),
                last_activity=_last_activity(own),
            )
        )

    total_clicks = sum(s.click_count for s in summaries)
    total_impressions = sum(s.impression_count for s in summaries)
    return AdReport(
        ads=tuple(summaries),
        total_clicks=total_clicks,
        total_impressions=total_impressions,
        click_rate=click_rate(total_clicks, total_impressions),
        active_ads=sum(1 for s in summaries if s.event_count > 0),
        timeline=build_ad_timeline(ad_events, today, config.timeline_days),
    )


def summarize_surveys(
    events: Sequence[TrackingEvent],
    surveys: Sequence[Survey],
    today: date,
    config: AggregateConfig = DEFAULT_CONFIG,
) -> SurveyReport:
    """Per-survey tracking figures plus totals over the catalog's surveys."""
    by_survey = _events_by(events, "survey_id")
    summaries = []
    survey_events: list[TrackingEvent] = []
    for survey in surveys:
        own = by_survey.get(survey.id, [])
        survey_events.extend(own)
        counts = count_event_types(own)
        summaries.append(
            SurveyTrackingSummary(
                survey_id=survey.id,
                title=survey.title,
                impression_count=counts.survey_impressions,
                start_count=counts.survey_starts,
                submission_count=counts.survey_submissions,
                completion_rate=completion_rate(counts.survey_submissions, counts.survey_starts),
                event_count=len(own),
                last_activity=_last_activity(own),
            )
        )

    total_starts = sum(s.start_count for s in summaries)
    total_submissions = sum(s.submission_count for s in summaries)
    return SurveyReport(
        surveys=tuple(summaries),
        total_impressions=sum(s.impression_count for s in summaries),
        total_starts=total_starts,
        total_submissions=total_submissions,
        completion_rate=completion_rate(total_submissions, total_starts),
        active_surveys=sum(1 for s in summaries if s.event_count > 0),
        timeline=build_survey_timeline(survey_events, today, config.timeline_days),
    )
