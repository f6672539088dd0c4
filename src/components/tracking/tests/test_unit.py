"""
Tracking component unit tests.

Tests for event ingestion, lookup and deletion.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from src.adapters.clock import FixedClock
from src.components.catalog import InMemoryCatalog
from src.components.tracking import (
    STORAGE_ERROR_MESSAGE,
    DeleteEventInput,
    GetEventInput,
    IngestionConfig,
    InMemoryEventRepo,
    QueryAdEventsInput,
    QueryProjectEventsInput,
    QuerySurveyEventsInput,
    StorageError,
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
    validate_track_input,
)
from src.domain.entities import Project

T0 = datetime(2025, 3, 10, 12, 0, tzinfo=UTC)


# --- Failing Repository ---


class FailingEventRepo(InMemoryEventRepo):
    """Event store whose every operation fails."""

    def save(self, event):  # type: ignore[no-untyped-def]
        raise StorageError("save_event")

    def get_by_id(self, event_id):  # type: ignore[no-untyped-def]
        raise StorageError("get_event")

    def delete(self, event_id):  # type: ignore[no-untyped-def]
        raise StorageError("delete_event")

    def query_by_project(self, project_id, start=None, end=None):  # type: ignore[no-untyped-def]
        raise StorageError("query_events_by_project")

    def scan(self, project_id, ad_id=None, survey_id=None):  # type: ignore[no-untyped-def]
        raise StorageError("scan_events")


# --- Fixtures ---


@pytest.fixture
def repo() -> InMemoryEventRepo:
    return InMemoryEventRepo()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(T0)


@pytest.fixture
def ingestion(repo: InMemoryEventRepo, clock: FixedClock) -> TrackingIngestionService:
    return TrackingIngestionService(event_repo=repo, time_port=clock)


@pytest.fixture
def query(repo: InMemoryEventRepo) -> TrackingQueryService:
    return TrackingQueryService(event_repo=repo)


def _event(**overrides: str | None) -> TrackEventInput:
    values: dict[str, str | None] = {
        "event_type": "ad_click",
        "event_id": "evt-1",
        "project_id": "proj-1",
        "ad_id": "ad-1",
    }
    values.update(overrides)
    return TrackEventInput(**values)  # type: ignore[arg-type]


# --- Validation Tests ---


class TestValidation:
    """Test required fields and event type checks."""

    def test_missing_event_type(self) -> None:
        """Event type is checked first."""
        error = validate_track_input(TrackEventInput(event_id="", project_id=""))
        assert error is not None
        assert error.message == "EventType is required"

    def test_missing_event_id(self) -> None:
        error = validate_track_input(TrackEventInput(event_type="ad_click", project_id=""))
        assert error is not None
        assert error.message == "EventId is required"

    def test_missing_project_id(self) -> None:
        error = validate_track_input(TrackEventInput(event_type="ad_click", event_id="e"))
        assert error is not None
        assert error.message == "ProjectId is required"

    def test_whitespace_counts_as_missing(self) -> None:
        error = validate_track_input(_event(event_id="   "))
        assert error is not None
        assert error.code == "event_id_required"

    def test_required_fields_checked_before_type(self) -> None:
        """An unknown type with a missing project reports the project."""
        error = validate_track_input(_event(event_type="bogus", project_id=""))
        assert error is not None
        assert error.message == "ProjectId is required"

    def test_unknown_event_type(self) -> None:
        error = validate_track_input(_event(event_type="bogus"))
        assert error is not None
        assert error.code == "invalid_event_type"
        assert error.message == (
            "Invalid EventType. Must be one of: "
            "ad_impression, ad_click, survey_impression, survey_submit"
        )

    def test_survey_start_rejected_by_default(self) -> None:
        error = validate_track_input(_event(event_type="survey_start"))
        assert error is not None
        assert error.code == "invalid_event_type"

    def test_survey_start_accepted_when_configured(self) -> None:
        config = IngestionConfig(
            allowed_event_types=("ad_impression", "ad_click", "survey_start"),
        )
        assert validate_track_input(_event(event_type="survey_start"), config) is None

    @pytest.mark.parametrize(
        "event_type",
        ["ad_impression", "ad_click", "survey_impression", "survey_submit"],
    )
    def test_default_types_accepted(self, event_type: str) -> None:
        assert validate_track_input(_event(event_type=event_type)) is None


# --- Ingestion Tests ---


class TestTrack:
    """Test single and batch ingestion."""

    def test_track_success(
        self, ingestion: TrackingIngestionService, repo: InMemoryEventRepo
    ) -> None:
        """Stores the event with a server-assigned id and timestamp."""
        result = run_track(_event(session_id="s-1"), service=ingestion)

        assert result.success is True
        assert result.error is None
        assert result.event_id
        stored = repo.get_by_id(result.event_id)
        assert stored is not None
        assert stored.event_type == "ad_click"
        assert stored.event_id == "evt-1"
        assert stored.project_id == "proj-1"
        assert stored.ad_id == "ad-1"
        assert stored.session_id == "s-1"
        assert stored.timestamp == T0

    def test_store_key_differs_from_caller_event_id(
        self, ingestion: TrackingIngestionService
    ) -> None:
        result = run_track(_event(), service=ingestion)
        assert result.event_id != "evt-1"

    def test_validation_failure_persists_nothing(
        self, ingestion: TrackingIngestionService, repo: InMemoryEventRepo
    ) -> None:
        result = run_track(_event(event_type="bogus"), service=ingestion)

        assert result.success is False
        assert result.event_id == ""
        assert result.error is not None
        assert result.error.startswith("Invalid EventType")
        assert repo.get_all() == []

    def test_duplicate_event_id_stores_two_records(
        self, ingestion: TrackingIngestionService, repo: InMemoryEventRepo
    ) -> None:
        """The caller's event id is a correlation token, not a dedupe key."""
        first = run_track(_event(), service=ingestion)
        second = run_track(_event(), service=ingestion)

        assert first.event_id != second.event_id
        assert len(repo.get_all()) == 2

    @pytest.mark.xfail(strict=True, reason="ingestion does not deduplicate on eventId")
    def test_duplicate_event_id_is_idempotent(
        self, ingestion: TrackingIngestionService, repo: InMemoryEventRepo
    ) -> None:
        run_track(_event(), service=ingestion)
        run_track(_event(), service=ingestion)
        assert len(repo.get_all()) == 1

    def test_storage_failure(self, clock: FixedClock) -> None:
        service = TrackingIngestionService(event_repo=FailingEventRepo(), time_port=clock)
        result = run_track(_event(), service=service)

        assert result.success is False
        assert result.storage_failed is True
        assert result.error == STORAGE_ERROR_MESSAGE

    def test_storage_failure_is_logged(
        self, clock: FixedClock, caplog: pytest.LogCaptureFixture
    ) -> None:
        service = TrackingIngestionService(event_repo=FailingEventRepo(), time_port=clock)
        with caplog.at_level("ERROR"):
            run_track(_event(), service=service)
        assert "Failed to store ad_click event for project proj-1" in caplog.text

    def test_success_is_logged(
        self, ingestion: TrackingIngestionService, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level("INFO"):
            run_track(_event(), service=ingestion)
        assert "Tracked event ad_click for project proj-1" in caplog.text

    def test_batch_keeps_order_and_isolates_failures(
        self, ingestion: TrackingIngestionService, repo: InMemoryEventRepo
    ) -> None:
        results = run_track_batch(
            [_event(), _event(event_type=""), _event(event_type="ad_impression")],
            service=ingestion,
        )

        assert [r.success for r in results] == [True, False, True]
        assert results[1].error == "EventType is required"
        assert len(repo.get_all()) == 2


class TestKnownProject:
    """Test the optional known-project check."""

    @pytest.fixture
    def catalog(self) -> InMemoryCatalog:
        catalog = InMemoryCatalog()
        catalog.save_project(Project(id="proj-1", name="Known"))
        return catalog

    def test_unknown_project_rejected(
        self, repo: InMemoryEventRepo, clock: FixedClock, catalog: InMemoryCatalog
    ) -> None:
        service = TrackingIngestionService(
            event_repo=repo,
            time_port=clock,
            config=IngestionConfig(require_known_project=True),
            projects=catalog,
        )
        result = run_track(_event(project_id="proj-2"), service=service)

        assert result.success is False
        assert result.error == "Project not found"
        assert repo.get_all() == []

    def test_known_project_accepted(
        self, repo: InMemoryEventRepo, clock: FixedClock, catalog: InMemoryCatalog
    ) -> None:
        service = TrackingIngestionService(
            event_repo=repo,
            time_port=clock,
            config=IngestionConfig(require_known_project=True),
            projects=catalog,
        )
        assert run_track(_event(), service=service).success is True

    def test_check_off_by_default(
        self, repo: InMemoryEventRepo, clock: FixedClock, catalog: InMemoryCatalog
    ) -> None:
        service = TrackingIngestionService(event_repo=repo, time_port=clock, projects=catalog)
        assert run_track(_event(project_id="proj-2"), service=service).success is True


# --- Query Tests ---


class TestQuery:
    """Test project, ad and survey queries."""

    @pytest.fixture
    def seeded(
        self, ingestion: TrackingIngestionService, clock: FixedClock
    ) -> list[str]:
        """Four events one hour apart, oldest first."""
        ids = []
        for inp in [
            _event(event_type="ad_impression", ad_id="ad-1"),
            _event(event_type="ad_click", ad_id="ad-2"),
            _event(event_type="survey_impression", ad_id=None, survey_id="sv-1"),
            _event(event_type="ad_click", project_id="proj-2"),
        ]:
            ids.append(run_track(inp, service=ingestion).event_id)
            clock.advance(hours=1)
        return ids

    def test_project_events_newest_first(
        self, query: TrackingQueryService, seeded: list[str]
    ) -> None:
        result = run_query_project(QueryProjectEventsInput(project_id="proj-1"), service=query)

        assert result.success is True
        assert [e.id for e in result.events] == [seeded[2], seeded[1], seeded[0]]

    def test_project_range_is_inclusive(
        self, query: TrackingQueryService, seeded: list[str]
    ) -> None:
        result = run_query_project(
            QueryProjectEventsInput(
                project_id="proj-1",
                from_date=T0 + timedelta(hours=1),
                to_date=T0 + timedelta(hours=2),
            ),
            service=query,
        )
        assert [e.id for e in result.events] == [seeded[2], seeded[1]]

    def test_naive_bounds_are_utc(self, query: TrackingQueryService, seeded: list[str]) -> None:
        result = run_query_project(
            QueryProjectEventsInput(project_id="proj-1", from_date=datetime(2025, 3, 10, 13, 0)),
            service=query,
        )
        assert [e.id for e in result.events] == [seeded[2], seeded[1]]

    def test_unknown_project_is_empty(
        self, query: TrackingQueryService, seeded: list[str]
    ) -> None:
        result = run_query_project(QueryProjectEventsInput(project_id="nope"), service=query)
        assert result.success is True
        assert result.events == ()

    def test_missing_project_id(self, query: TrackingQueryService) -> None:
        result = run_query_project(QueryProjectEventsInput(project_id=""), service=query)
        assert result.success is False
        assert result.errors[0].message == "ProjectId is required"

    def test_ad_events(self, query: TrackingQueryService, seeded: list[str]) -> None:
        result = run_query_ad(QueryAdEventsInput(ad_id="ad-2", project_id="proj-1"), service=query)
        assert [e.id for e in result.events] == [seeded[1]]

    def test_ad_events_scoped_to_project(
        self, query: TrackingQueryService, seeded: list[str]
    ) -> None:
        result = run_query_ad(QueryAdEventsInput(ad_id="ad-1", project_id="proj-2"), service=query)
        assert [e.id for e in result.events] == [seeded[3]]

    def test_ad_events_require_project(self, query: TrackingQueryService) -> None:
        result = run_query_ad(QueryAdEventsInput(ad_id="ad-1", project_id=""), service=query)
        assert result.success is False
        assert [e.message for e in result.errors] == ["ProjectId is required"]

    def test_survey_events(self, query: TrackingQueryService, seeded: list[str]) -> None:
        result = run_query_survey(
            QuerySurveyEventsInput(survey_id="sv-1", project_id="proj-1"), service=query
        )
        assert [e.id for e in result.events] == [seeded[2]]

    def test_survey_events_require_ids(self, query: TrackingQueryService) -> None:
        result = run_query_survey(
            QuerySurveyEventsInput(survey_id="", project_id=""), service=query
        )
        assert [e.message for e in result.errors] == [
            "SurveyId is required",
            "ProjectId is required",
        ]

    def test_query_storage_failure(self) -> None:
        service = TrackingQueryService(event_repo=FailingEventRepo())
        result = run_query_project(QueryProjectEventsInput(project_id="proj-1"), service=service)
        assert result.success is False
        assert result.storage_failed is True


# --- Lookup / Delete Tests ---


class TestGetAndDelete:
    """Test single-event lookup and deletion."""

    def test_get_after_track(
        self, ingestion: TrackingIngestionService, query: TrackingQueryService
    ) -> None:
        tracked = run_track(_event(), service=ingestion)
        result = run_get(GetEventInput(event_id=tracked.event_id), service=query)

        assert result.found is True
        assert result.event == tracked.event

    def test_get_missing_is_not_an_error(self, query: TrackingQueryService) -> None:
        result = run_get(GetEventInput(event_id="missing"), service=query)
        assert result.success is True
        assert result.found is False

    def test_get_requires_id(self, query: TrackingQueryService) -> None:
        result = run_get(GetEventInput(event_id=""), service=query)
        assert result.errors[0].message == "Id is required"

    def test_delete_then_get(
        self, ingestion: TrackingIngestionService, query: TrackingQueryService
    ) -> None:
        tracked = run_track(_event(), service=ingestion)

        first = run_delete(DeleteEventInput(event_id=tracked.event_id), service=query)
        second = run_delete(DeleteEventInput(event_id=tracked.event_id), service=query)

        assert first.deleted is True
        assert second.deleted is False
        assert run_get(GetEventInput(event_id=tracked.event_id), service=query).found is False

    def test_delete_storage_failure(self) -> None:
        service = TrackingQueryService(event_repo=FailingEventRepo())
        result = run_delete(DeleteEventInput(event_id="x"), service=service)
        assert result.storage_failed is True
        assert result.deleted is False
