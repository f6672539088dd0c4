"""
Tracking component - Event ingestion, lookup and deletion.
"""

from ._impl import (
    DEFAULT_CONFIG,
    STORAGE_ERROR_MESSAGE,
    IngestionConfig,
    InMemoryEventRepo,
    TrackingIngestionService,
    TrackingQueryService,
    as_utc,
    create_tracking_services,
    newest_first,
    validate_track_input,
)
from .component import (
    run_delete,
    run_get,
    run_query_ad,
    run_query_project,
    run_query_survey,
    run_track,
    run_track_batch,
)
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
    TrackingError,
    TrackingValidationError,
)
from .ports import EventRepoPort, ProjectLookupPort, TimePort

__all__ = [
    # Entry points
    "run_track",
    "run_track_batch",
    "run_query_project",
    "run_query_ad",
    "run_query_survey",
    "run_get",
    "run_delete",
    # Input models
    "TrackEventInput",
    "QueryProjectEventsInput",
    "QueryAdEventsInput",
    "QuerySurveyEventsInput",
    "GetEventInput",
    "DeleteEventInput",
    # Output models
    "TrackEventOutput",
    "EventListOutput",
    "GetEventOutput",
    "DeleteEventOutput",
    # Errors
    "TrackingValidationError",
    "TrackingError",
    "StorageError",
    # Ports
    "EventRepoPort",
    "ProjectLookupPort",
    "TimePort",
    # Services
    "DEFAULT_CONFIG",
    "STORAGE_ERROR_MESSAGE",
    "IngestionConfig",
    "InMemoryEventRepo",
    "TrackingIngestionService",
    "TrackingQueryService",
    "as_utc",
    "create_tracking_services",
    "newest_first",
    "validate_track_input",
]
