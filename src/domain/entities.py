from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _new_id() -> str:
    return str(uuid4())


# --- Enums ---


class EventType(str, Enum):
    """Canonical tracking event types."""

    AD_IMPRESSION = "ad_impression"
    AD_CLICK = "ad_click"
    SURVEY_IMPRESSION = "survey_impression"
    SURVEY_START = "survey_start"
    SURVEY_SUBMIT = "survey_submit"


# Accepted by ingestion unless rules.yaml says otherwise.
DEFAULT_INGEST_EVENT_TYPES: tuple[str, ...] = (
    EventType.AD_IMPRESSION.value,
    EventType.AD_CLICK.value,
    EventType.SURVEY_IMPRESSION.value,
    EventType.SURVEY_SUBMIT.value,
)


# --- Tracking ---


class TrackingEvent(BaseModel):
    """One recorded user interaction. Never mutated after it is stored."""

    id: str = Field(default_factory=_new_id)
    event_type: str
    event_id: str
    project_id: str
    ad_id: str | None = None
    survey_id: str | None = None
    session_id: str | None = None
    timestamp: datetime = Field(default_factory=_utcnow)

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


# --- Catalog ---


class Project(BaseModel):
    id: str = Field(default_factory=_new_id)
    name: str
    description: str | None = None
    is_active: bool = True
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Ad(BaseModel):
    id: str = Field(default_factory=_new_id)
    project_id: str
    title: str
    content: str = ""
    brand_name: str = ""
    image_url: str | None = None
    click_url: str | None = None
    is_active: bool = True
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Survey(BaseModel):
    id: str = Field(default_factory=_new_id)
    project_id: str
    title: str
    description: str | None = None
    is_active: bool = True
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
