from pydantic import BaseModel, Field, field_validator

from src.domain.entities import DEFAULT_INGEST_EVENT_TYPES, EventType


class ProjectRules(BaseModel):
    slug: str
    rules_version: str


class TrackingRules(BaseModel):
    allowed_event_types: list[str] = Field(
        default_factory=lambda: list(DEFAULT_INGEST_EVENT_TYPES)
    )
    require_known_project: bool = False

    @field_validator("allowed_event_types")
    @classmethod
    def _known_types_only(cls, value: list[str]) -> list[str]:
        known = {t.value for t in EventType}
        unknown = [t for t in value if t not in known]
        if unknown:
            raise ValueError(f"Unknown event types: {', '.join(unknown)}")
        if not value:
            raise ValueError("At least one event type must be allowed")
        return value


class AnalyticsRules(BaseModel):
    top_n: int = Field(5, ge=1)
    timeline_days: int = Field(7, ge=1)
    heatmap_days: int = Field(30, ge=1)
    recent_activity_limit: int = Field(10, ge=1)
    title_max_chars: int = Field(20, ge=1)


class OpsRules(BaseModel):
    required_env: list[str] = Field(default_factory=list)
    data_dir_required: bool = True


class Rules(BaseModel):
    project: ProjectRules
    tracking: TrackingRules = Field(default_factory=TrackingRules)
    analytics: AnalyticsRules = Field(default_factory=AnalyticsRules)
    ops: OpsRules = Field(default_factory=OpsRules)
