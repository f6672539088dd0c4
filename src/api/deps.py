import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from fastapi import Depends, Request

from src.adapters.clock import SystemClock
from src.adapters.sqlite.migrator import SQLiteMigrator
from src.adapters.sqlite.repos import SQLiteCatalogRepo, SQLiteEventRepo
from src.components.analytics import AggregateConfig
from src.components.catalog import CatalogPort, InMemoryCatalog
from src.components.tracking import (
    EventRepoPort,
    IngestionConfig,
    InMemoryEventRepo,
    TrackingIngestionService,
    TrackingQueryService,
)
from src.ports.clock import ClockPort
from src.rules.models import Rules

PROJECT_ROOT = Path(__file__).resolve().parents[2]


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = PROJECT_ROOT
        self.data_dir = Path(os.environ.get("ADPULSE_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "adpulse.db")
        self.store = os.environ.get("ADPULSE_STORE", "sqlite").lower()
        self.log_level = os.environ.get("ADPULSE_LOG_LEVEL", "INFO")
        self.rules_path = Path(os.environ.get("ADPULSE_RULES_PATH", PROJECT_ROOT / "rules.yaml"))
        self.migrations_dir = PROJECT_ROOT / "migrations"


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Backend ---
@dataclass
class Backend:
    """Stores and clock shared by every request of one app instance."""

    event_repo: EventRepoPort
    catalog: CatalogPort
    clock: ClockPort


def build_backend(settings: Settings) -> Backend:
    """Create the configured stores. SQLite databases are migrated first."""
    if settings.store == "memory":
        return Backend(
            event_repo=InMemoryEventRepo(),
            catalog=InMemoryCatalog(),
            clock=SystemClock(),
        )

    if settings.store != "sqlite":
        raise ValueError(f"Unknown store backend: {settings.store}")

    settings.data_dir.mkdir(parents=True, exist_ok=True)
    SQLiteMigrator(settings.db_path, str(settings.migrations_dir)).run_migrations()
    return Backend(
        event_repo=SQLiteEventRepo(settings.db_path),
        catalog=SQLiteCatalogRepo(settings.db_path),
        clock=SystemClock(),
    )


def get_backend(request: Request) -> Backend:
    return request.app.state.backend


# --- Rules ---
def get_rules(request: Request) -> Rules:
    return request.app.state.rules


# --- Services ---
def get_ingestion_service(
    backend: Backend = Depends(get_backend),
    rules: Rules = Depends(get_rules),
) -> TrackingIngestionService:
    config = IngestionConfig(
        allowed_event_types=tuple(rules.tracking.allowed_event_types),
        require_known_project=rules.tracking.require_known_project,
    )
    return TrackingIngestionService(
        event_repo=backend.event_repo,
        time_port=backend.clock,
        config=config,
        projects=backend.catalog,
    )


def get_query_service(backend: Backend = Depends(get_backend)) -> TrackingQueryService:
    return TrackingQueryService(event_repo=backend.event_repo)


def get_catalog(backend: Backend = Depends(get_backend)) -> CatalogPort:
    return backend.catalog


def get_clock(backend: Backend = Depends(get_backend)) -> ClockPort:
    return backend.clock


def get_aggregate_config(rules: Rules = Depends(get_rules)) -> AggregateConfig:
    analytics = rules.analytics
    return AggregateConfig(
        top_n=analytics.top_n,
        timeline_days=analytics.timeline_days,
        heatmap_days=analytics.heatmap_days,
        recent_activity_limit=analytics.recent_activity_limit,
        title_max_chars=analytics.title_max_chars,
    )
