from datetime import UTC, datetime
from pathlib import Path

import pytest

from src.adapters.clock import FixedClock
from src.adapters.sqlite.migrator import SQLiteMigrator
from src.api.deps import Backend
from src.components.catalog import InMemoryCatalog
from src.components.tracking import InMemoryEventRepo
from src.rules.loader import load_rules
from src.rules.models import Rules

PROJECT_ROOT = Path(__file__).resolve().parents[1]
MIGRATIONS_DIR = str(PROJECT_ROOT / "migrations")
RULES_PATH = PROJECT_ROOT / "rules.yaml"

# Monday, so the heatmap's last cell is "Mon".
FIXED_NOW = datetime(2025, 3, 10, 12, 0, tzinfo=UTC)


@pytest.fixture
def migrations_dir() -> str:
    return MIGRATIONS_DIR


@pytest.fixture
def db_path(tmp_path) -> str:
    return str(tmp_path / "adpulse.db")


@pytest.fixture
def migrated_db(db_path) -> str:
    """Path to a fresh database with every migration applied."""
    SQLiteMigrator(db_path, MIGRATIONS_DIR).run_migrations()
    return db_path


@pytest.fixture
def rules() -> Rules:
    """The real rules file from the project root."""
    return load_rules(RULES_PATH)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(FIXED_NOW)


@pytest.fixture
def memory_backend(clock: FixedClock) -> Backend:
    return Backend(event_repo=InMemoryEventRepo(), catalog=InMemoryCatalog(), clock=clock)
