import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any

from src.components.tracking.models import StorageError
from src.domain.entities import Ad, Project, Survey, TrackingEvent


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


def _encode_ts(value: datetime) -> str:
    # Fixed-width UTC text so that string order matches time order in the index.
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat(timespec="microseconds")


def _decode_ts(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


class _SQLiteRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        return conn

    @contextmanager
    def _connection(self, operation: str) -> Iterator[sqlite3.Connection]:
        """Connection scoped to one operation; sqlite errors surface as StorageError."""
        try:
            conn = self._get_conn()
        except sqlite3.Error as e:
            raise StorageError(operation) from e
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StorageError(operation) from e
        finally:
            conn.close()


class SQLiteEventRepo(_SQLiteRepo):
    """Tracking events keyed by id, indexed by (project_id, timestamp)."""

    def _row_to_event(self, row: dict[str, Any]) -> TrackingEvent:
        return TrackingEvent(
            id=row["id"],
            event_type=row["event_type"],
            event_id=row["event_id"],
            project_id=row["project_id"],
            ad_id=row["ad_id"],
            survey_id=row["survey_id"],
            session_id=row["session_id"],
            timestamp=_decode_ts(row["timestamp"]),
        )

    def save(self, event: TrackingEvent) -> TrackingEvent:
        with self._connection("save_event") as conn:
            conn.execute(
                """
                INSERT INTO tracking_events
                (id, event_type, event_id, project_id, ad_id, survey_id, session_id, timestamp)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    event_type=excluded.event_type,
                    event_id=excluded.event_id,
                    project_id=excluded.project_id,
                    ad_id=excluded.ad_id,
                    survey_id=excluded.survey_id,
                    session_id=excluded.session_id,
                    timestamp=excluded.timestamp
                """,
                (
                    event.id,
                    event.event_type,
                    event.event_id,
                    event.project_id,
                    event.ad_id,
                    event.survey_id,
                    event.session_id,
                    _encode_ts(event.timestamp),
                ),
            )
        return event

    def get_by_id(self, event_id: str) -> TrackingEvent | None:
        with self._connection("get_event") as conn:
            row = conn.execute(
                "SELECT * FROM tracking_events WHERE id = ?", (event_id,)
            ).fetchone()
        return self._row_to_event(row) if row else None

    def delete(self, event_id: str) -> bool:
        with self._connection("delete_event") as conn:
            cursor = conn.execute("DELETE FROM tracking_events WHERE id = ?", (event_id,))
            deleted = cursor.rowcount > 0
        return deleted

    def query_by_project(
        self,
        project_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[TrackingEvent]:
        sql = "SELECT * FROM tracking_events WHERE project_id = ?"
        params: list[Any] = [project_id]
        if start is not None:
            sql += " AND timestamp >= ?"
            params.append(_encode_ts(start))
        if end is not None:
            sql += " AND timestamp <= ?"
            params.append(_encode_ts(end))
        sql += " ORDER BY timestamp DESC"

        with self._connection("query_events_by_project") as conn:
            rows = conn.execute(sql, params).fetchall()
        return [self._row_to_event(r) for r in rows]

    def scan(
        self,
        project_id: str,
        ad_id: str | None = None,
        survey_id: str | None = None,
    ) -> list[TrackingEvent]:
        sql = "SELECT * FROM tracking_events WHERE project_id = ?"
        params: list[Any] = [project_id]
        if ad_id is not None:
            sql += " AND ad_id = ?"
            params.append(ad_id)
        if survey_id is not None:
            sql += " AND survey_id = ?"
            params.append(survey_id)

        with self._connection("scan_events") as conn:
            rows = conn.execute(sql, params).fetchall()
        return [self._row_to_event(r) for r in rows]


class SQLiteCatalogRepo(_SQLiteRepo):
    """Projects, ads and surveys. Reads serve reports; writes serve seeding."""

    def save_project(self, project: Project) -> Project:
        with self._connection("save_project") as conn:
            conn.execute(
                """
                INSERT INTO projects (id, name, description, is_active, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name=excluded.name,
                    description=excluded.description,
                    is_active=excluded.is_active,
                    updated_at=excluded.updated_at
                """,
                (
                    project.id,
                    project.name,
                    project.description,
                    1 if project.is_active else 0,
                    _encode_ts(project.created_at),
                    _encode_ts(project.updated_at),
                ),
            )
        return project

    def save_ad(self, ad: Ad) -> Ad:
        with self._connection("save_ad") as conn:
            conn.execute(
                """
                INSERT INTO ads (
                    id, project_id, title, content, brand_name,
                    image_url, click_url, is_active, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    project_id=excluded.project_id,
                    title=excluded.title,
                    content=excluded.content,
                    brand_name=excluded.brand_name,
                    image_url=excluded.image_url,
                    click_url=excluded.click_url,
                    is_active=excluded.is_active,
                    updated_at=excluded.updated_at
                """,
                (
                    ad.id,
                    ad.project_id,
                    ad.title,
                    ad.content,
                    ad.brand_name,
                    ad.image_url,
                    ad.click_url,
                    1 if ad.is_active else 0,
                    _encode_ts(ad.created_at),
                    _encode_ts(ad.updated_at),
                ),
            )
        return ad

    def save_survey(self, survey: Survey) -> Survey:
        with self._connection("save_survey") as conn:
            conn.execute(
                """
                INSERT INTO surveys (
                    id, project_id, title, description, is_active, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    project_id=excluded.project_id,
                    title=excluded.title,
                    description=excluded.description,
                    is_active=excluded.is_active,
                    updated_at=excluded.updated_at
                """,
                (
                    survey.id,
                    survey.project_id,
                    survey.title,
                    survey.description,
                    1 if survey.is_active else 0,
                    _encode_ts(survey.created_at),
                    _encode_ts(survey.updated_at),
                ),
            )
        return survey

    def get_project(self, project_id: str) -> Project | None:
        with self._connection("get_project") as conn:
            row = conn.execute("SELECT * FROM projects WHERE id = ?", (project_id,)).fetchone()
        if not row:
            return None
        return Project(
            id=row["id"],
            name=row["name"],
            description=row["description"],
            is_active=bool(row["is_active"]),
            created_at=_decode_ts(row["created_at"]),
            updated_at=_decode_ts(row["updated_at"]),
        )

    def list_ads(self, project_id: str) -> list[Ad]:
        with self._connection("list_ads") as conn:
            rows = conn.execute(
                "SELECT * FROM ads WHERE project_id = ? ORDER BY created_at ASC, rowid ASC",
                (project_id,),
            ).fetchall()
        return [
            Ad(
                id=r["id"],
                project_id=r["project_id"],
                title=r["title"],
                content=r["content"],
                brand_name=r["brand_name"],
                image_url=r["image_url"],
                click_url=r["click_url"],
                is_active=bool(r["is_active"]),
                created_at=_decode_ts(r["created_at"]),
                updated_at=_decode_ts(r["updated_at"]),
            )
            for r in rows
        ]

    def list_surveys(self, project_id: str) -> list[Survey]:
        with self._connection("list_surveys") as conn:
            rows = conn.execute(
                "SELECT * FROM surveys WHERE project_id = ? ORDER BY created_at ASC, rowid ASC",
                (project_id,),
            ).fetchall()
        return [
            Survey(
                id=r["id"],
                project_id=r["project_id"],
                title=r["title"],
                description=r["description"],
                is_active=bool(r["is_active"]),
                created_at=_decode_ts(r["created_at"]),
                updated_at=_decode_ts(r["updated_at"]),
            )
            for r in rows
        ]
