from datetime import UTC, date, datetime, timedelta


class SystemClock:
    """Wall clock. All timestamps leave here in UTC."""

    def now_utc(self) -> datetime:
        return datetime.now(UTC)

    def today_utc(self) -> date:
        return self.now_utc().date()


class FixedClock:
    """Clock pinned to one instant, for tests and reproducible reports."""

    def __init__(self, instant: datetime) -> None:
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=UTC)
        self._instant = instant.astimezone(UTC)

    def now_utc(self) -> datetime:
        return self._instant

    def today_utc(self) -> date:
        return self._instant.date()

    def advance(self, **delta: float) -> None:
        self._instant = self._instant + timedelta(**delta)
