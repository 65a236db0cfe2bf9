from datetime import UTC, datetime, timedelta


class SystemClock:
    def now_utc(self) -> datetime:
        return datetime.now(UTC)

    def age_of(self, utc_dt: datetime) -> timedelta:
        return self.now_utc() - utc_dt
