import calendar

from datetime import datetime, timedelta, timezone as dt_timezone


class TimeZone:
    """UTC helpers; every persisted timestamp is a UTC instant."""

    @staticmethod
    def now() -> datetime:
        return datetime.now(dt_timezone.utc)

    @staticmethod
    def to_utc(value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=dt_timezone.utc)
        return value.astimezone(dt_timezone.utc)

    @staticmethod
    def add_months(value: datetime, months: int) -> datetime:
        """Shift by calendar months, clamping the day to the target month's length."""
        month_index = value.month - 1 + months
        year = value.year + month_index // 12
        month = month_index % 12 + 1
        day = min(value.day, calendar.monthrange(year, month)[1])
        return value.replace(year=year, month=month, day=day)

    @classmethod
    def add_years(cls, value: datetime, years: int) -> datetime:
        return cls.add_months(value, 12 * years)

    @staticmethod
    def days(count: int) -> timedelta:
        return timedelta(days=count)


timezone = TimeZone()
