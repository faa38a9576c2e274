"""Reporting windows for seller analytics."""

from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta

from protean.exceptions import ValidationError

PERIOD_LENGTHS = {
    "week": timedelta(days=7),
    "month": timedelta(days=30),
    "year": timedelta(days=365),
}
PERIODS = ("today", *PERIOD_LENGTHS, "all")


@dataclass(frozen=True)
class Window:
    """A closed time range. ``start`` of None means unbounded."""

    period: str
    start: datetime | None
    end: datetime

    def previous(self) -> "Window | None":
        """The window of equal length immediately before this one."""
        if self.start is None:
            return None
        length = self.end - self.start
        return Window(period=self.period, start=self.start - length, end=self.start - timedelta(microseconds=1))


def _as_utc(value: datetime) -> datetime:
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value.astimezone(UTC)


def _start_of(value) -> datetime:
    if isinstance(value, datetime):
        return _as_utc(value)
    return datetime.combine(value, time.min, tzinfo=UTC)


def _end_of(value) -> datetime:
    if isinstance(value, datetime):
        return _as_utc(value)
    return datetime.combine(value, time.max, tzinfo=UTC)


def _parse(value):
    if value is None or isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value) if len(value) == 10 else datetime.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValidationError({"date": [f"Invalid date: {value}"]}) from None


def resolve_window(period: str | None = None, start=None, end=None, now: datetime | None = None) -> Window:
    """Turn a named period or an explicit start/end into a ``Window``.

    Explicit dates win over ``period``. Plain dates cover whole days, so an
    ``end`` date includes everything up to 23:59:59.999999 of that day.
    Named periods end at ``now``; ``today`` starts at midnight UTC and
    ``all`` has no start.
    """
    now = _as_utc(now or datetime.now(UTC))
    start, end = _parse(start), _parse(end)

    if start is not None or end is not None:
        if start is None or end is None:
            raise ValidationError({"date": ["Both start and end dates are required for a custom range"]})
        window = Window(period="custom", start=_start_of(start), end=_end_of(end))
        if window.start > window.end:
            raise ValidationError({"date": ["Start date must not be after end date"]})
        return window

    period = period or "month"
    if period == "today":
        return Window(period=period, start=datetime.combine(now.date(), time.min, tzinfo=UTC), end=now)
    if period == "all":
        return Window(period=period, start=None, end=now)
    if period in PERIOD_LENGTHS:
        return Window(period=period, start=now - PERIOD_LENGTHS[period], end=now)
    raise ValidationError({"period": [f"Unknown period '{period}'. Use one of: {', '.join(PERIODS)}"]})
