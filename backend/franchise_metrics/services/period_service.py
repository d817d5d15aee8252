# Overview: Service-layer operations for reporting periods; resolves tokens into comparable date ranges.

"""
Reporting period resolution.

Every growth figure compares a CURRENT range with the range of identical
duration that ends exactly where the current one starts:

    current  = [start, end)
    previous = [start - (end - start), start)

Token periods end at the request's captured "now" and start a fixed
calendar offset back from it. "now" is resolved once per request by the
caller and passed in; nothing here reads the clock.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import datetime, timedelta

from franchise_metrics.errors import InvalidPeriod
from franchise_metrics.time_utils import ceil_to_date, normalize_datetime, parse_iso_datetime, to_utc_z

PERIOD_TOKENS = ("week", "month", "quarter", "year")

# Calendar months to step back for month-based tokens
_MONTH_OFFSETS = {"month": 1, "quarter": 3, "year": 12}

PERIOD_LABELS = {
    "week": "Last week",
    "month": "Last month",
    "quarter": "Last quarter",
    "year": "Last year",
}


@dataclass(frozen=True)
class DateRange:
    """Half-open range [start, end) of UTC-naive datetimes."""
    start: datetime
    end: datetime

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end

    def date_bounds(self):
        """(first_day, stop_day) such that a DATE column D is inside iff first_day <= D < stop_day."""
        return ceil_to_date(self.start), ceil_to_date(self.end)

    def to_dict(self) -> dict:
        return {"start": to_utc_z(self.start), "end": to_utc_z(self.end)}


@dataclass(frozen=True)
class ResolvedPeriod:
    token: str | None
    now: datetime
    current: DateRange
    previous: DateRange

    @property
    def label(self) -> str:
        if self.token:
            return PERIOD_LABELS[self.token]
        return f"{self.current.start.date().isoformat()} to {self.current.end.date().isoformat()}"

    def to_dict(self) -> dict:
        return {
            "token": self.token,
            "current": self.current.to_dict(),
            "previous": self.previous.to_dict(),
        }


def shift_months(moment: datetime, months: int) -> datetime:
    """
    Move a datetime by whole calendar months, clamping the day to the
    target month's length (Mar 31 - 1 month = Feb 28/29).
    """
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def comparable_previous(current: DateRange) -> DateRange:
    try:
        start = current.start - current.duration
    except OverflowError as exc:
        raise InvalidPeriod(
            "Period is too long to have a comparable previous period",
            details=current.to_dict(),
        ) from exc
    return DateRange(start=start, end=current.start)


def _token_start(token: str, now: datetime) -> datetime:
    if token == "week":
        return now - timedelta(days=7)
    return shift_months(now, -_MONTH_OFFSETS[token])


def _coerce_bound(value, name: str) -> datetime:
    if isinstance(value, datetime):
        return normalize_datetime(value)
    try:
        parsed = parse_iso_datetime(value)
    except (AttributeError, TypeError, ValueError) as exc:
        raise InvalidPeriod(f"{name} is not a valid ISO-8601 datetime", details={name: value}) from exc
    if parsed is None:
        raise InvalidPeriod(f"{name} is required", details={name: value})
    return parsed


def resolve_period(
    token: str | None = None,
    *,
    now: datetime,
    start=None,
    end=None,
) -> ResolvedPeriod:
    """
    Resolve a period token, or explicit start/end bounds, into the current
    and comparable previous ranges.

    Raises:
        InvalidPeriod: unknown token, token mixed with bounds, a single
            bound, unparseable bounds, or start >= end.
    """
    now = normalize_datetime(now)
    has_bounds = start is not None or end is not None

    if token is not None and has_bounds:
        raise InvalidPeriod("Provide either a period token or explicit bounds, not both")

    if has_bounds:
        if start is None or end is None:
            raise InvalidPeriod("Explicit periods need both start and end")
        start_dt = _coerce_bound(start, "start")
        end_dt = _coerce_bound(end, "end")
        if start_dt >= end_dt:
            raise InvalidPeriod(
                "Period start must be before its end",
                details={"start": to_utc_z(start_dt), "end": to_utc_z(end_dt)},
            )
        current = DateRange(start=start_dt, end=end_dt)
        return ResolvedPeriod(token=None, now=now, current=current, previous=comparable_previous(current))

    if token is None:
        raise InvalidPeriod("A period token or explicit bounds are required")

    normalized = token.strip().lower() if isinstance(token, str) else token
    if normalized not in PERIOD_TOKENS:
        raise InvalidPeriod(
            f"Unknown period '{token}'. Must be one of: {', '.join(PERIOD_TOKENS)}",
            details={"period": token},
        )

    current = DateRange(start=_token_start(normalized, now), end=now)
    return ResolvedPeriod(token=normalized, now=now, current=current, previous=comparable_previous(current))
