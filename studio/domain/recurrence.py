"""Recurrence expansion: turns an event's date range and rule into occurrence times.

Every function here is pure. Output is ascending because days are stepped
forward monotonically; schedule unions are merged, not re-sorted.
Weekdays are numbered 0=Sunday through 6=Saturday.
"""

import heapq
from collections.abc import Iterable, Iterator, Sequence
from datetime import date, datetime, timedelta, timezone, tzinfo

from studio.domain.errors import ValidationError
from studio.domain.value_objects import (
    RecurrencePattern,
    RecurrenceType,
    Schedule,
    TimeOfDay,
    weekday_of,
)

ONE_DAY = timedelta(days=1)


def _parse_time(value: str) -> TimeOfDay:
    try:
        return TimeOfDay.parse(value)
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc


def _as_date(value: date) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def _days(start: date, end: date, step: timedelta = ONE_DAY) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += step


def _at(day: date, at: TimeOfDay, tz: tzinfo) -> datetime:
    return datetime(day.year, day.month, day.day, at.hour, at.minute, tzinfo=tz)


def generate(
    start_date: date,
    end_date: date,
    time_of_day: str,
    recurrence_type: RecurrenceType,
    pattern: RecurrencePattern | None = None,
    *,
    daily_fallback: bool = False,
    tz: tzinfo = timezone.utc,
) -> list[datetime]:
    """Expand a single-slot rule into concrete date-times.

    SINGLE yields start_date at time_of_day. WEEKLY yields every day in range
    whose weekday is in ``pattern.weekdays``. INTERVAL yields start_date plus
    multiples of ``pattern.interval_days`` while not past end_date.

    A WEEKLY rule without weekdays or an INTERVAL rule without an interval is
    rejected unless ``daily_fallback`` is set, in which case every day in
    range is emitted.

    Raises:
        ValidationError: If time_of_day is not HH:MM or the rule is incomplete.
    """
    at = _parse_time(time_of_day)
    start = _as_date(start_date)
    end = _as_date(end_date)
    recurrence_type = RecurrenceType(recurrence_type)

    if recurrence_type is RecurrenceType.SINGLE:
        return [_at(start, at, tz)]

    if recurrence_type is RecurrenceType.WEEKLY and pattern and pattern.weekdays:
        weekdays = frozenset(pattern.weekdays)
        return [_at(day, at, tz) for day in _days(start, end) if weekday_of(day) in weekdays]

    if recurrence_type is RecurrenceType.INTERVAL and pattern and pattern.interval_days:
        if pattern.interval_days < 1:
            raise ValidationError("Interval recurrence requires intervalDays >= 1")
        step = timedelta(days=pattern.interval_days)
        return [_at(day, at, tz) for day in _days(start, end, step)]

    if not daily_fallback:
        raise ValidationError(
            f"{recurrence_type.value} recurrence requires a pattern "
            "(weekdays for WEEKLY, intervalDays for INTERVAL)"
        )
    return [_at(day, at, tz) for day in _days(start, end)]


def generate_from_schedules(
    start_date: date,
    end_date: date,
    schedules: Sequence[Schedule],
    *,
    tz: tzinfo = timezone.utc,
) -> list[datetime]:
    """Union of the WEEKLY expansions of several (time, weekdays) slots."""
    runs: list[Iterable[datetime]] = []
    for schedule in schedules:
        if not schedule.weekdays:
            raise ValidationError("Each schedule requires at least one weekday")
        runs.append(
            generate(
                start_date,
                end_date,
                schedule.time_of_day,
                RecurrenceType.WEEKLY,
                RecurrencePattern(weekdays=schedule.weekdays),
                tz=tz,
            )
        )

    merged: list[datetime] = []
    for moment in heapq.merge(*runs):
        if not merged or merged[-1] != moment:
            merged.append(moment)
    return merged


def generate_for_rule(
    start_date: date,
    end_date: date,
    time_of_day: str,
    recurrence_type: RecurrenceType,
    pattern: RecurrencePattern | None,
    schedules: Sequence[Schedule] = (),
    *,
    daily_fallback: bool = False,
    tz: tzinfo = timezone.utc,
) -> list[datetime]:
    """Pick schedule expansion for multi-slot weekly events, plain expansion otherwise."""
    if RecurrenceType(recurrence_type) is RecurrenceType.WEEKLY and schedules:
        return generate_from_schedules(start_date, end_date, schedules, tz=tz)
    return generate(
        start_date,
        end_date,
        time_of_day,
        recurrence_type,
        pattern,
        daily_fallback=daily_fallback,
        tz=tz,
    )
