"""Domain primitives that enforce validity at creation time."""

import re
from dataclasses import dataclass
from datetime import date, time
from enum import Enum
from typing import Any, Self
from uuid import UUID

TIME_OF_DAY_PATTERN = re.compile(r"^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$")

METRIC_MIN = 0
METRIC_MAX = 10


class RecurrenceType(str, Enum):
    SINGLE = "SINGLE"
    WEEKLY = "WEEKLY"
    INTERVAL = "INTERVAL"


class AssessmentType(str, Enum):
    PRE = "PRE"
    POST = "POST"


class AssessmentStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"


class Role(str, Enum):
    ADMIN = "ADMIN"
    USER = "USER"


@dataclass(frozen=True)
class _Identifier:
    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(str(value)))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class EventId(_Identifier):
    """Unique identifier for an Event."""


@dataclass(frozen=True)
class OccurrenceId(_Identifier):
    """Unique identifier for an Occurrence."""


@dataclass(frozen=True)
class RegistrationId(_Identifier):
    """Unique identifier for a Registration."""


@dataclass(frozen=True)
class AssessmentId(_Identifier):
    """Unique identifier for a WellnessAssessment."""


@dataclass(frozen=True)
class CategoryId(_Identifier):
    """Unique identifier for an ExerciseCategory."""


@dataclass(frozen=True)
class Identity:
    """Caller identity supplied by the authentication layer."""

    subject_id: int
    role: Role = Role.USER

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


@dataclass(frozen=True)
class Capacity:
    """Non-negative integer representing capacity."""

    value: int

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError("Capacity cannot be negative")


@dataclass(frozen=True)
class TimeOfDay:
    """A 24-hour HH:MM wall-clock time."""

    hour: int
    minute: int

    def __post_init__(self) -> None:
        if not (0 <= self.hour <= 23 and 0 <= self.minute <= 59):
            raise ValueError(f"Invalid time of day: {self.hour:02d}:{self.minute:02d}")

    @classmethod
    def parse(cls, value: str) -> Self:
        match = TIME_OF_DAY_PATTERN.match(value or "")
        if match is None:
            raise ValueError(f"Invalid time format: {value}. Expected HH:MM format.")
        return cls(hour=int(match.group(1)), minute=int(match.group(2)))

    def as_time(self) -> time:
        return time(self.hour, self.minute)

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


def weekday_of(day: date) -> int:
    """Weekday number with 0=Sunday through 6=Saturday."""
    return day.isoweekday() % 7


@dataclass(frozen=True)
class RecurrencePattern:
    """Weekday set for WEEKLY rules, day interval for INTERVAL rules."""

    weekdays: tuple[int, ...] | None = None
    interval_days: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Self | None:
        if not data:
            return None
        weekdays = data.get("weekdays")
        return cls(
            weekdays=tuple(weekdays) if weekdays is not None else None,
            interval_days=data.get("intervalDays"),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.weekdays is not None:
            data["weekdays"] = list(self.weekdays)
        if self.interval_days is not None:
            data["intervalDays"] = self.interval_days
        return data


@dataclass(frozen=True)
class Schedule:
    """One weekly time slot: a time of day on a set of weekdays."""

    time_of_day: str
    weekdays: tuple[int, ...]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return cls(time_of_day=data["time"], weekdays=tuple(data.get("weekdays") or ()))

    def to_dict(self) -> dict[str, Any]:
        return {"time": self.time_of_day, "weekdays": list(self.weekdays)}


@dataclass(frozen=True)
class WellnessMetrics:
    """Self-reported wellness scores, each an integer from 0 to 10."""

    sleep_quality: int
    stress_level: int
    mood: int

    def __post_init__(self) -> None:
        for name in ("sleep_quality", "stress_level", "mood"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer")
            if not METRIC_MIN <= value <= METRIC_MAX:
                raise ValueError(f"{name} must be between {METRIC_MIN} and {METRIC_MAX}")
