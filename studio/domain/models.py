"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in studio/models.py (persistence layer).
"""

from dataclasses import dataclass, field
from datetime import date, datetime

from studio.domain.value_objects import (
    AssessmentId,
    AssessmentStatus,
    AssessmentType,
    CategoryId,
    EventId,
    OccurrenceId,
    RecurrencePattern,
    RecurrenceType,
    RegistrationId,
    Schedule,
)


@dataclass(frozen=True)
class ExerciseCategory:
    """Reference data an event belongs to."""

    id: CategoryId
    name: str
    is_active: bool


@dataclass(frozen=True)
class Event:
    """Domain representation of a recurring class."""

    id: EventId
    name: str
    description: str
    start_date: date
    end_date: date
    time_of_day: str
    recurrence_type: RecurrenceType
    recurrence_pattern: RecurrencePattern | None
    capacity: int
    category_id: CategoryId
    created_by: int | None
    is_active: bool = True
    is_deleted: bool = False
    schedules: tuple[Schedule, ...] = ()
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class Occurrence:
    """A concrete bookable instance of an Event."""

    id: OccurrenceId
    event_id: EventId
    date_time: datetime
    capacity: int
    is_active: bool = True


@dataclass(frozen=True)
class Attendance:
    """Attendance record owned by a Registration."""

    registration_id: RegistrationId
    attended: bool = False
    checked_at: datetime | None = None
    checked_by: int | None = None


@dataclass(frozen=True)
class WellnessAssessment:
    """A PRE or POST self-assessment owned by a Registration."""

    id: AssessmentId
    registration_id: RegistrationId
    type: AssessmentType
    status: AssessmentStatus = AssessmentStatus.PENDING
    sleep_quality: int | None = None
    stress_level: int | None = None
    mood: int | None = None
    created_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def is_completed(self) -> bool:
        return self.status is AssessmentStatus.COMPLETED


@dataclass(frozen=True)
class Registration:
    """A subject's seat on one occurrence, with its owned workflow records."""

    id: RegistrationId
    subject_id: int
    event_id: EventId
    occurrence_id: OccurrenceId
    code: str
    created_at: datetime
    attendance: Attendance
    assessments: tuple[WellnessAssessment, ...] = ()
    occurrence_date_time: datetime | None = None

    def assessment(self, kind: AssessmentType) -> WellnessAssessment | None:
        for assessment in self.assessments:
            if assessment.type is kind:
                return assessment
        return None

    @property
    def attended(self) -> bool:
        return self.attendance.attended


@dataclass(frozen=True)
class Availability:
    capacity: int
    registered: int

    @property
    def available(self) -> int:
        return max(0, self.capacity - self.registered)


@dataclass(frozen=True)
class WellnessImpact:
    """Change between completed PRE and POST assessments; all None or all set."""

    sleep_quality_change: int | None = None
    stress_level_change: int | None = None
    mood_change: int | None = None
    overall_impact: float | None = None


@dataclass(frozen=True)
class ImpactReport:
    pre_assessment: WellnessAssessment | None
    post_assessment: WellnessAssessment | None
    impact: WellnessImpact


@dataclass(frozen=True)
class AttendanceStats:
    total: int
    attended: int
    pending: int
    pre_completed: int
    post_completed: int


@dataclass(frozen=True)
class RegenerationResult:
    deleted: int
    preserved: int
    created: int


@dataclass(frozen=True)
class EventDetail:
    """An event with its upcoming occurrences, optionally personalised."""

    event: Event
    occurrences: tuple[Occurrence, ...] = ()
    registered_occurrence_ids: frozenset[OccurrenceId] = field(default_factory=frozenset)

    @property
    def is_registered(self) -> bool:
        return bool(self.registered_occurrence_ids)
