"""Process-local implementation of the StudioStore.

Every operation runs under one re-entrant lock and ``atomic()`` holds that lock
for the whole block, restoring a snapshot if the block raises. That gives the
same serialisation guarantee the relational store gets from row locks.
"""

import copy
import secrets
import threading
import uuid
from collections.abc import Callable, Mapping, Sequence
from dataclasses import replace
from datetime import datetime
from typing import Any

from studio.domain import (
    AssessmentId,
    AssessmentStatus,
    AssessmentType,
    Attendance,
    CategoryId,
    Event,
    EventId,
    ExerciseCategory,
    Occurrence,
    OccurrenceId,
    Registration,
    RegistrationId,
    WellnessAssessment,
    WellnessMetrics,
)
from studio.domain.errors import ConflictError, InvalidStateError
from studio.stores.interfaces import StudioStore

_ASSESSMENT_ORDER = {AssessmentType.PRE: 0, AssessmentType.POST: 1}


class MemoryStudioStore(StudioStore):
    """Dictionary-backed store for tests and local tooling."""

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._lock = threading.RLock()
        self._clock = clock or (lambda: datetime.now().astimezone())
        self._users: dict[int, str] = {}
        self._categories: dict[CategoryId, ExerciseCategory] = {}
        self._events: dict[EventId, Event] = {}
        self._occurrences: dict[OccurrenceId, Occurrence] = {}
        self._registrations: dict[RegistrationId, Registration] = {}
        self._assessments: dict[AssessmentId, WellnessAssessment] = {}

    # Seeding helpers for collaborators this store does not own.

    def add_user(self, subject_id: int, email: str) -> None:
        with self._lock:
            self._users[subject_id] = email

    def add_category(self, name: str, is_active: bool = True) -> ExerciseCategory:
        with self._lock:
            category = ExerciseCategory(id=CategoryId(uuid.uuid4()), name=name, is_active=is_active)
            self._categories[category.id] = category
            return category

    def atomic(self) -> "_Transaction":
        return _Transaction(self)

    def _snapshot(self) -> tuple[dict, ...]:
        return tuple(
            copy.copy(table)
            for table in (
                self._events,
                self._occurrences,
                self._registrations,
                self._assessments,
            )
        )

    def _restore(self, snapshot: tuple[dict, ...]) -> None:
        self._events, self._occurrences, self._registrations, self._assessments = snapshot

    # Events

    def get_category(self, category_id: CategoryId) -> ExerciseCategory | None:
        with self._lock:
            return self._categories.get(category_id)

    def create_event(self, **fields: Any) -> Event:
        with self._lock:
            now = self._clock()
            event = Event(id=EventId(uuid.uuid4()), created_at=now, updated_at=now, **fields)
            self._events[event.id] = event
            return event

    def get_event(self, event_id: EventId) -> Event | None:
        with self._lock:
            return self._events.get(event_id)

    def list_events(self, active_only: bool = False) -> list[Event]:
        with self._lock:
            events = [
                event
                for event in self._events.values()
                if not event.is_deleted and (event.is_active or not active_only)
            ]
        return sorted(events, key=lambda event: event.start_date)

    def update_event(self, event_id: EventId, changes: Mapping[str, Any]) -> Event:
        with self._lock:
            event = replace(self._events[event_id], updated_at=self._clock(), **changes)
            self._events[event_id] = event
            return event

    def delete_event(self, event_id: EventId) -> None:
        with self._lock:
            for occurrence in self.list_occurrences(event_id):
                self.delete_occurrence(occurrence.id)
            self._events.pop(event_id, None)

    # Occurrences

    def create_occurrences(
        self, event_id: EventId, date_times: Sequence[datetime], capacity: int
    ) -> list[Occurrence]:
        with self._lock:
            created = []
            for moment in date_times:
                occurrence = Occurrence(
                    id=OccurrenceId(uuid.uuid4()),
                    event_id=event_id,
                    date_time=moment,
                    capacity=capacity,
                )
                self._occurrences[occurrence.id] = occurrence
                created.append(occurrence)
            return created

    def get_occurrence(self, occurrence_id: OccurrenceId) -> Occurrence | None:
        with self._lock:
            return self._occurrences.get(occurrence_id)

    def get_occurrence_for_update(self, occurrence_id: OccurrenceId) -> Occurrence | None:
        return self.get_occurrence(occurrence_id)

    def list_occurrences(
        self,
        event_id: EventId,
        *,
        active_only: bool = False,
        starting_from: datetime | None = None,
    ) -> list[Occurrence]:
        with self._lock:
            occurrences = [
                occurrence
                for occurrence in self._occurrences.values()
                if occurrence.event_id == event_id
                and (occurrence.is_active or not active_only)
                and (starting_from is None or occurrence.date_time >= starting_from)
            ]
        return sorted(occurrences, key=lambda occurrence: occurrence.date_time)

    def set_occurrence_active(self, occurrence_id: OccurrenceId, is_active: bool) -> Occurrence:
        with self._lock:
            occurrence = replace(self._occurrences[occurrence_id], is_active=is_active)
            self._occurrences[occurrence_id] = occurrence
            return occurrence

    def delete_occurrence(self, occurrence_id: OccurrenceId) -> None:
        with self._lock:
            for registration in self.list_registrations(occurrence_id=occurrence_id):
                self.delete_registration(registration.id)
            self._occurrences.pop(occurrence_id, None)

    def count_registrations(self, occurrence_id: OccurrenceId) -> int:
        with self._lock:
            return sum(
                1
                for registration in self._registrations.values()
                if registration.occurrence_id == occurrence_id
            )

    # Registrations

    def _hydrate(self, registration: Registration) -> Registration:
        assessments = sorted(
            (
                assessment
                for assessment in self._assessments.values()
                if assessment.registration_id == registration.id
            ),
            key=lambda assessment: _ASSESSMENT_ORDER[assessment.type],
        )
        occurrence = self._occurrences.get(registration.occurrence_id)
        return replace(
            registration,
            assessments=tuple(assessments),
            occurrence_date_time=occurrence.date_time if occurrence else None,
        )

    def create_registration(
        self, subject_id: int, event_id: EventId, occurrence_id: OccurrenceId
    ) -> Registration:
        with self._lock:
            if self.find_registration(subject_id, occurrence_id) is not None:
                raise ConflictError("You are already registered for this occurrence")
            registration_id = RegistrationId(uuid.uuid4())
            self._registrations[registration_id] = Registration(
                id=registration_id,
                subject_id=subject_id,
                event_id=event_id,
                occurrence_id=occurrence_id,
                code=secrets.token_urlsafe(16),
                created_at=self._clock(),
                attendance=Attendance(registration_id=registration_id),
            )
            self.create_assessment(registration_id, AssessmentType.PRE)
            return self._hydrate(self._registrations[registration_id])

    def get_registration(self, registration_id: RegistrationId) -> Registration | None:
        with self._lock:
            registration = self._registrations.get(registration_id)
            return self._hydrate(registration) if registration else None

    def get_registration_by_code(self, code: str) -> Registration | None:
        with self._lock:
            for registration in self._registrations.values():
                if registration.code == code:
                    return self._hydrate(registration)
            return None

    def find_registration(
        self, subject_id: int, occurrence_id: OccurrenceId
    ) -> Registration | None:
        with self._lock:
            for registration in self._registrations.values():
                if (
                    registration.subject_id == subject_id
                    and registration.occurrence_id == occurrence_id
                ):
                    return self._hydrate(registration)
            return None

    def list_registrations(
        self,
        *,
        subject_id: int | None = None,
        event_id: EventId | None = None,
        occurrence_id: OccurrenceId | None = None,
    ) -> list[Registration]:
        with self._lock:
            matches = [
                self._hydrate(registration)
                for registration in self._registrations.values()
                if (subject_id is None or registration.subject_id == subject_id)
                and (event_id is None or registration.event_id == event_id)
                and (occurrence_id is None or registration.occurrence_id == occurrence_id)
            ]
        return sorted(matches, key=lambda registration: registration.created_at, reverse=True)

    def find_subject_id_by_email(self, email: str) -> int | None:
        with self._lock:
            for subject_id, known in self._users.items():
                if known.lower() == email.lower():
                    return subject_id
            return None

    def delete_registration(self, registration_id: RegistrationId) -> None:
        with self._lock:
            self._registrations.pop(registration_id, None)
            self._assessments = {
                key: assessment
                for key, assessment in self._assessments.items()
                if assessment.registration_id != registration_id
            }

    def mark_attended(
        self, registration_id: RegistrationId, operator_id: int, checked_at: datetime
    ) -> Attendance:
        with self._lock:
            registration = self._registrations[registration_id]
            if registration.attendance.attended:
                raise ConflictError("Attendance has already been marked for this registration")
            attendance = replace(
                registration.attendance,
                attended=True,
                checked_at=checked_at,
                checked_by=operator_id,
            )
            self._registrations[registration_id] = replace(registration, attendance=attendance)
            return attendance

    # Wellness assessments

    def create_assessment(
        self, registration_id: RegistrationId, kind: AssessmentType
    ) -> WellnessAssessment:
        with self._lock:
            for assessment in self._assessments.values():
                if assessment.registration_id == registration_id and assessment.type is kind:
                    raise ConflictError(f"{kind.value} assessment already exists")
            assessment = WellnessAssessment(
                id=AssessmentId(uuid.uuid4()),
                registration_id=registration_id,
                type=kind,
                created_at=self._clock(),
            )
            self._assessments[assessment.id] = assessment
            return assessment

    def get_assessment(self, assessment_id: AssessmentId) -> WellnessAssessment | None:
        with self._lock:
            return self._assessments.get(assessment_id)

    def list_assessments(
        self,
        *,
        registration_id: RegistrationId | None = None,
        subject_id: int | None = None,
        status: AssessmentStatus | None = None,
    ) -> list[WellnessAssessment]:
        with self._lock:
            owned = None
            if subject_id is not None:
                owned = {
                    registration.id
                    for registration in self._registrations.values()
                    if registration.subject_id == subject_id
                }
            matches = [
                assessment
                for assessment in self._assessments.values()
                if (registration_id is None or assessment.registration_id == registration_id)
                and (owned is None or assessment.registration_id in owned)
                and (status is None or assessment.status is status)
            ]
        return sorted(matches, key=lambda assessment: _ASSESSMENT_ORDER[assessment.type])

    def complete_assessment(
        self, assessment_id: AssessmentId, metrics: WellnessMetrics, completed_at: datetime
    ) -> WellnessAssessment:
        with self._lock:
            assessment = self._assessments[assessment_id]
            if assessment.is_completed:
                raise InvalidStateError("This wellness assessment has already been completed")
            assessment = replace(
                assessment,
                status=AssessmentStatus.COMPLETED,
                sleep_quality=metrics.sleep_quality,
                stress_level=metrics.stress_level,
                mood=metrics.mood,
                completed_at=completed_at,
            )
            self._assessments[assessment_id] = assessment
            return assessment


class _Transaction:
    """Holds the store lock for a block and rolls the tables back if it raises."""

    def __init__(self, store: MemoryStudioStore) -> None:
        self._store = store
        self._snapshot: tuple[dict, ...] = ()

    def __enter__(self) -> None:
        self._store._lock.acquire()
        self._snapshot = self._store._snapshot()

    def __exit__(self, exc_type, exc, tb) -> bool:
        try:
            if exc_type is not None:
                self._store._restore(self._snapshot)
        finally:
            self._store._lock.release()
        return False
