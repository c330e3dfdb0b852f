"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from contextlib import AbstractContextManager
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


class EventStore(ABC):
    """Interface for event and category persistence operations."""

    @abstractmethod
    def get_category(self, category_id: CategoryId) -> ExerciseCategory | None:
        """Return an exercise category by ID, or None if not found."""
        ...

    @abstractmethod
    def create_event(self, **fields: Any) -> Event:
        """Persist a new event from domain field values and return it."""
        ...

    @abstractmethod
    def get_event(self, event_id: EventId) -> Event | None:
        """Return an event by ID (soft-deleted included), or None if not found."""
        ...

    @abstractmethod
    def list_events(self, active_only: bool = False) -> list[Event]:
        """Return non-deleted events ordered by start_date ascending."""
        ...

    @abstractmethod
    def update_event(self, event_id: EventId, changes: Mapping[str, Any]) -> Event:
        """Apply domain field changes to an event and return the new state."""
        ...

    @abstractmethod
    def delete_event(self, event_id: EventId) -> None:
        """Physically remove an event with its occurrences and registrations."""
        ...


class OccurrenceStore(ABC):
    """Interface for occurrence persistence operations."""

    @abstractmethod
    def create_occurrences(
        self, event_id: EventId, date_times: Sequence[datetime], capacity: int
    ) -> list[Occurrence]:
        """Bulk-insert occurrences for an event."""
        ...

    @abstractmethod
    def get_occurrence(self, occurrence_id: OccurrenceId) -> Occurrence | None:
        """Return an occurrence by ID, or None if not found."""
        ...

    @abstractmethod
    def get_occurrence_for_update(self, occurrence_id: OccurrenceId) -> Occurrence | None:
        """Return an occurrence and hold a write lock on it until the transaction ends.

        Must be called inside ``atomic()``.
        """
        ...

    @abstractmethod
    def list_occurrences(
        self,
        event_id: EventId,
        *,
        active_only: bool = False,
        starting_from: datetime | None = None,
    ) -> list[Occurrence]:
        """Return occurrences of an event ordered by date_time ascending."""
        ...

    @abstractmethod
    def set_occurrence_active(self, occurrence_id: OccurrenceId, is_active: bool) -> Occurrence:
        ...

    @abstractmethod
    def delete_occurrence(self, occurrence_id: OccurrenceId) -> None:
        ...

    @abstractmethod
    def count_registrations(self, occurrence_id: OccurrenceId) -> int:
        """Live count of registrations held against an occurrence."""
        ...


class RegistrationStore(ABC):
    """Interface for registration and attendance persistence operations."""

    @abstractmethod
    def create_registration(
        self, subject_id: int, event_id: EventId, occurrence_id: OccurrenceId
    ) -> Registration:
        """Insert a registration with its Attendance and PENDING PRE assessment.

        Raises:
            ConflictError: If the subject already holds this occurrence.
        """
        ...

    @abstractmethod
    def get_registration(self, registration_id: RegistrationId) -> Registration | None:
        ...

    @abstractmethod
    def get_registration_by_code(self, code: str) -> Registration | None:
        ...

    @abstractmethod
    def find_registration(
        self, subject_id: int, occurrence_id: OccurrenceId
    ) -> Registration | None:
        """Return the subject's registration for an occurrence, if any."""
        ...

    @abstractmethod
    def list_registrations(
        self,
        *,
        subject_id: int | None = None,
        event_id: EventId | None = None,
        occurrence_id: OccurrenceId | None = None,
    ) -> list[Registration]:
        """Return registrations matching every given filter, newest first."""
        ...

    @abstractmethod
    def find_subject_id_by_email(self, email: str) -> int | None:
        ...

    @abstractmethod
    def delete_registration(self, registration_id: RegistrationId) -> None:
        """Remove a registration and its owned attendance and assessments."""
        ...

    @abstractmethod
    def mark_attended(
        self, registration_id: RegistrationId, operator_id: int, checked_at: datetime
    ) -> Attendance:
        """Flip attendance to attended.

        Raises:
            ConflictError: If attendance was already marked.
        """
        ...


class AssessmentStore(ABC):
    """Interface for wellness assessment persistence operations."""

    @abstractmethod
    def create_assessment(
        self, registration_id: RegistrationId, kind: AssessmentType
    ) -> WellnessAssessment:
        """Insert a PENDING assessment.

        Raises:
            ConflictError: If the registration already has one of this type.
        """
        ...

    @abstractmethod
    def get_assessment(self, assessment_id: AssessmentId) -> WellnessAssessment | None:
        ...

    @abstractmethod
    def list_assessments(
        self,
        *,
        registration_id: RegistrationId | None = None,
        subject_id: int | None = None,
        status: AssessmentStatus | None = None,
    ) -> list[WellnessAssessment]:
        """Return assessments matching every given filter, PRE before POST."""
        ...

    @abstractmethod
    def complete_assessment(
        self, assessment_id: AssessmentId, metrics: WellnessMetrics, completed_at: datetime
    ) -> WellnessAssessment:
        """Write metrics and flip a PENDING assessment to COMPLETED.

        Raises:
            InvalidStateError: If the assessment is already COMPLETED.
        """
        ...


class StudioStore(EventStore, OccurrenceStore, RegistrationStore, AssessmentStore):
    """Every store, plus the transaction boundary that spans them."""

    @abstractmethod
    def atomic(self) -> AbstractContextManager[None]:
        """Run the enclosed block as one all-or-nothing unit of work."""
        ...
