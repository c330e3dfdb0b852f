"""Django ORM implementation of the StudioStore."""

from collections.abc import Mapping, Sequence
from contextlib import AbstractContextManager
from datetime import datetime
from typing import Any

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction

from studio import models
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
    RecurrencePattern,
    RecurrenceType,
    Registration,
    RegistrationId,
    Schedule,
    WellnessAssessment,
    WellnessMetrics,
)
from studio.domain.errors import ConflictError, InvalidStateError
from studio.stores.interfaces import StudioStore


def _event_columns(fields: Mapping[str, Any]) -> dict[str, Any]:
    columns: dict[str, Any] = {}
    for name, value in fields.items():
        if name == "category_id":
            columns["category_id"] = value.value
        elif name == "created_by":
            columns["created_by_id"] = value
        elif name == "recurrence_type":
            columns["recurrence_type"] = RecurrenceType(value).value
        elif name == "recurrence_pattern":
            columns["recurrence_pattern"] = value.to_dict() if value else None
        elif name == "schedules":
            columns["schedules"] = [schedule.to_dict() for schedule in value]
        else:
            columns[name] = value
    return columns


def _to_event(row: models.Event) -> Event:
    return Event(
        id=EventId(row.id),
        name=row.name,
        description=row.description,
        start_date=row.start_date,
        end_date=row.end_date,
        time_of_day=row.time_of_day,
        recurrence_type=RecurrenceType(row.recurrence_type),
        recurrence_pattern=RecurrencePattern.from_dict(row.recurrence_pattern),
        schedules=tuple(Schedule.from_dict(item) for item in row.schedules or ()),
        capacity=row.capacity,
        category_id=CategoryId(row.category_id),
        created_by=row.created_by_id,
        is_active=row.is_active,
        is_deleted=row.is_deleted,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _to_occurrence(row: models.Occurrence) -> Occurrence:
    return Occurrence(
        id=OccurrenceId(row.id),
        event_id=EventId(row.event_id),
        date_time=row.date_time,
        capacity=row.capacity,
        is_active=row.is_active,
    )


def _to_attendance(row: models.Attendance) -> Attendance:
    return Attendance(
        registration_id=RegistrationId(row.registration_id),
        attended=row.attended,
        checked_at=row.checked_at,
        checked_by=row.checked_by_id,
    )


def _to_assessment(row: models.WellnessAssessment) -> WellnessAssessment:
    return WellnessAssessment(
        id=AssessmentId(row.id),
        registration_id=RegistrationId(row.registration_id),
        type=AssessmentType(row.type),
        status=AssessmentStatus(row.status),
        sleep_quality=row.sleep_quality,
        stress_level=row.stress_level,
        mood=row.mood,
        created_at=row.created_at,
        completed_at=row.completed_at,
    )


def _to_registration(row: models.Registration) -> Registration:
    return Registration(
        id=RegistrationId(row.id),
        subject_id=row.user_id,
        event_id=EventId(row.event_id),
        occurrence_id=OccurrenceId(row.occurrence_id),
        code=row.code,
        created_at=row.created_at,
        attendance=_to_attendance(row.attendance),
        assessments=tuple(_to_assessment(item) for item in row.assessments.all()),
        occurrence_date_time=row.occurrence.date_time,
    )


class DjangoStudioStore(StudioStore):
    """Relational store backed by the Django ORM.

    Admission serialises on the occurrence row through ``select_for_update``;
    the (user, occurrence) unique constraint backs the duplicate check.
    """

    def atomic(self) -> AbstractContextManager[None]:
        return transaction.atomic()

    # Events

    def get_category(self, category_id: CategoryId) -> ExerciseCategory | None:
        row = models.ExerciseCategory.objects.filter(pk=category_id.value).first()
        if row is None:
            return None
        return ExerciseCategory(id=CategoryId(row.id), name=row.name, is_active=row.is_active)

    def create_event(self, **fields: Any) -> Event:
        row = models.Event.objects.create(**_event_columns(fields))
        return _to_event(row)

    def get_event(self, event_id: EventId) -> Event | None:
        row = models.Event.objects.filter(pk=event_id.value).first()
        return _to_event(row) if row is not None else None

    def list_events(self, active_only: bool = False) -> list[Event]:
        queryset = models.Event.objects.filter(is_deleted=False)
        if active_only:
            queryset = queryset.filter(is_active=True)
        return [_to_event(row) for row in queryset.order_by("start_date", "created_at")]

    def update_event(self, event_id: EventId, changes: Mapping[str, Any]) -> Event:
        row = models.Event.objects.get(pk=event_id.value)
        for column, value in _event_columns(changes).items():
            setattr(row, column, value)
        row.save()
        return _to_event(row)

    def delete_event(self, event_id: EventId) -> None:
        models.Event.objects.filter(pk=event_id.value).delete()

    # Occurrences

    def create_occurrences(
        self, event_id: EventId, date_times: Sequence[datetime], capacity: int
    ) -> list[Occurrence]:
        rows = models.Occurrence.objects.bulk_create(
            [
                models.Occurrence(event_id=event_id.value, date_time=moment, capacity=capacity)
                for moment in date_times
            ]
        )
        return [_to_occurrence(row) for row in rows]

    def get_occurrence(self, occurrence_id: OccurrenceId) -> Occurrence | None:
        row = models.Occurrence.objects.filter(pk=occurrence_id.value).first()
        return _to_occurrence(row) if row is not None else None

    def get_occurrence_for_update(self, occurrence_id: OccurrenceId) -> Occurrence | None:
        row = (
            models.Occurrence.objects.select_for_update()
            .filter(pk=occurrence_id.value)
            .first()
        )
        return _to_occurrence(row) if row is not None else None

    def list_occurrences(
        self,
        event_id: EventId,
        *,
        active_only: bool = False,
        starting_from: datetime | None = None,
    ) -> list[Occurrence]:
        queryset = models.Occurrence.objects.filter(event_id=event_id.value)
        if active_only:
            queryset = queryset.filter(is_active=True)
        if starting_from is not None:
            queryset = queryset.filter(date_time__gte=starting_from)
        return [_to_occurrence(row) for row in queryset.order_by("date_time")]

    def set_occurrence_active(self, occurrence_id: OccurrenceId, is_active: bool) -> Occurrence:
        row = models.Occurrence.objects.get(pk=occurrence_id.value)
        row.is_active = is_active
        row.save(update_fields=["is_active"])
        return _to_occurrence(row)

    def delete_occurrence(self, occurrence_id: OccurrenceId) -> None:
        models.Occurrence.objects.filter(pk=occurrence_id.value).delete()

    def count_registrations(self, occurrence_id: OccurrenceId) -> int:
        return models.Registration.objects.filter(occurrence_id=occurrence_id.value).count()

    # Registrations

    def _registrations(self):
        return models.Registration.objects.select_related(
            "attendance", "occurrence"
        ).prefetch_related("assessments")

    def create_registration(
        self, subject_id: int, event_id: EventId, occurrence_id: OccurrenceId
    ) -> Registration:
        try:
            with transaction.atomic():
                row = models.Registration.objects.create(
                    user_id=subject_id,
                    event_id=event_id.value,
                    occurrence_id=occurrence_id.value,
                )
                models.Attendance.objects.create(registration=row, attended=False)
                models.WellnessAssessment.objects.create(
                    registration=row, type=models.WellnessAssessment.Type.PRE
                )
        except IntegrityError as exc:
            raise ConflictError("You are already registered for this occurrence") from exc
        return _to_registration(self._registrations().get(pk=row.pk))

    def get_registration(self, registration_id: RegistrationId) -> Registration | None:
        row = self._registrations().filter(pk=registration_id.value).first()
        return _to_registration(row) if row is not None else None

    def get_registration_by_code(self, code: str) -> Registration | None:
        row = self._registrations().filter(code=code).first()
        return _to_registration(row) if row is not None else None

    def find_registration(
        self, subject_id: int, occurrence_id: OccurrenceId
    ) -> Registration | None:
        row = (
            self._registrations()
            .filter(user_id=subject_id, occurrence_id=occurrence_id.value)
            .first()
        )
        return _to_registration(row) if row is not None else None

    def list_registrations(
        self,
        *,
        subject_id: int | None = None,
        event_id: EventId | None = None,
        occurrence_id: OccurrenceId | None = None,
    ) -> list[Registration]:
        queryset = self._registrations()
        if subject_id is not None:
            queryset = queryset.filter(user_id=subject_id)
        if event_id is not None:
            queryset = queryset.filter(event_id=event_id.value)
        if occurrence_id is not None:
            queryset = queryset.filter(occurrence_id=occurrence_id.value)
        return [_to_registration(row) for row in queryset.order_by("-created_at")]

    def find_subject_id_by_email(self, email: str) -> int | None:
        return (
            get_user_model()
            .objects.filter(email__iexact=email)
            .values_list("pk", flat=True)
            .first()
        )

    def delete_registration(self, registration_id: RegistrationId) -> None:
        models.Registration.objects.filter(pk=registration_id.value).delete()

    def mark_attended(
        self, registration_id: RegistrationId, operator_id: int, checked_at: datetime
    ) -> Attendance:
        updated = models.Attendance.objects.filter(
            registration_id=registration_id.value, attended=False
        ).update(attended=True, checked_at=checked_at, checked_by_id=operator_id)
        if not updated:
            raise ConflictError("Attendance has already been marked for this registration")
        return _to_attendance(
            models.Attendance.objects.get(registration_id=registration_id.value)
        )

    # Wellness assessments

    def create_assessment(
        self, registration_id: RegistrationId, kind: AssessmentType
    ) -> WellnessAssessment:
        try:
            with transaction.atomic():
                row = models.WellnessAssessment.objects.create(
                    registration_id=registration_id.value, type=kind.value
                )
        except IntegrityError as exc:
            raise ConflictError(f"{kind.value} assessment already exists") from exc
        return _to_assessment(row)

    def get_assessment(self, assessment_id: AssessmentId) -> WellnessAssessment | None:
        row = models.WellnessAssessment.objects.filter(pk=assessment_id.value).first()
        return _to_assessment(row) if row is not None else None

    def list_assessments(
        self,
        *,
        registration_id: RegistrationId | None = None,
        subject_id: int | None = None,
        status: AssessmentStatus | None = None,
    ) -> list[WellnessAssessment]:
        queryset = models.WellnessAssessment.objects.all()
        if registration_id is not None:
            queryset = queryset.filter(registration_id=registration_id.value)
        if subject_id is not None:
            queryset = queryset.filter(registration__user_id=subject_id)
        if status is not None:
            queryset = queryset.filter(status=status.value)
        return [_to_assessment(row) for row in queryset.order_by("-type", "-created_at")]

    def complete_assessment(
        self, assessment_id: AssessmentId, metrics: WellnessMetrics, completed_at: datetime
    ) -> WellnessAssessment:
        updated = models.WellnessAssessment.objects.filter(
            pk=assessment_id.value, status=models.WellnessAssessment.Status.PENDING
        ).update(
            sleep_quality=metrics.sleep_quality,
            stress_level=metrics.stress_level,
            mood=metrics.mood,
            status=models.WellnessAssessment.Status.COMPLETED,
            completed_at=completed_at,
        )
        if not updated:
            raise InvalidStateError("This wellness assessment has already been completed")
        return _to_assessment(models.WellnessAssessment.objects.get(pk=assessment_id.value))
