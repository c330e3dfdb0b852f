"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
"""

import secrets
import uuid

from django.conf import settings
from django.db import models


def generate_registration_code() -> str:
    return secrets.token_urlsafe(16)


class ExerciseCategory(models.Model):
    """Persistence model for exercise categories."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "exercise categories"

    def __str__(self) -> str:
        return self.name


class Event(models.Model):
    """Persistence model for recurring classes."""

    class RecurrenceType(models.TextChoices):
        SINGLE = "SINGLE"
        WEEKLY = "WEEKLY"
        INTERVAL = "INTERVAL"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    start_date = models.DateField()
    end_date = models.DateField()
    time_of_day = models.CharField(max_length=5)
    recurrence_type = models.CharField(
        max_length=10, choices=RecurrenceType.choices, default=RecurrenceType.SINGLE
    )
    recurrence_pattern = models.JSONField(blank=True, null=True)
    schedules = models.JSONField(blank=True, default=list)
    capacity = models.PositiveIntegerField()
    category = models.ForeignKey(
        ExerciseCategory, on_delete=models.PROTECT, related_name="events"
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_events",
    )
    is_active = models.BooleanField(default=True)
    is_deleted = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["start_date", "created_at"]
        indexes = [
            models.Index(fields=["is_deleted", "is_active"], name="studio_event_live_idx"),
        ]

    def __str__(self) -> str:
        return self.name


class Occurrence(models.Model):
    """Persistence model for bookable event occurrences."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="occurrences")
    date_time = models.DateTimeField()
    capacity = models.PositiveIntegerField()
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["date_time"]
        indexes = [
            models.Index(fields=["event", "date_time"], name="studio_occ_event_dt_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.event.name} - {self.date_time}"


class Registration(models.Model):
    """Persistence model for a user's seat on an occurrence."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="registrations"
    )
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="registrations")
    occurrence = models.ForeignKey(
        Occurrence, on_delete=models.CASCADE, related_name="registrations"
    )
    code = models.CharField(max_length=64, unique=True, default=generate_registration_code)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["user", "occurrence"], name="uq_registration_user_occurrence"
            ),
        ]
        indexes = [
            models.Index(fields=["event"], name="studio_reg_event_idx"),
            models.Index(fields=["occurrence"], name="studio_reg_occurrence_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.user} - {self.occurrence}"


class Attendance(models.Model):
    """Persistence model for attendance, one per registration."""

    registration = models.OneToOneField(
        Registration, on_delete=models.CASCADE, related_name="attendance"
    )
    attended = models.BooleanField(default=False)
    checked_at = models.DateTimeField(null=True, blank=True)
    checked_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="checked_attendances",
    )

    def __str__(self) -> str:
        return f"{self.registration} - {'attended' if self.attended else 'pending'}"


class WellnessAssessment(models.Model):
    """Persistence model for PRE and POST wellness assessments."""

    class Type(models.TextChoices):
        PRE = "PRE"
        POST = "POST"

    class Status(models.TextChoices):
        PENDING = "PENDING"
        COMPLETED = "COMPLETED"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    registration = models.ForeignKey(
        Registration, on_delete=models.CASCADE, related_name="assessments"
    )
    type = models.CharField(max_length=4, choices=Type.choices)
    status = models.CharField(max_length=9, choices=Status.choices, default=Status.PENDING)
    sleep_quality = models.PositiveSmallIntegerField(null=True, blank=True)
    stress_level = models.PositiveSmallIntegerField(null=True, blank=True)
    mood = models.PositiveSmallIntegerField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-type"]
        constraints = [
            models.UniqueConstraint(
                fields=["registration", "type"], name="uq_assessment_registration_type"
            ),
        ]

    def __str__(self) -> str:
        return f"{self.registration} - {self.type} ({self.status})"
