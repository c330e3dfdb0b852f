"""Serializers for request shapes and domain-model responses."""

from rest_framework import serializers

from studio.domain import RecurrencePattern, RecurrenceType, Schedule
from studio.domain.lookups import ByCode, ByEmail, ByRegistrationId, RegistrationLookup
from studio.services import EventInput

RECURRENCE_CHOICES = [choice.value for choice in RecurrenceType]


# Responses


class EventSerializer(serializers.Serializer):
    """Serializer for Event domain model."""

    id = serializers.CharField()
    name = serializers.CharField()
    description = serializers.CharField()
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    time_of_day = serializers.CharField()
    recurrence_type = serializers.CharField(source="recurrence_type.value")
    recurrence_pattern = serializers.SerializerMethodField()
    schedules = serializers.SerializerMethodField()
    capacity = serializers.IntegerField()
    category_id = serializers.CharField()
    is_active = serializers.BooleanField()

    def get_recurrence_pattern(self, event) -> dict | None:
        pattern = event.recurrence_pattern
        if pattern is None:
            return None
        weekdays = list(pattern.weekdays) if pattern.weekdays is not None else None
        return {"weekdays": weekdays, "interval_days": pattern.interval_days}

    def get_schedules(self, event) -> list[dict]:
        return [schedule.to_dict() for schedule in event.schedules]


class OccurrenceSerializer(serializers.Serializer):
    """Serializer for Occurrence domain model."""

    id = serializers.CharField()
    event_id = serializers.CharField()
    date_time = serializers.DateTimeField()
    capacity = serializers.IntegerField()
    is_active = serializers.BooleanField()


class EventDetailSerializer(serializers.Serializer):
    event = EventSerializer()
    occurrences = OccurrenceSerializer(many=True)
    registered_occurrence_ids = serializers.SerializerMethodField()
    is_registered = serializers.BooleanField()

    def get_registered_occurrence_ids(self, detail) -> list[str]:
        return sorted(str(occurrence_id) for occurrence_id in detail.registered_occurrence_ids)


class AvailabilitySerializer(serializers.Serializer):
    capacity = serializers.IntegerField()
    registered = serializers.IntegerField()
    available = serializers.IntegerField()


class AttendanceSerializer(serializers.Serializer):
    attended = serializers.BooleanField()
    checked_at = serializers.DateTimeField(allow_null=True)
    checked_by = serializers.IntegerField(allow_null=True)


class AssessmentSerializer(serializers.Serializer):
    """Serializer for WellnessAssessment domain model."""

    id = serializers.CharField()
    registration_id = serializers.CharField()
    type = serializers.CharField(source="type.value")
    status = serializers.CharField(source="status.value")
    sleep_quality = serializers.IntegerField(allow_null=True)
    stress_level = serializers.IntegerField(allow_null=True)
    mood = serializers.IntegerField(allow_null=True)
    completed_at = serializers.DateTimeField(allow_null=True)


class RegistrationSerializer(serializers.Serializer):
    """Serializer for Registration domain model."""

    id = serializers.CharField()
    subject_id = serializers.IntegerField()
    event_id = serializers.CharField()
    occurrence_id = serializers.CharField()
    occurrence_date_time = serializers.DateTimeField(allow_null=True)
    code = serializers.CharField()
    created_at = serializers.DateTimeField()
    attendance = AttendanceSerializer()
    assessments = AssessmentSerializer(many=True)


class AttendanceStatsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    attended = serializers.IntegerField()
    pending = serializers.IntegerField()
    pre_completed = serializers.IntegerField()
    post_completed = serializers.IntegerField()


class WellnessImpactSerializer(serializers.Serializer):
    sleep_quality_change = serializers.IntegerField(allow_null=True)
    stress_level_change = serializers.IntegerField(allow_null=True)
    mood_change = serializers.IntegerField(allow_null=True)
    overall_impact = serializers.FloatField(allow_null=True)


class ImpactReportSerializer(serializers.Serializer):
    pre_assessment = AssessmentSerializer(allow_null=True)
    post_assessment = AssessmentSerializer(allow_null=True)
    impact = WellnessImpactSerializer()


class RegenerationResultSerializer(serializers.Serializer):
    deleted = serializers.IntegerField()
    preserved = serializers.IntegerField()
    created = serializers.IntegerField()


# Requests


class RecurrencePatternInputSerializer(serializers.Serializer):
    weekdays = serializers.ListField(child=serializers.IntegerField(), required=False)
    interval_days = serializers.IntegerField(required=False)


class ScheduleInputSerializer(serializers.Serializer):
    time = serializers.CharField()
    weekdays = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)


def _pattern(data: dict | None) -> RecurrencePattern | None:
    if not data:
        return None
    weekdays = data.get("weekdays")
    return RecurrencePattern(
        weekdays=tuple(weekdays) if weekdays is not None else None,
        interval_days=data.get("interval_days"),
    )


def _schedules(items: list[dict] | None) -> tuple[Schedule, ...]:
    return tuple(
        Schedule(time_of_day=item["time"], weekdays=tuple(item["weekdays"])) for item in items or ()
    )


class EventCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    time_of_day = serializers.CharField(max_length=5)
    capacity = serializers.IntegerField()
    category_id = serializers.UUIDField()
    recurrence_type = serializers.ChoiceField(choices=RECURRENCE_CHOICES, default="SINGLE")
    recurrence_pattern = RecurrencePatternInputSerializer(required=False, allow_null=True)
    schedules = ScheduleInputSerializer(many=True, required=False)

    def to_input(self) -> EventInput:
        data = self.validated_data
        return EventInput(
            name=data["name"],
            description=data.get("description", ""),
            start_date=data["start_date"],
            end_date=data["end_date"],
            time_of_day=data["time_of_day"],
            capacity=data["capacity"],
            category_id=str(data["category_id"]),
            recurrence_type=RecurrenceType(data["recurrence_type"]),
            recurrence_pattern=_pattern(data.get("recurrence_pattern")),
            schedules=_schedules(data.get("schedules")),
        )


class EventUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    time_of_day = serializers.CharField(max_length=5, required=False)
    capacity = serializers.IntegerField(required=False)
    category_id = serializers.UUIDField(required=False)
    recurrence_type = serializers.ChoiceField(choices=RECURRENCE_CHOICES, required=False)
    recurrence_pattern = RecurrencePatternInputSerializer(required=False, allow_null=True)
    schedules = ScheduleInputSerializer(many=True, required=False)
    is_active = serializers.BooleanField(required=False)
    regenerate_instances = serializers.BooleanField(required=False, default=False)

    def to_changes(self) -> tuple[dict, bool]:
        changes = dict(self.validated_data)
        regenerate = changes.pop("regenerate_instances", False)
        if "category_id" in changes:
            changes["category_id"] = str(changes["category_id"])
        if "recurrence_pattern" in changes:
            changes["recurrence_pattern"] = _pattern(changes["recurrence_pattern"])
        if "schedules" in changes:
            changes["schedules"] = _schedules(changes["schedules"])
        return changes, regenerate


class RegistrationCreateSerializer(serializers.Serializer):
    event_id = serializers.UUIDField()
    occurrence_id = serializers.UUIDField()


class MarkAttendanceSerializer(serializers.Serializer):
    """Exactly one of: registration_id, code, or email together with event_id."""

    registration_id = serializers.UUIDField(required=False)
    code = serializers.CharField(required=False)
    email = serializers.EmailField(required=False)
    event_id = serializers.UUIDField(required=False)

    def validate(self, attrs: dict) -> dict:
        modes = [
            "registration_id" in attrs,
            "code" in attrs,
            "email" in attrs or "event_id" in attrs,
        ]
        if sum(modes) != 1:
            raise serializers.ValidationError(
                "Provide registration_id, code, or both email and event_id"
            )
        if modes[2] and not ("email" in attrs and "event_id" in attrs):
            raise serializers.ValidationError("email and event_id must be provided together")
        return attrs

    def to_lookup(self) -> RegistrationLookup:
        data = self.validated_data
        if "registration_id" in data:
            return ByRegistrationId(registration_id=str(data["registration_id"]))
        if "code" in data:
            return ByCode(code=data["code"])
        return ByEmail(email=data["email"], event_id=str(data["event_id"]))


class CompleteAssessmentSerializer(serializers.Serializer):
    sleep_quality = serializers.IntegerField(min_value=0, max_value=10)
    stress_level = serializers.IntegerField(min_value=0, max_value=10)
    mood = serializers.IntegerField(min_value=0, max_value=10)
