"""Event service - event lifecycle and occurrence generation.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from studio.domain import (
    CategoryId,
    Event,
    EventDetail,
    EventId,
    RecurrencePattern,
    RecurrenceType,
    RegenerationResult,
    Schedule,
    TimeOfDay,
)
from studio.domain.errors import InvalidStateError, NotFoundError, ValidationError
from studio.domain.recurrence import generate_for_rule
from studio.services.base import Clock, default_clock, parse_id
from studio.services.occurrence_service import OccurrenceService
from studio.stores.interfaces import StudioStore

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset(
    {
        "name",
        "description",
        "start_date",
        "end_date",
        "time_of_day",
        "recurrence_type",
        "recurrence_pattern",
        "schedules",
        "capacity",
        "category_id",
        "is_active",
    }
)


@dataclass(frozen=True)
class EventInput:
    """Fields needed to create an event."""

    name: str
    start_date: date
    end_date: date
    time_of_day: str
    capacity: int
    category_id: CategoryId | str
    description: str = ""
    recurrence_type: RecurrenceType = RecurrenceType.SINGLE
    recurrence_pattern: RecurrencePattern | None = None
    schedules: tuple[Schedule, ...] = ()


def _as_date(value: date) -> date:
    return value.date() if isinstance(value, datetime) else value


def _normalise(changes: Mapping[str, Any]) -> dict[str, Any]:
    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise ValidationError(f"Unknown event fields: {', '.join(sorted(unknown))}")

    fields = dict(changes)
    if "category_id" in fields:
        fields["category_id"] = parse_id(CategoryId, fields["category_id"], "category")
    if "recurrence_type" in fields:
        try:
            fields["recurrence_type"] = RecurrenceType(fields["recurrence_type"])
        except ValueError as exc:
            raise ValidationError(f"Unknown recurrence type: {fields['recurrence_type']}") from exc
    if isinstance(fields.get("recurrence_pattern"), Mapping):
        fields["recurrence_pattern"] = RecurrencePattern.from_dict(fields["recurrence_pattern"])
    if "schedules" in fields:
        fields["schedules"] = tuple(
            item if isinstance(item, Schedule) else Schedule.from_dict(item)
            for item in fields["schedules"] or ()
        )
    for name in ("start_date", "end_date"):
        if name in fields:
            fields[name] = _as_date(fields[name])
    return fields


def _rule_of(event: Event) -> dict[str, Any]:
    return {
        "start_date": event.start_date,
        "end_date": event.end_date,
        "time_of_day": event.time_of_day,
        "recurrence_type": event.recurrence_type,
        "recurrence_pattern": event.recurrence_pattern,
        "schedules": event.schedules,
    }


def _check_time(value: str) -> None:
    try:
        TimeOfDay.parse(value)
    except ValueError as exc:
        raise ValidationError("Time must be in format HH:MM (24-hour format)") from exc


def _check_weekdays(weekdays: tuple[int, ...] | None) -> bool:
    return bool(weekdays) and all(
        isinstance(day, int) and not isinstance(day, bool) and 0 <= day <= 6 for day in weekdays
    )


def validate_event_fields(fields: Mapping[str, Any], daily_fallback: bool = False) -> None:
    """Check the field-level rules shared by create and update.

    With ``daily_fallback`` a WEEKLY rule may omit its weekdays and an
    INTERVAL rule its interval; values that are present must still be valid.

    Raises:
        ValidationError: On the first rule the fields break.
    """
    if not str(fields["name"]).strip():
        raise ValidationError("Name cannot be empty")
    if fields["capacity"] < 1:
        raise ValidationError("Capacity must be at least 1")
    if fields["end_date"] < fields["start_date"]:
        raise ValidationError("endDate must not be before startDate")
    _check_time(fields["time_of_day"])

    recurrence_type = fields["recurrence_type"]
    pattern: RecurrencePattern | None = fields.get("recurrence_pattern")
    schedules: tuple[Schedule, ...] = fields.get("schedules") or ()

    if recurrence_type is RecurrenceType.WEEKLY:
        if schedules:
            for schedule in schedules:
                _check_time(schedule.time_of_day)
                if not _check_weekdays(schedule.weekdays):
                    raise ValidationError("Each schedule requires weekdays between 0 and 6")
        elif pattern is not None and pattern.weekdays:
            if not _check_weekdays(pattern.weekdays):
                raise ValidationError("Weekly recurrence weekdays must be between 0 and 6")
        elif not daily_fallback:
            raise ValidationError(
                "Weekly recurrence requires valid weekdays (0-6) in pattern or schedules"
            )
    elif recurrence_type is RecurrenceType.INTERVAL:
        interval = pattern.interval_days if pattern else None
        if interval is None and daily_fallback:
            return
        if not isinstance(interval, int) or isinstance(interval, bool) or interval < 1:
            raise ValidationError("Interval recurrence requires intervalDays >= 1")


class EventService:
    """Service for event lifecycle operations."""

    def __init__(
        self,
        store: StudioStore,
        clock: Clock = default_clock,
        daily_fallback: bool = False,
    ) -> None:
        self._store = store
        self._clock = clock
        self._daily_fallback = daily_fallback
        self._occurrences = OccurrenceService(store, clock)

    def _check_category(self, category_id: CategoryId) -> None:
        category = self._store.get_category(category_id)
        if category is None:
            raise NotFoundError("Exercise category", category_id)
        if not category.is_active:
            raise InvalidStateError("Exercise category is not active")

    def _check_not_past(self, start_date: date) -> None:
        if start_date < self._clock().date():
            raise InvalidStateError("Cannot create events in the past")

    def _dates_for(self, fields: Mapping[str, Any]) -> list[datetime]:
        return generate_for_rule(
            fields["start_date"],
            fields["end_date"],
            fields["time_of_day"],
            fields["recurrence_type"],
            fields.get("recurrence_pattern"),
            fields.get("schedules") or (),
            daily_fallback=self._daily_fallback,
        )

    def create(self, data: EventInput, creator_id: int | None) -> EventDetail:
        """Validate, persist and expand a new event into occurrences.

        Raises:
            ValidationError: If a field rule is broken.
            NotFoundError: If the category does not exist.
            InvalidStateError: If the start date is past, the category is
                inactive, or the rule would generate no occurrences.
        """
        fields = _normalise(
            {
                "name": data.name,
                "description": data.description,
                "start_date": data.start_date,
                "end_date": data.end_date,
                "time_of_day": data.time_of_day,
                "recurrence_type": data.recurrence_type,
                "recurrence_pattern": data.recurrence_pattern,
                "schedules": data.schedules,
                "capacity": data.capacity,
                "category_id": data.category_id,
            }
        )
        validate_event_fields(fields, self._daily_fallback)
        self._check_not_past(fields["start_date"])
        self._check_category(fields["category_id"])

        dates = self._dates_for(fields)
        if not dates:
            raise InvalidStateError("No instances would be generated for the given recurrence")

        with self._store.atomic():
            event = self._store.create_event(created_by=creator_id, **fields)
            occurrences = self._store.create_occurrences(event.id, dates, event.capacity)

        logger.info("Event %s created with %d occurrences", event.id, len(occurrences))
        return EventDetail(event=event, occurrences=tuple(occurrences))

    def list_events(self, active_only: bool = False) -> list[Event]:
        return self._store.list_events(active_only=active_only)

    def get_event(self, event_id: EventId | str) -> Event:
        """Return an event unless it does not exist or was soft-deleted."""
        event_id = parse_id(EventId, event_id, "event")
        event = self._store.get_event(event_id)
        if event is None or event.is_deleted:
            raise NotFoundError("Event", event_id)
        return event

    def get(self, event_id: EventId | str, subject_id: int | None = None) -> EventDetail:
        """Return an event with its bookable occurrences.

        When subject_id is given the detail also lists which of the event's
        occurrences that subject is registered for.

        Raises:
            InvalidIdError: If the event_id is not a valid UUID.
            NotFoundError: If the event does not exist or was deleted.
        """
        event = self.get_event(event_id)
        occurrences = self._store.list_occurrences(
            event.id, active_only=True, starting_from=self._clock()
        )
        registered = frozenset()
        if subject_id is not None:
            registered = frozenset(
                registration.occurrence_id
                for registration in self._store.list_registrations(
                    subject_id=subject_id, event_id=event.id
                )
            )
        return EventDetail(
            event=event,
            occurrences=tuple(occurrences),
            registered_occurrence_ids=registered,
        )

    def update(
        self,
        event_id: EventId | str,
        changes: Mapping[str, Any],
        regenerate_instances: bool = False,
    ) -> tuple[Event, RegenerationResult | None]:
        """Apply field changes and optionally regenerate future occurrences.

        Regeneration deletes future occurrences without registrants, keeps
        those with registrants, and fills the remaining future dates of the
        (possibly new) rule. Past occurrences are left alone.
        """
        event = self.get_event(event_id)
        fields = _normalise(changes)

        merged = {
            "name": event.name,
            "start_date": event.start_date,
            "end_date": event.end_date,
            "time_of_day": event.time_of_day,
            "recurrence_type": event.recurrence_type,
            "recurrence_pattern": event.recurrence_pattern,
            "schedules": event.schedules,
            "capacity": event.capacity,
        }
        merged.update(fields)
        validate_event_fields(merged, self._daily_fallback)
        if "start_date" in fields and fields["start_date"] != event.start_date:
            self._check_not_past(fields["start_date"])
        if "category_id" in fields:
            self._check_category(fields["category_id"])

        result = None
        with self._store.atomic():
            updated = self._store.update_event(event.id, fields) if fields else event
            if regenerate_instances:
                result = self._regenerate(updated)

        logger.info("Event %s updated (%s)", updated.id, ", ".join(sorted(fields)) or "no fields")
        return updated, result

    def _regenerate(self, event: Event) -> RegenerationResult:
        deleted, preserved = self._occurrences.delete_future_without_registrations(event.id)
        taken = {occurrence.date_time for occurrence in preserved}
        now = self._clock()
        dates = [
            moment
            for moment in self._dates_for(_rule_of(event))
            if moment >= now and moment not in taken
        ]
        created = self._store.create_occurrences(event.id, dates, event.capacity)
        logger.info(
            "Event %s regenerated: %d deleted, %d preserved, %d created",
            event.id,
            deleted,
            len(preserved),
            len(created),
        )
        return RegenerationResult(deleted=deleted, preserved=len(preserved), created=len(created))

    def delete(self, event_id: EventId | str) -> None:
        """Soft-delete: the event disappears from every listing but keeps its history."""
        event = self.get_event(event_id)
        self._store.update_event(event.id, {"is_deleted": True})
        logger.info("Event %s soft-deleted", event.id)

    def permanent_delete(self, event_id: EventId | str) -> None:
        """Physically remove an event with all occurrences and registrant history.

        Operator-only; normal flows use ``delete``.
        """
        event_id = parse_id(EventId, event_id, "event")
        if self._store.get_event(event_id) is None:
            raise NotFoundError("Event", event_id)
        self._store.delete_event(event_id)
        logger.warning("Event %s permanently deleted", event_id)
