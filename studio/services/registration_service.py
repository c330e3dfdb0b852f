"""Registration service: admission control and cancellation.

Admission runs as one unit of work: the occurrence row is locked, then the
event, occurrence, duplicate and capacity checks run, then the registration
is inserted with its attendance and PRE assessment. Concurrent admissions to
the same occurrence queue on that lock, so committed registrations never
exceed capacity.
"""

import logging

from studio.domain import (
    Availability,
    EventId,
    Identity,
    OccurrenceId,
    Registration,
    RegistrationId,
)
from studio.domain.errors import (
    CapacityExceededError,
    ConflictError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
)
from studio.services.base import Clock, default_clock, parse_id
from studio.services.capacity_service import CapacityService
from studio.stores.interfaces import StudioStore

logger = logging.getLogger(__name__)


class RegistrationService:
    """Service for registration lifecycle operations."""

    def __init__(self, store: StudioStore, clock: Clock = default_clock) -> None:
        self._store = store
        self._clock = clock
        self._capacity = CapacityService(store)

    def create(
        self,
        subject_id: int,
        event_id: EventId | str,
        occurrence_id: OccurrenceId | str,
    ) -> Registration:
        """Admit a subject to an occurrence.

        Raises:
            NotFoundError: If the event or occurrence does not exist.
            InvalidStateError: If either is inactive, deleted or past, or the
                occurrence belongs to another event.
            ConflictError: If the subject already holds this occurrence.
            CapacityExceededError: If no seats are left.
        """
        event_id = parse_id(EventId, event_id, "event")
        occurrence_id = parse_id(OccurrenceId, occurrence_id, "occurrence")

        with self._store.atomic():
            event = self._store.get_event(event_id)
            if event is None:
                raise NotFoundError("Event", event_id)
            if event.is_deleted or not event.is_active:
                raise InvalidStateError("Event is not active")

            occurrence = self._store.get_occurrence_for_update(occurrence_id)
            if occurrence is None:
                raise NotFoundError("Occurrence", occurrence_id)
            if occurrence.event_id != event_id:
                raise InvalidStateError("Occurrence does not belong to this event")
            if not occurrence.is_active:
                raise InvalidStateError("Occurrence is not active")
            if occurrence.date_time < self._clock():
                raise InvalidStateError("Cannot register for past occurrences")

            if self._store.find_registration(subject_id, occurrence_id) is not None:
                raise ConflictError("You are already registered for this occurrence")

            availability = self._capacity.availability_for(occurrence)
            if availability.available <= 0:
                logger.warning(
                    "Admission denied for subject %s on occurrence %s: %d/%d seats taken",
                    subject_id,
                    occurrence_id,
                    availability.registered,
                    availability.capacity,
                )
                raise CapacityExceededError()

            registration = self._store.create_registration(subject_id, event_id, occurrence_id)

        logger.info(
            "Registration %s created for subject %s on occurrence %s",
            registration.id,
            subject_id,
            occurrence_id,
        )
        return registration

    def cancel(self, registration_id: RegistrationId | str, requesting_subject_id: int) -> None:
        """Cancel a registration before attendance is marked.

        Raises:
            NotFoundError: If the registration does not exist.
            ForbiddenError: If the requester is not the registered subject.
            InvalidStateError: If attendance has already been marked.
        """
        registration_id = parse_id(RegistrationId, registration_id, "registration")
        with self._store.atomic():
            registration = self._store.get_registration(registration_id)
            if registration is None:
                raise NotFoundError("Registration", registration_id)
            if registration.subject_id != requesting_subject_id:
                raise ForbiddenError("You can only cancel your own registrations")
            if registration.attended:
                raise InvalidStateError(
                    "Cannot cancel registration after attendance has been marked"
                )
            self._store.delete_registration(registration_id)
        logger.info("Registration %s cancelled", registration_id)

    def get(
        self, registration_id: RegistrationId | str, identity: Identity | None = None
    ) -> Registration:
        """Return a registration; non-admin identities may only read their own."""
        registration_id = parse_id(RegistrationId, registration_id, "registration")
        registration = self._store.get_registration(registration_id)
        if registration is None:
            raise NotFoundError("Registration", registration_id)
        if identity is not None and not identity.is_admin:
            if registration.subject_id != identity.subject_id:
                raise ForbiddenError("You can only view your own registrations")
        return registration

    def get_by_code(self, code: str) -> Registration:
        registration = self._store.get_registration_by_code(code)
        if registration is None:
            raise NotFoundError("Registration with code")
        return registration

    def list_mine(self, subject_id: int) -> list[Registration]:
        return self._store.list_registrations(subject_id=subject_id)

    def list_by_event(self, event_id: EventId | str) -> list[Registration]:
        event_id = parse_id(EventId, event_id, "event")
        return self._store.list_registrations(event_id=event_id)

    def list_by_occurrence(self, occurrence_id: OccurrenceId | str) -> list[Registration]:
        occurrence_id = parse_id(OccurrenceId, occurrence_id, "occurrence")
        return self._store.list_registrations(occurrence_id=occurrence_id)

    def event_availability(self, event_id: EventId | str) -> Availability:
        """Aggregate seats over the event's active occurrences that have not started."""
        event_id = parse_id(EventId, event_id, "event")
        event = self._store.get_event(event_id)
        if event is None or event.is_deleted:
            raise NotFoundError("Event", event_id)

        capacity = 0
        registered = 0
        for occurrence in self._store.list_occurrences(
            event_id, active_only=True, starting_from=self._clock()
        ):
            seats = self._capacity.availability_for(occurrence)
            capacity += seats.capacity
            # Capped so the total equals the sum of per-occurrence availability.
            registered += min(seats.registered, seats.capacity)
        return Availability(capacity=capacity, registered=registered)

    def occurrence_availability(self, occurrence_id: OccurrenceId | str) -> Availability:
        return self._capacity.availability(occurrence_id)
