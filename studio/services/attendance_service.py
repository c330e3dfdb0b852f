"""Attendance service: door check-in gated on the PRE assessment."""

import logging

from studio.domain import AssessmentType, AttendanceStats, EventId, Registration, RegistrationId
from studio.domain.errors import ConflictError, InvalidStateError, NotFoundError
from studio.domain.lookups import ByCode, ByEmail, ByRegistrationId, RegistrationLookup
from studio.services.base import Clock, default_clock, parse_id
from studio.stores.interfaces import StudioStore

logger = logging.getLogger(__name__)


class AttendanceService:
    """Service for attendance marking and reporting."""

    def __init__(self, store: StudioStore, clock: Clock = default_clock) -> None:
        self._store = store
        self._clock = clock

    def resolve(self, lookup: RegistrationLookup) -> Registration:
        """Resolve any lookup strategy to exactly one registration.

        Raises:
            NotFoundError: If nothing matches.
        """
        if isinstance(lookup, ByRegistrationId):
            registration_id = parse_id(RegistrationId, lookup.registration_id, "registration")
            registration = self._store.get_registration(registration_id)
            if registration is None:
                raise NotFoundError("Registration", registration_id)
            return registration

        if isinstance(lookup, ByCode):
            registration = self._store.get_registration_by_code(lookup.code)
            if registration is None:
                raise NotFoundError("Registration with the provided code")
            return registration

        if isinstance(lookup, ByEmail):
            event_id = parse_id(EventId, lookup.event_id, "event")
            subject_id = self._store.find_subject_id_by_email(lookup.email)
            candidates = []
            if subject_id is not None:
                candidates = [
                    registration
                    for registration in self._store.list_registrations(
                        subject_id=subject_id, event_id=event_id
                    )
                    if not registration.attended
                ]
            if not candidates:
                raise NotFoundError("Registration for the provided email and event")
            now = self._clock()
            return min(
                candidates,
                key=lambda registration: abs(registration.occurrence_date_time - now),
            )

        raise TypeError(f"Unsupported registration lookup: {lookup!r}")

    def mark(self, lookup: RegistrationLookup, operator_id: int) -> Registration:
        """Mark a registration attended and open its POST assessment.

        Raises:
            NotFoundError: If the lookup matches no registration.
            ConflictError: If attendance was already marked.
            InvalidStateError: If the PRE assessment is not completed.
        """
        with self._store.atomic():
            registration = self.resolve(lookup)
            if registration.attended:
                raise ConflictError("Attendance has already been marked for this registration")

            pre = registration.assessment(AssessmentType.PRE)
            if pre is None or not pre.is_completed:
                raise InvalidStateError("PRE evaluation not completed")

            self._store.mark_attended(registration.id, operator_id, self._clock())
            self._store.create_assessment(registration.id, AssessmentType.POST)
            marked = self._store.get_registration(registration.id)

        logger.info("Attendance marked for registration %s by %s", registration.id, operator_id)
        return marked

    def list_by_event(self, event_id: EventId | str) -> list[Registration]:
        event_id = parse_id(EventId, event_id, "event")
        return self._store.list_registrations(event_id=event_id)

    def stats(self, event_id: EventId | str) -> AttendanceStats:
        registrations = self.list_by_event(event_id)
        attended = sum(1 for registration in registrations if registration.attended)

        def completed(registration: Registration, kind: AssessmentType) -> bool:
            assessment = registration.assessment(kind)
            return assessment is not None and assessment.is_completed

        return AttendanceStats(
            total=len(registrations),
            attended=attended,
            pending=len(registrations) - attended,
            pre_completed=sum(1 for r in registrations if completed(r, AssessmentType.PRE)),
            post_completed=sum(1 for r in registrations if completed(r, AssessmentType.POST)),
        )
