"""Wellness service: PRE/POST assessments and their impact.

PRE closes before attendance is marked; POST opens when it is. Each
assessment goes PENDING -> COMPLETED exactly once.
"""

import logging

from studio.domain import (
    AssessmentId,
    AssessmentStatus,
    AssessmentType,
    Identity,
    ImpactReport,
    Registration,
    RegistrationId,
    WellnessAssessment,
    WellnessImpact,
    WellnessMetrics,
)
from studio.domain.errors import (
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from studio.services.base import Clock, default_clock, parse_id
from studio.stores.interfaces import StudioStore

logger = logging.getLogger(__name__)


def calculate_impact(
    pre: WellnessAssessment | None, post: WellnessAssessment | None
) -> WellnessImpact:
    """Compare completed PRE and POST scores.

    Stress is inverted (pre - post) since lower stress is better. If either
    assessment is missing or pending every field is None.
    """
    if pre is None or post is None or not (pre.is_completed and post.is_completed):
        return WellnessImpact()

    sleep_quality_change = post.sleep_quality - pre.sleep_quality
    stress_level_change = pre.stress_level - post.stress_level
    mood_change = post.mood - pre.mood
    return WellnessImpact(
        sleep_quality_change=sleep_quality_change,
        stress_level_change=stress_level_change,
        mood_change=mood_change,
        overall_impact=round((sleep_quality_change + stress_level_change + mood_change) / 3, 2),
    )


class WellnessService:
    """Service for wellness assessment operations."""

    def __init__(self, store: StudioStore, clock: Clock = default_clock) -> None:
        self._store = store
        self._clock = clock

    def list_pending(self, subject_id: int) -> list[WellnessAssessment]:
        return self._store.list_assessments(
            subject_id=subject_id, status=AssessmentStatus.PENDING
        )

    def list_completed(self, subject_id: int) -> list[WellnessAssessment]:
        return self._store.list_assessments(
            subject_id=subject_id, status=AssessmentStatus.COMPLETED
        )

    def get(self, assessment_id: AssessmentId | str) -> WellnessAssessment:
        assessment_id = parse_id(AssessmentId, assessment_id, "assessment")
        assessment = self._store.get_assessment(assessment_id)
        if assessment is None:
            raise NotFoundError("Wellness assessment", assessment_id)
        return assessment

    def complete(
        self,
        assessment_id: AssessmentId | str,
        subject_id: int,
        *,
        sleep_quality: int,
        stress_level: int,
        mood: int,
    ) -> WellnessAssessment:
        """Record scores on a pending assessment.

        Raises:
            ValidationError: If a score is not an integer from 0 to 10.
            NotFoundError: If the assessment does not exist.
            ForbiddenError: If the subject does not own the registration.
            InvalidStateError: If already completed, if PRE is submitted after
                attendance, or if POST is submitted before attendance.
        """
        try:
            metrics = WellnessMetrics(
                sleep_quality=sleep_quality, stress_level=stress_level, mood=mood
            )
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc

        with self._store.atomic():
            assessment = self.get(assessment_id)
            registration = self._store.get_registration(assessment.registration_id)
            if registration is None:
                raise NotFoundError("Registration", assessment.registration_id)
            if registration.subject_id != subject_id:
                raise ForbiddenError("You can only complete your own wellness assessments")
            if assessment.is_completed:
                raise InvalidStateError("This wellness assessment has already been completed")

            if assessment.type is AssessmentType.PRE and registration.attended:
                raise InvalidStateError(
                    "Cannot complete PRE assessment after attendance has been marked"
                )
            if assessment.type is AssessmentType.POST and not registration.attended:
                raise InvalidStateError("Cannot complete POST assessment: attendance not marked")

            completed = self._store.complete_assessment(assessment.id, metrics, self._clock())

        logger.info(
            "%s assessment %s completed for registration %s",
            completed.type.value,
            completed.id,
            completed.registration_id,
        )
        return completed

    def _owned_registration(
        self, registration_id: RegistrationId | str, identity: Identity
    ) -> Registration:
        registration_id = parse_id(RegistrationId, registration_id, "registration")
        registration = self._store.get_registration(registration_id)
        if registration is None:
            raise NotFoundError("Registration", registration_id)
        if not identity.is_admin and registration.subject_id != identity.subject_id:
            raise ForbiddenError("You can only view your own wellness assessments")
        return registration

    def list_by_registration(
        self, registration_id: RegistrationId | str, identity: Identity
    ) -> list[WellnessAssessment]:
        registration = self._owned_registration(registration_id, identity)
        return list(registration.assessments)

    def impact(self, registration_id: RegistrationId | str) -> WellnessImpact:
        registration_id = parse_id(RegistrationId, registration_id, "registration")
        registration = self._store.get_registration(registration_id)
        if registration is None:
            raise NotFoundError("Registration", registration_id)
        return calculate_impact(
            registration.assessment(AssessmentType.PRE),
            registration.assessment(AssessmentType.POST),
        )

    def impact_by_registration(
        self, registration_id: RegistrationId | str, identity: Identity
    ) -> ImpactReport:
        registration = self._owned_registration(registration_id, identity)
        pre = registration.assessment(AssessmentType.PRE)
        post = registration.assessment(AssessmentType.POST)
        return ImpactReport(
            pre_assessment=pre,
            post_assessment=post,
            impact=calculate_impact(pre, post),
        )
