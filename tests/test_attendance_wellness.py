"""Unit tests for the attendance and wellness workflow.

A registration starts with a pending PRE assessment. Attendance can only be
marked once PRE is completed, and marking it opens the POST assessment.
Run with: pytest tests/test_attendance_wellness.py -v
"""

from datetime import datetime, timezone

import pytest

from studio.domain import AssessmentStatus, AssessmentType, Identity, Role, WellnessAssessment
from studio.domain.errors import (
    ConflictError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from studio.domain.lookups import ByCode, ByEmail, ByRegistrationId
from studio.services import calculate_impact

CALM = {"sleep_quality": 5, "stress_level": 7, "mood": 4}
BETTER = {"sleep_quality": 7, "stress_level": 3, "mood": 8}


@pytest.fixture
def registration(registration_service, weekly_event, first_occurrence):
    return registration_service.create(1, weekly_event.event.id, first_occurrence.id)


@pytest.fixture
def pre_completed(registration, wellness_service):
    wellness_service.complete(registration.assessment(AssessmentType.PRE).id, 1, **CALM)
    return registration


class TestMarkAttendance:
    """Tests for AttendanceService.mark."""

    def test_requires_completed_pre(self, attendance_service, registration):
        with pytest.raises(InvalidStateError) as info:
            attendance_service.mark(ByRegistrationId(str(registration.id)), operator_id=99)
        assert info.value.message == "PRE evaluation not completed"

    def test_marks_and_opens_post(self, attendance_service, pre_completed, clock):
        marked = attendance_service.mark(ByRegistrationId(str(pre_completed.id)), operator_id=99)

        assert marked.attended
        assert marked.attendance.checked_by == 99
        assert marked.attendance.checked_at == clock()
        post = marked.assessment(AssessmentType.POST)
        assert post is not None
        assert post.status is AssessmentStatus.PENDING

    def test_second_mark_conflicts(self, attendance_service, pre_completed, store):
        attendance_service.mark(ByCode(pre_completed.code), operator_id=99)
        with pytest.raises(ConflictError):
            attendance_service.mark(ByCode(pre_completed.code), operator_id=99)
        assessments = store.list_assessments(registration_id=pre_completed.id)
        assert [a.type for a in assessments] == [AssessmentType.PRE, AssessmentType.POST]

    def test_mark_by_email(self, attendance_service, pre_completed, weekly_event):
        marked = attendance_service.mark(
            ByEmail(email="ANA@example.com", event_id=str(weekly_event.event.id)), operator_id=99
        )
        assert marked.id == pre_completed.id

    def test_unknown_code_not_found(self, attendance_service):
        with pytest.raises(NotFoundError):
            attendance_service.mark(ByCode("nope"), operator_id=99)

    def test_email_without_registration_not_found(self, attendance_service, weekly_event):
        with pytest.raises(NotFoundError):
            attendance_service.mark(
                ByEmail(email="ben@example.com", event_id=str(weekly_event.event.id)),
                operator_id=99,
            )

    def test_unsupported_lookup(self, attendance_service):
        with pytest.raises(TypeError):
            attendance_service.resolve("registration-id")


class TestResolveByEmail:
    """Email lookup picks the unattended registration closest to now."""

    def test_picks_closest_unattended(
        self, attendance_service, registration_service, weekly_event, clock
    ):
        occurrences = weekly_event.occurrences
        for occurrence in occurrences[:3]:
            registration_service.create(1, weekly_event.event.id, occurrence.id)
        clock.now = datetime(2024, 1, 7, 12, tzinfo=timezone.utc)

        found = attendance_service.resolve(
            ByEmail(email="ana@example.com", event_id=str(weekly_event.event.id))
        )

        assert found.occurrence_id == occurrences[2].id

    def test_skips_attended(
        self, attendance_service, registration_service, store, weekly_event, clock
    ):
        occurrences = weekly_event.occurrences
        first = registration_service.create(1, weekly_event.event.id, occurrences[0].id)
        registration_service.create(1, weekly_event.event.id, occurrences[3].id)
        store.mark_attended(first.id, 99, clock())

        found = attendance_service.resolve(
            ByEmail(email="ana@example.com", event_id=str(weekly_event.event.id))
        )

        assert found.occurrence_id == occurrences[3].id


class TestAttendanceReports:
    def test_stats(
        self, attendance_service, registration_service, wellness_service, weekly_event, pre_completed
    ):
        registration_service.create(2, weekly_event.event.id, pre_completed.occurrence_id)
        marked = attendance_service.mark(ByRegistrationId(str(pre_completed.id)), operator_id=99)
        wellness_service.complete(marked.assessment(AssessmentType.POST).id, 1, **BETTER)

        stats = attendance_service.stats(weekly_event.event.id)

        assert (stats.total, stats.attended, stats.pending) == (2, 1, 1)
        assert (stats.pre_completed, stats.post_completed) == (1, 1)
        assert len(attendance_service.list_by_event(weekly_event.event.id)) == 2


class TestCompleteAssessment:
    """Tests for WellnessService.complete."""

    def test_complete_pre(self, wellness_service, registration, clock):
        completed = wellness_service.complete(
            registration.assessment(AssessmentType.PRE).id, 1, **CALM
        )
        assert completed.status is AssessmentStatus.COMPLETED
        assert (completed.sleep_quality, completed.stress_level, completed.mood) == (5, 7, 4)
        assert completed.completed_at == clock()

    def test_complete_twice_rejected(self, wellness_service, pre_completed):
        with pytest.raises(InvalidStateError):
            wellness_service.complete(pre_completed.assessment(AssessmentType.PRE).id, 1, **CALM)

    def test_only_owner_may_complete(self, wellness_service, registration):
        with pytest.raises(ForbiddenError):
            wellness_service.complete(registration.assessment(AssessmentType.PRE).id, 2, **CALM)

    @pytest.mark.parametrize("scores", [{"mood": 11}, {"stress_level": -1}, {"sleep_quality": 2.5}])
    def test_invalid_scores_rejected(self, wellness_service, registration, scores):
        with pytest.raises(ValidationError):
            wellness_service.complete(
                registration.assessment(AssessmentType.PRE).id, 1, **{**CALM, **scores}
            )

    def test_pre_after_attendance_rejected(self, wellness_service, registration, store, clock):
        store.mark_attended(registration.id, 99, clock())
        with pytest.raises(InvalidStateError):
            wellness_service.complete(registration.assessment(AssessmentType.PRE).id, 1, **CALM)

    def test_post_before_attendance_rejected(self, wellness_service, pre_completed, store):
        post = store.create_assessment(pre_completed.id, AssessmentType.POST)
        with pytest.raises(InvalidStateError) as info:
            wellness_service.complete(post.id, 1, **BETTER)
        assert info.value.message == "Cannot complete POST assessment: attendance not marked"

    def test_unknown_assessment(self, wellness_service):
        with pytest.raises(NotFoundError):
            wellness_service.complete("0b5f6a1c-0000-4000-8000-000000000000", 1, **CALM)

    def test_pending_and_completed_lists(self, wellness_service, registration, pre_completed):
        assert wellness_service.list_pending(1) == []
        assert [a.type for a in wellness_service.list_completed(1)] == [AssessmentType.PRE]
        assert wellness_service.list_pending(2) == []


class TestImpact:
    """Tests for the PRE/POST comparison."""

    def test_full_workflow_impact(
        self, wellness_service, attendance_service, pre_completed
    ):
        marked = attendance_service.mark(ByRegistrationId(str(pre_completed.id)), operator_id=99)
        wellness_service.complete(marked.assessment(AssessmentType.POST).id, 1, **BETTER)

        report = wellness_service.impact_by_registration(pre_completed.id, Identity(1))

        assert report.pre_assessment.type is AssessmentType.PRE
        assert report.post_assessment.type is AssessmentType.POST
        impact = report.impact
        assert (impact.sleep_quality_change, impact.stress_level_change, impact.mood_change) == (
            2,
            4,
            4,
        )
        assert impact.overall_impact == 3.33

    def test_impact_is_empty_until_post_completed(
        self, wellness_service, attendance_service, pre_completed
    ):
        attendance_service.mark(ByRegistrationId(str(pre_completed.id)), operator_id=99)
        impact = wellness_service.impact(pre_completed.id)
        assert impact.sleep_quality_change is None
        assert impact.stress_level_change is None
        assert impact.mood_change is None
        assert impact.overall_impact is None

    def test_impact_of_other_subject_forbidden(self, wellness_service, registration):
        with pytest.raises(ForbiddenError):
            wellness_service.impact_by_registration(registration.id, Identity(2))
        admin = Identity(subject_id=2, role=Role.ADMIN)
        assert wellness_service.list_by_registration(registration.id, admin)

    def test_calculate_impact_rounds_to_two_places(self):
        pre = WellnessAssessment(
            id=None,
            registration_id=None,
            type=AssessmentType.PRE,
            status=AssessmentStatus.COMPLETED,
            sleep_quality=5,
            stress_level=5,
            mood=5,
        )
        post = WellnessAssessment(
            id=None,
            registration_id=None,
            type=AssessmentType.POST,
            status=AssessmentStatus.COMPLETED,
            sleep_quality=6,
            stress_level=5,
            mood=5,
        )
        assert calculate_impact(pre, post).overall_impact == 0.33
        assert calculate_impact(pre, None).overall_impact is None
