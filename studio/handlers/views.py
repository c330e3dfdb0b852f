"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Build the caller Identity and pass it to services explicitly
- Call services for business logic
- Never contain business logic
- Domain errors are mapped to responses by handlers.errors
"""

from django.conf import settings
from django.core.cache import cache
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAdminUser, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from studio.domain import Identity, Role
from studio.handlers import serializers as s
from studio.signals import event_detail_key, event_list_key, invalidate_event
from studio.services import (
    AttendanceService,
    EventService,
    OccurrenceService,
    RegistrationService,
    WellnessService,
)
from studio.stores.django_store import DjangoStudioStore


def identity_of(request: Request) -> Identity:
    user = request.user
    return Identity(subject_id=user.pk, role=Role.ADMIN if user.is_staff else Role.USER)


def event_service() -> EventService:
    return EventService(
        DjangoStudioStore(), daily_fallback=settings.STUDIO_RECURRENCE_DAILY_FALLBACK
    )


def occurrence_service() -> OccurrenceService:
    return OccurrenceService(DjangoStudioStore())


def registration_service() -> RegistrationService:
    return RegistrationService(DjangoStudioStore())


def attendance_service() -> AttendanceService:
    return AttendanceService(DjangoStudioStore())


def wellness_service() -> WellnessService:
    return WellnessService(DjangoStudioStore())


def _is_true(value: str | None) -> bool:
    return (value or "").lower() in {"1", "true", "yes"}


# Events


class EventListView(APIView):
    """Handler for GET/POST /api/events"""

    def get_permissions(self):
        if self.request.method == "GET":
            return [AllowAny()]
        return [IsAdminUser()]

    def get(self, request: Request) -> Response:
        active_only = _is_true(request.query_params.get("active"))
        key = event_list_key(active_only)
        data = cache.get(key)
        if data is None:
            events = event_service().list_events(active_only=active_only)
            data = s.EventSerializer(events, many=True).data
            cache.set(key, data, settings.STUDIO_EVENT_CACHE_TIMEOUT)
        return Response(data)

    def post(self, request: Request) -> Response:
        payload = s.EventCreateSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        detail = event_service().create(payload.to_input(), identity_of(request).subject_id)
        return Response(s.EventDetailSerializer(detail).data, status=status.HTTP_201_CREATED)


class EventDetailView(APIView):
    """Handler for GET/PATCH/DELETE /api/events/{event_id}"""

    def get_permissions(self):
        if self.request.method == "GET":
            return [AllowAny()]
        return [IsAdminUser()]

    def get(self, request: Request, event_id: str) -> Response:
        if request.user.is_authenticated:
            detail = event_service().get(event_id, subject_id=request.user.pk)
            return Response(s.EventDetailSerializer(detail).data)

        # Only the event itself is cached; bookable occurrences depend on the current time.
        key = event_detail_key(event_id)
        event_data = cache.get(key)
        if event_data is None:
            event_data = s.EventSerializer(event_service().get_event(event_id)).data
            cache.set(key, event_data, settings.STUDIO_EVENT_CACHE_TIMEOUT)
        occurrences = occurrence_service().list_by_event(event_id, available_only=True)
        return Response(
            {
                "event": event_data,
                "occurrences": s.OccurrenceSerializer(occurrences, many=True).data,
                "registered_occurrence_ids": [],
                "is_registered": False,
            }
        )

    def patch(self, request: Request, event_id: str) -> Response:
        payload = s.EventUpdateSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        changes, regenerate = payload.to_changes()
        event, regeneration = event_service().update(event_id, changes, regenerate)
        invalidate_event(event.id)
        body = {"event": s.EventSerializer(event).data, "regeneration": None}
        if regeneration is not None:
            body["regeneration"] = s.RegenerationResultSerializer(regeneration).data
        return Response(body)

    def delete(self, request: Request, event_id: str) -> Response:
        event_service().delete(event_id)
        invalidate_event(event_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class EventOccurrenceListView(APIView):
    """Handler for GET /api/events/{event_id}/occurrences[?available=true]"""

    permission_classes = [AllowAny]

    def get(self, request: Request, event_id: str) -> Response:
        occurrences = occurrence_service().list_by_event(
            event_id, available_only=_is_true(request.query_params.get("available"))
        )
        return Response(s.OccurrenceSerializer(occurrences, many=True).data)


class EventAvailabilityView(APIView):
    """Handler for GET /api/events/{event_id}/availability"""

    permission_classes = [AllowAny]

    def get(self, request: Request, event_id: str) -> Response:
        availability = registration_service().event_availability(event_id)
        return Response(s.AvailabilitySerializer(availability).data)


class EventRegistrationListView(APIView):
    """Handler for GET /api/events/{event_id}/registrations"""

    permission_classes = [IsAdminUser]

    def get(self, request: Request, event_id: str) -> Response:
        registrations = registration_service().list_by_event(event_id)
        return Response(s.RegistrationSerializer(registrations, many=True).data)


class EventAttendanceListView(APIView):
    """Handler for GET /api/events/{event_id}/attendance"""

    permission_classes = [IsAdminUser]

    def get(self, request: Request, event_id: str) -> Response:
        registrations = attendance_service().list_by_event(event_id)
        return Response(s.RegistrationSerializer(registrations, many=True).data)


class EventAttendanceStatsView(APIView):
    """Handler for GET /api/events/{event_id}/attendance/stats"""

    permission_classes = [IsAdminUser]

    def get(self, request: Request, event_id: str) -> Response:
        return Response(s.AttendanceStatsSerializer(attendance_service().stats(event_id)).data)


# Occurrences


class OccurrenceDetailView(APIView):
    """Handler for GET /api/occurrences/{occurrence_id}"""

    permission_classes = [AllowAny]

    def get(self, request: Request, occurrence_id: str) -> Response:
        return Response(s.OccurrenceSerializer(occurrence_service().get(occurrence_id)).data)


class OccurrenceAvailabilityView(APIView):
    """Handler for GET /api/occurrences/{occurrence_id}/availability"""

    permission_classes = [AllowAny]

    def get(self, request: Request, occurrence_id: str) -> Response:
        availability = registration_service().occurrence_availability(occurrence_id)
        return Response(s.AvailabilitySerializer(availability).data)


class OccurrenceDeactivateView(APIView):
    """Handler for POST /api/occurrences/{occurrence_id}/deactivate"""

    permission_classes = [IsAdminUser]

    def post(self, request: Request, occurrence_id: str) -> Response:
        occurrence = occurrence_service().deactivate(occurrence_id)
        return Response(s.OccurrenceSerializer(occurrence).data)


class OccurrenceRegistrationListView(APIView):
    """Handler for GET /api/occurrences/{occurrence_id}/registrations"""

    permission_classes = [IsAdminUser]

    def get(self, request: Request, occurrence_id: str) -> Response:
        registrations = registration_service().list_by_occurrence(occurrence_id)
        return Response(s.RegistrationSerializer(registrations, many=True).data)


# Registrations


class RegistrationListView(APIView):
    """Handler for POST /api/registrations"""

    permission_classes = [IsAuthenticated]

    def post(self, request: Request) -> Response:
        payload = s.RegistrationCreateSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        registration = registration_service().create(
            identity_of(request).subject_id,
            str(payload.validated_data["event_id"]),
            str(payload.validated_data["occurrence_id"]),
        )
        return Response(s.RegistrationSerializer(registration).data, status=status.HTTP_201_CREATED)


class MyRegistrationListView(APIView):
    """Handler for GET /api/registrations/mine"""

    permission_classes = [IsAuthenticated]

    def get(self, request: Request) -> Response:
        registrations = registration_service().list_mine(identity_of(request).subject_id)
        return Response(s.RegistrationSerializer(registrations, many=True).data)


class RegistrationDetailView(APIView):
    """Handler for GET/DELETE /api/registrations/{registration_id}"""

    permission_classes = [IsAuthenticated]

    def get(self, request: Request, registration_id: str) -> Response:
        registration = registration_service().get(registration_id, identity_of(request))
        return Response(s.RegistrationSerializer(registration).data)

    def delete(self, request: Request, registration_id: str) -> Response:
        registration_service().cancel(registration_id, identity_of(request).subject_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class RegistrationByCodeView(APIView):
    """Handler for GET /api/registrations/code/{code}"""

    permission_classes = [IsAdminUser]

    def get(self, request: Request, code: str) -> Response:
        return Response(s.RegistrationSerializer(registration_service().get_by_code(code)).data)


# Attendance


class MarkAttendanceView(APIView):
    """Handler for POST /api/attendance"""

    permission_classes = [IsAdminUser]

    def post(self, request: Request) -> Response:
        payload = s.MarkAttendanceSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        registration = attendance_service().mark(
            payload.to_lookup(), identity_of(request).subject_id
        )
        return Response(s.RegistrationSerializer(registration).data)


# Wellness


class PendingAssessmentListView(APIView):
    """Handler for GET /api/wellness/pending"""

    permission_classes = [IsAuthenticated]

    def get(self, request: Request) -> Response:
        assessments = wellness_service().list_pending(identity_of(request).subject_id)
        return Response(s.AssessmentSerializer(assessments, many=True).data)


class CompletedAssessmentListView(APIView):
    """Handler for GET /api/wellness/completed"""

    permission_classes = [IsAuthenticated]

    def get(self, request: Request) -> Response:
        assessments = wellness_service().list_completed(identity_of(request).subject_id)
        return Response(s.AssessmentSerializer(assessments, many=True).data)


class AssessmentDetailView(APIView):
    """Handler for GET /api/wellness/{assessment_id}"""

    permission_classes = [IsAuthenticated]

    def get(self, request: Request, assessment_id: str) -> Response:
        return Response(s.AssessmentSerializer(wellness_service().get(assessment_id)).data)


class CompleteAssessmentView(APIView):
    """Handler for POST /api/wellness/{assessment_id}/complete"""

    permission_classes = [IsAuthenticated]

    def post(self, request: Request, assessment_id: str) -> Response:
        payload = s.CompleteAssessmentSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        assessment = wellness_service().complete(
            assessment_id, identity_of(request).subject_id, **payload.validated_data
        )
        return Response(s.AssessmentSerializer(assessment).data)


class RegistrationAssessmentListView(APIView):
    """Handler for GET /api/registrations/{registration_id}/wellness"""

    permission_classes = [IsAuthenticated]

    def get(self, request: Request, registration_id: str) -> Response:
        assessments = wellness_service().list_by_registration(
            registration_id, identity_of(request)
        )
        return Response(s.AssessmentSerializer(assessments, many=True).data)


class RegistrationImpactView(APIView):
    """Handler for GET /api/registrations/{registration_id}/impact"""

    permission_classes = [IsAuthenticated]

    def get(self, request: Request, registration_id: str) -> Response:
        report = wellness_service().impact_by_registration(registration_id, identity_of(request))
        return Response(s.ImpactReportSerializer(report).data)
