"""Integration tests for the HTTP API.

These run the DRF views against the Django ORM store.
Run with: pytest tests/test_event_catalog.py -v
"""

from datetime import timedelta

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from studio.models import Event, Occurrence, WellnessAssessment


def upcoming(days: int) -> str:
    return (timezone.now().date() + timedelta(days=days)).isoformat()


@pytest.fixture
def event_payload(db_category):
    return {
        "name": "Sunrise Pilates",
        "description": "Mat class",
        "start_date": upcoming(1),
        "end_date": upcoming(14),
        "time_of_day": "07:30",
        "capacity": 2,
        "category_id": str(db_category.pk),
        "recurrence_type": "INTERVAL",
        "recurrence_pattern": {"interval_days": 7},
    }


@pytest.fixture
def created_event(api_client: APIClient, staff, event_payload):
    api_client.force_authenticate(staff)
    response = api_client.post("/api/events", event_payload, format="json")
    api_client.force_authenticate(None)
    assert response.status_code == 201, response.data
    return response.data


@pytest.mark.django_db
class TestEventList:
    """Tests for GET/POST /api/events"""

    def test_list_events_empty_catalog(self, api_client: APIClient):
        response = api_client.get("/api/events")
        assert response.status_code == 200
        assert response.data == []

    def test_create_event_requires_staff(self, api_client: APIClient, member, event_payload):
        api_client.force_authenticate(member)
        response = api_client.post("/api/events", event_payload, format="json")
        assert response.status_code == 403

    def test_create_event_generates_occurrences(self, created_event):
        assert created_event["event"]["recurrence_type"] == "INTERVAL"
        assert created_event["event"]["recurrence_pattern"] == {"weekdays": None, "interval_days": 7}
        assert len(created_event["occurrences"]) == 2

    def test_create_event_validation_error(self, api_client: APIClient, staff, event_payload):
        api_client.force_authenticate(staff)
        event_payload["time_of_day"] = "7pm"
        response = api_client.post("/api/events", event_payload, format="json")
        assert response.status_code == 400
        assert response.data["code"] == "VALIDATION"

    def test_list_events_returns_created(self, api_client: APIClient, created_event):
        response = api_client.get("/api/events")
        assert [item["id"] for item in response.data] == [created_event["event"]["id"]]

    def test_list_events_cached_response(self, api_client: APIClient, created_event):
        """The second read is served from cache even if rows change underneath."""
        api_client.get("/api/events")
        Event.objects.filter(pk=created_event["event"]["id"]).update(name="Renamed")
        response = api_client.get("/api/events")
        assert response.data[0]["name"] == "Sunrise Pilates"


@pytest.mark.django_db
class TestEventDetail:
    """Tests for GET/PATCH/DELETE /api/events/{id}"""

    def test_get_event_returns_details(self, api_client: APIClient, created_event):
        response = api_client.get(f"/api/events/{created_event['event']['id']}")
        assert response.status_code == 200
        assert response.data["event"]["name"] == "Sunrise Pilates"
        assert len(response.data["occurrences"]) == 2
        assert response.data["is_registered"] is False

    def test_get_event_not_found(self, api_client: APIClient):
        response = api_client.get("/api/events/7d8f4a2e-0000-4000-8000-000000000000")
        assert response.status_code == 404
        assert response.data["code"] == "NOT_FOUND"

    def test_get_event_invalid_id_format(self, api_client: APIClient):
        response = api_client.get("/api/events/not-a-uuid")
        assert response.status_code == 400
        assert response.data["message"] == "Invalid event ID format"

    def test_patch_with_regeneration(self, api_client: APIClient, staff, created_event):
        api_client.force_authenticate(staff)
        response = api_client.patch(
            f"/api/events/{created_event['event']['id']}",
            {"recurrence_pattern": {"interval_days": 1}, "regenerate_instances": True},
            format="json",
        )
        assert response.status_code == 200
        assert response.data["regeneration"] == {"deleted": 2, "preserved": 0, "created": 14}

    def test_patch_invalidates_cached_detail(self, api_client: APIClient, staff, created_event):
        event_id = created_event["event"]["id"]
        api_client.get(f"/api/events/{event_id}")
        api_client.force_authenticate(staff)
        api_client.patch(f"/api/events/{event_id}", {"name": "Noon Pilates"}, format="json")
        api_client.force_authenticate(None)
        response = api_client.get(f"/api/events/{event_id}")
        assert response.data["event"]["name"] == "Noon Pilates"

    def test_cached_detail_drops_started_occurrences(
        self, api_client: APIClient, created_event
    ):
        """The cached event is reused but bookable occurrences reflect the current time."""
        event_id = created_event["event"]["id"]
        first_id = created_event["occurrences"][0]["id"]
        assert len(api_client.get(f"/api/events/{event_id}").data["occurrences"]) == 2

        # Queryset updates bypass the invalidation signals.
        Occurrence.objects.filter(pk=first_id).update(
            date_time=timezone.now() - timedelta(hours=1)
        )
        Event.objects.filter(pk=event_id).update(name="Renamed")

        response = api_client.get(f"/api/events/{event_id}")
        assert response.data["event"]["name"] == "Sunrise Pilates"
        assert [occ["id"] for occ in response.data["occurrences"]] == [
            created_event["occurrences"][1]["id"]
        ]

    def test_delete_clears_cached_detail(self, api_client: APIClient, staff, created_event):
        event_id = created_event["event"]["id"]
        api_client.get(f"/api/events/{event_id}")
        api_client.force_authenticate(staff)
        api_client.delete(f"/api/events/{event_id}")
        api_client.force_authenticate(None)
        assert api_client.get(f"/api/events/{event_id}").status_code == 404

    def test_delete_is_soft(self, api_client: APIClient, staff, created_event):
        event_id = created_event["event"]["id"]
        api_client.force_authenticate(staff)
        assert api_client.delete(f"/api/events/{event_id}").status_code == 204
        assert api_client.get(f"/api/events/{event_id}").status_code == 404
        assert Event.objects.get(pk=event_id).is_deleted


@pytest.mark.django_db
class TestRegistrationWorkflow:
    """Register, complete PRE, check in, complete POST, read impact."""

    def test_full_workflow(self, api_client: APIClient, member, staff, created_event):
        event_id = created_event["event"]["id"]
        occurrence_id = created_event["occurrences"][0]["id"]

        api_client.force_authenticate(member)
        response = api_client.post(
            "/api/registrations",
            {"event_id": event_id, "occurrence_id": occurrence_id},
            format="json",
        )
        assert response.status_code == 201, response.data
        registration = response.data
        pre_id = registration["assessments"][0]["id"]
        assert registration["assessments"][0]["type"] == "PRE"

        api_client.force_authenticate(staff)
        response = api_client.post("/api/attendance", {"code": registration["code"]}, format="json")
        assert response.status_code == 400
        assert response.data["message"] == "PRE evaluation not completed"

        api_client.force_authenticate(member)
        response = api_client.post(
            f"/api/wellness/{pre_id}/complete",
            {"sleep_quality": 4, "stress_level": 8, "mood": 5},
            format="json",
        )
        assert response.status_code == 200
        assert response.data["status"] == "COMPLETED"

        api_client.force_authenticate(staff)
        response = api_client.post(
            "/api/attendance",
            {"email": "member@example.com", "event_id": event_id},
            format="json",
        )
        assert response.status_code == 200
        assert response.data["attendance"]["attended"] is True
        post = next(a for a in response.data["assessments"] if a["type"] == "POST")

        response = api_client.post("/api/attendance", {"code": registration["code"]}, format="json")
        assert response.status_code == 409

        api_client.force_authenticate(member)
        response = api_client.post(
            f"/api/wellness/{post['id']}/complete",
            {"sleep_quality": 6, "stress_level": 5, "mood": 7},
            format="json",
        )
        assert response.status_code == 200

        response = api_client.get(f"/api/registrations/{registration['id']}/impact")
        assert response.status_code == 200
        assert response.data["impact"] == {
            "sleep_quality_change": 2,
            "stress_level_change": 3,
            "mood_change": 2,
            "overall_impact": 2.33,
        }
        assert WellnessAssessment.objects.filter(status="COMPLETED").count() == 2

    def test_capacity_and_duplicates(
        self, api_client: APIClient, django_user_model, member, created_event
    ):
        event_id = created_event["event"]["id"]
        body = {"event_id": event_id, "occurrence_id": created_event["occurrences"][0]["id"]}

        api_client.force_authenticate(member)
        assert api_client.post("/api/registrations", body, format="json").status_code == 201
        response = api_client.post("/api/registrations", body, format="json")
        assert response.status_code == 409
        assert response.data["code"] == "CONFLICT"

        second = django_user_model.objects.create_user(username="second", password="pw")
        api_client.force_authenticate(second)
        assert api_client.post("/api/registrations", body, format="json").status_code == 201

        third = django_user_model.objects.create_user(username="third", password="pw")
        api_client.force_authenticate(third)
        response = api_client.post("/api/registrations", body, format="json")
        assert response.status_code == 409
        assert response.data["code"] == "CAPACITY_EXCEEDED"

        response = api_client.get(f"/api/events/{event_id}/availability")
        assert response.data == {"capacity": 4, "registered": 2, "available": 2}

    def test_cancel_own_registration(self, api_client: APIClient, member, staff, created_event):
        body = {
            "event_id": created_event["event"]["id"],
            "occurrence_id": created_event["occurrences"][0]["id"],
        }
        api_client.force_authenticate(member)
        registration_id = api_client.post("/api/registrations", body, format="json").data["id"]

        api_client.force_authenticate(staff)
        assert api_client.delete(f"/api/registrations/{registration_id}").status_code == 403

        api_client.force_authenticate(member)
        assert api_client.get("/api/registrations/mine").data[0]["id"] == registration_id
        assert api_client.delete(f"/api/registrations/{registration_id}").status_code == 204
        assert api_client.get("/api/registrations/mine").data == []

    def test_registration_requires_authentication(self, api_client: APIClient, created_event):
        body = {
            "event_id": created_event["event"]["id"],
            "occurrence_id": created_event["occurrences"][0]["id"],
        }
        response = api_client.post("/api/registrations", body, format="json")
        assert response.status_code in (401, 403)

    def test_attendance_body_must_pick_one_lookup(self, api_client: APIClient, staff):
        api_client.force_authenticate(staff)
        response = api_client.post(
            "/api/attendance", {"code": "abc", "email": "x@example.com"}, format="json"
        )
        assert response.status_code == 400
