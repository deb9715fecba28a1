"""
HTTP API tests: halls, bookings, approvals, admin and notifications.
"""
from datetime import date, time, timedelta
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from fastapi import status
from sqlalchemy import select

from hallbook.domain.availability import COULD_NOT_VERIFY
from hallbook.models import Notification
from hallbook.services.availability_service import availability_service
from hallbook.services.booking_service import booking_service

EVENT_DATE = date.today() + timedelta(days=7)


def _payload(hall_id, **overrides) -> dict:
    payload = {
        "hall_id": str(hall_id),
        "organizer_name": "IT Association",
        "institution_type": "Engineering",
        "event_name": "Cyber Security Awareness",
        "event_date": EVENT_DATE.isoformat(),
        "start_time": "10:00:00",
        "end_time": "11:30:00",
        "attendees_count": 120,
        "guest_lectures_count": 1,
        "guest_lecture_names": "Dr. Ravi Shankar",
        "required_mic": True,
    }
    payload.update(overrides)
    return payload


# =============================================================================
# TEST: Health Check
# =============================================================================
class TestHealthCheck:
    """Test health check endpoint."""

    @pytest.mark.asyncio
    async def test_health_check(self, client):
        response = await client.get("/health")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "healthy"
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert "X-Request-ID" in response.headers

    @pytest.mark.asyncio
    async def test_invalid_token(self, client):
        response = await client.get(
            "/api/v1/halls/", headers={"Authorization": "Bearer not-a-real-token"}
        )
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


# =============================================================================
# TEST: Halls
# =============================================================================
class TestHalls:
    """Test hall listing and availability endpoints."""

    @pytest.mark.asyncio
    async def test_list_halls(self, client, hall_h, hall_k, small_hall, faculty_it, auth_headers):
        response = await client.get("/api/v1/halls/", headers=auth_headers(faculty_it))

        assert response.status_code == status.HTTP_200_OK
        names = [h["name"] for h in response.json()]
        assert sorted(names) == ["Hall H", "Hall K", "Smart Room 1"]
        assert response.json()[0]["status_label"] == "Available"

    @pytest.mark.asyncio
    async def test_list_halls_filtered(self, client, hall_h, hall_k, small_hall, faculty_it, auth_headers):
        response = await client.get(
            "/api/v1/halls/",
            params={"block": "Main Block", "min_capacity": 100},
            headers=auth_headers(faculty_it),
        )

        assert [h["name"] for h in response.json()] == ["Hall H"]

    @pytest.mark.asyncio
    async def test_list_halls_by_type(self, client, hall_h, small_hall, faculty_it, auth_headers):
        response = await client.get(
            "/api/v1/halls/", params={"type": "Smart Classroom"}, headers=auth_headers(faculty_it)
        )

        assert [h["name"] for h in response.json()] == ["Smart Room 1"]

    @pytest.mark.asyncio
    async def test_unknown_block_rejected(self, client, faculty_it, auth_headers):
        headers = auth_headers(faculty_it)
        response = await client.get("/api/v1/halls/", params={"block": "North Block"}, headers=headers)
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    @pytest.mark.asyncio
    async def test_get_unknown_hall(self, client, faculty_it, auth_headers):
        headers = auth_headers(faculty_it)
        response = await client.get(f"/api/v1/halls/{uuid4()}", headers=headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_availability(self, client, hall_h, faculty_it, faculty_cse, auth_headers, make_booking):
        await make_booking(hall_h, faculty_cse, status="approved", event_name="Alumni Meet")
        url = f"/api/v1/halls/{hall_h.id}/availability"
        headers = auth_headers(faculty_it)

        free = await client.get(
            url,
            params={"event_date": EVENT_DATE.isoformat(), "start_time": "11:00", "end_time": "12:00"},
            headers=headers,
        )
        assert free.status_code == status.HTTP_200_OK
        assert free.json()["available"] is True
        assert free.json()["conflicting_booking"] is None

        busy = await client.get(
            url,
            params={"event_date": EVENT_DATE.isoformat(), "start_time": "10:30", "end_time": "10:45"},
            headers=headers,
        )
        data = busy.json()
        assert data["available"] is False
        assert data["conflicting_booking"]["event_name"] == "Alumni Meet"
        assert data["conflicting_booking"]["start_time"] == "10:00"

    @pytest.mark.asyncio
    async def test_occupancy(self, client, hall_h, hall_k, faculty_it, auth_headers):
        response = await client.get("/api/v1/halls/occupancy", headers=auth_headers(faculty_it))

        assert response.status_code == status.HTTP_200_OK
        assert len(response.json()) == 2
        assert all(entry["in_use"] is False for entry in response.json())


# =============================================================================
# TEST: Booking requests
# =============================================================================
class TestCreateBookingEndpoint:
    """Test POST /api/v1/bookings/."""

    @pytest.mark.asyncio
    async def test_create(self, client, db, hall_h, faculty_it, hod_it, auth_headers, mock_email_task):
        response = await client.post(
            "/api/v1/bookings/", json=_payload(hall_h.id), headers=auth_headers(faculty_it)
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["status"] == "pending_hod"
        assert data["department"] == "IT"
        assert data["hod_name"] == hod_it.name
        assert data["hall_id"] == str(hall_h.id)

        result = await db.execute(select(Notification).where(Notification.user_id == hod_it.id))
        assert len(result.scalars().all()) == 1
        mock_email_task.delay.assert_called_once()

    @pytest.mark.asyncio
    async def test_approver_cannot_create(self, client, hall_h, hod_it, auth_headers):
        hall_id = hall_h.id
        response = await client.post(
            "/api/v1/bookings/", json=_payload(hall_id), headers=auth_headers(hod_it)
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN

    @pytest.mark.asyncio
    async def test_over_capacity(self, client, small_hall, faculty_it, auth_headers):
        hall_id = small_hall.id
        response = await client.post(
            "/api/v1/bookings/", json=_payload(hall_id), headers=auth_headers(faculty_it)
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert "Maximum 30 attendees" in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_end_before_start(self, client, hall_h, faculty_it, auth_headers):
        hall_id = hall_h.id
        response = await client.post(
            "/api/v1/bookings/",
            json=_payload(hall_id, start_time="12:00:00", end_time="11:00:00"),
            headers=auth_headers(faculty_it),
        )
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    @pytest.mark.asyncio
    async def test_conflict(self, client, hall_h, faculty_it, faculty_cse, auth_headers, make_booking):
        await make_booking(hall_h, faculty_cse, event_name="Project Expo")
        hall_id = hall_h.id
        headers = auth_headers(faculty_it)

        response = await client.post("/api/v1/bookings/", json=_payload(hall_id), headers=headers)

        assert response.status_code == status.HTTP_409_CONFLICT
        detail = response.json()["detail"]
        assert detail["available"] is False
        assert "Project Expo" in detail["message"]
        assert detail["conflicting_booking"]["event_name"] == "Project Expo"

    @pytest.mark.asyncio
    async def test_unverifiable_slot_is_503(self, client, hall_h, faculty_it, auth_headers, monkeypatch):
        monkeypatch.setattr(
            availability_service,
            "_slot_holders",
            AsyncMock(side_effect=ConnectionRefusedError(111, "Connect call failed")),
        )
        hall_id = hall_h.id

        response = await client.post(
            "/api/v1/bookings/", json=_payload(hall_id), headers=auth_headers(faculty_it)
        )

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.json()["detail"] == COULD_NOT_VERIFY

    @pytest.mark.asyncio
    async def test_database_outage_is_503(
        self, client, hall_h, faculty_it, auth_headers, monkeypatch, mock_email_task
    ):
        monkeypatch.setattr(
            booking_service,
            "create_booking",
            AsyncMock(side_effect=ConnectionRefusedError(111, "Connect call failed")),
        )
        hall_id = hall_h.id

        response = await client.post(
            "/api/v1/bookings/", json=_payload(hall_id), headers=auth_headers(faculty_it)
        )

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        mock_email_task.delay.assert_not_called()


# =============================================================================
# TEST: Approval workflow
# =============================================================================
class TestApprovalWorkflow:
    """Test the approval chain end to end."""

    @pytest.mark.asyncio
    async def test_full_chain(self, client, hall_h, faculty_it, hod_it, principal, pro, auth_headers):
        created = await client.post(
            "/api/v1/bookings/", json=_payload(hall_h.id), headers=auth_headers(faculty_it)
        )
        booking_id = created.json()["id"]

        pending = await client.get("/api/v1/bookings/pending", headers=auth_headers(hod_it))
        assert [b["id"] for b in pending.json()] == [booking_id]

        hod_step = await client.post(
            f"/api/v1/bookings/{booking_id}/approve", headers=auth_headers(hod_it)
        )
        assert hod_step.status_code == status.HTTP_200_OK
        assert hod_step.json()["status"] == "pending_principal"

        final = await client.post(
            f"/api/v1/bookings/{booking_id}/approve", headers=auth_headers(principal)
        )
        assert final.json()["status"] == "approved"

        trail = await client.get(
            f"/api/v1/bookings/{booking_id}/approvals", headers=auth_headers(faculty_it)
        )
        assert [(a["action"], a["from_status"]) for a in trail.json()] == [
            ("approved", "pending_hod"),
            ("approved", "pending_principal"),
        ]

        pro_view = await client.get("/api/v1/bookings/", headers=auth_headers(pro))
        assert pro_view.json()["total"] == 1

    @pytest.mark.asyncio
    async def test_other_department_hod_forbidden(
        self, client, db, hall_h, faculty_it, hod_cse, auth_headers, make_booking
    ):
        booking = await make_booking(hall_h, faculty_it)
        booking_id = booking.id
        headers = auth_headers(hod_cse)

        response = await client.post(f"/api/v1/bookings/{booking_id}/approve", headers=headers)

        assert response.status_code == status.HTTP_403_FORBIDDEN
        await db.refresh(booking)
        assert booking.status == "pending_hod"

    @pytest.mark.asyncio
    async def test_reject_requires_reason(self, client, hall_h, faculty_it, hod_it, auth_headers, make_booking):
        booking = await make_booking(hall_h, faculty_it)
        booking_id = booking.id
        headers = auth_headers(hod_it)

        response = await client.post(
            f"/api/v1/bookings/{booking_id}/reject", json={"reason": "  "}, headers=headers
        )
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    @pytest.mark.asyncio
    async def test_reject_then_approve_is_conflict(
        self, client, hall_h, faculty_it, hod_it, auth_headers, make_booking
    ):
        booking = await make_booking(hall_h, faculty_it)
        booking_id = booking.id
        headers = auth_headers(hod_it)

        rejected = await client.post(
            f"/api/v1/bookings/{booking_id}/reject",
            json={"reason": "Department event already scheduled"},
            headers=headers,
        )
        assert rejected.json()["status"] == "rejected"
        assert rejected.json()["rejection_reason"] == "Department event already scheduled"

        again = await client.post(f"/api/v1/bookings/{booking_id}/approve", headers=headers)
        assert again.status_code == status.HTTP_409_CONFLICT

    @pytest.mark.asyncio
    async def test_faculty_cannot_see_others_booking(
        self, client, hall_h, faculty_it, faculty_cse, auth_headers, make_booking
    ):
        booking = await make_booking(hall_h, faculty_it)
        booking_id = booking.id
        headers = auth_headers(faculty_cse)

        response = await client.get(f"/api/v1/bookings/{booking_id}", headers=headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN

    @pytest.mark.asyncio
    async def test_chairman_dashboard(
        self, client, hall_h, hall_k, faculty_it, faculty_cse, chairman, auth_headers, make_booking
    ):
        booking = await make_booking(hall_h, faculty_it)
        await make_booking(hall_k, faculty_cse, status="approved")
        await make_booking(hall_h, faculty_cse, event_date=EVENT_DATE + timedelta(days=1))
        booking_id = booking.id
        headers = auth_headers(chairman)

        response = await client.get(
            "/api/v1/bookings/", params={"event_date": EVENT_DATE.isoformat()}, headers=headers
        )
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["total"] == 2
        assert {b["department"] for b in data["bookings"]} == {"IT", "CSE"}

        stats = await client.get("/api/v1/reports/statistics", headers=headers)
        assert stats.status_code == status.HTTP_200_OK

        approve = await client.post(f"/api/v1/bookings/{booking_id}/approve", headers=headers)
        assert approve.status_code == status.HTTP_403_FORBIDDEN


# =============================================================================
# TEST: Hall switch
# =============================================================================
class TestSwitchHallEndpoint:
    """Test hall reassignment endpoints."""

    @pytest.mark.asyncio
    async def test_available_halls_and_switch(
        self, client, hall_h, hall_k, small_hall, faculty_it, hod_it, auth_headers, make_booking
    ):
        booking = await make_booking(hall_h, faculty_it)

        candidates = await client.get(
            f"/api/v1/bookings/{booking.id}/available-halls", headers=auth_headers(hod_it)
        )
        assert [h["name"] for h in candidates.json()] == ["Hall K"]

        response = await client.post(
            f"/api/v1/bookings/{booking.id}/switch-hall",
            json={"new_hall_id": str(hall_k.id), "reason": "Sound system issue"},
            headers=auth_headers(hod_it),
        )
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["hall_id"] == str(hall_k.id)
        assert data["original_hall_id"] == str(hall_h.id)
        assert data["status"] == "pending_hod"

    @pytest.mark.asyncio
    async def test_faculty_cannot_switch(self, client, hall_h, hall_k, faculty_it, auth_headers, make_booking):
        booking = await make_booking(hall_h, faculty_it)
        url = f"/api/v1/bookings/{booking.id}/switch-hall"
        body = {"new_hall_id": str(hall_k.id), "reason": "Prefer K"}
        headers = auth_headers(faculty_it)

        response = await client.post(url, json=body, headers=headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN


# =============================================================================
# TEST: Admin
# =============================================================================
class TestAdminHallStatus:
    """Test PATCH /api/v1/admin/halls/{id}/status."""

    @pytest.mark.asyncio
    async def test_block_hall(self, client, hall_h, admin, auth_headers):
        response = await client.patch(
            f"/api/v1/admin/halls/{hall_h.id}/status",
            json={"action": "block", "note": "Reserved for exams"},
            headers=auth_headers(admin),
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["is_blocked"] is True
        assert data["status_label"] == "Blocked"
        assert data["status_note"] == "Reserved for exams"

    @pytest.mark.asyncio
    async def test_unknown_action_rejected(self, client, hall_h, admin, auth_headers):
        url = f"/api/v1/admin/halls/{hall_h.id}/status"
        headers = auth_headers(admin)

        response = await client.patch(url, json={"action": "demolish"}, headers=headers)
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    @pytest.mark.asyncio
    async def test_non_admin_forbidden(self, client, hall_h, principal, auth_headers):
        url = f"/api/v1/admin/halls/{hall_h.id}/status"
        headers = auth_headers(principal)

        response = await client.patch(url, json={"action": "block"}, headers=headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN


# =============================================================================
# TEST: Notifications
# =============================================================================
class TestNotifications:
    """Test the per-recipient notification feed."""

    @pytest.mark.asyncio
    async def test_feed_and_mark_read(self, client, hall_h, faculty_it, hod_it, auth_headers):
        await client.post(
            "/api/v1/bookings/", json=_payload(hall_h.id), headers=auth_headers(faculty_it)
        )

        feed = await client.get("/api/v1/notifications/", headers=auth_headers(hod_it))
        data = feed.json()
        assert data["total"] == 1
        assert data["unread_count"] == 1
        notification = data["notifications"][0]
        assert notification["notification_type"] == "new_booking"
        assert notification["data"]["status"] == "pending_hod"

        # Faculty feed is separate
        own = await client.get("/api/v1/notifications/", headers=auth_headers(faculty_it))
        assert own.json()["total"] == 0

        marked = await client.patch(
            f"/api/v1/notifications/{notification['id']}/read", headers=auth_headers(hod_it)
        )
        assert marked.status_code == status.HTTP_204_NO_CONTENT

        unread = await client.get(
            "/api/v1/notifications/", params={"unread_only": True}, headers=auth_headers(hod_it)
        )
        assert unread.json()["total"] == 0

    @pytest.mark.asyncio
    async def test_mark_all_read(self, client, hall_h, admin, faculty_it, auth_headers):
        await client.patch(
            f"/api/v1/admin/halls/{hall_h.id}/status",
            json={"action": "maintenance"},
            headers=auth_headers(admin),
        )

        response = await client.post("/api/v1/notifications/read-all", headers=auth_headers(faculty_it))
        assert response.status_code == status.HTTP_204_NO_CONTENT

        feed = await client.get("/api/v1/notifications/", headers=auth_headers(faculty_it))
        assert feed.json()["total"] == 1
        assert feed.json()["unread_count"] == 0

    @pytest.mark.asyncio
    async def test_feed_filtered_by_type(self, client, hall_h, admin, faculty_it, hod_it, auth_headers):
        await client.post(
            "/api/v1/bookings/", json=_payload(hall_h.id), headers=auth_headers(faculty_it)
        )
        await client.patch(
            f"/api/v1/admin/halls/{hall_h.id}/status",
            json={"action": "block"},
            headers=auth_headers(admin),
        )

        everything = await client.get("/api/v1/notifications/", headers=auth_headers(hod_it))
        assert everything.json()["total"] == 2

        hall_only = await client.get(
            "/api/v1/notifications/", params={"type": "hall_status"}, headers=auth_headers(hod_it)
        )
        assert hall_only.json()["total"] == 1
        assert hall_only.json()["notifications"][0]["notification_type"] == "hall_status"

    @pytest.mark.asyncio
    async def test_cannot_mark_someone_elses_notification(
        self, client, hall_h, faculty_it, hod_it, auth_headers
    ):
        await client.post(
            "/api/v1/bookings/", json=_payload(hall_h.id), headers=auth_headers(faculty_it)
        )
        feed = await client.get("/api/v1/notifications/", headers=auth_headers(hod_it))
        notification_id = feed.json()["notifications"][0]["id"]
        headers = auth_headers(faculty_it)

        response = await client.patch(f"/api/v1/notifications/{notification_id}/read", headers=headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND
