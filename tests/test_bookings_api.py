"""API tests for facilities, bookings, events and the calendar"""
import pytest

from tests.conftest import add_membership


@pytest.fixture
def facility(client, paid_club):
    response = client.post(f"/api/clubs/{paid_club['id']}/facilities", json={
        "name": "Halle 1", "type": "hall", "max_concurrent_bookings": 1,
    })
    assert response.status_code == 201
    return response.json()


def booking_payload(facility_id, start, end, **overrides):
    payload = {
        "title": "Training U12",
        "facility_id": facility_id,
        "start_time": start,
        "end_time": end,
        "type": "training",
    }
    payload.update(overrides)
    return payload


class TestFacilities:
    def test_crud(self, client, paid_club):
        club_id = paid_club["id"]
        created = client.post(f"/api/clubs/{club_id}/facilities", json={"name": "Platz A"}).json()
        assert created["max_concurrent_bookings"] == 1
        assert created["status"] == "available"

        response = client.put(f"/api/clubs/{club_id}/facilities/{created['id']}", json={"status": "maintenance"})
        assert response.json()["status"] == "maintenance"

        listed = client.get(f"/api/clubs/{club_id}/facilities", params={"status": "maintenance"}).json()
        assert [f["id"] for f in listed] == [created["id"]]

        assert client.delete(f"/api/clubs/{club_id}/facilities/{created['id']}").status_code == 204
        assert client.get(f"/api/clubs/{club_id}/facilities/{created['id']}").status_code == 404

    def test_member_cannot_create(self, client, paid_club, db, roles, current_user):
        add_membership(db, roles, paid_club["id"], "user-2", role="member")
        current_user["id"] = "user-2"
        response = client.post(f"/api/clubs/{paid_club['id']}/facilities", json={"name": "Platz B"})
        assert response.status_code == 403
        assert "facilities:create" in response.json()["detail"]

    def test_outsider_is_rejected(self, client, paid_club, current_user):
        current_user["id"] = "stranger"
        response = client.get(f"/api/clubs/{paid_club['id']}/facilities")
        assert response.status_code == 403

    def test_delete_cancels_bookings(self, client, paid_club, facility, db):
        club_id = paid_club["id"]
        client.post(f"/api/clubs/{club_id}/bookings", json=booking_payload(
            facility["id"], "2026-05-01T10:00:00Z", "2026-05-01T12:00:00Z"
        ))
        client.delete(f"/api/clubs/{club_id}/facilities/{facility['id']}")
        assert [b["status"] for b in db.rows("bookings")] == ["cancelled"]


class TestBookings:
    def test_create_single(self, client, paid_club, facility):
        response = client.post(f"/api/clubs/{paid_club['id']}/bookings", json=booking_payload(
            facility["id"], "2026-05-01T10:00:00Z", "2026-05-01T12:00:00Z"
        ))
        assert response.status_code == 201
        body = response.json()
        assert body["count"] == 1
        assert body["main_booking"]["title"] == "Training U12"

    def test_conflict_is_rejected(self, client, paid_club, facility):
        url = f"/api/clubs/{paid_club['id']}/bookings"
        client.post(url, json=booking_payload(facility["id"], "2026-05-01T10:00:00Z", "2026-05-01T12:00:00Z"))
        response = client.post(url, json=booking_payload(
            facility["id"], "2026-05-01T11:00:00Z", "2026-05-01T13:00:00Z"
        ))
        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["current_bookings"] == 1
        assert detail["max_concurrent"] == 1

    def test_back_to_back_is_allowed(self, client, paid_club, facility):
        url = f"/api/clubs/{paid_club['id']}/bookings"
        client.post(url, json=booking_payload(facility["id"], "2026-05-01T10:00:00Z", "2026-05-01T12:00:00Z"))
        response = client.post(url, json=booking_payload(
            facility["id"], "2026-05-01T12:00:00Z", "2026-05-01T14:00:00Z"
        ))
        assert response.status_code == 201

    def test_end_before_start(self, client, paid_club, facility):
        response = client.post(f"/api/clubs/{paid_club['id']}/bookings", json=booking_payload(
            facility["id"], "2026-05-01T12:00:00Z", "2026-05-01T10:00:00Z"
        ))
        assert response.status_code == 422

    def test_unknown_facility(self, client, paid_club):
        response = client.post(f"/api/clubs/{paid_club['id']}/bookings", json=booking_payload(
            999, "2026-05-01T10:00:00Z", "2026-05-01T12:00:00Z"
        ))
        assert response.status_code == 404

    def test_free_plan_cannot_book(self, client, club, db):
        facility = db.seed("facilities", {"club_id": club["id"], "name": "Halle", "max_concurrent_bookings": 1})[0]
        response = client.post(f"/api/clubs/{club['id']}/bookings", json=booking_payload(
            facility["id"], "2026-05-01T10:00:00Z", "2026-05-01T12:00:00Z"
        ))
        assert response.status_code == 403
        assert response.json()["detail"]["feature"] == "facilityBooking"

    def test_recurring_skips_conflicts(self, client, paid_club, facility, db):
        url = f"/api/clubs/{paid_club['id']}/bookings"
        client.post(url, json=booking_payload(facility["id"], "2026-05-08T18:00:00Z", "2026-05-08T19:00:00Z"))
        response = client.post(url, json=booking_payload(
            facility["id"], "2026-05-01T18:00:00Z", "2026-05-01T20:00:00Z",
            recurring=True, recurring_pattern="weekly", recurring_until="2026-05-22",
        ))
        assert response.status_code == 201
        body = response.json()
        assert body["count"] == 3
        assert body["skipped"] == 1
        assert [b["start_time"][:10] for b in body["bookings"]] == ["2026-05-01", "2026-05-15", "2026-05-22"]
        assert [r["recurring"] for r in db.rows("bookings")] == [False, True, False, False]
        assert "recurring_pattern" not in db.rows("bookings")[2]

    def test_recurring_needs_pattern(self, client, paid_club, facility):
        response = client.post(f"/api/clubs/{paid_club['id']}/bookings", json=booking_payload(
            facility["id"], "2026-05-01T18:00:00Z", "2026-05-01T20:00:00Z", recurring=True,
        ))
        assert response.status_code == 422

    def test_check_availability(self, client, paid_club, facility):
        club_id = paid_club["id"]
        created = client.post(f"/api/clubs/{club_id}/bookings", json=booking_payload(
            facility["id"], "2026-05-01T10:00:00Z", "2026-05-01T12:00:00Z"
        )).json()["main_booking"]
        url = f"/api/clubs/{club_id}/bookings/check-availability"
        body = {"facility_id": facility["id"], "start_time": "2026-05-01T11:00:00Z", "end_time": "2026-05-01T11:30:00Z"}
        assert client.post(url, json=body).json()["available"] is False
        body["exclude_booking_id"] = created["id"]
        assert client.post(url, json=body).json()["available"] is True

    def test_update_rechecks_availability(self, client, paid_club, facility):
        url = f"/api/clubs/{paid_club['id']}/bookings"
        client.post(url, json=booking_payload(facility["id"], "2026-05-01T10:00:00Z", "2026-05-01T12:00:00Z"))
        second = client.post(url, json=booking_payload(
            facility["id"], "2026-05-01T14:00:00Z", "2026-05-01T15:00:00Z"
        )).json()["main_booking"]

        response = client.patch(f"{url}/{second['id']}", json={"start_time": "2026-05-01T11:00:00Z"})
        assert response.status_code == 400

        response = client.patch(f"{url}/{second['id']}", json={"end_time": "2026-05-01T16:00:00Z"})
        assert response.status_code == 200
        assert response.json()["end_time"].startswith("2026-05-01T16:00")

    def test_reviving_cancelled_booking_rechecks_availability(self, client, paid_club, facility, db):
        url = f"/api/clubs/{paid_club['id']}/bookings"
        first = client.post(url, json=booking_payload(
            facility["id"], "2026-05-01T10:00:00Z", "2026-05-01T12:00:00Z"
        )).json()["main_booking"]
        assert client.patch(f"{url}/{first['id']}", json={"status": "cancelled"}).status_code == 200
        second = client.post(url, json=booking_payload(facility["id"], "2026-05-01T10:00:00Z", "2026-05-01T12:00:00Z"))
        assert second.status_code == 201

        response = client.patch(f"{url}/{first['id']}", json={"status": "confirmed"})
        assert response.status_code == 400
        assert [b["status"] for b in db.rows("bookings")] == ["cancelled", "confirmed"]

        client.delete(f"{url}/{second.json()['main_booking']['id']}")
        assert client.patch(f"{url}/{first['id']}", json={"status": "confirmed"}).status_code == 200

    def test_delete(self, client, paid_club, facility):
        url = f"/api/clubs/{paid_club['id']}/bookings"
        created = client.post(url, json=booking_payload(
            facility["id"], "2026-05-01T10:00:00Z", "2026-05-01T12:00:00Z"
        )).json()["main_booking"]
        assert client.delete(f"{url}/{created['id']}").status_code == 204
        assert client.get(f"{url}/{created['id']}").status_code == 404


class TestEvents:
    def _event(self, client, club_id, **overrides):
        payload = {"title": "Sommerfest", "start_time": "2026-07-01T15:00:00Z", "end_time": "2026-07-01T22:00:00Z"}
        payload.update(overrides)
        return client.post(f"/api/clubs/{club_id}/events", json=payload)

    def test_create_has_no_facility(self, client, club):
        response = self._event(client, club["id"])
        assert response.status_code == 201
        assert response.json()["facility_id"] is None
        assert response.json()["description"] == ""

    def test_events_exclude_bookings(self, client, club, db):
        db.seed("bookings", {
            "club_id": club["id"], "facility_id": 1, "title": "Training", "type": "training",
            "start_time": "2026-07-02T10:00:00Z", "end_time": "2026-07-02T11:00:00Z", "status": "confirmed",
        })
        self._event(client, club["id"])
        events = client.get(f"/api/clubs/{club['id']}/events").json()
        assert [e["title"] for e in events] == ["Sommerfest"]
        calendar = client.get(f"/api/clubs/{club['id']}/calendar").json()
        assert [c["title"] for c in calendar] == ["Training", "Sommerfest"]

    def test_update_rejects_inverted_times(self, client, club):
        event = self._event(client, club["id"]).json()
        response = client.patch(
            f"/api/clubs/{club['id']}/events/{event['id']}", json={"end_time": "2026-07-01T10:00:00Z"}
        )
        assert response.status_code == 400

    def test_join(self, client, club, db, roles, current_user):
        event = self._event(client, club["id"]).json()
        add_membership(db, roles, club["id"], "user-2", role="member")
        current_user["id"] = "user-2"
        url = f"/api/clubs/{club['id']}/events/{event['id']}/join"
        response = client.post(url)
        assert response.status_code == 200
        assert response.json()["participants"] == ["user-2"]
        assert client.post(url).status_code == 400

    def test_member_cannot_create_event(self, client, club, db, roles, current_user):
        add_membership(db, roles, club["id"], "user-2", role="member")
        current_user["id"] = "user-2"
        assert self._event(client, club["id"]).status_code == 403
