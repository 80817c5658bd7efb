"""
Tests for GET /services/{id}/available-slots.
"""

from automarket.models import Bookings

from conftest import next_date_for_weekday


def _book(seed, service, customer, day, start_time, status="PENDING", number="BK-T-001"):
    return seed(Bookings(
        booking_number=number,
        customer_id=customer.id,
        service_id=service.id,
        scheduled_date=day,
        start_time=start_time,
        status=status,
    ))


class TestAvailableSlotsEndpoint:

    def test_returns_bare_ordered_list(self, client, service):
        day = next_date_for_weekday(1)
        resp = client.get(f"/services/{service.id}/available-slots", params={"date": day.isoformat()})

        assert resp.status_code == 200
        assert resp.json() == ["09:00", "10:00", "11:00"]

    def test_missing_date_is_validation_error(self, client, service):
        resp = client.get(f"/services/{service.id}/available-slots")

        assert resp.status_code == 400
        body = resp.json()
        assert body["success"] is False
        assert body["code"] == "VALIDATION_ERROR"

    def test_malformed_date_is_validation_error(self, client, service):
        resp = client.get(f"/services/{service.id}/available-slots", params={"date": "25-11-2024"})

        assert resp.status_code == 400
        assert resp.json()["code"] == "VALIDATION_ERROR"

    def test_unknown_service(self, client):
        resp = client.get("/services/999/available-slots", params={"date": "2024-11-25"})

        assert resp.status_code == 404
        assert resp.json()["code"] == "NOT_FOUND"

    def test_inactive_service_not_found(self, client, make_service):
        service = make_service(is_active=0)
        resp = client.get(f"/services/{service.id}/available-slots", params={"date": "2024-11-25"})
        assert resp.status_code == 404

    def test_date_checked_before_service(self, client):
        resp = client.get("/services/999/available-slots", params={"date": "nope"})
        assert resp.status_code == 400

    def test_closed_weekday_is_empty(self, client, make_service):
        service = make_service(working_hours=[{"day_of_week": 1, "start": "09:00", "end": "12:00"}])
        day = next_date_for_weekday(3)

        resp = client.get(f"/services/{service.id}/available-slots", params={"date": day.isoformat()})
        assert resp.json() == []

    def test_occupied_slot_excluded(self, client, seed, service, customer):
        day = next_date_for_weekday(2)
        _book(seed, service, customer, day, "10:00")

        resp = client.get(f"/services/{service.id}/available-slots", params={"date": day.isoformat()})
        assert resp.json() == ["09:00", "11:00"]

    def test_cancelled_booking_frees_slot(self, client, seed, service, customer):
        day = next_date_for_weekday(2)
        _book(seed, service, customer, day, "10:00", status="CANCELLED", number="BK-T-001")
        _book(seed, service, customer, day, "11:00", status="NO_SHOW", number="BK-T-002")
        _book(seed, service, customer, day, "09:00", status="REJECTED", number="BK-T-003")

        resp = client.get(f"/services/{service.id}/available-slots", params={"date": day.isoformat()})
        assert resp.json() == ["09:00", "10:00", "11:00"]

    def test_other_dates_do_not_occupy(self, client, seed, service, customer):
        day = next_date_for_weekday(2)
        _book(seed, service, customer, next_date_for_weekday(4), "10:00")

        resp = client.get(f"/services/{service.id}/available-slots", params={"date": day.isoformat()})
        assert "10:00" in resp.json()

    def test_reflects_state_on_every_call(self, client, seed, service, customer):
        day = next_date_for_weekday(5)
        url = f"/services/{service.id}/available-slots"

        assert "09:00" in client.get(url, params={"date": day.isoformat()}).json()
        _book(seed, service, customer, day, "09:00")
        assert "09:00" not in client.get(url, params={"date": day.isoformat()}).json()
