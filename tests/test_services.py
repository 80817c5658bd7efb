"""
Tests for the service catalogue and the access policy behind it.
"""

import pytest

from automarket.models import Bookings, Services
from automarket.services.access import (
    ANONYMOUS,
    Actor,
    booking_scope,
    can_manage,
    is_visible,
)

from conftest import headers_for

HOURS = [{"day_of_week": 1, "start": "09:00", "end": "17:00"}]


class TestServiceCatalogue:

    def test_vendor_creates_owned_service(self, client, vendor):
        resp = client.post(
            "/services/",
            json={"name": "Tyre fitting", "price": 80, "working_hours": HOURS, "slot_duration_minutes": 30},
            headers=headers_for(vendor),
        )

        assert resp.status_code == 201
        data = resp.json()["data"]
        assert data["owner_id"] == vendor.id
        assert data["working_hours"] == HOURS

    def test_admin_creates_platform_service(self, client, admin):
        resp = client.post("/services/", json={"name": "Wash", "price": 20}, headers=headers_for(admin))
        assert resp.json()["data"]["owner_id"] is None

    @pytest.mark.parametrize("hours", [
        [{"day_of_week": 7, "start": "09:00", "end": "17:00"}],
        [{"day_of_week": 1, "start": "9:00", "end": "17:00"}],
        [{"day_of_week": 1, "start": "17:00", "end": "09:00"}],
        [{"day_of_week": 1, "start": "09:00", "end": "24:00"}],
    ])
    def test_invalid_working_hours(self, client, admin, hours):
        resp = client.post(
            "/services/",
            json={"name": "Wash", "price": 20, "working_hours": hours},
            headers=headers_for(admin),
        )
        assert resp.status_code == 400

    def test_slot_duration_must_be_positive(self, client, admin):
        resp = client.post(
            "/services/",
            json={"name": "Wash", "price": 20, "slot_duration_minutes": 0},
            headers=headers_for(admin),
        )
        assert resp.status_code == 400

    def test_customer_cannot_create(self, client, customer):
        resp = client.post("/services/", json={"name": "Wash", "price": 20}, headers=headers_for(customer))
        assert resp.status_code == 403

    def test_list_filters(self, client, make_service):
        make_service(name="Oil change", category="maintenance")
        make_service(name="Brake check", category="safety")

        def names(**params):
            return [s["name"] for s in client.get("/services/", params=params).json()["data"]]

        assert names(category="safety") == ["Brake check"]
        assert names(search="oil") == ["Oil change"]

    def test_owner_updates_and_deactivates(self, client, vendor, make_service, fetch):
        service = make_service(owner_id=vendor.id)

        resp = client.patch(
            f"/services/{service.id}",
            json={"price": 99, "working_hours": HOURS},
            headers=headers_for(vendor),
        )
        assert resp.json()["data"]["price"] == 99

        assert client.delete(f"/services/{service.id}", headers=headers_for(vendor)).status_code == 204
        assert fetch(Services, service.id).is_active == 0
        assert client.get(f"/services/{service.id}").status_code == 404
        assert client.get(f"/services/{service.id}", headers=headers_for(vendor)).status_code == 200

    def test_other_vendor_cannot_update(self, client, vendor, make_user, make_service):
        service = make_service(owner_id=vendor.id)
        resp = client.patch(
            f"/services/{service.id}",
            json={"price": 1},
            headers=headers_for(make_user("vendor")),
        )
        assert resp.status_code == 403

    def test_unknown_route(self, client):
        resp = client.get("/nowhere")
        assert resp.status_code == 404
        assert resp.json() == {"success": False, "error": "Not Found", "code": "ROUTE_NOT_FOUND"}


class TestAccessPolicy:

    def test_visibility(self):
        inactive = Services(name="x", price=1, is_active=0, owner_id=5)
        active = Services(name="y", price=1, is_active=1)

        assert is_visible(active, ANONYMOUS)
        assert not is_visible(inactive, ANONYMOUS)
        assert not is_visible(inactive, Actor(6, "vendor"))
        assert is_visible(inactive, Actor(5, "vendor"))
        assert is_visible(inactive, Actor(1, "admin"))

    def test_can_manage(self):
        owned = Services(name="x", price=1, owner_id=5)
        platform = Services(name="y", price=1, owner_id=None)

        assert can_manage(owned, Actor(5, "vendor"))
        assert not can_manage(owned, Actor(6, "vendor"))
        assert not can_manage(platform, Actor(6, "vendor"))
        assert can_manage(platform, Actor(1, "admin"))
        assert not can_manage(owned, ANONYMOUS)

    def test_booking_scope_by_participation(self, client, seed, customer, make_user, service):
        seed(Bookings(booking_number="BK-S-001", customer_id=customer.id, service_id=service.id, status="PENDING"))
        db = client.app.state.session_factory()
        try:
            def count(actor):
                return db.query(Bookings).filter(booking_scope(actor)).count()

            assert count(ANONYMOUS) == 0
            assert count(Actor(customer.id, "customer")) == 1
            assert count(Actor(make_user("customer").id, "customer")) == 0
            assert count(Actor(1, "admin")) == 1
        finally:
            db.close()
