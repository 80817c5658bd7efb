"""
Tests for the caller's own vehicles.
"""

from automarket.models import Bookings, Vehicles

from conftest import headers_for


def _add(client, user, plate, **extra):
    payload = {"make": "Toyota", "model": "Camry", "plate_number": plate, **extra}
    return client.post("/vehicles/", json=payload, headers=headers_for(user))


class TestVehicles:

    def test_first_vehicle_becomes_default(self, client, customer):
        data = _add(client, customer, " abc 123 ").json()["data"]

        assert data["is_default"] is True
        assert data["plate_number"] == "ABC 123"

    def test_new_default_clears_previous(self, client, customer, fetch):
        first = _add(client, customer, "AAA111").json()["data"]
        second = _add(client, customer, "BBB222", is_default=True).json()["data"]

        assert second["is_default"] is True
        assert fetch(Vehicles, first["id"]).is_default == 0

    def test_non_default_second_vehicle(self, client, customer):
        _add(client, customer, "AAA111")
        assert _add(client, customer, "BBB222").json()["data"]["is_default"] is False

    def test_duplicate_plate_conflicts(self, client, make_user):
        _add(client, make_user("customer"), "DUP1")
        resp = _add(client, make_user("customer"), "dup1")

        assert resp.status_code == 409
        assert resp.json()["code"] == "ALREADY_EXISTS"

    def test_list_only_own_default_first(self, client, make_user):
        owner, other = make_user("customer"), make_user("customer")
        _add(client, owner, "AAA111")
        _add(client, owner, "BBB222", is_default=True)
        _add(client, other, "CCC333")

        plates = [v["plate_number"] for v in client.get("/vehicles/", headers=headers_for(owner)).json()["data"]]
        assert plates == ["BBB222", "AAA111"]

    def test_foreign_vehicle_not_found(self, client, make_user):
        vehicle = _add(client, make_user("customer"), "AAA111").json()["data"]
        resp = client.get(f"/vehicles/{vehicle['id']}", headers=headers_for(make_user("customer")))
        assert resp.status_code == 404

    def test_update_default_and_plate(self, client, customer, fetch):
        first = _add(client, customer, "AAA111").json()["data"]
        second = _add(client, customer, "BBB222").json()["data"]

        resp = client.patch(
            f"/vehicles/{second['id']}",
            json={"is_default": True, "color": "White", "plate_number": "bbb333"},
            headers=headers_for(customer),
        )

        data = resp.json()["data"]
        assert (data["is_default"], data["color"], data["plate_number"]) == (True, "White", "BBB333")
        assert fetch(Vehicles, first["id"]).is_default == 0

    def test_update_to_taken_plate(self, client, customer):
        _add(client, customer, "AAA111")
        second = _add(client, customer, "BBB222").json()["data"]

        resp = client.patch(
            f"/vehicles/{second['id']}",
            json={"plate_number": "AAA111"},
            headers=headers_for(customer),
        )
        assert resp.status_code == 409

    def test_delete(self, client, customer, fetch):
        vehicle = _add(client, customer, "AAA111").json()["data"]

        resp = client.delete(f"/vehicles/{vehicle['id']}", headers=headers_for(customer))

        assert resp.status_code == 204
        assert fetch(Vehicles, vehicle["id"]) is None

    def test_delete_refused_with_active_booking(self, client, seed, customer, service):
        vehicle = _add(client, customer, "AAA111").json()["data"]
        seed(Bookings(
            booking_number="BK-V-001", customer_id=customer.id, service_id=service.id,
            vehicle_id=vehicle["id"], status="CONFIRMED",
        ))

        resp = client.delete(f"/vehicles/{vehicle['id']}", headers=headers_for(customer))

        assert resp.status_code == 400
        assert resp.json()["code"] == "VEHICLE_IN_USE"

    def test_requires_identity(self, client):
        assert client.get("/vehicles/").status_code == 401
