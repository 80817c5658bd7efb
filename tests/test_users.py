"""
Tests for user registration, profile and technician status.
"""

from conftest import headers_for


class TestRegistration:

    def test_register_defaults_to_customer(self, client):
        resp = client.post("/users/", json={"email": "Sara@Example.com", "first_name": "Sara"})

        assert resp.status_code == 201
        data = resp.json()["data"]
        assert data["role"] == "customer"
        assert data["email"] == "sara@example.com"
        assert data["is_active"] is True

    def test_duplicate_email(self, client):
        client.post("/users/", json={"email": "a@example.com", "first_name": "A"})
        resp = client.post("/users/", json={"email": "A@example.com", "first_name": "B"})

        assert resp.status_code == 409

    def test_invalid_email(self, client):
        resp = client.post("/users/", json={"email": "nope", "first_name": "A"})
        assert resp.status_code == 400

    def test_admin_role_only_by_admin(self, client, admin):
        payload = {"email": "boss@example.com", "first_name": "Boss", "role": "admin"}

        assert client.post("/users/", json=payload).status_code == 403
        assert client.post("/users/", json=payload, headers=headers_for(admin)).status_code == 201


class TestIdentity:

    def test_unknown_user_header(self, client):
        resp = client.get("/users/me", headers={"X-User-Id": "999"})
        assert resp.status_code == 401
        assert resp.json()["code"] == "UNAUTHORIZED"

    def test_malformed_user_header(self, client):
        assert client.get("/users/me", headers={"X-User-Id": "abc"}).status_code == 401

    def test_deactivated_user_rejected(self, client, admin, customer):
        client.delete(f"/users/{customer.id}", headers=headers_for(admin))
        assert client.get("/users/me", headers=headers_for(customer)).status_code == 401


class TestProfile:

    def test_me_and_update(self, client, customer):
        resp = client.patch("/users/me", json={"last_name": "Haddad", "phone": "+966"}, headers=headers_for(customer))

        assert resp.status_code == 200
        me = client.get("/users/me", headers=headers_for(customer)).json()["data"]
        assert (me["last_name"], me["phone"]) == ("Haddad", "+966")

    def test_admin_lists_users_by_role(self, client, admin, make_user):
        make_user("technician")
        make_user("customer")

        body = client.get("/users/", params={"role": "technician"}, headers=headers_for(admin)).json()
        assert [u["role"] for u in body["data"]] == ["technician"]

    def test_listing_requires_admin(self, client, customer):
        assert client.get("/users/", headers=headers_for(customer)).status_code == 403


class TestTechnicianStatus:

    def test_location_update(self, client, make_user):
        tech = make_user("technician")
        resp = client.patch(
            "/users/me/location",
            json={"latitude": 24.7, "longitude": 46.6},
            headers=headers_for(tech),
        )
        assert resp.json()["data"]["latitude"] == 24.7

    def test_location_out_of_range(self, client, make_user):
        tech = make_user("technician")
        resp = client.patch(
            "/users/me/location",
            json={"latitude": 200, "longitude": 46.6},
            headers=headers_for(tech),
        )
        assert resp.status_code == 400

    def test_availability_toggle(self, client, make_user):
        tech = make_user("technician")
        resp = client.patch("/users/me/availability", json={"is_available": True}, headers=headers_for(tech))
        assert resp.json()["data"]["is_available"] is True

    def test_customers_have_no_availability(self, client, customer):
        resp = client.patch("/users/me/availability", json={"is_available": True}, headers=headers_for(customer))
        assert resp.status_code == 403
