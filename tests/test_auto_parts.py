"""
Tests for the auto-parts catalogue.
"""

import pytest

from automarket.models import AutoParts

from conftest import headers_for


@pytest.fixture
def make_part(seed):
    def _make_part(**kwargs):
        kwargs.setdefault("name", "Brake pad")
        kwargs.setdefault("price", 50.0)
        kwargs.setdefault("stock", 10)
        return seed(AutoParts(**kwargs))

    return _make_part


class TestAutoParts:

    def test_vendor_creates_owned_part(self, client, vendor):
        resp = client.post(
            "/auto-parts/",
            json={"name": "Oil filter", "brand": "Bosch", "price": 25, "stock": 4},
            headers=headers_for(vendor),
        )

        assert resp.status_code == 201
        assert resp.json()["data"]["owner_id"] == vendor.id

    def test_customer_cannot_create(self, client, customer):
        resp = client.post("/auto-parts/", json={"name": "X", "price": 1}, headers=headers_for(customer))
        assert resp.status_code == 403

    @pytest.mark.parametrize("field", ["price", "stock"])
    def test_negative_values_rejected(self, client, vendor, make_part, field):
        part = make_part(owner_id=vendor.id)
        resp = client.patch(f"/auto-parts/{part.id}", json={field: -1}, headers=headers_for(vendor))
        assert resp.status_code == 400

    def test_filters(self, client, make_part):
        make_part(name="Brake pad", brand="Bosch", stock=0)
        make_part(name="Brake disc", brand="Brembo", stock=3)
        make_part(name="Air filter", brand="Bosch", stock=2, part_number="AF-100")

        def names(**params):
            return sorted(p["name"] for p in client.get("/auto-parts/", params=params).json()["data"])

        assert names(search="brake") == ["Brake disc", "Brake pad"]
        assert names(search="af-100") == ["Air filter"]
        assert names(brand="bosch") == ["Air filter", "Brake pad"]
        assert names(in_stock="true") == ["Air filter", "Brake disc"]
        assert names(in_stock="false") == ["Brake pad"]

    def test_pagination(self, client, make_part):
        for i in range(5):
            make_part(name=f"Part {i}")

        body = client.get("/auto-parts/", params={"page": 2, "limit": 2}).json()
        assert len(body["data"]) == 2
        assert body["pagination"] == {"page": 2, "limit": 2, "total": 5, "total_pages": 3}

    def test_inactive_hidden_except_owner(self, client, vendor, make_user, make_part):
        part = make_part(owner_id=vendor.id, is_active=0)

        assert client.get(f"/auto-parts/{part.id}").status_code == 404
        assert client.get(f"/auto-parts/{part.id}", headers=headers_for(make_user("vendor"))).status_code == 404
        assert client.get(f"/auto-parts/{part.id}", headers=headers_for(vendor)).status_code == 200

    def test_other_vendor_cannot_update(self, client, vendor, make_user, make_part):
        part = make_part(owner_id=vendor.id)
        resp = client.patch(
            f"/auto-parts/{part.id}",
            json={"price": 10},
            headers=headers_for(make_user("vendor")),
        )
        assert resp.status_code == 403

    def test_soft_delete(self, client, vendor, make_part, fetch):
        part = make_part(owner_id=vendor.id)

        resp = client.delete(f"/auto-parts/{part.id}", headers=headers_for(vendor))

        assert resp.status_code == 204
        assert fetch(AutoParts, part.id).is_active == 0
        assert client.get(f"/auto-parts/{part.id}").status_code == 404
