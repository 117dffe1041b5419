from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from sfa_schemes.main import app
from sfa_schemes.repository.schemes import InMemorySchemeRepository
from sfa_schemes.routes.schemes.dependencies import get_override_repository, get_scheme_engine, get_session_store
from sfa_schemes.schemes.engine import SchemeEngine
from sfa_schemes.schemes.session import SessionStore

HEADERS = {"x-actor-id": "rep-7"}


@pytest.fixture
def client(stacking_schemes):
    engine = SchemeEngine(repository=InMemorySchemeRepository(stacking_schemes))
    store = SessionStore()
    app.dependency_overrides[get_scheme_engine] = lambda: engine
    app.dependency_overrides[get_session_store] = lambda: store
    app.dependency_overrides[get_override_repository] = lambda: None
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def cart_payload():
    return {
        "items": [{"product_id": "P1", "sku": "SKU-P1", "quantity": 50, "unit_price": "100"}],
        "customer_type": "retailer",
        "as_of": "2026-06-15",
    }


@pytest.fixture
def session_id(client, cart_payload):
    response = client.post("/schemes/v1/sessions", json=cart_payload, headers=HEADERS)
    assert response.status_code == 200
    return response.json()["session_id"]


class TestCalculateRoute:
    def test_calculate(self, client, cart_payload):
        response = client.post("/schemes/v1/calculate", json=cart_payload)

        assert response.status_code == 200
        body = response.json()
        assert Decimal(body["total_discount"]) == Decimal("350")
        assert {applied["scheme_id"] for applied in body["applied_schemes"]} == {"slab-4", "bill-3"}

    def test_invalid_cart_line_is_rejected(self, client, cart_payload):
        cart_payload["items"][0]["quantity"] = 0

        response = client.post("/schemes/v1/calculate", json=cart_payload)

        assert response.status_code == 422

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestSessionRoutes:
    def test_override_requires_reason(self, client, session_id):
        response = client.post(f"/schemes/v1/sessions/{session_id}/overrides",
                               json={"scheme_id": "slab-4", "discount_amount": "100"}, headers=HEADERS)

        assert response.status_code == 400
        assert response.json()["error_code"] == "OVERRIDE_REASON_REQUIRED"

    def test_override_on_unapplied_scheme(self, client, session_id):
        response = client.post(f"/schemes/v1/sessions/{session_id}/overrides",
                               json={"scheme_id": "nope", "reason": "x"}, headers=HEADERS)

        assert response.status_code == 400
        assert response.json()["error_code"] == "SCHEME_NOT_APPLIED"

    def test_override_flow_and_submit(self, client, session_id):
        added = client.post(f"/schemes/v1/sessions/{session_id}/overrides",
                            json={"scheme_id": "slab-4", "discount_amount": "100", "reason": "price match"}, headers=HEADERS)
        assert added.status_code == 200
        assert Decimal(added.json()["result"]["total_discount"]) == Decimal("250")

        removed = client.delete(f"/schemes/v1/sessions/{session_id}/overrides/slab-4", headers=HEADERS)
        assert Decimal(removed.json()["result"]["total_discount"]) == Decimal("350")

        client.post(f"/schemes/v1/sessions/{session_id}/overrides",
                    json={"scheme_id": "bill-3", "discount_amount": "0", "reason": "not eligible"}, headers=HEADERS)
        submitted = client.post(f"/schemes/v1/sessions/{session_id}/submit", json={"order_id": "SO-55"}, headers=HEADERS)
        assert submitted.status_code == 200
        assert submitted.json()["order_id"] == "SO-55"
        assert submitted.json()["submitted_by"] == "rep-7"
        assert Decimal(submitted.json()["result"]["total_discount"]) == Decimal("200")

        late = client.put(f"/schemes/v1/sessions/{session_id}/cart", json={"items": []}, headers=HEADERS)
        assert late.status_code == 409
        assert late.json()["error_code"] == "SESSION_SUBMITTED"

        audit = client.get(f"/schemes/v1/sessions/{session_id}/audit")
        assert [event["action"] for event in audit.json()["events"]] == ["added", "removed", "added", "submitted"]
        assert {event["actor"] for event in audit.json()["events"]} == {"rep-7"}

    def test_update_cart_and_clear_overrides(self, client, session_id):
        client.post(f"/schemes/v1/sessions/{session_id}/overrides",
                    json={"scheme_id": "slab-4", "discount_amount": "1", "reason": "test"}, headers=HEADERS)

        updated = client.put(f"/schemes/v1/sessions/{session_id}/cart",
                             json={"items": [{"product_id": "P1", "sku": "SKU-P1", "quantity": 20, "unit_price": "100"}]},
                             headers=HEADERS)
        assert Decimal(updated.json()["result"]["total_discount"]) == Decimal("61")

        cleared = client.delete(f"/schemes/v1/sessions/{session_id}/overrides", headers=HEADERS)
        assert cleared.json()["result"]["overrides"] == {}
        assert Decimal(cleared.json()["result"]["total_discount"]) == Decimal("140")

    def test_unknown_session(self, client):
        response = client.delete("/schemes/v1/sessions/missing/overrides", headers=HEADERS)

        assert response.status_code == 404
        assert response.json()["error_code"] == "SESSION_NOT_FOUND"
