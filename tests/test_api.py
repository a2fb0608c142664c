"""
End-to-end tests for the HTTP routes, using the mock booking API and the
static provider catalog.
"""

from __future__ import annotations

from urllib.parse import parse_qs, urlparse

from fastapi.testclient import TestClient

from bookflow.main import app

client = TestClient(app)

BOOKING = "/api/v1/booking"
SIGNED_IN = {"X-User-Id": "user-42", "X-User-Email": "jane@example.com", "X-User-Name": "Jane Doe"}


def _start(service_id: str | None = "svc-haircut") -> dict:
    response = client.post(f"{BOOKING}/sessions", json={"service_id": service_id})
    assert response.status_code == 201
    return response.json()


def _patch(session_id: str, body: dict) -> dict:
    response = client.patch(f"{BOOKING}/sessions/{session_id}", json=body)
    assert response.status_code == 200, response.text
    return response.json()


def _advance(session_id: str) -> dict:
    response = client.post(f"{BOOKING}/sessions/{session_id}/advance")
    assert response.status_code == 200, response.text
    return response.json()


def _walk_to_payment() -> tuple[str, dict]:
    session = _start()
    session_id = session["session_id"]
    _advance(session_id)

    slots = client.get(f"{BOOKING}/services/svc-haircut/time-slots").json()
    slot = slots[0]
    _patch(session_id, {"type": "datetime", "date": slot["start_time"][:10], "time_slot_id": slot["id"]})
    _advance(session_id)
    _patch(session_id, {"type": "staff"})
    _advance(session_id)
    _patch(session_id, {"type": "addon", "add_on_id": "addon-deep-conditioning"})
    _advance(session_id)
    _patch(session_id, {"type": "common_request", "request_id": "first-time"})
    _advance(session_id)
    _patch(
        session_id,
        {"type": "customer_info", "name": "Jane Doe", "email": "jane@example.com", "phone": "555-123-4567"},
    )
    _advance(session_id)
    session = _patch(session_id, {"type": "payment", "payment_method": "pay-at-location", "promo_code": "SAVE10"})
    return session_id, session


def test_health():
    assert client.get("/health").json() == {"status": "ok"}


def test_list_services():
    response = client.get(f"{BOOKING}/services")

    assert response.status_code == 200
    assert [s["id"] for s in response.json()] == ["svc-haircut", "svc-massage", "svc-checkup"]


def test_time_slots_filtered_by_date():
    slots = client.get(f"{BOOKING}/services/svc-massage/time-slots").json()
    day = slots[-1]["start_time"][:10]

    filtered = client.get(f"{BOOKING}/services/svc-massage/time-slots", params={"date": day}).json()

    assert filtered
    assert all(s["start_time"].startswith(day) for s in filtered)


def test_start_session_preselects_service_without_completing():
    session = _start()

    assert session["current_step"] == "service"
    assert session["draft"]["service"]["id"] == "svc-haircut"
    assert session["draft"]["subtotal"] == 45
    assert session["can_advance"] is True
    assert not any(step["completed"] for step in session["steps"])


def test_unknown_service_is_404():
    response = client.post(f"{BOOKING}/sessions", json={"service_id": "svc-nope"})

    assert response.status_code == 404


def test_advance_without_service_is_400():
    session = _start(service_id=None)
    response = client.post(f"{BOOKING}/sessions/{session['session_id']}/advance")

    assert response.status_code == 400
    assert response.json()["detail"]["step"] == "service"


def test_wizard_totals_and_requests():
    _, session = _walk_to_payment()
    draft = session["draft"]

    assert session["current_step"] == "payment"
    assert draft["subtotal"] == 60
    assert draft["discount"] == 6.0
    assert draft["total"] == 54.0
    assert draft["special_requests"] == "• This is my first time"
    assert draft["staff_member"]["id"] == "no-preference"


def test_retreat_then_jump_ahead_rejected():
    session_id, _ = _walk_to_payment()

    response = client.post(f"{BOOKING}/sessions/{session_id}/retreat", json={"step_id": "staff"})
    assert response.status_code == 200
    assert response.json()["current_step"] == "staff"

    response = client.post(f"{BOOKING}/sessions/{session_id}/retreat", json={"step_id": "payment"})
    assert response.status_code == 400


def test_special_requests_over_limit_is_400():
    session = _start()
    response = client.patch(
        f"{BOOKING}/sessions/{session['session_id']}",
        json={"type": "special_requests", "text": "x" * 501},
    )

    assert response.status_code == 400
    assert response.json()["detail"]["field"] == "special_requests"


def test_submit_anonymous_gets_login_redirect():
    session_id, _ = _walk_to_payment()

    response = client.post(f"{BOOKING}/sessions/{session_id}/submit")

    assert response.status_code == 200
    body = response.json()
    assert body["action"] == "login_required"
    params = parse_qs(urlparse(body["redirect_url"]).query)
    assert params["service_id"] == ["svc-haircut"]
    assert params["name"] == ["Jane Doe"]
    assert client.get(f"{BOOKING}/sessions/{session_id}").status_code == 200


def test_submit_signed_in_books_and_closes_session():
    session_id, _ = _walk_to_payment()

    response = client.post(f"{BOOKING}/sessions/{session_id}/submit", headers=SIGNED_IN)

    assert response.status_code == 200
    body = response.json()
    assert body["action"] == "booked"
    assert body["booking"]["service_id"] == "svc-haircut"
    assert body["booking"]["status"] == "Confirmed"
    assert client.get(f"{BOOKING}/sessions/{session_id}").status_code == 404


def test_abandon_session():
    session = _start()

    assert client.delete(f"{BOOKING}/sessions/{session['session_id']}").status_code == 204
    assert client.delete(f"{BOOKING}/sessions/{session['session_id']}").status_code == 404


def test_search_by_query_and_rating():
    response = client.get("/api/v1/providers/search", params={"query": "hair", "sortBy": "rating"})

    assert response.status_code == 200
    body = response.json()
    assert [p["id"] for p in body["providers"]] == ["1", "10"]
    assert body["stats"]["active_filter_count"] == 1
    assert body["stats"]["has_active_filters"] is True
    assert body["params"] == {"query": "hair", "sortBy": "rating"}


def test_search_default_returns_everything():
    body = client.get("/api/v1/providers/search").json()

    assert len(body["providers"]) == 12
    assert body["stats"]["has_active_filters"] is False
    assert body["params"] == {}
    assert body["price_range"]["min"] == 35


def test_search_price_filter():
    body = client.get("/api/v1/providers/search", params={"priceMin": "0", "priceMax": "50"}).json()

    assert sorted(p["id"] for p in body["providers"]) == ["1", "8"]


def test_favorite_toggle_and_provider_detail():
    headers = {"X-User-Id": "fav-tester"}

    before = client.get("/api/v1/providers/1", headers=headers).json()
    assert before["is_favorite"] is False

    toggled = client.post("/api/v1/providers/1/favorite", headers=headers).json()
    assert toggled == {"provider_id": "1", "is_favorite": True}
    assert client.get("/api/v1/providers/1", headers=headers).json()["is_favorite"] is True


def test_unknown_provider_is_404():
    assert client.get("/api/v1/providers/999").status_code == 404
