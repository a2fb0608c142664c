#!/usr/bin/env python3
"""Smoke test for a running booking API server."""

import sys

import httpx


BASE_URL = "http://127.0.0.1:8001"
HEADERS = {"X-User-Id": "smoke-user", "X-User-Email": "smoke@example.com", "X-User-Name": "Smoke Test"}


def check_search():
    """Search providers with a query and a sort order."""
    print("=" * 60)
    print("Testing GET /api/v1/providers/search")
    print("=" * 60)

    try:
        response = httpx.get(
            f"{BASE_URL}/api/v1/providers/search",
            params={"query": "hair", "sortBy": "rating"},
            timeout=10.0,
        )
        response.raise_for_status()
        data = response.json()
        print(f"✅ {data['stats']['total_results']} providers, params={data['params']}")
        for p in data["providers"]:
            print(f"  {p['business_name']} ({p['rating']}) from ${p['starting_price']:.0f}")
        return True
    except httpx.HTTPStatusError as e:
        print(f"❌ HTTP Error: {e.response.status_code}")
        print(f"Response: {e.response.text}")
        return False


def check_booking():
    """Walk the wizard from service selection to a confirmed booking."""
    print("\n" + "=" * 60)
    print("Testing /api/v1/booking/sessions")
    print("=" * 60)

    base = f"{BASE_URL}/api/v1/booking"
    with httpx.Client(timeout=10.0, headers=HEADERS) as client:
        try:
            services = client.get(f"{base}/services").json()
            service_id = services[0]["id"]
            session = client.post(f"{base}/sessions", json={"service_id": service_id}).json()
            session_id = session["session_id"]
            print(f"Session: {session_id} service={service_id}")

            client.post(f"{base}/sessions/{session_id}/advance").raise_for_status()
            slot = client.get(f"{base}/services/{service_id}/time-slots").json()[0]
            updates = [
                {"type": "datetime", "date": slot["start_time"][:10], "time_slot_id": slot["id"]},
                {"type": "staff"},
                None,
                {"type": "common_request", "request_id": "first-time"},
                {"type": "customer_info", "name": "Smoke Test", "email": "smoke@example.com", "phone": "5551234567"},
            ]
            for update in updates:
                if update:
                    client.patch(f"{base}/sessions/{session_id}", json=update).raise_for_status()
                client.post(f"{base}/sessions/{session_id}/advance").raise_for_status()

            client.patch(
                f"{base}/sessions/{session_id}",
                json={"type": "payment", "payment_method": "pay-at-location"},
            ).raise_for_status()
            response = client.post(f"{base}/sessions/{session_id}/submit")
            response.raise_for_status()
            result = response.json()
            print(f"✅ {result['action']}: {result.get('booking') or result.get('redirect_url')}")
            return True
        except httpx.HTTPStatusError as e:
            print(f"❌ HTTP Error: {e.response.status_code}")
            print(f"Response: {e.response.text}")
            return False


def main():
    print("\n🚀 Smoke testing booking API\n")

    try:
        httpx.get(f"{BASE_URL}/health", timeout=5.0)
        print("✅ Server is running\n")
    except httpx.HTTPError:
        print("❌ Server is not running!")
        print("   Please start it with: uvicorn bookflow.main:app --reload --port 8001")
        sys.exit(1)

    ok = check_search() and check_booking()

    print("\n" + "=" * 60)
    print("✅ Smoke test complete!" if ok else "❌ Smoke test failed")
    print("=" * 60 + "\n")
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
