"""Load check: many passengers race for the seats of one ride.

Prerequisites:
1. `python manage.py runserver` must be running.
2. A SCHEDULED ride exists whose driver is VERIFIED (verify drivers in the admin).
   Pass its id as the first argument or via RIDE_ID.

The script will:
- Register (or log in) N demo passengers through the REST API.
- Fire N simultaneous booking requests for SEATS seats each.
- Print how many succeeded and check the ride never went below zero seats.

    python scripts/test_concurrent_booking.py 42
"""

from __future__ import annotations

import os
import sys
import threading
from typing import Dict, List

import requests

BASE_URL = os.environ.get("RIDESHARE_BASE_URL", "http://127.0.0.1:8000")
API_ROOT = f"{BASE_URL}/api"
AUTH_API = f"{API_ROOT}/auth"
PASSENGER_API = f"{API_ROOT}/passenger"

PASSENGERS = int(os.environ.get("PASSENGERS", 8))
SEATS = int(os.environ.get("SEATS", 2))


def _login_or_register(session: requests.Session, username: str) -> Dict:
    creds = {"username": username, "password": "demo1234"}
    login_resp = session.post(f"{AUTH_API}/login/", json=creds, timeout=10)

    if login_resp.status_code != 200:
        register_body = {
            **creds,
            "email": f"{username}@example.com",
            "role": "passenger",
            "phone_number": "9000000000",
        }
        reg_resp = session.post(f"{AUTH_API}/register/", json=register_body, timeout=10)
        reg_resp.raise_for_status()
        login_resp = session.post(f"{AUTH_API}/login/", json=creds, timeout=10)

    login_resp.raise_for_status()
    data = login_resp.json()
    session.headers.update({"Authorization": f"Bearer {data['tokens']['access']}"})
    return data["user"]


def _book(session: requests.Session, ride_id: int, start: threading.Barrier, results: List) -> None:
    start.wait()
    resp = session.post(
        f"{PASSENGER_API}/bookings/",
        json={"ride_id": ride_id, "seats_booked": SEATS},
        timeout=30,
    )
    body = resp.json()
    results.append((resp.status_code, body.get("error"), body.get("retryable")))


def main() -> None:
    ride_arg = sys.argv[1] if len(sys.argv) > 1 else os.environ.get("RIDE_ID")
    if not ride_arg:
        raise SystemExit("usage: test_concurrent_booking.py <ride_id>")
    ride_id = int(ride_arg)

    before = requests.get(f"{API_ROOT}/rides/{ride_id}/", timeout=10)
    before.raise_for_status()
    ride = before.json()
    print(f"[HTTP] Ride #{ride_id}: {ride['available_seats']}/{ride['total_seats']} seats open")

    sessions = []
    for i in range(PASSENGERS):
        session = requests.Session()
        _login_or_register(session, f"load_passenger_{i}")
        sessions.append(session)
    print(f"[HTTP] {len(sessions)} passengers ready, each asking for {SEATS} seat(s)")

    start = threading.Barrier(len(sessions))
    results: List = []
    threads = [
        threading.Thread(target=_book, args=(session, ride_id, start, results))
        for session in sessions
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    created = sum(1 for code, _, _ in results if code == 201)
    conflicts = sum(1 for code, _, _ in results if code == 409)
    retryable = sum(1 for code, _, flag in results if code == 409 and flag)
    print(f"[RESULT] created={created} conflict={conflicts} (retryable={retryable}) other={len(results) - created - conflicts}")

    after = requests.get(f"{API_ROOT}/rides/{ride_id}/", timeout=10).json()
    expected = ride["available_seats"] - created * SEATS
    print(f"[RESULT] seats open now: {after['available_seats']} (expected {expected})")

    if after["available_seats"] < 0 or after["available_seats"] != expected:
        raise SystemExit("[FAIL] seat counter drifted under concurrent bookings")
    print("[DONE] No overbooking.")


if __name__ == "__main__":
    main()
