"""
Locust load scenarios against a seeded instance (`python -m eventfinder.seed`).

Run scenarios:
  locust -f locustfile.py --tags overbooking  # Many buyers, few seats
  locust -f locustfile.py --tags browse       # Cached public listing
  locust -f locustfile.py --tags edge         # Bad input
  locust -f locustfile.py                     # All of the above

After an overbooking run, this must hold for the target event:
  SELECT total_seats - available_seats = SUM(number_of_seats)
  FROM events JOIN bookings ... WHERE bookings.status <> 'cancelled'
"""

import os
import random
from datetime import datetime, timedelta, timezone

from locust import HttpUser, between, events, tag, task

API = "/api"
SEED_PASSWORD = os.getenv("SEED_PASSWORD", "test123")
ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "admin@test.com")
ORGANIZER_EMAIL = "organizer@test.com"
RACE_SEATS = 10

EVENT_IDS: list[int] = []
RACE_EVENT_ID = None


def _token(client, email: str, password: str = SEED_PASSWORD):
    resp = client.post(f"{API}/auth/login", json={"email": email, "password": password})
    if resp.status_code != 200:
        return None
    return {"Authorization": f"Bearer {resp.json()['data']['token']}"}


def _register(client) -> dict:
    email = f"load_{random.randint(10000, 999999)}@test.com"
    client.post(f"{API}/auth/register", json={"name": "Load User", "email": email, "password": SEED_PASSWORD})
    return _token(client, email) or {}


@events.test_start.add_listener
def create_race_event(environment, **kwargs):
    """Organizer submits a small event and the admin approves it."""
    global RACE_EVENT_ID
    from locust.clients import HttpSession

    client = HttpSession(base_url=environment.host, request_event=environment.events.request, user=None)
    organizer = _token(client, ORGANIZER_EMAIL)
    admin = _token(client, ADMIN_EMAIL)
    if not organizer or not admin:
        print("Seed accounts missing; run python -m eventfinder.seed first")
        return

    resp = client.post(
        f"{API}/events",
        json={
            "title": "Overbooking Race",
            "description": f"{RACE_SEATS} seats only",
            "category": "Other",
            "date": (datetime.now(timezone.utc) + timedelta(days=30)).isoformat(),
            "time": "20:00",
            "location": "Load Lab",
            "price": 5,
            "totalSeats": RACE_SEATS,
        },
        headers=organizer,
    )
    if resp.status_code == 201:
        RACE_EVENT_ID = resp.json()["data"]["id"]
        client.patch(f"{API}/events/{RACE_EVENT_ID}/approve", headers=admin)
        print(f"Race event {RACE_EVENT_ID} approved with {RACE_SEATS} seats")


class OverbookingUser(HttpUser):
    """
    Run: locust -f locustfile.py --tags overbooking -u 100 -r 50 --run-time 30s
    Exactly RACE_SEATS single-seat bookings may succeed; the rest get 409.
    """
    wait_time = between(0, 0.1)

    def on_start(self):
        self.headers = _register(self.client)

    @tag("overbooking")
    @task
    def book_last_seats(self):
        if not RACE_EVENT_ID or not self.headers:
            return
        with self.client.post(
            f"{API}/bookings",
            json={"eventId": RACE_EVENT_ID, "numberOfSeats": 1},
            headers=self.headers,
            catch_response=True,
        ) as resp:
            if resp.status_code in (201, 409):
                resp.success()
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class BrowsingUser(HttpUser):
    """
    Run with and without Redis and compare p95 on the listing:
      locust -f locustfile.py --tags browse -u 100 -r 20 --run-time 60s
    """
    wait_time = between(0.1, 0.5)

    @tag("browse")
    @task(10)
    def list_events(self):
        page = random.randint(1, 3)
        sort = random.choice(["newest", "price_asc", "rating"])
        resp = self.client.get(f"{API}/events?page={page}&sortBy={sort}", name=f"{API}/events [cached]")
        if resp.status_code == 200:
            for event in resp.json()["data"]:
                if event["id"] not in EVENT_IDS:
                    EVENT_IDS.append(event["id"])

    @tag("browse")
    @task(3)
    def view_event(self):
        if EVENT_IDS:
            self.client.get(f"{API}/events/{random.choice(EVENT_IDS)}", name=f"{API}/events/{{id}}")

    @tag("browse")
    @task(1)
    def search(self):
        self.client.get(f"{API}/events/search/query?q={random.choice(['music', 'tech', 'city'])}")


class EdgeCaseUser(HttpUser):
    """Bad input must come back as 4xx, never 5xx."""
    wait_time = between(0.5, 1.5)

    def on_start(self):
        self.headers = _register(self.client)

    def _expect(self, resp, codes):
        if resp.status_code in codes:
            resp.success()
        else:
            resp.failure(f"Expected {codes}, got {resp.status_code}")

    @tag("edge")
    @task
    def unknown_event(self):
        with self.client.post(f"{API}/bookings", json={"eventId": 999999, "numberOfSeats": 1},
                              headers=self.headers, catch_response=True) as resp:
            self._expect(resp, (404,))

    @tag("edge")
    @task
    def bad_seat_counts(self):
        seats = random.choice([-5, 0, 999999])
        with self.client.post(f"{API}/bookings", json={"eventId": 1, "numberOfSeats": seats},
                              headers=self.headers, catch_response=True) as resp:
            self._expect(resp, (400, 404, 409))

    @tag("edge")
    @task
    def malformed_json(self):
        with self.client.post(f"{API}/bookings", data="not json at all",
                              headers=self.headers, catch_response=True) as resp:
            self._expect(resp, (400,))

    @tag("edge")
    @task
    def user_creates_event(self):
        with self.client.post(f"{API}/events", json={"title": "nope"},
                              headers=self.headers, catch_response=True) as resp:
            self._expect(resp, (400, 403))

    @tag("edge")
    @task
    def missing_auth(self):
        with self.client.post(f"{API}/bookings", json={"eventId": 1, "numberOfSeats": 1},
                              catch_response=True) as resp:
            self._expect(resp, (401,))
