"""
Locust Load Test Suite

Run scenarios:
  locust -f locustfile.py --tags capacity     # Tourists contend for a small event
  locust -f locustfile.py --tags browse       # Catalog listing throughput
  locust -f locustfile.py --tags edge         # Bad input handling
  locust -f locustfile.py                     # All tests
"""

import random
import string
from datetime import datetime, timezone, timedelta

from locust import HttpUser, task, between, tag, events

API = "/api/v1"
PASSWORD = "test123"

# Shared state
EVENT_IDS = []
# (event id, price category id, price) for events created during the run
PRICED_EVENTS = []
CAPACITY_EVENT = {}


def random_email(prefix: str = "load") -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=10))
    return f"{prefix}_{suffix}@test.com"


def signup_and_signin(client, role: str) -> dict:
    """Create an account and return bearer headers, or {} when signin fails."""
    email = random_email(role.lower())
    client.post(f"{API}/user/signup", json={
        "name": f"Load {role.title()}",
        "email": email,
        "password": PASSWORD,
        "role": role,
    })
    resp = client.post(f"{API}/user/signin", json={"email": email, "password": PASSWORD})
    if resp.status_code != 200:
        return {}
    return {"Authorization": f"Bearer {resp.json()['token']}"}


def event_payload(name: str, maximum_count: int, price: float) -> dict:
    future = (datetime.now(timezone.utc) + timedelta(days=random.randint(1, 90))).isoformat()
    return {
        "name": name,
        "description": "Load test event",
        "category": "Load",
        "location": "Venue",
        "date": future,
        "maximumCount": maximum_count,
        "priceCategories": [{"name": "General", "price": price}],
    }


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("\n" + "=" * 60)
    print("SETUP: first business user creates the 10-ticket capacity event")
    print("=" * 60)


class CapacityUser(HttpUser):
    """
    Many tourists, one event with 10 tickets.

    Run: locust -f locustfile.py --tags capacity -u 100 -r 50 --run-time 30s

    After the run, verify:
      SELECT SUM(ticket_count) FROM tourist_event_bookings WHERE event_id = X;
    Should be <= 10
    """
    wait_time = between(0, 0.1)

    def on_start(self):
        if not CAPACITY_EVENT:
            business_headers = signup_and_signin(self.client, "BUSINESS")
            if business_headers:
                resp = self.client.post(
                    f"{API}/business/createEvent",
                    json=event_payload("Capacity Test Event", 10, 5.0),
                    headers=business_headers,
                )
                if resp.status_code == 201:
                    event = resp.json()["event"]
                    CAPACITY_EVENT.update(
                        id=event["id"],
                        price_category_id=event["priceCategories"][0]["id"],
                    )
                    print(f"\nCreated event {event['id']} with 10 tickets\n")

        self.headers = signup_and_signin(self.client, "TOURIST")
        self.booked = False

    @tag("capacity")
    @task
    def book_limited_tickets(self):
        """Each tourist tries to book one ticket; duplicates and sell-outs are expected."""
        if not CAPACITY_EVENT or not self.headers or self.booked:
            return

        with self.client.post(
            f"{API}/tourist/eventBooking",
            json={
                "eventId": CAPACITY_EVENT["id"],
                "priceCategoryId": CAPACITY_EVENT["price_category_id"],
                "ticketCount": 1,
                "paymentAmount": 5.0,
            },
            headers=self.headers,
            catch_response=True,
        ) as resp:
            if resp.status_code == 201:
                self.booked = True
                resp.success()
            elif resp.status_code in (400, 409):
                resp.success()  # sold out or already booked
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class BrowseUser(HttpUser):
    """
    Catalog throughput.

    Run: locust -f locustfile.py --tags browse -u 100 -r 20 --run-time 60s
    """
    wait_time = between(0.1, 0.5)

    @tag("browse")
    @task(10)
    def list_events(self):
        page = random.randint(1, 5)
        resp = self.client.get(
            f"{API}/tourist/getAllEvents?page={page}&limit=20",
            name=f"{API}/tourist/getAllEvents",
        )
        if resp.status_code == 200:
            for event in resp.json().get("events", []):
                if event["id"] not in EVENT_IDS:
                    EVENT_IDS.append(event["id"])

    @tag("browse")
    @task(1)
    def health_check(self):
        self.client.get("/health")


class EdgeCaseUser(HttpUser):
    """
    Bad input handling. The service should answer with error envelopes, never crash.

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s
    """
    wait_time = between(0.5, 1.5)

    def on_start(self):
        self.headers = signup_and_signin(self.client, "TOURIST")

    def _book(self, name: str, expected: tuple, **kwargs):
        with self.client.post(
            f"{API}/tourist/eventBooking",
            name=f"{API}/tourist/eventBooking [{name}]",
            catch_response=True,
            **kwargs,
        ) as resp:
            if resp.status_code in expected:
                resp.success()
            else:
                resp.failure(f"Expected {expected}, got {resp.status_code}")

    @tag("edge")
    @task
    def unknown_event(self):
        self._book(
            "unknown event",
            (404,),
            json={"eventId": 999999, "priceCategoryId": 1, "ticketCount": 1, "paymentAmount": 1},
            headers=self.headers,
        )

    @tag("edge")
    @task
    def zero_tickets(self):
        self._book(
            "zero tickets",
            (402,),
            json={"eventId": 1, "priceCategoryId": 1, "ticketCount": 0, "paymentAmount": 0},
            headers=self.headers,
        )

    @tag("edge")
    @task
    def huge_ticket_count(self):
        self._book(
            "huge count",
            (400, 404, 409),
            json={"eventId": 1, "priceCategoryId": 1, "ticketCount": 999999, "paymentAmount": 1},
            headers=self.headers,
        )

    @tag("edge")
    @task
    def malformed_json(self):
        self._book("malformed", (402,), data="not json at all", headers=self.headers)

    @tag("edge")
    @task
    def missing_auth(self):
        self._book(
            "no auth",
            (401,),
            json={"eventId": 1, "priceCategoryId": 1, "ticketCount": 1, "paymentAmount": 1},
        )

    @tag("edge")
    @task
    def invalid_booking_id(self):
        with self.client.get(
            f"{API}/tourist/getBooking/not-a-number",
            name=f"{API}/tourist/getBooking/[invalid]",
            headers=self.headers,
            catch_response=True,
        ) as resp:
            if resp.status_code == 400:
                resp.success()
            else:
                resp.failure(f"Expected 400, got {resp.status_code}")


class RealisticUser(HttpUser):
    """
    Mixed workload: mostly browsing, some bookings, the odd history lookup.

    Run: locust -f locustfile.py -u 200 -r 20 --run-time 120s
    """
    wait_time = between(1, 3)

    def on_start(self):
        self.headers = signup_and_signin(self.client, "TOURIST")

    @task(50)
    def browse_events(self):
        resp = self.client.get(f"{API}/tourist/getAllEvents?page=1&limit=20")
        if resp.status_code == 200:
            for event in resp.json().get("events", []):
                if event["id"] not in EVENT_IDS:
                    EVENT_IDS.append(event["id"])

    @task(10)
    def book_tickets(self):
        if not PRICED_EVENTS or not self.headers:
            return
        event_id, price_category_id, price = random.choice(PRICED_EVENTS)
        tickets = random.randint(1, 3)
        self.client.post(
            f"{API}/tourist/eventBooking",
            json={
                "eventId": event_id,
                "priceCategoryId": price_category_id,
                "ticketCount": tickets,
                "paymentAmount": round(price * tickets, 2),
            },
            headers=self.headers,
        )

    @task(5)
    def my_bookings(self):
        if self.headers:
            self.client.get(f"{API}/tourist/getBookings?page=1&limit=10", headers=self.headers)

    @task(2)
    def my_details(self):
        if self.headers:
            self.client.get(f"{API}/tourist/userDetails", headers=self.headers)


class BusinessUser(HttpUser):
    """
    Rare event creation feeding the bookable pool.
    """
    wait_time = between(5, 10)
    weight = 1

    def on_start(self):
        self.headers = signup_and_signin(self.client, "BUSINESS")

    @task
    def create_event(self):
        if not self.headers:
            return
        price = random.choice([5.0, 12.5, 20.0])
        resp = self.client.post(
            f"{API}/business/createEvent",
            json=event_payload(f"Event {random.randint(1, 10000)}", random.randint(10, 500), price),
            headers=self.headers,
        )
        if resp.status_code == 201:
            event = resp.json()["event"]
            PRICED_EVENTS.append((event["id"], event["priceCategories"][0]["id"], price))
