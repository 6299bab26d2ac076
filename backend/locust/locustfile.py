"""
Locust Load Test Suite

Run scenarios:
  locust -f locustfile.py --tags concurrency  # Test double booking
  locust -f locustfile.py --tags throughput   # Test available-dates cache
  locust -f locustfile.py --tags edge         # Test bad input
  locust -f locustfile.py                     # All tests

Venues must already exist (seed the database first); they are discovered
through GET /api/v1/venues.
"""

import random
from datetime import date, timedelta

from locust import HttpUser, between, events, tag, task

# Shared state
VENUE_IDS = []
CONTESTED_VENUE_ID = None
CONTESTED_DAY = None


def bookable_day(days_ahead: int) -> date:
    """A day at least days_ahead from today that is not a Monday."""
    day = date.today() + timedelta(days=days_ahead)
    if day.isoweekday() == 1:
        day += timedelta(days=1)
    return day


def random_user_id() -> str:
    return f"load-{random.randint(10000, 99999)}"


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("\n" + "=" * 60)
    print("SETUP: all concurrency users will fight for one venue-day")
    print("=" * 60)


class ConcurrencyUser(HttpUser):
    """
    TEST 1: Concurrency - 100 users -> 1 venue, 1 day

    Run: locust -f locustfile.py --tags concurrency -u 100 -r 50 --run-time 30s

    After test, verify:
      SELECT COUNT(*) FROM bookings
      WHERE venue_id = X AND status = 'confirmed'
        AND start_date <= :day AND end_date >= :day;
    Should be exactly 1
    """
    wait_time = between(0, 0.1)

    def on_start(self):
        if CONTESTED_VENUE_ID:
            return
        resp = self.client.get("/api/v1/venues?page=1&pageSize=1")
        if resp.status_code == 200 and resp.json()["venues"]:
            globals()["CONTESTED_VENUE_ID"] = resp.json()["venues"][0]["id"]
            # Random far-future day so reruns do not collide with earlier runs
            globals()["CONTESTED_DAY"] = bookable_day(random.randint(200, 300)).isoformat()
            print(f"\nContesting venue {CONTESTED_VENUE_ID} on {CONTESTED_DAY}\n")

    @tag("concurrency")
    @task
    def book_same_day(self):
        """All users fight for the same venue and day."""
        if not CONTESTED_VENUE_ID:
            return

        with self.client.post(
            "/api/v1/bookings",
            json={
                "venueId": CONTESTED_VENUE_ID,
                "userId": random_user_id(),
                "startDate": CONTESTED_DAY,
                "endDate": CONTESTED_DAY,
            },
            name="/api/v1/bookings [contested]",
            catch_response=True,
        ) as resp:
            if resp.status_code == 201:
                resp.success()
            elif resp.status_code in (400, 409):
                resp.success()  # Expected: already booked, or lost the race
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class ThroughputUser(HttpUser):
    """
    TEST 2: Throughput - Cache effectiveness

    Run twice:
      1. With Redis: locust -f locustfile.py --tags throughput -u 100 -r 20 --run-time 60s
      2. Without Redis: REDIS_ENABLED=false, run again

    Compare:
      - Avg response time
      - Requests/sec
      - P95/P99 latency
    """
    wait_time = between(0.1, 0.5)

    def on_start(self):
        if not VENUE_IDS:
            resp = self.client.get("/api/v1/venues?page=1&pageSize=50")
            if resp.status_code == 200:
                VENUE_IDS.extend(v["id"] for v in resp.json()["venues"])

    @tag("throughput", "read")
    @task(10)
    def available_dates_cached(self):
        """Hammer the cached endpoint with the default 30-day window."""
        if VENUE_IDS:
            venue_id = random.choice(VENUE_IDS)
            self.client.get(
                f"/api/v1/venues/{venue_id}/available-dates",
                name="/api/v1/venues/{id}/available-dates [cached]",
            )

    @tag("throughput", "read")
    @task(3)
    def get_venue_detail(self):
        if VENUE_IDS:
            venue_id = random.choice(VENUE_IDS)
            self.client.get(f"/api/v1/venues/{venue_id}", name="/api/v1/venues/{id}")

    @tag("throughput")
    @task(1)
    def health_check(self):
        self.client.get("/health")


class EdgeCaseUser(HttpUser):
    """
    TEST 3: Edge cases - Bad input handling

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s

    System should NOT crash, return proper error codes.
    """
    wait_time = between(0.5, 1.5)

    def _expect(self, resp, codes):
        if resp.status_code in codes:
            resp.success()
        else:
            resp.failure(f"Expected {codes}, got {resp.status_code}")

    @tag("edge")
    @task
    def unknown_venue(self):
        day = bookable_day(30).isoformat()
        with self.client.post(
            "/api/v1/bookings",
            json={"venueId": 999999, "startDate": day, "endDate": day},
            catch_response=True,
        ) as resp:
            self._expect(resp, (404,))

    @tag("edge")
    @task
    def monday_booking(self):
        monday = date.today() + timedelta(days=7 - date.today().weekday())
        with self.client.post(
            "/api/v1/bookings",
            json={"venueId": 1, "startDate": monday.isoformat(), "endDate": monday.isoformat()},
            catch_response=True,
        ) as resp:
            self._expect(resp, (400, 404))

    @tag("edge")
    @task
    def reversed_range(self):
        with self.client.post(
            "/api/v1/bookings",
            json={
                "venueId": 1,
                "startDate": bookable_day(40).isoformat(),
                "endDate": bookable_day(30).isoformat(),
            },
            catch_response=True,
        ) as resp:
            self._expect(resp, (400,))

    @tag("edge")
    @task
    def garbage_date(self):
        with self.client.post(
            "/api/v1/bookings",
            json={"venueId": 1, "startDate": "soon", "endDate": "later"},
            catch_response=True,
        ) as resp:
            self._expect(resp, (400,))

    @tag("edge")
    @task
    def malformed_json(self):
        with self.client.post(
            "/api/v1/bookings",
            data="not json at all",
            catch_response=True,
        ) as resp:
            self._expect(resp, (400,))

    @tag("edge")
    @task
    def huge_window(self):
        with self.client.get(
            "/api/v1/venues/1/available-dates",
            params={"startDate": "2025-06-01", "endDate": "2030-06-01"},
            catch_response=True,
        ) as resp:
            self._expect(resp, (400,))

    @tag("edge")
    @task
    def user_bookings_without_auth(self):
        with self.client.get("/api/v1/bookings/user", catch_response=True) as resp:
            self._expect(resp, (401,))


class RealisticUser(HttpUser):
    """
    TEST 4: Realistic mixed workload

    Run: locust -f locustfile.py -u 200 -r 20 --run-time 120s

    Simulates real traffic:
      - Mostly browsing and calendar views
      - Some availability checks
      - Occasional bookings
    """
    wait_time = between(1, 3)

    def on_start(self):
        self.user_id = random_user_id()

    @task(40)
    def browse_popular(self):
        resp = self.client.get("/api/v1/venues/popular?sortBy=rating&limit=12")
        if resp.status_code == 200:
            for venue in resp.json():
                if venue["id"] not in VENUE_IDS:
                    VENUE_IDS.append(venue["id"])

    @task(20)
    def view_calendar(self):
        if VENUE_IDS:
            self.client.get(
                f"/api/v1/venues/{random.choice(VENUE_IDS)}/available-dates",
                name="/api/v1/venues/{id}/available-dates",
            )

    @task(10)
    def check_availability(self):
        if VENUE_IDS:
            day = bookable_day(random.randint(1, 120)).isoformat()
            self.client.get(
                "/api/v1/bookings/check-availability",
                params={"venueId": random.choice(VENUE_IDS), "startDate": day, "endDate": day},
                name="/api/v1/bookings/check-availability",
            )

    @task(3)
    def book_venue(self):
        if VENUE_IDS:
            start = bookable_day(random.randint(1, 365))
            end = start + timedelta(days=random.randint(0, 2))
            self.client.post(
                "/api/v1/bookings",
                json={
                    "venueId": random.choice(VENUE_IDS),
                    "userId": self.user_id,
                    "startDate": start.isoformat(),
                    "endDate": end.isoformat(),
                    "guestCount": random.randint(10, 150),
                },
                name="/api/v1/bookings",
            )
