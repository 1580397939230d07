"""
Locust Load Test Suite

Run scenarios:
  locust -f locustfile.py --tags capacity     # Test the capacity ceiling
  locust -f locustfile.py --tags leaderboard  # Test leaderboard reads under score writes
  locust -f locustfile.py --tags throughput   # Test cache
  locust -f locustfile.py --tags edge         # Test bad input
  locust -f locustfile.py                     # All tests

Set ADMIN_TOKEN to the server's admin token before running.
"""

import os
import random
from datetime import date, timedelta

from locust import HttpUser, task, between, tag, events

ADMIN_HEADERS = {"X-Admin-Token": os.environ.get("ADMIN_TOKEN", "change-me-admin-token")}
CAPACITY = 10

# Shared state
EVENT_IDS = []
CAPACITY_EVENT_ID = None
LEADERBOARD_EVENT_ID = None


def future_date(days: int) -> str:
    return (date.today() + timedelta(days=days)).isoformat()


def event_payload(name: str, **overrides) -> dict:
    payload = {
        "event_name": name,
        "category": "Load Test",
        "start_date": future_date(30),
        "end_date": future_date(31),
        "time": "09:00 AM",
        "venue": "Main Ground",
    }
    payload.update(overrides)
    return payload


def random_roll() -> str:
    return str(random.randint(100000, 999999))


def applicant(event_id, roll_number: str) -> dict:
    return {
        "student_name": f"Student {roll_number}",
        "class_name": str(random.randint(6, 12)),
        "section": random.choice("ABCD"),
        "roll_number": roll_number,
        "phone": "9876543210",
        "event_id": event_id,
        "activity": "Load Test",
    }


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("\n" + "=" * 60)
    print(f"SETUP: events are created lazily; capacity event holds {CAPACITY} slots")
    print("=" * 60)


class CapacityUser(HttpUser):
    """
    TEST 1: Capacity - 100 students -> 10 slots

    Run: locust -f locustfile.py --tags capacity -u 100 -r 50 --run-time 30s

    After test, verify:
      SELECT COUNT(*) FROM applications WHERE event_id = X;
    Should be <= 10
    """
    wait_time = between(0, 0.1)

    def on_start(self):
        if not CAPACITY_EVENT_ID:
            resp = self.client.post(
                "/api/v1/events/",
                json=event_payload("Capacity Test Event", capacity=CAPACITY),
                headers=ADMIN_HEADERS,
            )
            if resp.status_code == 201:
                globals()["CAPACITY_EVENT_ID"] = resp.json()["id"]
                print(f"\nCreated event {CAPACITY_EVENT_ID} with {CAPACITY} slots\n")

    @tag("capacity")
    @task
    def apply_for_limited_event(self):
        """All students fight for the same 10 slots."""
        if not CAPACITY_EVENT_ID:
            return

        with self.client.post(
            "/api/v1/applications/",
            json=applicant(CAPACITY_EVENT_ID, random_roll()),
            catch_response=True,
        ) as resp:
            if resp.status_code == 201:
                resp.success()
            elif resp.status_code == 400:
                resp.success()  # Expected: full or duplicate
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class LeaderboardUser(HttpUser):
    """
    TEST 2: Leaderboard - score upserts racing leaderboard reads

    Run: locust -f locustfile.py --tags leaderboard -u 50 -r 10 --run-time 60s

    After test, verify no duplicate records:
      SELECT event_id, roll_number, level, COUNT(*) FROM performances
      GROUP BY 1, 2, 3 HAVING COUNT(*) > 1;
    Should return no rows
    """
    wait_time = between(0.05, 0.2)

    def on_start(self):
        if not LEADERBOARD_EVENT_ID:
            resp = self.client.post(
                "/api/v1/events/",
                json=event_payload("Leaderboard Test Event"),
                headers=ADMIN_HEADERS,
            )
            if resp.status_code == 201:
                globals()["LEADERBOARD_EVENT_ID"] = resp.json()["id"]

    @tag("leaderboard")
    @task(3)
    def record_score(self):
        """Small roll number pool so writes collide on the same key."""
        if not LEADERBOARD_EVENT_ID:
            return
        roll_number = str(random.randint(1, 50))
        self.client.post(
            "/api/v1/performance/",
            json={
                "event_id": LEADERBOARD_EVENT_ID,
                "roll_number": roll_number,
                "student_name": f"Student {roll_number}",
                "class_name": "8",
                "score": random.uniform(0, 100),
                "level": random.choice(["Class", "School"]),
            },
            headers=ADMIN_HEADERS,
            name="/api/v1/performance/",
        )

    @tag("leaderboard", "read")
    @task(10)
    def read_leaderboard(self):
        if not LEADERBOARD_EVENT_ID:
            return
        self.client.get(
            f"/api/v1/performance/leaderboard?event_id={LEADERBOARD_EVENT_ID}&level=School",
            name="/api/v1/performance/leaderboard",
        )

    @tag("leaderboard")
    @task(1)
    def promote(self):
        if not LEADERBOARD_EVENT_ID:
            return
        self.client.post(
            "/api/v1/performance/promote",
            json={"event_id": LEADERBOARD_EVENT_ID, "current_level": "School", "next_level": "Zonal", "limit": 5},
            headers=ADMIN_HEADERS,
        )


class ThroughputUser(HttpUser):
    """
    TEST 3: Throughput - Cache effectiveness

    Run twice:
      1. With Redis: locust -f locustfile.py --tags throughput -u 100 -r 20 --run-time 60s
      2. Without Redis: REDIS_ENABLED=false on the server, run again

    Compare:
      - Avg response time
      - Requests/sec
      - P95/P99 latency
    """
    wait_time = between(0.1, 0.5)

    @tag("throughput", "read")
    @task(10)
    def list_events_cached(self):
        """Hammer the cached endpoint."""
        page = random.randint(1, 5)
        resp = self.client.get(f"/api/v1/events/?page={page}&limit=20", name="/api/v1/events/ [cached]")
        if resp.status_code == 200:
            for event in resp.json().get("data", []):
                if event["id"] not in EVENT_IDS:
                    EVENT_IDS.append(event["id"])

    @tag("throughput", "read")
    @task(3)
    def get_availability(self):
        if EVENT_IDS:
            event_id = random.choice(EVENT_IDS)
            self.client.get(f"/api/v1/events/{event_id}/availability", name="/api/v1/events/{id}/availability")

    @tag("throughput")
    @task(1)
    def health_check(self):
        self.client.get("/health")


class EdgeCaseUser(HttpUser):
    """
    TEST 4: Edge cases - Bad input handling

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
    def invalid_event_id(self):
        with self.client.post(
            "/api/v1/applications/", json=applicant(999999, random_roll()), catch_response=True
        ) as resp:
            self._expect(resp, [404])

    @tag("edge")
    @task
    def bad_phone(self):
        payload = applicant(None, random_roll())
        payload["phone"] = "123"
        with self.client.post("/api/v1/applications/", json=payload, catch_response=True) as resp:
            self._expect(resp, [400])

    @tag("edge")
    @task
    def malformed_json(self):
        with self.client.post("/api/v1/applications/", data="not json at all", catch_response=True) as resp:
            self._expect(resp, [400])

    @tag("edge")
    @task
    def promote_from_class(self):
        with self.client.post(
            "/api/v1/performance/promote",
            json={"event_id": 1, "current_level": "Class", "next_level": "School"},
            headers=ADMIN_HEADERS,
            catch_response=True,
        ) as resp:
            self._expect(resp, [400, 404])

    @tag("edge")
    @task
    def missing_admin_token(self):
        with self.client.get("/api/v1/applications/", catch_response=True) as resp:
            self._expect(resp, [401])
