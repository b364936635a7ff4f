"""
Locust Load Test Suite

Run scenarios:
  locust -f locustfile.py --tags seating     # Race parties for the same tables
  locust -f locustfile.py --tags throughput  # Table list cache and searches
  locust -f locustfile.py --tags edge        # Bad input handling
  locust -f locustfile.py                    # All tests
"""

import random
from datetime import date, timedelta

from locust import HttpUser, between, events, tag, task

# Shared state
TABLE_IDS = []
RESERVATION_IDS = []
CONTESTED_TABLE_ID = None


def next_open_day() -> str:
    """A date at least a week out that is not a Tuesday."""
    day = date.today() + timedelta(days=7)
    while day.weekday() == 1:
        day += timedelta(days=1)
    return day.isoformat()


def reservation_payload(people: int = 2) -> dict:
    return {
        "first_name": random.choice(["Ada", "Grace", "Alan", "Edsger"]),
        "last_name": random.choice(["Lovelace", "Hopper", "Turing", "Dijkstra"]),
        "mobile_number": f"800-555-{random.randint(1000, 9999)}",
        "reservation_date": next_open_day(),
        "reservation_time": random.choice(["12:00", "13:30", "18:00", "19:45"]),
        "people": people,
    }


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("\n" + "=" * 60)
    print("SETUP: seating race targets one shared table")
    print("=" * 60)


class SeatingUser(HttpUser):
    """
    TEST 1: Seating race - every user books a party and tries to seat it
    at the same table.

    Run: locust -f locustfile.py --tags seating -u 100 -r 50 --run-time 30s

    After test, verify at most one reservation holds the table:
      SELECT COUNT(*) FROM reservations WHERE status = 'seated';
    Should equal the number of occupied tables.
    """
    wait_time = between(0, 0.1)

    def on_start(self):
        global CONTESTED_TABLE_ID
        if CONTESTED_TABLE_ID is None:
            resp = self.client.post("/api/v1/tables/", json={"table_name": "Contested", "capacity": 8})
            if resp.status_code == 201:
                CONTESTED_TABLE_ID = resp.json()["table_id"]
                print(f"\nCreated contested table {CONTESTED_TABLE_ID}\n")

    @tag("seating")
    @task
    def seat_party(self):
        if CONTESTED_TABLE_ID is None:
            return

        resp = self.client.post("/api/v1/reservations/", json=reservation_payload())
        if resp.status_code != 201:
            return
        reservation_id = resp.json()["reservation_id"]

        with self.client.put(
            f"/api/v1/tables/{CONTESTED_TABLE_ID}/seat",
            json={"reservation_id": reservation_id},
            name="/api/v1/tables/{id}/seat",
            catch_response=True,
        ) as seat:
            if seat.status_code in (200, 409):
                seat.success()  # 409: table already occupied
            else:
                seat.failure(f"Unexpected: {seat.status_code}")

    @tag("seating")
    @task
    def finish_party(self):
        if CONTESTED_TABLE_ID is None:
            return

        with self.client.delete(
            f"/api/v1/tables/{CONTESTED_TABLE_ID}/seat",
            name="/api/v1/tables/{id}/seat [finish]",
            catch_response=True,
        ) as resp:
            if resp.status_code in (200, 409):
                resp.success()  # 409: nobody seated
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class ThroughputUser(HttpUser):
    """
    TEST 2: Throughput - table list cache and reservation search

    Run twice:
      1. With Redis: locust -f locustfile.py --tags throughput -u 100 -r 20 --run-time 60s
      2. Without Redis: REDIS_ENABLED=false, run again
    """
    wait_time = between(0.1, 0.5)

    @tag("throughput", "read")
    @task(10)
    def list_tables_cached(self):
        resp = self.client.get("/api/v1/tables/", name="/api/v1/tables/ [cached]")
        if resp.status_code == 200:
            for table in resp.json():
                if table["table_id"] not in TABLE_IDS:
                    TABLE_IDS.append(table["table_id"])

    @tag("throughput", "read")
    @task(5)
    def search_by_date(self):
        self.client.get(
            "/api/v1/reservations/",
            params={"date": next_open_day()},
            name="/api/v1/reservations/?date",
        )

    @tag("throughput", "read")
    @task(3)
    def search_by_phone(self):
        self.client.get(
            "/api/v1/reservations/",
            params={"mobile_number": "555"},
            name="/api/v1/reservations/?mobile_number",
        )

    @tag("throughput")
    @task(1)
    def health_check(self):
        self.client.get("/health")


class EdgeCaseUser(HttpUser):
    """
    TEST 3: Edge cases - bad input handling

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
    def past_reservation(self):
        payload = {**reservation_payload(), "reservation_date": "1999-01-01"}
        with self.client.post("/api/v1/reservations/", json=payload, catch_response=True) as resp:
            self._expect(resp, [400])

    @tag("edge")
    @task
    def outside_hours(self):
        payload = {**reservation_payload(), "reservation_time": "23:30"}
        with self.client.post("/api/v1/reservations/", json=payload, catch_response=True) as resp:
            self._expect(resp, [400])

    @tag("edge")
    @task
    def zero_people(self):
        with self.client.post(
            "/api/v1/reservations/", json=reservation_payload(people=0), catch_response=True
        ) as resp:
            self._expect(resp, [400])

    @tag("edge")
    @task
    def seat_unknown_reservation(self):
        with self.client.put(
            "/api/v1/tables/999999/seat",
            json={"reservation_id": 999999},
            name="/api/v1/tables/{id}/seat [unknown]",
            catch_response=True,
        ) as resp:
            self._expect(resp, [404])

    @tag("edge")
    @task
    def malformed_json(self):
        with self.client.post(
            "/api/v1/reservations/",
            data="not json at all",
            headers={"Content-Type": "application/json"},
            catch_response=True,
        ) as resp:
            self._expect(resp, [400, 422])


class RealisticUser(HttpUser):
    """
    TEST 4: Realistic mixed workload

    Run: locust -f locustfile.py -u 200 -r 20 --run-time 120s

    Simulates a service:
      - Mostly lookups
      - Some new reservations
      - Occasional seat/finish cycles
    """
    wait_time = between(1, 3)

    @task(40)
    def browse_tables(self):
        resp = self.client.get("/api/v1/tables/")
        if resp.status_code == 200:
            for table in resp.json():
                if table["table_id"] not in TABLE_IDS:
                    TABLE_IDS.append(table["table_id"])

    @task(20)
    def view_reservation(self):
        if RESERVATION_IDS:
            self.client.get(
                f"/api/v1/reservations/{random.choice(RESERVATION_IDS)}",
                name="/api/v1/reservations/{id}",
            )

    @task(15)
    def book(self):
        resp = self.client.post("/api/v1/reservations/", json=reservation_payload(random.randint(1, 6)))
        if resp.status_code == 201:
            RESERVATION_IDS.append(resp.json()["reservation_id"])

    @task(5)
    def seat_and_finish(self):
        if not (TABLE_IDS and RESERVATION_IDS):
            return
        table_id = random.choice(TABLE_IDS)
        seat = self.client.put(
            f"/api/v1/tables/{table_id}/seat",
            json={"reservation_id": random.choice(RESERVATION_IDS)},
            name="/api/v1/tables/{id}/seat",
        )
        if seat.status_code == 200:
            self.client.delete(f"/api/v1/tables/{table_id}/seat", name="/api/v1/tables/{id}/seat [finish]")

    @task(2)
    def add_table(self):
        resp = self.client.post(
            "/api/v1/tables/",
            json={"table_name": f"T{random.randint(1, 10000)}", "capacity": random.randint(2, 8)},
        )
        if resp.status_code == 201:
            TABLE_IDS.append(resp.json()["table_id"])
