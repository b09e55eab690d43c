"""Inventory load test scenarios: stock receipt, allocation and release."""

import random
import uuid

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import adjustment_data, inventory_record_data
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import StockState


class _StockJourney(SequentialTaskSet):
    def on_start(self):
        self.state = StockState()

    def _create_record(self):
        payload = inventory_record_data()
        with self.client.post("/inventory", json=payload, catch_response=True, name="POST /inventory") as resp:
            if resp.status_code == 201:
                self.state.product_id = payload["product_id"]
            else:
                resp.failure(f"Create record failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    def _receive(self, quantity):
        with self.client.post(
            f"/inventory/{self.state.product_id}/adjust",
            json=adjustment_data("INCREASE", quantity),
            catch_response=True,
            name="POST /inventory/{product_id}/adjust",
        ) as resp:
            if resp.status_code == 200:
                self.state.on_hand += quantity
            else:
                resp.failure(f"Adjust failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()


class ReceiveAndCountJourney(_StockJourney):
    """Create record -> Receive -> Cycle count (SET) -> Read balance."""

    @task
    def create_record(self):
        self._create_record()

    @task
    def receive(self):
        self._receive(random.randint(50, 200))

    @task
    def cycle_count(self):
        counted = max(0, self.state.on_hand - random.randint(0, 5))
        with self.client.post(
            f"/inventory/{self.state.product_id}/adjust",
            json=adjustment_data("SET", counted),
            catch_response=True,
            name="POST /inventory/{product_id}/adjust",
        ) as resp:
            if resp.status_code == 200:
                self.state.on_hand = counted
            else:
                resp.failure(f"Cycle count failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def read_balance(self):
        self.client.get(f"/inventory/{self.state.product_id}", name="GET /inventory/{product_id}")

    @task
    def done(self):
        self.interrupt()


class AllocateReleaseJourney(_StockJourney):
    """Create record -> Receive -> Allocate -> Release -> Movement history."""

    @task
    def create_record(self):
        self._create_record()

    @task
    def receive(self):
        self._receive(100)

    @task
    def allocate(self):
        quantity = random.randint(1, 20)
        with self.client.post(
            f"/inventory/{self.state.product_id}/allocate",
            json={"quantity": quantity, "reference_id": f"LT-{uuid.uuid4().hex[:8]}"},
            catch_response=True,
            name="POST /inventory/{product_id}/allocate",
        ) as resp:
            if resp.status_code == 200 and resp.json()["allocated"]:
                self.state.allocated += quantity
            else:
                resp.failure(f"Allocate failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def release(self):
        with self.client.post(
            f"/inventory/{self.state.product_id}/release",
            json={"quantity": self.state.allocated},
            catch_response=True,
            name="POST /inventory/{product_id}/release",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Release failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def history(self):
        self.client.get(
            "/inventory/movements",
            params={"product_id": self.state.product_id},
            name="GET /inventory/movements",
        )

    @task
    def done(self):
        self.interrupt()


class InventoryUser(HttpUser):
    """Warehouse staff: mostly receipts and counts, some manual allocations."""

    wait_time = between(0.5, 2.0)
    tasks = {
        ReceiveAndCountJourney: 3,
        AllocateReleaseJourney: 2,
    }

    @task
    def low_stock_report(self):
        self.client.get("/inventory/low-stock", name="GET /inventory/low-stock")
