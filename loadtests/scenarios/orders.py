"""Order load test scenarios: place, ship item by item, and cancel."""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import adjustment_data, inventory_record_data, order_data
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import OrderState


class _OrderJourney(SequentialTaskSet):
    def on_start(self):
        self.state = OrderState()

    def _stock_products(self, count):
        for _ in range(count):
            payload = inventory_record_data()
            with self.client.post("/inventory", json=payload, catch_response=True, name="POST /inventory") as resp:
                if resp.status_code != 201:
                    resp.failure(f"Create record failed: {resp.status_code}: {extract_error_detail(resp)}")
                    self.interrupt()
            self.client.post(
                f"/inventory/{payload['product_id']}/adjust",
                json=adjustment_data("INCREASE", 100),
                name="POST /inventory/{product_id}/adjust",
            )
            self.state.product_ids.append(payload["product_id"])

    def _place(self):
        lines = [(product_id, random.randint(1, 5)) for product_id in self.state.product_ids]
        with self.client.post("/orders", json=order_data(lines), catch_response=True, name="POST /orders") as resp:
            if resp.status_code == 201:
                self.state.order_id = resp.json()["order_id"]
            else:
                resp.failure(f"Place order failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    def _set_status(self, status):
        with self.client.put(
            f"/orders/{self.state.order_id}/status",
            json={"status": status},
            catch_response=True,
            name="PUT /orders/{id}/status",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Status {status} failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()


class PlaceAndShipJourney(_OrderJourney):
    """Stock products -> Place order -> Confirm -> Ship each line -> Deliver."""

    @task
    def stock_products(self):
        self._stock_products(random.randint(1, 3))

    @task
    def place_order(self):
        self._place()

    @task
    def confirm(self):
        self._set_status("CONFIRMED")

    @task
    def ship_lines(self):
        order = self.client.get(f"/orders/{self.state.order_id}", name="GET /orders/{id}").json()
        for item in order["items"]:
            with self.client.put(
                f"/orders/{self.state.order_id}/items/{item['id']}/ship",
                json={"quantity": item["quantity_remaining"], "carrier": "UPS"},
                catch_response=True,
                name="PUT /orders/{id}/items/{item_id}/ship",
            ) as resp:
                if resp.status_code != 200:
                    resp.failure(f"Ship item failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def deliver(self):
        self._set_status("DELIVERED")

    @task
    def done(self):
        self.interrupt()


class PlaceAndCancelJourney(_OrderJourney):
    """Stock products -> Place order -> Cancel."""

    @task
    def stock_products(self):
        self._stock_products(1)

    @task
    def place_order(self):
        self._place()

    @task
    def cancel(self):
        with self.client.put(
            f"/orders/{self.state.order_id}/cancel",
            json={"reason": "Customer changed their mind"},
            catch_response=True,
            name="PUT /orders/{id}/cancel",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Cancel failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class OrderUser(HttpUser):
    """Storefront traffic: most orders ship, some are cancelled."""

    wait_time = between(1.0, 3.0)
    tasks = {
        PlaceAndShipJourney: 4,
        PlaceAndCancelJourney: 1,
    }
