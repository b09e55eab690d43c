"""Faker-based payload generators for the Locust scenarios.

Payloads pass the API's pydantic request schemas and the domain's own
validation (positive quantities, non-empty reasons, well-formed emails).
"""

import random
import uuid

from faker import Faker

fake = Faker()

WAREHOUSES = ["MAIN", "EAST", "WEST"]


def unique_product_id() -> str:
    return f"PRD-LT-{uuid.uuid4().hex[:10]}"


def inventory_record_data(product_id=None, warehouse_location="MAIN") -> dict:
    unit_cost = round(random.uniform(2, 80), 2)
    return {
        "product_id": product_id or unique_product_id(),
        "warehouse_location": warehouse_location,
        "sku": f"SKU-{uuid.uuid4().hex[:8].upper()}",
        "product_name": fake.catch_phrase()[:255],
        "reorder_level": random.randint(5, 20),
        "reorder_quantity": random.randint(25, 100),
        "unit_cost": unit_cost,
        "selling_price": round(unit_cost * random.uniform(1.2, 2.5), 2),
    }


def adjustment_data(adjustment_type="INCREASE", quantity=None, warehouse_location="MAIN") -> dict:
    return {
        "adjustment_type": adjustment_type,
        "quantity": quantity if quantity is not None else random.randint(10, 200),
        "reason": random.choice(["Purchase order received", "Cycle count", "Damaged in transit"]),
        "warehouse_location": warehouse_location,
        "actor_id": f"user-{random.randint(1, 50)}",
    }


def address_data() -> dict:
    return {
        "street": fake.street_address()[:255],
        "city": fake.city()[:100],
        "state": fake.state_abbr(),
        "zip_code": fake.zipcode()[:20],
        "country": "US",
    }


def order_data(lines) -> dict:
    """Order for ``lines``, a list of (product_id, quantity) tuples."""
    return {
        "customer_name": fake.name()[:255],
        "customer_email": f"{fake.user_name()[:20]}.{uuid.uuid4().hex[:4]}@{fake.free_email_domain()}",
        "customer_phone": fake.phone_number()[:50],
        "shipping_address": address_data(),
        "items": [
            {
                "product_id": product_id,
                "quantity": quantity,
                "unit_price": round(random.uniform(5, 120), 2),
            }
            for product_id, quantity in lines
        ],
    }
