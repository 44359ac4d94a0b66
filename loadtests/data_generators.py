"""Faker-based data generators for Locust load test scenarios.

Every generator returns a JSON-ready dict in the API's camelCase shape.
"""

import random
import uuid

from faker import Faker

fake = Faker()

WEIGHTS = ["100g", "250g", "340g", "500g", "750g", "1kg", "1.5kg", "2kg"]


def valid_email() -> str:
    """Unique, syntactically valid email (registration rejects duplicates)."""
    local = fake.user_name()[:20]
    return f"{local}.{uuid.uuid4().hex[:8]}@{fake.free_email_domain()}"


def customer_data() -> dict:
    return {"name": fake.name()[:255], "email": valid_email()}


def product_data() -> dict:
    word = fake.word().capitalize()
    return {
        "name": f"{word} {fake.word().capitalize()}"[:255],
        "price": round(random.uniform(100, 5000), 2),
        "weight": random.choice(WEIGHTS),
        "countInStock": random.randint(5, 100),
        "category": fake.word().capitalize(),
    }


def shipping_address() -> dict:
    return {
        "address": fake.street_address()[:255],
        "city": fake.city()[:100],
        "postalCode": fake.postcode()[:20],
        "country": fake.country()[:100],
    }


def saved_address() -> dict:
    return {**shipping_address(), "label": random.choice(["Home", "Work", "Other"]), "phone": fake.msisdn()[:15]}


def cart_line(product_id: str) -> dict:
    return {"productId": product_id, "quantity": random.randint(1, 4)}


def payment_confirmation(email: str | None = None) -> dict:
    return {
        "id": f"PAYHERE_{uuid.uuid4().hex[:12]}",
        "status": "COMPLETED",
        "emailAddress": email or fake.email(),
    }
