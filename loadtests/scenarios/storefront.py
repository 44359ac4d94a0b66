"""Storefront load test scenarios.

A stateful SequentialTaskSet journey from registration through a paid
order, plus a lightweight browsing user that hammers the read endpoints.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import (
    cart_line,
    customer_data,
    payment_confirmation,
    product_data,
    saved_address,
)
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import ShopperState


def _register_with_token(client, is_admin=False) -> tuple[str, str, dict]:
    """Register an account and fetch a bearer token from the dev token endpoint."""
    payload = customer_data()
    resp = client.post("/users", json=payload, name="POST /users")
    customer_id = resp.json()["customerId"]
    token_resp = client.post(
        f"/users/{customer_id}/token",
        params={"is_admin": str(is_admin).lower()},
        name="POST /users/{id}/token",
    )
    token = token_resp.json()["token"]
    return customer_id, payload["email"], {"Authorization": f"Bearer {token}"}


class ShopperJourney(SequentialTaskSet):
    """Register -> Save Address -> Add to Cart (x2) -> Adjust Quantity ->
    View Cart -> Checkout -> Sign Payment -> Pay -> My Orders.

    Each shopper seeds two products through a private admin account so the
    journey never depends on data created by other users.
    """

    def on_start(self):
        self.state = ShopperState()
        _, _, admin_headers = _register_with_token(self.client, is_admin=True)
        for _ in range(2):
            resp = self.client.post("/products", json=product_data(), headers=admin_headers, name="POST /products")
            if resp.status_code == 201:
                self.state.product_ids.append(resp.json()["id"])

    @task
    def register(self):
        try:
            customer_id, email, headers = _register_with_token(self.client)
        except (KeyError, ValueError):
            self.interrupt()
            return
        self.state.customer_id = customer_id
        self.state.email = email
        self.state.headers = headers

    @task
    def save_address(self):
        with self.client.post(
            "/users/profile/addresses",
            json=saved_address(),
            headers=self.state.headers,
            catch_response=True,
            name="POST /users/profile/addresses",
        ) as resp:
            if resp.status_code != 201:
                resp.failure(f"Save address failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def add_items(self):
        for product_id in self.state.product_ids:
            with self.client.post(
                "/cart",
                json=cart_line(product_id),
                headers=self.state.headers,
                catch_response=True,
                name="POST /cart",
            ) as resp:
                if resp.status_code != 200:
                    resp.failure(f"Add to cart failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def adjust_quantity(self):
        if not self.state.product_ids:
            return
        product_id = self.state.product_ids[0]
        with self.client.put(
            f"/cart/{product_id}",
            json={"quantity": random.randint(1, 5)},
            headers=self.state.headers,
            catch_response=True,
            name="PUT /cart/{productId}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Set quantity failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def view_cart(self):
        with self.client.get("/cart", headers=self.state.headers, catch_response=True, name="GET /cart") as resp:
            if resp.status_code != 200:
                resp.failure(f"View cart failed: {resp.status_code} — {extract_error_detail(resp)}")
            elif not resp.json()["cartItems"]:
                resp.failure("Cart unexpectedly empty")

    @task
    def checkout(self):
        with self.client.post(
            "/cart/checkout",
            json={"paymentMethod": "PayHere"},
            headers=self.state.headers,
            catch_response=True,
            name="POST /cart/checkout",
        ) as resp:
            if resp.status_code == 201:
                order = resp.json()
                self.state.order_id = order["id"]
                self.state.order_total = order["totalPrice"]
            else:
                resp.failure(f"Checkout failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def sign_payment(self):
        with self.client.post(
            "/orders/generate-payhere-hash",
            json={"orderId": self.state.order_id, "amount": self.state.order_total, "currency": "LKR"},
            headers=self.state.headers,
            catch_response=True,
            name="POST /orders/generate-payhere-hash",
        ) as resp:
            # 500 means the server runs without merchant credentials; keep going
            if resp.status_code not in (200, 500):
                resp.failure(f"Payment hash failed: {resp.status_code} — {extract_error_detail(resp)}")
            else:
                resp.success()

    @task
    def pay(self):
        with self.client.put(
            f"/orders/{self.state.order_id}/pay",
            json=payment_confirmation(self.state.email),
            headers=self.state.headers,
            catch_response=True,
            name="PUT /orders/{id}/pay",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Pay order failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def my_orders(self):
        with self.client.get(
            "/orders/myorders",
            headers=self.state.headers,
            catch_response=True,
            name="GET /orders/myorders",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"My orders failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class ShopperUser(HttpUser):
    """Runs the full shopper journey end to end."""

    tasks = [ShopperJourney]
    wait_time = between(1, 3)


class BrowsingUser(HttpUser):
    """Anonymous visitor browsing the catalogue."""

    wait_time = between(0.5, 2)

    @task(5)
    def list_products(self):
        with self.client.get("/products", catch_response=True, name="GET /products") as resp:
            if resp.status_code == 200:
                products = resp.json()
                if products:
                    product_id = random.choice(products)["id"]
                    self.client.get(f"/products/{product_id}", name="GET /products/{id}")
            else:
                resp.failure(f"List products failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task(1)
    def health(self):
        self.client.get("/health", name="GET /health")
