"""Tests for the Order aggregate."""

import pytest
from protean.exceptions import ValidationError

from storefront.order.events import OrderDelivered, OrderPaid, OrderPlaced
from storefront.order.order import Order
from storefront.pricing.calculator import PriceQuote

ADDRESS = {"address": "12 Galle Road", "city": "Colombo", "postal_code": "00300", "country": "Sri Lanka"}


def _items():
    return [
        {
            "product_id": "prod-001",
            "name": "Ceylon Black Tea",
            "unit_price": 1000.0,
            "quantity": 3,
            "image_url": "/images/tea.jpg",
        }
    ]


def _quote():
    return PriceQuote(items_price=3000.0, shipping_price=430.0, total_price=3430.0, total_weight=1.5)


def _place(**overrides):
    kwargs = {
        "customer_id": "cust-001",
        "items_data": _items(),
        "shipping_address": ADDRESS,
        "payment_method": "PayHere",
        "quote": _quote(),
    }
    kwargs.update(overrides)
    return Order.place(**kwargs)


class TestPlace:
    def test_place_snapshots_items(self):
        order = _place()
        assert len(order.items) == 1
        assert order.items[0].name == "Ceylon Black Tea"
        assert order.items[0].unit_price == 1000.0
        assert order.shipping_address.city == "Colombo"

    def test_prices_come_from_quote(self):
        order = _place()
        assert order.items_price == 3000.0
        assert order.shipping_price == 430.0
        assert order.total_price == 3430.0

    def test_new_order_is_unpaid(self):
        order = _place()
        assert order.is_paid is False
        assert order.paid_at is None
        assert order.payment_result is None
        assert order.is_delivered is False

    def test_raises_placed_event(self):
        order = _place()
        placed = [e for e in order._events if isinstance(e, OrderPlaced)]
        assert len(placed) == 1
        assert placed[0].total_price == 3430.0
        assert placed[0].item_count == 1

    def test_empty_items_rejected(self):
        with pytest.raises(ValidationError):
            _place(items_data=[])

    def test_inconsistent_total_rejected(self):
        with pytest.raises(ValidationError):
            _place(quote=PriceQuote(items_price=3000.0, shipping_price=430.0, total_price=1.0, total_weight=1.5))


class TestMarkPaid:
    def test_mark_paid(self):
        order = _place()
        order.mark_paid(transaction_id="TX-1", status="COMPLETED", email_address="buyer@example.com")
        assert order.is_paid is True
        assert order.paid_at is not None
        assert order.payment_result.transaction_id == "TX-1"
        assert order.payment_result.status == "COMPLETED"
        assert order.payment_result.email_address == "buyer@example.com"

    def test_defaults(self):
        order = _place()
        order.mark_paid()
        assert order.payment_result.transaction_id.startswith("PAYHERE_")
        assert order.payment_result.status == "Success"
        assert order.payment_result.update_time

    def test_raises_paid_event(self):
        order = _place()
        order.mark_paid(transaction_id="TX-1")
        paid = [e for e in order._events if isinstance(e, OrderPaid)]
        assert paid[0].transaction_id == "TX-1"

    def test_second_payment_rejected_and_first_kept(self):
        order = _place()
        order.mark_paid(transaction_id="TX-1")
        first_paid_at = order.paid_at

        with pytest.raises(ValidationError):
            order.mark_paid(transaction_id="TX-2")

        assert order.payment_result.transaction_id == "TX-1"
        assert order.paid_at == first_paid_at


class TestMarkDelivered:
    def test_deliver_paid_order(self):
        order = _place()
        order.mark_paid()
        order.mark_delivered()
        assert order.is_delivered is True
        assert order.delivered_at is not None
        assert any(isinstance(e, OrderDelivered) for e in order._events)

    def test_unpaid_order_cannot_be_delivered(self):
        order = _place()
        with pytest.raises(ValidationError):
            order.mark_delivered()

    def test_cannot_deliver_twice(self):
        order = _place()
        order.mark_paid()
        order.mark_delivered()
        with pytest.raises(ValidationError):
            order.mark_delivered()
