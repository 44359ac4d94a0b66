"""Application tests for order payment and delivery."""

import json

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError

from storefront.catalogue.management import AddProduct
from storefront.customer.registration import RegisterCustomer
from storefront.order.creation import PlaceOrder
from storefront.order.delivery import MarkOrderDelivered
from storefront.order.order import Order
from storefront.order.payment import ConfirmGatewayPayment, RecordOrderPayment, sign_order_payment
from storefront.payment.signer import generate_payment_hash

ADDRESS = {"address": "12 Galle Road", "city": "Colombo", "postal_code": "00300", "country": "Sri Lanka"}


def _placed_order(email="buyer@example.com"):
    customer_id = current_domain.process(RegisterCustomer(name="Buyer", email=email), asynchronous=False)
    product_id = current_domain.process(
        AddProduct(name="Ceylon Black Tea", price=1000.0, weight="500g"),
        asynchronous=False,
    )
    return current_domain.process(
        PlaceOrder(
            customer_id=customer_id,
            items=json.dumps([{"product_id": product_id, "quantity": 3}]),
            payment_method="PayHere",
            shipping_address=json.dumps(ADDRESS),
        ),
        asynchronous=False,
    )


def _order(order_id):
    return current_domain.repository_for(Order).get(order_id)


class TestRecordOrderPayment:
    def test_marks_order_paid(self):
        order_id = _placed_order()
        current_domain.process(
            RecordOrderPayment(order_id=order_id, transaction_id="TX-1", status="COMPLETED", email_address="p@x.com"),
            asynchronous=False,
        )
        order = _order(order_id)
        assert order.is_paid is True
        assert order.paid_at is not None
        assert order.payment_result.transaction_id == "TX-1"
        assert order.payment_result.email_address == "p@x.com"

    def test_email_falls_back_to_account_email(self):
        order_id = _placed_order(email="Owner@Example.com")
        current_domain.process(RecordOrderPayment(order_id=order_id), asynchronous=False)
        order = _order(order_id)
        assert order.payment_result.email_address == "owner@example.com"
        assert order.payment_result.status == "Success"
        assert order.payment_result.transaction_id.startswith("PAYHERE_")

    def test_second_payment_rejected(self):
        order_id = _placed_order()
        current_domain.process(RecordOrderPayment(order_id=order_id, transaction_id="TX-1"), asynchronous=False)

        with pytest.raises(ValidationError):
            current_domain.process(RecordOrderPayment(order_id=order_id, transaction_id="TX-2"), asynchronous=False)

        assert _order(order_id).payment_result.transaction_id == "TX-1"

    def test_payment_keeps_prices(self):
        order_id = _placed_order()
        current_domain.process(RecordOrderPayment(order_id=order_id), asynchronous=False)
        assert _order(order_id).total_price == 3430.0

    def test_unknown_order(self):
        with pytest.raises(ObjectNotFoundError):
            current_domain.process(RecordOrderPayment(order_id="ord-404"), asynchronous=False)


class TestConfirmGatewayPayment:
    def _confirm(self, order_id, status_code="2", amount="3430.00", currency="LKR", payment_id="320025071234"):
        return current_domain.process(
            ConfirmGatewayPayment(
                order_id=order_id,
                payment_id=payment_id,
                status_code=status_code,
                amount=amount,
                currency=currency,
            ),
            asynchronous=False,
        )

    def test_success_status_marks_paid(self):
        order_id = _placed_order()
        assert self._confirm(order_id) is True
        order = _order(order_id)
        assert order.is_paid is True
        assert order.payment_result.transaction_id == "320025071234"
        assert order.payment_result.email_address == "buyer@example.com"

    @pytest.mark.parametrize("status_code", ["0", "-1", "-2", "-3"])
    def test_other_statuses_change_nothing(self, status_code):
        order_id = _placed_order()
        assert self._confirm(order_id, status_code=status_code) is False
        assert _order(order_id).is_paid is False

    def test_already_paid_is_skipped(self):
        order_id = _placed_order()
        current_domain.process(RecordOrderPayment(order_id=order_id, transaction_id="TX-1"), asynchronous=False)

        assert self._confirm(order_id, payment_id="TX-2") is False
        assert _order(order_id).payment_result.transaction_id == "TX-1"

    @pytest.mark.parametrize("amount", ["1.00", "3429.99", "34300.00", "not-a-number"])
    def test_underpaid_or_overpaid_charge_is_rejected(self, amount):
        order_id = _placed_order()
        with pytest.raises(ValidationError):
            self._confirm(order_id, amount=amount)
        assert _order(order_id).is_paid is False

    def test_charge_in_other_currency_is_rejected(self):
        order_id = _placed_order()
        with pytest.raises(ValidationError):
            self._confirm(order_id, currency="USD")
        assert _order(order_id).is_paid is False

    def test_amount_is_compared_to_the_cent(self):
        order_id = _placed_order()
        assert self._confirm(order_id, amount="3430") is True


class TestSignOrderPayment:
    @pytest.fixture(autouse=True)
    def _merchant(self, merchant_env):
        pass

    def test_signs_stored_total(self):
        order = _order(_placed_order())
        signed = sign_order_payment(order, 3430, "LKR")
        assert signed == generate_payment_hash(order.id, "3430.00", "LKR")

    @pytest.mark.parametrize("amount", [0, -3430, "0.00"])
    def test_non_positive_amount_rejected(self, amount):
        order = _order(_placed_order())
        with pytest.raises(ValidationError) as exc:
            sign_order_payment(order, amount, "LKR")
        assert "amount" in exc.value.messages

    def test_amount_other_than_total_rejected(self):
        order = _order(_placed_order())
        with pytest.raises(ValidationError) as exc:
            sign_order_payment(order, 1, "LKR")
        assert exc.value.messages["amount"] == ["Amount does not match the order total"]

    def test_other_currency_rejected(self):
        order = _order(_placed_order())
        with pytest.raises(ValidationError):
            sign_order_payment(order, 3430, "USD")

    def test_paid_order_rejected(self):
        order_id = _placed_order()
        current_domain.process(RecordOrderPayment(order_id=order_id), asynchronous=False)
        with pytest.raises(ValidationError):
            sign_order_payment(_order(order_id), 3430, "LKR")


class TestMarkOrderDelivered:
    def test_deliver_paid_order(self):
        order_id = _placed_order()
        current_domain.process(RecordOrderPayment(order_id=order_id), asynchronous=False)
        current_domain.process(MarkOrderDelivered(order_id=order_id), asynchronous=False)
        order = _order(order_id)
        assert order.is_delivered is True
        assert order.delivered_at is not None

    def test_unpaid_order_rejected(self):
        order_id = _placed_order()
        with pytest.raises(ValidationError):
            current_domain.process(MarkOrderDelivered(order_id=order_id), asynchronous=False)
