"""Order payment: commands, handlers and gateway checkout signing.

Driven either by the browser reporting a completed gateway session or by a
verified gateway notification. The payer email falls back to the order
owner's account email when the gateway did not send one. Gateway sessions
are only ever signed for, and only confirmed at, the stored order total.
"""

from decimal import Decimal

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.customer.customer import Customer
from storefront.domain import storefront
from storefront.order.order import Order
from storefront.payment.signer import (
    PAYHERE_CURRENCY,
    PAYHERE_STATUS_SUCCESS,
    PaymentHash,
    format_amount,
    generate_payment_hash,
)

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class RecordOrderPayment:
    order_id = Identifier(required=True)
    transaction_id = String(max_length=255)
    status = String(max_length=50)
    update_time = String(max_length=64)
    email_address = String(max_length=254)


def _owner_email(customer_id):
    try:
        return current_domain.repository_for(Customer).get(str(customer_id)).email
    except ObjectNotFoundError:
        return None


@storefront.command_handler(part_of=Order)
class RecordOrderPaymentHandler:
    @handle(RecordOrderPayment)
    def record_payment(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        order.mark_paid(
            transaction_id=command.transaction_id,
            status=command.status,
            update_time=command.update_time,
            email_address=command.email_address or _owner_email(order.customer_id),
        )
        repo.add(order)

        logger.info(
            "Order paid",
            order_id=str(order.id),
            transaction_id=order.payment_result.transaction_id,
            total_price=order.total_price,
        )


@storefront.command(part_of="Order")
class ConfirmGatewayPayment:
    """Payment completion pushed by the gateway after its signature was verified."""

    order_id = Identifier(required=True)
    payment_id = String(max_length=255)
    status_code = String(required=True, max_length=10)
    amount = String(required=True, max_length=32)
    currency = String(required=True, max_length=10)


def _charges_order_total(order, amount, currency) -> bool:
    try:
        return format_amount(amount) == format_amount(order.total_price) and currency == PAYHERE_CURRENCY
    except ValueError:
        return False


@storefront.command_handler(part_of=Order)
class ConfirmGatewayPaymentHandler:
    @handle(ConfirmGatewayPayment)
    def confirm_payment(self, command):
        """Mark the order paid on a success notification. Returns whether anything changed.

        The charged amount and currency must match the stored order total;
        anything else is rejected and the order stays unpaid.
        """
        if command.status_code != PAYHERE_STATUS_SUCCESS:
            logger.info(
                "Gateway notification without success status",
                order_id=str(command.order_id),
                status_code=command.status_code,
            )
            return False

        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        if order.is_paid:
            logger.info("Gateway notification for already paid order", order_id=str(order.id))
            return False

        if not _charges_order_total(order, command.amount, command.currency):
            logger.warning(
                "Gateway charge does not match order total",
                order_id=str(order.id),
                charged_amount=command.amount,
                charged_currency=command.currency,
                total_price=order.total_price,
            )
            raise ValidationError({"payhere_amount": ["Charged amount does not match the order total"]})

        order.mark_paid(
            transaction_id=command.payment_id,
            status="Success",
            email_address=_owner_email(order.customer_id),
        )
        repo.add(order)

        logger.info(
            "Order paid via gateway notification",
            order_id=str(order.id),
            transaction_id=order.payment_result.transaction_id,
        )
        return True


def sign_order_payment(order, amount, currency) -> PaymentHash:
    """Hash a gateway checkout session for an unpaid order.

    The signed amount is always the stored order total. The amount the
    browser sends must be positive and equal to it to the cent, and the
    currency must be the store currency.
    """
    if order.is_paid:
        raise ValidationError({"order_id": ["Order is already paid"]})
    if currency != PAYHERE_CURRENCY:
        raise ValidationError({"currency": [f"Only {PAYHERE_CURRENCY} payments are supported"]})

    try:
        requested = Decimal(format_amount(amount))
    except ValueError:
        raise ValidationError({"amount": ["Amount must be a number"]}) from None
    if requested <= 0:
        raise ValidationError({"amount": ["Amount must be greater than zero"]})

    total = format_amount(order.total_price)
    if requested != Decimal(total):
        logger.warning(
            "Payment hash requested for wrong amount",
            order_id=str(order.id),
            requested_amount=str(requested),
            total_price=order.total_price,
        )
        raise ValidationError({"amount": ["Amount does not match the order total"]})

    return generate_payment_hash(order.id, total, currency)
