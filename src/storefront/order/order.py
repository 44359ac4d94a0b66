"""Order aggregate (CQRS): an immutable, server-priced record of a purchase.

Line items are snapshots: name, unit price and image are copied from the
catalogue when the order is placed, so editing or deleting a product later
never changes an existing order. The three price fields are always derived
on the server and always satisfy ``total_price == items_price + shipping_price``.

Lifecycle flags only ever move forward:
    unpaid → paid (exactly once) → delivered (exactly once)
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String, ValueObject

from storefront.domain import storefront
from storefront.order.events import OrderDelivered, OrderPaid, OrderPlaced

# Totals are floats; anything below a hundredth of a unit is representation noise
_PRICE_TOLERANCE = 0.005


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class ShippingAddress:
    """Where the order ships, captured at placement time.

    A copy, not a reference: later address-book edits don't move orders.
    """

    address = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)


@storefront.value_object(part_of="Order")
class PaymentResult:
    """What the payment gateway reported for the order's payment."""

    transaction_id = String(required=True, max_length=255)
    status = String(max_length=50)
    update_time = String(max_length=64)
    email_address = String(max_length=254)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    image_url = String(max_length=1024)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    customer_id = Identifier(required=True)
    items = HasMany(OrderItem)
    shipping_address = ValueObject(ShippingAddress)
    payment_method = String(max_length=50)
    items_price = Float(default=0.0)
    shipping_price = Float(default=0.0)
    total_price = Float(default=0.0)
    is_paid = Boolean(default=False)
    paid_at = DateTime()
    payment_result = ValueObject(PaymentResult)
    is_delivered = Boolean(default=False)
    delivered_at = DateTime()
    created_at = DateTime()

    @invariant.post
    def total_is_items_plus_shipping(self):
        expected = (self.items_price or 0.0) + (self.shipping_price or 0.0)
        if abs((self.total_price or 0.0) - expected) > _PRICE_TOLERANCE:
            raise ValidationError({"total_price": ["Total price must equal items price plus shipping price"]})

    @invariant.post
    def order_must_have_items(self):
        if not self.items:
            raise ValidationError({"items": ["An order must contain at least one item"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, customer_id, items_data, shipping_address, payment_method, quote):
        """Create an order from already-resolved line snapshots and a server-side quote.

        Args:
            customer_id: The customer placing the order.
            items_data: List of dicts with product_id, name, unit_price,
                        quantity and image_url.
            shipping_address: Dict with address, city, postal_code, country.
            payment_method: Free-form tag chosen at checkout (e.g. "PayHere").
            quote: ``PriceQuote`` from the pricing calculator.
        """
        if not items_data:
            raise ValidationError({"items": ["No order items"]})

        now = datetime.now(UTC)
        order = cls(
            customer_id=str(customer_id),
            items=[OrderItem(**item) for item in items_data],
            shipping_address=ShippingAddress(**shipping_address),
            payment_method=payment_method,
            items_price=quote.items_price,
            shipping_price=quote.shipping_price,
            total_price=quote.total_price,
            is_paid=False,
            is_delivered=False,
            created_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                customer_id=str(customer_id),
                item_count=len(items_data),
                items_price=quote.items_price,
                shipping_price=quote.shipping_price,
                total_price=quote.total_price,
                payment_method=payment_method,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def mark_paid(self, transaction_id=None, status=None, email_address=None, update_time=None):
        """Record the gateway's payment confirmation. An order can be paid only once."""
        if self.is_paid:
            raise ValidationError({"is_paid": ["Order is already paid"]})

        now = datetime.now(UTC)
        result = PaymentResult(
            transaction_id=transaction_id or f"PAYHERE_{int(now.timestamp() * 1000)}",
            status=status or "Success",
            update_time=update_time or now.isoformat(),
            email_address=email_address,
        )

        self.is_paid = True
        self.paid_at = now
        self.payment_result = result

        self.raise_(
            OrderPaid(
                order_id=str(self.id),
                customer_id=str(self.customer_id),
                transaction_id=result.transaction_id,
                status=result.status,
                email_address=result.email_address,
                total_price=self.total_price,
                paid_at=now,
            )
        )

    def mark_delivered(self):
        if not self.is_paid:
            raise ValidationError({"is_delivered": ["Only paid orders can be delivered"]})
        if self.is_delivered:
            raise ValidationError({"is_delivered": ["Order is already delivered"]})

        now = datetime.now(UTC)
        self.is_delivered = True
        self.delivered_at = now

        self.raise_(OrderDelivered(order_id=str(self.id), delivered_at=now))
