"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """A priced order was created from requested lines or from the customer's cart."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    item_count = Integer(required=True)
    items_price = Float(required=True)
    shipping_price = Float(required=True)
    total_price = Float(required=True)
    payment_method = String()
    placed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderPaid:
    """The payment gateway reported a successful payment for the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    transaction_id = String(required=True)
    status = String()
    email_address = String()
    total_price = Float(required=True)
    paid_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderDelivered:
    """An admin marked the order as delivered."""

    __version__ = 1

    order_id = Identifier(required=True)
    delivered_at = DateTime(required=True)
