"""Order placement: commands and handler.

``PlaceOrder`` prices lines sent by the client; ``CheckoutCart`` prices the
customer's server-side cart and deletes it. Either way the handler reads the
lines, the catalogue and the customer inside one unit of work, and any price
fields the client may have sent never reach this layer.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.cart.consistency import delete_cart, load_cart
from storefront.customer.customer import Customer
from storefront.domain import storefront
from storefront.order.builder import build_order_lines, resolve_shipping_address
from storefront.order.order import Order

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class PlaceOrder:
    customer_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of {product_id, quantity}
    payment_method = String(required=True, max_length=50)
    shipping_address = Text()  # JSON: {address, city, postal_code, country}


@storefront.command(part_of="Order")
class CheckoutCart:
    customer_id = Identifier(required=True)
    payment_method = String(required=True, max_length=50)
    shipping_address = Text()  # JSON: {address, city, postal_code, country}


def _loads(value):
    if value is None or value == "":
        return None
    return json.loads(value) if isinstance(value, str) else value


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    def _place(self, customer_id, requested_lines, payment_method, supplied_address):
        customer = current_domain.repository_for(Customer).get(str(customer_id))
        shipping_address = resolve_shipping_address(customer, supplied_address)

        items_data, quote = build_order_lines(requested_lines)
        order = Order.place(
            customer_id=customer_id,
            items_data=items_data,
            shipping_address=shipping_address,
            payment_method=payment_method,
            quote=quote,
        )
        current_domain.repository_for(Order).add(order)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            customer_id=str(customer_id),
            items_price=order.items_price,
            shipping_price=order.shipping_price,
            total_price=order.total_price,
        )
        return str(order.id)

    @handle(PlaceOrder)
    def place_order(self, command):
        return self._place(
            command.customer_id,
            _loads(command.items) or [],
            command.payment_method,
            _loads(command.shipping_address),
        )

    @handle(CheckoutCart)
    def checkout_cart(self, command):
        cart = load_cart(command.customer_id)
        if cart is None or not cart.items:
            raise ValidationError({"cart": ["Cart is empty"]})

        order_id = self._place(
            command.customer_id,
            cart.snapshot(),
            command.payment_method,
            _loads(command.shipping_address),
        )
        delete_cart(command.customer_id)
        return order_id
