"""Cart line management: commands and handler."""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, Integer

from storefront.cart.cart import ShoppingCart
from storefront.cart.consistency import apply_cart_change, load_cart
from storefront.catalogue.lookup import lookup_product
from storefront.domain import storefront

logger = structlog.get_logger(__name__)


@storefront.command(part_of="ShoppingCart")
class AddToCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@storefront.command(part_of="ShoppingCart")
class SetCartItemQuantity:
    """Absolute quantity; zero or less removes the line."""

    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)


@storefront.command(part_of="ShoppingCart")
class RemoveFromCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)


@storefront.command_handler(part_of=ShoppingCart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        if lookup_product(command.product_id) is None:
            raise ObjectNotFoundError({"product_id": [f"Product {command.product_id} not found"]})

        apply_cart_change(
            command.customer_id,
            lambda cart: cart.add_item(product_id=command.product_id, quantity=command.quantity),
            create_missing=True,
        )
        logger.info(
            "Added to cart",
            customer_id=str(command.customer_id),
            product_id=str(command.product_id),
            quantity=command.quantity,
        )

    @handle(SetCartItemQuantity)
    def set_cart_item_quantity(self, command):
        apply_cart_change(
            command.customer_id,
            lambda cart: cart.set_item_quantity(product_id=command.product_id, quantity=command.quantity),
        )

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        if load_cart(command.customer_id) is None:
            return

        apply_cart_change(
            command.customer_id,
            lambda cart: cart.remove_item(product_id=command.product_id),
        )
