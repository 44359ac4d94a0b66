"""Cart management: clearing the cart and merging client-held lines after login."""

import json

import structlog
from protean import handle
from protean.fields import Identifier, Text

from storefront.cart.cart import ShoppingCart
from storefront.cart.consistency import apply_cart_change, delete_cart
from storefront.catalogue.lookup import lookup_products
from storefront.domain import storefront

logger = structlog.get_logger(__name__)


@storefront.command(part_of="ShoppingCart")
class ClearCart:
    """Delete the customer's cart entirely."""

    customer_id = Identifier(required=True)


@storefront.command(part_of="ShoppingCart")
class MergeGuestCart:
    """Merge lines the browser collected before login into the server cart."""

    customer_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of {product_id, quantity}


@storefront.command_handler(part_of=ShoppingCart)
class ManageCartHandler:
    @handle(ClearCart)
    def clear_cart(self, command):
        deleted = delete_cart(command.customer_id)
        logger.info("Cart cleared", customer_id=str(command.customer_id), existed=deleted)

    @handle(MergeGuestCart)
    def merge_guest_cart(self, command):
        lines = json.loads(command.items) if isinstance(command.items, str) else command.items

        known = lookup_products(line["product_id"] for line in lines)
        mergeable = [line for line in lines if str(line["product_id"]) in known]
        skipped = len(lines) - len(mergeable)
        if skipped:
            logger.warning(
                "Dropping unknown products from guest cart",
                customer_id=str(command.customer_id),
                skipped=skipped,
            )

        if not mergeable:
            return 0

        merged = {}

        def merge(cart):
            merged["count"] = cart.merge_items(mergeable)

        apply_cart_change(command.customer_id, merge, create_missing=True)
        return merged["count"]
