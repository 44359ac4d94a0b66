"""Domain events for the ShoppingCart aggregate."""

from protean.fields import Identifier, Integer

from storefront.domain import storefront


@storefront.event(part_of="ShoppingCart")
class CartItemAdded:
    """A product was added to the cart, or its quantity was increased by an add."""

    __version__ = 1

    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity_added = Integer(required=True)
    new_quantity = Integer(required=True)


@storefront.event(part_of="ShoppingCart")
class CartQuantityUpdated:
    """The quantity of a cart line was set to an absolute value."""

    __version__ = 1

    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@storefront.event(part_of="ShoppingCart")
class CartItemRemoved:
    """A line was removed from the cart, explicitly or by setting its quantity to zero."""

    __version__ = 1

    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)


@storefront.event(part_of="ShoppingCart")
class CartsMerged:
    """Lines held by the client were merged into the server-side cart."""

    __version__ = 1

    customer_id = Identifier(required=True)
    items_merged_count = Integer(required=True)
