"""Domain events for the Product aggregate."""

from protean.fields import Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductAdded:
    """A product was added to the catalogue."""

    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True)
    price = Float(required=True)
    weight = String()


@storefront.event(part_of="Product")
class ProductUpdated:
    """Product details (price, weight, stock...) were changed by an admin."""

    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True)
    price = Float(required=True)
    weight = String()
    count_in_stock = Integer()
