"""Cart view: the customer's cart resolved against the live catalogue and priced."""

from dataclasses import dataclass, field

from storefront.cart.consistency import load_cart
from storefront.catalogue.lookup import lookup_products
from storefront.catalogue.product import Product
from storefront.pricing.calculator import PriceQuote, PricingLine, quote


@dataclass(frozen=True)
class CartLineView:
    product_id: str
    quantity: int
    product: Product | None  # None once the product has left the catalogue


@dataclass(frozen=True)
class CartView:
    customer_id: str
    lines: list[CartLineView] = field(default_factory=list)
    quote: PriceQuote = field(default_factory=lambda: quote([]))


def get_cart(customer_id) -> CartView:
    """Current cart state. A customer without a cart gets an empty view, not an error."""
    cart = load_cart(customer_id)
    if cart is None:
        return CartView(customer_id=str(customer_id))

    products = lookup_products(item.product_id for item in cart.items)
    lines = [
        CartLineView(
            product_id=str(item.product_id),
            quantity=item.quantity,
            product=products.get(str(item.product_id)),
        )
        for item in cart.items
    ]
    pricing_lines = [
        PricingLine(unit_price=line.product.price, quantity=line.quantity, weight=line.product.weight)
        for line in lines
        if line.product is not None
    ]
    return CartView(customer_id=str(customer_id), lines=lines, quote=quote(pricing_lines))
