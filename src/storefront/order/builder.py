"""Order building: turn requested lines into priced, snapshotted order data.

Prices never come from the client. Every line is resolved against the live
catalogue and priced with the same calculator the cart view uses. Lines
whose product cannot be found are skipped: they neither abort the order nor
contribute to its price.
"""

import structlog
from protean.exceptions import ValidationError

from storefront.catalogue.lookup import lookup_products
from storefront.customer.customer import Customer
from storefront.pricing.calculator import PriceQuote, PricingLine, quote

logger = structlog.get_logger(__name__)

ADDRESS_FIELDS = ("address", "city", "postal_code", "country")


def is_complete_address(address: dict | None) -> bool:
    return bool(address) and all(address.get(field) for field in ADDRESS_FIELDS)


def resolve_shipping_address(customer: Customer, supplied: dict | None) -> dict:
    """Supplied address if complete, else the customer's default, else their first saved address."""
    if is_complete_address(supplied):
        return {field: supplied[field] for field in ADDRESS_FIELDS}

    fallback = customer.delivery_address()
    if fallback is None:
        raise ValidationError({"shipping_address": ["Shipping address required"]})
    return fallback


def consolidate_lines(requested_lines: list[dict]) -> list[dict]:
    """Validate quantities and fold repeated products into a single line, keeping first-seen order."""
    if not requested_lines:
        raise ValidationError({"items": ["No order items"]})

    quantities: dict[str, int] = {}
    for line in requested_lines:
        product_id = str(line.get("product_id") or "")
        quantity = line.get("quantity")
        if not product_id:
            raise ValidationError({"items": ["Every order item needs a product"]})
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ValidationError({"items": [f"Invalid quantity for product {product_id}"]})
        quantities[product_id] = quantities.get(product_id, 0) + quantity

    return [{"product_id": product_id, "quantity": quantity} for product_id, quantity in quantities.items()]


def build_order_lines(requested_lines: list[dict]) -> tuple[list[dict], PriceQuote]:
    """Snapshot resolvable lines and price them from the current catalogue."""
    lines = consolidate_lines(requested_lines)
    products = lookup_products(line["product_id"] for line in lines)

    snapshots = []
    pricing_lines = []
    for line in lines:
        product = products.get(line["product_id"])
        if product is None:
            logger.warning("Skipping order line for unknown product", product_id=line["product_id"])
            continue

        snapshots.append(
            {
                "product_id": line["product_id"],
                "name": product.name,
                "unit_price": product.price,
                "quantity": line["quantity"],
                "image_url": product.image_url,
            }
        )
        pricing_lines.append(PricingLine(unit_price=product.price, quantity=line["quantity"], weight=product.weight))

    if not snapshots:
        raise ValidationError({"items": ["None of the requested products are available"]})

    return snapshots, quote(pricing_lines)
