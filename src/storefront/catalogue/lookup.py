"""Read-only product resolution used by the cart view and the order builder."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product


def lookup_product(product_id) -> Product | None:
    """Return the live product, or ``None`` if it does not exist (anymore)."""
    if not product_id:
        return None
    try:
        return current_domain.repository_for(Product).get(str(product_id))
    except ObjectNotFoundError:
        return None


def lookup_products(product_ids) -> dict[str, Product]:
    """Resolve several products at once; missing ids are simply absent from the result."""
    resolved = {}
    for product_id in dict.fromkeys(str(pid) for pid in product_ids):
        product = lookup_product(product_id)
        if product is not None:
            resolved[product_id] = product
    return resolved


def list_products() -> list[Product]:
    return current_domain.repository_for(Product)._dao.query.all().items
