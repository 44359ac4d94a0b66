"""Product aggregate: the catalogue record that carts and orders resolve against.

Carts reference products by id and always show the live name, price and
stock. Orders copy name, price and image into their own line items at
placement time, so later edits here never reach historical orders.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Integer, String

from storefront.catalogue.events import ProductAdded, ProductUpdated
from storefront.domain import storefront

DEFAULT_WEIGHT = "200g"

_EDITABLE_FIELDS = ("name", "image_url", "category", "weight", "price", "count_in_stock")


@storefront.aggregate
class Product:
    name = String(required=True, max_length=255)
    image_url = String(max_length=1024)
    category = String(max_length=100)
    weight = String(max_length=50, default=DEFAULT_WEIGHT)  # e.g. "340g", "1kg"
    price = Float(required=True, min_value=0.01)
    count_in_stock = Integer(default=0, min_value=0)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def add(cls, name, price, weight=None, count_in_stock=0, image_url=None, category=None):
        now = datetime.now(UTC)
        product = cls(
            name=name,
            price=price,
            weight=weight or DEFAULT_WEIGHT,
            count_in_stock=count_in_stock,
            image_url=image_url,
            category=category,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductAdded(
                product_id=str(product.id),
                name=name,
                price=price,
                weight=product.weight,
            )
        )
        return product

    def update_details(self, **changes):
        """Apply a partial update. Fields left as ``None`` are not touched."""
        unknown = set(changes) - set(_EDITABLE_FIELDS)
        if unknown:
            raise ValidationError({"product": [f"Unknown product fields: {', '.join(sorted(unknown))}"]})

        applied = {field: value for field, value in changes.items() if value is not None}
        if not applied:
            return

        for field, value in applied.items():
            setattr(self, field, value)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            ProductUpdated(
                product_id=str(self.id),
                name=self.name,
                price=self.price,
                weight=self.weight,
                count_in_stock=self.count_in_stock,
            )
        )
