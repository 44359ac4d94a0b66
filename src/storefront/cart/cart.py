"""Shopping Cart aggregate (CQRS): one mutable cart per authenticated customer.

The cart is identified by its owner, so there is never more than one cart per
customer. Lines are keyed by product: adding a product that is already in the
cart increases that line's quantity instead of adding a second line. A line
never holds a quantity below one: setting it to zero or less removes it.

Carts don't store prices. Prices, names and stock are resolved from the
catalogue every time the cart is displayed or checked out.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer

from storefront.cart.events import CartItemAdded, CartItemRemoved, CartQuantityUpdated, CartsMerged
from storefront.domain import storefront


@storefront.entity(part_of="ShoppingCart")
class CartItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    added_at = DateTime()


def _require_positive_quantity(quantity):
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise ValidationError({"quantity": ["Quantity must be a positive whole number"]})


@storefront.aggregate
class ShoppingCart:
    customer_id = Identifier(identifier=True, required=True)
    items = HasMany(CartItem)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def one_line_per_product(self):
        product_ids = [str(item.product_id) for item in self.items]
        if len(product_ids) != len(set(product_ids)):
            raise ValidationError({"items": ["A product can appear only once in the cart"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def open(cls, customer_id):
        now = datetime.now(UTC)
        return cls(customer_id=str(customer_id), created_at=now, updated_at=now)

    # -------------------------------------------------------------------
    # Line management
    # -------------------------------------------------------------------
    def line_for(self, product_id):
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    def add_item(self, product_id, quantity):
        """Add ``quantity`` units of a product; additive if the product is already in the cart."""
        _require_positive_quantity(quantity)

        now = datetime.now(UTC)
        existing = self.line_for(product_id)
        if existing:
            existing.quantity += quantity
            new_quantity = existing.quantity
        else:
            self.add_items(CartItem(product_id=str(product_id), quantity=quantity, added_at=now))
            new_quantity = quantity

        self.updated_at = now

        self.raise_(
            CartItemAdded(
                customer_id=str(self.customer_id),
                product_id=str(product_id),
                quantity_added=quantity,
                new_quantity=new_quantity,
            )
        )

    def set_item_quantity(self, product_id, quantity):
        """Overwrite a line's quantity. Zero or less removes the line."""
        item = self.line_for(product_id)
        if item is None:
            raise ObjectNotFoundError({"product_id": ["Item not found in cart"]})

        if quantity <= 0:
            self.remove_item(product_id)
            return

        _require_positive_quantity(quantity)
        previous_quantity = item.quantity
        item.quantity = quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartQuantityUpdated(
                customer_id=str(self.customer_id),
                product_id=str(product_id),
                previous_quantity=previous_quantity,
                new_quantity=quantity,
            )
        )

    def remove_item(self, product_id):
        """Remove a line. Removing a product that is not in the cart is a no-op."""
        item = self.line_for(product_id)
        if item is None:
            return

        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemRemoved(
                customer_id=str(self.customer_id),
                product_id=str(product_id),
            )
        )

    def merge_items(self, lines):
        """Merge lines held by the client into this cart with add semantics.

        Args:
            lines: iterable of dicts with ``product_id`` and ``quantity``.
                Lines with a non-positive quantity are ignored.
        """
        now = datetime.now(UTC)
        merged = 0

        for line in lines:
            quantity = line.get("quantity")
            if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
                continue

            existing = self.line_for(line["product_id"])
            if existing:
                existing.quantity += quantity
            else:
                self.add_items(CartItem(product_id=str(line["product_id"]), quantity=quantity, added_at=now))
            merged += 1

        if not merged:
            return 0

        self.updated_at = now
        self.raise_(CartsMerged(customer_id=str(self.customer_id), items_merged_count=merged))
        return merged

    def snapshot(self):
        """Plain ``[{product_id, quantity}]`` copy of the current lines."""
        return [{"product_id": str(item.product_id), "quantity": item.quantity} for item in self.items]
