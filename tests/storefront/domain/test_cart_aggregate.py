"""Tests for the ShoppingCart aggregate."""

import pytest
from protean.exceptions import ObjectNotFoundError, ValidationError

from storefront.cart.cart import ShoppingCart
from storefront.cart.events import CartItemAdded, CartItemRemoved, CartQuantityUpdated, CartsMerged


def _make_cart():
    return ShoppingCart.open("cust-001")


class TestOpen:
    def test_cart_is_keyed_by_customer(self):
        cart = _make_cart()
        assert cart.customer_id == "cust-001"
        assert cart.items == []


class TestAddItem:
    def test_add_item(self):
        cart = _make_cart()
        cart.add_item("prod-001", 2)
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 2

    def test_add_is_additive(self):
        cart = _make_cart()
        cart.add_item("prod-001", 2)
        cart.add_item("prod-001", 3)
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 5

    def test_add_different_products(self):
        cart = _make_cart()
        cart.add_item("prod-001", 1)
        cart.add_item("prod-002", 1)
        assert len(cart.items) == 2

    @pytest.mark.parametrize("quantity", [0, -1, 1.5, True, "2"])
    def test_rejects_non_positive_or_non_integer_quantity(self, quantity):
        cart = _make_cart()
        with pytest.raises(ValidationError):
            cart.add_item("prod-001", quantity)
        assert cart.items == []

    def test_raises_event(self):
        cart = _make_cart()
        cart.add_item("prod-001", 1)
        cart.add_item("prod-001", 2)
        added = [e for e in cart._events if isinstance(e, CartItemAdded)]
        assert len(added) == 2
        assert added[1].quantity_added == 2
        assert added[1].new_quantity == 3


class TestSetItemQuantity:
    def test_absolute_set(self):
        cart = _make_cart()
        cart.add_item("prod-001", 2)
        cart.set_item_quantity("prod-001", 7)
        assert cart.items[0].quantity == 7

    def test_set_raises_event(self):
        cart = _make_cart()
        cart.add_item("prod-001", 2)
        cart.set_item_quantity("prod-001", 7)
        updated = [e for e in cart._events if isinstance(e, CartQuantityUpdated)]
        assert updated[0].previous_quantity == 2
        assert updated[0].new_quantity == 7

    @pytest.mark.parametrize("quantity", [0, -3])
    def test_non_positive_removes_line(self, quantity):
        cart = _make_cart()
        cart.add_item("prod-001", 2)
        cart.set_item_quantity("prod-001", quantity)
        assert cart.items == []

    def test_missing_line_is_not_found(self):
        cart = _make_cart()
        with pytest.raises(ObjectNotFoundError):
            cart.set_item_quantity("prod-404", 1)


class TestRemoveItem:
    def test_remove_line(self):
        cart = _make_cart()
        cart.add_item("prod-001", 1)
        cart.add_item("prod-002", 1)
        cart.remove_item("prod-001")
        assert [str(i.product_id) for i in cart.items] == ["prod-002"]
        assert any(isinstance(e, CartItemRemoved) for e in cart._events)

    def test_remove_absent_product_is_noop(self):
        cart = _make_cart()
        cart.add_item("prod-001", 1)
        cart._events.clear()
        cart.remove_item("prod-404")
        assert len(cart.items) == 1
        assert cart._events == []


class TestMergeItems:
    def test_merge_is_additive(self):
        cart = _make_cart()
        cart.add_item("prod-001", 1)
        merged = cart.merge_items(
            [{"product_id": "prod-001", "quantity": 2}, {"product_id": "prod-002", "quantity": 1}]
        )
        assert merged == 2
        quantities = {str(i.product_id): i.quantity for i in cart.items}
        assert quantities == {"prod-001": 3, "prod-002": 1}

    def test_merge_skips_non_positive_quantities(self):
        cart = _make_cart()
        merged = cart.merge_items(
            [{"product_id": "prod-001", "quantity": 0}, {"product_id": "prod-002", "quantity": -2}]
        )
        assert merged == 0
        assert cart.items == []
        assert not any(isinstance(e, CartsMerged) for e in cart._events)

    def test_merge_raises_event(self):
        cart = _make_cart()
        cart.merge_items([{"product_id": "prod-001", "quantity": 2}])
        merged = [e for e in cart._events if isinstance(e, CartsMerged)]
        assert merged[0].items_merged_count == 1


class TestSnapshot:
    def test_snapshot_is_plain_lines(self):
        cart = _make_cart()
        cart.add_item("prod-001", 2)
        assert cart.snapshot() == [{"product_id": "prod-001", "quantity": 2}]
