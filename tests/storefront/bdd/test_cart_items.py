"""BDD tests for shopping cart lines."""

from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, scenarios, then, when

from storefront.cart.consistency import load_cart
from storefront.cart.items import AddToCart, RemoveFromCart, SetCartItemQuantity

scenarios("features/cart_items.feature")

CUSTOMER_ID = "cust-bdd-cart"


@given("a customer with an empty cart")
def empty_cart():
    assert load_cart(CUSTOMER_ID) is None


@when(parsers.cfparse('the customer adds {quantity:d} of "{alias}"'))
def add_to_cart(products, alias, quantity, error):
    try:
        current_domain.process(
            AddToCart(customer_id=CUSTOMER_ID, product_id=products[alias], quantity=quantity),
            asynchronous=False,
        )
    except ValidationError as exc:
        error["exc"] = exc


@when(parsers.cfparse('the customer sets "{alias}" to {quantity:d}'))
def set_quantity(products, alias, quantity):
    current_domain.process(
        SetCartItemQuantity(customer_id=CUSTOMER_ID, product_id=products[alias], quantity=quantity),
        asynchronous=False,
    )


@when(parsers.cfparse('the customer removes "{alias}"'))
def remove_from_cart(products, alias):
    current_domain.process(
        RemoveFromCart(customer_id=CUSTOMER_ID, product_id=products[alias]),
        asynchronous=False,
    )


@then(parsers.cfparse('the cart holds {quantity:d} of "{alias}"'))
def cart_holds(products, alias, quantity):
    cart = load_cart(CUSTOMER_ID)
    assert cart.line_for(products[alias]).quantity == quantity
    assert len(cart.items) == 1


@then("the cart is empty")
def cart_is_empty():
    cart = load_cart(CUSTOMER_ID)
    assert cart is None or cart.items == []
