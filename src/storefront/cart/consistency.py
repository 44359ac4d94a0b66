"""Cart persistence helpers and the write-conflict retry around cart commands.

Protean versions every aggregate: saving a cart whose ``_version`` no longer
matches the stored one raises ``ExpectedVersionError`` when the handler's
unit of work commits. Cart commands are processed again on that error, so the
losing request reloads the cart and re-applies its change on top of the
winner's write instead of overwriting it.
"""

from collections.abc import Callable

import structlog
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart

logger = structlog.get_logger(__name__)

MAX_ATTEMPTS = 3


def load_cart(customer_id) -> ShoppingCart | None:
    try:
        return current_domain.repository_for(ShoppingCart).get(str(customer_id))
    except ObjectNotFoundError:
        return None


def apply_cart_change(
    customer_id,
    change: Callable[[ShoppingCart], None],
    create_missing: bool = False,
) -> ShoppingCart:
    """Load the customer's cart, apply ``change`` and stage the save.

    Args:
        customer_id: owner of the cart.
        change: mutates the cart in place; may raise domain errors.
        create_missing: open a new cart if the customer has none, otherwise
            a missing cart is a not-found error.
    """
    cart = load_cart(customer_id)
    if cart is None:
        if not create_missing:
            raise ObjectNotFoundError({"cart": ["Cart not found"]})
        cart = ShoppingCart.open(customer_id)

    change(cart)
    current_domain.repository_for(ShoppingCart).add(cart)
    return cart


def process_cart_command(command):
    """Process a cart command, running it again when a concurrent write wins.

    Gives up after ``MAX_ATTEMPTS`` and lets the last ``ExpectedVersionError``
    propagate.
    """
    for attempt in range(1, MAX_ATTEMPTS + 1):
        try:
            return current_domain.process(command, asynchronous=False)
        except ExpectedVersionError:
            if attempt == MAX_ATTEMPTS:
                logger.warning(
                    "Cart write conflict, giving up",
                    command=command.__class__.__name__,
                    customer_id=str(command.customer_id),
                    attempts=attempt,
                )
                raise
            logger.warning(
                "Cart write conflict, retrying",
                command=command.__class__.__name__,
                customer_id=str(command.customer_id),
                attempt=attempt,
            )


def delete_cart(customer_id) -> bool:
    """Delete the customer's cart outright. Returns False if there was none."""
    cart = load_cart(customer_id)
    if cart is None:
        return False
    current_domain.repository_for(ShoppingCart)._dao.delete(cart)
    return True
