"""Shared BDD fixtures and step definitions for the Storefront."""

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then

from storefront.catalogue.management import AddProduct


@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


@pytest.fixture()
def products():
    """Catalogue product ids by their scenario alias."""
    return {}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a catalogue product named "{alias}"'))
def catalogue_product(products, alias):
    products[alias] = current_domain.process(
        AddProduct(name=alias.title(), price=1000.0, weight="500g"),
        asynchronous=False,
    )


@given(parsers.cfparse('a catalogue product "{alias}" priced at {price:d} weighing "{weight}"'))
def catalogue_product_priced(products, alias, price, weight):
    products[alias] = current_domain.process(
        AddProduct(name=alias.title(), price=float(price), weight=weight),
        asynchronous=False,
    )


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then("the cart action fails with a validation error")
@then("the payment action fails with a validation error")
def action_fails(error):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert isinstance(error["exc"], ValidationError)
