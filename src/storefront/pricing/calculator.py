"""Order pricing: items subtotal plus weight-tiered shipping.

Pure functions, no domain access. The same calculator prices the cart view,
cart checkout and direct order placement so that what the shopper sees and
what gets persisted never diverge.

Shipping policy:
    total weight <= 1 kg    ->  350 flat
    total weight >  1 kg    ->  350 + 80 for every started kilogram above the first

Weights are summed as ``Decimal`` so that tier boundaries (exactly 1 kg,
exactly 2 kg) are not pushed over by binary float error.
"""

import math
import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

BASE_SHIPPING_FEE = 350
EXTRA_KG_FEE = 80
FREE_WEIGHT_KG = Decimal("1")
DEFAULT_UNIT_WEIGHT_KG = Decimal("0.2")

_LEADING_MAGNITUDE = re.compile(r"^\s*(\d+(?:\.\d+)?|\.\d+)")


@dataclass(frozen=True)
class PricingLine:
    """One priceable line: unit price, quantity and the product's weight descriptor."""

    unit_price: float
    quantity: int
    weight: str | None = None


@dataclass(frozen=True)
class PriceQuote:
    """Result of pricing a set of lines."""

    items_price: float
    shipping_price: float
    total_price: float
    total_weight: float


def parse_weight_kg(descriptor: str | None) -> Decimal:
    """Resolve a weight descriptor like ``"340g"`` or ``"1.5 KG"`` to kilograms per unit.

    Anything without a recognisable unit, without a leading magnitude, or that
    resolves to a non-positive mass falls back to ``DEFAULT_UNIT_WEIGHT_KG``.
    """
    if not descriptor:
        return DEFAULT_UNIT_WEIGHT_KG

    normalized = descriptor.strip().lower()
    match = _LEADING_MAGNITUDE.match(normalized)
    if match is None:
        return DEFAULT_UNIT_WEIGHT_KG

    try:
        magnitude = Decimal(match.group(1))
    except InvalidOperation:
        return DEFAULT_UNIT_WEIGHT_KG

    # "kg" must be checked first: every kilogram descriptor also contains "g"
    if "kg" in normalized:
        kilograms = magnitude
    elif "g" in normalized:
        kilograms = magnitude / 1000
    else:
        return DEFAULT_UNIT_WEIGHT_KG

    if kilograms <= 0:
        return DEFAULT_UNIT_WEIGHT_KG
    return kilograms


def shipping_fee(total_weight_kg: Decimal | float | int) -> int:
    """Flat base fee for the first kilogram, plus a tier fee per started extra kilogram."""
    weight = Decimal(str(total_weight_kg))
    if weight <= FREE_WEIGHT_KG:
        return BASE_SHIPPING_FEE

    extra_tiers = math.ceil(weight - FREE_WEIGHT_KG)
    return BASE_SHIPPING_FEE + EXTRA_KG_FEE * extra_tiers


def total_weight_kg(lines: list[PricingLine]) -> Decimal:
    return sum((parse_weight_kg(line.weight) * line.quantity for line in lines), Decimal("0"))


def items_total(lines: list[PricingLine]) -> Decimal:
    return sum((Decimal(str(line.unit_price)) * line.quantity for line in lines), Decimal("0"))


def quote(lines: list[PricingLine]) -> PriceQuote:
    """Price a list of lines.

    An empty list is priced at zero: there is nothing to ship, so no shipping
    fee applies either.
    """
    if not lines:
        return PriceQuote(items_price=0.0, shipping_price=0.0, total_price=0.0, total_weight=0.0)

    items = items_total(lines)
    weight = total_weight_kg(lines)
    shipping = Decimal(shipping_fee(weight))

    return PriceQuote(
        items_price=float(items),
        shipping_price=float(shipping),
        total_price=float(items + shipping),
        total_weight=float(weight),
    )
