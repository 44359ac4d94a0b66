"""Storefront bounded context: catalogue lookup, shopping cart, orders and payment signing.

The cart is a CQRS aggregate keyed by its owner; orders are priced entirely
server-side from the current catalogue and become immutable snapshots once
placed.
"""

import structlog
from protean.domain import Domain

storefront = Domain(name="storefront")

logger = structlog.get_logger(__name__)
