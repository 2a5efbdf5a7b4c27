"""Storefront bounded context: shopper-side cart, checkout and order tracking.

Holds the client-resident cart, resolves the shipping and billing identity
used at checkout, submits orders to the external order service and reflects
the order lifecycle that service reports back.
"""

import structlog
from protean.domain import Domain

storefront = Domain(name="storefront")

logger = structlog.get_logger(__name__)
