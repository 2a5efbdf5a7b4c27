"""Cancellation requests sent to the order authority.

The storefront only asks; whether the order becomes cancelled is decided by
the service and shows up in the next read of the order.
"""

import structlog
from protean.exceptions import InvalidOperationError

from storefront.order.status import can_cancel, parse_status
from storefront.service.port import OrderDetailResult, StorefrontService

logger = structlog.get_logger(__name__)


def request_cancellation(service: StorefrontService, order_id: int, status) -> OrderDetailResult:
    """Ask the service to cancel ``order_id``, last seen in ``status``.

    Orders already delivered or cancelled are refused locally without a
    request.
    """
    if not can_cancel(parse_status(status)):
        raise InvalidOperationError(f"Order {order_id} cannot be cancelled while {status}")

    result = service.cancel_order(order_id)
    if result.success:
        logger.info("order_cancellation_requested", order_id=order_id)
    else:
        logger.warning("order_cancellation_refused", order_id=order_id, error=result.error)
    return result
