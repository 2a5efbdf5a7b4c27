"""Order statuses as reported by the order authority.

Fulfillment advances pending → processing → shipped → delivered. An order can
be cancelled from any status that is not terminal; delivered and cancelled
are terminal. Transitions are decided by the order authority; the storefront
only reads them.
"""

from dataclasses import dataclass
from enum import Enum


class OrderStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


# Display order of the fulfillment steps
LIFECYCLE = (
    OrderStatus.PENDING,
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
)

TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})

# Orders are submitted as paid; payment happens at placement, so a paid
# order sits on the first step.
_STEP_ALIASES = {OrderStatus.PAID: OrderStatus.PENDING}


@dataclass(frozen=True)
class StatusInfo:
    title: str
    description: str


STATUS_INFO = {
    OrderStatus.PENDING: StatusInfo(
        "Order Placed",
        "Your order has been successfully placed and is being processed.",
    ),
    OrderStatus.PAID: StatusInfo(
        "Payment Confirmed",
        "Payment has been confirmed and your order is being processed.",
    ),
    OrderStatus.PROCESSING: StatusInfo(
        "Processing",
        "We are preparing your order for shipment.",
    ),
    OrderStatus.SHIPPED: StatusInfo(
        "Shipped",
        "Your order has been shipped and is on its way to you.",
    ),
    OrderStatus.DELIVERED: StatusInfo(
        "Delivered",
        "Your order has been successfully delivered.",
    ),
    OrderStatus.CANCELLED: StatusInfo(
        "Cancelled",
        "Your order has been cancelled.",
    ),
}

STEP_LABELS = {
    OrderStatus.PENDING: "Order Placed",
    OrderStatus.PROCESSING: "Processing",
    OrderStatus.SHIPPED: "Shipped",
    OrderStatus.DELIVERED: "Delivered",
}


def parse_status(value) -> OrderStatus | None:
    """Map a wire status to OrderStatus; unknown values give None."""
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(str(value).strip().lower())
    except ValueError:
        return None


def step_index(status: OrderStatus | None) -> int:
    """Position of the status in LIFECYCLE, or -1 when it is not a step."""
    status = _STEP_ALIASES.get(status, status)
    try:
        return LIFECYCLE.index(status)
    except ValueError:
        return -1


def status_info(status: OrderStatus | None) -> StatusInfo:
    return STATUS_INFO.get(status, STATUS_INFO[OrderStatus.PENDING])


def is_terminal(status: OrderStatus | None) -> bool:
    return status in TERMINAL_STATUSES


def can_cancel(status: OrderStatus | None) -> bool:
    """Whether the shopper may ask for cancellation of an order in this status."""
    return status is not None and not is_terminal(status)
