"""Builds the order-creation request from cart lines.

The total is the cart subtotal at the moment the shopper confirmed, and each
item carries the unit price it had in the cart. The service does not re-price.
"""

from protean.exceptions import InvalidOperationError

from storefront.api.schemas import OrderItemPayload, OrderSubmission
from storefront.cart.line import CartLine
from storefront.cart.store import CartStore

SUBMITTED_STATUS = "paid"


def submission_from_lines(lines: tuple[CartLine, ...], total: float) -> OrderSubmission:
    if not lines:
        raise InvalidOperationError("Cannot submit an order from an empty cart")

    items = [
        OrderItemPayload(product_id=line.product_id, quantity=line.quantity, price=line.unit_price)
        for line in lines
    ]
    return OrderSubmission(items=items, total=total, status=SUBMITTED_STATUS)


def build_submission(cart: CartStore) -> OrderSubmission:
    return submission_from_lines(cart.lines, cart.subtotal())
