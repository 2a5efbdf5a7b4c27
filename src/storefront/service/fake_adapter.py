"""Configurable in-memory order and address service for development and testing.

Keeps addresses, orders and status history in memory and follows the same
rules the real service applies to submissions. It can be configured at
runtime to reject orders, to report a failed confirmation email, or to fail
address-book writes, and it records every call for test assertions.

``advance_status`` plays the part of the external order authority.
"""

from datetime import UTC, datetime
from itertools import count

from storefront.address.address import SavedAddress
from storefront.api.schemas import (
    AddressPayload,
    OrderItemSchema,
    OrderSchema,
    OrderSubmission,
    StatusChangeSchema,
)
from storefront.order.status import OrderStatus, can_cancel, parse_status
from storefront.service.port import (
    AddressListResult,
    AddressSaveResult,
    InvoiceResult,
    OrderDetailResult,
    OrderListResult,
    OrderPlacementResult,
    StorefrontService,
)

EMAIL_WARNING = "Order placed, but failed to send confirmation email."


class FakeStorefrontService(StorefrontService):
    """Configurable fake order and address service."""

    def __init__(self, first_order_id: int = 1, first_address_id: int = 1) -> None:
        self.order_should_succeed: bool = True
        self.failure_reason: str = "Failed to create order"
        self.email_should_fail: bool = False
        self.address_save_should_fail: bool = False
        self.calls: list[dict] = []

        self.addresses: list[SavedAddress] = []
        self.orders: dict[int, OrderSchema] = {}
        self.history: dict[int, list[StatusChangeSchema]] = {}
        self._order_ids = count(first_order_id)
        self._address_ids = count(first_address_id)

    def configure(
        self,
        order_should_succeed: bool = True,
        failure_reason: str = "Failed to create order",
        email_should_fail: bool = False,
        address_save_should_fail: bool = False,
    ) -> None:
        """Configure fake behavior at runtime."""
        self.order_should_succeed = order_should_succeed
        self.failure_reason = failure_reason
        self.email_should_fail = email_should_fail
        self.address_save_should_fail = address_save_should_fail

    def calls_to(self, method: str) -> list[dict]:
        return [c for c in self.calls if c["method"] == method]

    # -------------------------------------------------------------------
    # Addresses
    # -------------------------------------------------------------------
    def seed_address(self, **fields) -> SavedAddress:
        """Put an address straight into the address book (test setup)."""
        fields.setdefault("address_id", next(self._address_ids))
        address = SavedAddress(**fields)
        self.addresses.append(address)
        return address

    def list_addresses(self) -> AddressListResult:
        self.calls.append({"method": "list_addresses"})
        # Defaults first, matching the real service's ordering
        ordered = sorted(self.addresses, key=lambda a: not a.is_default)
        return AddressListResult(success=True, addresses=tuple(ordered))

    def save_address(self, payload: AddressPayload) -> AddressSaveResult:
        self.calls.append({"method": "save_address", "payload": payload.to_wire()})
        if self.address_save_should_fail:
            return AddressSaveResult(success=False, error="Failed to create address")

        saved = payload.model_copy(update={"id": next(self._address_ids)})
        if saved.is_default:
            self._clear_defaults()
        address = saved.to_saved_address()
        self.addresses.append(address)
        return AddressSaveResult(success=True, address=address)

    def update_address(self, payload: AddressPayload) -> AddressSaveResult:
        self.calls.append({"method": "update_address", "payload": payload.to_wire()})
        if self.address_save_should_fail:
            return AddressSaveResult(success=False, error="Failed to update address")

        index = next((i for i, a in enumerate(self.addresses) if a.address_id == payload.id), None)
        if index is None:
            return AddressSaveResult(success=False, error="Address not found")

        if payload.is_default:
            self._clear_defaults()
        address = payload.to_saved_address()
        self.addresses[index] = address
        return AddressSaveResult(success=True, address=address)

    def _clear_defaults(self) -> None:
        self.addresses = [
            SavedAddress(**{**a.to_dict(), "is_default": False}) if a.is_default else a for a in self.addresses
        ]

    # -------------------------------------------------------------------
    # Orders
    # -------------------------------------------------------------------
    def place_order(self, submission: OrderSubmission) -> OrderPlacementResult:
        self.calls.append({"method": "place_order", "payload": submission.to_wire()})

        if not self.order_should_succeed:
            return OrderPlacementResult(success=False, error=self.failure_reason)
        if not submission.items:
            return OrderPlacementResult(success=False, error="Order must have at least one item.")
        if submission.total <= 0:
            return OrderPlacementResult(success=False, error="Invalid total amount.")

        order_id = next(self._order_ids)
        now = datetime.now(UTC)
        self.orders[order_id] = OrderSchema(
            id=order_id,
            total=submission.total,
            status=submission.status,
            created_at=now,
            items=[
                OrderItemSchema(id=i, product_id=item.product_id, quantity=item.quantity, price=item.price)
                for i, item in enumerate(submission.items, start=1)
            ],
        )
        self.history[order_id] = [StatusChangeSchema(status=submission.status, changed_by="customer", created_at=now)]

        return OrderPlacementResult(
            success=True,
            order_id=order_id,
            email_warning=EMAIL_WARNING if self.email_should_fail else None,
        )

    def advance_status(self, order_id: int, status: str, changed_by: str = "admin", comment: str | None = None) -> None:
        """Record a status change decided by the order authority."""
        order = self.orders[order_id]
        self.orders[order_id] = order.model_copy(update={"status": status})
        self.history.setdefault(order_id, []).append(
            StatusChangeSchema(status=status, changed_by=changed_by, created_at=datetime.now(UTC), comment=comment)
        )

    def list_orders(self) -> OrderListResult:
        self.calls.append({"method": "list_orders"})
        newest_first = sorted(self.orders.values(), key=lambda o: o.id, reverse=True)
        return OrderListResult(success=True, orders=tuple(newest_first))

    def fetch_order(self, order_id: int, with_history: bool = True) -> OrderDetailResult:
        self.calls.append({"method": "fetch_order", "order_id": order_id, "with_history": with_history})
        order = self.orders.get(order_id)
        if order is None:
            return OrderDetailResult(success=False, error="Order not found")

        history = tuple(self.history.get(order_id, ())) if with_history else ()
        return OrderDetailResult(success=True, order=order, history=history)

    def cancel_order(self, order_id: int) -> OrderDetailResult:
        self.calls.append({"method": "cancel_order", "order_id": order_id})
        order = self.orders.get(order_id)
        if order is None:
            return OrderDetailResult(success=False, error="Order not found")
        if not can_cancel(parse_status(order.status)):
            return OrderDetailResult(success=False, error="Order cannot be cancelled")

        self.advance_status(
            order_id, OrderStatus.CANCELLED.value, changed_by="customer", comment="Order cancelled by Customer"
        )
        return OrderDetailResult(success=True, order=self.orders[order_id])

    def download_invoice(self, order_id: int) -> InvoiceResult:
        self.calls.append({"method": "download_invoice", "order_id": order_id})
        order = self.orders.get(order_id)
        if order is None:
            return InvoiceResult(success=False, error="Order not found")

        content = f"%PDF-1.4\n% Invoice for order #{order.id}, total {order.total:.2f}\n".encode()
        return InvoiceResult(
            success=True,
            content=content,
            content_type="application/pdf",
            filename=f"invoice-{order.id}.pdf",
        )
