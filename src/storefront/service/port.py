"""Storefront service port (abstract interface).

Defines the contract of the external order and address service the
storefront talks to. Adapters never raise for I/O problems: every call
returns a result carrying ``success`` and, on failure, the message to show
the shopper. This lets HttpStorefrontService (real service) and
FakeStorefrontService (dev/test) be swapped without touching checkout or
order tracking code.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from storefront.address.address import SavedAddress
from storefront.api.schemas import AddressPayload, OrderSchema, OrderSubmission, StatusChangeSchema


@dataclass(frozen=True)
class AddressListResult:
    success: bool
    addresses: tuple[SavedAddress, ...] = ()
    error: str | None = None


@dataclass(frozen=True)
class AddressSaveResult:
    success: bool
    address: SavedAddress | None = None
    error: str | None = None


@dataclass(frozen=True)
class OrderPlacementResult:
    """Outcome of submitting an order.

    ``email_warning`` is set when the order was accepted but its confirmation
    email could not be sent.
    """

    success: bool
    order_id: int | None = None
    email_warning: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class OrderListResult:
    success: bool
    orders: tuple[OrderSchema, ...] = ()
    error: str | None = None


@dataclass(frozen=True)
class OrderDetailResult:
    success: bool
    order: OrderSchema | None = None
    history: tuple[StatusChangeSchema, ...] = field(default_factory=tuple)
    error: str | None = None


@dataclass(frozen=True)
class InvoiceResult:
    success: bool
    content: bytes = b""
    content_type: str | None = None
    filename: str | None = None
    error: str | None = None


class StorefrontService(ABC):
    """Abstract order and address service interface."""

    @abstractmethod
    def list_addresses(self) -> AddressListResult:
        """Fetch the shopper's saved addresses."""
        ...

    @abstractmethod
    def save_address(self, payload: AddressPayload) -> AddressSaveResult:
        """Add a new address to the address book."""
        ...

    @abstractmethod
    def update_address(self, payload: AddressPayload) -> AddressSaveResult:
        """Replace the fields of an existing saved address."""
        ...

    @abstractmethod
    def place_order(self, submission: OrderSubmission) -> OrderPlacementResult:
        """Create an order from a submission. Not retried on failure."""
        ...

    @abstractmethod
    def list_orders(self) -> OrderListResult:
        """Fetch the shopper's orders, newest first."""
        ...

    @abstractmethod
    def fetch_order(self, order_id: int, with_history: bool = True) -> OrderDetailResult:
        """Fetch one order, optionally with its status history."""
        ...

    @abstractmethod
    def cancel_order(self, order_id: int) -> OrderDetailResult:
        """Ask the order authority to cancel an order."""
        ...

    @abstractmethod
    def download_invoice(self, order_id: int) -> InvoiceResult:
        """Fetch the invoice document of an order."""
        ...

    def close(self) -> None:  # noqa: B027
        """Release any transport resources held by the adapter."""
