"""Order lifecycle tracker.

Reads an order and its status history from the service and presents them:
the progress steps, the headline for the current status, and the history in
the order the service sent it. The tracker never changes an order's status;
cancellation is a request to the order authority (see ``cancellation``).
"""

from dataclasses import dataclass

import structlog
from protean.exceptions import InvalidOperationError

from storefront.api.schemas import OrderSchema, StatusChangeSchema
from storefront.order.cancellation import request_cancellation
from storefront.order.progress import ProgressView, render_progress
from storefront.order.status import can_cancel, is_terminal, parse_status
from storefront.service.port import InvoiceResult, StorefrontService

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class TrackingView:
    order: OrderSchema
    history: tuple[StatusChangeSchema, ...]
    progress: ProgressView

    @property
    def is_terminal(self) -> bool:
        return is_terminal(parse_status(self.order.status))

    @property
    def cancellable(self) -> bool:
        return can_cancel(parse_status(self.order.status))


class OrderLifecycleTracker:
    def __init__(self, service: StorefrontService) -> None:
        self._service = service
        self.view: TrackingView | None = None
        self.error: str | None = None
        self.orders: tuple[OrderSchema, ...] = ()

    def load(self, order_id: int) -> TrackingView | None:
        """Fetch one order with its history. Failures leave ``error`` set and return None."""
        result = self._service.fetch_order(order_id, with_history=True)
        if not result.success or result.order is None:
            self.view = None
            self.error = result.error
            logger.warning("order_fetch_failed", order_id=order_id, error=result.error)
            return None

        self.error = None
        self.view = TrackingView(
            order=result.order,
            history=tuple(result.history),
            progress=render_progress(result.order.status),
        )
        return self.view

    def list_orders(self) -> tuple[OrderSchema, ...]:
        result = self._service.list_orders()
        if not result.success:
            self.error = result.error
            logger.warning("order_list_failed", error=result.error)
            return ()

        self.error = None
        self.orders = result.orders
        return self.orders

    def cancel(self) -> TrackingView | None:
        """Request cancellation of the loaded order, then re-read it."""
        if self.view is None:
            raise InvalidOperationError("No order loaded")

        order = self.view.order
        result = request_cancellation(self._service, order.id, order.status)
        if not result.success:
            self.error = result.error
            return self.view
        return self.load(order.id)

    def download_invoice(self, order_id: int) -> InvoiceResult:
        result = self._service.download_invoice(order_id)
        if not result.success:
            logger.warning("invoice_download_failed", order_id=order_id, error=result.error)
        return result
