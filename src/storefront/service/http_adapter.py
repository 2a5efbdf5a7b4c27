"""HTTP adapter for the order and address service, built on httpx.

Transport failures and non-2xx responses are turned into failed results
here, at the call site that issued the request. The service's own ``error``
message is passed through verbatim when it sends one. Nothing is retried.
"""

import httpx
import structlog
from protean.exceptions import ValidationError
from pydantic import ValidationError as SchemaError

from storefront.api.schemas import (
    AddressPayload,
    OrderCreatedResponse,
    OrderDetailResponse,
    OrderSchema,
    OrderSubmission,
)
from storefront.service.port import (
    AddressListResult,
    AddressSaveResult,
    InvoiceResult,
    OrderDetailResult,
    OrderListResult,
    OrderPlacementResult,
    StorefrontService,
)

logger = structlog.get_logger(__name__)

PLACE_ORDER_FAILED = "Failed to place order. Please try again."
FETCH_ORDER_FAILED = "Failed to fetch order."
FETCH_ORDERS_FAILED = "Failed to fetch orders."
FETCH_ADDRESSES_FAILED = "Failed to fetch addresses."
SAVE_ADDRESS_FAILED = "Failed to save address."
CANCEL_ORDER_FAILED = "Failed to cancel order. Please try again."
INVOICE_FAILED = "Failed to download invoice."


def _error_message(response: httpx.Response, default: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return default
    if isinstance(body, dict) and isinstance(body.get("error"), str) and body["error"]:
        return body["error"]
    return default


def _email_warning(value) -> str | None:
    if isinstance(value, str) and value:
        return value
    if value is True:
        return "Order placed, but failed to send confirmation email."
    return None


class HttpStorefrontService(StorefrontService):
    """Talks to the service over HTTP.

    Pass an ``httpx.Client`` (or anything compatible, such as FastAPI's
    TestClient) to control transport and base URL; otherwise one is created
    from ``base_url`` and ``timeout``. A ``timeout`` of None waits forever.
    """

    def __init__(
        self,
        client: httpx.Client | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.Client(base_url=base_url or "", timeout=timeout)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def _send(self, method: str, path: str, **kwargs) -> httpx.Response | None:
        try:
            return self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("service_request_failed", method=method, path=path, error=str(exc))
            return None

    # -------------------------------------------------------------------
    # Addresses
    # -------------------------------------------------------------------
    def list_addresses(self) -> AddressListResult:
        response = self._send("GET", "/addresses")
        if response is None:
            return AddressListResult(success=False, error=FETCH_ADDRESSES_FAILED)
        if not response.is_success:
            return AddressListResult(success=False, error=_error_message(response, FETCH_ADDRESSES_FAILED))

        try:
            body = response.json()
            addresses = tuple(AddressPayload.model_validate(entry).to_saved_address() for entry in body)
        except (ValueError, TypeError, SchemaError, ValidationError):
            logger.warning("address_list_unreadable", status_code=response.status_code)
            return AddressListResult(success=False, error=FETCH_ADDRESSES_FAILED)
        return AddressListResult(success=True, addresses=addresses)

    def _write_address(self, method: str, payload: AddressPayload) -> AddressSaveResult:
        response = self._send(method, "/addresses", json=payload.to_wire())
        if response is None:
            return AddressSaveResult(success=False, error=SAVE_ADDRESS_FAILED)
        if not response.is_success:
            return AddressSaveResult(success=False, error=_error_message(response, SAVE_ADDRESS_FAILED))

        try:
            saved = AddressPayload.model_validate(response.json()).to_saved_address()
        except (ValueError, SchemaError, ValidationError):
            # The write went through; only the echo is unusable
            return AddressSaveResult(success=True)
        return AddressSaveResult(success=True, address=saved)

    def save_address(self, payload: AddressPayload) -> AddressSaveResult:
        return self._write_address("POST", payload)

    def update_address(self, payload: AddressPayload) -> AddressSaveResult:
        return self._write_address("PATCH", payload)

    # -------------------------------------------------------------------
    # Orders
    # -------------------------------------------------------------------
    def place_order(self, submission: OrderSubmission) -> OrderPlacementResult:
        response = self._send("POST", "/orders", json=submission.to_wire())
        if response is None:
            return OrderPlacementResult(success=False, error=PLACE_ORDER_FAILED)
        if not response.is_success:
            return OrderPlacementResult(success=False, error=_error_message(response, PLACE_ORDER_FAILED))

        try:
            created = OrderCreatedResponse.model_validate(response.json())
        except (ValueError, SchemaError):
            logger.warning("order_response_unreadable", status_code=response.status_code)
            return OrderPlacementResult(success=False, error=PLACE_ORDER_FAILED)

        return OrderPlacementResult(
            success=True,
            order_id=created.id,
            email_warning=_email_warning(created.email_warning),
        )

    def list_orders(self) -> OrderListResult:
        response = self._send("GET", "/orders")
        if response is None:
            return OrderListResult(success=False, error=FETCH_ORDERS_FAILED)
        if not response.is_success:
            return OrderListResult(success=False, error=_error_message(response, FETCH_ORDERS_FAILED))

        try:
            orders = tuple(OrderSchema.model_validate(entry) for entry in response.json())
        except (ValueError, TypeError, SchemaError):
            return OrderListResult(success=False, error=FETCH_ORDERS_FAILED)
        return OrderListResult(success=True, orders=orders)

    def fetch_order(self, order_id: int, with_history: bool = True) -> OrderDetailResult:
        params = {"history": "1"} if with_history else None
        response = self._send("GET", f"/orders/{order_id}", params=params)
        if response is None:
            return OrderDetailResult(success=False, error=FETCH_ORDER_FAILED)
        if not response.is_success:
            return OrderDetailResult(success=False, error=_error_message(response, FETCH_ORDER_FAILED))

        try:
            body = response.json()
            if with_history:
                detail = OrderDetailResponse.model_validate(body)
                return OrderDetailResult(success=True, order=detail.order, history=tuple(detail.history))
            return OrderDetailResult(success=True, order=OrderSchema.model_validate(body))
        except (ValueError, SchemaError):
            logger.warning("order_response_unreadable", order_id=order_id)
            return OrderDetailResult(success=False, error=FETCH_ORDER_FAILED)

    def cancel_order(self, order_id: int) -> OrderDetailResult:
        response = self._send("PATCH", f"/orders/{order_id}", json={"status": "cancelled"})
        if response is None:
            return OrderDetailResult(success=False, error=CANCEL_ORDER_FAILED)
        if not response.is_success:
            return OrderDetailResult(success=False, error=_error_message(response, CANCEL_ORDER_FAILED))

        try:
            order = OrderSchema.model_validate(response.json())
        except (ValueError, SchemaError):
            return OrderDetailResult(success=True)
        return OrderDetailResult(success=True, order=order)

    def download_invoice(self, order_id: int) -> InvoiceResult:
        response = self._send("GET", f"/orders/{order_id}/invoice")
        if response is None:
            return InvoiceResult(success=False, error=INVOICE_FAILED)
        if not response.is_success:
            return InvoiceResult(success=False, error=_error_message(response, INVOICE_FAILED))

        filename = None
        disposition = response.headers.get("content-disposition", "")
        if "filename=" in disposition:
            filename = disposition.split("filename=", 1)[1].strip().strip('"')

        return InvoiceResult(
            success=True,
            content=response.content,
            content_type=response.headers.get("content-type"),
            filename=filename,
        )
