"""FastAPI routes of the sandbox order and address service.

Serves the same HTTP contract as the real service, backed by an in-memory
FakeStorefrontService kept on ``app.state.backend``. Failures answer with a
JSON body ``{"error": message}`` the way the real service does. The
``/sandbox`` routes let a developer or a test toggle failures and play the
order authority by advancing an order's status.
"""

import os

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request, Response
from fastapi.responses import JSONResponse
from pydantic import ValidationError as SchemaError

from storefront.api.schemas import (
    AddressPayload,
    AdvanceStatusRequest,
    CancelOrderRequest,
    ConfigureSandboxRequest,
    ErrorResponse,
    OrderCreatedResponse,
    OrderSubmission,
    SandboxConfigResponse,
)
from storefront.domain import storefront
from storefront.order.status import parse_status
from storefront.service.fake_adapter import FakeStorefrontService


def get_backend(request: Request) -> FakeStorefrontService:
    return request.app.state.backend


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


def _order_json(order) -> dict:
    return order.model_dump(mode="json", by_alias=True)


# ---------------------------------------------------------------------------
# Address Router
# ---------------------------------------------------------------------------
address_router = APIRouter(prefix="/addresses", tags=["addresses"])


@address_router.get("")
async def list_addresses(backend: FakeStorefrontService = Depends(get_backend)):
    result = backend.list_addresses()
    return [AddressPayload.from_saved(a).to_wire() for a in result.addresses]


@address_router.post("", status_code=201)
async def create_address(body: AddressPayload, backend: FakeStorefrontService = Depends(get_backend)):
    result = backend.save_address(body)
    if not result.success:
        return _error(500, result.error)
    return AddressPayload.from_saved(result.address).to_wire()


@address_router.patch("")
async def update_address(body: AddressPayload, backend: FakeStorefrontService = Depends(get_backend)):
    if body.id is None:
        return _error(400, "Address id is required")
    if not any(a.address_id == body.id for a in backend.addresses):
        return _error(404, "Address not found")

    result = backend.update_address(body)
    if not result.success:
        return _error(500, result.error)
    return AddressPayload.from_saved(result.address).to_wire()


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201)
async def create_order(request: Request, backend: FakeStorefrontService = Depends(get_backend)):
    """Create an order from the cart's items and total."""
    try:
        body = await request.json()
    except ValueError:
        return _error(400, "Invalid order payload.")

    if not isinstance(body, dict) or not body.get("items"):
        return _error(400, "Order must have at least one item.")
    try:
        submission = OrderSubmission.model_validate(body)
    except SchemaError:
        return _error(400, "Invalid order payload.")

    result = backend.place_order(submission)
    if not result.success:
        # Configured failures stand in for server errors; the rest are bad input
        status_code = 500 if not backend.order_should_succeed else 400
        return _error(status_code, result.error)

    created = OrderCreatedResponse(id=result.order_id, email_warning=result.email_warning)
    return created.model_dump(by_alias=True, exclude_none=True)


@order_router.get("")
async def list_orders(backend: FakeStorefrontService = Depends(get_backend)):
    return [_order_json(order) for order in backend.list_orders().orders]


@order_router.get("/{order_id}")
async def get_order(order_id: int, history: str | None = None, backend: FakeStorefrontService = Depends(get_backend)):
    with_history = history in ("1", "true")
    result = backend.fetch_order(order_id, with_history=with_history)
    if not result.success:
        return _error(404, result.error)

    if not with_history:
        return _order_json(result.order)
    return {
        "order": _order_json(result.order),
        "history": [change.model_dump(mode="json", by_alias=True) for change in result.history],
    }


@order_router.patch("/{order_id}")
async def cancel_order(
    order_id: int, body: CancelOrderRequest, backend: FakeStorefrontService = Depends(get_backend)
):
    """Cancel an order on the shopper's behalf. Only status "cancelled" is accepted."""
    if order_id not in backend.orders:
        return _error(404, "Order not found")

    result = backend.cancel_order(order_id)
    if not result.success:
        return _error(400, result.error)
    return _order_json(result.order)


@order_router.get("/{order_id}/invoice")
async def download_invoice(order_id: int, backend: FakeStorefrontService = Depends(get_backend)):
    result = backend.download_invoice(order_id)
    if not result.success:
        return _error(404, result.error)
    return Response(
        content=result.content,
        media_type=result.content_type,
        headers={"Content-Disposition": f'attachment; filename="{result.filename}"'},
    )


# ---------------------------------------------------------------------------
# Sandbox Router
# ---------------------------------------------------------------------------
sandbox_router = APIRouter(prefix="/sandbox", tags=["sandbox"])


def _ensure_not_production() -> None:
    if os.environ.get("PROTEAN_ENV") == "production":
        raise HTTPException(status_code=403, detail="Sandbox controls not available in production")


@sandbox_router.post("/configure", response_model=SandboxConfigResponse)
async def configure_sandbox(
    body: ConfigureSandboxRequest, backend: FakeStorefrontService = Depends(get_backend)
) -> SandboxConfigResponse:
    """Toggle order, email and address-book failures of the sandbox."""
    _ensure_not_production()
    backend.configure(
        order_should_succeed=body.order_should_succeed,
        failure_reason=body.failure_reason,
        email_should_fail=body.email_should_fail,
        address_save_should_fail=body.address_save_should_fail,
    )
    return SandboxConfigResponse(
        order_should_succeed=backend.order_should_succeed,
        failure_reason=backend.failure_reason,
        email_should_fail=backend.email_should_fail,
        address_save_should_fail=backend.address_save_should_fail,
    )


@sandbox_router.post("/orders/{order_id}/status")
async def advance_order_status(
    order_id: int, body: AdvanceStatusRequest, backend: FakeStorefrontService = Depends(get_backend)
):
    """Move an order to a new status, as the order authority would."""
    _ensure_not_production()
    if order_id not in backend.orders:
        return _error(404, "Order not found")
    if parse_status(body.status) is None:
        return _error(400, f"Unknown status: {body.status}")

    backend.advance_status(order_id, body.status, changed_by=body.changed_by, comment=body.comment)
    return _order_json(backend.orders[order_id])


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------
def create_app(backend: FakeStorefrontService | None = None) -> FastAPI:
    """Build a sandbox app around ``backend`` (a fresh fake when omitted)."""
    app = FastAPI(
        title="Storefront Sandbox API",
        description="In-memory order and address service for storefront development",
    )
    app.state.backend = backend or FakeStorefrontService()

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        """Push the storefront domain context for each request."""
        with storefront.domain_context():
            response = await call_next(request)
        return response

    app.include_router(address_router)
    app.include_router(order_router)
    app.include_router(sandbox_router)

    @app.get("/health")
    async def health():
        return JSONResponse(content={"status": "ok", "domain": storefront.name})

    return app
