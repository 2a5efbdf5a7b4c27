"""Checkout orchestrator: validate, confirm, then submit.

Checkout moves through two phases. ``request_confirmation`` validates the
resolved addresses and, when they are clean, enters CONFIRMING with a summary
for the shopper to look at. Only ``place_order`` from CONFIRMING sends the
order.

Submission has its own state machine:

    IDLE ──► SUBMITTING ──► SUCCEEDED
                 │  ▲
                 ▼  │ (manual retry)
                FAILED

SUBMITTING doubles as the busy flag: a second ``place_order`` while one is in
flight is refused. SUCCEEDED is terminal for this checkout.

After the order is accepted, the address-book saves are best effort. Their
failures are logged and do not turn a placed order into a failed checkout.
"""

from dataclasses import dataclass, field
from enum import Enum

import structlog
from protean.exceptions import InvalidOperationError

from storefront.address.address import AddressType
from storefront.address.form import AddressForm
from storefront.address.resolver import AddressResolver
from storefront.api.schemas import AddressPayload, OrderSubmission
from storefront.cart.line import CartLine
from storefront.cart.store import CartStore
from storefront.checkout.submission import build_submission, submission_from_lines
from storefront.config import DEFAULT_REDIRECT_DELAY, ORDERS_PATH
from storefront.service.http_adapter import PLACE_ORDER_FAILED
from storefront.service.port import StorefrontService

logger = structlog.get_logger(__name__)

ORDER_PLACED = "Order placed successfully!"
ORDER_PLACED_EMAIL_FAILED = "Order placed, but confirmation email could not be sent."
CART_EMPTY = "Your cart is empty."
ADDRESS_ERRORS = {
    (AddressType.SHIPPING,): "Please correct errors in shipping address.",
    (AddressType.BILLING,): "Please correct errors in billing address.",
    (AddressType.SHIPPING, AddressType.BILLING): "Please correct errors in shipping and billing addresses.",
}


class CheckoutPhase(Enum):
    EDITING = "editing"
    CONFIRMING = "confirming"


class SubmissionState(Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


_VALID_TRANSITIONS = {
    SubmissionState.IDLE: {SubmissionState.SUBMITTING},
    SubmissionState.SUBMITTING: {SubmissionState.SUCCEEDED, SubmissionState.FAILED},
    SubmissionState.FAILED: {SubmissionState.SUBMITTING},
    SubmissionState.SUCCEEDED: set(),  # Terminal
}


class NoticeLevel(Enum):
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notice:
    level: NoticeLevel
    message: str


@dataclass(frozen=True)
class ConfirmationSummary:
    shipping: AddressForm
    billing: AddressForm
    lines: tuple[CartLine, ...]
    total: float
    save_to_address_book: tuple[AddressType, ...] = ()


@dataclass(frozen=True)
class CheckoutOutcome:
    success: bool
    order_id: int | None = None
    error: str | None = None
    email_warning: str | None = None
    redirect_to: str | None = None
    redirect_delay: float = 0.0
    address_save_failures: tuple[AddressType, ...] = field(default_factory=tuple)


class CheckoutOrchestrator:
    def __init__(
        self,
        cart: CartStore,
        resolver: AddressResolver,
        service: StorefrontService,
        redirect_delay: float = DEFAULT_REDIRECT_DELAY,
        redirect_to: str = ORDERS_PATH,
    ) -> None:
        self.cart = cart
        self.resolver = resolver
        self.service = service
        self.redirect_delay = redirect_delay
        self.redirect_to = redirect_to

        self.phase = CheckoutPhase.EDITING
        self.state = SubmissionState.IDLE
        self.summary: ConfirmationSummary | None = None
        self.notices: list[Notice] = []
        self.error: str | None = None

    @property
    def is_busy(self) -> bool:
        return self.state == SubmissionState.SUBMITTING

    def _transition(self, target: SubmissionState) -> None:
        if target not in _VALID_TRANSITIONS[self.state]:
            raise InvalidOperationError(f"Cannot move checkout from {self.state.value} to {target.value}")
        self.state = target

    def _notify(self, level: NoticeLevel, message: str) -> None:
        self.notices.append(Notice(level, message))

    def dismiss_notices(self) -> None:
        self.notices = []

    # -------------------------------------------------------------------
    # Preparation
    # -------------------------------------------------------------------
    def load_address_book(self) -> bool:
        """Fetch saved addresses into the resolver.

        When the address book cannot be read, checkout carries on with blank
        new entries.
        """
        result = self.service.list_addresses()
        if not result.success:
            logger.warning("address_book_unavailable", error=result.error)
            self.resolver.load(())
            return False

        self.resolver.load(result.addresses)
        return True

    def total(self) -> float:
        return self.cart.subtotal()

    def build_submission(self) -> OrderSubmission:
        return build_submission(self.cart)

    # -------------------------------------------------------------------
    # Validate and confirm
    # -------------------------------------------------------------------
    def request_confirmation(self) -> ConfirmationSummary | None:
        """Validate the checkout and, if it is clean, enter the confirm phase."""
        if self.is_busy:
            raise InvalidOperationError("An order submission is already in progress")

        if self.cart.is_empty:
            self._notify(NoticeLevel.ERROR, CART_EMPTY)
            return None

        failing = tuple(t for t in AddressType if self.resolver.validate(t))
        if failing:
            self._notify(NoticeLevel.ERROR, ADDRESS_ERRORS[failing])
            logger.info("checkout_validation_failed", address_types=[t.value for t in failing])
            return None

        self.summary = ConfirmationSummary(
            shipping=self.resolver.resolved(AddressType.SHIPPING),
            billing=self.resolver.resolved(AddressType.BILLING),
            lines=self.cart.lines,
            total=self.total(),
            save_to_address_book=tuple(t for t in AddressType if self.resolver.should_save(t)),
        )
        self.phase = CheckoutPhase.CONFIRMING
        return self.summary

    def cancel_confirmation(self) -> None:
        if self.is_busy:
            raise InvalidOperationError("An order submission is already in progress")
        self.phase = CheckoutPhase.EDITING
        self.summary = None

    # -------------------------------------------------------------------
    # Submission
    # -------------------------------------------------------------------
    def place_order(self) -> CheckoutOutcome:
        """Send the confirmed order.

        The order and any address-book saves come from the confirmation
        summary, so cart or form edits made after confirming are not sent. A
        rejected order leaves the cart untouched and is not retried. The
        service's error message is passed to the shopper unchanged.
        """
        if self.is_busy:
            raise InvalidOperationError("An order submission is already in progress")
        if self.phase != CheckoutPhase.CONFIRMING:
            raise InvalidOperationError("Order must be confirmed before it is placed")

        self._transition(SubmissionState.SUBMITTING)
        self.error = None
        try:
            submission = submission_from_lines(self.summary.lines, self.summary.total)
        except InvalidOperationError as exc:
            return self._fail(str(exc))

        logger.info("order_submitted", items=len(submission.items), total=submission.total)
        result = self.service.place_order(submission)
        if not result.success:
            return self._fail(result.error or PLACE_ORDER_FAILED)

        if result.email_warning:
            self._notify(NoticeLevel.WARNING, ORDER_PLACED_EMAIL_FAILED)
        else:
            self._notify(NoticeLevel.SUCCESS, ORDER_PLACED)
        logger.info("order_placed", order_id=result.order_id, email_warning=bool(result.email_warning))

        failures = tuple(t for t in AddressType if not self._save_address(t))

        self.cart.clear()
        self._transition(SubmissionState.SUCCEEDED)
        self._close_confirmation()
        return CheckoutOutcome(
            success=True,
            order_id=result.order_id,
            email_warning=result.email_warning,
            redirect_to=self.redirect_to,
            redirect_delay=self.redirect_delay,
            address_save_failures=failures,
        )

    def _fail(self, message: str) -> CheckoutOutcome:
        self._transition(SubmissionState.FAILED)
        self.error = message
        self._notify(NoticeLevel.ERROR, message)
        self._close_confirmation()
        logger.warning("order_placement_failed", error=message)
        return CheckoutOutcome(success=False, error=message)

    def _close_confirmation(self) -> None:
        self.phase = CheckoutPhase.EDITING
        self.summary = None

    def _save_address(self, address_type: AddressType) -> bool:
        """Add a confirmed new address to the address book. Returns False only on a failed write."""
        if address_type not in self.summary.save_to_address_book:
            return True

        confirmed = self.summary.shipping if address_type == AddressType.SHIPPING else self.summary.billing
        payload = AddressPayload.from_form(confirmed, address_type)
        result = self.service.save_address(payload)
        if not result.success:
            logger.warning("address_save_failed", address_type=address_type.value, error=result.error)
            return False
        return True
