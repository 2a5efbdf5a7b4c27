"""Shopper session: owns the cart store and the service for one shopper.

    with ShopperSession() as session:
        session.cart.add_item(product, 2)
        checkout = session.checkout()
        ...

Starting the session pushes the storefront domain context and loads the cart
from durable storage; closing it tears the cart store down and pops the
context. The host application initializes the domain once, before any
session starts.
"""

import uuid

import structlog

from storefront.address.resolver import AddressResolver
from storefront.cart.storage import FileStorage, LocalStorage
from storefront.cart.store import CartStore
from storefront.checkout.orchestrator import CheckoutOrchestrator
from storefront.config import Settings, load_settings
from storefront.domain import storefront
from storefront.order.tracker import OrderLifecycleTracker
from storefront.service import get_service
from storefront.service.port import StorefrontService
from storefront.utils.logging import add_context, clear_context

logger = structlog.get_logger(__name__)


class ShopperSession:
    def __init__(
        self,
        settings: Settings | None = None,
        storage: LocalStorage | None = None,
        service: StorefrontService | None = None,
    ) -> None:
        self.settings = settings or load_settings()
        self.storage = storage or FileStorage(self.settings.storage_path)
        self.service = service or get_service()
        self.cart = CartStore(self.storage, key=self.settings.cart_key)
        self.session_id = uuid.uuid4().hex
        self._context = None

    def start(self) -> "ShopperSession":
        if self._context is None:
            self._context = storefront.domain_context()
            self._context.push()
        self.cart.load()
        add_context(session_id=self.session_id)
        logger.info("shopper_session_started", cart_lines=len(self.cart))
        return self

    def close(self) -> None:
        self.cart.teardown()
        if self._context is not None:
            self._context.pop()
            self._context = None
        logger.info("shopper_session_closed")
        clear_context()

    def __enter__(self) -> "ShopperSession":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def checkout(self, use_shipping_for_billing: bool = True, load_addresses: bool = True) -> CheckoutOrchestrator:
        """A fresh checkout over this session's cart, with the address book loaded."""
        orchestrator = CheckoutOrchestrator(
            cart=self.cart,
            resolver=AddressResolver(use_shipping_for_billing=use_shipping_for_billing),
            service=self.service,
            redirect_delay=self.settings.redirect_delay,
        )
        if load_addresses:
            orchestrator.load_address_book()
        return orchestrator

    def tracker(self) -> OrderLifecycleTracker:
        return OrderLifecycleTracker(self.service)
