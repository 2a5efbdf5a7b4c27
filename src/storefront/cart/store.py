"""Persistent cart store: the shopper's canonical list of cart lines.

The store is an explicit object owned by one shopper session and handed to
whichever component needs the cart. Its lifecycle is:

    store = CartStore(storage)
    store.load()        # read the durable snapshot, then enable saving
    ... mutations ...   # each one re-serializes the cart
    store.teardown()    # stop saving; the store is no longer usable

Saving is only enabled once ``load()`` has completed, so an empty in-memory
cart can never overwrite a stored cart before that cart was read.
"""

import json

import structlog
from protean.exceptions import InvalidOperationError, ValidationError

from storefront.cart.line import CartLine, Product
from storefront.cart.storage import LocalStorage
from storefront.config import CART_STORAGE_KEY

logger = structlog.get_logger(__name__)


class CartStore:
    def __init__(self, storage: LocalStorage, key: str = CART_STORAGE_KEY) -> None:
        self._storage = storage
        self._key = key
        self._lines: list[CartLine] = []
        self._loaded = False
        self._closed = False

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def load(self) -> None:
        """Read the stored snapshot and enable saving.

        Any unreadable or malformed snapshot yields an empty cart; corrupted
        storage must never break the shopper's session.
        """
        if self._closed:
            raise InvalidOperationError("Cart store has been torn down")
        if self._loaded:
            return

        self._lines = self._read_snapshot()
        self._loaded = True
        logger.debug("cart_loaded", key=self._key, lines=len(self._lines))

    def teardown(self) -> None:
        """Detach from storage. The stored snapshot is left as last written."""
        self._loaded = False
        self._closed = True

    def _read_snapshot(self) -> list[CartLine]:
        try:
            raw = self._storage.get_item(self._key)
        except OSError as exc:
            logger.warning("cart_snapshot_unreadable", key=self._key, error=str(exc))
            return []

        if not raw:
            return []

        try:
            entries = json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            logger.warning("cart_snapshot_corrupted", key=self._key)
            return []

        if not isinstance(entries, list):
            logger.warning("cart_snapshot_corrupted", key=self._key)
            return []

        lines: list[CartLine] = []
        for entry in entries:
            line = CartLine.from_snapshot(entry)
            if line is None:
                logger.info("cart_snapshot_entry_skipped", key=self._key)
                continue
            existing = _index_of(lines, line.product_id)
            if existing is None:
                lines.append(line)
            else:
                lines[existing] = lines[existing].with_quantity(lines[existing].quantity + line.quantity)
        return lines

    def _persist(self) -> None:
        if not self._loaded:
            return
        payload = json.dumps([line.to_snapshot() for line in self._lines])
        try:
            self._storage.set_item(self._key, payload)
        except OSError as exc:
            logger.error("cart_snapshot_write_failed", key=self._key, error=str(exc))

    def _ensure_active(self) -> None:
        if self._closed:
            raise InvalidOperationError("Cart store has been torn down")
        if not self._loaded:
            raise InvalidOperationError("Cart store must be loaded before it can be changed")

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    @property
    def lines(self) -> tuple[CartLine, ...]:
        return tuple(self._lines)

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self):
        return iter(tuple(self._lines))

    def line(self, product_id: int) -> CartLine | None:
        index = _index_of(self._lines, product_id)
        return None if index is None else self._lines[index]

    def subtotal(self) -> float:
        """Sum of unit price times quantity over all lines, computed on every call."""
        return sum(line.unit_price * line.quantity for line in self._lines)

    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines)

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def add_item(self, product: Product, quantity: int = 1) -> None:
        """Add a product, or grow the existing line for the same product."""
        self._ensure_active()
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        index = _index_of(self._lines, product.product_id)
        if index is None:
            self._lines.append(CartLine.for_product(product, quantity))
        else:
            line = self._lines[index]
            self._lines[index] = line.with_quantity(line.quantity + quantity)

        logger.debug("cart_item_added", product_id=product.product_id, quantity=quantity)
        self._persist()

    def remove_item(self, product_id: int) -> None:
        """Remove the line for ``product_id``. Unknown ids are ignored."""
        self._ensure_active()
        index = _index_of(self._lines, product_id)
        if index is None:
            return

        del self._lines[index]
        logger.debug("cart_item_removed", product_id=product_id)
        self._persist()

    def set_quantity(self, product_id: int, quantity: int) -> None:
        """Replace the quantity of an existing line.

        Quantities below 1 are rejected; removal is ``remove_item``.
        """
        self._ensure_active()
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        index = _index_of(self._lines, product_id)
        if index is None:
            return

        self._lines[index] = self._lines[index].with_quantity(quantity)
        self._persist()

    def increment(self, product_id: int) -> None:
        self._ensure_active()
        line = self.line(product_id)
        if line is not None:
            self.set_quantity(product_id, line.quantity + 1)

    def decrement(self, product_id: int) -> None:
        """Step the quantity down by one, stopping at 1."""
        self._ensure_active()
        line = self.line(product_id)
        if line is not None and line.quantity > 1:
            self.set_quantity(product_id, line.quantity - 1)

    def clear(self) -> None:
        self._ensure_active()
        self._lines = []
        logger.debug("cart_cleared", key=self._key)
        self._persist()


def _index_of(lines: list[CartLine], product_id: int) -> int | None:
    return next((i for i, line in enumerate(lines) if line.product_id == product_id), None)
