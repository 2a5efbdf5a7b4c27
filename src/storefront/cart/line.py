"""Cart line and product value objects.

A CartLine is one product-and-quantity entry in the shopper's cart. Lines are
immutable; the cart store replaces a line whenever its quantity changes.
"""

from protean.exceptions import ValidationError
from protean.fields import Float, Integer, String

from storefront.domain import storefront


@storefront.value_object
class Product:
    """The catalogue record a shopper adds to the cart.

    The catalogue is owned elsewhere; this is only the slice of a product the
    cart needs to display a line and price it.
    """

    product_id = Integer(required=True)
    name = String(max_length=255, default="")
    unit_price = Float(required=True, min_value=0.0)
    image_ref = String(max_length=1024)


@storefront.value_object
class CartLine:
    product_id = Integer(required=True)
    name = String(max_length=255, default="")
    unit_price = Float(required=True, min_value=0.0)
    image_ref = String(max_length=1024)
    quantity = Integer(required=True, min_value=1)

    @classmethod
    def for_product(cls, product: Product, quantity: int = 1) -> "CartLine":
        return cls(
            product_id=product.product_id,
            name=product.name,
            unit_price=product.unit_price,
            image_ref=product.image_ref,
            quantity=quantity,
        )

    @property
    def line_total(self) -> float:
        return self.unit_price * self.quantity

    def with_quantity(self, quantity: int) -> "CartLine":
        """Return a copy of this line carrying a different quantity."""
        return CartLine(
            product_id=self.product_id,
            name=self.name,
            unit_price=self.unit_price,
            image_ref=self.image_ref,
            quantity=quantity,
        )

    # -------------------------------------------------------------------
    # Durable snapshot
    # -------------------------------------------------------------------
    def to_snapshot(self) -> dict:
        return {
            "productId": self.product_id,
            "name": self.name,
            "unitPrice": self.unit_price,
            "imageRef": self.image_ref,
            "quantity": self.quantity,
        }

    @classmethod
    def from_snapshot(cls, entry: dict) -> "CartLine | None":
        """Rebuild a line from a stored snapshot entry.

        Snapshots carry no schema version, so older or partial shapes are
        accepted: unknown keys are ignored and missing fields fall back to
        defaults. The legacy keys ``id`` and ``price`` are read when the
        current ones are absent. Returns None when no usable product id exists.
        """
        if not isinstance(entry, dict):
            return None

        product_id = _as_int(entry.get("productId", entry.get("id")))
        if product_id is None:
            return None

        unit_price = _as_float(entry.get("unitPrice", entry.get("price")))
        if unit_price is None or unit_price < 0:
            unit_price = 0.0

        quantity = _as_int(entry.get("quantity"))
        if quantity is None or quantity < 1:
            quantity = 1

        name = entry.get("name")
        image_ref = entry.get("imageRef")

        try:
            return cls(
                product_id=product_id,
                name=name if isinstance(name, str) else "",
                unit_price=unit_price,
                image_ref=image_ref if isinstance(image_ref, str) else None,
                quantity=quantity,
            )
        except ValidationError:
            return None


def _as_int(value) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def _as_float(value) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None
