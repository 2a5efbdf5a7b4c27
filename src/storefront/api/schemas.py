"""Pydantic request/response schemas for the order and address service.

These are the external contracts (anti-corruption layer) exchanged with the
service over HTTP, separate from the storefront's internal value objects.
Field names are snake_case in Python and camelCase on the wire.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from storefront.address.address import AddressType, SavedAddress
from storefront.address.form import AddressForm

_WIRE = {"populate_by_name": True}


# ---------------------------------------------------------------------------
# Addresses
# ---------------------------------------------------------------------------
class AddressPayload(BaseModel):
    id: int | None = None
    type: Literal["shipping", "billing"]
    name: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = Field(default="", alias="zipCode")
    phone: str = ""
    is_default: bool = Field(default=False, alias="isDefault")

    model_config = {
        **_WIRE,
        "json_schema_extra": {
            "examples": [
                {
                    "type": "shipping",
                    "name": "Asha Rao",
                    "address": "12 Park Street",
                    "city": "Kolkata",
                    "state": "WB",
                    "zipCode": "700016",
                    "phone": "9830012345",
                    "isDefault": False,
                }
            ]
        },
    }

    @classmethod
    def from_form(cls, form: AddressForm, address_type: AddressType, is_default: bool = False) -> "AddressPayload":
        return cls(
            type=address_type.value,
            name=form.name,
            address=form.address_line,
            city=form.city,
            state=form.state,
            zip_code=form.postal_code,
            phone=form.phone,
            is_default=is_default,
        )

    @classmethod
    def from_saved(cls, address: SavedAddress) -> "AddressPayload":
        return cls(
            id=address.address_id,
            type=address.address_type,
            name=address.name or "",
            address=address.address_line or "",
            city=address.city or "",
            state=address.state or "",
            zip_code=address.postal_code or "",
            phone=address.phone or "",
            is_default=bool(address.is_default),
        )

    def to_saved_address(self) -> SavedAddress:
        return SavedAddress(
            address_id=self.id,
            address_type=self.type,
            name=self.name,
            address_line=self.address,
            city=self.city,
            state=self.state,
            postal_code=self.zip_code,
            phone=self.phone,
            is_default=self.is_default,
        )

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


# ---------------------------------------------------------------------------
# Order submission
# ---------------------------------------------------------------------------
class OrderItemPayload(BaseModel):
    product_id: int = Field(alias="productId")
    quantity: int = Field(ge=1)
    price: float = Field(ge=0)

    model_config = _WIRE


class OrderSubmission(BaseModel):
    """The single order-creation request built from the cart.

    Prices are the cart's prices at submission time; the service is trusted
    not to re-price.
    """

    items: list[OrderItemPayload] = Field(min_length=1)
    total: float = Field(ge=0)
    status: str = "paid"

    model_config = _WIRE

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


class OrderCreatedResponse(BaseModel):
    id: int
    email_warning: str | bool | None = Field(default=None, alias="emailWarning")

    model_config = _WIRE


class ErrorResponse(BaseModel):
    error: str


# ---------------------------------------------------------------------------
# Order read-back
# ---------------------------------------------------------------------------
class OrderItemSchema(BaseModel):
    id: int | None = None
    product_id: int | None = Field(default=None, alias="productId")
    name: str | None = None
    quantity: int
    price: float

    model_config = _WIRE


class OrderSchema(BaseModel):
    id: int
    total: float
    status: str
    created_at: datetime | None = Field(default=None, alias="createdAt")
    items: list[OrderItemSchema] = Field(default_factory=list)

    model_config = _WIRE


class StatusChangeSchema(BaseModel):
    status: str
    changed_by: str | None = Field(default=None, alias="changedBy")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    comment: str | None = None

    model_config = _WIRE


class OrderDetailResponse(BaseModel):
    order: OrderSchema
    history: list[StatusChangeSchema] = Field(default_factory=list)

    model_config = _WIRE


class CancelOrderRequest(BaseModel):
    status: Literal["cancelled"]


# ---------------------------------------------------------------------------
# Sandbox controls
# ---------------------------------------------------------------------------
class ConfigureSandboxRequest(BaseModel):
    order_should_succeed: bool = True
    failure_reason: str = "Failed to create order"
    email_should_fail: bool = False
    address_save_should_fail: bool = False


class SandboxConfigResponse(BaseModel):
    order_should_succeed: bool
    failure_reason: str
    email_should_fail: bool
    address_save_should_fail: bool


class AdvanceStatusRequest(BaseModel):
    status: str
    changed_by: str = "admin"
    comment: str | None = None
