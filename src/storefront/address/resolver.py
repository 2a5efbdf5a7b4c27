"""Address resolver: picks the shipping and billing identity used at checkout.

Each address type moves independently through three selection states:

    UNSELECTED ──load/select──► USING_SAVED(address_id)
         │                         ▲      │
         │                  select │      │ select(NEW_ADDRESS)
         ▼                         │      ▼
    ENTERING_NEW ◄─────────────────┴── ENTERING_NEW

Selecting a saved address copies its fields into the form once; later edits
to either side do not propagate. While ``use_shipping_for_billing`` is on,
billing resolves to a mirror of the shipping form and is left out of
validation; billing keeps its own selection and form underneath, and they
come back when the mirror is switched off.

Validation errors are kept per address type and per field so that the same
field name on shipping and billing never share an error.
"""

from dataclasses import dataclass
from enum import Enum

import structlog
from protean.exceptions import InvalidOperationError, ValidationError

from storefront.address.address import NEW_ADDRESS, AddressType, SavedAddress
from storefront.address.form import AddressForm, form_from_saved
from storefront.address.validation import PATTERN_FIELDS, validate_address, validate_pattern_field

logger = structlog.get_logger(__name__)


class SelectionKind(Enum):
    UNSELECTED = "unselected"
    USING_SAVED = "using_saved"
    ENTERING_NEW = "entering_new"


@dataclass(frozen=True)
class AddressSelection:
    kind: SelectionKind
    address_id: int | None = None


_UNSELECTED = AddressSelection(SelectionKind.UNSELECTED)
_ENTERING_NEW = AddressSelection(SelectionKind.ENTERING_NEW)


class AddressResolver:
    def __init__(self, saved_addresses=(), use_shipping_for_billing: bool = True) -> None:
        self._saved: dict[AddressType, list[SavedAddress]] = {t: [] for t in AddressType}
        self._selection: dict[AddressType, AddressSelection] = {t: _UNSELECTED for t in AddressType}
        self._forms: dict[AddressType, AddressForm] = {t: AddressForm() for t in AddressType}
        self._errors: dict[AddressType, dict[str, str]] = {t: {} for t in AddressType}
        self._save_to_address_book: dict[AddressType, bool] = {t: False for t in AddressType}
        self._use_shipping_for_billing = use_shipping_for_billing

        if saved_addresses:
            self.load(saved_addresses)

    # -------------------------------------------------------------------
    # Saved addresses
    # -------------------------------------------------------------------
    def load(self, saved_addresses) -> None:
        """Take the shopper's address book and pre-select an address per type.

        The first default of a type wins; without one, the first address of
        that type is used. Types with no saved address start a new entry.
        """
        for address_type in AddressType:
            of_type = [a for a in saved_addresses if a.address_type == address_type.value]
            self._saved[address_type] = of_type

            preferred = next((a for a in of_type if a.is_default), None) or next(iter(of_type), None)
            if preferred is not None:
                self._use_saved(address_type, preferred)
            else:
                self._start_new(address_type)

        logger.debug(
            "address_book_loaded",
            shipping=len(self._saved[AddressType.SHIPPING]),
            billing=len(self._saved[AddressType.BILLING]),
        )

    def saved(self, address_type: AddressType) -> list[SavedAddress]:
        return list(self._saved[address_type])

    def selection(self, address_type: AddressType) -> AddressSelection:
        return self._selection[address_type]

    def select(self, address_type: AddressType, address_id) -> None:
        """Choose a saved address by id, or ``NEW_ADDRESS`` to start a blank entry."""
        if address_id == NEW_ADDRESS:
            self._start_new(address_type)
            return

        address = next((a for a in self._saved[address_type] if a.address_id == address_id), None)
        if address is None:
            raise ValidationError({"address_id": [f"Address {address_id} not found"]})
        self._use_saved(address_type, address)

    def _use_saved(self, address_type: AddressType, address: SavedAddress) -> None:
        self._selection[address_type] = AddressSelection(SelectionKind.USING_SAVED, address.address_id)
        self._forms[address_type] = form_from_saved(address)
        self._errors[address_type] = {}

    def _start_new(self, address_type: AddressType) -> None:
        self._selection[address_type] = _ENTERING_NEW
        self._forms[address_type] = AddressForm()
        self._errors[address_type] = {}

    # -------------------------------------------------------------------
    # Form editing
    # -------------------------------------------------------------------
    def update_field(self, address_type: AddressType, field: str, value: str) -> None:
        if field not in AddressForm.field_names():
            raise ValidationError({"field": [f"Unknown address field: {field}"]})
        if address_type == AddressType.BILLING and self._use_shipping_for_billing:
            raise InvalidOperationError("Billing address mirrors shipping and cannot be edited")

        if self._selection[address_type].kind == SelectionKind.UNSELECTED:
            self._selection[address_type] = _ENTERING_NEW

        setattr(self._forms[address_type], field, value)

        if field in PATTERN_FIELDS:
            message = validate_pattern_field(field, value)
            if message:
                self._errors[address_type][field] = message
            else:
                self._errors[address_type].pop(field, None)

    @property
    def use_shipping_for_billing(self) -> bool:
        return self._use_shipping_for_billing

    def set_use_shipping_for_billing(self, enabled: bool) -> None:
        self._use_shipping_for_billing = enabled
        if enabled:
            self._errors[AddressType.BILLING] = {}

    def save_to_address_book(self, address_type: AddressType) -> bool:
        return self._save_to_address_book[address_type]

    def set_save_to_address_book(self, address_type: AddressType, enabled: bool) -> None:
        self._save_to_address_book[address_type] = enabled

    def should_save(self, address_type: AddressType) -> bool:
        """Whether a successful order should also add this address to the address book."""
        if address_type == AddressType.BILLING and self._use_shipping_for_billing:
            return False
        return (
            self._selection[address_type].kind == SelectionKind.ENTERING_NEW
            and self.save_to_address_book(address_type)
        )

    # -------------------------------------------------------------------
    # Resolution and validation
    # -------------------------------------------------------------------
    def is_mirrored(self, address_type: AddressType) -> bool:
        return address_type == AddressType.BILLING and self._use_shipping_for_billing

    def resolved(self, address_type: AddressType) -> AddressForm:
        """The form that will be used for this address type, as a copy."""
        if self.is_mirrored(address_type):
            return self._forms[AddressType.SHIPPING].copy()
        return self._forms[address_type].copy()

    def errors(self, address_type: AddressType) -> dict[str, str]:
        if self.is_mirrored(address_type):
            return {}
        return dict(self._errors[address_type])

    def has_errors(self, address_type: AddressType) -> bool:
        return bool(self.errors(address_type))

    def validate(self, address_type: AddressType) -> dict[str, str]:
        """Run every field rule for one address type and record the result."""
        if self.is_mirrored(address_type):
            return {}

        errors = validate_address(self._forms[address_type])
        self._errors[address_type] = errors
        return dict(errors)
