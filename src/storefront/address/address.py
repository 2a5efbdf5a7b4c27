"""Saved addresses and the pattern-checked address fields."""

import re
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, Integer, String

from storefront.domain import storefront

POSTAL_CODE_PATTERN = re.compile(r"[1-9][0-9]{5}")
PHONE_PATTERN = re.compile(r"[0-9]{10}")

POSTAL_CODE_MESSAGE = "Enter a valid 6-digit postal code."
PHONE_MESSAGE = "Enter a valid 10-digit phone number."

# Selecting this instead of a saved address id starts a fresh entry
NEW_ADDRESS = "new"


class AddressType(Enum):
    SHIPPING = "shipping"
    BILLING = "billing"


@storefront.value_object
class SavedAddress:
    """An address from the shopper's address book.

    Checkout only ever copies these into its own form; a saved address is
    never edited through checkout.
    """

    address_id = Integer(required=True)
    address_type = String(required=True, choices=AddressType)
    name = String(max_length=255, default="")
    address_line = String(max_length=500, default="")
    city = String(max_length=100, default="")
    state = String(max_length=100, default="")
    postal_code = String(max_length=20, default="")
    phone = String(max_length=20, default="")
    is_default = Boolean(default=False)


@storefront.value_object
class PostalCode:
    """Six digits, not starting with zero."""

    code = String(required=True, max_length=6)

    @invariant.post
    def must_be_six_digits_without_leading_zero(self):
        if not self.code or not POSTAL_CODE_PATTERN.fullmatch(self.code):
            raise ValidationError({"code": [POSTAL_CODE_MESSAGE]})


@storefront.value_object
class PhoneNumber:
    """Exactly ten digits, no separators."""

    number = String(required=True, max_length=10)

    @invariant.post
    def must_be_ten_digits(self):
        if not self.number or not PHONE_PATTERN.fullmatch(self.number):
            raise ValidationError({"number": [PHONE_MESSAGE]})
