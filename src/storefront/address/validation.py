"""Field-level validation of a checkout address form.

Postal code and phone are pattern-checked (through their value objects) as
the shopper types. The remaining fields are only required to be non-empty,
which is checked when the whole form is validated at submit time.
"""

from protean.exceptions import ValidationError

from storefront.address.address import PHONE_MESSAGE, POSTAL_CODE_MESSAGE, PhoneNumber, PostalCode
from storefront.address.form import FIELD_LABELS, AddressForm

REQUIRED_FIELDS = ("name", "address_line", "city", "state")
PATTERN_FIELDS = ("postal_code", "phone")


def validate_postal_code(value: str) -> str | None:
    try:
        PostalCode(code=value)
    except ValidationError:
        return POSTAL_CODE_MESSAGE
    return None


def validate_phone(value: str) -> str | None:
    try:
        PhoneNumber(number=value)
    except ValidationError:
        return PHONE_MESSAGE
    return None


_PATTERN_VALIDATORS = {
    "postal_code": validate_postal_code,
    "phone": validate_phone,
}


def validate_pattern_field(field: str, value: str) -> str | None:
    """Check one pattern field; returns the error message or None."""
    return _PATTERN_VALIDATORS[field](value)


def validate_address(form: AddressForm) -> dict[str, str]:
    """Run every rule over the form. Returns field -> message for failing fields."""
    errors: dict[str, str] = {}
    for field in REQUIRED_FIELDS:
        if not getattr(form, field).strip():
            errors[field] = f"{FIELD_LABELS[field]} is required."

    for field in PATTERN_FIELDS:
        message = validate_pattern_field(field, getattr(form, field))
        if message:
            errors[field] = message
    return errors
