"""The transient checkout form for one address, and its mapping to saved addresses."""

from dataclasses import dataclass, fields, replace

from storefront.address.address import SavedAddress

FIELD_LABELS = {
    "name": "Full name",
    "address_line": "Address",
    "city": "City",
    "state": "State",
    "postal_code": "Postal code",
    "phone": "Phone",
}


@dataclass
class AddressForm:
    name: str = ""
    address_line: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    phone: str = ""

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    def copy(self) -> "AddressForm":
        return replace(self)

    @property
    def is_blank(self) -> bool:
        return not any(getattr(self, name) for name in self.field_names())


def form_from_saved(address: SavedAddress) -> AddressForm:
    """Copy a saved address into a fresh form. The form does not track the source."""
    return AddressForm(
        name=address.name or "",
        address_line=address.address_line or "",
        city=address.city or "",
        state=address.state or "",
        postal_code=address.postal_code or "",
        phone=address.phone or "",
    )
