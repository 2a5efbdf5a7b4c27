"""Tests for the checkout address resolver."""

import pytest
from protean.exceptions import InvalidOperationError, ValidationError

from storefront.address.address import NEW_ADDRESS, AddressType, SavedAddress
from storefront.address.resolver import AddressResolver, SelectionKind

SHIPPING = AddressType.SHIPPING
BILLING = AddressType.BILLING


def _saved(address_id, address_type="shipping", is_default=False, city="Kolkata"):
    return SavedAddress(
        address_id=address_id,
        address_type=address_type,
        name="Asha Rao",
        address_line=f"{address_id} Park Street",
        city=city,
        state="WB",
        postal_code="700016",
        phone="9830012345",
        is_default=is_default,
    )


class TestInitialSelection:
    def test_default_address_preselected(self):
        resolver = AddressResolver([_saved(1), _saved(2, is_default=True)])
        assert resolver.selection(SHIPPING).kind == SelectionKind.USING_SAVED
        assert resolver.selection(SHIPPING).address_id == 2

    def test_first_address_when_no_default(self):
        resolver = AddressResolver([_saved(1), _saved(2)])
        assert resolver.selection(SHIPPING).address_id == 1

    def test_no_saved_address_starts_new_entry(self):
        resolver = AddressResolver([_saved(1)])
        assert resolver.selection(BILLING).kind == SelectionKind.ENTERING_NEW
        assert resolver.resolved(SHIPPING).city == "Kolkata"

    def test_addresses_split_by_type(self):
        resolver = AddressResolver([_saved(1), _saved(2, address_type="billing")])
        assert [a.address_id for a in resolver.saved(SHIPPING)] == [1]
        assert [a.address_id for a in resolver.saved(BILLING)] == [2]

    def test_unloaded_resolver_is_unselected(self, resolver):
        assert resolver.selection(SHIPPING).kind == SelectionKind.UNSELECTED


class TestSelect:
    def test_selecting_saved_copies_fields(self):
        resolver = AddressResolver([_saved(1), _saved(2, city="Howrah")])
        resolver.select(SHIPPING, 2)
        assert resolver.resolved(SHIPPING).city == "Howrah"

    def test_editing_form_does_not_touch_saved_address(self):
        saved = _saved(1)
        resolver = AddressResolver([saved])
        resolver.update_field(SHIPPING, "city", "Howrah")
        assert saved.city == "Kolkata"
        assert resolver.saved(SHIPPING)[0].city == "Kolkata"
        assert resolver.selection(SHIPPING).kind == SelectionKind.USING_SAVED

    def test_selecting_new_clears_form(self):
        resolver = AddressResolver([_saved(1)])
        resolver.select(SHIPPING, NEW_ADDRESS)
        assert resolver.selection(SHIPPING).kind == SelectionKind.ENTERING_NEW
        assert resolver.resolved(SHIPPING).is_blank

    def test_unknown_address_rejected(self):
        resolver = AddressResolver([_saved(1)])
        with pytest.raises(ValidationError):
            resolver.select(SHIPPING, 99)

    def test_selecting_clears_errors(self, resolver):
        resolver.update_field(SHIPPING, "postal_code", "123")
        resolver.load([_saved(1)])
        resolver.select(SHIPPING, 1)
        assert resolver.errors(SHIPPING) == {}


class TestFieldValidationOnChange:
    def test_postal_code_checked_on_change(self, resolver):
        resolver.update_field(SHIPPING, "postal_code", "070001")
        assert resolver.errors(SHIPPING) == {"postal_code": "Enter a valid 6-digit postal code."}

        resolver.update_field(SHIPPING, "postal_code", "700001")
        assert resolver.errors(SHIPPING) == {}

    def test_only_changed_field_is_checked(self, resolver):
        resolver.update_field(SHIPPING, "phone", "123")
        resolver.update_field(SHIPPING, "postal_code", "700001")
        assert resolver.errors(SHIPPING) == {"phone": "Enter a valid 10-digit phone number."}

    def test_required_fields_not_checked_on_change(self, resolver):
        resolver.update_field(SHIPPING, "name", "")
        assert resolver.errors(SHIPPING) == {}

    def test_first_edit_starts_new_entry(self, resolver):
        resolver.update_field(SHIPPING, "city", "Kolkata")
        assert resolver.selection(SHIPPING).kind == SelectionKind.ENTERING_NEW

    def test_unknown_field_rejected(self, resolver):
        with pytest.raises(ValidationError):
            resolver.update_field(SHIPPING, "country", "IN")

    def test_errors_kept_per_address_type(self, resolver):
        resolver.set_use_shipping_for_billing(False)
        resolver.update_field(BILLING, "phone", "123")
        assert resolver.errors(SHIPPING) == {}
        assert resolver.errors(BILLING) == {"phone": "Enter a valid 10-digit phone number."}


class TestShippingForBilling:
    def test_billing_mirrors_shipping(self, resolver, fill_address):
        fill_address(resolver, city="Howrah")
        assert resolver.is_mirrored(BILLING)
        assert resolver.resolved(BILLING) == resolver.resolved(SHIPPING)

    def test_mirror_tracks_later_shipping_edits(self, resolver, fill_address):
        fill_address(resolver)
        resolver.update_field(SHIPPING, "city", "Howrah")
        assert resolver.resolved(BILLING).city == "Howrah"

    def test_mirrored_billing_cannot_be_edited(self, resolver):
        with pytest.raises(InvalidOperationError):
            resolver.update_field(BILLING, "city", "Howrah")

    def test_toggling_off_restores_billing_state(self, fill_address):
        resolver = AddressResolver([_saved(5, address_type="billing", city="Pune")], use_shipping_for_billing=False)
        resolver.set_use_shipping_for_billing(True)
        fill_address(resolver, city="Howrah")
        assert resolver.resolved(BILLING).city == "Howrah"

        resolver.set_use_shipping_for_billing(False)
        assert resolver.resolved(BILLING).city == "Pune"
        assert resolver.selection(BILLING).address_id == 5

    def test_mirrored_billing_skips_validation(self, resolver):
        assert resolver.validate(BILLING) == {}
        assert not resolver.has_errors(BILLING)

    def test_enabling_mirror_clears_billing_errors(self, resolver):
        resolver.set_use_shipping_for_billing(False)
        resolver.update_field(BILLING, "phone", "1")
        resolver.set_use_shipping_for_billing(True)
        resolver.set_use_shipping_for_billing(False)
        assert resolver.errors(BILLING) == {}


class TestValidate:
    def test_full_validation_records_errors(self, resolver):
        errors = resolver.validate(SHIPPING)
        assert "name" in errors
        assert resolver.has_errors(SHIPPING)

    def test_valid_form(self, resolver, fill_address):
        fill_address(resolver)
        assert resolver.validate(SHIPPING) == {}


class TestSaveToAddressBook:
    def test_new_entry_saved_when_opted_in(self, resolver, fill_address):
        fill_address(resolver)
        resolver.set_save_to_address_book(SHIPPING, True)
        assert resolver.should_save(SHIPPING)

    def test_opt_in_kept_per_address_type(self, resolver):
        resolver.set_save_to_address_book(SHIPPING, True)
        assert resolver.save_to_address_book(SHIPPING)
        assert not resolver.save_to_address_book(BILLING)

    def test_not_saved_without_opt_in(self, resolver, fill_address):
        fill_address(resolver)
        assert not resolver.should_save(SHIPPING)

    def test_saved_selection_never_saved_again(self):
        resolver = AddressResolver([_saved(1)])
        resolver.set_save_to_address_book(SHIPPING, True)
        assert not resolver.should_save(SHIPPING)

    def test_mirrored_billing_never_saved(self, resolver):
        resolver.set_save_to_address_book(BILLING, True)
        assert not resolver.should_save(BILLING)
