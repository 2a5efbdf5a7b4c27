"""Tests for the shopper session lifecycle."""

import pytest
from protean.exceptions import InvalidOperationError

from storefront.cart.storage import FileStorage
from storefront.config import Settings
from storefront.session import ShopperSession


@pytest.fixture()
def settings(tmp_path):
    return Settings(storage_path=str(tmp_path / "storage.json"), redirect_delay=0.0, service_adapter="fake")


class TestShopperSession:
    def test_cart_survives_sessions(self, settings, fake_service, make_product):
        with ShopperSession(settings, service=fake_service) as session:
            session.cart.add_item(make_product(product_id=7, unit_price=1000.0), 2)

        with ShopperSession(settings, service=fake_service) as session:
            assert session.cart.line(7).quantity == 2

    def test_file_storage_used_by_default(self, settings, fake_service):
        session = ShopperSession(settings, service=fake_service)
        assert isinstance(session.storage, FileStorage)

    def test_cart_unusable_after_close(self, settings, fake_service, make_product):
        session = ShopperSession(settings, service=fake_service).start()
        session.close()
        with pytest.raises(InvalidOperationError):
            session.cart.add_item(make_product())

    def test_checkout_uses_session_settings(self, settings, fake_service, make_product, fill_address):
        with ShopperSession(settings, service=fake_service) as session:
            session.cart.add_item(make_product())
            checkout = session.checkout()
            fill_address(checkout.resolver)
            checkout.request_confirmation()
            outcome = checkout.place_order()

            assert outcome.success
            assert outcome.redirect_delay == 0.0
            assert session.cart.is_empty
            assert fake_service.calls_to("list_addresses")

            view = session.tracker().load(outcome.order_id)
            assert view.progress.current_step.label == "Order Placed"

    def test_service_from_factory(self, settings, storage):
        session = ShopperSession(settings, storage=storage)
        assert session.service is not None
