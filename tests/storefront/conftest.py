import json

import pytest
from protean.integrations.pytest import DomainFixture

from storefront.address.address import AddressType
from storefront.address.resolver import AddressResolver
from storefront.cart.line import Product
from storefront.cart.storage import MemoryStorage
from storefront.cart.store import CartStore
from storefront.service.fake_adapter import FakeStorefrontService


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield


# ---------------------------------------------------------------------------
# Shared builders
# ---------------------------------------------------------------------------
@pytest.fixture()
def storage():
    return MemoryStorage()


@pytest.fixture()
def cart(storage):
    store = CartStore(storage)
    store.load()
    yield store
    store.teardown()


@pytest.fixture()
def fake_service():
    return FakeStorefrontService()


@pytest.fixture()
def resolver():
    return AddressResolver()


def _make_product(product_id=7, name="Ruby Ring", unit_price=1000.0, image_ref=None):
    return Product(product_id=product_id, name=name, unit_price=unit_price, image_ref=image_ref)


def _fill_address(resolver, address_type=AddressType.SHIPPING, **overrides):
    fields = {
        "name": "Asha Rao",
        "address_line": "12 Park Street",
        "city": "Kolkata",
        "state": "WB",
        "postal_code": "700016",
        "phone": "9830012345",
    }
    fields.update(overrides)
    for field, value in fields.items():
        resolver.update_field(address_type, field, value)


def _stored_cart(storage, key="cart"):
    raw = storage.get_item(key)
    return json.loads(raw) if raw else None


@pytest.fixture()
def make_product():
    return _make_product


@pytest.fixture()
def fill_address():
    return _fill_address


@pytest.fixture()
def stored_cart():
    return _stored_cart
