"""Tests for the persistent cart store."""

import json

import pytest
from protean.exceptions import InvalidOperationError, ValidationError

from storefront.cart.storage import MemoryStorage
from storefront.cart.store import CartStore


class TestCartStoreLifecycle:
    def test_nothing_written_before_load(self, make_product):
        storage = MemoryStorage({"cart": json.dumps([{"productId": 1, "unitPrice": 5.0, "quantity": 2}])})
        store = CartStore(storage)

        with pytest.raises(InvalidOperationError):
            store.add_item(make_product())

        assert storage.writes == []
        assert json.loads(storage.items["cart"])[0]["productId"] == 1

    def test_load_restores_stored_cart(self, make_product):
        storage = MemoryStorage()
        first = CartStore(storage)
        first.load()
        first.add_item(make_product(product_id=7, unit_price=1000.0), 2)
        first.teardown()

        second = CartStore(storage)
        second.load()
        assert len(second) == 1
        assert second.line(7).quantity == 2
        assert second.subtotal() == 2000.0

    def test_load_is_idempotent(self, cart, make_product):
        cart.add_item(make_product())
        cart.load()
        assert len(cart) == 1

    def test_load_does_not_write(self):
        storage = MemoryStorage({"cart": json.dumps([{"productId": 1, "quantity": 1}])})
        CartStore(storage).load()
        assert storage.writes == []

    def test_mutation_after_teardown_rejected(self, storage, make_product):
        store = CartStore(storage)
        store.load()
        store.teardown()

        with pytest.raises(InvalidOperationError):
            store.add_item(make_product())
        with pytest.raises(InvalidOperationError):
            store.load()

    def test_custom_storage_key(self, storage, make_product):
        store = CartStore(storage, key="shopper-cart")
        store.load()
        store.add_item(make_product())
        assert "shopper-cart" in storage.items
        assert "cart" not in storage.items


class TestCorruptedSnapshot:
    @pytest.mark.parametrize("raw", ["{not json", '{"productId": 1}', "42", '"cart"'])
    def test_unreadable_snapshot_gives_empty_cart(self, raw):
        store = CartStore(MemoryStorage({"cart": raw}))
        store.load()
        assert store.is_empty

    def test_bad_entries_skipped(self):
        raw = json.dumps([{"productId": 1, "unitPrice": 5, "quantity": 1}, {"name": "no id"}, "junk"])
        store = CartStore(MemoryStorage({"cart": raw}))
        store.load()
        assert [line.product_id for line in store] == [1]

    def test_duplicate_entries_merged(self):
        raw = json.dumps([{"productId": 1, "quantity": 2}, {"id": 1, "quantity": 3}])
        store = CartStore(MemoryStorage({"cart": raw}))
        store.load()
        assert len(store) == 1
        assert store.line(1).quantity == 5

    def test_corrupted_snapshot_is_replaced_on_next_write(self, make_product):
        storage = MemoryStorage({"cart": "{not json"})
        store = CartStore(storage)
        store.load()
        store.add_item(make_product(product_id=2))
        assert json.loads(storage.items["cart"])[0]["productId"] == 2


class TestAddItem:
    def test_add_new_product(self, cart, make_product):
        cart.add_item(make_product(product_id=7, unit_price=1000.0), 2)
        assert cart.line(7).quantity == 2
        assert cart.subtotal() == 2000.0

    def test_adding_same_product_sums_quantities(self, cart, make_product):
        for quantity in (1, 2, 4):
            cart.add_item(make_product(product_id=7), quantity)
        assert len(cart) == 1
        assert cart.line(7).quantity == 7

    def test_adding_keeps_line_order(self, cart, make_product):
        cart.add_item(make_product(product_id=3))
        cart.add_item(make_product(product_id=1))
        cart.add_item(make_product(product_id=3))
        assert [line.product_id for line in cart] == [3, 1]

    def test_zero_quantity_rejected(self, cart, make_product):
        with pytest.raises(ValidationError):
            cart.add_item(make_product(), 0)
        assert cart.is_empty

    def test_every_mutation_is_persisted(self, cart, storage, stored_cart, make_product):
        cart.add_item(make_product(product_id=7, unit_price=1000.0), 2)
        assert stored_cart(storage) == [
            {"productId": 7, "name": "Ruby Ring", "unitPrice": 1000.0, "imageRef": None, "quantity": 2}
        ]


class TestQuantityChanges:
    def test_set_quantity(self, cart, make_product):
        cart.add_item(make_product(product_id=7))
        cart.set_quantity(7, 5)
        assert cart.line(7).quantity == 5

    def test_set_quantity_below_one_rejected(self, cart, make_product):
        cart.add_item(make_product(product_id=7), 2)
        with pytest.raises(ValidationError) as exc:
            cart.set_quantity(7, 0)
        assert "quantity" in exc.value.messages
        assert cart.line(7).quantity == 2

    def test_set_quantity_of_absent_product_is_noop(self, cart, storage):
        cart.set_quantity(99, 3)
        assert cart.is_empty
        assert storage.writes == []

    def test_increment_and_decrement(self, cart, make_product):
        cart.add_item(make_product(product_id=7), 2)
        cart.increment(7)
        assert cart.line(7).quantity == 3
        cart.decrement(7)
        cart.decrement(7)
        assert cart.line(7).quantity == 1

    def test_decrement_stops_at_one(self, cart, make_product):
        cart.add_item(make_product(product_id=7))
        cart.decrement(7)
        assert cart.line(7).quantity == 1


class TestRemoveAndClear:
    def test_remove_item(self, cart, make_product):
        cart.add_item(make_product(product_id=7))
        cart.add_item(make_product(product_id=8))
        cart.remove_item(7)
        assert cart.line(7) is None
        assert len(cart) == 1

    def test_remove_absent_product_is_noop(self, cart, make_product):
        cart.add_item(make_product(product_id=7))
        cart.remove_item(99)
        assert len(cart) == 1

    def test_clear(self, cart, storage, stored_cart, make_product):
        cart.add_item(make_product(product_id=7))
        cart.clear()
        assert cart.is_empty
        assert stored_cart(storage) == []


class TestTotals:
    def test_empty_cart_subtotal_is_zero(self, cart):
        assert cart.subtotal() == 0

    def test_subtotal_sums_all_lines(self, cart, make_product):
        cart.add_item(make_product(product_id=1, unit_price=10.0), 3)
        cart.add_item(make_product(product_id=2, unit_price=2.5), 2)
        assert cart.subtotal() == 35.0
        assert cart.item_count() == 5
