"""Tests for the local cart store."""

import json
from concurrent.futures import ThreadPoolExecutor

import pytest

from storefront.schemas.cart import CartLineItem
from storefront.schemas.product import Product
from storefront.services.cart_store import CartStore


class BrokenStorage:
    """Local storage whose every operation fails."""

    def get_item(self, key):
        raise OSError("disk unavailable")

    def set_item(self, key, value):
        raise OSError("disk full")


class TestAdd:
    def test_new_product_snapshots_fields(self, storage, tomatoes) -> None:
        cart = CartStore(storage)
        cart.add(tomatoes, 2)

        [item] = cart.items
        assert item.product_id == "prod_1"
        assert item.product_name == "Fresh Tomatoes"
        assert item.quantity == 2
        assert item.unit_type == "kg"
        assert item.unit_price == 100  # discount wins
        assert item.base_price == 120
        assert item.discount_price == 100
        assert item.category_name == "Fresh Vegetables"
        assert item.image == "https://img.example/tomato.jpg"
        assert item.is_custom is False
        assert item.customizations is None

    def test_base_price_used_without_discount(self, storage, milk) -> None:
        cart = CartStore(storage)
        cart.add(milk)
        assert cart.items[0].unit_price == 80
        assert cart.items[0].image is None

    def test_repeat_adds_sum_quantities(self, storage, tomatoes) -> None:
        cart = CartStore(storage)
        for qty in (1, 4, 2):
            cart.add(tomatoes, qty)

        assert len(cart.items) == 1
        assert cart.items[0].quantity == 7

    def test_concurrent_adds_from_threads_all_count(self, storage, tomatoes) -> None:
        cart = CartStore(storage)
        quantities = [1, 2, 3] * 20

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(lambda qty: cart.add(tomatoes, qty), quantities))

        [item] = cart.items
        assert item.quantity == sum(quantities)
        assert CartStore(storage).items[0].quantity == sum(quantities)

    def test_repeat_add_keeps_original_price(self, storage, tomatoes) -> None:
        cart = CartStore(storage)
        cart.add(tomatoes)
        repriced = tomatoes.model_copy(update={"discount_price": 90, "name": "Tomatoes"})
        cart.add(repriced, 2)

        [item] = cart.items
        assert item.quantity == 3
        assert item.unit_price == 100
        assert item.product_name == "Fresh Tomatoes"

    def test_custom_item_uses_list_unit(self, storage) -> None:
        cart = CartStore(storage)
        notes = {"text": "2 bunches of coriander, 1 lemon"}
        cart.add(Product(id="custom_1", name="Shopping list"), 1, is_custom=True, customizations=notes)

        [item] = cart.items
        assert item.unit_type == "list"
        assert item.is_custom is True
        assert item.customizations == notes
        assert item.unit_price == 0

    def test_rejects_non_positive_quantity(self, storage, tomatoes) -> None:
        cart = CartStore(storage)
        with pytest.raises(ValueError):
            cart.add(tomatoes, 0)
        assert cart.items == []

    def test_insertion_order_is_display_order(self, storage, tomatoes, milk) -> None:
        cart = CartStore(storage)
        cart.add(milk)
        cart.add(tomatoes)
        cart.add(milk)
        assert [it.product_id for it in cart.items] == ["prod_8", "prod_1"]

    def test_example_scenario(self, storage) -> None:
        cart = CartStore(storage)
        cart.add(Product(id="p1", base_price=100), 2)
        cart.add(Product(id="p1"), 3)

        [item] = cart.items
        assert (item.product_id, item.quantity, item.unit_price) == ("p1", 5, 100)
        assert cart.total == 500
        assert cart.count == 5


class TestUpdateAndRemove:
    def test_update_sets_absolute_quantity(self, storage, tomatoes) -> None:
        cart = CartStore(storage)
        cart.add(tomatoes, 5)
        cart.update_quantity("prod_1", 2)
        assert cart.items[0].quantity == 2

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_non_positive_update_removes(self, storage, tomatoes, milk, quantity) -> None:
        cart = CartStore(storage)
        cart.add(tomatoes)
        cart.add(milk)

        cart.update_quantity("prod_1", quantity)

        assert [it.product_id for it in cart.items] == ["prod_8"]

    def test_update_unknown_is_noop(self, storage, tomatoes) -> None:
        cart = CartStore(storage)
        cart.add(tomatoes)
        cart.update_quantity("missing", 3)
        assert [(it.product_id, it.quantity) for it in cart.items] == [("prod_1", 1)]

    def test_remove_unknown_is_noop(self, storage, tomatoes) -> None:
        cart = CartStore(storage)
        cart.add(tomatoes)
        cart.remove("missing")
        assert cart.count == 1

    def test_clear(self, storage, tomatoes, milk) -> None:
        cart = CartStore(storage)
        cart.add(tomatoes, 2)
        cart.add(milk)
        cart.clear()

        assert cart.items == []
        assert cart.total == 0
        assert cart.count == 0
        assert cart.is_empty


class TestDerivedReads:
    def test_total_tracks_every_mutation(self, storage, tomatoes, milk) -> None:
        cart = CartStore(storage)
        cart.add(tomatoes, 2)          # 2 x 100
        assert cart.total == 200
        cart.add(milk, 3)              # + 3 x 80
        assert cart.total == 440
        cart.update_quantity("prod_1", 1)
        assert cart.total == 340
        cart.remove("prod_8")
        assert cart.total == 100
        assert cart.count == 1

    def test_items_are_copies(self, storage, tomatoes) -> None:
        cart = CartStore(storage)
        cart.add(tomatoes)
        held = cart.items[0]
        held.quantity = 99

        assert cart.items[0].quantity == 1
        assert cart.get_item("prod_1").quantity == 1

    def test_summary_line_totals(self, storage, tomatoes, milk) -> None:
        cart = CartStore(storage)
        cart.add(tomatoes, 2)
        cart.add(milk)

        summary = cart.summary()
        assert [it.line_total for it in summary.items] == [200, 80]
        assert summary.total_quantity == 3
        assert summary.total_price == 280


class TestSetAndReplace:
    def test_set_items_merges_duplicates(self, storage) -> None:
        cart = CartStore(storage)
        cart.set_items([
            CartLineItem(product_id="a", quantity=1, unit_price=10),
            CartLineItem(product_id="b", quantity=2, unit_price=5),
            CartLineItem(product_id="a", quantity=3, unit_price=12),
        ])

        assert [(it.product_id, it.quantity, it.unit_price) for it in cart.items] == [
            ("a", 4, 10),
            ("b", 2, 5),
        ]

    def test_replace_product_keeps_quantity(self, storage, tomatoes, milk) -> None:
        cart = CartStore(storage)
        cart.add(tomatoes, 3)
        cart.replace_product("prod_1", milk)

        [item] = cart.items
        assert item.product_id == "prod_8"
        assert item.quantity == 3
        assert item.unit_price == 80

    def test_replace_into_existing_line_merges(self, storage, tomatoes, milk) -> None:
        cart = CartStore(storage)
        cart.add(milk, 1)
        cart.add(tomatoes, 2)
        cart.replace_product("prod_1", milk)

        assert [(it.product_id, it.quantity) for it in cart.items] == [("prod_8", 3)]


class TestPersistence:
    def test_every_mutation_is_persisted(self, storage, tomatoes) -> None:
        cart = CartStore(storage)
        cart.add(tomatoes, 2)

        stored = json.loads(storage.get_item("dang-cart"))
        assert stored[0]["product_id"] == "prod_1"
        assert stored[0]["quantity"] == 2

        cart.update_quantity("prod_1", 4)
        assert json.loads(storage.get_item("dang-cart"))[0]["quantity"] == 4

        cart.clear()
        assert json.loads(storage.get_item("dang-cart")) == []

    def test_persisted_field_names(self, storage, tomatoes) -> None:
        CartStore(storage).add(tomatoes)
        stored = json.loads(storage.get_item("dang-cart"))
        assert set(stored[0]) == {
            "product_id",
            "product_name",
            "quantity",
            "unit_type",
            "unit_price",
            "base_price",
            "discount_price",
            "category_name",
            "image",
            "is_custom",
            "customizations",
        }

    def test_reload_round_trip(self, storage, tomatoes, milk) -> None:
        cart = CartStore(storage)
        cart.add(milk, 2)
        cart.add(tomatoes, 1, customizations={"ripe": True})

        reloaded = CartStore(storage)
        assert reloaded.items == cart.items

    def test_missing_slot_is_empty(self, storage) -> None:
        assert CartStore(storage).items == []

    @pytest.mark.parametrize(
        "raw",
        [
            "{not json",
            '{"product_id": "p1"}',
            '[{"product_id": "p1", "quantity": 0, "unit_price": 1}]',
            '[{"quantity": 2}]',
        ],
    )
    def test_malformed_slot_resets_to_empty(self, storage, raw) -> None:
        storage.set_item("dang-cart", raw)
        cart = CartStore(storage)
        assert cart.items == []
        assert cart.total == 0

    def test_read_failure_starts_empty(self) -> None:
        assert CartStore(BrokenStorage()).items == []

    def test_write_failure_keeps_memory_state(self, tomatoes) -> None:
        cart = CartStore(BrokenStorage())
        cart.add(tomatoes, 2)
        cart.add(tomatoes, 1)

        assert cart.count == 3
        assert cart.total == 300

    def test_custom_storage_key(self, storage, tomatoes) -> None:
        CartStore(storage, storage_key="other-cart").add(tomatoes)
        assert storage.get_item("dang-cart") is None
        assert storage.get_item("other-cart") is not None
