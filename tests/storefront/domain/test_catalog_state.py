"""Tests for catalog replacement and basket membership."""

import pytest
from storefront.bus import topics
from storefront.bus.events import BasketChanged, CatalogChanged, PreviewChanged
from storefront.catalog.product import Category, Product
from storefront.exceptions import ProductNotFoundError

HOUR = "854cef69-976d-4c2a-a18c-2aa45046c390"
CANDY = "c101ab44-ed99-4a54-990d-47aa2bb4e7d9"
TIMER = "b06cde61-912f-4663-9751-09956c0eed67"


@pytest.fixture
def loaded(catalog, catalog_records):
    catalog.set_catalog(catalog_records)
    return catalog


class TestSetCatalog:
    def test_records_are_wrapped_as_products(self, loaded):
        assert len(loaded.items) == 3
        assert all(isinstance(item, Product) for item in loaded.items)
        assert loaded.get_product(HOUR).category == Category.SOFT_SKILL

    def test_priceless_product(self, loaded):
        assert loaded.get_product(TIMER).price is None
        assert loaded.get_product(TIMER).is_priceless

    def test_publishes_catalog_changed(self, catalog, recorder, catalog_records):
        catalog.set_catalog(catalog_records)
        payload = recorder.last(topics.CATALOG_CHANGED)
        assert isinstance(payload, CatalogChanged)
        assert [item.id for item in payload.items] == [HOUR, CANDY, TIMER]

    def test_empty_input_gives_empty_catalog(self, catalog, recorder):
        catalog.set_catalog([])
        assert catalog.items == []
        assert recorder.last(topics.CATALOG_CHANGED).items == []

    def test_empty_basket_total_is_zero(self, loaded):
        assert loaded.get_basket_total() == 0
        assert loaded.get_basket_count() == 0

    def test_unknown_category_falls_back_to_other(self, catalog):
        catalog.set_catalog([{"id": "p-1", "title": "Mystery", "category": "магия", "price": 10}])
        assert catalog.get_product("p-1").category == Category.OTHER

    def test_refresh_keeps_basket_entries_still_in_catalog(self, loaded, catalog_records):
        loaded.add_to_basket(HOUR)
        loaded.set_catalog(catalog_records)
        assert loaded.basket == [HOUR]
        assert loaded.get_product(HOUR).selected is True

    def test_refresh_drops_vanished_basket_entries(self, loaded, recorder, catalog_records):
        loaded.add_to_basket(HOUR)
        loaded.add_to_basket(CANDY)
        recorder.clear()

        loaded.set_catalog(catalog_records[1:])

        assert loaded.basket == [CANDY]
        assert recorder.last(topics.BASKET_CHANGED).count == 1

    def test_unknown_product_lookup(self, loaded):
        with pytest.raises(ProductNotFoundError):
            loaded.get_product("missing")


class TestAddToBasket:
    def test_add_marks_selected_and_appends(self, loaded):
        assert loaded.add_to_basket(HOUR) is True
        assert loaded.basket == [HOUR]
        assert loaded.get_product(HOUR).selected is True

    def test_add_accepts_product_instance(self, loaded):
        loaded.add_to_basket(loaded.get_product(CANDY))
        assert loaded.is_in_basket(CANDY)

    def test_add_publishes_basket_changed(self, loaded, recorder):
        loaded.add_to_basket(CANDY)
        payload = recorder.last(topics.BASKET_CHANGED)
        assert isinstance(payload, BasketChanged)
        assert payload.count == 1
        assert payload.total == 1450
        assert payload.items == [CANDY]

    def test_re_adding_is_a_noop(self, loaded, recorder):
        loaded.add_to_basket(HOUR)
        recorder.clear()
        assert loaded.add_to_basket(HOUR) is False
        assert loaded.basket == [HOUR]
        assert recorder.count(topics.BASKET_CHANGED) == 0

    def test_add_unknown_product(self, loaded):
        with pytest.raises(ProductNotFoundError):
            loaded.add_to_basket("missing")
        assert loaded.basket == []

    def test_insertion_order_kept(self, loaded):
        loaded.add_to_basket(CANDY)
        loaded.add_to_basket(HOUR)
        assert [product.id for product in loaded.basket_items()] == [CANDY, HOUR]


class TestDeleteFromBasket:
    def test_add_then_remove_restores_length(self, loaded):
        loaded.add_to_basket(CANDY)
        before = loaded.get_basket_count()
        loaded.add_to_basket(HOUR)
        loaded.delete_from_basket(HOUR)
        assert loaded.get_basket_count() == before
        assert not loaded.is_in_basket(HOUR)

    def test_remove_clears_selected_flag(self, loaded):
        loaded.add_to_basket(HOUR)
        loaded.delete_from_basket(HOUR)
        assert loaded.get_product(HOUR).selected is False

    def test_remove_absent_id_is_noop(self, loaded, recorder):
        assert loaded.delete_from_basket(HOUR) is False
        assert recorder.count(topics.BASKET_CHANGED) == 0

    def test_remove_publishes_basket_changed(self, loaded, recorder):
        loaded.add_to_basket(HOUR)
        loaded.delete_from_basket(HOUR)
        assert recorder.last(topics.BASKET_CHANGED).count == 0


class TestTotals:
    def test_null_price_contributes_zero(self, catalog):
        catalog.set_catalog([{"id": "a", "title": "A", "price": 100}, {"id": "b", "title": "B", "price": None}])
        catalog.add_to_basket("a")
        catalog.add_to_basket("b")
        assert catalog.get_basket_total() == 100
        assert catalog.get_basket_count() == 2

    def test_total_sums_prices(self, loaded):
        loaded.add_to_basket(HOUR)
        loaded.add_to_basket(CANDY)
        assert loaded.get_basket_total() == 2200


class TestClearAndReset:
    def test_clear_basket_empties_in_place(self, loaded):
        loaded.add_to_basket(HOUR)
        basket = loaded.basket
        loaded.clear_basket()
        assert basket == []
        assert loaded.basket is basket

    def test_clear_basket_leaves_selection_flags(self, loaded):
        loaded.add_to_basket(HOUR)
        loaded.clear_basket()
        assert loaded.get_product(HOUR).selected is True

    def test_reset_selected_clears_every_flag(self, loaded):
        loaded.add_to_basket(HOUR)
        loaded.add_to_basket(CANDY)
        loaded.clear_basket()
        loaded.reset_selected()
        assert not any(product.selected for product in loaded.items)


class TestViews:
    def test_basket_view_lines_are_numbered(self, loaded):
        loaded.add_to_basket(CANDY)
        loaded.add_to_basket(TIMER)
        view = loaded.basket_view()
        assert [(line.index, line.product_id) for line in view.lines] == [(1, CANDY), (2, TIMER)]
        assert view.total == 1450
        assert view.can_checkout is True

    def test_empty_basket_view_cannot_checkout(self, loaded):
        assert loaded.basket_view().can_checkout is False

    def test_set_preview_publishes_product(self, loaded, recorder):
        loaded.add_to_basket(HOUR)
        loaded.set_preview(HOUR)
        payload = recorder.last(topics.PREVIEW_CHANGED)
        assert isinstance(payload, PreviewChanged)
        assert payload.product.id == HOUR
        assert payload.in_basket is True
        assert loaded.preview == HOUR
