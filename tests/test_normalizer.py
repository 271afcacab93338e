"""Tests for raw shopping record normalization.

Synthesized values are random but bounded; a seeded Random makes them
reproducible where a test needs exact values.
"""

import random

from stylesearch.models.contracts import AiSourcedProduct, RawShoppingProduct
from stylesearch.services.normalizer import (
    compute_discount,
    normalize_product,
    normalize_products,
    placeholder_image,
)


class TestComputeDiscount:
    def test_rounds_to_whole_percent(self):
        assert compute_discount(1299, 1899) == 32

    def test_none_when_original_not_higher(self):
        assert compute_discount(1899, 1899) is None
        assert compute_discount(2000, 1500) is None

    def test_none_when_either_missing(self):
        assert compute_discount(None, 1899) is None
        assert compute_discount(1299, None) is None
        assert compute_discount(0, 1899) is None


class TestNormalizeProduct:
    def test_empty_record_is_fully_populated(self):
        """Every display field is filled even when the source has nothing."""
        product = normalize_product(RawShoppingProduct(), 0)

        assert isinstance(product, AiSourcedProduct)
        assert product.origin == "ai_search"
        assert product.id == "product_0"
        assert product.name == "Fashion Item"
        assert 500 <= product.price < 3500
        assert product.price == int(product.price)
        assert 4.0 <= product.rating < 5.0
        assert 50 <= product.reviews < 250
        assert product.image == placeholder_image(0)
        assert product.brand == "Fashion Brand"
        assert product.category == "Fashion"
        assert product.location == "India"
        assert product.discount is None
        assert product.original_price is None
        assert product.product_link is None

    def test_discount_from_both_prices(self):
        raw = RawShoppingProduct(title="Cotton Kurta Set", extracted_price=1299, old_price_extracted=1899)
        product = normalize_product(raw, 0)
        assert product.price == 1299
        assert product.original_price == 1899
        assert product.discount == 32

    def test_zero_old_price_means_no_original(self):
        raw = RawShoppingProduct(extracted_price=999, old_price_extracted=0)
        product = normalize_product(raw, 0)
        assert product.original_price is None
        assert product.discount is None

    def test_original_not_above_price_keeps_original_without_discount(self):
        raw = RawShoppingProduct(extracted_price=1500, old_price_extracted=1200)
        product = normalize_product(raw, 0)
        assert product.original_price == 1200
        assert product.discount is None

    def test_display_price_parsed_when_extracted_missing(self):
        raw = RawShoppingProduct(price="₹1,499.00")
        assert normalize_product(raw, 0).price == 1499.0

    def test_synthesized_price_never_yields_discount(self):
        raw = RawShoppingProduct(old_price_extracted=9999)
        product = normalize_product(raw, 0)
        assert product.original_price == 9999
        assert product.discount is None

    def test_source_fields_carried_through(self):
        raw = RawShoppingProduct(
            title="Banarasi Silk Saree",
            product_id="gs_123",
            product_link="https://shop.example/saree",
            source="Myntra",
            extracted_price=4599,
            thumbnail="https://img.example/saree.jpg",
        )
        product = normalize_product(raw, 5)
        assert product.id == "gs_123"
        assert product.name == "Banarasi Silk Saree"
        assert product.brand == "Myntra"
        assert product.image == "https://img.example/saree.jpg"
        assert product.product_link == "https://shop.example/saree"

    def test_existing_rating_reviews_category_location_kept(self):
        raw = RawShoppingProduct(rating=3.7, reviews=12, category="Sarees", location="Jaipur")
        product = normalize_product(raw, 0)
        assert product.rating == 3.7
        assert product.reviews == 12
        assert product.category == "Sarees"
        assert product.location == "Jaipur"

    def test_out_of_range_rating_is_replaced(self):
        product = normalize_product(RawShoppingProduct(rating=7.5), 0)
        assert 4.0 <= product.rating < 5.0

    def test_placeholder_image_keyed_by_position(self):
        assert normalize_product(RawShoppingProduct(), 3).image == placeholder_image(3)
        assert placeholder_image(3) != placeholder_image(4)
        assert "1610030469986" in placeholder_image(3)

    def test_seeded_rng_is_reproducible(self):
        a = normalize_product(RawShoppingProduct(), 0, random.Random(42))
        b = normalize_product(RawShoppingProduct(), 0, random.Random(42))
        assert a == b


class TestNormalizeProducts:
    def test_positions_follow_list_order(self):
        raws = [RawShoppingProduct(), RawShoppingProduct(product_id="x"), RawShoppingProduct()]
        ids = [p.id for p in normalize_products(raws, random.Random(1))]
        assert ids == ["product_0", "x", "product_2"]

    def test_empty_input(self):
        assert normalize_products([]) == []

    def test_bounds_hold_across_many_records(self):
        products = normalize_products([RawShoppingProduct()] * 200, random.Random(0))
        assert all(500 <= p.price < 3500 for p in products)
        assert all(4.0 <= p.rating < 5.0 for p in products)
        assert all(50 <= p.reviews < 250 for p in products)
