"""Maps raw shopping records onto the canonical product shape.

Every display field is filled in. Missing price, rating, review count and
image are synthesized (bounded random values or a placeholder URL) so the UI
never renders an empty slot. Pass a seeded ``random.Random`` for
reproducible output.
"""

from __future__ import annotations

import math
import random
from collections.abc import Iterable

from stylesearch.models.contracts import AiSourcedProduct, RawShoppingProduct
from stylesearch.utils.price import extract_price

DEFAULT_NAME = "Fashion Item"
DEFAULT_BRAND = "Fashion Brand"
DEFAULT_CATEGORY = "Fashion"
DEFAULT_LOCATION = "India"

SYNTH_PRICE_RANGE = (500, 3500)  # rupees, [low, high)
SYNTH_RATING_FLOOR = 4.0
SYNTH_REVIEWS_RANGE = (50, 250)  # [low, high)

_PLACEHOLDER_PHOTO_BASE = 1610030469983
PLACEHOLDER_IMAGE_TEMPLATE = "https://images.unsplash.com/photo-{photo_id}?w=400&h=600&fit=crop"


def compute_discount(price: float | None, original_price: float | None) -> int | None:
    """Whole-percent discount, or None unless original_price > price > 0."""
    if not price or not original_price or price <= 0 or original_price <= price:
        return None
    return round(100 * (1 - price / original_price))


def placeholder_image(position: int) -> str:
    return PLACEHOLDER_IMAGE_TEMPLATE.format(photo_id=_PLACEHOLDER_PHOTO_BASE + position)


def _source_price(raw: RawShoppingProduct) -> float | None:
    if raw.extracted_price and raw.extracted_price > 0:
        return float(raw.extracted_price)
    parsed = extract_price(raw.price)
    if parsed and parsed > 0:
        return parsed
    return None


def _synth_rating(rng: random.Random) -> float:
    # Floor to one decimal so the value stays strictly below 5.0.
    return math.floor((SYNTH_RATING_FLOOR + rng.random()) * 10) / 10


def normalize_product(
    raw: RawShoppingProduct,
    position: int,
    rng: random.Random | None = None,
) -> AiSourcedProduct:
    """Normalize one record. Total: never raises for any RawShoppingProduct."""
    rng = rng or random.Random()

    price = _source_price(raw)
    original_price = (
        float(raw.old_price_extracted)
        if raw.old_price_extracted and raw.old_price_extracted > 0
        else None
    )
    # A synthesized price must not produce a fake discount.
    discount = compute_discount(price, original_price) if price is not None else None
    if price is None:
        price = float(rng.randrange(*SYNTH_PRICE_RANGE))

    rating = raw.rating if raw.rating is not None and 0 <= raw.rating <= 5 else _synth_rating(rng)
    reviews = raw.reviews if raw.reviews is not None and raw.reviews >= 0 else None
    if reviews is None:
        reviews = rng.randrange(*SYNTH_REVIEWS_RANGE)

    return AiSourcedProduct(
        id=raw.product_id or f"product_{position}",
        name=raw.title or DEFAULT_NAME,
        price=price,
        original_price=original_price,
        image=raw.thumbnail or placeholder_image(position),
        rating=rating,
        reviews=reviews,
        brand=raw.source or DEFAULT_BRAND,
        category=raw.category or DEFAULT_CATEGORY,
        location=raw.location or DEFAULT_LOCATION,
        discount=discount,
        product_link=raw.product_link or None,
    )


def normalize_products(
    raws: Iterable[RawShoppingProduct],
    rng: random.Random | None = None,
) -> list[AiSourcedProduct]:
    """Normalize a merged result list; positions are list indices."""
    rng = rng or random.Random()
    return [normalize_product(raw, i, rng) for i, raw in enumerate(raws)]
