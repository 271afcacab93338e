"""Built-in product catalog: the last rung of the degradation ladder.

Used for category browsing and whenever AI search returns nothing, so the
storefront always has something to show.
"""

from __future__ import annotations

from stylesearch.models.contracts import CatalogCategory, StaticCatalogProduct
from stylesearch.services.normalizer import compute_discount


def _product(
    id: str,
    name: str,
    price: float,
    original_price: float | None,
    image: str,
    rating: float,
    reviews: int,
    brand: str,
    category: str,
    location: str,
) -> StaticCatalogProduct:
    return StaticCatalogProduct(
        id=id,
        name=name,
        price=price,
        original_price=original_price,
        image=image,
        rating=rating,
        reviews=reviews,
        brand=brand,
        category=category,
        location=location,
        discount=compute_discount(price, original_price),
    )


_UNSPLASH = "https://images.unsplash.com/photo-{}?w=400&h=600&fit=crop"

CATALOG: tuple[StaticCatalogProduct, ...] = (
    _product(
        "1", "Elegant Red Silk Saree", 2499, 3999,
        _UNSPLASH.format("1610030469983-98e550d6193c"),
        4.5, 234, "Fabindia", "Sarees", "Mumbai",
    ),
    _product(
        "2", "Cotton Kurta Set for Office", 1299, 1899,
        _UNSPLASH.format("1583391733956-6c78276477e2"),
        4.2, 156, "W for Woman", "Kurtas", "Delhi",
    ),
    _product(
        "3", "Designer Lehenga Choli", 8999, 12999,
        _UNSPLASH.format("1594736797933-d0401ba2fe65"),
        4.8, 89, "Kalki Fashion", "Lehengas", "Jaipur",
    ),
    _product(
        "4", "Casual Denim Jacket", 1799, None,
        _UNSPLASH.format("1551028719-00167b16eac5"),
        4.1, 203, "Zara", "Jackets", "Bangalore",
    ),
    _product(
        "5", "Traditional Bandhani Dupatta", 899, 1299,
        _UNSPLASH.format("1583391733981-3cc22c4e0e3c"),
        4.3, 167, "Biba", "Dupattas", "Ahmedabad",
    ),
    _product(
        "6", "Formal Blazer for Women", 2299, 3199,
        _UNSPLASH.format("1594736797933-d0401ba2fe65"),
        4.4, 124, "AND", "Blazers", "Chennai",
    ),
)

CATEGORIES: tuple[CatalogCategory, ...] = (
    CatalogCategory(name="Sarees", icon="🥻", color="bg-pink-100 text-pink-700"),
    CatalogCategory(name="Kurtas", icon="👘", color="bg-purple-100 text-purple-700"),
    CatalogCategory(name="Lehengas", icon="👗", color="bg-red-100 text-red-700"),
    CatalogCategory(name="Jackets", icon="🧥", color="bg-blue-100 text-blue-700"),
    CatalogCategory(name="Dupattas", icon="🧣", color="bg-green-100 text-green-700"),
    CatalogCategory(name="Blazers", icon="👔", color="bg-yellow-100 text-yellow-700"),
)


def list_products() -> list[StaticCatalogProduct]:
    return list(CATALOG)


def list_categories() -> list[CatalogCategory]:
    return list(CATEGORIES)


def search_catalog(query: str) -> list[StaticCatalogProduct]:
    """Case-insensitive substring match on name, category or brand."""
    needle = query.strip().lower()
    if not needle:
        return list(CATALOG)
    return [
        p
        for p in CATALOG
        if needle in p.name.lower() or needle in p.category.lower() or needle in p.brand.lower()
    ]


def filter_by_category(category: str | None) -> list[StaticCatalogProduct]:
    """Exact category match; None means no filter."""
    if category is None:
        return list(CATALOG)
    return [p for p in CATALOG if p.category == category]
