from __future__ import annotations

from fastapi import APIRouter

from stylesearch.models.contracts import CatalogCategory, StaticCatalogProduct
from stylesearch.services import catalog

router = APIRouter(tags=["catalog"])


@router.get("/catalog")
async def list_catalog(category: str | None = None) -> list[StaticCatalogProduct]:
    """Built-in products, optionally limited to one category."""
    return catalog.filter_by_category(category)


@router.get("/categories")
async def list_categories() -> list[CatalogCategory]:
    return catalog.list_categories()
