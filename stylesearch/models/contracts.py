"""Contract models shared by the clients, the orchestrator and the API.

Field names on the agent-service models (ConversationResponse,
MessageResponse, RawShoppingProduct) match the wire format of that service.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, Field, field_validator

# === AI conversation ===


class ConversationResponse(BaseModel):
    session_id: str = Field(min_length=1)
    message: str = ""
    timestamp: str = ""


class StyleItem(BaseModel):
    type: str
    color: str
    material: str
    fit: str
    style: str
    shopping_queries: list[str]


class StyleSuggestion(BaseModel):
    title: str
    description: str
    items: list[StyleItem]


class PriceRange(BaseModel):
    min: float = Field(ge=0)
    max: float = Field(ge=0)


class SearchFilters(BaseModel):
    price: PriceRange = PriceRange(min=500, max=5000)


class ModelInfo(BaseModel):
    provider: str = ""
    model_name: str = ""


class MessageResponse(BaseModel):
    """One AI answer: the style suggestion plus everything around it."""

    message: str
    request_type: str = "style_suggestion"
    style_suggestion: StyleSuggestion
    follow_up_suggestions: list[str] = []
    filters: SearchFilters = SearchFilters()
    model_info: ModelInfo = ModelInfo()
    timestamp: str = ""
    session_id: str = ""


# === Shopping search ===


class ShoppingSearchOptions(BaseModel):
    country: str | None = None
    language: str | None = None
    location: str | None = None
    google_domain: str | None = None
    gl: str | None = None
    hl: str | None = None
    direct_link: bool | None = None

    def to_query_params(self) -> dict[str, str]:
        """Only the options that were set; booleans as lowercase strings."""
        params: dict[str, str] = {}
        for key, value in self.model_dump(exclude_none=True).items():
            params[key] = str(value).lower() if isinstance(value, bool) else str(value)
        return params


class RawShoppingProduct(BaseModel):
    """A shopping-index record. Every field may be missing or null.

    rating/reviews/category/location only appear on records from the legacy
    direct-search endpoint; the normalizer carries them through when present.
    """

    title: str | None = None
    product_link: str | None = None
    product_id: str | None = None
    scrapingdog_product_link: str | None = None
    scrapingdog_immersive_product_link: str | None = None
    source: str | None = None
    price: str | None = None
    extracted_price: float | None = None
    old_price_extracted: float | None = None
    extensions: list[str] = []
    thumbnail: str | None = None
    position: int | None = None
    rating: float | None = None
    reviews: int | None = None
    category: str | None = None
    location: str | None = None

    @field_validator("extensions", mode="before")
    @classmethod
    def _null_extensions(cls, v: object) -> object:
        return [] if v is None else v


class ShoppingResponse(BaseModel):
    shopping_results: list[RawShoppingProduct] = []


# === Canonical products ===


class _ProductFields(BaseModel):
    id: str
    name: str
    price: float = Field(gt=0)
    original_price: float | None = None
    image: str
    rating: float = Field(ge=0, le=5)
    reviews: int = Field(ge=0)
    brand: str
    category: str
    location: str
    discount: int | None = None


class StaticCatalogProduct(_ProductFields):
    """Built-in catalog entry, shown when AI search has nothing to offer."""

    origin: Literal["catalog"] = "catalog"


class AiSourcedProduct(_ProductFields):
    """Product found through AI search; links out to the merchant."""

    origin: Literal["ai_search"] = "ai_search"
    product_link: str | None = None


CanonicalProduct = Annotated[
    StaticCatalogProduct | AiSourcedProduct,
    Field(discriminator="origin"),
]


class CatalogCategory(BaseModel):
    name: str
    icon: str
    color: str


# === Orchestrator state ===


class SearchState(BaseModel):
    is_loading: bool = False
    session_id: str | None = None
    last_response: MessageResponse | None = None
    error: str | None = None


# === API ===


class SearchRequest(BaseModel):
    query: str = Field(min_length=1, max_length=500)

    @field_validator("query")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("query must not be blank")
        return v.strip()


class SearchResponse(BaseModel):
    products: list[CanonicalProduct]
    degraded: bool = False
    notice: str | None = None
    session_id: str | None = None
    follow_up_suggestions: list[str] = []
    style_suggestion: StyleSuggestion | None = None


class SessionResponse(BaseModel):
    session_id: str


class SuggestionsResponse(BaseModel):
    follow_up_suggestions: list[str] = []
    style_suggestion: StyleSuggestion | None = None


class ErrorResponse(BaseModel):
    error: str
    message: str
    retryable: bool = False
