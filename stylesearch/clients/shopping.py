"""Shopping search client for the agent service's Google Shopping scraper.

Single searches never raise: transport failures, malformed bodies and empty
result sets all degrade to a few placeholder products derived from the query.
Batch searches fan out concurrently and drop any query that still fails.
"""

from __future__ import annotations

import asyncio
import hashlib
import urllib.parse
from collections.abc import Sequence

import httpx
import structlog
from pydantic import ValidationError

from stylesearch.config import settings
from stylesearch.errors import SchemaViolation, StyleSearchError, TransportFailure
from stylesearch.models.contracts import (
    RawShoppingProduct,
    ShoppingResponse,
    ShoppingSearchOptions,
)

log = structlog.get_logger("stylesearch.shopping")

SHOPPING_PATH = "/api/v1/scraping/google_shopping"
PLACEHOLDER_ID_PREFIX = "placeholder_"

# (title suffix, extracted price, old price) per placeholder slot
_PLACEHOLDER_TIERS: tuple[tuple[str, float, float], ...] = (
    ("Premium Collection", 2499.0, 3499.0),
    ("Designer Edition", 3999.0, 0.0),
    ("Everyday Essentials", 999.0, 1499.0),
)


def india_search_options() -> ShoppingSearchOptions:
    """Region options used for every batch query."""
    return ShoppingSearchOptions(
        country=settings.shopping_country,
        language=settings.shopping_language,
        location=settings.shopping_location,
        hl=settings.shopping_hl,
        gl=settings.shopping_gl,
    )


def _google_shopping_url(query: str) -> str:
    return f"https://www.google.com/search?tbm=shop&q={urllib.parse.quote_plus(query)}"


def placeholder_products(query: str) -> list[RawShoppingProduct]:
    """Stand-in results so the pipeline always has something to show."""
    digest = hashlib.sha256(query.encode("utf-8")).hexdigest()[:10]
    link = _google_shopping_url(query)
    return [
        RawShoppingProduct(
            title=f"{query} - {suffix}",
            product_id=f"{PLACEHOLDER_ID_PREFIX}{digest}_{i}",
            product_link=link,
            source="Google Shopping",
            price=f"₹{price:,.0f}",
            extracted_price=price,
            old_price_extracted=old_price,
            position=i,
        )
        for i, (suffix, price, old_price) in enumerate(_PLACEHOLDER_TIERS, start=1)
    ]


class ShoppingSearchClient:
    """Google Shopping lookups through the agent service."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str | None = None,
        user_id: str | None = None,
    ) -> None:
        self._http = http_client
        self._base_url = (base_url or settings.agent_api_base_url).rstrip("/")
        self._user_id = user_id if user_id is not None else settings.user_id

    async def _fetch(self, query: str, options: ShoppingSearchOptions) -> list[RawShoppingProduct]:
        params = {"query": query, **options.to_query_params()}
        headers = {"Accept": "application/json"}
        if self._user_id:
            headers["User-ID"] = self._user_id

        try:
            resp = await self._http.get(
                f"{self._base_url}{SHOPPING_PATH}",
                params=params,
                headers=headers,
                timeout=settings.http_timeout_seconds,
            )
        except httpx.TimeoutException as exc:
            raise TransportFailure(f"Timeout searching products for {query[:80]!r}") from exc
        except httpx.RequestError as exc:
            raise TransportFailure(
                f"Network error searching products: {type(exc).__name__}"
            ) from exc

        if resp.status_code >= 400:
            raise TransportFailure(
                f"Failed to search Google Shopping: {resp.status_code} {resp.text[:200]}",
                retryable=resp.status_code == 429 or resp.status_code >= 500,
            )

        try:
            payload = ShoppingResponse.model_validate(resp.json())
        except ValueError as exc:
            # json.JSONDecodeError and pydantic.ValidationError are both ValueErrors
            kind = "schema" if isinstance(exc, ValidationError) else "json"
            raise SchemaViolation(f"Malformed shopping response ({kind})") from exc
        return payload.shopping_results

    async def search_products(
        self,
        query: str,
        options: ShoppingSearchOptions | None = None,
    ) -> list[RawShoppingProduct]:
        """Search one query; placeholders on failure or an empty result set."""
        try:
            results = await self._fetch(query, options or ShoppingSearchOptions())
        except StyleSearchError as exc:
            log.warning(
                "shopping_search_failed",
                query=query[:80],
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return placeholder_products(query)

        if not results:
            log.info("shopping_search_empty", query=query[:80])
            return placeholder_products(query)

        log.debug("shopping_search_ok", query=query[:80], results=len(results))
        return results

    async def batch_search_products(self, queries: Sequence[str]) -> list[RawShoppingProduct]:
        """Run every query concurrently and concatenate what comes back.

        Waits for all queries to settle. A query that raises is logged and
        contributes nothing; the others are unaffected.
        """
        if not queries:
            return []

        options = india_search_options()
        tasks = [self.search_products(q, options) for q in queries]
        settled = await asyncio.gather(*tasks, return_exceptions=True)

        merged: list[RawShoppingProduct] = []
        failed = 0
        for query, result in zip(queries, settled, strict=True):
            if isinstance(result, BaseException):
                failed += 1
                log.warning(
                    "batch_search_query_failed",
                    query=query[:80],
                    error=str(result)[:200],
                    error_type=type(result).__name__,
                )
                continue
            merged.extend(result)

        log.info(
            "batch_search_complete",
            queries=len(queries),
            failed=failed,
            products=len(merged),
        )
        return merged
