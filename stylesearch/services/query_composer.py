"""Turns a style suggestion into search-engine-ready shopping queries."""

from __future__ import annotations

from stylesearch.models.contracts import StyleSuggestion

FALLBACK_QUERY_SUFFIX = "fashion clothes India"


def compose_shopping_queries(
    style_suggestion: StyleSuggestion | None,
    original_query: str,
) -> list[str]:
    """Flatten every item's shopping_queries in encounter order.

    Duplicates are kept. With nothing to flatten, the user's own text is
    searched as ``"<query> fashion clothes India"``.
    """
    queries: list[str] = []
    if style_suggestion is not None:
        for item in style_suggestion.items:
            queries.extend(item.shopping_queries)

    if not queries:
        return [f"{original_query} {FALLBACK_QUERY_SUFFIX}"]
    return queries
