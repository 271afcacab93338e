"""Session and AI search endpoints consumed by the storefront UI.

The search endpoint always answers with a non-empty product list: when the
AI pipeline yields nothing, the static catalog stands in and the response is
flagged ``degraded`` with a notice the UI shows as a toast.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, Response

from stylesearch.api.deps import get_orchestrator
from stylesearch.clients.shopping import PLACEHOLDER_ID_PREFIX
from stylesearch.models.contracts import (
    SearchRequest,
    SearchResponse,
    SearchState,
    SessionResponse,
    SuggestionsResponse,
)
from stylesearch.services import catalog
from stylesearch.services.orchestrator import SearchOrchestrator

logger = structlog.get_logger()

router = APIRouter(tags=["search"])

NOTICE_AI_UNAVAILABLE = "AI search temporarily unavailable. Using enhanced search."
NOTICE_OFFLINE = "Showing offline results"
NOTICE_GENERIC_STYLES = "Personalised styling unavailable. Showing general matches."
NOTICE_PLACEHOLDERS = "Live shopping results unavailable. Showing sample listings."


@router.post("/sessions", status_code=201)
async def create_session(
    orchestrator: SearchOrchestrator = Depends(get_orchestrator),
) -> SessionResponse:
    """Open (or return the already open) AI conversation session."""
    session_id = await orchestrator.initialize_session()
    return SessionResponse(session_id=session_id)


@router.delete("/sessions", status_code=204)
async def reset_session(
    orchestrator: SearchOrchestrator = Depends(get_orchestrator),
) -> Response:
    orchestrator.reset()
    return Response(status_code=204)


@router.post("/search")
async def search(
    body: SearchRequest,
    orchestrator: SearchOrchestrator = Depends(get_orchestrator),
) -> SearchResponse:
    products = await orchestrator.search_fashion(body.query)
    state = orchestrator.state

    if products:
        if all(p.id.startswith(PLACEHOLDER_ID_PREFIX) for p in products):
            notice = NOTICE_PLACEHOLDERS
        elif state.last_response is not None and state.last_response.request_type == "fallback":
            notice = NOTICE_GENERIC_STYLES
        else:
            notice = None
        return SearchResponse(
            products=products,
            degraded=notice is not None,
            notice=notice,
            session_id=state.session_id,
            follow_up_suggestions=orchestrator.get_follow_up_suggestions(),
            style_suggestion=orchestrator.get_style_suggestion(),
        )

    matches = catalog.search_catalog(body.query)
    logger.info(
        "search_catalog_fallback",
        query=body.query[:80],
        catalog_matches=len(matches),
        error=state.error,
    )
    return SearchResponse(
        products=matches or catalog.list_products(),
        degraded=True,
        notice=NOTICE_AI_UNAVAILABLE if state.error else NOTICE_OFFLINE,
        session_id=state.session_id,
        follow_up_suggestions=orchestrator.get_follow_up_suggestions(),
        style_suggestion=orchestrator.get_style_suggestion(),
    )


@router.get("/search/state")
async def search_state(
    orchestrator: SearchOrchestrator = Depends(get_orchestrator),
) -> SearchState:
    return orchestrator.state


@router.get("/suggestions")
async def suggestions(
    orchestrator: SearchOrchestrator = Depends(get_orchestrator),
) -> SuggestionsResponse:
    return SuggestionsResponse(
        follow_up_suggestions=orchestrator.get_follow_up_suggestions(),
        style_suggestion=orchestrator.get_style_suggestion(),
    )
