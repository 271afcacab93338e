"""AI fashion search orchestration.

interpret query -> compose shopping queries -> batch search -> normalize.

The orchestrator owns the only long-lived state: the session id and the last
AI response. It never raises out of ``search_fashion``; failures end up in
``state.error`` and an empty product list, and the caller falls back to the
static catalog.

Overlapping ``search_fashion`` calls follow last-call-wins: every call gets a
ticket, and only the newest ticket may write ``last_response``,
``is_loading`` and ``error``. Older calls still return their own products.
"""

from __future__ import annotations

import asyncio
import random
import time
import uuid

import structlog

from stylesearch.clients.conversation import ConversationClient
from stylesearch.clients.shopping import ShoppingSearchClient
from stylesearch.models.contracts import (
    AiSourcedProduct,
    SearchState,
    StyleSuggestion,
)
from stylesearch.services.normalizer import normalize_products
from stylesearch.services.query_composer import compose_shopping_queries

log = structlog.get_logger("stylesearch.orchestrator")


def make_fallback_session_id() -> str:
    """Time-based id with a random suffix; unique within the process."""
    return f"fallback_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}"


class SearchOrchestrator:
    def __init__(
        self,
        conversation_client: ConversationClient,
        shopping_client: ShoppingSearchClient,
        rng: random.Random | None = None,
    ) -> None:
        self._conversation = conversation_client
        self._shopping = shopping_client
        self._rng = rng
        self._state = SearchState()
        self._session_lock = asyncio.Lock()
        self._ticket = 0

    @property
    def state(self) -> SearchState:
        """Snapshot of the current state; mutating it has no effect."""
        return self._state.model_copy(deep=True)

    def _is_current(self, ticket: int, state: SearchState) -> bool:
        return ticket == self._ticket and state is self._state

    async def initialize_session(self) -> str:
        """Return the held session id, creating one on first use.

        Never raises. If the backend handshake fails, a local fallback id is
        stored instead and the failure message goes to ``state.error``.
        """
        if self._state.session_id:
            return self._state.session_id

        async with self._session_lock:
            state = self._state
            if state.session_id:
                return state.session_id

            try:
                conversation = await self._conversation.create_conversation()
            except Exception as exc:
                fallback_id = make_fallback_session_id()
                message = str(exc) or "Failed to initialize session"
                log.warning(
                    "session_fallback",
                    session_id=fallback_id,
                    error=message[:200],
                    error_type=type(exc).__name__,
                )
                state.session_id = fallback_id
                state.error = message
                return fallback_id

            state.session_id = conversation.session_id
            log.info("session_initialized", session_id=conversation.session_id)
            return conversation.session_id

    async def search_fashion(self, query: str) -> list[AiSourcedProduct]:
        """Run the whole pipeline for one query.

        Returns normalized products, or an empty list if any step failed.
        A blank query is a caller bug and raises ValueError.
        """
        if not query or not query.strip():
            raise ValueError("search_fashion requires a non-empty query")

        self._ticket += 1
        ticket = self._ticket
        state = self._state
        state.is_loading = True
        state.error = None

        log.info("search_fashion_start", query=query[:80], ticket=ticket)

        try:
            session_id = await self.initialize_session()

            response = await self._conversation.send_message(session_id, query)
            if self._is_current(ticket, state):
                state.last_response = response

            queries = compose_shopping_queries(response.style_suggestion, query)
            log.info(
                "shopping_queries_composed",
                ticket=ticket,
                count=len(queries),
                request_type=response.request_type,
            )

            raw_products = await self._shopping.batch_search_products(queries)
            products = normalize_products(raw_products, self._rng)
        except Exception as exc:
            message = str(exc) or "Search failed"
            log.warning(
                "search_fashion_failed",
                ticket=ticket,
                error=message[:200],
                error_type=type(exc).__name__,
            )
            if self._is_current(ticket, state):
                state.error = message
                state.is_loading = False
            return []

        if self._is_current(ticket, state):
            state.is_loading = False
        else:
            log.info("search_fashion_superseded", ticket=ticket, latest=self._ticket)

        log.info("search_fashion_complete", ticket=ticket, products=len(products))
        return products

    def get_follow_up_suggestions(self) -> list[str]:
        if self._state.last_response is None:
            return []
        return list(self._state.last_response.follow_up_suggestions)

    def get_style_suggestion(self) -> StyleSuggestion | None:
        if self._state.last_response is None:
            return None
        return self._state.last_response.style_suggestion

    def reset(self) -> None:
        """Back to the initial state; the next search opens a new session."""
        self._state = SearchState()
        self._ticket += 1
        log.info("search_state_reset")
