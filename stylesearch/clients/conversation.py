"""AI conversation clients: session handshake + structured style suggestions.

Two backends share one contract:

- ``RemoteAgentConversationClient`` talks to the hosted fashion agent
  service (conversations and messages endpoints).
- ``ClaudeConversationClient`` asks Claude directly, forcing a
  ``suggest_style`` tool call so the answer arrives as structured input.

``send_message`` never raises. Any transport failure, malformed body or
schema mismatch is replaced by a locally built fallback response whose
shopping queries are derived from the user's own words.
"""

from __future__ import annotations

import abc
import collections
import uuid
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import anthropic
import httpx
import structlog
from pydantic import ValidationError

from stylesearch.config import settings
from stylesearch.errors import (
    SchemaViolation,
    SessionCreationError,
    StyleSearchError,
    TransportFailure,
)
from stylesearch.models.contracts import (
    ConversationResponse,
    MessageResponse,
    ModelInfo,
    PriceRange,
    SearchFilters,
    StyleItem,
    StyleSuggestion,
)

log = structlog.get_logger("stylesearch.conversation")

PROMPTS_DIR = Path(__file__).resolve().parent.parent / "prompts"

CONVERSATIONS_PATH = "/api/v1/conversations"
MESSAGES_PATH = "/api/v1/messages"

FALLBACK_PRICE_RANGE = (500.0, 5000.0)
FALLBACK_FOLLOW_UPS = (
    "Show me similar styles",
    "What accessories go with this?",
    "Suggest colours that suit me",
    "Find budget-friendly options",
)


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


def fallback_response(session_id: str, query: str) -> MessageResponse:
    """Generic single-item suggestion built from the query itself."""
    return MessageResponse(
        message=f'Here are some styles matching "{query}"',
        request_type="fallback",
        style_suggestion=StyleSuggestion(
            title=f"Styles for {query}",
            description="General recommendations while personalised styling is unavailable.",
            items=[
                StyleItem(
                    type="Fashion Item",
                    color="Various",
                    material="Mixed",
                    fit="Regular",
                    style="Contemporary",
                    shopping_queries=[
                        query,
                        f"{query} India fashion",
                        f"{query} online shopping",
                    ],
                )
            ],
        ),
        follow_up_suggestions=list(FALLBACK_FOLLOW_UPS),
        filters=SearchFilters(
            price=PriceRange(min=FALLBACK_PRICE_RANGE[0], max=FALLBACK_PRICE_RANGE[1])
        ),
        model_info=ModelInfo(provider="fallback", model_name="local"),
        timestamp=_now_iso(),
        session_id=session_id,
    )


class ConversationClient(abc.ABC):
    """Contract shared by every AI backend."""

    @abc.abstractmethod
    async def create_conversation(self) -> ConversationResponse:
        """Open a session. Raises SessionCreationError or SchemaViolation."""

    @abc.abstractmethod
    async def _request_suggestion(self, session_id: str, text: str) -> MessageResponse:
        """Backend call. Raises TransportFailure or SchemaViolation."""

    async def send_message(self, session_id: str, text: str) -> MessageResponse:
        """Ask for a style suggestion; degrades to ``fallback_response``."""
        try:
            response = await self._request_suggestion(session_id, text)
        except StyleSearchError as exc:
            log.warning(
                "conversation_fallback",
                session_id=session_id,
                error=str(exc)[:200],
                error_type=type(exc).__name__,
                retryable=exc.retryable,
            )
            return fallback_response(session_id, text)
        except Exception as exc:
            log.error(
                "conversation_fallback_unexpected",
                session_id=session_id,
                error_type=type(exc).__name__,
                exc_info=exc,
            )
            return fallback_response(session_id, text)

        if not response.session_id:
            response.session_id = session_id
        return response


# === Remote agent service ===


class RemoteAgentConversationClient(ConversationClient):
    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str | None = None,
        user_id: str | None = None,
    ) -> None:
        self._http = http_client
        self._base_url = (base_url or settings.agent_api_base_url).rstrip("/")
        self._user_id = user_id if user_id is not None else settings.user_id

    def _headers(self, **extra: str) -> dict[str, str]:
        headers = {"Accept": "application/json", **extra}
        if self._user_id:
            headers["User-ID"] = self._user_id
        return headers

    async def create_conversation(self) -> ConversationResponse:
        try:
            resp = await self._http.post(
                f"{self._base_url}{CONVERSATIONS_PATH}",
                json={},
                headers=self._headers(),
                timeout=settings.http_timeout_seconds,
            )
        except httpx.RequestError as exc:
            raise SessionCreationError(
                "Network error: unable to connect to AI service "
                f"({type(exc).__name__})"
            ) from exc

        if resp.status_code >= 400:
            raise SessionCreationError(
                f"Failed to create conversation: {resp.status_code} {resp.text[:200]}"
            )

        try:
            conversation = ConversationResponse.model_validate(resp.json())
        except ValueError as exc:
            raise SchemaViolation("Malformed conversation response") from exc

        log.info("conversation_created", session_id=conversation.session_id)
        return conversation

    async def _request_suggestion(self, session_id: str, text: str) -> MessageResponse:
        try:
            resp = await self._http.post(
                f"{self._base_url}{MESSAGES_PATH}",
                data={"content": text, "role": "user"},
                headers=self._headers(**{"Session-ID": session_id}),
                timeout=settings.http_timeout_seconds,
            )
        except httpx.RequestError as exc:
            raise TransportFailure(
                f"Network error: unable to send message to AI service ({type(exc).__name__})"
            ) from exc

        if resp.status_code >= 400:
            raise TransportFailure(
                f"Failed to send message: {resp.status_code} {resp.text[:200]}",
                retryable=resp.status_code == 429 or resp.status_code >= 500,
            )

        try:
            body = resp.json()
        except ValueError as exc:
            raise SchemaViolation("AI service returned a non-JSON body") from exc

        try:
            return MessageResponse.model_validate(body)
        except ValidationError as exc:
            raise SchemaViolation(
                f"AI response does not match the style suggestion schema: "
                f"{exc.error_count()} error(s)"
            ) from exc


# === Claude ===

STYLE_TOOL_NAME = "suggest_style"

_STYLE_ITEM_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "type": {"type": "string", "description": "Garment type, e.g. 'saree', 'kurta'"},
        "color": {"type": "string"},
        "material": {"type": "string"},
        "fit": {"type": "string"},
        "style": {"type": "string", "description": "e.g. 'ethnic', 'indo-western'"},
        "shopping_queries": {
            "type": "array",
            "items": {"type": "string"},
            "description": "2-3 English search queries for Indian shopping sites",
        },
    },
    "required": ["type", "color", "material", "fit", "style", "shopping_queries"],
}

STYLE_TOOL: dict[str, Any] = {
    "name": STYLE_TOOL_NAME,
    "description": "Return the outfit plan, follow-up suggestions and price range.",
    "input_schema": {
        "type": "object",
        "properties": {
            "message": {
                "type": "string",
                "description": "One friendly sentence summarising the suggestion",
            },
            "request_type": {
                "type": "string",
                "enum": ["style_suggestion", "occasion_outfit", "product_search", "general"],
            },
            "style_suggestion": {
                "type": "object",
                "properties": {
                    "title": {"type": "string"},
                    "description": {"type": "string"},
                    "items": {"type": "array", "items": _STYLE_ITEM_SCHEMA},
                },
                "required": ["title", "description", "items"],
            },
            "follow_up_suggestions": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Exactly four short follow-ups",
            },
            "price_range": {
                "type": "object",
                "properties": {
                    "min": {"type": "number", "description": "Rupees"},
                    "max": {"type": "number", "description": "Rupees"},
                },
                "required": ["min", "max"],
            },
        },
        "required": ["message", "style_suggestion", "follow_up_suggestions", "price_range"],
    },
}

MAX_HISTORY_MESSAGES = 8
MAX_HELD_SESSIONS = 256

_system_prompt_cache: str | None = None


def load_system_prompt() -> str:
    """Load the stylist system prompt (cached after first read)."""
    global _system_prompt_cache  # noqa: PLW0603
    if _system_prompt_cache is None:
        _system_prompt_cache = (PROMPTS_DIR / "style_advisor.txt").read_text(encoding="utf-8")
    return _system_prompt_cache


def extract_style_call(response: anthropic.types.Message) -> dict[str, Any] | None:
    """Return the suggest_style tool input, or None if the model skipped it."""
    for block in response.content:
        if block.type == "tool_use" and block.name == STYLE_TOOL_NAME:
            return block.input  # type: ignore[return-value]
    return None


def build_message_response(
    tool_input: dict[str, Any],
    session_id: str,
    model_name: str,
) -> MessageResponse:
    """Validate tool input into a MessageResponse. Raises SchemaViolation."""
    try:
        return MessageResponse.model_validate(
            {
                "message": tool_input.get("message"),
                "request_type": tool_input.get("request_type") or "style_suggestion",
                "style_suggestion": tool_input.get("style_suggestion"),
                "follow_up_suggestions": tool_input.get("follow_up_suggestions") or [],
                "filters": {"price": tool_input.get("price_range")},
                "model_info": {"provider": "anthropic", "model_name": model_name},
                "timestamp": _now_iso(),
                "session_id": session_id,
            }
        )
    except ValidationError as exc:
        raise SchemaViolation(
            f"suggest_style input failed validation: {exc.error_count()} error(s)"
        ) from exc


class ClaudeConversationClient(ConversationClient):
    """Sessions are local; each session keeps a short in-memory transcript.

    At most ``max_sessions`` transcripts are held. The least recently used
    one is dropped when a new session would exceed that.
    """

    def __init__(
        self,
        client: anthropic.AsyncAnthropic,
        model: str | None = None,
        max_tokens: int | None = None,
        max_sessions: int = MAX_HELD_SESSIONS,
    ) -> None:
        self._client = client
        self._model = model or settings.claude_model
        self._max_tokens = max_tokens or settings.claude_max_tokens
        self._max_sessions = max_sessions
        self._histories: collections.OrderedDict[str, list[dict[str, Any]]] = (
            collections.OrderedDict()
        )

    def _session_history(self, session_id: str) -> list[dict[str, Any]]:
        history = self._histories.get(session_id)
        if history is not None:
            self._histories.move_to_end(session_id)
            return history

        history = self._histories[session_id] = []
        while len(self._histories) > self._max_sessions:
            evicted, _ = self._histories.popitem(last=False)
            log.debug("conversation_history_evicted", session_id=evicted)
        return history

    async def create_conversation(self) -> ConversationResponse:
        session_id = f"conv_{uuid.uuid4().hex}"
        self._session_history(session_id)
        return ConversationResponse(
            session_id=session_id,
            message="Conversation started",
            timestamp=_now_iso(),
        )

    def history(self, session_id: str) -> list[dict[str, Any]]:
        return list(self._histories.get(session_id, []))

    @property
    def session_count(self) -> int:
        return len(self._histories)

    async def _request_suggestion(self, session_id: str, text: str) -> MessageResponse:
        history = self._session_history(session_id)
        messages = [*history, {"role": "user", "content": text}]

        try:
            response = await self._client.messages.create(  # type: ignore[call-overload]
                model=self._model,
                max_tokens=self._max_tokens,
                system=load_system_prompt(),
                tools=[STYLE_TOOL],
                tool_choice={"type": "tool", "name": STYLE_TOOL_NAME},
                messages=messages,
            )
        except anthropic.APIStatusError as e:
            raise TransportFailure(
                f"Claude API error ({e.status_code}): {e}",
                retryable=e.status_code == 429 or e.status_code >= 500,
            ) from e
        except anthropic.APIError as e:
            raise TransportFailure(f"Claude unreachable: {type(e).__name__}") from e

        log.info(
            "style_suggestion_tokens",
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            model=self._model,
        )

        tool_input = extract_style_call(response)
        if tool_input is None:
            raise SchemaViolation("Claude did not call suggest_style")

        result = build_message_response(tool_input, session_id, self._model)

        history.append({"role": "user", "content": text})
        # The Messages API rejects empty assistant turns.
        title = result.style_suggestion.title or "an outfit"
        reply = result.message.strip() or f"Suggested: {title}"
        history.append({"role": "assistant", "content": reply})
        del history[:-MAX_HISTORY_MESSAGES]
        return result


def build_conversation_client(http_client: httpx.AsyncClient) -> ConversationClient:
    """Pick the backend named by CONVERSATION_BACKEND."""
    if settings.conversation_backend == "claude":
        if not settings.anthropic_api_key:
            raise ValueError("CONVERSATION_BACKEND=claude requires ANTHROPIC_API_KEY")
        return ClaudeConversationClient(anthropic.AsyncAnthropic(api_key=settings.anthropic_api_key))
    return RemoteAgentConversationClient(http_client)
