"""Shared fixtures: a fake-backed orchestrator and an in-process API client."""

from __future__ import annotations

import random
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from stylesearch.models.contracts import ConversationResponse
from stylesearch.services.orchestrator import SearchOrchestrator
from tests.factories import make_message_response, make_raw_product


@pytest.fixture
def conversation_client():
    """Conversation client double: session 'sess_1', one two-item suggestion."""
    client = MagicMock()
    client.create_conversation = AsyncMock(
        return_value=ConversationResponse(session_id="sess_1", message="ok", timestamp="t")
    )
    client.send_message = AsyncMock(
        return_value=make_message_response(
            [["cotton kurta women office"], ["white palazzo pants"]],
            follow_ups=["Show dupattas", "Under ₹1500"],
        )
    )
    return client


@pytest.fixture
def shopping_client():
    client = MagicMock()
    client.batch_search_products = AsyncMock(
        return_value=[
            make_raw_product("Cotton Kurta", product_id="p1", extracted_price=999.0),
            make_raw_product("Palazzo", product_id="p2", extracted_price=799.0),
        ]
    )
    return client


@pytest.fixture
def orchestrator(conversation_client, shopping_client):
    return SearchOrchestrator(conversation_client, shopping_client, rng=random.Random(7))


@pytest.fixture
async def client(orchestrator):
    from stylesearch.main import app

    app.state.orchestrator = orchestrator
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
