import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from stylesearch import __version__
from stylesearch.api.routes import catalog, health, search
from stylesearch.clients.conversation import build_conversation_client
from stylesearch.clients.shopping import ShoppingSearchClient
from stylesearch.config import settings
from stylesearch.logging import configure_logging
from stylesearch.models.contracts import ErrorResponse
from stylesearch.services.orchestrator import SearchOrchestrator

configure_logging()

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """One shared HTTP client and one orchestrator for the process lifetime."""
    async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as http_client:
        app.state.orchestrator = SearchOrchestrator(
            conversation_client=build_conversation_client(http_client),
            shopping_client=ShoppingSearchClient(http_client),
        )
        logger.info(
            "app_started",
            conversation_backend=settings.conversation_backend,
            agent_api_base_url=settings.agent_api_base_url,
        )
        yield
    logger.info("app_stopped")


app = FastAPI(
    title="AI Fashion Search API",
    version=__version__,
    docs_url="/docs",
    redoc_url=None,
    lifespan=lifespan,
)


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", request.headers.get("X-Request-ID", ""))


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """Bind a request ID into structlog context and echo it back to the client."""
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id)
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """422 in the same ErrorResponse shape the UI parses everywhere else."""
    messages = []
    for err in exc.errors():
        loc = " -> ".join(str(part) for part in err["loc"])
        messages.append(f"{loc}: {err['msg']}")
    response = JSONResponse(
        status_code=422,
        content=ErrorResponse(
            error="validation_error",
            message="; ".join(messages),
            retryable=False,
        ).model_dump(),
    )
    response.headers["X-Request-ID"] = _request_id(request)
    return response


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error_type=type(exc).__name__,
        exc_info=exc,
    )
    response = JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="internal_error",
            message="An unexpected error occurred",
            retryable=True,
        ).model_dump(),
    )
    response.headers["X-Request-ID"] = _request_id(request)
    return response


app.include_router(health.router)
app.include_router(search.router, prefix="/api/v1")
app.include_router(catalog.router, prefix="/api/v1")
