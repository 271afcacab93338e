from fastapi import Request

from stylesearch.services.orchestrator import SearchOrchestrator


def get_orchestrator(request: Request) -> SearchOrchestrator:
    """The process-wide orchestrator built in the app lifespan."""
    return request.app.state.orchestrator
