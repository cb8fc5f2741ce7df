"""Health router: reports the reachability of every configured backend."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from server.models.responses import HealthResponse
from shared.errors.exceptions import ProviderError

health_router = APIRouter()


@health_router.get("/health", tags=["Health"])
async def handle_health(request: Request) -> JSONResponse:
    """Run the health check of each booted client.

    Returns:
        JSONResponse: 200 with status "ok" if every backend answered, 503 with
            status "degraded" otherwise.
    """
    backends: dict[str, str] = {}
    for name, client in request.app.state.clients.items():
        try:
            await client.do_healthcheck()
            backends[name] = "ok"
        except ProviderError as exc:
            request.app.state.logging.warning("Health check of %s failed: %s", name, exc)
            backends[name] = "unavailable"

    healthy = all(state == "ok" for state in backends.values())
    response = HealthResponse(
        status="ok" if healthy else "degraded",
        version=request.app.version,
        backends=backends,
    )
    return JSONResponse(content=response.model_dump(), status_code=200 if healthy else 503)
