"""Ingest router: chunk, embed and index a batch of news articles."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from server.models.requests import IngestRequest
from server.models.responses import IngestResponse

ingest_router = APIRouter()


@ingest_router.post("/ingest", tags=["Ingest"])
async def handle_ingest(request: Request, body: IngestRequest) -> JSONResponse:
    """Ingest a batch of articles.

    Documents fail independently; the response reports how many made it into
    the index and why the others did not. Re-ingesting a document replaces
    its previous chunks.

    Args:
        request (Request): The incoming FastAPI request (carries app state).
        body (IngestRequest): The articles to ingest.

    Returns:
        JSONResponse: {ingested, failed, failures: [{documentId, reason}]}
    """
    request.app.state.logging.info("Ingest request received with %d article(s).", len(body.articles))

    result = await request.app.state.ingestion_service.do_ingest(body.articles)
    response = IngestResponse.from_result(result)
    return JSONResponse(content=response.model_dump(by_alias=True))
