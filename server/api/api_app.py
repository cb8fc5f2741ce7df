"""FastAPI application entry point for the news RAG API."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import os
from server.api.error_handlers import register_error_handlers
from server.api.routers.ChatRouter import chat_router
from server.api.routers.HealthRouter import health_router
from server.api.routers.IngestRouter import ingest_router
from services.chat.AnswerService import AnswerService
from services.chat.ResponseCache import ResponseCache
from services.ingestion.IngestionService import IngestionService
from shared.clients.ClientBundle import ClientBundle
from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import setup_logging

app_version = os.getenv("APP_VERSION", "unknown")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application startup and shutdown."""
    app.state.logging = setup_logging()
    app.state.config = HelperConfig(logger=app.state.logging)

    # Initialise, boot and health-check clients, ensure the collection
    clients = ClientBundle.from_config(helper_config=app.state.config)
    try:
        await clients.boot(app.state.logging)
    except Exception:
        await clients.close()
        raise
    app.state.clients = clients.as_dict()

    # Wire up services
    app.state.ingestion_service = IngestionService(
        helper_config=app.state.config,
        rag_client=clients.rag_client,
        embed_client=clients.embed_client,
    )
    app.state.answer_service = AnswerService(
        helper_config=app.state.config,
        rag_client=clients.rag_client,
        embed_client=clients.embed_client,
        llm_client=clients.llm_client,
        response_cache=ResponseCache(helper_config=app.state.config, cache_client=clients.cache_client),
        interaction_client=clients.interaction_client,
    )

    app.state.logging.info("News RAG API ready.", color="green")
    yield

    # Shutdown
    await app.state.answer_service.do_drain()
    await clients.close()
    app.state.logging.info("News RAG API shut down.")


def create_app(with_lifespan: bool = True) -> FastAPI:
    """Build the FastAPI app.

    Args:
        with_lifespan (bool): Boot real backends on startup. Tests pass False
            and put their own services on app.state.
    """
    app = FastAPI(
        title="News RAG Bridge",
        description="Ingests news articles into a vector index and answers questions about them.",
        version=app_version,
        lifespan=lifespan if with_lifespan else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(health_router)
    app.include_router(ingest_router)
    app.include_router(chat_router)
    return app


app = create_app()


# Server Start
if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", "8000"))
    setup_logging().info(
        "Starting News RAG API Server v%s from root dir: %s on port %d...",
        app_version, os.getenv("ROOT_DIR", os.getcwd()), port,
    )
    uvicorn.run(app, host="0.0.0.0", port=port)
