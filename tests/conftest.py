"""
Pytest configuration for the news RAG test suite.

Configures:
- pytest-asyncio runs in auto mode (see pyproject.toml)
- a minimal environment so clients and services can be constructed
- in-memory fakes for every backend
"""
import logging

import pytest

from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import ColorLogger
from fakes import FakeCacheClient, FakeEmbedClient, FakeInteractionClient, FakeLLMClient, FakeRAGClient

DIMENSION = 8

BASE_ENV = {
    "EMBED_ENGINE": "ollama",
    "EMBED_MODEL": "nomic-embed-text",
    "EMBED_DIMENSION": str(DIMENSION),
    "EMBED_OLLAMA_BASE_URL": "http://embed.test",
    "LLM_ENGINE": "ollama",
    "LLM_CHAT_MODEL": "llama3",
    "LLM_OLLAMA_BASE_URL": "http://llm.test",
    "RAG_ENGINE": "qdrant",
    "RAG_QDRANT_BASE_URL": "http://qdrant.test",
    "RAG_QDRANT_COLLECTION": "news",
    "CHUNK_SIZE": "200",
    "CHUNK_OVERLAP": "50",
}

# variables that must not leak in from the developer's shell
CLEARED_ENV = (
    "CACHE_ENGINE",
    "INTERACTION_ENGINE",
    "RAG_NAMESPACE",
    "RAG_VECTOR_SIZE",
    "RAG_TOP_K",
    "EMBED_BATCH_SIZE",
    "RAG_UPSERT_BATCH_SIZE",
    "EMBED_OLLAMA_API_KEY",
    "RAG_QDRANT_API_KEY",
)


@pytest.fixture
def env(monkeypatch):
    """Set the base environment; tests may override single keys with monkeypatch.setenv."""
    for key in CLEARED_ENV:
        monkeypatch.delenv(key, raising=False)
    for key, value in BASE_ENV.items():
        monkeypatch.setenv(key, value)
    return monkeypatch


@pytest.fixture
def logger():
    return ColorLogger(logging.getLogger("tests"))


@pytest.fixture
def helper_config(env, logger):
    return HelperConfig(logger=logger)


@pytest.fixture
def embed_client():
    return FakeEmbedClient(dimension=DIMENSION)


@pytest.fixture
def rag_client():
    return FakeRAGClient(vector_size=DIMENSION)


@pytest.fixture
def llm_client():
    return FakeLLMClient()


@pytest.fixture
def cache_client():
    return FakeCacheClient()


@pytest.fixture
def interaction_client():
    return FakeInteractionClient()


@pytest.fixture
def make_document():
    """Factory for Document payloads with sensible defaults."""
    from shared.models.document import Document

    def _make(doc_id: str = "1", content: str = "AI is used in healthcare.", **overrides) -> Document:
        data = {
            "id": doc_id,
            "title": overrides.pop("title", f"Article {doc_id}"),
            "content": content,
            "source": overrides.pop("source", "Tech News"),
            "publishedAt": overrides.pop("published_at", "2025-01-15T10:00:00Z"),
        }
        data.update(overrides)
        return Document.model_validate(data)

    return _make
