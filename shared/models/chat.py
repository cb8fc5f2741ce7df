"""Pydantic models for the answering pipeline."""

from datetime import datetime, timezone

from pydantic import BaseModel, Field


class SourceItem(BaseModel):
    """A retrieved chunk cited in an answer.

    relevance is the cosine similarity reported by the vector store, rounded
    to three decimals. Its range is [-1, 1]; text embeddings land in [0, 1].
    """

    title: str
    relevance: float


class ChatResponse(BaseModel):
    """Answer returned to the caller, also the value stored in the response cache."""

    answer: str
    sources: list[SourceItem] = []


class Interaction(BaseModel):
    """Write-once record of an answered query, appended to the interaction log."""

    session_id: str
    query: str
    answer: str
    sources: list[str] = []
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
