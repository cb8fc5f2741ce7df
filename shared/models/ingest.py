"""Pydantic models for ingestion batch reports."""

from pydantic import BaseModel


class IngestFailure(BaseModel):
    """A document that could not be ingested, with the reason."""

    document_id: str
    reason: str


class IngestResult(BaseModel):
    """Structured partial-success report for one ingestion batch."""

    ingested_count: int = 0
    failed_count: int = 0
    failures: list[IngestFailure] = []
