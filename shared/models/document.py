"""Pydantic models for ingested documents.

Hierarchy:
  Document: caller-owned article, immutable once ingested.
  Chunk:    transient, bounded text segment derived from a Document.
"""

from pydantic import BaseModel, ConfigDict, Field


class Document(BaseModel):
    """A news article handed to the ingestion pipeline.

    Accepts the camelCase wire name "publishedAt" as well as the field name.
    The pipeline never mutates a Document, it only derives Chunks from it.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    title: str
    content: str
    source: str
    published_at: str = Field(alias="publishedAt")

    # optional partition in the vector store (e.g. a news category)
    namespace: str | None = None


class Chunk(BaseModel):
    """A bounded segment of a Document's text, ready for embedding.

    Attributes:
        document_id:     ID of the parent Document.
        sequence_index:  Zero-based, dense position of this chunk within the document.
        text:            Verbatim segment of the document content.
        source_metadata: Title, source and publication date carried over for citation.
    """

    document_id: str
    sequence_index: int
    text: str
    source_metadata: dict[str, str | None] = {}
