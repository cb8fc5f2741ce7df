"""VectorPoint models: what is stored for each chunk in a RAG backend."""

import uuid

from pydantic import BaseModel

# fixed namespace so the same (document, chunk) always yields the same point id
_POINT_ID_NAMESPACE = uuid.NAMESPACE_OID


def make_vector_id(document_id: str, sequence_index: int) -> str:
    """Build a deterministic UUID5 point ID for a chunk vector.

    Using UUID5 ensures the same document chunk always maps to the same
    point ID so that re-ingesting overwrites rather than duplicates.

    Args:
        document_id (str): ID of the source document.
        sequence_index (int): Zero-based chunk index within the document.

    Returns:
        str: UUID string usable as a Qdrant point ID.
    """
    return str(uuid.uuid5(_POINT_ID_NAMESPACE, f"{document_id}:{sequence_index}"))


class VectorPayload(BaseModel):
    """Metadata stored alongside each vector chunk in a RAG backend.

    Attributes:
        document_id:    ID of the source document.
        sequence_index: Zero-based position of this chunk within the document.
        chunk_text:     Raw text content of this chunk.
        title:          Human-readable document title.
        source:         Publisher or feed the document came from.
        published_at:   ISO-8601 publication timestamp of the document.
        namespace:      Optional partition used to scope queries.
    """

    document_id: str
    sequence_index: int
    chunk_text: str
    title: str
    source: str
    published_at: str
    namespace: str | None = None


class IndexedVector(BaseModel):
    """A chunk embedding ready to be upserted, keyed by a stable vector_id."""

    vector_id: str
    embedding: list[float]
    payload: VectorPayload
