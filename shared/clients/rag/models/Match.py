from pydantic import BaseModel

from shared.clients.rag.models.VectorPoint import VectorPayload


class RetrievedMatch(BaseModel):
    """A single similarity-search hit.

    Attributes:
        vector_id: ID of the matched point.
        score:     Similarity score as reported by the backend (cosine for Qdrant).
        payload:   Metadata stored with the point.
    """

    vector_id: str
    score: float
    payload: VectorPayload


class UpsertFailure(BaseModel):
    """A vector the backend rejected, with the reason."""

    vector_id: str
    reason: str


class UpsertResult(BaseModel):
    """Outcome of an upsert call.

    Attributes:
        upserted_count: Number of vectors the backend accepted.
        failures:       Vectors that were rejected. Empty on full success.
    """

    upserted_count: int = 0
    failures: list[UpsertFailure] = []
