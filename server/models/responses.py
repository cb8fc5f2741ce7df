from pydantic import BaseModel, ConfigDict, Field

from shared.models.ingest import IngestResult


class IngestFailureItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    document_id: str = Field(serialization_alias="documentId")
    reason: str


class IngestResponse(BaseModel):
    ingested: int
    failed: int
    failures: list[IngestFailureItem] = []

    @classmethod
    def from_result(cls, result: IngestResult) -> "IngestResponse":
        return cls(
            ingested=result.ingested_count,
            failed=result.failed_count,
            failures=[IngestFailureItem(document_id=f.document_id, reason=f.reason) for f in result.failures],
        )


class ClearHistoryResponse(BaseModel):
    session_id: str = Field(serialization_alias="sessionId")
    cleared: int


class ErrorResponse(BaseModel):
    error: str
    provider: str | None = None
    detail: str
    retryable: bool = False


class HealthResponse(BaseModel):
    status: str
    version: str
    backends: dict[str, str]
