from pydantic import BaseModel, ConfigDict, Field

from shared.models.document import Document


class IngestRequest(BaseModel):
    articles: list[Document]


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(alias="sessionId")
    query: str
