"""Chat router: answer questions against the indexed articles."""

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse

from server.models.requests import ChatRequest
from server.models.responses import ClearHistoryResponse

chat_router = APIRouter()


@chat_router.post("/chat", tags=["Chat"])
async def handle_chat(request: Request, body: ChatRequest) -> JSONResponse:
    """Answer a question for a session.

    Args:
        request (Request): The incoming FastAPI request (carries app state).
        body (ChatRequest): sessionId and query.

    Returns:
        JSONResponse: {answer, sources: [{title, relevance}]}
    """
    request.app.state.logging.info("Chat request — session=%s query=%r", body.session_id, body.query[:80])

    response = await request.app.state.answer_service.do_answer(body.session_id, body.query)
    return JSONResponse(content=response.model_dump())


@chat_router.get("/history/{session_id}", tags=["Chat"])
async def handle_get_history(session_id: str) -> JSONResponse:
    # conversations are not persisted, only logged
    raise HTTPException(status_code=501, detail="Chat history is not implemented.")


@chat_router.delete("/history/{session_id}", tags=["Chat"])
async def handle_clear_history(request: Request, session_id: str) -> JSONResponse:
    """Drop every cached answer of a session so the next query is answered fresh."""
    cleared = await request.app.state.answer_service.do_clear_session(session_id)
    response = ClearHistoryResponse(session_id=session_id, cleared=cleared)
    return JSONResponse(content=response.model_dump(by_alias=True))
