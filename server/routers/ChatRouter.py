from fastapi import APIRouter, Depends, Request

from server.dependencies.auth import get_owner_id, verify_api_key
from server.models.requests import ChatRequest
from server.models.responses import ChatResponse, SourceItem
from shared.exceptions.RAGErrors import InvalidRequestError

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("")
async def chat(
    request: Request,
    body: ChatRequest,
    _: None = Depends(verify_api_key),
    owner_id: str = Depends(get_owner_id),
) -> ChatResponse:
    """Answer a question from the calling owner's documents.

    Raises:
        InvalidRequestError: If the question is missing or blank.
    """
    if not body.question or not body.question.strip():
        raise InvalidRequestError("Question is required")

    answer_service = request.app.state.answer_service
    result = await answer_service.do_answer(body.question, owner_id)
    return ChatResponse(
        response=result.response_text,
        sources=[SourceItem(file_name=s.file_name, chunk_index=s.chunk_index) for s in result.sources],
    )
