from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from server.dependencies.auth import get_owner_id, verify_api_key
from server.models.responses import ClearResponse, DocumentItem, DocumentsResponse
from shared.exceptions.RAGErrors import RAGAssistantError

router = APIRouter(prefix="/documents", tags=["documents"])


@router.get("")
async def list_documents(
    request: Request,
    _: None = Depends(verify_api_key),
    owner_id: str = Depends(get_owner_id),
) -> DocumentsResponse:
    """List the calling owner's documents, one entry per file name, newest first."""
    listing = await request.app.state.document_service.do_list_documents(owner_id)
    return DocumentsResponse(
        documents=[
            DocumentItem(file_name=d.file_name, chunks=d.chunk_count, uploaded_at=d.uploaded_at)
            for d in listing.documents
        ],
        total_chunks=listing.total_chunks,
    )


@router.delete("", response_model=ClearResponse)
async def clear_documents(
    request: Request,
    _: None = Depends(verify_api_key),
    owner_id: str = Depends(get_owner_id),
):
    """Delete every document of the calling owner.

    A failed clear answers with the error payload plus "success": false.
    """
    try:
        result = await request.app.state.document_service.do_clear(owner_id)
    except RAGAssistantError as e:
        request.app.state.helper_config.get_logger().error(f"Clearing documents of {owner_id} failed: {e}")
        return JSONResponse(status_code=e.http_status, content={**e.to_payload(), "success": False})
    return ClearResponse(success=result.success, message=result.message)
