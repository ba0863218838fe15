from fastapi import APIRouter, Depends, File, Request, UploadFile

from server.dependencies.auth import get_owner_id, verify_api_key
from server.models.responses import UploadResponse
from shared.exceptions.RAGErrors import InvalidRequestError

router = APIRouter(prefix="/upload", tags=["upload"])


@router.post("")
async def upload_document(
    request: Request,
    file: UploadFile | None = File(None),
    _: None = Depends(verify_api_key),
    owner_id: str = Depends(get_owner_id),
) -> UploadResponse:
    """Ingest an uploaded document (pdf, docx, txt) for the calling owner.

    Args:
        request (Request): FastAPI request (provides app.state.ingestion_service).
        file (UploadFile | None): The multipart file field.
        _ (None): Auth dependency result (unused).
        owner_id (str): The authenticated owner.

    Returns:
        UploadResponse: File name and type, number of stored chunks and their ids.

    Raises:
        InvalidRequestError: If no file was sent or it exceeds MAX_UPLOAD_MB.
    """
    if file is None or not file.filename:
        raise InvalidRequestError("No file provided")

    max_mb = request.app.state.helper_config.get_number_val("MAX_UPLOAD_MB", default=20)
    max_bytes = int(max_mb * 1024 * 1024)
    # never buffer more than one byte past the limit
    if file.size is not None and file.size > max_bytes:
        raise InvalidRequestError(
            f"File too large. Maximum size is {max_mb} MB.",
            details={"size_bytes": file.size},
        )
    data = await file.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise InvalidRequestError(f"File too large. Maximum size is {max_mb} MB.")

    ingestion_service = request.app.state.ingestion_service
    result = await ingestion_service.do_ingest(data, file.filename, owner_id)
    return UploadResponse(
        success=True,
        message="Document uploaded and processed successfully",
        file_name=result.file_name,
        file_type=result.file_type,
        chunks_processed=result.chunks_processed,
        document_ids=result.document_ids,
    )
