from datetime import datetime

from pydantic import BaseModel


class UploadResponse(BaseModel):
    success: bool
    message: str
    file_name: str
    file_type: str
    chunks_processed: int
    document_ids: list[str]


class SourceItem(BaseModel):
    file_name: str
    chunk_index: int


class ChatResponse(BaseModel):
    response: str
    sources: list[SourceItem]


class DocumentItem(BaseModel):
    file_name: str
    chunks: int
    uploaded_at: datetime


class DocumentsResponse(BaseModel):
    documents: list[DocumentItem]
    total_chunks: int


class ClearResponse(BaseModel):
    success: bool
    message: str


class HealthResponse(BaseModel):
    status: str
    version: str
