"""Pydantic models returned by the ingestion, answering and document library services."""

from datetime import datetime

from pydantic import BaseModel


class IngestionResult(BaseModel):
    """Outcome of ingesting one file."""

    file_name: str
    file_type: str
    chunks_processed: int
    document_ids: list[str]


class SourceRef(BaseModel):
    """A chunk that grounded an answer."""

    file_name: str
    chunk_index: int


class AnswerResult(BaseModel):
    response_text: str
    sources: list[SourceRef]


class DocumentSummary(BaseModel):
    """All chunks of one file name, as shown in the document library."""

    file_name: str
    chunk_count: int
    uploaded_at: datetime


class DocumentListing(BaseModel):
    documents: list[DocumentSummary]
    total_chunks: int


class ClearResult(BaseModel):
    success: bool
    message: str
