"""DocumentChunk models: the atomic retrievable unit stored in a RAG backend."""

from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ChunkMetadata(BaseModel):
    """Metadata stored alongside each chunk.

    Attributes:
        file_name:   Name of the originating file. Not unique across chunks.
        chunk_index: Zero-based position of the chunk within its file's chunk sequence.
        timestamp:   Creation time, set once at insertion.
    """

    file_name: str
    chunk_index: int = Field(ge=0)
    timestamp: datetime = Field(default_factory=utc_now)


class NewChunk(BaseModel):
    """A chunk before insertion. The store assigns the id and binds the owner."""

    text: str
    embedding: list[float]
    metadata: ChunkMetadata

    @field_validator("text")
    @classmethod
    def _text_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("chunk text must not be empty")
        return value


class DocumentChunk(NewChunk):
    """A stored chunk.

    The owner_id is mandatory: every read and write is scoped to exactly one owner.
    similarity is only populated on search results.
    """

    id: str
    owner_id: str
    similarity: float | None = None

    def to_row(self) -> dict:
        """Flatten into the storage row layout used by the relational backends."""
        return {
            "id": self.id,
            "text": self.text,
            "embedding": self.embedding,
            "file_name": self.metadata.file_name,
            "chunk_index": self.metadata.chunk_index,
            "created_at": self.metadata.timestamp.isoformat(),
            "owner_id": self.owner_id,
        }

    @classmethod
    def from_row(cls, row: dict, similarity: float | None = None) -> "DocumentChunk":
        """Build a chunk from a storage row.

        Args:
            row (dict): Row with id, text, embedding, file_name, chunk_index, created_at, owner_id.
            similarity (float | None): Optional search score.
        """
        return cls(
            id=str(row["id"]),
            text=row["text"],
            embedding=row["embedding"],
            owner_id=str(row["owner_id"]),
            metadata=ChunkMetadata(
                file_name=row["file_name"],
                chunk_index=row["chunk_index"],
                timestamp=row["created_at"],
            ),
            similarity=similarity,
        )
