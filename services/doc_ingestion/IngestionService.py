"""Ingestion service.

Extracts the text of an uploaded file, splits it into overlapping chunks,
embeds every chunk and stores the vectors for the uploading owner.
"""

from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.clients.rag.RAGClientInterface import RAGClientInterface
from shared.clients.rag.models.DocumentChunk import ChunkMetadata, NewChunk, utc_now
from shared.exceptions.RAGErrors import EmptyDocumentError
from shared.extractors.ExtractorManager import ExtractorManager
from shared.helper.HelperConfig import HelperConfig
from shared.helper.TextChunker import split_into_chunks
from shared.models.results import IngestionResult


class IngestionService:
    """Orchestrates file -> text -> chunks -> vectors -> store."""

    def __init__(
        self,
        helper_config: HelperConfig,
        extractor_manager: ExtractorManager,
        embed_client: EmbedClientInterface,
        rag_client: RAGClientInterface,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._extractor_manager = extractor_manager
        self._embed_client = embed_client
        self._rag_client = rag_client
        self.chunk_size = int(helper_config.get_number_val("CHUNK_SIZE", default=1000))
        self.chunk_overlap = int(helper_config.get_number_val("CHUNK_OVERLAP", default=200))

    ##########################################
    ############### CORE #####################
    ##########################################

    async def do_ingest(self, data: bytes, file_name: str, owner_id: str) -> IngestionResult:
        """Ingest one file for an owner.

        Args:
            data (bytes): Raw file content.
            file_name (str): Name of the file; its extension selects the extractor.
            owner_id (str): The uploading owner.

        Returns:
            IngestionResult: File name, file type, number of stored chunks and their ids.

        Raises:
            UnsupportedFormatError: If the extension is not supported.
            ExtractionFailedError: If no text could be extracted.
            EmptyDocumentError: If the extracted text produced no chunks.
            EmbeddingFailedError: If embedding any chunk fails.
            StorageWriteFailedError: If storing any chunk fails. Earlier chunks may remain stored.
        """
        self.logging.info("Ingesting '%s' (%d bytes) for owner %s.", file_name, len(data), owner_id)

        document = await self._extractor_manager.do_extract(data, file_name)

        chunks = split_into_chunks(document.text, chunk_size=self.chunk_size, overlap=self.chunk_overlap)
        if not chunks:
            self.logging.warning("'%s' produced no chunks for owner %s.", file_name, owner_id)
            raise EmptyDocumentError(
                "Document is empty or could not be processed",
                details={
                    "file_name": file_name,
                    "reason": "No text could be extracted from the document. Please ensure the document contains readable text.",
                },
            )
        self.logging.debug("Split '%s' into %d chunks.", file_name, len(chunks))

        vectors = await self._embed_client.do_embed_batch(chunks)

        # one timestamp for every chunk of this upload
        uploaded_at = utc_now()
        new_chunks = [
            NewChunk(
                text=text,
                embedding=vector,
                metadata=ChunkMetadata(file_name=document.file_name, chunk_index=index, timestamp=uploaded_at),
            )
            for index, (text, vector) in enumerate(zip(chunks, vectors))
        ]

        document_ids = await self._rag_client.do_add_documents(new_chunks, owner_id=owner_id)
        self.logging.info(
            "Stored %d chunks of '%s' (%s) for owner %s.",
            len(document_ids), file_name, document.file_type, owner_id,
        )
        return IngestionResult(
            file_name=document.file_name,
            file_type=document.file_type,
            chunks_processed=len(document_ids),
            document_ids=document_ids,
        )
