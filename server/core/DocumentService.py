from shared.clients.rag.RAGClientInterface import RAGClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.results import ClearResult, DocumentListing, DocumentSummary


class DocumentService:
    """Document library of an owner: per-file listing and clearing."""

    def __init__(self, helper_config: HelperConfig, rag_client: RAGClientInterface) -> None:
        self.logging = helper_config.get_logger()
        self._rag_client = rag_client

    async def do_list_documents(self, owner_id: str) -> DocumentListing:
        """Group an owner's chunks by file name.

        Files appear in the order their newest chunk appears in the newest-first
        listing; uploaded_at is the timestamp of that chunk.
        """
        chunks = await self._rag_client.do_get_all_documents(owner_id)

        summaries: dict[str, DocumentSummary] = {}
        for chunk in chunks:
            name = chunk.metadata.file_name
            if name in summaries:
                summaries[name].chunk_count += 1
            else:
                summaries[name] = DocumentSummary(file_name=name, chunk_count=1, uploaded_at=chunk.metadata.timestamp)

        return DocumentListing(documents=list(summaries.values()), total_chunks=len(chunks))

    async def do_clear(self, owner_id: str) -> ClearResult:
        await self._rag_client.do_clear(owner_id)
        return ClearResult(success=True, message="All documents cleared successfully")
