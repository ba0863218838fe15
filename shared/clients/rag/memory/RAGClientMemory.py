import httpx

from shared.clients.rag.RAGClientInterface import RAGClientInterface
from shared.clients.rag.models.DocumentChunk import DocumentChunk
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class RAGClientMemory(RAGClientInterface):
    """In-process engine. Chunks live in per-owner lists and vanish with the process.

    Useful for local runs and tests; searches always rank in-process over every owned chunk.
    """

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._chunks: dict[str, list[DocumentChunk]] = {}
        self._dimension: int | None = self.vector_dimension or None

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Memory"

    def _get_expected_dimension(self) -> int | None:
        return self._dimension

    def _get_candidate_limit(self) -> int | None:
        return None

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return []

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        return {}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return "memory://"

    def _get_endpoint_healthcheck(self) -> str:
        return ""

    ##########################################
    ############ CORE REQUESTS ###############
    ##########################################

    async def boot(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        pass

    async def close(self) -> None:
        pass

    async def do_healthcheck(self) -> httpx.Response:
        return httpx.Response(200)

    ##########################################
    ########### STORAGE PRIMITIVES ###########
    ##########################################

    async def _insert_chunk(self, chunk: DocumentChunk) -> None:
        if self._dimension is None:
            self._dimension = len(chunk.embedding)
        self._chunks.setdefault(chunk.owner_id, []).append(chunk)

    async def _fetch_chunks(self, owner_id: str, limit: int | None = None) -> list[DocumentChunk]:
        # newest first; insertion order breaks timestamp ties
        owned = list(reversed(self._chunks.get(owner_id, [])))
        owned.sort(key=lambda c: c.metadata.timestamp, reverse=True)
        return owned if limit is None else owned[:limit]

    async def _delete_owner_chunks(self, owner_id: str) -> None:
        self._chunks.pop(owner_id, None)

    async def _count_owner_chunks(self, owner_id: str) -> int:
        return len(self._chunks.get(owner_id, []))
