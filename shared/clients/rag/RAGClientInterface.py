from abc import abstractmethod
import uuid

from shared.clients.ClientInterface import ClientInterface
from shared.clients.rag.models.DocumentChunk import DocumentChunk, NewChunk
from shared.exceptions.RAGErrors import StorageReadFailedError, StorageWriteFailedError
from shared.helper.HelperConfig import HelperConfig
from shared.helper.HelperVector import cosine_similarity, rank_by_similarity

DEFAULT_TOP_K = 5
DEFAULT_SIMILARITY_THRESHOLD = 0.5
DEFAULT_CANDIDATE_LIMIT = 500


class RAGClientInterface(ClientInterface):
    """Vector store contract shared by every RAG engine.

    Public do_* methods enforce owner scoping, dimension checks, the similarity
    threshold and error translation. Engines only implement the raw storage
    primitives (_insert_chunk, _fetch_chunks, _delete_owner_chunks, _count_owner_chunks)
    and, optionally, a server-side similarity search.
    """

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        prefix = self.get_client_type().upper()
        self.similarity_threshold = helper_config.get_float_val(f"{prefix}_SIMILARITY_THRESHOLD", default=DEFAULT_SIMILARITY_THRESHOLD)
        self.candidate_limit = int(helper_config.get_number_val(f"{prefix}_CANDIDATE_LIMIT", default=DEFAULT_CANDIDATE_LIMIT))
        # 0 = not enforced by configuration
        self.vector_dimension = int(helper_config.get_number_val(f"{prefix}_VECTOR_DIMENSION", default=0))

    ##########################################
    ############### CHECKER ##################
    ##########################################

    def _require_owner(self, owner_id: str) -> str:
        """Every operation is scoped to exactly one owner; a blank owner is a programming error."""
        if owner_id is None or not str(owner_id).strip():
            raise ValueError("owner_id is mandatory for every vector store operation.")
        return str(owner_id)

    def _get_expected_dimension(self) -> int | None:
        """Returns the dimension every stored embedding must have, or None if not yet known."""
        return self.vector_dimension or None

    def _check_dimensions(self, chunks: list[NewChunk]) -> None:
        """
        Raises:
            StorageWriteFailedError: If the chunks disagree with each other or with the store dimension.
        """
        expected = self._get_expected_dimension() or len(chunks[0].embedding)
        for position, chunk in enumerate(chunks):
            if len(chunk.embedding) != expected:
                raise StorageWriteFailedError(
                    "Embedding dimension mismatch: expected %d, got %d at position %d."
                    % (expected, len(chunk.embedding), position),
                    details={"expected": expected, "actual": len(chunk.embedding), "position": position},
                )

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        """
        Returns the type of the client. E.g. "rag"
        """
        return "rag"

    def supports_server_side_search(self) -> bool:
        """Returns True if the engine can rank by similarity on the server."""
        return False

    def _get_candidate_limit(self) -> int | None:
        """Returns the size of the candidate window for in-process ranking (None = all owned chunks)."""
        return self.candidate_limit

    ##########################################
    ########### STORAGE PRIMITIVES ###########
    ##########################################

    @abstractmethod
    async def _insert_chunk(self, chunk: DocumentChunk) -> None:
        """Persist a single chunk.

        Raises:
            Exception: Any backend failure; translated by do_add_documents().
        """
        pass

    @abstractmethod
    async def _fetch_chunks(self, owner_id: str, limit: int | None = None) -> list[DocumentChunk]:
        """Fetch chunks of an owner, newest first.

        Args:
            owner_id (str): The owner to scope to.
            limit (int | None): Maximum number of chunks, None for all.
        """
        pass

    @abstractmethod
    async def _delete_owner_chunks(self, owner_id: str) -> None:
        """Delete every chunk of an owner. Must not fail when there are none."""
        pass

    @abstractmethod
    async def _count_owner_chunks(self, owner_id: str) -> int:
        """Count the chunks of an owner."""
        pass

    async def _search_server_side(self, query_embedding: list[float], top_k: int, owner_id: str) -> list[DocumentChunk]:
        """Rank the owner's chunks on the server. Only called when supports_server_side_search() is True.

        Returns:
            list[DocumentChunk]: Ranked chunks with similarity set where the server reports it.
        """
        raise NotImplementedError(f"{self.get_engine_name()} has no server-side similarity search.")

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_add_documents(self, chunks: list[NewChunk], owner_id: str) -> list[str]:
        """Insert chunks for an owner and return their generated ids.

        Chunks are inserted one at a time in order. The first failing insert
        raises immediately; chunks inserted before it in the same call stay
        stored, so callers must treat partial success as possible.

        Args:
            chunks (list[NewChunk]): Chunks to insert.
            owner_id (str): Owner the chunks belong to.

        Returns:
            list[str]: Generated ids in input order.

        Raises:
            StorageWriteFailedError: On dimension mismatch or a failing insert.
        """
        owner_id = self._require_owner(owner_id)
        if not chunks:
            return []
        self._check_dimensions(chunks)

        ids: list[str] = []
        for position, chunk in enumerate(chunks):
            stored = DocumentChunk(
                id=str(uuid.uuid4()),
                owner_id=owner_id,
                text=chunk.text,
                embedding=chunk.embedding,
                metadata=chunk.metadata,
            )
            try:
                await self._insert_chunk(stored)
            except Exception as e:
                self.logging.error(
                    "Inserting chunk %d/%d of '%s' into %s failed: %s",
                    position + 1, len(chunks), chunk.metadata.file_name, self.get_engine_name(), e,
                )
                raise StorageWriteFailedError(
                    f"Failed to insert document chunk: {e}",
                    details={"position": position, "inserted_ids": list(ids)},
                ) from e
            ids.append(stored.id)

        self.logging.debug("Inserted %d chunks for owner %s into %s.", len(ids), owner_id, self.get_engine_name())
        return ids

    async def do_search(self, query_embedding: list[float], top_k: int = DEFAULT_TOP_K, owner_id: str | None = None) -> list[DocumentChunk]:
        """Return the owner's chunks most similar to the query embedding.

        Prefers the engine's server-side similarity search and falls back to
        ranking a bounded candidate window in-process when that path is
        unavailable or fails. Only chunks with similarity above the configured
        threshold are returned, so the result may be empty.

        Args:
            query_embedding (list[float]): The query vector.
            top_k (int): Maximum number of results.
            owner_id (str): Owner to scope the search to.

        Returns:
            list[DocumentChunk]: Chunks in descending similarity order, len <= top_k.

        Raises:
            StorageReadFailedError: If the fallback candidate fetch fails.
        """
        owner_id = self._require_owner(owner_id)
        if top_k <= 0:
            return []

        if self.supports_server_side_search():
            try:
                hits = await self._search_server_side(query_embedding, top_k, owner_id)
                return self._filter_server_hits(hits, query_embedding, top_k, owner_id)
            except Exception as e:
                self.logging.warning(
                    "Server-side similarity search on %s unavailable (%s). Falling back to in-process ranking.",
                    self.get_engine_name(), e,
                )

        return await self._search_in_process(query_embedding, top_k, owner_id)

    async def do_get_all_documents(self, owner_id: str) -> list[DocumentChunk]:
        """Return all chunks of an owner, newest first.

        Raises:
            StorageReadFailedError: If the backend read fails.
        """
        owner_id = self._require_owner(owner_id)
        try:
            return await self._fetch_chunks(owner_id, limit=None)
        except Exception as e:
            self.logging.error("Fetching documents for owner %s from %s failed: %s", owner_id, self.get_engine_name(), e)
            raise StorageReadFailedError(f"Failed to fetch documents: {e}") from e

    async def do_clear(self, owner_id: str) -> None:
        """Delete all chunks of an owner. A no-op for an owner without chunks.

        Raises:
            StorageWriteFailedError: If the backend delete fails.
        """
        owner_id = self._require_owner(owner_id)
        try:
            await self._delete_owner_chunks(owner_id)
        except Exception as e:
            self.logging.error("Clearing documents for owner %s on %s failed: %s", owner_id, self.get_engine_name(), e)
            raise StorageWriteFailedError(f"Failed to clear documents: {e}") from e
        self.logging.info("Cleared all documents for owner %s on %s.", owner_id, self.get_engine_name())

    async def do_count(self, owner_id: str) -> int:
        """Count the chunks of an owner.

        Raises:
            StorageReadFailedError: If the backend count fails.
        """
        owner_id = self._require_owner(owner_id)
        try:
            return await self._count_owner_chunks(owner_id)
        except Exception as e:
            self.logging.error("Counting documents for owner %s on %s failed: %s", owner_id, self.get_engine_name(), e)
            raise StorageReadFailedError(f"Failed to count documents: {e}") from e

    ##########################################
    ############### HELPERS ##################
    ##########################################

    async def _search_in_process(self, query_embedding: list[float], top_k: int, owner_id: str) -> list[DocumentChunk]:
        """Fetch the candidate window and rank it by cosine similarity."""
        limit = self._get_candidate_limit()
        try:
            candidates = await self._fetch_chunks(owner_id, limit=limit)
        except Exception as e:
            self.logging.error("Fetching search candidates for owner %s from %s failed: %s", owner_id, self.get_engine_name(), e)
            raise StorageReadFailedError(f"Failed to fetch documents for search: {e}") from e

        ranked = rank_by_similarity(
            query_embedding,
            [c.embedding for c in candidates],
            top_k=top_k,
            threshold=self.similarity_threshold,
        )
        self.logging.debug(
            "In-process search over %d candidates for owner %s returned %d hits.",
            len(candidates), owner_id, len(ranked),
        )
        return [candidates[i].model_copy(update={"similarity": score}) for i, score in ranked]

    def _filter_server_hits(self, hits: list[DocumentChunk], query_embedding: list[float], top_k: int, owner_id: str) -> list[DocumentChunk]:
        """Re-apply owner scoping, threshold and ordering to server results."""
        kept: list[DocumentChunk] = []
        for hit in hits:
            if hit.owner_id != owner_id:
                continue
            score = hit.similarity if hit.similarity is not None else cosine_similarity(query_embedding, hit.embedding)
            if score > self.similarity_threshold:
                kept.append(hit.model_copy(update={"similarity": score}))
        kept.sort(key=lambda c: -c.similarity)
        return kept[:top_k]
