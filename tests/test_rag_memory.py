"""
Test suite for the vector store contract, exercised through the in-memory engine.

Covers insertion, owner isolation, threshold filtering, ranking and clearing.
"""

from datetime import datetime, timedelta, timezone

import pytest

from shared.clients.rag.RAGClientManager import RAGClientManager
from shared.clients.rag.memory.RAGClientMemory import RAGClientMemory
from shared.clients.rag.models.DocumentChunk import ChunkMetadata, NewChunk
from shared.exceptions.RAGErrors import StorageWriteFailedError
from shared.helper.HelperConfig import HelperConfig


def make_chunk(text: str, embedding: list[float], file_name: str = "a.txt", index: int = 0, timestamp: datetime | None = None) -> NewChunk:
    metadata = ChunkMetadata(file_name=file_name, chunk_index=index)
    if timestamp is not None:
        metadata = ChunkMetadata(file_name=file_name, chunk_index=index, timestamp=timestamp)
    return NewChunk(text=text, embedding=embedding, metadata=metadata)


@pytest.fixture
def store(helper_config: HelperConfig) -> RAGClientMemory:
    return RAGClientMemory(helper_config=helper_config)


class TestAddDocuments:

    @pytest.mark.asyncio
    async def test_should_return_one_unique_id_per_chunk(self, store: RAGClientMemory):
        ids = await store.do_add_documents(
            [make_chunk("one", [1.0, 0.0], index=0), make_chunk("two", [0.0, 1.0], index=1)],
            owner_id="alice",
        )

        assert len(ids) == 2
        assert len(set(ids)) == 2
        assert await store.do_count("alice") == 2

    @pytest.mark.asyncio
    async def test_empty_batch_should_store_nothing(self, store: RAGClientMemory):
        assert await store.do_add_documents([], owner_id="alice") == []
        assert await store.do_count("alice") == 0

    @pytest.mark.asyncio
    async def test_dimension_mismatch_within_batch_should_raise(self, store: RAGClientMemory):
        with pytest.raises(StorageWriteFailedError):
            await store.do_add_documents(
                [make_chunk("one", [1.0, 0.0]), make_chunk("two", [1.0, 0.0, 0.0])],
                owner_id="alice",
            )
        assert await store.do_count("alice") == 0

    @pytest.mark.asyncio
    async def test_dimension_should_be_fixed_by_first_insert(self, store: RAGClientMemory):
        await store.do_add_documents([make_chunk("one", [1.0, 0.0])], owner_id="alice")

        with pytest.raises(StorageWriteFailedError):
            await store.do_add_documents([make_chunk("two", [1.0, 0.0, 0.0])], owner_id="bob")

    @pytest.mark.asyncio
    async def test_configured_dimension_should_be_enforced(self, env: pytest.MonkeyPatch, helper_config: HelperConfig):
        env.setenv("RAG_VECTOR_DIMENSION", "3")
        store = RAGClientMemory(helper_config=helper_config)

        with pytest.raises(StorageWriteFailedError):
            await store.do_add_documents([make_chunk("one", [1.0, 0.0])], owner_id="alice")

    @pytest.mark.asyncio
    async def test_blank_owner_should_be_rejected(self, store: RAGClientMemory):
        with pytest.raises(ValueError):
            await store.do_add_documents([make_chunk("one", [1.0, 0.0])], owner_id="  ")


class TestSearch:

    @pytest.mark.asyncio
    async def test_should_rank_descending_and_respect_top_k(self, store: RAGClientMemory):
        await store.do_add_documents(
            [
                make_chunk("far", [0.6, 0.8], index=0),
                make_chunk("exact", [1.0, 0.0], index=1),
                make_chunk("close", [0.9, 0.1], index=2),
                make_chunk("medium", [0.8, 0.6], index=3),
            ],
            owner_id="alice",
        )

        results = await store.do_search([1.0, 0.0], top_k=3, owner_id="alice")

        assert [r.text for r in results] == ["exact", "close", "medium"]
        scores = [r.similarity for r in results]
        assert scores == sorted(scores, reverse=True)

    @pytest.mark.asyncio
    async def test_should_exclude_chunks_at_or_below_threshold(self, store: RAGClientMemory):
        await store.do_add_documents(
            [make_chunk("orthogonal", [0.0, 1.0]), make_chunk("opposite", [-1.0, 0.0])],
            owner_id="alice",
        )

        assert await store.do_search([1.0, 0.0], top_k=5, owner_id="alice") == []

    @pytest.mark.asyncio
    async def test_threshold_should_be_configurable(self, env: pytest.MonkeyPatch, helper_config: HelperConfig):
        env.setenv("RAG_SIMILARITY_THRESHOLD", "0.95")
        store = RAGClientMemory(helper_config=helper_config)
        await store.do_add_documents([make_chunk("close", [0.9, 0.1])], owner_id="alice")

        results = await store.do_search([1.0, 0.0], top_k=5, owner_id="alice")

        assert [r.text for r in results] == ["close"]
        assert results[0].similarity > 0.95

    @pytest.mark.asyncio
    async def test_should_only_return_chunks_of_the_owner(self, store: RAGClientMemory):
        await store.do_add_documents([make_chunk("alice doc", [1.0, 0.0])], owner_id="alice")
        await store.do_add_documents([make_chunk("bob doc", [1.0, 0.0])], owner_id="bob")

        results = await store.do_search([1.0, 0.0], top_k=5, owner_id="alice")

        assert [r.text for r in results] == ["alice doc"]
        assert all(r.owner_id == "alice" for r in results)

    @pytest.mark.asyncio
    async def test_unknown_owner_should_get_empty_result(self, store: RAGClientMemory):
        await store.do_add_documents([make_chunk("alice doc", [1.0, 0.0])], owner_id="alice")

        assert await store.do_search([1.0, 0.0], top_k=5, owner_id="carol") == []


class TestListingAndClearing:

    @pytest.mark.asyncio
    async def test_get_all_should_be_newest_first_and_owner_scoped(self, store: RAGClientMemory):
        now = datetime.now(timezone.utc)
        await store.do_add_documents([make_chunk("old", [1.0, 0.0], "old.txt", timestamp=now - timedelta(hours=1))], owner_id="alice")
        await store.do_add_documents([make_chunk("new", [1.0, 0.0], "new.txt", timestamp=now)], owner_id="alice")
        await store.do_add_documents([make_chunk("other", [1.0, 0.0])], owner_id="bob")

        chunks = await store.do_get_all_documents("alice")

        assert [c.text for c in chunks] == ["new", "old"]

    @pytest.mark.asyncio
    async def test_clear_should_remove_only_the_owners_chunks(self, store: RAGClientMemory):
        await store.do_add_documents([make_chunk("a1", [1.0, 0.0]), make_chunk("a2", [1.0, 0.0], index=1)], owner_id="alice")
        await store.do_add_documents([make_chunk("b1", [1.0, 0.0])], owner_id="bob")

        await store.do_clear("alice")

        assert await store.do_count("alice") == 0
        assert await store.do_count("bob") == 1

    @pytest.mark.asyncio
    async def test_clear_without_chunks_should_succeed(self, store: RAGClientMemory):
        await store.do_clear("nobody")

        assert await store.do_count("nobody") == 0


class TestRAGClientManager:

    def test_should_instantiate_configured_engine(self, helper_config: HelperConfig):
        client = RAGClientManager(helper_config=helper_config).get_client()

        assert isinstance(client, RAGClientMemory)
        assert client.get_engine_name() == "memory"

    def test_unknown_engine_should_raise(self, env: pytest.MonkeyPatch, helper_config: HelperConfig):
        env.setenv("RAG_ENGINE", "cassandra")

        with pytest.raises(ValueError):
            RAGClientManager(helper_config=helper_config)
