"""
Test suite for the HTTP API.

The lifespan is not run: services on app.state are replaced by AsyncMocks so
every test checks only routing, auth and error mapping.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from server.api_server import app
from server.routers.UploadRouter import upload_document
from shared.exceptions.RAGErrors import (
    CompletionFailedError,
    EmptyDocumentError,
    InvalidRequestError,
    StorageWriteFailedError,
)
from shared.helper.HelperConfig import HelperConfig
from shared.models.results import (
    AnswerResult,
    ClearResult,
    DocumentListing,
    DocumentSummary,
    IngestionResult,
    SourceRef,
)

HEADERS = {"X-Api-Key": "secret-key", "X-Owner-Id": "alice"}


@pytest.fixture
def services(helper_config: HelperConfig) -> dict[str, AsyncMock]:
    ingestion_service = AsyncMock()
    ingestion_service.do_ingest.return_value = IngestionResult(
        file_name="notes.txt", file_type="txt", chunks_processed=2, document_ids=["id-1", "id-2"]
    )
    answer_service = AsyncMock()
    answer_service.do_answer.return_value = AnswerResult(
        response_text="Revenue was 5M.",
        sources=[SourceRef(file_name="finance.pdf", chunk_index=3)],
    )
    document_service = AsyncMock()
    document_service.do_list_documents.return_value = DocumentListing(
        documents=[
            DocumentSummary(file_name="finance.pdf", chunk_count=4, uploaded_at=datetime(2024, 5, 1, tzinfo=timezone.utc)),
        ],
        total_chunks=4,
    )
    document_service.do_clear.return_value = ClearResult(success=True, message="All documents cleared successfully")

    app.state.helper_config = helper_config
    app.state.ingestion_service = ingestion_service
    app.state.answer_service = answer_service
    app.state.document_service = document_service
    return {"ingestion": ingestion_service, "answer": answer_service, "documents": document_service}


@pytest.fixture
def client(services: dict[str, AsyncMock]) -> TestClient:
    return TestClient(app)


class TestHealth:

    def test_health_should_not_require_auth(self, client: TestClient):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"


class TestAuth:

    @pytest.mark.parametrize(
        "headers, error",
        [
            ({"X-Owner-Id": "alice"}, "Invalid or missing API key"),
            ({"X-Api-Key": "wrong", "X-Owner-Id": "alice"}, "Invalid or missing API key"),
            ({"X-Api-Key": "secret-key"}, "Unauthorized"),
            ({"X-Api-Key": "secret-key", "X-Owner-Id": "   "}, "Unauthorized"),
        ],
    )
    def test_rejected_requests_should_not_reach_services(self, client: TestClient, services: dict[str, AsyncMock], headers: dict, error: str):
        response = client.post("/chat", json={"question": "Hi?"}, headers=headers)

        assert response.status_code == 401
        assert response.json() == {"error": error}
        services["answer"].do_answer.assert_not_awaited()

    def test_upload_should_check_auth_before_ingesting(self, client: TestClient, services: dict[str, AsyncMock]):
        response = client.post("/upload", files={"file": ("notes.txt", b"hello", "text/plain")})

        assert response.status_code == 401
        services["ingestion"].do_ingest.assert_not_awaited()


class TestUpload:

    def test_upload_should_return_ingestion_summary(self, client: TestClient, services: dict[str, AsyncMock]):
        response = client.post("/upload", files={"file": ("notes.txt", b"hello", "text/plain")}, headers=HEADERS)

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Document uploaded and processed successfully",
            "file_name": "notes.txt",
            "file_type": "txt",
            "chunks_processed": 2,
            "document_ids": ["id-1", "id-2"],
        }
        services["ingestion"].do_ingest.assert_awaited_once_with(b"hello", "notes.txt", "alice")

    def test_missing_file_should_be_rejected(self, client: TestClient):
        response = client.post("/upload", headers=HEADERS)

        assert response.status_code == 400
        assert response.json() == {"error": "No file provided"}

    def test_oversized_file_should_be_rejected(self, env: pytest.MonkeyPatch, client: TestClient, services: dict[str, AsyncMock]):
        env.setenv("MAX_UPLOAD_MB", "0.0001")

        response = client.post("/upload", files={"file": ("big.txt", b"x" * 500, "text/plain")}, headers=HEADERS)

        assert response.status_code == 400
        assert response.json()["error"].startswith("File too large")
        services["ingestion"].do_ingest.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_upload_without_known_size_should_read_at_most_one_byte_past_the_limit(self, env: pytest.MonkeyPatch, helper_config: HelperConfig):
        # Arrange
        env.setenv("MAX_UPLOAD_MB", "0.0001")
        request = MagicMock()
        request.app.state.helper_config = helper_config
        request.app.state.ingestion_service = AsyncMock()
        upload = MagicMock(filename="big.txt", size=None)
        upload.read = AsyncMock(return_value=b"x" * 105)

        # Act
        with pytest.raises(InvalidRequestError) as exc_info:
            await upload_document(request, upload, None, "alice")

        # Assert
        assert exc_info.value.message.startswith("File too large")
        upload.read.assert_awaited_once_with(105)
        request.app.state.ingestion_service.do_ingest.assert_not_awaited()

    def test_empty_document_should_map_to_bad_request(self, client: TestClient, services: dict[str, AsyncMock]):
        services["ingestion"].do_ingest.side_effect = EmptyDocumentError(
            "Document is empty or could not be processed",
            details={"file_name": "blank.txt"},
        )

        response = client.post("/upload", files={"file": ("blank.txt", b"   ", "text/plain")}, headers=HEADERS)

        assert response.status_code == 400
        assert response.json() == {
            "error": "Document is empty or could not be processed",
            "details": {"file_name": "blank.txt"},
        }


class TestChat:

    def test_chat_should_return_answer_and_sources(self, client: TestClient, services: dict[str, AsyncMock]):
        response = client.post("/chat", json={"question": "What is our revenue?"}, headers=HEADERS)

        assert response.status_code == 200
        assert response.json() == {
            "response": "Revenue was 5M.",
            "sources": [{"file_name": "finance.pdf", "chunk_index": 3}],
        }
        services["answer"].do_answer.assert_awaited_once_with("What is our revenue?", "alice")

    @pytest.mark.parametrize("body", [{"question": ""}, {"question": "   "}, {}])
    def test_blank_question_should_be_rejected(self, client: TestClient, services: dict[str, AsyncMock], body: dict):
        response = client.post("/chat", json=body, headers=HEADERS)

        assert response.status_code == 400
        assert response.json() == {"error": "Question is required"}
        services["answer"].do_answer.assert_not_awaited()

    def test_completion_failure_should_map_to_server_error(self, client: TestClient, services: dict[str, AsyncMock]):
        services["answer"].do_answer.side_effect = CompletionFailedError("Failed to generate a response: quota")

        response = client.post("/chat", json={"question": "Q?"}, headers=HEADERS)

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to generate a response: quota"}

    def test_unexpected_error_should_return_generic_payload(self, services: dict[str, AsyncMock]):
        services["answer"].do_answer.side_effect = RuntimeError("boom")
        client = TestClient(app, raise_server_exceptions=False)

        response = client.post("/chat", json={"question": "Q?"}, headers=HEADERS)

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}


class TestDocuments:

    def test_list_should_group_per_file(self, client: TestClient, services: dict[str, AsyncMock]):
        response = client.get("/documents", headers=HEADERS)

        assert response.status_code == 200
        body = response.json()
        assert body["total_chunks"] == 4
        assert body["documents"][0]["file_name"] == "finance.pdf"
        assert body["documents"][0]["chunks"] == 4
        services["documents"].do_list_documents.assert_awaited_once_with("alice")

    def test_clear_should_confirm(self, client: TestClient, services: dict[str, AsyncMock]):
        response = client.delete("/documents", headers=HEADERS)

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "All documents cleared successfully"}
        services["documents"].do_clear.assert_awaited_once_with("alice")

    def test_failed_clear_should_report_success_false(self, client: TestClient, services: dict[str, AsyncMock]):
        services["documents"].do_clear.side_effect = StorageWriteFailedError("Failed to clear documents: boom")

        response = client.delete("/documents", headers=HEADERS)

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to clear documents: boom", "success": False}
