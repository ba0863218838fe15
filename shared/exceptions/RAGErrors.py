"""Exception hierarchy shared by extractors, clients, services and the API.

Every error carries a status classification so the HTTP layer can map it
without knowing which component raised it:
  unauthorized  -> 401
  bad_input     -> 400
  server_fault  -> 500
"""

from typing import Any

STATUS_UNAUTHORIZED = "unauthorized"
STATUS_BAD_INPUT = "bad_input"
STATUS_SERVER_FAULT = "server_fault"

STATUS_CODES = {
    STATUS_UNAUTHORIZED: 401,
    STATUS_BAD_INPUT: 400,
    STATUS_SERVER_FAULT: 500,
}


class RAGAssistantError(Exception):
    """Base exception for all application errors."""

    status_kind: str = STATUS_SERVER_FAULT

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Args:
            message (str): Human-readable error message, returned to the caller.
            details (dict[str, Any] | None): Optional diagnostic context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message

    @property
    def http_status(self) -> int:
        return STATUS_CODES.get(self.status_kind, 500)

    def to_payload(self) -> dict:
        """Build the structured error body returned at every boundary.

        Returns:
            dict: {"error": "..."} plus "details" when diagnostic context exists.
        """
        payload: dict[str, Any] = {"error": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class UnsupportedFormatError(RAGAssistantError):
    """Raised when a file extension has no registered extractor."""

    status_kind = STATUS_BAD_INPUT

    def __init__(self, extension: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["extension"] = extension
        super().__init__(f"Unsupported file type: {extension or '<none>'}", details)


class ExtractionFailedError(RAGAssistantError):
    """Raised when no text could be extracted from a document."""

    status_kind = STATUS_BAD_INPUT


class EmptyDocumentError(RAGAssistantError):
    """Raised when a document produced zero chunks."""

    status_kind = STATUS_BAD_INPUT


class InvalidRequestError(RAGAssistantError):
    """Raised at the API boundary for missing or oversized input."""

    status_kind = STATUS_BAD_INPUT


class EmbeddingFailedError(RAGAssistantError):
    """Raised on embedding provider errors or malformed responses."""


class CompletionFailedError(RAGAssistantError):
    """Raised when the completion provider cannot be reached or errors."""


class StorageWriteFailedError(RAGAssistantError):
    """Raised when a vector store insert or delete fails."""


class StorageReadFailedError(RAGAssistantError):
    """Raised when a vector store read fails."""


class UnauthorizedError(RAGAssistantError):
    """Raised when the API key or owner identity is missing or invalid."""

    status_kind = STATUS_UNAUTHORIZED
