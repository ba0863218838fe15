"""Shared fixtures: an isolated environment and a HelperConfig built on it."""

import logging
import os

import pytest

from shared.helper.HelperConfig import HelperConfig

# modules configuring logging at import time must not create log files
os.environ.setdefault("LOG_TO_FILE", "false")

BASE_ENV = {
    "APP_API_KEY": "secret-key",
    "EMBED_ENGINE": "ollama",
    "EMBED_OLLAMA_BASE_URL": "http://ollama.test",
    "EMBED_GEMINI_API_KEY": "gemini-key",
    "LLM_ENGINE": "ollama",
    "LLM_OLLAMA_BASE_URL": "http://ollama.test",
    "LLM_GEMINI_API_KEY": "gemini-key",
    "RAG_ENGINE": "memory",
    "RAG_SUPABASE_BASE_URL": "https://project.supabase.test",
    "RAG_SUPABASE_API_KEY": "service-key",
    "LOG_TO_FILE": "false",
}

# every key a test could inherit from the developer's shell
CLEARED_KEYS = [
    "EMBED_MODEL", "EMBED_MAX_CONCURRENCY", "EMBED_OLLAMA_API_KEY", "EMBED_GEMINI_BASE_URL",
    "LLM_CHAT_MODEL", "LLM_OLLAMA_API_KEY", "LLM_GEMINI_BASE_URL",
    "RAG_SIMILARITY_THRESHOLD", "RAG_CANDIDATE_LIMIT", "RAG_VECTOR_DIMENSION",
    "RAG_SUPABASE_TABLE", "RAG_SUPABASE_MATCH_FUNCTION", "RAG_SUPABASE_USE_MATCH_FUNCTION",
    "EXTRACT_PDF_TIMEOUT", "CHUNK_SIZE", "CHUNK_OVERLAP",
    "ANSWER_TOP_K", "ANSWER_MAX_TOKENS", "ANSWER_TEMPERATURE", "MAX_UPLOAD_MB",
]


@pytest.fixture
def env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Provide a clean, complete environment; tests override keys with env.setenv()."""
    for key in CLEARED_KEYS:
        monkeypatch.delenv(key, raising=False)
    for key, value in BASE_ENV.items():
        monkeypatch.setenv(key, value)
    return monkeypatch


@pytest.fixture
def logger() -> logging.Logger:
    return logging.getLogger("rag_assistant.tests")


@pytest.fixture
def helper_config(env: pytest.MonkeyPatch, logger: logging.Logger) -> HelperConfig:
    """Provide a HelperConfig reading the isolated environment."""
    return HelperConfig(logger=logger)
