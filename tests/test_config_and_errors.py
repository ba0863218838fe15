"""
Test suite for HelperConfig, the error taxonomy and the logging setup.
"""

import logging

import pytest

from shared.exceptions.RAGErrors import (
    STATUS_BAD_INPUT,
    STATUS_SERVER_FAULT,
    STATUS_UNAUTHORIZED,
    EmbeddingFailedError,
    EmptyDocumentError,
    UnauthorizedError,
    UnsupportedFormatError,
)
from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import ColorLogger, PdfParserFilter, setup_logging


class TestHelperConfig:

    def test_string_should_fall_back_to_default(self, helper_config: HelperConfig):
        assert helper_config.get_string_val("NOT_SET_ANYWHERE", default="fallback") == "fallback"

    def test_missing_required_string_should_raise(self, helper_config: HelperConfig):
        with pytest.raises(ValueError):
            helper_config.get_string_val("NOT_SET_ANYWHERE")

    def test_numbers_should_parse_int_and_float(self, env: pytest.MonkeyPatch, helper_config: HelperConfig):
        env.setenv("CHUNK_SIZE", "800")
        env.setenv("ANSWER_TEMPERATURE", "0.3")

        assert helper_config.get_number_val("CHUNK_SIZE") == 800
        assert helper_config.get_float_val("ANSWER_TEMPERATURE") == 0.3
        assert isinstance(helper_config.get_float_val("CHUNK_SIZE"), float)

    def test_invalid_number_should_raise(self, env: pytest.MonkeyPatch, helper_config: HelperConfig):
        env.setenv("CHUNK_SIZE", "large")

        with pytest.raises(ValueError):
            helper_config.get_number_val("CHUNK_SIZE")

    @pytest.mark.parametrize("raw, expected", [("true", True), ("1", True), ("YES", True), ("false", False), ("no", False)])
    def test_bool_values(self, env: pytest.MonkeyPatch, helper_config: HelperConfig, raw: str, expected: bool):
        env.setenv("RAG_SUPABASE_USE_MATCH_FUNCTION", raw)

        assert helper_config.get_bool_val("RAG_SUPABASE_USE_MATCH_FUNCTION") is expected

    def test_list_should_parse_brackets_and_default(self, env: pytest.MonkeyPatch, helper_config: HelperConfig):
        env.setenv("SOME_LIST", "[a, b ,c]")

        assert helper_config.get_list_val("SOME_LIST") == ["a", "b", "c"]
        assert helper_config.get_list_val("NOT_SET_ANYWHERE", default=["x"]) == ["x"]

    def test_malformed_list_should_raise(self, env: pytest.MonkeyPatch, helper_config: HelperConfig):
        env.setenv("SOME_LIST", "a,b")

        with pytest.raises(ValueError):
            helper_config.get_list_val("SOME_LIST")


class TestErrorTaxonomy:

    @pytest.mark.parametrize(
        "error, kind",
        [
            (UnsupportedFormatError("png"), STATUS_BAD_INPUT),
            (EmptyDocumentError("empty"), STATUS_BAD_INPUT),
            (EmbeddingFailedError("down"), STATUS_SERVER_FAULT),
            (UnauthorizedError("no"), STATUS_UNAUTHORIZED),
        ],
    )
    def test_each_error_should_carry_its_status_kind(self, error, kind: str):
        assert error.status_kind == kind

    def test_http_status_should_follow_status_kind(self):
        assert UnauthorizedError("no").http_status == 401
        assert EmptyDocumentError("empty").http_status == 400
        assert EmbeddingFailedError("down").http_status == 500

    def test_payload_should_include_details_only_when_present(self):
        assert EmptyDocumentError("empty").to_payload() == {"error": "empty"}
        assert UnsupportedFormatError("png").to_payload() == {
            "error": "Unsupported file type: png",
            "details": {"extension": "png"},
        }


class TestLogging:

    def test_setup_should_return_color_logger(self, env: pytest.MonkeyPatch):
        logger = setup_logging()

        assert isinstance(logger, ColorLogger)
        assert logger.name == "rag_assistant"
        # color is passed through as a record attribute
        logger.info("colored message", color="green")

    def test_pdf_parser_warnings_should_be_filtered(self):
        pdf_filter = PdfParserFilter()
        noisy = logging.LogRecord("pypdf._reader", logging.WARNING, __file__, 1, "bad xref", None, None)
        severe = logging.LogRecord("pypdf._reader", logging.ERROR, __file__, 1, "broken", None, None)
        ours = logging.LogRecord("rag_assistant", logging.WARNING, __file__, 1, "fallback", None, None)

        assert pdf_filter.filter(noisy) is False
        assert pdf_filter.filter(severe) is True
        assert pdf_filter.filter(ours) is True
