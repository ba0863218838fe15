"""
Test suite for completion clients.
"""

import json

import httpx
import pytest

from shared.clients.llm.LLMClientManager import LLMClientManager
from shared.clients.llm.gemini.LLMClientGemini import LLMClientGemini
from shared.clients.llm.ollama.LLMClientOllama import LLMClientOllama
from shared.exceptions.RAGErrors import CompletionFailedError
from shared.helper.HelperConfig import HelperConfig


class TestGeminiCompletion:

    @pytest.mark.asyncio
    async def test_should_send_generation_config_and_join_parts(self, helper_config: HelperConfig):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": "Hello "}, {"text": "there"}]}}]})

        client = LLMClientGemini(helper_config=helper_config)
        await client.boot(transport=httpx.MockTransport(handler))

        text = await client.do_complete("prompt", max_tokens=1000, temperature=0.7)

        assert text == "Hello there"
        assert seen[0].url.path == "/v1beta/models/gemini-2.5-flash:generateContent"
        body = json.loads(seen[0].content)
        assert body["generationConfig"] == {"temperature": 0.7, "maxOutputTokens": 1000}
        assert body["contents"][0]["parts"][0]["text"] == "prompt"

    @pytest.mark.asyncio
    async def test_blocked_prompt_should_return_empty_text(self, helper_config: HelperConfig):
        client = LLMClientGemini(helper_config=helper_config)
        await client.boot(transport=httpx.MockTransport(
            lambda r: httpx.Response(200, json={"promptFeedback": {"blockReason": "SAFETY"}})
        ))

        assert await client.do_complete("prompt", max_tokens=10, temperature=0.0) == ""

    @pytest.mark.asyncio
    async def test_http_error_should_raise(self, helper_config: HelperConfig):
        client = LLMClientGemini(helper_config=helper_config)
        await client.boot(transport=httpx.MockTransport(lambda r: httpx.Response(429, text="quota")))

        with pytest.raises(CompletionFailedError):
            await client.do_complete("prompt", max_tokens=10, temperature=0.0)


class TestOllamaCompletion:

    @pytest.mark.asyncio
    async def test_should_map_options_and_read_message(self, helper_config: HelperConfig):
        seen: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(json.loads(request.content))
            return httpx.Response(200, json={"message": {"role": "assistant", "content": "Answer"}})

        client = LLMClientOllama(helper_config=helper_config)
        await client.boot(transport=httpx.MockTransport(handler))

        assert await client.do_complete("prompt", max_tokens=50, temperature=0.2) == "Answer"
        assert seen[0]["options"] == {"temperature": 0.2, "num_predict": 50}
        assert seen[0]["stream"] is False

    @pytest.mark.asyncio
    async def test_invalid_json_should_raise(self, helper_config: HelperConfig):
        client = LLMClientOllama(helper_config=helper_config)
        await client.boot(transport=httpx.MockTransport(lambda r: httpx.Response(200, text="not json")))

        with pytest.raises(CompletionFailedError):
            await client.do_complete("prompt", max_tokens=50, temperature=0.2)


class TestLLMClientManager:

    def test_should_instantiate_configured_engine(self, helper_config: HelperConfig):
        assert isinstance(LLMClientManager(helper_config=helper_config).get_client(), LLMClientOllama)

    def test_chat_model_should_be_configurable(self, env: pytest.MonkeyPatch, helper_config: HelperConfig):
        env.setenv("LLM_ENGINE", "gemini")
        env.setenv("LLM_CHAT_MODEL", "gemini-pro")

        client = LLMClientManager(helper_config=helper_config).get_client()

        assert client.chat_model == "gemini-pro"
