from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class LLMClientGemini(LLMClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default="https://generativelanguage.googleapis.com", val_type="string")
        self._api_key = self.get_config_val("API_KEY", default=None, val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Gemini"

    def _get_default_chat_model(self) -> str:
        return "gemini-2.5-flash"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default="https://generativelanguage.googleapis.com"),
            EnvConfig(env_key="API_KEY", val_type="string", default=None),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        return {"x-goog-api-key": self._api_key}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        return f"/v1beta/models/{self.chat_model}"

    def _get_endpoint_completion(self) -> str:
        return f"/v1beta/models/{self.chat_model}:generateContent"

    ################ PAYLOAD BUILDER ##################
    def get_completion_payload(self, prompt: str, max_tokens: int, temperature: float) -> dict:
        return {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": max_tokens,
            },
        }

    ##########################################
    ################# OTHER ##################
    ##########################################

    def extract_completion_text(self, response_data: dict) -> str:
        """Join the text parts of the first candidate.

        A blocked prompt or a candidate without parts yields "".
        """
        candidates = response_data.get("candidates") or []
        if not candidates:
            block_reason = (response_data.get("promptFeedback") or {}).get("blockReason")
            if block_reason:
                self.logging.warning("Gemini returned no candidates (blockReason=%s).", block_reason)
            return ""
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(part.get("text", "") for part in parts if isinstance(part, dict))
