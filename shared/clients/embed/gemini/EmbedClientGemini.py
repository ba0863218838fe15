from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.clients.embed.models.EmbeddingDecode import ResponseShape
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class EmbedClientGemini(EmbedClientInterface):
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

    def _get_default_model(self) -> str:
        return "text-embedding-004"

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
        return f"/v1beta/models/{self.embed_model}"

    def get_endpoint_embedding(self) -> str:
        return f"/v1beta/models/{self.embed_model}:embedContent"

    ################ PAYLOAD BUILDER ##################
    def get_embed_payload(self, text: str) -> dict:
        """Build the Gemini embedContent request body.

        Returns:
            dict: {"model": "models/...", "content": {"parts": [{"text": "..."}]}}
        """
        return {
            "model": f"models/{self.embed_model}",
            "content": {"parts": [{"text": text}]},
        }

    ################ RESPONSE SHAPES ##################
    def get_response_shapes(self) -> list[ResponseShape]:
        # embedContent answers {"embedding": {"values": [...]}}; some proxies flatten it
        return [
            ("embedding.values", lambda data: data["embedding"]["values"]),
            ("embedding", lambda data: data["embedding"]),
        ]
