from abc import abstractmethod

import httpx
from shared.clients.ClientInterface import ClientInterface, ClientRequestError
from shared.exceptions.RAGErrors import CompletionFailedError
from shared.helper.HelperConfig import HelperConfig


class LLMClientInterface(ClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

        # chat / completion config
        self.chat_model = helper_config.get_string_val(f"{self.get_client_type().upper()}_CHAT_MODEL", default=self._get_default_chat_model())

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        return "llm"

    @abstractmethod
    def _get_default_chat_model(self) -> str:
        """Returns the model used when LLM_CHAT_MODEL is not set."""
        pass

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_endpoint_completion(self) -> str:
        """Returns the endpoint path for completion requests (e.g. "/api/chat")."""
        pass

    ################ PAYLOAD BUILDER ##################
    @abstractmethod
    def get_completion_payload(self, prompt: str, max_tokens: int, temperature: float) -> dict:
        """Build the backend-specific request body for a single-prompt completion.

        Args:
            prompt (str): The full prompt text.
            max_tokens (int): Upper bound on generated tokens.
            temperature (float): Sampling temperature.

        Returns:
            dict: JSON-serialisable request body.
        """
        pass

    ##########################################
    ################# OTHER ##################
    ##########################################

    @abstractmethod
    def extract_completion_text(self, response_data: dict) -> str:
        """Extract the generated text from a raw completion response.

        Args:
            response_data (dict): The parsed JSON response body.

        Returns:
            str: The generated text, or "" when the model produced nothing.
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_complete(self, prompt: str, max_tokens: int, temperature: float) -> str:
        """Send a completion request and return the generated text.

        Args:
            prompt (str): The full prompt text.
            max_tokens (int): Upper bound on generated tokens.
            temperature (float): Sampling temperature.

        Returns:
            str: The generated text ("" when the model returned nothing).

        Raises:
            CompletionFailedError: If the request fails or the body is not JSON.
        """
        body = self.get_completion_payload(prompt, max_tokens=max_tokens, temperature=temperature)
        try:
            response = await self.do_request(
                method="POST",
                endpoint=self._get_endpoint_completion(),
                json=body,
                raise_on_error=True,
            )
            response_data = response.json()
        except (httpx.HTTPError, ClientRequestError, ValueError) as e:
            self.logging.error("Completion request to %s failed: %s", self.get_engine_name(), e)
            raise CompletionFailedError(
                f"Failed to generate a response: {e}",
                details={"engine": self.get_engine_name()},
            ) from e
        return self.extract_completion_text(response_data)
