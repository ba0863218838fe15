from abc import abstractmethod
import asyncio

import httpx
from shared.clients.ClientInterface import ClientInterface
from shared.clients.embed.models.EmbeddingDecode import ResponseShape, decode_embedding
from shared.exceptions.RAGErrors import EmbeddingFailedError

from shared.helper.HelperConfig import HelperConfig

class EmbedClientInterface(ClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

        # model and embedding config
        self.embed_model = helper_config.get_string_val(f"{self.get_client_type().upper()}_MODEL", default=self._get_default_model())
        self.max_concurrency = int(helper_config.get_number_val(f"{self.get_client_type().upper()}_MAX_CONCURRENCY", default=16))
        if self.max_concurrency < 1:
            raise ValueError(f"{self.get_client_type().upper()}_MAX_CONCURRENCY must be at least 1, got {self.max_concurrency}.")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        """
        Returns the type of the client. E.g. "embed"
        """
        return "embed"

    @abstractmethod
    def _get_default_model(self) -> str:
        """
        Returns the model used when EMBED_MODEL is not set.
        """
        pass

    ################ ENDPOINTS ##################
    @abstractmethod
    def get_endpoint_embedding(self) -> str:
        """
        Returns the endpoint path for embedding requests.

        Returns:
            str: The endpoint path for embedding requests (e.g. "/api/embed")

        Raises:
            NotImplementedError: If the method is not implemented in a subclass.
        """
        pass

    ################ PAYLOAD BUILDER ##################
    @abstractmethod
    def get_embed_payload(self, text: str) -> dict:
        """Build the backend-specific request body for embedding a single text.

        Args:
            text (str): The text to embed.

        Returns:
            dict: JSON-serialisable request body.

        Raises:
            NotImplementedError: If the method is not implemented in a subclass.
        """
        pass

    ################ RESPONSE SHAPES ##################
    @abstractmethod
    def get_response_shapes(self) -> list[ResponseShape]:
        """Returns the response layouts this backend is known to produce, most specific first.

        Returns:
            list[ResponseShape]: (name, extractor) pairs passed to decode_embedding().

        Raises:
            NotImplementedError: If the method is not implemented in a subclass.
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_embed(self, text: str) -> list[float]:
        """Embed a single text and return its vector.

        Args:
            text (str): The text to embed.

        Returns:
            list[float]: The embedding vector.

        Raises:
            EmbeddingFailedError: On transport errors, non-200 responses, or a
                response without a usable vector field.
        """
        try:
            response = await self.do_request(
                method="POST",
                endpoint=self.get_endpoint_embedding(),
                json=self.get_embed_payload(text),
            )
        except httpx.HTTPError as e:
            self.logging.error("Embedding request to %s failed: %s", self.get_engine_name(), e)
            raise EmbeddingFailedError(
                f"Failed to generate embedding: {e}",
                details={"engine": self.get_engine_name()},
            ) from e

        if response.status_code != 200:
            self.logging.error(
                "Embedding request failed: status %d, body: %s",
                response.status_code,
                response.text[:200],
            )
            raise EmbeddingFailedError(
                "Failed to generate embedding: provider answered with status %d." % response.status_code,
                details={"engine": self.get_engine_name(), "status": response.status_code},
            )

        try:
            response_data = response.json()
        except ValueError as e:
            raise EmbeddingFailedError(
                "Failed to generate embedding: response is not valid JSON.",
                details={"engine": self.get_engine_name()},
            ) from e

        result = decode_embedding(response_data, self.get_response_shapes())
        if not result.ok:
            self.logging.error("Embedding response from %s could not be decoded: %s", self.get_engine_name(), result.reason)
            raise EmbeddingFailedError(
                "No embedding returned - unexpected response structure.",
                details={"engine": self.get_engine_name(), "reason": result.reason},
            )
        self.logging.debug("Decoded %d-dim embedding via shape '%s'.", len(result.vector), result.shape)
        return result.vector

    async def do_embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Embed several texts with independent concurrent requests.

        Results are matched back to their input by index, so the output order
        always equals the input order regardless of completion order.

        Args:
            texts (list[str]): The texts to embed.

        Returns:
            list[list[float]]: One vector per input text, in input order.

        Raises:
            EmbeddingFailedError: If any single text fails; names the failing position.
        """
        if not texts:
            return []

        sem = asyncio.Semaphore(self.max_concurrency)

        async def _embed_one(text: str) -> list[float]:
            async with sem:
                return await self.do_embed(text)

        results = await asyncio.gather(*[_embed_one(text) for text in texts], return_exceptions=True)

        for position, result in enumerate(results):
            if isinstance(result, BaseException):
                self.logging.error(
                    "Batch embedding failed at position %d of %d: %s", position, len(texts), result
                )
                reason = result.message if isinstance(result, EmbeddingFailedError) else str(result)
                raise EmbeddingFailedError(
                    f"Failed to generate embeddings: text at position {position} failed: {reason}",
                    details={"position": position, "batch_size": len(texts)},
                ) from result

        self.logging.info("Embedded %d texts via %s.", len(texts), self.get_engine_name())
        return results
