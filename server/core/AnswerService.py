from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.clients.rag.RAGClientInterface import RAGClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.results import AnswerResult, SourceRef
from server.core.PromptBuilder import build_grounding_prompt

NO_DOCUMENTS_MESSAGE = "Please upload business documents first before asking questions."
NO_RESPONSE_MESSAGE = "Sorry, I could not generate a response."


class AnswerService:
    """Answers questions from an owner's documents: embed -> search -> prompt -> complete."""

    def __init__(
        self,
        helper_config: HelperConfig,
        embed_client: EmbedClientInterface,
        rag_client: RAGClientInterface,
        llm_client: LLMClientInterface,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._embed_client = embed_client
        self._rag_client = rag_client
        self._llm_client = llm_client
        self.top_k = int(helper_config.get_number_val("ANSWER_TOP_K", default=5))
        self.max_tokens = int(helper_config.get_number_val("ANSWER_MAX_TOKENS", default=1000))
        self.temperature = helper_config.get_float_val("ANSWER_TEMPERATURE", default=0.7)

    ##########################################
    ############### CORE #####################
    ##########################################

    async def do_answer(self, question: str, owner_id: str) -> AnswerResult:
        """Answer a question grounded in the owner's documents.

        An owner without documents gets a fixed guidance message; neither the
        embedding nor the completion model is called in that case.

        Args:
            question (str): The user's question.
            owner_id (str): The asking owner.

        Returns:
            AnswerResult: The answer text and the chunks it was grounded on, in ranking order.

        Raises:
            EmbeddingFailedError: If embedding the question fails.
            StorageReadFailedError: If the store cannot be read.
            CompletionFailedError: If the completion model fails.
        """
        count = await self._rag_client.do_count(owner_id)
        if count == 0:
            self.logging.info("Owner %s has no documents, returning guidance message.", owner_id)
            return AnswerResult(response_text=NO_DOCUMENTS_MESSAGE, sources=[])

        query_vector = await self._embed_client.do_embed(question)
        self.logging.debug("Query vector dimension: %d", len(query_vector))

        chunks = await self._rag_client.do_search(query_vector, top_k=self.top_k, owner_id=owner_id)
        self.logging.info(
            "Retrieved %d/%d chunks above threshold for owner %s.", len(chunks), self.top_k, owner_id
        )

        prompt = build_grounding_prompt(question, chunks)
        answer = await self._llm_client.do_complete(prompt, max_tokens=self.max_tokens, temperature=self.temperature)
        if not answer.strip():
            self.logging.warning("Completion model returned an empty answer for owner %s.", owner_id)
            answer = NO_RESPONSE_MESSAGE

        return AnswerResult(
            response_text=answer,
            sources=[SourceRef(file_name=c.metadata.file_name, chunk_index=c.metadata.chunk_index) for c in chunks],
        )
