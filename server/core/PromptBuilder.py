from shared.clients.rag.models.DocumentChunk import DocumentChunk

CONTEXT_SEPARATOR = "\n\n---\n\n"

GROUNDING_TEMPLATE = (
    "You are a helpful AI assistant that answers questions based on the provided business documents. "
    "Use only the information from the documents to answer questions. "
    "If the answer is not in the documents, say so politely.\n\n"
    "Context from documents:\n"
    "{context}\n\n"
    "User Question: {question}\n\n"
    "Answer based on the context above:"
)


def build_context(chunks: list[DocumentChunk]) -> str:
    """Label each chunk with its rank and source file and join them."""
    return CONTEXT_SEPARATOR.join(
        f"[Document {i + 1} from {chunk.metadata.file_name}]:\n{chunk.text}"
        for i, chunk in enumerate(chunks)
    )


def build_grounding_prompt(question: str, chunks: list[DocumentChunk]) -> str:
    """Build the prompt that restricts the model to the retrieved context.

    Args:
        question (str): The user's question, inserted literally.
        chunks (list[DocumentChunk]): Retrieved chunks in ranking order.

    Returns:
        str: The complete prompt.
    """
    return GROUNDING_TEMPLATE.format(context=build_context(chunks), question=question)
