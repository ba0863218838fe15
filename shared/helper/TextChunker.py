"""Overlapping, sentence-aware text chunking."""


def split_into_chunks(text: str, chunk_size: int = 1000, overlap: int = 200) -> list[str]:
    """Split text into chunks of at most chunk_size characters.

    A chunk that does not reach the end of the text is cut after its last
    '.' or newline when that boundary lies in the second half of the window;
    the next chunk then starts right after the boundary. Otherwise the full
    window is kept and the next chunk starts overlap characters before its end.
    Chunks are trimmed and blank chunks are dropped.

    Args:
        text (str): The text to split.
        chunk_size (int): Maximum window length in characters.
        overlap (int): Characters shared by consecutive chunks when no boundary is found.

    Returns:
        list[str]: The chunks in text order. Empty for blank text.

    Raises:
        ValueError: If chunk_size <= 0 or overlap is not in [0, chunk_size).
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    if overlap < 0 or overlap >= chunk_size:
        raise ValueError(f"overlap must be in [0, {chunk_size}), got {overlap}")

    chunks: list[str] = []
    start = 0
    length = len(text)

    while start < length:
        end = min(start + chunk_size, length)
        chunk = text[start:end]

        if end < length:
            break_point = max(chunk.rfind("."), chunk.rfind("\n"))
            if break_point > chunk_size * 0.5:
                chunk = chunk[: break_point + 1]
                start += break_point + 1
            else:
                start = end - overlap
        else:
            start = end

        chunk = chunk.strip()
        if chunk:
            chunks.append(chunk)

    return chunks
