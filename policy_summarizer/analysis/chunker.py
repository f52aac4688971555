from policy_summarizer.analysis.models import TextChunk


def split_into_chunks(text: str, chunk_size: int) -> list[TextChunk]:
    """Split text into consecutive fixed-size character slices.

    Boundaries are not sentence-aware. Joining the chunks' content in index
    order reproduces ``text`` exactly. Empty input yields no chunks.

    Raises:
        ValueError: if chunk_size is not positive.
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    slices = [text[start:start + chunk_size] for start in range(0, len(text), chunk_size)]
    return [
        TextChunk(index=index, total_chunks=len(slices), content=content)
        for index, content in enumerate(slices)
    ]


def plan_chunks(text: str, *, max_input_characters: int, chunk_size: int) -> list[TextChunk]:
    """Chunk only when the text exceeds the analyzer's input limit."""
    if len(text) <= max_input_characters:
        return split_into_chunks(text, max(len(text), 1))
    return split_into_chunks(text, chunk_size)
