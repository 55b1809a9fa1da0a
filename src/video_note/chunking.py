from __future__ import annotations

DEFAULT_CHUNK_SIZE = 3000


def split_text_into_chunks(text: str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> list[str]:
    """Split ``text`` into word-aligned chunks shorter than ``chunk_size``.

    Words are appended greedily. A word joins the current chunk only while the
    chunk plus one trailing separator still fits the budget; otherwise it
    starts a new chunk. A single word longer than the budget is kept whole.
    """

    if chunk_size < 1:
        raise ValueError("chunk_size must be positive")

    chunks: list[str] = []
    current = ""

    for word in text.split():
        if not current:
            current = word
        elif len(current) + 1 + len(word) + 1 > chunk_size:
            chunks.append(current)
            current = word
        else:
            current = f"{current} {word}"

    if current:
        chunks.append(current)

    return chunks
