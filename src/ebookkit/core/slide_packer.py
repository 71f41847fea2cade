"""Sentence-aware text chunking.

Packs sentences greedily into chunks of at most max_length characters.
max_length is a soft bound: a single sentence longer than the budget becomes
its own chunk and is never cut.

Used by the Chapter Segmenter (2000-char fallback) and by the presentation
renderer (~800 chars per slide).
"""

from __future__ import annotations

import re

# Split after a terminator when whitespace follows; the terminator stays
# attached to its sentence.
SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+")


def split_sentences(text: str) -> list[str]:
    """Split text into sentence-like units.

    Args:
        text: Input text

    Returns:
        Non-empty units in order, stripped of surrounding whitespace
    """
    return [unit.strip() for unit in SENTENCE_BOUNDARY.split(text) if unit.strip()]


def pack_text(text: str, max_length: int) -> list[str]:
    """Subdivide text into length-bounded chunks without breaking sentences.

    Args:
        text: Chapter (or any) text to pack
        max_length: Target maximum characters per chunk

    Returns:
        Ordered chunks. If nothing could be packed (empty input), returns
        [text] so callers always get at least one element.

    Raises:
        ValueError: If max_length is not positive
    """
    if max_length <= 0:
        raise ValueError(f"max_length must be positive, got {max_length}")

    chunks: list[str] = []
    buffer = ""

    for sentence in split_sentences(text):
        candidate_length = len(buffer) + 1 + len(sentence) if buffer else len(sentence)
        if candidate_length > max_length and buffer:
            chunks.append(buffer)
            buffer = sentence
        else:
            buffer = f"{buffer} {sentence}" if buffer else sentence

    if buffer:
        chunks.append(buffer)

    return chunks if chunks else [text]
