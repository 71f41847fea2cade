"""Tests for sentence-aware text packing (F1)."""

import pytest

from ebookkit.core.slide_packer import pack_text, split_sentences


def _long_chapter(target_length: int) -> str:
    """Build a chapter of clear sentences, at least target_length chars."""
    sentences = []
    i = 0
    while len(" ".join(sentences)) < target_length:
        i += 1
        sentences.append(f"This is sentence number {i} of a long and steady chapter.")
    return " ".join(sentences)


class TestSplitSentences:
    """Tests for split_sentences()."""

    def test_splits_on_terminator_and_whitespace(self):
        """Each terminator followed by whitespace ends a unit."""
        assert split_sentences("One. Two! Three? Four") == ["One.", "Two!", "Three?", "Four"]

    def test_terminator_without_whitespace_does_not_split(self):
        """Decimals and abbreviations without a following space stay together."""
        assert split_sentences("Pi is 3.14 exactly.") == ["Pi is 3.14 exactly."]

    def test_empty_text(self):
        """Empty text has no units."""
        assert split_sentences("   ") == []


class TestPackText:
    """Tests for pack_text()."""

    def test_short_text_is_one_chunk(self):
        """Text under the budget stays in one chunk."""
        assert pack_text("Hello world. Bye.", 800) == ["Hello world. Bye."]

    def test_long_chapter_produces_bounded_slides(self):
        """A 3500-char chapter at 800 yields 4+ slides of at most 800 chars."""
        chapter = _long_chapter(3500)
        assert len(chapter) >= 3500

        slides = pack_text(chapter, 800)

        assert len(slides) >= 4
        for slide in slides[:-1]:
            assert len(slide) <= 800
        assert len(slides[-1]) <= 800

    def test_never_splits_inside_a_sentence(self):
        """Every chunk is made of whole sentences from the input."""
        chapter = _long_chapter(2000)
        sentences = set(split_sentences(chapter))

        for chunk in pack_text(chapter, 300):
            for unit in split_sentences(chunk):
                assert unit in sentences

    def test_overlong_sentence_is_kept_whole(self):
        """A single sentence longer than the budget is its own chunk."""
        long_sentence = "word " * 100 + "end."
        text = f"Short one. {long_sentence.strip()} Another short."

        chunks = pack_text(text, 50)

        assert "Short one." in chunks
        assert long_sentence.strip() in chunks
        assert "Another short." in chunks

    def test_content_is_preserved(self):
        """Joined chunks reproduce the input modulo whitespace."""
        chapter = _long_chapter(1500)
        chunks = pack_text(chapter, 200)
        assert " ".join(chunks).split() == chapter.split()

    def test_empty_text_returns_input(self):
        """Nothing to pack returns the input itself."""
        assert pack_text("", 100) == [""]

    def test_non_positive_max_length_rejected(self):
        """max_length must be positive."""
        with pytest.raises(ValueError):
            pack_text("Hello.", 0)
