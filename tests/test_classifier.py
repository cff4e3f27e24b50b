"""Tests for the text-presence rule and page classification."""

from hypothesis import given, strategies as st

from pdf_recompressor import classifier
from pdf_recompressor.classifier import has_meaningful_text, page_has_meaningful_text

from conftest import open_pdf


class TestHasMeaningfulText:

    def test_five_tokens_with_one_long_is_text(self):
        assert has_meaningful_text(["Invoice", "a", "b", "c", "d"]) is True

    def test_four_long_tokens_is_not_text(self):
        assert has_meaningful_text(["alpha", "bravo", "charlie", "delta"]) is False

    def test_many_short_tokens_is_not_text(self):
        assert has_meaningful_text(["abc"] * 20) is False

    def test_exactly_three_chars_is_not_significant(self):
        assert has_meaningful_text(["abc", "def", "ghi", "jkl", "mno"]) is False
        assert has_meaningful_text(["abcd", "def", "ghi", "jkl", "mno"]) is True

    def test_whitespace_tokens_are_empty(self):
        tokens = ["  header  ", " ", "\t", "\n", "x", "y"]
        assert has_meaningful_text(tokens) is False
        assert has_meaningful_text(tokens + ["z", "w"]) is True

    def test_padding_does_not_count_toward_length(self):
        assert has_meaningful_text(["  ab  ", "a", "b", "c", "d"]) is False

    def test_empty_page(self):
        assert has_meaningful_text([]) is False

    @given(st.lists(st.text(max_size=12), max_size=15), st.randoms())
    def test_verdict_ignores_token_order(self, tokens, rnd):
        shuffled = list(tokens)
        rnd.shuffle(shuffled)
        assert has_meaningful_text(tokens) == has_meaningful_text(shuffled)

    @given(st.lists(st.text(max_size=12), max_size=15))
    def test_surrounding_whitespace_is_ignored(self, tokens):
        padded = [f"  {t}\n" for t in tokens]
        assert has_meaningful_text(tokens) == has_meaningful_text(padded)

    @given(st.lists(st.text(min_size=4, max_size=12).filter(lambda t: t.strip()), max_size=4))
    def test_fewer_than_five_tokens_never_text(self, tokens):
        assert has_meaningful_text(tokens) is False


class TestPageClassification:

    def test_text_page_is_text_bearing(self, text_pdf):
        with open_pdf(text_pdf) as doc:
            assert page_has_meaningful_text(doc, 0) is True

    def test_scan_page_is_not_text_bearing(self, scan_pdf):
        with open_pdf(scan_pdf) as doc:
            assert page_has_meaningful_text(doc, 0) is False

    def test_watermarked_scan_is_not_text_bearing(self, mixed_pdf):
        with open_pdf(mixed_pdf) as doc:
            assert page_has_meaningful_text(doc, 2) is False

    def test_extraction_failure_preserves_page(self, scan_pdf, monkeypatch):
        def broken(doc, page_num):
            raise RuntimeError("content stream is corrupt")

        monkeypatch.setattr(classifier, "extract_text_tokens", broken)
        with open_pdf(scan_pdf) as doc:
            assert page_has_meaningful_text(doc, 0) is True
