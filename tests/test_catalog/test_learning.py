"""Tests for the term-learning heuristic."""

from orcasmart.catalog.learning import STOPWORDS, extract_learnable_terms


class TestExtractLearnableTerms:
    """Tests for extract_learnable_terms()."""

    def test_takes_first_two_tokens(self):
        assert extract_learnable_terms("Tinta Acrílica Fosca 18L Branca") == ["tinta", "acrilica"]

    def test_max_terms(self):
        terms = extract_learnable_terms("Tinta Acrílica Fosca 18L Branca", max_terms=5)
        assert terms == ["tinta", "acrilica", "fosca"]

    def test_skips_stopwords_and_short_tokens(self):
        assert extract_learnable_terms("Kit com caixa para tomada") == ["tomada"]

    def test_skips_tokens_with_digits(self):
        assert extract_learnable_terms("Cimento CP2 50kg") == ["cimento"]

    def test_splits_on_hyphens(self):
        assert extract_learnable_terms("Cimento CP-II") == ["cimento"]

    def test_drops_duplicates(self):
        assert extract_learnable_terms("tubo tubo soldável") == ["tubo", "soldavel"]

    def test_min_length(self):
        assert extract_learnable_terms("tubo cano", min_length=5) == []

    def test_empty(self):
        assert extract_learnable_terms("") == []
        assert extract_learnable_terms(None) == []

    def test_stopwords_are_normalized(self):
        assert all(word == word.lower() and word.isascii() for word in STOPWORDS)
