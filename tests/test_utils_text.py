"""Tests for text utility functions."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from rememberall.utils.text import (
    clean_token,
    count_terms,
    iter_tokens,
    normalize_quotes,
    query_stems,
    stem,
    weigh_terms,
)


class TestStem:
    """Test the stemmer adapter."""

    def test_stem_plural(self) -> None:
        """Should reduce plurals to their stem."""
        assert stem("cats") == "cat"
        assert stem("dogs") == "dog"

    def test_stem_verb_form(self) -> None:
        """Should strip inflectional suffixes."""
        assert stem("running") == "run"

    def test_stem_falls_back_on_failure(self) -> None:
        """Should return the cleaned token when the stemmer raises."""
        with patch("rememberall.utils.text._stemmer") as mock_stemmer:
            mock_stemmer.stem.side_effect = RecursionError("boom")
            assert stem("cats") == "cats"

    def test_stem_falls_back_on_empty_result(self) -> None:
        """Should keep the token when the stemmer returns nothing."""
        with patch("rememberall.utils.text._stemmer") as mock_stemmer:
            mock_stemmer.stem.return_value = ""
            assert stem("x") == "x"


class TestTokens:
    """Test token cleaning."""

    def test_clean_token(self) -> None:
        """Should lowercase and strip periods, commas, quotes and colons."""
        assert clean_token('"Note:"') == "note"
        assert clean_token("End.") == "end"
        assert clean_token("a,b") == "ab"

    def test_clean_token_strips_wrapping_single_quotes(self) -> None:
        """Should drop the quotes left behind by quote normalization."""
        assert clean_token("'Hello'") == "hello"
        assert clean_token("'quoted.'") == "quoted"

    def test_clean_token_keeps_inner_apostrophe(self) -> None:
        """Should keep contractions intact."""
        assert clean_token("Don't") == "don't"

    def test_clean_token_keeps_other_symbols(self) -> None:
        """Should leave symbols that may carry meaning."""
        assert clean_token("C++") == "c++"

    def test_iter_tokens_strips_markup(self) -> None:
        """Should drop list and break markup, brackets and bold markers."""
        tokens = list(iter_tokens("<ul>Hello, World.<br>**bold** [link]"))
        assert tokens == ["hello", "world", "bold", "link"]

    def test_iter_tokens_drops_empty_tokens(self) -> None:
        """Should skip tokens made only of stripped punctuation."""
        assert list(iter_tokens("one ... , : two")) == ["one", "two"]


class TestCountTerms:
    """Test multiset aggregation."""

    def test_counts_every_occurrence(self) -> None:
        """Should count duplicates and report the token length."""
        terms, length = count_terms("Cats cats dogs.")
        assert terms == {"cat": 2.0, "dog": 1.0}
        assert length == 3

    def test_length_matches_counts(self) -> None:
        """Should keep length equal to the sum of counts."""
        terms, length = count_terms("<ul>The cats chase the dogs.<br>Cats nap.")
        assert length == sum(terms.values())

    def test_quoted_word(self) -> None:
        """Should count a quoted word under its bare stem."""
        terms, length = count_terms(normalize_quotes('He said "hello" to me.'))
        assert terms["hello"] == 1.0
        assert "'hello'" not in terms
        assert length == 5

    def test_empty_text(self) -> None:
        """Should return nothing for text without tokens."""
        assert count_terms(" ... , ") == ({}, 0)


class TestWeighTerms:
    """Test set aggregation."""

    def test_distinct_stems_share_weight(self) -> None:
        """Should weight each distinct stem by one over the distinct count."""
        weights = weigh_terms("cats cats dogs")
        assert weights == {"cat": 0.5, "dog": 0.5}

    def test_weights_sum_to_one(self) -> None:
        """Should produce weights that sum to one."""
        weights = weigh_terms("alpha beta gamma delta alpha")
        assert sum(weights.values()) == pytest.approx(1.0)

    def test_empty_text(self) -> None:
        """Should return an empty mapping."""
        assert weigh_terms("") == {}


class TestQueryStems:
    """Test query normalization."""

    def test_deduplicates_in_order(self) -> None:
        """Should keep the first occurrence of each stem."""
        assert query_stems(["Cats", "cat", "dogs"]) == ["cat", "dog"]

    def test_splits_multi_word_terms(self) -> None:
        """Should handle a quoted multi-word argument."""
        assert query_stems(["cats dogs"]) == ["cat", "dog"]

    def test_punctuation_only(self) -> None:
        """Should return no stems for punctuation."""
        assert query_stems(["...", ","]) == []


def test_normalize_quotes() -> None:
    """Should turn double quotes into single quotes."""
    assert normalize_quotes('say "hi"') == "say 'hi'"
