"""Tests for rtprompt.fuzzy -- fuzzy matching and closest-N ranking."""

from __future__ import annotations

from rtprompt.fuzzy import fuzzy_match, rank_candidates, trigrams


def ident(s: str) -> str:
    return s


class TestFuzzyMatch:
    def test_empty_query_matches(self) -> None:
        result = fuzzy_match("", "anything")
        assert result.matches
        assert result.score == 0

    def test_in_order_subsequence(self) -> None:
        assert fuzzy_match("fb", "foobar").matches
        assert not fuzzy_match("bf", "foobar").matches

    def test_case_insensitive(self) -> None:
        assert fuzzy_match("PANIC", "panic attack").matches

    def test_query_longer_than_text(self) -> None:
        assert not fuzzy_match("longer", "short").matches

    def test_consecutive_scores_better(self) -> None:
        assert fuzzy_match("abc", "abcxyz").score < fuzzy_match("abc", "axbxcx").score

    def test_word_boundary_scores_better(self) -> None:
        assert fuzzy_match("eggs", "eggs fried").score < fuzzy_match("eggs", "xeggs fried").score

    def test_swapped_alpha_numeric(self) -> None:
        assert fuzzy_match("1516panic", "panic 1516").matches


class TestTrigrams:
    def test_padded_lowercase(self) -> None:
        assert trigrams("Ab") == {"  a", " ab", "ab "}


class TestRankCandidates:
    def test_empty_query_keeps_order(self) -> None:
        assert rank_candidates(["c", "b", "a"], "", ident, 2) == ["c", "b"]

    def test_zero_limit(self) -> None:
        assert rank_candidates(["a"], "a", ident, 0) == []

    def test_best_match_first(self) -> None:
        items = ["frying eggs when panicking", "panic when frying eggs", "nothing"]
        assert rank_candidates(items, "panic", ident, 5)[0] == "panic when frying eggs"

    def test_every_token_must_match(self) -> None:
        items = ["panic eggs", "panic only", "eggs only"]
        assert rank_candidates(items, "panic eggs", ident, 1) == ["panic eggs"]

    def test_trigram_fill(self) -> None:
        items = ["enterprise leak", "lonely", "cardio"]
        ranked = rank_candidates(items, "leaky", ident, 3)
        # "lonely" shares only the leading "l"; "cardio" shares nothing
        assert ranked == ["enterprise leak", "lonely"]

    def test_ties_keep_original_order(self) -> None:
        assert rank_candidates(["ab", "ab", "ab"], "ab", lambda s: s, 3) == ["ab", "ab", "ab"]

    def test_get_text_is_used(self) -> None:
        items = [{"t": "zzz"}, {"t": "match"}]
        assert rank_candidates(items, "mat", lambda d: d["t"], 1) == [{"t": "match"}]
