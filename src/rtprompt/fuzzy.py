"""Fuzzy matching and closest-N ranking of candidate strings.

A query matches if all its characters appear in order (not necessarily
consecutive). Lower score = better match. Candidates that do not match
can still be ranked by how many character trigrams they share with the
query, so a closest-N lookup always has something to offer.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, TypeVar

T = TypeVar("T")

_WORD_BOUNDARY_RE = re.compile(r"[\s\-_./:#\[\]()]")
_ALPHA_NUM_RE = re.compile(r"^(?P<letters>[a-z]+)(?P<digits>[0-9]+)$")
_NUM_ALPHA_RE = re.compile(r"^(?P<digits>[0-9]+)(?P<letters>[a-z]+)$")


@dataclass
class FuzzyMatch:
    matches: bool
    score: float


def fuzzy_match(query: str, text: str) -> FuzzyMatch:
    query_lower = query.lower()
    text_lower = text.lower()

    def match_query(normalized_query: str) -> FuzzyMatch:
        if len(normalized_query) == 0:
            return FuzzyMatch(matches=True, score=0)

        if len(normalized_query) > len(text_lower):
            return FuzzyMatch(matches=False, score=0)

        query_index = 0
        score: float = 0
        last_match_index = -1
        consecutive_matches = 0

        for i, ch in enumerate(text_lower):
            if query_index >= len(normalized_query):
                break
            if ch != normalized_query[query_index]:
                continue

            is_word_boundary = i == 0 or bool(_WORD_BOUNDARY_RE.match(text_lower[i - 1]))

            if last_match_index == i - 1:
                consecutive_matches += 1
                score -= consecutive_matches * 5
            else:
                consecutive_matches = 0
                if last_match_index >= 0:
                    score += (i - last_match_index - 1) * 2

            if is_word_boundary:
                score -= 10

            score += i * 0.1

            last_match_index = i
            query_index += 1

        if query_index < len(normalized_query):
            return FuzzyMatch(matches=False, score=0)

        return FuzzyMatch(matches=True, score=score)

    primary_match = match_query(query_lower)
    if primary_match.matches:
        return primary_match

    # "abc123" also tries "123abc" and vice versa
    alpha_numeric_match = _ALPHA_NUM_RE.match(query_lower)
    numeric_alpha_match = _NUM_ALPHA_RE.match(query_lower)
    if alpha_numeric_match:
        swapped_query = alpha_numeric_match.group("digits") + alpha_numeric_match.group("letters")
    elif numeric_alpha_match:
        swapped_query = numeric_alpha_match.group("letters") + numeric_alpha_match.group("digits")
    else:
        return primary_match

    swapped_match = match_query(swapped_query)
    if not swapped_match.matches:
        return primary_match

    return FuzzyMatch(matches=True, score=swapped_match.score + 5)


def _match_tokens(query: str, text: str) -> FuzzyMatch:
    """All space-separated tokens of *query* must match; scores add up."""
    total: float = 0
    for token in query.split():
        match = fuzzy_match(token, text)
        if not match.matches:
            return FuzzyMatch(matches=False, score=0)
        total += match.score
    return FuzzyMatch(matches=True, score=total)


def trigrams(text: str) -> set[str]:
    """Character trigrams of *text* (lowercased, padded with spaces)."""
    padded = f"  {text.lower()} "
    return {padded[i : i + 3] for i in range(len(padded) - 2)}


def rank_candidates(
    items: list[T],
    query: str,
    get_text: Callable[[T], str],
    limit: int,
) -> list[T]:
    """Return up to *limit* items closest to *query*, best first.

    Items whose text fuzzy-matches every query token come first, ordered by
    score. Remaining slots are filled with items sharing the most trigrams
    with the query; items with no overlap at all are left out. Ties keep
    the original item order.
    """
    if limit <= 0:
        return []
    if not query.strip():
        return items[:limit]

    matched: list[tuple[float, int, T]] = []
    rest: list[tuple[int, T]] = []
    for index, item in enumerate(items):
        match = _match_tokens(query, get_text(item))
        if match.matches:
            matched.append((match.score, index, item))
        else:
            rest.append((index, item))

    matched.sort(key=lambda r: (r[0], r[1]))
    ranked = [item for _, _, item in matched[:limit]]
    if len(ranked) >= limit:
        return ranked

    query_grams = trigrams(query.strip())
    overlaps: list[tuple[int, int, T]] = []
    for index, item in rest:
        shared = len(query_grams & trigrams(get_text(item)))
        if shared:
            overlaps.append((-shared, index, item))
    overlaps.sort(key=lambda r: (r[0], r[1]))
    ranked.extend(item for _, _, item in overlaps[: limit - len(ranked)])
    return ranked
