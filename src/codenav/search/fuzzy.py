"""Fuzzy subsequence scoring for interactive symbol search.

A query matches a text only if all of its characters appear in the text, in
order, compared case-insensitively. Matches are then scored so that
consecutive runs and word-boundary starts dominate the raw character count:
short, boundary-aligned matches outrank long incidental ones.

Scoring per matched character:
    +1, or +10 plus a cumulative run bonus (+5 per consecutive hit) when the
        match is adjacent to the previous matched character (a match at
        index 0 counts as adjacent)
    +15 at text index 0, else +10 after a separator (_ - / .) or at a
        lowercase→uppercase transition
    +2 on an exact case match
Once per match: +max(0, 30 - len(text)) and +max(0, 20 - first_index).
"""

from __future__ import annotations

from dataclasses import dataclass

_SEPARATORS = frozenset("_-/.")

# Score components
_BASE_SCORE = 1
_CONSECUTIVE_SCORE = 10
_CONSECUTIVE_STEP = 5
_START_BONUS = 15
_BOUNDARY_BONUS = 10
_CASE_BONUS = 2
_LENGTH_BONUS_LIMIT = 30
_EARLY_BONUS_LIMIT = 20


@dataclass(frozen=True, slots=True)
class FuzzyMatch:
    """Result of scoring a query against a text.

    Attributes:
        score: Match score; 0 means no match.
        positions: Indices in the text that matched query characters.

    """

    score: int
    positions: tuple[int, ...] = ()

    @property
    def matched(self) -> bool:
        return self.score > 0


NO_MATCH = FuzzyMatch(score=0, positions=())


def fuzzy_score(query: str, text: str) -> FuzzyMatch:
    """Score query against text.

    Args:
        query: User-typed search string.
        text: Candidate name or path.

    Returns:
        FuzzyMatch; NO_MATCH when query is not a subsequence of text.

    """
    query_index = 0
    score = 0
    positions: list[int] = []
    last_match = -1
    run_bonus = 0

    # Compare per character: lowercasing may change the length of a string
    for i, char in enumerate(text):
        if query_index >= len(query):
            break
        if char.lower() != query[query_index].lower():
            continue

        # last_match starts at -1, so a hit at index 0 opens a run
        if last_match == i - 1:
            run_bonus += _CONSECUTIVE_STEP
            score += _CONSECUTIVE_SCORE + run_bonus
        else:
            run_bonus = 0
            score += _BASE_SCORE

        if i == 0:
            score += _START_BONUS
        elif _is_boundary(text[i - 1], text[i]):
            score += _BOUNDARY_BONUS

        if query[query_index] == text[i]:
            score += _CASE_BONUS

        positions.append(i)
        last_match = i
        query_index += 1

    if query_index != len(query):
        return NO_MATCH

    score += max(0, _LENGTH_BONUS_LIMIT - len(text))
    score += max(0, _EARLY_BONUS_LIMIT - (positions[0] if positions else 0))
    return FuzzyMatch(score=score, positions=tuple(positions))


def _is_boundary(previous: str, current: str) -> bool:
    if previous in _SEPARATORS:
        return True
    return previous.islower() and current.isupper()
