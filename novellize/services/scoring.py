"""Heuristic scoring of catalog novels against extracted preferences.

Everything here is pure: no I/O, no logging, same input gives the same
score. The weighted model is additive, with flat penalties for excluded
genres and tags:

    genre   3.0  x fraction of preferred genres found in the novel's genres
    tags    2.0  x fraction of preferred tags found in the novel's tags
    status  1.5  if seriesStatus equals the preferred status
    type    1.0  if chapterType (or type) equals the preferred type
    rating  1.0  if rating >= minRating

Matching is case-insensitive substring containment: a preferred token
matches when it occurs inside the novel's genre name or tag. A blank
token never matches: with plain substring containment an empty preference
would match every novel and an empty exclusion would penalize all of them.
"""

from dataclasses import dataclass
from typing import Iterable, Sequence

from novellize.db.schemas import Novel, NovelPreference


@dataclass(frozen=True)
class ScoringWeights:
    """Signal weights and exclusion penalty."""

    genre: float = 3.0
    tags: float = 2.0
    status: float = 1.5
    type: float = 1.0
    rating: float = 1.0
    exclusion_penalty: float = 5.0


DEFAULT_WEIGHTS = ScoringWeights()


def _matches(token: str, values: Iterable[str]) -> bool:
    """True if the token occurs (case-insensitive) inside any value."""
    needle = token.strip().lower()
    if not needle:
        return False
    return any(needle in value.lower() for value in values)


def _match_fraction(wanted: Sequence[str], values: Sequence[str]) -> float:
    """Fraction of wanted tokens matching at least one value."""
    matched = sum(1 for token in wanted if _matches(token, values))
    return matched / (len(wanted) or 1)


def _any_excluded(excluded: Sequence[str], values: Sequence[str]) -> bool:
    return any(_matches(token, values) for token in excluded)


def score_novel(
    novel: Novel,
    preferences: NovelPreference,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> float:
    """Score one novel. Unset preference fields contribute nothing."""
    genre_names = novel.genre_names
    tag_names = novel.tag_names
    score = 0.0

    if preferences.genres is not None:
        score += _match_fraction(preferences.genres, genre_names) * weights.genre

    if preferences.tags is not None:
        score += _match_fraction(preferences.tags, tag_names) * weights.tags

    if preferences.status and novel.status_value == preferences.status:
        score += weights.status

    if preferences.type and novel.classification == preferences.type:
        score += weights.type

    # minRating of 0 carries no signal; unparseable ratings get no bonus
    rating = novel.rating_value
    if preferences.min_rating and rating is not None and rating >= preferences.min_rating:
        score += weights.rating

    if preferences.excluded_genres and _any_excluded(preferences.excluded_genres, genre_names):
        score -= weights.exclusion_penalty

    if preferences.excluded_tags and _any_excluded(preferences.excluded_tags, tag_names):
        score -= weights.exclusion_penalty

    return score


def rank_novels(
    novels: Iterable[Novel],
    preferences: NovelPreference,
    limit: int,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> list[tuple[Novel, float]]:
    """Score, drop non-positive scores, sort descending and truncate.

    Ties keep catalog order.
    """
    scored = [(novel, score_novel(novel, preferences, weights)) for novel in novels]
    positive = [pair for pair in scored if pair[1] > 0]
    positive.sort(key=lambda pair: pair[1], reverse=True)
    return positive[:max(limit, 0)]
