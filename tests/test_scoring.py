import pytest

from novellize.db.schemas import Novel, NovelPreference
from novellize.services.scoring import ScoringWeights, rank_novels, score_novel

from conftest import make_novel


def novel(**fields) -> Novel:
    base = make_novel(
        "n1", "Some Novel",
        genres=["Fantasy", "Action"], tags=["magic", "academy"],
        rating=4.2, seriesStatus="ONGOING", chapterType="Web Novel",
    )
    base.update(fields)
    return Novel.model_validate(base)


def prefs(**fields) -> NovelPreference:
    return NovelPreference.model_validate(fields)


def test_empty_preferences_score_zero():
    assert score_novel(novel(), NovelPreference()) == 0


def test_score_is_deterministic():
    n = novel()
    p = prefs(genres=["fantasy"], tags=["magic", "harem"], minRating=4)
    assert score_novel(n, p) == score_novel(n, p)


def test_full_genre_match_gets_full_weight():
    assert score_novel(novel(), prefs(genres=["fantasy"])) == pytest.approx(3.0)


def test_genre_fraction_counts_preferences_not_novel_genres():
    # One of two preferred genres found
    assert score_novel(novel(), prefs(genres=["fantasy", "horror"])) == pytest.approx(1.5)


def test_duplicate_novel_genres_do_not_inflate_score():
    n = novel(genres=[{"name": "Fantasy"}, {"name": "Dark Fantasy"}])
    assert score_novel(n, prefs(genres=["fantasy"])) == pytest.approx(3.0)


def test_genre_match_is_case_insensitive_substring():
    n = novel(genres=[{"name": "Xuanhuan Fantasy"}])
    assert score_novel(n, prefs(genres=["FANTASY"])) == pytest.approx(3.0)


def test_genre_overlap_is_monotonic():
    p = prefs(genres=["fantasy", "action", "comedy"])
    one = novel(genres=[{"name": "Fantasy"}])
    two = novel(genres=[{"name": "Fantasy"}, {"name": "Action"}])
    three = novel(genres=[{"name": "Fantasy"}, {"name": "Action"}, {"name": "Comedy"}])
    assert score_novel(one, p) <= score_novel(two, p) <= score_novel(three, p)


def test_tag_fraction():
    assert score_novel(novel(), prefs(tags=["magic", "mecha"])) == pytest.approx(1.0)


def test_empty_preference_list_uses_denominator_floor():
    assert score_novel(novel(), prefs(genres=[], tags=[])) == 0


def test_blank_tokens_never_match():
    assert score_novel(novel(), prefs(genres=["  "], excludedTags=[""])) == 0


def test_status_and_type_exact_match():
    assert score_novel(novel(), prefs(status="ONGOING")) == pytest.approx(1.5)
    assert score_novel(novel(), prefs(status="ongoing")) == 0
    assert score_novel(novel(), prefs(type="Web Novel")) == pytest.approx(1.0)


def test_type_falls_back_to_generic_type_field():
    n = novel(chapterType=None, type="Light Novel")
    assert score_novel(n, prefs(type="Light Novel")) == pytest.approx(1.0)


def test_rating_bonus_is_flat():
    assert score_novel(novel(rating=4.0), prefs(minRating=4.0)) == pytest.approx(1.0)
    assert score_novel(novel(rating=5.0), prefs(minRating=4.0)) == pytest.approx(1.0)
    assert score_novel(novel(rating=3.9), prefs(minRating=4.0)) == 0


def test_missing_rating_gets_no_bonus():
    assert score_novel(novel(rating=None), prefs(minRating=1.0)) == 0


@pytest.mark.parametrize("rating", ["N/A", "", {"avg": 4.8}, True])
def test_unparseable_rating_gets_no_bonus(rating):
    assert score_novel(novel(rating=rating), prefs(minRating=1.0)) == 0


def test_numeric_string_rating_counts():
    assert score_novel(novel(rating="4.5"), prefs(minRating=4.0)) == pytest.approx(1.0)


def test_odd_shaped_fields_still_score_on_genres():
    n = novel(seriesStatus={"label": "ONGOING"}, chapterType=["Web Novel"], tags=["magic", None, 7])
    assert score_novel(n, prefs(genres=["fantasy"], status="ONGOING", type="Web Novel")) == pytest.approx(3.0)
    assert score_novel(n, prefs(tags=["7"])) == pytest.approx(2.0)


def test_excluded_genre_costs_at_least_penalty():
    base = prefs(genres=["action"])
    excluded = prefs(genres=["action"], excludedGenres=["fantasy"])
    assert score_novel(novel(), base) - score_novel(novel(), excluded) >= 5.0


def test_genre_and_tag_penalties_stack():
    p = prefs(excludedGenres=["fantasy"], excludedTags=["academy"])
    assert score_novel(novel(), p) == pytest.approx(-10.0)


def test_custom_weights():
    weights = ScoringWeights(genre=10.0, exclusion_penalty=1.0)
    p = prefs(genres=["fantasy"], excludedTags=["magic"])
    assert score_novel(novel(), p, weights) == pytest.approx(9.0)


def test_scenario_fantasy_with_rating_floor(novel_a, novel_b):
    a, b = Novel.model_validate(novel_a), Novel.model_validate(novel_b)
    p = prefs(genres=["fantasy"], minRating=4.0)

    assert score_novel(a, p) == pytest.approx(4.0)
    assert score_novel(b, p) == 0
    assert [n.novel_id for n, _ in rank_novels([a, b], p, limit=5)] == ["a1"]


def test_scenario_excluded_genre_drops_novel(novel_a):
    a = Novel.model_validate(novel_a)
    p = prefs(excludedGenres=["fantasy"])
    assert score_novel(a, p) == pytest.approx(-5.0)
    assert rank_novels([a], p, limit=5) == []


def test_rank_sorts_descending_and_respects_limit():
    novels = [
        novel(novelId="low", genres=[{"name": "Fantasy"}], tags=[]),
        novel(novelId="high", genres=[{"name": "Fantasy"}], tags=["magic"]),
        novel(novelId="none", genres=[{"name": "Horror"}], tags=[]),
        novel(novelId="mid", genres=[{"name": "Fantasy"}], tags=["magic"], rating=1.0),
    ]
    p = prefs(genres=["fantasy"], tags=["magic"])

    ranked = rank_novels(novels, p, limit=2)
    assert len(ranked) == 2
    scores = [score for _, score in ranked]
    assert scores == sorted(scores, reverse=True)
    # Ties keep catalog order
    assert [n.novel_id for n, _ in ranked] == ["high", "mid"]


def test_rank_with_zero_limit_is_empty():
    assert rank_novels([novel()], prefs(genres=["fantasy"]), limit=0) == []
