"""
Tests for variety-aware selection.
"""
import random
from collections import Counter

from helping_hand.services.scoring import ScoreBreakdown, ScoredCandidate, score_templates
from helping_hand.services.selection import eligible_candidates, rank_candidates, select_templates


def candidate(make_template, context, title, score):
    return ScoredCandidate(
        template=make_template(title),
        score=score,
        context=context,
        breakdown=ScoreBreakdown(situational=score, profile=0, relationship=0, variety=0)
    )


def titles(candidates):
    return [c.template.title for c in candidates]


class TestEligibleCandidates:
    """Deterministic eligibility."""

    def test_ranked_by_score_then_title(self, make_context, make_template):
        context = make_context()
        pool = [
            candidate(make_template, context, "b", 50),
            candidate(make_template, context, "a", 50),
            candidate(make_template, context, "c", 70),
        ]
        assert titles(rank_candidates(pool)) == ["c", "a", "b"]

    def test_floor_filters_when_enough_remain(self, make_context, make_template):
        context = make_context()
        pool = [candidate(make_template, context, str(i), score) for i, score in enumerate([5, 20, 30, 40])]
        assert titles(eligible_candidates(pool, k=3, relevance_floor=10)) == ["3", "2", "1"]

    def test_widens_below_floor_when_too_few(self, make_context, make_template):
        context = make_context()
        pool = [candidate(make_template, context, str(i), score) for i, score in enumerate([5, 8, 30])]
        assert titles(eligible_candidates(pool, k=3, relevance_floor=10)) == ["2", "1", "0"]

    def test_thin_pool_returns_what_exists(self, make_context, make_template):
        context = make_context()
        pool = [candidate(make_template, context, "only", 3)]
        assert titles(eligible_candidates(pool, k=3)) == ["only"]
        assert eligible_candidates([], k=3) == []

    def test_same_context_same_eligible_set(self, make_context, make_template):
        context = make_context()
        templates = [make_template(f"Action {i}", time_estimate_minutes=5 + i * 10) for i in range(8)]
        first = eligible_candidates(score_templates(templates, context))
        second = eligible_candidates(score_templates(templates, context))
        assert titles(first) == titles(second)


class TestSelectTemplates:
    """Randomized, variety-aware draw."""

    def test_selects_k(self, make_context, make_template):
        context = make_context()
        pool = [candidate(make_template, context, f"t{i}", 50 + i) for i in range(10)]
        assert len(select_templates(pool, k=3, rng=random.Random(1))) == 3

    def test_selects_min_k_pool(self, make_context, make_template):
        context = make_context()
        pool = [candidate(make_template, context, f"t{i}", 50) for i in range(2)]
        assert len(select_templates(pool, k=3, rng=random.Random(1))) == 2
        assert select_templates([], k=3, rng=random.Random(1)) == []

    def test_seeded_selection_is_reproducible(self, make_context, make_template):
        context = make_context()
        pool = [candidate(make_template, context, f"t{i}", 50 + i) for i in range(20)]
        first = select_templates(pool, k=3, rng=random.Random(42))
        second = select_templates(pool, k=3, rng=random.Random(42))
        assert titles(first) == titles(second)

    def test_draws_only_from_top_pool(self, make_context, make_template):
        context = make_context()
        pool = [candidate(make_template, context, f"t{i:02d}", 100 - i) for i in range(30)]
        top = {f"t{i:02d}" for i in range(5)}
        for seed in range(20):
            selected = select_templates(pool, k=3, pool_size=5, rng=random.Random(seed))
            assert set(titles(selected)) <= top

    def test_prefers_templates_unused_last_week(self, make_context, make_template):
        context = make_context(prior_week_suggestions=["t0", "t1", "t2"])
        pool = [candidate(make_template, context, f"t{i}", 90 - i) for i in range(6)]
        for seed in range(20):
            selected = select_templates(pool, k=3, rng=random.Random(seed))
            assert set(titles(selected)) == {"t3", "t4", "t5"}

    def test_falls_back_to_used_templates(self, make_context, make_template):
        context = make_context(prior_week_suggestions=["t0", "t1"])
        pool = [candidate(make_template, context, f"t{i}", 90 - i) for i in range(3)]
        selected = select_templates(pool, k=3, rng=random.Random(3))
        assert titles(selected)[0] == "t2"
        assert set(titles(selected)) == {"t0", "t1", "t2"}

    def test_variety_over_ten_weeks(self, make_context, make_template):
        """Repetition is lower than always taking the highest scores."""
        rng = random.Random(7)
        scores = {f"Action {i:02d}": 95 - i for i in range(30)}

        def run(pick):
            previous, counts, repeats = [], Counter(), 0
            for _ in range(10):
                context = make_context(prior_week_suggestions=previous)
                pool = [candidate(make_template, context, title, score) for title, score in scores.items()]
                chosen = titles(pick(pool))
                repeats += len(set(chosen) & set(previous))
                counts.update(chosen)
                previous = chosen
            return repeats / 27, max(counts.values())

        greedy_rate, greedy_max = run(lambda pool: rank_candidates(pool)[:3])
        variety_rate, variety_max = run(lambda pool: select_templates(pool, k=3, rng=rng))

        assert greedy_rate == 1.0
        assert greedy_max == 10
        assert variety_rate < greedy_rate
        assert variety_max <= 5
