"""
Variety-aware template selection.

Eligibility is deterministic; the final draw is randomized through an
injected random.Random so exposure spreads across the template pool over
the weeks while tests can seed it.
"""
import random
from typing import List, Optional

from helping_hand.services.scoring import ScoredCandidate


def rank_candidates(candidates: List[ScoredCandidate]) -> List[ScoredCandidate]:
    """Sort by score descending, then title for a stable order."""
    return sorted(candidates, key=lambda c: (-c.score, c.template.title.lower()))


def eligible_candidates(
    candidates: List[ScoredCandidate],
    k: int = 3,
    relevance_floor: float = 10
) -> List[ScoredCandidate]:
    """
    Candidates that qualify for selection, best first.

    Uses the candidates at or above the relevance floor; when fewer than k
    qualify, widens to every scored candidate. Never invents candidates, so a
    thin pool simply returns what it has.

    Args:
        candidates: Scored templates of one category
        k: Suggestions wanted for the category
        relevance_floor: Minimum score for the first pass

    Returns:
        Ranked list of qualifying candidates
    """
    ranked = rank_candidates(candidates)
    above_floor = [c for c in ranked if c.score >= relevance_floor]
    if len(above_floor) >= k:
        return above_floor
    return ranked


def select_templates(
    candidates: List[ScoredCandidate],
    k: int = 3,
    relevance_floor: float = 10,
    pool_size: int = 15,
    rng: Optional[random.Random] = None
) -> List[ScoredCandidate]:
    """
    Pick up to k candidates, preferring templates not suggested last week.

    The top pool_size eligible candidates are split into unused and used
    last week; each part is shuffled and unused ones are taken first.

    Args:
        candidates: Scored templates of one category
        k: Suggestions wanted for the category
        relevance_floor: Minimum score for the first eligibility pass
        pool_size: Number of top candidates to draw from
        rng: Random source; a fresh unseeded one when omitted

    Returns:
        At most k candidates, min(k, len(candidates)) when any exist
    """
    rng = rng or random.Random()
    pool = eligible_candidates(candidates, k, relevance_floor)[:max(pool_size, k)]

    unused = [c for c in pool if not c.context.was_suggested_last_week(c.template.title)]
    used = [c for c in pool if c.context.was_suggested_last_week(c.template.title)]
    rng.shuffle(unused)
    rng.shuffle(used)

    return (unused + used)[:k]
