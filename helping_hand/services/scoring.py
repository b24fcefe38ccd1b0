"""
Relevance scoring of templates against a weekly context.

The score is the sum of four groups, each normalized to its share of 100:
situational match (40), profile match (35), relationship context (15) and
weekly variety (10). Scoring is pure and deterministic.
"""
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from helping_hand.models.context import WeeklyContext
from helping_hand.models.profile import Profile
from helping_hand.models.status import AvailableTimeLevel, CurrentChallenge, UserStatus
from helping_hand.models.template import EffortLevel, LoveLanguage, Template
from helping_hand.services.constants import (
    BUDGET_TIERS,
    CAPACITY_SCORES,
    CHALLENGE_BONUS,
    CHALLENGE_PENALTY,
    COMMUNICATION_STYLE_KEYWORDS,
    COSTLY_KEYWORDS,
    DATE_FREQUENCY_BASE_POINTS,
    DATE_STYLE_KEYWORDS,
    DEFAULT_TIMING_FIT,
    EFFORT_MISMATCH_PENALTY,
    EFFORT_SCORES,
    ENERGY_SCORES,
    GO_OUT_KEYWORDS,
    HIGH_BUDGET_MARKERS,
    HOME_KEYWORDS,
    LOVE_LANGUAGE_POINTS,
    LOW_BUDGET_MARKERS,
    LOW_COST_KEYWORDS,
    LOW_DATE_FREQUENCY_VALUES,
    PLANNED_KEYWORDS,
    PROFILE_MATCH_POINTS,
    PROFILE_RAW_MAX,
    PROFILE_WEIGHT,
    RELATIONSHIP_MATCH_POINTS,
    RELATIONSHIP_NEUTRAL_POINTS,
    RELATIONSHIP_RAW_MAX,
    RELATIONSHIP_WEIGHT,
    SCHEDULE_TIMING_FIT,
    SITUATIONAL_RAW_MAX,
    SITUATIONAL_WEIGHT,
    SPONTANEOUS_KEYWORDS,
    SUB_SCORE_MAX,
    TIME_FIT_TIERS,
    TIME_OVERRUN_PENALTY,
    TRAVEL_TIME_LIMIT_MINUTES,
    VARIETY_WEIGHT,
)
from helping_hand.services.utils import contains_keyword


@dataclass(frozen=True)
class ScoreBreakdown:
    """Per-group contributions of a relevance score, already normalized."""
    situational: float
    profile: float
    relationship: float
    variety: float
    time_fit: int = 0
    love_language_match: Optional[str] = None
    activity_match: bool = False
    details: Dict[str, float] = field(default_factory=dict)

    @property
    def total(self) -> float:
        raw = self.situational + self.profile + self.relationship + self.variety
        return round(min(max(raw, 0.0), 100.0), 2)


@dataclass(frozen=True)
class ScoredCandidate:
    """Template with its relevance score for one weekly context."""
    template: Template
    score: float
    context: WeeklyContext
    breakdown: ScoreBreakdown


def time_fit_score(time_level: AvailableTimeLevel, time_estimate_minutes: int) -> int:
    """
    Time-fit sub-score (0-60).

    Example:
        >>> time_fit_score(AvailableTimeLevel.LIMITED, 35)
        10
    """
    base, ceiling = TIME_FIT_TIERS[time_level]
    overrun = max(0, time_estimate_minutes - ceiling)
    return max(0, base - TIME_OVERRUN_PENALTY * overrun)


def ordinal_fit_score(effort: EffortLevel, opposing_level: int) -> int:
    """Full marks when effort is within the opposing level, minus 3 per step over."""
    mismatch = EFFORT_SCORES[effort] - opposing_level
    if mismatch <= 0:
        return SUB_SCORE_MAX
    return max(0, SUB_SCORE_MAX - EFFORT_MISMATCH_PENALTY * mismatch)


def timing_fit_score(template: Template, user_status: UserStatus) -> int:
    schedule_fit = SCHEDULE_TIMING_FIT.get(user_status.work_schedule_type, {})
    return schedule_fit.get(template.preferred_timing, DEFAULT_TIMING_FIT)


def is_gift_template(template: Template) -> bool:
    return template.supports(LoveLanguage.GIFTS) or template.category_name == "thoughtful_gifts"


def template_cost_tier(template: Template) -> int:
    """Rough cost tier of a template from its wording: 1 low, 2 moderate, 3 high."""
    text = template.searchable_text
    if contains_keyword(text, COSTLY_KEYWORDS):
        return BUDGET_TIERS["high"]
    if contains_keyword(text, LOW_COST_KEYWORDS):
        return BUDGET_TIERS["low"]
    return BUDGET_TIERS["moderate"]


def budget_tier(gift_budget: Optional[str]) -> int:
    """
    Map a free-form gift budget answer to a tier.

    Accepts tier words ("low", "splurge") or amounts ("$20", "under 50").
    """
    if not gift_budget:
        return BUDGET_TIERS["moderate"]
    text = gift_budget.lower()
    amounts = [int(value) for value in re.findall(r'\d+', text)]
    if amounts:
        amount = max(amounts)
        if amount <= 25:
            return BUDGET_TIERS["low"]
        if amount <= 100:
            return BUDGET_TIERS["moderate"]
        return BUDGET_TIERS["high"]
    if contains_keyword(text, LOW_BUDGET_MARKERS):
        return BUDGET_TIERS["low"]
    if contains_keyword(text, HIGH_BUDGET_MARKERS):
        return BUDGET_TIERS["high"]
    return BUDGET_TIERS["moderate"]


def challenge_adjustment(template: Template, user_status: UserStatus) -> int:
    """Bonus or penalty from the user's named challenges this week."""
    adjustment = 0
    if user_status.has_challenge(CurrentChallenge.WORK_DEADLINE):
        if template.effort_level == EffortLevel.MINIMAL:
            adjustment += CHALLENGE_BONUS
        elif template.effort_level == EffortLevel.HIGH:
            adjustment -= CHALLENGE_BONUS
    if user_status.has_challenge(CurrentChallenge.FAMILY_ISSUE) and template.supports(LoveLanguage.WORDS):
        adjustment += CHALLENGE_BONUS
    if (user_status.has_challenge(CurrentChallenge.FINANCIAL_STRESS)
            and is_gift_template(template)
            and template_cost_tier(template) == BUDGET_TIERS["high"]):
        adjustment -= CHALLENGE_PENALTY
    if (user_status.has_challenge(CurrentChallenge.TRAVEL)
            and template.time_estimate_minutes > TRAVEL_TIME_LIMIT_MINUTES):
        adjustment -= CHALLENGE_PENALTY
    return adjustment


def love_language_match(template: Template, partner: Optional[Profile]) -> Optional[str]:
    """Strongest way the template matches the partner's love languages, if any."""
    if partner is None:
        return None
    if partner.love_language_primary and template.supports(partner.love_language_primary):
        return "primary"
    if partner.love_language_secondary and template.supports(partner.love_language_secondary):
        return "secondary"
    if any(template.supports(language) for language in partner.love_languages):
        return "listed"
    return None


def matched_activities(template: Template, activities: List[str]) -> List[str]:
    """Partner activities mentioned in the template text."""
    text = template.searchable_text
    return [activity for activity in activities if activity and contains_keyword(text, [activity])]


def _style_match(style: Optional[str], table: Dict[str, set], text: str) -> bool:
    if not style:
        return False
    style = style.lower()
    for name, keywords in table.items():
        if name in style and contains_keyword(text, keywords):
            return True
    return False


def _situational_raw(template: Template, user_status: UserStatus) -> Dict[str, int]:
    return {
        "time_fit": time_fit_score(user_status.available_time_level, template.time_estimate_minutes),
        "energy_fit": ordinal_fit_score(template.effort_level, ENERGY_SCORES[user_status.energy_level]),
        "capacity_fit": ordinal_fit_score(
            template.effort_level, CAPACITY_SCORES[user_status.emotional_capacity]
        ),
        "timing_fit": timing_fit_score(template, user_status),
        "challenges": challenge_adjustment(template, user_status),
    }


def _profile_raw(template: Template, partner: Optional[Profile], match: Optional[str], activity_hit: bool) -> int:
    raw = LOVE_LANGUAGE_POINTS.get(match, 0) if match else 0
    if activity_hit:
        raw += PROFILE_MATCH_POINTS
    if partner is None:
        return raw

    text = template.searchable_text
    if template.supports(LoveLanguage.QUALITY_TIME) and _style_match(partner.date_style, DATE_STYLE_KEYWORDS, text):
        raw += PROFILE_MATCH_POINTS
    if is_gift_template(template) and partner.gift_budget:
        if template_cost_tier(template) <= budget_tier(partner.gift_budget):
            raw += PROFILE_MATCH_POINTS
    if template.supports(LoveLanguage.WORDS) and _style_match(
            partner.communication_style, COMMUNICATION_STYLE_KEYWORDS, text):
        raw += PROFILE_MATCH_POINTS
    return raw


def _keyword_consistency(text: str, favored: set, opposed: set) -> int:
    if contains_keyword(text, favored):
        return RELATIONSHIP_MATCH_POINTS
    if contains_keyword(text, opposed):
        return 0
    return RELATIONSHIP_NEUTRAL_POINTS


def _relationship_raw(template: Template, context: WeeklyContext) -> int:
    text = template.searchable_text

    if context.relationship.living_together:
        living = _keyword_consistency(text, HOME_KEYWORDS, GO_OUT_KEYWORDS)
    else:
        living = _keyword_consistency(text, GO_OUT_KEYWORDS, HOME_KEYWORDS)

    frequencies = [
        profile.date_frequency.lower()
        for profile in (context.user_profile, context.partner_profile)
        if profile and profile.date_frequency
    ]
    low_frequency = any(value in LOW_DATE_FREQUENCY_VALUES for value in frequencies)
    if low_frequency and template.supports(LoveLanguage.QUALITY_TIME):
        frequency = RELATIONSHIP_MATCH_POINTS
    else:
        frequency = DATE_FREQUENCY_BASE_POINTS

    planning = RELATIONSHIP_NEUTRAL_POINTS
    style = context.user_profile.planning_style if context.user_profile else None
    if style:
        style = style.lower()
        if "spontan" in style:
            planning = _keyword_consistency(text, SPONTANEOUS_KEYWORDS, PLANNED_KEYWORDS)
        elif "plan" in style:
            planning = _keyword_consistency(text, PLANNED_KEYWORDS, SPONTANEOUS_KEYWORDS)

    return living + frequency + planning


def score_template(template: Template, context: WeeklyContext, variety_floor: float = 2) -> ScoredCandidate:
    """
    Score a template against the weekly context.

    Args:
        template: Candidate template
        context: Weekly context of the request
        variety_floor: Variety score given to a title suggested last week

    Returns:
        ScoredCandidate with the total score and its breakdown
    """
    situational_parts = _situational_raw(template, context.user_status)
    situational_raw = min(max(sum(situational_parts.values()), 0), SITUATIONAL_RAW_MAX)

    partner = context.partner_profile
    match = love_language_match(template, partner)
    activities = matched_activities(template, context.partner_activities)
    profile_raw = min(_profile_raw(template, partner, match, bool(activities)), PROFILE_RAW_MAX)

    relationship_raw = min(_relationship_raw(template, context), RELATIONSHIP_RAW_MAX)

    variety = variety_floor if context.was_suggested_last_week(template.title) else VARIETY_WEIGHT

    breakdown = ScoreBreakdown(
        situational=situational_raw * SITUATIONAL_WEIGHT / SITUATIONAL_RAW_MAX,
        profile=profile_raw * PROFILE_WEIGHT / PROFILE_RAW_MAX,
        relationship=relationship_raw * RELATIONSHIP_WEIGHT / RELATIONSHIP_RAW_MAX,
        variety=variety,
        time_fit=situational_parts["time_fit"],
        love_language_match=match,
        activity_match=bool(activities),
        details={key: float(value) for key, value in situational_parts.items()}
    )
    return ScoredCandidate(
        template=template,
        score=breakdown.total,
        context=context,
        breakdown=breakdown
    )


def score_templates(templates: List[Template], context: WeeklyContext, variety_floor: float = 2) -> List[ScoredCandidate]:
    return [score_template(template, context, variety_floor) for template in templates]
