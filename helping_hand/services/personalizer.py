"""
Personalization of selected templates into weekly suggestions.
"""
import re
from typing import Any, Dict, List, Optional

from helping_hand.models.context import WeeklyContext
from helping_hand.models.profile import PartnerHint
from helping_hand.models.status import AvailableTimeLevel, CurrentChallenge, WorkScheduleType
from helping_hand.models.suggestion import SourceType, Suggestion
from helping_hand.models.template import (
    BestTiming,
    Category,
    EffortLevel,
    LoveLanguage,
    Template,
    TemplateStep,
)
from helping_hand.services.constants import (
    ACTIVITY_PLACEHOLDERS,
    BUDGET_TIERS,
    EFFORT_SCORES,
    FAMILY_ISSUE_CLAUSE,
    FINANCIAL_STRESS_CLAUSE,
    FINANCIAL_STRESS_COSTLY_CLAUSE,
    GIFT_HINT_TYPES,
    HEALTH_CONCERN_CLAUSE,
    LATE_WORK_KEYWORDS,
    LOVE_LANGUAGE_LABELS,
    LOW_ENERGY_CLAUSE,
    MAX_PERSONALIZED_ACTIVITIES,
    MOVING_CLAUSE,
    STRESS_CLAUSE,
    STUDYING_CLAUSE,
    TIME_CONSTRAINED_CLAUSE,
    TIME_FIT_TIERS,
    TRAVEL_CLAUSE,
    VERY_LIMITED_MAX_STEPS,
    VERY_LIMITED_TIME_CAP_MINUTES,
    WORK_DEADLINE_CLAUSE,
)
from helping_hand.services.scoring import (
    ScoredCandidate,
    is_gift_template,
    matched_activities,
    template_cost_tier,
)
from helping_hand.services.utils import contains_keyword

_PARTNER_PATTERN = re.compile(r"\b(?:your|their)\s+partner\b", re.IGNORECASE)
_TIME_CONSTRAINED = (AvailableTimeLevel.VERY_LIMITED, AvailableTimeLevel.LIMITED)
_LIGHT_EFFORT = EFFORT_SCORES[EffortLevel.LOW]


def substitute_partner_name(text: str, context: WeeklyContext) -> str:
    """Replace "your partner" style references with the partner's name."""
    if not context.has_partner_name:
        return text
    return _PARTNER_PATTERN.sub(lambda _: context.partner_name, text)


def substitute_activities(text: str, activities: List[str]) -> str:
    """Replace generic activity phrases with up to two favorite activities."""
    chosen = [a for a in activities if a][:MAX_PERSONALIZED_ACTIVITIES]
    if not chosen:
        return text
    replacement = "activities like " + " or ".join(chosen)
    for placeholder in ACTIVITY_PLACEHOLDERS:
        text = re.sub(re.escape(placeholder), lambda _: replacement, text, flags=re.IGNORECASE)
    return text


def adjust_timing(template: Template, context: WeeklyContext) -> BestTiming:
    """Pick a concrete time of day for templates that work any time."""
    if template.preferred_timing != BestTiming.ANY:
        return template.preferred_timing

    status = context.user_status
    if status.work_schedule_type == WorkScheduleType.FULL_TIME:
        if status.notes and contains_keyword(status.notes, LATE_WORK_KEYWORDS):
            return BestTiming.MORNING
        return BestTiming.EVENING
    if status.work_schedule_type in (WorkScheduleType.STUDENT, WorkScheduleType.PART_TIME):
        return BestTiming.AFTERNOON
    return BestTiming.ANY


def find_gift_hint(template: Template, hints: List[PartnerHint]) -> Optional[PartnerHint]:
    if not is_gift_template(template):
        return None
    for hint in hints:
        if hint.hint_type.value in GIFT_HINT_TYPES:
            return hint
    return None


def context_clauses(template: Template, context: WeeklyContext) -> List[str]:
    """Sentences appended to the description for this week's circumstances."""
    status = context.user_status
    light = EFFORT_SCORES[template.effort_level] <= _LIGHT_EFFORT
    clauses = []

    if status.is_stressed and light:
        clauses.append(STRESS_CLAUSE)
    elif status.is_low_energy and light:
        clauses.append(LOW_ENERGY_CLAUSE)

    if status.has_challenge(CurrentChallenge.WORK_DEADLINE) and template.supports(LoveLanguage.ACTS):
        clauses.append(WORK_DEADLINE_CLAUSE)
    if status.has_challenge(CurrentChallenge.FAMILY_ISSUE) and template.supports(LoveLanguage.WORDS):
        clauses.append(FAMILY_ISSUE_CLAUSE)
    if status.has_challenge(CurrentChallenge.TRAVEL) and template.supports(LoveLanguage.WORDS):
        clauses.append(TRAVEL_CLAUSE)
    if status.has_challenge(CurrentChallenge.HEALTH_CONCERN):
        clauses.append(HEALTH_CONCERN_CLAUSE)
    if status.has_challenge(CurrentChallenge.FINANCIAL_STRESS):
        if template_cost_tier(template) == BUDGET_TIERS["high"]:
            clauses.append(FINANCIAL_STRESS_COSTLY_CLAUSE)
        else:
            clauses.append(FINANCIAL_STRESS_CLAUSE)
    if status.has_challenge(CurrentChallenge.MOVING):
        clauses.append(MOVING_CLAUSE)
    if status.has_challenge(CurrentChallenge.STUDYING):
        clauses.append(STUDYING_CLAUSE)

    if status.available_time_level in _TIME_CONSTRAINED:
        _, ceiling = TIME_FIT_TIERS[status.available_time_level]
        if template.time_estimate_minutes <= ceiling:
            clauses.append(TIME_CONSTRAINED_CLAUSE)
    return clauses


def align_love_languages(template: Template, context: WeeklyContext) -> List[LoveLanguage]:
    """Template tags, with the ones the partner speaks listed first."""
    partner_first = [lang for lang in context.partner_love_languages if template.supports(lang)]
    rest = [lang for lang in template.love_language_tags if lang not in partner_first]
    return partner_first + rest


def _readable(value: str) -> str:
    return value.replace("_", " ")


def build_rationale(candidate: ScoredCandidate, minutes: int) -> str:
    """
    Explain why a suggestion was picked.

    Combines the template's own rationale with whichever of love language,
    time, energy and activity fit apply; falls back to a generic fit statement.
    """
    template = candidate.template
    context = candidate.context
    status = context.user_status
    breakdown = candidate.breakdown
    name = context.partner_name
    parts = []

    if breakdown.love_language_match:
        language = next(
            (lang for lang in context.partner_love_languages if template.supports(lang)), None
        )
        if language:
            parts.append(f"It speaks to {name}'s love language of {LOVE_LANGUAGE_LABELS[language]}.")

    base, _ = TIME_FIT_TIERS[status.available_time_level]
    if status.available_time_level in _TIME_CONSTRAINED and breakdown.time_fit == base:
        parts.append(
            f"At about {minutes} minutes it fits your "
            f"{_readable(status.available_time_level.value)} time this week."
        )

    if (status.is_stressed or status.is_low_energy) and EFFORT_SCORES[template.effort_level] <= _LIGHT_EFFORT:
        parts.append("It asks very little energy during a demanding week.")

    activities = matched_activities(template, context.partner_activities)
    if activities:
        parts.append(f"It ties into {activities[0]}, something {name} enjoys.")

    if not parts:
        parts.append(
            f"This fits your {_readable(status.available_time_level.value)} available time "
            f"and {_readable(status.emotional_capacity.value)} emotional capacity."
        )
    return " ".join([template.rationale, *parts]).strip()


def _based_on_factors(candidate: ScoredCandidate) -> Dict[str, Any]:
    context = candidate.context
    status = context.user_status
    breakdown = candidate.breakdown
    return {
        "template_title": candidate.template.title,
        "relevance_score": candidate.score,
        "score_breakdown": {
            "situational": round(breakdown.situational, 2),
            "profile": round(breakdown.profile, 2),
            "relationship": round(breakdown.relationship, 2),
            "variety": round(breakdown.variety, 2),
        },
        "love_language_match": breakdown.love_language_match,
        "user_capacity": status.emotional_capacity.value,
        "available_time": status.available_time_level.value,
        "work_schedule": status.work_schedule_type.value,
        "stress_level": status.stress_level.value,
        "energy_level": status.energy_level.value,
        "challenges": [challenge.value for challenge in status.current_challenges],
        "partner_love_languages": [lang.value for lang in context.partner_love_languages],
        "partner_activities": context.partner_activities,
        "has_partner_hints": bool(context.partner_hints),
    }


def personalize(candidate: ScoredCandidate, category: Category) -> Suggestion:
    """
    Turn a selected template into a suggestion for this user and week.

    Never changes the effort level or category, and only reorders the
    template's own love language tags.

    Args:
        candidate: Selected, scored template
        category: Category the template belongs to

    Returns:
        Unsaved Suggestion
    """
    template = candidate.template
    context = candidate.context
    status = context.user_status
    activities = context.partner_activities

    def rewrite(text: str) -> str:
        return substitute_partner_name(substitute_activities(text, activities), context)

    description = rewrite(template.description)
    clauses = context_clauses(template, context)

    hint = find_gift_hint(template, context.partner_hints)
    if hint:
        speaker = context.partner_name[0].upper() + context.partner_name[1:]
        clauses.append(f'{speaker} mentioned they like "{hint.hint_text}" - this could align with that.')
    if clauses:
        description = " ".join([description, *clauses])

    steps = [
        TemplateStep(
            step=step.step,
            action=rewrite(step.action),
            tip=step.tip,
            estimated_minutes=step.estimated_minutes
        )
        for step in template.steps
    ]
    minutes = template.time_estimate_minutes
    if status.available_time_level == AvailableTimeLevel.VERY_LIMITED:
        minutes = min(minutes, VERY_LIMITED_TIME_CAP_MINUTES)
        steps = steps[:VERY_LIMITED_MAX_STEPS]

    alignment = align_love_languages(template, context)
    speaks_partner_language = any(lang in context.partner_love_languages for lang in alignment)

    return Suggestion(
        user_id=context.user_id,
        relationship_id=context.relationship_id,
        week_start_date=context.week_start_date,
        category_id=category.id,
        source_type=SourceType.TEMPLATE,
        title=rewrite(template.title),
        description=description,
        detailed_steps=steps,
        time_estimate_minutes=minutes,
        effort_level=template.effort_level,
        best_timing=adjust_timing(template, context),
        love_language_alignment=alignment,
        rationale=build_rationale(candidate, minutes),
        based_on_factors=_based_on_factors(candidate),
        partner_hint=hint.hint_text if hint else None,
        partner_preference_match=speaks_partner_language or hint is not None,
        confidence_score=round(candidate.score / 100, 2),
        generated_by="template"
    )
