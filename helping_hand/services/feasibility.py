"""
Category and template feasibility checks.

A category is skipped for the week when the user clearly cannot fit it in,
unless it speaks one of the partner's love languages.
"""
from typing import Iterable, List

from helping_hand.models.context import WeeklyContext
from helping_hand.models.status import AvailableTimeLevel, CapacityLevel, UserStatus
from helping_hand.models.template import CapacityRequirement, Category, LoveLanguage, Template


def is_constrained_out(category: Category, user_status: UserStatus, time_threshold: int = 30) -> bool:
    """True when the week's time or capacity rules the category out."""
    if (user_status.available_time_level == AvailableTimeLevel.VERY_LIMITED
            and category.min_time_minutes > time_threshold):
        return True
    if (user_status.emotional_capacity == CapacityLevel.VERY_LOW
            and category.capacity_required == CapacityRequirement.HIGH):
        return True
    return False


def is_category_feasible(
    category: Category,
    user_status: UserStatus,
    partner_languages: Iterable[LoveLanguage] = (),
    time_threshold: int = 30
) -> bool:
    """
    Decide whether a category can be attempted this week.

    Args:
        category: Category to check
        user_status: User's weekly status
        partner_languages: Partner's combined love language tags
        time_threshold: Minimum category time (minutes) a very limited week tolerates

    Returns:
        True if the category is feasible or serves a partner love language
    """
    if set(category.love_language_tags) & set(partner_languages):
        return True
    return not is_constrained_out(category, user_status, time_threshold)


def filter_feasible_templates(
    category: Category,
    templates: List[Template],
    context: WeeklyContext,
    time_threshold: int = 30
) -> List[Template]:
    """
    Keep the templates of a category that may be suggested this week.

    When the category passes on its own every template is kept. When it is
    constrained out, only templates tagged with one of the partner's love
    languages survive.
    """
    partner_languages = set(context.partner_love_languages)
    if set(category.love_language_tags) & partner_languages:
        return list(templates)
    if not is_constrained_out(category, context.user_status, time_threshold):
        return list(templates)
    return [t for t in templates if set(t.love_language_tags) & partner_languages]
