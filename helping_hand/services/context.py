"""
Weekly context aggregation.

Collects the user's weekly status, relationship, both onboarding profiles,
partner status, partner hints and last week's suggestions into one immutable
WeeklyContext. Only the user's status and the relationship are required;
everything else degrades to an empty value when it cannot be read.
"""
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from helping_hand.models.context import WeeklyContext
from helping_hand.models.profile import PartnerHint, Profile, Relationship
from helping_hand.models.status import UserStatus
from helping_hand.services.exceptions import CollaboratorFetchError, MissingAssessmentError
from helping_hand.services.utils import normalize_love_language, normalize_love_languages
from helping_hand.utils.logging import GenerationEvent, GenerationEvents, logger

# Onboarding fields that raw records may nest under a group key
_NESTED_PROFILE_FIELDS = {
    "wants_needs": ("date_style", "planning_style", "date_frequency", "communication_style"),
    "preferences": ("gift_budget", "date_frequency", "favorite_activities"),
}


def profile_from_record(record: Optional[Dict[str, Any]]) -> Optional[Profile]:
    """
    Build a Profile from a raw onboarding record.

    Nested ``wants_needs`` and ``preferences`` groups are flattened (top-level
    values win) and love language display names are mapped to internal tags.

    Args:
        record: Raw onboarding record or None

    Returns:
        Profile, or None when there is no record
    """
    if not record:
        return None

    flat = dict(record)
    for group, fields in _NESTED_PROFILE_FIELDS.items():
        nested = record.get(group) or {}
        for field in fields:
            if flat.get(field) in (None, "", []) and nested.get(field) not in (None, ""):
                flat[field] = nested[field]

    activities = flat.get("favorite_activities") or []
    if isinstance(activities, str):
        activities = [item.strip() for item in activities.split(",")]

    return Profile(
        user_id=flat.get("user_id"),
        name=(flat.get("name") or "").strip() or None,
        love_language_primary=normalize_love_language(flat.get("love_language_primary")),
        love_language_secondary=normalize_love_language(flat.get("love_language_secondary")),
        love_languages=normalize_love_languages(flat.get("love_languages")),
        favorite_activities=[activity for activity in activities if activity],
        communication_style=flat.get("communication_style"),
        date_style=flat.get("date_style"),
        planning_style=flat.get("planning_style"),
        gift_budget=_as_text(flat.get("gift_budget")),
        date_frequency=flat.get("date_frequency"),
    )


def _as_text(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def previous_week(week_start_date: date) -> date:
    return week_start_date - timedelta(days=7)


async def build_weekly_context(
    user_id: str,
    relationship_id: str,
    week_start_date: date,
    *,
    status_store,
    relationship_store,
    profile_store,
    hint_store,
    suggestion_store,
    events: Optional[GenerationEvents] = None
) -> WeeklyContext:
    """
    Gather everything needed to score templates for one user and week.

    Args:
        user_id: User the suggestions are for
        relationship_id: Relationship the user belongs to
        week_start_date: Monday of the target week
        status_store: Provides get_status(user_id, week_start_date)
        relationship_store: Provides get_relationship(relationship_id)
        profile_store: Provides get_onboarding(user_id)
        hint_store: Provides get_active_hints_for_partner(user_id)
        suggestion_store: Provides get_suggestions(user_id, week_start_date)
        events: Event sink for degraded reads

    Returns:
        Frozen WeeklyContext

    Raises:
        MissingAssessmentError: If the user has no status for the week
        CollaboratorFetchError: If the status or relationship cannot be read
    """
    events = events or GenerationEvents()

    try:
        user_status: Optional[UserStatus] = await status_store.get_status(user_id, week_start_date)
    except Exception as e:
        raise CollaboratorFetchError("user status", str(e)) from e
    if user_status is None:
        raise MissingAssessmentError(user_id, week_start_date)

    try:
        relationship: Optional[Relationship] = await relationship_store.get_relationship(relationship_id)
    except Exception as e:
        raise CollaboratorFetchError("relationship", str(e)) from e
    if relationship is None:
        raise CollaboratorFetchError("relationship", f"relationship {relationship_id} not found")

    try:
        partner_id = relationship.partner_of(user_id)
    except ValueError as e:
        raise CollaboratorFetchError("relationship", str(e)) from e

    async def optional(source: str, default, call, *args):
        try:
            result = await call(*args)
        except Exception as e:
            events.emit(
                GenerationEvent.CONTEXT_DEGRADED,
                error=e,
                user_id=user_id,
                source=source
            )
            return default
        return default if result is None else result

    user_record = await optional("user_profile", None, profile_store.get_onboarding, user_id)
    partner_record = await optional("partner_profile", None, profile_store.get_onboarding, partner_id)
    partner_status = await optional(
        "partner_status", None, status_store.get_status, partner_id, week_start_date
    )
    hints: List[PartnerHint] = await optional(
        "partner_hints", [], hint_store.get_active_hints_for_partner, user_id
    )
    previous = await optional(
        "prior_week_suggestions", [], suggestion_store.get_suggestions,
        user_id, previous_week(week_start_date)
    )

    prior_titles: List[str] = []
    for suggestion in previous:
        for title in (suggestion.title, suggestion.template_title):
            if title and title not in prior_titles:
                prior_titles.append(title)

    context = WeeklyContext(
        user_id=user_id,
        relationship_id=relationship_id,
        week_start_date=week_start_date,
        user_status=user_status,
        partner_status=partner_status,
        user_profile=profile_from_record(user_record),
        partner_profile=profile_from_record(partner_record),
        relationship=relationship,
        partner_hints=list(hints),
        prior_week_suggestions=prior_titles
    )

    logger.info("Built weekly context", extra={
        "user_id": user_id,
        "week_start_date": week_start_date.isoformat(),
        "has_partner_profile": context.partner_profile is not None,
        "hint_count": len(context.partner_hints),
        "prior_title_count": len(prior_titles)
    })
    return context
