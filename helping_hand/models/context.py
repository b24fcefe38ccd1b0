"""
Weekly context model.

A WeeklyContext is the full snapshot of user and partner state used to score
templates for one generation request. It is built once per request and never
mutated afterwards.
"""
from datetime import date
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

from helping_hand.models.profile import PartnerHint, Profile, Relationship
from helping_hand.models.status import UserStatus
from helping_hand.models.template import LoveLanguage

DEFAULT_PARTNER_NAME = "your partner"


class WeeklyContext(BaseModel):
    """
    Aggregate of everything that drives suggestion selection for one week.

    Attributes:
        user_id: User the suggestions are for
        relationship_id: Relationship the user belongs to
        week_start_date: Monday of the target week
        user_status: Required weekly assessment of the user
        partner_status: Partner's weekly assessment, if they completed one
        user_profile: User's onboarding answers, if available
        partner_profile: Partner's onboarding answers, if available
        relationship: Relationship record
        partner_hints: Active hints the partner left for the user
        prior_week_suggestions: Titles suggested to the user last week
    """
    model_config = ConfigDict(frozen=True)

    user_id: str
    relationship_id: str
    week_start_date: date
    user_status: UserStatus
    partner_status: Optional[UserStatus] = None
    user_profile: Optional[Profile] = None
    partner_profile: Optional[Profile] = None
    relationship: Relationship
    partner_hints: List[PartnerHint] = Field(default_factory=list)
    prior_week_suggestions: List[str] = Field(default_factory=list)

    @property
    def partner_id(self) -> str:
        return self.relationship.partner_of(self.user_id)

    @property
    def partner_name(self) -> str:
        if self.partner_profile and self.partner_profile.name:
            return self.partner_profile.name
        return DEFAULT_PARTNER_NAME

    @property
    def has_partner_name(self) -> bool:
        return bool(self.partner_profile and self.partner_profile.name)

    @property
    def partner_love_languages(self) -> List[LoveLanguage]:
        """Partner's combined love languages (primary, secondary, full list)."""
        if not self.partner_profile:
            return []
        return self.partner_profile.all_love_languages

    @property
    def partner_activities(self) -> List[str]:
        if not self.partner_profile:
            return []
        return list(self.partner_profile.favorite_activities)

    def was_suggested_last_week(self, title: str) -> bool:
        normalized = title.strip().lower()
        return any(prior.strip().lower() == normalized for prior in self.prior_week_suggestions)
