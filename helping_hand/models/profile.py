"""
Onboarding profile, relationship and partner hint models.
"""
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

from helping_hand.models.template import LoveLanguage


class Profile(BaseModel):
    """
    Onboarding answers for one person.

    Love language fields hold internal tags; display names are mapped
    before a profile is built (see services.context).
    """
    model_config = ConfigDict(frozen=True)

    user_id: Optional[str] = None
    name: Optional[str] = None
    love_language_primary: Optional[LoveLanguage] = None
    love_language_secondary: Optional[LoveLanguage] = None
    love_languages: List[LoveLanguage] = Field(default_factory=list)
    favorite_activities: List[str] = Field(default_factory=list)
    communication_style: Optional[str] = None
    date_style: Optional[str] = None
    planning_style: Optional[str] = None
    gift_budget: Optional[str] = None
    date_frequency: Optional[str] = None

    @property
    def all_love_languages(self) -> List[LoveLanguage]:
        """Primary, secondary and listed languages without duplicates, in that order."""
        ordered = [self.love_language_primary, self.love_language_secondary, *self.love_languages]
        seen = []
        for language in ordered:
            if language is not None and language not in seen:
                seen.append(language)
        return seen


class Relationship(BaseModel):
    """Relationship record linking two members."""
    model_config = ConfigDict(frozen=True)

    id: str
    member_a_id: str
    member_b_id: str
    living_together: bool = False
    duration: Optional[str] = None
    status: Optional[str] = None

    def partner_of(self, user_id: str) -> str:
        """
        Get the id of the other member.

        Raises:
            ValueError: If user_id is not a member of this relationship
        """
        if user_id == self.member_a_id:
            return self.member_b_id
        if user_id == self.member_b_id:
            return self.member_a_id
        raise ValueError(f"User {user_id} is not a member of relationship {self.id}")


class HintType(str, Enum):
    LIKE = "like"
    DISLIKE = "dislike"
    NEED = "need"
    PREFERENCE = "preference"
    SPECIAL_OCCASION = "special_occasion"


class PartnerHint(BaseModel):
    """Private hint a partner left for the user."""
    model_config = ConfigDict(frozen=True)

    hint_type: HintType
    hint_text: str
    id: Optional[str] = None
