"""
Suggestion models and generation request/response contracts.
"""
from enum import Enum
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, field_validator

from helping_hand.models.template import BestTiming, EffortLevel, LoveLanguage, TemplateStep


class SourceType(str, Enum):
    TEMPLATE = "template"
    GENERATED = "generated"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def week_start(reference: date) -> date:
    """Monday of the ISO week containing the reference date."""
    return reference - timedelta(days=reference.weekday())


class Suggestion(BaseModel):
    """
    Persisted weekly suggestion.

    Created once per generation; completion and dismissal are handled
    elsewhere, so the engine never updates a stored suggestion.
    """
    id: Optional[str] = None
    user_id: str
    relationship_id: str
    week_start_date: date
    category_id: str
    source_type: SourceType = SourceType.TEMPLATE
    title: str
    description: str
    detailed_steps: List[TemplateStep] = Field(default_factory=list)
    time_estimate_minutes: int = Field(..., ge=1)
    effort_level: EffortLevel
    best_timing: BestTiming = BestTiming.ANY
    love_language_alignment: List[LoveLanguage] = Field(default_factory=list)
    rationale: str = ""
    based_on_factors: Dict[str, Any] = Field(default_factory=dict)
    partner_hint: Optional[str] = None
    partner_preference_match: bool = False
    confidence_score: float = Field(0.0, ge=0.0, le=1.0)
    generated_by: str = "template"
    is_selected: bool = False
    is_completed: bool = False
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def template_title(self) -> str:
        """Title of the template this suggestion came from, before personalization."""
        return self.based_on_factors.get("template_title") or self.title


class GenerateSuggestionsRequest(BaseModel):
    """
    Request to generate a week of suggestions.

    Any date is accepted for week_start_date; it is moved back to the Monday
    of its ISO week.
    """
    user_id: str = Field(..., min_length=1)
    relationship_id: str = Field(..., min_length=1)
    week_start_date: date
    regenerate: bool = False

    @field_validator("week_start_date")
    @classmethod
    def _normalize_to_monday(cls, value: date) -> date:
        return week_start(value)


class GenerateSuggestionsResponse(BaseModel):
    """Result of a generation request."""
    suggestions: List[Suggestion] = Field(default_factory=list)
    category_counts: Dict[str, int] = Field(default_factory=dict)
    generated_at: datetime = Field(default_factory=utc_now)
    reused: bool = False
    skipped_categories: List[str] = Field(default_factory=list)


def count_by_category(suggestions: List[Suggestion]) -> Dict[str, int]:
    """Count suggestions per category id."""
    counts: Dict[str, int] = {}
    for suggestion in suggestions:
        counts[suggestion.category_id] = counts.get(suggestion.category_id, 0) + 1
    return counts
