"""
Category and template reference data models.

Categories group templates that share time, effort and capacity constraints.
Templates are the immutable candidate actions a weekly suggestion is built
from; each one belongs to exactly one category.
"""
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class LoveLanguage(str, Enum):
    """Internal love language tags."""
    WORDS = "words"
    QUALITY_TIME = "quality_time"
    GIFTS = "gifts"
    ACTS = "acts"
    TOUCH = "touch"


class EffortLevel(str, Enum):
    MINIMAL = "minimal"
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


class CapacityRequirement(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


class BestTiming(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    WEEKEND = "weekend"
    ANY = "any"


class Category(BaseModel):
    """
    Recommendation category.

    Attributes:
        id: Stable category identifier used on stored suggestions
        name: Machine name, also the template folder name
        display_name: Human readable name
        min_time_minutes: Lower bound of the category's time range
        max_time_minutes: Upper bound of the category's time range
        effort_level: Typical effort for the category
        capacity_required: Minimum emotional capacity tier the category needs
        love_language_tags: Love languages the category serves
    """
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    display_name: str
    description: str = ""
    min_time_minutes: int = Field(..., ge=0)
    max_time_minutes: int = Field(..., ge=0)
    effort_level: EffortLevel
    capacity_required: CapacityRequirement
    love_language_tags: List[LoveLanguage] = Field(default_factory=list)
    sort_order: int = 0


class TemplateStep(BaseModel):
    """Single ordered step of a template."""
    model_config = ConfigDict(frozen=True)

    step: int = Field(..., ge=1)
    action: str
    tip: Optional[str] = None
    estimated_minutes: Optional[int] = Field(None, ge=0)


class Template(BaseModel):
    """
    Candidate action template.

    Attributes:
        title: Short actionable title
        description: Two or three sentences explaining the idea
        steps: Ordered steps
        time_estimate_minutes: Realistic time needed
        effort_level: Effort needed
        preferred_timing: When the action works best
        love_language_tags: Love languages the action expresses (set semantics)
        rationale: Default explanation of why the action helps
        category_name: Name of the owning category
        source_path: Markdown file the template was loaded from
    """
    model_config = ConfigDict(frozen=True)

    title: str
    description: str
    steps: List[TemplateStep] = Field(default_factory=list)
    time_estimate_minutes: int = Field(..., ge=1)
    effort_level: EffortLevel
    preferred_timing: BestTiming = BestTiming.ANY
    love_language_tags: List[LoveLanguage] = Field(default_factory=list)
    rationale: str = ""
    category_name: Optional[str] = None
    source_path: Optional[str] = None

    @field_validator("love_language_tags")
    @classmethod
    def _dedupe_tags(cls, tags: List[LoveLanguage]) -> List[LoveLanguage]:
        return sorted(set(tags), key=lambda tag: tag.value)

    def supports(self, language: LoveLanguage) -> bool:
        return language in self.love_language_tags

    @property
    def searchable_text(self) -> str:
        """Lower-cased title, description and step text used for keyword matching."""
        parts = [self.title, self.description]
        parts.extend(step.action for step in self.steps)
        return " ".join(parts).lower()
