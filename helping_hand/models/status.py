"""
Weekly status model describing a person's capacity for a given week.
"""
from enum import Enum
from datetime import date
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class WorkScheduleType(str, Enum):
    """Kind of work schedule reported in the weekly assessment."""
    FULL_TIME = "full_time"
    PART_TIME = "part_time"
    FLEXIBLE = "flexible"
    UNEMPLOYED = "unemployed"
    STUDENT = "student"
    SHIFT_WORK = "shift_work"


class AvailableTimeLevel(str, Enum):
    """Free time available this week, most restrictive first."""
    VERY_LIMITED = "very_limited"
    LIMITED = "limited"
    MODERATE = "moderate"
    PLENTY = "plenty"


class CapacityLevel(str, Enum):
    """Emotional capacity, lowest first."""
    VERY_LOW = "very_low"
    LOW = "low"
    MODERATE = "moderate"
    GOOD = "good"
    EXCELLENT = "excellent"


class StressLevel(str, Enum):
    VERY_STRESSED = "very_stressed"
    STRESSED = "stressed"
    MODERATE = "moderate"
    RELAXED = "relaxed"
    VERY_RELAXED = "very_relaxed"


class EnergyLevel(str, Enum):
    EXHAUSTED = "exhausted"
    TIRED = "tired"
    MODERATE = "moderate"
    ENERGIZED = "energized"
    VERY_ENERGIZED = "very_energized"


class CurrentChallenge(str, Enum):
    """Named challenges a person can flag for the week."""
    WORK_DEADLINE = "work_deadline"
    FAMILY_ISSUE = "family_issue"
    HEALTH_CONCERN = "health_concern"
    FINANCIAL_STRESS = "financial_stress"
    TRAVEL = "travel"
    MOVING = "moving"
    STUDYING = "studying"
    OTHER = "other"


class UserStatus(BaseModel):
    """
    Weekly capacity assessment for one person.

    One status exists per user per week; it is the required input for
    suggestion generation.
    """
    model_config = ConfigDict(frozen=True, use_enum_values=False)

    user_id: Optional[str] = None
    week_start_date: Optional[date] = None
    work_schedule_type: WorkScheduleType
    work_hours_per_week: Optional[int] = Field(None, ge=0, le=168)
    available_time_level: AvailableTimeLevel
    emotional_capacity: CapacityLevel
    stress_level: StressLevel = StressLevel.MODERATE
    energy_level: EnergyLevel = EnergyLevel.MODERATE
    current_challenges: List[CurrentChallenge] = Field(default_factory=list)
    notes: Optional[str] = None
    busy_days: List[date] = Field(default_factory=list)

    @property
    def is_stressed(self) -> bool:
        return self.stress_level in (StressLevel.VERY_STRESSED, StressLevel.STRESSED)

    @property
    def is_low_energy(self) -> bool:
        return self.energy_level in (EnergyLevel.EXHAUSTED, EnergyLevel.TIRED)

    def has_challenge(self, challenge: CurrentChallenge) -> bool:
        return challenge in self.current_challenges
