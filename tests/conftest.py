"""
Pytest configuration and shared fixtures.
"""
import pytest
from datetime import date
from typing import Dict, List
from unittest.mock import AsyncMock, Mock

from helping_hand.config import GenerationSettings
from helping_hand.models.context import WeeklyContext
from helping_hand.models.profile import Profile, Relationship
from helping_hand.models.status import (
    AvailableTimeLevel,
    CapacityLevel,
    EnergyLevel,
    StressLevel,
    UserStatus,
    WorkScheduleType,
)
from helping_hand.models.template import (
    BestTiming,
    Category,
    EffortLevel,
    LoveLanguage,
    Template,
    TemplateStep,
)
from helping_hand.services.constants import CATEGORY_CATALOG

WEEK = date(2025, 3, 10)  # A Monday


@pytest.fixture
def week() -> date:
    return WEEK


@pytest.fixture
def categories() -> Dict[str, Category]:
    """Catalog categories keyed by id."""
    return {category.id: category for category in CATEGORY_CATALOG}


@pytest.fixture
def user_status() -> UserStatus:
    """A comfortable week: moderate everything, full time job."""
    return UserStatus(
        user_id="user-1",
        week_start_date=WEEK,
        work_schedule_type=WorkScheduleType.FULL_TIME,
        work_hours_per_week=40,
        available_time_level=AvailableTimeLevel.MODERATE,
        emotional_capacity=CapacityLevel.MODERATE,
        stress_level=StressLevel.MODERATE,
        energy_level=EnergyLevel.MODERATE
    )


@pytest.fixture
def relationship() -> Relationship:
    return Relationship(
        id="rel-1",
        member_a_id="user-1",
        member_b_id="partner-1",
        living_together=True
    )


@pytest.fixture
def partner_profile() -> Profile:
    return Profile(
        user_id="partner-1",
        name="Sam",
        love_language_primary=LoveLanguage.QUALITY_TIME,
        love_language_secondary=LoveLanguage.WORDS,
        favorite_activities=["hiking", "board games"]
    )


@pytest.fixture
def make_template():
    """Factory for templates with sensible defaults."""
    def _make(title: str = "Test action", **overrides) -> Template:
        values = dict(
            title=title,
            description="A simple test action.",
            steps=[
                TemplateStep(step=1, action="Do the first thing", estimated_minutes=2),
                TemplateStep(step=2, action="Do the second thing", estimated_minutes=2),
                TemplateStep(step=3, action="Do the third thing", estimated_minutes=1),
            ],
            time_estimate_minutes=5,
            effort_level=EffortLevel.LOW,
            preferred_timing=BestTiming.ANY,
            love_language_tags=[],
            rationale="",
            category_name="quick_wins"
        )
        values.update(overrides)
        return Template(**values)
    return _make


@pytest.fixture
def make_context(user_status, relationship, partner_profile):
    """Factory for weekly contexts built around the default fixtures."""
    def _make(**overrides) -> WeeklyContext:
        values = dict(
            user_id="user-1",
            relationship_id="rel-1",
            week_start_date=WEEK,
            user_status=user_status,
            relationship=relationship,
            partner_profile=partner_profile,
            partner_hints=[],
            prior_week_suggestions=[]
        )
        values.update(overrides)
        return WeeklyContext(**values)
    return _make


@pytest.fixture
def settings() -> GenerationSettings:
    return GenerationSettings()


@pytest.fixture
def stores(user_status, relationship):
    """AsyncMock collaborators returning the default fixtures."""
    status_store = Mock()
    status_store.get_status = AsyncMock(
        side_effect=lambda user_id, week_start_date: user_status if user_id == "user-1" else None
    )
    relationship_store = Mock()
    relationship_store.get_relationship = AsyncMock(return_value=relationship)
    profile_store = Mock()
    profile_store.get_onboarding = AsyncMock(
        side_effect=lambda user_id: {
            "user_id": "partner-1",
            "name": "Sam",
            "love_language_primary": "Quality Time",
            "favorite_activities": ["hiking"]
        } if user_id == "partner-1" else None
    )
    hint_store = Mock()
    hint_store.get_active_hints_for_partner = AsyncMock(return_value=[])
    suggestion_store = Mock()
    suggestion_store.get_suggestions = AsyncMock(return_value=[])
    suggestion_store.insert = AsyncMock(side_effect=lambda suggestion: suggestion)
    suggestion_store.delete_suggestions = AsyncMock(return_value=0)
    return {
        "status_store": status_store,
        "relationship_store": relationship_store,
        "profile_store": profile_store,
        "hint_store": hint_store,
        "suggestion_store": suggestion_store,
    }
