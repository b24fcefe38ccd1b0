"""
Constants and shared reference data for suggestion generation.
"""
from typing import Dict, List, Set

from helping_hand.models.status import (
    AvailableTimeLevel,
    CapacityLevel,
    EnergyLevel,
    WorkScheduleType,
)
from helping_hand.models.template import (
    BestTiming,
    CapacityRequirement,
    Category,
    EffortLevel,
    LoveLanguage,
)

CATEGORY_CATALOG: List[Category] = [
    Category(
        id="quick_wins",
        name="quick_wins",
        display_name="Quick Wins",
        description="Simple gestures that take 5 minutes or less",
        min_time_minutes=0,
        max_time_minutes=5,
        effort_level=EffortLevel.MINIMAL,
        capacity_required=CapacityRequirement.LOW,
        love_language_tags=[LoveLanguage.WORDS],
        sort_order=1,
    ),
    Category(
        id="thoughtful_messages",
        name="thoughtful_messages",
        display_name="Thoughtful Messages",
        description="Meaningful words to brighten their day",
        min_time_minutes=2,
        max_time_minutes=10,
        effort_level=EffortLevel.LOW,
        capacity_required=CapacityRequirement.MODERATE,
        love_language_tags=[LoveLanguage.WORDS],
        sort_order=2,
    ),
    Category(
        id="acts_of_service",
        name="acts_of_service",
        display_name="Acts of Service",
        description="Helpful actions to lighten their load",
        min_time_minutes=10,
        max_time_minutes=60,
        effort_level=EffortLevel.MODERATE,
        capacity_required=CapacityRequirement.MODERATE,
        love_language_tags=[LoveLanguage.ACTS],
        sort_order=3,
    ),
    Category(
        id="quality_time",
        name="quality_time",
        display_name="Quality Time",
        description="Ways to connect and be present together",
        min_time_minutes=30,
        max_time_minutes=180,
        effort_level=EffortLevel.MODERATE,
        capacity_required=CapacityRequirement.HIGH,
        love_language_tags=[LoveLanguage.QUALITY_TIME],
        sort_order=4,
    ),
    Category(
        id="thoughtful_gifts",
        name="thoughtful_gifts",
        display_name="Thoughtful Gifts",
        description="Meaningful gifts or surprises",
        min_time_minutes=15,
        max_time_minutes=120,
        effort_level=EffortLevel.MODERATE,
        capacity_required=CapacityRequirement.MODERATE,
        love_language_tags=[LoveLanguage.GIFTS],
        sort_order=5,
    ),
    Category(
        id="physical_touch",
        name="physical_touch",
        display_name="Physical Touch",
        description="Affectionate gestures and closeness",
        min_time_minutes=5,
        max_time_minutes=30,
        effort_level=EffortLevel.LOW,
        capacity_required=CapacityRequirement.MODERATE,
        love_language_tags=[LoveLanguage.TOUCH],
        sort_order=6,
    ),
    Category(
        id="planning_ahead",
        name="planning_ahead",
        display_name="Planning Ahead",
        description="Future plans to look forward to",
        min_time_minutes=45,
        max_time_minutes=90,
        effort_level=EffortLevel.HIGH,
        capacity_required=CapacityRequirement.MODERATE,
        love_language_tags=[LoveLanguage.QUALITY_TIME, LoveLanguage.ACTS],
        sort_order=7,
    ),
]

# Display names and legacy spellings mapped to internal tags. This is the only
# place raw love language strings are interpreted.
LOVE_LANGUAGE_ALIASES: Dict[str, LoveLanguage] = {
    "words": LoveLanguage.WORDS,
    "words of affirmation": LoveLanguage.WORDS,
    "words_of_affirmation": LoveLanguage.WORDS,
    "affirmation": LoveLanguage.WORDS,
    "quality_time": LoveLanguage.QUALITY_TIME,
    "quality-time": LoveLanguage.QUALITY_TIME,
    "quality time": LoveLanguage.QUALITY_TIME,
    "gifts": LoveLanguage.GIFTS,
    "gift": LoveLanguage.GIFTS,
    "receiving gifts": LoveLanguage.GIFTS,
    "receiving_gifts": LoveLanguage.GIFTS,
    "acts": LoveLanguage.ACTS,
    "acts of service": LoveLanguage.ACTS,
    "acts_of_service": LoveLanguage.ACTS,
    "touch": LoveLanguage.TOUCH,
    "physical touch": LoveLanguage.TOUCH,
    "physical_touch": LoveLanguage.TOUCH,
}

LOVE_LANGUAGE_LABELS: Dict[LoveLanguage, str] = {
    LoveLanguage.WORDS: "words of affirmation",
    LoveLanguage.QUALITY_TIME: "quality time",
    LoveLanguage.GIFTS: "receiving gifts",
    LoveLanguage.ACTS: "acts of service",
    LoveLanguage.TOUCH: "physical touch",
}

# Ordinal scales
EFFORT_SCORES: Dict[EffortLevel, int] = {
    EffortLevel.MINIMAL: 1,
    EffortLevel.LOW: 2,
    EffortLevel.MODERATE: 3,
    EffortLevel.HIGH: 4,
}

ENERGY_SCORES: Dict[EnergyLevel, int] = {
    EnergyLevel.EXHAUSTED: 1,
    EnergyLevel.TIRED: 2,
    EnergyLevel.MODERATE: 3,
    EnergyLevel.ENERGIZED: 4,
    EnergyLevel.VERY_ENERGIZED: 5,
}

CAPACITY_SCORES: Dict[CapacityLevel, int] = {
    CapacityLevel.VERY_LOW: 1,
    CapacityLevel.LOW: 2,
    CapacityLevel.MODERATE: 3,
    CapacityLevel.GOOD: 4,
    CapacityLevel.EXCELLENT: 5,
}

# Time fit: (base score, ceiling in minutes) per available time tier
TIME_FIT_TIERS: Dict[AvailableTimeLevel, tuple] = {
    AvailableTimeLevel.VERY_LIMITED: (10, 15),
    AvailableTimeLevel.LIMITED: (20, 30),
    AvailableTimeLevel.MODERATE: (40, 60),
    AvailableTimeLevel.PLENTY: (60, 120),
}
TIME_OVERRUN_PENALTY = 2  # points per minute over the tier ceiling
EFFORT_MISMATCH_PENALTY = 3  # points per ordinal step of mismatch
SUB_SCORE_MAX = 10

# Timing fit (0-10) of a template's preferred timing per work schedule
SCHEDULE_TIMING_FIT: Dict[WorkScheduleType, Dict[BestTiming, int]] = {
    WorkScheduleType.FULL_TIME: {
        BestTiming.MORNING: 7, BestTiming.AFTERNOON: 3, BestTiming.EVENING: 10,
        BestTiming.WEEKEND: 10, BestTiming.ANY: 10,
    },
    WorkScheduleType.PART_TIME: {
        BestTiming.MORNING: 8, BestTiming.AFTERNOON: 10, BestTiming.EVENING: 10,
        BestTiming.WEEKEND: 10, BestTiming.ANY: 10,
    },
    WorkScheduleType.STUDENT: {
        BestTiming.MORNING: 5, BestTiming.AFTERNOON: 10, BestTiming.EVENING: 10,
        BestTiming.WEEKEND: 10, BestTiming.ANY: 10,
    },
    WorkScheduleType.SHIFT_WORK: {
        BestTiming.MORNING: 6, BestTiming.AFTERNOON: 6, BestTiming.EVENING: 6,
        BestTiming.WEEKEND: 8, BestTiming.ANY: 10,
    },
}
DEFAULT_TIMING_FIT = 10

# Group weights of the relevance score; each group is normalized to its share
SITUATIONAL_WEIGHT = 40
PROFILE_WEIGHT = 35
RELATIONSHIP_WEIGHT = 15
VARIETY_WEIGHT = 10

# Raw maxima used to normalize each group
SITUATIONAL_RAW_MAX = 90  # time fit 60 + energy 10 + capacity 10 + timing 10
PROFILE_RAW_MAX = 35
RELATIONSHIP_RAW_MAX = 15

LOVE_LANGUAGE_POINTS = {
    "primary": 20,
    "secondary": 12,
    "listed": 6,
}
PROFILE_MATCH_POINTS = 5
RELATIONSHIP_MATCH_POINTS = 5
RELATIONSHIP_NEUTRAL_POINTS = 3
DATE_FREQUENCY_BASE_POINTS = 2

CHALLENGE_BONUS = 5
CHALLENGE_PENALTY = 8
TRAVEL_TIME_LIMIT_MINUTES = 30

# Keyword tables
HOME_KEYWORDS: Set[str] = {
    "at home", "home", "couch", "kitchen", "living room", "bed", "cook together",
}
GO_OUT_KEYWORDS: Set[str] = {
    "go out", "restaurant", "visit", "pick them up", "meet up", "video call",
    "cafe", "park", "drive",
}
PLANNED_KEYWORDS: Set[str] = {
    "plan", "schedule", "book", "reserve", "reservation", "calendar", "research",
}
SPONTANEOUS_KEYWORDS: Set[str] = {
    "spontaneous", "surprise", "right now", "today", "unexpected", "on a whim",
}
COSTLY_KEYWORDS: Set[str] = {
    "buy", "order", "tickets", "restaurant", "jewelry", "splurge", "book a",
    "reservation", "subscription", "delivery",
}
LOW_COST_KEYWORDS: Set[str] = {
    "snack", "handmade", "homemade", "note", "free", "playlist", "small",
    "flower from", "print",
}
DATE_STYLE_KEYWORDS: Dict[str, Set[str]] = {
    "cozy": {"at home", "cozy", "movie", "blanket", "cook", "couch"},
    "adventurous": {"new", "explore", "hike", "adventure", "try", "outdoor"},
    "romantic": {"candle", "romantic", "dinner", "dance", "stars"},
    "casual": {"walk", "coffee", "simple", "easy", "casual"},
    "active": {"walk", "hike", "bike", "active", "sport", "outdoor"},
    "cultural": {"museum", "show", "concert", "gallery", "book"},
}
COMMUNICATION_STYLE_KEYWORDS: Dict[str, Set[str]] = {
    "direct": {"tell", "say", "specific", "clearly", "ask"},
    "gentle": {"gentle", "soft", "thoughtful", "kind", "warm"},
    "playful": {"fun", "playful", "silly", "emoji", "joke", "game"},
    "reserved": {"short", "simple", "quiet", "note", "private"},
}
LOW_DATE_FREQUENCY_VALUES: Set[str] = {
    "rarely", "never", "monthly", "less_than_monthly", "few_times_a_year", "seldom",
}
LATE_WORK_KEYWORDS: Set[str] = {
    "late", "night shift", "evenings", "overtime", "closing shift", "working nights",
}

# Budget tiers
BUDGET_TIERS: Dict[str, int] = {"low": 1, "moderate": 2, "high": 3}
LOW_BUDGET_MARKERS: Set[str] = {"low", "small", "under", "budget", "free", "minimal"}
HIGH_BUDGET_MARKERS: Set[str] = {"high", "splurge", "luxury", "over", "plus", "generous"}

# Gift hint types that can shape a gift suggestion
GIFT_HINT_TYPES: Set[str] = {"like", "preference"}

# Personalization
ACTIVITY_PLACEHOLDERS: List[str] = [
    "activities your partner would enjoy",
    "activities they would enjoy",
    "something they enjoy",
    "something your partner enjoys",
]
VERY_LIMITED_TIME_CAP_MINUTES = 15
VERY_LIMITED_MAX_STEPS = 2
MAX_PERSONALIZED_ACTIVITIES = 2

STRESS_CLAUSE = "Perfect for a stretched week - this takes almost no mental energy."
LOW_ENERGY_CLAUSE = "Low-key enough for a week when your energy is running low."
TIME_CONSTRAINED_CLAUSE = "Fits into even your busiest day."
WORK_DEADLINE_CLAUSE = (
    "With your work deadline this week, this practical gesture shows care "
    "without adding pressure."
)
FAMILY_ISSUE_CLAUSE = "While family things are heavy, a few honest words go a long way."
TRAVEL_CLAUSE = "Easy to do from wherever you are this week."
HEALTH_CONCERN_CLAUSE = "Gentle enough for a week when you are looking after your health."
FINANCIAL_STRESS_CLAUSE = "Costs little or nothing, which suits a tight month."
FINANCIAL_STRESS_COSTLY_CLAUSE = "Keep it to a budget that feels comfortable this month."
MOVING_CLAUSE = "A small moment together in the middle of the move."
STUDYING_CLAUSE = "A welcome break between study sessions."
