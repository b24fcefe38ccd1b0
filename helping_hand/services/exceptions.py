"""
Service-level exceptions.

This module contains exceptions that can be raised while generating weekly
suggestions. Context failures are fatal for a request; category and
persistence failures are recovered by the generator.
"""


class SuggestionEngineError(Exception):
    """Base exception for suggestion generation errors."""
    pass


class MissingAssessmentError(SuggestionEngineError):
    """Raised when the user has no weekly status for the requested week."""

    def __init__(self, user_id: str, week_start_date):
        self.user_id = user_id
        self.week_start_date = week_start_date
        super().__init__(
            f"User status not found for {user_id} week {week_start_date}. "
            "Please complete weekly assessment first."
        )


class CollaboratorFetchError(SuggestionEngineError):
    """Raised when a required collaborator (e.g. the relationship store) fails."""

    def __init__(self, collaborator: str, message: str):
        self.collaborator = collaborator
        super().__init__(f"Failed to fetch {collaborator}: {message}")


class CategoryGenerationError(SuggestionEngineError):
    """Raised when suggestions for a single category cannot be produced."""

    def __init__(self, category_id: str, message: str):
        self.category_id = category_id
        super().__init__(f"Category {category_id}: {message}")


class PersistenceError(SuggestionEngineError):
    """Raised when a suggestion cannot be stored."""
    pass


class DuplicateSuggestionError(PersistenceError):
    """Raised when a suggestion with the same week, category and title already exists."""
    pass
