"""
Tests for the weekly suggestion generator.
"""
import asyncio
import random
import pytest
from datetime import date
from unittest.mock import AsyncMock, Mock

from helping_hand.config import DEFAULT_TEMPLATES_PATH, GenerationSettings
from helping_hand.models.status import AvailableTimeLevel
from helping_hand.models.suggestion import GenerateSuggestionsRequest, Suggestion
from helping_hand.models.template import EffortLevel
from helping_hand.services.exceptions import (
    CollaboratorFetchError,
    DuplicateSuggestionError,
    MissingAssessmentError,
    PersistenceError,
)
from helping_hand.services.generator import SuggestionGenerator
from helping_hand.services.template_repository import TemplateRepository
from helping_hand.services.utils import slugify
from helping_hand.utils.logging import GenerationEvent

ALL_CATEGORIES = [
    "quick_wins",
    "thoughtful_messages",
    "acts_of_service",
    "quality_time",
    "thoughtful_gifts",
    "physical_touch",
    "planning_ahead",
]


class InMemorySuggestionStore:
    """Suggestion store keeping rows in a list, unique per user, week, category and title."""

    def __init__(self):
        self.rows = []
        self.inserted = 0

    @staticmethod
    def _key(suggestion):
        return (suggestion.user_id, suggestion.week_start_date, suggestion.category_id, slugify(suggestion.title))

    async def get_suggestions(self, user_id, week_start_date):
        return [s for s in self.rows if s.user_id == user_id and s.week_start_date == week_start_date]

    async def insert(self, suggestion):
        if any(self._key(row) == self._key(suggestion) for row in self.rows):
            raise DuplicateSuggestionError(suggestion.title)
        self.inserted += 1
        stored = suggestion.model_copy(update={"id": f"s{self.inserted}"})
        self.rows.append(stored)
        return stored

    async def delete_suggestions(self, user_id, week_start_date, category_id):
        kept = [
            s for s in self.rows
            if (s.user_id, s.week_start_date, s.category_id) != (user_id, week_start_date, category_id)
        ]
        deleted = len(self.rows) - len(kept)
        self.rows = kept
        return deleted


def existing_suggestion(category_id, index=0, week=date(2025, 3, 10)):
    return Suggestion(
        id=f"{category_id}-{index}",
        user_id="user-1",
        relationship_id="rel-1",
        week_start_date=week,
        category_id=category_id,
        title=f"Existing {category_id} {index}",
        description="Stored earlier",
        time_estimate_minutes=5,
        effort_level=EffortLevel.LOW
    )


def emitted(events, event):
    return [call for call in events.emit.call_args_list if call.args[0] == event]


@pytest.fixture
def repository():
    return TemplateRepository(DEFAULT_TEMPLATES_PATH)


@pytest.fixture
def events():
    return Mock()


@pytest.fixture
def request_():
    return GenerateSuggestionsRequest(user_id="user-1", relationship_id="rel-1", week_start_date="2025-03-12")


@pytest.fixture
def make_generator(stores, repository, events):
    def _make(templates=None, settings=None, seed=1, **overrides):
        collaborators = dict(stores)
        collaborators.update(overrides)
        return SuggestionGenerator(
            templates=templates or repository,
            settings=settings or GenerationSettings(),
            events=events,
            rng=random.Random(seed),
            **collaborators
        )
    return _make


def run(generator, request):
    return asyncio.run(generator.generate(request))


def test_request_week_is_normalized_to_monday(request_):
    assert request_.week_start_date == date(2025, 3, 10)


def test_generates_k_per_category(make_generator, request_, stores):
    response = run(make_generator(), request_)

    assert response.category_counts == {category: 3 for category in ALL_CATEGORIES}
    assert len(response.suggestions) == 21
    assert not response.reused
    assert response.skipped_categories == []
    assert stores["suggestion_store"].insert.await_count == 21
    assert all(s.week_start_date == date(2025, 3, 10) for s in response.suggestions)


def test_titles_are_unique_within_category(make_generator, request_):
    response = run(make_generator(), request_)
    for category in ALL_CATEGORIES:
        titles = [s.title for s in response.suggestions if s.category_id == category]
        assert len(titles) == len(set(titles))


def test_reuses_existing_when_coverage_meets_threshold(make_generator, request_, stores, events):
    existing = [existing_suggestion(c) for c in ALL_CATEGORIES[:5]]  # 5 of 7 categories
    stores["suggestion_store"].get_suggestions = AsyncMock(return_value=existing)

    response = run(make_generator(), request_)

    assert response.reused
    assert response.suggestions == existing
    assert response.category_counts == {c: 1 for c in ALL_CATEGORIES[:5]}
    stores["status_store"].get_status.assert_not_awaited()
    stores["suggestion_store"].insert.assert_not_awaited()
    assert len(emitted(events, GenerationEvent.REUSED_EXISTING)) == 1


def test_generates_only_missing_categories_below_threshold(make_generator, request_, stores, events):
    existing = [existing_suggestion(c, i) for c in ("quick_wins", "quality_time") for i in range(3)]
    stores["suggestion_store"].get_suggestions = AsyncMock(
        side_effect=lambda user_id, week: existing if week == date(2025, 3, 10) else []
    )

    response = run(make_generator(), request_)

    assert not response.reused
    assert response.category_counts == {category: 3 for category in ALL_CATEGORIES}
    assert stores["suggestion_store"].insert.await_count == 15
    inserted = {call.args[0].category_id for call in stores["suggestion_store"].insert.await_args_list}
    assert inserted == set(ALL_CATEGORIES) - {"quick_wins", "quality_time"}
    regenerated = emitted(events, GenerationEvent.REGENERATED)
    assert regenerated[0].kwargs["kept_categories"] == ["quality_time", "quick_wins"]


def test_repeated_calls_do_not_duplicate_rows(make_generator, request_):
    store = InMemorySuggestionStore()
    generator = make_generator(suggestion_store=store)

    first = run(generator, request_)
    second = run(generator, request_)

    assert len(store.rows) == 21
    assert second.reused
    assert second.category_counts == first.category_counts


def test_regenerate_ignores_existing(make_generator, stores):
    existing = [existing_suggestion(c) for c in ALL_CATEGORIES]
    stores["suggestion_store"].get_suggestions = AsyncMock(
        side_effect=lambda user_id, week: existing if week == date(2025, 3, 10) else []
    )
    request = GenerateSuggestionsRequest(
        user_id="user-1", relationship_id="rel-1", week_start_date="2025-03-10", regenerate=True
    )

    response = run(make_generator(), request)

    assert not response.reused
    assert stores["suggestion_store"].insert.await_count == 21
    assert all(not s.title.startswith("Existing") for s in response.suggestions)
    cleared = [call.args for call in stores["suggestion_store"].delete_suggestions.await_args_list]
    assert cleared == [("user-1", date(2025, 3, 10), category) for category in ALL_CATEGORIES]


def test_regeneration_replaces_the_week(make_generator, request_):
    store = InMemorySuggestionStore()
    regenerate = request_.model_copy(update={"regenerate": True})

    run(make_generator(suggestion_store=store), request_)
    for seed in range(2, 6):
        regenerated = run(make_generator(suggestion_store=store, seed=seed), regenerate)
        assert regenerated.category_counts == {category: 3 for category in ALL_CATEGORIES}
    final = run(make_generator(suggestion_store=store), request_)

    assert final.reused
    assert final.category_counts == {category: 3 for category in ALL_CATEGORIES}
    assert len(store.rows) == 21


def test_uncleared_category_keeps_its_stored_set(make_generator, request_, stores, events):
    async def delete_suggestions(user_id, week_start_date, category_id):
        if category_id == "quick_wins":
            raise PersistenceError("delete failed")
        return 3

    stores["suggestion_store"].delete_suggestions = AsyncMock(side_effect=delete_suggestions)
    regenerate = request_.model_copy(update={"regenerate": True})

    response = run(make_generator(), regenerate)

    inserted = [call.args[0].category_id for call in stores["suggestion_store"].insert.await_args_list]
    assert "quick_wins" not in inserted
    assert len(inserted) == 18
    assert response.category_counts["quick_wins"] == 3
    failed = emitted(events, GenerationEvent.PERSISTENCE_FAILED)
    assert [(c.kwargs["category_id"], c.kwargs["operation"]) for c in failed] == [("quick_wins", "replace")]


def test_missing_assessment_is_fatal(make_generator, request_, stores):
    stores["status_store"].get_status = AsyncMock(return_value=None)
    with pytest.raises(MissingAssessmentError):
        run(make_generator(), request_)
    stores["suggestion_store"].insert.assert_not_awaited()


def test_relationship_failure_persists_nothing(make_generator, request_, stores):
    stores["relationship_store"].get_relationship = AsyncMock(side_effect=RuntimeError("connection reset"))
    with pytest.raises(CollaboratorFetchError):
        run(make_generator(), request_)
    stores["suggestion_store"].insert.assert_not_awaited()


def test_failed_category_is_skipped(make_generator, request_, repository, events):
    async def flaky(category_id):
        if category_id == "thoughtful_gifts":
            raise RuntimeError("template store down")
        return await repository.list_templates(category_id)

    templates = Mock()
    templates.list_categories = repository.list_categories
    templates.list_templates = AsyncMock(side_effect=flaky)

    response = run(make_generator(templates=templates), request_)

    assert "thoughtful_gifts" not in response.category_counts
    assert response.skipped_categories == ["thoughtful_gifts"]
    assert all(response.category_counts[c] == 3 for c in ALL_CATEGORIES if c != "thoughtful_gifts")
    skipped = emitted(events, GenerationEvent.CATEGORY_SKIPPED)
    assert skipped[0].kwargs["category_id"] == "thoughtful_gifts"
    assert skipped[0].kwargs["reason"] == "error"


def test_empty_pool_yields_no_suggestions(make_generator, request_, repository, events):
    async def without_touch(category_id):
        if category_id == "physical_touch":
            return []
        return await repository.list_templates(category_id)

    templates = Mock()
    templates.list_categories = repository.list_categories
    templates.list_templates = AsyncMock(side_effect=without_touch)

    response = run(make_generator(templates=templates), request_)

    assert "physical_touch" not in response.category_counts
    assert response.skipped_categories == []
    assert emitted(events, GenerationEvent.EMPTY_POOL)[0].kwargs["category_id"] == "physical_touch"


def test_infeasible_category_is_skipped(make_generator, request_, stores, user_status, events):
    limited = user_status.model_copy(update={"available_time_level": AvailableTimeLevel.VERY_LIMITED})
    stores["status_store"].get_status = AsyncMock(
        side_effect=lambda user_id, week: limited if user_id == "user-1" else None
    )
    stores["profile_store"].get_onboarding = AsyncMock(return_value=None)

    response = run(make_generator(), request_)

    assert "planning_ahead" not in response.category_counts
    assert sum(response.category_counts.values()) == 18
    skipped = emitted(events, GenerationEvent.CATEGORY_SKIPPED)
    assert [(c.kwargs["category_id"], c.kwargs["reason"]) for c in skipped] == [
        ("planning_ahead", "infeasible")
    ]
    assert all(s.time_estimate_minutes <= 15 for s in response.suggestions)


def test_partner_primary_language_overrides_infeasibility(make_generator, request_, stores, user_status):
    limited = user_status.model_copy(update={"available_time_level": AvailableTimeLevel.VERY_LIMITED})
    stores["status_store"].get_status = AsyncMock(
        side_effect=lambda user_id, week: limited if user_id == "user-1" else None
    )

    response = run(make_generator(), request_)  # partner primary: quality time

    assert response.category_counts["planning_ahead"] == 3


def test_persistence_failure_keeps_in_memory_suggestion(make_generator, request_, stores, events):
    calls = []

    async def insert(suggestion):
        calls.append(suggestion)
        if len(calls) == 1:
            raise PersistenceError("write failed")
        return suggestion.model_copy(update={"id": f"id-{len(calls)}"})

    stores["suggestion_store"].insert = AsyncMock(side_effect=insert)

    response = run(make_generator(), request_)

    assert len(response.suggestions) == 21
    assert response.suggestions[0].id is None
    assert all(s.id for s in response.suggestions[1:])
    failed = emitted(events, GenerationEvent.PERSISTENCE_FAILED)
    assert len(failed) == 1
    assert failed[0].kwargs["title"] == calls[0].title


def test_parallel_mode_matches_sequential(make_generator, request_):
    sequential = run(make_generator(), request_)
    parallel = run(make_generator(settings=GenerationSettings(parallel_categories=True)), request_)
    assert parallel.category_counts == sequential.category_counts


def test_seeded_generation_is_reproducible(make_generator, request_):
    first = run(make_generator(seed=11), request_)
    second = run(make_generator(seed=11), request_)
    assert [s.title for s in first.suggestions] == [s.title for s in second.suggestions]


def test_prior_week_titles_are_deprioritized(make_generator, request_, stores):
    previous = existing_suggestion("quick_wins", week=date(2025, 3, 3)).model_copy(update={
        "title": "Send a sweet good morning text"
    })
    stores["suggestion_store"].get_suggestions = AsyncMock(
        side_effect=lambda user_id, week: [previous] if week == date(2025, 3, 3) else []
    )

    for seed in range(10):
        response = run(make_generator(seed=seed), request_)
        quick_wins = [s.based_on_factors["template_title"]
                      for s in response.suggestions if s.category_id == "quick_wins"]
        assert "Send a sweet good morning text" not in quick_wins
