"""
Weekly suggestion generation.

Typical usage:
    generator = SuggestionGenerator(
        templates=TemplateRepository(settings.templates_path),
        status_store=StatusStore(),
        relationship_store=RelationshipStore(),
        profile_store=ProfileStore(),
        hint_store=HintStore(),
        suggestion_store=SuggestionStore(),
        settings=settings
    )
    response = await generator.generate(request)
"""
import asyncio
import random
from typing import Dict, List, Optional, Set

from helping_hand.config import GenerationSettings
from helping_hand.models.context import WeeklyContext
from helping_hand.models.suggestion import (
    GenerateSuggestionsRequest,
    GenerateSuggestionsResponse,
    Suggestion,
    count_by_category,
)
from helping_hand.models.template import Category
from helping_hand.services.context import build_weekly_context
from helping_hand.services.exceptions import CategoryGenerationError
from helping_hand.services.feasibility import filter_feasible_templates
from helping_hand.services.personalizer import personalize
from helping_hand.services.scoring import score_templates
from helping_hand.services.selection import select_templates
from helping_hand.utils.logging import GenerationEvent, GenerationEvents, logger


class SuggestionGenerator:
    """Generates, reuses and stores a week of suggestions for one user."""

    def __init__(
        self,
        templates,
        status_store,
        relationship_store,
        profile_store,
        hint_store,
        suggestion_store,
        settings: Optional[GenerationSettings] = None,
        events: Optional[GenerationEvents] = None,
        rng: Optional[random.Random] = None
    ):
        """
        Initialize generator with its collaborators.

        Args:
            templates: Provides list_categories() and list_templates(category_id)
            status_store: Provides get_status(user_id, week_start_date)
            relationship_store: Provides get_relationship(relationship_id)
            profile_store: Provides get_onboarding(user_id)
            hint_store: Provides get_active_hints_for_partner(user_id)
            suggestion_store: Provides get_suggestions(user_id, week_start_date),
                insert(suggestion) and delete_suggestions(user_id, week_start_date, category_id)
            settings: Tunables, read from the environment when omitted
            events: Event sink
            rng: Random source for selection
        """
        self.templates = templates
        self.status_store = status_store
        self.relationship_store = relationship_store
        self.profile_store = profile_store
        self.hint_store = hint_store
        self.suggestion_store = suggestion_store
        self.settings = settings or GenerationSettings.from_env()
        self.events = events or GenerationEvents()
        self.rng = rng or random.Random()

    async def generate(self, request: GenerateSuggestionsRequest) -> GenerateSuggestionsResponse:
        """
        Produce the suggestions for a user's week.

        Without regenerate, stored suggestions are returned unchanged when they
        cover enough categories; otherwise only the categories still missing
        are generated. With regenerate, every category is generated again and its
        stored suggestions for the week are replaced by the new set.

        Raises:
            MissingAssessmentError: If the user has no status for the week
            CollaboratorFetchError: If required context cannot be read
        """
        categories = await self.templates.list_categories()

        existing: List[Suggestion] = []
        if not request.regenerate:
            existing = await self.suggestion_store.get_suggestions(
                request.user_id, request.week_start_date
            )
            covered = {s.category_id for s in existing} & {c.id for c in categories}
            coverage = len(covered) / len(categories) if categories else 1.0
            if existing and coverage >= self.settings.reuse_threshold:
                self.events.emit(
                    GenerationEvent.REUSED_EXISTING,
                    user_id=request.user_id,
                    week_start_date=request.week_start_date,
                    coverage=round(coverage, 2),
                    suggestion_count=len(existing)
                )
                return GenerateSuggestionsResponse(
                    suggestions=existing,
                    category_counts=count_by_category(existing),
                    reused=True
                )

        kept_categories: Set[str] = {s.category_id for s in existing}
        pending = [c for c in categories if c.id not in kept_categories]

        context = await build_weekly_context(
            request.user_id,
            request.relationship_id,
            request.week_start_date,
            status_store=self.status_store,
            relationship_store=self.relationship_store,
            profile_store=self.profile_store,
            hint_store=self.hint_store,
            suggestion_store=self.suggestion_store,
            events=self.events
        )
        self.events.emit(
            GenerationEvent.REGENERATED,
            user_id=request.user_id,
            week_start_date=request.week_start_date,
            requested=request.regenerate,
            categories=[c.id for c in pending],
            kept_categories=sorted(kept_categories)
        )

        results = await self._generate_categories(pending, context)

        skipped: List[str] = []
        generated: List[Suggestion] = []
        for category in pending:
            suggestions = results.get(category.id)
            if suggestions is None:
                skipped.append(category.id)
            else:
                generated.extend(suggestions)

        uncleared: Set[str] = set()
        if request.regenerate:
            replaced = [c.id for c in pending if results.get(c.id) is not None]
            uncleared = await self._clear_previous(request, replaced)

        stored = await self._persist(generated, unsaved_categories=uncleared)
        suggestions = [s for s in existing if s.category_id in kept_categories] + stored

        logger.info("Generated weekly suggestions", extra={
            "user_id": request.user_id,
            "week_start_date": request.week_start_date.isoformat(),
            "generated_count": len(stored),
            "kept_count": len(suggestions) - len(stored),
            "skipped_categories": skipped
        })
        return GenerateSuggestionsResponse(
            suggestions=suggestions,
            category_counts=count_by_category(suggestions),
            skipped_categories=skipped
        )

    async def _generate_categories(
        self,
        categories: List[Category],
        context: WeeklyContext
    ) -> Dict[str, Optional[List[Suggestion]]]:
        """Run every category in isolation; a failed category maps to None."""
        if self.settings.parallel_categories:
            outcomes = await asyncio.gather(
                *(self._generate_isolated(category, context) for category in categories)
            )
        else:
            outcomes = [await self._generate_isolated(category, context) for category in categories]
        return {category.id: outcome for category, outcome in zip(categories, outcomes)}

    async def _generate_isolated(self, category: Category, context: WeeklyContext) -> Optional[List[Suggestion]]:
        try:
            return await self.generate_for_category(category, context)
        except Exception as e:
            self.events.emit(
                GenerationEvent.CATEGORY_SKIPPED,
                error=e,
                user_id=context.user_id,
                category_id=category.id,
                reason="error"
            )
            return None

    async def generate_for_category(self, category: Category, context: WeeklyContext) -> List[Suggestion]:
        """
        Feasibility, scoring, selection and personalization for one category.

        Returns:
            Up to K suggestions; empty for an empty pool or an infeasible category

        Raises:
            CategoryGenerationError: If templates cannot be loaded, scored or personalized
        """
        try:
            templates = await self.templates.list_templates(category.id)
        except Exception as e:
            raise CategoryGenerationError(category.id, f"template fetch failed: {str(e)}") from e

        if not templates:
            self.events.emit(
                GenerationEvent.EMPTY_POOL,
                user_id=context.user_id,
                category_id=category.id
            )
            return []

        feasible = filter_feasible_templates(
            category, templates, context, self.settings.feasibility_time_threshold
        )
        if not feasible:
            self.events.emit(
                GenerationEvent.CATEGORY_SKIPPED,
                user_id=context.user_id,
                category_id=category.id,
                reason="infeasible",
                available_time=context.user_status.available_time_level,
                emotional_capacity=context.user_status.emotional_capacity
            )
            return []

        try:
            scored = score_templates(feasible, context, self.settings.variety_floor)
            selected = select_templates(
                scored,
                k=self.settings.suggestions_per_category,
                relevance_floor=self.settings.relevance_floor,
                pool_size=self.settings.candidate_pool_size,
                rng=self.rng
            )
            return [personalize(candidate, category) for candidate in selected]
        except (ValueError, KeyError, TypeError) as e:
            raise CategoryGenerationError(category.id, str(e)) from e

    async def _clear_previous(self, request: GenerateSuggestionsRequest, category_ids: List[str]) -> Set[str]:
        """
        Delete the week's stored suggestions of the regenerated categories.

        Returns:
            Ids of the categories that could not be cleared
        """
        failed: Set[str] = set()
        for category_id in category_ids:
            try:
                await self.suggestion_store.delete_suggestions(
                    request.user_id, request.week_start_date, category_id
                )
            except Exception as e:
                self.events.emit(
                    GenerationEvent.PERSISTENCE_FAILED,
                    error=e,
                    user_id=request.user_id,
                    category_id=category_id,
                    operation="replace"
                )
                failed.add(category_id)
        return failed

    async def _persist(
        self,
        suggestions: List[Suggestion],
        unsaved_categories: Optional[Set[str]] = None
    ) -> List[Suggestion]:
        """
        Insert suggestions one at a time.

        A suggestion that fails to save stays in the returned list as the
        unsaved in-memory record. Suggestions of unsaved_categories are not
        inserted at all, so a category whose old rows are still stored never
        ends up with more than one set.
        """
        unsaved_categories = unsaved_categories or set()
        results = []
        for suggestion in suggestions:
            if suggestion.category_id in unsaved_categories:
                results.append(suggestion)
                continue
            try:
                results.append(await self.suggestion_store.insert(suggestion))
            except Exception as e:
                self.events.emit(
                    GenerationEvent.PERSISTENCE_FAILED,
                    error=e,
                    user_id=suggestion.user_id,
                    category_id=suggestion.category_id,
                    title=suggestion.title
                )
                results.append(suggestion)
        return results
