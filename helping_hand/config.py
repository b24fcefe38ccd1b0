"""
Generation settings read from the environment.
"""
import os
from pathlib import Path
from typing import Mapping, Optional
from pydantic import BaseModel, ConfigDict, Field

DEFAULT_TEMPLATES_PATH = str(Path(__file__).parent / "data" / "templates")


class GenerationSettings(BaseModel):
    """
    Tunables of the suggestion engine.

    Attributes:
        suggestions_per_category: K, suggestions produced per attempted category
        relevance_floor: Minimum score for a template to be eligible
        candidate_pool_size: Top-N scored templates the selector samples from
        reuse_threshold: Share of catalog categories that must already have
            suggestions for the week before they are reused
        variety_floor: Variety score of a template suggested last week
        feasibility_time_threshold: Category minimum time (minutes) above which
            a very limited week makes the category infeasible
        parallel_categories: Generate categories concurrently
        templates_path: Folder holding one sub-folder of markdown templates per category
    """
    model_config = ConfigDict(frozen=True)

    suggestions_per_category: int = Field(3, ge=1, le=10)
    relevance_floor: float = Field(10, ge=0, le=100)
    candidate_pool_size: int = Field(15, ge=1)
    reuse_threshold: float = Field(0.7, gt=0, le=1)
    variety_floor: float = Field(2, gt=0, lt=10)
    feasibility_time_threshold: int = Field(30, ge=0)
    parallel_categories: bool = False
    templates_path: str = DEFAULT_TEMPLATES_PATH

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'GenerationSettings':
        """
        Build settings from environment variables, falling back to defaults.

        Raises:
            pydantic.ValidationError: If a variable is out of bounds or malformed
        """
        env = os.environ if environ is None else environ
        names = {
            "suggestions_per_category": "SUGGESTIONS_PER_CATEGORY",
            "relevance_floor": "RELEVANCE_FLOOR",
            "candidate_pool_size": "CANDIDATE_POOL_SIZE",
            "reuse_threshold": "REUSE_THRESHOLD",
            "variety_floor": "VARIETY_FLOOR",
            "feasibility_time_threshold": "FEASIBILITY_TIME_THRESHOLD",
            "parallel_categories": "PARALLEL_CATEGORIES",
            "templates_path": "TEMPLATES_PATH",
        }
        values = {field: env[var] for field, var in names.items() if env.get(var)}
        return cls(**values)
