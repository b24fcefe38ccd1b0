"""
Shared utility functions for suggestion services.

Keyword matching and love language normalization are used by the context
builder, the scorer and the personalizer.
"""
import re
from typing import Iterable, List, Optional

from helping_hand.models.template import LoveLanguage
from helping_hand.services.constants import LOVE_LANGUAGE_ALIASES


def normalize_love_language(value) -> Optional[LoveLanguage]:
    """
    Map a raw love language value to its internal tag.

    Args:
        value: Display name ("Quality Time"), legacy spelling ("quality-time")
            or tag ("quality_time")

    Returns:
        LoveLanguage tag, or None if the value is empty or unknown

    Example:
        >>> normalize_love_language("Words of Affirmation")
        <LoveLanguage.WORDS: 'words'>
    """
    if value is None:
        return None
    if isinstance(value, LoveLanguage):
        return value
    key = re.sub(r"\s+", " ", str(value).strip().lower())
    return LOVE_LANGUAGE_ALIASES.get(key)


def normalize_love_languages(values: Optional[Iterable]) -> List[LoveLanguage]:
    """Normalize a list of raw values, dropping unknown ones and duplicates."""
    result: List[LoveLanguage] = []
    for value in values or []:
        language = normalize_love_language(value)
        if language is not None and language not in result:
            result.append(language)
    return result


def contains_keyword(text: str, keywords: Iterable[str]) -> bool:
    """
    Check whether any keyword appears in text as a whole word or phrase.

    Matching is case-insensitive.
    """
    lowered = text.lower()
    for keyword in keywords:
        if re.search(rf"\b{re.escape(keyword.lower())}\b", lowered):
            return True
    return False


def slugify(text: str) -> str:
    """Lower-case, hyphen separated identifier for use in sort keys."""
    slug = re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")
    return slug or "untitled"
