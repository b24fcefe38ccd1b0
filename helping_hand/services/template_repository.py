"""
Template repository serving the category catalog and markdown templates.
"""
from typing import Dict, List, Optional

from helping_hand.models.template import Category, Template
from helping_hand.services.constants import CATEGORY_CATALOG
from helping_hand.utils.logging import logger
from helping_hand.utils.template_parser import TemplateMarkdownParser


class TemplateRepository:
    """
    Read-only access to categories and their templates.

    Templates are parsed lazily per category and cached until reload() is
    called, so content can change without touching code.
    """

    def __init__(self, templates_path: str, categories: Optional[List[Category]] = None):
        self.parser = TemplateMarkdownParser(templates_path)
        self._categories = sorted(categories or CATEGORY_CATALOG, key=lambda c: c.sort_order)
        self._templates: Dict[str, List[Template]] = {}

    async def list_categories(self) -> List[Category]:
        """Catalog categories in display order."""
        return list(self._categories)

    async def list_templates(self, category_id: str) -> List[Template]:
        """
        Get every template of a category.

        Args:
            category_id: Category identifier

        Returns:
            Templates of the category; empty when the category has none

        Raises:
            KeyError: If the category is not in the catalog
        """
        category = self._get_category(category_id)
        if category.id not in self._templates:
            templates = self.parser.parse_category_folder(category.name)
            self._templates[category.id] = templates
            logger.info("Loaded templates", extra={
                "category_id": category.id,
                "template_count": len(templates)
            })
        return list(self._templates[category.id])

    def reload(self) -> None:
        """Drop cached templates so the next read parses the files again."""
        self._templates.clear()

    def _get_category(self, category_id: str) -> Category:
        for category in self._categories:
            if category.id == category_id:
                return category
        raise KeyError(f"Unknown category: {category_id}")
