"""
Template markdown parser utility.

This module parses the action template markdown files shipped under
data/templates/<category_name>/ and converts them into Template objects.

Expected layout of a template file:

    # Send a sweet good morning text

    ## Description
    Free text.

    ## Time Estimate
    2 minutes

    ## Effort
    minimal

    ## Timing
    morning

    ## Love Languages
    - words

    ## Steps
    1. Write one line about something you appreciate (1 min)
       - Tip: Be specific.

    ## Rationale
    Free text.
"""
import os
import re
from pathlib import Path
from typing import List, Optional

from helping_hand.models.template import (
    BestTiming,
    EffortLevel,
    LoveLanguage,
    Template,
    TemplateStep,
)
from helping_hand.utils.logging import logger

_STEP_PATTERN = re.compile(r'^(\d+)\.\s*(.+?)(?:\s*\((\d+)\s*(?:minutes?|mins?)\))?$', re.IGNORECASE)
_TIP_PATTERN = re.compile(r'^[-*+]\s*Tip:\s*(.+)$', re.IGNORECASE)


class TemplateMarkdownParser:
    """Parse template markdown files into Template objects."""

    def __init__(self, templates_base_path: str):
        """
        Initialize parser with base templates path.

        Args:
            templates_base_path: Folder holding one sub-folder per category
        """
        self.templates_base_path = templates_base_path

    def parse_template_file(self, file_path: str) -> Optional[Template]:
        """
        Parse single markdown template file.

        Args:
            file_path: Path to markdown template file

        Returns:
            Template object if parsing successful, None otherwise

        Raises:
            FileNotFoundError: If template file doesn't exist
        """
        if not os.path.exists(file_path):
            logger.error(f"Template file not found: {file_path}")
            raise FileNotFoundError(f"Template file not found: {file_path}")

        with open(file_path, 'r', encoding='utf-8') as f:
            content = f.read()

        title = self._extract_title(content)
        if not title:
            logger.warning(f"Could not extract title from {file_path}")
            return None

        try:
            return Template(
                title=title,
                description=self._extract_section(content, 'Description') or "",
                steps=self.extract_steps(content),
                time_estimate_minutes=self.extract_time_estimate(content),
                effort_level=EffortLevel(self._extract_line(content, 'Effort').lower()),
                preferred_timing=self._extract_timing(content),
                love_language_tags=self.extract_love_languages(content),
                rationale=self._extract_section(content, 'Rationale') or "",
                category_name=Path(file_path).parent.name,
                source_path=file_path
            )
        except ValueError as e:
            # pydantic ValidationError is a ValueError subclass
            logger.error(f"Error parsing template file {file_path}: {str(e)}")
            return None

    def parse_category_folder(self, category_name: str) -> List[Template]:
        """
        Parse every template of one category.

        Args:
            category_name: Name of the category folder

        Returns:
            Templates sorted by file name; an unknown folder yields an empty list
        """
        folder = Path(self.templates_base_path) / category_name
        if not folder.is_dir():
            logger.warning(f"Template folder not found: {folder}")
            return []

        templates = []
        for file_path in sorted(folder.glob('*.md')):
            template = self.parse_template_file(str(file_path))
            if template:
                templates.append(template)
        return templates

    def extract_time_estimate(self, content: str) -> int:
        """
        Extract time estimate from markdown content.

        Handles formats like "30 minutes", "1 hour", "1 hour 30 minutes", "45 min".

        Args:
            content: Markdown file content

        Returns:
            Time estimate in minutes, defaults to 0 if not found
        """
        time_str = self._extract_line(content, r'Time\s+Estimate')
        if not time_str:
            return 0

        minutes = 0
        hour_match = re.search(r'(\d+)\s*(?:hour|hr)s?', time_str, re.IGNORECASE)
        if hour_match:
            minutes += int(hour_match.group(1)) * 60

        minute_match = re.search(r'(\d+)\s*(?:minute|min)s?', time_str, re.IGNORECASE)
        if minute_match:
            minutes += int(minute_match.group(1))

        # No units: the number is minutes
        if minutes == 0:
            number_match = re.search(r'(\d+)', time_str)
            if number_match:
                minutes = int(number_match.group(1))

        return minutes

    def extract_love_languages(self, content: str) -> List[LoveLanguage]:
        """
        Extract love language tags from a bulleted or comma-separated list.

        Args:
            content: Markdown file content

        Returns:
            List of LoveLanguage tags

        Raises:
            ValueError: If a value is not a known tag
        """
        section = self._extract_section(content, r'Love\s+Languages')
        if not section:
            return []

        tags = []
        for line in section.split('\n'):
            line = re.sub(r'^[-*+]\s*', '', line.strip())
            for value in line.split(','):
                value = value.strip().lower()
                if value:
                    tags.append(LoveLanguage(value))
        return tags

    def extract_steps(self, content: str) -> List[TemplateStep]:
        """
        Extract numbered steps, each optionally followed by a "- Tip:" line.

        Args:
            content: Markdown file content

        Returns:
            Ordered list of TemplateStep
        """
        section = self._extract_section(content, 'Steps')
        if not section:
            return []

        steps: List[dict] = []
        for line in section.split('\n'):
            line = line.strip()
            if not line:
                continue

            tip_match = _TIP_PATTERN.match(line)
            if tip_match and steps:
                steps[-1]['tip'] = tip_match.group(1).strip()
                continue

            step_match = _STEP_PATTERN.match(line)
            if step_match:
                minutes = step_match.group(3)
                steps.append({
                    'step': len(steps) + 1,
                    'action': step_match.group(2).strip(),
                    'estimated_minutes': int(minutes) if minutes else None,
                })

        return [TemplateStep(**step) for step in steps]

    def _extract_title(self, content: str) -> Optional[str]:
        """Extract template title from first level-one heading."""
        for line in content.split('\n'):
            line = line.strip()
            if line.startswith('# '):
                return line[2:].strip()
        return None

    def _extract_section(self, content: str, heading: str) -> Optional[str]:
        pattern = rf'##\s*{heading}\s*\n((?:.*\n?)*?)(?=\n##|\Z)'
        match = re.search(pattern, content, re.IGNORECASE)
        if match:
            section = match.group(1).strip()
            if section:
                return section
        return None

    def _extract_line(self, content: str, heading: str) -> str:
        match = re.search(rf'##\s*{heading}\s*\n([^\n]+)', content, re.IGNORECASE)
        return match.group(1).strip() if match else ""

    def _extract_timing(self, content: str) -> BestTiming:
        value = self._extract_line(content, 'Timing').lower()
        return BestTiming(value) if value else BestTiming.ANY
