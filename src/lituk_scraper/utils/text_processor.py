"""
Text Processing Utilities

This module provides centralized text processing functions for cleaning
and normalizing text read from the rendered quiz pages.
"""

import re

from ..constants import ANKI_LINE_BREAK


TIP_PREFIXES = ['Explanation:', 'Tip:']


class TextProcessor:
    """
    Handles text processing operations for scraped content.

    Provides methods for normalizing option text and cleaning question and
    tip text.
    """

    @staticmethod
    def normalize(text: str) -> str:
        """
        Collapse runs of whitespace (including non-breaking spaces) and trim.

        Args:
            text: Raw text content of an element

        Returns:
            str: Normalized text
        """
        if not text:
            return ""

        return re.sub(r'\s+', ' ', text.replace('\xa0', ' ')).strip()

    @classmethod
    def clean_question_text(cls, text: str) -> str:
        """
        Clean question text by removing numbered prefixes and normalizing.

        Args:
            text: Raw question text

        Returns:
            str: Cleaned question text
        """
        cleaned = cls.normalize(text)

        # Remove numbered prefixes (e.g., "1. What is...")
        return re.sub(r'^\d+\.\s*', '', cleaned)

    @classmethod
    def clean_tip_text(cls, text: str) -> str:
        """
        Clean the explanation shown after an incorrect answer.

        Args:
            text: Raw tip text

        Returns:
            str: Cleaned tip text, empty if there was none
        """
        cleaned = cls.normalize(text)

        for prefix in TIP_PREFIXES:
            if cleaned.startswith(prefix):
                cleaned = cleaned[len(prefix):].strip()

        return cleaned

    @staticmethod
    def join_lines(parts) -> str:
        """Join text fragments with the HTML line break Anki renders."""
        return ANKI_LINE_BREAK.join(parts)
