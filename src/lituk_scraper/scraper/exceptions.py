"""
Exception hierarchy for the quiz scraper.

Job-level errors (InteractionError, UnsupportedQuizError) are caught by the
scheduler and cost only the quiz that raised them. Run-level errors
(LoginError, ResultWriteError, ConfigError) propagate to the CLI.
"""

from typing import Optional


class ScraperError(Exception):
    """Base class for all scraper errors."""


class ConfigError(ScraperError, ValueError):
    """Settings failed validation."""


class CookiesNotFoundError(ScraperError):
    """No usable cookie set could be loaded from disk."""


class LoginError(ScraperError):
    """The interactive login could not be completed."""


class LoginTimeoutError(LoginError):
    """The user did not complete the interactive login in time."""


class InvalidQuizNumberError(ScraperError, ValueError):
    """Quiz number outside the range the site serves."""

    def __init__(self, quiz_number: int):
        self.quiz_number = quiz_number
        super().__init__(f"Invalid quiz number {quiz_number}, must be in range 1-45")


class UnsupportedQuizError(ScraperError):
    """Quiz exists but its page flow is not handled by the automaton."""

    def __init__(self, quiz_number: int, reason: str):
        self.quiz_number = quiz_number
        super().__init__(f"Quiz {quiz_number} is not supported: {reason}")


class InteractionError(ScraperError):
    """A DOM step (wait, click, navigation) failed for one quiz."""

    def __init__(self, quiz_number: int, question_index: int, step: str, cause: Optional[Exception] = None):
        self.quiz_number = quiz_number
        self.question_index = question_index
        self.step = step
        self.cause = cause
        message = f"Couldn't {step} in quiz {quiz_number}"
        if question_index:
            message += f" question {question_index}"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)


class ResultWriteError(ScraperError, OSError):
    """The output artifact could not be written."""
