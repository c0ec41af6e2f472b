"""
Browser automation for the lifeintheuktests.co.uk quizzes.

This package contains the login cookie store, the per-quiz page automaton
and the job scheduler that runs quizzes concurrently.
"""

from .base import BaseScraper
from .config import ScraperConfig
from .credentials import CredentialStore, requires_login
from .quiz import QuizPageAutomaton, validate_quiz_number
from .scheduler import QuizScheduler

__all__ = [
    'BaseScraper',
    'ScraperConfig',
    'CredentialStore',
    'QuizPageAutomaton',
    'QuizScheduler',
    'requires_login',
    'validate_quiz_number'
]
