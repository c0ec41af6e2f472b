"""
Life in the UK Quiz Scraper Package

Drives a headless browser through the lifeintheuktests.co.uk practice quizzes
and extracts every question with its options, correct answers and tip.
"""

__version__ = "1.0.0"

from .models import QuestionRecord
from .scraper.scheduler import QuizScheduler
from .scraper.quiz import QuizPageAutomaton
from .scraper.credentials import CredentialStore
from .utils.json_writer import ResultWriter

__all__ = [
    'QuestionRecord',
    'QuizScheduler',
    'QuizPageAutomaton',
    'CredentialStore',
    'ResultWriter'
]
