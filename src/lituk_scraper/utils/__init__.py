"""
Utility modules for the quiz scraper.

This package contains utility classes and functions for:
- Text cleaning
- Progress reporting and run metrics
- Record validation
- JSON and Anki output
"""

from .text_processor import TextProcessor
from .progress import ProgressReporter
from .monitoring import RunMetrics
from .validation import RecordValidator, validate_records, print_validation_report
from .json_writer import ResultWriter
from .anki_export import export_anki

__all__ = [
    'TextProcessor',
    'ProgressReporter',
    'RunMetrics',
    'RecordValidator',
    'ResultWriter',
    'validate_records',
    'print_validation_report',
    'export_anki'
]
