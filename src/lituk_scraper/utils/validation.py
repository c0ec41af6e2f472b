from collections import Counter
from typing import Dict, List, Any, Sequence, Tuple
import logging

from ..constants import QUESTIONS_PER_QUIZ, QUIZ_NUMBER_MAX, QUIZ_NUMBER_MIN
from ..models import QuestionRecord


class RecordValidator:
    """Sanity checks for scraped question records."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def validate_record(self, record: QuestionRecord) -> Tuple[bool, List[str], List[str]]:
        """Validate a single record's content."""
        errors = []
        warnings = []

        if not record.question.strip():
            errors.append("Question text is empty")
        elif '<' in record.question or '>' in record.question:
            warnings.append("Question text may contain HTML tags")

        if not record.options:
            errors.append("No options found")
        for i, option in enumerate(record.options):
            if not option.strip():
                errors.append(f"Option {i + 1} is empty")
        if len(set(record.options)) != len(record.options):
            warnings.append("Duplicate options found")

        if not record.answers:
            warnings.append("No option is marked correct")
        for answer in record.answers:
            if answer not in record.options:
                errors.append(f"Answer '{answer}' doesn't match any option: {list(record.options)}")

        if not QUIZ_NUMBER_MIN <= record.quiz_number <= QUIZ_NUMBER_MAX:
            errors.append(f"Quiz number out of range: {record.quiz_number}")

        return len(errors) == 0, errors, warnings


def validate_records(records: Sequence[QuestionRecord]) -> Dict[str, Any]:
    """Validate a whole run result and summarize the findings."""
    validator = RecordValidator()
    summary = {
        'total_questions': len(records),
        'valid_questions': 0,
        'invalid_questions': 0,
        'questions_with_warnings': 0,
        'incomplete_quizzes': {},
        'errors': [],
        'warnings': [],
    }

    for record in records:
        is_valid, errors, warnings = validator.validate_record(record)
        if is_valid:
            summary['valid_questions'] += 1
        else:
            summary['invalid_questions'] += 1
            summary['errors'].extend(f"quiz {record.quiz_number}: {e}" for e in errors)
        if warnings:
            summary['questions_with_warnings'] += 1
            summary['warnings'].extend(f"quiz {record.quiz_number}: {w}" for w in warnings)

    per_quiz = Counter(record.quiz_number for record in records)
    summary['incomplete_quizzes'] = {
        quiz: count for quiz, count in sorted(per_quiz.items()) if count != QUESTIONS_PER_QUIZ
    }

    return summary


def print_validation_report(validation_summary: Dict[str, Any]) -> None:
    """Print a validation report to console."""
    print("\nData quality")
    print("=" * 40)
    print(f"Total questions: {validation_summary['total_questions']}")
    print(f"Valid questions: {validation_summary['valid_questions']}")
    print(f"Invalid questions: {validation_summary['invalid_questions']}")
    print(f"Questions with warnings: {validation_summary['questions_with_warnings']}")

    if validation_summary['incomplete_quizzes']:
        print(f"Quizzes without {QUESTIONS_PER_QUIZ} questions: {validation_summary['incomplete_quizzes']}")

    for error in validation_summary['errors'][:10]:
        print(f"  ERROR {error}")
    if len(validation_summary['errors']) > 10:
        print(f"  ... and {len(validation_summary['errors']) - 10} more errors")
