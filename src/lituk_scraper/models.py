"""
Record types produced by the quiz scraper.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Tuple


@dataclass(frozen=True)
class QuestionRecord:
    """
    One extracted question.

    Attributes:
        question: Prompt text
        options: Answer choices in page order
        answers: The options marked correct, in page order
        tip: Explanation shown after an incorrect answer (may be empty)
        quiz_number: Quiz the question belongs to
    """
    question: str
    options: Tuple[str, ...]
    answers: Tuple[str, ...]
    tip: str
    quiz_number: int

    @classmethod
    def create(cls, question: str, options: Iterable[str], answers: Iterable[str],
               tip: str, quiz_number: int) -> 'QuestionRecord':
        return cls(
            question=question,
            options=tuple(options),
            answers=tuple(answers),
            tip=tip,
            quiz_number=quiz_number,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the dataset's wire keys."""
        return {
            'question': self.question,
            'options': list(self.options),
            'answers': list(self.answers),
            'tip': self.tip,
            'quizNumber': self.quiz_number,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'QuestionRecord':
        return cls.create(
            question=data.get('question', ''),
            options=data.get('options', []),
            answers=data.get('answers', []),
            tip=data.get('tip', ''),
            quiz_number=int(data['quizNumber']),
        )
