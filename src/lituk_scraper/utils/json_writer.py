import json
import logging
from pathlib import Path
from typing import List, Sequence

from ..models import QuestionRecord
from ..scraper.exceptions import ResultWriteError


class ResultWriter:
    """Writes the scraped dataset as a single JSON array."""

    def __init__(self, output_file: str = "output/scraped_questions.json"):
        self.logger = logging.getLogger(__name__)
        self.output_file = Path(output_file)

    @staticmethod
    def serialize(records: Sequence[QuestionRecord]) -> str:
        """
        Render records as JSON text.

        Output depends only on the records, so the same run result always
        produces byte-identical files.
        """
        return json.dumps([record.to_dict() for record in records], ensure_ascii=False, indent=2) + "\n"

    def persist(self, records: Sequence[QuestionRecord]) -> Path:
        """
        Write all records, replacing any previous dataset.

        Raises:
            ResultWriteError: If the file cannot be written
        """
        content = self.serialize(records)
        try:
            self.output_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.output_file, 'w', encoding='utf-8', newline='\n') as f:
                f.write(content)
        except OSError as e:
            raise ResultWriteError(f"Error writing scraped question data to {self.output_file}: {e}") from e

        self.logger.info(f"Saved {len(records)} questions to {self.output_file}")
        return self.output_file

    def load(self) -> List[QuestionRecord]:
        """Read a previously written dataset back into records."""
        with open(self.output_file, 'r', encoding='utf-8') as f:
            data = json.load(f)
        records = [QuestionRecord.from_dict(item) for item in data]
        self.logger.info(f"Loaded {len(records)} questions from {self.output_file}")
        return records
