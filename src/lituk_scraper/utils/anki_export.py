"""
Anki import file export.

Turns the scraped dataset into a tab-separated, fully quoted text file that
Anki's "Import File" dialog reads as Basic notes: the front shows the
question and its options, the back the correct answer(s), followed by the
explanation tip and the deck name.
"""

import csv
import logging
from pathlib import Path
from typing import Sequence

import pandas as pd  # type: ignore

from ..constants import ANKI_DECK_NAME, ANKI_LINE_BREAK
from ..models import QuestionRecord
from .text_processor import TextProcessor

ANKI_COLUMNS = ['Front', 'Back', 'Tip', 'Deck']

logger = logging.getLogger(__name__)


def build_anki_frame(records: Sequence[QuestionRecord], deck: str = ANKI_DECK_NAME) -> pd.DataFrame:
    """Build one Anki note row per record."""
    rows = []
    for record in records:
        # Blank line between the question and its options
        front = TextProcessor.join_lines([record.question + ANKI_LINE_BREAK, *record.options])
        rows.append({
            'Front': front,
            'Back': TextProcessor.join_lines(record.answers),
            'Tip': record.tip,
            'Deck': deck,
        })
    return pd.DataFrame(rows, columns=ANKI_COLUMNS)


def export_anki(records: Sequence[QuestionRecord], output_file: str, deck: str = ANKI_DECK_NAME) -> int:
    """
    Write the Anki import file, replacing any previous export.

    Returns:
        int: Number of notes written
    """
    df = build_anki_frame(records, deck)

    path = Path(output_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(
        path,
        sep='\t',
        header=False,
        index=False,
        quoting=csv.QUOTE_ALL,
        lineterminator='\n',
        encoding='utf-8',
    )

    logger.info(f"Exported {len(df)} Anki notes to {path}")
    return len(df)
