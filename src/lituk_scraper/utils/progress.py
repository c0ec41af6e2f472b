import logging
from typing import Optional

from tqdm import tqdm  # type: ignore


class ProgressReporter:
    """
    Question-level progress bar shared by all quiz jobs.

    increment() is handed to each quiz job as its per-question callback. A
    failing progress display must never fail a quiz, so errors from the bar
    are logged and dropped.
    """

    def __init__(self, total: int, enabled: bool = True, desc: str = "Scraping questions"):
        self.logger = logging.getLogger(__name__)
        self.total = total
        self.count = 0
        self._bar: Optional[tqdm] = None
        if enabled:
            self._bar = tqdm(total=total, desc=desc, unit="q")

    def increment(self) -> None:
        self.count += 1
        if self._bar is None:
            return
        try:
            self._bar.update(1)
        except Exception as e:
            self.logger.debug(f"Progress bar update failed: {e}")

    def close(self) -> None:
        if self._bar is not None:
            self._bar.close()
            self._bar = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
