import time
import json
import os
from datetime import datetime
from typing import Dict, List, Any
import logging
from pathlib import Path
import psutil  # type: ignore

MAX_STORED_SESSIONS = 100


class RunMetrics:
    """Tracks and reports per-run scraping metrics."""

    def __init__(self, metrics_file: str = "logs/run_metrics.json"):
        self.logger = logging.getLogger(__name__)
        self.metrics_file = metrics_file
        self.session_start = time.time()
        self.session_metrics = {
            'session_id': datetime.now().strftime('%Y%m%d_%H%M%S'),
            'start_time': datetime.now().isoformat(),
            'end_time': None,
            'duration_seconds': 0,
            'quizzes_requested': 0,
            'quizzes_succeeded': [],
            'quizzes_failed': [],
            'questions_scraped': 0,
            'errors': [],
            'performance': {
                'avg_questions_per_minute': 0,
                'peak_memory_mb': 0,
            },
        }
        self.last_memory_check = 0.0

    def record_run_started(self, quiz_numbers: List[int]) -> None:
        self.session_metrics['quizzes_requested'] = len(quiz_numbers)

    def record_question_scraped(self) -> None:
        """Record a question that made it through the page protocol."""
        self.session_metrics['questions_scraped'] += 1
        self._update_performance_metrics()

    def record_quiz_succeeded(self, quiz_number: int) -> None:
        self.session_metrics['quizzes_succeeded'].append(quiz_number)

    def record_quiz_failed(self, quiz_number: int, error: Exception) -> None:
        """Record a quiz job that ended without records."""
        self.session_metrics['quizzes_failed'].append(quiz_number)
        self.session_metrics['errors'].append({
            'timestamp': datetime.now().isoformat(),
            'quiz_number': quiz_number,
            'type': type(error).__name__,
            'message': str(error),
        })

    def _update_performance_metrics(self) -> None:
        current_time = time.time()
        duration = current_time - self.session_start

        self.session_metrics['duration_seconds'] = duration
        if duration > 0:
            self.session_metrics['performance']['avg_questions_per_minute'] = (
                self.session_metrics['questions_scraped'] / duration * 60
            )

        # Memory usage (check every 10 seconds to avoid overhead)
        if current_time - self.last_memory_check > 10:
            try:
                memory_mb = psutil.Process().memory_info().rss / 1024 / 1024
            except psutil.Error as e:
                self.logger.debug(f"Could not read memory usage: {e}")
            else:
                self.session_metrics['performance']['peak_memory_mb'] = max(
                    self.session_metrics['performance']['peak_memory_mb'], memory_mb
                )
            self.last_memory_check = current_time

    def finalize_session(self) -> None:
        """Finalize the current session metrics and append them to the metrics file."""
        self._update_performance_metrics()
        self.session_metrics['end_time'] = datetime.now().isoformat()
        self.session_metrics['duration_seconds'] = time.time() - self.session_start
        self._save_metrics()

    def _save_metrics(self) -> None:
        try:
            all_metrics = []
            if os.path.exists(self.metrics_file):
                with open(self.metrics_file, 'r', encoding='utf-8') as f:
                    all_metrics = json.load(f)

            all_metrics.append(self.session_metrics)
            all_metrics = all_metrics[-MAX_STORED_SESSIONS:]

            Path(self.metrics_file).parent.mkdir(parents=True, exist_ok=True)
            with open(self.metrics_file, 'w', encoding='utf-8') as f:
                json.dump(all_metrics, f, indent=2)

            self.logger.info(f"Metrics saved to {self.metrics_file}")

        except (OSError, json.JSONDecodeError) as e:
            self.logger.error(f"Error saving metrics: {e}")

    def get_current_stats(self) -> Dict[str, Any]:
        """Get current session statistics."""
        self._update_performance_metrics()
        return self.session_metrics.copy()

    def print_summary(self) -> None:
        """Print a run summary to console."""
        stats = self.get_current_stats()

        print("\nScraping summary")
        print("=" * 40)
        print(f"Duration: {stats['duration_seconds'] / 60:.1f} minutes")
        print(f"Quizzes requested: {stats['quizzes_requested']}")
        print(f"Quizzes succeeded: {len(stats['quizzes_succeeded'])}")
        print(f"Quizzes failed: {len(stats['quizzes_failed'])}")
        if stats['quizzes_failed']:
            print(f"  Failed quiz numbers: {sorted(stats['quizzes_failed'])}")
        print(f"Questions scraped: {stats['questions_scraped']}")
        print(f"Rate: {stats['performance']['avg_questions_per_minute']:.1f} questions/min")
        print(f"Peak memory: {stats['performance']['peak_memory_mb']:.1f} MB")
