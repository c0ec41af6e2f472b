"""
Centralized configuration handler for the quiz scraper.

Settings come from a JSON file with ``scraper``, ``storage`` and ``logging``
sections. Missing keys fall back to built-in defaults, and command line
overrides are applied on top before validation.
"""

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from ..constants import (
    DEFAULT_PATHS, JOB_ORDERS, QUIZ_NUMBER_MAX, QUIZ_NUMBER_MIN,
    SCHEDULING_MODES, TIMEOUTS,
)
from .exceptions import ConfigError


DEFAULT_SETTINGS: Dict[str, Any] = {
    'scraper': {
        'quiz_start': 2,
        'quiz_end': 45,
        'concurrency': 5,
        'scheduling': 'pool',
        'job_order': 'lifo',
        'headless': True,
        'verify_session': True,
        'timeouts': {
            'settle_delay': TIMEOUTS['settle_delay'],
            'login_wait': TIMEOUTS['login_wait'],
            'element_wait': TIMEOUTS['element_wait'],
            'navigation': TIMEOUTS['navigation'],
        },
    },
    'storage': {
        'cookies_file': DEFAULT_PATHS['cookies_file'],
        'output_file': DEFAULT_PATHS['output_file'],
        'anki_file': DEFAULT_PATHS['anki_file'],
        'metrics_file': DEFAULT_PATHS['metrics_file'],
    },
    'logging': {
        'level': 'INFO',
        'file': DEFAULT_PATHS['log_file'],
        'error_file': DEFAULT_PATHS['error_log_file'],
        'max_size': 10485760,
        'backup_count': 5,
    },
}


def _deep_merge(base: Dict[str, Any], updates: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ScraperConfig:
    """
    Settings holder with dictionary-style access.

    ``config['scraper']['concurrency']`` works as it would on the raw JSON;
    the properties below are shortcuts for the values the scraper reads most.
    """

    def __init__(self, config_path: Optional[str] = None,
                 overrides: Optional[Dict[str, Any]] = None):
        """
        Initialize the configuration handler.

        Args:
            config_path: Path to the JSON settings file. A missing file is not
                an error; defaults are used instead.
            overrides: Nested dict applied on top of the file contents
        """
        self.logger = logging.getLogger(__name__)
        self.config_path = config_path
        self.settings = _deep_merge(DEFAULT_SETTINGS, self._load_file(config_path))
        if overrides:
            self.settings = _deep_merge(self.settings, overrides)
        self.validate()

    def _load_file(self, config_path: Optional[str]) -> Dict[str, Any]:
        """Load settings from JSON file, or nothing if there is no file."""
        if not config_path:
            return {}

        path = Path(config_path)
        if not path.exists():
            self.logger.info(f"Settings file {config_path} not found, using defaults")
            return {}

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in {config_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Settings file {config_path} must contain a JSON object")

        self.logger.debug(f"Loaded settings from {config_path}")
        return data

    def __getitem__(self, key: str) -> Any:
        return self.settings[key]

    def validate(self) -> None:
        """
        Check settings for values the scraper cannot run with.

        Raises:
            ConfigError: On the first invalid value found
        """
        scraper = self.settings['scraper']

        for key in ('quiz_start', 'quiz_end'):
            value = scraper.get(key)
            if not isinstance(value, int) or isinstance(value, bool) \
                    or not QUIZ_NUMBER_MIN <= value <= QUIZ_NUMBER_MAX:
                raise ConfigError(
                    f"scraper.{key} must be an integer in range "
                    f"{QUIZ_NUMBER_MIN}-{QUIZ_NUMBER_MAX}, got {value!r}"
                )

        if scraper['quiz_start'] > scraper['quiz_end']:
            raise ConfigError(
                f"scraper.quiz_start ({scraper['quiz_start']}) is after "
                f"scraper.quiz_end ({scraper['quiz_end']})"
            )

        concurrency = scraper.get('concurrency')
        if not isinstance(concurrency, int) or isinstance(concurrency, bool) or concurrency < 1:
            raise ConfigError(f"scraper.concurrency must be a positive integer, got {concurrency!r}")

        if scraper.get('scheduling') not in SCHEDULING_MODES:
            raise ConfigError(
                f"scraper.scheduling must be one of {SCHEDULING_MODES}, got {scraper.get('scheduling')!r}"
            )

        if scraper.get('job_order') not in JOB_ORDERS:
            raise ConfigError(
                f"scraper.job_order must be one of {JOB_ORDERS}, got {scraper.get('job_order')!r}"
            )

        for name, value in scraper['timeouts'].items():
            if not isinstance(value, (int, float)) or isinstance(value, bool) or value < 0:
                raise ConfigError(f"scraper.timeouts.{name} must be a non-negative number, got {value!r}")

    @property
    def quiz_range(self) -> range:
        return range(self.settings['scraper']['quiz_start'], self.settings['scraper']['quiz_end'] + 1)

    @property
    def concurrency(self) -> int:
        return self.settings['scraper']['concurrency']

    @property
    def timeouts(self) -> Dict[str, float]:
        return self.settings['scraper']['timeouts']
