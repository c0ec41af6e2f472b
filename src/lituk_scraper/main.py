import asyncio
import argparse
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, List, Optional

from .constants import DEFAULT_PATHS
from .models import QuestionRecord
from .scraper.config import ScraperConfig
from .scraper.exceptions import ScraperError
from .scraper.scheduler import QuizScheduler
from .utils.anki_export import export_anki
from .utils.json_writer import ResultWriter
from .utils.monitoring import RunMetrics
from .utils.validation import print_validation_report, validate_records


def setup_logging(config: ScraperConfig) -> None:
    """Set up logging for file and console output."""
    log_config = config['logging']
    log_level = getattr(logging, str(log_config['level']).upper(), logging.INFO)

    root_logger = logging.getLogger()

    # Clear any existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    root_logger.setLevel(log_level)

    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - [%(funcName)s:%(lineno)d] - %(message)s'
    )
    console_formatter = logging.Formatter(
        '%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    # Combined log with rotation
    log_file = log_config['file']
    Path(log_file).parent.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=log_config.get('max_size', 10485760),
        backupCount=log_config.get('backup_count', 5),
        encoding='utf-8'
    )
    file_handler.setLevel(log_level)
    file_handler.setFormatter(file_formatter)
    root_logger.addHandler(file_handler)

    # Errors only
    error_file = log_config.get('error_file')
    if error_file:
        Path(error_file).parent.mkdir(parents=True, exist_ok=True)
        error_handler = logging.FileHandler(error_file, encoding='utf-8')
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(file_formatter)
        root_logger.addHandler(error_handler)

    # Console stays at WARNING so the progress bar remains readable
    console_handler = logging.StreamHandler()
    console_handler.setLevel(max(log_level, logging.WARNING))
    console_handler.setFormatter(console_formatter)
    root_logger.addHandler(console_handler)

    root_logger.info(f"Logging initialized - Level: {log_config['level']}")
    root_logger.info(f"Log file: {log_file}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Life in the UK Quiz Scraper')
    parser.add_argument('--config', type=str, default=DEFAULT_PATHS['config_file'],
                        help='Path to configuration file')
    parser.add_argument('--start', type=int, help='First quiz number to scrape (default: 2)')
    parser.add_argument('--end', type=int, help='Last quiz number to scrape (default: 45)')
    parser.add_argument('--concurrency', type=int, help='Number of quizzes scraped at once (default: 5)')
    parser.add_argument('--settle-delay', type=int,
                        help='Milliseconds to wait after revealing an answer (default: 500)')
    parser.add_argument('--login-timeout', type=int,
                        help='Milliseconds to wait for the interactive login (default: 300000)')
    parser.add_argument('--mode', choices=['pool', 'batch'],
                        help='pool: start the next quiz as soon as a slot frees up; '
                             'batch: wait for each whole batch before starting the next')
    parser.add_argument('--order', choices=['lifo', 'fifo'],
                        help='Order quizzes are taken from the queue (default: lifo, highest first)')
    parser.add_argument('--output', type=str, help='Path of the JSON dataset to write')
    parser.add_argument('--cookies', type=str, help='Path of the stored login cookies')
    parser.add_argument('--headed', action='store_true', help='Show the scraping browser window')
    parser.add_argument('--no-verify-session', action='store_true',
                        help='Use stored cookies without checking they are still logged in')
    parser.add_argument('--no-progress', action='store_true', help='Hide the progress bar')
    parser.add_argument('--skip-validation', action='store_true', help='Skip data validation')
    parser.add_argument('--anki-export', action='store_true',
                        help='Also write an Anki import file from the scraped dataset')
    parser.add_argument('--anki-only', action='store_true',
                        help='Only convert an existing dataset (--output) to an Anki import file')
    parser.add_argument('--anki-output', type=str, help='Path of the Anki import file')
    return parser


def collect_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Map command line arguments onto the settings file layout."""
    scraper: Dict[str, Any] = {}
    timeouts: Dict[str, Any] = {}
    storage: Dict[str, Any] = {}

    if args.start is not None:
        scraper['quiz_start'] = args.start
    if args.end is not None:
        scraper['quiz_end'] = args.end
    if args.concurrency is not None:
        scraper['concurrency'] = args.concurrency
    if args.mode:
        scraper['scheduling'] = args.mode
    if args.order:
        scraper['job_order'] = args.order
    if args.headed:
        scraper['headless'] = False
    if args.no_verify_session:
        scraper['verify_session'] = False
    if args.settle_delay is not None:
        timeouts['settle_delay'] = args.settle_delay
    if args.login_timeout is not None:
        timeouts['login_wait'] = args.login_timeout
    if timeouts:
        scraper['timeouts'] = timeouts

    if args.output:
        storage['output_file'] = args.output
    if args.cookies:
        storage['cookies_file'] = args.cookies
    if args.anki_output:
        storage['anki_file'] = args.anki_output

    overrides: Dict[str, Any] = {}
    if scraper:
        overrides['scraper'] = scraper
    if storage:
        overrides['storage'] = storage
    return overrides


async def scrape(config: ScraperConfig, show_progress: bool = True) -> List[QuestionRecord]:
    """Run every configured quiz and return the gathered records."""
    metrics = RunMetrics(config['storage']['metrics_file'])
    scraper_settings = config['scraper']

    try:
        async with QuizScheduler(config, metrics=metrics, show_progress=show_progress) as scheduler:
            return await scheduler.run_all(
                scraper_settings['quiz_start'],
                scraper_settings['quiz_end'],
                scraper_settings['concurrency'],
            )
    finally:
        metrics.finalize_session()
        metrics.print_summary()


async def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = ScraperConfig(args.config, overrides=collect_overrides(args))
    except ScraperError as e:
        print(f"Error in configuration: {e}")
        return 2

    setup_logging(config)
    logger = logging.getLogger(__name__)
    writer = ResultWriter(config['storage']['output_file'])

    try:
        if args.anki_only:
            records = writer.load()
        else:
            records = await scrape(config, show_progress=not args.no_progress)
            writer.persist(records)
            print(f"\nSaved {len(records)} questions to {writer.output_file}")

        if not args.skip_validation:
            summary = validate_records(records)
            if summary['invalid_questions']:
                logger.warning(f"{summary['invalid_questions']} questions failed validation")
            print_validation_report(summary)

        if args.anki_export or args.anki_only:
            count = export_anki(records, config['storage']['anki_file'])
            print(f"Exported {count} Anki notes to {config['storage']['anki_file']}")

    except KeyboardInterrupt:
        logger.info("Scraping interrupted by user")
        print("\nScraping interrupted by user. No results were saved.")
        return 130
    except (ScraperError, OSError, ValueError) as e:
        logger.error(f"Fatal error: {e}")
        logger.debug("Full error details:", exc_info=True)
        print(f"\nFatal error occurred: {e}")
        print("Check the log file for detailed error information.")
        return 1
    except Exception as e:
        logger.error(f"Unexpected fatal error: {e}")
        logger.error("Full error details:", exc_info=True)
        print(f"\nFatal error occurred: {e}")
        print("Check the log file for detailed error information.")
        return 1

    logger.info("Run complete")
    return 0


def cli() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == '__main__':
    cli()
