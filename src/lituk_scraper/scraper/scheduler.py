import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional, Union

from playwright.async_api import Browser, Page  # type: ignore

from ..constants import QUESTIONS_PER_QUIZ, UNSUPPORTED_QUIZZES
from ..models import QuestionRecord
from ..utils.monitoring import RunMetrics
from ..utils.progress import ProgressReporter
from .base import BaseScraper
from .config import ScraperConfig
from .credentials import Cookie, CredentialStore, requires_login
from .exceptions import ConfigError
from .quiz import QuizPageAutomaton

JobQueue = Union[asyncio.Queue, asyncio.LifoQueue]


class QuizScheduler(BaseScraper):
    """
    Runs one quiz job per quiz number over a single shared browser.

    Every job gets its own browser context and tab, released on every exit
    path. Jobs run with bounded concurrency, either as a streaming worker pool
    (a freed worker immediately takes the next quiz) or in lock-step batches
    where each batch waits for its slowest job. A failing job is logged and
    contributes no records; it never stops the run.
    """

    def __init__(self, config: Optional[ScraperConfig] = None,
                 browser: Optional[Browser] = None,
                 credential_store: Optional[CredentialStore] = None,
                 automaton: Optional[QuizPageAutomaton] = None,
                 metrics: Optional[RunMetrics] = None,
                 show_progress: bool = True):
        super().__init__(config)
        timeouts = self.config.timeouts
        self.browser = browser
        self._owns_browser = browser is None
        self.credential_store = credential_store or CredentialStore(
            cookies_file=self.config['storage']['cookies_file'],
            login_timeout_ms=timeouts['login_wait'],
            probe_timeout_ms=timeouts['element_wait'],
        )
        self.automaton = automaton or QuizPageAutomaton(
            settle_delay_ms=timeouts['settle_delay'],
            element_timeout_ms=timeouts['element_wait'],
            navigation_timeout_ms=timeouts['navigation'],
        )
        self.metrics = metrics or RunMetrics(self.config['storage']['metrics_file'])
        self.show_progress = show_progress
        self._progress: Optional[ProgressReporter] = None

    async def _start_playwright(self) -> None:
        if self.playwright is None:
            from playwright.async_api import async_playwright  # type: ignore
            self.playwright = await async_playwright().start()

    async def initialize(self) -> None:
        """Launch the shared browser unless one was supplied."""
        if self.browser is not None:
            return

        await self._start_playwright()
        headless = self.config['scraper']['headless']
        self.browser = await self.playwright.chromium.launch(headless=headless)
        self._owns_browser = True
        self.logger.info(f"Browser launched (headless={headless})")

    async def close(self) -> None:
        """Close the browser instance and stop Playwright."""
        if self.browser is not None and self._owns_browser:
            try:
                await self.browser.close()
                self.logger.info("Browser closed successfully")
            except Exception as e:
                self.logger.error(f"Error closing browser: {e}")
            self.browser = None
        if self.playwright is not None:
            await self.playwright.stop()
            self.playwright = None

    async def prepare_session(self, quiz_numbers: List[int]) -> Optional[List[Cookie]]:
        """Get login cookies if any requested quiz is members-only."""
        if not any(requires_login(n) for n in quiz_numbers):
            self.logger.debug("No members-only quizzes requested, skipping login")
            return None

        await self._start_playwright()
        probe_browser = self.browser if self.config['scraper']['verify_session'] else None
        return await self.credential_store.get_cookies(self.playwright, probe_browser)

    def build_queue(self, quiz_numbers: List[int]) -> JobQueue:
        """
        Queue one job per quiz number.

        Jobs are inserted in ascending order; with the default "lifo" order
        the highest quiz number runs first.
        """
        if self.config['scraper']['job_order'] == 'lifo':
            queue: JobQueue = asyncio.LifoQueue()
        else:
            queue = asyncio.Queue()
        for quiz_number in quiz_numbers:
            queue.put_nowait(quiz_number)
        return queue

    @asynccontextmanager
    async def open_tab(self) -> AsyncIterator[Page]:
        """Check out a fresh context and tab, closing them however the job ends."""
        context = await self.browser.new_context()
        try:
            page = await context.new_page()
            yield page
        finally:
            try:
                await context.close()
            except Exception as e:
                self.logger.debug(f"Error closing context: {e}")

    def _question_done(self) -> None:
        if self._progress is not None:
            self._progress.increment()
        self.metrics.record_question_scraped()

    async def run_job(self, quiz_number: int, cookies: Optional[List[Cookie]]) -> List[QuestionRecord]:
        """Scrape one quiz; failures are logged and yield no records."""
        try:
            async with self.open_tab() as page:
                records = await self.automaton.run_quiz(page, quiz_number, cookies, self._question_done)
        except Exception as e:
            self.logger.error(f"Error in quiz number {quiz_number}: {e}")
            self.logger.debug(f"Quiz {quiz_number} error details:", exc_info=True)
            self.metrics.record_quiz_failed(quiz_number, e)
            return []

        self.logger.info(f"Quiz {quiz_number} complete ({len(records)} questions)")
        self.metrics.record_quiz_succeeded(quiz_number)
        return records

    async def _run_pool(self, queue: JobQueue, concurrency: int,
                        cookies: Optional[List[Cookie]]) -> List[QuestionRecord]:
        results: List[QuestionRecord] = []

        async def worker(worker_id: int) -> None:
            while True:
                try:
                    quiz_number = queue.get_nowait()
                except asyncio.QueueEmpty:
                    self.logger.debug(f"Worker {worker_id} finished")
                    return
                self.logger.debug(f"Worker {worker_id} picked quiz {quiz_number}")
                results.extend(await self.run_job(quiz_number, cookies))

        workers = min(concurrency, queue.qsize())
        await asyncio.gather(*(worker(i) for i in range(1, workers + 1)))
        return results

    async def _run_batches(self, queue: JobQueue, concurrency: int,
                           cookies: Optional[List[Cookie]]) -> List[QuestionRecord]:
        results: List[QuestionRecord] = []
        batch_number = 0

        while not queue.empty():
            batch = []
            while len(batch) < concurrency and not queue.empty():
                batch.append(queue.get_nowait())

            batch_number += 1
            self.logger.debug(f"Starting batch {batch_number}: quizzes {batch}")
            batch_results = await asyncio.gather(*(self.run_job(n, cookies) for n in batch))
            for records in batch_results:
                results.extend(records)

        return results

    async def run_all(self, quiz_start: int, quiz_end: int, concurrency: int) -> List[QuestionRecord]:
        """
        Scrape every quiz in the inclusive range.

        Returns:
            List[QuestionRecord]: Records of the successful quizzes, in the
            order their jobs completed
        """
        if concurrency < 1:
            raise ConfigError(f"Concurrency must be a positive integer, got {concurrency}")
        if quiz_start > quiz_end:
            raise ConfigError(f"Quiz range start {quiz_start} is after end {quiz_end}")

        quiz_numbers = list(range(quiz_start, quiz_end + 1))
        for quiz_number in sorted(UNSUPPORTED_QUIZZES.intersection(quiz_numbers)):
            self.logger.warning(f"Quiz {quiz_number} is not supported and will be reported as failed")

        if self.browser is None:
            await self.initialize()

        cookies = await self.prepare_session(quiz_numbers)

        mode = self.config['scraper']['scheduling']
        self.logger.info(
            f"Scraping quizzes {quiz_start}-{quiz_end} ({len(quiz_numbers)} quizzes) "
            f"with {concurrency} concurrent jobs, {mode} scheduling"
        )
        self.metrics.record_run_started(quiz_numbers)

        queue = self.build_queue(quiz_numbers)
        with ProgressReporter(len(quiz_numbers) * QUESTIONS_PER_QUIZ,
                              enabled=self.show_progress) as progress:
            self._progress = progress
            try:
                if mode == 'batch':
                    results = await self._run_batches(queue, concurrency, cookies)
                else:
                    results = await self._run_pool(queue, concurrency, cookies)
            finally:
                self._progress = None

        self.logger.info(f"Scraped {len(results)} questions from {len(quiz_numbers)} quizzes")
        return results
