import logging
from typing import Callable, List, Optional

from bs4 import BeautifulSoup  # type: ignore
from playwright.async_api import (  # type: ignore
    Error as PlaywrightError, Page, TimeoutError as PlaywrightTimeoutError,
)
from tenacity import (  # type: ignore
    retry, retry_if_exception_type, stop_after_attempt, wait_exponential,
)

from ..constants import (
    BASE_URL, QUESTIONS_PER_QUIZ, QUIZ_NUMBER_MAX, QUIZ_NUMBER_MIN,
    SELECTORS, TIMEOUTS, UNSUPPORTED_QUIZZES,
)
from ..models import QuestionRecord
from ..utils.text_processor import TextProcessor
from .credentials import Cookie, requires_login
from .exceptions import InteractionError, InvalidQuizNumberError, UnsupportedQuizError


def validate_quiz_number(quiz_number: int) -> None:
    """
    Reject quiz numbers the automaton cannot run.

    Raises:
        InvalidQuizNumberError: Outside 1-45
        UnsupportedQuizError: Quiz 1, which opens on a start screen
    """
    if not isinstance(quiz_number, int) or not QUIZ_NUMBER_MIN <= quiz_number <= QUIZ_NUMBER_MAX:
        raise InvalidQuizNumberError(quiz_number)
    if quiz_number in UNSUPPORTED_QUIZZES:
        raise UnsupportedQuizError(quiz_number, "the start screen is not handled")


class QuizPageAutomaton:
    """
    Drives one browser tab through a quiz and extracts every question.

    Each question is answered with its first option so the site reveals the
    correct answer(s) and the explanation tip, then the rendered page is
    parsed with BeautifulSoup. Any failed step aborts the whole quiz.
    """

    def __init__(self, settle_delay_ms: float = TIMEOUTS['settle_delay'],
                 element_timeout_ms: float = TIMEOUTS['element_wait'],
                 navigation_timeout_ms: float = TIMEOUTS['navigation']):
        self.logger = logging.getLogger(__name__)
        self.settle_delay_ms = settle_delay_ms
        self.element_timeout_ms = element_timeout_ms
        self.navigation_timeout_ms = navigation_timeout_ms
        self.text_processor = TextProcessor()

    async def run_quiz(self, page: Page, quiz_number: int, cookies: Optional[List[Cookie]],
                       on_question_done: Callable[[], None]) -> List[QuestionRecord]:
        """
        Scrape all questions of one quiz.

        Args:
            page: Tab owned by the caller for the duration of the quiz
            quiz_number: Quiz to scrape (2-45)
            cookies: Login cookies, attached for members-only quizzes
            on_question_done: Called once after each question

        Returns:
            List[QuestionRecord]: Exactly QUESTIONS_PER_QUIZ records

        Raises:
            InvalidQuizNumberError, UnsupportedQuizError: Before any navigation
            InteractionError: When a wait, click or navigation fails
        """
        validate_quiz_number(quiz_number)
        log_id = f"[quiz {quiz_number}]"

        if requires_login(quiz_number):
            if not cookies:
                raise InteractionError(quiz_number, 0, "attach login cookies (none available)")
            await page.context.add_cookies(cookies)
            self.logger.debug(f"{log_id} Attached {len(cookies)} login cookies")

        await self._navigate(page, quiz_number)
        self.logger.debug(f"{log_id} Page loaded")

        records: List[QuestionRecord] = []
        for index in range(1, QUESTIONS_PER_QUIZ + 1):
            record = await self._scrape_question(page, quiz_number, index)
            records.append(record)
            self.logger.debug(f"{log_id} Question {index}: {record.question[:60]}")
            on_question_done()

        return records

    async def _navigate(self, page: Page, quiz_number: int) -> None:
        url = f"{BASE_URL}?test={quiz_number}"

        @retry(
            stop=stop_after_attempt(2),
            wait=wait_exponential(multiplier=1, min=2, max=8),
            retry=retry_if_exception_type((PlaywrightTimeoutError,)),
            reraise=True,
        )
        async def goto():
            await page.goto(url, timeout=self.navigation_timeout_ms)

        try:
            await goto()
        except PlaywrightError as e:
            raise InteractionError(quiz_number, 0, f"open {url}", e) from e

    async def _scrape_question(self, page: Page, quiz_number: int, index: int) -> QuestionRecord:
        base = SELECTORS['question_item'].format(index=index)

        # Answer with the first option to make the site reveal the solution
        first_option = f"{base} > {SELECTORS['first_option']}"
        await self._wait_and_click(page, first_option, quiz_number, index, "click the first option")

        # Multi-select questions need an explicit check
        check_button = f"{base} > {SELECTORS['check_button']}"
        if await page.query_selector(check_button) is not None:
            await self._click(page, check_button, quiz_number, index, "click the check button")

        await self._wait_for_reveal(page, base)

        html = await page.content()
        record = self.extract_question(html, base, quiz_number)

        next_button = f"{base} > {SELECTORS['next_button']}"
        await self._wait_and_click(page, next_button, quiz_number, index, "click the next button")
        await page.wait_for_timeout(self.settle_delay_ms)

        return record

    async def _wait_and_click(self, page: Page, selector: str, quiz_number: int,
                              index: int, step: str) -> None:
        try:
            await page.wait_for_selector(selector, timeout=self.element_timeout_ms)
        except PlaywrightError as e:
            raise InteractionError(quiz_number, index, step, e) from e
        await self._click(page, selector, quiz_number, index, step)

    async def _click(self, page: Page, selector: str, quiz_number: int,
                     index: int, step: str) -> None:
        try:
            await page.click(selector, timeout=self.element_timeout_ms)
        except PlaywrightError as e:
            raise InteractionError(quiz_number, index, step, e) from e

    async def _wait_for_reveal(self, page: Page, base: str) -> None:
        """
        Wait for the correct-answer markers to render.

        Bounded by the settle delay, so a page that never marks an answer
        costs exactly the fixed delay before extraction goes ahead.
        """
        marker = f"{base} {SELECTORS['correct_marker']}"
        try:
            await page.wait_for_selector(marker, state='attached', timeout=self.settle_delay_ms)
        except PlaywrightTimeoutError:
            self.logger.debug(f"No correct-answer marker after {self.settle_delay_ms}ms: {marker}")

    def extract_question(self, html: str, base: str, quiz_number: int) -> QuestionRecord:
        """
        Parse one question out of the rendered page.

        Args:
            html: Full page HTML
            base: Selector of the question's list item
            quiz_number: Stored on the record

        Returns:
            QuestionRecord: Tip is empty when the page shows none
        """
        soup = BeautifulSoup(html, 'html.parser')

        question = self._joined_text(soup, f"{base} > {SELECTORS['question_text']}")
        options = [
            self.text_processor.normalize(el.get_text())
            for el in soup.select(f"{base} > {SELECTORS['option_text']}")
        ]
        answers = [
            self.text_processor.normalize(el.get_text())
            for el in soup.select(f"{base} > {SELECTORS['correct_option_text']}")
        ]
        tip = self._joined_text(soup, f"{base} > {SELECTORS['tip_text']}")

        return QuestionRecord.create(
            question=self.text_processor.clean_question_text(question),
            options=options,
            answers=answers,
            tip=self.text_processor.clean_tip_text(tip),
            quiz_number=quiz_number,
        )

    @staticmethod
    def _joined_text(soup: BeautifulSoup, selector: str) -> str:
        return ''.join(el.get_text() for el in soup.select(selector))
