"""
Login cookie persistence for the members-only quizzes.

Quizzes 16-45 are only served to logged-in members. The site has no API for
logging in, so the first run opens a visible browser on the login page and
waits for the user to sign in; the resulting cookies are written to disk and
reused on every later run.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from playwright.async_api import (  # type: ignore
    Browser, Error as PlaywrightError, Playwright, TimeoutError as PlaywrightTimeoutError,
)

from ..constants import (
    BASE_URL, DEFAULT_PATHS, LOGIN_URL, MEMBERS_QUIZ_MAX, MEMBERS_QUIZ_MIN,
    SELECTORS, SESSION_PROBE_QUIZ, TIMEOUTS,
)
from .exceptions import CookiesNotFoundError, LoginError, LoginTimeoutError

Cookie = Dict[str, Any]


def requires_login(quiz_number: int) -> bool:
    """Whether the quiz is members-only."""
    return MEMBERS_QUIZ_MIN <= quiz_number <= MEMBERS_QUIZ_MAX


class CredentialStore:
    """
    Loads, captures and verifies the authenticated session's cookie set.

    The cookie set is never modified once captured; staleness is detected
    only through verify().
    """

    def __init__(self, cookies_file: str = DEFAULT_PATHS['cookies_file'],
                 login_timeout_ms: float = TIMEOUTS['login_wait'],
                 probe_timeout_ms: float = TIMEOUTS['element_wait']):
        self.logger = logging.getLogger(__name__)
        self.cookies_file = Path(cookies_file)
        self.login_timeout_ms = login_timeout_ms
        self.probe_timeout_ms = probe_timeout_ms

    def load(self) -> List[Cookie]:
        """
        Read the persisted cookie set.

        Raises:
            CookiesNotFoundError: If the file is missing, unreadable or does
                not hold a non-empty list of cookie objects
        """
        try:
            with open(self.cookies_file, 'r', encoding='utf-8') as f:
                cookies = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise CookiesNotFoundError(f"Error reading cookies file {self.cookies_file}: {e}") from e

        if not isinstance(cookies, list) or not cookies:
            raise CookiesNotFoundError(f"Cookies file {self.cookies_file} holds no cookies")

        for cookie in cookies:
            if not isinstance(cookie, dict) or 'name' not in cookie or 'value' not in cookie:
                raise CookiesNotFoundError(f"Malformed cookie entry in {self.cookies_file}: {cookie!r}")

        self.logger.info(f"Loaded {len(cookies)} cookies from {self.cookies_file}")
        return cookies

    def save(self, cookies: List[Cookie]) -> None:
        """Write the cookie set to disk, replacing any previous one."""
        self.cookies_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.cookies_file, 'w', encoding='utf-8') as f:
            json.dump(cookies, f, indent=2)
        self.logger.info(f"Stored {len(cookies)} cookies in {self.cookies_file}")

    async def interactive_capture(self, playwright: Playwright) -> List[Cookie]:
        """
        Have the user log in through a visible browser and keep the cookies.

        Waits until the browser leaves the login page. The cookies are saved
        to disk before being returned.

        Raises:
            LoginTimeoutError: If no login happens within login_timeout_ms
            LoginError: If the browser fails to start or is closed before login
        """
        try:
            browser = await playwright.chromium.launch(headless=False)
        except PlaywrightError as e:
            raise LoginError(f"Could not open the login browser: {e}") from e

        try:
            context = await browser.new_context()
            page = await context.new_page()
            await page.goto(LOGIN_URL)

            self.logger.info(
                f"Waiting for user to log in (timeout {self.login_timeout_ms / 1000:.0f}s)"
            )
            print("Please log in using the browser window that has just opened.")
            try:
                await page.wait_for_url(
                    lambda url: not url.startswith(LOGIN_URL),
                    timeout=self.login_timeout_ms,
                )
            except PlaywrightTimeoutError as e:
                raise LoginTimeoutError(
                    f"No login detected within {self.login_timeout_ms / 1000:.0f}s"
                ) from e
            except PlaywrightError as e:
                raise LoginError(f"Login window closed before login completed: {e}") from e

            self.logger.info("Login detected, storing cookies")
            cookies = await context.cookies()
        finally:
            try:
                await browser.close()
            except PlaywrightError as e:
                self.logger.debug(f"Error closing login browser: {e}")

        self.save(cookies)
        return cookies

    async def verify(self, browser: Browser, cookies: List[Cookie]) -> bool:
        """
        Check that the cookie set still opens a members-only quiz.

        Returns:
            bool: True if the quiz's first answer option rendered
        """
        context = await browser.new_context()
        try:
            await context.add_cookies(cookies)
            page = await context.new_page()
            await page.goto(f"{BASE_URL}?test={SESSION_PROBE_QUIZ}")
            first_option = (
                SELECTORS['question_item'].format(index=1) + ' > ' + SELECTORS['first_option']
            )
            await page.wait_for_selector(first_option, timeout=self.probe_timeout_ms)
            self.logger.debug("Stored session is still valid")
            return True
        except PlaywrightError as e:
            self.logger.warning(f"Stored session failed the members-only probe: {e}")
            return False
        finally:
            await context.close()

    async def get_cookies(self, playwright: Playwright,
                          browser: Optional[Browser] = None) -> List[Cookie]:
        """
        Return a usable cookie set, capturing a new one when needed.

        Loads from disk first and falls back to interactive capture. When a
        browser is given the loaded set is probed and recaptured if stale.
        """
        try:
            cookies = self.load()
        except CookiesNotFoundError as e:
            self.logger.info(f"No stored session ({e}), starting interactive login")
            return await self.interactive_capture(playwright)

        if browser is not None and not await self.verify(browser, cookies):
            self.logger.warning("Stored session has expired, starting interactive login")
            return await self.interactive_capture(playwright)

        return cookies
