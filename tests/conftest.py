"""
Fake Playwright objects serving canned quiz pages.

The fakes evaluate selectors with BeautifulSoup against generated HTML that
follows the live site's markup, so the page automaton and scheduler run
unchanged without a browser.
"""

import asyncio
import logging
from typing import Dict, List, Optional, Set, Tuple
from urllib.parse import parse_qs, urlparse

import pytest
from bs4 import BeautifulSoup
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from lituk_scraper.constants import LOGIN_URL, MEMBERS_QUIZ_MIN, QUESTIONS_PER_QUIZ
from lituk_scraper.scraper.config import ScraperConfig

MEMBER_COOKIE = {'name': 'wordpress_logged_in', 'value': 'member', 'domain': 'lifeintheuktests.co.uk', 'path': '/'}


def option_texts(quiz_number: int, index: int) -> List[str]:
    return [f"Answer {letter} for quiz {quiz_number} question {index}" for letter in "ABCD"]


def correct_positions(index: int) -> List[int]:
    """Every sixth question is multi-select with two correct options."""
    if index % 6 == 0:
        return [1, 3]
    return [index % 4]


def is_multi_select(index: int) -> bool:
    return len(correct_positions(index)) > 1


class FakeSite:
    """Renders quiz pages and records what the browser did to them."""

    def __init__(self):
        self.missing_next: Set[Tuple[int, int]] = set()
        self.missing_first_option: Set[Tuple[int, int]] = set()
        self.slowness: Dict[int, int] = {}
        self.events: List[Tuple[str, int]] = []
        self.active = 0
        self.max_active = 0

    def render(self, quiz_number: int) -> str:
        items = []
        for index in range(1, QUESTIONS_PER_QUIZ + 1):
            correct = correct_positions(index)
            options = []
            for position, text in enumerate(option_texts(quiz_number, index)):
                css = ' class="theorypass_answerCorrect"' if position in correct else ''
                if position == 0 and (quiz_number, index) in self.missing_first_option:
                    options.append(f'<li{css}><label></label></li>')
                    continue
                options.append(
                    f'<li{css}><label><span><div>'
                    f'<span><input type="radio"></span><span> {text}\n</span>'
                    f'</div></span></label></li>'
                )

            if is_multi_select(index):
                check = '<input type="button" name="check" value="Check">'
            else:
                check = '<input type="button" name="check" value="Check" style="display: none;">'

            tip = ''
            if 0 not in correct:
                tip = f'<p>Tip for quiz {quiz_number} question {index}.</p>'

            next_button = ''
            if (quiz_number, index) not in self.missing_next:
                next_button = '<input type="button" name="next" value="Next">'

            items.append(
                '<li class="theorypass_listItem">'
                '<div class="theorypass_question">'
                f'<div><p>Question {index} of quiz {quiz_number}?</p></div>'
                f'<ul>{"".join(options)}</ul>'
                '</div>'
                f'{check}'
                f'<div class="theorypass_response"><div class="theorypass_incorrect">{tip}</div></div>'
                f'{next_button}'
                '</li>'
            )

        return (
            '<html><body><div class="theorypass_quiz"><ol>'
            + ''.join(items)
            + '</ol></div></body></html>'
        )

    def render_login_wall(self) -> str:
        return '<html><body><form class="login"><input name="log"></form></body></html>'


class FakePage:
    def __init__(self, site: FakeSite, context: 'FakeContext'):
        self.site = site
        self.context = context
        self.quiz_number: Optional[int] = None
        self.visited: List[str] = []
        self.clicks: List[str] = []
        self.html = ''
        self._soup = BeautifulSoup('', 'html.parser')

    async def goto(self, url: str, timeout: Optional[float] = None):
        self.visited.append(url)
        query = parse_qs(urlparse(url).query)
        self.quiz_number = int(query['test'][0])
        self.context.quiz_number = self.quiz_number
        self.site.events.append(('goto', self.quiz_number))

        member = any(c.get('value') == MEMBER_COOKIE['value'] for c in self.context.cookie_jar)
        if self.quiz_number >= MEMBERS_QUIZ_MIN and not member:
            self.html = self.site.render_login_wall()
        else:
            self.html = self.site.render(self.quiz_number)
        self._soup = BeautifulSoup(self.html, 'html.parser')
        await asyncio.sleep(0)

    async def wait_for_selector(self, selector: str, state: Optional[str] = None,
                                timeout: Optional[float] = None):
        await asyncio.sleep(0)
        element = self._soup.select_one(selector)
        if element is None:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for {selector}")
        return element

    async def query_selector(self, selector: str):
        return self._soup.select_one(selector)

    async def click(self, selector: str, timeout: Optional[float] = None):
        if self._soup.select_one(selector) is None:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded clicking {selector}")
        self.clicks.append(selector)

    async def content(self) -> str:
        return self.html

    async def wait_for_timeout(self, timeout: float):
        for _ in range(self.site.slowness.get(self.quiz_number, 1)):
            await asyncio.sleep(0)


class FakeContext:
    def __init__(self, site: FakeSite, browser: 'FakeBrowser'):
        self.site = site
        self.browser = browser
        self.cookie_jar: List[dict] = []
        self.pages: List[FakePage] = []
        self.quiz_number: Optional[int] = None
        self.closed = False

    async def new_page(self) -> FakePage:
        page = FakePage(self.site, self)
        self.pages.append(page)
        return page

    async def add_cookies(self, cookies):
        self.cookie_jar.extend(cookies)

    async def cookies(self):
        return list(self.cookie_jar)

    async def close(self):
        self.closed = True
        self.site.active -= 1
        if self.quiz_number is not None:
            self.site.events.append(('close', self.quiz_number))


class FakeBrowser:
    def __init__(self, site: FakeSite):
        self.site = site
        self.contexts: List[FakeContext] = []
        self.closed = False

    async def new_context(self, **kwargs) -> FakeContext:
        context = FakeContext(self.site, self)
        self.contexts.append(context)
        self.site.active += 1
        self.site.max_active = max(self.site.max_active, self.site.active)
        return context

    async def close(self):
        self.closed = True


class FakeLoginPage:
    def __init__(self, context: 'FakeLoginContext', user_logs_in: bool):
        self.context = context
        self.user_logs_in = user_logs_in
        self.url = ''

    async def goto(self, url: str, timeout: Optional[float] = None):
        self.url = url

    async def wait_for_url(self, predicate, timeout: Optional[float] = None):
        if not self.user_logs_in:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded")
        self.url = "https://lifeintheuktests.co.uk/my-account/"
        assert predicate(self.url)
        assert not predicate(LOGIN_URL)
        self.context.cookie_jar.append(dict(MEMBER_COOKIE))


class FakeLoginContext:
    def __init__(self, user_logs_in: bool):
        self.user_logs_in = user_logs_in
        self.cookie_jar: List[dict] = []

    async def new_page(self) -> FakeLoginPage:
        return FakeLoginPage(self, self.user_logs_in)

    async def cookies(self):
        return list(self.cookie_jar)


class FakeLoginBrowser:
    def __init__(self, user_logs_in: bool):
        self.user_logs_in = user_logs_in
        self.closed = False

    async def new_context(self, **kwargs) -> FakeLoginContext:
        return FakeLoginContext(self.user_logs_in)

    async def close(self):
        self.closed = True


class FakeChromium:
    def __init__(self, user_logs_in: bool):
        self.user_logs_in = user_logs_in
        self.launches: List[dict] = []
        self.browsers: List[FakeLoginBrowser] = []

    async def launch(self, **kwargs) -> FakeLoginBrowser:
        self.launches.append(kwargs)
        browser = FakeLoginBrowser(self.user_logs_in)
        self.browsers.append(browser)
        return browser


class FakePlaywright:
    def __init__(self, user_logs_in: bool = True):
        self.chromium = FakeChromium(user_logs_in)
        self.stopped = False

    async def stop(self):
        self.stopped = True


@pytest.fixture
def restore_logging():
    """Undo the root logger changes made by setup_logging."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)


@pytest.fixture
def site() -> FakeSite:
    return FakeSite()


@pytest.fixture
def browser(site) -> FakeBrowser:
    return FakeBrowser(site)


@pytest.fixture
def make_config(tmp_path):
    """Build a config with fast timeouts and storage under tmp_path."""
    def _make(**scraper_overrides) -> ScraperConfig:
        scraper = {
            'timeouts': {'settle_delay': 0, 'element_wait': 10, 'navigation': 10, 'login_wait': 10},
            'verify_session': False,
        }
        scraper.update(scraper_overrides)
        return ScraperConfig(None, overrides={
            'scraper': scraper,
            'storage': {
                'cookies_file': str(tmp_path / 'cookies.json'),
                'output_file': str(tmp_path / 'out.json'),
                'anki_file': str(tmp_path / 'anki.txt'),
                'metrics_file': str(tmp_path / 'metrics.json'),
            },
        })
    return _make
