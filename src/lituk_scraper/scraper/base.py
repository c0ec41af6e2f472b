from abc import ABC, abstractmethod
from typing import List, Optional
import logging
from playwright.async_api import Browser, Playwright

from ..models import QuestionRecord
from .config import ScraperConfig


class BaseScraper(ABC):
    def __init__(self, config: Optional[ScraperConfig] = None):
        self.config = config or ScraperConfig()
        self.logger = logging.getLogger(self.__class__.__name__)
        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the scraper (e.g., launch browser)."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Clean up resources (e.g., close browser)."""
        pass

    @abstractmethod
    async def run_all(self, quiz_start: int, quiz_end: int, concurrency: int) -> List[QuestionRecord]:
        """Scrape every quiz in the inclusive range."""
        pass

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()