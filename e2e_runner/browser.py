"""Browser session collaborators.

The runner only needs to open one page per test file and close it again.
``PlaywrightBrowser`` is the production implementation; anything satisfying
``BrowserSession`` works.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Protocol

from playwright.async_api import Browser, ConsoleMessage, Error, async_playwright
from playwright.async_api import Page as PlaywrightPage

from e2e_runner.config import SuiteConfig
from e2e_runner.failure_log import FailureLog
from e2e_runner.models.log import LogEntry, Severity

log = logging.getLogger(__name__)

CONSOLE_SEVERITY: dict[str, Severity] = {
    "error": "error",
    "assert": "error",
    "warning": "warning",
}


class Page(Protocol):
    """Opaque page handle; closed exactly once per file."""

    async def close(self) -> None:
        """Close the page."""


class BrowserSession(Protocol):
    """One browser shared by every file of a suite run."""

    async def new_page(self, failure_log: FailureLog) -> Page:
        """Open a page whose console output is forwarded into ``failure_log``."""

    async def close(self) -> None:
        """Close the browser."""


@dataclass(frozen=True, kw_only=True)
class PlaywrightBrowser:
    """Browser session driven by Playwright."""

    browser: Browser = field(repr=False)

    @classmethod
    @asynccontextmanager
    async def launch(
        cls, config: SuiteConfig
    ) -> AsyncGenerator["PlaywrightBrowser", None]:
        """Launch the configured browser for the lifetime of the context."""
        async with async_playwright() as playwright:
            browser_type = getattr(playwright, config.browser)
            log.info("Launching %s (headless=%s)", config.browser, config.headless)
            browser = await browser_type.launch(headless=config.headless)
            session = cls(browser=browser)
            try:
                yield session
            finally:
                await session.close()

    async def new_page(self, failure_log: FailureLog) -> PlaywrightPage:
        """Open a page and forward console errors/warnings into ``failure_log``."""
        page = await self.browser.new_page()

        def on_console(message: ConsoleMessage) -> None:
            failure_log.add(
                LogEntry(
                    source="Browser Log",
                    text=message.text,
                    severity=CONSOLE_SEVERITY.get(message.type, "info"),
                )
            )

        def on_page_error(error: Error) -> None:
            failure_log.add(
                LogEntry(source="Browser Error", text=str(error), severity="error")
            )

        page.on("console", on_console)
        page.on("pageerror", on_page_error)
        return page

    async def close(self) -> None:
        """Close the browser; closing twice is harmless."""
        if self.browser.is_connected():
            await self.browser.close()
