from typing import Optional

from loguru import logger
from playwright.async_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    Playwright,
    Route,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)
from playwright_stealth import Stealth
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from config.portal import BLOCKED_RESOURCE_TYPES, BROWSER_ARGS, USER_AGENT
from genesis_comps.exceptions import NavigationTimeout
from genesis_comps.settings import GenesisSettings
from genesis_comps.utils.logging_utils import step_failed, step_finished, step_started


class BrowserManager:
    """Owns the Playwright driver, one Chromium instance and its single page."""

    def __init__(self, settings: GenesisSettings):
        self.settings = settings
        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None

    @retry(
        stop=stop_after_attempt(2),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(PlaywrightError),
        reraise=True,
    )
    async def launch(self) -> Page:
        step_started("launch browser")
        try:
            self.playwright = await async_playwright().start()
            self.browser = await self.playwright.chromium.launch(
                headless=self.settings.headless,
                slow_mo=self.settings.slow_mo,
                executable_path=self.settings.executable_path,
                args=BROWSER_ARGS,
            )
            self.context = await self.browser.new_context(
                user_agent=USER_AGENT,
                viewport=self.settings.viewport,
                locale="en-US",
                timezone_id="America/Chicago",
                extra_http_headers={"Accept-Language": "en-US,en;q=0.9"},
            )
            page = await self.context.new_page()
            page.set_default_timeout(self.settings.timeout_ms)
            await Stealth().apply_stealth_async(page)
            if self.settings.block_resources:
                await page.route("**/*", self._block_heavy_resources)
        except PlaywrightError as e:
            step_failed("launch browser", e)
            await self.close()
            raise

        self._page = page
        step_finished("launch browser")
        return page

    @staticmethod
    async def _block_heavy_resources(route: Route) -> None:
        # Image URLs are read from src attributes, the bytes are never needed
        if route.request.resource_type in BLOCKED_RESOURCE_TYPES:
            await route.abort()
        else:
            await route.continue_()

    async def navigate_to(self, url: str) -> None:
        """Go to ``url`` waiting for network idle, retrying once on DOM content loaded."""
        page = self.page
        step_started(f"navigate to {url}")
        try:
            await page.goto(url, wait_until="networkidle", timeout=self.settings.timeout_ms)
        except PlaywrightTimeoutError:
            logger.warning("Network idle timeout, trying with domcontentloaded")
            try:
                await page.goto(url, wait_until="domcontentloaded", timeout=self.settings.timeout_ms)
            except PlaywrightTimeoutError as e:
                step_failed(f"navigate to {url}", e)
                raise NavigationTimeout(f"Navigation to {url} timed out") from e
        step_finished(f"navigate to {url}")

    @property
    def page(self) -> Page:
        if self._page is None:
            raise RuntimeError("Browser not launched. Call launch() first.")
        return self._page

    async def close(self) -> None:
        if self.browser is not None:
            try:
                await self.browser.close()
                logger.info("Browser closed")
            except PlaywrightError as e:
                logger.warning(f"Browser close failed: {e}")
        if self.playwright is not None:
            try:
                await self.playwright.stop()
            except PlaywrightError as e:
                logger.warning(f"Playwright stop failed: {e}")
        self.browser = None
        self.context = None
        self.playwright = None
        self._page = None
