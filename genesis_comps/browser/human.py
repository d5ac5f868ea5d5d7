"""
Human-paced pointer and keyboard actions over a Playwright page.

Every pause is drawn from a millisecond range; ``delay_scale`` stretches or
shrinks all of them (0 disables pausing, which is what the tests use).
"""
import asyncio
import random

from loguru import logger
from playwright.async_api import Page, TimeoutError as PlaywrightTimeoutError


class HumanActions:
    def __init__(self, delay_scale: float = 1.0):
        self.delay_scale = max(0.0, delay_scale)

    async def random_delay(self, min_ms: int = 50, max_ms: int = 150) -> int:
        """Sleep for a random number of milliseconds in ``[min_ms, max_ms]``."""
        delay = random.randint(min_ms, max_ms)  # noqa: S311
        await asyncio.sleep(delay * self.delay_scale / 1000)
        return delay

    async def type_human_like(
        self,
        page: Page,
        selector: str,
        text: str,
        min_delay: int = 20,
        max_delay: int = 60,
        clear_first: bool = True,
    ) -> None:
        """Type ``text`` one character at a time with a random pause after each key."""
        logger.debug(f"Typing {len(text)} characters into {selector}")

        if clear_first:
            # Triple click selects the whole value, backspace wipes it
            await page.click(selector, click_count=3)
            await page.keyboard.press("Backspace")
            await self.random_delay(100, 200)

        for char in text:
            await page.type(selector, char)
            await self.random_delay(min_delay, max_delay)

        logger.debug(f"Finished typing into {selector}")

    async def click_human_like(
        self,
        page: Page,
        selector: str,
        wait_for_selector: bool = True,
        delay_before: int = 100,
        delay_after: int = 150,
    ) -> None:
        logger.debug(f"Clicking on {selector}")

        if wait_for_selector:
            await page.wait_for_selector(selector, timeout=10000)

        await self.random_delay(delay_before, delay_before + 50)
        await page.click(selector, delay=random.uniform(50, 150))  # noqa: S311
        await self.random_delay(delay_after, delay_after + 100)

        logger.debug(f"Clicked on {selector}")

    async def move_mouse_human_like(self, page: Page, selector: str) -> None:
        logger.debug(f"Moving mouse to {selector}")
        await page.wait_for_selector(selector, timeout=10000)
        await page.hover(selector)
        await self.random_delay(50, 150)

    async def scroll_into_view(self, page: Page, selector: str, direction: str = "down") -> None:
        block = "end" if direction == "down" else "start"
        await page.evaluate(
            """([sel, block]) => {
                const el = document.querySelector(sel);
                if (el) el.scrollIntoView({behavior: 'smooth', block});
            }""",
            [selector, block],
        )
        await self.random_delay(200, 400)

    async def wait_for_page_load(self, page: Page, timeout_ms: int = 30000) -> None:
        """Wait for network idle, falling back to DOM content loaded; never raises on timeout."""
        try:
            await page.wait_for_load_state("networkidle", timeout=timeout_ms / 2)
            logger.debug("Page loaded (networkidle)")
        except PlaywrightTimeoutError:
            logger.warning("Network idle timeout, trying domcontentloaded")
            try:
                await page.wait_for_load_state("domcontentloaded", timeout=timeout_ms / 2)
                logger.debug("Page loaded (domcontentloaded)")
            except PlaywrightTimeoutError:
                logger.warning("DOM content loaded timeout, continuing anyway")

    async def wait_for_element_stable(self, page: Page, selector: str, timeout_ms: int = 10000) -> None:
        await page.wait_for_selector(selector, state="visible", timeout=timeout_ms)
        await self.random_delay(100, 200)
