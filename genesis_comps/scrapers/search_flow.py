"""
Location search on the Genesis search screen.

The search is committed with Enter; the portal has no reliable submit
button. Results are considered loaded once no loading/spinner element is
left, or after a bounded wait.
"""

from __future__ import annotations

from enum import Enum

from loguru import logger
from playwright.async_api import Page, TimeoutError as PlaywrightTimeoutError

from config.portal import (
    LOADING_INDICATOR_SELECTOR,
    PAGE_LOAD_TIMEOUT_MS,
    SEARCH_INPUT_SELECTORS,
    SEARCH_KEYWORDS,
    SEARCH_LOCATOR_TIMEOUT_MS,
    SEARCH_SPINNER_TIMEOUT_MS,
)
from genesis_comps.browser.human import HumanActions
from genesis_comps.browser.locator import ElementLocator, LocatorTarget, attribute_contains
from genesis_comps.exceptions import SearchInputNotFound
from genesis_comps.utils.logging_utils import step_failed, step_finished, step_started

SEARCH_INPUT = LocatorTarget.build(
    "Search input",
    SEARCH_INPUT_SELECTORS,
    heuristics=[attribute_contains(k) for k in SEARCH_KEYWORDS],
    timeout_ms=SEARCH_LOCATOR_TIMEOUT_MS,
)

NO_LOADING_INDICATORS_JS = """
(selector) => document.querySelectorAll(selector).length === 0
"""

# Inter-keystroke delay for the location (ms)
LOCATION_TYPING_DELAY = (10, 20)


class SearchState(Enum):
    IDLE = "idle"
    ON_SEARCH_PAGE = "on_search_page"
    SUBMITTED = "submitted"
    RESULTS_LOADED = "results_loaded"


class SearchFlow:
    def __init__(
        self,
        page: Page,
        locator: ElementLocator,
        human: HumanActions,
        search_url: str,
        spinner_timeout_ms: int = SEARCH_SPINNER_TIMEOUT_MS,
    ):
        self.page = page
        self.locator = locator
        self.human = human
        self.search_url = search_url
        self.spinner_timeout_ms = spinner_timeout_ms
        self.state = SearchState.IDLE

    async def perform_search(self, location: str) -> SearchState:
        step_started("search", location=location)
        try:
            await self.navigate_to_search_page()
            await self.fill_search_bar(location)
            await self.wait_for_search_results()
        except Exception as e:
            step_failed("search", e, location=location)
            raise
        step_finished("search", location=location)
        return self.state

    async def navigate_to_search_page(self) -> None:
        await self.page.goto(self.search_url, wait_until="domcontentloaded", timeout=PAGE_LOAD_TIMEOUT_MS)
        await self.human.wait_for_page_load(self.page)
        self.state = SearchState.ON_SEARCH_PAGE
        logger.info(f"On search page: {self.page.url}")

    async def fill_search_bar(self, location: str) -> None:
        selector = await self.locator.require(SEARCH_INPUT, error_cls=SearchInputNotFound)

        await self.human.move_mouse_human_like(self.page, selector)
        await self.human.type_human_like(
            self.page, selector, location,
            min_delay=LOCATION_TYPING_DELAY[0],
            max_delay=LOCATION_TYPING_DELAY[1],
        )
        await self.page.focus(selector)
        await self.page.keyboard.press("Enter")
        await self.human.random_delay(500, 1000)
        self.state = SearchState.SUBMITTED
        logger.info(f"Search submitted for {location!r}")

    async def wait_for_search_results(self) -> None:
        try:
            await self.page.wait_for_function(
                NO_LOADING_INDICATORS_JS,
                arg=LOADING_INDICATOR_SELECTOR,
                timeout=self.spinner_timeout_ms,
            )
        except PlaywrightTimeoutError:
            logger.warning("Loading indicators still present, continuing anyway")

        await self.human.wait_for_page_load(self.page)
        self.state = SearchState.RESULTS_LOADED
        logger.info("Search results loaded")
