import asyncio

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from conftest import LOGIN_URL, FakePage
from genesis_comps.browser.manager import BrowserManager
from genesis_comps.exceptions import NavigationTimeout


class SlowPage(FakePage):
    """``goto`` times out for every wait strategy listed in ``stalls``."""

    def __init__(self, stalls=(), **kwargs):
        super().__init__(**kwargs)
        self.stalls = set(stalls)
        self.attempts = []

    async def goto(self, url, wait_until=None, timeout=None):
        self.attempts.append(wait_until)
        if wait_until in self.stalls:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded navigating to {url}")
        await super().goto(url, wait_until=wait_until, timeout=timeout)


def _manager(settings, page) -> BrowserManager:
    manager = BrowserManager(settings)
    manager._page = page
    return manager


def test_navigate_waits_for_network_idle(settings):
    page = SlowPage()

    asyncio.run(_manager(settings, page).navigate_to(LOGIN_URL))

    assert page.attempts == ["networkidle"]
    assert page.url == LOGIN_URL


def test_navigate_falls_back_to_dom_content_loaded(settings):
    page = SlowPage(stalls={"networkidle"})

    asyncio.run(_manager(settings, page).navigate_to(LOGIN_URL))

    assert page.attempts == ["networkidle", "domcontentloaded"]
    assert page.url == LOGIN_URL


def test_navigate_raises_when_both_strategies_time_out(settings):
    page = SlowPage(stalls={"networkidle", "domcontentloaded"})

    with pytest.raises(NavigationTimeout, match=LOGIN_URL):
        asyncio.run(_manager(settings, page).navigate_to(LOGIN_URL))

    assert page.attempts == ["networkidle", "domcontentloaded"]


def test_page_before_launch_is_an_error(settings):
    with pytest.raises(RuntimeError):
        BrowserManager(settings).page
