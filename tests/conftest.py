"""In-memory stand-ins for the parts of the Playwright page API the flows use."""

from typing import Any, Callable, Optional

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from genesis_comps.browser.human import HumanActions
from genesis_comps.settings import GenesisSettings

BASE_URL = "https://genesis.propelio.com"
LOGIN_URL = f"{BASE_URL}/login"
SEARCH_URL = f"{BASE_URL}/search/"
DASHBOARD_URL = f"{BASE_URL}/dashboard"


class FakeElement:
    def __init__(self, text: str = "", on_click: Optional[Callable[[], None]] = None):
        self.text = text
        self.on_click = on_click
        self.clicks = 0

    async def text_content(self) -> str:
        return self.text

    async def click(self) -> None:
        self.clicks += 1
        if self.on_click:
            self.on_click()


class FakeContext:
    def __init__(self):
        self._cookies: list[dict[str, Any]] = []
        self.init_scripts: list[str] = []

    async def cookies(self) -> list[dict[str, Any]]:
        return [dict(c) for c in self._cookies]

    async def add_cookies(self, cookies) -> None:
        self._cookies.extend(dict(c) for c in cookies)

    async def add_init_script(self, script: Optional[str] = None, path=None) -> None:
        self.init_scripts.append(script)

    async def clear_cookies(self) -> None:
        self._cookies = []


class FakeKeyboard:
    def __init__(self, page: "FakePage"):
        self.page = page
        self.pressed: list[str] = []

    async def press(self, key: str) -> None:
        self.pressed.append(key)
        if key == "Backspace" and self.page.selected is not None:
            self.page.typed[self.page.selected] = ""
            self.page.selected = None


class FakePage:
    """Scriptable page.

    ``visible``: selectors that ``wait_for_selector`` finds.
    ``elements``: selector -> FakeElement (or ``page -> FakeElement | None``).
    ``scripts``: JS source -> return value (or ``arg -> value``) for ``evaluate``.
    ``functions``: JS source -> bool (or ``arg -> bool``); False makes
    ``wait_for_function`` time out.
    ``redirects``: goto target -> landing URL.
    ``on_click``: selector -> ``page -> None`` hook run by ``click``.
    """

    def __init__(
        self,
        url: str = "about:blank",
        visible=(),
        elements=None,
        inputs=None,
        scripts=None,
        functions=None,
        redirects=None,
    ):
        self.url = url
        self.visible = set(visible)
        self.elements = dict(elements or {})
        self.inputs = list(inputs or [])
        self.scripts = dict(scripts or {})
        self.functions = dict(functions or {})
        self.redirects = dict(redirects or {})
        self.on_click: dict[str, Callable[["FakePage"], None]] = {}
        self.context = FakeContext()
        self.keyboard = FakeKeyboard(self)
        self.typed: dict[str, str] = {}
        self.selected: Optional[str] = None
        self.actions: list[tuple[str, Any]] = []
        self.state: dict[str, Any] = {}

    async def goto(self, url: str, wait_until=None, timeout=None):
        self.actions.append(("goto", url))
        self.url = self.redirects.get(url, url)

    async def wait_for_load_state(self, state=None, timeout=None):
        self.actions.append(("load_state", state))

    async def wait_for_selector(self, selector: str, state=None, timeout=None):
        self.actions.append(("wait", selector))
        if selector in self.visible:
            return FakeElement()
        raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for {selector}")

    async def wait_for_function(self, script: str, arg=None, timeout=None):
        self.actions.append(("wait_function", script))
        outcome = self.functions.get(script, True)
        if callable(outcome):
            outcome = outcome(arg)
        if not outcome:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded")

    async def eval_on_selector_all(self, selector: str, script: str):
        self.actions.append(("eval_all", selector))
        return list(self.inputs) if selector == "input" else []

    async def evaluate(self, script: str, arg=None):
        self.actions.append(("evaluate", script))
        handler = self.scripts.get(script)
        if callable(handler):
            return handler(arg)
        return handler

    async def query_selector(self, selector: str):
        self.actions.append(("query", selector))
        element = self.elements.get(selector)
        if callable(element) and not isinstance(element, FakeElement):
            element = element(self)
        return element

    async def click(self, selector: str, click_count: int = 1, delay=None):
        self.actions.append(("click", selector))
        if click_count == 3:
            self.selected = selector
        hook = self.on_click.get(selector)
        if hook:
            hook(self)

    async def type(self, selector: str, text: str):
        self.typed[selector] = self.typed.get(selector, "") + text

    async def hover(self, selector: str):
        self.actions.append(("hover", selector))

    async def focus(self, selector: str):
        self.actions.append(("focus", selector))

    def calls(self, kind: str) -> list[Any]:
        return [value for name, value in self.actions if name == kind]


class FakeBrowserManager:
    def __init__(self, page: FakePage):
        self._page = page
        self.launched = False
        self.closed = False

    async def launch(self) -> FakePage:
        self.launched = True
        return self._page

    async def navigate_to(self, url: str) -> None:
        await self._page.goto(url, wait_until="networkidle")

    @property
    def page(self) -> FakePage:
        return self._page

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def human() -> HumanActions:
    return HumanActions(delay_scale=0)


@pytest.fixture
def settings(tmp_path) -> GenesisSettings:
    return GenesisSettings(
        email="agent@example.com",
        password="s3cret",
        base_url=BASE_URL,
        session_path=tmp_path / "session.json",
        output_dir=tmp_path / "property_data",
        delay_scale=0,
    )
