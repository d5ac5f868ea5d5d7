"""
Login state machine for the Genesis portal.

    UNAUTHENTICATED -> CREDENTIALS_ENTERED -> SUBMITTED -> VERIFIED

A page that is already away from the login surface (restored session) goes
straight to VERIFIED without touching the form.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Optional

from loguru import logger
from playwright.async_api import Error as PlaywrightError, Page

from config.portal import (
    EMAIL_KEYWORDS,
    EMAIL_SELECTORS,
    LOGIN_BUTTON_SELECTORS,
    LOGIN_BUTTON_TEXTS,
    LOGIN_COMPLETION_TIMEOUT_MS,
    LOGIN_ERROR_SELECTORS,
    LOGIN_PATH,
    LOGIN_POLL_INTERVAL_MS,
    PASSWORD_KEYWORDS,
    PASSWORD_LOCATOR_TIMEOUT_MS,
    PASSWORD_SELECTORS,
)
from genesis_comps.browser.human import HumanActions
from genesis_comps.browser.locator import (
    ElementLocator,
    LocatorTarget,
    attribute_contains,
    text_contains,
)
from genesis_comps.exceptions import LoginTimeout
from genesis_comps.utils.logging_utils import step_failed, step_finished, step_started

EMAIL_FIELD = LocatorTarget.build(
    "Email field",
    EMAIL_SELECTORS,
    heuristics=[attribute_contains(k) for k in EMAIL_KEYWORDS],
)
PASSWORD_FIELD = LocatorTarget.build(
    "Password field",
    PASSWORD_SELECTORS,
    heuristics=[attribute_contains(k) for k in PASSWORD_KEYWORDS],
    timeout_ms=PASSWORD_LOCATOR_TIMEOUT_MS,
)
LOGIN_BUTTON = LocatorTarget.build(
    "Login button",
    LOGIN_BUTTON_SELECTORS,
    heuristics=[text_contains(t) for t in LOGIN_BUTTON_TEXTS],
)

# Inter-keystroke delay for credentials (ms)
CREDENTIAL_TYPING_DELAY = (15, 80)


class LoginState(Enum):
    UNAUTHENTICATED = "unauthenticated"
    CREDENTIALS_ENTERED = "credentials_entered"
    SUBMITTED = "submitted"
    VERIFIED = "verified"


def is_login_surface(url: str) -> bool:
    return LOGIN_PATH in url


class LoginFlow:
    def __init__(
        self,
        page: Page,
        locator: ElementLocator,
        human: HumanActions,
        completion_timeout_ms: int = LOGIN_COMPLETION_TIMEOUT_MS,
        poll_interval_ms: int = LOGIN_POLL_INTERVAL_MS,
    ):
        self.page = page
        self.locator = locator
        self.human = human
        self.completion_timeout_ms = completion_timeout_ms
        self.poll_interval_ms = poll_interval_ms
        self.state = LoginState.UNAUTHENTICATED
        self.error_text: Optional[str] = None

    async def perform_login(self, email: str, password: str) -> LoginState:
        step_started("login")
        try:
            await self.human.wait_for_page_load(self.page)

            if not is_login_surface(self.page.url):
                logger.info(f"Already authenticated ({self.page.url}); skipping login form")
                self.state = LoginState.VERIFIED
                step_finished("login", reused=True)
                return self.state

            await self.fill_email_field(email)
            await self.fill_password_field(password)
            self.state = LoginState.CREDENTIALS_ENTERED

            await self.click_login_button()
            self.state = LoginState.SUBMITTED

            if await self.wait_for_login_completion():
                self.state = LoginState.VERIFIED
                step_finished("login")
            else:
                logger.error(f"Login rejected by the portal: {self.error_text}")
            return self.state
        except Exception as e:
            step_failed("login", e)
            raise

    async def fill_email_field(self, email: str) -> None:
        selector = await self.locator.require(EMAIL_FIELD)
        await self.human.move_mouse_human_like(self.page, selector)
        await self.human.type_human_like(
            self.page, selector, email,
            min_delay=CREDENTIAL_TYPING_DELAY[0],
            max_delay=CREDENTIAL_TYPING_DELAY[1],
        )
        logger.info("Email field filled")

    async def fill_password_field(self, password: str) -> None:
        selector = await self.locator.require(PASSWORD_FIELD)
        await self.human.move_mouse_human_like(self.page, selector)
        await self.human.type_human_like(
            self.page, selector, password,
            min_delay=CREDENTIAL_TYPING_DELAY[0],
            max_delay=CREDENTIAL_TYPING_DELAY[1],
        )
        logger.info("Password field filled")

    async def click_login_button(self) -> None:
        selector = await self.locator.require(LOGIN_BUTTON)
        await self.human.move_mouse_human_like(self.page, selector)
        await self.human.click_human_like(self.page, selector, delay_before=150, delay_after=200)
        logger.info("Login button clicked")

    async def wait_for_login_completion(self) -> bool:
        """Poll until the URL leaves the login page.

        Returns False when an inline error shows up first; raises
        ``LoginTimeout`` when neither happens within the hard timeout.
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.completion_timeout_ms / 1000

        while True:
            if not is_login_surface(self.page.url):
                await self.human.wait_for_page_load(self.page)
                logger.info(f"Login completed, now at {self.page.url}")
                return True

            self.error_text = await self.find_login_error()
            if self.error_text is not None:
                return False

            if loop.time() >= deadline:
                raise LoginTimeout(
                    f"Still on the login page after {self.completion_timeout_ms} ms"
                )
            await asyncio.sleep(self.poll_interval_ms / 1000)

    async def find_login_error(self) -> Optional[str]:
        """Text of the first inline error element on the page, if any."""
        for selector in LOGIN_ERROR_SELECTORS:
            element = await self.page.query_selector(selector)
            if element is not None:
                text = (await element.text_content() or "").strip()
                return text or selector
        return None

    async def is_login_successful(self) -> bool:
        if not is_login_surface(self.page.url):
            return True
        try:
            error = await self.find_login_error()
        except PlaywrightError as e:
            logger.error(f"Error checking login status: {e}")
            return False
        if error is not None:
            logger.error(f"Login failed: {error}")
        return False
