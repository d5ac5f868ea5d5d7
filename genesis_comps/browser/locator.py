"""
Element locator with ordered fallback strategies.

A ``LocatorTarget`` names a logical control ("email field", "login button")
and lists candidate strategies. ``ElementLocator.resolve`` tries every exact
CSS candidate in listed order first, and only when all of them fail does it
run the heuristic strategies (attribute scan, visible text), again in listed
order. The outcome is a tagged ``Found`` / ``NotFound`` value; ``require``
turns ``NotFound`` into ``ElementNotFound``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence, Union

from loguru import logger
from playwright.async_api import Page, TimeoutError as PlaywrightTimeoutError

from config.portal import LOCATOR_TIMEOUT_MS
from genesis_comps.exceptions import ElementNotFound

# Attribute snapshot of every input on the page, in DOM order
INPUT_ATTRIBUTES_JS = """
els => els.map(el => ({
    placeholder: el.getAttribute('placeholder'),
    name: el.getAttribute('name'),
    type: el.getAttribute('type'),
    id: el.getAttribute('id'),
}))
"""


class StrategyKind(Enum):
    EXACT = "exact"
    ATTRIBUTE = "attribute"
    TEXT = "text"

    @property
    def is_heuristic(self) -> bool:
        return self is not StrategyKind.EXACT


@dataclass(frozen=True, slots=True)
class LocatorStrategy:
    kind: StrategyKind
    value: str
    # ATTRIBUTE: attributes to inspect; TEXT: tag to match
    attributes: tuple[str, ...] = ("placeholder", "name")
    tag: str = "button"

    def describe(self) -> str:
        if self.kind is StrategyKind.ATTRIBUTE:
            return f"input[{'|'.join(self.attributes)}~={self.value!r}]"
        if self.kind is StrategyKind.TEXT:
            return f'{self.tag}:has-text("{self.value}")'
        return self.value


def exact(selector: str) -> LocatorStrategy:
    return LocatorStrategy(StrategyKind.EXACT, selector)


def attribute_contains(keyword: str, attributes: tuple[str, ...] = ("placeholder", "name")) -> LocatorStrategy:
    return LocatorStrategy(StrategyKind.ATTRIBUTE, keyword.lower(), attributes=attributes)


def text_contains(text: str, tag: str = "button") -> LocatorStrategy:
    return LocatorStrategy(StrategyKind.TEXT, text, tag=tag)


@dataclass(frozen=True, slots=True)
class LocatorTarget:
    name: str
    strategies: tuple[LocatorStrategy, ...]
    timeout_ms: int = LOCATOR_TIMEOUT_MS

    @classmethod
    def build(
        cls,
        name: str,
        selectors: Sequence[str],
        heuristics: Sequence[LocatorStrategy] = (),
        timeout_ms: int = LOCATOR_TIMEOUT_MS,
    ) -> "LocatorTarget":
        return cls(
            name=name,
            strategies=tuple(exact(s) for s in selectors) + tuple(heuristics),
            timeout_ms=timeout_ms,
        )

    @property
    def static_strategies(self) -> tuple[LocatorStrategy, ...]:
        return tuple(s for s in self.strategies if not s.kind.is_heuristic)

    @property
    def heuristic_strategies(self) -> tuple[LocatorStrategy, ...]:
        return tuple(s for s in self.strategies if s.kind.is_heuristic)


@dataclass(frozen=True, slots=True)
class Found:
    selector: str
    strategy: LocatorStrategy


@dataclass(frozen=True, slots=True)
class NotFound:
    target: str
    attempted: tuple[str, ...] = field(default_factory=tuple)


Resolution = Union[Found, NotFound]


def _quote_attr(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


class ElementLocator:
    """Resolves logical targets to concrete selectors on one page."""

    def __init__(self, page: Page):
        self.page = page

    async def resolve(self, target: LocatorTarget) -> Resolution:
        attempted: list[str] = []

        for strategy in target.static_strategies:
            selector = strategy.value
            attempted.append(selector)
            if await self._is_visible(selector, target.timeout_ms):
                logger.info(f"{target.name} found with selector: {selector}")
                return Found(selector=selector, strategy=strategy)
            logger.debug(f"{target.name} selector {selector} not found")

        for strategy in target.heuristic_strategies:
            for selector in await self._heuristic_candidates(strategy):
                attempted.append(selector)
                if await self._is_visible(selector, target.timeout_ms):
                    logger.info(f"{target.name} found by {strategy.kind.value} heuristic: {selector}")
                    return Found(selector=selector, strategy=strategy)

        logger.warning(f"{target.name} not found after {len(attempted)} candidates")
        return NotFound(target=target.name, attempted=tuple(attempted))

    async def require(self, target: LocatorTarget, error_cls: type[ElementNotFound] = ElementNotFound) -> str:
        resolution = await self.resolve(target)
        if isinstance(resolution, NotFound):
            raise error_cls(resolution.target, resolution.attempted)
        return resolution.selector

    async def _is_visible(self, selector: str, timeout_ms: int) -> bool:
        try:
            await self.page.wait_for_selector(selector, state="visible", timeout=timeout_ms)
            return True
        except PlaywrightTimeoutError:
            return False

    async def _heuristic_candidates(self, strategy: LocatorStrategy) -> list[str]:
        if strategy.kind is StrategyKind.TEXT:
            return [strategy.describe()]

        inputs = await self.page.eval_on_selector_all("input", INPUT_ATTRIBUTES_JS)
        logger.debug(f"Scanning {len(inputs)} input fields for {strategy.value!r}")
        candidates: list[str] = []
        for details in inputs:
            for attr in strategy.attributes:
                raw = details.get(attr) or ""
                if strategy.value in raw.lower():
                    selector = f'input[{attr}="{_quote_attr(raw)}"]'
                    if selector not in candidates:
                        candidates.append(selector)
        return candidates
