from __future__ import annotations

from typing import Any, Dict, Iterable

from loguru import logger
from playwright.async_api import Page

from config.portal import (
    LAND_TAB_SELECTOR,
    LAND_TAB_TIMEOUT_MS,
    PANEL_CARD_SELECTOR,
    PANEL_LABEL_SELECTOR,
    PANEL_PAIR_SELECTOR,
    PANEL_VALUE_SELECTOR,
    TABPANEL_SELECTOR,
    TABPANEL_TIMEOUT_MS,
)
from genesis_comps.browser.human import HumanActions
from genesis_comps.models import PropertyPanels
from genesis_comps.utils.logging_utils import step_failed, step_finished, step_started

# Raw [label, value] pairs of every card on the active tab, in DOM order
SCAN_PANEL_JS = """
([card, pair, label, value]) => {
    const rows = [];
    document.querySelectorAll(card).forEach(c => {
        c.querySelectorAll(pair).forEach(p => {
            const l = p.querySelector(label);
            const v = p.querySelector(value);
            if (l && v) rows.push([l.textContent, v.textContent]);
        });
    });
    return rows;
}
"""

PANEL_SELECTORS = [PANEL_CARD_SELECTOR, PANEL_PAIR_SELECTOR, PANEL_LABEL_SELECTOR, PANEL_VALUE_SELECTOR]


def pairs_to_mapping(pairs: Iterable[Any]) -> Dict[str, str]:
    """Trim labels and values; drop pairs where either side ends up empty.

    Later duplicates of a label overwrite earlier ones.
    """
    data: Dict[str, str] = {}
    for pair in pairs or []:
        if not pair or len(pair) != 2:
            continue
        label = (pair[0] or "").strip()
        value = (pair[1] or "").strip()
        if label and value:
            data[label] = value
    return data


class PropertyExtractor:
    """Reads the Property Info and Land Info tabs of the searched property."""

    def __init__(self, page: Page, human: HumanActions):
        self.page = page
        self.human = human

    async def extract(self) -> PropertyPanels:
        step_started("extract property panels")
        try:
            await self.page.wait_for_selector(TABPANEL_SELECTOR, timeout=TABPANEL_TIMEOUT_MS)

            property_info = await self.scan_panel()
            logger.info(f"Property Info extracted: {len(property_info)} fields")

            await self.open_land_tab()
            land_info = await self.scan_panel()
            logger.info(f"Land Info extracted: {len(land_info)} fields")
        except Exception as e:
            step_failed("extract property panels", e)
            raise

        panels = PropertyPanels(property_info=property_info, land_info=land_info)
        if not panels.is_complete:
            logger.warning(
                "Incomplete data: Property Info {}, Land Info {}",
                "available" if property_info else "missing",
                "available" if land_info else "missing",
            )
        step_finished("extract property panels", complete=panels.is_complete)
        return panels

    async def scan_panel(self) -> Dict[str, str]:
        pairs = await self.page.evaluate(SCAN_PANEL_JS, PANEL_SELECTORS)
        return pairs_to_mapping(pairs)

    async def open_land_tab(self) -> None:
        await self.page.wait_for_selector(LAND_TAB_SELECTOR, state="visible", timeout=LAND_TAB_TIMEOUT_MS)
        await self.page.click(LAND_TAB_SELECTOR)
        # Land tab content renders lazily
        await self.human.random_delay(2000, 3000)
