"""
Comparable-sales pagination.

Entering the Comp Sales tab and clicking the first card opens a slide
overlay positioned on page 1. Pages 2..totalPages are then visited in order;
each one yields either a ``ComparableProperty`` or a ``PageFailure``. A failed
page is logged and counted but never stops the loop.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from loguru import logger
from playwright.async_api import Error as PlaywrightError, Page

from config.portal import (
    CARD_OVERLAY_SELECTOR,
    CARD_TIMEOUT_MS,
    COMP_CARD_SELECTOR,
    COMPS_LINK_SELECTOR,
    COMPS_LINK_TIMEOUT_MS,
    MISSING_ROW_VALUE,
    NEXT_BUTTON_SELECTOR,
    PAGE_REFRESH_TIMEOUT_MS,
    PAGER_BUTTON_SELECTOR,
    SLIDE_ADDRESS_SELECTOR,
    SLIDE_CONTAINER_SELECTOR,
    SLIDE_DATA_SELECTOR,
    SLIDE_LOCATION_SELECTOR,
    SLIDE_ROW_LABEL_SELECTOR,
    SLIDE_ROW_LABELS,
    SLIDE_ROW_SELECTOR,
    SLIDE_ROW_VALUE_SELECTOR,
    SLIDE_STATUS_SELECTOR,
    SLIDE_SUBDIVISION_SELECTOR,
)
from genesis_comps.browser.human import HumanActions
from genesis_comps.exceptions import ElementNotFound, PartialExtractionFailure
from genesis_comps.models import ComparableProperty, GalleryImages
from genesis_comps.scrapers.gallery import GalleryExtractor
from genesis_comps.utils.logging_utils import bind_context, step_finished, step_started
from genesis_comps.utils.time import iso_timestamp

PAGER_LABELS_JS = "(selector) => [...document.querySelectorAll(selector)].map(b => b.textContent)"

CLICK_PAGER_JS = """
([selector, label]) => {
    const btn = [...document.querySelectorAll(selector)]
        .find(b => b.textContent.trim() === label);
    if (!btn) return false;
    btn.click();
    return true;
}
"""

SLIDE_INFO_JS = """
(sel) => {
    const text = s => {
        const el = document.querySelector(s);
        return el ? el.textContent : '';
    };
    const rows = [];
    document.querySelectorAll(sel.row).forEach(r => {
        const label = r.querySelector(sel.rowLabel);
        const value = r.querySelector(sel.rowValue);
        rows.push([label ? label.textContent : '', value ? value.textContent : null]);
    });
    return {
        location: text(sel.location),
        address: text(sel.address),
        subdivision: text(sel.subdivision),
        data: text(sel.data),
        status: text(sel.status),
        rows,
    };
}
"""

SLIDE_SELECTORS = {
    "location": SLIDE_LOCATION_SELECTOR,
    "address": SLIDE_ADDRESS_SELECTOR,
    "subdivision": SLIDE_SUBDIVISION_SELECTOR,
    "data": SLIDE_DATA_SELECTOR,
    "status": SLIDE_STATUS_SELECTOR,
    "row": SLIDE_ROW_SELECTOR,
    "rowLabel": SLIDE_ROW_LABEL_SELECTOR,
    "rowValue": SLIDE_ROW_VALUE_SELECTOR,
}

UNKNOWN_LOCATION = "Unknown Location"


def total_pages_from_labels(labels: Iterable[Any]) -> int:
    """Highest numeric pager label; 1 when there is none."""
    pages = [1]
    for label in labels or []:
        text = str(label or "").strip()
        if text.isdigit():
            pages.append(int(text))
    return max(pages)


def build_slide_info(raw: Optional[Dict[str, Any]], extracted_at: str) -> Dict[str, str]:
    """Flatten the raw slide scan into the comparable's ``propertyInfo`` mapping.

    Every stat row label is always present; a row that is missing on the
    slide is reported as ``--``.
    """
    raw = raw or {}

    def text(key: str) -> str:
        return str(raw.get(key) or "").strip()

    rows: Dict[str, str] = {}
    for row in raw.get("rows") or []:
        if not row or len(row) != 2:
            continue
        label = str(row[0] or "").strip()
        # First matching row wins
        if label and label not in rows:
            rows[label] = str(row[1]).strip() if row[1] is not None else MISSING_ROW_VALUE

    info: Dict[str, str] = {
        "location": text("location") or text("address") or UNKNOWN_LOCATION,
        "subdivision": text("subdivision"),
        "data": text("data"),
        "Status": text("status"),
    }
    for label in SLIDE_ROW_LABELS:
        info[label] = rows.get(label, MISSING_ROW_VALUE)
    info["ExtractionTimestamp"] = extracted_at
    return info


@dataclass(frozen=True)
class PageFailure:
    page: int
    reason: str


PageOutcome = Union[ComparableProperty, PageFailure]


@dataclass
class PaginationOutcome:
    total_pages: int = 1
    outcomes: List[PageOutcome] = field(default_factory=list)

    @property
    def records(self) -> List[ComparableProperty]:
        return [o for o in self.outcomes if isinstance(o, ComparableProperty)]

    @property
    def failures(self) -> List[PageFailure]:
        return [o for o in self.outcomes if isinstance(o, PageFailure)]


class ComparablesPaginator:
    def __init__(
        self,
        page: Page,
        human: HumanActions,
        gallery: Optional[GalleryExtractor] = None,
        clock: Callable[[], str] = iso_timestamp,
    ):
        self.page = page
        self.human = human
        self.gallery = gallery or GalleryExtractor(page, human)
        self.clock = clock
        self._unsettled = False

    async def run(self) -> PaginationOutcome:
        step_started("extract comparables")
        if not await self.open_comp_sales():
            step_finished("extract comparables", records=0)
            return PaginationOutcome()

        total_pages = await self.discover_total_pages()
        outcome = PaginationOutcome(total_pages=total_pages)
        logger.info(f"Comparable pages: {total_pages}")

        current = 2
        while current <= total_pages:
            result = await self.process_page(current)
            outcome.outcomes.append(result)

            if current < total_pages:
                await self.click_next()
            current += 1

        step_finished(
            "extract comparables",
            records=len(outcome.records),
            failed_pages=len(outcome.failures),
        )
        return outcome

    async def open_comp_sales(self) -> bool:
        """Open the Comp Sales tab and the first card overlay.

        False means there is nothing to paginate.
        """
        try:
            await self.page.wait_for_selector(COMPS_LINK_SELECTOR, state="visible", timeout=COMPS_LINK_TIMEOUT_MS)
            await self.page.click(COMPS_LINK_SELECTOR)
            await self.human.random_delay(4000, 6000)
            # Comp cards are fetched after the tab renders
            await self.human.random_delay(5000, 10000)

            if await self.page.query_selector(COMP_CARD_SELECTOR) is None:
                logger.warning("No comparable card found on the Comp Sales page")
                return False

            await self.human.wait_for_element_stable(self.page, COMP_CARD_SELECTOR, timeout_ms=CARD_TIMEOUT_MS)
            await self.human.scroll_into_view(self.page, COMP_CARD_SELECTOR)
            await self.page.click(COMP_CARD_SELECTOR)
            await self.human.random_delay(3000, 5000)

            if await self.page.query_selector(CARD_OVERLAY_SELECTOR) is None:
                logger.warning("No overlay appeared after clicking the comparable card")
                return False
        except PlaywrightError as e:
            logger.error(f"Error navigating to Comp Sales: {e}")
            return False

        await self.human.random_delay(2000, 3000)
        logger.info("Comparable card overlay open")
        return True

    async def discover_total_pages(self) -> int:
        labels = await self.page.evaluate(PAGER_LABELS_JS, PAGER_BUTTON_SELECTOR)
        return total_pages_from_labels(labels)

    async def process_page(self, page_number: int) -> PageOutcome:
        log = bind_context(page=page_number)
        log.info(f"Processing page {page_number}...")
        try:
            record = await self._extract_page(page_number)
        except (PartialExtractionFailure, ElementNotFound, PlaywrightError) as e:
            log.warning(f"Page {page_number} skipped: {e}")
            return PageFailure(page=page_number, reason=str(e))
        log.info(f"Page {page_number}: {len(record.gallery.all_images)} images")
        return record

    async def _extract_page(self, page_number: int) -> ComparableProperty:
        if self._unsettled:
            # Previous gallery is possibly still covering the pager
            await self.human.random_delay(2000, 3000)
            self._unsettled = False

        clicked = await self.page.evaluate(CLICK_PAGER_JS, [PAGER_BUTTON_SELECTOR, str(page_number)])
        if not clicked:
            logger.warning(f"Pager button {page_number} not found, reading the current slide")

        try:
            await self.page.wait_for_selector(SLIDE_CONTAINER_SELECTOR, timeout=PAGE_REFRESH_TIMEOUT_MS)
        except PlaywrightError as e:
            raise PartialExtractionFailure(page_number, "slide container did not refresh") from e
        await self.human.random_delay(2000, 3000)

        raw = await self.page.evaluate(SLIDE_INFO_JS, SLIDE_SELECTORS)
        info = build_slide_info(raw, self.clock())

        gallery = await self.gallery.extract(page_number)
        if not gallery.closed:
            self._unsettled = True

        return ComparableProperty(
            page=page_number,
            property_info=info,
            gallery=GalleryImages(all_images=gallery.images),
        )

    async def click_next(self) -> bool:
        try:
            button = await self.page.query_selector(NEXT_BUTTON_SELECTOR)
            if button is None:
                return False
            await button.click()
        except PlaywrightError as e:
            logger.warning(f"Next button click failed: {e}")
            return False
        await self.human.random_delay(2000, 3000)
        return True
