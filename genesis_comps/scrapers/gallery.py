"""
Image gallery overlay of one comparable property.

open -> wait for spinner/images -> collect slide URLs -> close

Only a gallery that never opens is an error (``GalleryError``). Slow images
and a missing close control are tolerated; the caller learns about the
latter through ``GalleryResult.closed``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, List

from loguru import logger
from playwright.async_api import (
    Error as PlaywrightError,
    Page,
    TimeoutError as PlaywrightTimeoutError,
)

from config.portal import (
    GALLERY_BUTTON_SELECTOR,
    GALLERY_BUTTON_TIMEOUT_MS,
    GALLERY_CLOSE_SELECTOR,
    GALLERY_DUPLICATE_CLASS,
    GALLERY_IMAGE_SELECTOR,
    GALLERY_IMAGES_TIMEOUT_MS,
    GALLERY_OVERLAY_SELECTOR,
    GALLERY_SLIDE_SELECTOR,
    GALLERY_SPINNER_SELECTOR,
    GALLERY_SPINNER_TIMEOUT_MS,
    OVERLAY_PROBE_TIMEOUT_MS,
    PLACEHOLDER_IMAGE_PREFIX,
)
from genesis_comps.browser.human import HumanActions
from genesis_comps.exceptions import GalleryError

SPINNER_GONE_JS = "(selector) => document.querySelector(selector) === null"
IMAGES_PRESENT_JS = "(selector) => document.querySelectorAll(selector).length > 0"

# One entry per slide image: its src and whether the slide is a loop clone
COLLECT_SLIDES_JS = """
([slideSelector, duplicateClass]) => {
    const out = [];
    document.querySelectorAll(slideSelector).forEach(slide => {
        const duplicate = slide.classList.contains(duplicateClass);
        slide.querySelectorAll('img').forEach(img => {
            out.push({src: img.src || img.getAttribute('src') || '', duplicate});
        });
    });
    return out;
}
"""


def select_gallery_urls(slides: Iterable[Any]) -> List[str]:
    """Distinct image URLs in first-seen order.

    Loop-clone slides, empty sources and inline ``data:`` placeholders are
    skipped before de-duplication.
    """
    urls: List[str] = []
    seen = set()
    for slide in slides or []:
        if not isinstance(slide, dict) or slide.get("duplicate"):
            continue
        src = (slide.get("src") or "").strip()
        if not src or src.startswith(PLACEHOLDER_IMAGE_PREFIX):
            continue
        if src in seen:
            continue
        seen.add(src)
        urls.append(src)
    return urls


@dataclass
class GalleryResult:
    images: List[str] = field(default_factory=list)
    closed: bool = True


class GalleryExtractor:
    def __init__(self, page: Page, human: HumanActions):
        self.page = page
        self.human = human

    async def extract(self, page_number: int) -> GalleryResult:
        await self.open(page_number)
        await self.wait_until_loaded()
        images = await self.collect_images()
        logger.info(f"Page {page_number}: extracted {len(images)} image URLs")
        closed = await self.close()
        return GalleryResult(images=images, closed=closed)

    async def open(self, page_number: int) -> None:
        try:
            await self.page.wait_for_selector(GALLERY_BUTTON_SELECTOR, timeout=GALLERY_BUTTON_TIMEOUT_MS)
            await self.page.click(GALLERY_BUTTON_SELECTOR)
        except PlaywrightError as e:
            raise GalleryError(page_number, f"gallery button unavailable: {e}") from e

        await self.human.random_delay(2000, 3000)

        try:
            await self.page.wait_for_selector(
                GALLERY_OVERLAY_SELECTOR, state="attached", timeout=OVERLAY_PROBE_TIMEOUT_MS
            )
        except PlaywrightTimeoutError as e:
            raise GalleryError(page_number, "gallery overlay did not open") from e

    async def wait_until_loaded(self) -> None:
        try:
            await self.page.wait_for_function(
                SPINNER_GONE_JS, arg=GALLERY_SPINNER_SELECTOR, timeout=GALLERY_SPINNER_TIMEOUT_MS
            )
        except PlaywrightTimeoutError:
            logger.warning("Gallery spinner still visible, collecting anyway")

        try:
            await self.page.wait_for_function(
                IMAGES_PRESENT_JS, arg=GALLERY_IMAGE_SELECTOR, timeout=GALLERY_IMAGES_TIMEOUT_MS
            )
        except PlaywrightTimeoutError:
            logger.warning("No gallery images appeared in time")

        await self.human.random_delay(1000, 2000)

    async def collect_images(self) -> List[str]:
        slides = await self.page.evaluate(
            COLLECT_SLIDES_JS, [GALLERY_SLIDE_SELECTOR, GALLERY_DUPLICATE_CLASS]
        )
        return select_gallery_urls(slides)

    async def close(self) -> bool:
        """Click the close control. False when it is missing or the click fails."""
        try:
            button = await self.page.query_selector(GALLERY_CLOSE_SELECTOR)
            if button is None:
                logger.warning("Gallery close button not found")
                return False
            await button.click()
        except PlaywrightError as e:
            logger.warning(f"Error closing gallery: {e}")
            return False

        await self.human.random_delay(1000, 2000)
        return True
