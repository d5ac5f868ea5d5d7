"""
Session persistence: cookies + localStorage in one JSON slot.

Slot shape::

    {"cookies": [...], "localStorage": {...}, "stale": false, "savedAt": "..."}

``load`` never raises. A missing, unreadable or stale slot is simply "no
session to reuse". ``invalidate`` keeps the document but flags it stale.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional
from urllib.parse import urlsplit

from loguru import logger
from playwright.async_api import Page
from pydantic import ValidationError

from genesis_comps.models import Session
from genesis_comps.utils.time import now_utc

DUMP_LOCAL_STORAGE_JS = """
() => {
    const data = {};
    for (let i = 0; i < localStorage.length; i++) {
        const key = localStorage.key(i);
        data[key] = localStorage.getItem(key);
    }
    return data;
}
"""

CLEAR_LOCAL_STORAGE_JS = "() => localStorage.clear()"

# Runs before page scripts on every document; writes the entries once per tab
RESTORE_LOCAL_STORAGE_TEMPLATE = """
(() => {
    const origin = %(origin)s;
    const entries = %(entries)s;
    if (window.location.origin !== origin) return;
    try {
        if (sessionStorage.getItem('__genesis_session_restored')) return;
        for (const [key, value] of Object.entries(entries)) {
            localStorage.setItem(key, value);
        }
        sessionStorage.setItem('__genesis_session_restored', '1');
    } catch (e) {}
})();
"""


def restore_script(origin: str, local_storage: dict[str, str]) -> str:
    return RESTORE_LOCAL_STORAGE_TEMPLATE % {
        "origin": json.dumps(origin),
        "entries": json.dumps(local_storage),
    }


class SessionStore:
    def __init__(self, path: Path | str = Path("session.json")):
        self.path = Path(path)

    async def save(self, page: Page) -> Session:
        """Capture cookies + localStorage from the live page and overwrite the slot."""
        logger.info("Saving session (cookies and local storage)...")
        cookies = await page.context.cookies()
        local_storage = await page.evaluate(DUMP_LOCAL_STORAGE_JS) or {}
        session = Session(
            cookies=list(cookies),
            local_storage={str(k): str(v) for k, v in local_storage.items()},
            saved_at=now_utc(),
        )
        self._write(session)
        logger.info(f"Session saved to {self.path} ({len(session.cookies)} cookies, {len(session.local_storage)} storage keys)")
        return session

    def load(self) -> Optional[Session]:
        if not self.path.exists():
            return None
        try:
            session = Session.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError, ValidationError) as e:
            logger.warning(f"Failed to load session from {self.path}: {e}")
            return None
        if session.stale:
            logger.info(f"Stored session in {self.path} is stale; ignoring")
            return None
        logger.info(f"Session loaded from {self.path}")
        return session

    async def restore(self, page: Page, session: Session, origin_url: str) -> None:
        """Apply a stored session to a fresh page context before any navigation."""
        logger.info("Restoring session (cookies and local storage)...")
        if session.cookies:
            await page.context.add_cookies(session.cookies)
        if session.local_storage:
            parts = urlsplit(origin_url)
            origin = f"{parts.scheme}://{parts.netloc}"
            await page.context.add_init_script(script=restore_script(origin, session.local_storage))

    async def discard(self, page: Page) -> None:
        """Drop restored cookies and localStorage from the live page."""
        await page.context.clear_cookies()
        # The sessionStorage marker stays set so the init script does not write again
        await page.evaluate(CLEAR_LOCAL_STORAGE_JS)
        logger.info("Restored session discarded from the browser")

    def invalidate(self) -> None:
        """Mark the stored session stale so the next load ignores it."""
        if not self.path.exists():
            return
        try:
            session = Session.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError, ValidationError) as e:
            logger.warning(f"Stored session unreadable while invalidating: {e}")
            session = Session()
        self._write(session.model_copy(update={"stale": True}))
        logger.info(f"Session in {self.path} marked stale")

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
            logger.info("Session file deleted")
        except OSError as e:
            logger.warning(f"Failed to delete session file: {e}")

    def _write(self, session: Session) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_text(json.dumps(session.to_json_dict(), indent=2), encoding="utf-8")
        tmp_path.replace(self.path)
