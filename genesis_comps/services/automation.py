"""
Genesis automation orchestrator.

One instance drives one job end to end:

    launch -> login (reuse or fresh) -> search -> property panels
           -> comparables (only with complete panels) -> persist -> close

The browser page is created in ``initialize`` and handed to every component;
nothing keeps it past ``cleanup``.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from loguru import logger
from playwright.async_api import Error as PlaywrightError, Page

from genesis_comps.browser.human import HumanActions
from genesis_comps.browser.locator import ElementLocator
from genesis_comps.browser.manager import BrowserManager
from genesis_comps.browser.session_store import SessionStore
from genesis_comps.exceptions import LoginRejected, SessionInvalid
from genesis_comps.models import (
    ExtractionOutcome,
    Job,
    JobResult,
    PropertyPanels,
    Session,
)
from genesis_comps.scrapers.comparables import ComparablesPaginator, PaginationOutcome
from genesis_comps.scrapers.login_flow import LoginFlow, LoginState
from genesis_comps.scrapers.property_extractor import PropertyExtractor
from genesis_comps.scrapers.search_flow import SearchFlow
from genesis_comps.services.result_persister import ResultPersister
from genesis_comps.settings import GenesisSettings
from genesis_comps.utils.logging_utils import Timer, bind_context
from genesis_comps.utils.time import elapsed_ms, now_utc


class GenesisAutomation:
    def __init__(
        self,
        settings: GenesisSettings,
        browser_manager: Optional[BrowserManager] = None,
        session_store: Optional[SessionStore] = None,
        persister: Optional[ResultPersister] = None,
        human: Optional[HumanActions] = None,
    ):
        self.settings = settings
        self.browser_manager = browser_manager or BrowserManager(settings)
        self.session_store = session_store or SessionStore(settings.session_path)
        self.persister = persister or ResultPersister(settings.output_dir)
        self.human = human or HumanActions(settings.delay_scale)

        self.page: Optional[Page] = None
        self.login_flow: Optional[LoginFlow] = None
        self.search_flow: Optional[SearchFlow] = None
        self.property_extractor: Optional[PropertyExtractor] = None
        self.paginator: Optional[ComparablesPaginator] = None
        self.session_reused = False

    async def initialize(self) -> None:
        logger.info("Starting Propelio Genesis automation")
        page = await self.browser_manager.launch()
        locator = ElementLocator(page)

        self.page = page
        self.login_flow = LoginFlow(page, locator, self.human)
        self.search_flow = SearchFlow(page, locator, self.human, self.settings.search_url)
        self.property_extractor = PropertyExtractor(page, self.human)
        self.paginator = ComparablesPaginator(page, self.human)
        logger.info("Automation initialized")

    async def perform_login(self) -> bool:
        """Reuse the stored session or log in; a rejected login raises ``LoginRejected``."""
        session = self.session_store.load()
        if session is not None:
            try:
                await self._reuse_session(session)
                self.session_reused = True
                logger.info("Session reused, login form not needed")
                return True
            except SessionInvalid as e:
                logger.info(f"{e}; proceeding with fresh login")
                self.session_store.invalidate()
                await self.session_store.discard(self.page)

        self.session_reused = False
        await self.browser_manager.navigate_to(self.settings.login_url)
        state = await self.login_flow.perform_login(self.settings.email, self.settings.password)
        if state is not LoginState.VERIFIED or not await self.login_flow.is_login_successful():
            reason = self.login_flow.error_text or f"still on {self.page.url}"
            logger.error(f"Login failed: {reason}")
            raise LoginRejected(f"Login failed: {reason}")

        logger.info("Login successful, saving session")
        try:
            await self.session_store.save(self.page)
        except (OSError, PlaywrightError) as e:
            logger.warning(f"Could not save session: {e}")
        return True

    async def _reuse_session(self, session: Session) -> None:
        await self.session_store.restore(self.page, session, self.settings.base_url)
        await self.browser_manager.navigate_to(self.settings.login_url)
        if not await self.login_flow.is_login_successful():
            raise SessionInvalid(f"Restored session still lands on {self.page.url}")
        await self.login_flow.perform_login(self.settings.email, self.settings.password)

    async def perform_search(self, location: str) -> bool:
        await self.search_flow.perform_search(location)
        return True

    async def extract_property(self) -> PropertyPanels:
        try:
            return await self.property_extractor.extract()
        except PlaywrightError as e:
            logger.error(f"Error extracting property data: {e}")
            return PropertyPanels()

    async def extract_comparables(self) -> PaginationOutcome:
        return await self.paginator.run()

    async def run(self, job: Job) -> JobResult:
        """Run the whole pipeline for ``job``; login/search errors propagate."""
        log = bind_context(job_id=job.id, location=job.location)
        login_success = False
        search_success = False
        comparable_data: Dict[str, Any] = {}
        outcome = ExtractionOutcome.NOT_REACHED
        output_path = None

        with Timer() as timer:
            try:
                await self.initialize()
                login_success = await self.perform_login()
                if login_success:
                    search_success = await self.perform_search(job.location)

                if search_success:
                    panels = await self.extract_property()
                    if panels.is_complete:
                        pagination = await self.extract_comparables()
                        result = self.persister.build_result(
                            job.location,
                            panels,
                            pagination.records,
                            failed_pages=len(pagination.failures),
                        )
                        saved = self.persister.save(result)
                        output_path = str(saved) if saved else None
                        comparable_data = result.to_json_dict()
                        outcome = ExtractionOutcome.COMPLETE
                    else:
                        outcome = ExtractionOutcome.INCOMPLETE_DATA
            finally:
                await self.cleanup()

        log.info(
            f"Job finished in {timer.elapsed_ms:.0f} ms. Login: {login_success}, "
            f"Search: {search_success}, Comparable: {bool(comparable_data)}"
        )
        return JobResult(
            job_id=job.id,
            location=job.location,
            login_success=login_success,
            search_success=search_success,
            comparable_extraction_success=bool(comparable_data),
            comparable_data=comparable_data,
            overall_success=login_success and search_success,
            outcome=outcome,
            output_path=output_path,
            completed_at=now_utc(),
            duration_ms=elapsed_ms(job.started_at),
        )

    async def cleanup(self) -> None:
        logger.info("Cleaning up resources...")
        await self.browser_manager.close()
        self.page = None
        logger.info("Cleanup completed")
