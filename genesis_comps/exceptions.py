"""Automation error taxonomy."""

from __future__ import annotations


class AutomationError(Exception):
    """Base class for every failure raised by the automation core."""


class ConfigurationError(AutomationError):
    """Required settings (credentials) are missing or invalid."""


class ElementNotFound(AutomationError):
    """Every selector strategy for a logical UI target was exhausted."""

    def __init__(self, target: str, attempted: tuple[str, ...] = ()):
        self.target = target
        self.attempted = attempted
        super().__init__(f"{target} not found on the page (tried {len(attempted)} strategies)")


class SearchInputNotFound(ElementNotFound):
    """The location search input could not be resolved."""


class LoginTimeout(AutomationError):
    """The page never left the login surface after submitting credentials."""


class LoginRejected(AutomationError):
    """The portal showed an inline error instead of leaving the login page."""


class NavigationTimeout(AutomationError):
    """A navigation did not settle under either wait strategy."""


class SessionInvalid(AutomationError):
    """A restored session did not produce an authenticated page."""


class PartialExtractionFailure(AutomationError):
    """A single comparable page could not be extracted."""

    def __init__(self, page: int, message: str):
        self.page = page
        super().__init__(f"page {page}: {message}")


class GalleryError(PartialExtractionFailure):
    """The gallery overlay for a comparable page did not open."""


class PersistenceFailure(AutomationError):
    """The extraction record could not be written to disk."""


class JobConflict(AutomationError):
    """A job was requested while another one is still active."""

    def __init__(self, active_job_id: str):
        self.active_job_id = active_job_id
        super().__init__(f"Automation is already running (job {active_job_id})")
