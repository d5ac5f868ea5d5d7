"""
Propelio Genesis portal configuration.

URLs, selectors and wait budgets for the login, search and comparable-sales
screens. The portal is a Chakra UI app whose generated class names change
between deployments, so most controls are listed as ordered fallbacks.
"""

# Portal
DEFAULT_BASE_URL = "https://genesis.propelio.com"
LOGIN_PATH = "/login"
SEARCH_PATH = "/search/"

# Browser
USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36"
)
BROWSER_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--no-first-run",
    "--disable-extensions",
    "--disable-blink-features=AutomationControlled",
]
BLOCKED_RESOURCE_TYPES = {"image", "font"}

# Waits (milliseconds)
LOCATOR_TIMEOUT_MS = 3000
PASSWORD_LOCATOR_TIMEOUT_MS = 5000
SEARCH_LOCATOR_TIMEOUT_MS = 5000
LOGIN_COMPLETION_TIMEOUT_MS = 30000
LOGIN_POLL_INTERVAL_MS = 250
PAGE_LOAD_TIMEOUT_MS = 30000
SEARCH_SPINNER_TIMEOUT_MS = 10000
TABPANEL_TIMEOUT_MS = 15000
LAND_TAB_TIMEOUT_MS = 10000
COMPS_LINK_TIMEOUT_MS = 30000
CARD_TIMEOUT_MS = 10000
PAGE_REFRESH_TIMEOUT_MS = 10000
GALLERY_BUTTON_TIMEOUT_MS = 15000
OVERLAY_PROBE_TIMEOUT_MS = 4000
GALLERY_SPINNER_TIMEOUT_MS = 15000
GALLERY_IMAGES_TIMEOUT_MS = 15000

# Login surface
EMAIL_SELECTORS = [
    'input[type="email"]',
    'input[name="email"]',
    'input[id*="email"]',
    'input[placeholder*="email" i]',
    'input[placeholder*="Enter your email" i]',
    'input[placeholder*="Email address" i]',
]
EMAIL_KEYWORDS = ("email", "e-mail")

PASSWORD_SELECTORS = [
    'input[type="password"]',
    'input[name="password"]',
    'input[id*="password"]',
    'input[placeholder*="password" i]',
]
PASSWORD_KEYWORDS = ("password",)

LOGIN_BUTTON_SELECTORS = [
    'button[type="submit"]',
    'input[type="submit"]',
    'button[id*="login"]',
    'button[class*="login"]',
    ".login-button",
    "#login-button",
]
LOGIN_BUTTON_TEXTS = ("Login", "Sign In", "Log in")

LOGIN_ERROR_SELECTORS = [
    ".error",
    ".alert-danger",
    '[data-testid="error"]',
    ".login-error",
]

# Search surface
SEARCH_INPUT_SELECTORS = [
    "input.chakra-input.css-ysqbtp",
    'input[placeholder*="Search for a specific property"]',
    "input.chakra-input",
    'input[type="text"]',
]
SEARCH_KEYWORDS = ("search", "address")
LOADING_INDICATOR_SELECTOR = '[class*="loading"], [class*="spinner"], [class*="loader"]'

# Property panels
TABPANEL_SELECTOR = '[role="tabpanel"]'
PANEL_CARD_SELECTOR = ".chakra-card"
PANEL_PAIR_SELECTOR = ".css-o2ldmt"
PANEL_LABEL_SELECTOR = ".css-10lbh8o"
PANEL_VALUE_SELECTOR = ".css-1b44ksl"
LAND_TAB_SELECTOR = 'button[id="land"]'

# Comparable sales
COMPS_LINK_SELECTOR = 'a[href*="/comps"]'
COMP_CARD_SELECTOR = "div.css-1r4muzy"
CARD_OVERLAY_SELECTOR = '[role="dialog"], .modal, [class*="modal"], [class*="popup"]'
PAGER_BUTTON_SELECTOR = "button.css-19tveih"
NEXT_BUTTON_SELECTOR = "button.next:not([disabled])"
SLIDE_CONTAINER_SELECTOR = ".css-55rv9h"
SLIDE_LOCATION_SELECTOR = "p.chakra-text.css-1h9zzih"
SLIDE_ADDRESS_SELECTOR = ".address p.css-1h9zzih"
SLIDE_SUBDIVISION_SELECTOR = ".address p.subdivision"
SLIDE_DATA_SELECTOR = ".css-nc73jn"
SLIDE_STATUS_SELECTOR = ".css-13qnkqp p, .css-9re8mq"
SLIDE_ROW_SELECTOR = ".comp-stat-row"
SLIDE_ROW_LABEL_SELECTOR = ".row-label"
SLIDE_ROW_VALUE_SELECTOR = ".row-value"
SLIDE_ROW_LABELS = [
    "List Price",
    "List Price SqFt",
    "Sales Price",
    "Sales Price SqFt",
    "Contract Date",
    "Sold Date",
    "Days on Market",
    "Subdivision",
    "Year Built",
    "Approx. Acres",
    "Lot SqFt",
    "Type",
    "Bedrooms",
    "Full Baths",
    "Half Baths",
]
MISSING_ROW_VALUE = "--"

# Gallery overlay
GALLERY_BUTTON_SELECTOR = ".css-1yeo1ts"
GALLERY_OVERLAY_SELECTOR = (
    '[role="dialog"], .chakra-modal__content, [class*="modal"], [class*="popup"]'
)
GALLERY_SPINNER_SELECTOR = "div.chakra-spinner.css-1jyuc43"
GALLERY_IMAGE_SELECTOR = 'img[src*="api.propelio.com"], img[src*="mls-media"]'
GALLERY_SLIDE_SELECTOR = ".chakra-portal .swiper-wrapper .swiper-slide"
GALLERY_DUPLICATE_CLASS = "swiper-slide-duplicate"
GALLERY_CLOSE_SELECTOR = ".css-ei8nls"
PLACEHOLDER_IMAGE_PREFIX = "data:"
