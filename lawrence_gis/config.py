"""
Lawrence County GIS scraper configuration.

Portal endpoints, timeouts, and the numeric knobs of the search/fallback
heuristics. Runtime switches can be overridden from the environment.
"""

import os


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


# Portal endpoints
PORTAL_ORIGIN = "https://gis.vgsi.com"
SALES_URL = f"{PORTAL_ORIGIN}/lawrencecountypa/Sales.aspx"
SEARCH_URL = f"{PORTAL_ORIGIN}/lawrencecountypa/Search.aspx"

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
VIEWPORT = {"width": 1280, "height": 720}

# Browser launch
HEADLESS = _env_flag("GIS_HEADLESS", True)
SERVERLESS = _env_flag("GIS_SERVERLESS", False)
CHROMIUM_EXECUTABLE_PATH = os.getenv("GIS_CHROMIUM_PATH")

# Timeouts (milliseconds)
SEARCH_PAGE_TIMEOUT_MS = 30000
DETAIL_PAGE_TIMEOUT_MS = 10000
RESULTS_PAGE_TIMEOUT_MS = 10000
CLICK_TIMEOUT_MS = 5000

# Waits (seconds)
RESULTS_SETTLE_SECONDS = 5.0
PAGINATION_SETTLE_SECONDS = 3.0
GO_BACK_SETTLE_SECONDS = 2.0
SEARCH_PAGE_SETTLE_SECONDS = 1.0

# Batch fetching
BATCH_SIZE = int(os.getenv("GIS_BATCH_SIZE", "5"))
BATCH_DELAY_SECONDS = float(os.getenv("GIS_BATCH_DELAY", "1.0"))

# Result sizing
TARGET_RESULTS = 10
MAX_HARVESTED_LINKS = 20
MIN_HARVESTED_LINKS = 10
LOOSE_SWEEP_TARGET = 15
EXPANDED_SEARCH_LIMIT = 5
RANDOM_PAGE_MAX = 10

# Off-range records from the expanded search are accepted while the
# accumulated total is below this.
RELAXED_RANGE_THRESHOLD = 8

# Acreage window expansion
EXPAND_MIN_FACTOR = 0.8
EXPAND_MAX_FACTOR = 1.2
MIN_ACREAGE_FLOOR = 0.1

# Sale price window written into the search form
SALE_PRICE_MIN = 80000
SALE_PRICE_MAX = 9999999

# Heuristic defaults
DEFAULT_ACREAGE = 0.1
DEFAULT_OWNER = "Unknown"
DEFAULT_PROPERTY_TYPE = "Unknown"
FALLBACK_MUNICIPALITY = "New Castle"
SQ_FT_PER_ACRE = 43560

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FILE = "lawrence_gis.log"
