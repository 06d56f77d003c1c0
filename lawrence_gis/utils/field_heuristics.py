"""
Field heuristics for Vision GIS property pages.

Pure text-to-value helpers shared by the results-page harvester and the
property detail extractor. Detail pages are unlabeled and unstable, so every
function here returns a documented default instead of raising.
"""

import math
import random
import re
from typing import Iterable, List, Optional, Sequence, TypeVar

from loguru import logger

from lawrence_gis import config

T = TypeVar("T")

# Leading "number + letter" shape of a street address ("123 MAIN ST").
ADDRESS_START_RE = re.compile(r"^\d+\s+[A-Z]", re.IGNORECASE)
LOOSE_ADDRESS_RE = re.compile(r"\d+\s+[A-Z]", re.IGNORECASE)
STREET_SUFFIX_RE = re.compile(
    r"\b(ST|RD|AVE|DR|LN|WAY|BLVD|STREET|ROAD|AVENUE|DRIVE|LANE)\b", re.IGNORECASE
)
UI_NOISE_RE = re.compile(r"search|refine|area|land|submit|button", re.IGNORECASE)

# Owner cells on this portal sometimes hold the mailing address instead.
OWNER_STREET_SUFFIX_RE = re.compile(r"\s(ST|AVE|DR|RD|LN|WAY|BLVD)(?=\s|$)")
OWNER_LOCALITY_MARKERS = ("PA ", "NEW CASTLE")
BARE_STREET_RE = re.compile(r"^\d+\s+[A-Z]\s+[A-Z]")
MAX_OWNER_LENGTH = 100

MAX_ADDRESS_LENGTH = 50
OWNER_LABELS = ("Owner", "Co-Owner")

LEADING_NUMBER_RE = re.compile(r"\d+(?:\.\d*)?|\.\d+")
ASSESSMENT_CELL_RE = re.compile(r"\$?([0-9,]+)")
ASSESSMENT_PAGE_RE = re.compile(r"Assessment\s*\$([0-9,]+)", re.IGNORECASE)

DISTRICT_RE = re.compile(
    r"District\s+\d+:\s*([A-Za-z0-9\s]+?)(?:\s*\n|\s*\r|\s*<|\s*$|\s{3,})",
    re.IGNORECASE,
)
MAX_RAW_TOWNSHIP_LENGTH = 30
MAX_LABELLED_CITY_LENGTH = 50

# Substring -> canonical municipality, checked in order.
TOWNSHIP_TABLE = (
    ("scott", "Scott"),
    ("slippery rock", "Slippery Rock"),
    ("ellwood", "Ellwood City"),
    ("wilmington", "Wilmington"),
    ("grove city", "Grove City"),
    ("pulaski", "Pulaski"),
    ("new beaver", "New Beaver"),
    ("mahoning", "Mahoning"),
    ("neshannock", "Neshannock"),
    ("union", "Union"),
    ("taylor", "Taylor"),
    ("hickory", "Hickory"),
    ("shenango", "Shenango"),
    ("wayne", "Wayne"),
    ("perry", "Perry"),
    ("washington", "Washington"),
    ("plain grove", "Plain Grove"),
    ("little beaver", "Little Beaver"),
    ("north beaver", "North Beaver"),
    ("new castle", "New Castle"),
    ("bessemer", "Bessemer"),
)

# Whole-page fallback when no "District N:" label exists. Bare township names
# are too common in page chrome, so most entries need a township suffix.
TOWNSHIP_SYNONYMS = (
    (("wilmington township", "wilmington twp"), "Wilmington"),
    (("slippery rock",), "Slippery Rock"),
    (("scott township", "scott twp"), "Scott"),
    (("ellwood city",), "Ellwood City"),
    (("grove city",), "Grove City"),
    (("pulaski township", "pulaski twp"), "Pulaski"),
    (("new beaver",), "New Beaver"),
    (("mahoning township", "mahoning twp"), "Mahoning"),
    (("neshannock township", "neshannock twp"), "Neshannock"),
    (("union township", "union twp"), "Union"),
    (("bessemer",), "Bessemer"),
)


def _clean(text: Optional[str]) -> str:
    return (text or "").strip()


def _collapse_ws(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


# =============================================================================
# Acreage / assessment
# =============================================================================

def parse_acreage(text: Optional[str]) -> float:
    """
    Parse an acreage cell into acres.

    Non-numeric characters are stripped and the leading number is used.
    Missing or zero values become ``DEFAULT_ACREAGE`` (0.1) so range filters
    downstream don't silently drop the record. Values over 1000 whose text
    mentions "sq" are treated as square feet.
    """
    raw = _clean(text)
    digits = re.sub(r"[^0-9.]", "", raw)
    match = LEADING_NUMBER_RE.match(digits)
    acreage = float(match.group(0)) if match else 0.0
    if not acreage or not math.isfinite(acreage):
        return config.DEFAULT_ACREAGE

    if acreage > 1000 and "sq" in raw.lower():
        converted = acreage / config.SQ_FT_PER_ACRE
        logger.debug("Converted {raw!r} from sq ft to {acres:.2f} acres", raw=raw, acres=converted)
        return converted
    return acreage


def _to_int(digits: str) -> Optional[int]:
    digits = digits.replace(",", "")
    if not digits:
        return None
    return int(digits)


def parse_assessed_value(cell_text: Optional[str], page_text: Optional[str] = None) -> Optional[int]:
    """
    Assessed value from the "Assessment" cell, else from ``Assessment $N`` in
    the page text. ``None`` when neither is present.
    """
    value = None
    cell = _clean(cell_text)
    if cell:
        match = ASSESSMENT_CELL_RE.search(cell)
        if match:
            value = _to_int(match.group(1))

    if not value and page_text:
        match = ASSESSMENT_PAGE_RE.search(page_text)
        if match:
            value = _to_int(match.group(1))

    return value


# =============================================================================
# Owner / address
# =============================================================================

def looks_like_address(text: str) -> bool:
    """True when an "owner" candidate is really a street or mailing address."""
    if OWNER_STREET_SUFFIX_RE.search(text):
        return True
    if any(marker in text for marker in OWNER_LOCALITY_MARKERS):
        return True
    return bool(BARE_STREET_RE.match(text))


def pick_owner_name(candidates: Iterable[Optional[str]]) -> str:
    for candidate in candidates:
        name = _clean(candidate)
        if not name or len(name) > MAX_OWNER_LENGTH:
            continue
        if looks_like_address(name):
            logger.debug("Rejected owner candidate {name!r}: looks like an address", name=name)
            continue
        return name
    return config.DEFAULT_OWNER


def resolve_address(
    location_text: Optional[str],
    headings: Sequence[str] = (),
    blocks: Sequence[str] = (),
    fallback: str = "",
) -> str:
    """
    Site address for a detail page.

    Order: the "Location" cell, a prominent heading, one of the first ten
    block elements, then the anchor text that led to the page.
    """
    location = _clean(location_text)
    if location and ADDRESS_START_RE.match(location):
        return location

    for text in headings:
        text = _clean(text)
        if text and ADDRESS_START_RE.match(text) and len(text) < MAX_ADDRESS_LENGTH:
            return text

    for text in list(blocks)[:10]:
        text = _clean(text)
        if (
            text
            and ADDRESS_START_RE.match(text)
            and len(text) < MAX_ADDRESS_LENGTH
            and not any(label in text for label in OWNER_LABELS)
        ):
            return text

    return fallback


# =============================================================================
# Municipality
# =============================================================================

def map_township(raw_township: str) -> str:
    """Canonical municipality for a captured district name."""
    lowered = raw_township.lower()
    for needle, canonical in TOWNSHIP_TABLE:
        if needle in lowered:
            return canonical
    if len(raw_township) < MAX_RAW_TOWNSHIP_LENGTH:
        return raw_township
    return config.FALLBACK_MUNICIPALITY


def normalize_township(page_text: Optional[str], page_html: Optional[str] = None) -> str:
    text = page_text or ""
    html = page_html or ""

    match = DISTRICT_RE.search(text) or DISTRICT_RE.search(html)
    if match:
        raw = _collapse_ws(match.group(1))
        city = map_township(raw)
        logger.debug("Mapped district {raw!r} to {city}", raw=raw, city=city)
        return city

    content = _collapse_ws(text).lower()
    for needles, canonical in TOWNSHIP_SYNONYMS:
        if any(needle in content for needle in needles):
            return canonical
    return config.FALLBACK_MUNICIPALITY


def resolve_city(labelled_city: Optional[str], page_text: Optional[str], page_html: Optional[str] = None) -> str:
    """Use a clean City/Municipality/Township cell when present, else the district heuristics."""
    city = _clean(labelled_city)
    if city and len(city) < MAX_LABELLED_CITY_LENGTH and "<" not in city:
        return city
    return normalize_township(page_text, page_html)


# =============================================================================
# Result links
# =============================================================================

def is_property_link_text(text: Optional[str]) -> bool:
    text = _clean(text)
    return bool(
        ADDRESS_START_RE.match(text)
        and STREET_SUFFIX_RE.search(text)
        and 8 < len(text) < 40
        and not UI_NOISE_RE.search(text)
    )


def is_loose_link_text(text: Optional[str]) -> bool:
    text = _clean(text)
    return bool(LOOSE_ADDRESS_RE.search(text) and 5 < len(text) < 50)


def absolute_href(href: str, origin: str = config.PORTAL_ORIGIN) -> str:
    if href.startswith("http"):
        return href
    separator = "" if href.startswith("/") else "/"
    return f"{origin}{separator}{href}"


def shuffled(items: Sequence[T], rng: Optional[random.Random] = None) -> List[T]:
    """Fisher-Yates shuffle into a new list; pass a seeded ``rng`` for stable order."""
    rng = rng or random.Random()
    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = rng.randint(0, i)
        result[i], result[j] = result[j], result[i]
    return result
