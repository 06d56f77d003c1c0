"""
Search form handling for the Vision "Sales" search page.

Input names on the portal are not stable, so each step probes ordered lists
of candidate selectors and fills whatever it finds. Every step is best-effort
except submitting: without a submit control there is nothing to scrape.
"""

import re
from typing import Any, Dict, List, Optional

from loguru import logger
from playwright.async_api import Error as PlaywrightError

from lawrence_gis import config
from lawrence_gis.models.property import SearchCriteria
from lawrence_gis.scrapers.browser import PortalPage

MODEL_CHECKBOX_SELECTORS = [
    'input[type="checkbox"][id*="Model"]',
    'input[type="checkbox"][name*="Model"]',
    'input[type="checkbox"][id*="cbl"]',
]

PRICE_FIELD_PAIRS = [
    ("MainContent_txtSalePriceFrom", "MainContent_txtSalePriceTo"),
    ("ctl00$MainContent$txtSalePriceFrom", "ctl00$MainContent$txtSalePriceTo"),
    ("txtPriceFrom", "txtPriceTo"),
    ("txtSalePriceFrom", "txtSalePriceTo"),
]

CHECK_ALL_STYLES_ID = "#chkAllStyle"
CHECK_ALL_SELECTORS = [
    'a[href*="javascript"][title*="all"]',
    'a[href*="javascript"]:has-text("All")',
    'input[type="button"][value*="All"]',
    'button:has-text("All")',
]
STYLE_CHECKBOX_SELECTORS = [
    'input[type="checkbox"][id*="Style"]',
    'input[type="checkbox"][name*="Style"]',
]

SUBMIT_SELECTORS = [
    'input[type="submit"]',
    'button[type="submit"]',
    'input[value*="Search"]',
    'input[value*="Submit"]',
    'button:has-text("Search")',
    'button:has-text("Submit")',
]

LAND_FROM_ID = "MainContent_txtLandFrom"
LAND_TO_ID = "MainContent_txtLandTo"

BARE_DECIMAL_RE = re.compile(r"^\d+\.?\d*$")
FOUR_DIGIT_RE = re.compile(r"^\d{4,}$")

INPUTS_SCRIPT = """
() => Array.from(document.querySelectorAll('input')).map(input => ({
    id: input.id || '',
    name: input.name || '',
    type: input.type || '',
    value: input.value || '',
    placeholder: input.placeholder || '',
    className: input.className || '',
}))
"""

LAND_RANGE_SCRIPT = """
({minId, maxId, minValue, maxValue}) => {
    const minField = document.getElementById(minId);
    const maxField = document.getElementById(maxId);
    if (!minField || !maxField) return false;
    minField.value = minValue;
    maxField.value = maxValue;
    return true;
}
"""


class FormSubmissionError(RuntimeError):
    """No submit control on the search page accepted a click."""


def format_number(value: float) -> str:
    return f"{value:g}"


def acreage_field_candidates(inputs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Text inputs pre-filled with a small decimal; the land-area range fields look like this."""
    candidates = []
    for field in inputs:
        value = field.get("value") or ""
        if field.get("type") != "text" or not BARE_DECIMAL_RE.match(value):
            continue
        if float(value) < 100:
            candidates.append(field)
    return candidates


def price_field_candidates(inputs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    candidates = []
    for field in inputs:
        if field.get("type") != "text":
            continue
        field_id = (field.get("id") or "").lower()
        name = (field.get("name") or "").lower()
        value = field.get("value") or ""
        named_like_price = any(word in field_id or word in name for word in ("price", "sale"))
        big_number = bool(FOUR_DIGIT_RE.match(value)) and int(value) > 1000
        if named_like_price or big_number:
            candidates.append(field)
    return candidates


def filter_price_fields(candidates: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Drop date pickers and anything date-shaped from the price candidates."""
    kept = []
    for field in candidates:
        field_id = (field.get("id") or "").lower()
        value = field.get("value") or ""
        if "datepicker" in (field.get("className") or ""):
            continue
        if "/" in value or "date" in field_id:
            continue
        if "price" in field_id or FOUR_DIGIT_RE.match(value):
            kept.append(field)
    return kept


def input_selector(field: Dict[str, Any]) -> str:
    if field.get("id"):
        return f'input[id="{field["id"]}"]'
    return f'input[name="{field.get("name", "")}"]'


class SearchFormFiller:
    """Brings the portal's search form into a submittable, broad-results state."""

    def __init__(self, page: PortalPage):
        self.page = page

    async def prepare(self, criteria: SearchCriteria) -> Dict[str, bool]:
        """Run every best-effort fill step; returns the per-step flags for logging."""
        flags = {
            "models": await self.check_models(),
            "acreage": await self.set_acreage_range(criteria),
            "price": await self.set_price_range(),
            "styles": await self.select_all_styles(),
        }
        logger.info("Search form prepared: {flags}", flags=flags)
        return flags

    async def _inspect_inputs(self) -> List[Dict[str, Any]]:
        return await self.page.evaluate(INPUTS_SCRIPT) or []

    async def check_models(self) -> bool:
        checked = 0
        for selector in MODEL_CHECKBOX_SELECTORS:
            try:
                boxes = await self.page.find_all(selector)
            except PlaywrightError as e:
                logger.debug(f"Model checkbox pattern {selector} failed: {e}")
                continue
            logger.debug("Found {count} checkboxes with {selector}", count=len(boxes), selector=selector)
            for index, box in enumerate(boxes):
                try:
                    await box.click()
                    checked += 1
                except PlaywrightError as e:
                    logger.debug(f"Could not check model box {index + 1}: {e}")
            if checked:
                break
        logger.info("Checked {count} model checkboxes", count=checked)
        return checked > 0

    async def _fill_pair(self, min_field: Dict[str, Any], max_field: Dict[str, Any], low: str, high: str) -> bool:
        min_match = await self.page.find_first([input_selector(min_field)])
        max_match = await self.page.find_first([input_selector(max_field)])
        if not min_match or not max_match:
            return False
        await self.page.type_over(min_match[1], low)
        await self.page.type_over(max_match[1], high)
        return True

    async def set_acreage_range(self, criteria: SearchCriteria) -> bool:
        try:
            candidates = acreage_field_candidates(await self._inspect_inputs())
            logger.debug("Found {count} potential land area fields", count=len(candidates))
            if len(candidates) < 2:
                logger.info("Land area inputs not found; results will not be range-limited by the form")
                return False
            filled = await self._fill_pair(
                candidates[0],
                candidates[1],
                format_number(criteria.min_acreage),
                format_number(criteria.max_acreage),
            )
        except PlaywrightError as e:
            logger.warning(f"Error setting land area range: {e}")
            return False
        if filled:
            logger.info(
                "Set land area range {low}-{high} acres using {min_id}/{max_id}",
                low=criteria.min_acreage,
                high=criteria.max_acreage,
                min_id=candidates[0].get("id"),
                max_id=candidates[1].get("id"),
            )
        return filled

    async def set_land_range(self, criteria: SearchCriteria) -> bool:
        """Write the acreage window into the known land fields, else fall back to the heuristic fill."""
        try:
            written = await self.page.evaluate(
                LAND_RANGE_SCRIPT,
                {
                    "minId": LAND_FROM_ID,
                    "maxId": LAND_TO_ID,
                    "minValue": format_number(criteria.min_acreage),
                    "maxValue": format_number(criteria.max_acreage),
                },
            )
        except PlaywrightError as e:
            logger.debug(f"Direct land range write failed: {e}")
            written = False
        if written:
            return True
        return await self.set_acreage_range(criteria)

    async def _find_known_price_fields(self) -> Optional[tuple]:
        for min_key, max_key in PRICE_FIELD_PAIRS:
            min_match = await self.page.find_first([f'input[id="{min_key}"]', f'input[name="{min_key}"]'])
            max_match = await self.page.find_first([f'input[id="{max_key}"]', f'input[name="{max_key}"]'])
            if min_match and max_match:
                logger.debug("Found price fields {min_key} and {max_key}", min_key=min_key, max_key=max_key)
                return min_match[1], max_match[1]
        return None

    async def set_price_range(self) -> bool:
        """Widen the sale price filter so the portal's default doesn't hide non-sale records."""
        low, high = str(config.SALE_PRICE_MIN), str(config.SALE_PRICE_MAX)
        try:
            known = await self._find_known_price_fields()
            if known:
                await self.page.type_over(known[0], low)
                await self.page.type_over(known[1], high)
                logger.info("Set sale price range {low}-{high}", low=low, high=high)
                return True

            candidates = price_field_candidates(await self._inspect_inputs())
            if len(candidates) < 2:
                logger.info("Sale price fields not found; search may be limited by the default price range")
                return False
            fields = filter_price_fields(candidates)
            if len(fields) < 2:
                logger.info("No suitable price fields left after filtering out date fields")
                return False
            filled = await self._fill_pair(fields[0], fields[1], low, high)
        except PlaywrightError as e:
            logger.warning(f"Error setting sale price range: {e}")
            return False
        if filled:
            logger.info("Set sale price range {low}-{high} using inspected fields", low=low, high=high)
        return filled

    async def select_all_styles(self) -> bool:
        try:
            await self.page.click(CHECK_ALL_STYLES_ID)
            logger.debug("Clicked {selector}", selector=CHECK_ALL_STYLES_ID)
            return True
        except PlaywrightError:
            logger.debug("chkAllStyle not found, trying other check-all controls")

        for selector in CHECK_ALL_SELECTORS:
            try:
                await self.page.click(selector)
                logger.debug("Clicked check-all control {selector}", selector=selector)
                return True
            except PlaywrightError:
                continue

        for selector in STYLE_CHECKBOX_SELECTORS:
            try:
                boxes = await self.page.find_all(selector)
            except PlaywrightError as e:
                logger.debug(f"Style pattern {selector} failed: {e}")
                continue
            for box in boxes:
                try:
                    await box.click()
                except PlaywrightError:
                    continue
            if boxes:
                logger.debug("Clicked {count} style checkboxes", count=len(boxes))
                return True
        return False

    async def submit(self) -> str:
        """Click the first submit control that accepts it; returns the selector used."""
        for selector in SUBMIT_SELECTORS:
            try:
                await self.page.click(selector)
            except PlaywrightError as e:
                logger.debug(f"Submit pattern {selector} failed: {e}")
                continue
            logger.info("Submitted search form with {selector}", selector=selector)
            return selector
        raise FormSubmissionError("Could not find submit button")
