"""
Top-up strategies for short result sets.

When the first results page yields fewer than ``TARGET_RESULTS`` unique
properties, two stages run in order: follow the results pagination, then
re-search with a widened acreage window. Each stage is independent; a failure
in one is logged and the properties gathered so far are kept.
"""

import asyncio
from typing import Iterable, List

from loguru import logger

from lawrence_gis import config
from lawrence_gis.models.property import ScrapedProperty, SearchCriteria
from lawrence_gis.scrapers.browser import PortalPage
from lawrence_gis.scrapers.result_harvester import collect_strict_links
from lawrence_gis.scrapers.search_form import FormSubmissionError, SearchFormFiller

PAGINATION_SELECTORS = [
    'a[href*="Page"]',
    'input[value*="Next"]',
    'input[value*="next"]',
    'a[title*="Next"]',
    'a[title*="next"]',
]


def merge_unique(existing: Iterable[ScrapedProperty], extra: Iterable[ScrapedProperty]) -> List[ScrapedProperty]:
    """Append ``extra`` records whose address isn't already present (case-insensitive)."""
    merged = list(existing)
    seen = {prop.address.lower() for prop in merged}
    for prop in extra:
        key = prop.address.lower()
        if key in seen:
            continue
        seen.add(key)
        merged.append(prop)
    return merged


async def search_additional_pages(
    page: PortalPage, extractor, criteria: SearchCriteria, needed: int
) -> List[ScrapedProperty]:
    """
    Click the first pagination control, harvest the next page with the strict
    link filter and extract serially until ``needed`` properties are found.
    """
    if needed <= 0:
        return []

    match = await page.find_first(PAGINATION_SELECTORS)
    if not match:
        logger.info("No pagination control found")
        return []

    selector, handle = match
    await handle.click()
    logger.debug("Clicked pagination control {selector}", selector=selector)
    await asyncio.sleep(config.PAGINATION_SETTLE_SECONDS)

    links = list((await collect_strict_links(page)).values())
    logger.info("Found {count} links on the next results page", count=len(links))

    found: List[ScrapedProperty] = []
    for link in links:
        if len(found) >= needed:
            break
        prop = await extractor.extract(link, criteria)
        if prop is not None:
            found.append(prop)
    return found


class FallbackOrchestrator:
    """Tops up a short result list using pagination, then a widened search."""

    def __init__(self, extractor):
        self.extractor = extractor

    async def top_up(
        self, page: PortalPage, properties: List[ScrapedProperty], criteria: SearchCriteria
    ) -> List[ScrapedProperty]:
        results = list(properties)
        logger.info(
            "Only {count} properties found, trying additional search strategies",
            count=len(results),
        )

        try:
            results = await self._paginate(page, results, criteria)
        except Exception as e:
            logger.warning(f"Pagination fallback failed: {e}")

        if len(results) < config.TARGET_RESULTS:
            try:
                results = await self._expand_range(page, results, criteria)
            except Exception as e:
                logger.warning(f"Expanded search failed: {e}")

        return results

    async def _paginate(
        self, page: PortalPage, results: List[ScrapedProperty], criteria: SearchCriteria
    ) -> List[ScrapedProperty]:
        await page.go_back()
        await asyncio.sleep(config.GO_BACK_SETTLE_SECONDS)
        needed = config.TARGET_RESULTS - len(results)
        extra = await search_additional_pages(page, self.extractor, criteria, needed)
        merged = merge_unique(results, extra)
        logger.info(
            "Pagination added {added} properties ({total} total)",
            added=len(merged) - len(results),
            total=len(merged),
        )
        return merged

    async def _expand_range(
        self, page: PortalPage, results: List[ScrapedProperty], criteria: SearchCriteria
    ) -> List[ScrapedProperty]:
        """
        Re-run the search over a widened acreage window. Candidates inside the
        caller's original window are always kept; off-window ones only when
        fewer than ``RELAXED_RANGE_THRESHOLD`` properties were gathered before
        this stage.
        """
        expanded = criteria.expanded()
        logger.info(
            "Trying expanded acreage range {low:.2f}-{high:.2f}",
            low=expanded.min_acreage,
            high=expanded.max_acreage,
        )
        await page.navigate(config.SEARCH_URL, timeout_ms=config.SEARCH_PAGE_TIMEOUT_MS)
        await asyncio.sleep(config.SEARCH_PAGE_SETTLE_SECONDS)

        form = SearchFormFiller(page)
        await form.set_land_range(expanded)
        try:
            await form.submit()
        except FormSubmissionError as e:
            logger.debug(f"Expanded search submit skipped: {e}")

        candidates = await search_additional_pages(
            page, self.extractor, criteria, config.EXPANDED_SEARCH_LIMIT
        )

        merged = list(results)
        seen = {prop.address.lower() for prop in merged}
        relaxed = len(results) < config.RELAXED_RANGE_THRESHOLD
        for prop in candidates:
            if len(merged) >= config.TARGET_RESULTS:
                break
            key = prop.address.lower()
            if key in seen:
                continue
            if criteria.contains(prop.acreage) or relaxed:
                seen.add(key)
                merged.append(prop)
            else:
                logger.debug(
                    "Rejected {address}: {acreage:.2f} ac outside {low}-{high}",
                    address=prop.address,
                    acreage=prop.acreage,
                    low=criteria.min_acreage,
                    high=criteria.max_acreage,
                )
        logger.info("Expanded search added {added} properties", added=len(merged) - len(results))
        return merged
