"""
Collect candidate property links from a Vision search results page.
"""

import asyncio
import random
from typing import Dict, List, Optional

from loguru import logger
from playwright.async_api import Error as PlaywrightError

from lawrence_gis import config
from lawrence_gis.models.property import PropertyLink
from lawrence_gis.scrapers.browser import PortalPage
from lawrence_gis.utils.field_heuristics import (
    absolute_href,
    is_loose_link_text,
    is_property_link_text,
    shuffled,
)

# Broadest last; later patterns only add links the earlier ones missed.
LINK_PATTERNS = [
    'a[href*="Property"]',
    'a[href*="Detail"]',
    'a[href*="property"]',
    "td a",
    "tr a",
    "a",
]
LOOSE_LINK_SELECTOR = "a[href]"
PAGE_LINK_SELECTOR = 'a[href*="Page"]'

ANCHORS_SCRIPT = """
(selector) => Array.from(document.querySelectorAll(selector)).map(a => ({
    text: (a.textContent || '').trim(),
    href: a.getAttribute('href') || '',
}))
"""


async def read_anchors(page: PortalPage, selector: str) -> List[Dict[str, str]]:
    """Text and raw href of every anchor matching ``selector``."""
    return await page.evaluate(ANCHORS_SCRIPT, selector) or []


async def collect_strict_links(page: PortalPage) -> Dict[str, PropertyLink]:
    """Address-shaped anchors across every link pattern, keyed by absolute href."""
    links: Dict[str, PropertyLink] = {}
    for pattern in LINK_PATTERNS:
        try:
            anchors = await read_anchors(page, pattern)
        except PlaywrightError as e:
            logger.debug(f"Link pattern {pattern} failed: {e}")
            continue
        added = 0
        for anchor in anchors:
            text = (anchor.get("text") or "").strip()
            href = anchor.get("href") or ""
            if not href or not is_property_link_text(text):
                continue
            url = absolute_href(href)
            if url in links:
                continue
            links[url] = PropertyLink(address=text, href=url)
            added += 1
        if added:
            logger.debug("Pattern {pattern} added {added} property links", pattern=pattern, added=added)
    return links


async def harvest_links(page: PortalPage, rng: Optional[random.Random] = None) -> List[PropertyLink]:
    """
    Candidate detail links from the current results page.

    Strict address-shaped anchors are shuffled and capped at
    ``MAX_HARVESTED_LINKS``. When that leaves fewer than
    ``MIN_HARVESTED_LINKS``, a looser sweep over every ``a[href]`` tops the
    list up towards ``LOOSE_SWEEP_TARGET``.
    """
    rng = rng or random.Random()
    strict = await collect_strict_links(page)
    links = shuffled(list(strict.values()), rng)[: config.MAX_HARVESTED_LINKS]
    logger.info("Found {count} property links with strict filter", count=len(links))

    if len(links) >= config.MIN_HARVESTED_LINKS:
        return links

    try:
        anchors = await read_anchors(page, LOOSE_LINK_SELECTOR)
    except PlaywrightError as e:
        logger.warning(f"Loose link sweep failed: {e}")
        return links

    collected = {link.href for link in links}
    extras: Dict[str, PropertyLink] = {}
    for anchor in anchors:
        text = (anchor.get("text") or "").strip()
        href = anchor.get("href") or ""
        if not href or not is_loose_link_text(text):
            continue
        url = absolute_href(href)
        if url in collected or url in extras:
            continue
        extras[url] = PropertyLink(address=text, href=url)

    room = max(0, config.LOOSE_SWEEP_TARGET - len(links))
    added = shuffled(list(extras.values()), rng)[:room]
    links.extend(added)
    logger.info("Loose sweep added {added} links ({total} total)", added=len(added), total=len(links))
    return links


async def jump_to_random_results_page(page: PortalPage, rng: Optional[random.Random] = None) -> int:
    """
    Move to a random results page (1..RANDOM_PAGE_MAX) so repeated scrapes
    don't always return the same first page. Returns the page landed on.
    """
    rng = rng or random.Random()
    target = rng.randint(1, config.RANDOM_PAGE_MAX)
    if target == 1:
        return 1

    try:
        page_links = await page.find_all(PAGE_LINK_SELECTOR)
        for handle in page_links:
            text = await handle.text_content() or ""
            if str(target) not in text:
                continue
            await handle.click()
            await asyncio.sleep(config.PAGINATION_SETTLE_SECONDS)
            logger.info("Jumped to results page {target}", target=target)
            return target
    except PlaywrightError as e:
        logger.warning(f"Could not navigate to results page {target}: {e}")
        return 1

    logger.debug("No pagination link for page {target}; staying on page 1", target=target)
    return 1
