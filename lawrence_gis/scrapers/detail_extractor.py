"""
Property detail page extraction.
"""

from typing import Optional

from loguru import logger
from playwright.async_api import Error as PlaywrightError

from lawrence_gis import config
from lawrence_gis.models.property import PropertyLink, ScrapedProperty, SearchCriteria
from lawrence_gis.scrapers.field_locator import (
    ACREAGE_LOCATORS,
    ASSESSMENT_LOCATORS,
    CITY_LOCATORS,
    LOCATION_LOCATOR,
    OWNER_LOCATORS,
    OWNER_NAME_SPAN,
    PARCEL_LOCATORS,
    PageSnapshot,
    first_match,
    take_snapshot,
)
from lawrence_gis.utils.field_heuristics import (
    parse_acreage,
    parse_assessed_value,
    pick_owner_name,
    resolve_address,
    resolve_city,
)


class DetailExtractor:
    """
    Turns one result link into a ``ScrapedProperty``.

    ``full_detail`` enables the extra lookups used for the primary batches:
    the ``*Name*`` owner span, the parcel id and a labelled City/Township cell.
    The pagination and expansion fallbacks run with it off.
    """

    def __init__(self, session, full_detail: bool = True):
        self.session = session
        self.full_detail = full_detail

    def parse_snapshot(
        self, snapshot: PageSnapshot, link: PropertyLink, criteria: SearchCriteria
    ) -> ScrapedProperty:
        acreage = parse_acreage(first_match(ACREAGE_LOCATORS, snapshot))
        assessed_value = parse_assessed_value(
            first_match(ASSESSMENT_LOCATORS, snapshot), snapshot.body_text
        )

        owner_candidates = [locator.resolve(snapshot) for locator in OWNER_LOCATORS]
        if self.full_detail:
            owner_candidates.append(OWNER_NAME_SPAN.resolve(snapshot))
        owner_name = pick_owner_name(owner_candidates)

        address = resolve_address(
            LOCATION_LOCATOR.resolve(snapshot),
            snapshot.headings,
            snapshot.blocks,
            fallback=link.address,
        )

        labelled_city = first_match(CITY_LOCATORS, snapshot) if self.full_detail else None
        city = resolve_city(labelled_city, snapshot.body_text, snapshot.html)
        parcel_id = first_match(PARCEL_LOCATORS, snapshot) if self.full_detail else None

        return ScrapedProperty(
            owner_name=owner_name,
            address=address,
            city=city,
            acreage=acreage,
            assessed_value=assessed_value,
            property_type=config.DEFAULT_PROPERTY_TYPE,
            parcel_id=parcel_id,
            search_criteria=criteria,
        )

    async def extract(self, link: PropertyLink, criteria: SearchCriteria) -> Optional[ScrapedProperty]:
        """Visit ``link`` on its own page; ``None`` on any failure."""
        page = None
        try:
            page = await self.session.new_page()
            await page.navigate(link.href, timeout_ms=config.DETAIL_PAGE_TIMEOUT_MS)
            snapshot = await take_snapshot(page)
            prop = self.parse_snapshot(snapshot, link, criteria)
            logger.debug(
                "Extracted {address} ({acreage:.2f} ac, {city})",
                address=prop.address,
                acreage=prop.acreage,
                city=prop.city,
            )
            return prop
        except Exception as e:
            logger.warning(f"Error extracting property details from {link.href}: {e}")
            return None
        finally:
            if page is not None:
                try:
                    await page.close()
                except PlaywrightError as e:
                    logger.debug(f"Error closing detail page: {e}")
