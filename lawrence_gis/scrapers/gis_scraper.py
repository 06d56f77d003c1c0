"""
Lawrence County GIS Property Scraper

Searches the Lawrence County, PA Vision Government Solutions portal for
properties in an acreage window and scrapes each detail page for:
- Owner name and site address
- Municipality (township / borough)
- Acreage and assessed value
- Parcel ID where the page exposes one

Search page: https://gis.vgsi.com/lawrencecountypa/Sales.aspx

The portal has no API and its markup changes without notice, so the form,
the result links and every detail field are located heuristically. A scrape
returns at most ten properties with unique addresses and never raises.

Usage:
    uv run python -m lawrence_gis.scrapers.gis_scraper --min-acreage 0.5 --max-acreage 2
    uv run python -m lawrence_gis.scrapers.gis_scraper --min-acreage 1 --max-acreage 5 --seed 42 --output data/props.json
"""

import argparse
import asyncio
import json
import random
from pathlib import Path
from typing import List, Optional

from loguru import logger
from pydantic import ValidationError

from lawrence_gis import config
from lawrence_gis.models.property import (
    ScrapedProperty,
    SearchCriteria,
    cap_results,
    dedupe_by_address,
    validation_message,
)
from lawrence_gis.scrapers.batch_fetch import BatchFetchController
from lawrence_gis.scrapers.browser import BrowserSession
from lawrence_gis.scrapers.detail_extractor import DetailExtractor
from lawrence_gis.scrapers.fallback import FallbackOrchestrator
from lawrence_gis.scrapers.result_harvester import harvest_links, jump_to_random_results_page
from lawrence_gis.scrapers.search_form import FormSubmissionError, SearchFormFiller
from lawrence_gis.utils.logging_config import configure_logger


class GISScraper:
    """
    One configured scraper; each ``scrape`` call gets its own browser session.

    ``rng`` drives the results-page jump and link shuffles, so a seeded
    ``random.Random`` gives a reproducible visiting order.
    """

    def __init__(
        self,
        headless: bool = config.HEADLESS,
        serverless: bool = config.SERVERLESS,
        rng: Optional[random.Random] = None,
        batch_size: Optional[int] = None,
        batch_delay: Optional[float] = None,
        session_factory=BrowserSession,
    ):
        self.headless = headless
        self.serverless = serverless
        self.rng = rng or random.Random()
        self.batch_size = batch_size
        self.batch_delay = batch_delay
        self.session_factory = session_factory

    async def scrape(self, criteria: SearchCriteria) -> List[ScrapedProperty]:
        logger.info(
            "Starting Lawrence County GIS scrape for {low}-{high} acres",
            low=criteria.min_acreage,
            high=criteria.max_acreage,
        )
        try:
            async with self.session_factory(headless=self.headless, serverless=self.serverless) as session:
                return await self._scrape_with_session(session, criteria)
        except FormSubmissionError as e:
            logger.error(f"Search form could not be submitted: {e}")
            return []
        except Exception as e:
            logger.exception(f"GIS scrape failed: {e}")
            return []

    async def _scrape_with_session(self, session, criteria: SearchCriteria) -> List[ScrapedProperty]:
        page = await session.new_page()

        logger.info("Navigating to {url}", url=config.SALES_URL)
        await page.navigate(config.SALES_URL, timeout_ms=config.SEARCH_PAGE_TIMEOUT_MS, wait_until="networkidle")

        form = SearchFormFiller(page)
        await form.prepare(criteria)
        await form.submit()
        await asyncio.sleep(config.RESULTS_SETTLE_SECONDS)

        await jump_to_random_results_page(page, self.rng)
        links = await harvest_links(page, self.rng)
        if not links:
            logger.warning("No property links found on the results page")

        fetcher = BatchFetchController(
            DetailExtractor(session, full_detail=True),
            batch_size=self.batch_size,
            delay=self.batch_delay,
        )
        properties = dedupe_by_address(await fetcher.fetch_all(links, criteria))

        if len(properties) < config.TARGET_RESULTS:
            fallback = FallbackOrchestrator(DetailExtractor(session, full_detail=False))
            properties = await fallback.top_up(page, properties, criteria)

        final = cap_results(dedupe_by_address(properties))
        logger.success("GIS scrape complete: {count} properties", count=len(final))
        return final


async def scrape_properties(criteria: SearchCriteria, **scraper_options) -> List[ScrapedProperty]:
    """Scrape up to ten properties matching ``criteria``; returns ``[]`` on failure."""
    return await GISScraper(**scraper_options).scrape(criteria)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Scrape Lawrence County GIS properties by acreage")
    parser.add_argument("--min-acreage", type=float, required=True, help="Minimum acreage")
    parser.add_argument("--max-acreage", type=float, required=True, help="Maximum acreage")
    parser.add_argument("--township", help="Township label echoed in results")
    parser.add_argument("--seed", type=int, help="Seed for a reproducible link order")
    parser.add_argument("--headful", action="store_true", help="Show the browser window")
    parser.add_argument("--output", help="Write JSON results to this file instead of stdout")
    return parser


def criteria_from_args(parser: argparse.ArgumentParser, args: argparse.Namespace) -> SearchCriteria:
    try:
        return SearchCriteria(
            min_acreage=args.min_acreage,
            max_acreage=args.max_acreage,
            township=args.township,
        )
    except ValidationError as e:
        parser.error(validation_message(e))


def emit_results(properties: List[ScrapedProperty], output: Optional[str] = None) -> None:
    """Print the results as JSON, or save them when ``output`` is given."""
    payload = json.dumps([prop.model_dump() for prop in properties], indent=2)
    if output:
        output_path = Path(output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(payload)
        logger.info("Saved {count} properties to {path}", count=len(properties), path=output_path)
    else:
        print(payload)


async def async_main(argv: Optional[List[str]] = None) -> List[ScrapedProperty]:
    parser = _build_parser()
    args = parser.parse_args(argv)
    criteria = criteria_from_args(parser, args)

    rng = random.Random(args.seed) if args.seed is not None else None
    properties = await scrape_properties(criteria, headless=not args.headful, rng=rng)
    emit_results(properties, args.output)
    return properties


def main(argv: Optional[List[str]] = None) -> None:
    configure_logger()
    asyncio.run(async_main(argv))


if __name__ == "__main__":
    main()
