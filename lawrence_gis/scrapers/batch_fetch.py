"""
Bounded-concurrency fetching of detail pages.
"""

import asyncio
from typing import List, Sequence

from loguru import logger

from lawrence_gis import config
from lawrence_gis.models.property import PropertyLink, ScrapedProperty, SearchCriteria


def chunked(items: Sequence, size: int) -> List[list]:
    if size < 1:
        raise ValueError("batch size must be at least 1")
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


class BatchFetchController:
    """
    Runs the extractor over links in fixed-size batches.

    Each batch is gathered concurrently and fully settles before the next one
    starts, so at most ``batch_size`` pages are open at once. Batches are
    separated by ``delay`` seconds to stay polite to the portal.
    """

    def __init__(self, extractor, batch_size: int | None = None, delay: float | None = None):
        self.extractor = extractor
        self.batch_size = batch_size if batch_size is not None else config.BATCH_SIZE
        self.delay = delay if delay is not None else config.BATCH_DELAY_SECONDS

    async def fetch_all(self, links: Sequence[PropertyLink], criteria: SearchCriteria) -> List[ScrapedProperty]:
        results: List[ScrapedProperty] = []
        batches = chunked(links, self.batch_size)
        for index, batch in enumerate(batches, start=1):
            logger.info(
                "Processing batch {index}/{total} ({size} links)",
                index=index,
                total=len(batches),
                size=len(batch),
            )
            outcomes = await asyncio.gather(
                *(self.extractor.extract(link, criteria) for link in batch),
                return_exceptions=True,
            )
            for link, outcome in zip(batch, outcomes):
                if isinstance(outcome, BaseException):
                    logger.warning(f"Detail fetch failed for {link.href}: {outcome}")
                    continue
                if outcome is not None:
                    results.append(outcome)

            if index < len(batches) and self.delay > 0:
                await asyncio.sleep(self.delay)

        logger.info("Extracted {count} of {total} properties", count=len(results), total=len(links))
        return results
