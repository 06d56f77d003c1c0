"""
Main entry point for the Lawrence County GIS scraper.
Supports modes:
  --scrape: Scrape properties in an acreage window and print JSON
  --web: Start the HTTP API server
"""
import argparse
import asyncio
import os
import random

from loguru import logger

from lawrence_gis.scrapers.gis_scraper import criteria_from_args, emit_results, scrape_properties
from lawrence_gis.utils.logging_config import setup_default_logging


async def handle_scrape(parser: argparse.ArgumentParser, args: argparse.Namespace):
    if args.min_acreage is None or args.max_acreage is None:
        parser.error("--scrape requires --min-acreage and --max-acreage")
    criteria = criteria_from_args(parser, args)
    rng = random.Random(args.seed) if args.seed is not None else None
    properties = await scrape_properties(criteria, headless=not args.headful, rng=rng)
    emit_results(properties, args.output)


def handle_web(port: int):
    """Start the FastAPI web server (lawrence_gis/web)."""
    import uvicorn

    logger.info(f"Starting FastAPI Web Server on port {port}...")
    logger.info(f"Local Access: http://localhost:{port}/api/health")
    uvicorn.run(
        "lawrence_gis.web.main:app",
        host="0.0.0.0",
        port=port,
        reload=False,
        log_level="info",
    )


def main():
    parser = argparse.ArgumentParser(description="Lawrence County GIS Scraper")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--scrape", action="store_true", help="Scrape properties and print JSON")
    group.add_argument("--web", action="store_true", help="Start web server")
    parser.add_argument("--min-acreage", type=float, help="Minimum acreage for --scrape")
    parser.add_argument("--max-acreage", type=float, help="Maximum acreage for --scrape")
    parser.add_argument("--township", help="Township label echoed in results")
    parser.add_argument("--seed", type=int, help="Seed for a reproducible link order")
    parser.add_argument("--headful", action="store_true", help="Show the browser window")
    parser.add_argument("--output", help="Write JSON results to this file instead of stdout")
    parser.add_argument("--port", type=int, default=int(os.getenv("WEB_PORT", "8080")),
                        help="Port for web server (default 8080 or WEB_PORT env var)")

    args = parser.parse_args()
    setup_default_logging()

    if args.scrape:
        asyncio.run(handle_scrape(parser, args))
    elif args.web:
        handle_web(args.port)


if __name__ == "__main__":
    main()
