from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import ValidationError

from lawrence_gis import config
from lawrence_gis.models.property import SearchCriteria, validation_message
from lawrence_gis.scrapers.gis_scraper import scrape_properties

router = APIRouter(tags=["api"])


@router.post("/gis-scraper")
async def gis_scraper(request: Request):
    """Run one GIS scrape for the posted acreage window."""
    try:
        body = await request.json()
    except ValueError:
        return JSONResponse(status_code=400, content={"error": "Request body must be JSON"})

    try:
        criteria = SearchCriteria.model_validate(body)
    except ValidationError as e:
        return JSONResponse(status_code=400, content={"error": validation_message(e)})

    try:
        properties = await scrape_properties(criteria)
    except Exception as e:
        logger.exception(f"Error in GIS scraper API: {e}")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    return JSONResponse({
        "success": True,
        "properties": [prop.model_dump(mode="json") for prop in properties],
        "count": len(properties),
        "criteria": criteria.model_dump(mode="json"),
    })


@router.get("/health")
async def api_health():
    return JSONResponse({"status": "ok", "portal": config.SALES_URL})
