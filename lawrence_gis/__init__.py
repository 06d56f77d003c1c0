"""
Lawrence County GIS property scraper.

Drives the county's Vision Sales search portal with a headless browser and
recovers owner, address, municipality, acreage and assessment for a sample of
parcels inside an acreage window.
"""
