"""
Browser-driven scraping of the Lawrence County Vision GIS portal.
"""
