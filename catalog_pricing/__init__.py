"""
Catalog pricing scraper.

Walks the IBM Cloud Global Catalog, normalizes every plan's pricing into
content-addressed products and upserts them into Postgres.
"""

from catalog_pricing.pipeline import ScrapeSummary, run_scrape, scrape_and_store

__all__ = ["ScrapeSummary", "run_scrape", "scrape_and_store"]
