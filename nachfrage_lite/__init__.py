"""
nachfrage_lite — admission demand scraper for Berlin secondary schools.

Collects places, first-choice applications and demand percentages per
district from gymnasium-berlin.net and sekundarschulen-berlin.de, then
visits each school's page for Abitur grades, previous-year figures,
languages, advanced courses and open-day dates.

Usage:
    from nachfrage_lite import run_pipeline, write_document

    # Scrape every source and write data/nachfrage-2025-26.json
    document = run_pipeline()
    write_document(document)

    # Listing data only, for one source
    document = run_pipeline(sources=["gymnasium"], enrich=False)
"""

from nachfrage_lite.runner import SOURCES, run_pipeline, write_document
from nachfrage_lite.scrapers.listing import scrape_source

__all__ = ["SOURCES", "run_pipeline", "scrape_source", "write_document"]
