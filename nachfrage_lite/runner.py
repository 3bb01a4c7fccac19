"""Runner — scrapes all sources, enriches every school, writes the JSON."""

import json
import time
from pathlib import Path

from nachfrage_lite.schema import School, Source
from nachfrage_lite.scrapers.detail import DEFAULT_DELAY, enrich_all
from nachfrage_lite.scrapers.listing import scrape_source
from nachfrage_lite.utils import log, utc_now_iso

DEFAULT_OUTPUT = "data/nachfrage-2025-26.json"


# Registry: source key → Source, scraped in this order
SOURCES: dict[str, Source] = {
    "gymnasium": Source(
        key="gymnasium",
        school_type="Gymnasium",
        domain="https://www.gymnasium-berlin.net",
        listing_url="https://www.gymnasium-berlin.net/nachfrage",
        grades_url="https://www.gymnasium-berlin.net/abiturnoten",
    ),
    "iss": Source(
        key="iss",
        school_type="ISS",
        domain="https://www.sekundarschulen-berlin.de",
        listing_url="https://www.sekundarschulen-berlin.de/nachfrage",
        grades_url="https://www.sekundarschulen-berlin.de/abiturnoten",
    ),
}


def _select_sources(keys: list[str] | None) -> list[Source]:
    if not keys:
        return list(SOURCES.values())

    selected = []
    for key in keys:
        norm = key.lower().strip()
        if norm not in SOURCES:
            log(f"WARNING: Unknown source '{key}', skipping")
            continue
        selected.append(SOURCES[norm])

    if not selected:
        available = ", ".join(SOURCES)
        raise ValueError(f"No known source in {keys}. Available: {available}")
    return selected


def _progress() -> None:
    print(".", end="", flush=True)


def _summarize(schools: list[School]) -> None:
    counts = {
        "abiturNote": sum(s.abitur_note is not None for s in schools),
        "previousYearErstwuensche": sum(
            s.previous_year_erstwuensche is not None for s in schools),
        "courses": sum(s.courses is not None for s in schools),
        "languagesRaw": sum(s.languages_raw is not None for s in schools),
        "openDayDate": sum(s.open_day_date is not None for s in schools),
    }
    log("Enriched: " + ", ".join(f"{k}={v}" for k, v in counts.items()))


def build_document(schools: list[School]) -> dict:
    return {
        "lastUpdated": utc_now_iso(),
        "schools": [school.to_dict() for school in schools],
    }


def write_document(document: dict, path: str | Path = DEFAULT_OUTPUT) -> Path:
    """Write the document as pretty-printed UTF-8 JSON, creating parent dirs."""
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(document, indent=2, ensure_ascii=False), encoding="utf-8")
    return out


def run_pipeline(
    *,
    sources: list[str] | None = None,
    delay: float = DEFAULT_DELAY,
    enrich: bool = True,
) -> dict:
    """Scrape the configured sources and return the output document.

    Args:
        sources: Source keys to scrape, in order. None = all registered sources.
        delay: Seconds to wait between consecutive detail-page fetches.
        enrich: Visit each school's own page for history, grades and courses.

    Returns:
        ``{"lastUpdated": ..., "schools": [...]}`` in discovery order.

    Raises:
        ValueError: If none of the requested source keys is known
        requests.RequestException: If a source's main listing page fails
    """
    targets = _select_sources(sources)
    schools: list[School] = []

    for source in targets:
        start = time.time()
        rows = scrape_source(source)
        elapsed = time.time() - start
        log(f"{source.key}: {len(rows)} schools ({elapsed:.1f}s)")
        schools = schools + rows

    log(f"Parsed {len(schools)} rows total across all districts")

    if enrich and schools:
        log(f"Fetching {len(schools)} detail pages...")
        schools = enrich_all(schools, delay=delay, progress=_progress)
        print()
        _summarize(schools)

    return build_document(schools)
