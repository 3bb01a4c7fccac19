"""Listing-page scraping: district facets, grade index and demand rows."""

import urllib.parse

import requests
from bs4 import BeautifulSoup

from nachfrage_lite.schema import School, Source
from nachfrage_lite.utils import (
    absolute_url,
    collapse_ws,
    fetch,
    log,
    parse_grade,
    parse_number,
)

ALL_FACET = "All"
YEAR_LABEL = "2025/26"


def discover_facets(soup: BeautifulSoup, selector: str) -> list[str]:
    """Return the distinct option values under selector, minus the "All" sentinel."""
    facets = []
    for opt in soup.select(selector):
        value = (opt.get("value") or "").strip()
        if value and value != ALL_FACET and value not in facets:
            facets.append(value)
    return facets


def parse_grade_index(soup: BeautifulSoup, source: Source) -> dict[str, float]:
    """Map absolute school URL to the first grade average listed for it."""
    grades: dict[str, float] = {}
    for tr in soup.select("tr"):
        tds = tr.find_all("td")
        if len(tds) < source.grade_min_cells:
            continue

        a = tds[source.grade_name_column].find("a")
        href = (a.get("href") or "").strip() if a else ""
        if not href:
            continue

        grade = parse_grade(tds[source.grade_value_column].get_text(strip=True))
        if grade is None:
            continue

        grades.setdefault(absolute_url(href, source.domain), grade)
    return grades


def build_grade_index(source: Source) -> dict[str, float]:
    """Fetch and parse the grade index page; any failure yields an empty map."""
    if not source.grades_url:
        return {}
    try:
        resp = fetch(source.grades_url)
    except requests.RequestException as e:
        log(f"{source.key}: grade index unavailable ({e}), continuing without it")
        return {}

    grades = parse_grade_index(BeautifulSoup(resp.text, "html.parser"), source)
    log(f"{source.key}: grade index has {len(grades)} schools")
    return grades


def extract_rows(
    soup: BeautifulSoup,
    source: Source,
    bezirk: str,
    grades: dict[str, float] | None = None,
) -> list[School]:
    """Parse every qualifying table row of one district page into a School."""
    grades = grades or {}
    schools = []

    for tr in soup.select("tr"):
        tds = tr.find_all("td")
        if len(tds) < 4:
            continue

        title_cell = tds[0]
        a = title_cell.find("a")
        name = a.get_text().strip() if a else ""
        href = (a.get("href") or "").strip() if a else ""
        if not name or not href:
            continue

        # Locality is whatever remains of the cell once the name is removed
        ortsteil = collapse_ws(title_cell.get_text()).replace(name, "", 1).strip()

        plaetze = parse_number(tds[1].get_text())
        erstwuensche = parse_number(tds[2].get_text())
        prozent = parse_number(tds[3].get_text())
        if plaetze is None or erstwuensche is None or prozent is None:
            continue

        url = absolute_url(href, source.domain)
        schools.append(School(
            url=url,
            name=name,
            school_type=source.school_type,
            bezirk=bezirk,
            ortsteil=ortsteil,
            plaetze=plaetze,
            erstwuensche=erstwuensche,
            nachfrage_prozent=float(prozent),
            year=YEAR_LABEL,
            abitur_note=grades.get(url),
        ))

    return schools


def facet_url(source: Source, facet: str) -> str:
    query = urllib.parse.urlencode(
        {source.facet_param: facet}, quote_via=urllib.parse.quote
    )
    return f"{source.listing_url}?{query}"


def scrape_source(source: Source) -> list[School]:
    """Collect all listing rows of one source, district by district.

    The top-level listing fetch is required to discover districts, so its
    failure propagates. Failed district pages are logged and skipped.
    """
    grades = build_grade_index(source)

    log(f"{source.key}: fetching main page to find districts...")
    main_resp = fetch(source.listing_url)
    facets = discover_facets(
        BeautifulSoup(main_resp.text, "html.parser"), source.facet_selector
    )
    log(f"{source.key}: found {len(facets)} districts: {', '.join(facets)}")

    schools: list[School] = []
    for bezirk in facets:
        try:
            resp = fetch(facet_url(source, bezirk))
        except requests.RequestException as e:
            log(f"{source.key}: failed to fetch {bezirk}: {e}")
            continue

        rows = extract_rows(
            BeautifulSoup(resp.text, "html.parser"), source, bezirk, grades
        )
        log(f"  -> found {len(rows)} schools in {bezirk}")
        schools.extend(rows)

    return schools
