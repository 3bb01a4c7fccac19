"""Detail-page enrichment: history, Abitur grade, languages/courses, open day.

None of the school pages carry stable ids or classes on the interesting
tables, so tables are located with ``TableMatcher`` predicates built from
marker phrases and attribute values. Each sub-extraction runs on its own;
an error in one leaves the others and the fields already set untouched.
"""

import re
import time
from collections.abc import Callable
from dataclasses import dataclass

from bs4 import BeautifulSoup, Tag

from nachfrage_lite.schema import School
from nachfrage_lite.utils import (
    collapse_ws,
    fetch,
    parse_grade,
    parse_number,
)

DEFAULT_DELAY = 1.0
PREVIOUS_YEAR_LABEL = "2024/25"

LANGUAGES_LABEL = "Sprachen"
COURSES_LABEL = "Leistungskurse"
OPEN_DAY_ANCHOR = "tag-der-offenen-tuer"
DATE_SELECTOR = ".date-display-single"

GERMAN_MONTHS = {
    "januar": 1,
    "februar": 2,
    "märz": 3,
    "april": 4,
    "mai": 5,
    "juni": 6,
    "juli": 7,
    "august": 8,
    "september": 9,
    "oktober": 10,
    "november": 11,
    "dezember": 12,
}

_DATE_RE = re.compile(r"(\d{1,2})\.\s*([A-Za-zÄÖÜäöüß]+)\s+(\d{4})")


@dataclass(frozen=True)
class TableMatcher:
    """Predicate identifying a table by its text and/or attribute values.

    ``texts`` are substrings of the table's combined text, ``attrs`` are
    (name, value) pairs compared for equality. With ``require_all`` every
    condition must hold, otherwise any single one is enough.
    """

    texts: tuple[str, ...] = ()
    attrs: tuple[tuple[str, str], ...] = ()
    require_all: bool = True

    def __call__(self, table: Tag) -> bool:
        text = table.get_text(" ")
        checks = [marker in text for marker in self.texts]
        checks += [table.get(name) == value for name, value in self.attrs]
        if not checks:
            return False
        return all(checks) if self.require_all else any(checks)

    def find(self, soup: BeautifulSoup) -> Tag | None:
        for table in soup.find_all("table"):
            if self(table):
                return table
        return None


HISTORY_TABLE = TableMatcher(texts=("Plätze", "Erstwünsche", "Schuljahr"))
ABITUR_TABLE = TableMatcher(
    texts=("Abiturdurchschnitt",),
    attrs=(("summary", "Abiturdurchschnitt"),),
    require_all=False,
)


def _has_anchor(tag: Tag, name: str) -> bool:
    return tag.find("a", attrs={"name": name}) is not None or \
        tag.find("a", id=name) is not None


# --- Sub-extractions ---

def extract_history(soup: BeautifulSoup, school: School) -> None:
    """Previous cycle's first-choice count and the change against this cycle."""
    table = HISTORY_TABLE.find(soup)
    if table is None:
        return

    for tr in table.find_all("tr"):
        cells = tr.find_all(["td", "th"])
        if len(cells) < 3 or PREVIOUS_YEAR_LABEL not in cells[0].get_text():
            continue
        previous = parse_number(cells[2].get_text())
        if previous is not None:
            school.previous_year_erstwuensche = previous
            school.change_erstwuensche = school.erstwuensche - previous
        return


def extract_abitur(soup: BeautifulSoup, school: School) -> None:
    """Abitur grade average of the most recent year listed on the page."""
    table = ABITUR_TABLE.find(soup)
    if table is None:
        return

    best_year = None
    best_grade = None
    for tr in table.find_all("tr"):
        cells = tr.find_all(["td", "th"])
        if len(cells) < 2:
            continue
        year = parse_number(cells[0].get_text())
        grade = parse_grade(cells[1].get_text())
        if not isinstance(year, int) or grade is None:
            continue
        # Strict comparison: the first row of the latest year wins
        if best_year is None or year > best_year:
            best_year, best_grade = year, grade

    if best_year is not None:
        school.abitur_note = best_grade
        school.abitur_year = best_year


def split_courses(raw: str) -> list[str]:
    return [token.strip() for token in raw.split(",") if token.strip()]


def _section_text(soup: BeautifulSoup, label: str) -> str | None:
    for cell in soup.find_all(["td", "th"]):
        if cell.get_text(strip=True) != label and not _has_anchor(cell, label):
            continue
        row = cell.find_parent("tr")
        next_row = row.find_next_sibling("tr") if row else None
        if next_row is None:
            return None
        return collapse_ws(next_row.get_text(" ")) or None
    return None


def extract_languages_courses(soup: BeautifulSoup, school: School) -> None:
    languages = _section_text(soup, LANGUAGES_LABEL)
    if languages:
        school.languages_raw = languages

    courses = _section_text(soup, COURSES_LABEL)
    if courses:
        school.courses_raw = courses
        school.courses = split_courses(courses)


def parse_german_date(text: str) -> str | None:
    """Find ``29. Januar 2026`` style dates and return ``2026-01-29``."""
    match = _DATE_RE.search(text)
    if not match:
        return None
    day, month_name, year = match.groups()
    month = GERMAN_MONTHS.get(month_name.lower())
    if month is None:
        return None
    return f"{int(year):04d}-{month:02d}-{int(day):02d}"


def extract_open_day(soup: BeautifulSoup, school: School) -> None:
    if not _has_anchor(soup, OPEN_DAY_ANCHOR):
        return
    elem = soup.select_one(DATE_SELECTOR)
    if elem is None:
        return
    raw = elem.get_text(strip=True)
    date = parse_german_date(raw)
    if date:
        school.open_day_date = date
        school.open_day_raw = raw


SUB_EXTRACTORS: list[Callable[[BeautifulSoup, School], None]] = [
    extract_history,
    extract_abitur,
    extract_languages_courses,
    extract_open_day,
]


# --- Enricher ---

def apply_detail_page(html: str, school: School) -> None:
    """Run every sub-extraction on one detail page, isolating failures."""
    soup = BeautifulSoup(html, "html.parser")
    for extractor in SUB_EXTRACTORS:
        try:
            extractor(soup, school)
        except Exception:
            continue


def enrich_school(school: School) -> None:
    """Fetch the school's own page and fill in what it offers."""
    try:
        resp = fetch(school.url)
    except Exception:
        return
    apply_detail_page(resp.text, school)


def enrich_all(
    schools: list[School],
    *,
    delay: float = DEFAULT_DELAY,
    progress: Callable[[], None] | None = None,
) -> list[School]:
    """Enrich schools one by one, pausing ``delay`` seconds between fetches."""
    for i, school in enumerate(schools):
        if i and delay > 0:
            time.sleep(delay)
        enrich_school(school)
        if progress is not None:
            progress()
    return schools
