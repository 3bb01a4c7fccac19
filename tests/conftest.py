"""Shared fixtures: canned pages served instead of real HTTP requests."""

from __future__ import annotations

import pytest
import requests

from nachfrage_lite.schema import School, Source
from nachfrage_lite.scrapers import detail, listing


class FakeResponse:
    def __init__(self, text: str, status_code: int = 200) -> None:
        self.text = text
        self.status_code = status_code

    @property
    def ok(self) -> bool:
        return self.status_code < 400


class FakeWeb:
    """URL → HTML table; unknown URLs and error statuses raise like requests."""

    def __init__(self) -> None:
        self.pages: dict[str, tuple[int, str]] = {}
        self.requested: list[str] = []

    def add(self, url: str, html: str, status: int = 200) -> None:
        self.pages[url] = (status, html)

    def __call__(self, url: str, **kwargs) -> FakeResponse:
        self.requested.append(url)
        if url not in self.pages:
            raise requests.ConnectionError(f"no route to {url}")
        status, html = self.pages[url]
        if status >= 400:
            raise requests.HTTPError(f"{status} for {url}")
        return FakeResponse(html, status)


@pytest.fixture
def web(monkeypatch: pytest.MonkeyPatch) -> FakeWeb:
    fake = FakeWeb()
    monkeypatch.setattr(listing, "fetch", fake)
    monkeypatch.setattr(detail, "fetch", fake)
    return fake


@pytest.fixture
def source() -> Source:
    return Source(
        key="test",
        school_type="Gymnasium",
        domain="https://example.org",
        listing_url="https://example.org/nachfrage",
        grades_url="https://example.org/abiturnoten",
    )


@pytest.fixture
def school() -> School:
    return School(
        url="https://example.org/schule/x",
        name="Beispiel-Gymnasium",
        school_type="Gymnasium",
        bezirk="Mitte",
        ortsteil="Wedding",
        plaetze=100,
        erstwuensche=120,
        nachfrage_prozent=120.0,
        year="2025/26",
    )


def listing_page(*rows: str, options: tuple[str, ...] = ()) -> str:
    opts = "".join(f'<option value="{o}">{o}</option>' for o in options)
    return (
        "<html><body>"
        f'<select id="edit-bezirk">{opts}</select>'
        "<table><tr><th>Schule</th><th>Plätze</th><th>Erstwünsche</th><th>%</th></tr>"
        + "".join(rows)
        + "</table></body></html>"
    )


def school_row(name: str, href: str, ortsteil: str, *numbers: str) -> str:
    cells = "".join(f"<td>{n}</td>" for n in numbers)
    link = f'<a href="{href}">{name}</a>' if href else name
    return f"<tr><td>{link}<br/>{ortsteil}</td>{cells}</tr>"
