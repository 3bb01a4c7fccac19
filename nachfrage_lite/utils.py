"""Shared utilities for nachfrage_lite scrapers."""

import math
import re
import sys
from datetime import datetime, timezone

import requests

DEFAULT_TIMEOUT = 30

_WS_RE = re.compile(r"\s+")


def fetch(url: str, *, timeout: int = DEFAULT_TIMEOUT, **kwargs) -> requests.Response:
    """Fetch a URL once; HTTP error statuses raise ``requests.HTTPError``."""
    response = requests.get(url, timeout=timeout, **kwargs)
    response.raise_for_status()
    return response


def log(message: str) -> None:
    """Write a timestamped status line to stderr."""
    stamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    print(f"[{stamp}] {message}", file=sys.stderr)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def collapse_ws(text: str | None) -> str:
    """Collapse runs of whitespace to single spaces and strip."""
    if not text:
        return ""
    return _WS_RE.sub(" ", text).strip()


def parse_number(text: str | None) -> int | float | None:
    """Parse a plain numeric cell; None unless the result is finite.

    Integral values come back as ``int``.
    """
    if text is None:
        return None
    try:
        value = float(text.strip())
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return int(value) if value.is_integer() else value


def parse_german_float(text: str | None) -> float | None:
    """Parse a comma-decimal number such as ``"1,4"``."""
    if not text:
        return None
    try:
        value = float(text.strip().replace(",", "."))
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def parse_grade(text: str | None) -> float | None:
    """Parse a grade average; non-positive values count as missing."""
    value = parse_german_float(text)
    if value is None or value <= 0:
        return None
    return value


def absolute_url(href: str, domain: str) -> str:
    """Keep hrefs that already carry a scheme, prefix the rest with domain."""
    if re.match(r"^[a-zA-Z][a-zA-Z0-9+.-]*://", href):
        return href
    return f"{domain.rstrip('/')}{href}"
