"""Normalized admission-demand schema — one record per school and cycle."""

from dataclasses import dataclass, field, fields


def _key(name: str, *, optional: bool = False):
    return {"json": name, "optional": optional}


@dataclass
class School:
    url: str
    name: str
    school_type: str = field(metadata=_key("schoolType"))
    bezirk: str = field(metadata=_key("bezirk"))
    ortsteil: str = field(metadata=_key("ortsteil"))
    plaetze: int | float = field(metadata=_key("plaetze"))
    erstwuensche: int | float = field(metadata=_key("erstwuensche"))
    nachfrage_prozent: float = field(metadata=_key("nachfrageProzent"))
    year: str = field(metadata=_key("year"))
    abitur_note: float | None = field(default=None, metadata=_key("abiturNote"))
    abitur_year: int | None = field(
        default=None, metadata=_key("abiturYear", optional=True))
    previous_year_erstwuensche: int | float | None = field(
        default=None, metadata=_key("previousYearErstwuensche", optional=True))
    change_erstwuensche: int | float | None = field(
        default=None, metadata=_key("changeErstwuensche", optional=True))
    languages_raw: str | None = field(
        default=None, metadata=_key("languagesRaw", optional=True))
    courses_raw: str | None = field(
        default=None, metadata=_key("coursesRaw", optional=True))
    courses: list[str] | None = field(
        default=None, metadata=_key("courses", optional=True))
    open_day_date: str | None = field(
        default=None, metadata=_key("openDayDate", optional=True))
    open_day_raw: str | None = field(
        default=None, metadata=_key("openDayRaw", optional=True))

    def to_dict(self) -> dict:
        """Serialize with the camelCase keys of the published JSON.

        Enrichment fields other than ``abiturNote`` are left out while unset.
        """
        out = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.metadata.get("optional") and value is None:
                continue
            out[f.metadata.get("json", f.name)] = value
        return out


@dataclass(frozen=True)
class Source:
    """One admission-demand website and the layout details needed to read it."""

    key: str
    school_type: str
    domain: str
    listing_url: str
    grades_url: str | None = None
    facet_selector: str = "#edit-bezirk option"
    facet_param: str = "bezirk"
    # Grade index table: name link column, grade column, minimum cells per row
    grade_name_column: int = 0
    grade_value_column: int = 2
    grade_min_cells: int = 3
