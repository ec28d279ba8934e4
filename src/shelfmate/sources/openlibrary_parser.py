# ABOUTME: Parsing functions for Open Library API JSON responses.
# ABOUTME: Converts edition, works and author payloads into SourceRecord fields.

from typing import Any

from shelfmate.sources.normalizer import clean_text, format_date
from shelfmate.sources.types import SourceRecord

SOURCE_NAME = "openlibrary"

_COVERS_BASE_URL = "https://covers.openlibrary.org/b/isbn"


def parse_edition_response(
    data: dict[str, Any], isbn: str, authors: list[str]
) -> SourceRecord | None:
    """Parse an Open Library ISBN (edition) response into a SourceRecord.

    ``authors`` are the names already resolved from the edition's author
    keys. When none resolved, the edition's ``by_statement`` is used. Returns
    None if the edition has no title or no author can be determined.
    """
    title = clean_text(data.get("title"))
    subtitle = clean_text(data.get("subtitle"))
    if title and subtitle:
        title = f"{title}: {subtitle}"

    author = ", ".join(authors) if authors else clean_text(data.get("by_statement"))
    if not title or not author:
        return None

    publishers = data.get("publishers") or []
    series = data.get("series") or []
    page_count = data.get("number_of_pages")

    return SourceRecord(
        isbn=isbn,
        title=title,
        author=author,
        source=SOURCE_NAME,
        publisher=clean_text(publishers[0]) if publishers else None,
        published_date=format_date(data.get("publish_date")),
        page_count=page_count if isinstance(page_count, int) and page_count > 0 else None,
        thumbnail_url=build_cover_url(isbn, "M") if data.get("covers") else None,
        series=clean_text(series[0]) if series else None,
    )


def author_keys(data: dict[str, Any]) -> list[str]:
    """Author keys (``/authors/OL...A``) listed on an edition."""
    return [entry["key"] for entry in data.get("authors") or [] if entry.get("key")]


def works_key(data: dict[str, Any]) -> str | None:
    works = data.get("works") or []
    return works[0].get("key") if works else None


def parse_works_response(data: dict[str, Any]) -> str | None:
    """Extract the description from an Open Library Works response.

    Handles the OL quirk where description can be either a plain string
    or a dict with {"type": ..., "value": "actual text"}.
    """
    desc = data.get("description")
    if isinstance(desc, dict):
        desc = desc.get("value")
    return clean_text(desc) if isinstance(desc, str) else None


def parse_author_name(data: dict[str, Any]) -> str | None:
    """Extract the author name from an Open Library Author response."""
    return clean_text(data.get("name") or data.get("personal_name"))


def build_cover_url(isbn: str, size: str = "L") -> str:
    """Build an Open Library cover image URL for a given ISBN.

    Args:
        isbn: The ISBN to look up cover art for.
        size: Image size: "S" (small), "M" (medium), or "L" (large).
    """
    return f"{_COVERS_BASE_URL}/{isbn}-{size}.jpg"
