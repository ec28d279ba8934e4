# ABOUTME: Parsing functions for Google Books API volume and error responses.
# ABOUTME: Converts the first matching volume into a SourceRecord.

import math
from typing import Any

from shelfmate.sources.normalizer import clean_text, format_date
from shelfmate.sources.types import SourceRecord

SOURCE_NAME = "googlebooks"


def parse_volumes_response(data: dict[str, Any], isbn: str) -> SourceRecord | None:
    """Parse a ``volumes?q=isbn:`` response.

    Returns None when there are no items or the first volume lacks a title
    or authors.
    """
    items = data.get("items") or []
    if not data.get("totalItems") or not items:
        return None

    item = items[0]
    volume = item.get("volumeInfo") or {}
    sale = item.get("saleInfo") or {}

    title = clean_text(volume.get("title"))
    authors = [a.strip() for a in volume.get("authors") or [] if a and a.strip()]
    if not title or not authors:
        return None

    image_links = volume.get("imageLinks") or {}
    list_price = sale.get("listPrice") or {}

    page_count = volume.get("pageCount")
    if not isinstance(page_count, int) or page_count <= 0:
        page_count = None
    series_info = volume.get("seriesInfo")
    series = series_info.get("title") if isinstance(series_info, dict) else None
    return SourceRecord(
        isbn=isbn,
        title=title,
        author=", ".join(authors),
        source=SOURCE_NAME,
        publisher=clean_text(volume.get("publisher")),
        published_date=format_date(volume.get("publishedDate")),
        description=clean_text(volume.get("description")),
        page_count=page_count,
        thumbnail_url=image_links.get("thumbnail") or image_links.get("smallThumbnail"),
        price=_price(list_price.get("amount")),
        series=clean_text(series),
    )


def parse_error_reason(data: dict[str, Any]) -> tuple[str | None, str | None]:
    """Extract ``(reason, message)`` from a Google API error body."""
    error = data.get("error")
    if not isinstance(error, dict):
        return None, None
    errors = error.get("errors") or []
    reason = errors[0].get("reason") if errors and isinstance(errors[0], dict) else None
    return reason, error.get("message")


def _price(amount: Any) -> int | None:
    # listPrice.amount is a JSON number; anything else is not a usable price.
    if isinstance(amount, bool) or not isinstance(amount, (int, float)):
        return None
    if not math.isfinite(amount):
        return None
    return int(amount)
