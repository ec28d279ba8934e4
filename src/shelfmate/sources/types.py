# ABOUTME: SourceRecord, the raw book record a catalog source returns for one ISBN.
# ABOUTME: Fields a source does not supply stay None; they are never defaulted to "" or 0.

from dataclasses import dataclass


@dataclass
class SourceRecord:
    """Book metadata as reported by a single upstream catalog.

    Title and author are always present on a record a source returns; a
    source that cannot provide both reports the ISBN as not found instead.
    """

    isbn: str
    title: str
    author: str
    source: str
    publisher: str | None = None
    published_date: str | None = None
    description: str | None = None
    page_count: int | None = None
    thumbnail_url: str | None = None
    price: int | None = None
    series: str | None = None
