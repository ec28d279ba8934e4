# ABOUTME: Parsing functions for National Diet Library SRU responses (dcndl schema).
# ABOUTME: Converts the first bibliographic record in an XML payload into a SourceRecord.

import xml.etree.ElementTree as ET

from shelfmate.sources.normalizer import (
    clean_publisher,
    clean_text,
    clean_title,
    format_date,
    parse_page_count,
    parse_price,
)
from shelfmate.sources.types import SourceRecord

SOURCE_NAME = "ndl"

NAMESPACES = {
    "dc": "http://purl.org/dc/elements/1.1/",
    "dcterms": "http://purl.org/dc/terms/",
    "dcndl": "http://ndl.go.jp/dcndl/terms/",
    "foaf": "http://xmlns.com/foaf/0.1/",
    "rdf": "http://www.w3.org/1999/02/22-rdf-syntax-ns#",
}

# Element names tried in order for each field.
_TITLE_TAGS = ("dcterms:title", "dc:title")
_CREATOR_TAGS = ("dc:creator", "dcterms:creator")
_PUBLISHER_TAGS = ("dcterms:publisher", "dc:publisher", "dcndl:publisher")
_ISSUED_TAGS = ("dcterms:issued", "dc:date")
_DESCRIPTION_TAGS = ("dcndl:description", "dc:description", "dcterms:abstract")
_EXTENT_TAGS = ("dcterms:extent", "dc:extent")
_PRICE_TAGS = ("dcndl:price", "dc:price")
_SERIES_TAGS = ("dcndl:seriesTitle", "dcndl:series", "dcterms:isPartOf", "dc:relation")

# Placeholder NDL sometimes puts where the publisher name belongs.
_PUBLISHER_PLACEHOLDER = "JP"
_PUBLISHER_KEYWORDS = ("書房", "出版", "社")

_PLACEHOLDER_VALUES = frozenset({"Unknown Title", "Unknown Author"})


def _qualified(tag: str) -> str:
    prefix, local = tag.split(":", 1)
    return f"{{{NAMESPACES[prefix]}}}{local}"


def _element_text(element: ET.Element) -> str | None:
    """Text of an element, preferring its rdf:value or foaf:name child.

    Structured values also carry a reading (dcndl:transcription) and a
    place of publication, which must not leak into the field.
    """
    for inner_tag in ("rdf:value", "foaf:name"):
        inner = element.find(f".//{_qualified(inner_tag)}")
        if inner is not None:
            text = "".join(inner.itertext()).strip()
            if text:
                return text
    text = "".join(element.itertext()).strip()
    return text or None


def find_text(record: ET.Element, tags: tuple[str, ...]) -> str | None:
    """Return the text of the first non-empty element among ``tags``."""
    for tag in tags:
        for element in record.iter(_qualified(tag)):
            text = _element_text(element)
            if text:
                return text
    return None


def _find_publisher(record: ET.Element) -> str | None:
    """Locate the publisher, looking past the "JP" placeholder if needed."""
    for tag in _PUBLISHER_TAGS:
        for element in record.iter(_qualified(tag)):
            text = _element_text(element)
            if text and text != _PUBLISHER_PLACEHOLDER:
                return text

    for element in record.iter():
        direct = (element.text or "").strip()
        if direct and any(keyword in direct for keyword in _PUBLISHER_KEYWORDS):
            return direct
    return None


def parse_sru_response(xml_text: str, isbn: str) -> SourceRecord | None:
    """Parse an NDL SRU searchRetrieve response.

    Returns None when the response holds no record, or when the first
    record lacks a usable title or author.

    Raises:
        xml.etree.ElementTree.ParseError: If the payload is not XML.
    """
    root = ET.fromstring(xml_text)
    record = root.find(".//{*}recordData")
    if record is None:
        return None

    title = clean_title(find_text(record, _TITLE_TAGS))
    author = clean_text(find_text(record, _CREATOR_TAGS))
    if not title or not author or title in _PLACEHOLDER_VALUES or author in _PLACEHOLDER_VALUES:
        return None

    return SourceRecord(
        isbn=isbn,
        title=title,
        author=author,
        source=SOURCE_NAME,
        publisher=clean_publisher(_find_publisher(record)),
        published_date=format_date(find_text(record, _ISSUED_TAGS)),
        description=clean_text(find_text(record, _DESCRIPTION_TAGS)),
        page_count=parse_page_count(find_text(record, _EXTENT_TAGS)),
        price=parse_price(find_text(record, _PRICE_TAGS)),
        series=clean_text(find_text(record, _SERIES_TAGS)),
    )
