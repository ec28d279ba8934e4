# ABOUTME: Field-level cleanup for raw catalog values (titles, publishers, dates, numbers).
# ABOUTME: Shared by all source parsers so every source yields the same canonical shapes.

import re
from datetime import date

_WHITESPACE_RE = re.compile(r"\s+")
_PAGE_COUNT_RE = re.compile(r"(\d+)\s*p")
_FIRST_INT_RE = re.compile(r"(\d+)")
_YEAR_MONTH_RE = re.compile(r"^(\d{4})[.\-/](\d{1,2})$")
_YEAR_MONTH_DAY_RE = re.compile(r"^(\d{4})[.\-/](\d{1,2})[.\-/](\d{1,2})$")

# Publisher cleanup, applied in order. NDL publisher strings often carry a
# katakana reading, the city of publication and the company form.
_KATAKANA_RE = re.compile(r"[ア-ン\s]+")
_PLACE_RE = re.compile(
    r"東京|大阪|京都|名古屋|福岡|札幌|仙台|広島|神戸|横浜|愛知|兵庫|千葉|埼玉|神奈川"
)
_ADMIN_DIVISION_RE = re.compile(r"区|市|町|村|都|府|県")
_COMPANY_FORM_RE = re.compile(r"株式会社|有限会社|合同会社|合資会社|合名会社")
_DIGITS_HYPHEN_RE = re.compile(r"[0-9\-]")
_ALL_KATAKANA_RE = re.compile(r"^[ア-ン]+$")


def clean_text(text: str | None) -> str | None:
    """Collapse runs of whitespace and trim. Blank input becomes None."""
    if text is None:
        return None
    cleaned = _WHITESPACE_RE.sub(" ", text).strip()
    return cleaned or None


def clean_title(title: str | None) -> str | None:
    """Keep only the first line of a title (later lines hold its reading)."""
    if title is None:
        return None
    lines = [line for line in title.splitlines() if line.strip()]
    if not lines:
        return None
    return clean_text(lines[0])


def clean_publisher(raw: str | None) -> str | None:
    """Reduce a publisher string to the publisher's name.

    Drops katakana readings, place names, administrative suffixes, company
    forms and digits from the first token. If that leaves nothing, falls
    back to the first meaningful token of the original string.
    """
    if raw is None or not raw.strip():
        return None

    first_line = raw.strip().splitlines()[0].strip()
    tokens = first_line.split()
    if not tokens:
        return None

    cleaned = _KATAKANA_RE.sub("", tokens[0])
    cleaned = _PLACE_RE.sub("", cleaned)
    cleaned = _ADMIN_DIVISION_RE.sub("", cleaned)
    cleaned = _COMPANY_FORM_RE.sub("", cleaned)
    cleaned = _DIGITS_HYPHEN_RE.sub("", cleaned).strip().strip("ー・")
    if cleaned:
        return cleaned

    parts = raw.split()
    for part in parts:
        if len(part) > 1 and not _ALL_KATAKANA_RE.match(part):
            return part
    return parts[0] if parts else None


def format_date(raw: str | None) -> str | None:
    """Normalize publication dates to ISO form where the input allows it.

    "2012-06-22" and "2012.6.22" become "2012-06-22", "2012.6" becomes
    "2012-06". Anything else is returned trimmed but otherwise unchanged.
    """
    text = clean_text(raw)
    if text is None:
        return None

    match = _YEAR_MONTH_DAY_RE.match(text)
    if match:
        year, month, day = (int(g) for g in match.groups())
        try:
            return date(year, month, day).isoformat()
        except ValueError:
            return text

    match = _YEAR_MONTH_RE.match(text)
    if match:
        year, month = (int(g) for g in match.groups())
        if 1 <= month <= 12:
            return f"{year:04d}-{month:02d}"
    return text


def parse_page_count(extent: str | None) -> int | None:
    """Extract a page count from an extent string such as "237p ; 21cm"."""
    if not extent:
        return None
    match = _PAGE_COUNT_RE.search(extent)
    return int(match.group(1)) if match else None


def parse_price(raw: str | None) -> int | None:
    """Extract the first integer amount from a price such as "2400円"."""
    if not raw:
        return None
    match = _FIRST_INT_RE.search(raw.replace(",", ""))
    return int(match.group(1)) if match else None
