# ABOUTME: ISBN-10/ISBN-13 normalization and checksum validation.
# ABOUTME: Every ISBN is converted to one canonical 13-digit form before lookup or storage.

import re
import unicodedata

from shelfmate.errors import InvalidIsbnError

_SEPARATOR_RE = re.compile(r"[\s-]")
_LABEL_RE = re.compile(r"^ISBN(?:-1[03])?:?", re.IGNORECASE)
_ISBN10_RE = re.compile(r"^[0-9]{9}[0-9X]$")
_ISBN13_RE = re.compile(r"^[0-9]{13}$")

_BOOKLAND_PREFIXES = ("978", "979")

# Registration groups recognized for display, longest match wins.
_REGISTRATION_GROUPS = ("957", "88", "89", "0", "1", "2", "3", "4", "5", "7")
_JAPAN_GROUP = "4"


def _clean(raw: str) -> str:
    """Strip an optional ISBN label, whitespace and hyphens; uppercase 'x'.

    Fullwidth characters, as typed with a Japanese IME, are folded to ASCII
    first. Digits from other scripts are left alone and fail validation.
    """
    text = unicodedata.normalize("NFKC", raw).strip()
    text = _LABEL_RE.sub("", text)
    return _SEPARATOR_RE.sub("", text).upper()


def isbn10_check_digit(first_nine: str) -> str:
    """Compute the ISBN-10 check digit ('0'-'9' or 'X') for nine digits."""
    total = sum(int(d) * weight for d, weight in zip(first_nine, range(10, 1, -1)))
    check = (11 - total % 11) % 11
    return "X" if check == 10 else str(check)


def isbn13_check_digit(first_twelve: str) -> str:
    """Compute the ISBN-13 check digit for twelve digits (weights 1,3,1,3...)."""
    total = sum(int(d) * (1 if i % 2 == 0 else 3) for i, d in enumerate(first_twelve))
    return str((10 - total % 10) % 10)


def _isbn10_is_valid(isbn: str) -> bool:
    total = 0
    for i, char in enumerate(isbn):
        value = 10 if char == "X" else int(char)
        total += value * (10 - i)
    return total % 11 == 0


def _isbn13_is_valid(isbn: str) -> bool:
    return isbn13_check_digit(isbn[:12]) == isbn[12]


def normalize(raw: str) -> str:
    """Validate an ISBN-10 or ISBN-13 and return its canonical ISBN-13 form.

    Hyphens, spaces and a leading "ISBN" label are ignored. ISBN-10 input is
    converted by prefixing "978" and recomputing the check digit.

    Args:
        raw: The identifier as typed or scanned.

    Returns:
        The 13-digit canonical ISBN.

    Raises:
        InvalidIsbnError: On wrong length, illegal characters, a non-Bookland
            prefix, or a checksum mismatch.
    """
    cleaned = _clean(raw)

    if len(cleaned) == 10:
        if not _ISBN10_RE.match(cleaned):
            raise InvalidIsbnError(raw, "ISBN-10 must be 9 digits followed by a digit or X")
        if not _isbn10_is_valid(cleaned):
            raise InvalidIsbnError(raw, "ISBN-10 checksum mismatch")
        base = "978" + cleaned[:9]
        return base + isbn13_check_digit(base)

    if len(cleaned) == 13:
        if not _ISBN13_RE.match(cleaned):
            raise InvalidIsbnError(raw, "ISBN-13 must be 13 digits")
        if not cleaned.startswith(_BOOKLAND_PREFIXES):
            raise InvalidIsbnError(raw, "ISBN-13 must start with 978 or 979")
        if not _isbn13_is_valid(cleaned):
            raise InvalidIsbnError(raw, "ISBN-13 checksum mismatch")
        return cleaned

    raise InvalidIsbnError(raw, f"expected 10 or 13 characters, got {len(cleaned)}")


def is_valid(raw: str) -> bool:
    """Whether the string normalizes to a canonical ISBN."""
    try:
        normalize(raw)
    except InvalidIsbnError:
        return False
    return True


def to_isbn10(raw: str) -> str | None:
    """Return the ISBN-10 form of an ISBN, or None for 979-prefixed ISBNs.

    Raises:
        InvalidIsbnError: If the input is not a valid ISBN.
    """
    canonical = normalize(raw)
    if not canonical.startswith("978"):
        return None
    body = canonical[3:12]
    return body + isbn10_check_digit(body)


def registration_group(raw: str) -> str | None:
    """Return the registration group (country/language) of an ISBN, if known."""
    canonical = normalize(raw)
    body = canonical[3:12]
    for group in sorted(_REGISTRATION_GROUPS, key=len, reverse=True):
        if body.startswith(group):
            return group
    return None


def is_japanese(raw: str) -> bool:
    """Whether a valid ISBN was registered in the Japanese group (4)."""
    try:
        return registration_group(raw) == _JAPAN_GROUP
    except InvalidIsbnError:
        return False
