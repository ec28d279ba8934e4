# ABOUTME: Open Library catalog source implementation.
# ABOUTME: Looks up an edition by ISBN, then enriches it from the author and works endpoints.

import logging

from shelfmate.errors import SourceError
from shelfmate.sources.http import (
    PAYLOAD_SHAPE_ERRORS,
    SourceHttpClient,
    malformed_payload,
    parse_json,
    status_error,
)
from shelfmate.sources.openlibrary_parser import (
    SOURCE_NAME,
    author_keys,
    parse_author_name,
    parse_edition_response,
    parse_works_response,
    works_key,
)
from shelfmate.sources.types import SourceRecord

logger = logging.getLogger(__name__)

OPEN_LIBRARY_URL = "https://openlibrary.org"


class OpenLibrarySource:
    """CatalogSource backed by the Open Library API.

    Only the edition request decides the outcome. Author and works
    follow-ups are best effort: their failures are logged and the record is
    returned with whatever was gathered.
    """

    def __init__(self, http_client: SourceHttpClient, *, base_url: str = OPEN_LIBRARY_URL) -> None:
        self._http = http_client
        self._base_url = base_url.rstrip("/")

    @property
    def name(self) -> str:
        return SOURCE_NAME

    async def lookup(self, isbn: str, deadline: float) -> SourceRecord | None:
        response = await self._http.get(
            self.name, f"{self._base_url}/isbn/{isbn}.json", deadline=deadline
        )
        if response.status_code == 404:
            logger.debug("Open Library has no edition for %s", isbn)
            return None
        error = status_error(self.name, response)
        if error is not None:
            raise error
        edition = parse_json(self.name, response)

        try:
            keys = author_keys(edition)
            work = works_key(edition)
        except PAYLOAD_SHAPE_ERRORS as exc:
            raise malformed_payload(self.name, exc) from exc

        authors = await self._resolve_authors(keys, deadline)
        try:
            record = parse_edition_response(edition, isbn, authors)
        except PAYLOAD_SHAPE_ERRORS as exc:
            raise malformed_payload(self.name, exc) from exc
        if record is None:
            logger.debug("Open Library edition for %s lacks title or author", isbn)
            return None

        if work:
            record.description = await self._fetch_description(work, deadline)
        return record

    async def _get_optional(self, path: str, deadline: float) -> dict | None:
        try:
            response = await self._http.get(self.name, f"{self._base_url}{path}.json", deadline=deadline)
            error = status_error(self.name, response)
            if error is not None:
                raise error
            return parse_json(self.name, response)
        except SourceError as exc:
            logger.info("Open Library enrichment %s skipped: %s", path, exc.detail)
            return None

    async def _resolve_authors(self, keys: list[str], deadline: float) -> list[str]:
        names: list[str] = []
        for key in keys:
            data = await self._get_optional(key, deadline)
            name = self._parse_optional(parse_author_name, data, key)
            if name:
                names.append(name)
        return names

    async def _fetch_description(self, key: str, deadline: float) -> str | None:
        data = await self._get_optional(key, deadline)
        return self._parse_optional(parse_works_response, data, key)

    def _parse_optional(self, parse, data: dict | None, path: str) -> str | None:
        if not data:
            return None
        try:
            return parse(data)
        except PAYLOAD_SHAPE_ERRORS as exc:
            logger.info("Open Library enrichment %s skipped: malformed payload: %s", path, exc)
            return None
