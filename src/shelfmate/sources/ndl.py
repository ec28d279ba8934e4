# ABOUTME: National Diet Library (NDL) catalog source, queried through its SRU endpoint.
# ABOUTME: Strongest source for Japanese books; returns dcndl XML records.

import logging
import xml.etree.ElementTree as ET

from shelfmate.errors import SourceError
from shelfmate.sources.http import (
    PAYLOAD_SHAPE_ERRORS,
    SourceHttpClient,
    malformed_payload,
    status_error,
)
from shelfmate.sources.ndl_parser import SOURCE_NAME, parse_sru_response
from shelfmate.sources.types import SourceRecord

logger = logging.getLogger(__name__)

NDL_SRU_URL = "https://ndlsearch.ndl.go.jp/api/sru"

_DEFAULT_PARAMS = {
    "operation": "searchRetrieve",
    "version": "1.2",
    "recordSchema": "dcndl",
    "onlyBib": "true",
    "recordPacking": "xml",
    "maximumRecords": "1",
}


class NdlSource:
    """CatalogSource backed by the NDL Search SRU API."""

    def __init__(self, http_client: SourceHttpClient, *, base_url: str = NDL_SRU_URL) -> None:
        self._http = http_client
        self._base_url = base_url

    @property
    def name(self) -> str:
        return SOURCE_NAME

    async def lookup(self, isbn: str, deadline: float) -> SourceRecord | None:
        params = {**_DEFAULT_PARAMS, "query": f'isbn="{isbn}" AND dpid=iss-ndl-opac'}
        response = await self._http.get(self.name, self._base_url, params=params, deadline=deadline)

        error = status_error(self.name, response)
        if error is not None:
            raise error

        try:
            record = parse_sru_response(response.text, isbn)
        except ET.ParseError as exc:
            raise SourceError(self.name, f"malformed XML: {exc}", retryable=False) from exc
        except PAYLOAD_SHAPE_ERRORS as exc:
            raise malformed_payload(self.name, exc) from exc

        if record is None:
            logger.debug("NDL has no usable record for %s", isbn)
        return record
