# ABOUTME: Catalog source adapters and the shared HTTP client they use.
# ABOUTME: build_sources() assembles the configured adapters in priority order.

from shelfmate.config import Settings
from shelfmate.sources.breaker import CircuitBreaker
from shelfmate.sources.googlebooks import GoogleBooksSource
from shelfmate.sources.http import SourceHttpClient
from shelfmate.sources.ndl import NdlSource
from shelfmate.sources.openlibrary import OpenLibrarySource
from shelfmate.sources.provider import CatalogSource
from shelfmate.sources.types import SourceRecord

__all__ = [
    "CatalogSource",
    "CircuitBreaker",
    "GoogleBooksSource",
    "NdlSource",
    "OpenLibrarySource",
    "SourceHttpClient",
    "SourceRecord",
    "build_sources",
]


def build_sources(settings: Settings, http_client: SourceHttpClient) -> list[CatalogSource]:
    """Create the adapters named in ``settings.sources``, each behind a circuit breaker."""
    factories = {
        "ndl": lambda: NdlSource(http_client),
        "googlebooks": lambda: GoogleBooksSource(http_client, settings.google_books_api_key),
        "openlibrary": lambda: OpenLibrarySource(http_client),
    }
    return [
        CircuitBreaker(
            factories[name](),
            threshold=settings.breaker_threshold,
            reset_seconds=settings.breaker_reset,
        )
        for name in settings.sources
    ]
