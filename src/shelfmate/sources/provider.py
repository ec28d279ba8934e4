# ABOUTME: CatalogSource protocol defining the contract for external book catalogs.
# ABOUTME: Any upstream ISBN catalog (NDL, Google Books, Open Library) implements this.

from typing import Protocol, runtime_checkable

from shelfmate.sources.types import SourceRecord


@runtime_checkable
class CatalogSource(Protocol):
    """Protocol for single-ISBN lookups against one upstream catalog.

    ``lookup`` returns a SourceRecord on success and None when the upstream
    explicitly has no record. Any other failure raises SourceError with its
    ``retryable`` flag set. ``deadline`` is an absolute event-loop time
    (``asyncio.get_running_loop().time()``) the call must finish by.
    """

    @property
    def name(self) -> str: ...

    async def lookup(self, isbn: str, deadline: float) -> SourceRecord | None: ...
