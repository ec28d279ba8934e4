# ABOUTME: Runtime settings for Shelfmate, read from environment variables.
# ABOUTME: A .env file in the working directory is honored via python-dotenv.

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from shelfmate.errors import ConfigurationError

DEFAULT_DB_PATH = Path.home() / ".shelfmate" / "library.db"
DEFAULT_SOURCES = ("ndl", "googlebooks", "openlibrary")


@dataclass
class Settings:
    """Resolved configuration for the store, catalog sources and resolver."""

    db_path: Path = DEFAULT_DB_PATH
    google_books_api_key: str | None = None
    # Priority order: earlier sources win over later ones.
    sources: tuple[str, ...] = field(default=DEFAULT_SOURCES)
    source_timeout: float = 5.0
    request_budget: float = 8.0
    breaker_threshold: int = 5
    breaker_reset: float = 60.0
    min_request_interval: float = 0.1


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc
    if value < 0:
        raise ConfigurationError(f"{name} must not be negative, got {raw!r}")
    return value


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc
    if value < 1:
        raise ConfigurationError(f"{name} must be at least 1, got {raw!r}")
    return value


def _env_sources(name: str) -> tuple[str, ...]:
    raw = os.getenv(name)
    if not raw:
        return DEFAULT_SOURCES
    names = tuple(part.strip().lower() for part in raw.split(",") if part.strip())
    unknown = [n for n in names if n not in DEFAULT_SOURCES]
    if unknown:
        raise ConfigurationError(
            f"{name} lists unknown sources: {', '.join(unknown)} "
            f"(known: {', '.join(DEFAULT_SOURCES)})"
        )
    if not names:
        raise ConfigurationError(f"{name} must name at least one source")
    return names


def load_settings(*, dotenv: bool = True) -> Settings:
    """Build Settings from the environment.

    Args:
        dotenv: Whether to read a .env file first. Existing environment
            variables take precedence over .env values.

    Raises:
        ConfigurationError: If a variable is present but malformed.
    """
    if dotenv:
        load_dotenv(find_dotenv(usecwd=True))

    db_path = os.getenv("SHELFMATE_DB_PATH")
    return Settings(
        db_path=Path(db_path).expanduser() if db_path else DEFAULT_DB_PATH,
        google_books_api_key=os.getenv("GOOGLE_BOOKS_API_KEY") or None,
        sources=_env_sources("SHELFMATE_SOURCES"),
        source_timeout=_env_float("SHELFMATE_SOURCE_TIMEOUT", 5.0),
        request_budget=_env_float("SHELFMATE_REQUEST_BUDGET", 8.0),
        breaker_threshold=_env_int("SHELFMATE_BREAKER_THRESHOLD", 5),
        breaker_reset=_env_float("SHELFMATE_BREAKER_RESET", 60.0),
        min_request_interval=_env_float("SHELFMATE_MIN_REQUEST_INTERVAL", 0.1),
    )
