"""Helpers and utilities."""

from typing import Dict, Any, List, Callable, Iterable, Optional
from datetime import datetime
from pytz import UTC
from dateutil.parser import parse as parse_date


def get_tzaware_utc_now() -> datetime:
    """Generate a datetime for the current moment in UTC."""
    return datetime.now(UTC)


def coerce_datetime(value: Any) -> Any:
    """Parse ISO 8601 strings, so that deserialized records carry datetimes."""
    if isinstance(value, str):
        return parse_date(value)
    return value


def dict_coerce(factory: Callable[..., Any], data: dict) -> Dict[str, Any]:
    return {key: factory(**value) if isinstance(value, dict) else value
            for key, value in data.items()}


def normalize_tags(tags: Iterable[str], limit: Optional[int] = None) \
        -> List[str]:
    """Strip, drop blanks, and deduplicate (keeping order), up to ``limit``."""
    cleaned = [tag.strip() for tag in tags if tag and tag.strip()]
    unique = list(dict.fromkeys(cleaned))
    return unique if limit is None else unique[:limit]
