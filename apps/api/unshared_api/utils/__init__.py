"""Utility functions and helpers."""

from unshared_api.utils.logging import JSONFormatter, configure_json_logging
from unshared_api.utils.timestamps import is_expired, parse_timestamp, utc_now, utc_now_iso

__all__ = [
    "JSONFormatter",
    "configure_json_logging",
    "is_expired",
    "parse_timestamp",
    "utc_now",
    "utc_now_iso",
]
