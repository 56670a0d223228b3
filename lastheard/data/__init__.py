"""Static reference data for the talkgroup directory."""

from .countries import (
    COUNTRY_NAMES,
    COUNTRY_TO_CONTINENT,
    TALKGROUP_PREFIXES,
    GLOBAL,
    UNKNOWN,
)

__all__ = [
    "COUNTRY_NAMES",
    "COUNTRY_TO_CONTINENT",
    "TALKGROUP_PREFIXES",
    "GLOBAL",
    "UNKNOWN",
]
