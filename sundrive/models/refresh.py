"""Refresh cycle states and outcome."""

from dataclasses import dataclass, field
from enum import StrEnum

from sundrive.models.common import Coordinates


class RefreshState(StrEnum):
    AWAITING_TIMEZONE = "awaiting_timezone"
    AWAITING_LOCATION = "awaiting_location"
    CACHE_CHECK = "cache_check"
    FETCHING = "fetching"
    DELIVER = "deliver"
    ABORTED = "aborted"


class LocationSource(StrEnum):
    PROVIDER = "provider"
    RECENT = "recent"  # last resolved position, still within maximum age
    FALLBACK = "fallback"


@dataclass
class RefreshOutcome:
    tzid: str
    state: RefreshState = RefreshState.AWAITING_LOCATION
    coordinates: Coordinates | None = None
    location_source: LocationSource | None = None
    cache_hit: bool = False
    source_queried: bool = False
    payload: dict[str, int] | None = None
    delivered: bool = False
    errors: list[str] = field(default_factory=list)
