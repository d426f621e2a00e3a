"""Location providers: best-effort current position for the twilight lookup."""

import logging
import math
from abc import ABC, abstractmethod

import httpx

from sundrive.config.defaults import IP_LOCATION_URL, USER_AGENT
from sundrive.config.schema import LocationConfig, LocationProviderKind
from sundrive.models.common import Coordinates

logger = logging.getLogger(__name__)


class LocationError(Exception):
    """Raised when no position could be resolved."""

    def __init__(self, message: str, reason: str = "unavailable"):
        super().__init__(message)
        self.reason = reason  # "timeout", "denied" or "unavailable"


class LocationProvider(ABC):
    @abstractmethod
    def locate(self, timeout: float) -> Coordinates:
        """Return the current position or raise LocationError."""


class FixedLocationProvider(LocationProvider):
    def __init__(self, coordinates: Coordinates):
        self.coordinates = coordinates

    def locate(self, timeout: float) -> Coordinates:
        return self.coordinates


class UnavailableLocationProvider(LocationProvider):
    """Behaves like a device with location permission denied."""

    def locate(self, timeout: float) -> Coordinates:
        raise LocationError("Location access disabled", reason="denied")


class IpLocationProvider(LocationProvider):
    """Approximate position from an IP geolocation endpoint.

    Expects the ip-api.com JSON shape: {"status": "success", "lat": .., "lon": ..}.
    """

    def __init__(self, url: str = IP_LOCATION_URL, user_agent: str = USER_AGENT):
        self.url = url
        self.user_agent = user_agent

    def locate(self, timeout: float) -> Coordinates:
        try:
            resp = httpx.get(
                self.url, headers={"User-Agent": self.user_agent}, timeout=timeout
            )
        except httpx.TimeoutException as e:
            raise LocationError(f"Location lookup timed out: {e}", reason="timeout") from e
        except httpx.RequestError as e:
            raise LocationError(f"Location lookup failed: {e}") from e

        if resp.status_code in (401, 403):
            raise LocationError(
                f"Location lookup refused: HTTP {resp.status_code}", reason="denied"
            )
        if resp.status_code != 200:
            raise LocationError(f"Location lookup failed: HTTP {resp.status_code}")

        try:
            body = resp.json()
            if body.get("status") != "success":
                raise LocationError(
                    f"Location lookup unsuccessful: {body.get('message', body.get('status'))}"
                )
            latitude, longitude = float(body["lat"]), float(body["lon"])
            if not (math.isfinite(latitude) and math.isfinite(longitude)):
                raise ValueError(f"non-finite position {latitude}, {longitude}")
            return Coordinates(latitude, longitude)
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise LocationError(f"Malformed location response: {e}") from e


def build_location_provider(config: LocationConfig) -> LocationProvider:
    if config.provider == LocationProviderKind.FIXED:
        return FixedLocationProvider(Coordinates(config.latitude, config.longitude))
    if config.provider == LocationProviderKind.NONE:
        return UnavailableLocationProvider()
    return IpLocationProvider(config.ip_lookup_url)
