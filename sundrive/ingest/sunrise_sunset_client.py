"""sunrise-sunset.org API client."""

import logging

import httpx

from sundrive.config.defaults import SUNRISE_SUNSET_BASE_URL, USER_AGENT
from sundrive.models.common import Coordinates
from sundrive.models.twilight import TwilightDataset

logger = logging.getLogger(__name__)


class TwilightSourceError(Exception):
    """Raised when twilight data cannot be obtained from the API."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        api_status: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.api_status = api_status


class SunriseSunsetClient:
    """Fetches today's sunrise, sunset and twilight times for a location.

    Single attempt per call; callers decide what to do on failure.
    """

    def __init__(
        self,
        base_url: str = SUNRISE_SUNSET_BASE_URL,
        timeout: float = 5.0,
        user_agent: str = USER_AGENT,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self.user_agent = user_agent

    def get_twilight(self, coordinates: Coordinates, tzid: str) -> TwilightDataset:
        url = f"{self.base_url}/json"
        params = {
            "lat": coordinates.latitude,
            "lng": coordinates.longitude,
            "formatted": 1,
            "tzid": tzid,
        }
        logger.info(
            "Fetching twilight data for lat=%s lng=%s tzid=%s",
            coordinates.latitude, coordinates.longitude, tzid,
        )
        try:
            resp = httpx.get(
                url,
                params=params,
                headers={"User-Agent": self.user_agent},
                timeout=self.timeout,
            )
        except httpx.RequestError as e:
            raise TwilightSourceError(f"Network error fetching twilight data: {e}") from e

        if resp.status_code != 200:
            raise TwilightSourceError(
                f"API request failed: HTTP {resp.status_code}", resp.status_code
            )

        try:
            body = resp.json()
        except ValueError as e:
            raise TwilightSourceError(f"Error parsing API response: {e}", 200) from e

        status = body.get("status") if isinstance(body, dict) else None
        if status != "OK":
            raise TwilightSourceError(
                f"API returned error status: {status}", 200, api_status=status
            )

        try:
            return TwilightDataset.from_results(body.get("results"))
        except ValueError as e:
            raise TwilightSourceError(f"Malformed API results: {e}", 200, "OK") from e
