"""Refresh flow: location -> cache check -> fetch -> deliver, single pass."""

import logging
import time
from dataclasses import dataclass

from sundrive.config.schema import CompanionConfig
from sundrive.device.channel import DeliveryError, DeviceChannel
from sundrive.encoding.time_encoder import encode_dataset
from sundrive.ingest.location import LocationError, LocationProvider
from sundrive.ingest.sunrise_sunset_client import SunriseSunsetClient, TwilightSourceError
from sundrive.models.common import Coordinates
from sundrive.models.refresh import LocationSource, RefreshOutcome, RefreshState
from sundrive.models.twilight import TwilightDataset
from sundrive.storage.cache_store import CacheStore

logger = logging.getLogger(__name__)


@dataclass
class RefreshContext:
    """Process-lifetime state shared by successive refresh cycles."""

    cache_store: CacheStore
    last_position: Coordinates | None = None
    last_position_at: float | None = None  # time.monotonic() of the last fix


class RefreshFlow:
    """Runs one refresh cycle per call. Never retries a failed step."""

    def __init__(
        self,
        config: CompanionConfig,
        context: RefreshContext,
        location_provider: LocationProvider,
        source: SunriseSunsetClient,
        channel: DeviceChannel,
    ):
        self.config = config
        self.context = context
        self.location_provider = location_provider
        self.source = source
        self.channel = channel

    def run(
        self, tzid: str, today: str | None = None, now: float | None = None
    ) -> RefreshOutcome:
        """Refresh twilight data for an already-normalized timezone."""
        if now is None:
            now = time.monotonic()
        outcome = RefreshOutcome(tzid=tzid)
        logger.info("Using timezone: %s", tzid)

        # AWAITING_LOCATION
        coords, source = self._resolve_location(now, outcome)
        outcome.coordinates = coords
        outcome.location_source = source

        # CACHE_CHECK
        outcome.state = RefreshState.CACHE_CHECK
        store = self.context.cache_store
        entry = store.get()
        if store.is_valid(entry, coords, tzid, today=today):
            logger.info("Using cached twilight data")
            outcome.cache_hit = True
            self._deliver(entry.data, outcome)
            return outcome

        # FETCHING
        outcome.state = RefreshState.FETCHING
        logger.info("Cache invalid or expired, fetching from API")
        outcome.source_queried = True
        try:
            dataset = self.source.get_twilight(coords, tzid)
        except TwilightSourceError as e:
            logger.error("Twilight fetch failed, skipping this refresh: %s", e)
            outcome.errors.append(str(e))
            outcome.state = RefreshState.ABORTED
            return outcome

        store.put(coords, tzid, dataset, today=today)
        self._deliver(dataset, outcome)
        return outcome

    def _resolve_location(
        self, now: float, outcome: RefreshOutcome
    ) -> tuple[Coordinates, LocationSource]:
        loc = self.config.location
        ctx = self.context
        if (
            ctx.last_position is not None
            and ctx.last_position_at is not None
            and now - ctx.last_position_at <= loc.maximum_age_seconds
        ):
            logger.debug("Reusing position resolved %.0fs ago", now - ctx.last_position_at)
            return ctx.last_position, LocationSource.RECENT

        try:
            coords = self.location_provider.locate(loc.timeout_seconds)
        except LocationError as e:
            fallback = Coordinates(loc.fallback_latitude, loc.fallback_longitude)
            logger.warning(
                "Location error (%s): %s; using fallback (%s, %s)",
                e.reason, e, fallback.latitude, fallback.longitude,
            )
            outcome.errors.append(f"location: {e}")
            return fallback, LocationSource.FALLBACK

        ctx.last_position = coords
        ctx.last_position_at = now
        return coords, LocationSource.PROVIDER

    def _deliver(self, dataset: TwilightDataset, outcome: RefreshOutcome) -> None:
        outcome.state = RefreshState.DELIVER
        payload = encode_dataset(dataset)
        outcome.payload = payload
        logger.info("Sending twilight data to watchface: %s", payload)
        try:
            self.channel.send(payload)
        except DeliveryError as e:
            logger.error("Error sending twilight data: %s", e)
            outcome.errors.append(f"delivery: {e}")
            return
        outcome.delivered = True
        logger.info("Twilight data sent successfully")
