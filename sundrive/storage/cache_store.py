"""Single-slot twilight cache keyed by local date, rounded location and timezone."""

import logging
import sqlite3

from sundrive.config.defaults import CACHE_KEY
from sundrive.models.cache import CacheEntry
from sundrive.models.common import Coordinates, hundredths, local_today_iso
from sundrive.models.twilight import TwilightDataset
from sundrive.storage import kv_repo

logger = logging.getLogger(__name__)


class CacheStore:
    """Holds at most one CacheEntry; every put overwrites the previous one.

    Storage failures never propagate: a failed write is logged and a failed
    or corrupt read is treated as a miss.
    """

    def __init__(
        self,
        conn: sqlite3.Connection,
        key: str = CACHE_KEY,
        max_coordinate_delta: float = 0.1,
    ):
        self.conn = conn
        self.key = key
        self._max_delta_hundredths = hundredths(max_coordinate_delta)

    def put(
        self,
        coordinates: Coordinates,
        tzid: str,
        dataset: TwilightDataset,
        today: str | None = None,
    ) -> CacheEntry | None:
        """Persist dataset for today's date. Returns the written entry, or None on failure."""
        rounded = coordinates.rounded()
        entry = CacheEntry(
            date=today or local_today_iso(),
            latitude=rounded.latitude,
            longitude=rounded.longitude,
            tzid=tzid,
            data=dataset,
        )
        try:
            kv_repo.set_item(self.conn, self.key, entry.to_json())
        except (sqlite3.Error, OSError) as e:
            logger.warning("Error saving cache: %s", e)
            return None
        logger.info(
            "Cache saved for %s at (%.2f, %.2f) tz=%s",
            entry.date, entry.latitude, entry.longitude, entry.tzid,
        )
        return entry

    def get(self) -> CacheEntry | None:
        try:
            raw = kv_repo.get_item(self.conn, self.key)
        except (sqlite3.Error, OSError) as e:
            logger.warning("Error loading cache: %s", e)
            return None
        if raw is None:
            return None
        try:
            entry = CacheEntry.from_json(raw)
        except ValueError as e:
            logger.warning("Discarding malformed cache entry: %s", e)
            return None
        logger.debug("Cache loaded: %s", raw)
        return entry

    def is_valid(
        self,
        entry: CacheEntry | None,
        coordinates: Coordinates,
        tzid: str,
        today: str | None = None,
    ) -> bool:
        """Check the entry against today's date, the timezone and the location.

        Any single mismatch invalidates the whole entry.
        """
        if entry is None:
            logger.info("Cache validation: no cache data")
            return False

        current_date = today or local_today_iso()
        if entry.date != current_date:
            logger.info(
                "Cache validation: date changed (%s -> %s)", entry.date, current_date
            )
            return False

        if entry.tzid != tzid:
            logger.info(
                "Cache validation: timezone changed (%s -> %s)", entry.tzid, tzid
            )
            return False

        # Compared in whole hundredths so the threshold boundary is exact
        lat_diff = abs(hundredths(coordinates.latitude) - hundredths(entry.latitude))
        lng_diff = abs(hundredths(coordinates.longitude) - hundredths(entry.longitude))
        if lat_diff >= self._max_delta_hundredths or lng_diff >= self._max_delta_hundredths:
            logger.info(
                "Cache validation: location moved (lat diff %.2f, lng diff %.2f)",
                lat_diff / 100, lng_diff / 100,
            )
            return False

        logger.info("Cache validation: cache is valid")
        return True
