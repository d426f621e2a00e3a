"""Persisted twilight cache entry."""

import json
import math
from dataclasses import dataclass

from sundrive.models.common import Coordinates
from sundrive.models.twilight import TwilightDataset


@dataclass(frozen=True)
class CacheEntry:
    date: str  # YYYY-MM-DD, local
    latitude: float  # rounded to 2 decimals
    longitude: float
    tzid: str
    data: TwilightDataset

    @property
    def coordinates(self) -> Coordinates:
        return Coordinates(self.latitude, self.longitude)

    def to_json(self) -> str:
        return json.dumps(
            {
                "date": self.date,
                "latitude": self.latitude,
                "longitude": self.longitude,
                "tzid": self.tzid,
                "data": self.data.to_dict(),
            }
        )

    @classmethod
    def from_json(cls, raw: str) -> "CacheEntry":
        """Parse the persisted layout. Raises ValueError on any malformed input."""
        try:
            obj = json.loads(raw)
        except (json.JSONDecodeError, TypeError) as e:
            raise ValueError(f"Cache payload is not JSON: {e}") from e
        if not isinstance(obj, dict):
            raise ValueError("Cache payload is not an object")
        try:
            latitude = float(obj["latitude"])
            longitude = float(obj["longitude"])
            if not (math.isfinite(latitude) and math.isfinite(longitude)):
                raise ValueError(f"Non-finite cached coordinates: {latitude}, {longitude}")
            return cls(
                date=str(obj["date"]),
                latitude=latitude,
                longitude=longitude,
                tzid=str(obj["tzid"]),
                data=TwilightDataset.from_results(obj["data"]),
            )
        except (KeyError, TypeError) as e:
            raise ValueError(f"Cache payload missing field: {e}") from e
