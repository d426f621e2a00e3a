"""Common types and helpers shared across models."""

import math
from dataclasses import dataclass
from datetime import date, datetime


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float

    def rounded(self) -> "Coordinates":
        return Coordinates(
            round_coordinate(self.latitude), round_coordinate(self.longitude)
        )


def round_coordinate(coord: float) -> float:
    """Round to 2 decimal places (~1.1 km), halves towards positive infinity."""
    return math.floor(coord * 100 + 0.5) / 100


def hundredths(coord: float) -> int:
    """Coordinate as whole hundredths of a degree."""
    return math.floor(coord * 100 + 0.5)


def local_today() -> date:
    return datetime.now().date()


def local_today_iso() -> str:
    return local_today().isoformat()
