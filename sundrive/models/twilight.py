"""Sunrise, sunset and twilight data models."""

from dataclasses import asdict, dataclass, fields

TWILIGHT_FIELDS: tuple[str, ...] = (
    "sunrise",
    "sunset",
    "civil_twilight_begin",
    "civil_twilight_end",
    "nautical_twilight_begin",
    "nautical_twilight_end",
    "astronomical_twilight_begin",
    "astronomical_twilight_end",
)


@dataclass(frozen=True)
class TwilightDataset:
    """Time-of-day strings ("H:MM:SS AM") for one day at one location."""

    sunrise: str
    sunset: str
    civil_twilight_begin: str
    civil_twilight_end: str
    nautical_twilight_begin: str
    nautical_twilight_end: str
    astronomical_twilight_begin: str
    astronomical_twilight_end: str

    @classmethod
    def from_results(cls, results: dict) -> "TwilightDataset":
        """Build from an API ``results`` object. Extra keys are ignored."""
        if not isinstance(results, dict):
            raise ValueError(f"results must be an object, got {type(results).__name__}")
        values = {}
        for f in fields(cls):
            value = results.get(f.name)
            if not isinstance(value, str):
                raise ValueError(f"Missing or invalid twilight field: {f.name}")
            values[f.name] = value
        return cls(**values)

    def to_dict(self) -> dict[str, str]:
        return asdict(self)
