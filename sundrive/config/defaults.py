"""Default endpoints, fallback location and the example twilight dataset."""

from sundrive.models.twilight import TwilightDataset

SUNRISE_SUNSET_BASE_URL = "https://api.sunrise-sunset.org"
IP_LOCATION_URL = "http://ip-api.com/json"
USER_AGENT = "sundrive-companion/0.1.0"

CACHE_KEY = "twilight_cache"

# Zaragoza, Spain
FALLBACK_LATITUDE = 41.65606
FALLBACK_LONGITUDE = -0.87734

DEFAULT_TIMEZONE = "UTC"

# Sent on startup before any real data is available
EXAMPLE_TWILIGHT = TwilightDataset(
    sunrise="6:11:35 AM",
    sunset="6:12:31 PM",
    civil_twilight_begin="5:45:21 AM",
    civil_twilight_end="6:38:45 PM",
    nautical_twilight_begin="5:13:02 AM",
    nautical_twilight_end="7:11:04 PM",
    astronomical_twilight_begin="4:40:13 AM",
    astronomical_twilight_end="7:43:53 PM",
)
