"""Encode 12-hour time-of-day strings as minutes since local midnight."""

import logging
import re

from sundrive.models.twilight import TWILIGHT_FIELDS, TwilightDataset

logger = logging.getLogger(__name__)

_TIME_RE = re.compile(r"(\d+):(\d+):(\d+)\s+(AM|PM)")


def encode_time(time_str: str) -> int:
    """Convert "H:MM:SS AM|PM" to minutes since midnight in [0, 1439].

    Strings that do not match, or whose hour/minute fall outside the 12-hour
    clock, encode as 0 so one bad field does not block the others.
    """
    match = _TIME_RE.search(time_str or "")
    if match is None:
        logger.warning("Unparseable time-of-day %r, encoding as 0", time_str)
        return 0

    hours = int(match.group(1))
    minutes = int(match.group(2))
    is_pm = match.group(4) == "PM"

    if not (1 <= hours <= 12 and 0 <= minutes <= 59):
        logger.warning("Out-of-range time-of-day %r, encoding as 0", time_str)
        return 0

    if is_pm and hours != 12:
        hours += 12
    if not is_pm and hours == 12:
        hours = 0

    return hours * 60 + minutes


def encode_dataset(dataset: TwilightDataset) -> dict[str, int]:
    """Encode every twilight field independently, keyed by outbound message key."""
    return {name: encode_time(getattr(dataset, name)) for name in TWILIGHT_FIELDS}
