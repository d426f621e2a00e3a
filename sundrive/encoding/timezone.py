"""Timezone identifier normalisation for the twilight API."""

import logging
import re

from sundrive.config.defaults import DEFAULT_TIMEZONE

logger = logging.getLogger(__name__)

_UTC_OFFSET_RE = re.compile(r"UTC[+-]\d+")


def resolve_timezone(tzid: str | None) -> str:
    """Default an absent timezone to UTC."""
    if not tzid:
        logger.info("No timezone provided, defaulting to %s", DEFAULT_TIMEZONE)
        return DEFAULT_TIMEZONE
    return tzid


def normalize_timezone(tzid: str) -> str:
    """Rewrite "UTC+N"/"UTC-N" to "Etc/GMT+N"/"Etc/GMT-N"; pass anything else through."""
    if _UTC_OFFSET_RE.fullmatch(tzid):
        normalized = "Etc/GMT" + tzid[len("UTC"):]
        logger.info("Normalized timezone %s to %s", tzid, normalized)
        return normalized
    return tzid
