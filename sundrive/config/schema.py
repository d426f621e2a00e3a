"""Pydantic v2 configuration schema with strict validation."""

from enum import StrEnum

from pydantic import BaseModel, Field

from sundrive.config.defaults import (
    CACHE_KEY,
    FALLBACK_LATITUDE,
    FALLBACK_LONGITUDE,
    IP_LOCATION_URL,
    SUNRISE_SUNSET_BASE_URL,
)


class LocationProviderKind(StrEnum):
    IP = "ip"
    FIXED = "fixed"
    NONE = "none"


class LocationConfig(BaseModel):
    model_config = {"extra": "forbid"}

    provider: LocationProviderKind = LocationProviderKind.IP
    ip_lookup_url: str = IP_LOCATION_URL
    # Used by the "fixed" provider; also the fallback when location fails
    latitude: float = Field(default=FALLBACK_LATITUDE, ge=-90.0, le=90.0)
    longitude: float = Field(default=FALLBACK_LONGITUDE, ge=-180.0, le=180.0)
    fallback_latitude: float = Field(default=FALLBACK_LATITUDE, ge=-90.0, le=90.0)
    fallback_longitude: float = Field(default=FALLBACK_LONGITUDE, ge=-180.0, le=180.0)
    timeout_seconds: float = Field(default=15.0, gt=0.0)
    maximum_age_seconds: float = Field(default=60.0, ge=0.0)


class SourceConfig(BaseModel):
    model_config = {"extra": "forbid"}

    base_url: str = SUNRISE_SUNSET_BASE_URL
    timeout_seconds: float = Field(default=5.0, gt=0.0)


class CacheConfig(BaseModel):
    model_config = {"extra": "forbid"}

    key: str = CACHE_KEY
    # Below 0.01 the threshold rounds to zero hundredths and nothing would ever hit
    max_coordinate_delta: float = Field(default=0.1, ge=0.01)


class DeviceConfig(BaseModel):
    model_config = {"extra": "forbid"}

    test_mode: bool = False


class CompanionConfig(BaseModel):
    model_config = {"extra": "forbid"}

    location: LocationConfig = LocationConfig()
    source: SourceConfig = SourceConfig()
    cache: CacheConfig = CacheConfig()
    device: DeviceConfig = DeviceConfig()
