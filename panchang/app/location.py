"""Resolve coordinates into a Location via the almanac API's geocoder."""

import logging
from typing import Any

from .client import AlmanacClient
from .models import Location, LocationSource
from .timezones import parse_utc_offset

logger = logging.getLogger(__name__)

# Bengaluru, used when the browser cannot supply coordinates.
DEFAULT_LATITUDE = 12.9716
DEFAULT_LONGITUDE = 77.5946


def location_from_result(result: dict[str, Any]) -> Location:
    """Build a Location from the first geocoder result."""
    timezone: dict[str, Any] = result.get('timezone') or {}
    city = (
        result.get('city')
        or result.get('name')
        or result.get('suburb')
        or result.get('district')
        or 'Unknown City'
    )
    return Location(
        latitude=float(result['lat']),
        longitude=float(result['lon']),
        city=city,
        state=result.get('state') or 'Unknown State',
        country=result.get('country') or 'Unknown Country',
        timezone_name=timezone.get('name'),
        timezone_offset=parse_utc_offset(timezone.get('offset_STD')),
    )


def fallback_location(
    latitude: float, longitude: float, source: LocationSource
) -> Location:
    """A location at the given coordinates with the default UTC offset."""
    return Location(
        latitude=latitude,
        longitude=longitude,
        timezone_offset=parse_utc_offset(None),
        source=source,
    )


async def resolve_location(
    client: AlmanacClient, latitude: float, longitude: float
) -> Location:
    """Reverse geocode coordinates into a Location.

    Never raises. An empty result set yields a ``fallback`` location and any
    error an ``error`` location, both at the input coordinates.
    """
    try:
        data = await client.fetch_location(latitude, longitude)
        results = data.get('results') or []
        if not results:
            logger.warning(
                'No geocoding results for (%s, %s), using fallback location',
                latitude,
                longitude,
            )
            return fallback_location(latitude, longitude, LocationSource.FALLBACK)
        location = location_from_result(results[0])
    except Exception:
        logger.exception(
            'Failed to resolve location for (%s, %s), using fallback location',
            latitude,
            longitude,
        )
        return fallback_location(latitude, longitude, LocationSource.ERROR)

    logger.info('Resolved (%s, %s) to %s', latitude, longitude, location.label)
    return location
