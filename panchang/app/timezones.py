"""Normalization of UTC offsets into the decimal-hour strings the almanac API takes."""

import logging
import math
import re

from .models import DEFAULT_UTC_OFFSET

logger = logging.getLogger(__name__)

_HHMM_RE = re.compile(r'^(?P<sign>[+-])?(?P<hours>\d{1,2}):(?P<minutes>\d{2})$')

# Minute values the almanac API is known to accept, as decimal fractions.
_MINUTE_FRACTIONS: dict[int, str] = {0: '0', 15: '25', 30: '5', 45: '75'}


def parse_utc_offset(value: object) -> str:
    """Convert a UTC offset to a decimal-hour string such as ``"5.5"``.

    Accepts ``±HH:MM`` (as returned by the geocoder) or a bare decimal.
    ``HH:MM`` offsets are only converted for quarter-hour minutes 00, 15,
    30 and 45; any other minute value falls back to the default. Decimal
    values are normalized (``"5"`` becomes ``"5.0"``) and passed through,
    with a warning when they are not a multiple of a quarter hour.

    Never raises: unusable input yields ``DEFAULT_UTC_OFFSET`` (IST).
    """
    if not isinstance(value, str) or not value.strip():
        logger.warning(
            'Missing or non-string UTC offset %r, using default %s',
            value,
            DEFAULT_UTC_OFFSET,
        )
        return DEFAULT_UTC_OFFSET

    cleaned = value.strip()

    match = _HHMM_RE.match(cleaned)
    if match:
        sign = '-' if match.group('sign') == '-' else ''
        hours = int(match.group('hours'))
        minutes = int(match.group('minutes'))
        fraction = _MINUTE_FRACTIONS.get(minutes)
        if fraction is None:
            logger.warning(
                'Unsupported minutes in UTC offset %r, using default %s',
                cleaned,
                DEFAULT_UTC_OFFSET,
            )
            return DEFAULT_UTC_OFFSET
        return f'{sign}{hours}.{fraction}'

    try:
        number = float(cleaned)
    except ValueError:
        number = math.nan
    if not math.isfinite(number):
        logger.error(
            'Could not parse UTC offset %r, using default %s',
            cleaned,
            DEFAULT_UTC_OFFSET,
        )
        return DEFAULT_UTC_OFFSET

    if number.is_integer():
        return f'{int(number)}.0'
    if (number * 4).is_integer():
        return str(number)

    logger.warning(
        'UTC offset %s is not a quarter-hour multiple and may not be supported '
        'by the almanac API',
        number,
    )
    return str(number)
