"""Fetch the detail record for a single day, falling back to a secondary endpoint.

The primary endpoint often returns a record whose ``json_data`` payload is
empty. In that case the secondary endpoint is asked for the same day,
passing along the record id the primary call produced.
"""

import dataclasses
import datetime
import json
import logging

import pydantic

from .client import AlmanacClient, daily_params
from .models import DailyDetail, Location, ParsedPanchang

logger = logging.getLogger(__name__)

_EMPTY_PAYLOADS = ('', '{}')


def parse_json_payload(raw: str | None) -> ParsedPanchang | None:
    """Parse a ``json_data`` string, or return None if it is empty or invalid."""
    if raw is None or raw.strip() in _EMPTY_PAYLOADS:
        return None
    try:
        return ParsedPanchang.model_validate(json.loads(raw))
    except (ValueError, pydantic.ValidationError):
        logger.exception('Failed to parse json_data payload: %s', raw[:200])
        return None


@dataclasses.dataclass(frozen=True)
class PrimarySucceeded:
    """The primary endpoint returned a usable payload."""

    detail: DailyDetail


@dataclasses.dataclass(frozen=True)
class FallbackSucceeded:
    """Only the secondary endpoint returned a usable payload."""

    detail: DailyDetail
    primary: DailyDetail | None = None


@dataclasses.dataclass(frozen=True)
class BothFailed:
    """Neither endpoint produced a usable payload.

    ``primary`` holds the primary record, if one came back at all.
    """

    primary: DailyDetail | None = None


DetailOutcome = PrimarySucceeded | FallbackSucceeded | BothFailed


def _with_payload(records: list[DailyDetail]) -> DailyDetail | None:
    """Return the first record with its parsed payload attached, if usable."""
    if not records:
        return None
    record = records[0]
    parsed = parse_json_payload(record.json_data)
    if parsed is None:
        return None
    return record.model_copy(update={'parsed': parsed})


async def fetch_detail_strategy(
    client: AlmanacClient, day: datetime.date, location: Location
) -> DetailOutcome:
    """Try the primary endpoint, then the secondary one.

    Never raises; errors from either call are logged and end the sequence.
    """
    primary: DailyDetail | None = None
    try:
        records = await client.fetch_daily(daily_params(day, location, spmode=0))
        primary = records[0] if records else None
        detail = _with_payload(records)
        if detail is not None:
            return PrimarySucceeded(detail)
        logger.info(
            'Primary daily panchang for %s had no payload, trying fallback', day
        )

        panchang_id = 0
        if primary is not None and primary.daily_panchang_id:
            panchang_id = primary.daily_panchang_id
        records = await client.fetch_daily_secondary(
            daily_params(day, location, spmode=1, panchang_id=panchang_id)
        )
        detail = _with_payload(records)
        if detail is not None:
            return FallbackSucceeded(detail, primary=primary)
        logger.warning('Fallback daily panchang for %s had no payload', day)
    except Exception:
        logger.exception('Failed to fetch daily panchang for %s', day)
    return BothFailed(primary=primary)


async def fetch_daily_detail(
    client: AlmanacClient, day: datetime.date, location: Location
) -> DailyDetail | None:
    """Return the detail record for ``day``.

    The record carries ``parsed`` when a payload was available. If neither
    endpoint produced one, the bare primary record is returned when there is
    one, otherwise None.
    """
    outcome = await fetch_detail_strategy(client, day, location)
    if isinstance(outcome, PrimarySucceeded | FallbackSucceeded):
        return outcome.detail
    return outcome.primary
