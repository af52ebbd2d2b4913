"""Reconcile the flat monthly almanac table onto a calendar month."""

import calendar
import collections
import datetime
import logging
from collections.abc import Iterable

from .client import AlmanacClient, monthly_params
from .models import (
    AlmanacEntry,
    CalendarDay,
    EventEntry,
    Location,
    RawAlmanacRow,
    SunriseEntry,
    SunsetEntry,
    TithiEntry,
)

logger = logging.getLogger(__name__)

# Row-type codes carried in the ``sort`` column.
SORT_TITHI = 1
SORT_SUNRISE = 2
SORT_SUNSET = 3
SORT_EVENT = 4


def days_in_month(year: int, month: int) -> int:
    """Number of days in a month; ``month`` is 1-indexed."""
    return calendar.monthrange(year, month)[1]


def month_dates(year: int, month: int) -> list[datetime.date]:
    """Every date of the month, first to last."""
    return [
        datetime.date(year, month, day)
        for day in range(1, days_in_month(year, month) + 1)
    ]


def classify_row(row: RawAlmanacRow) -> AlmanacEntry | None:
    """Translate a raw row into its tagged entry, or None if it carries nothing."""
    if row.sort == SORT_TITHI:
        return TithiEntry(name=row.tithi_name, nakshatra=row.nakshatra_name)
    if row.sort == SORT_SUNRISE:
        return SunriseEntry(time=row.tithi_name)
    if row.sort == SORT_SUNSET:
        return SunsetEntry(time=row.tithi_name)
    if row.sort == SORT_EVENT:
        text = (row.tithi_name or '').strip()
        return EventEntry(text=text) if text else None
    return None


def group_rows(rows: Iterable[RawAlmanacRow]) -> dict[str, list[RawAlmanacRow]]:
    """Group rows by their ISO date key, keeping input order within a date."""
    grouped: dict[str, list[RawAlmanacRow]] = collections.defaultdict(list)
    for row in rows:
        grouped[row.date_name].append(row)
    return dict(grouped)


def fold_day(
    day: datetime.date,
    entries: Iterable[AlmanacEntry],
    today: datetime.date,
    is_current_month: bool = True,
) -> CalendarDay:
    """Build the calendar record for ``day``, applying entries in order.

    When two entries of the same kind apply, the later one wins.
    """
    fields: dict[str, str | None] = {}
    for entry in entries:
        if isinstance(entry, TithiEntry):
            fields['tithi'] = entry.name
            fields['nakshatra'] = entry.nakshatra
        elif isinstance(entry, SunriseEntry):
            fields['sunrise'] = entry.time
        elif isinstance(entry, SunsetEntry):
            fields['sunset'] = entry.time
        else:
            fields['special_event'] = entry.text

    return CalendarDay(
        date=day.isoformat(),
        day_of_month=day.day,
        full_date=day,
        is_today=day == today,
        is_current_month=is_current_month,
        **fields,
    )


def reconcile_month(
    year: int,
    month: int,
    rows: list[RawAlmanacRow],
    today: datetime.date,
) -> list[CalendarDay]:
    """Merge almanac rows onto every date of the month.

    Returns one record per date in ascending order, or an empty list when
    there are no rows at all. Dates without rows keep their optional fields
    unset.
    """
    if not rows:
        return []

    grouped = group_rows(rows)
    logger.debug('Grouped %d rows into %d dates', len(rows), len(grouped))

    days: list[CalendarDay] = []
    for day in month_dates(year, month):
        entries = [
            entry
            for entry in map(classify_row, grouped.get(day.isoformat(), []))
            if entry is not None
        ]
        days.append(
            fold_day(
                day,
                entries,
                today,
                is_current_month=(day.year, day.month) == (year, month),
            )
        )
    return days


async def build_month(
    client: AlmanacClient,
    year: int,
    month: int,
    location: Location,
    today: datetime.date | None = None,
) -> list[CalendarDay]:
    """Fetch and reconcile a month of almanac data for a location.

    Any failure talking to or decoding the API is logged and yields an empty
    list, which callers treat as "no data". An out-of-range ``month`` raises
    ValueError before any request is made.
    """
    month_start = datetime.date(year, month, 1)
    if today is None:
        today = datetime.date.today()

    try:
        rows = await client.fetch_monthly(monthly_params(month_start, location))
    except Exception:
        logger.exception(
            'Failed to fetch monthly panchang for %04d-%02d at %s',
            year,
            month,
            location.label,
        )
        return []

    if not rows:
        logger.warning(
            'Monthly panchang for %04d-%02d at %s returned no rows',
            year,
            month,
            location.label,
        )
        return []

    days = reconcile_month(year, month, rows, today)
    logger.info('Built %d calendar days for %04d-%02d', len(days), year, month)
    return days
