"""HTTP routes for the Panchang calendar."""

import calendar
import datetime
import pathlib

import fastapi
import fastapi.concurrency
import fastapi.responses

import common.app

from . import daily, events, location, monthly, reminders
from .client import AlmanacClient
from .models import (
    CalendarDay,
    DailyDetail,
    EventCategory,
    EventDetails,
    EventTypeItem,
    Location,
    LocationSource,
    ReminderRequest,
    ReminderResult,
)
from .timezones import parse_utc_offset

APP_DIR = pathlib.Path(__file__).resolve().parent

router = fastapi.APIRouter()
templates = common.app.make_templates(APP_DIR / 'templates')

WEEKDAY_HEADERS = ('Sun', 'Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat')


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def get_client(request: fastapi.Request) -> AlmanacClient:
    """The almanac client created at startup."""
    return request.app.state.almanac


def get_appender(request: fastapi.Request) -> reminders.SheetAppender | None:
    """The reminders sheet opened at startup, or None when it is unavailable."""
    return getattr(request.app.state, 'reminder_sheet', None)


def location_from_query(
    lat: float = fastapi.Query(location.DEFAULT_LATITUDE, ge=-90, le=90),
    lon: float = fastapi.Query(location.DEFAULT_LONGITUDE, ge=-180, le=180),
    tz: str | None = None,
    city: str = 'Unknown City',
    state: str = 'Unknown State',
    country: str = 'Unknown Country',
) -> Location:
    """Build the Location a client passes back with each request."""
    return Location(
        latitude=lat,
        longitude=lon,
        timezone_offset=parse_utc_offset(tz),
        city=city,
        state=state,
        country=country,
        source=LocationSource.QUERY,
    )


# Months the page can lay out: its Sunday-first weeks reach into the
# neighbouring years, which datetime.date must be able to represent.
PAGE_MIN_YEAR = datetime.MINYEAR + 1
PAGE_MAX_YEAR = datetime.MAXYEAR - 1


def _shift_month(year: int, month: int, delta: int) -> dict[str, int] | None:
    """The month ``delta`` months away, or None if the page cannot show it."""
    index = year * 12 + (month - 1) + delta
    year, month = index // 12, index % 12 + 1
    if not PAGE_MIN_YEAR <= year <= PAGE_MAX_YEAR:
        return None
    return {'year': year, 'month': month}


# ---------------------------------------------------------------------------
# Pages
# ---------------------------------------------------------------------------


@router.get('/', response_class=fastapi.responses.HTMLResponse)
async def index(
    request: fastapi.Request,
    year: int | None = fastapi.Query(None, ge=PAGE_MIN_YEAR, le=PAGE_MAX_YEAR),
    month: int | None = fastapi.Query(None, ge=1, le=12),
    lat: float = fastapi.Query(location.DEFAULT_LATITUDE, ge=-90, le=90),
    lon: float = fastapi.Query(location.DEFAULT_LONGITUDE, ge=-180, le=180),
    client: AlmanacClient = fastapi.Depends(get_client),
) -> fastapi.responses.HTMLResponse:
    """Month calendar page annotated with tithi, nakshatra and sun times."""
    today = datetime.date.today()
    year = year or today.year
    month = month or today.month

    place = await location.resolve_location(client, lat, lon)
    days = await monthly.build_month(client, year, month, place, today=today)
    by_date = {day.full_date: day for day in days}

    weeks = [
        [(d, by_date.get(d) if d.month == month else None) for d in week]
        for week in calendar.Calendar(firstweekday=6).monthdatescalendar(year, month)
    ]

    return templates.TemplateResponse(
        request=request,
        name='calendar.html.jinja2',
        context={
            'location': place,
            'title': datetime.date(year, month, 1).strftime('%B %Y'),
            'weekday_headers': WEEKDAY_HEADERS,
            'weeks': weeks,
            'month': month,
            'has_data': bool(days),
            'prev': _shift_month(year, month, -1),
            'next': _shift_month(year, month, 1),
        },
    )


# ---------------------------------------------------------------------------
# JSON API
# ---------------------------------------------------------------------------


@router.get('/api/location', response_model=Location)
async def get_location(
    lat: float = fastapi.Query(..., ge=-90, le=90),
    lon: float = fastapi.Query(..., ge=-180, le=180),
    client: AlmanacClient = fastapi.Depends(get_client),
) -> Location:
    """Resolve coordinates to a place and UTC offset."""
    return await location.resolve_location(client, lat, lon)


@router.get('/api/month', response_model=list[CalendarDay])
async def get_month(
    year: int = fastapi.Query(..., ge=1, le=9999),
    month: int = fastapi.Query(..., ge=1, le=12),
    place: Location = fastapi.Depends(location_from_query),
    client: AlmanacClient = fastapi.Depends(get_client),
) -> list[CalendarDay]:
    """Calendar records for every day of a month; empty when no data is available."""
    return await monthly.build_month(client, year, month, place)


@router.get('/api/day/{day}', response_model=DailyDetail)
async def get_day(
    day: datetime.date,
    place: Location = fastapi.Depends(location_from_query),
    client: AlmanacClient = fastapi.Depends(get_client),
) -> DailyDetail:
    """Detail record for a single day."""
    detail = await daily.fetch_daily_detail(client, day, place)
    if detail is None:
        raise fastapi.HTTPException(
            status_code=404, detail=f'No panchang details available for {day}'
        )
    return detail


@router.get('/api/events', response_model=list[EventTypeItem])
async def list_events(
    date: datetime.date | None = None,
    category: EventCategory | None = None,
    client: AlmanacClient = fastapi.Depends(get_client),
) -> list[EventTypeItem]:
    """Events a reminder can be set for, optionally limited to one category."""
    return await events.get_event_types(
        client, date or datetime.date.today(), category
    )


@router.get('/api/events/{event_id}', response_model=EventDetails)
async def get_event(
    event_id: int,
    date: datetime.date | None = None,
    client: AlmanacClient = fastapi.Depends(get_client),
) -> EventDetails:
    """Next occurrence of an event."""
    details = await events.get_event_details(
        client, event_id, date or datetime.date.today()
    )
    if details is None:
        raise fastapi.HTTPException(
            status_code=404, detail=f'No details available for event {event_id}'
        )
    return details


@router.post('/api/reminders', response_model=ReminderResult)
async def create_reminder(
    data: ReminderRequest,
    appender: reminders.SheetAppender | None = fastapi.Depends(get_appender),
    client: AlmanacClient = fastapi.Depends(get_client),
) -> ReminderResult:
    """Append a reminder request to the reminders sheet.

    When an event is selected but its details were not sent along, they are
    looked up in the catalogue and copied into the row.
    """
    if appender is None:
        raise fastapi.HTTPException(
            status_code=503,
            detail='The reminders sheet is not available on this server.',
        )
    if data.event_id is not None and data.next_date is None:
        today = datetime.date.today()
        details = await events.get_event_details(client, data.event_id, today)
        event_name = data.event_name
        if event_name is None:
            catalogue = await events.get_event_types(client, today, data.category)
            event_name = next(
                (
                    item.event_name
                    for item in catalogue
                    if item.default_event_id == data.event_id
                ),
                None,
            )
        data = data.with_event_details(event_name, details)
    return await fastapi.concurrency.run_in_threadpool(
        reminders.submit_reminder, data, appender
    )
