"""Data models for the Panchang calendar service.

Covers the resolved location, the raw monthly almanac rows and the tagged
entries they are translated into, the reconciled calendar day, the daily
detail record with its parsed JSON payload, the event catalogue and reminder
requests.
"""

from __future__ import annotations

import datetime
import enum
from typing import Annotated, Any, Literal

import pydantic

DEFAULT_UTC_OFFSET = '5.5'

# ---------------------------------------------------------------------------
# Location
# ---------------------------------------------------------------------------


class LocationSource(enum.StrEnum):
    """Where a location came from."""

    API = 'api'
    FALLBACK = 'fallback'
    ERROR = 'error'
    # Passed in by the caller, not resolved by this service.
    QUERY = 'query'


class Location(pydantic.BaseModel):
    """A resolved place with the UTC offset the almanac API expects."""

    model_config = pydantic.ConfigDict(frozen=True)

    latitude: float
    longitude: float
    city: str = 'Unknown City'
    state: str = 'Unknown State'
    country: str = 'Unknown Country'
    # Decimal hours, e.g. "5.5". Always set: every almanac call sends it.
    timezone_offset: str = DEFAULT_UTC_OFFSET
    timezone_name: str | None = None
    source: LocationSource = LocationSource.API

    @property
    def label(self) -> str:
        """Human-readable place name."""
        return f'{self.city}, {self.state}, {self.country}'


# ---------------------------------------------------------------------------
# Monthly almanac rows
# ---------------------------------------------------------------------------


class RawAlmanacRow(pydantic.BaseModel):
    """One flat row of the monthly almanac table.

    ``tithi_name`` is overloaded: its meaning depends on ``sort``. Rows are
    translated into :data:`AlmanacEntry` values before they reach the rest of
    the service.
    """

    model_config = pydantic.ConfigDict(coerce_numbers_to_str=True)

    sort: int = 0
    date_name: str = ''
    tithi_name: str | None = None
    nakshatra_name: str | None = None

    @pydantic.field_validator('sort', 'date_name', mode='before')
    @classmethod
    def _blank_as_default(cls, value: Any, info: pydantic.ValidationInfo) -> Any:
        if value is None or value == '':
            return 0 if info.field_name == 'sort' else ''
        return value


class EntryKind(enum.StrEnum):
    """Discriminator values for translated almanac rows."""

    TITHI = 'tithi'
    SUNRISE = 'sunrise'
    SUNSET = 'sunset'
    EVENT = 'event'


class TithiEntry(pydantic.BaseModel):
    """Lunar day and nakshatra for a date."""

    kind: Literal[EntryKind.TITHI] = EntryKind.TITHI
    name: str | None = None
    nakshatra: str | None = None


class SunriseEntry(pydantic.BaseModel):
    """Sunrise time for a date."""

    kind: Literal[EntryKind.SUNRISE] = EntryKind.SUNRISE
    time: str | None = None


class SunsetEntry(pydantic.BaseModel):
    """Sunset time for a date."""

    kind: Literal[EntryKind.SUNSET] = EntryKind.SUNSET
    time: str | None = None


class EventEntry(pydantic.BaseModel):
    """Festival or other special event falling on a date."""

    kind: Literal[EntryKind.EVENT] = EntryKind.EVENT
    text: str


AlmanacEntry = Annotated[
    TithiEntry | SunriseEntry | SunsetEntry | EventEntry,
    pydantic.Field(discriminator='kind'),
]


class CalendarDay(pydantic.BaseModel):
    """One reconciled day of the displayed month."""

    model_config = pydantic.ConfigDict(frozen=True)

    date: str  # ISO format: YYYY-MM-DD
    day_of_month: int
    full_date: datetime.date
    tithi: str | None = None
    nakshatra: str | None = None
    sunrise: str | None = None
    sunset: str | None = None
    special_event: str | None = None
    is_today: bool = False
    is_current_month: bool = True


# ---------------------------------------------------------------------------
# Daily detail
# ---------------------------------------------------------------------------


class TimeOfDay(pydantic.BaseModel):
    """Clock time as the almanac payload encodes it."""

    hour: int = 0
    minute: int = 0
    second: int = 0

    def __str__(self) -> str:
        return f'{self.hour:02d}:{self.minute:02d}:{self.second:02d}'


class TimeWindow(pydantic.BaseModel):
    """A start/end pair such as a muhurta or kaal."""

    model_config = pydantic.ConfigDict(coerce_numbers_to_str=True)

    start: str | None = None
    end: str | None = None


class _PayloadModel(pydantic.BaseModel):
    model_config = pydantic.ConfigDict(coerce_numbers_to_str=True)


class TithiDetails(_PayloadModel):
    tithi_number: int | None = None
    tithi_name: str | None = None
    special: str | None = None
    summary: str | None = None
    deity: str | None = None


class NakshatraDetails(_PayloadModel):
    nak_number: int | None = None
    nak_name: str | None = None
    ruler: str | None = None
    deity: str | None = None
    special: str | None = None
    summary: str | None = None


class YogDetails(_PayloadModel):
    yog_number: int | None = None
    yog_name: str | None = None
    special: str | None = None
    meaning: str | None = None


class KaranDetails(_PayloadModel):
    karan_number: int | None = None
    karan_name: str | None = None
    special: str | None = None
    deity: str | None = None


class _Section(_PayloadModel):
    end_time: TimeOfDay | None = None
    end_time_ms: int | None = None


class TithiSection(_Section):
    details: TithiDetails = pydantic.Field(default_factory=TithiDetails)

    @property
    def name(self) -> str | None:
        return self.details.tithi_name

    @property
    def summary(self) -> str | None:
        return self.details.summary


class NakshatraSection(_Section):
    details: NakshatraDetails = pydantic.Field(default_factory=NakshatraDetails)

    @property
    def name(self) -> str | None:
        return self.details.nak_name

    @property
    def summary(self) -> str | None:
        return self.details.summary


class YogSection(_Section):
    details: YogDetails = pydantic.Field(default_factory=YogDetails)

    @property
    def name(self) -> str | None:
        return self.details.yog_name

    @property
    def summary(self) -> str | None:
        return self.details.meaning


class KaranSection(_Section):
    details: KaranDetails = pydantic.Field(default_factory=KaranDetails)

    @property
    def name(self) -> str | None:
        return self.details.karan_name

    @property
    def summary(self) -> str | None:
        return self.details.special


class HinduMaah(_PayloadModel):
    adhik_status: bool = False
    purnimanta: str | None = None
    amanta: str | None = None
    amanta_id: int | None = None
    purnimanta_id: int | None = None


class NakShool(_PayloadModel):
    direction: str | None = None
    remedies: str | None = None


class ParsedPanchang(_PayloadModel):
    """The nested structure carried as a JSON string in ``json_data``."""

    day: str | None = None
    sunrise: str | None = None
    sunset: str | None = None
    moonrise: str | None = None
    moonset: str | None = None
    vedic_sunrise: str | None = None
    vedic_sunset: str | None = None
    tithi: TithiSection | None = None
    nakshatra: NakshatraSection | None = None
    yog: YogSection | None = None
    karan: KaranSection | None = None
    hindu_maah: HinduMaah | None = None
    paksha: str | None = None
    ritu: str | None = None
    sun_sign: str | None = None
    moon_sign: str | None = None
    ayana: str | None = None
    panchang_yog: str | None = None
    vikram_samvat: int | None = None
    shaka_samvat: int | None = None
    vkram_samvat_name: str | None = None
    shaka_samvat_name: str | None = None
    disha_shool: str | None = None
    disha_shool_remedies: str | None = None
    nak_shool: NakShool | None = None
    moon_nivas: str | None = None
    abhijit_muhurta: TimeWindow | None = None
    rahukaal: TimeWindow | None = None
    guliKaal: TimeWindow | None = None
    yamghant_kaal: TimeWindow | None = None


class DailyDetail(pydantic.BaseModel):
    """Per-date almanac record returned by the daily endpoints.

    The API adds columns freely, so unknown fields are kept. ``parsed`` is
    filled in from ``json_data`` when the payload is usable.
    """

    model_config = pydantic.ConfigDict(extra='allow', coerce_numbers_to_str=True)

    daily_panchang_id: int | None = None
    month_name: str | None = None
    festive_name: str | None = None
    day_name: str | None = None
    sunrise: str | None = None
    sunset: str | None = None
    moonrise: str | None = None
    moonset: str | None = None
    paksha: str | None = None
    ritu: str | None = None
    sun_sign: str | None = None
    moon_sign: str | None = None
    ayana: str | None = None
    panchang_yog: str | None = None
    vikram_samvat: str | None = None
    shaka_samvat: str | None = None
    shaka_samvat_name: str | None = None
    vkram_samvat_name: str | None = None
    disha_shool: str | None = None
    nak_shool: str | None = None
    moon_nivas: str | None = None
    abhijit_muhurta_start: str | None = None
    abhijit_muhurta_end: str | None = None
    rahukaal_start_start: str | None = None
    rahukaal_start_end: str | None = None
    guliKaal_start: str | None = None
    guliKaal_end: str | None = None
    yamghant_kaal_start: str | None = None
    yamghant_kaal_end: str | None = None
    tithi_end_date_time: str | None = None
    nakshatra_end_date_time: str | None = None
    yog_end_date_time: str | None = None
    karan_end_date_time: str | None = None
    json_data: str | None = None
    parsed: ParsedPanchang | None = None

    @pydantic.field_validator('daily_panchang_id', mode='before')
    @classmethod
    def _blank_id_as_none(cls, value: Any) -> Any:
        return None if value == '' else value

    def time_windows(self) -> dict[str, str]:
        """Return the muhurta/kaal windows that have both a start and an end."""
        pairs = {
            'Abhijit Muhurta': (self.abhijit_muhurta_start, self.abhijit_muhurta_end),
            'Rahu Kaal': (self.rahukaal_start_start, self.rahukaal_start_end),
            'Guli Kaal': (self.guliKaal_start, self.guliKaal_end),
            'Yamghant Kaal': (self.yamghant_kaal_start, self.yamghant_kaal_end),
        }
        return {
            label: f'{start} - {end}'
            for label, (start, end) in pairs.items()
            if start and end
        }


# ---------------------------------------------------------------------------
# Events and reminders
# ---------------------------------------------------------------------------


class EventCategory(enum.StrEnum):
    """Kinds of event a reminder can be set for."""

    TITHI = 'tithi'
    OCCASION = 'occasion'
    FESTIVAL = 'festival'

    @property
    def mode_id(self) -> int:
        """The ``mode_id`` the event catalogue uses for this category."""
        return _CATEGORY_MODE_IDS[self]


_CATEGORY_MODE_IDS: dict[EventCategory, int] = {
    EventCategory.TITHI: 2,
    EventCategory.OCCASION: 0,
    EventCategory.FESTIVAL: 3,
}


class EventTypeItem(pydantic.BaseModel):
    """An entry of the event catalogue list."""

    event_id: int
    event_name: str
    mode_id: int
    default_event_id: int


class EventDetails(pydantic.BaseModel):
    """Next occurrence and calendar details for one event."""

    model_config = pydantic.ConfigDict(coerce_numbers_to_str=True)

    next_date: str | None = None
    day_name: str | None = None
    hindu_month: str | None = None
    tithi_name: str | None = None
    paksha: str | None = None
    tithi_id: int | None = None
    month_id: str | None = None
    frequency: str | None = None


class ReminderRequest(pydantic.BaseModel):
    """A reminder sign-up, with the chosen event's details copied in."""

    name: str = pydantic.Field(min_length=2)
    phone: str = pydantic.Field(pattern=r'^\d{10}$')
    category: EventCategory
    event_id: int | None = None
    event_name: str | None = None
    next_date: str | None = None
    hindu_month: str | None = None
    tithi_name: str | None = None
    paksha: str | None = None
    frequency: str | None = None
    consent: bool

    @pydantic.field_validator('consent')
    @classmethod
    def _require_consent(cls, value: bool) -> bool:
        if not value:
            raise ValueError('You must consent to notifications.')
        return value

    def with_event_details(
        self, event_name: str | None, details: EventDetails | None
    ) -> ReminderRequest:
        """Return a copy with the event fields filled from the catalogue."""
        update: dict[str, Any] = {'event_name': event_name or self.event_name}
        if details is not None:
            update.update(
                next_date=details.next_date,
                hindu_month=details.hindu_month,
                tithi_name=details.tithi_name,
                paksha=details.paksha,
                frequency=details.frequency,
            )
        return self.model_copy(update=update)


class ReminderResult(pydantic.BaseModel):
    """Outcome of a reminder submission."""

    success: bool
    message: str
