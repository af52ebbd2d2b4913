"""Async client for the third-party almanac (Panchang) HTTP API."""

import datetime
import json
import logging
from typing import Any

import httpx
import pydantic

import common.settings

from .models import DailyDetail, Location, RawAlmanacRow

logger = logging.getLogger(__name__)

LOCATION_PATH = '/Donor/get_Place_by_lat_log'
PANCHANG_PATH = '/ExternalApi/SavePanchangDetails'
PANCHANG_SECONDARY_PATH = '/ExternalApi/CallPanchangAPI'
EVENT_TYPES_PATH = '/Donor/GetEventTypeList'

# Request-type discriminator sent as ``panchang_type``.
PANCHANG_TYPE_DAILY = '1'
PANCHANG_TYPE_MONTHLY = '2'

API_DATE_FORMAT = '%d-%m-%Y'
DEFAULT_BIRTH_TIME = '07:00:00'
DEFAULT_LANGUAGE = 'hi'

_LOG_BODY_CHARS = 500


class AlmanacAPIError(Exception):
    """The almanac API answered with an error status or an unreadable body."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _base_params(day: datetime.date, location: Location) -> dict[str, Any]:
    return {
        'birth_date_': day.strftime(API_DATE_FORMAT),
        'birth_time_': DEFAULT_BIRTH_TIME,
        'lat_': str(location.latitude),
        'lon_': str(location.longitude),
        'tzone_': location.timezone_offset,
        'place_': location.city,
        'country_': location.country,
        'state_': location.state,
        # The API reads the longitude from city_ as well.
        'city_': str(location.longitude),
        'lang_': DEFAULT_LANGUAGE,
        'json_response': '',
        'req_frm': 0,
    }


def monthly_params(month_start: datetime.date, location: Location) -> dict[str, Any]:
    """Build the request body for a month of almanac rows."""
    return {
        **_base_params(month_start, location),
        'panchang_type': PANCHANG_TYPE_MONTHLY,
        'panchang_id': 0,
        'spmode': 0,
    }


def daily_params(
    day: datetime.date, location: Location, spmode: int = 0, panchang_id: int = 0
) -> dict[str, Any]:
    """Build the request body for a single day's detail record."""
    return {
        **_base_params(day, location),
        'panchang_type': PANCHANG_TYPE_DAILY,
        'panchang_id': panchang_id,
        'spmode': spmode,
    }


def _table(data: Any) -> list[dict[str, Any]]:
    """Return the ``table`` list of a response body, or an empty list."""
    if not isinstance(data, dict):
        return []
    table = data.get('table')  # type: ignore[union-attr]
    return list(table) if isinstance(table, list) else []  # type: ignore[arg-type]


def _rows(model: type[pydantic.BaseModel], path: str, data: Any) -> list[Any]:
    """Validate each table row as ``model``, skipping rows that do not fit."""
    rows: list[Any] = []
    for index, row in enumerate(_table(data)):
        try:
            rows.append(model.model_validate(row))
        except pydantic.ValidationError as exc:
            logger.warning('Skipping row %d from %s: %s', index, path, exc)
    return rows


class AlmanacClient:
    """Thin wrapper around the almanac API endpoints.

    Every method raises :class:`AlmanacAPIError` for non-2xx responses and
    malformed JSON; transport failures surface as ``httpx.HTTPError``.
    Callers decide how to degrade.
    """

    def __init__(self, http: httpx.AsyncClient, auth: str | None = None) -> None:
        self._http = http
        self._auth = common.settings.PANCHANG_API_AUTH if auth is None else auth

    @classmethod
    def create(cls) -> 'AlmanacClient':
        """Create a client configured from ``common.settings``."""
        base_url = common.settings.PANCHANG_API_BASE_URL
        http = httpx.AsyncClient(
            base_url=base_url,
            timeout=common.settings.PANCHANG_API_TIMEOUT,
            headers={
                'accept': 'application/json, text/javascript, */*; q=0.01',
                'accept-language': 'en-IN,en;q=0.9',
                'origin': base_url,
                'referer': f'{base_url}/Donor/Panchang',
                'user-agent': 'PanchangCalendar/1.0',
                'x-requested-with': 'XMLHttpRequest',
            },
        )
        return cls(http)

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._http.aclose()

    async def _post(
        self, path: str, payload: dict[str, Any], authorized: bool = False
    ) -> Any:
        headers: dict[str, str] = {}
        if authorized and self._auth:
            headers['Authorization'] = self._auth

        logger.debug('POST %s %s', path, payload)
        response = await self._http.post(path, json=payload, headers=headers)
        logger.info('POST %s -> %s', path, response.status_code)

        if response.is_error:
            body = response.text[:_LOG_BODY_CHARS]
            raise AlmanacAPIError(
                f'{path} returned {response.status_code}: {body}',
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError:
            raise AlmanacAPIError(
                f'{path} returned invalid JSON: {response.text[:_LOG_BODY_CHARS]}',
                status_code=response.status_code,
            ) from None

    async def fetch_location(self, latitude: float, longitude: float) -> dict[str, Any]:
        """Reverse geocode coordinates; returns the decoded response body."""
        data = await self._post(
            LOCATION_PATH, {'latitude': str(latitude), 'longitude': str(longitude)}
        )
        # The endpoint sometimes returns a JSON document encoded as a JSON string.
        if isinstance(data, str):
            try:
                data = json.loads(data)
            except ValueError:
                raise AlmanacAPIError(
                    f'{LOCATION_PATH} returned a non-JSON string'
                ) from None
        if not isinstance(data, dict):
            raise AlmanacAPIError(f'{LOCATION_PATH} returned {type(data).__name__}')
        return data  # type: ignore[return-value]

    async def fetch_monthly(self, params: dict[str, Any]) -> list[RawAlmanacRow]:
        """Fetch the flat row table for a month."""
        data = await self._post(PANCHANG_PATH, params)
        return _rows(RawAlmanacRow, PANCHANG_PATH, data)

    async def fetch_daily(self, params: dict[str, Any]) -> list[DailyDetail]:
        """Fetch daily detail records from the primary endpoint."""
        data = await self._post(PANCHANG_PATH, params, authorized=True)
        return _rows(DailyDetail, PANCHANG_PATH, data)

    async def fetch_daily_secondary(self, params: dict[str, Any]) -> list[DailyDetail]:
        """Fetch daily detail records from the secondary endpoint."""
        data = await self._post(PANCHANG_SECONDARY_PATH, params, authorized=True)
        return _rows(DailyDetail, PANCHANG_SECONDARY_PATH, data)

    async def fetch_event_types(self, params: dict[str, Any]) -> list[dict[str, Any]]:
        """Fetch the event catalogue (list or detail mode, per ``spmode``)."""
        data = await self._post(EVENT_TYPES_PATH, params)
        if not isinstance(data, list):
            return []
        return [item for item in data if isinstance(item, dict)]  # type: ignore[misc]
