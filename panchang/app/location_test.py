"""Unit tests for the location resolver."""

import asyncio
import json
import unittest
from typing import Any

import httpx

from panchang.app import client as client_module
from panchang.app import location, models

GEOCODE_RESULT: dict[str, Any] = {
    'city': 'Pune',
    'state': 'Maharashtra',
    'country': 'India',
    'lat': 18.5204,
    'lon': 73.8567,
    'timezone': {'name': 'Asia/Kolkata', 'offset_STD': '+05:30'},
}


def make_client(handler: Any) -> client_module.AlmanacClient:
    """Create an AlmanacClient backed by a mock transport."""
    http = httpx.AsyncClient(
        transport=httpx.MockTransport(handler), base_url='https://almanac.test'
    )
    return client_module.AlmanacClient(http, auth='')


def respond_with(body: Any) -> Any:
    """Build a handler that always returns ``body`` as JSON."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=body)

    return handler


class TestLocationFromResult(unittest.TestCase):
    """Tests for location_from_result."""

    def test_full_result(self) -> None:
        """All fields are copied and the offset is normalized."""
        loc = location.location_from_result(GEOCODE_RESULT)
        self.assertEqual(loc.city, 'Pune')
        self.assertEqual(loc.state, 'Maharashtra')
        self.assertEqual(loc.country, 'India')
        self.assertEqual(loc.timezone_name, 'Asia/Kolkata')
        self.assertEqual(loc.timezone_offset, '5.5')
        self.assertEqual(loc.source, models.LocationSource.API)

    def test_city_falls_back_through_fields(self) -> None:
        """City uses name, then suburb, then district."""
        base = {'lat': 1.0, 'lon': 2.0}
        self.assertEqual(
            location.location_from_result({**base, 'name': 'Place'}).city, 'Place'
        )
        self.assertEqual(
            location.location_from_result({**base, 'suburb': 'Sub'}).city, 'Sub'
        )
        self.assertEqual(
            location.location_from_result({**base, 'district': 'Dist'}).city, 'Dist'
        )

    def test_missing_fields_use_unknown(self) -> None:
        """Absent names default to Unknown values and the default offset."""
        loc = location.location_from_result({'lat': 1.0, 'lon': 2.0})
        self.assertEqual(loc.city, 'Unknown City')
        self.assertEqual(loc.state, 'Unknown State')
        self.assertEqual(loc.country, 'Unknown Country')
        self.assertEqual(loc.timezone_offset, '5.5')
        self.assertIsNone(loc.timezone_name)


class TestResolveLocation(unittest.TestCase):
    """Tests for resolve_location."""

    def test_resolves_first_result(self) -> None:
        """The first geocoder result is used."""
        other = {**GEOCODE_RESULT, 'city': 'Mumbai'}
        client = make_client(respond_with({'results': [GEOCODE_RESULT, other]}))
        loc = asyncio.run(location.resolve_location(client, 18.52, 73.85))
        self.assertEqual(loc.city, 'Pune')
        self.assertEqual(loc.latitude, 18.5204)

    def test_sends_coordinates_as_strings(self) -> None:
        """Coordinates are posted as strings."""
        bodies: list[dict[str, Any]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={'results': [GEOCODE_RESULT]})

        asyncio.run(location.resolve_location(make_client(handler), 18.52, 73.85))
        self.assertEqual(bodies[0], {'latitude': '18.52', 'longitude': '73.85'})

    def test_stringified_json_accepted(self) -> None:
        """A JSON document wrapped in a JSON string is decoded."""
        client = make_client(respond_with(json.dumps({'results': [GEOCODE_RESULT]})))
        loc = asyncio.run(location.resolve_location(client, 18.52, 73.85))
        self.assertEqual(loc.city, 'Pune')

    def test_no_results_falls_back(self) -> None:
        """An empty result set yields a fallback at the input coordinates."""
        client = make_client(respond_with({'results': []}))
        with self.assertLogs('panchang.app.location', level='WARNING'):
            loc = asyncio.run(location.resolve_location(client, 10.0, 20.0))
        self.assertEqual(loc.source, models.LocationSource.FALLBACK)
        self.assertEqual((loc.latitude, loc.longitude), (10.0, 20.0))
        self.assertEqual(loc.timezone_offset, '5.5')

    def test_http_error_falls_back(self) -> None:
        """A server error yields an error-tagged fallback."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text='bad gateway')

        with self.assertLogs('panchang.app.location', level='ERROR'):
            loc = asyncio.run(location.resolve_location(make_client(handler), 1.0, 2.0))
        self.assertEqual(loc.source, models.LocationSource.ERROR)
        self.assertEqual(loc.timezone_offset, '5.5')

    def test_network_error_falls_back(self) -> None:
        """A transport failure yields an error-tagged fallback."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout('timed out', request=request)

        loc = asyncio.run(location.resolve_location(make_client(handler), 1.0, 2.0))
        self.assertEqual(loc.source, models.LocationSource.ERROR)

    def test_malformed_result_falls_back(self) -> None:
        """A result without coordinates yields an error-tagged fallback."""
        client = make_client(respond_with({'results': [{'city': 'Nowhere'}]}))
        loc = asyncio.run(location.resolve_location(client, 1.0, 2.0))
        self.assertEqual(loc.source, models.LocationSource.ERROR)
        self.assertEqual(loc.city, 'Unknown City')


if __name__ == '__main__':
    unittest.main()
