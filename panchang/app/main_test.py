"""Unit tests for the Panchang app wiring."""

import unittest

import fastapi.testclient

from panchang.app import main


class TestApp(unittest.TestCase):
    """Tests for endpoints mounted by main."""

    def setUp(self) -> None:
        self.client = fastapi.testclient.TestClient(main.app)

    def test_health(self) -> None:
        """The shared health endpoint is mounted."""
        response = self.client.get('/health')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {'status': 'healthy'})

    def test_static_css_served(self) -> None:
        """The stylesheet is served from /static."""
        response = self.client.get('/static/css/panchang.css')
        self.assertEqual(response.status_code, 200)
        self.assertIn('text/css', response.headers['content-type'])

    def test_title(self) -> None:
        """The app carries its title."""
        self.assertEqual(main.app.title, 'Panchang')


if __name__ == '__main__':
    unittest.main()
