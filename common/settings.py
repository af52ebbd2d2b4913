"""Shared application settings read from environment variables."""

import os

DOMAIN: str = os.environ.get('DOMAIN', '.vaidicpanchang.org')
HOME_URL: str = 'https://' + DOMAIN[1:]

LOG_LEVEL: str = os.environ.get('LOG_LEVEL', 'INFO').upper()

# Almanac API
PANCHANG_API_BASE_URL: str = os.environ.get(
    'PANCHANG_API_BASE_URL', 'https://gwala.krishnayangauraksha.org'
).rstrip('/')
# Value of the Authorization header sent with daily almanac calls, if any.
PANCHANG_API_AUTH: str = os.environ.get('PANCHANG_API_AUTH', '')
PANCHANG_API_TIMEOUT: float = float(os.environ.get('PANCHANG_API_TIMEOUT', '15.0'))

# Reminder spreadsheet
GOOGLE_SHEET_ID: str = os.environ.get('GOOGLE_SHEET_ID', '')
GOOGLE_SHEET_REMINDERS_TAB: str = os.environ.get(
    'GOOGLE_SHEET_REMINDERS_TAB', 'Reminders'
)
GOOGLE_SERVICE_ACCOUNT_FILE: str = os.environ.get('GOOGLE_SERVICE_ACCOUNT_FILE', '')
