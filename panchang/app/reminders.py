"""Append reminder requests to a Google Sheet."""

import datetime
import logging
from typing import Any, Protocol

from google.auth import exceptions as auth_exceptions  # pyright: ignore[reportMissingTypeStubs]
from google.oauth2 import service_account  # pyright: ignore[reportMissingTypeStubs]
from googleapiclient import discovery, errors  # pyright: ignore[reportMissingTypeStubs]

import common.settings

from .models import ReminderRequest, ReminderResult

logger = logging.getLogger(__name__)

SHEETS_SCOPES = ['https://www.googleapis.com/auth/spreadsheets']

# Column order of the reminders tab.
REMINDER_COLUMNS = (
    'Timestamp',
    'Name',
    'Phone',
    'Category',
    'Event ID',
    'Event Name',
    'Next Date',
    'Hindu Month',
    'Tithi Name',
    'Paksha',
    'Frequency',
    'Consent',
)

PERMISSION_DENIED_MESSAGE = (
    'Permission denied. Ensure the service account has editor access to the sheet.'
)
NOT_FOUND_MESSAGE = (
    'Sheet or tab not found. Verify GOOGLE_SHEET_ID and '
    'GOOGLE_SHEET_REMINDERS_TAB are correct and the tab exists.'
)
INVALID_ARGUMENT_MESSAGE = (
    'Invalid argument provided to the Sheets API. Check the row data or range.'
)


class SheetAppender(Protocol):
    """Anything that can append one row to the reminders sheet."""

    def append_row(self, values: list[str]) -> None: ...


class GoogleSheetAppender:
    """Appends rows to a tab of a Google Sheet through the Sheets v4 API."""

    def __init__(self, service: Any, spreadsheet_id: str, tab_name: str) -> None:
        self._service = service
        self.spreadsheet_id = spreadsheet_id
        self.tab_name = tab_name

    @classmethod
    def from_service_account_file(
        cls, path: str, spreadsheet_id: str, tab_name: str
    ) -> 'GoogleSheetAppender':
        """Build an appender authenticated with a service-account key file."""
        credentials = service_account.Credentials.from_service_account_file(  # type: ignore[no-untyped-call]
            path, scopes=SHEETS_SCOPES
        )
        service = discovery.build(
            'sheets', 'v4', credentials=credentials, cache_discovery=False
        )
        return cls(service, spreadsheet_id, tab_name)

    def append_row(self, values: list[str]) -> None:
        """Insert ``values`` as a new row after the last row with data."""
        request = (
            self._service.spreadsheets()
            .values()
            .append(
                spreadsheetId=self.spreadsheet_id,
                range=self.tab_name,
                valueInputOption='USER_ENTERED',
                insertDataOption='INSERT_ROWS',
                body={'values': [values]},
            )
        )
        response = request.execute()
        logger.debug('Sheets append response: %s', response)


def configured_appender() -> GoogleSheetAppender | None:
    """Return an appender built from settings, or None if unavailable.

    A missing or unreadable service-account key is logged and treated the
    same as an unconfigured sheet.
    """
    settings = common.settings
    if not (settings.GOOGLE_SHEET_ID and settings.GOOGLE_SERVICE_ACCOUNT_FILE):
        logger.info('Reminders sheet is not configured')
        return None
    try:
        return GoogleSheetAppender.from_service_account_file(
            settings.GOOGLE_SERVICE_ACCOUNT_FILE,
            settings.GOOGLE_SHEET_ID,
            settings.GOOGLE_SHEET_REMINDERS_TAB,
        )
    except (
        OSError,
        KeyError,
        ValueError,
        auth_exceptions.GoogleAuthError,
        errors.Error,
    ):
        logger.exception(
            'Failed to load service account key %s',
            settings.GOOGLE_SERVICE_ACCOUNT_FILE,
        )
        return None


def reminder_row(request: ReminderRequest, timestamp: datetime.datetime) -> list[str]:
    """Lay out a reminder request in ``REMINDER_COLUMNS`` order."""
    return [
        timestamp.isoformat(),
        request.name,
        request.phone,
        request.category.value,
        str(request.event_id) if request.event_id is not None else '',
        request.event_name or '',
        request.next_date or '',
        request.hindu_month or '',
        request.tithi_name or '',
        request.paksha or '',
        request.frequency or '',
        str(request.consent).lower(),
    ]


def classify_sheet_error(exc: Exception) -> str:
    """Turn a Sheets API failure into an operator-facing message."""
    status: int | None = None
    if isinstance(exc, errors.HttpError):
        status = exc.resp.status  # type: ignore[union-attr]
    text = str(exc)

    if status == 403 or 'PERMISSION_DENIED' in text:
        return PERMISSION_DENIED_MESSAGE
    if (
        status == 404
        or 'requested entity was not found' in text
        or 'Unable to parse range' in text
    ):
        return NOT_FOUND_MESSAGE
    if 'INVALID_ARGUMENT' in text:
        return INVALID_ARGUMENT_MESSAGE
    return f'An unexpected error occurred while saving the reminder. Details: {text}'


def submit_reminder(
    request: ReminderRequest,
    appender: SheetAppender,
    now: datetime.datetime | None = None,
) -> ReminderResult:
    """Append one row for ``request``; never raises.

    Each call appends a new row, so repeated submissions produce duplicates.
    Failures are not retried.
    """
    timestamp = now or datetime.datetime.now(datetime.UTC)
    try:
        appender.append_row(reminder_row(request, timestamp))
    except Exception as exc:
        logger.exception('Failed to save reminder for %s', request.name)
        return ReminderResult(success=False, message=classify_sheet_error(exc))

    logger.info('Saved %s reminder for %s', request.category, request.name)
    return ReminderResult(success=True, message='Reminder saved successfully.')
