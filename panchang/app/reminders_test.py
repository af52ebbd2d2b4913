"""Unit tests for reminder submission."""

import datetime
import unittest
import unittest.mock

import httplib2
from googleapiclient import errors

from panchang.app import models, reminders

TIMESTAMP = datetime.datetime(2025, 6, 1, 10, 30, tzinfo=datetime.UTC)


def make_request(**overrides: object) -> models.ReminderRequest:
    """A valid reminder request with optional field overrides."""
    data: dict[str, object] = {
        'name': 'Asha',
        'phone': '9876543210',
        'category': 'tithi',
        'event_id': 11,
        'event_name': 'Ekadashi',
        'next_date': '2025-06-06',
        'hindu_month': 'ज्येष्ठ',
        'tithi_name': 'एकादशी',
        'paksha': 'शुक्ल',
        'frequency': 'Monthly',
        'consent': True,
    }
    data.update(overrides)
    return models.ReminderRequest.model_validate(data)


def make_http_error(status: int, reason: str) -> errors.HttpError:
    """Build a googleapiclient HttpError with the given status."""
    resp = httplib2.Response({'status': status})
    content = ('{"error": {"message": "%s"}}' % reason).encode()
    return errors.HttpError(resp, content)


class RecordingAppender:
    """SheetAppender that keeps appended rows in memory."""

    def __init__(self) -> None:
        self.rows: list[list[str]] = []

    def append_row(self, values: list[str]) -> None:
        self.rows.append(values)


class TestReminderRow(unittest.TestCase):
    """Tests for reminder_row."""

    def test_column_order(self) -> None:
        """Values follow REMINDER_COLUMNS order."""
        row = reminders.reminder_row(make_request(), TIMESTAMP)
        self.assertEqual(len(row), len(reminders.REMINDER_COLUMNS))
        self.assertEqual(
            row,
            [
                '2025-06-01T10:30:00+00:00',
                'Asha',
                '9876543210',
                'tithi',
                '11',
                'Ekadashi',
                '2025-06-06',
                'ज्येष्ठ',
                'एकादशी',
                'शुक्ल',
                'Monthly',
                'true',
            ],
        )

    def test_missing_optional_fields_are_blank(self) -> None:
        """Unset event fields become empty strings."""
        request = models.ReminderRequest(
            name='Ravi', phone='0123456789', category='festival', consent=True
        )
        row = reminders.reminder_row(request, TIMESTAMP)
        self.assertEqual(row[3], 'festival')
        self.assertEqual(row[4:11], [''] * 7)
        self.assertEqual(row[11], 'true')


class TestSubmitReminder(unittest.TestCase):
    """Tests for submit_reminder."""

    def test_appends_one_row(self) -> None:
        """A successful submission appends exactly one row."""
        appender = RecordingAppender()
        result = reminders.submit_reminder(make_request(), appender, now=TIMESTAMP)
        self.assertTrue(result.success)
        self.assertEqual(len(appender.rows), 1)

    def test_duplicates_are_not_suppressed(self) -> None:
        """Submitting twice appends two rows."""
        appender = RecordingAppender()
        request = make_request()
        reminders.submit_reminder(request, appender, now=TIMESTAMP)
        reminders.submit_reminder(request, appender, now=TIMESTAMP)
        self.assertEqual(len(appender.rows), 2)

    def test_failure_is_reported_not_raised(self) -> None:
        """Append errors become an unsuccessful result."""
        appender = unittest.mock.MagicMock()
        appender.append_row.side_effect = make_http_error(403, 'PERMISSION_DENIED')
        with self.assertLogs('panchang.app.reminders', level='ERROR'):
            result = reminders.submit_reminder(make_request(), appender)
        self.assertFalse(result.success)
        self.assertEqual(result.message, reminders.PERMISSION_DENIED_MESSAGE)
        appender.append_row.assert_called_once()


class TestClassifySheetError(unittest.TestCase):
    """Tests for classify_sheet_error."""

    def test_permission_denied(self) -> None:
        """403 responses and PERMISSION_DENIED text map to the permission message."""
        self.assertEqual(
            reminders.classify_sheet_error(make_http_error(403, 'forbidden')),
            reminders.PERMISSION_DENIED_MESSAGE,
        )
        self.assertEqual(
            reminders.classify_sheet_error(RuntimeError('PERMISSION_DENIED')),
            reminders.PERMISSION_DENIED_MESSAGE,
        )

    def test_not_found(self) -> None:
        """404 responses and bad ranges map to the not-found message."""
        self.assertEqual(
            reminders.classify_sheet_error(make_http_error(404, 'missing')),
            reminders.NOT_FOUND_MESSAGE,
        )
        self.assertEqual(
            reminders.classify_sheet_error(RuntimeError('Unable to parse range: X')),
            reminders.NOT_FOUND_MESSAGE,
        )

    def test_invalid_argument(self) -> None:
        """INVALID_ARGUMENT maps to the invalid-argument message."""
        self.assertEqual(
            reminders.classify_sheet_error(RuntimeError('INVALID_ARGUMENT: bad')),
            reminders.INVALID_ARGUMENT_MESSAGE,
        )

    def test_other_errors_include_details(self) -> None:
        """Unclassified errors carry their text."""
        message = reminders.classify_sheet_error(RuntimeError('socket closed'))
        self.assertIn('socket closed', message)


class TestGoogleSheetAppender(unittest.TestCase):
    """Tests for GoogleSheetAppender."""

    def test_append_row_calls_values_append(self) -> None:
        """append_row issues a values().append() for the configured tab."""
        service = unittest.mock.MagicMock()
        appender = reminders.GoogleSheetAppender(service, 'sheet-123', 'Reminders')
        appender.append_row(['a', 'b'])

        append = service.spreadsheets.return_value.values.return_value.append
        append.assert_called_once_with(
            spreadsheetId='sheet-123',
            range='Reminders',
            valueInputOption='USER_ENTERED',
            insertDataOption='INSERT_ROWS',
            body={'values': [['a', 'b']]},
        )
        append.return_value.execute.assert_called_once_with()

    def test_configured_appender_none_without_settings(self) -> None:
        """No appender is built when the sheet is not configured."""
        with unittest.mock.patch('common.settings.GOOGLE_SHEET_ID', ''):
            self.assertIsNone(reminders.configured_appender())

    def test_configured_appender_none_for_unreadable_key(self) -> None:
        """A key file that cannot be read is logged instead of raised."""
        with (
            unittest.mock.patch('common.settings.GOOGLE_SHEET_ID', 'sheet'),
            unittest.mock.patch(
                'common.settings.GOOGLE_SERVICE_ACCOUNT_FILE', '/nonexistent/key.json'
            ),
            self.assertLogs('panchang.app.reminders', level='ERROR') as logs,
        ):
            self.assertIsNone(reminders.configured_appender())
        self.assertIn('/nonexistent/key.json', logs.output[0])


if __name__ == '__main__':
    unittest.main()
