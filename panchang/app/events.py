"""Event catalogue lookups used by the reminder form."""

import datetime
import logging

from .client import AlmanacClient
from .models import EventCategory, EventDetails, EventTypeItem

logger = logging.getLogger(__name__)

LIST_DATE_FORMAT = '%d-%b-%Y'
DETAIL_DATE_FORMAT = '%d/%b/%Y'


async def get_event_types(
    client: AlmanacClient,
    on_date: datetime.date,
    category: EventCategory | None = None,
) -> list[EventTypeItem]:
    """List catalogue events, optionally limited to one category.

    Returns an empty list if the catalogue cannot be fetched.
    """
    params = {
        'event_id': '0',
        'event_date': on_date.strftime(LIST_DATE_FORMAT),
        'spmode': '0',
    }
    try:
        items = [
            EventTypeItem.model_validate(item)
            for item in await client.fetch_event_types(params)
        ]
    except Exception:
        logger.exception('Failed to fetch event types for %s', on_date)
        return []

    if category is not None:
        items = [item for item in items if item.mode_id == category.mode_id]
    return items


async def get_event_details(
    client: AlmanacClient, event_id: int, on_date: datetime.date
) -> EventDetails | None:
    """Look up the next occurrence of an event, or None if unavailable."""
    params = {
        'event_id': str(event_id),
        'event_date': on_date.strftime(DETAIL_DATE_FORMAT),
        'spmode': '1',
    }
    try:
        items = await client.fetch_event_types(params)
        return EventDetails.model_validate(items[0]) if items else None
    except Exception:
        logger.exception('Failed to fetch details for event %s', event_id)
        return None
