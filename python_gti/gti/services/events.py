"""
GTI business events: publication, cursor-paged export, and acknowledgment.
"""
import logging
from datetime import datetime, timedelta, timezone as dt_timezone
from typing import List, Optional, Tuple

from django.conf import settings
from django.db import transaction

from gti.models import GtiEvent, GtiWebhookConfirmation

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=dt_timezone.utc)
CURSOR_TYPE = 'eventTimestamp'

# Acknowledgment status reported by GTI -> resulting push status
ACK_STATUS_MAP = {
    'confirmed': GtiEvent.PushStatus.CONFIRMED,
    'duplicate': GtiEvent.PushStatus.SKIPPED,
}


def to_cursor(value: datetime) -> int:
    """Milliseconds since the epoch."""
    return (value - EPOCH) // timedelta(milliseconds=1)


# Largest cursor that still converts back to a datetime
MAX_CURSOR = to_cursor(datetime.max.replace(tzinfo=dt_timezone.utc))


def from_cursor(cursor: int) -> datetime:
    return EPOCH + timedelta(milliseconds=cursor)


def get_org_name() -> str:
    return getattr(settings, 'GTI_ORG_NAME', 'GTI') or 'GTI'


def record_event(idempotency_key: str, event_type: str, payload: dict,
                 event_timestamp: Optional[datetime] = None, lead=None,
                 organization_name: Optional[str] = None) -> Tuple[GtiEvent, bool]:
    """
    Publish a business event for GTI to pull.

    Idempotent on idempotency_key: publishing the same key twice returns
    the existing event unchanged.

    Returns:
        (event, created)
    """
    defaults = {
        'event_type': event_type,
        'payload': payload,
        'lead': lead,
        'organization_name_snapshot': organization_name or get_org_name(),
    }
    if event_timestamp is not None:
        defaults['event_timestamp'] = event_timestamp

    event, created = GtiEvent.objects.get_or_create(idempotency_key=idempotency_key, defaults=defaults)
    if created:
        logger.info(f"GTI event {idempotency_key} recorded ({event_type})")
    else:
        logger.debug(f"GTI event {idempotency_key} already recorded")
    return event, created


def export_events(cursor: int = 0, limit: Optional[int] = None) -> Tuple[List[GtiEvent], int]:
    """
    One page of events for the configured organization.

    Args:
        cursor: Millisecond timestamp of the last event already seen; 0 for the start
        limit: Page size, clamped to GTI_EXPORT_MAX_LIMIT

    Returns:
        (events ordered by event_timestamp, next cursor)
    """
    max_limit = settings.GTI_EXPORT_MAX_LIMIT
    limit = min(limit or settings.GTI_EXPORT_DEFAULT_LIMIT, max_limit)

    queryset = GtiEvent.objects.filter(organization_name_snapshot=get_org_name())
    if cursor:
        queryset = queryset.filter(event_timestamp__gt=from_cursor(cursor))

    events = list(queryset.order_by('event_timestamp', 'id')[:limit])
    next_cursor = to_cursor(events[-1].event_timestamp) if events else cursor
    return events, next_cursor


def acknowledge_event(idempotency_key: str, ack_status: str = 'confirmed', note: Optional[str] = None,
                      payload: Optional[dict] = None, headers: Optional[dict] = None,
                      integration_key_hash: str = '') -> Optional[GtiEvent]:
    """
    Apply a GTI acknowledgment to an event.

    Repeat acknowledgments are accepted: the status transition is the same
    each time and every call is recorded as a GtiWebhookConfirmation.

    Returns:
        The updated event, or None if no event has this key
    """
    with transaction.atomic():
        event = GtiEvent.objects.select_for_update().filter(idempotency_key=idempotency_key).first()
        if event is None:
            return None

        event.push_status = ACK_STATUS_MAP.get(ack_status, GtiEvent.PushStatus.SENT)
        event.next_attempt_after = None
        event.save(update_fields=['push_status', 'next_attempt_after', 'updated_at'])

        GtiWebhookConfirmation.objects.create(
            idempotency_key=idempotency_key,
            payload=payload or {},
            headers=headers or {},
            integration_key_hash=integration_key_hash,
            note=note,
        )

    logger.info(f"GTI event {idempotency_key} acknowledged as {event.push_status}")
    return event
