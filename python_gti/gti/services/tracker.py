"""
Inbound call tracker: short-lived memory of which call the dialer last
reported for a phone number.

Lifecycle per phone: (none) -> recorded -> consumed. Expired records are
indistinguishable from (none): lookups ignore them and a periodic task
deletes them.
"""
import logging
from datetime import timedelta
from typing import Optional

from django.conf import settings
from django.db.models import F
from django.utils import timezone

from gti.models import InboundCallRecord

logger = logging.getLogger(__name__)

DEFAULT_TTL_DAYS = 30


def get_ttl_days() -> int:
    """GTI_TTL_DAYS as a positive int; anything else falls back to 30."""
    raw = getattr(settings, 'GTI_TTL_DAYS', DEFAULT_TTL_DAYS)
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return DEFAULT_TTL_DAYS
    return value if value > 0 else DEFAULT_TTL_DAYS


def expiry_cutoff():
    """Records received before this instant are expired."""
    return timezone.now() - timedelta(days=get_ttl_days())


def touch_arrival(primary_phone: str, call_uuid: str) -> InboundCallRecord:
    """
    Record a call arrival for a normalized phone.

    Implemented as a single INSERT ... ON CONFLICT DO UPDATE so concurrent
    webhook deliveries for the same number cannot lose updates. An existing
    record gets the new call_uuid and received_at and is un-consumed;
    send_count is only set on insert.

    Args:
        primary_phone: Phone already normalized to E.164
        call_uuid: Correlation id supplied by the dialer

    Returns:
        The stored record
    """
    InboundCallRecord.objects.bulk_create(
        [
            InboundCallRecord(
                primary_phone=primary_phone,
                call_uuid=call_uuid,
                received_at=timezone.now(),
                consumed=False,
                send_count=0,
            )
        ],
        update_conflicts=True,
        unique_fields=['primary_phone'],
        update_fields=['call_uuid', 'received_at', 'consumed'],
    )
    logger.info(f"Inbound call {call_uuid} recorded for {primary_phone}")
    return InboundCallRecord.objects.get(primary_phone=primary_phone)


def find_latest_call(primary_phone: str) -> Optional[InboundCallRecord]:
    """Most recent unexpired call for a phone, or None."""
    if not primary_phone:
        return None
    return (
        InboundCallRecord.objects
        .filter(primary_phone=primary_phone, received_at__gte=expiry_cutoff())
        .order_by('-received_at')
        .first()
    )


def mark_consumed(record: InboundCallRecord) -> None:
    """Flag a record as matched to an outgoing postback."""
    if record.consumed:
        return
    InboundCallRecord.objects.filter(pk=record.pk).update(consumed=True)
    record.consumed = True


def record_delivery(primary_phone: str, call_uuid: str) -> int:
    """
    Register a successful postback for a (phone, call) pair.

    A no-op if the phone has since received a different call.

    Returns:
        Number of records updated
    """
    updated = InboundCallRecord.objects.filter(
        primary_phone=primary_phone,
        call_uuid=call_uuid,
    ).update(
        send_count=F('send_count') + 1,
        last_sent_at=timezone.now(),
        consumed=True,
    )
    if not updated:
        logger.debug(f"No inbound call record to update for {primary_phone} / {call_uuid}")
    return updated


def purge_expired() -> int:
    """Delete records older than the TTL. Returns the number deleted."""
    deleted, _ = InboundCallRecord.objects.filter(received_at__lt=expiry_cutoff()).delete()
    return deleted
