"""
Entry point used by the lead CRUD layer when a lead's disposition or
progress status changes.
"""
import logging
from typing import Optional

from django.apps import apps

from gti.models import EventType, InboundCallRecord
from gti.services.audit import record_skipped_postback
from gti.services.dispatcher import PostbackDispatcher, PostbackJob
from gti.services.payloads import build_payload
from gti.services.phone import normalize_to_e164
from gti.services.tracker import find_latest_call, mark_consumed
from leads.models import Lead

logger = logging.getLogger(__name__)

SUPPORTED_EVENT_TYPES = frozenset(EventType.values)

NO_INBOUND_CALL = 'No GTI inbound call record found for lead'
PHONE_NOT_NORMALIZED = 'Unable to normalize lead phone number for GTI postback'


def get_dispatcher() -> PostbackDispatcher:
    """The process-wide dispatcher created when the gti app is ready."""
    return apps.get_app_config('gti').dispatcher


def _lead_phone(lead: Lead) -> str:
    return normalize_to_e164(lead.gti_primary_phone or lead.phone or '')


def sync_lead_with_inbound_call(lead: Lead) -> Optional[InboundCallRecord]:
    """
    Find the inbound call matching a lead's phone.

    Side effects: refreshes the lead's cached gti_primary_phone and
    gti_call_uuid when stale, and marks the call consumed.

    Returns:
        The most recent unexpired InboundCallRecord, or None
    """
    if lead is None:
        return None

    candidate_phone = _lead_phone(lead)
    if not candidate_phone:
        return None

    inbound = find_latest_call(candidate_phone)
    if inbound is None:
        return None

    updates = {}
    if lead.gti_primary_phone != candidate_phone:
        updates['gti_primary_phone'] = candidate_phone
    if lead.gti_call_uuid != inbound.call_uuid:
        updates['gti_call_uuid'] = inbound.call_uuid

    if updates:
        try:
            Lead.objects.filter(pk=lead.pk).update(**updates)
            for field, value in updates.items():
                setattr(lead, field, value)
            logger.debug(f"Lead {lead.pk} synced with inbound call {inbound.call_uuid}")
        except Exception as e:
            logger.error(f"Failed to sync lead {lead.pk} with GTI inbound call: {e}")

    mark_consumed(inbound)
    return inbound


def send_gti_postback(lead: Lead, event_type: str, trigger: str = '',
                      inbound_call: Optional[InboundCallRecord] = None,
                      dispatcher: Optional[PostbackDispatcher] = None) -> Optional[PostbackJob]:
    """
    Queue a dispose or progress postback for a lead.

    Never raises for delivery problems: leads without a known call, or
    with a phone that cannot be normalized, get a skipped audit entry
    instead of a queued job.

    Args:
        lead: The lead whose state changed
        event_type: 'dispose' or 'progress'
        trigger: Free-text description of what caused the send
        inbound_call: Known call record; looked up from the lead's phone if omitted
        dispatcher: Queue to use; the process-wide one if omitted

    Returns:
        The queued job, or None if nothing was queued
    """
    if not lead or not event_type:
        return None

    event_type = str(event_type).lower()
    if event_type not in SUPPORTED_EVENT_TYPES:
        logger.warning(f"GTI postback skipped due to unsupported event type: {event_type}")
        return None

    inbound = inbound_call or sync_lead_with_inbound_call(lead)
    if inbound is None:
        record_skipped_postback(
            lead.pk,
            event_type,
            NO_INBOUND_CALL,
            trigger,
            {'note': 'postback skipped due to missing call_uuid'},
        )
        return None

    primary_phone = _lead_phone(lead)
    if not primary_phone:
        record_skipped_postback(
            lead.pk,
            event_type,
            PHONE_NOT_NORMALIZED,
            trigger,
            {'note': 'postback skipped due to phone normalization failure'},
        )
        return None

    job = PostbackJob(
        lead_id=lead.pk,
        event_type=event_type,
        call_uuid=inbound.call_uuid,
        primary_phone=primary_phone,
        payload=build_payload(event_type, lead, inbound.call_uuid),
        attempt=1,
        trigger=trigger or '',
    )
    (dispatcher or get_dispatcher()).enqueue(job)
    logger.info(f"GTI {event_type} postback queued for lead {lead.pk} (call_uuid={inbound.call_uuid})")
    return job
