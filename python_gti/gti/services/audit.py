"""
Audit trail for GTI postbacks.

Every attempt, successful, failed or skipped, writes one PostbackLog row
and appends one entry to the lead's gti_postback_history. The two writes
are independent: either may fail without preventing the other, and
neither failure is raised to the caller.
"""
import logging
from typing import Any, Optional

from django.db import transaction
from django.utils import timezone

from gti.models import PostbackLog
from leads.models import Lead

logger = logging.getLogger(__name__)

SKIPPED_ATTEMPT = 0


def _append_lead_history(lead_id, entry: dict, updates: Optional[dict] = None) -> None:
    with transaction.atomic():
        lead = Lead.objects.select_for_update().get(pk=lead_id)
        history = list(lead.gti_postback_history or [])
        history.append(entry)
        lead.gti_postback_history = history
        fields = ['gti_postback_history', 'updated_at']
        for field, value in (updates or {}).items():
            setattr(lead, field, value)
            fields.append(field)
        lead.save(update_fields=fields)


def persist_attempt(job, success: bool, status: Optional[int], body: Any,
                    error_message: Optional[str] = None) -> None:
    """
    Record the outcome of one delivery attempt.

    Args:
        job: The PostbackJob that was attempted
        success: Whether GTI answered 2xx
        status: HTTP status, None when no response was received
        body: Parsed response body, or an error description
        error_message: Failure reason, None on success
    """
    sent_at = timezone.now()

    try:
        with transaction.atomic():
            PostbackLog.objects.create(
                lead_id=job.lead_id,
                call_uuid=job.call_uuid,
                primary_phone=job.primary_phone,
                event_type=job.event_type,
                payload=job.payload,
                response_status=status,
                response_body=body,
                sent_at=sent_at,
                trigger=job.trigger,
                error=not success,
                error_message=error_message,
                attempt=job.attempt,
            )
    except Exception as e:
        logger.error(f"Failed to persist GTI postback log for lead {job.lead_id}: {e}", exc_info=True)

    history_entry = {
        'eventType': job.event_type,
        'payload': job.payload,
        'responseStatus': status,
        'responseBody': body,
        'sentAt': sent_at.isoformat(),
        'success': success,
        'attempt': job.attempt,
        'errorMessage': error_message,
    }
    updates = {
        'gti_call_uuid': job.call_uuid,
        'gti_primary_phone': job.primary_phone,
    }
    if success:
        updates['gti_last_postback'] = sent_at

    try:
        _append_lead_history(job.lead_id, history_entry, updates)
    except Exception as e:
        logger.error(f"Failed to update GTI history for lead {job.lead_id}: {e}")


def record_skipped_postback(lead_id, event_type: str, reason: str, trigger: str = '',
                            payload: Optional[dict] = None) -> None:
    """
    Record a postback that was never attempted (no call correlation).

    Skipped entries carry attempt 0, no call_uuid and no response status.
    """
    sent_at = timezone.now()
    payload = payload or {}
    logger.warning(f"GTI {event_type} postback skipped for lead {lead_id}: {reason}")

    try:
        with transaction.atomic():
            PostbackLog.objects.create(
                lead_id=lead_id,
                call_uuid=None,
                primary_phone=None,
                event_type=event_type,
                payload=payload,
                response_status=None,
                response_body={'message': reason},
                sent_at=sent_at,
                trigger=trigger,
                error=True,
                error_message=reason,
                attempt=SKIPPED_ATTEMPT,
            )
    except Exception as e:
        logger.error(f"Failed to persist skipped GTI postback log for lead {lead_id}: {e}", exc_info=True)

    try:
        _append_lead_history(lead_id, {
            'eventType': event_type,
            'payload': payload,
            'responseStatus': None,
            'responseBody': {'message': reason},
            'sentAt': sent_at.isoformat(),
            'success': False,
            'attempt': SKIPPED_ATTEMPT,
            'errorMessage': reason,
        })
    except Exception as e:
        logger.error(f"Failed to update GTI history for skipped postback on lead {lead_id}: {e}")
