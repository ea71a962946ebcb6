"""
Builders for the two GTI postback payload shapes.

Pure functions: given a lead's current field values, a call_uuid and the
current time, they return a fresh dict. Field names are fixed by GTI.
"""
from datetime import datetime, timezone as dt_timezone
from typing import Any, Optional

from gti.models import EventType

# Progress statuses that carry the requested loan amount. Every other
# status, including unknown ones, sends null.
LOAN_AMOUNT_STATUSES = frozenset({'REQUEST FOR LOAN', 'RFL'})
CALLBACK_STATUSES = frozenset({'CALLBACK', 'CALLBACK NEEDED'})
SALE_STATUSES = frozenset({'SALE', 'IMMEDIATE ENROLLMENT', 'SALE LONG PLAY'})


def format_timestamp(value: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision, e.g. 2024-05-01T12:00:00.000Z"""
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt_timezone.utc)
    return value.astimezone(dt_timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def apply_progress_rules(status: Any, requested_loan_amount: Any) -> Optional[Any]:
    """
    Decide the requested_loan_amount sent with a progress event.

    Only REQUEST FOR LOAN / RFL (case-insensitive, trimmed) pass the amount
    through; every other status yields None.
    """
    normalized = str(status or '').strip().upper()

    if not normalized:
        return None

    if normalized in CALLBACK_STATUSES:
        return None

    if normalized in SALE_STATUSES:
        return None

    if normalized in LOAN_AMOUNT_STATUSES:
        return requested_loan_amount

    return None


def _envelope(lead, call_uuid: str, event_type: str, now: Optional[datetime]) -> dict:
    return {
        'call_uuid': call_uuid,
        'full_name': lead.name or '',
        'redd_credit_score': lead.credit_score,
        'redd_debt_amount': lead.total_debt_amount,
        'redd_disposition': None,
        'redd_lead_progress_status': None,
        'requested_loan_amount': None,
        'event_type': event_type,
        'event_timestamp': format_timestamp(now or datetime.now(dt_timezone.utc)),
    }


def build_dispose_payload(lead, call_uuid: str, now: Optional[datetime] = None) -> dict:
    """Payload reporting the lead's disposition."""
    payload = _envelope(lead, call_uuid, EventType.DISPOSE.value, now)
    payload['redd_disposition'] = lead.disposition1 or None
    return payload


def build_progress_payload(lead, call_uuid: str, now: Optional[datetime] = None) -> dict:
    """Payload reporting the lead's progress status."""
    status = lead.lead_progress_status or None
    payload = _envelope(lead, call_uuid, EventType.PROGRESS.value, now)
    payload['redd_lead_progress_status'] = status
    payload['requested_loan_amount'] = apply_progress_rules(status, lead.requested_loan_amount)
    return payload


def build_payload(event_type: str, lead, call_uuid: str, now: Optional[datetime] = None) -> dict:
    """
    Build the payload for an event type.

    Raises:
        ValueError: If event_type is not dispose or progress
    """
    if event_type == EventType.DISPOSE:
        return build_dispose_payload(lead, call_uuid, now)
    if event_type == EventType.PROGRESS:
        return build_progress_payload(lead, call_uuid, now)
    raise ValueError(f"Unsupported GTI event type: {event_type}")
