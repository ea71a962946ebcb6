"""
Celery tasks for GTI pipeline housekeeping.
"""
import logging
from celery import shared_task

from gti.services.tracker import get_ttl_days, purge_expired

logger = logging.getLogger(__name__)


@shared_task
def purge_expired_inbound_calls() -> int:
    """
    Delete inbound call records older than GTI_TTL_DAYS.

    Lookups already ignore expired records; this keeps the table bounded.

    Returns:
        Number of records deleted
    """
    deleted = purge_expired()
    logger.info(f"Purged {deleted} inbound call records older than {get_ttl_days()} days")
    return deleted
