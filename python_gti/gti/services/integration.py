"""
Access gate and audit logging for the GTI export/receive API.

GTI authenticates with a shared secret in the x-gti-export-key header;
an optional IP allowlist narrows access further. Every request, accepted
or rejected, is mirrored into IntegrationLog.
"""
import hashlib
import hmac
import logging
from typing import Any, List, Optional, Tuple

from django.conf import settings
from rest_framework import status
from rest_framework.exceptions import ParseError

from gti.models import IntegrationLog

logger = logging.getLogger(__name__)

EXPORT_KEY_HEADER = 'x-gti-export-key'
REDACTED = '***redacted***'


def get_request_ip(request) -> str:
    """Caller IP: first X-Forwarded-For hop, else REMOTE_ADDR, without the ::ffff: prefix."""
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR', '')
    if forwarded:
        ip = forwarded.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR') or 'unknown'
    return ip.replace('::ffff:', '')


def parse_whitelist() -> List[str]:
    """GTI_IP_WHITELIST as a list; accepts a comma separated string or a list."""
    raw = getattr(settings, 'GTI_IP_WHITELIST', '') or ''
    values = raw.split(',') if isinstance(raw, str) else raw
    return [value.strip() for value in values if value and value.strip()]


def sanitize_headers(request) -> dict:
    """Request headers with lowercase names and the shared secret redacted."""
    headers = {name.lower(): value for name, value in request.headers.items()}
    if headers.get(EXPORT_KEY_HEADER):
        headers[EXPORT_KEY_HEADER] = REDACTED
    return headers


def hash_integration_key(key: str) -> str:
    return hashlib.sha256(key.encode('utf-8')).hexdigest()


def check_integration_access(request) -> Optional[Tuple[int, str]]:
    """
    Validate the shared secret and caller IP.

    Returns:
        None when access is granted, else (status_code, message)
    """
    expected_key = getattr(settings, 'GTI_EXPORT_KEY', None)
    provided_key = request.headers.get(EXPORT_KEY_HEADER)

    if not expected_key:
        return status.HTTP_503_SERVICE_UNAVAILABLE, 'GTI integration is not configured'

    if not provided_key or not hmac.compare_digest(provided_key.encode('utf-8'), expected_key.encode('utf-8')):
        return status.HTTP_401_UNAUTHORIZED, 'Unauthorized'

    whitelist = parse_whitelist()
    ip = get_request_ip(request)
    if whitelist and ip not in whitelist:
        return status.HTTP_403_FORBIDDEN, 'IP not allowed'

    return None


def _request_body(request) -> Any:
    if request.method in ('GET', 'HEAD'):
        return None
    try:
        return request.data
    except ParseError:
        # The view reports the parse error itself
        return None


def record_integration_log(request, status_code: int, success: bool, message: str, **details) -> None:
    """
    Mirror one API call into IntegrationLog.

    Failures are logged and swallowed so they never change the response.
    """
    try:
        body = _request_body(request)
        IntegrationLog.objects.create(
            route=request.get_full_path()[:255],
            method=request.method,
            status_code=status_code,
            ip=get_request_ip(request)[:64],
            user_agent=request.headers.get('user-agent', 'unknown')[:512],
            headers=sanitize_headers(request),
            query=dict(request.GET.items()),
            body=dict(body) if hasattr(body, 'items') else body,
            success=success,
            message=str(message)[:500],
            details=details,
        )
    except Exception as e:
        logger.error(f"Failed to record GTI integration log: {e}")
