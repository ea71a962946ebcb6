"""
HTTP client for GTI postbacks.
"""
import logging
import json
from typing import Any
from urllib.parse import quote

import httpx
from django.conf import settings

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0


class PostbackConfigurationError(Exception):
    """Raised when GTI_POSTBACK_URL or GTI_AUTH_HEADER is not configured."""
    pass


def build_postback_url(base_url: str, call_uuid: str) -> str:
    """Join the configured base URL and the url-encoded call_uuid."""
    return f"{base_url.rstrip('/')}/{quote(str(call_uuid), safe='')}"


def parse_response_body(response: httpx.Response) -> Any:
    """Return the response body as JSON if possible, else as text; None when empty."""
    raw = response.text
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def send_postback(call_uuid: str, payload: dict) -> httpx.Response:
    """
    POST a payload to GTI for a call.

    Args:
        call_uuid: Correlation id the postback refers to
        payload: Dispose or progress payload

    Returns:
        HTTP response from GTI

    Raises:
        PostbackConfigurationError: If the URL or auth header is missing
        httpx.HTTPError: On network/timeout errors
    """
    base_url = (getattr(settings, 'GTI_POSTBACK_URL', '') or '').strip()
    auth_header = (getattr(settings, 'GTI_AUTH_HEADER', '') or '').strip()

    if not base_url or not auth_header:
        raise PostbackConfigurationError('GTI_POSTBACK_URL or GTI_AUTH_HEADER is not configured')

    url = build_postback_url(base_url, call_uuid)
    headers = {
        'Authorization': auth_header,
        'Content-Type': 'application/json',
    }
    timeout = getattr(settings, 'GTI_POSTBACK_TIMEOUT', DEFAULT_TIMEOUT)

    logger.info(f"Sending GTI postback: {url}")
    logger.debug(f"Payload: {payload}")

    try:
        response = httpx.post(
            url,
            json=payload,
            headers=headers,
            timeout=timeout
        )

        logger.info(f"GTI postback response: {response.status_code}")
        logger.debug("GTI postback response body: %s", response.text)

        return response

    except httpx.TimeoutException as e:
        logger.error(f"Timeout sending GTI postback: {e}")
        raise
    except httpx.ConnectError as e:
        logger.error(f"Connection error sending GTI postback: {e}")
        raise
    except httpx.HTTPError as e:
        logger.error(f"HTTP error sending GTI postback: {e}")
        raise
