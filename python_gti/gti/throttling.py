"""
Rate limits for the GTI endpoints.
"""
from rest_framework.throttling import SimpleRateThrottle

from gti.services.integration import get_request_ip


class IncomingCallThrottle(SimpleRateThrottle):
    """Instance-wide limit for the inbound call webhook, shared by all callers."""

    scope = 'gti_incoming'

    def get_cache_key(self, request, view):
        return self.cache_format % {'scope': self.scope, 'ident': 'all'}


class IntegrationThrottle(SimpleRateThrottle):
    """Per-caller limit shared by the export and receive endpoints."""

    scope = 'gti_integration'

    def get_cache_key(self, request, view):
        return self.cache_format % {'scope': self.scope, 'ident': get_request_ip(request)}
