import os
import sys
from unittest.mock import Mock

import pytest

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'gti_gateway.settings')
os.environ.setdefault('USE_SQLITE_FOR_TESTS', 'true')


class InlineScheduler:
    """Stands in for the retry timer: records each delay and fires immediately."""

    def __init__(self):
        self.delays = []

    def __call__(self, delay, callback):
        self.delays.append(delay)
        callback()


@pytest.fixture(autouse=True)
def clear_rate_limits():
    """Throttle counters live in the cache; start every test from zero."""
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def gti_settings(settings):
    """Configure postback delivery and the integration API."""
    settings.GTI_POSTBACK_URL = 'https://gti.example.com/postback'
    settings.GTI_AUTH_HEADER = 'Bearer FakeGtiToken'
    settings.GTI_POSTBACK_TIMEOUT = 5.0
    settings.GTI_EXPORT_KEY = 'test-export-key'
    settings.GTI_IP_WHITELIST = ''
    settings.GTI_ORG_NAME = 'GTI'
    settings.GTI_TTL_DAYS = '30'
    return settings


@pytest.fixture
def scheduler():
    return InlineScheduler()


@pytest.fixture
def dispatcher(scheduler):
    """A dispatcher that drains on the calling thread and retries without waiting."""
    from gti.services.dispatcher import PostbackDispatcher
    return PostbackDispatcher(start_worker=lambda drain: drain(), schedule=scheduler)


@pytest.fixture
def lead_data():
    """Return field values for a lead that already spoke to the dialer."""
    return {
        'name': 'Jane Doe',
        'phone': '(555) 123-4567',
        'credit_score': 680,
        'total_debt_amount': 25000.0,
        'requested_loan_amount': 15000.0,
        'disposition1': 'Interested',
        'lead_progress_status': 'Request for Loan',
    }


@pytest.fixture
def lead(db, lead_data):
    from leads.models import Lead
    return Lead.objects.create(**lead_data)


@pytest.fixture
def inbound_call(db):
    """A recorded call for the lead fixture's phone."""
    from gti.services.tracker import touch_arrival
    return touch_arrival('+15551234567', 'call-uuid-123')


@pytest.fixture
def mock_response():
    """Factory for mock httpx responses."""
    def factory(status_code=200, text='{"success": true}'):
        response = Mock()
        response.status_code = status_code
        response.text = text
        return response
    return factory
