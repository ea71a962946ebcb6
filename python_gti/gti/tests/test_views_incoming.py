"""
Unit tests for the inbound call webhook.
"""
import pytest
import json
from unittest.mock import patch
from rest_framework.test import APIClient, APIRequestFactory

from gti.models import InboundCallRecord
from gti.throttling import IncomingCallThrottle
from gti.views import IncomingCallView
from leads.models import Lead


@pytest.mark.django_db
class TestIncomingCallView:
    """Tests for IncomingCallView."""

    def setup_method(self):
        """Set up test fixtures."""
        self.factory = APIRequestFactory()
        self.view = IncomingCallView.as_view()

    def post(self, payload):
        request = self.factory.post(
            '/api/gti/incoming',
            data=json.dumps(payload),
            content_type='application/json'
        )
        return self.view(request)

    def test_new_lead(self):
        """Test an unknown number is recorded and reported as a new lead."""
        response = self.post({'primary_number': '(555) 123-4567', 'call_uuid': 'call-1'})

        assert response.status_code == 200
        assert response.data == {'status': 'new lead'}

        record = InboundCallRecord.objects.get(primary_phone='+15551234567')
        assert record.call_uuid == 'call-1'
        assert record.consumed is False
        assert record.send_count == 0

    def test_duplicate_on_primary_phone(self):
        """Test a number matching a lead's phone is reported as duplicate."""
        Lead.objects.create(name='Existing', phone='+15551234567')

        response = self.post({'primary_number': '5551234567', 'call_uuid': 'call-1'})

        assert response.status_code == 200
        assert response.data == {'status': 'duplicate'}

    def test_duplicate_on_alternate_phone(self):
        """Test a number matching a lead's alternate phone is reported as duplicate."""
        Lead.objects.create(name='Existing', phone='5550000000', alternate_phone='+15551234567')

        response = self.post({'primary_number': '5551234567', 'call_uuid': 'call-1'})

        assert response.data == {'status': 'duplicate'}

    def test_repeat_call_overwrites_record(self):
        """Test a second call for the same number replaces the call_uuid."""
        self.post({'primary_number': '5551234567', 'call_uuid': 'call-1'})
        InboundCallRecord.objects.filter(primary_phone='+15551234567').update(consumed=True, send_count=2)

        self.post({'primary_number': '15551234567', 'call_uuid': 'call-2'})

        assert InboundCallRecord.objects.count() == 1
        record = InboundCallRecord.objects.get(primary_phone='+15551234567')
        assert record.call_uuid == 'call-2'
        assert record.consumed is False
        assert record.send_count == 2

    def test_missing_primary_number_returns_400(self):
        response = self.post({'call_uuid': 'call-1'})

        assert response.status_code == 400
        assert response.data['message'] == 'primary_number is required'
        assert InboundCallRecord.objects.count() == 0

    def test_missing_call_uuid_returns_400(self):
        response = self.post({'primary_number': '5551234567', 'call_uuid': '  '})

        assert response.status_code == 400
        assert response.data['message'] == 'call_uuid is required'
        assert InboundCallRecord.objects.count() == 0

    def test_unnormalizable_number_returns_400(self):
        """Test a number that is not a US phone is rejected without a record."""
        response = self.post({'primary_number': '12345', 'call_uuid': 'call-1'})

        assert response.status_code == 400
        assert response.data['message'] == 'primary_number is invalid'
        assert InboundCallRecord.objects.count() == 0

    def test_non_object_body_returns_400(self):
        response = self.post(['5551234567'])

        assert response.status_code == 400
        assert response.data['message'] == 'primary_number is required'

    def test_malformed_json_returns_400(self):
        request = self.factory.post(
            '/api/gti/incoming',
            data='{"primary_number": ',
            content_type='application/json'
        )

        response = self.view(request)

        assert response.status_code == 400
        assert response.data['message'] == 'Malformed JSON'

    @patch('gti.views.touch_arrival')
    def test_unexpected_error_returns_500(self, mock_touch):
        mock_touch.side_effect = RuntimeError('database down')

        response = self.post({'primary_number': '5551234567', 'call_uuid': 'call-1'})

        assert response.status_code == 500
        assert response.data['message'] == 'Internal server error'

    def test_rate_limit_returns_429(self):
        """Test the instance-wide limit rejects requests once spent."""
        with patch.object(IncomingCallThrottle, 'rate', '1/min', create=True):
            first = self.post({'primary_number': '5551234567', 'call_uuid': 'call-1'})
            second = self.post({'primary_number': '5551234568', 'call_uuid': 'call-2'})

        assert first.status_code == 200
        assert second.status_code == 429
        assert InboundCallRecord.objects.count() == 1


@pytest.mark.django_db
class TestGtiRoutes:
    """Tests for URL routing of the GTI endpoints."""

    def test_incoming_route(self):
        client = APIClient()

        response = client.post('/api/gti/incoming', {'primary_number': '5551234567', 'call_uuid': 'call-1'},
                               format='json')

        assert response.status_code == 200
        assert response.json() == {'status': 'new lead'}

    def test_export_route_requires_key(self, gti_settings):
        client = APIClient()

        response = client.get('/api/gti/export')

        assert response.status_code == 401
