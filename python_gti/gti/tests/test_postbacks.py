"""
Unit tests for the postback entry point used by the lead CRUD layer.
"""
import pytest
from unittest.mock import patch, Mock

from gti.models import InboundCallRecord, PostbackLog
from gti.services.postbacks import (
    NO_INBOUND_CALL,
    PHONE_NOT_NORMALIZED,
    send_gti_postback,
    sync_lead_with_inbound_call,
)
from gti.services.tracker import touch_arrival
from leads.models import Lead


@pytest.mark.django_db
class TestSyncLeadWithInboundCall:
    """Tests for sync_lead_with_inbound_call."""

    def test_backfills_lead_and_consumes_call(self, lead, inbound_call, gti_settings):
        """Test the lead mirror fields are filled from the matching call."""
        inbound = sync_lead_with_inbound_call(lead)

        assert inbound.call_uuid == 'call-uuid-123'
        lead.refresh_from_db()
        assert lead.gti_primary_phone == '+15551234567'
        assert lead.gti_call_uuid == 'call-uuid-123'
        assert InboundCallRecord.objects.get().consumed is True

    def test_prefers_cached_gti_phone(self, lead, gti_settings):
        Lead.objects.filter(pk=lead.pk).update(gti_primary_phone='+15559998888')
        lead.refresh_from_db()
        touch_arrival('+15559998888', 'call-cached')

        assert sync_lead_with_inbound_call(lead).call_uuid == 'call-cached'

    def test_no_matching_call(self, lead, gti_settings):
        assert sync_lead_with_inbound_call(lead) is None
        lead.refresh_from_db()
        assert lead.gti_call_uuid is None

    def test_unnormalizable_phone(self, db, gti_settings):
        lead = Lead.objects.create(name='No Phone', phone='n/a')

        assert sync_lead_with_inbound_call(lead) is None

    def test_none_lead(self):
        assert sync_lead_with_inbound_call(None) is None


@pytest.mark.django_db
class TestSendGtiPostback:
    """Tests for send_gti_postback."""

    @patch('gti.services.postback_client.httpx.post')
    def test_queues_and_delivers(self, mock_post, lead, inbound_call, dispatcher, gti_settings,
                                 mock_response):
        """Test a lead with a known call gets a dispose postback delivered."""
        mock_post.return_value = mock_response(200, '{"ok": true}')

        job = send_gti_postback(lead, 'dispose', trigger='disposition changed', dispatcher=dispatcher)

        assert job.call_uuid == 'call-uuid-123'
        assert job.primary_phone == '+15551234567'
        assert job.attempt == 1
        assert job.payload['redd_disposition'] == 'Interested'
        mock_post.assert_called_once()
        assert mock_post.call_args.args[0] == 'https://gti.example.com/postback/call-uuid-123'

        log = PostbackLog.objects.get(lead=lead)
        assert log.error is False
        assert log.trigger == 'disposition changed'
        assert InboundCallRecord.objects.get().send_count == 1

    @patch('gti.services.postback_client.httpx.post')
    def test_event_type_is_case_insensitive(self, mock_post, lead, inbound_call, dispatcher,
                                            gti_settings, mock_response):
        mock_post.return_value = mock_response(200, '')

        job = send_gti_postback(lead, 'PROGRESS', dispatcher=dispatcher)

        assert job.event_type == 'progress'
        assert job.payload['requested_loan_amount'] == 15000.0

    def test_uses_given_inbound_call(self, lead, gti_settings):
        inbound = touch_arrival('+15551234567', 'call-explicit')
        dispatcher = Mock()

        job = send_gti_postback(lead, 'dispose', inbound_call=inbound, dispatcher=dispatcher)

        assert job.call_uuid == 'call-explicit'
        dispatcher.enqueue.assert_called_once_with(job)

    @patch('gti.services.postback_client.httpx.post')
    def test_skipped_without_inbound_call(self, mock_post, lead, dispatcher, gti_settings):
        """Test a lead with no known call gets one error row and no HTTP call."""
        job = send_gti_postback(lead, 'dispose', trigger='disposition changed', dispatcher=dispatcher)

        assert job is None
        mock_post.assert_not_called()

        log = PostbackLog.objects.get(lead=lead)
        assert log.error is True
        assert log.response_status is None
        assert log.call_uuid is None
        assert log.attempt == 0
        assert log.error_message == NO_INBOUND_CALL
        assert log.trigger == 'disposition changed'

        lead.refresh_from_db()
        assert len(lead.gti_postback_history) == 1
        assert lead.gti_postback_history[0]['attempt'] == 0
        assert lead.gti_postback_history[0]['success'] is False

    @patch('gti.services.postbacks.sync_lead_with_inbound_call')
    def test_skipped_when_phone_cannot_be_normalized(self, mock_sync, db, gti_settings):
        lead = Lead.objects.create(name='Bad Phone', phone='123')
        mock_sync.return_value = InboundCallRecord(primary_phone='+15551234567', call_uuid='call-1')
        dispatcher = Mock()

        assert send_gti_postback(lead, 'progress', dispatcher=dispatcher) is None

        dispatcher.enqueue.assert_not_called()
        assert PostbackLog.objects.get(lead=lead).error_message == PHONE_NOT_NORMALIZED

    @pytest.mark.parametrize('event_type', ['transfer', '', None])
    def test_unsupported_event_type_does_nothing(self, lead, inbound_call, event_type):
        """Test an unknown event type is dropped without a log row."""
        dispatcher = Mock()

        assert send_gti_postback(lead, event_type, dispatcher=dispatcher) is None

        dispatcher.enqueue.assert_not_called()
        assert PostbackLog.objects.count() == 0
        assert InboundCallRecord.objects.get().consumed is False

    def test_none_lead_does_nothing(self, db):
        assert send_gti_postback(None, 'dispose', dispatcher=Mock()) is None

    def test_defaults_to_process_dispatcher(self, lead, inbound_call, gti_settings):
        dispatcher = Mock()

        with patch('gti.services.postbacks.get_dispatcher', return_value=dispatcher):
            job = send_gti_postback(lead, 'dispose')

        dispatcher.enqueue.assert_called_once_with(job)
