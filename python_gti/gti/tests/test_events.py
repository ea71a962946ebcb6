"""
Unit tests for GTI event publication and acknowledgment.
"""
from datetime import datetime, timezone as dt_timezone

import pytest

from gti.models import GtiEvent, GtiWebhookConfirmation
from gti.services.events import (
    MAX_CURSOR,
    acknowledge_event,
    export_events,
    from_cursor,
    record_event,
    to_cursor,
)

T0 = datetime(2024, 5, 1, 12, 0, 0, 987654, tzinfo=dt_timezone.utc)


class TestCursor:
    """Tests for cursor conversion."""

    def test_epoch(self):
        assert to_cursor(datetime(1970, 1, 1, tzinfo=dt_timezone.utc)) == 0

    def test_sub_millisecond_part_is_dropped(self):
        assert from_cursor(to_cursor(T0)) == T0.replace(microsecond=987000)

    def test_max_cursor_converts_back(self):
        assert from_cursor(MAX_CURSOR).year == 9999


@pytest.mark.django_db
class TestRecordEvent:
    """Tests for record_event."""

    def test_creates_event_for_configured_org(self, gti_settings):
        event, created = record_event('evt-1', 'lead.updated', {'a': 1}, event_timestamp=T0)

        assert created is True
        assert event.organization_name_snapshot == 'GTI'
        assert event.push_status == GtiEvent.PushStatus.PENDING

    def test_timestamp_truncated_to_milliseconds(self, gti_settings):
        record_event('evt-1', 'lead.updated', {}, event_timestamp=T0)

        assert GtiEvent.objects.get().event_timestamp == T0.replace(microsecond=987000)

    def test_same_key_is_not_duplicated(self, gti_settings, lead):
        record_event('evt-1', 'lead.updated', {'v': 1}, lead=lead)
        event, created = record_event('evt-1', 'lead.updated', {'v': 2})

        assert created is False
        assert event.payload == {'v': 1}
        assert GtiEvent.objects.count() == 1


@pytest.mark.django_db
class TestExportEvents:
    """Tests for export_events."""

    def test_limit_is_clamped(self, gti_settings):
        gti_settings.GTI_EXPORT_MAX_LIMIT = 2
        for n in range(3):
            record_event(f'evt-{n}', 'lead.updated', {}, event_timestamp=T0.replace(second=n))

        events, _ = export_events(0, 10)

        assert len(events) == 2

    def test_empty_page_keeps_cursor(self, gti_settings):
        assert export_events(12345) == ([], 12345)


@pytest.mark.django_db
class TestAcknowledgeEvent:
    """Tests for acknowledge_event."""

    def test_unknown_key(self):
        assert acknowledge_event('missing') is None
        assert GtiWebhookConfirmation.objects.count() == 0

    def test_clears_next_attempt(self, gti_settings):
        event, _ = record_event('evt-1', 'lead.updated', {})
        GtiEvent.objects.filter(pk=event.pk).update(next_attempt_after=T0)

        acknowledged = acknowledge_event('evt-1', 'confirmed', note='done', integration_key_hash='abc')

        assert acknowledged.push_status == GtiEvent.PushStatus.CONFIRMED
        event.refresh_from_db()
        assert event.next_attempt_after is None
        confirmation = GtiWebhookConfirmation.objects.get()
        assert confirmation.note == 'done'
        assert confirmation.integration_key_hash == 'abc'
