"""
Data models for the GTI call-integration pipeline.
"""
from django.db import models
from django.utils import timezone


class EventType(models.TextChoices):
    DISPOSE = 'dispose', 'Dispose'
    PROGRESS = 'progress', 'Progress'


class InboundCallRecord(models.Model):
    """
    The most recent call the dialer reported for a phone number.

    One row per normalized phone; every new arrival overwrites it.
    Rows older than GTI_TTL_DAYS are treated as absent and purged.
    """

    primary_phone = models.CharField(max_length=20, unique=True)
    call_uuid = models.CharField(max_length=128, db_index=True)
    received_at = models.DateTimeField(default=timezone.now, db_index=True)
    last_sent_at = models.DateTimeField(null=True, blank=True)
    send_count = models.PositiveIntegerField(default=0)
    consumed = models.BooleanField(default=False)

    class Meta:
        ordering = ['-received_at']

    def __str__(self):
        return f"Call {self.call_uuid} for {self.primary_phone}"


class PostbackLog(models.Model):
    """
    Immutable audit record of one postback delivery attempt.

    Skipped postbacks (no correlation found) are recorded with attempt 0.
    """

    lead = models.ForeignKey(
        'leads.Lead',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='postback_logs'
    )
    call_uuid = models.CharField(max_length=128, null=True, blank=True)
    primary_phone = models.CharField(max_length=20, null=True, blank=True)
    event_type = models.CharField(max_length=20, choices=EventType.choices)
    payload = models.JSONField()
    response_status = models.PositiveIntegerField(null=True, blank=True)
    response_body = models.JSONField(null=True, blank=True)
    sent_at = models.DateTimeField(default=timezone.now)
    trigger = models.CharField(max_length=255, blank=True, default='')
    error = models.BooleanField(default=False)
    error_message = models.TextField(null=True, blank=True)
    attempt = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-sent_at']
        indexes = [
            models.Index(fields=['lead', 'sent_at'], name='gti_postback_lead_sent_idx'),
            models.Index(fields=['event_type', 'sent_at'], name='gti_postback_type_sent_idx'),
            models.Index(fields=['error', 'sent_at'], name='gti_postback_error_sent_idx'),
        ]

    def __str__(self):
        outcome = 'Failed' if self.error else 'Success'
        return f"{self.event_type} attempt {self.attempt} for Lead {self.lead_id} - {outcome}"


class GtiEvent(models.Model):
    """A business event exposed to GTI through the pull-based export API."""

    class PushStatus(models.TextChoices):
        PENDING = 'pending', 'Pending'
        SENT = 'sent', 'Sent'
        CONFIRMED = 'confirmed', 'Confirmed'
        SKIPPED = 'skipped', 'Skipped'

    idempotency_key = models.CharField(max_length=128, unique=True)
    organization_name_snapshot = models.CharField(max_length=255, db_index=True)
    lead = models.ForeignKey(
        'leads.Lead',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='gti_events'
    )
    event_type = models.CharField(max_length=50)
    event_timestamp = models.DateTimeField(default=timezone.now, db_index=True)
    payload = models.JSONField(default=dict)
    push_status = models.CharField(
        max_length=20,
        choices=PushStatus.choices,
        default=PushStatus.PENDING,
        db_index=True
    )
    next_attempt_after = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['event_timestamp', 'id']
        indexes = [
            models.Index(fields=['organization_name_snapshot', 'event_timestamp'], name='gti_event_org_ts_idx'),
        ]

    def save(self, *args, **kwargs):
        # Export cursors are millisecond epochs; keep stored timestamps on that grid.
        if self.event_timestamp is not None:
            self.event_timestamp = self.event_timestamp.replace(
                microsecond=self.event_timestamp.microsecond // 1000 * 1000
            )
        super().save(*args, **kwargs)

    def __str__(self):
        return f"Event {self.idempotency_key} - {self.push_status}"


class GtiWebhookConfirmation(models.Model):
    """One acknowledgment received on the receive endpoint; repeats included."""

    idempotency_key = models.CharField(max_length=128, db_index=True)
    payload = models.JSONField(default=dict)
    headers = models.JSONField(default=dict)
    integration_key_hash = models.CharField(max_length=64, blank=True, default='')
    note = models.CharField(max_length=500, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"Confirmation for {self.idempotency_key}"


class IntegrationLog(models.Model):
    """Audit trail of every call made to the export/receive API."""

    route = models.CharField(max_length=255)
    method = models.CharField(max_length=10)
    status_code = models.PositiveIntegerField()
    ip = models.CharField(max_length=64, blank=True, default='')
    user_agent = models.CharField(max_length=512, blank=True, default='')
    headers = models.JSONField(default=dict)
    query = models.JSONField(default=dict)
    body = models.JSONField(null=True, blank=True)
    success = models.BooleanField(default=False)
    message = models.CharField(max_length=500, blank=True, default='')
    details = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.method} {self.route} - {self.status_code}"
