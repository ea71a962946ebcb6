"""
Django admin configuration for gti app.

Audit models are read-only: rows are written by the pipeline and are the
record used for dialer reconciliation.
"""
from django.contrib import admin
from gti.models import GtiEvent, GtiWebhookConfirmation, InboundCallRecord, IntegrationLog, PostbackLog


class ReadOnlyAdmin(admin.ModelAdmin):
    """Disable manual creation and deletion of audit rows."""

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(InboundCallRecord)
class InboundCallRecordAdmin(ReadOnlyAdmin):
    """Admin interface for InboundCallRecord model."""

    list_display = ('primary_phone', 'call_uuid', 'received_at', 'consumed', 'send_count', 'last_sent_at')
    list_filter = ('consumed', 'received_at')
    search_fields = ('primary_phone', 'call_uuid')
    readonly_fields = ('primary_phone', 'call_uuid', 'received_at', 'last_sent_at', 'send_count', 'consumed')


@admin.register(PostbackLog)
class PostbackLogAdmin(ReadOnlyAdmin):
    """Admin interface for PostbackLog model."""

    list_display = ('id', 'lead', 'event_type', 'attempt', 'response_status', 'error', 'sent_at')
    list_filter = ('event_type', 'error', 'sent_at')
    search_fields = ('lead__id', 'call_uuid', 'primary_phone')
    readonly_fields = ('lead', 'call_uuid', 'primary_phone', 'event_type', 'payload', 'response_status',
                      'response_body', 'sent_at', 'trigger', 'error', 'error_message', 'attempt', 'created_at')

    fieldsets = (
        ('Delivery Information', {
            'fields': ('lead', 'event_type', 'call_uuid', 'primary_phone', 'attempt', 'trigger', 'sent_at')
        }),
        ('Payload', {
            'fields': ('payload',),
            'classes': ('collapse',)
        }),
        ('Response', {
            'fields': ('response_status', 'response_body', 'error', 'error_message')
        }),
    )


@admin.register(GtiEvent)
class GtiEventAdmin(admin.ModelAdmin):
    """Admin interface for GtiEvent model."""

    list_display = ('idempotency_key', 'event_type', 'organization_name_snapshot', 'event_timestamp', 'push_status')
    list_filter = ('push_status', 'event_type', 'organization_name_snapshot')
    search_fields = ('idempotency_key', 'lead__id')
    readonly_fields = ('idempotency_key', 'created_at', 'updated_at')


@admin.register(GtiWebhookConfirmation)
class GtiWebhookConfirmationAdmin(ReadOnlyAdmin):
    """Admin interface for GtiWebhookConfirmation model."""

    list_display = ('idempotency_key', 'note', 'created_at')
    search_fields = ('idempotency_key',)
    readonly_fields = ('idempotency_key', 'payload', 'headers', 'integration_key_hash', 'note', 'created_at')


@admin.register(IntegrationLog)
class IntegrationLogAdmin(ReadOnlyAdmin):
    """Admin interface for IntegrationLog model."""

    list_display = ('created_at', 'method', 'route', 'status_code', 'ip', 'success', 'message')
    list_filter = ('success', 'status_code', 'method')
    search_fields = ('route', 'ip', 'message')
    readonly_fields = ('route', 'method', 'status_code', 'ip', 'user_agent', 'headers', 'query', 'body',
                      'success', 'message', 'details', 'created_at')
