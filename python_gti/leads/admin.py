"""
Django admin configuration for leads app.
"""
from django.contrib import admin
from leads.models import Lead


@admin.register(Lead)
class LeadAdmin(admin.ModelAdmin):
    """Admin interface for Lead, with the GTI mirror shown read-only."""

    list_display = ('id', 'name', 'phone', 'disposition1', 'lead_progress_status', 'gti_last_postback')
    list_filter = ('disposition1', 'lead_progress_status')
    search_fields = ('id', 'name', 'phone', 'alternate_phone', 'gti_call_uuid')
    readonly_fields = ('id', 'created_at', 'updated_at', 'gti_primary_phone', 'gti_call_uuid',
                      'gti_last_postback', 'gti_postback_history')

    fieldsets = (
        ('Lead', {
            'fields': ('id', 'name', 'phone', 'alternate_phone')
        }),
        ('Business state', {
            'fields': ('credit_score', 'total_debt_amount', 'requested_loan_amount',
                       'disposition1', 'lead_progress_status')
        }),
        ('GTI', {
            'fields': ('gti_primary_phone', 'gti_call_uuid', 'gti_last_postback', 'gti_postback_history'),
            'classes': ('collapse',)
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at')
        }),
    )
