"""
Lead model, as seen by the GTI call-integration pipeline.

Only the fields the pipeline reads (business state) and the GTI mirror
fields it writes are declared here; the CRM's CRUD layer owns the rest.
"""
from django.db import models


class Lead(models.Model):
    """
    A CRM sales lead.

    The ``gti_*`` fields are a cached denormalization of the dialer
    correlation and delivery history, written only by the GTI pipeline.
    """

    name = models.CharField(max_length=255, blank=True, default='')
    phone = models.CharField(max_length=32, blank=True, default='', db_index=True)
    alternate_phone = models.CharField(max_length=32, blank=True, default='', db_index=True)

    credit_score = models.IntegerField(null=True, blank=True)
    total_debt_amount = models.FloatField(null=True, blank=True)
    requested_loan_amount = models.FloatField(null=True, blank=True)
    disposition1 = models.CharField(max_length=100, blank=True, default='')
    lead_progress_status = models.CharField(max_length=100, blank=True, default='')

    gti_primary_phone = models.CharField(max_length=20, null=True, blank=True)
    gti_call_uuid = models.CharField(max_length=128, null=True, blank=True)
    gti_last_postback = models.DateTimeField(null=True, blank=True)
    # Append-only; entries mirror PostbackLog rows
    gti_postback_history = models.JSONField(default=list, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"Lead {self.id} - {self.name or self.phone}"
