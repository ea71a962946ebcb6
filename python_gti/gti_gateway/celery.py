"""
Celery configuration for the GTI gateway.

Runs the periodic housekeeping for the call-integration pipeline
(expiry of inbound call correlation records).
"""
import os
from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'gti_gateway.settings')

app = Celery('gti_gateway')
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()
