"""
URL configuration for gti app.
"""
from django.urls import path
from gti.views import ExportEventsView, IncomingCallView, ReceiveAckView

urlpatterns = [
    path('incoming', IncomingCallView.as_view(), name='gti-incoming'),
    path('export', ExportEventsView.as_view(), name='gti-export'),
    path('receive', ReceiveAckView.as_view(), name='gti-receive'),
]
