"""
API views for the GTI call-integration pipeline.
"""
import logging
from django.db.models import Q
from django.utils.decorators import method_decorator
from django.views.decorators.csrf import csrf_exempt
from rest_framework import status
from rest_framework.exceptions import ParseError
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from gti.serializers import ExportQuerySerializer, ReceiveSerializer
from gti.services.events import CURSOR_TYPE, acknowledge_event, export_events
from gti.services.integration import (
    EXPORT_KEY_HEADER,
    check_integration_access,
    hash_integration_key,
    record_integration_log,
    sanitize_headers,
)
from gti.services.phone import build_lookup_variants, normalize_to_e164
from gti.services.tracker import touch_arrival
from gti.throttling import IncomingCallThrottle, IntegrationThrottle
from leads.models import Lead

logger = logging.getLogger(__name__)

STATUS_NEW_LEAD = 'new lead'
STATUS_DUPLICATE = 'duplicate'


@method_decorator(csrf_exempt, name='dispatch')
class IncomingCallView(APIView):
    """
    Webhook called by the GTI dialer when a call arrives.

    POST /api/gti/incoming
    - Records the call_uuid for the caller's normalized phone
    - Answers whether the number already belongs to a lead

    Unauthenticated: the dialer reaches it over a trusted network path.
    """

    authentication_classes = []
    permission_classes = [AllowAny]
    throttle_classes = [IncomingCallThrottle]

    def post(self, request):
        """
        Handle an inbound call notification.

        Returns:
            200 OK: {"status": "new lead"} or {"status": "duplicate"}
            400 Bad Request: Missing or invalid primary_number / call_uuid
            500 Internal Server Error: Unexpected error
        """
        try:
            payload = request.data if isinstance(request.data, dict) else {}

            primary_number = str(payload.get('primary_number') or '').strip()
            call_uuid = str(payload.get('call_uuid') or '').strip()

            if not primary_number:
                return Response({'message': 'primary_number is required'}, status=status.HTTP_400_BAD_REQUEST)

            if not call_uuid:
                return Response({'message': 'call_uuid is required'}, status=status.HTTP_400_BAD_REQUEST)

            normalized = normalize_to_e164(primary_number)
            if not normalized:
                logger.warning(f"Inbound call {call_uuid}: primary_number '{primary_number}' could not be normalized")
                return Response({'message': 'primary_number is invalid'}, status=status.HTTP_400_BAD_REQUEST)

            touch_arrival(normalized, call_uuid)

            variants = build_lookup_variants(primary_number, normalized)
            matches = Lead.objects.filter(
                Q(phone__in=variants) | Q(alternate_phone__in=variants)
            ).count()

            result = STATUS_DUPLICATE if matches else STATUS_NEW_LEAD
            logger.info(f"Inbound call {call_uuid} for {normalized}: {result}")
            return Response({'status': result}, status=status.HTTP_200_OK)

        except ParseError as e:
            logger.warning(f"Malformed JSON on GTI incoming webhook: {e}")
            return Response({'message': 'Malformed JSON'}, status=status.HTTP_400_BAD_REQUEST)
        except Exception as e:
            logger.error(f"GTI incoming webhook error: {e}", exc_info=True)
            return Response({'message': 'Internal server error'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


@method_decorator(csrf_exempt, name='dispatch')
class IntegrationView(APIView):
    """
    Base for the endpoints GTI calls with its shared secret.

    Subclasses check access first and log every outcome to IntegrationLog.
    """

    authentication_classes = []
    permission_classes = [AllowAny]
    throttle_classes = [IntegrationThrottle]

    def throttled(self, request, wait):
        record_integration_log(request, status.HTTP_429_TOO_MANY_REQUESTS, False, 'Rate limit exceeded')
        super().throttled(request, wait)

    def fail(self, request, status_code, message, log_message=None):
        record_integration_log(request, status_code, False, log_message or message)
        return Response({'success': False, 'message': message}, status=status_code)

    def validation_failed(self, request, errors):
        record_integration_log(request, status.HTTP_400_BAD_REQUEST, False, 'Validation failed', errors=errors)
        return Response(
            {'success': False, 'message': 'Validation failed', 'errors': errors},
            status=status.HTTP_400_BAD_REQUEST
        )


class ExportEventsView(IntegrationView):
    """
    GET /api/gti/export?cursor=<ms>&limit=<n>

    Pages through GTI events in event_timestamp order, strictly after the cursor.
    """

    def get(self, request):
        denied = check_integration_access(request)
        if denied:
            return self.fail(request, *denied)

        serializer = ExportQuerySerializer(data=request.query_params)
        if not serializer.is_valid():
            return self.validation_failed(request, serializer.errors)

        cursor = serializer.validated_data.get('cursor') or 0
        limit = serializer.validated_data.get('limit')

        try:
            events, next_cursor = export_events(cursor, limit)
            payload = [event.payload for event in events]

            record_integration_log(
                request, status.HTTP_200_OK, True, 'Export success',
                responseSample={'count': len(payload)}
            )
            return Response({
                'success': True,
                'count': len(payload),
                'events': payload,
                'nextCursor': next_cursor,
                'cursorType': CURSOR_TYPE,
            })

        except Exception as e:
            logger.error(f"GTI export error: {e}", exc_info=True)
            return self.fail(request, status.HTTP_500_INTERNAL_SERVER_ERROR,
                             'Failed to export GTI events', log_message=str(e))


class ReceiveAckView(IntegrationView):
    """
    POST /api/gti/receive

    GTI acknowledges an exported event by idempotency key. Repeat
    acknowledgments succeed and are each recorded.
    """

    def post(self, request):
        denied = check_integration_access(request)
        if denied:
            return self.fail(request, *denied)

        try:
            serializer = ReceiveSerializer(data=request.data)
        except ParseError as e:
            logger.warning(f"Malformed JSON on GTI receive: {e}")
            return self.fail(request, status.HTTP_400_BAD_REQUEST, 'Malformed JSON')

        if not serializer.is_valid():
            return self.validation_failed(request, serializer.errors)

        idempotency_key = serializer.validated_data['idempotencyKey']
        ack_status = serializer.validated_data.get('status') or 'confirmed'
        note = serializer.validated_data.get('note')

        try:
            event = acknowledge_event(
                idempotency_key,
                ack_status=ack_status,
                note=note,
                payload=dict(request.data),
                headers=sanitize_headers(request),
                integration_key_hash=hash_integration_key(request.headers.get(EXPORT_KEY_HEADER, '')),
            )

            if event is None:
                return self.fail(request, status.HTTP_404_NOT_FOUND, 'Event not found')

            record_integration_log(
                request, status.HTTP_200_OK, True, 'Event acknowledged',
                idempotencyKey=idempotency_key, status=ack_status
            )
            return Response({'success': True, 'message': 'Acknowledged'})

        except Exception as e:
            logger.error(f"GTI receive error: {e}", exc_info=True)
            return self.fail(request, status.HTTP_500_INTERNAL_SERVER_ERROR,
                             'Failed to record acknowledgment', log_message=str(e))
