"""
Contact Views

Public endpoint for purchase offer submissions.
"""
import logging

from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import AllowAny
from rest_framework.exceptions import ParseError

from .exceptions import ChallengeVerificationError, SubmissionValidationError
from .serializers import ContactSubmissionSerializer
from .services import (
    CHALLENGE_FAILED_MESSAGE,
    REQUIRED_FIELDS_MESSAGE,
    ContactRelayService,
)

logger = logging.getLogger(__name__)


def get_client_ip(request):
    """Get client IP address from request."""
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR')
    return ip


def rejection_for(errors):
    """Map serializer errors onto the two client-facing rejections."""
    if 'challengeToken' in errors and len(errors) == 1:
        # An unusable token can never pass verification
        return ChallengeVerificationError(CHALLENGE_FAILED_MESSAGE)
    return SubmissionValidationError(REQUIRED_FIELDS_MESSAGE)


class ContactRelayView(APIView):
    """
    Submit an offer for the domain.

    POST /api/contact
    {
        "name": "Jane Doe",
        "email": "jane@example.com",
        "phone": "+49 30 1234567",  // optional
        "offer": "$5000",
        "message": "...",  // optional
        "locale": "de",  // optional, defaults to "en"
        "challengeToken": "cloudflare-turnstile-token"
    }

    Responds 200 with {"success": true, "confirmationSent": bool} once the
    offer passes validation and spam protection, whether or not any email
    went out. Missing fields and failed spam checks return 400; an empty or
    unparseable body returns 500.
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    def get_relay_service(self):
        return ContactRelayService()

    def post(self, request):
        try:
            if not request.body.strip():
                raise ParseError('Empty request body')

            serializer = ContactSubmissionSerializer(data=request.data)

            if not serializer.is_valid():
                logger.info(f"Rejected offer submission: {serializer.errors}")
                raise rejection_for(serializer.errors)

            result = self.get_relay_service().relay(
                serializer.to_payload(),
                user_ip=get_client_ip(request)
            )

        except (SubmissionValidationError, ChallengeVerificationError) as e:
            return Response(
                {'error': e.message},
                status=status.HTTP_400_BAD_REQUEST
            )

        except Exception:
            logger.exception("Contact form error")
            return Response(
                {'error': 'Internal server error'},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        return Response(
            {
                'success': True,
                'confirmationSent': result.confirmation_sent,
            },
            status=status.HTTP_200_OK
        )
