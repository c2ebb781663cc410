"""
Offer Relay Service

Validates an offer, checks the spam protection token, then emails the
domain owner and sends the submitter a confirmation.

Only validation and challenge failures reach the caller. Email delivery
is best effort: a failed owner notification is recorded in the
'contact.inquiries' log and the submission still counts as received.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from core.locales import DEFAULT_LOCALE
from core.site_config import get_site_config
from core.turnstile_service import (
    TurnstileService,
    TurnstileVerificationError,
    is_bypass_token,
)
from .email_providers import EmailDispatcher, build_providers
from .emails import compose_confirmation, compose_owner_notification
from .exceptions import (
    ChallengeVerificationError,
    DeliveryError,
    SubmissionValidationError,
)

logger = logging.getLogger(__name__)
inquiry_logger = logging.getLogger('contact.inquiries')

REQUIRED_FIELDS_MESSAGE = 'Name, email, and offer are required'
CHALLENGE_REQUIRED_MESSAGE = 'Please complete the spam protection challenge'
CHALLENGE_FAILED_MESSAGE = 'Spam protection verification failed'


@dataclass
class SubmissionPayload:
    name: str = ''
    email: str = ''
    offer: str = ''
    phone: str = ''
    message: str = ''
    locale: str = DEFAULT_LOCALE
    challenge_token: Optional[str] = None


@dataclass
class RelayResult:
    owner_notified: bool
    confirmation_sent: bool


class ContactRelayService:
    """
    Relay a purchase offer to the domain owner.

    Usage:
        service = ContactRelayService(get_site_config())
        result = service.relay(payload, user_ip='203.0.113.7')
    """

    def __init__(self, config=None, turnstile=None, dispatcher=None):
        self.config = config or get_site_config()
        self.turnstile = turnstile or TurnstileService(
            secret_key=self.config.turnstile_secret_key
        )
        self.dispatcher = dispatcher or EmailDispatcher(build_providers(self.config))

    def validate(self, payload: SubmissionPayload):
        if not (payload.name and payload.email and payload.offer):
            raise SubmissionValidationError(REQUIRED_FIELDS_MESSAGE)

        if not payload.challenge_token:
            raise SubmissionValidationError(CHALLENGE_REQUIRED_MESSAGE)

    def verify_challenge(self, token, user_ip=None):
        """
        Check the Turnstile token unless the form sent a bypass sentinel.

        Raises:
            ChallengeVerificationError: Token rejected or not verifiable
        """
        if is_bypass_token(token):
            logger.info(f"Turnstile verification bypassed ({token})")
            return

        try:
            is_valid = self.turnstile.verify_token(token, user_ip)
        except TurnstileVerificationError as e:
            logger.error(f"Turnstile verification could not complete: {e}")
            raise ChallengeVerificationError(CHALLENGE_FAILED_MESSAGE) from e

        if not is_valid:
            raise ChallengeVerificationError(CHALLENGE_FAILED_MESSAGE)

    def notify_owner(self, payload: SubmissionPayload) -> bool:
        """Email the owner. Returns whether any provider delivered it."""
        message = compose_owner_notification(payload, self.config)

        try:
            outcome = self.dispatcher.deliver(message)
        except DeliveryError as e:
            logger.error(f"Owner notification not sent: {e}")
            return False

        logger.info(f"Owner notification sent via {outcome.provider}")
        return True

    def send_confirmation(self, payload: SubmissionPayload) -> bool:
        """Email the submitter a receipt. Returns whether it was delivered."""
        message = compose_confirmation(payload, self.config)

        try:
            outcome = self.dispatcher.deliver(message)
        except DeliveryError as e:
            logger.warning(f"Confirmation email not sent to {payload.email}: {e}")
            return False

        logger.info(f"Confirmation email sent to {payload.email} via {outcome.provider}")
        return True

    def record_inquiry(self, payload: SubmissionPayload, confirmation_sent: bool):
        """Keep an undelivered inquiry visible in the logs."""
        inquiry_logger.info(
            "New domain inquiry (owner notification not delivered): %s",
            {
                'domain': self.config.domain_name,
                'name': payload.name,
                'email': payload.email,
                'phone': payload.phone,
                'offer': payload.offer,
                'message': payload.message,
                'locale': payload.locale,
                'confirmation_sent': confirmation_sent,
            }
        )

    def relay(self, payload: SubmissionPayload, user_ip=None) -> RelayResult:
        """
        Validate, verify and deliver one offer.

        Raises:
            SubmissionValidationError: Required field or token missing
            ChallengeVerificationError: Token rejected
        """
        self.validate(payload)
        self.verify_challenge(payload.challenge_token, user_ip)

        owner_notified = self.notify_owner(payload)
        confirmation_sent = self.send_confirmation(payload)

        if not owner_notified:
            self.record_inquiry(payload, confirmation_sent)

        return RelayResult(
            owner_notified=owner_notified,
            confirmation_sent=confirmation_sent,
        )
