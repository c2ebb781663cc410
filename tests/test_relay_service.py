"""
Tests for the offer relay service, independent of HTTP.
"""
from unittest.mock import Mock

import pytest

from contact.email_providers import DeliveryOutcome, ProviderAttemptResult
from contact.exceptions import (
    ChallengeVerificationError,
    DeliveryError,
    SubmissionValidationError,
)
from contact.services import ContactRelayService, SubmissionPayload
from core.site_config import SiteConfig
from core.turnstile_service import TurnstileVerificationError


@pytest.fixture
def config():
    return SiteConfig(
        domain_name='example.com',
        asking_price='10000',
        currency='EUR',
        payment_options=('Bank Transfer',),
        contact_email='owner@example.com',
        turnstile_secret_key='secret',
    )


@pytest.fixture
def turnstile():
    turnstile = Mock()
    turnstile.verify_token.return_value = True
    return turnstile


@pytest.fixture
def dispatcher():
    dispatcher = Mock()
    dispatcher.deliver.return_value = DeliveryOutcome(
        attempts=[ProviderAttemptResult(success=True, provider='brevo')]
    )
    return dispatcher


@pytest.fixture
def service(config, turnstile, dispatcher):
    return ContactRelayService(config, turnstile=turnstile, dispatcher=dispatcher)


@pytest.fixture
def payload():
    return SubmissionPayload(
        name='Jane',
        email='jane@x.com',
        offer='$5000',
        locale='de',
        challenge_token='widget-token',
    )


def test_relay_delivers_owner_then_confirmation(service, payload, dispatcher, turnstile):
    result = service.relay(payload, user_ip='203.0.113.7')

    assert result.owner_notified is True
    assert result.confirmation_sent is True
    turnstile.verify_token.assert_called_once_with('widget-token', '203.0.113.7')
    owner_message, confirmation = [call.args[0] for call in dispatcher.deliver.call_args_list]
    assert owner_message.to_email == 'owner@example.com'
    assert confirmation.to_email == 'jane@x.com'


def test_missing_token_is_validation_error(service, payload, turnstile):
    payload.challenge_token = None

    with pytest.raises(SubmissionValidationError) as exc_info:
        service.relay(payload)

    assert exc_info.value.message == 'Please complete the spam protection challenge'
    turnstile.verify_token.assert_not_called()


def test_rejected_token_stops_before_delivery(service, payload, turnstile, dispatcher):
    turnstile.verify_token.return_value = False

    with pytest.raises(ChallengeVerificationError):
        service.relay(payload)

    dispatcher.deliver.assert_not_called()


def test_verification_client_error_is_challenge_error(service, payload, turnstile):
    turnstile.verify_token.side_effect = TurnstileVerificationError('boom')

    with pytest.raises(ChallengeVerificationError):
        service.relay(payload)


def test_confirmation_failure_does_not_affect_owner(service, payload, dispatcher):
    owner_outcome = DeliveryOutcome(attempts=[ProviderAttemptResult(success=True, provider='sendgrid')])
    dispatcher.deliver.side_effect = [owner_outcome, DeliveryError('All 1 email providers failed')]

    result = service.relay(payload)

    assert result.owner_notified is True
    assert result.confirmation_sent is False


def test_owner_failure_records_inquiry(service, payload, dispatcher):
    dispatcher.deliver.side_effect = [
        DeliveryError('No email provider configured'),
        DeliveryOutcome(attempts=[ProviderAttemptResult(success=True, provider='brevo')]),
    ]
    service.record_inquiry = Mock()

    result = service.relay(payload)

    assert result.owner_notified is False
    assert result.confirmation_sent is True
    service.record_inquiry.assert_called_once_with(payload, True)
