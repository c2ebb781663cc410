"""
Tests for the offer submission endpoint.
"""
from unittest.mock import patch

import pytest
import requests
from rest_framework import status

from contact.serializers import ContactSubmissionSerializer
from core.turnstile_service import TurnstileService

CONTACT_URL = '/api/contact'
TURNSTILE_URL = TurnstileService.VERIFY_URL
SENDGRID_URL = 'https://api.sendgrid.com/v3/mail/send'
BREVO_URL = 'https://api.brevo.com/v3/smtp/email'
RESEND_URL = 'https://api.resend.com/emails'


@pytest.fixture
def valid_offer():
    return {
        'name': 'Jane Doe',
        'email': 'jane@example.com',
        'phone': '+49 30 1234567',
        'offer': '$5000',
        'message': 'Is the price negotiable?',
        'locale': 'en',
        'challengeToken': 'bypassed',
    }


@pytest.fixture
def brevo_configured(settings):
    settings.BREVO_API_KEY = 'brevo-key'
    settings.BREVO_SENDER_EMAIL = 'sales@example.com'
    settings.BREVO_SENDER_NAME = 'Domain Sales'
    return settings


@pytest.fixture
def all_providers_configured(brevo_configured):
    brevo_configured.SENDGRID_API_KEY = 'sendgrid-key'
    brevo_configured.RESEND_API_KEY = 'resend-key'
    return brevo_configured


@pytest.fixture
def mock_http(make_response):
    """
    Patch requests.post with a URL router.

    Each URL maps to a response or an exception; unmapped URLs answer 200.
    """
    routes = {}

    def fake_post(url, *args, **kwargs):
        outcome = routes.get(url, make_response(200, {'success': True}))
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    with patch('requests.post', side_effect=fake_post) as mock_post:
        mock_post.routes = routes
        yield mock_post


def called_urls(mock_post):
    return [call.args[0] for call in mock_post.call_args_list]


def sent_payloads(mock_post, url):
    return [call.kwargs['json'] for call in mock_post.call_args_list if call.args[0] == url]


class TestSubmissionValidation:
    """Missing data is rejected before any outbound call."""

    @pytest.mark.parametrize('missing', ['name', 'email', 'offer'])
    def test_missing_required_field(self, api_client, valid_offer, brevo_configured, mock_http, missing):
        del valid_offer[missing]

        response = api_client.post(CONTACT_URL, valid_offer, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data == {'error': 'Name, email, and offer are required'}
        assert mock_http.call_count == 0

    @pytest.mark.parametrize('missing', ['name', 'email', 'offer'])
    def test_blank_required_field(self, api_client, valid_offer, mock_http, missing):
        valid_offer[missing] = '   '

        response = api_client.post(CONTACT_URL, valid_offer, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert mock_http.call_count == 0

    def test_missing_challenge_token(self, api_client, valid_offer, brevo_configured, mock_http):
        brevo_configured.TURNSTILE_SECRET_KEY = 'secret'
        del valid_offer['challengeToken']

        response = api_client.post(CONTACT_URL, valid_offer, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data == {'error': 'Please complete the spam protection challenge'}
        assert mock_http.call_count == 0

    def test_required_fields_reported_before_token(self, api_client, mock_http):
        response = api_client.post(CONTACT_URL, {'name': 'Jane'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'Name, email, and offer are required'

    def test_email_format_not_enforced(self, api_client, valid_offer, mock_http):
        valid_offer['email'] = 'not-an-email'

        response = api_client.post(CONTACT_URL, valid_offer, format='json')

        assert response.status_code == status.HTTP_200_OK

    def test_malformed_json_is_internal_error(self, api_client, mock_http):
        response = api_client.post(
            CONTACT_URL,
            data='{"name": "Jane",',
            content_type='application/json'
        )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.data == {'error': 'Internal server error'}

    def test_empty_body_is_internal_error(self, api_client, mock_http):
        response = api_client.post(CONTACT_URL, data='', content_type='application/json')

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.data == {'error': 'Internal server error'}

    def test_non_string_required_field(self, api_client, valid_offer, mock_http):
        valid_offer['offer'] = True

        response = api_client.post(CONTACT_URL, valid_offer, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data == {'error': 'Name, email, and offer are required'}

    def test_unusable_token_fails_verification(self, api_client, valid_offer, mock_http):
        valid_offer['challengeToken'] = {'token': 'abc'}

        response = api_client.post(CONTACT_URL, valid_offer, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data == {'error': 'Spam protection verification failed'}
        assert mock_http.call_count == 0


class TestSubmissionSerializer:

    def test_strings_are_trimmed_and_sanitized(self, valid_offer):
        valid_offer['name'] = ' <b>Jane</b> '
        valid_offer['message'] = '  Hello,\nis the price negotiable?  '
        del valid_offer['locale']

        serializer = ContactSubmissionSerializer(data=valid_offer)

        assert serializer.is_valid(), serializer.errors
        payload = serializer.to_payload()
        assert payload.name == 'Jane'
        assert payload.message == 'Hello,\nis the price negotiable?'
        assert payload.locale == 'en'
        assert payload.challenge_token == 'bypassed'


class TestChallengeVerification:

    @pytest.mark.parametrize('token', ['bypassed', 'localhost-bypass'])
    def test_bypass_tokens_skip_verification_and_deliver(self, api_client, valid_offer, brevo_configured, mock_http, make_response, token):
        brevo_configured.TURNSTILE_SECRET_KEY = 'secret'
        mock_http.routes[BREVO_URL] = make_response(201)
        valid_offer['challengeToken'] = token

        response = api_client.post(CONTACT_URL, valid_offer, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {'success': True, 'confirmationSent': True}
        assert called_urls(mock_http) == [BREVO_URL, BREVO_URL]

    def test_no_secret_accepts_any_token(self, api_client, valid_offer, mock_http):
        valid_offer['challengeToken'] = 'real-widget-token'

        response = api_client.post(CONTACT_URL, valid_offer, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert TURNSTILE_URL not in called_urls(mock_http)

    def test_rejected_token_blocks_delivery(self, api_client, valid_offer, brevo_configured, mock_http, make_response):
        brevo_configured.TURNSTILE_SECRET_KEY = 'secret'
        mock_http.routes[TURNSTILE_URL] = make_response(
            200, {'success': False, 'error-codes': ['invalid-input-response']}
        )
        valid_offer['challengeToken'] = 'forged-token'

        response = api_client.post(CONTACT_URL, valid_offer, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data == {'error': 'Spam protection verification failed'}
        assert called_urls(mock_http) == [TURNSTILE_URL]

    def test_verification_network_failure_rejects(self, api_client, valid_offer, brevo_configured, mock_http):
        brevo_configured.TURNSTILE_SECRET_KEY = 'secret'
        mock_http.routes[TURNSTILE_URL] = requests.exceptions.ConnectionError('down')
        valid_offer['challengeToken'] = 'widget-token'

        response = api_client.post(CONTACT_URL, valid_offer, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert BREVO_URL not in called_urls(mock_http)

    def test_valid_token_then_delivery(self, api_client, valid_offer, brevo_configured, mock_http, make_response):
        brevo_configured.TURNSTILE_SECRET_KEY = 'secret'
        mock_http.routes[TURNSTILE_URL] = make_response(200, {'success': True})
        mock_http.routes[BREVO_URL] = make_response(201, {'messageId': 'abc'})
        valid_offer['challengeToken'] = 'widget-token'

        response = api_client.post(
            CONTACT_URL, valid_offer, format='json',
            HTTP_X_FORWARDED_FOR='203.0.113.7, 10.0.0.1'
        )

        assert response.status_code == status.HTTP_200_OK
        assert called_urls(mock_http) == [TURNSTILE_URL, BREVO_URL, BREVO_URL]
        verify_call = mock_http.call_args_list[0]
        assert verify_call.kwargs['data'] == {
            'secret': 'secret',
            'response': 'widget-token',
            'remoteip': '203.0.113.7',
        }


class TestDelivery:

    def test_no_providers_still_succeeds(self, api_client, mock_http):
        response = api_client.post(CONTACT_URL, {
            'name': 'Jane',
            'email': 'jane@x.com',
            'offer': '$5000',
            'locale': 'de',
            'challengeToken': 'bypassed',
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {'success': True, 'confirmationSent': False}
        assert mock_http.call_count == 0

    def test_no_providers_records_inquiry(self, api_client, valid_offer, mock_http):
        with patch('contact.services.inquiry_logger') as inquiry_logger:
            api_client.post(CONTACT_URL, valid_offer, format='json')

        inquiry_logger.info.assert_called_once()
        recorded = inquiry_logger.info.call_args.args[1]
        assert recorded['offer'] == '$5000'
        assert recorded['domain'] == 'example.com'

    def test_successful_delivery_reports_confirmation(self, api_client, valid_offer, brevo_configured, mock_http, make_response):
        mock_http.routes[BREVO_URL] = make_response(201, {'messageId': 'abc'})

        with patch('contact.services.inquiry_logger') as inquiry_logger:
            response = api_client.post(CONTACT_URL, valid_offer, format='json')

        assert response.data == {'success': True, 'confirmationSent': True}
        inquiry_logger.info.assert_not_called()

        owner, confirmation = sent_payloads(mock_http, BREVO_URL)
        assert owner['to'] == [{'email': 'owner@example.com'}]
        assert owner['replyTo'] == {'email': 'jane@example.com', 'name': 'Jane Doe'}
        assert confirmation['to'] == [{'email': 'jane@example.com', 'name': 'Jane Doe'}]

    def test_all_providers_failing_is_not_an_error(self, api_client, valid_offer, all_providers_configured, mock_http, make_response):
        mock_http.routes[SENDGRID_URL] = make_response(500, text='error')
        mock_http.routes[BREVO_URL] = requests.exceptions.Timeout()
        mock_http.routes[RESEND_URL] = make_response(422, text='invalid')

        response = api_client.post(CONTACT_URL, valid_offer, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {'success': True, 'confirmationSent': False}
        # owner notification and confirmation each walk the whole chain
        assert called_urls(mock_http) == [SENDGRID_URL, BREVO_URL, RESEND_URL] * 2

    def test_fallback_stops_at_first_success(self, api_client, valid_offer, all_providers_configured, mock_http, make_response):
        mock_http.routes[SENDGRID_URL] = make_response(503, text='unavailable')
        mock_http.routes[BREVO_URL] = make_response(201, {'messageId': 'abc'})

        response = api_client.post(CONTACT_URL, valid_offer, format='json')

        assert response.data['confirmationSent'] is True
        assert RESEND_URL not in called_urls(mock_http)
        assert called_urls(mock_http) == [SENDGRID_URL, BREVO_URL, SENDGRID_URL, BREVO_URL]

    def test_german_locale_uses_german_templates(self, api_client, valid_offer, brevo_configured, mock_http, make_response):
        mock_http.routes[BREVO_URL] = make_response(201)
        valid_offer['locale'] = 'de'

        api_client.post(CONTACT_URL, valid_offer, format='json')

        owner, confirmation = sent_payloads(mock_http, BREVO_URL)
        assert owner['subject'] == 'Neues Angebot für example.com'
        assert 'Angebot: $5000' in owner['textContent']
        assert confirmation['subject'] == 'Bestätigung: Ihr Angebot für example.com wurde erhalten'

    @pytest.mark.parametrize('locale', ['en', 'fr', 'de-DE', 'DE'])
    def test_other_locales_use_english_templates(self, api_client, valid_offer, brevo_configured, mock_http, make_response, locale):
        mock_http.routes[BREVO_URL] = make_response(201)
        valid_offer['locale'] = locale

        api_client.post(CONTACT_URL, valid_offer, format='json')

        owner, confirmation = sent_payloads(mock_http, BREVO_URL)
        assert owner['subject'] == 'New Offer for example.com'
        assert confirmation['subject'] == 'Confirmation: Your offer for example.com has been received'

    def test_missing_locale_defaults_to_english(self, api_client, valid_offer, brevo_configured, mock_http, make_response):
        mock_http.routes[BREVO_URL] = make_response(201)
        del valid_offer['locale']
        del valid_offer['phone']

        api_client.post(CONTACT_URL, valid_offer, format='json')

        owner, _ = sent_payloads(mock_http, BREVO_URL)
        assert owner['subject'] == 'New Offer for example.com'
        assert 'Phone: Not provided' in owner['textContent']

    def test_html_body_escapes_user_input(self, api_client, valid_offer, brevo_configured, mock_http, make_response):
        mock_http.routes[BREVO_URL] = make_response(201)
        valid_offer['message'] = '<script>alert(1)</script>'

        api_client.post(CONTACT_URL, valid_offer, format='json')

        owner, _ = sent_payloads(mock_http, BREVO_URL)
        assert '<script>' not in owner['htmlContent']
        assert '&lt;script&gt;' in owner['htmlContent']
        assert '<br>' in owner['htmlContent']

    def test_unexpected_error_returns_500(self, api_client, valid_offer, mock_http):
        with patch('contact.services.ContactRelayService.notify_owner', side_effect=RuntimeError('boom')):
            response = api_client.post(CONTACT_URL, valid_offer, format='json')

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.data == {'error': 'Internal server error'}

    def test_trailing_slash_route(self, api_client, valid_offer, mock_http):
        response = api_client.post(CONTACT_URL + '/', valid_offer, format='json')

        assert response.status_code == status.HTTP_200_OK
