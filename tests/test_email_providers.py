"""
Tests for the email provider clients and the fallback dispatcher.
"""
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from unittest.mock import Mock, patch

import pytest
import requests

from contact.email_providers import (
    BrevoProvider,
    EmailDispatcher,
    OutgoingEmail,
    ProviderAttemptResult,
    ResendProvider,
    SendGridProvider,
    build_providers,
)
from contact.exceptions import DeliveryError
from core.site_config import ProviderCredentials, SiteConfig


@pytest.fixture
def credentials():
    return ProviderCredentials(
        api_key='key-123',
        sender_email='sales@example.com',
        sender_name='Domain Sales',
    )


@pytest.fixture
def message():
    return OutgoingEmail(
        to_email='owner@example.com',
        subject='New Offer for example.com',
        text_content='Offer: $5000',
        html_content='Offer: $5000',
        reply_to_email='jane@example.com',
        reply_to_name='Jane',
    )


def site_config(**providers):
    return SiteConfig(
        domain_name='example.com',
        asking_price='1000',
        currency='USD',
        payment_options=('PayPal',),
        contact_email='owner@example.com',
        email_timeout=7,
        **providers
    )


SLOW_BODY = b'{"id":1}'


class SlowResponseHandler(BaseHTTPRequestHandler):
    """Answers at once but streams the body one byte every half second."""

    def do_POST(self):
        self.rfile.read(int(self.headers.get('Content-Length', 0)))
        self.send_response(201)
        self.send_header('Content-Type', 'application/json')
        self.send_header('Content-Length', str(len(SLOW_BODY)))
        self.end_headers()
        try:
            for byte in SLOW_BODY:
                self.wfile.write(bytes([byte]))
                self.wfile.flush()
                time.sleep(0.5)
        except OSError:
            pass

    def log_message(self, format, *args):
        pass


@pytest.fixture
def slow_server():
    server = ThreadingHTTPServer(('127.0.0.1', 0), SlowResponseHandler)
    server.daemon_threads = True
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f'http://127.0.0.1:{server.server_port}/'
    server.shutdown()
    server.server_close()


def stub_provider(name, success):
    provider = Mock()
    provider.send.return_value = ProviderAttemptResult(
        success=success,
        provider=name,
        error=None if success else 'HTTP 500',
    )
    return provider


class TestProviderRequests:

    @patch('contact.email_providers.requests.post')
    def test_brevo_request(self, mock_post, credentials, message, make_response):
        mock_post.return_value = make_response(201)

        result = BrevoProvider(credentials, timeout=7).send(message)

        assert result.success is True
        assert result.provider == 'brevo'
        url = mock_post.call_args.args[0]
        kwargs = mock_post.call_args.kwargs
        assert url == 'https://api.brevo.com/v3/smtp/email'
        assert kwargs['headers']['api-key'] == 'key-123'
        assert kwargs['timeout'] == 7
        assert kwargs['json']['sender'] == {'name': 'Domain Sales', 'email': 'sales@example.com'}
        assert kwargs['json']['replyTo'] == {'email': 'jane@example.com', 'name': 'Jane'}

    @patch('contact.email_providers.requests.post')
    def test_sendgrid_request(self, mock_post, credentials, message, make_response):
        mock_post.return_value = make_response(202)

        result = SendGridProvider(credentials).send(message)

        assert result.success is True
        kwargs = mock_post.call_args.kwargs
        assert kwargs['headers']['Authorization'] == 'Bearer key-123'
        assert kwargs['json']['personalizations'] == [{'to': [{'email': 'owner@example.com'}]}]
        assert kwargs['json']['content'][0] == {'type': 'text/plain', 'value': 'Offer: $5000'}
        assert kwargs['json']['reply_to'] == {'email': 'jane@example.com', 'name': 'Jane'}

    @patch('contact.email_providers.requests.post')
    def test_resend_request(self, mock_post, credentials, message, make_response):
        mock_post.return_value = make_response(200, {'id': 'abc'})

        ResendProvider(credentials).send(message)

        kwargs = mock_post.call_args.kwargs
        assert kwargs['json']['from'] == 'Domain Sales <sales@example.com>'
        assert kwargs['json']['to'] == ['owner@example.com']
        assert kwargs['json']['reply_to'] == 'jane@example.com'

    @patch('contact.email_providers.requests.post')
    def test_error_status_is_a_failed_attempt(self, mock_post, credentials, message, make_response):
        mock_post.return_value = make_response(401, text='unauthorized')

        result = BrevoProvider(credentials).send(message)

        assert result.success is False
        assert result.status_code == 401
        assert result.error == 'HTTP 401'

    @patch('contact.email_providers.requests.post')
    def test_timeout_is_a_failed_attempt(self, mock_post, credentials, message):
        mock_post.side_effect = requests.exceptions.Timeout()

        result = SendGridProvider(credentials).send(message)

        assert result.success is False
        assert result.error == 'Request timeout'

    def test_slow_response_is_abandoned_at_deadline(self, credentials, message, slow_server):
        provider = BrevoProvider(credentials, timeout=1)
        provider.api_url = slow_server

        started = time.monotonic()
        result = provider.send(message)
        elapsed = time.monotonic() - started

        assert result.success is False
        assert result.error == 'Request timeout'
        assert elapsed < 2.5

    @patch('contact.email_providers.requests.post')
    def test_unexpected_error_is_a_failed_attempt(self, mock_post, credentials, message):
        mock_post.side_effect = RuntimeError('boom')

        result = ResendProvider(credentials).send(message)

        assert result.success is False
        assert 'boom' in result.error


class TestBuildProviders:

    def test_priority_order_is_fixed(self, credentials):
        config = site_config(resend=credentials, brevo=credentials, sendgrid=credentials)

        providers = build_providers(config)

        assert [provider.name for provider in providers] == ['sendgrid', 'brevo', 'resend']
        assert all(provider.timeout == 7 for provider in providers)

    def test_only_configured_providers(self, credentials):
        providers = build_providers(site_config(resend=credentials))

        assert [provider.name for provider in providers] == ['resend']

    def test_nothing_configured(self):
        assert build_providers(site_config()) == []


class TestEmailDispatcher:

    def test_first_success_short_circuits(self, message):
        first = stub_provider('sendgrid', False)
        second = stub_provider('brevo', True)
        third = stub_provider('resend', True)

        outcome = EmailDispatcher([first, second, third]).deliver(message)

        assert outcome.sent is True
        assert outcome.provider == 'brevo'
        assert [attempt.provider for attempt in outcome.attempts] == ['sendgrid', 'brevo']
        third.send.assert_not_called()

    def test_all_failed_raises_with_attempts(self, message):
        providers = [stub_provider('sendgrid', False), stub_provider('brevo', False)]

        with pytest.raises(DeliveryError) as exc_info:
            EmailDispatcher(providers).deliver(message)

        assert len(exc_info.value.outcome.attempts) == 2
        assert exc_info.value.outcome.sent is False

    def test_no_providers_raises(self, message):
        with pytest.raises(DeliveryError) as exc_info:
            EmailDispatcher([]).deliver(message)

        assert exc_info.value.outcome.attempts == []
        assert exc_info.value.message == 'No email provider configured'
