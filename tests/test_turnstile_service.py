"""
Tests for Cloudflare Turnstile token verification.
"""
from unittest.mock import patch

import pytest
import requests

from core.turnstile_service import (
    TurnstileService,
    TurnstileVerificationError,
    is_bypass_token,
)


@pytest.fixture
def service():
    return TurnstileService(secret_key='secret-key', timeout=5)


def test_bypass_sentinels():
    assert is_bypass_token('bypassed')
    assert is_bypass_token('localhost-bypass')
    assert not is_bypass_token('real-token')
    assert not is_bypass_token(None)


@patch('core.turnstile_service.requests.post')
def test_no_secret_accepts_token(mock_post):
    assert TurnstileService(secret_key='').verify_token('anything') is True
    mock_post.assert_not_called()


@patch('core.turnstile_service.requests.post')
def test_success_field_is_trusted(mock_post, service, make_response):
    mock_post.return_value = make_response(200, {'success': True})

    assert service.verify_token('token', user_ip='198.51.100.4') is True
    mock_post.assert_called_once_with(
        TurnstileService.VERIFY_URL,
        data={'secret': 'secret-key', 'response': 'token', 'remoteip': '198.51.100.4'},
        timeout=5
    )


@patch('core.turnstile_service.requests.post')
def test_rejected_token(mock_post, service, make_response):
    mock_post.return_value = make_response(
        200, {'success': False, 'error-codes': ['timeout-or-duplicate']}
    )

    assert service.verify_token('token') is False
    assert 'remoteip' not in mock_post.call_args.kwargs['data']


@patch('core.turnstile_service.requests.post')
def test_empty_token_rejected_without_request(mock_post, service):
    assert service.verify_token('') is False
    mock_post.assert_not_called()


@patch('core.turnstile_service.requests.post')
def test_api_error_status_fails_closed(mock_post, service, make_response):
    mock_post.return_value = make_response(503, text='unavailable')

    assert service.verify_token('token') is False


@pytest.mark.parametrize('error', [
    requests.exceptions.Timeout(),
    requests.exceptions.ConnectionError('refused'),
])
@patch('core.turnstile_service.requests.post')
def test_transport_failure_fails_closed(mock_post, service, error):
    mock_post.side_effect = error

    assert service.verify_token('token') is False


@patch('core.turnstile_service.requests.post')
def test_unexpected_error_raises(mock_post, service):
    mock_post.side_effect = RuntimeError('boom')

    with pytest.raises(TurnstileVerificationError):
        service.verify_token('token')


def test_error_messages(service):
    message = service.get_error_message(['invalid-input-response', 'mystery'])

    assert message == 'CAPTCHA verification failed. Please try again.; Unknown error: mystery'
