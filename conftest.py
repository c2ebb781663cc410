"""
Shared pytest fixtures.
"""
from unittest.mock import Mock

import pytest
from rest_framework.test import APIClient

from core.site_config import reset_site_config


@pytest.fixture(autouse=True)
def site_settings(settings):
    """Known listing values and no external services unless a test opts in."""
    settings.DOMAIN_NAME = 'example.com'
    settings.DOMAIN_PRICE = '10000'
    settings.DOMAIN_CURRENCY = 'EUR'
    settings.PAYMENT_OPTIONS = 'Bank Transfer, PayPal'
    settings.CONTACT_EMAIL_TO = 'owner@example.com'
    settings.TURNSTILE_SITE_KEY = ''
    settings.TURNSTILE_SECRET_KEY = ''
    settings.SENDGRID_API_KEY = ''
    settings.BREVO_API_KEY = ''
    settings.RESEND_API_KEY = ''
    settings.EMAIL_PROVIDER_TIMEOUT = 10
    return settings


@pytest.fixture(autouse=True)
def fresh_site_config():
    """Rebuild the cached site configuration around each test."""
    reset_site_config()
    yield
    reset_site_config()


@pytest.fixture
def api_client():
    """API client for making requests."""
    return APIClient()


@pytest.fixture
def make_response():
    """Factory for fake ``requests`` responses."""
    def _make(status_code=200, json_data=None, text=''):
        response = Mock()
        response.status_code = status_code
        response.ok = 200 <= status_code < 400
        response.text = text
        response.json.return_value = json_data if json_data is not None else {}
        return response
    return _make
