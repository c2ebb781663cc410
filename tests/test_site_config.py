"""
Tests for building the site configuration from settings.
"""
from decimal import Decimal
from types import SimpleNamespace

from core.locales import resolve_locale
from core.site_config import SiteConfig, get_site_config


def test_from_settings_object():
    source = SimpleNamespace(
        DOMAIN_NAME='offers.example',
        DOMAIN_PRICE='25,000',
        DOMAIN_CURRENCY='USD',
        PAYMENT_OPTIONS=' Escrow.com ,PayPal,, ',
        CONTACT_EMAIL_TO='owner@offers.example',
        TURNSTILE_SITE_KEY='site',
        TURNSTILE_SECRET_KEY='secret',
        SENDGRID_API_KEY='',
        BREVO_API_KEY='brevo-key',
        BREVO_SENDER_EMAIL='',
        BREVO_SENDER_NAME='Offers',
        RESEND_API_KEY='',
        EMAIL_PROVIDER_TIMEOUT=5,
    )

    config = SiteConfig.from_settings(source)

    assert config.domain_name == 'offers.example'
    assert config.payment_options == ('Escrow.com', 'PayPal')
    assert config.asking_price_amount == Decimal('25000')
    assert config.challenge_enabled is True
    assert config.sendgrid is None
    assert config.resend is None
    assert config.brevo.api_key == 'brevo-key'
    assert config.brevo.sender_email == 'noreply@yourdomain.com'
    assert config.brevo.sender_name == 'Offers'
    assert config.email_timeout == 5


def test_non_numeric_price():
    config = SiteConfig.from_settings(SimpleNamespace(DOMAIN_PRICE='make an offer'))

    assert config.asking_price_amount == Decimal('0')


def test_singleton_reads_django_settings(settings):
    settings.DOMAIN_NAME = 'cached.example'

    config = get_site_config()

    assert config.domain_name == 'cached.example'
    assert get_site_config() is config


def test_resolve_locale():
    assert resolve_locale('de') == 'de'
    assert resolve_locale('de-DE') == 'de'
    assert resolve_locale('EN_us') == 'en'
    assert resolve_locale('fr') == 'en'
    assert resolve_locale(None) == 'en'
