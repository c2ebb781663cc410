"""
Tests for the public listing endpoint and sitemap.
"""
from decimal import Decimal

import pytest
from rest_framework import status

from listing.pricing import format_price


class TestFormatPrice:

    @pytest.mark.parametrize('amount, currency, locale, expected', [
        (Decimal('10000'), 'EUR', 'de', '€10.000'),
        (Decimal('10000'), 'EUR', 'en', '€10,000'),
        (Decimal('1500000'), 'USD', 'en', '$1,500,000'),
        (Decimal('999'), 'GBP', 'de', '$999'),
        (Decimal('1000.6'), 'USD', 'en', '$1,001'),
    ])
    def test_format(self, amount, currency, locale, expected):
        assert format_price(amount, currency, locale) == expected


class TestListingView:

    def test_listing_in_english(self, api_client):
        response = api_client.get('/api/listing')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['domainName'] == 'example.com'
        assert response.data['askingPrice'] == '€10,000'
        assert response.data['currency'] == 'EUR'
        assert response.data['paymentOptions'] == ['Bank Transfer', 'PayPal']
        assert response.data['locale'] == 'en'
        assert response.data['locales'] == [
            {'code': 'en', 'label': 'English'},
            {'code': 'de', 'label': 'Deutsch'},
        ]

    def test_listing_in_german(self, api_client):
        response = api_client.get('/api/listing', {'locale': 'de'})

        assert response.data['askingPrice'] == '€10.000'
        assert response.data['locale'] == 'de'

    def test_unknown_locale_falls_back(self, api_client):
        response = api_client.get('/api/listing', {'locale': 'fr'})

        assert response.data['locale'] == 'en'

    def test_exposes_site_key_not_secret(self, api_client, settings):
        settings.TURNSTILE_SITE_KEY = 'public-site-key'
        settings.TURNSTILE_SECRET_KEY = 'server-secret'

        response = api_client.get('/api/listing')

        assert response.data['turnstileSiteKey'] == 'public-site-key'
        assert response.data['challengeEnabled'] is True
        assert 'server-secret' not in response.content.decode()

    def test_challenge_disabled_without_site_key(self, api_client):
        response = api_client.get('/api/listing')

        assert response.data['challengeEnabled'] is False


class TestSitemap:

    def test_sitemap_lists_localized_pages(self, client):
        response = client.get('/sitemap.xml')

        assert response.status_code == 200
        body = response.content.decode()
        assert '<loc>https://example.com/en</loc>' in body
        assert '<loc>https://example.com/de</loc>' in body
        assert '<changefreq>weekly</changefreq>' in body
