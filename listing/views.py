"""
Listing Views

Public, read-only data for rendering the domain sale page.
"""
from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import AllowAny

from core.locales import LOCALES, LOCALE_LABELS, resolve_locale
from core.site_config import get_site_config
from .pricing import format_price


class ListingView(APIView):
    """
    Domain listing details.

    GET /api/listing?locale=de

    Returns the domain name, the asking price formatted for the locale,
    payment options and the Turnstile site key for the offer form.
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request):
        config = get_site_config()
        locale = resolve_locale(request.query_params.get('locale'))

        return Response(
            {
                'domainName': config.domain_name,
                'askingPrice': format_price(config.asking_price_amount, config.currency, locale),
                'currency': config.currency,
                'paymentOptions': list(config.payment_options),
                'companyName': config.company_name,
                'turnstileSiteKey': config.turnstile_site_key,
                'challengeEnabled': config.challenge_enabled,
                'locale': locale,
                'locales': [
                    {'code': code, 'label': LOCALE_LABELS[code]}
                    for code in LOCALES
                ],
            },
            status=status.HTTP_200_OK
        )
